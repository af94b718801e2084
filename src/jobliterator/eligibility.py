"""
Age and status rules that decide which Jobs are stale.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable, Optional

from .config import DEFAULT_DAYS
from .models import EligibilityResult, Job


def evaluate_job(job: Job, now: datetime, threshold: int = DEFAULT_DAYS) -> Optional[EligibilityResult]:
    """
    Return an EligibilityResult if the Job is finished and old enough, else None.

    A Job with any active pods is never eligible, whatever its age.
    """
    if not job.is_terminal:
        return None
    age = job.age_days(now)
    if age < threshold:
        return None
    return EligibilityResult(job=job, age=age)


def eligible_jobs(
    jobs: Iterable[Job],
    now: Optional[datetime] = None,
    threshold: int = DEFAULT_DAYS,
) -> list[EligibilityResult]:
    """
    Filter jobs down to those eligible for deletion, keeping listing order.

    Args:
        jobs: Jobs as listed (already scoped to a namespace if one was given).
        now: Reference time; defaults to the current UTC time.
        threshold: Minimum age in whole days; a Job exactly this old qualifies.
    """
    if now is None:
        now = datetime.now(timezone.utc)
    results = []
    for job in jobs:
        result = evaluate_job(job, now, threshold)
        if result is not None:
            results.append(result)
    return results
