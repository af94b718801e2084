"""
One cleanup run: list, evaluate, cascade, and optionally reconcile orphans.

Provides run_cleanup(), which the CLI calls once per invocation. Listing
Jobs is the only step whose failure aborts the run.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from .cascade import CascadeExecutor
from .config import DEFAULT_DAYS
from .eligibility import eligible_jobs
from .kubectl import KubectlError
from .orphans import build_job_pod_group, find_orphans
from .report import Report


def run_cleanup(
    client,
    namespace: Optional[str] = None,
    threshold: int = DEFAULT_DAYS,
    apply: bool = False,
    orphans: bool = False,
    now: Optional[datetime] = None,
) -> Report:
    """
    Remove stale Jobs (and, with orphans=True, pods whose Job is gone).

    Args:
        client: A KubectlClient or anything with the same list/get/delete methods.
        namespace: Namespace to scan; None or "" scans all namespaces.
        threshold: Minimum age in days for a finished Job to be removed.
        apply: Actually delete; otherwise only report what would be deleted.
        orphans: Also look for pods labelled with a Job that no longer exists.
        now: Reference time for ages (defaults to now, UTC).

    Raises:
        KubectlError: Jobs could not be listed. Nothing has been deleted.
    """
    report = Report(apply=apply, orphan_mode=orphans)
    jobs = client.list_jobs(namespace or None)

    # Every job is evaluated before any cascade starts.
    results = eligible_jobs(jobs, now=now, threshold=threshold)
    executor = CascadeExecutor(client, report, apply=apply)
    for result in results:
        executor.run_job(result)

    if orphans:
        try:
            pods = client.list_pods(namespace or None)
        except KubectlError as e:
            report.diagnose("orphan scan", f"could not list pods: {e}")
            return report
        # Pods of jobs cascaded above were already handled once; never retry them here.
        handled = [(r.job.namespace, r.job.name) for r in results]
        group = build_job_pod_group(pods, exclude=handled)
        for orphan_group in find_orphans(client, group, report):
            executor.run_orphans(orphan_group)
    return report
