"""
Job and Pod records parsed from `kubectl get ... -o json`, plus the
result types the evaluator and correlator hand to the cascade executor.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Optional

from .config import JOB_NAME_LABEL, TERMINAL_PHASES

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """
    Parse a Kubernetes RFC 3339 timestamp (e.g. "2024-05-01T12:00:00Z").

    Returns None for a missing or empty value. Naive results are taken as UTC.
    """
    if not value:
        return None
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    ts = datetime.fromisoformat(value)
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


@dataclass(frozen=True)
class Job:
    name: str
    namespace: str
    active: int = 0
    completion_time: Optional[datetime] = None

    @classmethod
    def from_json(cls, item: dict) -> "Job":
        meta = item.get("metadata", {})
        status = item.get("status", {}) or {}
        return cls(
            name=meta.get("name", ""),
            namespace=meta.get("namespace", "") or "",
            active=status.get("active") or 0,
            completion_time=parse_timestamp(status.get("completionTime")),
        )

    @property
    def is_terminal(self) -> bool:
        """No pods of this Job are running (status.active is zero or unset)."""
        return not self.active

    def age_days(self, now: datetime) -> int:
        """
        Whole days since completion, floor(hours / 24).

        A Job without a completion time (e.g. one that failed) is aged from
        the Unix epoch, so it is always old enough to collect.
        """
        completed = self.completion_time or EPOCH
        hours = (now - completed).total_seconds() / 3600
        return math.floor(hours / 24)


@dataclass(frozen=True)
class Pod:
    name: str
    namespace: str
    phase: str = "Unknown"
    job_name: Optional[str] = None

    @classmethod
    def from_json(cls, item: dict) -> "Pod":
        meta = item.get("metadata", {})
        labels = meta.get("labels") or {}
        return cls(
            name=meta.get("name", ""),
            namespace=meta.get("namespace", "") or "",
            phase=(item.get("status") or {}).get("phase") or "Unknown",
            job_name=labels.get(JOB_NAME_LABEL) or None,
        )

    @property
    def is_terminal(self) -> bool:
        return self.phase in TERMINAL_PHASES


def partition_pods(pods) -> tuple[tuple[Pod, ...], tuple[Pod, ...]]:
    """Split pods into (terminal, non-terminal), keeping their order."""
    terminal = tuple(p for p in pods if p.is_terminal)
    in_flight = tuple(p for p in pods if not p.is_terminal)
    return terminal, in_flight


@dataclass(frozen=True)
class EligibilityResult:
    """An eligible Job, its age, and (once discovered) its pods split by phase."""

    job: Job
    age: int
    candidates: tuple[Pod, ...] = field(default=())
    skipped: tuple[Pod, ...] = field(default=())

    def with_pods(self, pods) -> "EligibilityResult":
        candidates, skipped = partition_pods(pods)
        return replace(self, candidates=candidates, skipped=skipped)


@dataclass(frozen=True)
class OrphanGroup:
    """Pods labelled for a Job that no longer exists."""

    name: str
    namespace: str
    pods: tuple[Pod, ...] = ()

    @property
    def candidates(self) -> tuple[Pod, ...]:
        return partition_pods(self.pods)[0]

    @property
    def skipped(self) -> tuple[Pod, ...]:
        return partition_pods(self.pods)[1]
