"""
Outcome collection and text rendering.

The evaluator, correlator and executor record what they did (or would do)
into a Report; nothing in the core prints. render_report() turns the Report
into the text printed at the end of a run.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from .config import BOLD, SGR0
from .models import EligibilityResult, OrphanGroup

# Actions
DELETED = "deleted"
WOULD_DELETE = "would delete"
SKIPPED = "skipped"
FAILED = "failed"


@dataclass(frozen=True)
class Outcome:
    kind: str  # job|pod
    name: str
    namespace: str
    action: str
    detail: str = ""
    owner: Optional[str] = None  # job name the pod belongs to
    orphan: bool = False


@dataclass(frozen=True)
class Diagnostic:
    subject: str
    message: str


@dataclass
class Report:
    apply: bool = False
    orphan_mode: bool = False
    jobs: list[EligibilityResult] = field(default_factory=list)
    orphan_groups: list[OrphanGroup] = field(default_factory=list)
    outcomes: list[Outcome] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)

    def record(
        self,
        kind: str,
        name: str,
        namespace: str,
        action: str,
        detail: str = "",
        owner: Optional[str] = None,
        orphan: bool = False,
    ) -> Outcome:
        outcome = Outcome(kind, name, namespace, action, detail, owner, orphan)
        self.outcomes.append(outcome)
        return outcome

    def diagnose(self, subject: str, message: str) -> None:
        self.diagnostics.append(Diagnostic(subject, message))

    def outcomes_for(
        self, owner: str, namespace: str, orphan: bool = False
    ) -> list[Outcome]:
        """Outcomes for a Job (or orphan group) and its pods, in recorded order."""
        return [
            o
            for o in self.outcomes
            if o.namespace == namespace
            and o.orphan == orphan
            and (o.owner == owner or (o.kind == "job" and o.name == owner))
        ]

    def failed(self) -> list[Outcome]:
        return [o for o in self.outcomes if o.action == FAILED]

    @property
    def orphaned_pod_count(self) -> int:
        return sum(len(g.pods) for g in self.orphan_groups)


def _heading(text: str, color: bool) -> str:
    return f"{BOLD}{text}{SGR0}" if color else text


def _format_outcome(o: Outcome) -> str:
    line = f"    {o.kind}/{o.name}: {o.action}"
    if o.detail:
        line += f" ({o.detail})"
    return line


def render_report(report: Report, color: bool = True) -> str:
    """Render the whole run as printable text."""
    lines: list[str] = []
    mode = "apply" if report.apply else "simulate (pass -f to delete)"
    lines.append("")
    lines.append(_heading("Jobs eligible for deletion", color))
    lines.append("----------------------------------------")
    lines.append(f"  Mode: {mode}")
    if not report.jobs:
        lines.append("  (none found)")
    for result in report.jobs:
        job = result.job
        lines.append(f"  Name: {job.name}  Namespace: {job.namespace}  Age: {result.age}d")
        for o in report.outcomes_for(job.name, job.namespace):
            lines.append(_format_outcome(o))

    if report.orphan_mode:
        lines.append("")
        lines.append(_heading("Orphaned pods", color))
        lines.append("----------------------------------------")
        if not report.orphan_groups:
            lines.append("  (none found)")
        for group in report.orphan_groups:
            lines.append(f"  Job (missing): {group.name}  Namespace: {group.namespace}")
            for o in report.outcomes_for(group.name, group.namespace, orphan=True):
                lines.append(_format_outcome(o))

    if report.diagnostics:
        lines.append("")
        lines.append(_heading("Diagnostics", color))
        lines.append("----------------------------------------")
        for d in report.diagnostics:
            lines.append(f"  {d.subject}: {d.message}")

    lines.append("")
    lines.append(f"Total: {len(report.jobs)}")
    if report.orphan_mode:
        lines.append(
            f"Orphaned pods: {report.orphaned_pod_count} "
            f"(job names: {len(report.orphan_groups)})"
        )
    if report.apply:
        lines.append(f"Failed deletions: {len(report.failed())}")
    return "\n".join(lines)
