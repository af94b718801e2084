"""
Cascade deletion: a Job's terminal pods first, then the Job itself.

CascadeExecutor never prints and never raises for a single failed delete;
every action (taken, simulated, skipped or failed) lands in the Report.
In simulate mode it makes no mutating calls at all.
"""

from __future__ import annotations

from typing import Iterable

from .config import JOB_NAME_LABEL
from .kubectl import KubectlError
from .models import EligibilityResult, OrphanGroup, Pod
from .report import DELETED, FAILED, SKIPPED, WOULD_DELETE, Report


class CascadeExecutor:
    """
    Args:
        client: Object providing list_pods, delete_pod and delete_job
            (normally a KubectlClient).
        report: Collector for outcomes and diagnostics.
        apply: Issue deletes when True; only report when False.
    """

    def __init__(self, client, report: Report, apply: bool = False):
        self.client = client
        self.report = report
        self.apply = apply

    def _delete_pod(self, pod: Pod, owner: str, orphan: bool = False) -> None:
        if not self.apply:
            self.report.record("pod", pod.name, pod.namespace, WOULD_DELETE, pod.phase, owner, orphan)
            return
        try:
            self.client.delete_pod(pod.name, pod.namespace)
        except KubectlError as e:
            self.report.record("pod", pod.name, pod.namespace, FAILED, str(e), owner, orphan)
            return
        self.report.record("pod", pod.name, pod.namespace, DELETED, pod.phase, owner, orphan)

    def _skip_pod(self, pod: Pod, owner: str, orphan: bool = False) -> None:
        self.report.record(
            "pod", pod.name, pod.namespace, SKIPPED, f"{pod.phase}, not finished", owner, orphan
        )

    def run_job(self, result: EligibilityResult) -> EligibilityResult:
        """
        Remove one eligible Job and its finished pods.

        Pods are listed fresh so the decision reflects the cluster now, not
        the earlier scan. If that listing fails the Job is left alone.

        Returns:
            The result with its pods partitioned (unchanged if listing failed).
        """
        job = result.job
        try:
            pods = self.client.list_pods(job.namespace, label_filter=(JOB_NAME_LABEL, job.name))
        except KubectlError as e:
            self.report.jobs.append(result)
            self.report.diagnose(f"job/{job.name} (ns: {job.namespace})", f"could not list pods: {e}")
            return result

        result = result.with_pods(pods)
        self.report.jobs.append(result)
        for pod in result.candidates:
            self._delete_pod(pod, job.name)
        for pod in result.skipped:
            self._skip_pod(pod, job.name)

        # Pod failures do not block the job delete.
        if not self.apply:
            self.report.record("job", job.name, job.namespace, WOULD_DELETE, f"age {result.age}d")
            return result
        try:
            self.client.delete_job(job.name, job.namespace)
        except KubectlError as e:
            self.report.record("job", job.name, job.namespace, FAILED, str(e))
            return result
        self.report.record("job", job.name, job.namespace, DELETED, f"age {result.age}d")
        return result

    def run_orphans(self, group: OrphanGroup) -> None:
        """Remove the finished pods of a Job that no longer exists."""
        self.report.orphan_groups.append(group)
        if not group.pods:
            self.report.diagnose(f"job/{group.name} (ns: {group.namespace})", "no pods found")
            return
        for pod in group.candidates:
            self._delete_pod(pod, group.name, orphan=True)
        for pod in group.skipped:
            self._skip_pod(pod, group.name, orphan=True)

    def run(
        self,
        results: Iterable[EligibilityResult],
        orphan_groups: Iterable[OrphanGroup] = (),
    ) -> Report:
        for result in results:
            self.run_job(result)
        for group in orphan_groups:
            self.run_orphans(group)
        return self.report
