"""
Orphan detection: Pods whose `job-name` label points at a Job that is gone.

build_job_pod_group() scans the pod list once into a read-only mapping;
find_orphans() asks the cluster whether each named Job still exists.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Iterable, Mapping

from .kubectl import KubectlError, NotFoundError
from .models import OrphanGroup, Pod
from .report import Report

JobKey = tuple[str, str]  # (namespace, job name)


def build_job_pod_group(
    pods: Iterable[Pod],
    exclude: Iterable[JobKey] = (),
) -> Mapping[JobKey, tuple[Pod, ...]]:
    """
    Group labelled pods by (namespace, job name), keeping listing order.

    Pods without the label are ignored, as are pods under a key in `exclude`
    (jobs this run has already cascaded). The returned mapping is read-only.
    """
    skip = set(exclude)
    grouped: dict[JobKey, list[Pod]] = {}
    for pod in pods:
        if not pod.job_name or (pod.namespace, pod.job_name) in skip:
            continue
        grouped.setdefault((pod.namespace, pod.job_name), []).append(pod)
    return MappingProxyType({key: tuple(members) for key, members in grouped.items()})


def find_orphans(
    client,
    group: Mapping[JobKey, tuple[Pod, ...]],
    report: Report,
) -> list[OrphanGroup]:
    """
    Return an OrphanGroup for every key whose Job no longer exists.

    A lookup that fails for any reason other than not-found is recorded as
    a diagnostic and that key is left out; the remaining keys are still checked.
    """
    orphans = []
    for (namespace, name), pods in group.items():
        try:
            client.get_job(name, namespace)
        except NotFoundError:
            orphans.append(OrphanGroup(name=name, namespace=namespace, pods=tuple(pods)))
        except KubectlError as e:
            report.diagnose(f"job/{name} (ns: {namespace})", f"existence check failed: {e}")
    return orphans
