"""Shared fixtures: an in-memory stand-in for KubectlClient."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from jobliterator.kubectl import KubectlError, NotFoundError
from jobliterator.models import Job, Pod

NOW = datetime(2024, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


def make_job(name, days_ago=10, active=0, namespace="default", now=NOW):
    completion = None if days_ago is None else now - timedelta(days=days_ago)
    return Job(name=name, namespace=namespace, active=active, completion_time=completion)


def make_pod(name, job_name=None, phase="Succeeded", namespace="default"):
    return Pod(name=name, namespace=namespace, phase=phase, job_name=job_name)


class FakeClient:
    """
    Same methods as KubectlClient, backed by lists.

    Deletes are logged in `calls` and remove the object, so a second run
    sees the cluster as the first one left it.
    """

    def __init__(self, jobs=(), pods=()):
        self.jobs = list(jobs)
        self.pods = list(pods)
        self.calls = []
        self.list_jobs_error = None
        self.list_pods_error = None
        self.lookup_errors = set()  # job names whose lookup fails (not NotFound)
        self.delete_errors = set()  # resource names whose delete fails

    def list_jobs(self, namespace=None):
        self.calls.append(("list_jobs", namespace))
        if self.list_jobs_error:
            raise KubectlError(self.list_jobs_error)
        return [j for j in self.jobs if not namespace or j.namespace == namespace]

    def list_pods(self, namespace=None, label_filter=None):
        self.calls.append(("list_pods", namespace, label_filter))
        if self.list_pods_error:
            raise KubectlError(self.list_pods_error)
        pods = [p for p in self.pods if not namespace or p.namespace == namespace]
        if label_filter:
            _, value = label_filter
            pods = [p for p in pods if p.job_name == value]
        return pods

    def get_job(self, name, namespace):
        self.calls.append(("get_job", name, namespace))
        if name in self.lookup_errors:
            raise KubectlError("Unable to connect to the server: i/o timeout")
        for job in self.jobs:
            if job.name == name and job.namespace == namespace:
                return job
        raise NotFoundError(f'jobs.batch "{name}" not found')

    def delete_pod(self, name, namespace):
        self.calls.append(("delete_pod", name, namespace))
        if name in self.delete_errors:
            raise KubectlError(f'pods "{name}" is forbidden')
        self.pods = [p for p in self.pods if not (p.name == name and p.namespace == namespace)]

    def delete_job(self, name, namespace):
        self.calls.append(("delete_job", name, namespace))
        if name in self.delete_errors:
            raise KubectlError(f'jobs.batch "{name}" is forbidden')
        self.jobs = [j for j in self.jobs if not (j.name == name and j.namespace == namespace)]

    def mutations(self):
        return [c for c in self.calls if c[0].startswith("delete_")]


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def scenario_client():
    """J1 old and finished, J2 recent; p1/p3 belong to J1, p2 to the missing J3."""
    return FakeClient(
        jobs=[make_job("J1", days_ago=10), make_job("J2", days_ago=3)],
        pods=[
            make_pod("p1", "J1", "Succeeded"),
            make_pod("p2", "J3", "Failed"),
            make_pod("p3", "J1", "Running"),
        ],
    )
