"""Tests for job->pods grouping and orphan classification."""

import pytest

from jobliterator.orphans import build_job_pod_group, find_orphans
from jobliterator.report import Report

from conftest import FakeClient, make_job, make_pod


def test_group_by_namespace_and_job_name():
    pods = [
        make_pod("a1", "A"),
        make_pod("b1", "B"),
        make_pod("plain"),
        make_pod("a2", "A", "Running"),
        make_pod("a-other", "A", namespace="other"),
    ]
    group = build_job_pod_group(pods)
    assert list(group) == [("default", "A"), ("default", "B"), ("other", "A")]
    assert [p.name for p in group[("default", "A")]] == ["a1", "a2"]


def test_group_is_read_only():
    group = build_job_pod_group([make_pod("a1", "A")])
    with pytest.raises(TypeError):
        group[("default", "Z")] = ()


def test_missing_job_makes_orphan_group():
    client = FakeClient(jobs=[make_job("J1")])
    pods = [make_pod("p1", "J1"), make_pod("p2", "J3", "Failed")]
    report = Report()
    orphans = find_orphans(client, build_job_pod_group(pods), report)
    assert [(o.name, [p.name for p in o.pods]) for o in orphans] == [("J3", ["p2"])]
    assert report.diagnostics == []


def test_pods_of_existing_job_are_not_orphans_even_if_finished():
    client = FakeClient(jobs=[make_job("J1", days_ago=1)])
    group = build_job_pod_group([make_pod("p1", "J1", "Succeeded")])
    assert find_orphans(client, group, Report()) == []


def test_same_job_name_other_namespace_is_orphan():
    client = FakeClient(jobs=[make_job("J1", namespace="a")])
    group = build_job_pod_group([make_pod("p", "J1", namespace="b")])
    orphans = find_orphans(client, group, Report())
    assert [(o.namespace, o.name) for o in orphans] == [("b", "J1")]


def test_lookup_error_is_reported_and_other_keys_continue():
    client = FakeClient()
    client.lookup_errors = {"J4"}
    group = build_job_pod_group([make_pod("x", "J4"), make_pod("y", "J5")])
    report = Report()
    orphans = find_orphans(client, group, report)
    assert [o.name for o in orphans] == ["J5"]
    assert len(report.diagnostics) == 1
    assert "J4" in report.diagnostics[0].subject
    assert "existence check failed" in report.diagnostics[0].message


def test_group_leaves_out_excluded_jobs():
    pods = [make_pod("p1", "J1"), make_pod("p2", "J3"), make_pod("q", "J1", namespace="other")]
    group = build_job_pod_group(pods, exclude=[("default", "J1")])
    assert list(group) == [("default", "J3"), ("other", "J1")]
