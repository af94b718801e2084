"""Tests for the Job age/status rules."""

import pytest

from jobliterator.eligibility import eligible_jobs, evaluate_job

from conftest import NOW, make_job


@pytest.mark.parametrize("active", [1, 2])
def test_active_jobs_never_eligible(active):
    job = make_job("busy", days_ago=400, active=active)
    assert evaluate_job(job, NOW, threshold=7) is None


def test_threshold_boundary():
    assert evaluate_job(make_job("j", days_ago=7), NOW, threshold=7).age == 7
    assert evaluate_job(make_job("j", days_ago=6), NOW, threshold=7) is None


def test_zero_threshold_includes_just_finished():
    assert evaluate_job(make_job("j", days_ago=0), NOW, threshold=0).age == 0


def test_job_without_completion_time_is_eligible():
    result = evaluate_job(make_job("failed", days_ago=None), NOW, threshold=7)
    assert result is not None
    assert result.age > 19000


def test_eligible_jobs_scenario_and_order():
    jobs = [
        make_job("J1", days_ago=10),
        make_job("J2", days_ago=3),
        make_job("J4", days_ago=8),
        make_job("J5", days_ago=30, active=1),
    ]
    results = eligible_jobs(jobs, now=NOW, threshold=7)
    assert [(r.job.name, r.age) for r in results] == [("J1", 10), ("J4", 8)]


def test_eligible_jobs_defaults_to_current_time():
    results = eligible_jobs([make_job("old", days_ago=None)])
    assert [r.job.name for r in results] == ["old"]


def test_eligible_jobs_has_no_side_effects():
    jobs = [make_job("J1", days_ago=10)]
    first = eligible_jobs(jobs, now=NOW)
    second = eligible_jobs(jobs, now=NOW)
    assert first == second
