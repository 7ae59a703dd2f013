from __future__ import annotations

from conftest import identities, perf_problem

from perf_stats_server.core.correlation import correlate, group_performance_problems
from perf_stats_server.core.models import FailureReason, TestOutcome


def test_group_performance_problems_ignores_other_types() -> None:
    reasons = [
        perf_problem("A"),
        FailureReason(type="OTHER", test_name="B"),
        perf_problem("A"),
    ]
    grouped = group_performance_problems(reasons)
    assert list(grouped) == ["A"]
    assert len(grouped["A"]) == 2


def test_correlate_partitions_tests() -> None:
    first = perf_problem("A")
    second = FailureReason(type="BAD_PERFORMANCE_PROBLEM", test_name="A", description="p95")
    reasons = [first, FailureReason(type="OTHER", test_name="B"), second]

    partition = correlate(identities("A", "B", "C"), reasons)

    assert list(partition.failed) == ["A"]
    assert list(partition.succeeded) == ["B", "C"]
    assert partition.failed["A"].failure_reasons == [first, second]
    assert partition.failed["A"].outcome is TestOutcome.FAILED
    assert all(r.outcome is TestOutcome.SUCCEEDED for r in partition.succeeded.values())


def test_correlate_is_total_and_disjoint() -> None:
    names = [f"T{i}" for i in range(10)]
    reasons = [perf_problem(n) for n in names[::3]]

    partition = correlate(identities(*names), reasons)

    assert partition.failed.keys().isdisjoint(partition.succeeded.keys())
    assert set(partition.failed) | set(partition.succeeded) == set(names)
    assert len(partition) == len(names)


def test_correlate_drops_reasons_for_unknown_tests() -> None:
    partition = correlate(identities("A"), [perf_problem("ghost")])
    assert partition.failed == {}
    assert list(partition.succeeded) == ["A"]


def test_partition_get_prefers_failed() -> None:
    partition = correlate(identities("A", "B"), [perf_problem("A")])
    assert partition.get("A") is partition.failed["A"]
    assert partition.get("B") is partition.succeeded["B"]
    assert partition.get("Z") is None
