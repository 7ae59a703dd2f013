"""Join build failure reasons against the discovered test list."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from .models import FailureReason, TestIdentity, TestRun

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class Partition:
    """Failed/succeeded test runs keyed by full name, in discovery order."""

    failed: dict[str, TestRun] = field(default_factory=dict)
    succeeded: dict[str, TestRun] = field(default_factory=dict)

    def __iter__(self):
        yield from self.failed.values()
        yield from self.succeeded.values()

    def __len__(self) -> int:
        return len(self.failed) + len(self.succeeded)

    def get(self, name: str) -> TestRun | None:
        """Look up a run by full name, failed runs first."""
        run = self.failed.get(name)
        if run is None:
            run = self.succeeded.get(name)
        return run


def group_performance_problems(
    reasons: Iterable[FailureReason],
) -> dict[str, list[FailureReason]]:
    """Map test full names to their performance-type failure reasons."""
    problems: dict[str, list[FailureReason]] = {}
    for reason in reasons:
        if not reason.is_performance_problem:
            continue
        problems.setdefault(reason.test_name, []).append(reason)
    return problems


def correlate(
    tests: Iterable[TestIdentity],
    reasons: Iterable[FailureReason],
) -> Partition:
    """Classify every discovered test as failed or succeeded."""
    problems = group_performance_problems(reasons)
    partition = Partition()

    for identity in tests:
        run = TestRun(identity=identity)
        test_problems = problems.get(identity.full_name)
        if test_problems:
            run.classify_failed(test_problems)
            partition.failed[run.full_name] = run
        else:
            run.classify_succeeded()
            partition.succeeded[run.full_name] = run

    orphans = problems.keys() - partition.failed.keys()
    if orphans:
        logger.debug(
            "Dropping %d performance problem(s) for unknown tests: %s",
            len(orphans),
            ", ".join(sorted(orphans)),
        )
    return partition
