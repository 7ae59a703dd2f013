"""Core data models for performance statistics."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum

BAD_PERFORMANCE_PROBLEM_TYPE = "BAD_PERFORMANCE_PROBLEM"

PERFORMANCE_CHART_PREFIX = "PerformanceTest"
RESPONSE_CODE_KEY_MARKER = "ResponseCode"


class TestOutcome(str, Enum):
    """Outcome assigned to a test run once per rebuild."""

    __test__ = False

    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"


@dataclass(frozen=True, slots=True)
class FailureReason:
    """Externally reported build problem (type tag + target test name)."""

    type: str
    test_name: str
    description: str | None = None

    @property
    def is_performance_problem(self) -> bool:
        return self.type == BAD_PERFORMANCE_PROBLEM_TYPE


@dataclass(frozen=True, slots=True)
class TestIdentity:
    """A test discovered by the build server."""

    __test__ = False

    full_name: str
    group_name: str
    test_name: str | None = None


@dataclass(frozen=True, slots=True)
class LogLine:
    """Decoded aggregate-log line."""

    start_time: int
    elapsed_time: float
    label: str
    response_code: str
    fields: tuple[str, ...]  # full field list, label already normalized

    @property
    def extra(self) -> tuple[str, ...]:
        """Opaque trailing columns after the response code."""
        return self.fields[4:]


@dataclass(slots=True)
class TestRun:
    """Accumulated state of one logical test within a build.

    The outcome is fixed during a rebuild; afterwards only the accumulators
    (time values, response codes, log lines) change.
    """

    __test__ = False

    identity: TestIdentity
    outcome: TestOutcome | None = None
    failure_reasons: list[FailureReason] = field(default_factory=list)
    time_values: list[tuple[int, float]] = field(default_factory=list)
    response_codes: dict[str, int] = field(default_factory=dict)
    log_lines: list[tuple[int, tuple[str, ...]]] = field(default_factory=list)

    @property
    def full_name(self) -> str:
        return self.identity.full_name

    @property
    def group_name(self) -> str:
        return self.identity.group_name

    @property
    def is_failed(self) -> bool:
        return self.outcome is TestOutcome.FAILED

    @property
    def chart_key(self) -> str:
        """Metric key of the performance chart for this test."""
        return f"{PERFORMANCE_CHART_PREFIX}_{self.full_name}"

    @property
    def response_code_chart_key(self) -> str:
        """Metric key of the response-code chart for this test."""
        return f"{RESPONSE_CODE_KEY_MARKER}_{self.chart_key}"

    def classify_failed(self, reasons: Sequence[FailureReason]) -> None:
        if not reasons:
            raise ValueError("a failed test run needs at least one failure reason")
        self.outcome = TestOutcome.FAILED
        self.failure_reasons = list(reasons)

    def classify_succeeded(self) -> None:
        self.outcome = TestOutcome.SUCCEEDED
        self.failure_reasons = []

    def add_time_value(self, start_time: int, elapsed_time: float) -> None:
        # Duplicated start times are kept; arrival order is preserved.
        self.time_values.append((start_time, elapsed_time))

    def add_response_code(self, code: str) -> None:
        self.response_codes[code] = self.response_codes.get(code, 0) + 1

    def add_log_line(self, start_time: int, fields: Sequence[str]) -> None:
        self.log_lines.append((start_time, tuple(fields)))
