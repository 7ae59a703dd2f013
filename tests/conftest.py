from __future__ import annotations

import json
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path

import pytest

from perf_stats_server.core.models import (
    BAD_PERFORMANCE_PROBLEM_TYPE,
    FailureReason,
    TestIdentity,
)

AGG_PARAM = "perfTest.agg.artifact.name"
AGG_FILE = "aggregate.log"


@dataclass
class FakeBuild:
    """In-memory build that counts how often it is enumerated."""

    build_id: int
    tests: Sequence[TestIdentity] = ()
    reasons: Sequence[FailureReason] = ()
    artifacts_dir: Path | None = None
    parameters: Mapping[str, str] = field(default_factory=dict)
    enumerations: int = 0

    def failure_reasons(self) -> Sequence[FailureReason]:
        self.enumerations += 1
        return self.reasons

    def all_tests(self) -> Sequence[TestIdentity]:
        return self.tests


def perf_problem(test_name: str) -> FailureReason:
    return FailureReason(type=BAD_PERFORMANCE_PROBLEM_TYPE, test_name=test_name)


def identities(*names: str, group: str = "suite") -> list[TestIdentity]:
    return [TestIdentity(full_name=n, group_name=group) for n in names]


@pytest.fixture
def write_perf_log() -> Callable[[Path, list[str]], Path]:
    def _write(path: Path, lines: list[str]) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("".join(line + "\n" for line in lines), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def make_build(tmp_path: Path, write_perf_log) -> Callable[..., FakeBuild]:
    """Build a FakeBuild, optionally with an aggregate log artifact."""

    def _make(
        build_id: int,
        tests: Sequence[TestIdentity],
        reasons: Sequence[FailureReason] = (),
        log_lines: list[str] | None = None,
    ) -> FakeBuild:
        artifacts = tmp_path / f"build-{build_id}" / "artifacts"
        artifacts.mkdir(parents=True, exist_ok=True)
        params: dict[str, str] = {}
        if log_lines is not None:
            write_perf_log(artifacts / AGG_FILE, log_lines)
            params[AGG_PARAM] = AGG_FILE
        return FakeBuild(
            build_id=build_id,
            tests=list(tests),
            reasons=list(reasons),
            artifacts_dir=artifacts,
            parameters=params,
        )

    return _make


@pytest.fixture
def write_build_dir(tmp_path: Path, write_perf_log) -> Callable[..., Path]:
    """Write a build directory (build.json + artifacts/) for DirectoryBuild."""

    def _write(
        build_id: int,
        tests: list[dict[str, str]],
        failure_reasons: list[dict[str, str]] | None = None,
        log_lines: list[str] | None = None,
        name: str | None = None,
    ) -> Path:
        root = tmp_path / (name or f"build-dir-{build_id}")
        (root / "artifacts").mkdir(parents=True, exist_ok=True)
        params: dict[str, str] = {}
        if log_lines is not None:
            write_perf_log(root / "artifacts" / AGG_FILE, log_lines)
            params[AGG_PARAM] = AGG_FILE
        manifest = {
            "build_id": build_id,
            "parameters": params,
            "tests": tests,
            "failure_reasons": failure_reasons or [],
        }
        (root / "build.json").write_text(json.dumps(manifest), encoding="utf-8")
        return root

    return _write
