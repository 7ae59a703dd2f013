"""Per-build cache of reconstructed performance test runs.

The cache holds the test runs of exactly one build. Asking for another build
rebuilds everything: failure reasons are correlated with the discovered
tests, chart providers are registered, and the aggregate log is ingested.
The rebuilt state is published as one immutable snapshot, so readers see
either the previous build or the new one, never a mix.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from operator import attrgetter
from pathlib import Path
from types import MappingProxyType

from .builds import Build, find_aggregate_log
from .codec import DelimitedLineCodec, LineCodec
from .config import PerfStatsConfig
from .correlation import correlate
from .ingest import read_log
from .models import TestRun
from .registry import MetricRegistry

logger = logging.getLogger(__name__)

NO_BUILD = -1

ArtifactLocator = Callable[[Build, str], Path | None]

_by_group = attrgetter("group_name")


@dataclass(frozen=True, slots=True)
class CacheSnapshot:
    """Everything known about the cached build."""

    build_id: int
    failed: Mapping[str, TestRun]
    succeeded: Mapping[str, TestRun]
    titles: tuple[str, ...] = ()

    def find(self, name: str) -> TestRun | None:
        run = self.failed.get(name)
        if run is None:
            run = self.succeeded.get(name)
        return run


_EMPTY = CacheSnapshot(
    build_id=NO_BUILD,
    failed=MappingProxyType({}),
    succeeded=MappingProxyType({}),
)


def sorted_by_group(runs: Mapping[str, TestRun]) -> tuple[TestRun, ...]:
    """Stable sort of the runs by group name."""
    return tuple(sorted(runs.values(), key=_by_group))


class BuildCache:
    """Thread-safe cache of one build's test runs."""

    def __init__(
        self,
        registry: MetricRegistry,
        *,
        config: PerfStatsConfig | None = None,
        codec: LineCodec | None = None,
        artifact_locator: ArtifactLocator | None = None,
        log: logging.Logger | None = None,
    ) -> None:
        self._registry = registry
        self._config = config or PerfStatsConfig()
        self._codec = codec or DelimitedLineCodec(delimiter=self._config.delimiter)
        self._locate = artifact_locator or find_aggregate_log
        self._log = log or logger
        self._lock = threading.Lock()
        self._snapshot = _EMPTY
        self._rebuilds = 0

    @property
    def current_build_id(self) -> int:
        return self._snapshot.build_id

    @property
    def rebuild_count(self) -> int:
        return self._rebuilds

    def snapshot(self, build: Build) -> CacheSnapshot:
        """Return the state for build, rebuilding if another build is cached."""
        current = self._snapshot
        if current.build_id == build.build_id:
            return current

        with self._lock:
            current = self._snapshot
            if current.build_id != build.build_id:
                current = self._rebuild(build)
                self._snapshot = current
            return current

    def failed_test_runs(self, build: Build) -> tuple[TestRun, ...]:
        return sorted_by_group(self.snapshot(build).failed)

    def succeeded_test_runs(self, build: Build) -> tuple[TestRun, ...]:
        return sorted_by_group(self.snapshot(build).succeeded)

    def find_test_by_name(self, build: Build, name: str) -> TestRun | None:
        """Look up a test run, failed runs first; None when unknown."""
        return self.snapshot(build).find(name)

    def log_column_titles(self, build: Build) -> tuple[str, ...]:
        return self.snapshot(build).titles

    def _rebuild(self, build: Build) -> CacheSnapshot:
        build_id = build.build_id
        self._log.info("Rebuilding performance test runs for build %s", build_id)

        partition = correlate(build.all_tests(), build.failure_reasons())
        for run in partition:
            self._registry.register_or_find(run.chart_key)
            self._registry.register_or_find(run.response_code_chart_key)

        titles: tuple[str, ...] = ()
        log_file = self._locate(build, self._config.aggregate_file_param)
        if log_file is None:
            self._log.info("Build %s has no aggregate performance log", build_id)
        else:
            result = read_log(
                log_file,
                partition,
                codec=self._codec,
                encoding=self._config.encoding,
                log=self._log,
            )
            titles = result.titles or ()

        self._rebuilds += 1
        self._log.debug(
            "Build %s: %d failed, %d succeeded test run(s)",
            build_id,
            len(partition.failed),
            len(partition.succeeded),
        )
        return CacheSnapshot(
            build_id=build_id,
            failed=MappingProxyType(partition.failed),
            succeeded=MappingProxyType(partition.succeeded),
            titles=titles,
        )
