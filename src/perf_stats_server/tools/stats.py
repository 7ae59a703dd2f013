"""MCP tool implementations.

Keep this layer thin: resolve the build directory, ask the shared cache,
and return JSON-serializable data structures.
"""

from __future__ import annotations

from collections import deque
from pathlib import Path
from typing import Any

import aiofiles

from perf_stats_server.core.build_cache import BuildCache
from perf_stats_server.core.builds import DirectoryBuild, find_aggregate_log
from perf_stats_server.core.config import PerfStatsConfig, resolve_config
from perf_stats_server.core.models import TestRun
from perf_stats_server.core.registry import InMemoryMetricRegistry

DEFAULT_LOG_LINES = 200
HARD_LOG_LINES = 5000
OUTCOMES = ("failed", "succeeded", "all")

CONFIG = resolve_config()
REGISTRY = InMemoryMetricRegistry()
CACHE = BuildCache(REGISTRY, config=CONFIG)


def _clamp_limit(limit: int | None, *, default: int) -> int:
    if limit is None:
        return default
    if limit <= 0:
        raise ValueError("limit must be > 0")
    return min(limit, HARD_LOG_LINES)


def _run_to_dict(run: TestRun, *, include_samples: bool, log_line_limit: int = 0) -> dict[str, Any]:
    """Convert a TestRun into a JSON-serializable dict."""
    d: dict[str, Any] = {
        "full_name": run.full_name,
        "group_name": run.group_name,
        "outcome": run.outcome.value.lower() if run.outcome is not None else None,
        "samples": len(run.time_values),
        "response_codes": dict(run.response_codes),
        "chart_key": run.chart_key,
    }
    if run.failure_reasons:
        d["failure_reasons"] = [
            {"type": r.type, "description": r.description} for r in run.failure_reasons
        ]
    if include_samples:
        d["time_values"] = [[start, elapsed] for start, elapsed in run.time_values]
    if log_line_limit:
        d["log_lines"] = [list(fields) for _, fields in run.log_lines[:log_line_limit]]
    return d


def list_test_runs_impl(
    *,
    build_dir: str,
    outcome: str = "all",
    include_samples: bool = False,
    cache: BuildCache = CACHE,
) -> dict[str, Any]:
    """Implementation for the `list_test_runs` MCP tool."""
    outcome = outcome.strip().lower()
    if outcome not in OUTCOMES:
        raise ValueError(f"Unknown outcome '{outcome}'. Valid values: {', '.join(OUTCOMES)}.")

    build = DirectoryBuild.load(build_dir)
    failed = cache.failed_test_runs(build) if outcome in ("failed", "all") else ()
    succeeded = cache.succeeded_test_runs(build) if outcome in ("succeeded", "all") else ()

    return {
        "build_id": build.build_id,
        "failed": [_run_to_dict(r, include_samples=include_samples) for r in failed],
        "succeeded": [_run_to_dict(r, include_samples=include_samples) for r in succeeded],
    }


def find_test_impl(
    *,
    build_dir: str,
    test_name: str,
    include_samples: bool = True,
    log_lines: int | None = None,
    cache: BuildCache = CACHE,
) -> dict[str, Any]:
    """Implementation for the `find_test` MCP tool."""
    limit = _clamp_limit(log_lines, default=DEFAULT_LOG_LINES)
    build = DirectoryBuild.load(build_dir)
    run = cache.find_test_by_name(build, test_name)
    if run is None:
        return {"build_id": build.build_id, "found": False, "test": None}
    return {
        "build_id": build.build_id,
        "found": True,
        "titles": list(cache.log_column_titles(build)),
        "test": _run_to_dict(run, include_samples=include_samples, log_line_limit=limit),
    }


def log_titles_impl(*, build_dir: str, cache: BuildCache = CACHE) -> dict[str, Any]:
    """Implementation for the `log_column_titles` MCP tool."""
    build = DirectoryBuild.load(build_dir)
    return {"build_id": build.build_id, "titles": list(cache.log_column_titles(build))}


async def read_aggregate_log(
    build_dir: str | Path,
    *,
    tail: int | None = None,
    config: PerfStatsConfig = CONFIG,
) -> str:
    """Return the build's raw aggregate log (optionally the last N lines)."""
    build = DirectoryBuild.load(build_dir)
    path = find_aggregate_log(build, config.aggregate_file_param)
    if path is None:
        raise FileNotFoundError(f"No aggregate performance log for build {build.build_id}")

    limit = _clamp_limit(tail, default=HARD_LOG_LINES)
    lines: deque[str] = deque(maxlen=limit)
    async with aiofiles.open(path, encoding=config.encoding, errors="replace") as f:
        async for line in f:
            lines.append(line)
    return "".join(lines)
