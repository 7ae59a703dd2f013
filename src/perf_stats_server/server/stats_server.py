"""MCP server entrypoint (stdio transport).

Run locally (stdio):
    python -m perf_stats_server.server.stats_server
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Sequence
from typing import Any

from mcp.server.fastmcp import FastMCP

from perf_stats_server.resources.registry import register_resources
from perf_stats_server.tools.stats import find_test_impl, list_test_runs_impl, log_titles_impl

LOGGER = logging.getLogger(__name__)


def _configure_logging() -> None:
    """Configure logging on stderr; the MCP client captures it."""
    level_name = os.getenv("PERF_STATS_LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


mcp = FastMCP("perf-stats", json_response=True)

register_resources(mcp)


@mcp.tool()
def list_test_runs(
    build_dir: str,
    outcome: str = "all",
    include_samples: bool = False,
) -> dict[str, Any]:
    """List the performance test runs of a build, sorted by group name.

    Parameters
    ----------
    build_dir:
        Directory holding build.json and artifacts/.
    outcome:
        "failed", "succeeded" or "all".
    include_samples:
        Include (startTime, elapsedTime) samples for each run.
    """
    return list_test_runs_impl(
        build_dir=build_dir,
        outcome=outcome,
        include_samples=include_samples,
    )


@mcp.tool()
def find_test(
    build_dir: str,
    test_name: str,
    include_samples: bool = True,
    log_lines: int | None = None,
) -> dict[str, Any]:
    """Return one test run with its samples, response codes and log lines."""
    return find_test_impl(
        build_dir=build_dir,
        test_name=test_name,
        include_samples=include_samples,
        log_lines=log_lines,
    )


@mcp.tool()
def log_column_titles(build_dir: str) -> dict[str, Any]:
    """Return the column titles of the build's aggregate log."""
    return log_titles_impl(build_dir=build_dir)


def main(argv: Sequence[str] | None = None) -> None:
    """Start the MCP server over stdio."""
    _configure_logging()
    LOGGER.debug("Starting MCP server (transport=stdio)")
    _ = argv or sys.argv[1:]
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
