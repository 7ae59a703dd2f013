"""MCP resource registry.

Resources are addressable by URI and can be fetched by the MCP client on demand.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from mcp.server.fastmcp import FastMCP

from perf_stats_server.core.builds import BuildManifest
from perf_stats_server.tools.stats import CONFIG, REGISTRY, read_aggregate_log

BASE_DIR_ENV = "PERF_STATS_BASE_DIR"


def _base_dir() -> Path:
    """Return the resolved base directory for build resources."""
    raw = os.getenv(BASE_DIR_ENV, os.getcwd())
    return Path(raw).resolve()


def _safe_resolve(path: str) -> Path:
    """Resolve a path under the configured base directory."""
    base = _base_dir()
    p = Path(path).expanduser()
    if not p.is_absolute():
        p = base / p
    p = p.resolve()
    if base not in p.parents and p != base:
        raise ValueError("Path escapes base dir")
    return p


def register_resources(mcp: FastMCP) -> None:
    """Register resource handlers on the MCP server."""

    @mcp.resource("app://perf-stats/help")
    def help_resource() -> str:
        """Return a short list of available resource URIs."""
        return (
            "Resources:\n"
            "- app://perf-stats/help\n"
            "- app://perf-stats/log-format\n"
            "- app://perf-stats/schemas/build-manifest\n"
            "- app://perf-stats/metrics\n"
            f"- perf-log://{{build_dir}} (restricted to {BASE_DIR_ENV})\n"
            f"\nBase directory: {_base_dir()}\n"
        )

    @mcp.resource("app://perf-stats/log-format")
    def log_format() -> dict[str, Any]:
        """Describe the aggregate log layout and active configuration."""
        cfg = CONFIG
        return {
            "delimiter": cfg.delimiter,
            "aggregate_file_param": cfg.aggregate_file_param,
            "encoding": cfg.encoding,
            "header": "first line, column titles",
            "columns": ["startTime", "elapsedTime", "label", "responseCode", "..."],
        }

    @mcp.resource("app://perf-stats/schemas/build-manifest")
    def manifest_schema() -> dict[str, Any]:
        """Return the JSON schema of build.json."""
        return BuildManifest.model_json_schema()

    @mcp.resource("app://perf-stats/metrics")
    def metric_keys() -> list[str]:
        """Return the chart metric keys registered so far."""
        return REGISTRY.keys()

    @mcp.resource("perf-log://{build_dir}")
    async def aggregate_log(build_dir: str) -> str:
        """Return the raw aggregate log of a build directory."""
        root = _safe_resolve(build_dir)
        return await read_aggregate_log(root)
