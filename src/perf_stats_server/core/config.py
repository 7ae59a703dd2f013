"""Runtime configuration for the performance-statistics cache."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace

DELIMITER_ENV = "PERF_STATS_DELIMITER"
AGGREGATE_PARAM_ENV = "PERF_STATS_AGGREGATE_PARAM"
ENCODING_ENV = "PERF_STATS_ENCODING"

_ESCAPES = {"\\t": "\t", "\\n": "\n", "\\s": " "}


@dataclass(frozen=True, slots=True)
class PerfStatsConfig:
    delimiter: str = "\t"
    # Build parameter naming the aggregate log artifact.
    aggregate_file_param: str = "perfTest.agg.artifact.name"
    encoding: str = "utf-8"


def _unescape(value: str) -> str:
    return _ESCAPES.get(value, value)


def resolve_config(cfg: PerfStatsConfig | None = None) -> PerfStatsConfig:
    """Return config with optional env overrides applied."""
    if cfg is None:
        cfg = PerfStatsConfig()

    overrides: dict[str, str] = {}

    delimiter = os.getenv(DELIMITER_ENV)
    if delimiter:
        overrides["delimiter"] = _unescape(delimiter)

    param = os.getenv(AGGREGATE_PARAM_ENV)
    if param is not None and param.strip():
        overrides["aggregate_file_param"] = param.strip()

    encoding = os.getenv(ENCODING_ENV)
    if encoding is not None and encoding.strip():
        try:
            "".encode(encoding.strip())
        except LookupError as exc:
            raise ValueError(f"{ENCODING_ENV} names an unknown encoding: {encoding}") from exc
        overrides["encoding"] = encoding.strip()

    if not overrides:
        return cfg
    return replace(cfg, **overrides)
