"""Aggregate-log ingestion.

Streams the log once, decodes each line and feeds the matching test run.
Problems are reported to the logger; nothing here raises to the caller.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from .codec import DelimitedLineCodec, LineCodec, MalformedLineError
from .correlation import Partition

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class IngestResult:
    """Column titles plus per-ingestion counters."""

    titles: tuple[str, ...] | None = None
    lines: int = 0
    applied: int = 0
    malformed: int = 0
    unknown: int = 0
    failed: bool = False


def ingest_stream(
    stream: Iterable[str],
    runs: Partition,
    *,
    codec: LineCodec | None = None,
    result: IngestResult | None = None,
    log: logging.Logger = logger,
) -> IngestResult:
    """Read titles from the first line and apply every valid sample line.

    An exhausted stream yields ``titles=None``. Lines whose label matches no
    run are skipped without a log record.
    """
    codec = codec or DelimitedLineCodec()
    if result is None:
        result = IngestResult()

    lines = iter(stream)
    header = next(lines, None)
    if header is None:
        return result
    result.titles = tuple(title.strip() for title in codec.split(header))

    for line_no, raw in enumerate(lines, start=2):
        line = raw.strip()
        if not line:
            continue
        result.lines += 1
        try:
            entry = codec.decode(line)
        except MalformedLineError as exc:
            result.malformed += 1
            log.warning("Skipping malformed log line %d: %s. Found: %s", line_no, exc, list(exc.fields))
            continue

        run = runs.get(entry.label)
        if run is None:
            result.unknown += 1
            continue

        run.add_response_code(entry.response_code)
        run.add_time_value(entry.start_time, entry.elapsed_time)
        run.add_log_line(entry.start_time, entry.fields)
        result.applied += 1

    return result


def read_log(
    path: str | Path,
    runs: Partition,
    *,
    codec: LineCodec | None = None,
    encoding: str = "utf-8",
    log: logging.Logger = logger,
) -> IngestResult:
    """Ingest a log file; I/O failures are logged and stop ingestion.

    Samples applied before a failure stay applied, and the titles read so
    far are returned.
    """
    path = Path(path)
    result = IngestResult()
    try:
        with path.open(encoding=encoding) as f:
            ingest_stream(f, runs, codec=codec, result=result, log=log)
    except FileNotFoundError:
        result.failed = True
        log.error("Performance log %s not found", path.absolute())
    except (OSError, UnicodeDecodeError) as exc:
        result.failed = True
        log.error("Error reading performance log %s: %s", path.absolute(), exc)

    log.debug(
        "Ingested %s: %d line(s), %d applied, %d malformed, %d unknown label(s)",
        path,
        result.lines,
        result.applied,
        result.malformed,
        result.unknown,
    )
    return result
