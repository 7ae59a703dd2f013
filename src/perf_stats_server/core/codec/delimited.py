"""Delimited aggregate-log codec.

Line layout: ``startTime<d>elapsedTime<d>label<d>responseCode[<d>extra...]``.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from ..models import LogLine
from .base import (
    DEFAULT_DELIMITER,
    ELAPSED_TIME_RE,
    MIN_FIELDS,
    START_TIME_RE,
    MalformedLineError,
    compile_delimiter,
)
from .names import normalize_test_name


@dataclass(frozen=True, slots=True)
class DelimitedLineCodec:
    """Validate and decode one aggregate-log line."""

    delimiter: str = DEFAULT_DELIMITER
    normalize_label: Callable[[str], str] = normalize_test_name
    _pattern: re.Pattern[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_pattern", compile_delimiter(self.delimiter))

    def split(self, line: str) -> list[str]:
        """Split a line into fields after trimming it."""
        return self._pattern.split(line.strip())

    @staticmethod
    def validate(fields: Sequence[str]) -> bool:
        """Check field count and the numeric shape of the first two columns.

        The elapsed-time pattern is permissive: an empty value passes here
        even though it cannot be decoded as a number.
        """
        if len(fields) < MIN_FIELDS:
            return False
        return (
            START_TIME_RE.fullmatch(fields[0]) is not None
            and ELAPSED_TIME_RE.fullmatch(fields[1]) is not None
        )

    def decode_fields(self, fields: Sequence[str]) -> LogLine:
        """Decode an already split field list."""
        items = list(fields)
        if len(items) < MIN_FIELDS:
            raise MalformedLineError(
                "expected at least timestamp, elapsed time and label "
                f"({MIN_FIELDS} fields), found {len(items)}",
                items,
            )
        if not self.validate(items):
            raise MalformedLineError("non-numeric timestamp or elapsed time", items)

        try:
            start_time = int(items[0])
        except ValueError as exc:
            raise MalformedLineError(
                f"timestamp {items[0][:32]!r} is not a usable integer", items
            ) from exc

        try:
            elapsed = float(items[1])
        except ValueError as exc:
            raise MalformedLineError(
                f"elapsed time {items[1]!r} is not a number", items
            ) from exc

        label = self.normalize_label(items[2].strip())
        items[2] = label
        response_code = items[3].strip() if len(items) > 3 else ""

        return LogLine(
            start_time=start_time,
            elapsed_time=elapsed,
            label=label,
            response_code=response_code,
            fields=tuple(items),
        )

    def decode(self, line: str) -> LogLine:
        """Split and decode a raw log line."""
        return self.decode_fields(self.split(line))
