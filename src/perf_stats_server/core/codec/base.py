"""Codec interface and shared log-format constants."""

from __future__ import annotations

import re
from typing import Protocol

from ..models import LogLine

DEFAULT_DELIMITER = "\t"
DELIMITER_PATTERN = re.compile(re.escape(DEFAULT_DELIMITER))

START_TIME_RE = re.compile(r"\d+")
# Empty and partial numbers ("", ".", "e5") match this pattern.
ELAPSED_TIME_RE = re.compile(r"[0-9]*\.?[0-9]*([Ee][+-]?[0-9]+)?")

MIN_FIELDS = 3


class MalformedLineError(ValueError):
    """Raised when a log line does not follow the aggregate-log schema."""

    def __init__(self, message: str, fields: list[str] | tuple[str, ...]) -> None:
        super().__init__(message)
        self.fields = tuple(fields)


class LineCodec(Protocol):
    """Codec interface: return a LogLine or raise MalformedLineError."""

    def split(self, line: str) -> list[str]:
        """Split a trimmed line into raw fields."""
        ...

    def decode(self, line: str) -> LogLine:
        """Decode a raw log line."""
        ...


def compile_delimiter(delimiter: str) -> re.Pattern[str]:
    """Return the split pattern for a literal delimiter."""
    if not delimiter:
        raise ValueError("delimiter must not be empty")
    if delimiter == DEFAULT_DELIMITER:
        return DELIMITER_PATTERN
    return re.compile(re.escape(delimiter))
