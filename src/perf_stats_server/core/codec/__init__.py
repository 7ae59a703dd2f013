"""Aggregate-log line codec.

Splits delimited performance-log lines and validates their numeric columns.
"""

from __future__ import annotations

from .base import (
    DEFAULT_DELIMITER,
    DELIMITER_PATTERN,
    LineCodec,
    MalformedLineError,
    compile_delimiter,
)
from .delimited import DelimitedLineCodec
from .names import normalize_test_name

__all__ = [
    "DEFAULT_DELIMITER",
    "DELIMITER_PATTERN",
    "DelimitedLineCodec",
    "LineCodec",
    "MalformedLineError",
    "compile_delimiter",
    "normalize_test_name",
]
