"""Test-name normalization."""

from __future__ import annotations

import re

_WS_RE = re.compile(r"\s+")


def normalize_test_name(label: str) -> str:
    """Normalize a log label so it can be matched against test full names.

    Trims the label, drops one pair of surrounding double quotes and
    collapses whitespace runs into a single space.
    """
    name = label.strip()
    if len(name) >= 2 and name[0] == '"' and name[-1] == '"':
        name = name[1:-1].strip()
    return _WS_RE.sub(" ", name)
