from __future__ import annotations

import re
from datetime import date
from functools import lru_cache
from typing import Optional


DEFAULT_DATE_PATTERN = "D/MM/YYYY"

# Longest tokens first so "DD" wins over "D".
_TOKENS = (
    ("YYYY", r"(?P<year>[0-9]{4})"),
    ("DD", r"(?P<day>[0-9]{2})"),
    ("MM", r"(?P<month>[0-9]{2})"),
    ("D", r"(?P<day>[0-9]{1,2})"),
    ("M", r"(?P<month>[0-9]{1,2})"),
)


@lru_cache(maxsize=16)
def _compile_pattern(pattern: str) -> re.Pattern:
    parts = []
    i = 0
    while i < len(pattern):
        for token, regex in _TOKENS:
            if pattern.startswith(token, i):
                parts.append(regex)
                i += len(token)
                break
        else:
            parts.append(re.escape(pattern[i]))
            i += 1
    return re.compile("^" + "".join(parts) + "$")


def parse_date(text: Optional[str], pattern: str = DEFAULT_DATE_PATTERN) -> str:
    """Parse ``text`` strictly against ``pattern`` and return ``YYYY-MM-DD``.

    ``D`` accepts a day with or without its leading zero, ``MM`` and ``YYYY``
    are fixed width. Returns ``""`` when the text does not match or names a
    date that does not exist (e.g. ``31/02/2019``).
    """

    if not text:
        return ""
    try:
        regex = _compile_pattern(pattern)
    except re.error:
        return ""
    match = regex.match(text.strip())
    if not match:
        return ""
    try:
        parsed = date(
            int(match.group("year")),
            int(match.group("month")),
            int(match.group("day")),
        )
    except (IndexError, ValueError):
        return ""
    return parsed.isoformat()
