"""Pattern compilation with the smart-case rule."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import NamedTuple

from ..errors import InvalidPatternError


class Match(NamedTuple):
    """One hit: line index plus byte range within the line's UTF-8 text."""

    line: int
    start: int
    end: int


@dataclass(frozen=True)
class SearchPattern:
    query: str
    regex: re.Pattern[str]
    case_sensitive: bool


def is_smart_case_sensitive(query: str) -> bool:
    return any(ch.isupper() for ch in query)


def compile_pattern(query: str, *, smart_case: bool = True, ignore_case: bool | None = None) -> SearchPattern:
    """Compile ``query`` as a regular expression.

    With ``smart_case`` the match is case-insensitive unless the query holds
    an uppercase letter. ``ignore_case`` forces the choice either way.
    """
    if ignore_case is None:
        ignore_case = smart_case and not is_smart_case_sensitive(query)
    flags = re.IGNORECASE if ignore_case else 0
    try:
        regex = re.compile(query, flags)
    except (re.error, RecursionError, OverflowError) as exc:
        raise InvalidPatternError(query, str(exc)) from exc
    return SearchPattern(query=query, regex=regex, case_sensitive=not ignore_case)


def _byte_offset(text: str, char_offset: int) -> int:
    return len(text[:char_offset].encode("utf-8"))


def find_line_matches(pattern: SearchPattern, line: int, text: str) -> list[Match]:
    """Return every non-overlapping match on one line as byte ranges."""
    hits: list[Match] = []
    ascii_only = text.isascii()
    for found in pattern.regex.finditer(text):
        start, end = found.span()
        if not ascii_only:
            start, end = _byte_offset(text, start), _byte_offset(text, end)
        hits.append(Match(line, start, end))
    return hits
