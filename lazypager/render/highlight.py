"""Syntax highlighting with search-match overlays.

Lines are lexed one at a time with Pygments; token styles come from the
configured Pygments style and are emitted as true-color SGR parameters.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import PurePath

from pygments.lexer import Lexer
from pygments.lexers import DiffLexer, TextLexer, get_lexer_for_filename
from pygments.style import StyleMeta
from pygments.styles import get_style_by_name
from pygments.util import ClassNotFound

from ..buffer import Buffer
from ..search import Match
from .ansi import Segment, sanitize_terminal_text

DEFAULT_STYLE = "monokai"
MATCH_STYLE = "30;43"
CURRENT_MATCH_STYLE = "30;46"
PREVIEW_STYLE = "4;33"

_COMPRESSED_SUFFIXES = {".gz", ".bz2", ".xz", ".lzma"}
_LEXER_OPTIONS = {"stripnl": False, "ensurenl": False}


def _lookup_style(name: str) -> StyleMeta:
    try:
        return get_style_by_name(name)
    except ClassNotFound:
        return get_style_by_name(DEFAULT_STYLE)


def lexer_for_name(name: str, is_diff: bool = False) -> Lexer:
    """Pick a lexer from a display name; compression suffixes are ignored."""
    if is_diff:
        return DiffLexer(**_LEXER_OPTIONS)
    path = PurePath(name)
    if path.suffix in _COMPRESSED_SUFFIXES:
        path = path.with_suffix("")
    try:
        return get_lexer_for_filename(path.name, **_LEXER_OPTIONS)
    except ClassNotFound:
        return TextLexer(**_LEXER_OPTIONS)


def _char_span(text: str, start: int, end: int) -> tuple[int, int]:
    if text.isascii():
        return start, end
    raw = text.encode("utf-8")
    return (
        len(raw[:start].decode("utf-8", errors="ignore")),
        len(raw[:end].decode("utf-8", errors="ignore")),
    )


def overlay_matches(
    segments: list[Segment],
    text: str,
    layers: Iterable[tuple[Iterable[Match], str]],
) -> list[Segment]:
    """Restyle the byte ranges of each layer's matches; later layers win."""
    overrides: list[str | None] | None = None
    for matches, sgr in layers:
        for match in matches:
            start, end = _char_span(text, match.start, match.end)
            if start >= end:
                continue
            if overrides is None:
                overrides = [None] * len(text)
            for idx in range(start, min(end, len(text))):
                overrides[idx] = sgr
    if overrides is None:
        return segments

    out: list[Segment] = []
    pos = 0
    for chunk, sgr in segments:
        run_start = 0
        run_style = overrides[pos] or sgr if chunk else sgr
        for offset in range(1, len(chunk) + 1):
            style = (overrides[pos + offset] or sgr) if offset < len(chunk) else None
            if style != run_style:
                out.append((chunk[run_start:offset], run_style))
                run_start = offset
                run_style = style
        pos += len(chunk)
    return out


class Highlighter:
    """Turn buffer lines into styled segments."""

    def __init__(self, style: str = DEFAULT_STYLE, enabled: bool = True) -> None:
        self.style = _lookup_style(style)
        self.enabled = enabled
        self._lexers: dict[int, Lexer] = {}
        self._sgr_cache: dict[object, str] = {}

    def lexer_for(self, buffer: Buffer) -> Lexer:
        key = id(buffer)
        lexer = self._lexers.get(key)
        if lexer is None:
            lexer = lexer_for_name(buffer.name, buffer.is_diff)
            self._lexers[key] = lexer
        return lexer

    def sgr_for_token(self, token_type) -> str:
        cached = self._sgr_cache.get(token_type)
        if cached is not None:
            return cached
        spec = self.style.style_for_token(token_type)
        params: list[str] = []
        if spec.get("bold"):
            params.append("1")
        if spec.get("italic"):
            params.append("3")
        if spec.get("underline"):
            params.append("4")
        color = spec.get("color")
        if color and len(color) == 6:
            red, green, blue = (int(color[idx : idx + 2], 16) for idx in (0, 2, 4))
            params.append(f"38;2;{red};{green};{blue}")
        sgr = ";".join(params)
        self._sgr_cache[token_type] = sgr
        return sgr

    def token_segments(self, buffer: Buffer, text: str) -> list[Segment]:
        if not self.enabled or not text or buffer.is_binary():
            return [(text, "")]
        lexer = self.lexer_for(buffer)
        if isinstance(lexer, TextLexer):
            return [(text, "")]
        segments: list[Segment] = []
        consumed = 0
        for token_type, value in lexer.get_tokens(text):
            if not value:
                continue
            value = value[: len(text) - consumed]
            if not value:
                break
            segments.append((value, self.sgr_for_token(token_type)))
            consumed += len(value)
        if consumed != len(text) or "".join(chunk for chunk, _ in segments) != text:
            return [(text, "")]
        return segments

    def highlight_line(
        self,
        buffer: Buffer,
        text: str,
        matches: Iterable[Match] = (),
        preview: Iterable[Match] = (),
        current: Match | None = None,
    ) -> list[Segment]:
        """Return segments covering ``text`` with match ranges overlaid."""
        segments = self.token_segments(buffer, text)
        layers: list[tuple[Iterable[Match], str]] = [(matches, MATCH_STYLE)]
        if current is not None:
            layers.append(((current,), CURRENT_MATCH_STYLE))
        layers.append((preview, PREVIEW_STYLE))
        segments = overlay_matches(segments, text, layers)
        return [(sanitize_terminal_text(chunk), sgr) for chunk, sgr in segments]
