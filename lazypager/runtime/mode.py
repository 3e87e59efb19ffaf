"""Interaction modes as one tagged union.

Each variant carries only its own payload, so combinations such as
"searching while selecting" cannot be represented.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class Normal:
    pass


@dataclass(frozen=True)
class SearchInput:
    text: str = ""
    forward: bool = True

    @property
    def prompt(self) -> str:
        return ("/" if self.forward else "?") + self.text


@dataclass(frozen=True)
class CommandInput:
    text: str = ""

    @property
    def prompt(self) -> str:
        return ":" + self.text


@dataclass(frozen=True)
class FilterInput:
    text: str = ""

    @property
    def prompt(self) -> str:
        return "&" + self.text


@dataclass(frozen=True)
class Follow:
    pass


@dataclass(frozen=True)
class Visual:
    """Line selection; ``anchor`` and ``cursor`` are viewport positions."""

    anchor: int
    cursor: int

    @property
    def selection(self) -> tuple[int, int]:
        return min(self.anchor, self.cursor), max(self.anchor, self.cursor)


Mode = Union[Normal, SearchInput, CommandInput, FilterInput, Follow, Visual]
