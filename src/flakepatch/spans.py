from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True, order=True)
class Position:
    """A source position as reported by the parser.

    Line and column are 1-based. Columns count characters, not bytes.
    """

    line: int
    column: int


@dataclass(frozen=True, slots=True)
class Span:
    """Half-open span [start, end) in a single file."""

    start: Position
    end: Position
    file: str = "<memory>"

    def format(self) -> str:
        return f"{self.file}:{self.start.line}:{self.start.column}"
