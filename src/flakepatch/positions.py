from __future__ import annotations

from .errors import PositionNotFound
from .spans import Position, Span


def position_to_offset(text: str, position: Position) -> int:
    line = 1
    column = 1

    for idx, ch in enumerate(text):
        if line == position.line and column == position.column:
            return idx

        if ch == "\n":
            line += 1
            column = 1
        else:
            column += 1

    # Half-open spans may end one past the last character.
    if line == position.line and column == position.column:
        return len(text)

    raise PositionNotFound(line=position.line, column=position.column)


def span_to_offsets(text: str, span: Span) -> tuple[int, int]:
    return position_to_offset(text, span.start), position_to_offset(text, span.end)


def line_start(text: str, offset: int) -> int:
    """Offset of the first character of the line containing ``offset``."""
    return text.rfind("\n", 0, offset) + 1


def line_end(text: str, offset: int) -> int:
    """Offset of the newline ending the line containing ``offset`` (or len(text))."""
    end = text.find("\n", offset)
    return len(text) if end == -1 else end


def indentation_before(text: str, span: Span) -> str | None:
    """Whitespace between the start of the span's line and the span itself.

    Returns None when something other than whitespace precedes the span on its
    line, i.e. the node does not begin its line.
    """
    start = position_to_offset(text, span.start)
    prefix = text[line_start(text, start) : start]
    if prefix.strip(" \t"):
        return None
    return prefix


def rest_of_line_is_blank(text: str, offset: int) -> bool:
    """True when only whitespace or a `#` comment follows ``offset`` on its line."""
    rest = text[offset : line_end(text, offset)].lstrip(" \t\r")
    return not rest or rest.startswith("#")
