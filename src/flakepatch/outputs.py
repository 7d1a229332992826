from __future__ import annotations

import logging
from dataclasses import dataclass

from . import ast as A
from .edits import is_identifier, splice
from .errors import EmptyParameterListUnsupported, FormalNotFound
from .lexer import tokenize
from .positions import position_to_offset, span_to_offsets
from .spans import Span
from .tokens import Token, TokenKind


logger = logging.getLogger(__name__)

_OPEN = frozenset({TokenKind.LBRACE, TokenKind.LBRACKET, TokenKind.LPAREN, TokenKind.DOLLAR_CURLY})
_CLOSE = frozenset({TokenKind.RBRACE, TokenKind.RBRACKET, TokenKind.RPAREN})


@dataclass(frozen=True, slots=True)
class Formal:
    """One comma separated entry of a `{ ... }` parameter list.

    Offsets are relative to the scanned text. ``end`` covers the default value
    when there is one (``a ? null``), so insertions after it keep it attached.
    """

    name: str | None  # None for `...`
    start: int
    end: int
    ellipsis: bool = False


def scan_formals(source: str) -> list[Formal]:
    """Split the text of a destructured parameter list into its entries."""
    formals: list[Formal] = []
    depth = 0
    current: list[Token] = []

    def flush() -> None:
        if not current:
            return
        first, last = current[0], current[-1]
        formals.append(
            Formal(
                name=first.lexeme if first.kind == TokenKind.IDENT else None,
                start=position_to_offset(source, first.span.start),
                end=position_to_offset(source, last.span.end),
                ellipsis=first.kind == TokenKind.ELLIPSIS,
            )
        )
        current.clear()

    for tok in tokenize(source):
        if tok.kind == TokenKind.EOF:
            break
        if tok.kind in _OPEN:
            depth += 1
            if depth == 1:
                continue
        elif tok.kind in _CLOSE:
            depth -= 1
            if depth == 0:
                flush()
                break
        elif depth == 1 and tok.kind == TokenKind.COMMA:
            flush()
            continue
        if depth >= 1:
            current.append(tok)

    return formals


def patch_outputs_function(
    head: A.FunctionHeadDestructured,
    span: Span,
    input_name: str,
    text: str,
) -> str:
    """Add ``input_name`` to the parameter list of the `outputs` function.

    ``span`` covers the parameter list (braces included). A name that is
    already listed is left alone, so re-running an upsert never duplicates it.
    """
    if any(arg.identifier == input_name for arg in head.arguments):
        logger.warning(
            "input %s was already in the `outputs` function args, not adding it again", input_name
        )
        return text

    if head.identifier == input_name:
        # `{ x, ... } @ x` is a duplicate formal argument
        logger.warning(
            "input %s is already reachable through the `@ %s` binding, not adding it to the outputs args",
            input_name,
            head.identifier,
        )
        return text

    if not is_identifier(input_name):
        logger.warning(
            "input %s is not a valid parameter name, reach it through the `@` binding instead",
            input_name,
        )
        return text

    start, end = span_to_offsets(text, span)
    formals = scan_formals(text[start:end])

    if head.arguments:
        last = head.arguments[-1].identifier
        entry = next((f for f in reversed(formals) if f.name == last), None)
        if entry is None:
            raise FormalNotFound(name=last, span=span)
        at = start + entry.end
        logger.debug("adding %s after `%s` in the outputs arguments", input_name, last)
        return splice(text, at, at, f", {input_name}")

    if head.ellipsis:
        # `...` is always the last entry, so the new name goes in front of it.
        entry = next((f for f in formals if f.ellipsis), None)
        if entry is None:
            raise FormalNotFound(name="...", span=span)
        at = start + entry.start
        logger.debug("adding %s before `...` in the outputs arguments", input_name)
        return splice(text, at, at, f"{input_name}, ")

    raise EmptyParameterListUnsupported(span=span)
