from __future__ import annotations

import logging

from . import ast as A
from .attrpath import AttrPath, find_first
from .edits import escape_indented, escape_string, nix_string, splice
from .errors import MultiPartValueUnsupported, UnsupportedValueKind
from .insertion import InsertionLocation, insert_input
from .positions import span_to_offsets


logger = logging.getLogger(__name__)


def input_url_path(input_name: str) -> list[str]:
    return ["inputs", input_name, "url"]


def upsert_input(
    tree: A.Expression,
    input_name: str,
    input_url: str,
    text: str,
    attr_path: AttrPath | None = None,
    insertion_location: InsertionLocation = InsertionLocation.TOP,
) -> str:
    """Point ``inputs.<input_name>.url`` at ``input_url``.

    An existing declaration is rewritten in place; otherwise a new one is
    inserted and the name is threaded into the `outputs` function. Returns the
    complete new text, or raises without returning anything partial.
    """
    path = input_url_path(input_name) if attr_path is None else attr_path
    binding = find_first(tree, path)
    if binding is not None:
        logger.debug("found %s at %s", ".".join(path), binding.span.format())
        return update_input(binding, input_name, input_url, text)

    logger.debug("%s not found, inserting it (%s)", ".".join(path), insertion_location)
    return insert_input(tree, input_name, input_url, text, insertion_location)


def update_input(binding: A.KeyValue, input_name: str, input_url: str, text: str) -> str:
    logger.debug("rewriting the url of input %s", input_name)
    return replace_input_value(binding.value, input_url, text)


def replace_input_value(value: A.Expression, input_url: str, text: str) -> str:
    if isinstance(value, (A.String, A.IndentedString)):
        if len(value.parts) != 1 or not isinstance(value.parts[0], A.Raw):
            raise MultiPartValueUnsupported(span=value.span)
        part = value.parts[0]
        start, end = span_to_offsets(text, part.span)
        escape = escape_string if isinstance(value, A.String) else escape_indented
        return splice(text, start, end, escape(input_url))

    if isinstance(value, A.Uri):
        # The URI token has no quotes of its own; it becomes a string literal.
        start, end = span_to_offsets(text, value.span)
        return splice(text, start, end, nix_string(input_url))

    raise UnsupportedValueKind(kind=value.kind, span=value.span)
