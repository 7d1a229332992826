"""Add a brand new input to a flake."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from . import ast as A
from .attrpath import collect_all_inputs, find_all, find_first, key_segments
from .edits import newline_of, splice, url_declaration
from . import errors
from .errors import UnsupportedExpressionKind
from .outputs import patch_outputs_function
from .positions import (
    indentation_before,
    line_end,
    position_to_offset,
    rest_of_line_is_blank,
    span_to_offsets,
)
from .spans import Span


logger = logging.getLogger(__name__)

# Indentation added inside an `inputs = { };` set that had nothing to copy from.
NESTED_INDENT = "  "


class InsertionLocation(str, Enum):
    TOP = "top"
    BOTTOM = "bottom"

    @classmethod
    def parse(cls, value: str) -> "InsertionLocation":
        try:
            return cls(value.strip().lower())
        except ValueError:
            choices = ", ".join(m.value for m in cls)
            raise ValueError(f"invalid insertion location {value!r} (expected one of: {choices})") from None

    def __str__(self) -> str:
        return self.value


# ---------------------------------------------------------------------------
# Classification of the flake's top level
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class HasInputs:
    # TOP: the first top-level `inputs` binding.
    # BOTTOM: the last declared input (falls back to the TOP binding).
    binding: A.KeyValue
    location: InsertionLocation
    # the binding sits inside `inputs = { ... }` rather than at the top level
    nested: bool = False


@dataclass(frozen=True, slots=True)
class HasOutputs:
    binding: A.KeyValue


@dataclass(frozen=True, slots=True)
class MissingInputs:
    context_span: Span  # the `outputs` binding


@dataclass(frozen=True, slots=True)
class MissingOutputs:
    context_span: Span  # the `inputs` binding


@dataclass(frozen=True, slots=True)
class MissingBoth:
    root_span: Span


AttrClassification = HasInputs | HasOutputs | MissingInputs | MissingOutputs | MissingBoth


def _inputs_binding(tree: A.Expression, location: InsertionLocation) -> HasInputs | None:
    first = find_first(tree, ["inputs"])
    if first is None:
        return None
    if location is InsertionLocation.BOTTOM:
        collected = collect_all_inputs(find_all(tree, ["inputs"]))
        if collected:
            last = collected[-1]
            return HasInputs(binding=last.binding, location=location, nested=last.nested)
    return HasInputs(binding=first, location=location)


def classify(tree: A.Expression, location: InsertionLocation) -> tuple[AttrClassification, ...]:
    """Decide what to do, in the order it has to be done.

    Edits are planned from the spans of the original tree, so the later-in-file
    edit goes first: a splice only moves the text that follows it.
    """
    inputs = _inputs_binding(tree, location)
    outputs = find_first(tree, ["outputs"])

    if inputs is not None and outputs is not None:
        has_outputs = HasOutputs(binding=outputs)
        if inputs.binding.span.start < outputs.span.start:
            return (has_outputs, inputs)
        return (inputs, has_outputs)
    if inputs is not None:
        return (inputs, MissingOutputs(context_span=inputs.binding.span))
    if outputs is not None:
        # MissingInputs inserts above `outputs`, so the function is patched first.
        return (HasOutputs(binding=outputs), MissingInputs(context_span=outputs.span))
    return (MissingBoth(root_span=tree.span),)


# ---------------------------------------------------------------------------
# Edits
# ---------------------------------------------------------------------------


def insert_input(
    tree: A.Expression,
    input_name: str,
    input_url: str,
    text: str,
    insertion_location: InsertionLocation = InsertionLocation.TOP,
) -> str:
    new_text = text
    for attr in classify(tree, insertion_location):
        logger.debug("processing %s", type(attr).__name__)
        new_text = process(attr, new_text, input_name, input_url)
    return new_text


def process(attr: AttrClassification, text: str, input_name: str, input_url: str) -> str:
    if isinstance(attr, HasInputs):
        return _process_inputs(attr, text, input_name, input_url)
    if isinstance(attr, HasOutputs):
        return _process_outputs(attr.binding, text, input_name)
    if isinstance(attr, MissingInputs):
        # No neighbouring input to group with, so keep a blank line before `outputs`.
        declaration = url_declaration(input_name, input_url, qualified=True)
        return insert_above(text, attr.context_span, declaration, blank_line=True)
    if isinstance(attr, MissingOutputs):
        raise errors.MissingOutputs()
    if isinstance(attr, MissingBoth):
        raise errors.MissingInputsAndOutputs()
    raise TypeError(f"unexpected classification: {attr!r}")


def _process_inputs(attr: HasInputs, text: str, input_name: str, input_url: str) -> str:
    binding = attr.binding
    segments = key_segments(binding)
    top = attr.location is InsertionLocation.TOP

    if segments == ["inputs"] and not attr.nested:
        # inputs = { nixpkgs.url = "..."; };
        declaration = url_declaration(input_name, input_url, qualified=False)
        children = find_all(binding.value, None)
        if not children:
            return fill_empty_set(text, binding, declaration)
        anchor = children[0] if top else children[-1]
    else:
        # inputs.nixpkgs.url = "...";  or  nixpkgs.url = "..."; inside a set
        qualified = not attr.nested
        declaration = url_declaration(input_name, input_url, qualified=qualified)
        anchor = binding

    logger.debug(
        "inserting %s %s the binding at %s",
        input_name,
        "above" if top else "below",
        anchor.span.format(),
    )
    if top:
        return insert_above(text, anchor.span, declaration)
    return insert_below(text, anchor.span, declaration)


def _process_outputs(binding: A.KeyValue, text: str, input_name: str) -> str:
    value = binding.value
    if not isinstance(value, A.Function):
        raise UnsupportedExpressionKind(kind=value.kind, span=value.span, context="`outputs`")
    head = value.head
    if isinstance(head, A.FunctionHeadDestructured):
        # outputs = { self, ... } @ inputs: { }
        return patch_outputs_function(head, head.span, input_name, text)
    # outputs = inputs: { }; every input is reachable through the parameter.
    return text


def insert_above(text: str, span: Span, declaration: str, *, blank_line: bool = False) -> str:
    """Put ``declaration`` on its own line above the node at ``span``.

    The node's indentation is reused for both lines. When the node does not
    begin its line the declaration is placed in front of it on the same line.
    """
    start = position_to_offset(text, span.start)
    indentation = indentation_before(text, span)
    if indentation is None:
        return splice(text, start, start, declaration + " ")
    nl = newline_of(text)
    separator = nl + nl if blank_line else nl
    return splice(text, start, start, declaration + separator + indentation)


def insert_below(text: str, span: Span, declaration: str) -> str:
    """Put ``declaration`` on a new line after the node at ``span``."""
    end = position_to_offset(text, span.end)
    indentation = indentation_before(text, span)
    if indentation is None or not rest_of_line_is_blank(text, end):
        return splice(text, end, end, " " + declaration)
    eol = line_end(text, end)
    nl = "\n"
    if eol > 0 and text[eol - 1] == "\r":
        eol -= 1
        nl = "\r\n"
    return splice(text, eol, eol, nl + indentation + declaration)


def fill_empty_set(text: str, binding: A.KeyValue, declaration: str) -> str:
    """Insert the first declaration into `inputs = { };`."""
    value = binding.value
    start, end = span_to_offsets(text, value.span)
    start = text.index("{", start)  # skip a leading `rec`
    indentation = indentation_before(text, binding.span)
    inner = text[start + 1 : end - 1]

    if indentation is None:
        if inner.strip():
            return splice(text, start + 1, start + 1, " " + declaration)
        return splice(text, start, end, "{ " + declaration + " }")

    nl = newline_of(text)
    line = nl + indentation + NESTED_INDENT + declaration
    if inner.strip():
        # keep whatever comments the set holds
        return splice(text, start + 1, start + 1, line)
    return splice(text, start, end, "{" + line + nl + indentation + "}")
