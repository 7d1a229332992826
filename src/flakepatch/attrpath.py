"""Resolve dotted attribute paths however the flake splits them across nested sets."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from . import ast as A
from .errors import InheritNotSupported, UnsupportedExpressionKind


logger = logging.getLogger(__name__)

AttrPath = Sequence[str]


def key_segments(binding: A.KeyValue) -> list[str | None]:
    """Plain text of each key part; None for dynamic parts (never matches)."""
    return [_segment(part) for part in binding.path]


def _segment(part: A.Part | A.String) -> str | None:
    if isinstance(part, A.Raw):
        return part.content
    if isinstance(part, A.String) and len(part.parts) == 1 and isinstance(part.parts[0], A.Raw):
        return part.parts[0].content
    return None


@dataclass(frozen=True, slots=True)
class _Match:
    exact: bool
    remaining: tuple[str, ...] = ()


def _match(binding: A.KeyValue, path: AttrPath) -> _Match | None:
    """Compare ``path`` with the key of ``binding`` segment by segment.

    - the whole path matched: exact (the key may go on, which lets a lookup of
      ``inputs`` land on ``inputs.nixpkgs.url = ...;``)
    - the whole key matched with path segments left over: a prefix, the rest
      has to be looked up inside the binding's value
    - a segment differs: None
    """
    key = key_segments(binding)
    matched = 0
    for have, want in zip(key, path):
        if have != want:
            return None
        matched += 1

    if matched == 0:
        return None
    if matched == len(path):
        return _Match(exact=True)
    if matched == len(key):
        return _Match(exact=False, remaining=tuple(path[matched:]))
    return None


def _bindings_of(expr: A.Expression) -> tuple[A.Binding, ...]:
    if not isinstance(expr, A.Map):
        raise UnsupportedExpressionKind(kind=expr.kind, span=expr.span)
    return expr.bindings


def find_first(expr: A.Expression, path: AttrPath | None) -> A.KeyValue | None:
    """First binding (in source order) matching ``path`` below ``expr``.

    With ``path=None`` the first binding of the set is returned, whatever its
    name. Returns None when nothing matches; raises when the search runs into
    something that is not an attribute set, or into an ``inherit``.
    """
    for binding in _bindings_of(expr):
        if isinstance(binding, A.Inherit):
            raise InheritNotSupported(span=binding.span)
        if path is None:
            return binding

        m = _match(binding, path)
        if m is None:
            continue
        if m.exact:
            return binding

        found = find_first(binding.value, m.remaining)
        if found is not None:
            return found

    return None


def find_all(expr: A.Expression, path: AttrPath | None) -> list[A.KeyValue]:
    """Every binding matching ``path`` below ``expr``, in source order."""
    found: list[A.KeyValue] = []
    for binding in _bindings_of(expr):
        if isinstance(binding, A.Inherit):
            raise InheritNotSupported(span=binding.span)
        if path is None:
            found.append(binding)
            continue

        m = _match(binding, path)
        if m is None:
            continue
        if m.exact:
            found.append(binding)
        else:
            found.extend(find_all(binding.value, m.remaining))

    return found


@dataclass(frozen=True, slots=True)
class DeclaredInput:
    binding: A.KeyValue
    # a child of an `inputs = { ... }` set, so its key does not start with `inputs`
    nested: bool

    @property
    def name(self) -> str | None:
        segments = key_segments(self.binding)
        return segments[0] if self.nested else segments[1]


def collect_all_inputs(bindings: Sequence[A.KeyValue]) -> list[DeclaredInput]:
    """Flatten top-level ``inputs`` bindings into one binding per input.

    ``inputs = { a.url = ...; b = { ... }; }`` contributes its children,
    ``inputs.a = ...`` and ``inputs.a.url = ...`` are kept as they are. Other
    shapes (``inputs.a.inputs.b.follows = ...``) are not input declarations and
    are skipped.
    """
    inputs: list[DeclaredInput] = []
    for binding in bindings:
        segments = key_segments(binding)

        if segments == ["inputs"]:
            if not isinstance(binding.value, A.Map):
                raise UnsupportedExpressionKind(
                    kind=binding.value.kind, span=binding.value.span, context="`inputs`"
                )
            for child in binding.value.bindings:
                if isinstance(child, A.Inherit):
                    raise InheritNotSupported(span=child.span)
                if _is_input_key(key_segments(child)):
                    inputs.append(DeclaredInput(binding=child, nested=True))
                else:
                    logger.debug("skipping non-input binding at %s", child.span.format())
            continue

        if segments[:1] == ["inputs"] and _is_input_key(segments[1:]):
            inputs.append(DeclaredInput(binding=binding, nested=False))
            continue

        logger.debug("skipping non-input binding at %s", binding.span.format())

    return inputs


def _is_input_key(segments: list[str | None]) -> bool:
    # [name] or [name, "url"]
    if not segments or segments[0] is None:
        return False
    return len(segments) == 1 or (len(segments) == 2 and segments[1] == "url")


def literal_text(expr: A.Expression) -> str | None:
    """Raw text of a single-part string or a URI, None for anything else."""
    if isinstance(expr, A.Uri):
        return expr.uri
    if isinstance(expr, (A.String, A.IndentedString)):
        if len(expr.parts) == 1 and isinstance(expr.parts[0], A.Raw):
            return expr.parts[0].content.strip()
    return None


def find_input_url(expr: A.Expression, path: AttrPath) -> str | None:
    found = find_first(expr, path)
    if found is None:
        return None
    return literal_text(found.value)


@dataclass(frozen=True, slots=True)
class InputEntry:
    name: str
    url: str | None
    binding: A.KeyValue


def input_url_of(declared: DeclaredInput) -> str | None:
    binding = declared.binding
    after_name = key_segments(binding)[1 if declared.nested else 2 :]
    if after_name == ["url"]:
        return literal_text(binding.value)
    if isinstance(binding.value, A.Map):
        return find_input_url(binding.value, ["url"])
    return None


def list_inputs(tree: A.Expression) -> list[InputEntry]:
    """Every input declared by the flake, in source order, one entry per name."""
    entries: dict[str, InputEntry] = {}
    for declared in collect_all_inputs(find_all(tree, ["inputs"])):
        name = declared.name
        if name is None:
            continue
        binding = declared.binding
        url = input_url_of(declared)
        seen = entries.get(name)
        if seen is None:
            entries[name] = InputEntry(name=name, url=url, binding=binding)
        elif seen.url is None and url is not None:
            entries[name] = InputEntry(name=name, url=url, binding=seen.binding)
    return list(entries.values())
