from __future__ import annotations

from dataclasses import dataclass

from .spans import Span


@dataclass(slots=True)
class ParseError(Exception):
    span: Span
    message: str
    hint: str | None = None

    def __str__(self) -> str:
        base = f"{self.span.format()}: {self.message}"
        if self.hint:
            return f"{base}\nhint: {self.hint}"
        return base


class FlakePatchError(Exception):
    """Base class for everything that aborts an edit of a flake manifest."""


@dataclass(slots=True)
class InheritNotSupported(FlakePatchError):
    span: Span

    def __str__(self) -> str:
        return f"`inherit` not supported (at {self.span.format()})"


@dataclass(slots=True)
class UnsupportedExpressionKind(FlakePatchError):
    kind: str
    span: Span
    context: str | None = None

    def __str__(self) -> str:
        what = f"unsupported {self.context} expression type" if self.context else "unsupported expression type"
        return f"{what} {self.kind} (at {self.span.format()})"


@dataclass(slots=True)
class AmbiguousOrUnknownValueShape(FlakePatchError):
    kind: str
    span: Span

    def __str__(self) -> str:
        return (
            f"input url must be a string or a URI literal, found {self.kind} "
            f"(at {self.span.format()})"
        )


UnsupportedValueKind = AmbiguousOrUnknownValueShape


@dataclass(slots=True)
class MultiPartValueUnsupported(FlakePatchError):
    span: Span

    def __str__(self) -> str:
        return (
            f"input url contains an interpolation, only plain strings can be rewritten "
            f"(at {self.span.format()})"
        )


class MissingOutputs(FlakePatchError):
    def __str__(self) -> str:
        return "flake was missing an `outputs` attribute"


class MissingInputs(FlakePatchError):
    def __str__(self) -> str:
        return "flake was missing an `inputs` attribute"


class MissingInputsAndOutputs(FlakePatchError):
    def __str__(self) -> str:
        return "flake was missing both the `inputs` and `outputs` attributes"


@dataclass(slots=True)
class PositionNotFound(FlakePatchError):
    line: int
    column: int

    def __str__(self) -> str:
        return f"could not find {self.line}:{self.column} in input"


@dataclass(slots=True)
class EmptyParameterListUnsupported(FlakePatchError):
    span: Span

    def __str__(self) -> str:
        return (
            f"the `outputs` function doesn't take any arguments (at {self.span.format()}); "
            "replace it with `outputs = { ... }:` and try again"
        )


@dataclass(slots=True)
class FormalNotFound(FlakePatchError):
    name: str
    span: Span

    def __str__(self) -> str:
        return (
            f"could not find `{self.name}` in the `outputs` function arguments "
            f"(at {self.span.format()}), but it existed when parsing it"
        )


class RefError(FlakePatchError):
    """An input reference that cannot be turned into a name and a url."""
