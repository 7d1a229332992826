from __future__ import annotations

from dataclasses import dataclass

from .spans import Span


@dataclass(frozen=True, slots=True)
class Node:
    span: Span

    @property
    def kind(self) -> str:
        return type(self).__name__


# ---------------------------------------------------------------------------
# String parts and attribute keys
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Raw(Node):
    """Literal text inside a string, or a bare identifier used as a key."""

    content: str  # raw source text, escapes are not processed


@dataclass(frozen=True, slots=True)
class Interpolation(Node):
    """`${ expression }`; the span includes the `${` and `}` delimiters."""

    expression: "Expression"


Part = Raw | Interpolation


# ---------------------------------------------------------------------------
# Expressions the patcher understands
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class String(Node):
    # Part spans exclude the quotes; the node span includes them.
    parts: tuple[Part, ...] = ()


@dataclass(frozen=True, slots=True)
class IndentedString(Node):
    parts: tuple[Part, ...] = ()


@dataclass(frozen=True, slots=True)
class Uri(Node):
    uri: str


@dataclass(frozen=True, slots=True)
class KeyValue(Node):
    """`a.b.c = value;`, the span runs from the first key to the `;`."""

    path: tuple["Part | String", ...]
    value: "Expression"


@dataclass(frozen=True, slots=True)
class Inherit(Node):
    """`inherit a b;` or `inherit (source) a b;`."""

    names: tuple["Part | String", ...] = ()
    source: "Expression | None" = None


Binding = KeyValue | Inherit


@dataclass(frozen=True, slots=True)
class Map(Node):
    bindings: tuple[Binding, ...] = ()
    recursive: bool = False


@dataclass(frozen=True, slots=True)
class FunctionArgument(Node):
    identifier: str
    default: "Expression | None" = None


@dataclass(frozen=True, slots=True)
class FunctionHeadSimple(Node):
    """`x: body`"""

    identifier: str


@dataclass(frozen=True, slots=True)
class FunctionHeadDestructured(Node):
    """`{ a, b ? d, ... } @ x: body`.

    The span covers the braces only, never the `@ x` binding.
    """

    arguments: tuple[FunctionArgument, ...] = ()
    ellipsis: bool = False
    identifier: str | None = None


FunctionHead = FunctionHeadSimple | FunctionHeadDestructured


@dataclass(frozen=True, slots=True)
class Function(Node):
    head: FunctionHead
    body: "Expression"


# ---------------------------------------------------------------------------
# Everything else. Parsed so whole flakes load, never valid as an input url.
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Identifier(Node):
    name: str


@dataclass(frozen=True, slots=True)
class Integer(Node):
    value: int


@dataclass(frozen=True, slots=True)
class Float(Node):
    value: float


@dataclass(frozen=True, slots=True)
class Path(Node):
    path: str


@dataclass(frozen=True, slots=True)
class SearchPath(Node):
    path: str  # without the angle brackets


@dataclass(frozen=True, slots=True)
class List(Node):
    elements: tuple["Expression", ...] = ()


@dataclass(frozen=True, slots=True)
class Apply(Node):
    function: "Expression"
    argument: "Expression"


@dataclass(frozen=True, slots=True)
class Select(Node):
    expression: "Expression"
    path: tuple["Part | String", ...]
    default: "Expression | None" = None


@dataclass(frozen=True, slots=True)
class HasAttr(Node):
    expression: "Expression"
    path: tuple["Part | String", ...]


@dataclass(frozen=True, slots=True)
class BinaryOp(Node):
    operator: str
    left: "Expression"
    right: "Expression"


@dataclass(frozen=True, slots=True)
class UnaryOp(Node):
    operator: str  # "!" or "-"
    operand: "Expression"


@dataclass(frozen=True, slots=True)
class IfThenElse(Node):
    predicate: "Expression"
    then: "Expression"
    else_: "Expression"


@dataclass(frozen=True, slots=True)
class LetIn(Node):
    bindings: tuple[Binding, ...]
    target: "Expression"


@dataclass(frozen=True, slots=True)
class With(Node):
    expression: "Expression"
    target: "Expression"


@dataclass(frozen=True, slots=True)
class Assert(Node):
    expression: "Expression"
    target: "Expression"


Expression = (
    Map
    | String
    | IndentedString
    | Uri
    | Function
    | Identifier
    | Integer
    | Float
    | Path
    | SearchPath
    | List
    | Apply
    | Select
    | HasAttr
    | BinaryOp
    | UnaryOp
    | IfThenElse
    | LetIn
    | With
    | Assert
)
