from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .spans import Span


class TokenKind(str, Enum):
    # Identifiers and literals
    IDENT = "IDENT"
    INT = "INT"
    FLOAT = "FLOAT"
    PATH = "PATH"
    SPATH = "SPATH"
    URI = "URI"

    # String pieces; STR_TEXT carries the raw source between delimiters
    DQUOTE = '"'
    IND_QUOTE = "''"
    STR_TEXT = "STR_TEXT"
    DOLLAR_CURLY = "${"

    # Punctuation / operators
    LBRACE = "{"
    RBRACE = "}"
    LBRACKET = "["
    RBRACKET = "]"
    LPAREN = "("
    RPAREN = ")"
    SEMI = ";"
    COMMA = ","
    DOT = "."
    ELLIPSIS = "..."
    EQ = "="
    COLON = ":"
    AT = "@"
    QUESTION = "?"
    PLUS = "+"
    MINUS = "-"
    STAR = "*"
    SLASH = "/"
    NOT = "!"
    LT = "<"
    GT = ">"
    LEQ = "<="
    GEQ = ">="
    EQEQ = "=="
    NEQ = "!="
    AND = "&&"
    OR = "||"
    IMPL = "->"
    UPDATE = "//"
    CONCAT = "++"
    PIPE_RIGHT = "|>"
    PIPE_LEFT = "<|"

    # Keywords
    IF = "if"
    THEN = "then"
    ELSE = "else"
    ASSERT = "assert"
    WITH = "with"
    LET = "let"
    IN = "in"
    REC = "rec"
    INHERIT = "inherit"
    OR_KW = "or"

    EOF = "EOF"


KEYWORDS: dict[str, TokenKind] = {
    "if": TokenKind.IF,
    "then": TokenKind.THEN,
    "else": TokenKind.ELSE,
    "assert": TokenKind.ASSERT,
    "with": TokenKind.WITH,
    "let": TokenKind.LET,
    "in": TokenKind.IN,
    "rec": TokenKind.REC,
    "inherit": TokenKind.INHERIT,
    "or": TokenKind.OR_KW,
}


@dataclass(frozen=True, slots=True)
class Token:
    kind: TokenKind
    lexeme: str
    span: Span

    def __repr__(self) -> str:
        return f"Token({self.kind}, {self.lexeme!r}, {self.span.format()})"
