from __future__ import annotations

import re
from dataclasses import dataclass

from .errors import ParseError
from .spans import Position, Span
from .tokens import KEYWORDS, Token, TokenKind


_IDENT_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_'\-]*")
_INT_RE = re.compile(r"[0-9]+")
_FLOAT_RE = re.compile(r"(?:[1-9][0-9]*\.[0-9]*|0?\.[0-9]+)(?:[Ee][+-]?[0-9]+)?")
_PATH_RE = re.compile(r"(?:[A-Za-z0-9._\-+]*|~)(?:/[A-Za-z0-9._\-+]+)+/?")
_SPATH_RE = re.compile(r"<[A-Za-z0-9._\-+]+(?:/[A-Za-z0-9._\-+]+)*>")
_URI_RE = re.compile(r"[A-Za-z][A-Za-z0-9+\-.]*:[A-Za-z0-9%/?:@&=+$,\-_.!~*']+")

# On equal length the earlier entry wins, like the flex rules of the Nix lexer.
_WORD_RULES: tuple[tuple[re.Pattern[str], TokenKind], ...] = (
    (_IDENT_RE, TokenKind.IDENT),
    (_INT_RE, TokenKind.INT),
    (_FLOAT_RE, TokenKind.FLOAT),
    (_PATH_RE, TokenKind.PATH),
    (_SPATH_RE, TokenKind.SPATH),
    (_URI_RE, TokenKind.URI),
)

_PUNCT: tuple[tuple[str, TokenKind], ...] = (
    ("...", TokenKind.ELLIPSIS),
    ("==", TokenKind.EQEQ),
    ("!=", TokenKind.NEQ),
    ("<=", TokenKind.LEQ),
    (">=", TokenKind.GEQ),
    ("&&", TokenKind.AND),
    ("||", TokenKind.OR),
    ("->", TokenKind.IMPL),
    ("//", TokenKind.UPDATE),
    ("++", TokenKind.CONCAT),
    ("|>", TokenKind.PIPE_RIGHT),
    ("<|", TokenKind.PIPE_LEFT),
    ("{", TokenKind.LBRACE),
    ("}", TokenKind.RBRACE),
    ("[", TokenKind.LBRACKET),
    ("]", TokenKind.RBRACKET),
    ("(", TokenKind.LPAREN),
    (")", TokenKind.RPAREN),
    (";", TokenKind.SEMI),
    (",", TokenKind.COMMA),
    (".", TokenKind.DOT),
    ("=", TokenKind.EQ),
    (":", TokenKind.COLON),
    ("@", TokenKind.AT),
    ("?", TokenKind.QUESTION),
    ("+", TokenKind.PLUS),
    ("-", TokenKind.MINUS),
    ("*", TokenKind.STAR),
    ("/", TokenKind.SLASH),
    ("!", TokenKind.NOT),
    ("<", TokenKind.LT),
    (">", TokenKind.GT),
)

# Lexer modes kept on a stack; the bottom (empty stack) is expression mode.
_STRING = "string"
_INDENTED = "indented"
_INTERP = "interp"
_BRACE = "brace"


@dataclass(slots=True)
class _Cursor:
    file: str
    src: str
    i: int = 0
    line: int = 1
    col: int = 1

    def eof(self) -> bool:
        return self.i >= len(self.src)

    def peek(self, n: int = 0) -> str:
        j = self.i + n
        if j >= len(self.src):
            return ""
        return self.src[j]

    def startswith(self, s: str) -> bool:
        return self.src.startswith(s, self.i)

    def advance(self, n: int = 1) -> None:
        for _ in range(n):
            if self.eof():
                return
            ch = self.src[self.i]
            self.i += 1
            if ch == "\n":
                self.line += 1
                self.col = 1
            else:
                self.col += 1

    def pos(self) -> Position:
        return Position(line=self.line, column=self.col)


def tokenize(src: str, *, file: str = "<memory>") -> list[Token]:
    cur = _Cursor(file=file, src=src)
    tokens: list[Token] = []
    modes: list[str] = []

    def make_span(start: Position, end: Position) -> Span:
        return Span(start=start, end=end, file=file)

    def emit(kind: TokenKind, lexeme: str, start: Position) -> None:
        tokens.append(Token(kind, lexeme, make_span(start, cur.pos())))

    def error_at(start: Position, msg: str, hint: str | None = None) -> ParseError:
        end = cur.pos()
        if end < start:
            end = start
        return ParseError(span=make_span(start, end), message=msg, hint=hint)

    while not cur.eof():
        mode = modes[-1] if modes else None

        if mode == _STRING:
            _string_body(cur, modes, emit)
            continue
        if mode == _INDENTED:
            _indented_body(cur, modes, emit)
            continue

        ch = cur.peek()

        # whitespace
        if ch in " \t\r\n":
            cur.advance()
            continue

        # line comment #
        if ch == "#":
            while not cur.eof() and cur.peek() != "\n":
                cur.advance()
            continue

        # block comment /* ... */
        if ch == "/" and cur.peek(1) == "*":
            start = cur.pos()
            cur.advance(2)
            while not cur.eof():
                if cur.peek() == "*" and cur.peek(1) == "/":
                    cur.advance(2)
                    break
                cur.advance()
            else:
                raise error_at(start, "unterminated block comment", hint="add closing */")
            continue

        start = cur.pos()

        if ch == '"':
            cur.advance()
            emit(TokenKind.DQUOTE, '"', start)
            modes.append(_STRING)
            continue

        if cur.startswith("''"):
            cur.advance(2)
            emit(TokenKind.IND_QUOTE, "''", start)
            modes.append(_INDENTED)
            continue

        if cur.startswith("${"):
            cur.advance(2)
            emit(TokenKind.DOLLAR_CURLY, "${", start)
            modes.append(_INTERP)
            continue

        if ch == "{":
            cur.advance()
            emit(TokenKind.LBRACE, "{", start)
            modes.append(_BRACE)
            continue

        if ch == "}":
            cur.advance()
            if modes:
                modes.pop()
            emit(TokenKind.RBRACE, "}", start)
            continue

        # words: identifiers, numbers, paths, uris (longest match)
        best: tuple[int, TokenKind] | None = None
        for rx, kind in _WORD_RULES:
            m = rx.match(src, cur.i)
            if m and m.end() > cur.i and (best is None or m.end() - cur.i > best[0]):
                best = (m.end() - cur.i, kind)
        if best is not None:
            length, kind = best
            lex = src[cur.i : cur.i + length]
            if kind == TokenKind.PATH and lex.endswith("/"):
                raise error_at(start, f"path {lex!r} has a trailing slash", hint="remove the trailing /")
            if kind == TokenKind.IDENT:
                kind = KEYWORDS.get(lex, TokenKind.IDENT)
            cur.advance(length)
            emit(kind, lex, start)
            continue

        for lex, kind in _PUNCT:
            if cur.startswith(lex):
                cur.advance(len(lex))
                emit(kind, lex, start)
                break
        else:
            raise error_at(
                start,
                f"unexpected character {ch!r}",
                hint="remove the character or replace with valid Nix syntax",
            )

    if modes and modes[-1] in (_STRING, _INDENTED):
        eof_pos = cur.pos()
        raise ParseError(
            span=make_span(eof_pos, eof_pos),
            message="unterminated string literal",
            hint="close the quote",
        )

    eof_pos = cur.pos()
    tokens.append(Token(TokenKind.EOF, "", make_span(eof_pos, eof_pos)))
    return tokens


def _string_body(cur: _Cursor, modes: list[str], emit) -> None:
    """Scan a double-quoted string up to its end or the next interpolation."""
    start = cur.pos()
    begin = cur.i
    while not cur.eof():
        c = cur.peek()
        if c == '"':
            emit(TokenKind.STR_TEXT, cur.src[begin : cur.i], start)
            quote = cur.pos()
            cur.advance()
            emit(TokenKind.DQUOTE, '"', quote)
            modes.pop()
            return
        if c == "\\":
            cur.advance(2)
            continue
        if c == "$" and cur.peek(1) == "$":
            cur.advance(2)
            continue
        if c == "$" and cur.peek(1) == "{":
            emit(TokenKind.STR_TEXT, cur.src[begin : cur.i], start)
            interp = cur.pos()
            cur.advance(2)
            emit(TokenKind.DOLLAR_CURLY, "${", interp)
            modes.append(_INTERP)
            return
        cur.advance()
    # Unterminated; tokenize() reports it once the input is exhausted.


def _indented_body(cur: _Cursor, modes: list[str], emit) -> None:
    """Scan an indented ('') string up to its end or the next interpolation."""
    start = cur.pos()
    begin = cur.i
    while not cur.eof():
        if cur.startswith("''"):
            nxt = cur.peek(2)
            if nxt == "'" or nxt == "$":
                cur.advance(3)
                continue
            if nxt == "\\":
                cur.advance(4)
                continue
            emit(TokenKind.STR_TEXT, cur.src[begin : cur.i], start)
            quote = cur.pos()
            cur.advance(2)
            emit(TokenKind.IND_QUOTE, "''", quote)
            modes.pop()
            return
        if cur.peek() == "$" and cur.peek(1) == "$":
            cur.advance(2)
            continue
        if cur.peek() == "$" and cur.peek(1) == "{":
            emit(TokenKind.STR_TEXT, cur.src[begin : cur.i], start)
            interp = cur.pos()
            cur.advance(2)
            emit(TokenKind.DOLLAR_CURLY, "${", interp)
            modes.append(_INTERP)
            return
        cur.advance()
