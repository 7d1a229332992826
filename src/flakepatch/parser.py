from __future__ import annotations

from dataclasses import dataclass

from . import ast as A
from .errors import ParseError
from .spans import Span
from .tokens import Token, TokenKind


def _span_of(v: object) -> Span:
    # Token and AST nodes both carry .span.
    sp = getattr(v, "span", None)
    if sp is None:
        raise TypeError(f"semantic value has no span: {type(v)!r}")
    return sp


def join_span(*vals: object) -> Span:
    """Join spans of tokens/nodes into a single span (from first to last)."""
    real = [v for v in vals if v is not None]
    if not real:
        raise ValueError("join_span() requires at least one value")
    first = _span_of(real[0])
    last = _span_of(real[-1])
    return Span(start=first.start, end=last.end, file=first.file)


# Tokens that can begin an argument of a function application.
_SIMPLE_START = frozenset(
    {
        TokenKind.IDENT,
        TokenKind.INT,
        TokenKind.FLOAT,
        TokenKind.PATH,
        TokenKind.SPATH,
        TokenKind.URI,
        TokenKind.DQUOTE,
        TokenKind.IND_QUOTE,
        TokenKind.LPAREN,
        TokenKind.LBRACE,
        TokenKind.LBRACKET,
        TokenKind.REC,
    }
)

# Binary operators from loosest to tightest binding: (kinds, associativity).
_BINARY_LEVELS: tuple[tuple[frozenset[TokenKind], str], ...] = (
    (frozenset({TokenKind.PIPE_RIGHT}), "left"),
    (frozenset({TokenKind.PIPE_LEFT}), "right"),
    (frozenset({TokenKind.IMPL}), "right"),
    (frozenset({TokenKind.OR}), "left"),
    (frozenset({TokenKind.AND}), "left"),
    (frozenset({TokenKind.EQEQ, TokenKind.NEQ}), "none"),
    (frozenset({TokenKind.LT, TokenKind.GT, TokenKind.LEQ, TokenKind.GEQ}), "none"),
    (frozenset({TokenKind.UPDATE}), "right"),
)
# `!` sits here, then:
_ARITH_LEVELS: tuple[tuple[frozenset[TokenKind], str], ...] = (
    (frozenset({TokenKind.PLUS, TokenKind.MINUS}), "left"),
    (frozenset({TokenKind.STAR, TokenKind.SLASH}), "left"),
    (frozenset({TokenKind.CONCAT}), "right"),
)
# then `?`, unary `-`, application and select.


@dataclass(slots=True)
class Parser:
    tokens: list[Token]
    i: int = 0

    # ------------------------------------------------------------------
    # token helpers
    # ------------------------------------------------------------------

    def peek(self, n: int = 0) -> Token:
        j = min(self.i + n, len(self.tokens) - 1)
        return self.tokens[j]

    def at(self, *kinds: TokenKind) -> bool:
        return self.peek().kind in kinds

    def advance(self) -> Token:
        tok = self.peek()
        if tok.kind != TokenKind.EOF:
            self.i += 1
        return tok

    def expect(self, kind: TokenKind, hint: str | None = None) -> Token:
        tok = self.peek()
        if tok.kind != kind:
            raise self.unexpected(tok, hint or f"expected {kind.value}")
        return self.advance()

    def unexpected(self, tok: Token, hint: str | None = None) -> ParseError:
        what = "end of file" if tok.kind == TokenKind.EOF else tok.kind.value
        return ParseError(span=tok.span, message=f"unexpected {what}", hint=hint)

    # ------------------------------------------------------------------
    # entry point
    # ------------------------------------------------------------------

    def parse(self) -> A.Expression:
        expr = self.parse_expr()
        if not self.at(TokenKind.EOF):
            raise self.unexpected(self.peek(), hint="expected end of file")
        return expr

    # ------------------------------------------------------------------
    # expressions
    # ------------------------------------------------------------------

    def parse_expr(self) -> A.Expression:
        tok = self.peek()

        if tok.kind == TokenKind.IDENT and self.peek(1).kind == TokenKind.COLON:
            self.advance()
            self.advance()
            head = A.FunctionHeadSimple(span=tok.span, identifier=tok.lexeme)
            body = self.parse_expr()
            return A.Function(span=join_span(tok, body), head=head, body=body)

        if (
            tok.kind == TokenKind.IDENT
            and self.peek(1).kind == TokenKind.AT
            and self.peek(2).kind == TokenKind.LBRACE
        ):
            self.advance()
            self.advance()
            head = self.parse_formals(identifier=tok.lexeme)
            self.expect(TokenKind.COLON, hint="a function head must be followed by `:`")
            body = self.parse_expr()
            return A.Function(span=join_span(tok, body), head=head, body=body)

        if tok.kind == TokenKind.LBRACE and self.looks_like_formals():
            head = self.parse_formals(identifier=None)
            if self.at(TokenKind.AT):
                self.advance()
                name = self.expect(TokenKind.IDENT, hint="expected a name after `@`")
                head = A.FunctionHeadDestructured(
                    span=head.span,
                    arguments=head.arguments,
                    ellipsis=head.ellipsis,
                    identifier=name.lexeme,
                )
            self.expect(TokenKind.COLON, hint="a function head must be followed by `:`")
            body = self.parse_expr()
            return A.Function(span=join_span(head, body), head=head, body=body)

        if tok.kind == TokenKind.ASSERT:
            self.advance()
            cond = self.parse_expr()
            self.expect(TokenKind.SEMI)
            target = self.parse_expr()
            return A.Assert(span=join_span(tok, target), expression=cond, target=target)

        if tok.kind == TokenKind.WITH:
            self.advance()
            scope = self.parse_expr()
            self.expect(TokenKind.SEMI)
            target = self.parse_expr()
            return A.With(span=join_span(tok, target), expression=scope, target=target)

        if tok.kind == TokenKind.LET and self.peek(1).kind != TokenKind.LBRACE:
            self.advance()
            bindings = self.parse_bindings(TokenKind.IN)
            self.expect(TokenKind.IN, hint="`let` bindings must be followed by `in`")
            target = self.parse_expr()
            return A.LetIn(span=join_span(tok, target), bindings=bindings, target=target)

        if tok.kind == TokenKind.IF:
            self.advance()
            pred = self.parse_expr()
            self.expect(TokenKind.THEN)
            then = self.parse_expr()
            self.expect(TokenKind.ELSE)
            else_ = self.parse_expr()
            return A.IfThenElse(span=join_span(tok, else_), predicate=pred, then=then, else_=else_)

        return self.parse_binary(0)

    def looks_like_formals(self) -> bool:
        """Decide whether the `{` under the cursor opens a function head."""
        first = self.peek(1)
        second = self.peek(2)
        if first.kind == TokenKind.ELLIPSIS:
            return True
        if first.kind == TokenKind.RBRACE:
            return second.kind in (TokenKind.COLON, TokenKind.AT)
        if first.kind == TokenKind.IDENT:
            if second.kind in (TokenKind.COMMA, TokenKind.QUESTION):
                return True
            if second.kind == TokenKind.RBRACE:
                return self.peek(3).kind in (TokenKind.COLON, TokenKind.AT)
        return False

    def parse_formals(self, identifier: str | None) -> A.FunctionHeadDestructured:
        lbrace = self.expect(TokenKind.LBRACE)
        arguments: list[A.FunctionArgument] = []
        ellipsis = False
        while not self.at(TokenKind.RBRACE):
            if self.at(TokenKind.ELLIPSIS):
                self.advance()
                ellipsis = True
                break
            name = self.expect(TokenKind.IDENT, hint="expected a parameter name or `...`")
            default = None
            if self.at(TokenKind.QUESTION):
                self.advance()
                default = self.parse_expr()
            arguments.append(
                A.FunctionArgument(span=join_span(name, default or name), identifier=name.lexeme, default=default)
            )
            if not self.at(TokenKind.COMMA):
                break
            self.advance()
        rbrace = self.expect(TokenKind.RBRACE, hint="`...` must be the last parameter")
        return A.FunctionHeadDestructured(
            span=join_span(lbrace, rbrace),
            arguments=tuple(arguments),
            ellipsis=ellipsis,
            identifier=identifier,
        )

    def parse_binary(self, level: int) -> A.Expression:
        if level == len(_BINARY_LEVELS):
            return self.parse_not()
        kinds, assoc = _BINARY_LEVELS[level]
        left = self.parse_binary(level + 1)
        while self.peek().kind in kinds:
            op = self.advance()
            if assoc == "right":
                right = self.parse_binary(level)
                return A.BinaryOp(span=join_span(left, right), operator=op.lexeme, left=left, right=right)
            right = self.parse_binary(level + 1)
            left = A.BinaryOp(span=join_span(left, right), operator=op.lexeme, left=left, right=right)
            if assoc == "none":
                break
        return left

    def parse_not(self) -> A.Expression:
        if self.at(TokenKind.NOT):
            op = self.advance()
            operand = self.parse_not()
            return A.UnaryOp(span=join_span(op, operand), operator="!", operand=operand)
        return self.parse_arith(0)

    def parse_arith(self, level: int) -> A.Expression:
        if level == len(_ARITH_LEVELS):
            return self.parse_has_attr()
        kinds, assoc = _ARITH_LEVELS[level]
        left = self.parse_arith(level + 1)
        while self.peek().kind in kinds:
            op = self.advance()
            if assoc == "right":
                right = self.parse_arith(level)
                return A.BinaryOp(span=join_span(left, right), operator=op.lexeme, left=left, right=right)
            right = self.parse_arith(level + 1)
            left = A.BinaryOp(span=join_span(left, right), operator=op.lexeme, left=left, right=right)
        return left

    def parse_has_attr(self) -> A.Expression:
        expr = self.parse_negate()
        if self.at(TokenKind.QUESTION):
            self.advance()
            path = self.parse_attrpath()
            return A.HasAttr(span=join_span(expr, path[-1]), expression=expr, path=path)
        return expr

    def parse_negate(self) -> A.Expression:
        if self.at(TokenKind.MINUS):
            op = self.advance()
            operand = self.parse_negate()
            return A.UnaryOp(span=join_span(op, operand), operator="-", operand=operand)
        return self.parse_apply()

    def parse_apply(self) -> A.Expression:
        expr = self.parse_select()
        while self.peek().kind in _SIMPLE_START:
            arg = self.parse_select()
            expr = A.Apply(span=join_span(expr, arg), function=expr, argument=arg)
        return expr

    def parse_select(self) -> A.Expression:
        expr = self.parse_simple()
        if not self.at(TokenKind.DOT):
            return expr
        self.advance()
        path = self.parse_attrpath()
        if self.at(TokenKind.OR_KW):
            self.advance()
            default = self.parse_select()
            return A.Select(span=join_span(expr, default), expression=expr, path=path, default=default)
        return A.Select(span=join_span(expr, path[-1]), expression=expr, path=path)

    def parse_simple(self) -> A.Expression:
        tok = self.peek()
        kind = tok.kind

        if kind == TokenKind.IDENT:
            self.advance()
            return A.Identifier(span=tok.span, name=tok.lexeme)
        if kind == TokenKind.INT:
            self.advance()
            return A.Integer(span=tok.span, value=int(tok.lexeme))
        if kind == TokenKind.FLOAT:
            self.advance()
            return A.Float(span=tok.span, value=float(tok.lexeme))
        if kind == TokenKind.PATH:
            self.advance()
            return A.Path(span=tok.span, path=tok.lexeme)
        if kind == TokenKind.SPATH:
            self.advance()
            return A.SearchPath(span=tok.span, path=tok.lexeme[1:-1])
        if kind == TokenKind.URI:
            self.advance()
            return A.Uri(span=tok.span, uri=tok.lexeme)
        if kind == TokenKind.DQUOTE:
            return self.parse_string()
        if kind == TokenKind.IND_QUOTE:
            return self.parse_indented_string()
        if kind == TokenKind.LPAREN:
            self.advance()
            inner = self.parse_expr()
            self.expect(TokenKind.RPAREN, hint="close the parenthesis")
            return inner
        if kind == TokenKind.REC:
            self.advance()
            attrs = self.parse_attrset()
            return A.Map(span=join_span(tok, attrs), bindings=attrs.bindings, recursive=True)
        if kind == TokenKind.LET and self.peek(1).kind == TokenKind.LBRACE:
            raise ParseError(
                span=tok.span,
                message="legacy `let { ... }` syntax is not supported",
                hint="use `let ... in ...` instead",
            )
        if kind == TokenKind.LBRACE:
            return self.parse_attrset()
        if kind == TokenKind.LBRACKET:
            self.advance()
            elements: list[A.Expression] = []
            while not self.at(TokenKind.RBRACKET):
                if self.at(TokenKind.EOF):
                    raise self.unexpected(self.peek(), hint="close the list with ]")
                elements.append(self.parse_select())
            close = self.advance()
            return A.List(span=join_span(tok, close), elements=tuple(elements))

        raise self.unexpected(tok, hint="expected an expression")

    # ------------------------------------------------------------------
    # strings
    # ------------------------------------------------------------------

    def parse_string(self) -> A.String:
        open_ = self.expect(TokenKind.DQUOTE)
        parts = self.parse_parts(TokenKind.DQUOTE)
        close = self.expect(TokenKind.DQUOTE, hint="close the string")
        return A.String(span=join_span(open_, close), parts=parts)

    def parse_indented_string(self) -> A.IndentedString:
        open_ = self.expect(TokenKind.IND_QUOTE)
        parts = self.parse_parts(TokenKind.IND_QUOTE)
        close = self.expect(TokenKind.IND_QUOTE, hint="close the indented string with ''")
        return A.IndentedString(span=join_span(open_, close), parts=parts)

    def parse_parts(self, closing: TokenKind) -> tuple[A.Part, ...]:
        parts: list[A.Part] = []
        empty: A.Raw | None = None
        while not self.at(closing):
            tok = self.peek()
            if tok.kind == TokenKind.STR_TEXT:
                self.advance()
                raw = A.Raw(span=tok.span, content=tok.lexeme)
                if tok.lexeme:
                    parts.append(raw)
                elif empty is None:
                    empty = raw
                continue
            if tok.kind == TokenKind.DOLLAR_CURLY:
                parts.append(self.parse_interpolation())
                continue
            raise self.unexpected(tok, hint="close the string")
        if not parts and empty is not None:
            # An empty literal still has a (zero-width) text part to replace.
            parts.append(empty)
        return tuple(parts)

    def parse_interpolation(self) -> A.Interpolation:
        open_ = self.expect(TokenKind.DOLLAR_CURLY)
        expr = self.parse_expr()
        close = self.expect(TokenKind.RBRACE, hint="close the interpolation with }")
        return A.Interpolation(span=join_span(open_, close), expression=expr)

    # ------------------------------------------------------------------
    # attribute sets and bindings
    # ------------------------------------------------------------------

    def parse_attrset(self) -> A.Map:
        open_ = self.expect(TokenKind.LBRACE)
        bindings = self.parse_bindings(TokenKind.RBRACE)
        close = self.expect(TokenKind.RBRACE, hint="close the attribute set with }")
        return A.Map(span=join_span(open_, close), bindings=bindings)

    def parse_bindings(self, closing: TokenKind) -> tuple[A.Binding, ...]:
        bindings: list[A.Binding] = []
        while not self.at(closing):
            if self.at(TokenKind.EOF):
                raise self.unexpected(self.peek(), hint=f"expected {closing.value}")
            if self.at(TokenKind.INHERIT):
                bindings.append(self.parse_inherit())
                continue
            path = self.parse_attrpath()
            self.expect(TokenKind.EQ, hint="expected `=` after the attribute name")
            value = self.parse_expr()
            semi = self.expect(TokenKind.SEMI, hint="terminate the binding with `;`")
            bindings.append(A.KeyValue(span=join_span(path[0], semi), path=path, value=value))
        return tuple(bindings)

    def parse_inherit(self) -> A.Inherit:
        kw = self.expect(TokenKind.INHERIT)
        source = None
        if self.at(TokenKind.LPAREN):
            self.advance()
            source = self.parse_expr()
            self.expect(TokenKind.RPAREN)
        names: list[A.Part | A.String] = []
        while not self.at(TokenKind.SEMI):
            names.append(self.parse_attr_name())
        semi = self.expect(TokenKind.SEMI)
        return A.Inherit(span=join_span(kw, semi), names=tuple(names), source=source)

    def parse_attrpath(self) -> tuple[A.Part | A.String, ...]:
        parts = [self.parse_attr_name()]
        while self.at(TokenKind.DOT):
            self.advance()
            parts.append(self.parse_attr_name())
        return tuple(parts)

    def parse_attr_name(self) -> A.Part | A.String:
        tok = self.peek()
        if tok.kind in (TokenKind.IDENT, TokenKind.OR_KW):
            self.advance()
            return A.Raw(span=tok.span, content=tok.lexeme)
        if tok.kind == TokenKind.DQUOTE:
            return self.parse_string()
        if tok.kind == TokenKind.DOLLAR_CURLY:
            return self.parse_interpolation()
        raise self.unexpected(tok, hint="expected an attribute name")


def parse_tokens(tokens: list[Token]) -> A.Expression:
    return Parser(tokens=tokens).parse()
