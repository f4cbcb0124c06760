"""Parser for the climb language.

Transforms a token list into a :class:`~climb.ast_nodes.Program` using
precedence climbing for expressions and recursive descent for
statements. There is no error recovery: the first error aborts the
parse.
"""

from __future__ import annotations

from climb.ast_nodes import (
    BINARY_OPS,
    LOWEST,
    UNARY,
    Binary,
    BinaryOp,
    BlockStatement,
    Expression,
    ExpressionStatement,
    For,
    If,
    Program,
    Statement,
    Unary,
    UnaryOp,
    Value,
    Var,
    While,
)
from climb.errors import (
    InvalidAssignmentTarget,
    NestingTooDeep,
    UnexpectedEof,
    UnexpectedToken,
    UnmatchedLeftParen,
)
from climb.lexer import Lexer
from climb.source import Span
from climb.tokens import Token, TokenKind

DEFAULT_MAX_DEPTH = 200


class Parser:
    """Parses a list of tokens into a climb AST."""

    def __init__(self, tokens: list[Token], *, max_depth: int = DEFAULT_MAX_DEPTH) -> None:
        self.tokens = tokens
        self.pos = 0
        self.max_depth = max_depth
        self.depth = 0

    # ── Token access ─────────────────────────────────────────────

    def _current(self) -> Token | None:
        if self.pos < len(self.tokens):
            return self.tokens[self.pos]
        return None

    def _at(self, kind: TokenKind) -> bool:
        tok = self._current()
        return tok is not None and tok.kind == kind

    def _advance(self) -> Token:
        tok = self.tokens[self.pos]
        self.pos += 1
        return tok

    def _expect(self, kind: TokenKind) -> Token:
        tok = self._current()
        if tok is None:
            raise UnexpectedEof()
        if tok.kind != kind:
            raise UnexpectedToken(tok)
        return self._advance()

    def _descend(self) -> None:
        self.depth += 1
        if self.depth > self.max_depth:
            tok = self._current() or self.tokens[-1]
            raise NestingTooDeep(tok, self.max_depth)

    # ── Top-level parsing ────────────────────────────────────────

    def parse(self) -> Program:
        """Parse the entire token list into a Program."""
        body: list[Statement] = []
        while self._current() is not None:
            body.append(self._parse_statement())
        return Program(body)

    # ── Statements ───────────────────────────────────────────────

    def _parse_statement(self) -> Statement:
        tok = self._current()
        if tok is None:
            raise UnexpectedEof()

        if tok.kind == TokenKind.IF:
            return self._parse_if()
        if tok.kind == TokenKind.WHILE:
            return self._parse_while()
        if tok.kind == TokenKind.FOR:
            return self._parse_for()
        if tok.kind == TokenKind.LEFT_BLOCK:
            body, span = self._parse_block()
            return BlockStatement(body, span)

        expr = self._parse_expression(LOWEST)
        semi = self._expect(TokenKind.SEMICOLON)
        return ExpressionStatement(expr, tok.span.to(semi.span))

    def _parse_block(self) -> tuple[list[Statement], Span]:
        """Parse ``{ Stmt* }`` and return the statements with the block span."""
        open_tok = self._expect(TokenKind.LEFT_BLOCK)
        self._descend()
        try:
            body: list[Statement] = []
            while not self._at(TokenKind.RIGHT_BLOCK):
                if self._current() is None:
                    raise UnexpectedEof()
                body.append(self._parse_statement())
        finally:
            self.depth -= 1
        close_tok = self._advance()
        return body, open_tok.span.to(close_tok.span)

    def _parse_condition(self) -> Expression:
        """Parse a parenthesized ``( Expr )`` condition."""
        self._expect(TokenKind.LEFT_PAREN)
        cond = self._parse_expression(LOWEST)
        self._expect(TokenKind.RIGHT_PAREN)
        return cond

    def _parse_if(self) -> If:
        kw = self._advance()
        cond = self._parse_condition()
        then, span = self._parse_block()
        return If(cond, then, kw.span.to(span))

    def _parse_while(self) -> While:
        kw = self._advance()
        cond = self._parse_condition()
        body, span = self._parse_block()
        return While(cond, body, kw.span.to(span))

    def _parse_for(self) -> For:
        kw = self._advance()
        self._expect(TokenKind.LEFT_PAREN)
        init = self._parse_optional_expression(TokenKind.SEMICOLON)
        self._expect(TokenKind.SEMICOLON)
        cond = self._parse_optional_expression(TokenKind.SEMICOLON)
        self._expect(TokenKind.SEMICOLON)
        update = self._parse_optional_expression(TokenKind.RIGHT_PAREN)
        self._expect(TokenKind.RIGHT_PAREN)
        body, span = self._parse_block()
        return For(init, cond, update, body, kw.span.to(span))

    def _parse_optional_expression(self, terminator: TokenKind) -> Expression | None:
        if self._at(terminator):
            return None
        return self._parse_expression(LOWEST)

    # ── Precedence climbing ──────────────────────────────────────

    def parse_expression(self) -> Expression:
        """Parse a single expression that must consume every token."""
        expr = self._parse_expression(LOWEST)
        tok = self._current()
        if tok is not None:
            raise UnexpectedToken(tok)
        return expr

    def _parse_expression(self, min_prec: int) -> Expression:
        """Parse ``Primary { BinOp Expr(q) }`` for operators binding at *min_prec*."""
        self._descend()
        try:
            lhs = self._parse_primary()

            while (tok := self._current()) is not None and tok.kind in BINARY_OPS:
                op = BINARY_OPS[tok.kind]
                info = op.info
                if not info.binds_at(min_prec):
                    break
                self._advance()
                if op == BinaryOp.ASSIGN and not isinstance(lhs, Var):
                    raise InvalidAssignmentTarget(tok)
                rhs = self._parse_expression(info.next_min_prec())
                lhs = Binary(lhs, op, rhs, lhs.span.to(rhs.span))

            return lhs
        finally:
            self.depth -= 1

    def _parse_primary(self) -> Expression:
        tok = self._current()
        if tok is None:
            raise UnexpectedEof()

        if tok.kind == TokenKind.NUM:
            self._advance()
            return Value(tok.value, tok.span)

        if tok.kind == TokenKind.IDENT:
            self._advance()
            return Var(tok.value, tok.span)

        if tok.kind == TokenKind.MINUS:
            self._advance()
            operand = self._parse_expression(UNARY)
            return Unary(UnaryOp.MINUS, operand, tok.span.to(operand.span))

        if tok.kind == TokenKind.LEFT_PAREN:
            self._advance()
            expr = self._parse_expression(LOWEST)
            if not self._at(TokenKind.RIGHT_PAREN):
                raise UnmatchedLeftParen(tok)
            self._advance()
            return expr

        raise UnexpectedToken(tok)


def parse(source: str, *, max_depth: int = DEFAULT_MAX_DEPTH) -> Program:
    """Lex and parse *source* into a Program."""
    tokens = Lexer(source).lex()
    return Parser(tokens, max_depth=max_depth).parse()


def parse_expression(source: str, *, max_depth: int = DEFAULT_MAX_DEPTH) -> Expression:
    """Lex and parse *source* as one bare expression (no trailing ``;``)."""
    tokens = Lexer(source).lex()
    return Parser(tokens, max_depth=max_depth).parse_expression()
