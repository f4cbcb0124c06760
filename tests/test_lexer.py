"""Tests for the climb lexer."""

from __future__ import annotations

import pytest

from climb.errors import IntegerLiteralOverflow, InvalidToken, LexicalError
from climb.lexer import Lexer
from climb.source import Span
from climb.tokens import TokenKind
from tests.helpers import kinds


def lex(source: str) -> list[tuple[TokenKind, int | str | None]]:
    """Helper: lex source and return (kind, value) pairs."""
    return [(t.kind, t.value) for t in Lexer(source).lex()]


class TestLexerBasic:
    def test_empty_source(self):
        assert Lexer("").lex() == []

    def test_whitespace_only(self):
        assert Lexer("  \n\t ").lex() == []

    def test_identifier(self):
        assert lex("hello") == [(TokenKind.IDENT, "hello")]

    def test_identifier_with_digits(self):
        assert lex("x1y2") == [(TokenKind.IDENT, "x1y2")]

    def test_keywords(self):
        assert kinds("if while for") == [TokenKind.IF, TokenKind.WHILE, TokenKind.FOR]

    def test_keyword_prefix_is_identifier(self):
        assert lex("iffy fort") == [(TokenKind.IDENT, "iffy"), (TokenKind.IDENT, "fort")]

    def test_keywords_have_no_value(self):
        tokens = Lexer("while").lex()
        assert tokens[0].value is None


class TestLexerNumbers:
    def test_integer(self):
        assert lex("42") == [(TokenKind.NUM, 42)]

    def test_leading_zeros(self):
        assert lex("007") == [(TokenKind.NUM, 7)]

    def test_max_int(self):
        assert lex("2147483647") == [(TokenKind.NUM, 2147483647)]

    def test_overflow(self):
        with pytest.raises(IntegerLiteralOverflow) as exc_info:
            Lexer("1 + 2147483648;").lex()
        assert exc_info.value.span == Span(4, 14)
        assert exc_info.value.code == "E102"

    def test_very_long_literal_overflows(self):
        with pytest.raises(IntegerLiteralOverflow):
            Lexer("9" * 5000).lex()

    def test_number_then_identifier(self):
        assert lex("12ab") == [(TokenKind.NUM, 12), (TokenKind.IDENT, "ab")]


class TestLexerOperators:
    def test_single_char(self):
        assert kinds("+ - * / ^ ( ) { } ;") == [
            TokenKind.PLUS, TokenKind.MINUS, TokenKind.MUL, TokenKind.DIV,
            TokenKind.POW, TokenKind.LEFT_PAREN, TokenKind.RIGHT_PAREN,
            TokenKind.LEFT_BLOCK, TokenKind.RIGHT_BLOCK, TokenKind.SEMICOLON,
        ]

    def test_two_char(self):
        assert kinds("== != <= >=") == [
            TokenKind.EQ, TokenKind.NEQ, TokenKind.LT_EQ, TokenKind.GT_EQ,
        ]

    def test_fallbacks(self):
        assert kinds("= < >") == [TokenKind.ASSIGN, TokenKind.LT, TokenKind.GT]

    def test_no_whitespace_needed(self):
        assert kinds("x=1==2;") == [
            TokenKind.IDENT, TokenKind.ASSIGN, TokenKind.NUM,
            TokenKind.EQ, TokenKind.NUM, TokenKind.SEMICOLON,
        ]

    def test_assign_then_eq(self):
        assert kinds("===") == [TokenKind.EQ, TokenKind.ASSIGN]

    def test_lone_bang_is_invalid(self):
        with pytest.raises(InvalidToken) as exc_info:
            Lexer("1 ! 2").lex()
        assert exc_info.value.char == "!"
        assert exc_info.value.span == Span(2, 3)


class TestLexerErrors:
    def test_invalid_character(self):
        with pytest.raises(InvalidToken) as exc_info:
            Lexer("1 + $").lex()
        assert exc_info.value.code == "E101"
        assert exc_info.value.span == Span(4, 5)

    def test_underscore_is_invalid(self):
        with pytest.raises(InvalidToken):
            Lexer("my_var").lex()

    def test_errors_are_lexical(self):
        with pytest.raises(LexicalError):
            Lexer("#").lex()

    def test_multibyte_character_span(self):
        with pytest.raises(InvalidToken) as exc_info:
            Lexer("é").lex()
        assert exc_info.value.span == Span(0, 2)


class TestLexerSpans:
    def test_spans_are_byte_offsets(self):
        tokens = Lexer("ab + 10").lex()
        assert [t.span for t in tokens] == [Span(0, 2), Span(3, 4), Span(5, 7)]

    def test_two_char_span(self):
        tokens = Lexer("a<=b").lex()
        assert tokens[1].span == Span(1, 3)

    def test_relex_is_identical(self):
        source = "for (i = 0; i < 10; i = i + 1) { x = x ^ 2; }"
        assert Lexer(source).lex() == Lexer(source).lex()

    def test_next_token_returns_none_at_end(self):
        lexer = Lexer("1")
        assert lexer.next_token().kind == TokenKind.NUM
        assert lexer.next_token() is None
