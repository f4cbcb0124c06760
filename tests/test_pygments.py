"""Tests for the pygments lexer."""

from __future__ import annotations

from pygments.token import Error, Keyword, Name, Number, Operator, Punctuation

from pygments_climb import ClimbLexer


def _tokens(source: str) -> list[tuple[object, str]]:
    return [(tok, text) for tok, text in ClimbLexer().get_tokens(source) if text.strip()]


class TestClimbLexer:
    def test_keywords(self):
        assert _tokens("while (x) {}")[0] == (Keyword, "while")

    def test_operators(self):
        toks = _tokens("a <= b ^ 2")
        assert (Operator, "<=") in toks
        assert (Operator, "^") in toks
        assert (Number.Integer, "2") in toks

    def test_identifier_not_keyword(self):
        assert _tokens("format;")[0] == (Name.Variable, "format")

    def test_punctuation(self):
        assert (Punctuation, ";") in _tokens("1;")

    def test_invalid_character(self):
        assert (Error, "$") in _tokens("$")

    def test_filenames(self):
        assert "*.clb" in ClimbLexer.filenames
