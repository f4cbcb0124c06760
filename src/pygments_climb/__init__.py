"""Pygments lexer for the climb language."""

from pygments.lexer import RegexLexer, words
from pygments.token import (
    Error,
    Keyword,
    Name,
    Number,
    Operator,
    Punctuation,
    Text,
)


class ClimbLexer(RegexLexer):
    """Pygments lexer for the climb language."""

    name = "Climb"
    aliases = ["climb"]
    filenames = ["*.clb"]
    mimetypes = ["text/x-climb"]

    tokens = {
        "root": [
            # Whitespace
            (r"\s+", Text),
            # Numbers
            (r"[0-9]+", Number.Integer),
            # Control-flow keywords
            (
                words(
                    ("if", "while", "for"),
                    prefix=r"\b",
                    suffix=r"\b",
                ),
                Keyword,
            ),
            # Operators (multi-char before single-char)
            (r"==|!=|<=|>=", Operator),
            (r"[+\-*/^<>]", Operator),
            (r"=", Operator),
            # Identifiers
            (r"[A-Za-z][A-Za-z0-9]*", Name.Variable),
            # Punctuation
            (r"[(){};]", Punctuation),
            # Anything else is rejected by the lexer
            (r".", Error),
        ],
    }
