"""Token kinds and token representation for the climb lexer."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from climb.source import Span


class TokenKind(Enum):
    # Operators
    PLUS = auto()
    MINUS = auto()
    MUL = auto()
    DIV = auto()
    POW = auto()
    EQ = auto()
    NEQ = auto()
    GT = auto()
    GT_EQ = auto()
    LT = auto()
    LT_EQ = auto()
    ASSIGN = auto()

    # Literals and names
    NUM = auto()
    IDENT = auto()

    # Punctuation
    LEFT_PAREN = auto()
    RIGHT_PAREN = auto()
    LEFT_BLOCK = auto()
    RIGHT_BLOCK = auto()
    SEMICOLON = auto()

    # Keywords
    IF = auto()
    WHILE = auto()
    FOR = auto()


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    span: Span
    value: int | str | None = None

    def describe(self) -> str:
        """Human-readable form used in diagnostics."""
        if self.kind == TokenKind.NUM:
            return f"integer {self.value}"
        if self.kind == TokenKind.IDENT:
            return f"identifier '{self.value}'"
        return f"'{TOKEN_TEXT[self.kind]}'"


KEYWORDS: dict[str, TokenKind] = {
    "if": TokenKind.IF,
    "while": TokenKind.WHILE,
    "for": TokenKind.FOR,
}

SINGLE_CHAR_TOKENS: dict[str, TokenKind] = {
    "+": TokenKind.PLUS,
    "-": TokenKind.MINUS,
    "*": TokenKind.MUL,
    "/": TokenKind.DIV,
    "^": TokenKind.POW,
    "(": TokenKind.LEFT_PAREN,
    ")": TokenKind.RIGHT_PAREN,
    "{": TokenKind.LEFT_BLOCK,
    "}": TokenKind.RIGHT_BLOCK,
    ";": TokenKind.SEMICOLON,
}

# First char -> (kind when followed by '=', fallback kind or None)
TWO_CHAR_TOKENS: dict[str, tuple[TokenKind, TokenKind | None]] = {
    "=": (TokenKind.EQ, TokenKind.ASSIGN),
    "!": (TokenKind.NEQ, None),
    "<": (TokenKind.LT_EQ, TokenKind.LT),
    ">": (TokenKind.GT_EQ, TokenKind.GT),
}

TOKEN_TEXT: dict[TokenKind, str] = {
    TokenKind.PLUS: "+",
    TokenKind.MINUS: "-",
    TokenKind.MUL: "*",
    TokenKind.DIV: "/",
    TokenKind.POW: "^",
    TokenKind.EQ: "==",
    TokenKind.NEQ: "!=",
    TokenKind.GT: ">",
    TokenKind.GT_EQ: ">=",
    TokenKind.LT: "<",
    TokenKind.LT_EQ: "<=",
    TokenKind.ASSIGN: "=",
    TokenKind.NUM: "number",
    TokenKind.IDENT: "identifier",
    TokenKind.LEFT_PAREN: "(",
    TokenKind.RIGHT_PAREN: ")",
    TokenKind.LEFT_BLOCK: "{",
    TokenKind.RIGHT_BLOCK: "}",
    TokenKind.SEMICOLON: ";",
    TokenKind.IF: "if",
    TokenKind.WHILE: "while",
    TokenKind.FOR: "for",
}
