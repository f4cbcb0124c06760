"""Lexer for the climb language.

Produces the token list for a source string in a single forward scan.
Spans are byte offsets into the UTF-8 encoding of the source.
"""

from __future__ import annotations

from climb.errors import IntegerLiteralOverflow, InvalidToken
from climb.source import Span
from climb.tokens import KEYWORDS, SINGLE_CHAR_TOKENS, TWO_CHAR_TOKENS, Token, TokenKind

INT32_MAX = 2**31 - 1


def _is_letter(ch: str) -> bool:
    return ch.isascii() and ch.isalpha()


def _is_ident_char(ch: str) -> bool:
    return ch.isascii() and ch.isalnum()


def _is_digit(ch: str) -> bool:
    return "0" <= ch <= "9"


class Lexer:
    """Tokenizes climb source code."""

    def __init__(self, source: str) -> None:
        self.source = source
        self.pos = 0      # character index
        self.offset = 0   # byte offset of self.pos

    def lex(self) -> list[Token]:
        """Tokenize the entire source and return the token list."""
        tokens: list[Token] = []
        while (tok := self.next_token()) is not None:
            tokens.append(tok)
        return tokens

    def next_token(self) -> Token | None:
        """Read one token; ``None`` marks the end of input."""
        self._skip_whitespace()
        if self.pos >= len(self.source):
            return None

        start = self.offset
        ch = self._advance()

        if ch in SINGLE_CHAR_TOKENS:
            return self._emit(SINGLE_CHAR_TOKENS[ch], start)
        if ch in TWO_CHAR_TOKENS:
            return self._lex_two_char(ch, start)
        if _is_digit(ch):
            return self._lex_number(start)
        if _is_letter(ch):
            return self._lex_identifier(start)
        raise InvalidToken(ch, Span(start, self.offset))

    # ── Helpers ───────────────────────────────────────────────────

    def _peek(self) -> str:
        if self.pos < len(self.source):
            return self.source[self.pos]
        return "\0"

    def _advance(self) -> str:
        ch = self.source[self.pos]
        self.pos += 1
        self.offset += len(ch.encode("utf-8"))
        return ch

    def _emit(self, kind: TokenKind, start: int, value: int | str | None = None) -> Token:
        return Token(kind, Span(start, self.offset), value)

    def _skip_whitespace(self) -> None:
        while self.pos < len(self.source) and self.source[self.pos].isspace():
            self._advance()

    # ── Operators ────────────────────────────────────────────────

    def _lex_two_char(self, ch: str, start: int) -> Token:
        with_eq, fallback = TWO_CHAR_TOKENS[ch]
        if self._peek() == "=":
            self._advance()
            return self._emit(with_eq, start)
        if fallback is None:
            raise InvalidToken(ch, Span(start, self.offset))
        return self._emit(fallback, start)

    # ── Numbers ──────────────────────────────────────────────────

    def _lex_number(self, start: int) -> Token:
        # The first digit has already been consumed.
        begin = self.pos - 1
        while self.pos < len(self.source) and _is_digit(self.source[self.pos]):
            self._advance()
        text = self.source[begin:self.pos]
        # Length check first: int() refuses very long digit strings.
        if len(text.lstrip("0")) > 10 or int(text) > INT32_MAX:
            raise IntegerLiteralOverflow(text, Span(start, self.offset))
        return self._emit(TokenKind.NUM, start, int(text))

    # ── Identifiers and Keywords ─────────────────────────────────

    def _lex_identifier(self, start: int) -> Token:
        begin = self.pos - 1
        while self.pos < len(self.source) and _is_ident_char(self.source[self.pos]):
            self._advance()
        word = self.source[begin:self.pos]
        if word in KEYWORDS:
            return self._emit(KEYWORDS[word], start)
        return self._emit(TokenKind.IDENT, start, word)


def lex(source: str) -> list[Token]:
    """Tokenize *source*; raises :class:`~climb.errors.LexicalError`."""
    return Lexer(source).lex()
