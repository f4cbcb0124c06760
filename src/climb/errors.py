"""Typed errors and Rust-style colored diagnostic rendering."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from climb.source import SourceText, Span
    from climb.tokens import Token


class Severity(Enum):
    ERROR = "error"
    WARNING = "warning"
    NOTE = "note"


# ANSI color codes
_COLORS = {
    Severity.ERROR: "\033[1;31m",    # bold red
    Severity.WARNING: "\033[1;33m",  # bold yellow
    Severity.NOTE: "\033[1;36m",     # bold cyan
}
_BOLD = "\033[1m"
_BLUE = "\033[1;34m"
_RESET = "\033[0m"


@dataclass(frozen=True)
class DiagnosticLabel:
    """Points to a specific source location."""

    span: Span
    message: str = ""


@dataclass
class Diagnostic:
    """A single diagnostic message with optional labels and notes."""

    severity: Severity
    code: str
    message: str
    labels: list[DiagnosticLabel] = field(default_factory=list)
    notes: list[str] = field(default_factory=list)


class DiagnosticRenderer:
    """Renders diagnostics against their source text, with optional colors."""

    def __init__(self, *, color: bool = True) -> None:
        self.color = color

    def _c(self, code: str) -> str:
        return code if self.color else ""

    def render(self, diag: Diagnostic, source: SourceText) -> str:
        lines: list[str] = []
        sev = diag.severity
        color = _COLORS[sev]

        # Header: error[E202]: message
        lines.append(
            f"{self._c(color)}{sev.value}[{diag.code}]{self._c(_RESET)}"
            f"{self._c(_BOLD)}: {diag.message}{self._c(_RESET)}"
        )

        # Errors without a location point at the end of the input
        labels = diag.labels or [DiagnosticLabel(source.end_span())]

        for label in labels:
            start_line, start_col = source.position(label.span.start)
            end_line, end_col = source.position(label.span.end)
            lines.append(
                f"  {self._c(_BLUE)}-->{self._c(_RESET)} "
                f"{source.name}:{start_line}:{start_col}"
            )
            gutter = f"{start_line:>4}"
            lines.append(f"  {self._c(_BLUE)}     |{self._c(_RESET)}")

            source_line = source.line_at(start_line)
            lines.append(
                f"  {self._c(_BLUE)}{gutter} |{self._c(_RESET)} {source_line}"
            )

            if start_line == end_line:
                caret_len = max(1, end_col - start_col)
            else:
                caret_len = max(1, len(source_line) - start_col + 1)
            padding = " " * (start_col - 1)
            lines.append(
                f"  {self._c(_BLUE)}     |{self._c(_RESET)} "
                f"{padding}{self._c(color)}{'^' * caret_len}{self._c(_RESET)}"
            )

            if label.message:
                lines.append(
                    f"  {self._c(_BLUE)}     |{self._c(_RESET)} "
                    f"{padding}{self._c(color)}{label.message}{self._c(_RESET)}"
                )

        for note in diag.notes:
            lines.append(f"  {self._c(_BLUE)}={self._c(_RESET)} note: {note}")

        return "\n".join(lines)


# ── Error hierarchy ──────────────────────────────────────────────


class ClimbError(Exception):
    """Base class for every error raised while processing a program."""

    code = "E000"

    def __init__(self, message: str, span: Span | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.span = span

    def to_diagnostic(self) -> Diagnostic:
        labels = [DiagnosticLabel(self.span)] if self.span is not None else []
        return Diagnostic(
            severity=Severity.ERROR,
            code=self.code,
            message=self.message,
            labels=labels,
        )


# Lexical errors (E1xx)


class LexicalError(ClimbError):
    """Raised by the lexer on input it cannot tokenize."""

    code = "E100"


class InvalidToken(LexicalError):
    code = "E101"

    def __init__(self, char: str, span: Span) -> None:
        super().__init__(f"invalid token {char!r}", span)
        self.char = char


class IntegerLiteralOverflow(LexicalError):
    code = "E102"

    def __init__(self, text: str, span: Span) -> None:
        super().__init__(
            f"integer literal {text} does not fit in a 32-bit signed integer",
            span,
        )
        self.text = text


# Syntax errors (E2xx)


class ParseError(ClimbError):
    """Raised by the parser; the first error aborts the whole parse."""

    code = "E200"

    def __init__(
        self, message: str, token: Token | None = None, span: Span | None = None,
    ) -> None:
        if span is None and token is not None:
            span = token.span
        super().__init__(message, span)
        self.token = token


class UnmatchedLeftParen(ParseError):
    code = "E201"

    def __init__(self, token: Token) -> None:
        super().__init__("unmatched left parenthesis", token)


class UnexpectedToken(ParseError):
    code = "E202"

    def __init__(self, token: Token) -> None:
        super().__init__(f"unexpected token {token.describe()}", token)


class InvalidAssignmentTarget(ParseError):
    code = "E203"

    def __init__(self, token: Token) -> None:
        super().__init__("invalid assignment target; only a variable can be assigned", token)


class UnexpectedEof(ParseError):
    code = "E204"

    def __init__(self) -> None:
        super().__init__("unexpected end of input")


class NestingTooDeep(ParseError):
    code = "E205"

    def __init__(self, token: Token, limit: int) -> None:
        super().__init__(f"nesting exceeds the maximum depth of {limit}", token)
        self.limit = limit


# Evaluation errors (E3xx)


class EvaluationError(ClimbError):
    """Raised by the evaluator when a well-formed program cannot run."""

    code = "E300"


class DivisionByZero(EvaluationError):
    code = "E301"

    def __init__(self, span: Span | None = None) -> None:
        super().__init__("division by zero", span)


class UnboundVariable(EvaluationError):
    code = "E302"

    def __init__(self, name: str, span: Span | None = None) -> None:
        super().__init__(f"variable '{name}' is not bound", span)
        self.name = name


class NegativeExponent(EvaluationError):
    code = "E303"

    def __init__(self, exponent: int, span: Span | None = None) -> None:
        super().__init__(f"negative exponent {exponent}", span)
        self.exponent = exponent
