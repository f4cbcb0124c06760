"""Static checks for climb programs.

The checker never rejects a program; it records warnings for code that
is well-formed but will not behave as written, and builds the table of
variable definitions used by the language server.
"""

from __future__ import annotations

from climb.ast_nodes import (
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
    Var,
    While,
)
from climb.errors import Diagnostic, DiagnosticLabel, Severity
from climb.source import Span


class Checker:
    """Walks a Program collecting variable definitions and warnings."""

    def __init__(self) -> None:
        self.diagnostics: list[Diagnostic] = []
        # name -> span of the first assignment
        self.variables: dict[str, Span] = {}
        # name -> span of the first read
        self._reads: dict[str, Span] = {}

    # ── Public API ──────────────────────────────────────────────

    def check(self, program: Program) -> dict[str, Span]:
        """Check a program. Raises nothing; inspect self.diagnostics."""
        for stmt in program.body:
            self._check_stmt(stmt)
        self._check_unassigned()
        return self.variables

    def has_errors(self) -> bool:
        return any(d.severity == Severity.ERROR for d in self.diagnostics)

    def _warning(self, code: str, message: str, span: Span, note: str | None = None) -> None:
        self.diagnostics.append(Diagnostic(
            severity=Severity.WARNING,
            code=code,
            message=message,
            labels=[DiagnosticLabel(span=span, message="")],
            notes=[note] if note else [],
        ))

    # ── Statements ──────────────────────────────────────────────

    def _check_stmt(self, stmt: Statement) -> None:
        if isinstance(stmt, ExpressionStatement):
            self._check_expr(stmt.expr)
        elif isinstance(stmt, BlockStatement):
            self._check_body(stmt.body)
        elif isinstance(stmt, If):
            self._check_expr(stmt.cond)
            self._check_body(stmt.then)
        elif isinstance(stmt, While):
            self._check_expr(stmt.cond)
            self._check_body(stmt.body)
        elif isinstance(stmt, For):
            self._check_for(stmt)

    def _check_body(self, body: list[Statement]) -> None:
        for stmt in body:
            self._check_stmt(stmt)

    def _check_for(self, stmt: For) -> None:
        if stmt.init is not None:
            self._check_expr(stmt.init)
        if stmt.cond is None:
            self._warning(
                "W300",
                "for loop has no condition; its body never runs",
                stmt.span,
                note="the statement evaluates to 0",
            )
        else:
            self._check_expr(stmt.cond)
        if stmt.update is not None:
            self._check_expr(stmt.update)
        self._check_body(stmt.body)

    # ── Expressions ─────────────────────────────────────────────

    def _check_expr(self, expr: Expression) -> None:
        if isinstance(expr, Var):
            self._reads.setdefault(expr.name, expr.span)
        elif isinstance(expr, Unary):
            self._check_expr(expr.operand)
        elif isinstance(expr, Binary):
            if expr.op == BinaryOp.ASSIGN:
                self._check_expr(expr.rhs)
                self.variables.setdefault(expr.lhs.name, expr.lhs.span)
            else:
                self._check_expr(expr.lhs)
                self._check_expr(expr.rhs)

    # ── Unassigned reads ────────────────────────────────────────

    def _check_unassigned(self) -> None:
        """Warn about variables that are read but never assigned."""
        for name, span in self._reads.items():
            if name not in self.variables:
                self._warning("W301", f"variable '{name}' is never assigned", span)
