"""AST-walking pretty-printer for climb source code.

Produces canonical formatting: one statement per line, four-space
indented blocks and parentheses only where the precedence table needs
them, so formatting and re-parsing yields an equal AST.
"""

from __future__ import annotations

from climb.ast_nodes import (
    LOWEST,
    POW,
    UNARY,
    Assoc,
    Binary,
    BlockStatement,
    Expression,
    ExpressionStatement,
    For,
    If,
    Program,
    Statement,
    Unary,
    Value,
    Var,
    While,
)

# A leading '-' always starts a primary, so a unary expression only needs
# parentheses where a power operator would otherwise capture it.
_UNARY_BINDING = POW


class ClimbFormatter:
    """Format a parsed Program back to canonical source text."""

    # ── Public API ─────────────────────────────────────────────

    def format(self, program: Program) -> str:
        """Format a program to canonical source text."""
        lines: list[str] = []
        for stmt in program.body:
            lines.extend(self._format_stmt(stmt))
        if not lines:
            return ""
        return "\n".join(lines) + "\n"

    def format_expression(self, expr: Expression) -> str:
        return self._format_expr(expr, LOWEST)

    # ── Statement formatting ───────────────────────────────────

    def _format_stmt(self, stmt: Statement) -> list[str]:
        if isinstance(stmt, ExpressionStatement):
            return [f"{self._format_expr(stmt.expr, LOWEST)};"]
        if isinstance(stmt, BlockStatement):
            return self._format_block("", stmt.body)
        if isinstance(stmt, If):
            return self._format_block(f"if ({self._format_expr(stmt.cond, LOWEST)}) ", stmt.then)
        if isinstance(stmt, While):
            return self._format_block(f"while ({self._format_expr(stmt.cond, LOWEST)}) ", stmt.body)
        if isinstance(stmt, For):
            clauses = "; ".join(
                self._format_expr(e, LOWEST) if e is not None else ""
                for e in (stmt.init, stmt.cond, stmt.update)
            )
            return self._format_block(f"for ({clauses}) ", stmt.body)
        raise TypeError(f"unknown statement node: {type(stmt).__name__}")

    def _format_block(self, header: str, body: list[Statement]) -> list[str]:
        if not body:
            return [f"{header}{{}}"]
        lines = [f"{header}{{"]
        for stmt in body:
            lines.extend(self._indent(self._format_stmt(stmt)))
        lines.append("}")
        return lines

    # ── Expression formatting ──────────────────────────────────

    def _format_expr(self, expr: Expression, min_prec: int) -> str:
        if isinstance(expr, Value):
            return str(expr.value)
        if isinstance(expr, Var):
            return expr.name
        if isinstance(expr, Unary):
            result = f"{expr.op.value}{self._format_expr(expr.operand, UNARY)}"
            if _UNARY_BINDING < min_prec:
                return f"({result})"
            return result
        if isinstance(expr, Binary):
            return self._format_binary(expr, min_prec)
        raise TypeError(f"unknown expression node: {type(expr).__name__}")

    def _format_binary(self, expr: Binary, min_prec: int) -> str:
        info = expr.op.info
        # A right-associative operator re-parses an equal-precedence lhs
        # as its own rhs, so the lhs must bind strictly tighter.
        lhs_prec = info.prec + 1 if info.assoc == Assoc.RIGHT else info.prec
        left = self._format_expr(expr.lhs, lhs_prec)
        right = self._format_expr(expr.rhs, info.next_min_prec())
        result = f"{left} {expr.op.value} {right}"
        if info.prec < min_prec:
            return f"({result})"
        return result

    # ── Helpers ────────────────────────────────────────────────

    @staticmethod
    def _indent(lines: list[str], levels: int = 1) -> list[str]:
        prefix = "    " * levels
        return [prefix + line if line else line for line in lines]


def format_source(program: Program) -> str:
    return ClimbFormatter().format(program)
