"""Tree-walking evaluator for climb programs.

All values are 32-bit signed integers; arithmetic wraps around the way
the compiled code does. Comparisons produce 1 or 0, and a condition holds
when its value is greater than zero.
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
    UnaryOp,
    Value,
    Var,
    While,
)
from climb.errors import DivisionByZero, NegativeExponent, UnboundVariable

_MODULUS = 2**32


def wrap_i32(value: int) -> int:
    """Reduce *value* to the 32-bit two's complement range."""
    return (value + 2**31) % _MODULUS - 2**31


def div_i32(lhs: int, rhs: int) -> int:
    """C-style division truncating toward zero. *rhs* must be nonzero."""
    quotient = abs(lhs) // abs(rhs)
    if (lhs < 0) != (rhs < 0):
        quotient = -quotient
    return wrap_i32(quotient)


def pow_i32(base: int, exponent: int) -> int:
    """*base* multiplied by itself *exponent* times, wrapping at 32 bits."""
    # Modular exponentiation gives the same result as repeated wrapping
    # multiplication without looping up to 2**31 times.
    return wrap_i32(pow(base, exponent, _MODULUS))


class Environment:
    """The single flat variable namespace of one evaluation run."""

    def __init__(self) -> None:
        self._bindings: dict[str, int] = {}

    def get(self, name: str) -> int | None:
        return self._bindings.get(name)

    def set(self, name: str, value: int) -> None:
        self._bindings[name] = value

    def __contains__(self, name: str) -> bool:
        return name in self._bindings

    def as_dict(self) -> dict[str, int]:
        return dict(self._bindings)


class Evaluator:
    """Runs a Program and returns the value of its last statement."""

    def __init__(self) -> None:
        self.env = Environment()

    def evaluate(self, program: Program) -> int:
        """Evaluate *program* in a fresh environment."""
        self.env = Environment()
        return self._execute_block(program.body)

    # ── Statements ───────────────────────────────────────────────

    def execute(self, stmt: Statement) -> int:
        if isinstance(stmt, ExpressionStatement):
            return self.eval_expr(stmt.expr)
        if isinstance(stmt, BlockStatement):
            return self._execute_block(stmt.body)
        if isinstance(stmt, If):
            return self._execute_if(stmt)
        if isinstance(stmt, While):
            return self._execute_while(stmt)
        if isinstance(stmt, For):
            return self._execute_for(stmt)
        raise TypeError(f"unknown statement node: {type(stmt).__name__}")

    def _execute_block(self, body: list[Statement]) -> int:
        result = 0
        for stmt in body:
            result = self.execute(stmt)
        return result

    def _execute_if(self, stmt: If) -> int:
        if self.eval_expr(stmt.cond) > 0:
            return self._execute_block(stmt.then)
        return 0

    def _execute_while(self, stmt: While) -> int:
        result = 0
        while self.eval_expr(stmt.cond) > 0:
            result = self._execute_block(stmt.body)
        return result

    def _execute_for(self, stmt: For) -> int:
        result = 0
        if stmt.init is not None:
            result = self.eval_expr(stmt.init)
        # A missing condition skips the loop entirely.
        if stmt.cond is None:
            return 0
        while self.eval_expr(stmt.cond) > 0:
            result = self._execute_block(stmt.body)
            if stmt.update is not None:
                self.eval_expr(stmt.update)
        return result

    # ── Expressions ──────────────────────────────────────────────

    def eval_expr(self, expr: Expression) -> int:
        if isinstance(expr, Value):
            return expr.value
        if isinstance(expr, Var):
            value = self.env.get(expr.name)
            if value is None:
                raise UnboundVariable(expr.name, expr.span)
            return value
        if isinstance(expr, Unary):
            operand = self.eval_expr(expr.operand)
            if expr.op == UnaryOp.MINUS:
                return wrap_i32(-operand)
            raise TypeError(f"unknown unary operator: {expr.op}")
        if isinstance(expr, Binary):
            return self._eval_binary(expr)
        raise TypeError(f"unknown expression node: {type(expr).__name__}")

    def _eval_binary(self, expr: Binary) -> int:
        op = expr.op
        if op == BinaryOp.ASSIGN:
            value = self.eval_expr(expr.rhs)
            self.env.set(expr.lhs.name, value)
            return value

        lhs = self.eval_expr(expr.lhs)
        rhs = self.eval_expr(expr.rhs)

        match op:
            case BinaryOp.PLUS:
                return wrap_i32(lhs + rhs)
            case BinaryOp.MINUS:
                return wrap_i32(lhs - rhs)
            case BinaryOp.MUL:
                return wrap_i32(lhs * rhs)
            case BinaryOp.DIV:
                if rhs == 0:
                    raise DivisionByZero(expr.span)
                return div_i32(lhs, rhs)
            case BinaryOp.POW:
                if rhs < 0:
                    raise NegativeExponent(rhs, expr.span)
                return pow_i32(lhs, rhs)
            case BinaryOp.EQ:
                return int(lhs == rhs)
            case BinaryOp.NEQ:
                return int(lhs != rhs)
            case BinaryOp.GT:
                return int(lhs > rhs)
            case BinaryOp.GT_EQ:
                return int(lhs >= rhs)
            case BinaryOp.LT:
                return int(lhs < rhs)
            case BinaryOp.LT_EQ:
                return int(lhs <= rhs)
        raise TypeError(f"unknown binary operator: {op}")


def evaluate(program: Program) -> int:
    """Evaluate *program* and return its result."""
    return Evaluator().evaluate(program)
