"""AST node definitions and the operator table for the climb language."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Union

from climb.source import NO_SPAN, Span
from climb.tokens import TokenKind

# ── Precedence table ─────────────────────────────────────────────

LOWEST = 0
ASSIGN = 1
COMPARE = 2
PLUS = 3
MUL = 4
UNARY = 5
POW = 6


class Assoc(Enum):
    LEFT = "left"
    RIGHT = "right"


@dataclass(frozen=True)
class OpInfo:
    """Binding precedence and associativity of an operator."""

    prec: int
    assoc: Assoc

    def binds_at(self, min_prec: int) -> bool:
        return self.prec >= min_prec

    def next_min_prec(self) -> int:
        """Minimum precedence for the right-hand operand."""
        if self.assoc == Assoc.RIGHT:
            return self.prec
        return self.prec + 1


class BinaryOp(Enum):
    PLUS = "+"
    MINUS = "-"
    MUL = "*"
    DIV = "/"
    POW = "^"
    EQ = "=="
    NEQ = "!="
    GT = ">"
    GT_EQ = ">="
    LT = "<"
    LT_EQ = "<="
    ASSIGN = "="

    @property
    def info(self) -> OpInfo:
        return _OP_INFO[self]

    @property
    def is_comparison(self) -> bool:
        return self.info.prec == COMPARE


class UnaryOp(Enum):
    MINUS = "-"


_OP_INFO: dict[BinaryOp, OpInfo] = {
    BinaryOp.ASSIGN: OpInfo(ASSIGN, Assoc.RIGHT),
    BinaryOp.EQ: OpInfo(COMPARE, Assoc.LEFT),
    BinaryOp.NEQ: OpInfo(COMPARE, Assoc.LEFT),
    BinaryOp.GT: OpInfo(COMPARE, Assoc.LEFT),
    BinaryOp.GT_EQ: OpInfo(COMPARE, Assoc.LEFT),
    BinaryOp.LT: OpInfo(COMPARE, Assoc.LEFT),
    BinaryOp.LT_EQ: OpInfo(COMPARE, Assoc.LEFT),
    BinaryOp.PLUS: OpInfo(PLUS, Assoc.LEFT),
    BinaryOp.MINUS: OpInfo(PLUS, Assoc.LEFT),
    BinaryOp.MUL: OpInfo(MUL, Assoc.LEFT),
    BinaryOp.DIV: OpInfo(MUL, Assoc.LEFT),
    BinaryOp.POW: OpInfo(POW, Assoc.RIGHT),
}

UNARY_INFO = OpInfo(UNARY, Assoc.RIGHT)

# Token kinds that act as binary operators
BINARY_OPS: dict[TokenKind, BinaryOp] = {
    TokenKind.PLUS: BinaryOp.PLUS,
    TokenKind.MINUS: BinaryOp.MINUS,
    TokenKind.MUL: BinaryOp.MUL,
    TokenKind.DIV: BinaryOp.DIV,
    TokenKind.POW: BinaryOp.POW,
    TokenKind.EQ: BinaryOp.EQ,
    TokenKind.NEQ: BinaryOp.NEQ,
    TokenKind.GT: BinaryOp.GT,
    TokenKind.GT_EQ: BinaryOp.GT_EQ,
    TokenKind.LT: BinaryOp.LT,
    TokenKind.LT_EQ: BinaryOp.LT_EQ,
    TokenKind.ASSIGN: BinaryOp.ASSIGN,
}


# ── Expressions ──────────────────────────────────────────────────
#
# Spans only serve diagnostics, so they never take part in equality.


@dataclass(frozen=True)
class Value:
    value: int
    span: Span = field(default=NO_SPAN, compare=False, repr=False)


@dataclass(frozen=True)
class Var:
    name: str
    span: Span = field(default=NO_SPAN, compare=False, repr=False)


@dataclass(frozen=True)
class Unary:
    op: UnaryOp
    operand: Expression
    span: Span = field(default=NO_SPAN, compare=False, repr=False)


@dataclass(frozen=True)
class Binary:
    lhs: Expression
    op: BinaryOp
    rhs: Expression
    span: Span = field(default=NO_SPAN, compare=False, repr=False)


Expression = Union[Unary, Binary, Value, Var]


# ── Statements ───────────────────────────────────────────────────


@dataclass(frozen=True)
class ExpressionStatement:
    expr: Expression
    span: Span = field(default=NO_SPAN, compare=False, repr=False)


@dataclass(frozen=True)
class BlockStatement:
    body: list[Statement]
    span: Span = field(default=NO_SPAN, compare=False, repr=False)


@dataclass(frozen=True)
class If:
    cond: Expression
    then: list[Statement]
    span: Span = field(default=NO_SPAN, compare=False, repr=False)


@dataclass(frozen=True)
class While:
    cond: Expression
    body: list[Statement]
    span: Span = field(default=NO_SPAN, compare=False, repr=False)


@dataclass(frozen=True)
class For:
    init: Expression | None
    cond: Expression | None
    update: Expression | None
    body: list[Statement]
    span: Span = field(default=NO_SPAN, compare=False, repr=False)


Statement = Union[ExpressionStatement, BlockStatement, If, While, For]


# ── Program ──────────────────────────────────────────────────────


@dataclass(frozen=True)
class Program:
    body: list[Statement]
