"""Generate stack-machine assembly from a climb Program.

The generated entry function returns the value of the last top-level
statement, so a compiled program exits with the same status the
evaluator computes (modulo 256). Runtime failures the evaluator reports
as errors branch to trap handlers instead.
"""

from __future__ import annotations

from climb.asm_arm64 import Arm64Codegen
from climb.asm_codegen import AsmCodegen
from climb.asm_x86_64 import X86_64Codegen
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

TARGETS: dict[str, type[AsmCodegen]] = {
    "arm64": Arm64Codegen,
    "aarch64": Arm64Codegen,
    "x86_64": X86_64Codegen,
    "amd64": X86_64Codegen,
}

DEFAULT_TARGET = "arm64"
DEFAULT_ENTRY = "_main"


def make_codegen(target: str) -> AsmCodegen:
    try:
        return TARGETS[target]()
    except KeyError:
        known = ", ".join(sorted(TARGETS))
        raise ValueError(f"unknown target '{target}' (expected one of: {known})") from None


class AsmEmitter:
    """Emit assembly for a parsed climb program.

    Expressions leave their value on the operand stack; statements leave
    their value in the result register.
    """

    def __init__(
        self, program: Program, *, target: str = DEFAULT_TARGET, entry: str = DEFAULT_ENTRY,
    ) -> None:
        self._program = program
        self._cg = make_codegen(target)
        self._entry = entry
        self._slots: dict[str, int] = {}  # name -> slot index

    def emit(self) -> str:
        """Generate the complete assembly source for the program."""
        for stmt in self._program.body:
            self._collect_stmt(stmt)

        self._cg.emit_text_section()
        self._cg.emit_global(self._entry)
        self._cg.emit_prologue(self._entry, len(self._slots))
        self._emit_block(self._program.body)
        self._cg.emit_epilogue()
        self._cg.emit_traps()

        return self._cg.output()

    # ── Variable slots ────────────────────────────────────────

    def _slot(self, name: str) -> int:
        if name not in self._slots:
            self._slots[name] = len(self._slots)
        return self._slots[name]

    def _collect_stmt(self, stmt: Statement) -> None:
        if isinstance(stmt, ExpressionStatement):
            self._collect_expr(stmt.expr)
        elif isinstance(stmt, BlockStatement):
            for s in stmt.body:
                self._collect_stmt(s)
        elif isinstance(stmt, If):
            self._collect_expr(stmt.cond)
            for s in stmt.then:
                self._collect_stmt(s)
        elif isinstance(stmt, While):
            self._collect_expr(stmt.cond)
            for s in stmt.body:
                self._collect_stmt(s)
        elif isinstance(stmt, For):
            for expr in (stmt.init, stmt.cond, stmt.update):
                if expr is not None:
                    self._collect_expr(expr)
            for s in stmt.body:
                self._collect_stmt(s)

    def _collect_expr(self, expr: Expression) -> None:
        if isinstance(expr, Var):
            self._slot(expr.name)
        elif isinstance(expr, Unary):
            self._collect_expr(expr.operand)
        elif isinstance(expr, Binary):
            self._collect_expr(expr.lhs)
            self._collect_expr(expr.rhs)

    # ── Statements ────────────────────────────────────────────

    def _emit_stmt(self, stmt: Statement) -> None:
        if isinstance(stmt, ExpressionStatement):
            self._emit_expr(stmt.expr)
            self._cg.emit_pop_result()
        elif isinstance(stmt, BlockStatement):
            self._emit_block(stmt.body)
        elif isinstance(stmt, If):
            self._emit_if(stmt)
        elif isinstance(stmt, While):
            self._emit_while(stmt)
        elif isinstance(stmt, For):
            self._emit_for(stmt)
        else:
            raise TypeError(f"unknown statement node: {type(stmt).__name__}")

    def _emit_block(self, body: list[Statement]) -> None:
        if not body:
            self._cg.emit_load_zero()
            return
        for stmt in body:
            self._emit_stmt(stmt)

    def _emit_if(self, stmt: If) -> None:
        cg = self._cg
        else_label = cg.new_label("else")
        end_label = cg.new_label("end")

        self._emit_expr(stmt.cond)
        cg.emit_pop_result()
        cg.emit_branch_if_not_positive(else_label)
        self._emit_block(stmt.then)
        cg.emit_branch(end_label)
        cg.place_label(else_label)
        cg.emit_load_zero()
        cg.place_label(end_label)

    def _emit_loop(self, cond: Expression, body: list[Statement], update: Expression | None) -> None:
        """Emit a test-at-head loop; the running result sits on top of the stack."""
        cg = self._cg
        head = cg.new_label("loop")
        end = cg.new_label("loop_end")

        cg.place_label(head)
        self._emit_expr(cond)
        cg.emit_pop_result()
        cg.emit_branch_if_not_positive(end)
        self._emit_block(body)
        cg.emit_store_top()
        if update is not None:
            self._emit_expr(update)
            cg.emit_pop_result()
        cg.emit_branch(head)
        cg.place_label(end)
        cg.emit_pop_result()

    def _emit_while(self, stmt: While) -> None:
        self._cg.emit_push_imm(0)
        self._emit_loop(stmt.cond, stmt.body, None)

    def _emit_for(self, stmt: For) -> None:
        cg = self._cg
        if stmt.init is not None:
            self._emit_expr(stmt.init)
        else:
            cg.emit_push_imm(0)

        # A missing condition skips the loop entirely.
        if stmt.cond is None:
            cg.emit_pop_result()
            cg.emit_load_zero()
            return

        self._emit_loop(stmt.cond, stmt.body, stmt.update)

    # ── Expressions ───────────────────────────────────────────

    def _emit_expr(self, expr: Expression) -> None:
        cg = self._cg
        if isinstance(expr, Value):
            cg.emit_push_imm(expr.value)
        elif isinstance(expr, Var):
            cg.emit_load_var(self._slot(expr.name))
            cg.emit_push_result()
        elif isinstance(expr, Unary):
            self._emit_expr(expr.operand)
            cg.emit_pop_result()
            if expr.op == UnaryOp.MINUS:
                cg.emit_negate()
            cg.emit_push_result()
        elif isinstance(expr, Binary):
            self._emit_binary(expr)
        else:
            raise TypeError(f"unknown expression node: {type(expr).__name__}")

    def _emit_binary(self, expr: Binary) -> None:
        cg = self._cg
        if expr.op == BinaryOp.ASSIGN:
            self._emit_expr(expr.rhs)
            cg.emit_pop_result()
            cg.emit_store_var(self._slot(expr.lhs.name))
            cg.emit_push_result()
            return

        self._emit_expr(expr.lhs)
        self._emit_expr(expr.rhs)
        cg.emit_pop_operands()
        if expr.op.is_comparison:
            cg.emit_compare(expr.op)
        elif expr.op == BinaryOp.POW:
            cg.emit_pow()
        else:
            cg.emit_arith(expr.op)
        cg.emit_push_result()


def generate(program: Program, *, target: str = DEFAULT_TARGET, entry: str = DEFAULT_ENTRY) -> str:
    """Return assembly text for *program*."""
    return AsmEmitter(program, target=target, entry=entry).emit()
