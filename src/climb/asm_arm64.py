"""AArch64 code generation backend.

Register use: ``w0``/``x0`` result, ``w1`` rhs operand, ``w2`` power
accumulator, ``x9`` scratch, ``x19`` base of the variable slots.
"""

from __future__ import annotations

from climb.asm_codegen import AsmCodegen
from climb.ast_nodes import BinaryOp

_CONDITIONS = {
    BinaryOp.EQ: "eq",
    BinaryOp.NEQ: "ne",
    BinaryOp.GT: "gt",
    BinaryOp.GT_EQ: "ge",
    BinaryOp.LT: "lt",
    BinaryOp.LT_EQ: "le",
}

_ARITH = {
    BinaryOp.PLUS: "add",
    BinaryOp.MINUS: "sub",
    BinaryOp.MUL: "mul",
    BinaryOp.DIV: "sdiv",
}


class Arm64Codegen(AsmCodegen):
    """AArch64 code generator (Apple and ELF assemblers)."""

    comment_prefix = "//"

    def emit_text_section(self) -> None:
        self._directive(".text")
        self._directive(".p2align 2")

    def emit_global(self, name: str) -> None:
        self._directive(f".globl {name}")

    def emit_prologue(self, name: str, slot_count: int) -> None:
        frame_size = (slot_count * 8 + 15) & ~15
        self._label(name)
        self._emit("stp x29, x30, [sp, #-16]!")
        self._emit("mov x29, sp")
        self._emit("str x19, [sp, #-16]!")
        if frame_size:
            self._sub_sp(frame_size)
        self._emit("mov x19, sp")
        if slot_count:
            self._emit("mov x9, #-1")
            for slot in range(slot_count):
                self._emit(f"str x9, [x19, #{slot * 8}]")

    def emit_epilogue(self) -> None:
        self._emit("ldr x19, [x29, #-16]")
        self._emit("mov sp, x29")
        self._emit("ldp x29, x30, [sp], #16")
        self._emit("ret")

    def _sub_sp(self, amount: int) -> None:
        if amount <= 4095:
            self._emit(f"sub sp, sp, #{amount}")
        else:
            self._mov_imm("w9", amount)
            self._emit("sub sp, sp, x9")

    def _mov_imm(self, reg: str, value: int) -> None:
        """Materialise a 32-bit immediate in a w register."""
        bits = value & 0xFFFFFFFF
        if bits <= 0xFFFF:
            self._emit(f"mov {reg}, #{bits}")
            return
        self._emit(f"movz {reg}, #{bits & 0xFFFF}")
        self._emit(f"movk {reg}, #{bits >> 16}, lsl #16")

    # ── Operand stack ─────────────────────────────────────────

    def emit_push_imm(self, value: int) -> None:
        self._mov_imm("w0", value)
        self.emit_push_result()

    def emit_push_result(self) -> None:
        self._emit("str x0, [sp, #-16]!")

    def emit_pop_result(self) -> None:
        self._emit("ldr x0, [sp], #16")

    def emit_pop_operands(self) -> None:
        self._emit("ldr x1, [sp], #16")
        self._emit("ldr x0, [sp], #16")

    def emit_store_top(self) -> None:
        self._emit("str x0, [sp]")

    def emit_load_zero(self) -> None:
        self._emit("mov w0, #0")

    # ── Variables ─────────────────────────────────────────────

    def emit_load_var(self, slot: int) -> None:
        self._emit(f"ldr x0, [x19, #{slot * 8}]")
        self._emit("lsr x9, x0, #32")
        self._emit(f"cbnz x9, {self.trap_label('unbound')}")

    def emit_store_var(self, slot: int) -> None:
        self._emit(f"str x0, [x19, #{slot * 8}]")

    # ── Operators ─────────────────────────────────────────────

    def emit_arith(self, op: BinaryOp) -> None:
        if op == BinaryOp.DIV:
            self._emit(f"cbz w1, {self.trap_label('div_zero')}")
        self._emit(f"{_ARITH[op]} w0, w0, w1")

    def emit_compare(self, op: BinaryOp) -> None:
        self._emit("cmp w0, w1")
        self._emit(f"cset w0, {_CONDITIONS[op]}")

    def emit_pow(self) -> None:
        # acc = 1; while (n != 0) { acc *= base; n--; }
        loop = self.new_label("pow_loop")
        done = self.new_label("pow_end")
        self._emit(f"tbnz w1, #31, {self.trap_label('neg_exp')}")
        self._emit("mov w2, #1")
        self._emit(f"cbz w1, {done}")
        self._label(loop)
        self._emit("mul w2, w2, w0")
        self._emit("subs w1, w1, #1")
        self._emit(f"b.ne {loop}")
        self._label(done)
        self._emit("mov w0, w2")

    def emit_negate(self) -> None:
        self._emit("neg w0, w0")

    # ── Control flow ──────────────────────────────────────────

    def emit_branch(self, label: str) -> None:
        self._emit(f"b {label}")

    def emit_branch_if_not_positive(self, label: str) -> None:
        self._emit("cmp w0, #0")
        self._emit(f"b.le {label}")

    def emit_trap(self, code: int) -> None:
        self._emit(f"brk #{code}")
