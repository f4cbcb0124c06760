"""x86-64 (System V AMD64 ABI) code generation backend using AT&T syntax."""

from __future__ import annotations

from climb.asm_codegen import AsmCodegen
from climb.ast_nodes import BinaryOp

_SETCC = {
    BinaryOp.EQ: "sete",
    BinaryOp.NEQ: "setne",
    BinaryOp.GT: "setg",
    BinaryOp.GT_EQ: "setge",
    BinaryOp.LT: "setl",
    BinaryOp.LT_EQ: "setle",
}


def _slot_offset(slot: int) -> int:
    return -8 * (slot + 1)


class X86_64Codegen(AsmCodegen):
    """x86-64 code generator using GAS AT&T syntax.

    ``%eax`` holds the result and lhs operand, ``%ecx`` the rhs operand.
    """

    def emit_text_section(self) -> None:
        self._directive(".text")

    def emit_global(self, name: str) -> None:
        self._directive(f".globl {name}")

    def emit_prologue(self, name: str, slot_count: int) -> None:
        # Align stack to 16 bytes
        aligned = (slot_count * 8 + 15) & ~15
        self._label(name)
        self._emit("pushq %rbp")
        self._emit("movq %rsp, %rbp")
        if aligned > 0:
            self._emit(f"subq ${aligned}, %rsp")
        for slot in range(slot_count):
            self._emit(f"movq $-1, {_slot_offset(slot)}(%rbp)")

    def emit_epilogue(self) -> None:
        self._emit("movq %rbp, %rsp")
        self._emit("popq %rbp")
        self._emit("ret")

    # ── Operand stack ─────────────────────────────────────────

    def emit_push_imm(self, value: int) -> None:
        self._emit(f"movl ${value & 0xFFFFFFFF}, %eax")
        self.emit_push_result()

    def emit_push_result(self) -> None:
        self._emit("subq $16, %rsp")
        self._emit("movq %rax, (%rsp)")

    def emit_pop_result(self) -> None:
        self._emit("movq (%rsp), %rax")
        self._emit("addq $16, %rsp")

    def emit_pop_operands(self) -> None:
        self._emit("movq (%rsp), %rcx")    # right
        self._emit("movq 16(%rsp), %rax")  # left
        self._emit("addq $32, %rsp")

    def emit_store_top(self) -> None:
        self._emit("movq %rax, (%rsp)")

    def emit_load_zero(self) -> None:
        self._emit("movl $0, %eax")

    # ── Variables ─────────────────────────────────────────────

    def emit_load_var(self, slot: int) -> None:
        self._emit(f"movq {_slot_offset(slot)}(%rbp), %rax")
        self._emit("movq %rax, %rdx")
        self._emit("shrq $32, %rdx")
        self._emit(f"jnz {self.trap_label('unbound')}")

    def emit_store_var(self, slot: int) -> None:
        self._emit(f"movq %rax, {_slot_offset(slot)}(%rbp)")

    # ── Operators ─────────────────────────────────────────────

    def emit_arith(self, op: BinaryOp) -> None:
        """Arithmetic: lhs in %eax, rhs in %ecx. Result in %eax."""
        if op == BinaryOp.PLUS:
            self._emit("addl %ecx, %eax")
        elif op == BinaryOp.MINUS:
            self._emit("subl %ecx, %eax")   # left - right
        elif op == BinaryOp.MUL:
            self._emit("imull %ecx, %eax")
        elif op == BinaryOp.DIV:
            # idivl faults on INT_MIN / -1, so dividing by -1 negates instead
            by_minus_one = self.new_label("div_neg")
            done = self.new_label("div_end")
            self._emit("testl %ecx, %ecx")
            self._emit(f"jz {self.trap_label('div_zero')}")
            self._emit("cmpl $-1, %ecx")
            self._emit(f"je {by_minus_one}")
            self._emit("cltd")               # sign-extend eax -> edx:eax
            self._emit("idivl %ecx")         # eax = quotient
            self._emit(f"jmp {done}")
            self._label(by_minus_one)
            self._emit("negl %eax")
            self._label(done)
        else:
            raise ValueError(f"not an arithmetic operator: {op}")

    def emit_compare(self, op: BinaryOp) -> None:
        """Compare lhs (%eax) with rhs (%ecx). Result: 0 or 1 in %eax."""
        self._emit("cmpl %ecx, %eax")
        self._emit(f"{_SETCC[op]} %al")
        self._emit("movzbl %al, %eax")

    def emit_pow(self) -> None:
        # acc = 1; while (n != 0) { acc *= base; n--; }
        loop = self.new_label("pow_loop")
        done = self.new_label("pow_end")
        self._emit("testl %ecx, %ecx")
        self._emit(f"js {self.trap_label('neg_exp')}")
        self._emit("movl $1, %edx")
        self._emit(f"jz {done}")
        self._label(loop)
        self._emit("imull %eax, %edx")
        self._emit("subl $1, %ecx")
        self._emit(f"jnz {loop}")
        self._label(done)
        self._emit("movl %edx, %eax")

    def emit_negate(self) -> None:
        self._emit("negl %eax")

    # ── Control flow ──────────────────────────────────────────

    def emit_branch(self, label: str) -> None:
        self._emit(f"jmp {label}")

    def emit_branch_if_not_positive(self, label: str) -> None:
        self._emit("testl %eax, %eax")
        self._emit(f"jle {label}")

    def emit_trap(self, code: int) -> None:
        self._emit("ud2")
