"""Abstract base for stack-machine assembly code generation backends.

Every expression leaves exactly one value on the operand stack, each
stack slot taking 16 bytes so the stack pointer stays aligned. Values
live in registers as zero-extended 32-bit integers; variable slots are
initialised to all-ones so an unassigned read can be detected.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from climb.ast_nodes import BinaryOp

# Runtime failure kinds and the trap code each one reports
TRAP_CODES: dict[str, int] = {
    "div_zero": 1,
    "unbound": 2,
    "neg_exp": 3,
}


class AsmCodegen(ABC):
    """Abstract base class for architecture-specific ASM backends.

    Subclasses implement instruction selection for the operand-stack
    model; this class owns the output buffer, label generation and the
    trap handlers shared by every function body.
    """

    comment_prefix = "#"

    def __init__(self) -> None:
        self._lines: list[str] = []
        self._label_counter = 0
        self._traps: dict[str, str] = {}

    # ── Output ────────────────────────────────────────────────

    def output(self) -> str:
        """Return the assembled source."""
        return "\n".join(self._lines) + "\n"

    def _emit(self, line: str) -> None:
        """Emit an instruction (indented)."""
        self._lines.append(f"    {line}")

    def _label(self, name: str) -> None:
        """Emit a label."""
        self._lines.append(f"{name}:")

    def _directive(self, text: str) -> None:
        """Emit an assembler directive (indented)."""
        self._lines.append(f"    {text}")

    def _raw(self, text: str) -> None:
        """Emit raw text (no indent)."""
        self._lines.append(text)

    def comment(self, text: str) -> None:
        """Emit a comment."""
        self._lines.append(f"    {self.comment_prefix} {text}")

    def place_label(self, name: str) -> None:
        self._label(name)

    def new_label(self, prefix: str = "") -> str:
        """Generate a unique label name."""
        self._label_counter += 1
        return f".L{prefix}{self._label_counter}"

    # ── Traps ─────────────────────────────────────────────────

    def trap_label(self, kind: str) -> str:
        """Return the label of the handler for *kind*, registering it on first use."""
        if kind not in self._traps:
            self._traps[kind] = f".Ltrap_{kind}"
        return self._traps[kind]

    def emit_traps(self) -> None:
        """Emit one handler per runtime failure kind used by the program."""
        for kind, label in self._traps.items():
            self._label(label)
            self.emit_trap(TRAP_CODES[kind])

    # ── Abstract methods ─────────────────────────────────────

    @abstractmethod
    def emit_text_section(self) -> None:
        """Emit the .text section directive."""
        ...

    @abstractmethod
    def emit_global(self, name: str) -> None:
        """Declare a symbol as global."""
        ...

    @abstractmethod
    def emit_prologue(self, name: str, slot_count: int) -> None:
        """Emit the entry label, frame setup and variable slot initialisation."""
        ...

    @abstractmethod
    def emit_epilogue(self) -> None:
        """Tear down the frame and return the result register."""
        ...

    @abstractmethod
    def emit_push_imm(self, value: int) -> None:
        """Push an immediate integer onto the operand stack."""
        ...

    @abstractmethod
    def emit_push_result(self) -> None:
        """Push the result register onto the operand stack."""
        ...

    @abstractmethod
    def emit_pop_result(self) -> None:
        """Pop the operand stack into the result register."""
        ...

    @abstractmethod
    def emit_pop_operands(self) -> None:
        """Pop rhs into the scratch register, then lhs into the result register."""
        ...

    @abstractmethod
    def emit_store_top(self) -> None:
        """Overwrite the top of the operand stack with the result register."""
        ...

    @abstractmethod
    def emit_load_zero(self) -> None:
        """Set the result register to zero."""
        ...

    @abstractmethod
    def emit_load_var(self, slot: int) -> None:
        """Load a variable slot into the result register, trapping if unassigned."""
        ...

    @abstractmethod
    def emit_store_var(self, slot: int) -> None:
        """Store the result register into a variable slot."""
        ...

    @abstractmethod
    def emit_arith(self, op: BinaryOp) -> None:
        """Apply ``+ - * /`` to the popped operands, result in the result register."""
        ...

    @abstractmethod
    def emit_compare(self, op: BinaryOp) -> None:
        """Compare the popped operands, leaving 0 or 1 in the result register."""
        ...

    @abstractmethod
    def emit_pow(self) -> None:
        """Raise lhs to the rhs power with a counted multiplication loop."""
        ...

    @abstractmethod
    def emit_negate(self) -> None:
        """Negate the result register."""
        ...

    @abstractmethod
    def emit_branch(self, label: str) -> None:
        """Emit an unconditional branch."""
        ...

    @abstractmethod
    def emit_branch_if_not_positive(self, label: str) -> None:
        """Branch to label unless the result register is greater than zero."""
        ...

    @abstractmethod
    def emit_trap(self, code: int) -> None:
        """Abort the program."""
        ...
