"""Assembler and linker invocation for compiled climb programs."""

from __future__ import annotations

import shutil
import subprocess
from pathlib import Path


class AssembleError(Exception):
    """Error during assembly or linking."""

    def __init__(self, message: str, stderr: str = "") -> None:
        super().__init__(message)
        self.stderr = stderr


def find_assembler() -> str | None:
    """Search PATH for a compiler driver that assembles and links (gcc, cc, clang)."""
    for name in ("gcc", "cc", "clang"):
        if shutil.which(name):
            return name
    return None


def assemble_and_link(
    asm_file: Path,
    output: Path,
    assembler: str | None = None,
) -> Path:
    """Assemble a .s file and link it into a native binary.

    Returns the output path on success; raises AssembleError on failure.
    """
    cc = assembler or find_assembler()
    if cc is None:
        raise AssembleError("no assembler found (install gcc or clang)")

    cmd = [cc, str(asm_file), "-o", str(output)]
    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            timeout=60,
        )
    except FileNotFoundError:
        raise AssembleError(f"assembler '{cc}' not found")
    except subprocess.TimeoutExpired:
        raise AssembleError("assembly timed out")

    if result.returncode != 0:
        raise AssembleError(
            f"assembly failed (exit {result.returncode})",
            stderr=result.stderr,
        )
    return output
