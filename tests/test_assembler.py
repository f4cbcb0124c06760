"""Tests for assembler/linker invocation."""

from __future__ import annotations

import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from climb.assembler import AssembleError, assemble_and_link, find_assembler


class TestFindAssembler:
    def test_prefers_gcc(self):
        with patch("climb.assembler.shutil.which", side_effect=lambda name: f"/usr/bin/{name}"):
            assert find_assembler() == "gcc"

    def test_falls_back_to_clang(self):
        with patch(
            "climb.assembler.shutil.which",
            side_effect=lambda name: "/usr/bin/clang" if name == "clang" else None,
        ):
            assert find_assembler() == "clang"

    def test_none_available(self):
        with patch("climb.assembler.shutil.which", return_value=None):
            assert find_assembler() is None


class TestAssembleAndLink:
    def test_command_line(self):
        completed = MagicMock(returncode=0, stderr="")
        with patch("climb.assembler.subprocess.run", return_value=completed) as run:
            out = assemble_and_link(Path("prog.s"), Path("prog"), "cc")
        assert out == Path("prog")
        cmd = run.call_args[0][0]
        assert cmd == ["cc", "prog.s", "-o", "prog"]

    def test_failure_carries_stderr(self):
        completed = MagicMock(returncode=1, stderr="prog.s:3: Error: no such instruction")
        with patch("climb.assembler.subprocess.run", return_value=completed):
            with pytest.raises(AssembleError) as exc_info:
                assemble_and_link(Path("prog.s"), Path("prog"), "cc")
        assert "exit 1" in str(exc_info.value)
        assert "no such instruction" in exc_info.value.stderr

    def test_no_toolchain(self):
        with patch("climb.assembler.find_assembler", return_value=None):
            with pytest.raises(AssembleError, match="no assembler found"):
                assemble_and_link(Path("prog.s"), Path("prog"))

    def test_missing_executable(self):
        with patch("climb.assembler.subprocess.run", side_effect=FileNotFoundError):
            with pytest.raises(AssembleError, match="not found"):
                assemble_and_link(Path("prog.s"), Path("prog"), "nosuchcc")

    def test_timeout(self):
        with patch(
            "climb.assembler.subprocess.run",
            side_effect=subprocess.TimeoutExpired(cmd="cc", timeout=60),
        ):
            with pytest.raises(AssembleError, match="timed out"):
                assemble_and_link(Path("prog.s"), Path("prog"), "cc")
