"""Tests for the climb CLI, config, and error rendering."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from climb.assembler import AssembleError
from climb.cli import main
from climb.config import ClimbConfig, discover_config, find_config, load_config
from climb.errors import (
    Diagnostic,
    DiagnosticLabel,
    DiagnosticRenderer,
    Severity,
    UnexpectedEof,
    UnexpectedToken,
)
from climb.parser import parse
from climb.source import SourceText, Span


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def tmp_program(tmp_path):
    """Write a small climb program to a temp dir."""
    path = tmp_path / "sum.clb"
    path.write_text("for (ans=i=0; i<10; i=i+1) {ans = ans + i;}\nans;\n")
    return path


# --- CLI tests ---


class TestCLI:
    def test_help(self, runner):
        result = runner.invoke(main, ["--help"])
        assert result.exit_code == 0
        for command in ("run", "compile", "build", "check", "format", "view", "lsp"):
            assert command in result.output

    def test_version(self, runner):
        result = runner.invoke(main, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output

    def test_lsp_help(self, runner):
        result = runner.invoke(main, ["lsp", "--help"])
        assert result.exit_code == 0
        assert "language server" in result.output


class TestRunCommand:
    def test_run_argument(self, runner):
        result = runner.invoke(main, ["run", "1+2*3;"])
        assert result.exit_code == 0
        assert result.output == "7\n"

    def test_run_file(self, runner, tmp_program):
        result = runner.invoke(main, ["run", "--file", str(tmp_program)])
        assert result.exit_code == 0
        assert result.output.strip() == "45"

    def test_run_stdin_reads_one_line(self, runner):
        result = runner.invoke(main, ["run"], input="(1+2)*3;\n4;\n")
        assert result.exit_code == 0
        assert result.output.strip() == "9"

    def test_run_syntax_error(self, runner):
        result = runner.invoke(main, ["run", "1+2)"])
        assert result.exit_code == 1
        assert "error[E202]" in result.output
        assert "unexpected token ')'" in result.output

    def test_run_lexical_error(self, runner):
        result = runner.invoke(main, ["run", "1 $ 2;"])
        assert result.exit_code == 1
        assert "E101" in result.output

    def test_run_runtime_error(self, runner):
        result = runner.invoke(main, ["run", "x = 0; 5 / x;"])
        assert result.exit_code == 1
        assert "error[E301]" in result.output
        assert "division by zero" in result.output

    def test_run_unbound_variable(self, runner):
        result = runner.invoke(main, ["run", "y;"])
        assert result.exit_code == 1
        assert "variable 'y' is not bound" in result.output

    def test_run_respects_parser_depth_config(self, runner, tmp_path):
        with runner.isolated_filesystem(temp_dir=tmp_path):
            Path("climb.toml").write_text("[parser]\nmax_depth = 3\n")
            result = runner.invoke(main, ["run", "((((1))));"])
            assert result.exit_code == 1
            assert "E205" in result.output

    def test_run_without_color(self, runner, tmp_path):
        with runner.isolated_filesystem(temp_dir=tmp_path):
            Path("climb.toml").write_text("[diagnostics]\ncolor = false\n")
            result = runner.invoke(main, ["run", "1=2;"])
            assert result.exit_code == 1
            assert "\033[" not in result.output
            assert "error[E203]" in result.output


class TestCompileCommand:
    def test_compile_to_stdout(self, runner):
        result = runner.invoke(main, ["compile", "1+2;"])
        assert result.exit_code == 0
        assert ".globl _main" in result.output
        assert "add w0, w0, w1" in result.output

    def test_compile_x86(self, runner):
        result = runner.invoke(main, ["compile", "--target", "x86_64", "--entry", "main", "1;"])
        assert result.exit_code == 0
        assert ".globl main" in result.output
        assert "pushq %rbp" in result.output

    def test_compile_to_file(self, runner, tmp_path):
        out = tmp_path / "out.s"
        result = runner.invoke(main, ["compile", "x = 1;", "-o", str(out)])
        assert result.exit_code == 0
        assert "_main:" in out.read_text()

    def test_compile_unknown_target(self, runner):
        result = runner.invoke(main, ["compile", "--target", "mips", "1;"])
        assert result.exit_code == 1
        assert "unknown target 'mips'" in result.output

    def test_compile_target_from_config(self, runner, tmp_path):
        with runner.isolated_filesystem(temp_dir=tmp_path):
            Path("climb.toml").write_text('[build]\ntarget = "x86_64"\nentry = "start"\n')
            result = runner.invoke(main, ["compile", "1;"])
            assert result.exit_code == 0
            assert ".globl start" in result.output
            assert "movq %rsp, %rbp" in result.output

    def test_compile_error(self, runner):
        result = runner.invoke(main, ["compile", "(1+2"])
        assert result.exit_code == 1
        assert "E201" in result.output


class TestBuildCommand:
    def test_build_invokes_assembler(self, runner, tmp_path):
        binary = tmp_path / "prog"
        with patch("climb.assembler.assemble_and_link") as mock_link:
            mock_link.return_value = binary
            result = runner.invoke(main, ["build", "1;", "-o", str(binary)])
        assert result.exit_code == 0
        assert f"built {binary}" in result.output
        asm_file = tmp_path / "prog.s"
        assert asm_file.exists()
        mock_link.assert_called_once_with(asm_file, binary, None)

    def test_build_failure(self, runner, tmp_path):
        error = AssembleError("assembly failed (exit 1)", stderr="bad instruction")
        with patch("climb.assembler.assemble_and_link", side_effect=error):
            result = runner.invoke(main, ["build", "1;", "-o", str(tmp_path / "prog")])
        assert result.exit_code == 1
        assert "error: assembly failed" in result.output
        assert "bad instruction" in result.output

    def test_build_native(self, runner, tmp_path, needs_assembler):
        import subprocess
        import sys

        binary = tmp_path / "prog"
        entry = "_main" if sys.platform == "darwin" else "main"
        result = runner.invoke(main, [
            "build", "x = 6; x * 7;", "-o", str(binary),
            "--target", needs_assembler, "--entry", entry,
        ])
        assert result.exit_code == 0, result.output
        assert subprocess.run([str(binary)], timeout=10).returncode == 42


class TestCheckCommand:
    def test_check_clean(self, runner, tmp_program):
        result = runner.invoke(main, ["check", "--file", str(tmp_program)])
        assert result.exit_code == 0
        assert "no errors" in result.output

    def test_check_warnings(self, runner):
        result = runner.invoke(main, ["check", "for (;;) {}"])
        assert result.exit_code == 0
        assert "warning[W300]" in result.output
        assert "1 warning(s)" in result.output

    def test_check_syntax_error(self, runner):
        result = runner.invoke(main, ["check", "if (1) 2;"])
        assert result.exit_code == 1


class TestFormatCommand:
    def test_format_argument(self, runner):
        result = runner.invoke(main, ["format", "x=1;if(x){x=2;}"])
        assert result.exit_code == 0
        assert result.output == "x = 1;\nif (x) {\n    x = 2;\n}\n"

    def test_format_check_fails(self, runner, tmp_program):
        result = runner.invoke(main, ["format", "--check", "--file", str(tmp_program)])
        assert result.exit_code == 1
        assert "would reformat" in result.output

    def test_format_rewrites_file(self, runner, tmp_program):
        result = runner.invoke(main, ["format", "--file", str(tmp_program)])
        assert result.exit_code == 0
        assert "formatted" in result.output
        assert tmp_program.read_text() == (
            "for (ans = i = 0; i < 10; i = i + 1) {\n"
            "    ans = ans + i;\n"
            "}\n"
            "ans;\n"
        )
        again = runner.invoke(main, ["format", "--check", "--file", str(tmp_program)])
        assert again.exit_code == 0

    def test_format_stdin(self, runner):
        result = runner.invoke(main, ["format"], input="1;\n2;\n")
        assert result.exit_code == 0
        assert result.output == "1;\n2;\n"


class TestViewCommand:
    def test_view_ast(self, runner):
        result = runner.invoke(main, ["view", "x = -1;"])
        assert result.exit_code == 0
        assert "Program" in result.output
        assert "ExpressionStatement" in result.output
        assert "op: =" in result.output
        assert "Unary" in result.output
        assert "span" not in result.output

    def test_view_tokens(self, runner):
        result = runner.invoke(main, ["view", "--tokens", "if (a) {}"])
        assert result.exit_code == 0
        lines = result.output.splitlines()
        assert lines[0].startswith("IF")
        assert "'a'" in lines[2]
        assert len(lines) == 6

    def test_view_tokens_error(self, runner):
        result = runner.invoke(main, ["view", "--tokens", "!"])
        assert result.exit_code == 1
        assert "E101" in result.output


# --- Config tests ---


class TestConfig:
    def test_load_config(self, tmp_path):
        toml = tmp_path / "climb.toml"
        toml.write_text(
            '[build]\ntarget = "x86_64"\nentry = "main"\noutput = "prog"\nassembler = "clang"\n'
            "[parser]\nmax_depth = 50\n"
            "[diagnostics]\ncolor = false\n"
        )
        config = load_config(toml)
        assert config.build.target == "x86_64"
        assert config.build.entry == "main"
        assert config.build.output == "prog"
        assert config.build.assembler == "clang"
        assert config.parser.max_depth == 50
        assert config.diagnostics.color is False

    def test_load_config_defaults(self, tmp_path):
        toml = tmp_path / "climb.toml"
        toml.write_text("[build]\n")
        config = load_config(toml)
        assert config.build.target == "arm64"
        assert config.build.entry == "_main"
        assert config.parser.max_depth == 200
        assert config.diagnostics.color is True

    def test_find_config(self, tmp_path):
        (tmp_path / "climb.toml").write_text("")
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        assert find_config(nested) == (tmp_path / "climb.toml").resolve()

    def test_find_config_not_found(self, tmp_path):
        empty = tmp_path / "empty"
        empty.mkdir()
        with pytest.raises(FileNotFoundError):
            find_config(empty)

    def test_discover_config_defaults(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        assert discover_config() == ClimbConfig()


# --- Error rendering tests ---


class TestDiagnostics:
    def test_render_error(self):
        source = SourceText("1+2)", "<test>")
        with pytest.raises(UnexpectedToken) as exc_info:
            parse(source.text)
        output = DiagnosticRenderer(color=False).render(exc_info.value.to_diagnostic(), source)
        lines = output.splitlines()
        assert lines[0] == "error[E202]: unexpected token ')'"
        assert lines[1] == "  --> <test>:1:4"
        assert lines[3] == "     1 | 1+2)"
        assert lines[4] == "       |    ^"

    def test_render_warning(self):
        source = SourceText("x = 1;\nfor (;;) {}\n", "prog.clb")
        diag = Diagnostic(
            severity=Severity.WARNING,
            code="W300",
            message="for loop has no condition; its body never runs",
            labels=[DiagnosticLabel(span=Span(7, 18))],
            notes=["the statement evaluates to 0"],
        )
        output = DiagnosticRenderer(color=False).render(diag, source)
        assert "warning[W300]" in output
        assert "prog.clb:2:1" in output
        assert "^" * 11 in output
        assert "= note: the statement evaluates to 0" in output

    def test_render_eof_points_at_end(self):
        source = SourceText("1 +", "<test>")
        output = DiagnosticRenderer(color=False).render(UnexpectedEof().to_diagnostic(), source)
        assert "<test>:1:4" in output
        assert "unexpected end of input" in output

    def test_render_color(self):
        source = SourceText("1;")
        diag = Diagnostic(Severity.ERROR, "E999", "boom", [DiagnosticLabel(Span(0, 1))])
        output = DiagnosticRenderer(color=True).render(diag, source)
        assert "\033[1;31m" in output

    def test_caret_columns_count_characters(self):
        source = SourceText("{ é }", "<test>")
        diag = Diagnostic(Severity.ERROR, "E101", "invalid token 'é'", [DiagnosticLabel(Span(2, 4))])
        output = DiagnosticRenderer(color=False).render(diag, source)
        assert "<test>:1:3" in output
        assert "       |   ^" in output.splitlines()


class TestSource:
    def test_source_from_path(self, tmp_path):
        path = tmp_path / "prog.clb"
        path.write_text("x = 1;\nx;\n")
        source = SourceText.from_path(path)
        assert source.name == str(path)
        assert source.line_at(2) == "x;"
        assert source.line_at(3) == ""

    def test_position(self):
        source = SourceText("ab\ncd")
        assert source.position(0) == (1, 1)
        assert source.position(3) == (2, 1)
        assert source.position(4) == (2, 2)

    def test_span_text(self):
        source = SourceText("x = 42;")
        assert source.span_text(Span(4, 6)) == "42"

    def test_span_str(self):
        assert str(Span(3, 7)) == "3..7"

    def test_span_to(self):
        assert Span(5, 6).to(Span(1, 2)) == Span(1, 6)
