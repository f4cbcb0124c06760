"""climb command-line interface."""

from __future__ import annotations

from enum import Enum
from pathlib import Path

import click

from climb import __version__
from climb.ast_nodes import Program
from climb.checker import Checker
from climb.config import ClimbConfig, discover_config
from climb.errors import ClimbError, DiagnosticRenderer, Severity
from climb.lexer import Lexer
from climb.parser import Parser
from climb.source import SourceText

_source_argument = click.argument("source", required=False)
_file_option = click.option(
    "--file", "file", type=click.Path(exists=True, dir_okay=False),
    help="Read the program from a file.",
)


def _read_source(source: str | None, file: str | None, *, single_line: bool = False) -> SourceText:
    """Take the program from --file, the SOURCE argument, or stdin."""
    if file is not None:
        return SourceText.from_path(Path(file))
    if source is not None:
        return SourceText(source, "<argument>")
    stdin = click.get_text_stream("stdin")
    text = stdin.readline() if single_line else stdin.read()
    return SourceText(text, "<stdin>")


def _report(err: ClimbError, source: SourceText, config: ClimbConfig) -> None:
    renderer = DiagnosticRenderer(color=config.diagnostics.color)
    click.echo(renderer.render(err.to_diagnostic(), source), err=True)


def _front_end(source: SourceText, config: ClimbConfig) -> Program:
    """Lex and parse; render the first error and exit 1 on failure."""
    try:
        tokens = Lexer(source.text).lex()
        return Parser(tokens, max_depth=config.parser.max_depth).parse()
    except ClimbError as e:
        _report(e, source, config)
        raise SystemExit(1)


def _generate(program: Program, target: str, entry: str) -> str:
    from climb.asm_emitter import generate

    try:
        return generate(program, target=target, entry=entry)
    except ValueError as e:
        click.echo(f"error: {e}", err=True)
        raise SystemExit(1)


@click.group()
@click.version_option(__version__, prog_name="climb")
def main() -> None:
    """The climb expression language: interpreter and compiler."""


@main.command()
@_source_argument
@_file_option
def run(source: str | None, file: str | None) -> None:
    """Evaluate a program and print its result."""
    from climb.evaluator import Evaluator

    config = discover_config()
    src = _read_source(source, file, single_line=True)
    program = _front_end(src, config)
    try:
        result = Evaluator().evaluate(program)
    except ClimbError as e:
        _report(e, src, config)
        raise SystemExit(1)
    click.echo(str(result))


@main.command(name="compile")
@_source_argument
@_file_option
@click.option("-o", "--output", type=click.Path(dir_okay=False), help="Write assembly to FILE.")
@click.option("--target", default=None, help="Target architecture (arm64 or x86_64).")
@click.option("--entry", default=None, help="Name of the generated entry symbol.")
def compile_cmd(
    source: str | None, file: str | None, output: str | None,
    target: str | None, entry: str | None,
) -> None:
    """Compile a program to assembly."""
    config = discover_config()
    src = _read_source(source, file)
    program = _front_end(src, config)
    asm = _generate(program, target or config.build.target, entry or config.build.entry)

    if output is None:
        click.echo(asm, nl=False)
    else:
        Path(output).write_text(asm)
        click.echo(f"wrote {output}", err=True)


@main.command()
@_source_argument
@_file_option
@click.option("-o", "--output", type=click.Path(dir_okay=False), help="Path of the binary.")
@click.option("--target", default=None, help="Target architecture (arm64 or x86_64).")
@click.option("--entry", default=None, help="Name of the generated entry symbol.")
def build(
    source: str | None, file: str | None, output: str | None,
    target: str | None, entry: str | None,
) -> None:
    """Compile a program to a native binary."""
    from climb.assembler import AssembleError, assemble_and_link

    config = discover_config()
    src = _read_source(source, file)
    program = _front_end(src, config)
    asm = _generate(program, target or config.build.target, entry or config.build.entry)

    binary = Path(output or config.build.output)
    asm_file = binary.with_name(binary.name + ".s")
    asm_file.write_text(asm)

    try:
        assemble_and_link(asm_file, binary, config.build.assembler or None)
    except AssembleError as e:
        click.echo(f"error: {e}", err=True)
        if e.stderr:
            click.echo(e.stderr, err=True)
        raise SystemExit(1)
    click.echo(f"built {binary}")


@main.command()
@_source_argument
@_file_option
def check(source: str | None, file: str | None) -> None:
    """Check a program for errors and warnings without running it."""
    config = discover_config()
    src = _read_source(source, file)
    program = _front_end(src, config)

    checker = Checker()
    checker.check(program)

    renderer = DiagnosticRenderer(color=config.diagnostics.color)
    for diag in checker.diagnostics:
        click.echo(renderer.render(diag, src), err=True)

    if checker.has_errors():
        raise SystemExit(1)
    warnings = sum(1 for d in checker.diagnostics if d.severity == Severity.WARNING)
    if warnings:
        click.echo(f"checked {src.name}: {warnings} warning(s)")
    else:
        click.echo(f"checked {src.name}: no errors")


@main.command(name="format")
@_source_argument
@_file_option
@click.option("--check", is_flag=True, help="Check formatting without modifying files.")
def format_cmd(source: str | None, file: str | None, check: bool) -> None:
    """Format climb source to its canonical layout."""
    from climb.formatter import ClimbFormatter

    config = discover_config()
    src = _read_source(source, file)
    program = _front_end(src, config)
    formatted = ClimbFormatter().format(program)

    if check:
        if formatted != src.text:
            click.echo(f"would reformat {src.name}")
            raise SystemExit(1)
        return

    if file is not None:
        if formatted != src.text:
            Path(file).write_text(formatted)
            click.echo(f"formatted {file}")
        return
    click.echo(formatted, nl=False)


@main.command()
def lsp() -> None:
    """Start the climb language server."""
    from climb.lsp import main as lsp_main

    lsp_main()


@main.command()
@_source_argument
@_file_option
@click.option("--tokens", "show_tokens", is_flag=True, help="Dump the token stream instead.")
def view(source: str | None, file: str | None, show_tokens: bool) -> None:
    """View the AST (or tokens) of a climb program."""
    config = discover_config()
    src = _read_source(source, file)

    if show_tokens:
        try:
            tokens = Lexer(src.text).lex()
        except ClimbError as e:
            _report(e, src, config)
            raise SystemExit(1)
        for tok in tokens:
            value = f" {tok.value!r}" if tok.value is not None else ""
            click.echo(f"{tok.kind.name:<12} {tok.span}{value}")
        return

    program = _front_end(src, config)
    _dump_ast(program, 0)


def _dump_ast(node: object, depth: int) -> None:
    """Print a readable AST dump."""
    indent = "  " * depth
    name = type(node).__name__

    if hasattr(node, "__dataclass_fields__"):
        fields = node.__dataclass_fields__  # type: ignore[union-attr]
        click.echo(f"{indent}{name}")
        for field_name in fields:
            if field_name == "span":
                continue
            value = getattr(node, field_name)
            if isinstance(value, list):
                if value:
                    click.echo(f"{indent}  {field_name}:")
                    for item in value:
                        _dump_ast(item, depth + 2)
                else:
                    click.echo(f"{indent}  {field_name}: []")
            elif hasattr(value, "__dataclass_fields__"):
                click.echo(f"{indent}  {field_name}:")
                _dump_ast(value, depth + 2)
            elif isinstance(value, Enum):
                click.echo(f"{indent}  {field_name}: {value.value}")
            elif value is not None:
                click.echo(f"{indent}  {field_name}: {value!r}")
    else:
        click.echo(f"{indent}{name}: {node!r}")
