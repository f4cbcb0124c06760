"""Shared test helpers for the climb test suite."""

from __future__ import annotations

from climb.ast_nodes import Program
from climb.checker import Checker
from climb.errors import Diagnostic
from climb.evaluator import Evaluator
from climb.lexer import Lexer
from climb.parser import Parser
from climb.tokens import TokenKind


def kinds(source: str) -> list[TokenKind]:
    """Lex source and return just the token kinds."""
    return [t.kind for t in Lexer(source).lex()]


def parse(source: str) -> Program:
    """Lex and parse source, return the Program."""
    return Parser(Lexer(source).lex()).parse()


def run(source: str) -> int:
    """Parse and evaluate source, return the program result."""
    return Evaluator().evaluate(parse(source))


def check_warns(source: str, warning_code: str) -> list[Diagnostic]:
    """Parse and check source, asserting the given warning code appears."""
    checker = Checker()
    checker.check(parse(source))
    matching = [d for d in checker.diagnostics if d.code == warning_code]
    assert matching, (
        f"Expected warning {warning_code} but got: "
        f"{[f'{d.code}: {d.message}' for d in checker.diagnostics] or 'no diagnostics'}"
    )
    return matching
