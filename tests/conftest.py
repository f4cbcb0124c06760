"""Shared pytest fixtures for the climb test suite."""

from __future__ import annotations

import platform

import pytest

from climb.assembler import find_assembler


def native_target() -> str | None:
    machine = platform.machine().lower()
    if machine in ("arm64", "aarch64"):
        return "arm64"
    if machine in ("x86_64", "amd64"):
        return "x86_64"
    return None


@pytest.fixture
def needs_assembler():
    """Skip test if no assembler is available for the host architecture."""
    if find_assembler() is None:
        pytest.skip("no assembler available")
    target = native_target()
    if target is None:
        pytest.skip(f"unsupported host architecture {platform.machine()}")
    return target
