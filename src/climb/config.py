"""TOML config loading for climb.toml."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path

CONFIG_FILENAME = "climb.toml"


@dataclass
class BuildConfig:
    target: str = "arm64"
    entry: str = "_main"
    output: str = "a.out"
    assembler: str = ""


@dataclass
class ParserConfig:
    max_depth: int = 200


@dataclass
class DiagnosticsConfig:
    color: bool = True


@dataclass
class ClimbConfig:
    build: BuildConfig = field(default_factory=BuildConfig)
    parser: ParserConfig = field(default_factory=ParserConfig)
    diagnostics: DiagnosticsConfig = field(default_factory=DiagnosticsConfig)


def find_config(start_path: Path | None = None) -> Path:
    """Walk up directories to find climb.toml. Raises FileNotFoundError."""
    path = (start_path or Path.cwd()).resolve()
    if path.is_file():
        path = path.parent
    while True:
        candidate = path / CONFIG_FILENAME
        if candidate.exists():
            return candidate
        parent = path.parent
        if parent == path:
            raise FileNotFoundError(f"No {CONFIG_FILENAME} found in any parent directory")
        path = parent


def load_config(path: Path) -> ClimbConfig:
    """Parse a climb.toml file into a ClimbConfig."""
    with open(path, "rb") as f:
        data = tomllib.load(f)

    config = ClimbConfig()

    if "build" in data:
        bld = data["build"]
        config.build = BuildConfig(
            target=bld.get("target", "arm64"),
            entry=bld.get("entry", "_main"),
            output=bld.get("output", "a.out"),
            assembler=bld.get("assembler", ""),
        )

    if "parser" in data:
        prs = data["parser"]
        config.parser = ParserConfig(
            max_depth=prs.get("max_depth", 200),
        )

    if "diagnostics" in data:
        dgn = data["diagnostics"]
        config.diagnostics = DiagnosticsConfig(
            color=dgn.get("color", True),
        )

    return config


def discover_config(start_path: Path | None = None) -> ClimbConfig:
    """Load the nearest climb.toml, falling back to defaults when there is none."""
    try:
        return load_config(find_config(start_path))
    except FileNotFoundError:
        return ClimbConfig()
