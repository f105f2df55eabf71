"""TOML config loading for donkey.toml."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path

CONFIG_FILENAME = "donkey.toml"

REPL_MODES = ("tokens", "parse")


@dataclass
class ReplConfig:
    prompt: str = ">> "
    exit_command: str = "exit();"
    mode: str = "tokens"
    welcome: bool = True


@dataclass
class DiagnosticsConfig:
    color: bool = True


@dataclass
class CheckConfig:
    extension: str = ".dk"


@dataclass
class DonkeyConfig:
    repl: ReplConfig = field(default_factory=ReplConfig)
    diagnostics: DiagnosticsConfig = field(default_factory=DiagnosticsConfig)
    check: CheckConfig = field(default_factory=CheckConfig)


def find_config(start_path: Path | None = None) -> Path:
    """Walk up directories to find donkey.toml. Raises FileNotFoundError."""
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


def load_config(path: Path) -> DonkeyConfig:
    """Parse a donkey.toml file into a DonkeyConfig."""
    with open(path, "rb") as f:
        data = tomllib.load(f)

    config = DonkeyConfig()

    if "repl" in data:
        repl = data["repl"]
        mode = repl.get("mode", "tokens")
        if mode not in REPL_MODES:
            raise ValueError(
                f"{path}: [repl] mode must be one of {', '.join(REPL_MODES)}, got {mode!r}"
            )
        config.repl = ReplConfig(
            prompt=repl.get("prompt", ">> "),
            exit_command=repl.get("exit_command", "exit();"),
            mode=mode,
            welcome=repl.get("welcome", True),
        )

    if "diagnostics" in data:
        diag = data["diagnostics"]
        config.diagnostics = DiagnosticsConfig(
            color=diag.get("color", True),
        )

    if "check" in data:
        chk = data["check"]
        config.check = CheckConfig(
            extension=chk.get("extension", ".dk"),
        )

    return config


def discover_config(start_path: Path | None = None) -> DonkeyConfig:
    """Load the nearest donkey.toml, or defaults when there is none."""
    try:
        return load_config(find_config(start_path))
    except FileNotFoundError:
        return DonkeyConfig()
