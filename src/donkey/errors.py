"""Structured diagnostics and Rust-style colored rendering."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from donkey.source import Span


class Severity(Enum):
    ERROR = "error"
    WARNING = "warning"
    NOTE = "note"


# Diagnostic codes
PEEK_MISMATCH = "E200"
NO_PREFIX_PARSE_FN = "E201"
INVALID_INTEGER = "E202"
NESTED_TOO_DEEPLY = "E203"

# ANSI color codes
_COLORS = {
    Severity.ERROR: "\033[1;31m",    # bold red
    Severity.WARNING: "\033[1;33m",  # bold yellow
    Severity.NOTE: "\033[1;36m",     # bold cyan
}
_BOLD = "\033[1m"
_BLUE = "\033[1;34m"
_RESET = "\033[0m"


@dataclass(frozen=True)
class DiagnosticLabel:
    """Points to the source location a diagnostic is about."""

    span: Span
    message: str


@dataclass
class Diagnostic:
    """A single diagnostic message; the first label is the primary location."""

    severity: Severity
    code: str
    message: str
    labels: list[DiagnosticLabel] = field(default_factory=list)

    @property
    def span(self) -> Span | None:
        return self.labels[0].span if self.labels else None


class DiagnosticRenderer:
    """Renders a diagnostic as a header, its location and the offending line.

    Source lines are looked up in text registered with ``add_source`` first
    and then on disk, so input that never lived in a file (stdin, the REPL)
    still gets its offending line shown.
    """

    def __init__(self, *, color: bool = True) -> None:
        self.color = color
        self._sources: dict[str, list[str]] = {}

    def _paint(self, text: str, code: str) -> str:
        return f"{code}{text}{_RESET}" if self.color else text

    def add_source(self, filename: str, text: str) -> None:
        self._sources[filename] = text.splitlines()

    def _source_line(self, filename: str, line_num: int) -> str | None:
        if filename not in self._sources:
            path = Path(filename)
            try:
                text = path.read_text() if path.is_file() else ""
            except OSError:
                text = ""
            self._sources[filename] = text.splitlines()
        lines = self._sources[filename]
        return lines[line_num - 1] if 0 < line_num <= len(lines) else None

    def render(self, diag: Diagnostic) -> str:
        accent = _COLORS[diag.severity]
        header = (self._paint(f"{diag.severity.value}[{diag.code}]", accent)
                  + self._paint(f": {diag.message}", _BOLD))
        span = diag.span
        if span is None:
            return header

        bar = self._paint("     |", _BLUE)
        out = [header, f"  {self._paint('-->', _BLUE)} {span}", bar]
        label = diag.labels[0].message
        text = self._source_line(span.file, span.start_line)
        if text is None:
            if label:
                out.append(f"{bar} {self._paint(label, accent)}")
            return "\n".join(out)

        # Carets cover the span on its first line only.
        width = max(1, span.end_col - span.start_col + 1)
        carets = self._paint("^" * width + (f" {label}" if label else ""), accent)
        out.append(f"{self._paint(f'{span.start_line:>4} |', _BLUE)} {text}")
        out.append(f"{bar} {' ' * (span.start_col - 1)}{carets}")
        return "\n".join(out)


class CompileError(Exception):
    """Batch error carrying multiple diagnostics."""

    def __init__(self, diagnostics: list[Diagnostic]) -> None:
        self.diagnostics = diagnostics
        messages = [d.message for d in diagnostics]
        super().__init__(f"{len(diagnostics)} error(s): {'; '.join(messages)}")
