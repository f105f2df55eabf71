"""Donkey command line interface."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TextIO

import click

from donkey import __version__
from donkey.ast_nodes import Program
from donkey.config import REPL_MODES, DonkeyConfig, discover_config
from donkey.errors import CompileError, DiagnosticRenderer
from donkey.lexer import Lexer
from donkey.parser import Parser


def _renderer(config: DonkeyConfig, color: bool | None) -> DiagnosticRenderer:
    return DiagnosticRenderer(color=config.diagnostics.color if color is None else color)


def _parse_source(source: str, filename: str, renderer: DiagnosticRenderer) -> Program | None:
    """Parse one source text, echoing diagnostics. Returns None on errors."""
    parser = Parser(Lexer(source, filename))
    program = parser.parse_program()
    try:
        parser.raise_for_errors()
    except CompileError as e:
        renderer.add_source(filename, source)
        for diag in e.diagnostics:
            click.echo(renderer.render(diag), err=True)
        return None
    return program


@click.group()
@click.version_option(__version__, prog_name="donkey")
@click.option("-v", "--verbose", is_flag=True, help="Log lexer and parser activity.")
def main(verbose: bool) -> None:
    """Tokenizer and parser for the Donkey language."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@main.command()
@click.option("--mode", type=click.Choice(REPL_MODES), default=None,
              help="Echo tokens or the parsed program.")
@click.option("--prompt", default=None, help="Override the prompt string.")
def repl(mode: str | None, prompt: str | None) -> None:
    """Start the interactive shell."""
    from donkey.repl import start

    config = discover_config()
    if mode is not None:
        config.repl.mode = mode
    if prompt is not None:
        config.repl.prompt = prompt
    start(click.get_text_stream("stdin"), click.get_text_stream("stdout"), config.repl)


@main.command()
@click.argument("source", type=click.File("r"), default="-")
def tokens(source: TextIO) -> None:
    """Print the tokens of SOURCE, one per line."""
    for tok in Lexer(source.read(), source.name):
        click.echo(f"{tok.span}\t{tok.kind.name}\t{tok.literal}")


@main.command()
@click.argument("source", type=click.File("r"), default="-")
@click.option("--color/--no-color", default=None, help="Colorize diagnostics.")
def parse(source: TextIO, color: bool | None) -> None:
    """Parse SOURCE and print its canonical, fully parenthesized form."""
    renderer = _renderer(discover_config(), color)
    program = _parse_source(source.read(), source.name, renderer)
    if program is None:
        raise SystemExit(1)
    click.echo(str(program))


@main.command()
@click.argument("path", default=".", type=click.Path(exists=True, path_type=Path))
@click.option("--color/--no-color", default=None, help="Colorize diagnostics.")
def check(path: Path, color: bool | None) -> None:
    """Parse every Donkey file under PATH and report diagnostics."""
    config = discover_config(path)
    renderer = _renderer(config, color)

    if path.is_file():
        files = [path]
    else:
        files = sorted(path.rglob(f"*{config.check.extension}"))
    if not files:
        click.echo(f"warning: no {config.check.extension} files found", err=True)
        return

    failed = 0
    for file in files:
        if _parse_source(file.read_text(), str(file), renderer) is None:
            failed += 1

    if failed:
        click.echo(f"{failed} of {len(files)} file(s) had errors", err=True)
        raise SystemExit(1)
    click.echo(f"checked {len(files)} file(s): no errors")


@main.command()
def lsp() -> None:
    """Start the Donkey language server (stdio)."""
    from donkey.lsp import main as lsp_main

    lsp_main()
