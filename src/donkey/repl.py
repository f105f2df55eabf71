"""Interactive shell: reads lines and echoes their tokens or their parse."""

from __future__ import annotations

import json
import logging
from typing import TextIO

import click

from donkey.config import ReplConfig
from donkey.lexer import Lexer
from donkey.parser import Parser
from donkey.tokens import Token

logger = logging.getLogger(__name__)

WELCOME = (
    "Welcome to the Donkey REPL!\n"
    "Type a line of Donkey code to see what it becomes.\n"
    "Use the command `{exit}` or CTRL-D to exit the REPL.\n"
)


def token_record(tok: Token) -> str:
    """Render a token as the JSON debug record the shell prints."""
    return json.dumps({"type": tok.kind.name, "literal": tok.literal}, indent=2)


def _echo_tokens(line: str, output: TextIO) -> None:
    for tok in Lexer(line, "<repl>"):
        click.echo(token_record(tok), file=output)


def _echo_parse(line: str, output: TextIO) -> None:
    parser = Parser(Lexer(line, "<repl>"))
    program = parser.parse_program()
    errors = parser.errors()
    if errors:
        click.echo("parser errors:", file=output)
        for msg in errors:
            click.echo(f"\t{msg}", file=output)
        return
    click.echo(str(program), file=output)


def start(input: TextIO, output: TextIO, config: ReplConfig | None = None) -> None:
    """Run the read-echo loop until the exit command or end of input."""
    config = config or ReplConfig()
    handler = _echo_parse if config.mode == "parse" else _echo_tokens
    logger.debug("starting repl in %s mode", config.mode)

    if config.welcome:
        click.echo(WELCOME.format(exit=config.exit_command), file=output, nl=False)

    while True:
        click.echo(config.prompt, file=output, nl=False)
        line = input.readline()
        if not line:
            click.echo(file=output)
            return
        if line.strip() == config.exit_command:
            return
        handler(line, output)
