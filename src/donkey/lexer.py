"""Lexer for the Donkey language.

Produces tokens one at a time on demand. The lexer keeps a single character
of state (the character under the read cursor) and never buffers the token
stream; the parser pulls from it as it goes.
"""

from __future__ import annotations

import logging
import string
from collections.abc import Iterator

from donkey.source import Span
from donkey.tokens import SINGLE_CHAR_TOKENS, Token, TokenKind, lookup_ident

logger = logging.getLogger(__name__)

# Marker for "no character": the read cursor has run past the source.
_END = ""

_WHITESPACE = frozenset(" \t\n\r")
_LETTERS = frozenset(string.ascii_letters + "_")
_DIGITS = frozenset(string.digits)


class Lexer:
    """Tokenizes Donkey source code, one token per ``next_token`` call."""

    def __init__(self, source: str, filename: str = "<stdin>") -> None:
        self.source = source
        self.filename = filename
        self.position = 0
        self.read_position = 0
        self.ch = _END
        self.line = 1
        self.col = 0
        self._read_char()

    def __iter__(self) -> Iterator[Token]:
        """Yield tokens up to and including the first EOF."""
        while True:
            tok = self.next_token()
            yield tok
            if tok.kind == TokenKind.EOF:
                return

    # ── Helpers ───────────────────────────────────────────────────

    def _read_char(self) -> None:
        if self.ch == "\n":
            self.line += 1
            self.col = 1
        elif self.read_position <= len(self.source):
            self.col += 1

        if self.read_position >= len(self.source):
            self.ch = _END
        else:
            self.ch = self.source[self.read_position]
        self.position = self.read_position
        self.read_position += 1

    def _peek_char(self) -> str:
        if self.read_position >= len(self.source):
            return _END
        return self.source[self.read_position]

    def _emit(self, kind: TokenKind, literal: str, start_line: int, start_col: int) -> Token:
        end_col = start_col + max(len(literal), 1) - 1
        span = Span(self.filename, start_line, start_col, start_line, end_col)
        return Token(kind, literal, span)

    def _skip_whitespace(self) -> None:
        while self.ch in _WHITESPACE:
            self._read_char()

    def _read_while(self, allowed: frozenset[str]) -> str:
        start = self.position
        while self.ch in allowed:
            self._read_char()
        return self.source[start:self.position]

    # ── Tokens ───────────────────────────────────────────────────

    def next_token(self) -> Token:
        """Return the next token and advance past it.

        Past the end of the source every call returns an EOF token with an
        empty literal.
        """
        self._skip_whitespace()
        start_line = self.line
        start_col = self.col
        ch = self.ch

        # Identifier and number scans stop on the first character after the
        # token, so they return without the trailing advance.
        if ch in _LETTERS:
            word = self._read_while(_LETTERS)
            return self._emit(lookup_ident(word), word, start_line, start_col)
        if ch in _DIGITS:
            digits = self._read_while(_DIGITS)
            return self._emit(TokenKind.INT, digits, start_line, start_col)

        if ch == "=" and self._peek_char() == "=":
            self._read_char()
            tok = self._emit(TokenKind.EQ, "==", start_line, start_col)
        elif ch == "=":
            tok = self._emit(TokenKind.ASSIGN, "=", start_line, start_col)
        elif ch == "!" and self._peek_char() == "=":
            self._read_char()
            tok = self._emit(TokenKind.NOT_EQ, "!=", start_line, start_col)
        elif ch == "!":
            tok = self._emit(TokenKind.BANG, "!", start_line, start_col)
        elif ch in SINGLE_CHAR_TOKENS:
            tok = self._emit(SINGLE_CHAR_TOKENS[ch], ch, start_line, start_col)
        elif ch == _END:
            tok = self._emit(TokenKind.EOF, "", start_line, start_col)
        else:
            logger.debug("illegal character %r at %s:%d:%d",
                         ch, self.filename, start_line, start_col)
            tok = self._emit(TokenKind.ILLEGAL, ch, start_line, start_col)

        self._read_char()
        return tok


def tokenize(source: str, filename: str = "<stdin>") -> list[Token]:
    """Tokenize the entire source, EOF included."""
    return list(Lexer(source, filename))
