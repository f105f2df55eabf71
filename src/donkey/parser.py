"""Parser for the Donkey language.

Pulls tokens from a ``Lexer`` with one token of lookahead and builds an AST
using recursive descent for statements and a Pratt expression parser for
expressions.

Malformed input never raises. Each mismatch is recorded as a ``Diagnostic``,
the construct that failed is dropped (or left absent inside its parent) and
parsing carries on with the next statement.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import IntEnum
from types import MappingProxyType

from donkey.ast_nodes import (
    BlockStatement,
    BooleanExpression,
    CallExpression,
    Expression,
    ExpressionStatement,
    FunctionLiteral,
    Identifier,
    IfExpression,
    InfixExpression,
    IntegerLiteral,
    LetStatement,
    PrefixExpression,
    Program,
    ReturnStatement,
    Statement,
)
from donkey.errors import (
    INVALID_INTEGER,
    NESTED_TOO_DEEPLY,
    NO_PREFIX_PARSE_FN,
    PEEK_MISMATCH,
    CompileError,
    Diagnostic,
    DiagnosticLabel,
    Severity,
)
from donkey.lexer import Lexer
from donkey.source import Span
from donkey.tokens import Token, TokenKind

logger = logging.getLogger(__name__)


class Precedence(IntEnum):
    LOWEST = 1
    EQUALS = 2       # ==
    LESSGREATER = 3  # < or >
    SUM = 4          # +
    PRODUCT = 5      # *
    PREFIX = 6       # -x or !x
    CALL = 7         # f(x)


_PRECEDENCES: MappingProxyType[TokenKind, Precedence] = MappingProxyType({
    TokenKind.EQ: Precedence.EQUALS,
    TokenKind.NOT_EQ: Precedence.EQUALS,
    TokenKind.LT: Precedence.LESSGREATER,
    TokenKind.GT: Precedence.LESSGREATER,
    TokenKind.PLUS: Precedence.SUM,
    TokenKind.MINUS: Precedence.SUM,
    TokenKind.ASTERISK: Precedence.PRODUCT,
    TokenKind.SLASH: Precedence.PRODUCT,
    TokenKind.LPAREN: Precedence.CALL,
})


class Parser:
    """Parses the tokens of a ``Lexer`` into a Donkey ``Program``."""

    def __init__(self, lexer: Lexer) -> None:
        self.lexer = lexer
        self.diagnostics: list[Diagnostic] = []
        self.current_token: Token = lexer.next_token()
        self.peek_token: Token = lexer.next_token()

    # ── Token access ─────────────────────────────────────────────

    def _next_token(self) -> None:
        self.current_token = self.peek_token
        self.peek_token = self.lexer.next_token()

    def _cur_token_is(self, kind: TokenKind) -> bool:
        return self.current_token.kind == kind

    def _peek_token_is(self, kind: TokenKind) -> bool:
        return self.peek_token.kind == kind

    def _expect_peek(self, kind: TokenKind) -> bool:
        """Advance if the lookahead is ``kind``; otherwise record a mismatch."""
        if self._peek_token_is(kind):
            self._next_token()
            return True
        self._peek_error(kind)
        return False

    def _peek_precedence(self) -> Precedence:
        return _PRECEDENCES.get(self.peek_token.kind, Precedence.LOWEST)

    def _cur_precedence(self) -> Precedence:
        return _PRECEDENCES.get(self.current_token.kind, Precedence.LOWEST)

    # ── Diagnostics ──────────────────────────────────────────────

    def _error(self, code: str, message: str, span: Span, label: str = "") -> None:
        logger.debug("%s: %s", span, message)
        self.diagnostics.append(
            Diagnostic(
                severity=Severity.ERROR,
                code=code,
                message=message,
                labels=[DiagnosticLabel(span=span, message=label)],
            )
        )

    def _peek_error(self, kind: TokenKind) -> None:
        tok = self.peek_token
        self._error(
            PEEK_MISMATCH,
            f"expected next token to be {kind.name}, got {tok.kind.name} instead",
            tok.span,
            f"expected {kind.name}",
        )

    def _no_prefix_parse_fn_error(self, tok: Token) -> None:
        self._error(
            NO_PREFIX_PARSE_FN,
            f"no prefix parse function for {tok.kind.name} found",
            tok.span,
            "expression cannot start here",
        )

    def _nesting_error(self, start: Token) -> None:
        """Record a statement too deep to parse and skip to its end."""
        self._error(
            NESTED_TOO_DEEPLY,
            "expression nested too deeply",
            start.span,
            "statement starts here",
        )
        while not (self._cur_token_is(TokenKind.SEMICOLON) or self._cur_token_is(TokenKind.EOF)):
            self._next_token()

    def errors(self) -> list[str]:
        """Return the recorded diagnostic messages in the order they occurred."""
        return [d.message for d in self.diagnostics]

    def raise_for_errors(self) -> None:
        """Raise ``CompileError`` if any diagnostic was recorded."""
        if self.diagnostics:
            raise CompileError(list(self.diagnostics))

    # ── Statements ───────────────────────────────────────────────

    def parse_program(self) -> Program:
        """Parse statements until EOF.

        Always returns a ``Program``; check ``errors()`` before trusting it.
        """
        statements: list[Statement] = []
        while not self._cur_token_is(TokenKind.EOF):
            start = self.current_token
            try:
                stmt = self._parse_statement()
            except RecursionError:
                self._nesting_error(start)
                stmt = None
            if stmt is not None:
                statements.append(stmt)
            self._next_token()
        logger.debug(
            "parsed %d statement(s) from %s with %d error(s)",
            len(statements), self.lexer.filename, len(self.diagnostics),
        )
        return Program(statements)

    def _parse_statement(self) -> Statement | None:
        kind = self.current_token.kind
        if kind == TokenKind.LET:
            return self._parse_let_statement()
        if kind == TokenKind.RETURN:
            return self._parse_return_statement()
        return self._parse_expression_statement()

    def _parse_let_statement(self) -> LetStatement | None:
        tok = self.current_token
        if not self._expect_peek(TokenKind.IDENT):
            return None
        name = Identifier(self.current_token, self.current_token.literal)
        if not self._expect_peek(TokenKind.ASSIGN):
            return None

        self._next_token()
        value = self._parse_expression(Precedence.LOWEST)
        if self._peek_token_is(TokenKind.SEMICOLON):
            self._next_token()
        return LetStatement(tok, name, value)

    def _parse_return_statement(self) -> ReturnStatement:
        tok = self.current_token
        self._next_token()
        value = self._parse_expression(Precedence.LOWEST)
        if self._peek_token_is(TokenKind.SEMICOLON):
            self._next_token()
        return ReturnStatement(tok, value)

    def _parse_expression_statement(self) -> ExpressionStatement | None:
        tok = self.current_token
        expr = self._parse_expression(Precedence.LOWEST)
        if self._peek_token_is(TokenKind.SEMICOLON):
            self._next_token()
        if expr is None:
            return None
        return ExpressionStatement(tok, expr)

    def _parse_block_statement(self) -> BlockStatement:
        tok = self.current_token
        statements: list[Statement] = []
        self._next_token()
        while not self._cur_token_is(TokenKind.RBRACE) and not self._cur_token_is(TokenKind.EOF):
            stmt = self._parse_statement()
            if stmt is not None:
                statements.append(stmt)
            self._next_token()
        return BlockStatement(tok, statements)

    # ── Pratt expression parser ──────────────────────────────────

    def _parse_expression(self, precedence: Precedence) -> Expression | None:
        """Parse an expression whose operators all bind tighter than ``precedence``."""
        prefix = _PREFIX_PARSE_FNS.get(self.current_token.kind)
        if prefix is None:
            self._no_prefix_parse_fn_error(self.current_token)
            return None
        left = prefix(self)

        while (left is not None
               and not self._peek_token_is(TokenKind.SEMICOLON)
               and precedence < self._peek_precedence()):
            infix = _INFIX_PARSE_FNS.get(self.peek_token.kind)
            if infix is None:
                return left
            self._next_token()
            left = infix(self, left)

        return left

    def _parse_identifier(self) -> Expression:
        tok = self.current_token
        return Identifier(tok, tok.literal)

    def _parse_integer_literal(self) -> Expression:
        tok = self.current_token
        try:
            value: int | None = int(tok.literal, 10)
        except ValueError:
            self._error(
                INVALID_INTEGER,
                f"could not parse {tok.literal} as number",
                tok.span,
                "not a valid integer",
            )
            value = None
        return IntegerLiteral(tok, value)

    def _parse_boolean(self) -> Expression:
        tok = self.current_token
        return BooleanExpression(tok, tok.kind == TokenKind.TRUE)

    def _parse_prefix_expression(self) -> Expression:
        tok = self.current_token
        self._next_token()
        right = self._parse_expression(Precedence.PREFIX)
        return PrefixExpression(tok, tok.literal, right)

    def _parse_infix_expression(self, left: Expression) -> Expression:
        tok = self.current_token
        # Parsing the right operand at this operator's own precedence stops it
        # before any operator that binds no tighter, which makes these
        # operators left-associative.
        precedence = self._cur_precedence()
        self._next_token()
        right = self._parse_expression(precedence)
        return InfixExpression(tok, left, tok.literal, right)

    def _parse_grouped_expression(self) -> Expression | None:
        self._next_token()
        expr = self._parse_expression(Precedence.LOWEST)
        if not self._expect_peek(TokenKind.RPAREN):
            return None
        return expr

    def _parse_if_expression(self) -> Expression | None:
        tok = self.current_token
        self._next_token()
        condition = self._parse_expression(Precedence.LOWEST)
        if condition is None:
            return None
        if not self._expect_peek(TokenKind.LBRACE):
            return None
        consequence = self._parse_block_statement()

        alternative = None
        if self._peek_token_is(TokenKind.ELSE):
            self._next_token()
            if not self._expect_peek(TokenKind.LBRACE):
                return None
            alternative = self._parse_block_statement()

        return IfExpression(tok, condition, consequence, alternative)

    def _parse_function_literal(self) -> Expression | None:
        tok = self.current_token
        if not self._expect_peek(TokenKind.LPAREN):
            return None
        parameters = self._parse_function_parameters()
        if parameters is None:
            return None
        if not self._expect_peek(TokenKind.LBRACE):
            return None
        body = self._parse_block_statement()
        return FunctionLiteral(tok, parameters, body)

    def _parse_function_parameters(self) -> list[Identifier] | None:
        parameters: list[Identifier] = []
        if self._peek_token_is(TokenKind.RPAREN):
            self._next_token()
            return parameters

        if not self._expect_peek(TokenKind.IDENT):
            return None
        parameters.append(Identifier(self.current_token, self.current_token.literal))
        while self._peek_token_is(TokenKind.COMMA):
            self._next_token()
            if not self._expect_peek(TokenKind.IDENT):
                return None
            parameters.append(Identifier(self.current_token, self.current_token.literal))

        if not self._expect_peek(TokenKind.RPAREN):
            return None
        return parameters

    def _parse_call_expression(self, function: Expression) -> Expression | None:
        tok = self.current_token
        arguments = self._parse_expression_list(TokenKind.RPAREN)
        if arguments is None:
            return None
        return CallExpression(tok, function, arguments)

    def _parse_expression_list(self, end: TokenKind) -> list[Expression] | None:
        items: list[Expression] = []
        if self._peek_token_is(end):
            self._next_token()
            return items

        self._next_token()
        item = self._parse_expression(Precedence.LOWEST)
        if item is None:
            return None
        items.append(item)
        while self._peek_token_is(TokenKind.COMMA):
            self._next_token()
            self._next_token()
            item = self._parse_expression(Precedence.LOWEST)
            if item is None:
                return None
            items.append(item)

        if not self._expect_peek(end):
            return None
        return items


PrefixParseFn = Callable[[Parser], "Expression | None"]
InfixParseFn = Callable[[Parser, Expression], "Expression | None"]

# The grammar is closed: these tables are fixed when the module loads.
_PREFIX_PARSE_FNS: MappingProxyType[TokenKind, PrefixParseFn] = MappingProxyType({
    TokenKind.IDENT: Parser._parse_identifier,
    TokenKind.INT: Parser._parse_integer_literal,
    TokenKind.TRUE: Parser._parse_boolean,
    TokenKind.FALSE: Parser._parse_boolean,
    TokenKind.BANG: Parser._parse_prefix_expression,
    TokenKind.MINUS: Parser._parse_prefix_expression,
    TokenKind.LPAREN: Parser._parse_grouped_expression,
    TokenKind.IF: Parser._parse_if_expression,
    TokenKind.FUNCTION: Parser._parse_function_literal,
})

_INFIX_PARSE_FNS: MappingProxyType[TokenKind, InfixParseFn] = MappingProxyType({
    TokenKind.PLUS: Parser._parse_infix_expression,
    TokenKind.MINUS: Parser._parse_infix_expression,
    TokenKind.ASTERISK: Parser._parse_infix_expression,
    TokenKind.SLASH: Parser._parse_infix_expression,
    TokenKind.EQ: Parser._parse_infix_expression,
    TokenKind.NOT_EQ: Parser._parse_infix_expression,
    TokenKind.LT: Parser._parse_infix_expression,
    TokenKind.GT: Parser._parse_infix_expression,
    TokenKind.LPAREN: Parser._parse_call_expression,
})


def parse(source: str, filename: str = "<stdin>") -> tuple[Program, list[str]]:
    """Lex and parse ``source``; return the program and its error messages."""
    parser = Parser(Lexer(source, filename))
    program = parser.parse_program()
    return program, parser.errors()
