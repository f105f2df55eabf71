"""AST node definitions for the Donkey language.

Every node keeps the token that introduced it, so ``token_literal()`` can
report the source text behind a node in diagnostics. ``str(node)`` is the
canonical rendering: infix and prefix expressions are fully parenthesized,
which makes the rendering of a parsed program spell out the precedence the
parser chose.

Nodes are frozen. The parser gathers the parts of a node in locals and
builds the node once they are all known; a field typed ``X | None`` is
absent only when a diagnostic was recorded for it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from donkey.source import Span
from donkey.tokens import Token


def _render(node: object | None) -> str:
    return "" if node is None else str(node)


class _TokenNode:
    token: Token

    def token_literal(self) -> str:
        return self.token.literal

    @property
    def span(self) -> Span:
        return self.token.span


# ── Expressions ──────────────────────────────────────────────────


@dataclass(frozen=True)
class Identifier(_TokenNode):
    token: Token
    value: str

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class IntegerLiteral(_TokenNode):
    token: Token
    value: int | None  # None when the literal could not be converted

    def __str__(self) -> str:
        return self.token.literal


@dataclass(frozen=True)
class BooleanExpression(_TokenNode):
    token: Token
    value: bool

    def __str__(self) -> str:
        return "true" if self.value else "false"


@dataclass(frozen=True)
class PrefixExpression(_TokenNode):
    token: Token
    operator: str
    right: Expression | None

    def __str__(self) -> str:
        return f"({self.operator}{_render(self.right)})"


@dataclass(frozen=True)
class InfixExpression(_TokenNode):
    token: Token
    left: Expression
    operator: str
    right: Expression | None

    def __str__(self) -> str:
        return f"({self.left} {self.operator} {_render(self.right)})"


@dataclass(frozen=True)
class IfExpression(_TokenNode):
    token: Token
    condition: Expression
    consequence: BlockStatement
    alternative: BlockStatement | None

    def __str__(self) -> str:
        out = f"if {self.condition} {self.consequence}"
        if self.alternative is not None:
            out += f" else {self.alternative}"
        return out


@dataclass(frozen=True)
class FunctionLiteral(_TokenNode):
    token: Token
    parameters: list[Identifier]
    body: BlockStatement

    def __str__(self) -> str:
        params = ", ".join(str(p) for p in self.parameters)
        return f"{self.token_literal()}({params}) {self.body}"


@dataclass(frozen=True)
class CallExpression(_TokenNode):
    token: Token  # the '(' token
    function: Expression
    arguments: list[Expression]

    def __str__(self) -> str:
        args = ", ".join(str(a) for a in self.arguments)
        return f"{self.function}({args})"


Expression = Union[
    Identifier, IntegerLiteral, BooleanExpression,
    PrefixExpression, InfixExpression,
    IfExpression, FunctionLiteral, CallExpression,
]


# ── Statements ───────────────────────────────────────────────────


@dataclass(frozen=True)
class LetStatement(_TokenNode):
    token: Token
    name: Identifier
    value: Expression | None

    def __str__(self) -> str:
        return f"{self.token_literal()} {self.name} = {_render(self.value)};"


@dataclass(frozen=True)
class ReturnStatement(_TokenNode):
    token: Token
    return_value: Expression | None

    def __str__(self) -> str:
        return f"{self.token_literal()} {_render(self.return_value)};"


@dataclass(frozen=True)
class ExpressionStatement(_TokenNode):
    token: Token  # first token of the expression
    expression: Expression | None

    def __str__(self) -> str:
        return _render(self.expression)


@dataclass(frozen=True)
class BlockStatement(_TokenNode):
    token: Token  # the '{' token
    statements: list[Statement]

    def __str__(self) -> str:
        if not self.statements:
            return "{}"
        # Expression statements carry no terminator of their own; all but the
        # last get one so the block re-parses into the same statements.
        last = len(self.statements) - 1
        parts = [
            f"{s};" if isinstance(s, ExpressionStatement) and i < last else str(s)
            for i, s in enumerate(self.statements)
        ]
        return "{ " + " ".join(parts) + " }"


Statement = Union[LetStatement, ReturnStatement, ExpressionStatement, BlockStatement]


@dataclass(frozen=True)
class Program:
    statements: list[Statement]

    def token_literal(self) -> str:
        if self.statements:
            return self.statements[0].token_literal()
        return ""

    def __str__(self) -> str:
        return "".join(str(s) for s in self.statements)
