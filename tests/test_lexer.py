"""Tests for the Donkey lexer."""

from __future__ import annotations

import pytest

from donkey.lexer import Lexer, tokenize
from donkey.tokens import KEYWORDS, TokenKind, lookup_ident


def lex(source: str) -> list[tuple[TokenKind, str]]:
    """Helper: lex source and return (kind, literal) pairs, excluding EOF."""
    return [(t.kind, t.literal) for t in tokenize(source) if t.kind != TokenKind.EOF]


def kinds(source: str) -> list[TokenKind]:
    """Helper: lex source and return just the token kinds, excluding EOF."""
    return [t.kind for t in tokenize(source) if t.kind != TokenKind.EOF]


class TestLexerBasic:
    def test_empty_source(self):
        tokens = tokenize("")
        assert len(tokens) == 1
        assert tokens[0].kind == TokenKind.EOF
        assert tokens[0].literal == ""

    def test_whitespace_only(self):
        tokens = tokenize(" \t\r\n  \n")
        assert [t.kind for t in tokens] == [TokenKind.EOF]

    def test_eof_is_sticky(self):
        lexer = Lexer("x")
        assert lexer.next_token().kind == TokenKind.IDENT
        for _ in range(5):
            tok = lexer.next_token()
            assert tok.kind == TokenKind.EOF
            assert tok.literal == ""

    def test_iteration_stops_after_first_eof(self):
        lexer = Lexer("a b")
        assert [t.kind for t in lexer] == [TokenKind.IDENT, TokenKind.IDENT, TokenKind.EOF]
        assert lexer.next_token().kind == TokenKind.EOF

    def test_iteration_is_lazy(self):
        lexer = Lexer("let x = 5;")
        it = iter(lexer)
        assert next(it).kind == TokenKind.LET
        assert lexer.ch == " "


class TestLexerOperators:
    @pytest.mark.parametrize("source, kind", [
        ("=", TokenKind.ASSIGN),
        ("+", TokenKind.PLUS),
        ("-", TokenKind.MINUS),
        ("*", TokenKind.ASTERISK),
        ("/", TokenKind.SLASH),
        ("<", TokenKind.LT),
        (">", TokenKind.GT),
        ("!", TokenKind.BANG),
        (",", TokenKind.COMMA),
        (";", TokenKind.SEMICOLON),
        ("(", TokenKind.LPAREN),
        (")", TokenKind.RPAREN),
        ("{", TokenKind.LBRACE),
        ("}", TokenKind.RBRACE),
        ("==", TokenKind.EQ),
        ("!=", TokenKind.NOT_EQ),
    ])
    def test_single_operator(self, source, kind):
        tokens = tokenize(source)
        assert [(t.kind, t.literal) for t in tokens] == [(kind, source), (TokenKind.EOF, "")]

    def test_punctuation_run(self):
        assert lex("=+(){},;") == [
            (TokenKind.ASSIGN, "="),
            (TokenKind.PLUS, "+"),
            (TokenKind.LPAREN, "("),
            (TokenKind.RPAREN, ")"),
            (TokenKind.LBRACE, "{"),
            (TokenKind.RBRACE, "}"),
            (TokenKind.COMMA, ","),
            (TokenKind.SEMICOLON, ";"),
        ]

    def test_double_char_consumes_both(self):
        assert lex("a == b != c") == [
            (TokenKind.IDENT, "a"),
            (TokenKind.EQ, "=="),
            (TokenKind.IDENT, "b"),
            (TokenKind.NOT_EQ, "!="),
            (TokenKind.IDENT, "c"),
        ]

    def test_triple_equals(self):
        assert kinds("===") == [TokenKind.EQ, TokenKind.ASSIGN]

    def test_bang_bang(self):
        assert kinds("!!x") == [TokenKind.BANG, TokenKind.BANG, TokenKind.IDENT]

    def test_bang_at_end(self):
        assert lex("!") == [(TokenKind.BANG, "!")]

    def test_spaced_equals_are_two_assigns(self):
        assert kinds("= =") == [TokenKind.ASSIGN, TokenKind.ASSIGN]


class TestLexerWords:
    def test_identifier(self):
        assert lex("foobar") == [(TokenKind.IDENT, "foobar")]

    def test_underscore_identifier(self):
        assert lex("_my_var") == [(TokenKind.IDENT, "_my_var")]

    def test_digits_end_identifier(self):
        assert lex("foo1") == [(TokenKind.IDENT, "foo"), (TokenKind.INT, "1")]

    @pytest.mark.parametrize("word, kind", [
        ("let", TokenKind.LET),
        ("fn", TokenKind.FUNCTION),
        ("if", TokenKind.IF),
        ("else", TokenKind.ELSE),
        ("true", TokenKind.TRUE),
        ("false", TokenKind.FALSE),
        ("return", TokenKind.RETURN),
    ])
    def test_keywords(self, word, kind):
        assert lex(word) == [(kind, word)]

    def test_keyword_prefix_is_identifier(self):
        assert lex("letter iffy returns") == [
            (TokenKind.IDENT, "letter"),
            (TokenKind.IDENT, "iffy"),
            (TokenKind.IDENT, "returns"),
        ]

    def test_keywords_are_case_sensitive(self):
        assert lex("Let TRUE") == [(TokenKind.IDENT, "Let"), (TokenKind.IDENT, "TRUE")]

    def test_keyword_table_is_closed(self):
        assert set(KEYWORDS) == {"let", "fn", "if", "else", "true", "false", "return"}
        assert lookup_ident("while") == TokenKind.IDENT

    def test_integer(self):
        assert lex("12345") == [(TokenKind.INT, "12345")]

    def test_leading_zeros_kept(self):
        assert lex("007") == [(TokenKind.INT, "007")]

    def test_trailing_identifier_at_eof(self):
        tokens = tokenize("let abc")
        assert [(t.kind, t.literal) for t in tokens] == [
            (TokenKind.LET, "let"),
            (TokenKind.IDENT, "abc"),
            (TokenKind.EOF, ""),
        ]

    def test_trailing_number_at_eof(self):
        assert lex("x 42") == [(TokenKind.IDENT, "x"), (TokenKind.INT, "42")]


class TestLexerIllegal:
    def test_unknown_character(self):
        assert lex("@") == [(TokenKind.ILLEGAL, "@")]

    def test_illegal_does_not_stop_lexing(self):
        assert lex("a $ b") == [
            (TokenKind.IDENT, "a"),
            (TokenKind.ILLEGAL, "$"),
            (TokenKind.IDENT, "b"),
        ]

    def test_non_ascii_letter_is_illegal(self):
        assert lex("é") == [(TokenKind.ILLEGAL, "é")]


class TestLexerProgram:
    def test_full_program(self):
        source = (
            "let five = 5;\n"
            "let add = fn(x, y) {\n"
            "  x + y;\n"
            "};\n"
            "!-/*5;\n"
            "5 < 10 > 5;\n"
            "if (5 < 10) { return true; } else { return false; }\n"
            "10 == 10; 10 != 9;\n"
        )
        assert lex(source) == [
            (TokenKind.LET, "let"), (TokenKind.IDENT, "five"), (TokenKind.ASSIGN, "="),
            (TokenKind.INT, "5"), (TokenKind.SEMICOLON, ";"),
            (TokenKind.LET, "let"), (TokenKind.IDENT, "add"), (TokenKind.ASSIGN, "="),
            (TokenKind.FUNCTION, "fn"), (TokenKind.LPAREN, "("), (TokenKind.IDENT, "x"),
            (TokenKind.COMMA, ","), (TokenKind.IDENT, "y"), (TokenKind.RPAREN, ")"),
            (TokenKind.LBRACE, "{"), (TokenKind.IDENT, "x"), (TokenKind.PLUS, "+"),
            (TokenKind.IDENT, "y"), (TokenKind.SEMICOLON, ";"), (TokenKind.RBRACE, "}"),
            (TokenKind.SEMICOLON, ";"),
            (TokenKind.BANG, "!"), (TokenKind.MINUS, "-"), (TokenKind.SLASH, "/"),
            (TokenKind.ASTERISK, "*"), (TokenKind.INT, "5"), (TokenKind.SEMICOLON, ";"),
            (TokenKind.INT, "5"), (TokenKind.LT, "<"), (TokenKind.INT, "10"),
            (TokenKind.GT, ">"), (TokenKind.INT, "5"), (TokenKind.SEMICOLON, ";"),
            (TokenKind.IF, "if"), (TokenKind.LPAREN, "("), (TokenKind.INT, "5"),
            (TokenKind.LT, "<"), (TokenKind.INT, "10"), (TokenKind.RPAREN, ")"),
            (TokenKind.LBRACE, "{"), (TokenKind.RETURN, "return"), (TokenKind.TRUE, "true"),
            (TokenKind.SEMICOLON, ";"), (TokenKind.RBRACE, "}"), (TokenKind.ELSE, "else"),
            (TokenKind.LBRACE, "{"), (TokenKind.RETURN, "return"), (TokenKind.FALSE, "false"),
            (TokenKind.SEMICOLON, ";"), (TokenKind.RBRACE, "}"),
            (TokenKind.INT, "10"), (TokenKind.EQ, "=="), (TokenKind.INT, "10"),
            (TokenKind.SEMICOLON, ";"), (TokenKind.INT, "10"), (TokenKind.NOT_EQ, "!="),
            (TokenKind.INT, "9"), (TokenKind.SEMICOLON, ";"),
        ]


class TestLexerSpans:
    def test_first_token_span(self):
        tok = Lexer("let", "t.dk").next_token()
        assert (tok.span.file, tok.span.start_line, tok.span.start_col) == ("t.dk", 1, 1)
        assert tok.span.end_col == 3

    def test_columns_after_whitespace(self):
        tokens = tokenize("  x == y")
        assert [(t.span.start_col, t.span.end_col) for t in tokens[:3]] == [
            (3, 3), (5, 6), (8, 8),
        ]

    def test_lines_advance_on_newline(self):
        tokens = tokenize("a\n  b\nc")
        assert [(t.span.start_line, t.span.start_col) for t in tokens[:3]] == [
            (1, 1), (2, 3), (3, 1),
        ]

    def test_eof_span_past_last_character(self):
        tokens = tokenize("ab")
        eof = tokens[-1]
        assert (eof.span.start_line, eof.span.start_col) == (1, 3)

    def test_span_str(self):
        tok = tokenize("\n x", "f.dk")[0]
        assert str(tok.span) == "f.dk:2:2"
