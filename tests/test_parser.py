"""
Parser Test Suite
=================

Tests for the parser and the AST it builds.

Test Organization
-----------------
- TestStatements: token to statement mapping
- TestLoops: nesting and bracket matching
- TestErrors: EndOfInput / UnexpectedToken classification and messages
- TestSeverity: backtracking over recoverable errors only
- TestASTPrinter: debug view of the tree
"""

import sys

import pytest
from bfqbe.lexer import Token, TokenType, tokenize
from bfqbe.parser import Parser, parse, parse_source
from bfqbe.ast import (
    Attr,
    Block,
    MoveLeft,
    MoveRight,
    Add,
    Subtract,
    Read,
    Write,
    Loop,
    ASTPrinter,
    ASTVisitor,
    loop_depth,
)
from bfqbe.errors import (
    ParseError,
    UnexpectedTokenError,
    EndOfInputError,
    Severity,
)


# =============================================================================
# Statement Tests
# =============================================================================

class TestStatements:
    """Tests for mapping tokens onto statements."""

    def test_empty_program(self):
        """No tokens parse to an empty block."""
        assert parse([]) == Block([])

    def test_single_statements(self):
        tokens = [
            Token(TokenType.MOVE_LEFT, 1),
            Token(TokenType.MOVE_RIGHT, 2),
            Token(TokenType.INCREMENT, 3),
            Token(TokenType.DECREMENT, 4),
            Token(TokenType.READ),
            Token(TokenType.WRITE),
        ]
        assert parse(tokens) == Block([
            MoveLeft(1),
            MoveRight(2),
            Add(3),
            Subtract(4),
            Read(),
            Write(),
        ])

    def test_counts_carried_over(self):
        program = parse_source(">>>>>")
        assert program.statements == [MoveRight(5)]

    def test_add_then_write(self):
        """'+++.' parses to Add(3), Write."""
        assert parse_source("+++.") == Block([Add(3), Write()])

    def test_commentary_ignored(self):
        assert parse_source("set cell: +\nprint: .") == Block([Add(1), Write()])

    def test_every_node_has_attr(self):
        program = parse_source("+[-]")
        assert isinstance(program.attr, Attr)
        assert isinstance(program.statements[0].attr, Attr)
        assert isinstance(program.statements[1].body.attr, Attr)


# =============================================================================
# Loop Tests
# =============================================================================

class TestLoops:
    """Tests for loop parsing."""

    def test_clear_cell_idiom(self):
        """'[-]' is a loop containing one Subtract(1)."""
        assert tokenize("[-]") == [
            Token(TokenType.LOOP_OPEN),
            Token(TokenType.DECREMENT, 1),
            Token(TokenType.LOOP_CLOSE),
        ]
        assert parse_source("[-]") == Block([Loop(Block([Subtract(1)]))])

    def test_empty_loop(self):
        assert parse_source("[]") == Block([Loop(Block([]))])

    def test_statements_around_loop(self):
        program = parse_source("+[>+<-]>.")
        assert program == Block([
            Add(1),
            Loop(Block([MoveRight(1), Add(1), MoveLeft(1), Subtract(1)])),
            MoveRight(1),
            Write(),
        ])

    def test_sibling_loops(self):
        program = parse_source("[-][+]")
        assert len(program.statements) == 2
        assert all(isinstance(s, Loop) for s in program.statements)

    @pytest.mark.parametrize("source,depth", [
        ("", 0),
        ("+-", 0),
        ("[]", 1),
        ("[[]]", 2),
        ("[[][[]]]", 3),
        ("[-]" * 3, 1),
        ("[" * 50 + "]" * 50, 50),
    ])
    def test_nesting_depth_matches_brackets(self, source, depth):
        assert loop_depth(parse_source(source)) == depth

    def test_deeply_nested_body(self):
        program = parse_source("[[[+]]]")
        inner = program.statements[0].body.statements[0].body.statements[0].body
        assert inner == Block([Add(1)])

    def test_nesting_beyond_recursion_limit(self):
        depth = sys.getrecursionlimit() + 500
        program = parse_source("+" + "[>" * depth + "." + "]" * depth)

        assert loop_depth(program) == depth
        node = program.statements[1]
        for _ in range(depth - 1):
            node = node.body.statements[1]
        assert isinstance(node.body.statements[0], MoveRight)
        assert isinstance(node.body.statements[1], Write)


# =============================================================================
# Error Tests
# =============================================================================

class TestErrors:
    """Tests for error classification and reporting."""

    def test_unmatched_open_is_end_of_input(self):
        with pytest.raises(EndOfInputError):
            parse_source("[")

    def test_unmatched_open_after_statements(self):
        with pytest.raises(EndOfInputError):
            parse_source("+++[->+<")

    def test_unmatched_nested_open_is_end_of_input(self):
        """A nested unclosed loop still reports end of input."""
        with pytest.raises(EndOfInputError):
            parse_source("[[")
        with pytest.raises(EndOfInputError):
            parse_source("[[]")
        with pytest.raises(EndOfInputError):
            parse_source("+[[-]>[")

    def test_stray_close_is_unexpected_token(self):
        with pytest.raises(UnexpectedTokenError) as exc_info:
            parse_source("]")
        assert exc_info.value.token == Token(TokenType.LOOP_CLOSE)

    def test_stray_close_after_loop(self):
        with pytest.raises(UnexpectedTokenError):
            parse_source("[-]]")

    def test_stray_close_location(self):
        with pytest.raises(UnexpectedTokenError) as exc_info:
            parse_source("+\n  ]", "prog.bf")
        location = exc_info.value.location
        assert (location.filename, location.line, location.column) == ("prog.bf", 2, 3)

    def test_unexpected_token_message(self):
        with pytest.raises(UnexpectedTokenError) as exc_info:
            parse_source("+++]", "prog.bf")
        message = str(exc_info.value)
        assert message.startswith("prog.bf:1:4: error: unexpected token ']'")
        assert "    +++]" in message
        assert "       ^" in message
        assert "hint: ']' has no matching '['" in message

    def test_underline_covers_whole_token(self):
        """A counted token is underlined across its full run."""
        token = Token(TokenType.INCREMENT, 3, line=1, column=2, filename="prog.bf")
        error = UnexpectedTokenError(token, source_line="[+++")
        assert str(error).splitlines() == [
            "prog.bf:1:2: error: unexpected token '+++'",
            "    [+++",
            "     ^^^",
        ]
        assert error.span == 3

    def test_end_of_input_points_at_opener(self):
        with pytest.raises(EndOfInputError) as exc_info:
            parse_source("+[-", "prog.bf")
        error = exc_info.value
        assert error.expected == "]"
        assert error.location.column == 2
        assert "expected ']'" in str(error)

    def test_errors_are_parse_errors(self):
        for source in ("[", "]"):
            with pytest.raises(ParseError):
                parse_source(source)

    def test_deep_unclosed_loop_reports_innermost_opener(self):
        with pytest.raises(EndOfInputError) as exc_info:
            parse_source("[" * 1000)
        assert exc_info.value.location.column == 1000

        with pytest.raises(EndOfInputError) as exc_info:
            parse_source("[" * 1000 + "]" * 999)
        assert exc_info.value.location.column == 1

    def test_deep_stray_close(self):
        with pytest.raises(UnexpectedTokenError) as exc_info:
            parse_source("[" * 1000 + "]" * 1001)
        assert exc_info.value.location.column == 2001

    def test_errors_from_raw_tokens(self):
        """Parser works on tokens without source lines."""
        with pytest.raises(UnexpectedTokenError):
            parse([Token(TokenType.LOOP_CLOSE)])
        with pytest.raises(EndOfInputError):
            parse([Token(TokenType.LOOP_OPEN)])


# =============================================================================
# Severity Tests
# =============================================================================

class TestSeverity:
    """Tests for the two-severity error model."""

    def test_grammar_errors_are_recoverable(self):
        for source in ("[", "]", "[[", "[]]"):
            with pytest.raises(ParseError) as exc_info:
                parse_source(source)
            assert exc_info.value.severity is Severity.RECOVERABLE
            assert not exc_info.value.is_fatal

    def test_fatal_error_is_not_backtracked(self, monkeypatch):
        """A fatal error propagates even where a recoverable one would end a block."""
        fatal = ParseError("boom", severity=Severity.FATAL)
        parse_statement = Parser._parse_statement

        def strict_statement(self):
            if self._check(TokenType.LOOP_CLOSE):
                raise fatal
            return parse_statement(self)

        monkeypatch.setattr(Parser, "_parse_statement", strict_statement)
        with pytest.raises(ParseError) as exc_info:
            parse_source("[-]")
        assert exc_info.value is fatal

    def test_recoverable_error_ends_block(self):
        """The ']' that stops a loop body is then consumed by the loop."""
        parser = Parser(tokenize("[+]-"))
        assert parser.parse() == Block([Loop(Block([Add(1)])), Subtract(1)])
        assert parser._pos == 4


# =============================================================================
# AST Printer and Visitor Tests
# =============================================================================

class TestASTPrinter:
    """Tests for the AST debug view."""

    def test_print_flat(self):
        output = ASTPrinter().print(parse_source("+++."))
        assert output == "Block\n  Add(3)\n  Write"

    def test_print_nested(self):
        output = ASTPrinter().print(parse_source(">[-<,]"))
        assert output.splitlines() == [
            "Block",
            "  MoveRight(1)",
            "  Loop",
            "    Block",
            "      Subtract(1)",
            "      MoveLeft(1)",
            "      Read",
        ]

    def test_print_statement_after_loop(self):
        output = ASTPrinter().print(parse_source("+[-]."))
        assert output.splitlines() == [
            "Block",
            "  Add(1)",
            "  Loop",
            "    Block",
            "      Subtract(1)",
            "  Write",
        ]

    def test_print_deep_nesting(self):
        depth = sys.getrecursionlimit() + 500
        lines = ASTPrinter().print(parse_source("[" * depth + "]" * depth)).splitlines()
        assert len(lines) == 2 * depth + 1
        assert lines[-1] == "  " * (2 * depth) + "Block"

    def test_print_empty(self):
        assert ASTPrinter().print(Block()) == "Block"

    def test_visitor_walks_whole_tree(self):
        class Counter(ASTVisitor):
            def __init__(self):
                self.adds = 0

            def visit_Add(self, node):
                self.adds += 1

        counter = Counter()
        counter.visit(parse_source("+[+[+]+]"))
        assert counter.adds == 4
