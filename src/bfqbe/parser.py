"""
Parser
======

This module builds an AST from the token list produced by the lexer.

Grammar
-------
block           ::= statement*
statement       ::= move_left | move_right | add | subtract
                  | read | write | loop
loop            ::= '[' block ']'

Blocks are greedy-and-stop: the parser keeps parsing statements until an
attempt fails, then rewinds to where that attempt started and ends the
block there. This is how ']' ends a loop body without the block rule
looking ahead for it.

Open loops are kept on an explicit stack of frames, one per unclosed
'[', so nesting depth is not limited by the Python recursion limit.

Error Severity
--------------
Every ParseError carries a Severity. A block only backtracks over
RECOVERABLE errors; a FATAL error propagates straight to the caller.
The grammar above only produces RECOVERABLE errors.

At the top level the whole token list must be consumed. When tokens
remain, the error that stopped the outer block is reported: an unmatched
'[' gives EndOfInputError, a stray ']' gives UnexpectedTokenError.

Example Usage
-------------
>>> from bfqbe.parser import parse_source
>>> from bfqbe.ast import ASTPrinter
>>> print(ASTPrinter().print(parse_source("[-]")))
Block
  Loop
    Block
      Subtract(1)
"""

from dataclasses import dataclass, field
from typing import Optional

from bfqbe.ast import (
    Block,
    Statement,
    MoveLeft,
    MoveRight,
    Add,
    Subtract,
    Read,
    Write,
    Loop,
)
from bfqbe.errors import ParseError, UnexpectedTokenError, EndOfInputError
from bfqbe.lexer import Lexer, Token, TokenType


# Tokens that map one-to-one onto a statement node
COUNTED_STATEMENTS: dict[TokenType, type[Statement]] = {
    TokenType.MOVE_LEFT: MoveLeft,
    TokenType.MOVE_RIGHT: MoveRight,
    TokenType.INCREMENT: Add,
    TokenType.DECREMENT: Subtract,
}

SIMPLE_STATEMENTS: dict[TokenType, type[Statement]] = {
    TokenType.READ: Read,
    TokenType.WRITE: Write,
}


@dataclass
class _Frame:
    """A block under construction: the program, or the body of an open '['."""
    opener: Optional[Token]
    statements: list[Statement] = field(default_factory=list)


class Parser:
    """
    Parser producing a program Block from a token list.

    Attributes:
        tokens: List of tokens to parse
        filename: Source filename for error reporting
        source_lines: Original source lines for error context
    """

    def __init__(
        self,
        tokens: list[Token],
        filename: str = "<input>",
        source_lines: Optional[list[str]] = None,
    ):
        self.tokens = tokens
        self.filename = filename
        self.source_lines = source_lines or []

        # Current position in token stream
        self._pos = 0

    def parse(self) -> Block:
        """
        Parse the token list into an AST.

        Returns:
            The program Block

        Raises:
            ParseError: If the tokens do not form a program
        """
        self._pos = 0

        # Innermost open block last; the program frame has no opener
        frames: list[_Frame] = [_Frame(None)]

        while True:
            frame = frames[-1]

            if self._check(TokenType.LOOP_OPEN):
                frames.append(_Frame(self._advance()))
                continue

            start = self._pos
            try:
                frame.statements.append(self._parse_statement())
                continue
            except ParseError as e:
                if e.is_fatal:
                    raise
                self._pos = start
                stop = e

            # The block in `frame` ends here
            if frame.opener is None:
                if not self._at_end():
                    raise stop
                return Block(frame.statements)

            if self._check(TokenType.LOOP_CLOSE):
                self._advance()
                frames.pop()
                frames[-1].statements.append(Loop(Block(frame.statements)))
                continue

            if self._at_end():
                raise EndOfInputError(
                    expected="]",
                    location=frame.opener.location,
                    hint="'[' opened here is never closed",
                    source_line=self._get_source_line(frame.opener.line),
                )

            raise stop

    # =========================================================================
    # Token Access Methods
    # =========================================================================

    def _at_end(self) -> bool:
        return self._pos >= len(self.tokens)

    def _peek(self) -> Optional[Token]:
        """Current token, or None past the end."""
        if self._at_end():
            return None
        return self.tokens[self._pos]

    def _advance(self) -> Token:
        token = self.tokens[self._pos]
        self._pos += 1
        return token

    def _check(self, token_type: TokenType) -> bool:
        token = self._peek()
        return token is not None and token.type == token_type

    def _get_source_line(self, line: int) -> Optional[str]:
        """Get source line for error reporting."""
        if 0 < line <= len(self.source_lines):
            return self.source_lines[line - 1]
        return None

    # =========================================================================
    # Grammar Rules
    # =========================================================================

    def _parse_statement(self) -> Statement:
        """
        Parse one statement that is not a loop.

        Raises:
            EndOfInputError: At the end of the token list
            UnexpectedTokenError: On a ']'
        """
        token = self._peek()
        if token is None:
            raise EndOfInputError()

        if token.is_counted():
            self._advance()
            return COUNTED_STATEMENTS[token.type](token.count)

        if token.type in SIMPLE_STATEMENTS:
            self._advance()
            return SIMPLE_STATEMENTS[token.type]()

        raise UnexpectedTokenError(token, self._get_source_line(token.line))


# =============================================================================
# Convenience Functions
# =============================================================================

def parse(tokens: list[Token], filename: str = "<input>") -> Block:
    """Parse a token list into an AST."""
    return Parser(tokens, filename).parse()


def parse_source(source: str, filename: str = "<input>") -> Block:
    """Lex and parse source text into an AST."""
    tokens = list(Lexer(source, filename).tokenize())
    return Parser(tokens, filename, source.splitlines()).parse()
