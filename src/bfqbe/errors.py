"""
bfqbe Error Hierarchy
=====================

This module defines the exception hierarchy for the compiler.
All exceptions inherit from BfError, allowing callers to catch every
compiler error with a single except clause.

Exception Hierarchy
-------------------
BfError (base)
└── CompilerError - errors tied to a source location
    ├── ParseError - parser errors, tagged with a Severity
    │   ├── UnexpectedTokenError - token that starts no statement
    │   └── EndOfInputError - token stream ended too early
    └── CodeGenError - code generation errors

Lexing is total and never raises.

Error Message Format
--------------------
    filename:line:column: error: description
        source_line_text
        ^ (pointer to error location)
    hint: suggestion for fixing

Example:
    hello.bf:3:7: error: unexpected token ']'
        +++.]
            ^
    hint: ']' has no matching '['
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from bfqbe.lexer import Token


# =============================================================================
# Base Exception Class
# =============================================================================

class BfError(Exception):
    """
    Base exception for all bfqbe errors.

        try:
            compile_source(source)
        except BfError as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    A location in source code for error reporting.

    Attributes:
        filename: Name of the source file (or "<input>" for string input)
        line: Line number (1-indexed)
        column: Column number (1-indexed)
    """
    filename: str
    line: int
    column: int

    def __str__(self) -> str:
        """Format as 'filename:line:column' for error messages."""
        return f"{self.filename}:{self.line}:{self.column}"


# =============================================================================
# Located Compiler Errors
# =============================================================================

# Indentation of the quoted source line in diagnostics
SOURCE_MARGIN = 4


class CompilerError(BfError):
    """
    Base class for errors that point into the source program.

    Attributes:
        message: The error description
        location: Where in the source the error occurred
        hint: A suggestion for fixing the error
        source_line: The source text of the offending line
        span: Number of columns to underline, starting at the location
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
        span: int = 1,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        self.source_line = source_line
        self.span = max(span, 1)
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """
        Render the diagnostic: a headline, the source context, a hint.

            prog.bf:1:4: error: unexpected token ']'
                +++]
                   ^
            hint: ']' has no matching '['
        """
        prefix = f"{self.location}: " if self.location else ""
        lines = [f"{prefix}error: {self.message}"]
        lines.extend(self._source_context())
        if self.hint:
            lines.append(f"hint: {self.hint}")
        return "\n".join(lines)

    def _source_context(self) -> list[str]:
        """The offending source line with ``span`` columns underlined."""
        if self.source_line is None or self.location is None:
            return []

        margin = " " * SOURCE_MARGIN
        context = [f"{margin}{self.source_line}"]
        if self.location.column > 0:
            offset = " " * (self.location.column - 1)
            context.append(f"{margin}{offset}{'^' * self.span}")
        return context


# =============================================================================
# Parse Errors
# =============================================================================

class Severity(Enum):
    """
    How far a parse failure propagates.

    RECOVERABLE lets the enclosing rule try another alternative or decide
    that a block is over. FATAL aborts parsing without any backtracking.
    """
    RECOVERABLE = auto()
    FATAL = auto()


class ParseError(CompilerError):
    """
    Syntax error raised by the parser.

    Every parse error carries a severity. Only RECOVERABLE errors are
    produced by the current grammar; FATAL is reserved for constructs
    that must not be backtracked over.
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
        severity: Severity = Severity.RECOVERABLE,
        span: int = 1,
    ):
        self.severity = severity
        super().__init__(
            message, location=location, hint=hint, source_line=source_line, span=span
        )

    @property
    def is_fatal(self) -> bool:
        return self.severity is Severity.FATAL


class UnexpectedTokenError(ParseError):
    """
    A token that does not start any statement.

    At the top level this is a ']' with no enclosing loop. The whole
    token is underlined, so a counted token marks its entire run.
    """

    def __init__(
        self,
        token: "Token",
        source_line: Optional[str] = None,
        severity: Severity = Severity.RECOVERABLE,
    ):
        self.token = token

        hint = None
        if token.text == "]":
            hint = "']' has no matching '['"

        super().__init__(
            f"unexpected token '{token.text}'",
            location=token.location,
            hint=hint,
            source_line=source_line,
            severity=severity,
            span=len(token.text),
        )


class EndOfInputError(ParseError):
    """
    The token stream ended while a token was still required.

    Raised for a '[' whose closing ']' never arrives.
    """

    def __init__(
        self,
        expected: Optional[str] = None,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
        severity: Severity = Severity.RECOVERABLE,
    ):
        self.expected = expected

        message = "unexpected end of input"
        if expected:
            message = f"{message}, expected '{expected}'"

        super().__init__(
            message,
            location=location,
            hint=hint,
            source_line=source_line,
            severity=severity,
        )


# =============================================================================
# Code Generation Errors
# =============================================================================

class CodeGenError(CompilerError):
    """
    Error during code generation.

    Every tree the parser builds lowers successfully. This is raised
    only for statement nodes the generator does not know.
    """
    pass
