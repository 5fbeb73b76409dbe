"""
Lexer (Tokenizer)
=================

This module converts source text into a list of tokens for the parser.

Token Categories
----------------
| Character | Token       | Counted |
|-----------|-------------|---------|
| <         | MOVE_LEFT   | yes     |
| >         | MOVE_RIGHT  | yes     |
| +         | INCREMENT   | yes     |
| -         | DECREMENT   | yes     |
| ,         | READ        | no      |
| .         | WRITE       | no      |
| [         | LOOP_OPEN   | no      |
| ]         | LOOP_CLOSE  | no      |

Counted tokens coalesce a maximal run of the same character into one
token carrying the run length, so ">>>" becomes a single MOVE_RIGHT with
count 3. Every other character is commentary and is skipped.

Lexing is total: any input string tokenizes without error.

Example Usage
-------------
>>> from bfqbe.lexer import tokenize
>>> tokenize("+++ print .")
[Token(INCREMENT, 3, 1:1), Token(WRITE, 1:11)]
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Iterator, Optional

from bfqbe.errors import SourceLocation


# =============================================================================
# Token Type Enumeration
# =============================================================================

class TokenType(Enum):
    """Token types of the eight-symbol language."""

    MOVE_LEFT = auto()      # <
    MOVE_RIGHT = auto()     # >
    INCREMENT = auto()      # +
    DECREMENT = auto()      # -
    READ = auto()           # ,
    WRITE = auto()          # .
    LOOP_OPEN = auto()      # [
    LOOP_CLOSE = auto()     # ]


# Characters whose runs coalesce into one counted token
COUNTED: dict[str, TokenType] = {
    "<": TokenType.MOVE_LEFT,
    ">": TokenType.MOVE_RIGHT,
    "+": TokenType.INCREMENT,
    "-": TokenType.DECREMENT,
}

# Single-character tokens
SINGLE: dict[str, TokenType] = {
    ",": TokenType.READ,
    ".": TokenType.WRITE,
    "[": TokenType.LOOP_OPEN,
    "]": TokenType.LOOP_CLOSE,
}

SYMBOLS: dict[TokenType, str] = {
    token_type: char
    for table in (COUNTED, SINGLE)
    for char, token_type in table.items()
}


# =============================================================================
# Token Data Class
# =============================================================================

@dataclass(frozen=True)
class Token:
    """
    A single token.

    Location fields are excluded from comparison, so a token built by hand
    compares equal to a lexed one of the same kind and count.

    Attributes:
        type: The TokenType classification
        count: Run length for counted tokens, None otherwise
        line: Line number of the first character (1-indexed)
        column: Column number of the first character (1-indexed)
        filename: Name of the source file
    """
    type: TokenType
    count: Optional[int] = None
    line: int = field(default=1, compare=False)
    column: int = field(default=1, compare=False)
    filename: str = field(default="<input>", compare=False)

    def __repr__(self) -> str:
        if self.count is not None:
            return f"Token({self.type.name}, {self.count}, {self.line}:{self.column})"
        return f"Token({self.type.name}, {self.line}:{self.column})"

    @property
    def location(self) -> SourceLocation:
        """Return a SourceLocation for error reporting."""
        return SourceLocation(self.filename, self.line, self.column)

    @property
    def text(self) -> str:
        """The source characters this token was built from."""
        return SYMBOLS[self.type] * (self.count or 1)

    def is_counted(self) -> bool:
        """Return True if this token carries a run length."""
        return self.type in COUNTED.values()


# =============================================================================
# Lexer Implementation
# =============================================================================

class Lexer:
    """
    Tokenizes source text.

    Usage:
        lexer = Lexer(source_text, filename)
        tokens = list(lexer.tokenize())

    Attributes:
        source: The source text being tokenized
        filename: Name of the source file (for error reporting)
    """

    def __init__(self, source: str, filename: str = "<input>"):
        self.source = source
        self.filename = filename

        # Current position in source
        self._pos = 0
        self._line = 1
        self._column = 1

    def tokenize(self) -> Iterator[Token]:
        """
        Generate tokens from the source text.

        Yields:
            Token objects in source order
        """
        while not self._at_end():
            token = self._scan_token()
            if token is not None:
                yield token

    # =========================================================================
    # Character Access Methods
    # =========================================================================

    def _at_end(self) -> bool:
        return self._pos >= len(self.source)

    def _peek(self) -> str:
        """Current character, or empty string past the end."""
        if self._at_end():
            return ""
        return self.source[self._pos]

    def _advance(self) -> str:
        """
        Consume and return the current character.

        Updates line and column tracking for error reporting.
        """
        char = self.source[self._pos]
        self._pos += 1

        if char == "\n":
            self._line += 1
            self._column = 1
        else:
            self._column += 1

        return char

    # =========================================================================
    # Token Scanning
    # =========================================================================

    def _scan_token(self) -> Optional[Token]:
        """
        Scan the next token from source.

        Returns:
            The next Token, or None if the character was commentary
        """
        start_line = self._line
        start_column = self._column
        char = self._advance()

        if char in COUNTED:
            count = 1
            while self._peek() == char:
                self._advance()
                count += 1
            return Token(COUNTED[char], count, start_line, start_column, self.filename)

        if char in SINGLE:
            return Token(SINGLE[char], None, start_line, start_column, self.filename)

        # Anything else is commentary
        return None


# =============================================================================
# Convenience Functions
# =============================================================================

def tokenize(source: str, filename: str = "<input>") -> list[Token]:
    """Tokenize source text into a list."""
    return list(Lexer(source, filename).tokenize())
