"""
Compiler Main Module
====================

This module drives the complete compilation process:

    Source → Lex → Parse → Generate → QBE IL

Usage
-----
Command line:
    $ bfc hello.bf > hello.ssa
    $ qbe hello.ssa > hello.s && cc hello.s -o hello

Programmatic:
    >>> from bfqbe import compile_source
    >>> ir = compile_source("++++++++[>++++++++<-]>+.")

Compilation Pipeline
--------------------
1. **Lexical Analysis**: Convert source to run-length tokens
2. **Parsing**: Build the AST
3. **Code Generation**: Lower the AST to a QBE module

Each stage completes before the next one starts.

Error Handling
--------------
Compilation stops at the first parse error, which propagates to the
caller as a ParseError. No partial output is produced.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from bfqbe.ast import Block
from bfqbe.codegen import CodeGenerator, DEFAULT_TAPE_CELLS
from bfqbe.lexer import Lexer, Token
from bfqbe.parser import Parser


logger = logging.getLogger(__name__)


@dataclass
class CompilerOptions:
    """
    Compiler configuration options.

    Attributes:
        tape_cells: Number of cells on the tape of the compiled program.
                    Moving the pointer off the tape makes the program
                    exit with status 1.
    """
    tape_cells: int = DEFAULT_TAPE_CELLS

    def __post_init__(self):
        if self.tape_cells < 1:
            raise ValueError(f"tape_cells must be at least 1, got {self.tape_cells}")


@dataclass
class CompilerResult:
    """
    Result of a compilation.

    Attributes:
        filename: Source filename
        tokens: Tokens produced by the lexer
        ast: The parsed program
        ir: Generated QBE module text
    """
    filename: str = ""
    tokens: list[Token] = field(default_factory=list)
    ast: Optional[Block] = None
    ir: str = ""

    @property
    def token_count(self) -> int:
        return len(self.tokens)


class Compiler:
    """
    Compiler from the eight-symbol tape language to QBE IL.

    Example:
        compiler = Compiler()
        result = compiler.compile_file("hello.bf")
        print(result.ir)

    Attributes:
        options: Compiler configuration options
    """

    def __init__(self, options: Optional[CompilerOptions] = None):
        self.options = options or CompilerOptions()

    def compile_source(self, source: str, filename: str = "<input>") -> CompilerResult:
        """
        Compile source text to QBE IL.

        Args:
            source: Program source text
            filename: Source filename for error messages

        Returns:
            CompilerResult with the tokens, AST and generated IL

        Raises:
            ParseError: If the program is malformed
        """
        result = CompilerResult(filename=filename)

        result.tokens = self._lex(source, filename)
        logger.debug(f"{filename}: lexed {result.token_count} tokens")

        result.ast = self._parse(result.tokens, filename, source.splitlines())
        logger.debug(f"{filename}: parsed {len(result.ast.statements)} top-level statements")

        result.ir = self._generate(result.ast)
        logger.debug(f"{filename}: generated {len(result.ir)} bytes of IL")

        return result

    def compile_file(self, filepath: str | Path) -> CompilerResult:
        """
        Compile a source file to QBE IL.

        Raises:
            ParseError: If the program is malformed
            FileNotFoundError: If the source file does not exist
        """
        path = Path(filepath)
        if not path.exists():
            raise FileNotFoundError(f"Source file not found: {filepath}")

        source = path.read_text(encoding="utf-8")
        return self.compile_source(source, str(filepath))

    def _lex(self, source: str, filename: str) -> list[Token]:
        return list(Lexer(source, filename).tokenize())

    def _parse(self, tokens: list[Token], filename: str, source_lines: list[str]) -> Block:
        return Parser(tokens, filename, source_lines).parse()

    def _generate(self, ast: Block) -> str:
        return CodeGenerator(tape_cells=self.options.tape_cells).generate(ast)


# =============================================================================
# Convenience Functions
# =============================================================================

def compile_source(
    source: str,
    filename: str = "<input>",
    tape_cells: int = DEFAULT_TAPE_CELLS,
) -> str:
    """
    Compile source text to QBE IL.

    This is the primary high-level interface.

    Raises:
        ParseError: If the program is malformed

    Example:
        >>> ir = compile_source(",[.,]")
    """
    compiler = Compiler(CompilerOptions(tape_cells=tape_cells))
    return compiler.compile_source(source, filename).ir


def compile_file(
    filepath: str | Path,
    output_path: Optional[str | Path] = None,
    tape_cells: int = DEFAULT_TAPE_CELLS,
) -> str:
    """
    Compile a source file to QBE IL.

    Args:
        filepath: Path to the source file
        output_path: Optional path to write the IL to
        tape_cells: Number of cells on the tape

    Returns:
        Generated QBE module text

    Raises:
        ParseError: If the program is malformed
        FileNotFoundError: If the source file does not exist
    """
    compiler = Compiler(CompilerOptions(tape_cells=tape_cells))
    result = compiler.compile_file(filepath)

    if output_path:
        Path(output_path).write_text(result.ir + "\n", encoding="utf-8")

    return result.ir
