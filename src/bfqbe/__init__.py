"""
bfqbe - Tape Language to QBE Compiler
=====================================

This package compiles programs written in the eight-symbol tape language
(``< > + - . , [ ]``) into QBE intermediate language. QBE then lowers
the IL to assembly for the system assembler and linker.

Main Components
---------------
- **lexer**: run-length tokenizer (``Lexer``, ``tokenize``)
- **parser**: recursive descent parser producing the AST (``Parser``)
- **ast**: tree nodes, visitor and pretty printer
- **codegen**: lowering of the AST to QBE (``CodeGenerator``)
- **qbe**: typed model of the QBE IL text
- **compiler**: the full pipeline (``Compiler``, ``compile_source``)

Quick Start
-----------
    >>> from bfqbe import compile_source
    >>> ir = compile_source("+++.")
    >>> print(ir.splitlines()[0])
    export function w $main() {

Or use the command-line tool:
    $ bfc hello.bf > hello.ssa
    $ qbe hello.ssa > hello.s
    $ cc hello.s -o hello

Reference Documentation
-----------------------
- QBE IL: https://c9x.me/compile/doc/il.html
"""

__version__ = "1.0.0"
__author__ = "bfqbe Contributors"

# =============================================================================
# Public API Exports
# =============================================================================

from bfqbe.errors import (
    BfError,
    SourceLocation,
    CompilerError,
    Severity,
    ParseError,
    UnexpectedTokenError,
    EndOfInputError,
    CodeGenError,
)
from bfqbe.lexer import Lexer, Token, TokenType, tokenize
from bfqbe.ast import (
    Attr,
    Block,
    Statement,
    MoveLeft,
    MoveRight,
    Add,
    Subtract,
    Read,
    Write,
    Loop,
    ASTVisitor,
    ASTPrinter,
)
from bfqbe.parser import Parser, parse, parse_source
from bfqbe.codegen import CodeGenerator
from bfqbe.compiler import (
    Compiler,
    CompilerOptions,
    CompilerResult,
    compile_source,
    compile_file,
)

__all__ = [
    # Version info
    "__version__",
    "__author__",
    # Errors
    "BfError",
    "SourceLocation",
    "CompilerError",
    "Severity",
    "ParseError",
    "UnexpectedTokenError",
    "EndOfInputError",
    "CodeGenError",
    # Lexer
    "Lexer",
    "Token",
    "TokenType",
    "tokenize",
    # AST
    "Attr",
    "Block",
    "Statement",
    "MoveLeft",
    "MoveRight",
    "Add",
    "Subtract",
    "Read",
    "Write",
    "Loop",
    "ASTVisitor",
    "ASTPrinter",
    # Parser
    "Parser",
    "parse",
    "parse_source",
    # Code generation
    "CodeGenerator",
    # Compiler
    "Compiler",
    "CompilerOptions",
    "CompilerResult",
    "compile_source",
    "compile_file",
]
