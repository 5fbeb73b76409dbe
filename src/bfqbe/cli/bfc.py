"""
bfc - Compiler Command-Line Interface
=====================================

Compiles a program in the eight-symbol tape language to QBE IL.

Usage Examples
--------------
Compile to stdout:
    $ bfc hello.bf

Full pipeline to an executable:
    $ bfc hello.bf > hello.ssa && qbe hello.ssa > hello.s && cc hello.s -o hello

With output file:
    $ bfc hello.bf -o hello.ssa

Inspect the front end:
    $ bfc --tokens hello.bf
    $ bfc --ast hello.bf
"""

import logging
from pathlib import Path
from typing import Optional

import click

from bfqbe import __version__
from bfqbe.ast import ASTPrinter
from bfqbe.cli.errors import handle_cli_exception
from bfqbe.codegen import DEFAULT_TAPE_CELLS
from bfqbe.compiler import Compiler, CompilerOptions
from bfqbe.lexer import tokenize


logger = logging.getLogger(__name__)


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s" if verbose else "%(message)s",
    )


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "input_file",
    type=click.Path(exists=True, dir_okay=False, readable=True, path_type=Path),
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write the IL to this file instead of stdout",
)
@click.option(
    "--tokens",
    is_flag=True,
    help="Print the token list and exit (for debugging)",
)
@click.option(
    "--ast",
    is_flag=True,
    help="Print the AST and exit (for debugging)",
)
@click.option(
    "--tape-cells",
    type=click.IntRange(min=1),
    default=DEFAULT_TAPE_CELLS,
    show_default=True,
    help="Number of cells on the tape of the compiled program",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Log compilation stages to stderr",
)
@click.version_option(version=__version__, prog_name="bfc")
def main(
    input_file: Path,
    output: Optional[Path],
    tokens: bool,
    ast: bool,
    tape_cells: int,
    verbose: bool,
) -> None:
    """
    Compile a tape-language program to QBE IL.

    INPUT_FILE is the program source. Only the characters < > + - . , [ ]
    are meaningful; everything else is ignored as commentary.

    The generated module defines an exported main() that returns 0 when
    the program finishes and 1 if the pointer leaves the tape.

    \b
    Examples:
        bfc hello.bf                 # IL on stdout
        bfc hello.bf -o hello.ssa    # IL to a file
        bfc --ast hello.bf           # Dump the parse tree
    """
    setup_logging(verbose)

    try:
        logger.debug(f"Compiling {input_file} (tape: {tape_cells} cells)")

        source = input_file.read_text(encoding="utf-8")

        # Token dump works even for programs that do not parse
        if tokens:
            for token in tokenize(source, str(input_file)):
                click.echo(repr(token))
            return

        compiler = Compiler(CompilerOptions(tape_cells=tape_cells))
        result = compiler.compile_source(source, str(input_file))

        if ast:
            click.echo(ASTPrinter().print(result.ast))
            return

        if output is not None:
            output.write_text(result.ir + "\n", encoding="utf-8")
            logger.debug(f"Wrote {len(result.ir) + 1} bytes to {output}")
        else:
            click.echo(result.ir)

    except Exception as e:
        handle_cli_exception(e, verbose)


if __name__ == "__main__":
    main()
