"""
QBE Code Generator
==================

This module lowers the AST into a QBE module containing a single exported
function ``main`` that takes no arguments and returns a word status.

Runtime Layout
--------------
The tape is one stack allocation of ``tape_cells`` bytes, one byte per
cell, cleared with memset before the program starts. Two long temporaries hold the machine state for the whole function:

| Temporary | Meaning                                   |
|-----------|-------------------------------------------|
| %tape     | Base address of the tape                  |
| %ptr      | Address of the current cell               |

Every other temporary is %v<N> and every label is <prefix><N>, drawn from
two counters in AST traversal order, so the same tree always produces the
same text.

Statement Lowering
------------------
| Statement     | Code                                              |
|---------------|---------------------------------------------------|
| MoveLeft(n)   | %ptr =l sub %ptr, n    + bounds guard             |
| MoveRight(n)  | %ptr =l add %ptr, n    + bounds guard             |
| Add(n)        | loadub, add n, storeb                             |
| Subtract(n)   | loadub, sub n, storeb                             |
| Read          | call $read(w 0, l %ptr, l 1)                      |
| Write         | call $write(w 1, l %ptr, l 1)                     |
| Loop(body)    | test, @loopN, body, test, @endM                   |

Cells are never cached in temporaries between statements: each
arithmetic statement loads and stores afresh. The status returned by
read and write is ignored.

Loops test the current cell on entry and after every iteration:

        %v0 =w loadub %ptr
        jnz %v0, @loop0, @end1
    @loop0
        ... body ...
        %v1 =w loadub %ptr
        jnz %v1, @loop0, @end1
    @end1

Bounds Guard
------------
After every pointer move the offset from the tape base is checked with an
unsigned compare, which rejects pointers below the base (the subtraction
wraps to a huge unsigned value) as well as pointers past the end:

        %v2 =l sub %ptr, %tape
        %v3 =w cultl %v2, 30000
        jnz %v3, @cont2, @halt3
    @halt3
        ret 1
    @cont2

Leaving the tape is the only runtime failure: main returns 1 at once.
A program that finishes normally returns 0.

Usage
-----
>>> from bfqbe.parser import parse_source
>>> from bfqbe.codegen import CodeGenerator
>>> ir = CodeGenerator().generate(parse_source("+."))
"""

from typing import Iterator, Optional

from bfqbe import qbe
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
from bfqbe.errors import CodeGenError


# Default tape capacity in cells
DEFAULT_TAPE_CELLS = 30_000

# Bytes between adjacent cells
CELL_STRIDE = 1

# POSIX file descriptors used by Read and Write
STDIN_FD = 0
STDOUT_FD = 1

# Exit statuses of the generated main
STATUS_OK = 0
STATUS_OUT_OF_BOUNDS = 1


class CodeGenerator:
    """
    Generates a QBE module from the AST.

    A generator holds the temporary and label counters for one compilation;
    ``generate`` resets them, so an instance may be reused.

    Attributes:
        tape_cells: Number of cells on the tape
    """

    def __init__(self, tape_cells: int = DEFAULT_TAPE_CELLS):
        if tape_cells < 1:
            raise ValueError(f"tape must have at least one cell, got {tape_cells}")
        self.tape_cells = tape_cells

        self._tmp_counter: int = 0
        self._label_counter: int = 0
        self._func: Optional[qbe.Function] = None

        self._tape = qbe.Temporary("tape")
        self._ptr = qbe.Temporary("ptr")

    @property
    def tape_bytes(self) -> int:
        """Size of the tape allocation in bytes."""
        return self.tape_cells * CELL_STRIDE

    def generate(self, program: Block) -> str:
        """
        Generate QBE IL text for a program.

        Args:
            program: The root block of the AST

        Returns:
            The module text

        Raises:
            CodeGenError: If the tree contains a node kind the generator
                does not know; trees built by the parser never do
        """
        return str(self.generate_module(program))

    def generate_module(self, program: Block) -> qbe.Module:
        """Lower a program to a QBE module object."""
        self._tmp_counter = 0
        self._label_counter = 0

        self._func = qbe.Function(
            "main",
            return_type=qbe.Type.WORD,
            export=True,
        )

        self._func.add_block("runtime")
        self._generate_runtime()

        self._func.add_block("start")
        self._generate_block(program)
        self._func.add_instr(qbe.Ret(qbe.Const(STATUS_OK)))

        module = qbe.Module()
        module.add_function(self._func)
        self._func = None
        return module

    # =========================================================================
    # Name Allocation
    # =========================================================================

    def _new_tmp(self) -> qbe.Temporary:
        tmp = qbe.Temporary(f"v{self._tmp_counter}")
        self._tmp_counter += 1
        return tmp

    def _new_label(self, prefix: str) -> str:
        label = f"{prefix}{self._label_counter}"
        self._label_counter += 1
        return label

    # =========================================================================
    # Runtime Support
    # =========================================================================

    def _generate_runtime(self) -> None:
        """Allocate and clear the tape, then point at its first cell."""
        self._func.assign_instr(
            self._tape, qbe.Type.LONG, qbe.Alloc(self.tape_bytes, align=8)
        )
        # void *memset(void *s, int c, size_t n);
        self._func.add_instr(qbe.Call(
            "memset",
            [
                (qbe.Type.LONG, self._tape),
                (qbe.Type.WORD, qbe.Const(0)),
                (qbe.Type.LONG, qbe.Const(self.tape_bytes)),
            ],
        ))
        self._func.assign_instr(self._ptr, qbe.Type.LONG, qbe.Copy(self._tape))

    def _generate_bounds_check(self) -> None:
        """Return 1 from main unless %ptr is still on the tape."""
        cont = self._new_label("cont")
        halt = self._new_label("halt")

        offset = self._new_tmp()
        self._func.assign_instr(
            offset, qbe.Type.LONG, qbe.Sub(self._ptr, self._tape)
        )

        in_bounds = self._new_tmp()
        self._func.assign_instr(
            in_bounds,
            qbe.Type.WORD,
            qbe.Compare(
                qbe.Type.LONG,
                qbe.Cmp.ULT,
                offset,
                qbe.Const(self.tape_bytes),
            ),
        )
        self._func.add_instr(qbe.Jnz(in_bounds, cont, halt))

        self._func.add_block(halt)
        self._func.add_instr(qbe.Ret(qbe.Const(STATUS_OUT_OF_BOUNDS)))
        self._func.add_block(cont)

    def _load_cell(self) -> qbe.Temporary:
        value = self._new_tmp()
        self._func.assign_instr(value, qbe.Type.WORD, qbe.Load(qbe.Type.BYTE, self._ptr))
        return value

    # =========================================================================
    # Statements
    # =========================================================================

    def _generate_block(self, block: Block) -> None:
        """
        Lower a block and every loop nested in it.

        Open loops live on an explicit stack of (statements, labels) pairs,
        so nesting depth is not limited by the Python recursion limit.
        """
        open_blocks: list[tuple[Iterator[Statement], Optional[tuple[str, str]]]] = [
            (iter(block.statements), None),
        ]

        while open_blocks:
            statements, labels = open_blocks[-1]
            stmt = next(statements, None)

            if stmt is None:
                open_blocks.pop()
                if labels is not None:
                    self._close_loop(*labels)
            elif isinstance(stmt, Loop):
                open_blocks.append((iter(stmt.body.statements), self._open_loop()))
            else:
                self._generate_statement(stmt)

    def _generate_statement(self, stmt: Statement) -> None:
        if isinstance(stmt, MoveLeft):
            self._generate_move(qbe.Sub, stmt.count)
        elif isinstance(stmt, MoveRight):
            self._generate_move(qbe.Add, stmt.count)
        elif isinstance(stmt, Add):
            self._generate_arithmetic(qbe.Add, stmt.count)
        elif isinstance(stmt, Subtract):
            self._generate_arithmetic(qbe.Sub, stmt.count)
        elif isinstance(stmt, Read):
            self._generate_io("read", STDIN_FD)
        elif isinstance(stmt, Write):
            self._generate_io("write", STDOUT_FD)
        else:
            raise CodeGenError(f"cannot generate code for {type(stmt).__name__}")

    def _generate_move(self, op: type[qbe.Instr], count: int) -> None:
        self._func.assign_instr(
            self._ptr,
            qbe.Type.LONG,
            op(self._ptr, qbe.Const(count * CELL_STRIDE)),
        )
        self._generate_bounds_check()

    def _generate_arithmetic(self, op: type[qbe.Instr], count: int) -> None:
        value = self._load_cell()
        result = self._new_tmp()
        self._func.assign_instr(result, qbe.Type.WORD, op(value, qbe.Const(count)))
        self._func.add_instr(qbe.Store(qbe.Type.BYTE, result, self._ptr))

    def _generate_io(self, function: str, fd: int) -> None:
        # ssize_t read(int fd, void *buf, size_t count);
        # ssize_t write(int fd, const void *buf, size_t count);
        self._func.add_instr(qbe.Call(
            function,
            [
                (qbe.Type.WORD, qbe.Const(fd)),
                (qbe.Type.LONG, self._ptr),
                (qbe.Type.LONG, qbe.Const(1)),  # one byte only
            ],
        ))

    # =========================================================================
    # Loops
    # =========================================================================

    def _open_loop(self) -> tuple[str, str]:
        """Emit the entry test and start the body block."""
        begin = self._new_label("loop")
        end = self._new_label("end")

        value = self._load_cell()
        self._func.add_instr(qbe.Jnz(value, begin, end))
        self._func.add_block(begin)
        return begin, end

    def _close_loop(self, begin: str, end: str) -> None:
        """Emit the back-edge test and start the block after the loop."""
        value = self._load_cell()
        self._func.add_instr(qbe.Jnz(value, begin, end))
        self._func.add_block(end)
