"""
QBE Intermediate Language Model
===============================

Typed building blocks for emitting QBE IL text. The code generator builds
a Module out of these objects and renders it with ``str()``.

Only the subset of QBE the compiler needs is modelled:

| Kind        | Classes                                   |
|-------------|-------------------------------------------|
| Values      | Temporary (%x), Global ($x), Const (42)   |
| Arithmetic  | Add, Sub                                  |
| Memory      | Alloc, Load, Store, Copy                  |
| Comparison  | Compare with a Cmp condition              |
| Calls       | Call                                      |
| Terminators | Jnz, Ret                                  |

Structure
---------
A Module holds Functions; a Function holds Blocks; a Block holds a label
and its instructions. A Block that does not end in a terminator falls
through into the next block, as QBE allows.

Example
-------
>>> func = Function("main", return_type=Type.WORD, export=True)
>>> block = func.add_block("start")
>>> func.add_instr(Ret(Const(0)))
>>> print(Module([func]))
export function w $main() {
@start
	ret 0
}

Reference: https://c9x.me/compile/doc/il.html
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union


# =============================================================================
# Types and Values
# =============================================================================

class Type(Enum):
    """QBE base and extended types."""
    BYTE = "b"
    WORD = "w"
    LONG = "l"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Temporary:
    """A function-local temporary, rendered as %name."""
    name: str

    def __str__(self) -> str:
        return f"%{self.name}"


@dataclass(frozen=True)
class Global:
    """A global symbol, rendered as $name."""
    name: str

    def __str__(self) -> str:
        return f"${self.name}"


@dataclass(frozen=True)
class Const:
    """An integer constant."""
    value: int

    def __str__(self) -> str:
        return str(self.value)


Value = Union[Temporary, Global, Const]


class Cmp(Enum):
    """Comparison conditions. Only the unsigned less-than is needed."""
    ULT = "ult"


# =============================================================================
# Instructions
# =============================================================================

class Instr:
    """Base class for all instructions."""

    # True for instructions that end a block
    terminator = False


@dataclass
class Add(Instr):
    lhs: Value
    rhs: Value

    def __str__(self) -> str:
        return f"add {self.lhs}, {self.rhs}"


@dataclass
class Sub(Instr):
    lhs: Value
    rhs: Value

    def __str__(self) -> str:
        return f"sub {self.lhs}, {self.rhs}"


@dataclass
class Copy(Instr):
    value: Value

    def __str__(self) -> str:
        return f"copy {self.value}"


@dataclass
class Alloc(Instr):
    """Stack allocation of ``size`` bytes aligned to ``align`` (4, 8 or 16)."""
    size: int
    align: int = 8

    def __post_init__(self):
        if self.align not in (4, 8, 16):
            raise ValueError(f"invalid alloc alignment: {self.align}")

    def __str__(self) -> str:
        return f"alloc{self.align} {self.size}"


@dataclass
class Load(Instr):
    """
    Load a value of ``type`` from ``address``.

    Byte loads zero-extend to the result width.
    """
    type: Type
    address: Value

    def __str__(self) -> str:
        if self.type is Type.BYTE:
            return f"loadub {self.address}"
        return f"load{self.type} {self.address}"


@dataclass
class Store(Instr):
    type: Type
    value: Value
    address: Value

    def __str__(self) -> str:
        return f"store{self.type} {self.value}, {self.address}"


@dataclass
class Compare(Instr):
    """Compare two operands of ``type``; the result is 1 or 0."""
    type: Type
    condition: Cmp
    lhs: Value
    rhs: Value

    def __str__(self) -> str:
        return f"c{self.condition.value}{self.type} {self.lhs}, {self.rhs}"


@dataclass
class Call(Instr):
    """Call a global function with typed arguments."""
    name: str
    arguments: list[tuple[Type, Value]] = field(default_factory=list)

    def __str__(self) -> str:
        args = ", ".join(f"{ty} {value}" for ty, value in self.arguments)
        return f"call {Global(self.name)}({args})"


@dataclass
class Jnz(Instr):
    """Jump to ``if_nonzero`` when ``condition`` is nonzero, else ``if_zero``."""
    condition: Value
    if_nonzero: str
    if_zero: str
    terminator = True

    def __str__(self) -> str:
        return f"jnz {self.condition}, @{self.if_nonzero}, @{self.if_zero}"


@dataclass
class Ret(Instr):
    value: Optional[Value] = None
    terminator = True

    def __str__(self) -> str:
        if self.value is None:
            return "ret"
        return f"ret {self.value}"


@dataclass
class Assign:
    """An instruction whose result is bound to a temporary."""
    dest: Temporary
    type: Type
    instr: Instr

    def __str__(self) -> str:
        return f"{self.dest} ={self.type} {self.instr}"


Statement = Union[Assign, Instr]


# =============================================================================
# Blocks, Functions, Modules
# =============================================================================

@dataclass
class Block:
    """A labelled basic block."""
    label: str
    statements: list[Statement] = field(default_factory=list)

    def is_terminated(self) -> bool:
        """Return True if the block ends in a jnz or ret."""
        return bool(self.statements) and getattr(self.statements[-1], "terminator", False)

    def __str__(self) -> str:
        lines = [f"@{self.label}"]
        lines.extend(f"\t{stmt}" for stmt in self.statements)
        return "\n".join(lines)


@dataclass
class Function:
    """
    A QBE function definition taking no parameters.

    Instructions are always appended to the most recently added block,
    which must not already end in a terminator.

    Attributes:
        name: Symbol name without the '$' sigil
        return_type: Return type, or None for no return value
        export: True to give the function external linkage
    """
    name: str
    return_type: Optional[Type] = None
    export: bool = False
    blocks: list[Block] = field(default_factory=list)

    def add_block(self, label: str) -> Block:
        block = Block(label)
        self.blocks.append(block)
        return block

    def add_instr(self, instr: Instr) -> None:
        self._current_block().statements.append(instr)

    def assign_instr(self, dest: Temporary, ty: Type, instr: Instr) -> None:
        self._current_block().statements.append(Assign(dest, ty, instr))

    def _current_block(self) -> Block:
        if not self.blocks:
            raise ValueError(f"function ${self.name} has no block to append to")
        block = self.blocks[-1]
        if block.is_terminated():
            raise ValueError(f"block @{block.label} already ends in a terminator")
        return block

    def __str__(self) -> str:
        header = []
        if self.export:
            header.append("export")
        header.append("function")
        if self.return_type is not None:
            header.append(str(self.return_type))
        header.append(f"{Global(self.name)}() {{")

        lines = [" ".join(header)]
        lines.extend(str(block) for block in self.blocks)
        lines.append("}")
        return "\n".join(lines)


@dataclass
class Module:
    """A compilation unit: a list of function definitions."""
    functions: list[Function] = field(default_factory=list)

    def add_function(self, function: Function) -> None:
        self.functions.append(function)

    def __str__(self) -> str:
        return "\n\n".join(str(func) for func in self.functions)
