"""
Abstract Syntax Tree (AST) Definitions
======================================

This module defines the AST node types built by the parser and consumed
by the code generator.

Node Hierarchy
--------------
Node (base)
├── Block - ordered list of statements
└── Statement
    ├── MoveLeft - '<' run, moves the pointer left by count cells
    ├── MoveRight - '>' run, moves the pointer right by count cells
    ├── Add - '+' run, adds count to the current cell
    ├── Subtract - '-' run, subtracts count from the current cell
    ├── Read - ',' reads one byte into the current cell
    ├── Write - '.' writes the current cell as one byte
    └── Loop - '[' ... ']' repeats its body while the cell is nonzero

Design Notes
------------
- All nodes are dataclasses for clean representation and comparison
- The tree is strict: a Loop owns exactly one Block, nothing is shared
- Every node has an ``attr`` slot (an empty Attr) reserved for metadata
  such as source positions; it takes no part in comparison
- The tree is built once by the parser and never mutated afterwards
"""

from dataclasses import dataclass, field


# =============================================================================
# AST Node Base Classes
# =============================================================================

@dataclass
class Attr:
    """Per-node metadata. Carries no data yet."""
    pass


@dataclass
class Node:
    """
    Base class for all AST nodes.

    Attributes:
        attr: Metadata slot shared by every node kind
    """
    attr: Attr = field(default_factory=Attr, kw_only=True, compare=False, repr=False)


@dataclass
class Statement(Node):
    """Base class for all statement nodes."""
    pass


@dataclass
class Block(Node):
    """
    A sequence of statements, executed in order.

    The program itself is a Block, as is the body of every Loop.

    Attributes:
        statements: The statements in execution order (may be empty)
    """
    statements: list[Statement] = field(default_factory=list)


# =============================================================================
# Statement Nodes
# =============================================================================

@dataclass
class MoveLeft(Statement):
    """Move the pointer left by ``count`` cells."""
    count: int = 1


@dataclass
class MoveRight(Statement):
    """Move the pointer right by ``count`` cells."""
    count: int = 1


@dataclass
class Add(Statement):
    """Add ``count`` to the current cell."""
    count: int = 1


@dataclass
class Subtract(Statement):
    """Subtract ``count`` from the current cell."""
    count: int = 1


@dataclass
class Read(Statement):
    """Read one byte from standard input into the current cell."""
    pass


@dataclass
class Write(Statement):
    """Write the current cell to standard output as one byte."""
    pass


@dataclass
class Loop(Statement):
    """
    Repeat ``body`` while the current cell is nonzero.

    The cell is tested before the first iteration and after every
    iteration.

    Attributes:
        body: The loop body, owned exclusively by this node
    """
    body: Block = field(default_factory=Block)


# =============================================================================
# Tree Queries
# =============================================================================

def loop_depth(block: Block) -> int:
    """Return the deepest loop nesting inside ``block`` (0 if no loops)."""
    depth = 0
    pending = [(block, 0)]
    while pending:
        current, level = pending.pop()
        for stmt in current.statements:
            if isinstance(stmt, Loop):
                depth = max(depth, level + 1)
                pending.append((stmt.body, level + 1))
    return depth


# =============================================================================
# AST Visitor Pattern
# =============================================================================

class ASTVisitor:
    """
    Base class for AST visitors.

    Subclasses override visit_<NodeClass> methods. Unhandled node kinds
    fall back to generic_visit, which walks into child nodes.

    Usage:
        class StatementCounter(ASTVisitor):
            def __init__(self):
                self.count = 0

            def visit_Add(self, node):
                self.count += 1

        counter = StatementCounter()
        counter.visit(program)
    """

    def visit(self, node: Node):
        """Dispatch to the visit method for this node's class."""
        method_name = f"visit_{node.__class__.__name__}"
        visitor = getattr(self, method_name, self.generic_visit)
        return visitor(node)

    def generic_visit(self, node: Node) -> None:
        """Visit all child nodes."""
        if isinstance(node, Block):
            for stmt in node.statements:
                self.visit(stmt)
        elif isinstance(node, Loop):
            self.visit(node.body)


# =============================================================================
# AST Pretty Printer
# =============================================================================

class ASTPrinter(ASTVisitor):
    """
    Pretty printer for AST debugging.

    Usage:
        printer = ASTPrinter()
        print(printer.print(ast))

    Output for "+[->+<]":
        Block
          Add(1)
          Loop
            Block
              Subtract(1)
              MoveRight(1)
              Add(1)
              MoveLeft(1)
    """

    def __init__(self):
        self.output: list[str] = []
        self.indent_level = 0
        self._pending: list[tuple[Node, int]] = []

    def print(self, node: Node) -> str:
        """Print the AST and return as string."""
        self.output = []
        self._pending = [(node, 0)]

        # visit_Block and visit_Loop schedule their children here
        while self._pending:
            current, self.indent_level = self._pending.pop()
            self.visit(current)

        return "\n".join(self.output)

    def _emit(self, text: str) -> None:
        indent = "  " * self.indent_level
        self.output.append(f"{indent}{text}")

    def _schedule(self, children: list[Node]) -> None:
        level = self.indent_level + 1
        self._pending.extend((child, level) for child in reversed(children))

    def visit_Block(self, node: Block):
        self._emit("Block")
        self._schedule(node.statements)

    def visit_Loop(self, node: Loop):
        self._emit("Loop")
        self._schedule([node.body])

    def visit_MoveLeft(self, node: MoveLeft):
        self._emit(f"MoveLeft({node.count})")

    def visit_MoveRight(self, node: MoveRight):
        self._emit(f"MoveRight({node.count})")

    def visit_Add(self, node: Add):
        self._emit(f"Add({node.count})")

    def visit_Subtract(self, node: Subtract):
        self._emit(f"Subtract({node.count})")

    def visit_Read(self, node: Read):
        self._emit("Read")

    def visit_Write(self, node: Write):
        self._emit("Write")
