"""Abstract Syntax Tree (AST) definitions for the Minilux language.

The AST classes defined in this module represent the syntactic structure
of parsed Minilux programs. Every node records the line and column of the
token it starts at so runtime errors can point back into the source. The
tree is built once by the parser and only read afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Any

from .patterns import CompiledRegex


@dataclass
class Node:
    """Base class for all AST nodes."""
    line: int = field(default=0, kw_only=True, compare=False)
    column: int = field(default=0, kw_only=True, compare=False)
    # Set on expressions written inside their own parentheses.
    grouped: bool = field(default=False, kw_only=True, compare=False)


@dataclass
class Program(Node):
    body: List[Node]


@dataclass
class Block(Node):
    statements: List[Node]


# Statements

@dataclass
class FuncDecl(Node):
    name: str
    params: List[str]
    body: Block


@dataclass
class IfStmt(Node):
    branches: List[Tuple[Node, Block]]  # if + elseif, in order
    else_block: Optional[Block]


@dataclass
class WhileStmt(Node):
    condition: Node
    body: Block


@dataclass
class Assign(Node):
    name: str
    value: Node


@dataclass
class IndexAssign(Node):
    name: str
    index: Node
    value: Node


@dataclass
class ReturnStmt(Node):
    value: Optional[Node]


@dataclass
class IncDec(Node):
    op: str  # 'inc' or 'dec'
    name: str
    amount: Node


@dataclass
class ArrayMutation(Node):
    """push/unshift (with a value) or pop/shift (yielding the removed item)."""
    op: str
    name: str
    value: Optional[Node] = None


@dataclass
class ReadStmt(Node):
    name: str


@dataclass
class SocketStmt(Node):
    op: str  # 'sockopen', 'sockwrite', 'sockread', 'sockclose'
    args: List[Node]
    target: Optional[str] = None  # variable receiving sockread data


@dataclass
class ExprStmt(Node):
    expr: Node


# Expressions

@dataclass
class Literal(Node):
    value: Any
    literal_type: str  # 'Integer' or 'Text'


@dataclass
class Interpolation(Node):
    """A double-quoted string split into Literal text and Variable parts."""
    parts: List[Node]


@dataclass
class Variable(Node):
    name: str


@dataclass
class ArrayLit(Node):
    elements: List[Node]


@dataclass
class Index(Node):
    target: Node
    index: Node


@dataclass
class UnaryOp(Node):
    op: str
    operand: Node


@dataclass
class BinaryOp(Node):
    op: str
    left: Node
    right: Node


@dataclass
class Call(Node):
    name: str
    args: List[Node]


@dataclass
class RegexLit(Node):
    pattern: str
    flags: str
    replacement: Optional[str] = None  # set for substitution literals
    regex: Optional[CompiledRegex] = field(default=None, compare=False, repr=False)


@dataclass
class Apply(Node):
    """Application of a substitution value to one argument: ``s/a/b/(x)``."""
    callee: Node
    arg: Node
