"""
RPN - AST Node Definitions
Immutable syntax tree produced by the parser and consumed by the code generator.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Tuple


@dataclass(frozen=True)
class ASTNode:
    """Base class for all AST nodes. The source line is not part of equality."""
    line: int = field(default=0, compare=False, kw_only=True)


@dataclass(frozen=True)
class SymbolNode(ASTNode):
    """A free symbol, bound at evaluation time."""
    name: str = ""


@dataclass(frozen=True)
class NumberNode(ASTNode):
    """A numeric literal."""
    value: float = 0.0


@dataclass(frozen=True)
class BinaryOpNode(ASTNode):
    """left <op> right"""
    left: ASTNode = None
    right: ASTNode = None

    @property
    def operands(self) -> Tuple[ASTNode, ASTNode]:
        return self.left, self.right


@dataclass(frozen=True)
class AddNode(BinaryOpNode):
    pass


@dataclass(frozen=True)
class SubtractNode(BinaryOpNode):
    pass


@dataclass(frozen=True)
class MultiplyNode(BinaryOpNode):
    pass


@dataclass(frozen=True)
class DivideNode(BinaryOpNode):
    pass


@dataclass(frozen=True)
class ModuloNode(BinaryOpNode):
    pass


@dataclass(frozen=True)
class MinNode(BinaryOpNode):
    pass


@dataclass(frozen=True)
class MaxNode(BinaryOpNode):
    pass


@dataclass(frozen=True)
class PowerNode(ASTNode):
    """base ^ exponent"""
    base: ASTNode = None
    exponent: ASTNode = None

    @property
    def operands(self) -> Tuple[ASTNode, ASTNode]:
        return self.base, self.exponent


# Keyword used by the pretty-printer and infix operator used by to_source().
OPERATORS = {
    AddNode:      ('Add',      '+'),
    SubtractNode: ('Subtract', '-'),
    MultiplyNode: ('Multiply', '*'),
    DivideNode:   ('Divide',   '/'),
    ModuloNode:   ('Modulo',   '%'),
    PowerNode:    ('Power',    '^'),
    MinNode:      ('Min',      'min'),
    MaxNode:      ('Max',      'max'),
}


def format_ast(node: ASTNode, indent: str = " ") -> str:
    """
    Render the tree one node per line, children indented below their operator:

        Add
         Number(2.0)
         Symbol(x)
    """
    lines: List[str] = []
    stack = [(node, 0)]
    while stack:
        n, depth = stack.pop()
        pad = indent * depth
        if isinstance(n, SymbolNode):
            lines.append(f"{pad}Symbol({n.name})")
        elif isinstance(n, NumberNode):
            lines.append(f"{pad}Number({n.value!r})")
        else:
            keyword, _ = OPERATORS[type(n)]
            lines.append(f"{pad}{keyword}")
            left, right = n.operands
            stack.append((right, depth + 1))
            stack.append((left, depth + 1))
    return "\n".join(lines)


def to_source(node: ASTNode) -> str:
    """Write the tree back out as fully parenthesised infix source."""
    if isinstance(node, SymbolNode):
        return node.name
    if isinstance(node, NumberNode):
        return _number_source(node.value)
    _, op = OPERATORS[type(node)]
    left, right = node.operands
    return f"({to_source(left)} {op} {to_source(right)})"


def _number_source(value: float) -> str:
    # repr() may use exponent notation, which the lexer does not accept
    text = repr(value)
    if 'e' in text or 'E' in text:
        text = format(Decimal(text), 'f')
    return text
