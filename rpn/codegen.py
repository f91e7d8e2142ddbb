"""
RPN - Code Generator
Lowers an AST to an unoptimized list of stack-machine instructions.
"""

from typing import List, Set
from .ast_nodes import (
    AddNode, SubtractNode, MultiplyNode, DivideNode, ModuloNode,
    PowerNode, MinNode, MaxNode, SymbolNode, NumberNode, ASTNode
)
from .codes import (
    Code, DeclareSymbolCode, PushSymbolCode, PushCode,
    AddCode, SubtractCode, MultiplyCode, DivideCode,
    MinCode, MaxCode, ModuloCode, PowerCode,
)


_OPERATOR_CODES = {
    AddNode:      lambda: AddCode(2),
    SubtractNode: lambda: SubtractCode(2),
    MultiplyNode: lambda: MultiplyCode(2),
    DivideNode:   lambda: DivideCode(2),
    MinNode:      lambda: MinCode(2),
    MaxNode:      lambda: MaxCode(2),
    ModuloNode:   ModuloCode,
    PowerNode:    PowerCode,
}


class CodeGenerator:
    def __init__(self):
        self._codes: List[Code] = []
        self._symbols: Set[str] = set()

    def generate(self, ast: ASTNode) -> List[Code]:
        """
        Return the instruction list for `ast`: one declaration per distinct
        symbol, sorted by name, followed by the post-order operator stream.
        """
        self._codes = []
        self._symbols = set()

        self._emit(ast)

        decls: List[Code] = [DeclareSymbolCode(name) for name in sorted(self._symbols)]
        return decls + self._codes

    # ------------------------------------------------------------------ expressions

    def _emit(self, node: ASTNode) -> None:
        if isinstance(node, SymbolNode):
            self._symbols.add(node.name)
            self._codes.append(PushSymbolCode(node.name))
            return

        if isinstance(node, NumberNode):
            self._codes.append(PushCode(node.value))
            return

        make = _OPERATOR_CODES[type(node)]
        left, right = node.operands
        self._emit(left)
        self._emit(right)
        self._codes.append(make())


def generate(ast: ASTNode) -> List[Code]:
    return CodeGenerator().generate(ast)
