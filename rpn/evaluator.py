"""
RPN - Evaluator
Executes an instruction stream on an evaluation stack and returns the single
value left on it.

Free symbols are bound through a resolver, called once per `sym` instruction
in program order. A resolver returning None leaves the symbol unbound.
"""

from typing import Callable, Dict, Iterable, List, Optional
from .codes import (
    Code, DeclareSymbolCode, PushSymbolCode, PushCode, OperatorCode, NopCode,
)

Resolver = Callable[[str], Optional[float]]


class EvaluationError(Exception):
    def __init__(self, message: str):
        super().__init__(f"[EvaluationError] {message}")


class UnboundSymbolError(EvaluationError):
    def __init__(self, name: str):
        super().__init__(f"{name}: symbol not bound")
        self.name = name


class StackUnderflowError(EvaluationError):
    def __init__(self, code: Code, size: int):
        super().__init__(f"{code}: stack underflow, {size} operand(s) available")
        self.code = code
        self.size = size


class MalformedProgramError(EvaluationError):
    def __init__(self, size: int):
        super().__init__(f"evaluation stack has {size} value(s) but should have exactly 1")
        self.size = size


class Evaluator:
    def __init__(self, resolver: Resolver):
        self.resolver = resolver

    def evaluate(self, codes: Iterable[Code]) -> float:
        stack: List[float] = []
        syms: Dict[str, float] = {}

        for code in codes:
            if isinstance(code, DeclareSymbolCode):
                value = self.resolver(code.name)
                if value is None:
                    raise UnboundSymbolError(code.name)
                syms[code.name] = float(value)

            elif isinstance(code, PushSymbolCode):
                if code.name not in syms:
                    # loaded programs may use a symbol they never declared
                    raise UnboundSymbolError(code.name)
                stack.append(syms[code.name])

            elif isinstance(code, PushCode):
                stack.append(code.value)

            elif isinstance(code, OperatorCode):
                if len(stack) < code.args:
                    raise StackUnderflowError(code, len(stack))
                operands = stack[len(stack) - code.args:]
                del stack[len(stack) - code.args:]
                stack.append(code.apply(operands))

            elif isinstance(code, NopCode):
                pass

        if len(stack) != 1:
            raise MalformedProgramError(len(stack))
        return stack[0]


def evaluate(codes: Iterable[Code], resolver: Resolver) -> float:
    return Evaluator(resolver).evaluate(codes)
