"""
RPN - Bytecode Instructions
Stack-machine instruction set shared by the generator, optimizer, emitter,
loader and evaluator.

Recognized instructions, one per line in textual form:

    sym <symbol>        declare a symbol, binding it through the resolver
    pushsym <symbol>    push the value bound to <symbol>
    push <number>       push a literal
    add <args>          sum of the top <args> operands
    sub <args>          difference, folded left to right
    mul <args>          product
    div <args>          quotient, folded left to right
    min <args>          minimum
    max <args>          maximum
    mod                 IEEE remainder of two operands
    pow                 exponentiation of two operands
    nop                 no effect

Arithmetic follows IEEE 754 doubles: division by zero, domain errors and
overflow produce infinities or NaN rather than raising.
"""

import math
import re
from dataclasses import dataclass, field
from typing import Callable, ClassVar, Dict, Iterable, Iterator, List, Optional


# ------------------------------------------------------------------ arithmetic

def _divide(a: float, b: float) -> float:
    try:
        return a / b
    except ZeroDivisionError:
        if a == 0.0 or math.isnan(a):
            return math.nan
        return math.copysign(math.inf, a) * math.copysign(1.0, b)


def _remainder(a: float, b: float) -> float:
    try:
        return math.remainder(a, b)
    except ValueError:
        # infinite dividend or zero divisor
        return math.nan


def _is_odd_integer(x: float) -> bool:
    return math.isfinite(x) and x.is_integer() and int(x) % 2 == 1


def _power(base: float, exponent: float) -> float:
    try:
        return math.pow(base, exponent)
    except OverflowError:
        if base < 0.0 and _is_odd_integer(exponent):
            return -math.inf
        return math.inf
    except ValueError:
        if base == 0.0:
            # zero raised to a negative power
            if _is_odd_integer(exponent):
                return math.copysign(math.inf, base)
            return math.inf
        return math.nan


def _minimum(a: float, b: float) -> float:
    if math.isnan(a) or math.isnan(b):
        return math.nan
    return a if a <= b else b


def _maximum(a: float, b: float) -> float:
    if math.isnan(a) or math.isnan(b):
        return math.nan
    return a if a >= b else b


def format_number(value: float) -> str:
    """Canonical text of a literal: 10 fractional digits, trailing zeros and point dropped."""
    return ("%.10f" % value).rstrip('0').rstrip('.')


# ------------------------------------------------------------------ instructions

@dataclass(frozen=True)
class Code:
    """Base class for all instructions. str(code) is its canonical text."""
    op: ClassVar[str] = ""

    def __str__(self):
        return self.op


@dataclass(frozen=True)
class DeclareSymbolCode(Code):
    """Declares a symbol before its use, which lets the evaluator bind a value."""
    op: ClassVar[str] = "sym"
    name: str = ""

    def __str__(self):
        return f"{self.op} {self.name}"


@dataclass(frozen=True)
class PushSymbolCode(Code):
    """Pushes the value bound to `name` onto the evaluation stack."""
    op: ClassVar[str] = "pushsym"
    name: str = ""

    def __str__(self):
        return f"{self.op} {self.name}"


@dataclass(frozen=True)
class PushCode(Code):
    """Pushes the number `value` onto the evaluation stack."""
    op: ClassVar[str] = "push"
    value: float = 0.0

    def __str__(self):
        return f"{self.op} {format_number(self.value)}"


@dataclass(frozen=True)
class NopCode(Code):
    """An instruction that has no effect."""
    op: ClassVar[str] = "nop"


@dataclass(frozen=True)
class OperatorCode(Code):
    """Pops `args` operands, folds them left to right with `function`, pushes the result."""
    associative: ClassVar[bool] = False
    commutative: ClassVar[bool] = False
    function: ClassVar[Callable[[float, float], float]]
    args: int = 2

    def apply(self, operands: List[float]) -> float:
        fn = type(self).function
        result = operands[0]
        for value in operands[1:]:
            result = fn(result, value)
        return result


@dataclass(frozen=True)
class FixedOperatorCode(OperatorCode):
    args: int = field(default=2, init=False)


@dataclass(frozen=True)
class DynamicOperatorCode(OperatorCode):

    def __str__(self):
        return f"{self.op} {self.args}"

    def with_args(self, args: int) -> "DynamicOperatorCode":
        return type(self)(args)


@dataclass(frozen=True)
class AddCode(DynamicOperatorCode):
    op: ClassVar[str] = "add"
    associative: ClassVar[bool] = True
    commutative: ClassVar[bool] = True
    function = staticmethod(lambda a, b: a + b)


@dataclass(frozen=True)
class SubtractCode(DynamicOperatorCode):
    op: ClassVar[str] = "sub"
    function = staticmethod(lambda a, b: a - b)


@dataclass(frozen=True)
class MultiplyCode(DynamicOperatorCode):
    op: ClassVar[str] = "mul"
    associative: ClassVar[bool] = True
    commutative: ClassVar[bool] = True
    function = staticmethod(lambda a, b: a * b)


@dataclass(frozen=True)
class DivideCode(DynamicOperatorCode):
    op: ClassVar[str] = "div"
    function = staticmethod(_divide)


@dataclass(frozen=True)
class MinCode(DynamicOperatorCode):
    op: ClassVar[str] = "min"
    associative: ClassVar[bool] = True
    commutative: ClassVar[bool] = True
    function = staticmethod(_minimum)


@dataclass(frozen=True)
class MaxCode(DynamicOperatorCode):
    op: ClassVar[str] = "max"
    associative: ClassVar[bool] = True
    commutative: ClassVar[bool] = True
    function = staticmethod(_maximum)


@dataclass(frozen=True)
class ModuloCode(FixedOperatorCode):
    op: ClassVar[str] = "mod"
    function = staticmethod(_remainder)


@dataclass(frozen=True)
class PowerCode(FixedOperatorCode):
    op: ClassVar[str] = "pow"
    function = staticmethod(_power)


# ------------------------------------------------------------------ parsing

_NAME_RE   = re.compile(r'[A-Za-z]+', re.ASCII)
_NUMBER_RE = re.compile(r'-?\d+(?:\.\d+)?', re.ASCII)
_ARGS_RE   = re.compile(r'\d+', re.ASCII)


def _named(code_type):
    def parse(arguments: List[str]) -> Optional[Code]:
        if len(arguments) == 1 and _NAME_RE.fullmatch(arguments[0]):
            return code_type(arguments[0])
        return None
    return parse


def _numeric(arguments: List[str]) -> Optional[Code]:
    if len(arguments) == 1 and _NUMBER_RE.fullmatch(arguments[0]):
        return PushCode(float(arguments[0]))
    return None


def _dynamic(code_type):
    def parse(arguments: List[str]) -> Optional[Code]:
        if len(arguments) == 1 and _ARGS_RE.fullmatch(arguments[0]):
            args = int(arguments[0])
            if args >= 2:
                return code_type(args)
        return None
    return parse


def _bare(code_type):
    def parse(arguments: List[str]) -> Optional[Code]:
        return code_type() if not arguments else None
    return parse


_PARSERS: Dict[str, Callable[[List[str]], Optional[Code]]] = {
    DeclareSymbolCode.op: _named(DeclareSymbolCode),
    PushSymbolCode.op:    _named(PushSymbolCode),
    PushCode.op:          _numeric,
    AddCode.op:           _dynamic(AddCode),
    SubtractCode.op:      _dynamic(SubtractCode),
    MultiplyCode.op:      _dynamic(MultiplyCode),
    DivideCode.op:        _dynamic(DivideCode),
    MinCode.op:           _dynamic(MinCode),
    MaxCode.op:           _dynamic(MaxCode),
    ModuloCode.op:        _bare(ModuloCode),
    PowerCode.op:         _bare(PowerCode),
    NopCode.op:           _bare(NopCode),
}


def parse_code(text: str) -> Optional[Code]:
    """Parse one instruction line, ignoring surrounding whitespace. Returns None if malformed."""
    keyword, *arguments = text.split() or ['']
    parser = _PARSERS.get(keyword)
    if parser is None:
        return None
    return parser(arguments)


# ------------------------------------------------------------------ listings

def stack_effect(code: Code) -> int:
    """Net change in evaluation stack depth caused by executing `code`."""
    if isinstance(code, (PushSymbolCode, PushCode)):
        return 1
    if isinstance(code, OperatorCode):
        return 1 - code.args
    return 0


def symbols(codes: Iterable[Code]) -> Iterator[str]:
    """Names of all declared symbols, in program order."""
    for code in codes:
        if isinstance(code, DeclareSymbolCode):
            yield code.name


def format_listing(codes: Iterable[Code]) -> str:
    """One line per instruction: position, frame depth before it executes, and its text."""
    lines = []
    frame = 0
    for pos, code in enumerate(codes):
        lines.append(f"{pos} [{frame}] {code}")
        frame += stack_effect(code)
    return "\n".join(lines)
