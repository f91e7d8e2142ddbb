"""
RPN - Optimizer
Peephole rewriting of an instruction list, repeated until a fixed point.

Passes, applied in order on every round:
  A. Frame fusion        simulate the evaluation stack and merge an associative
                         operator into the one consuming its result
                         (add 2 ... add 2 -> add 3)
  B. Adjacent flattening merge an associative operator into an identical one
                         that immediately follows it
  C. Constant folding    replace operators whose operands are literals with
                         the precomputed literal, provided its canonical text
                         loads back as the same value

Rounds stop as soon as one full round removes no instructions. Each pass marks
positions with a revised instruction or with a nop; nops are dropped when the
revisions are applied, so positions shift between passes but never within one.
Declarations are never touched, so their order is preserved.
"""

import math
from typing import Dict, Iterable, List, Optional
from .codes import (
    Code, NopCode, PushCode, PushSymbolCode, OperatorCode, DynamicOperatorCode,
    format_number,
)


class Optimizer:
    def __init__(self, opt_level: int = 1):
        """
        opt_level 0 – no optimizations
        opt_level 1 – all passes, repeated to a fixed point
        """
        self.opt_level = opt_level
        self.rounds = 0

    def optimize(self, codes: Iterable[Code]) -> List[Code]:
        codes = list(codes)
        self.rounds = 0
        if self.opt_level == 0:
            return codes

        passes = (self._fuse_frames, self._flatten_adjacent, self._fold_constants)
        while True:
            self.rounds += 1
            before = len(codes)
            for optimization in passes:
                codes = optimization(codes)
            if len(codes) >= before:
                return codes

    # ------------------------------------------------------------------ pass A

    def _fuse_frames(self, codes: List[Code]) -> List[Code]:
        revisions: Dict[int, Code] = {}
        # per stack slot: position of the associative operator that produced it
        stack: List[Optional[int]] = []

        for pos, code in enumerate(codes):
            if isinstance(code, (PushSymbolCode, PushCode)):
                stack.append(None)
            elif isinstance(code, OperatorCode):
                operands = _pop(stack, code.args)
                if operands is None:
                    return codes
                if not _fusible(code):
                    stack.append(None)
                    continue

                args = code.args
                for producer in operands:
                    if producer is not None and type(codes[producer]) is type(code):
                        args += revisions.get(producer, codes[producer]).args - 1
                        revisions[producer] = NopCode()
                if args != code.args:
                    revisions[pos] = code.with_args(args)
                stack.append(pos)

        return _revise(codes, revisions)

    # ------------------------------------------------------------------ pass B

    def _flatten_adjacent(self, codes: List[Code]) -> List[Code]:
        revisions: Dict[int, Code] = {}

        for pos in range(1, len(codes)):
            code, prev = codes[pos], codes[pos - 1]
            if _fusible(code) and type(prev) is type(code):
                prev = revisions.get(pos - 1, prev)
                revisions[pos - 1] = NopCode()
                revisions[pos] = code.with_args(code.args + prev.args - 1)

        return _revise(codes, revisions)

    # ------------------------------------------------------------------ pass C

    def _fold_constants(self, codes: List[Code]) -> List[Code]:
        revisions: Dict[int, Code] = {}
        # per stack slot: position of the literal push that produced it
        stack: List[Optional[int]] = []

        def literal(pos: int) -> float:
            return revisions.get(pos, codes[pos]).value

        for pos, code in enumerate(codes):
            if isinstance(code, PushCode):
                stack.append(pos)
            elif isinstance(code, PushSymbolCode):
                stack.append(None)
            elif isinstance(code, OperatorCode):
                operands = _pop(stack, code.args)
                if operands is None:
                    return codes

                if all(p is not None for p in operands):
                    value = code.apply([literal(p) for p in operands])
                    if _representable(value):
                        for p in operands:
                            revisions[p] = NopCode()
                        revisions[pos] = PushCode(value)
                        stack.append(pos)
                        continue
                elif _fusible(code):
                    args = code.args
                    for run in _literal_runs(operands):
                        value = code.apply([literal(p) for p in run])
                        if not _representable(value):
                            continue
                        revisions[run[0]] = PushCode(value)
                        for p in run[1:]:
                            revisions[p] = NopCode()
                        args -= len(run) - 1
                    if args != code.args:
                        revisions[pos] = code.with_args(args)
                stack.append(None)

        return _revise(codes, revisions)


# ------------------------------------------------------------------ helpers

def _fusible(code: Code) -> bool:
    return isinstance(code, DynamicOperatorCode) and code.associative


def _representable(value: float) -> bool:
    """True if the canonical text of `value` loads back as exactly `value`."""
    return math.isfinite(value) and float(format_number(value)) == value


def _pop(stack: List[Optional[int]], count: int) -> Optional[List[Optional[int]]]:
    """Remove and return the top `count` slots, bottom first; None on underflow."""
    if len(stack) < count:
        return None
    operands = stack[len(stack) - count:]
    del stack[len(stack) - count:]
    return operands


def _literal_runs(operands: List[Optional[int]]) -> List[List[int]]:
    """Maximal runs of two or more consecutive literal operands."""
    runs: List[List[int]] = []
    current: List[int] = []
    for p in operands + [None]:
        if p is not None:
            current.append(p)
            continue
        if len(current) >= 2:
            runs.append(current)
        current = []
    return runs


def _revise(codes: List[Code], revisions: Dict[int, Code]) -> List[Code]:
    revised = (revisions.get(pos, code) for pos, code in enumerate(codes))
    return [code for code in revised if not isinstance(code, NopCode)]


def optimize(codes: Iterable[Code], opt_level: int = 1) -> List[Code]:
    return Optimizer(opt_level=opt_level).optimize(codes)
