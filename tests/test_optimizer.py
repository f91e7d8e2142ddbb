"""
RPN - Optimizer Tests
Tests for frame fusion, adjacent flattening, constant folding and the
fixed-point driver.
"""

import sys
import os
import math
import unittest

# Allow running from project root
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from rpn.lexer import tokenize
from rpn.parser import Parser
from rpn.codegen import CodeGenerator
from rpn.emitter import emit, emit_text
from rpn.loader import load
from rpn.evaluator import evaluate
from rpn.optimizer import Optimizer, optimize
from rpn.codes import (
    DeclareSymbolCode, PushSymbolCode, PushCode, NopCode,
    AddCode, SubtractCode, MultiplyCode,
)


# ═══════════════════════════════════════════════════════════════════════════════
# Helpers
# ═══════════════════════════════════════════════════════════════════════════════

def generate_(source: str):
    return CodeGenerator().generate(Parser(tokenize(source)).parse())


def optimize_(source: str, opt_level: int = 1):
    return list(emit(Optimizer(opt_level=opt_level).optimize(generate_(source))))


BINDINGS = {
    "a": 3.0, "b": 7.0, "c": -1.0, "d": 0.5,
    "x": 1.5, "y": -2.25, "z": 4.0, "w": 0.75,
}


# ═══════════════════════════════════════════════════════════════════════════════
# Fusion Tests
# ═══════════════════════════════════════════════════════════════════════════════

class TestFusion(unittest.TestCase):

    def test_opt_level_0_is_identity(self):
        self.assertEqual(optimize_("x + y + z", opt_level=0), [
            "sym x", "sym y", "sym z",
            "pushsym x", "pushsym y", "add 2", "pushsym z", "add 2",
        ])

    def test_left_chain_fuses(self):
        self.assertEqual(optimize_("x + y + z"), [
            "sym x", "sym y", "sym z",
            "pushsym x", "pushsym y", "pushsym z", "add 3",
        ])

    def test_right_nested_fuses(self):
        self.assertEqual(optimize_("x * (y * z)"), [
            "sym x", "sym y", "sym z",
            "pushsym x", "pushsym y", "pushsym z", "mul 3",
        ])

    def test_long_chain(self):
        self.assertEqual(optimize_("a + b + c + d")[-1], "add 4")
        self.assertEqual(len(optimize_("a + b + c + d")), 9)

    def test_middle_operand_fuses(self):
        self.assertEqual(optimize_("x + (y + z) + w")[4:], [
            "pushsym x", "pushsym y", "pushsym z", "pushsym w", "add 4",
        ])

    def test_balanced_tree(self):
        self.assertEqual(optimize_("(a min b) min (c min d)")[4:], [
            "pushsym a", "pushsym b", "pushsym c", "pushsym d", "min 4",
        ])

    def test_fusion_across_other_operator(self):
        # the add operand keeps its own frame
        self.assertEqual(optimize_("a * b * (c + d) * a")[4:], [
            "pushsym a", "pushsym b", "pushsym c", "pushsym d", "add 2", "pushsym a", "mul 4",
        ])

    def test_different_operators_not_fused(self):
        self.assertEqual(optimize_("x * y + z"), optimize_("x * y + z", opt_level=0))

    def test_subtract_never_fused(self):
        self.assertEqual(optimize_("x - y - z"), optimize_("x - y - z", opt_level=0))

    def test_divide_modulo_power_never_fused(self):
        for source in ("x / y / z", "x % y % z", "x ^ y ^ z"):
            with self.subTest(source=source):
                self.assertEqual(optimize_(source), optimize_(source, opt_level=0))

    def test_fixed_arity_breaks_run(self):
        self.assertEqual(optimize_("(x + y) ^ 2 + z")[3:], [
            "pushsym x", "pushsym y", "add 2", "push 2", "pow", "pushsym z", "add 2",
        ])

    def test_adjacent_flattening_pass(self):
        pushes = [PushSymbolCode("a"), PushSymbolCode("b"), PushSymbolCode("c"), PushSymbolCode("d")]
        flattened = Optimizer()._flatten_adjacent(pushes + [AddCode(2), AddCode(2), AddCode(2)])
        self.assertEqual(flattened, pushes + [AddCode(4)])

    def test_adjacent_different_operators_untouched(self):
        codes = [PushSymbolCode("a"), PushSymbolCode("b"), PushSymbolCode("c"), AddCode(2), MultiplyCode(2)]
        self.assertEqual(Optimizer()._flatten_adjacent(codes), codes)

    def test_declarations_preserved(self):
        codes = Optimizer().optimize(generate_("c + b + a + c"))
        self.assertEqual(codes[:3], [DeclareSymbolCode("a"), DeclareSymbolCode("b"), DeclareSymbolCode("c")])

    def test_existing_nops_dropped(self):
        codes = [PushCode(1.0), NopCode(), PushSymbolCode("x"), NopCode(), SubtractCode(2)]
        self.assertEqual(optimize(codes), [PushCode(1.0), PushSymbolCode("x"), SubtractCode(2)])

    def test_malformed_program_left_alone(self):
        codes = [PushSymbolCode("x"), AddCode(3)]
        self.assertEqual(optimize(codes), codes)

    def test_fixed_point(self):
        optimizer = Optimizer()
        once = optimizer.optimize(generate_("((a + b) + (c + d)) * (a * (b * c))"))
        self.assertEqual(optimizer.optimize(once), once)
        self.assertEqual(optimizer.rounds, 1)


# ═══════════════════════════════════════════════════════════════════════════════
# Constant Folding Tests
# ═══════════════════════════════════════════════════════════════════════════════

class TestConstantFolding(unittest.TestCase):

    def test_literal_expression(self):
        self.assertEqual(optimize_("2 + 3 * 4"), ["push 14"])

    def test_non_associative_literals(self):
        self.assertEqual(optimize_("x - 2 * 3")[1:], ["pushsym x", "push 6", "sub 2"])
        self.assertEqual(optimize_("10 - 4 - 1"), ["push 5"])

    def test_fixed_arity_literals(self):
        # IEEE remainder: 8 - 5 * round(8 / 5) = -2
        self.assertEqual(optimize_("2 ^ 3 % 5"), ["push -2"])

    def test_partial_run(self):
        self.assertEqual(optimize_("x + 1 + 2"), ["sym x", "pushsym x", "push 3", "add 2"])

    def test_runs_split_by_symbol(self):
        self.assertEqual(optimize_("1 max 2 max x max 3 max 4")[1:], [
            "push 2", "pushsym x", "push 4", "max 3",
        ])

    def test_subtract_not_partially_folded(self):
        self.assertEqual(optimize_("x - 1 - 2"), optimize_("x - 1 - 2", opt_level=0))

    def test_infinite_result_not_folded(self):
        self.assertEqual(optimize_("1 / 0 + x"), [
            "sym x", "push 1", "push 0", "div 2", "pushsym x", "add 2",
        ])

    def test_nan_result_not_folded(self):
        self.assertEqual(optimize_("0 / 0"), ["push 0", "push 0", "div 2"])

    def test_folded_value(self):
        codes = Optimizer().optimize(generate_("1 / 8"))
        self.assertEqual(codes, [PushCode(0.125)])

    def test_inexact_text_not_folded(self):
        for source in ("1 / 3", "1 / 1000000000000", "0.1 + 0.2"):
            with self.subTest(source=source):
                self.assertEqual(optimize_(source), optimize_(source, opt_level=0))

    def test_inexact_run_not_folded(self):
        self.assertEqual(optimize_("x * 3 * 0.1")[1:], [
            "pushsym x", "push 3", "push 0.1", "mul 3",
        ])
        self.assertEqual(optimize_("1 / 1000000000000 * x")[1:], [
            "push 1", "push 1000000000000", "div 2", "pushsym x", "mul 2",
        ])


# ═══════════════════════════════════════════════════════════════════════════════
# Transparency Tests
# ═══════════════════════════════════════════════════════════════════════════════

class TestTransparency(unittest.TestCase):

    SOURCES = [
        "x + y + z",
        "x + y * (z + x) - 2 min y",
        "(a + b) * (c + d) * (a max 3 max b)",
        "a / b / 2 + a % 3 ^ 2",
        "((x + 1) + (y + 2)) + ((z + 3) + 4)",
        "x min 2 min y min 1 max z",
        "2 * x * 3 * y * 4",
        "(w + 0.5 + 0.25) * (a - 1 - 2) / (b max 1 max 2)",
        "(x + y) ^ 2 + (x + y) % 2 + (a * b * c * d)",
        "1 / 0 + x",
    ]

    def test_optimized_program_evaluates_the_same(self):
        for source in self.SOURCES:
            with self.subTest(source=source):
                codes = generate_(source)
                expected = evaluate(codes, BINDINGS.get)
                actual = evaluate(optimize(codes), BINDINGS.get)
                self.assertTrue(
                    math.isclose(actual, expected, rel_tol=1e-9, abs_tol=1e-12),
                    f"{source}: {actual} != {expected}",
                )

    def test_optimized_text_evaluates_the_same(self):
        sources = self.SOURCES + [
            "1 / 3 * x",
            "1 / 1000000000000 * x",
            "x * 3 * 0.1 + 0.1 + 0.2",
            "(2 ^ 0.5) * (2 ^ 0.5) - a",
        ]
        bindings = dict(BINDINGS, x=1e12)
        for source in sources:
            with self.subTest(source=source):
                codes = generate_(source)
                expected = evaluate(load(emit_text(codes)), bindings.get)
                actual = evaluate(load(emit_text(optimize(codes))), bindings.get)
                self.assertTrue(
                    math.isclose(actual, expected, rel_tol=1e-9, abs_tol=1e-12),
                    f"{source}: {actual} != {expected}",
                )

    def test_optimizer_never_grows_program(self):
        for source in self.SOURCES:
            with self.subTest(source=source):
                codes = generate_(source)
                self.assertLessEqual(len(optimize(codes)), len(codes))


if __name__ == "__main__":
    unittest.main(verbosity=2)
