"""
RPN - Compiler Orchestrator
Runs the compile pipeline (lex, parse, generate, optimize, emit) and the
interpret pipeline (load, evaluate), stopping at the first failing phase.
"""

import sys
from typing import Callable, Iterable, List, Mapping, Optional

from .lexer import tokenize, LexerError
from .parser import Parser, ParseError
from .ast_nodes import format_ast
from .codegen import CodeGenerator
from .optimizer import Optimizer
from .emitter import emit_text
from .loader import load, LoadError
from .evaluator import Evaluator, EvaluationError
from .codes import Code, symbols, format_listing


class CompilationError(Exception):
    """Unified compilation error wrapper."""
    pass


class InterpretationError(Exception):
    """Unified interpretation error wrapper."""
    pass


def _logger(debug: bool) -> Callable[[str], None]:
    def log(msg):
        if debug:
            print(f"[rpn] {msg}", file=sys.stderr)
    return log


# ── Compile pipeline ──────────────────────────────────────────────────────────

def tokenize_source(source: Iterable[str]) -> List[str]:
    """Tokenize-only mode: the display form of each token."""
    try:
        return [repr(tok) for tok in tokenize(source)]
    except LexerError as e:
        raise CompilationError(str(e)) from e


def parse_source(source: Iterable[str]) -> str:
    """Parse-only mode: the pretty-printed AST."""
    try:
        return format_ast(Parser(tokenize(source)).parse())
    except (LexerError, ParseError) as e:
        raise CompilationError(str(e)) from e


def compile_codes(
    source: Iterable[str],
    opt_level: int = 0,
    debug: bool = False,
) -> List[Code]:
    """
    Compile an expression to an instruction list.

    Parameters
    ----------
    source     : expression text, or any iterable of characters
    opt_level  : 0 = no optimizations, 1 = all optimizations
    debug      : print each phase summary to stderr

    Raises
    ------
    CompilationError on any phase failure
    """
    log = _logger(debug)

    # ── Phase 1: Lexical analysis and parsing ────────────────────────────────
    # The lexer is lazy, so its errors surface while the parser pulls tokens.
    log("Phase 1: Lexical analysis and parsing")
    try:
        ast = Parser(tokenize(source)).parse()
    except (LexerError, ParseError) as e:
        raise CompilationError(str(e)) from e

    # ── Phase 2: Code generation ─────────────────────────────────────────────
    log("Phase 2: Code generation")
    codes = CodeGenerator().generate(ast)

    log(f"  {len(codes)} instructions generated")

    # ── Phase 3: Optimization ────────────────────────────────────────────────
    log(f"Phase 3: Optimization (level {opt_level})")
    optimizer = Optimizer(opt_level=opt_level)
    codes = optimizer.optimize(codes)

    log(f"  {len(codes)} instructions after {optimizer.rounds} round(s)")
    return codes


def compile_source(
    source: Iterable[str],
    opt_level: int = 0,
    listing: bool = False,
    debug: bool = False,
) -> str:
    """
    Compile an expression to bytecode text, one instruction per line.

    With listing=True, each line is prefixed with its position and the
    evaluation stack depth before it executes.
    """
    codes = compile_codes(source, opt_level=opt_level, debug=debug)

    _logger(debug)("Phase 4: Emission")
    if listing:
        return format_listing(codes) + "\n"
    return emit_text(codes)


# ── Interpret pipeline ────────────────────────────────────────────────────────

def list_symbols(program: Iterable[str]) -> List[str]:
    """Symbols-only mode: names declared by a bytecode program."""
    try:
        return list(symbols(load(program)))
    except LoadError as e:
        raise InterpretationError(str(e)) from e


def interpret_source(
    program: Iterable[str],
    bindings: Optional[Mapping[str, float]] = None,
    debug: bool = False,
) -> float:
    """
    Load bytecode text and evaluate it, binding symbols from `bindings`.

    Raises
    ------
    InterpretationError on a load or evaluation failure
    """
    log = _logger(debug)
    bindings = dict(bindings or {})

    def resolve(name: str) -> Optional[float]:
        value = bindings.get(name)
        log(f"  sym {name} <- {value}")
        return value

    log("Phase 1: Loading and evaluation")
    try:
        result = Evaluator(resolve).evaluate(load(program))
    except (LoadError, EvaluationError) as e:
        raise InterpretationError(str(e)) from e

    log(f"  result {result!r}")
    return result
