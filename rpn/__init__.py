"""
RPN - arithmetic expressions compiled to, and evaluated as, stack-machine bytecode.
"""

from .compiler import (
    compile_codes, compile_source, tokenize_source, parse_source,
    list_symbols, interpret_source, CompilationError, InterpretationError,
)

__version__ = "0.1.0"

__all__ = [
    "compile_codes",
    "compile_source",
    "tokenize_source",
    "parse_source",
    "list_symbols",
    "interpret_source",
    "CompilationError",
    "InterpretationError",
]
