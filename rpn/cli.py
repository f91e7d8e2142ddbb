"""
RPN - Command Line Interface

Usage:
    rpnc [input] [-o output] [--opt-level 0|1 | -O] [-t | -p | -l] [--debug]
    rpn  [SYM VAL ...] [-f program] [-s] [--debug]

rpnc compiles an expression (from `input` or stdin) to bytecode text.
rpn evaluates bytecode (from `program` or stdin), binding symbols from the
SYM VAL pairs, and prints the result.
"""

import argparse
import sys
from typing import Dict, Iterator, List, TextIO

from .compiler import (
    compile_source, tokenize_source, parse_source, list_symbols, interpret_source,
    CompilationError, InterpretationError,
)


def _read_chars(stream: TextIO, size: int = 4096) -> Iterator[str]:
    """Yield the characters of `stream` as they are read."""
    while True:
        chunk = stream.read(size)
        if not chunk:
            return
        yield from chunk


def _open_input(path):
    if path is None or path == "-":
        return _read_chars(sys.stdin)
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


def _fail(message: str) -> None:
    print(message, file=sys.stderr)
    sys.exit(1)


# ------------------------------------------------------------------ rpnc

def compile_main(argv=None):
    parser = argparse.ArgumentParser(
        prog="rpnc",
        description="Compile an arithmetic expression to stack-machine bytecode",
    )
    parser.add_argument("input", nargs="?", help="File holding the expression (default: stdin)")
    parser.add_argument("-o", "--output", help="Path for the generated bytecode (default: stdout)")
    parser.add_argument(
        "--opt-level",
        type=int,
        choices=[0, 1],
        default=0,
        dest="opt_level",
        help="Optimization level: 0 = none, 1 = all passes (default: 0)",
    )
    parser.add_argument(
        "-O",
        action="store_const",
        const=1,
        dest="opt_level",
        help="Optimize; same as --opt-level 1",
    )
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("-t", "--tokens", action="store_true", help="Tokenize only")
    mode.add_argument("-p", "--parse", action="store_true", help="Parse only and print the AST")
    mode.add_argument(
        "-l",
        "--listing",
        action="store_true",
        help="Prefix each instruction with its position and stack depth",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Print compilation phase info to stderr",
    )

    args = parser.parse_args(argv)

    try:
        source = _open_input(args.input)
        if args.tokens:
            result = "".join(line + "\n" for line in tokenize_source(source))
        elif args.parse:
            result = parse_source(source) + "\n"
        else:
            result = compile_source(
                source,
                opt_level=args.opt_level,
                listing=args.listing,
                debug=args.debug,
            )
    except FileNotFoundError:
        _fail(f"[rpnc] Error: Input file not found: {args.input!r}")
    except CompilationError as e:
        _fail(str(e))

    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(result)
    else:
        sys.stdout.write(result)


# ------------------------------------------------------------------ rpn

def bind(pairs: List[str]) -> Dict[str, float]:
    """Turn SYM VAL pairs into bindings, discarding malformed ones with a warning."""
    syms: Dict[str, float] = {}
    for i in range(0, len(pairs), 2):
        if i + 1 == len(pairs):
            print(f"{pairs[i]}: discarding symbol since value is missing", file=sys.stderr)
            break
        name, text = pairs[i], pairs[i + 1]
        try:
            syms[name] = float(text)
        except ValueError:
            print(f"{name} <- {text}: discarding symbol since value is malformed", file=sys.stderr)
    return syms


def interpret_main(argv=None):
    parser = argparse.ArgumentParser(
        prog="rpn",
        description="Evaluate stack-machine bytecode and print the result",
    )
    parser.add_argument(
        "bindings",
        nargs="*",
        metavar="SYM VAL",
        help="Symbol/value pairs bound before evaluation",
    )
    parser.add_argument("-f", "--file", help="File holding the bytecode (default: stdin)")
    parser.add_argument("-s", "--symbols", action="store_true", help="Print declared symbols only")
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Print symbol bindings and the result to stderr",
    )

    args = parser.parse_args(argv)

    try:
        program = _open_input(args.file)
        if args.symbols:
            for name in list_symbols(program):
                print(name)
            return
        result = interpret_source(program, bind(args.bindings), debug=args.debug)
    except FileNotFoundError:
        _fail(f"[rpn] Error: Input file not found: {args.file!r}")
    except InterpretationError as e:
        _fail(str(e))

    print(result)


if __name__ == "__main__":
    compile_main()
