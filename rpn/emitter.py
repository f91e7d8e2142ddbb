"""
RPN - Emitter
Renders instructions in their canonical textual form, one per line.
"""

from typing import Iterable, Iterator
from .codes import Code


def emit(codes: Iterable[Code]) -> Iterator[str]:
    """Yield the canonical text of each instruction."""
    for code in codes:
        yield str(code)


def emit_text(codes: Iterable[Code]) -> str:
    """Return the whole program as newline-terminated text."""
    return "".join(line + "\n" for line in emit(codes))
