"""
RPN - Loader
Reads textual bytecode back into instructions. Inverse of the emitter.

Lines are delimited by '\\n' and matched independently; blank lines are
skipped and whitespace around the keyword and its argument is ignored.
"""

from typing import Iterable, Iterator
from .codes import Code, parse_code


class LoadError(Exception):
    def __init__(self, text: str, line: int):
        super().__init__(f"[LoadError] Line {line}: {text!r}: unrecognized or malformed instruction")
        self.text = text
        self.line = line


def load(chars: Iterable[str]) -> Iterator[Code]:
    """
    Lazily convert a character stream into instructions.

    Raises LoadError for the first line that is not a valid instruction,
    at the point that instruction is requested.
    """
    for line_num, text in _lines(chars):
        if not text.strip():
            continue
        code = parse_code(text)
        if code is None:
            raise LoadError(text, line_num)
        yield code


def _lines(chars: Iterable[str]) -> Iterator:
    line_num = 1
    buffer = []
    for c in chars:
        if c == '\n':
            yield line_num, "".join(buffer)
            buffer = []
            line_num += 1
        else:
            buffer.append(c)
    if buffer:
        yield line_num, "".join(buffer)
