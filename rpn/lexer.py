"""
RPN - Lexer
Turns a lazily produced character stream into a lazy token stream.

Tokens must either be separated by whitespace or be clearly distinguishable
from their neighbours (``2+x`` lexes the same as ``2 + x``).
"""

import string
from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterable, Iterator, Optional


class TokenType(Enum):
    # Operators / punctuation
    PLUS    = auto()   # +
    MINUS   = auto()   # -
    STAR    = auto()   # *
    SLASH   = auto()   # /
    PERCENT = auto()   # %
    CARET   = auto()   # ^
    LPAREN  = auto()   # (
    RPAREN  = auto()   # )
    # Reserved words
    MIN     = auto()   # min
    MAX     = auto()   # max
    # Literals
    SYMBOL  = auto()
    NUMBER  = auto()
    # Sentinel
    EOS     = auto()


@dataclass(frozen=True)
class Token:
    type: TokenType
    value: str
    line: int = 1

    def __repr__(self):
        return f"Token({self.type.name}, {self.value!r}, line={self.line})"


class LexerError(Exception):
    def __init__(self, message: str, line: int):
        super().__init__(f"[LexerError] Line {line}: {message}")
        self.line = line


class UnrecognizedCharacterError(LexerError):
    def __init__(self, char: str, line: int):
        super().__init__(f"{char!r}: unrecognized character", line)
        self.char = char


class MalformedNumberError(LexerError):
    def __init__(self, lexeme: str, line: int):
        super().__init__(f"{lexeme!r}: malformed number", line)
        self.lexeme = lexeme


SIMPLE_TOKENS = {
    '+': TokenType.PLUS,
    '-': TokenType.MINUS,
    '*': TokenType.STAR,
    '/': TokenType.SLASH,
    '%': TokenType.PERCENT,
    '^': TokenType.CARET,
    '(': TokenType.LPAREN,
    ')': TokenType.RPAREN,
}

RESERVED_WORDS = {
    'min': TokenType.MIN,
    'max': TokenType.MAX,
}

DIGITS     = frozenset(string.digits)
LETTERS    = frozenset(string.ascii_letters)
WHITESPACE = frozenset(' \n\r\t\f')


class _Cursor:
    """Pull-based view of a character stream with one character of lookahead."""

    def __init__(self, chars: Iterable[str]):
        self._chars = iter(chars)
        self._next: Optional[str] = None
        self._pulled = False
        self.line = 1

    def peek(self) -> Optional[str]:
        if not self._pulled:
            self._next = next(self._chars, None)
            self._pulled = True
        return self._next

    def advance(self) -> Optional[str]:
        c = self.peek()
        self._pulled = False
        if c == '\n':
            self.line += 1
        return c


def tokenize(chars: Iterable[str]) -> Iterator[Token]:
    """
    Lazily convert a character stream into Tokens.

    The end-of-stream sentinel is never yielded. Raises LexerError on an
    unrecognized character or a malformed number, at the point the offending
    token is requested.
    """
    cursor = _Cursor(chars)
    while True:
        token = _next_token(cursor)
        if token.type == TokenType.EOS:
            return
        yield token


def _next_token(cursor: _Cursor) -> Token:
    while cursor.peek() in WHITESPACE:
        cursor.advance()

    line = cursor.line
    c = cursor.peek()

    if c is None:
        return Token(TokenType.EOS, '<EOS>', line)

    if c in SIMPLE_TOKENS:
        cursor.advance()
        return Token(SIMPLE_TOKENS[c], c, line)

    if c in DIGITS:
        return _read_number(cursor, line)

    if c in LETTERS:
        return _read_word(cursor, line)

    raise UnrecognizedCharacterError(c, line)


def _read_number(cursor: _Cursor, line: int) -> Token:
    lexeme = cursor.advance()
    while True:
        c = cursor.peek()
        if c == '.':
            if '.' in lexeme:
                raise MalformedNumberError(lexeme + c, line)
            lexeme += cursor.advance()
        elif c is not None and c in DIGITS:
            lexeme += cursor.advance()
        else:
            break

    if lexeme.endswith('.'):
        raise MalformedNumberError(lexeme, line)
    return Token(TokenType.NUMBER, lexeme, line)


def _read_word(cursor: _Cursor, line: int) -> Token:
    lexeme = cursor.advance()
    while cursor.peek() is not None and cursor.peek() in LETTERS:
        lexeme += cursor.advance()
    return Token(RESERVED_WORDS.get(lexeme, TokenType.SYMBOL), lexeme, line)
