"""
RPN - Recursive Descent Parser
Converts a token stream into an AST.

Grammar (every tier is left-associative):

    p0 ::= p2 ( ('+' | '-') p2 )*
    p2 ::= p4 ( ('*' | '/' | '%' | '^') p4 )*
    p4 ::= p6 ( ('min' | 'max') p6 )*
    p6 ::= '(' p0 ')' | <symbol> | <number>

Note that '^' binds like '*' and associates to the left: 2 ^ 3 ^ 2 is (2 ^ 3) ^ 2.
"""

from typing import Iterable, Iterator, Optional
from .lexer import Token, TokenType
from .ast_nodes import (
    AddNode, SubtractNode, MultiplyNode, DivideNode, ModuloNode,
    PowerNode, MinNode, MaxNode, SymbolNode, NumberNode, ASTNode
)


class ParseError(Exception):
    def __init__(self, message: str, line: int):
        super().__init__(f"[ParseError] Line {line}: {message}")
        self.line = line


class UnexpectedTokenError(ParseError):
    def __init__(self, token: Token, expected: str):
        super().__init__(f"{token.value!r}: expected {expected}", token.line)
        self.token = token


class TrailingTokenError(ParseError):
    def __init__(self, token: Token):
        super().__init__(f"{token.value!r}: unexpected token after expression", token.line)
        self.token = token


class UnmatchedParenthesisError(ParseError):
    def __init__(self, token: Token):
        super().__init__(f"{token.value!r}: expected ')'", token.line)
        self.token = token


_ADDITIVE = {
    TokenType.PLUS:  AddNode,
    TokenType.MINUS: SubtractNode,
}

_MULTIPLICATIVE = {
    TokenType.STAR:    MultiplyNode,
    TokenType.SLASH:   DivideNode,
    TokenType.PERCENT: ModuloNode,
    TokenType.CARET:   PowerNode,
}

_MINMAX = {
    TokenType.MIN: MinNode,
    TokenType.MAX: MaxNode,
}


class Parser:
    def __init__(self, tokens: Iterable[Token]):
        self._tokens: Iterator[Token] = iter(tokens)
        self._current: Optional[Token] = None
        self._last_line = 1

    # ------------------------------------------------------------------ helpers

    def _peek(self) -> Token:
        if self._current is None:
            tok = next(self._tokens, None)
            if tok is None:
                tok = Token(TokenType.EOS, '<EOS>', self._last_line)
            self._current = tok
            self._last_line = tok.line
        return self._current

    def _advance(self) -> Token:
        tok = self._peek()
        if tok.type != TokenType.EOS:
            self._current = None
        return tok

    def _match(self, *types: TokenType) -> bool:
        return self._peek().type in types

    # ------------------------------------------------------------------ public

    def parse(self) -> ASTNode:
        """Parse one complete expression; every token must be consumed."""
        node = self._parse_additive()
        tok = self._peek()
        if tok.type != TokenType.EOS:
            raise TrailingTokenError(tok)
        return node

    # ------------------------------------------------------------------ expressions

    def _parse_additive(self) -> ASTNode:
        left = self._parse_multiplicative()

        while self._match(*_ADDITIVE):
            op_tok = self._advance()
            right = self._parse_multiplicative()
            left = self._binary(op_tok, _ADDITIVE[op_tok.type], left, right)

        return left

    def _parse_multiplicative(self) -> ASTNode:
        left = self._parse_minmax()

        while self._match(*_MULTIPLICATIVE):
            op_tok = self._advance()
            right = self._parse_minmax()
            left = self._binary(op_tok, _MULTIPLICATIVE[op_tok.type], left, right)

        return left

    def _parse_minmax(self) -> ASTNode:
        left = self._parse_primary()

        while self._match(*_MINMAX):
            op_tok = self._advance()
            right = self._parse_primary()
            left = self._binary(op_tok, _MINMAX[op_tok.type], left, right)

        return left

    def _parse_primary(self) -> ASTNode:
        tok = self._peek()

        # Parenthesised expression
        if tok.type == TokenType.LPAREN:
            self._advance()
            expr = self._parse_additive()
            if not self._match(TokenType.RPAREN):
                raise UnmatchedParenthesisError(self._peek())
            self._advance()
            return expr

        if tok.type == TokenType.SYMBOL:
            self._advance()
            return SymbolNode(name=tok.value, line=tok.line)

        if tok.type == TokenType.NUMBER:
            self._advance()
            return NumberNode(value=float(tok.value), line=tok.line)

        raise UnexpectedTokenError(tok, "'(', symbol or number")

    @staticmethod
    def _binary(op_tok: Token, node_type, left: ASTNode, right: ASTNode) -> ASTNode:
        if node_type is PowerNode:
            return PowerNode(base=left, exponent=right, line=op_tok.line)
        return node_type(left=left, right=right, line=op_tok.line)


def parse(tokens: Iterable[Token]) -> ASTNode:
    return Parser(tokens).parse()
