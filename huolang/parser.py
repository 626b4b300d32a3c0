"""Recursive-descent parser turning a token stream into a syntax tree."""

from __future__ import annotations

import enum
import warnings
from dataclasses import dataclass
from typing import Callable, Iterable, Optional

from .syntax import AstNode, AstType
from .values import HuoError, Value


class TokenType(enum.Enum):
    WHITESPACE = "whitespace"
    NEWLINE = "newline"
    COMMENT = "comment"
    EOF = "eof"
    OPEN_BRACKET = "open_bracket"
    CLOSE_BRACKET = "close_bracket"
    OPEN_SQUARE = "open_square"
    CLOSE_SQUARE = "close_square"
    NUMBER = "number"
    DOT = "dot"
    COMMA = "comma"
    QUOTE = "quote"
    MINUS = "minus"
    PLUS = "plus"
    BUILTIN = "builtin"
    WORD = "word"


@dataclass(frozen=True)
class Token:
    """A lexical token: its kind and the source text it covers."""

    type: TokenType
    data: str = ""

    def __str__(self) -> str:
        return f"{self.type.name}: {self.data}"


_BLANK = (TokenType.WHITESPACE, TokenType.NEWLINE, TokenType.COMMENT)
_WORD_TOKENS = (TokenType.PLUS, TokenType.MINUS, TokenType.BUILTIN, TokenType.WORD)
_NOT_WORD_TOKENS = (
    TokenType.DOT,
    TokenType.COMMA,
    TokenType.OPEN_BRACKET,
    TokenType.CLOSE_BRACKET,
    TokenType.OPEN_SQUARE,
    TokenType.CLOSE_SQUARE,
    TokenType.NUMBER,
    TokenType.QUOTE,
)

_Rule = Callable[[], Optional[AstNode]]


class _Parser:
    def __init__(self, tokens: Iterable[Token]) -> None:
        self.tokens = list(tokens)
        if not self.tokens or self.tokens[-1].type is not TokenType.EOF:
            self.tokens.append(Token(TokenType.EOF))
        self.pos = 0

    # -- token helpers -------------------------------------------------

    def _peek(self) -> Token:
        return self.tokens[min(self.pos, len(self.tokens) - 1)]

    def _next_is(self, kind: TokenType) -> bool:
        return self._peek().type is kind

    def _take(self, kind: TokenType) -> bool:
        if self._next_is(kind):
            self.pos += 1
            return True
        return False

    def _skip_blank(self) -> None:
        while self._peek().type in _BLANK:
            self.pos += 1

    def _attempt(self, rule: _Rule) -> Optional[AstNode]:
        saved = self.pos
        node = rule()
        if node is None:
            self.pos = saved
        return node

    def _attempt_any(self, *rules: _Rule) -> Optional[AstNode]:
        for rule in rules:
            node = self._attempt(rule)
            if node is not None:
                return node
        return None

    # -- grammar -------------------------------------------------------

    def program(self) -> AstNode:
        self._skip_blank()
        node = self._attempt_any(self._main, self._open_bracket, self._open_square)
        if node is None:
            raise HuoError("Invalid parse!")
        self._skip_blank()
        if not self._take(TokenType.EOF):
            raise HuoError(f"Unexpected token: {self._peek()}")
        return node

    def _main(self) -> AstNode:
        tree = AstNode(AstType.STATEMENT)
        while True:
            self._skip_blank()
            if self._next_is(TokenType.EOF) or self._next_is(TokenType.CLOSE_BRACKET):
                return tree
            child = self._attempt(self._statement)
            if child is None:
                raise HuoError(f"Unknown token: {self._peek()}")
            tree.push(child)

    def _open_bracket(self) -> Optional[AstNode]:
        self._skip_blank()
        if not self._take(TokenType.OPEN_BRACKET):
            return None
        tree = self._attempt(self._main)
        if tree is None:
            return None
        self._skip_blank()
        if not self._take(TokenType.CLOSE_BRACKET):
            return None
        return tree

    def _statement(self) -> Optional[AstNode]:
        self._skip_blank()
        return self._attempt_any(
            self._number,
            self._word,
            self._open_bracket,
            self._open_square,
            self._quote,
        )

    def _float(self) -> Optional[AstNode]:
        whole = self._peek()
        whole_text = whole.data if self._take(TokenType.NUMBER) else "0"
        if not self._take(TokenType.DOT):
            return None
        fraction = self._peek()
        if not self._take(TokenType.NUMBER):
            return None
        try:
            number = float(f"{whole_text}.{fraction.data}")
        except ValueError as exc:
            raise HuoError(f"Invalid number: {whole_text}.{fraction.data}") from exc
        return AstNode(AstType.FLOAT, Value.of_float(number))

    def _int(self) -> Optional[AstNode]:
        token = self._peek()
        if not self._take(TokenType.NUMBER):
            return None
        try:
            number = int(token.data)
        except ValueError as exc:
            raise HuoError(f"Invalid number: {token.data}") from exc
        return AstNode(AstType.INTEGER, Value.of_long(number))

    def _number(self) -> Optional[AstNode]:
        self._skip_blank()
        negative = False
        found_sign = False
        while True:
            if self._take(TokenType.MINUS):
                negative = not negative
            elif not self._take(TokenType.PLUS):
                break
            if found_sign:
                warnings.warn("Multiple signs found!", RuntimeWarning, stacklevel=2)
            found_sign = True

        # Floats must be tried before integers.
        tree = self._attempt_any(self._float, self._int)
        if tree is not None and negative:
            tree.value.negate()
        return tree

    def _word(self) -> Optional[AstNode]:
        self._skip_blank()
        token = self._peek()
        if token.type in _NOT_WORD_TOKENS:
            return None
        if token.type not in _WORD_TOKENS:
            raise HuoError(f"Unexpected token: {token}")
        self.pos += 1
        return AstNode(AstType.KEYWORD, Value.of_keyword(token.data))

    def _quote(self) -> Optional[AstNode]:
        self._skip_blank()
        token = self._peek()
        if not self._take(TokenType.QUOTE):
            return None
        text = token.data
        inner = text[1 : len(text) - 1] if len(text) > 2 else ""
        return AstNode(AstType.STRING, Value.of_string(inner))

    def _array(self) -> Optional[AstNode]:
        self._skip_blank()
        tree = AstNode(AstType.ARRAY)
        while True:
            self._skip_blank()
            if self._next_is(TokenType.EOF) or self._next_is(TokenType.CLOSE_SQUARE):
                break
            child = self._attempt(self._statement)
            if child is None:
                break
            tree.push(child)
            self._skip_blank()
            if self._next_is(TokenType.CLOSE_SQUARE):
                break
            if not self._take(TokenType.COMMA):
                return None
        return tree

    def _open_square(self) -> Optional[AstNode]:
        self._skip_blank()
        if not self._take(TokenType.OPEN_SQUARE):
            return None
        tree = self._attempt(self._array)
        if tree is None:
            return None
        self._skip_blank()
        self._take(TokenType.COMMA)  # trailing comma is allowed
        self._skip_blank()
        if not self._take(TokenType.CLOSE_SQUARE):
            return None
        return tree


def parse(tokens: Iterable[Token]) -> AstNode:
    """Parse a token stream into a syntax tree.

    A missing end-of-input token is supplied. Raises ``HuoError`` on
    malformed input.
    """
    return _Parser(tokens).program()