"""Tokenizer for the command language.

Splits one statement (terminator already removed) into tokens:

    KEYWORD     USE, SELECT, AND, TRUE, ... (case-insensitive)
    IDENTIFIER  runs of letters, digits and underscores that are not keywords
    NUMBER      [+-]digits[.digits]
    STRING      '...' (quotes kept in the lexeme, no escapes)
    OPERATOR    == != >= <= > < =
    DELIMITER   ( ) , *

Whitespace separates tokens and is otherwise ignored. A ';' outside a
string literal is rejected, since a line carries exactly one statement.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto

from tabdb.domain.errors import CommandSyntaxError
from tabdb.domain.value_objects import KEYWORDS


class TokenType(Enum):
    KEYWORD = auto()
    IDENTIFIER = auto()
    NUMBER = auto()
    STRING = auto()
    OPERATOR = auto()
    DELIMITER = auto()
    EOF = auto()


DELIMITERS = frozenset("(),*")
TWO_CHAR_OPERATORS = ("==", "!=", ">=", "<=")
ONE_CHAR_OPERATORS = frozenset("<>=")


@dataclass(frozen=True)
class Token:
    """A lexed token.

    Attributes:
        type: Token category.
        text: Source text (keywords upper-cased, string quotes kept).
        position: 1-based column of the first character.
    """

    type: TokenType
    text: str
    position: int

    def is_keyword(self, *words: str) -> bool:
        return self.type is TokenType.KEYWORD and self.text in words

    def is_delimiter(self, char: str) -> bool:
        return self.type is TokenType.DELIMITER and self.text == char

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.text!r}, pos={self.position})"


def _is_word_char(c: str) -> bool:
    return c.isascii() and (c.isalnum() or c == "_")


class Lexer:
    """Single-pass scanner over one statement."""

    def __init__(self, source: str) -> None:
        self.source = source
        self.length = len(source)
        self.index = 0

    def tokenize(self) -> list[Token]:
        tokens: list[Token] = []
        while True:
            token = self._next_token()
            tokens.append(token)
            if token.type is TokenType.EOF:
                return tokens

    def _peek(self, offset: int = 0) -> str:
        pos = self.index + offset
        if pos >= self.length:
            return ""
        return self.source[pos]

    def _error(self, message: str, start: int) -> CommandSyntaxError:
        return CommandSyntaxError(f"{message} at position {start + 1}")

    def _next_token(self) -> Token:
        while self._peek().isspace():
            self.index += 1

        start = self.index
        c = self._peek()
        if not c:
            return Token(TokenType.EOF, "", start + 1)

        if c == "'":
            return self._read_string(start)

        if c in "+-" and self._peek(1).isdigit():
            self.index += 1
            return self._read_word(start)

        if _is_word_char(c):
            return self._read_word(start)

        two = self.source[start : start + 2]
        if two in TWO_CHAR_OPERATORS:
            self.index += 2
            return Token(TokenType.OPERATOR, two, start + 1)
        if c in ONE_CHAR_OPERATORS:
            self.index += 1
            return Token(TokenType.OPERATOR, c, start + 1)
        if c in DELIMITERS:
            self.index += 1
            return Token(TokenType.DELIMITER, c, start + 1)
        if c == ";":
            raise self._error("Only one statement per line is allowed; unexpected ';'", start)

        raise self._error(f"Unexpected character {c!r}", start)

    def _read_string(self, start: int) -> Token:
        end = self.source.find("'", start + 1)
        if end < 0:
            raise self._error("Unterminated string literal", start)
        self.index = end + 1
        return Token(TokenType.STRING, self.source[start : end + 1], start + 1)

    def _read_word(self, start: int) -> Token:
        while _is_word_char(self._peek()):
            self.index += 1
        word = self.source[start : self.index]
        digits = word.lstrip("+-")

        if digits.isdigit():
            if self._peek() == "." and self._peek(1).isdigit():
                self.index += 1
                while self._peek().isdigit():
                    self.index += 1
                if _is_word_char(self._peek()):
                    raise self._error("Malformed number", start)
            return Token(TokenType.NUMBER, self.source[start : self.index], start + 1)

        if digits != word:
            raise self._error("Malformed number", start)
        if word.upper() in KEYWORDS:
            return Token(TokenType.KEYWORD, word.upper(), start + 1)
        return Token(TokenType.IDENTIFIER, word, start + 1)


def tokenize(source: str) -> list[Token]:
    """Tokenize one statement; the result always ends with an EOF token.

    Raises:
        CommandSyntaxError: On an unterminated string, a stray ';' or an
            unexpected character.
    """
    return Lexer(source).tokenize()
