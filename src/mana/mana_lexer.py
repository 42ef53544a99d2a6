"""
Lexical analyzer for the Mana programming language.

This module converts raw source text into a lazy stream of tokens:

Classes:
    CharacterStream: Stream abstraction for reading characters with line/column tracking.
    Token: A single token with kind, literal text, and source location.
    Lexer: Pulls tokens one at a time from a CharacterStream.

Functions:
    tokenize: Generator over the tokens of a source string, ending with EOF.

Features:
    - Skips spaces, tabs, newlines and carriage returns
    - Recognizes `==` and `!=` as single two-character operators
    - Recognizes identifiers (letters and underscores) and keywords
    - Recognizes integer literals (runs of decimal digits)
    - Never raises: unknown characters become ILLEGAL tokens

Example:
    >>> lexer = Lexer(CharacterStream("let x = 5;"))
    >>> lexer.next_token()
    Token(LET, 'let')

Exports:
    - CharacterStream
    - Token
    - Lexer
    - tokenize
"""

import string
from collections.abc import Iterator
from typing import Any

from mana.mana_constants import SINGLE_CHAR_TOKENS, TokenType, lookup_ident

WHITESPACE = " \t\n\r"
LETTERS = frozenset(string.ascii_letters + "_")
DIGITS = frozenset(string.digits)
NUL = "\0"


class CharacterStream:
    """
    A utility for reading characters from a string source with line and column tracking.

    Attributes:
        source (str): The input source string.
        position (int): Current index in the source.
        line (int): Current line number (1-indexed).
        column (int): Current column number (1-indexed).
    """

    def __init__(self, source: str, position: int = 0, line: int = 1, column: int = 1):
        self.source = source
        self.position = position
        self.line = line
        self.column = column

    def next(self) -> str:
        """
        Consumes and returns the next character in the stream.

        Raises:
            EOFError: If reading past the end of the source.
        """
        if self.position >= len(self.source):
            raise EOFError(
                f"CharacterStreamError: Attempted to read past end of source at position=<{self.position}>, line=<{self.line}>"
            )
        char = self.source[self.position]
        if char == "\n":
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        self.position += 1
        return char

    def peek(self, offset: int = 0) -> str:
        """Returns the character at ``offset`` from the cursor, or "" when out of bounds."""
        index = self.position + offset
        if index < 0 or index >= len(self.source):
            return ""
        return self.source[index]

    def end_of_file(self) -> bool:
        """True once the cursor reaches the end of input or an embedded NUL."""
        return self.position >= len(self.source) or self.source[self.position] == NUL


class Token:
    """A single lexical token. Tokens are immutable once built.

    Attributes:
        type (TokenType): The token kind.
        literal (str): The exact source text of the token ("" for EOF).
        line (int): The 1-based line number where the token starts.
        col (int): The 1-based column number where the token starts.
    """

    __slots__ = ("type", "literal", "line", "col")

    def __init__(self, type_: TokenType, literal: str, line: int = 0, col: int = 0):
        object.__setattr__(self, "type", type_)
        object.__setattr__(self, "literal", literal)
        object.__setattr__(self, "line", line)
        object.__setattr__(self, "col", col)

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"Token is immutable; cannot set {name!r}")

    def __delattr__(self, name: str) -> None:
        raise AttributeError(f"Token is immutable; cannot delete {name!r}")

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.literal!r})"

    def __eq__(self, other: Any) -> bool:
        return (
            isinstance(other, Token)
            and self.type == other.type
            and self.literal == other.literal
            and self.line == other.line
            and self.col == other.col
        )

    def __hash__(self) -> int:
        return hash((self.type, self.literal, self.line, self.col))


class Lexer:
    """Lexical analyzer for the Mana language.

    A Lexer is strictly forward-only; build a new one (over a new
    CharacterStream) to tokenize another input.

    Attributes:
        stream (CharacterStream): The source stream to tokenize.
    """

    def __init__(self, stream: CharacterStream) -> None:
        self.stream = stream

    def peek(self, offset: int = 0) -> str:
        return self.stream.peek(offset)

    def advance(self) -> str:
        return self.stream.next()

    def skip_whitespace(self) -> None:
        while not self.stream.end_of_file() and self.peek() in WHITESPACE:
            self.advance()

    def read_while(self, charset: frozenset[str]) -> str:
        """Consumes the maximal run of characters drawn from ``charset``."""
        chars = []
        while not self.stream.end_of_file() and self.peek() in charset:
            chars.append(self.advance())
        return "".join(chars)

    def next_token(self) -> Token:
        """Consumes and returns the next Token from the stream.

        Once the input is exhausted every call returns an EOF token with an
        empty literal.
        """
        self.skip_whitespace()

        line, col = self.stream.line, self.stream.column

        if self.stream.end_of_file():
            return Token(TokenType.EOF, "", line, col)

        ch = self.peek()

        # 1. Operators that may be one or two characters long
        if ch in "=!":
            if self.peek(1) == "=":
                literal = self.advance() + self.advance()
                kind = TokenType.EQ if ch == "=" else TokenType.NOT_EQ
                return Token(kind, literal, line, col)
            self.advance()
            kind = TokenType.ASSIGN if ch == "=" else TokenType.BANG
            return Token(kind, ch, line, col)

        # 2. Single-character symbols
        if ch in SINGLE_CHAR_TOKENS:
            self.advance()
            return Token(SINGLE_CHAR_TOKENS[ch], ch, line, col)

        # 3. Identifier or keyword
        if ch in LETTERS:
            ident = self.read_while(LETTERS)
            return Token(lookup_ident(ident), ident, line, col)

        # 4. Integer
        if ch in DIGITS:
            return Token(TokenType.INT, self.read_while(DIGITS), line, col)

        # 5. Unknown character
        return Token(TokenType.ILLEGAL, self.advance(), line, col)


def tokenize(source: str) -> Iterator[Token]:
    """Yields the tokens of ``source`` up to and including the first EOF."""
    lexer = Lexer(CharacterStream(source))
    while True:
        tok = lexer.next_token()
        yield tok
        if tok.type == TokenType.EOF:
            return


__all__ = ["CharacterStream", "Lexer", "Token", "tokenize"]
