"""
Token kinds, keywords and operator precedences for the Mana language.

Exports:
    - TokenType: closed enumeration of every token kind the lexer can produce.
    - KEYWORDS: reserved words mapped to their keyword kinds.
    - SINGLE_CHAR_TOKENS: one-character symbols mapped 1:1 to their kinds.
    - Precedence: binding levels used by the Pratt expression parser.
    - PRECEDENCES: infix operator kinds mapped to their binding level.
    - lookup_ident(): keyword-or-identifier classification.
"""

from enum import Enum, IntEnum


class TokenType(str, Enum):
    """Every kind of token in Mana.

    Symbol kinds use the symbol itself as value so diagnostics read naturally
    (``expected next token to be =, got INT instead``).
    """

    ILLEGAL = "ILLEGAL"
    EOF = "EOF"

    # Identifiers + literals
    IDENT = "IDENT"
    INT = "INT"

    # Operators
    ASSIGN = "="
    PLUS = "+"
    MINUS = "-"
    BANG = "!"
    ASTERISK = "*"
    SLASH = "/"
    LT = "<"
    GT = ">"
    EQ = "=="
    NOT_EQ = "!="

    # Delimiters
    COMMA = ","
    SEMICOLON = ";"
    LPAREN = "("
    RPAREN = ")"
    LBRACE = "{"
    RBRACE = "}"

    # Keywords
    FUNCTION = "FUNCTION"
    LET = "LET"
    IF = "IF"
    ELSE = "ELSE"
    TRUE = "TRUE"
    FALSE = "FALSE"
    RETURN = "RETURN"

    def __str__(self) -> str:
        return self.value

    def __format__(self, format_spec: str) -> str:
        return format(self.value, format_spec)


KEYWORDS: dict[str, TokenType] = {
    "fn": TokenType.FUNCTION,
    "let": TokenType.LET,
    "if": TokenType.IF,
    "else": TokenType.ELSE,
    "true": TokenType.TRUE,
    "false": TokenType.FALSE,
    "return": TokenType.RETURN,
}

# "=" and "!" are absent: they may start a two-character operator.
SINGLE_CHAR_TOKENS: dict[str, TokenType] = {
    "+": TokenType.PLUS,
    "-": TokenType.MINUS,
    "*": TokenType.ASTERISK,
    "/": TokenType.SLASH,
    "<": TokenType.LT,
    ">": TokenType.GT,
    ",": TokenType.COMMA,
    ";": TokenType.SEMICOLON,
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    "{": TokenType.LBRACE,
    "}": TokenType.RBRACE,
}


class Precedence(IntEnum):
    """Binding power of an operator, lowest first."""

    LOWEST = 1
    EQUALS = 2  # ==
    LESSGREATER = 3  # > or <
    SUM = 4  # +
    PRODUCT = 5  # *
    PREFIX = 6  # -X or !X
    CALL = 7  # myFunction(X)


PRECEDENCES: dict[TokenType, Precedence] = {
    TokenType.EQ: Precedence.EQUALS,
    TokenType.NOT_EQ: Precedence.EQUALS,
    TokenType.LT: Precedence.LESSGREATER,
    TokenType.GT: Precedence.LESSGREATER,
    TokenType.PLUS: Precedence.SUM,
    TokenType.MINUS: Precedence.SUM,
    TokenType.SLASH: Precedence.PRODUCT,
    TokenType.ASTERISK: Precedence.PRODUCT,
    TokenType.LPAREN: Precedence.CALL,
}


def lookup_ident(ident: str) -> TokenType:
    """Returns the keyword kind for ``ident``, or ``IDENT`` if it is not reserved."""
    return KEYWORDS.get(ident, TokenType.IDENT)


__all__ = [
    "KEYWORDS",
    "PRECEDENCES",
    "SINGLE_CHAR_TOKENS",
    "Precedence",
    "TokenType",
    "lookup_ident",
]
