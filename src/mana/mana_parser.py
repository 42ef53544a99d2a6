"""
Mana Language Parser

Parses the token stream of a Mana program into an abstract syntax tree.

The parser pulls tokens from a `Lexer` through a two-token window
(`cur_token` and `peek_token`) and never backtracks. Statements are
dispatched on the current token; expressions are built by a Pratt
(operator-precedence) engine driven by two tables of handlers keyed by
`TokenType`: prefix handlers start an expression, infix handlers extend an
already-parsed left operand.

Supported Constructs
--------------------
- Statements:
    * `let <ident> = <expr>;`
    * `return <expr>;`
    * `<expr>;` (the trailing `;` is optional)
- Expressions:
    * identifiers, integers, `true` / `false`
    * prefix `!` and `-`
    * infix `+ - * / == != < >`
    * grouping with `( ... )`
    * `if (<cond>) { ... } else { ... }`
    * `fn(<params>) { ... }` and calls `<callee>(<args>)`

Parser Behavior
---------------
- Never raises while parsing. Every problem is recorded as a diagnostic and
  the parser recovers at the next `;` so later statements are still parsed.
  A stray token that cannot start a statement is dropped on its own.
- Input nested deeper than the interpreter stack allows is reported as
  `expression nested too deeply` instead of raising `RecursionError`.
- Callers must treat a non-empty `errors` list as a failed parse even
  though a (partial) `Program` is always returned.

Entry Points
------------
- `Parser(lexer).parse_program()`: Parse a full program.
- `parse(source)`: Returns `(Program, errors)` for a source string.
- `parse_or_raise(source)`: Returns the Program or raises `ParseError`.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, Optional

from mana.mana_ast import (
    BlockStatement,
    Boolean,
    CallExpression,
    Expression,
    ExpressionStatement,
    FunctionLiteral,
    Identifier,
    IfExpression,
    InfixExpression,
    IntegerLiteral,
    LetStatement,
    PrefixExpression,
    Program,
    ReturnStatement,
    Statement,
)
from mana.mana_constants import PRECEDENCES, Precedence, TokenType
from mana.mana_lexer import CharacterStream, Lexer, Token

logger = logging.getLogger(__name__)

PrefixParseFn = Callable[[], Optional[Expression]]
InfixParseFn = Callable[[Expression], Optional[Expression]]

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

INFIX_OPERATORS = (
    TokenType.PLUS,
    TokenType.MINUS,
    TokenType.SLASH,
    TokenType.ASTERISK,
    TokenType.EQ,
    TokenType.NOT_EQ,
    TokenType.LT,
    TokenType.GT,
)

# A failed let or return always skips to the end of its statement.
STATEMENT_KEYWORDS = (TokenType.LET, TokenType.RETURN)


class ParseDiagnostic:
    """A single parse error message and where it was detected.

    Attributes:
        message (str): Human-readable description of the problem.
        line (int): 1-based line of the offending token.
        col (int): 1-based column of the offending token.
    """

    def __init__(self, message: str, line: int = 0, col: int = 0):
        self.message = message
        self.line = line
        self.col = col

    def __repr__(self) -> str:
        return f"ParseDiagnostic({self.message!r}, line={self.line}, col={self.col})"

    def __str__(self) -> str:
        return f"line {self.line}, col {self.col}: {self.message}"

    def __eq__(self, other: object) -> bool:
        return (
            isinstance(other, ParseDiagnostic)
            and self.message == other.message
            and self.line == other.line
            and self.col == other.col
        )

    def __hash__(self) -> int:
        return hash((self.message, self.line, self.col))


class ParseError(Exception):
    """Raised by fail-fast callers when a Mana program did not parse.

    Attributes:
        errors (list[str]): Every accumulated error message, in order.
        diagnostics (list[ParseDiagnostic]): The same errors with locations.
    """

    def __init__(self, message: str, diagnostics: list[ParseDiagnostic] | None = None):
        super().__init__(message)
        self.diagnostics = diagnostics or []

    @property
    def errors(self) -> list[str]:
        return [d.message for d in self.diagnostics]


class Parser:
    """
    Mana Parser Class

    Attributes
    ----------
    lexer : Lexer
        Source of tokens, pulled one at a time.
    cur_token : Token
        The token under examination.
    peek_token : Token
        The token after `cur_token`.
    diagnostics : list[ParseDiagnostic]
        Accumulated errors, in the order they were found.
    prefix_parse_fns : dict[TokenType, PrefixParseFn]
        Handlers for tokens that can start an expression.
    infix_parse_fns : dict[TokenType, InfixParseFn]
        Handlers for tokens that can continue an expression.
    """

    def __init__(self, lexer: Lexer) -> None:
        self.lexer = lexer
        self.diagnostics: list[ParseDiagnostic] = []

        self.prefix_parse_fns: dict[TokenType, PrefixParseFn] = {}
        self.infix_parse_fns: dict[TokenType, InfixParseFn] = {}

        self.register_prefix(TokenType.IDENT, self.parse_identifier)
        self.register_prefix(TokenType.INT, self.parse_integer_literal)
        self.register_prefix(TokenType.BANG, self.parse_prefix_expression)
        self.register_prefix(TokenType.MINUS, self.parse_prefix_expression)
        self.register_prefix(TokenType.TRUE, self.parse_boolean)
        self.register_prefix(TokenType.FALSE, self.parse_boolean)
        self.register_prefix(TokenType.LPAREN, self.parse_grouped_expression)
        self.register_prefix(TokenType.IF, self.parse_if_expression)
        self.register_prefix(TokenType.FUNCTION, self.parse_function_literal)

        for op in INFIX_OPERATORS:
            self.register_infix(op, self.parse_infix_expression)
        self.register_infix(TokenType.LPAREN, self.parse_call_expression)

        # Read two tokens, so cur_token and peek_token are both set.
        self.cur_token: Token = self.lexer.next_token()
        self.peek_token: Token = self.lexer.next_token()

    @classmethod
    def from_source(cls, source: str) -> Parser:
        return cls(Lexer(CharacterStream(source)))

    # Token window

    def next_token(self) -> None:
        self.cur_token = self.peek_token
        self.peek_token = self.lexer.next_token()

    def cur_token_is(self, kind: TokenType) -> bool:
        return self.cur_token.type == kind

    def peek_token_is(self, kind: TokenType) -> bool:
        return self.peek_token.type == kind

    def expect_peek(self, kind: TokenType) -> bool:
        """Advances if the next token is ``kind``; records a peek error otherwise."""
        if self.peek_token_is(kind):
            self.next_token()
            return True
        self.peek_error(kind)
        return False

    def peek_precedence(self) -> Precedence:
        return PRECEDENCES.get(self.peek_token.type, Precedence.LOWEST)

    def cur_precedence(self) -> Precedence:
        return PRECEDENCES.get(self.cur_token.type, Precedence.LOWEST)

    # Handler tables

    def register_prefix(self, kind: TokenType, fn: PrefixParseFn) -> None:
        self.prefix_parse_fns[kind] = fn

    def register_infix(self, kind: TokenType, fn: InfixParseFn) -> None:
        self.infix_parse_fns[kind] = fn

    # Diagnostics

    @property
    def errors(self) -> list[str]:
        return [d.message for d in self.diagnostics]

    def add_error(self, message: str, tok: Token) -> None:
        logger.debug("parse error at %d:%d: %s", tok.line, tok.col, message)
        self.diagnostics.append(ParseDiagnostic(message, tok.line, tok.col))

    def peek_error(self, kind: TokenType) -> None:
        self.add_error(
            f"expected next token to be {kind}, got {self.peek_token.type} instead",
            self.peek_token,
        )

    def no_prefix_parse_fn_error(self, kind: TokenType) -> None:
        self.add_error(f"no prefix parse function for {kind} found", self.cur_token)

    # Statements

    def parse_program(self) -> Program:
        """Parses statements until EOF, recovering after each failed one."""
        program = Program(token=self.cur_token)

        while not self.cur_token_is(TokenType.EOF):
            start = self.cur_token
            try:
                stmt = self.parse_statement()
            except RecursionError:
                self.add_error("expression nested too deeply", start)
                stmt = None
            if stmt is not None:
                program.statements.append(stmt)
            else:
                self.recover(start)
            self.next_token()

        return program

    def recover(self, start: Token, *stop: TokenType) -> None:
        """Positions the parser on the last token of a failed statement.

        A statement rejected at its own first token gives up only that
        token, so whatever follows it is parsed normally. Anything else is
        skipped through the next `;`, EOF or one of ``stop``.
        """
        if self.cur_token is start and start.type not in STATEMENT_KEYWORDS:
            return
        self.skip_to_statement_end(*stop)

    def skip_to_statement_end(self, *stop: TokenType) -> None:
        """Moves forward until the current token is `;`, EOF or one of ``stop``."""
        while not (
            self.cur_token_is(TokenType.SEMICOLON)
            or self.cur_token_is(TokenType.EOF)
            or self.cur_token.type in stop
        ):
            self.next_token()

    def parse_statement(self) -> Statement | None:
        if self.cur_token_is(TokenType.LET):
            return self.parse_let_statement()
        if self.cur_token_is(TokenType.RETURN):
            return self.parse_return_statement()
        return self.parse_expression_statement()

    def parse_let_statement(self) -> LetStatement | None:
        let_tok = self.cur_token

        if not self.expect_peek(TokenType.IDENT):
            return None

        name = Identifier(self.cur_token.literal, token=self.cur_token)

        if not self.expect_peek(TokenType.ASSIGN):
            return None

        self.next_token()
        value = self.parse_expression(Precedence.LOWEST)
        if value is None:
            return None

        if self.peek_token_is(TokenType.SEMICOLON):
            self.next_token()

        return LetStatement(name, value, token=let_tok)

    def parse_return_statement(self) -> ReturnStatement | None:
        return_tok = self.cur_token

        self.next_token()
        value = self.parse_expression(Precedence.LOWEST)
        if value is None:
            return None

        if self.peek_token_is(TokenType.SEMICOLON):
            self.next_token()

        return ReturnStatement(value, token=return_tok)

    def parse_expression_statement(self) -> ExpressionStatement | None:
        first_tok = self.cur_token

        expression = self.parse_expression(Precedence.LOWEST)
        if expression is None:
            return None

        if self.peek_token_is(TokenType.SEMICOLON):
            self.next_token()

        return ExpressionStatement(expression, token=first_tok)

    def parse_block_statement(self) -> BlockStatement | None:
        """Parses statements after `{` up to the matching `}`.

        Leaves the closing `}` as the current token. Returns None when the
        input ends before the block is closed.
        """
        block = BlockStatement(token=self.cur_token)
        self.next_token()

        while not self.cur_token_is(TokenType.RBRACE):
            if self.cur_token_is(TokenType.EOF):
                self.add_error(
                    f"expected next token to be {TokenType.RBRACE}, "
                    f"got {TokenType.EOF} instead",
                    self.cur_token,
                )
                return None
            start = self.cur_token
            stmt = self.parse_statement()
            if stmt is not None:
                block.statements.append(stmt)
            else:
                self.recover(start, TokenType.RBRACE)
                if self.cur_token_is(TokenType.RBRACE):
                    break
            self.next_token()

        return block

    # Pratt expression engine

    def parse_expression(self, precedence: Precedence) -> Expression | None:
        prefix = self.prefix_parse_fns.get(self.cur_token.type)
        if prefix is None:
            self.no_prefix_parse_fn_error(self.cur_token.type)
            return None

        left = prefix()

        while (
            left is not None
            and not self.peek_token_is(TokenType.SEMICOLON)
            and precedence < self.peek_precedence()
        ):
            infix = self.infix_parse_fns.get(self.peek_token.type)
            if infix is None:
                return left

            self.next_token()
            left = infix(left)

        return left

    # Prefix handlers

    def parse_identifier(self) -> Expression:
        return Identifier(self.cur_token.literal, token=self.cur_token)

    def parse_integer_literal(self) -> Expression | None:
        tok = self.cur_token
        try:
            value = int(tok.literal, 10)
        except ValueError:
            value = None
        if value is None or not INT64_MIN <= value <= INT64_MAX:
            self.add_error(f'could not parse "{tok.literal}" as integer', tok)
            return None
        return IntegerLiteral(value, token=tok)

    def parse_boolean(self) -> Expression:
        return Boolean(self.cur_token_is(TokenType.TRUE), token=self.cur_token)

    def parse_prefix_expression(self) -> Expression | None:
        op_tok = self.cur_token

        self.next_token()
        right = self.parse_expression(Precedence.PREFIX)
        if right is None:
            return None

        return PrefixExpression(op_tok.literal, right, token=op_tok)

    def parse_grouped_expression(self) -> Expression | None:
        self.next_token()

        expression = self.parse_expression(Precedence.LOWEST)
        if expression is None:
            return None

        if not self.expect_peek(TokenType.RPAREN):
            return None

        return expression

    def parse_if_expression(self) -> Expression | None:
        if_tok = self.cur_token

        if not self.expect_peek(TokenType.LPAREN):
            return None

        self.next_token()
        condition = self.parse_expression(Precedence.LOWEST)
        if condition is None:
            return None

        if not self.expect_peek(TokenType.RPAREN):
            return None

        if not self.expect_peek(TokenType.LBRACE):
            return None

        consequence = self.parse_block_statement()
        if consequence is None:
            return None

        alternative = None
        if self.peek_token_is(TokenType.ELSE):
            self.next_token()

            if not self.expect_peek(TokenType.LBRACE):
                return None

            alternative = self.parse_block_statement()
            if alternative is None:
                return None

        return IfExpression(condition, consequence, alternative, token=if_tok)

    def parse_function_literal(self) -> Expression | None:
        fn_tok = self.cur_token

        if not self.expect_peek(TokenType.LPAREN):
            return None

        parameters = self.parse_list(TokenType.RPAREN, self.parse_parameter)
        if parameters is None:
            return None

        if not self.expect_peek(TokenType.LBRACE):
            return None

        body = self.parse_block_statement()
        if body is None:
            return None

        return FunctionLiteral(parameters, body, token=fn_tok)

    def parse_parameter(self) -> Identifier | None:
        if not self.cur_token_is(TokenType.IDENT):
            self.add_error(
                f"expected next token to be {TokenType.IDENT}, "
                f"got {self.cur_token.type} instead",
                self.cur_token,
            )
            return None
        return Identifier(self.cur_token.literal, token=self.cur_token)

    def parse_argument(self) -> Expression | None:
        return self.parse_expression(Precedence.LOWEST)

    def parse_list(
        self, end: TokenType, parse_item: Callable[[], Any]
    ) -> list[Any] | None:
        """Parses `item (, item)*` up to ``end``; the list may be empty.

        Expects the opening delimiter as the current token and leaves the
        closing one as the current token. Returns None if any item fails or
        the closing delimiter is missing.
        """
        items: list[Any] = []

        if self.peek_token_is(end):
            self.next_token()
            return items

        self.next_token()
        item = parse_item()
        if item is None:
            return None
        items.append(item)

        while self.peek_token_is(TokenType.COMMA):
            self.next_token()
            self.next_token()
            item = parse_item()
            if item is None:
                return None
            items.append(item)

        if not self.expect_peek(end):
            return None

        return items

    # Infix handlers

    def parse_infix_expression(self, left: Expression) -> Expression | None:
        op_tok = self.cur_token
        precedence = self.cur_precedence()

        self.next_token()
        right = self.parse_expression(precedence)
        if right is None:
            return None

        return InfixExpression(left, op_tok.literal, right, token=op_tok)

    def parse_call_expression(self, function: Expression) -> Expression | None:
        call_tok = self.cur_token

        arguments = self.parse_list(TokenType.RPAREN, self.parse_argument)
        if arguments is None:
            return None

        return CallExpression(function, arguments, token=call_tok)


def parse(source: str) -> tuple[Program, list[str]]:
    """Parses ``source`` and returns the Program along with every error message."""
    parser = Parser.from_source(source)
    program = parser.parse_program()
    return program, parser.errors


def parse_or_raise(source: str) -> Program:
    """Parses ``source`` and raises ParseError if any error was recorded."""
    parser = Parser.from_source(source)
    program = parser.parse_program()
    if parser.diagnostics:
        count = len(parser.diagnostics)
        raise ParseError(
            f"{count} parse error{'s' if count != 1 else ''}: "
            f"{parser.diagnostics[0].message}",
            parser.diagnostics,
        )
    return program


__all__ = [
    "ParseDiagnostic",
    "ParseError",
    "Parser",
    "parse",
    "parse_or_raise",
]
