"""
Defines the abstract syntax tree (AST) node structure for the Mana programming language.

Classes:
    Node:
        Base of every node. Provides `token_literal()`, `string()` and `to_dict()`.
    Statement, Expression:
        The two capability sets a node can belong to.
    Program:
        Root of a parse, owning an ordered list of statements.

Statements:
    LetStatement, ReturnStatement, ExpressionStatement, BlockStatement

Expressions:
    Identifier, IntegerLiteral, Boolean, PrefixExpression, InfixExpression,
    IfExpression, FunctionLiteral, CallExpression

Each node keeps the token it started at. The token is not part of node
equality, so tests can compare trees built by hand against parser output.

`string()` renders canonical Mana source: infix and prefix expressions are
fully parenthesized, expression statements end in `;` and blocks keep their
braces, so parsing the rendering of a program yields the same rendering.

Example:
    node = InfixExpression(IntegerLiteral(5), "+", IntegerLiteral(5))
    node.string()  # "(5 + 5)"
"""

from dataclasses import dataclass, field, fields
from typing import Any, TypedDict

from mana.mana_lexer import Token


class NodeDict(TypedDict, total=False):
    """Serialized form of a Node: its class name plus its fields."""

    node: str


def _plain(value: Any) -> Any:
    if isinstance(value, Node):
        return value.to_dict()
    if isinstance(value, list):
        return [_plain(v) for v in value]
    return value


@dataclass
class Node:
    token: Token | None = field(default=None, compare=False, repr=False, kw_only=True)

    def token_literal(self) -> str:
        """Literal of the token the node started at, for diagnostics and tests."""
        return self.token.literal if self.token is not None else ""

    def string(self) -> str:
        raise NotImplementedError(type(self).__name__)

    def __str__(self) -> str:
        return self.string()

    def to_dict(self) -> NodeDict:
        """Converts the node (and all descendants) into nested plain dicts."""
        data: dict[str, Any] = {"node": type(self).__name__}
        for f in fields(self):
            if f.name != "token":
                data[f.name] = _plain(getattr(self, f.name))
        return data  # type: ignore[return-value]


@dataclass
class Statement(Node):
    pass


@dataclass
class Expression(Node):
    pass


@dataclass
class Program(Node):
    statements: list[Statement] = field(default_factory=list)

    def token_literal(self) -> str:
        if self.statements:
            return self.statements[0].token_literal()
        return ""

    def string(self) -> str:
        return "".join(stmt.string() for stmt in self.statements)


# Expressions


@dataclass
class Identifier(Expression):
    value: str

    def string(self) -> str:
        return self.value


@dataclass
class IntegerLiteral(Expression):
    value: int

    def string(self) -> str:
        return self.token.literal if self.token is not None else str(self.value)


@dataclass
class Boolean(Expression):
    value: bool

    def string(self) -> str:
        return "true" if self.value else "false"


@dataclass
class PrefixExpression(Expression):
    operator: str
    right: Expression

    def string(self) -> str:
        return f"({self.operator}{self.right.string()})"


@dataclass
class InfixExpression(Expression):
    left: Expression
    operator: str
    right: Expression

    def string(self) -> str:
        return f"({self.left.string()} {self.operator} {self.right.string()})"


@dataclass
class BlockStatement(Statement):
    statements: list[Statement] = field(default_factory=list)

    def string(self) -> str:
        if not self.statements:
            return "{ }"
        return "{ " + " ".join(stmt.string() for stmt in self.statements) + " }"


@dataclass
class IfExpression(Expression):
    condition: Expression
    consequence: BlockStatement
    alternative: BlockStatement | None = None

    def string(self) -> str:
        out = f"if ({self.condition.string()}) {self.consequence.string()}"
        if self.alternative is not None:
            out += f" else {self.alternative.string()}"
        return out


@dataclass
class FunctionLiteral(Expression):
    parameters: list[Identifier]
    body: BlockStatement

    def string(self) -> str:
        params = ", ".join(p.string() for p in self.parameters)
        return f"fn({params}) {self.body.string()}"


@dataclass
class CallExpression(Expression):
    function: Expression
    arguments: list[Expression]

    def string(self) -> str:
        args = ", ".join(a.string() for a in self.arguments)
        return f"{self.function.string()}({args})"


# Statements


@dataclass
class LetStatement(Statement):
    name: Identifier
    value: Expression

    def string(self) -> str:
        return f"let {self.name.string()} = {self.value.string()};"


@dataclass
class ReturnStatement(Statement):
    return_value: Expression

    def string(self) -> str:
        return f"return {self.return_value.string()};"


@dataclass
class ExpressionStatement(Statement):
    expression: Expression

    def string(self) -> str:
        return f"{self.expression.string()};"


__all__ = [
    "BlockStatement",
    "Boolean",
    "CallExpression",
    "Expression",
    "ExpressionStatement",
    "FunctionLiteral",
    "Identifier",
    "IfExpression",
    "InfixExpression",
    "IntegerLiteral",
    "LetStatement",
    "Node",
    "NodeDict",
    "PrefixExpression",
    "Program",
    "ReturnStatement",
    "Statement",
]
