"""
Defines the abstract syntax tree (AST) for the B+ programming language.

Every node kind is its own frozen dataclass, so consumers can dispatch with a
`match` statement over a closed set of classes instead of a runtime string tag.
Nodes are immutable once built and own their children (a tree, no sharing).

Statements:
    Assignment, Label, Goto, Conditional, For, While, Print, Read

Expressions:
    Number, Identifier, Unary, Binary

Root:
    Program

Each node exposes a `kind` tag and `to_dict()` for JSON output and debugging.

Example:
    Program((Assignment("x", Binary("+", Number("1"), Number("2"))),))
"""

from dataclasses import dataclass, fields
from typing import Any, ClassVar, TypedDict, Union


class ASTDict(TypedDict, total=False):
    """
    Serialized form of a node, as produced by `to_dict()`.

    Only the keys that belong to the node's kind are present; `kind` is always set.
    """

    kind: str
    name: str
    symbol: str
    operator: str
    rhs: "ASTDict"
    child: "ASTDict"
    left: "ASTDict"
    right: "ASTDict"
    start: "ASTDict"
    end: "ASTDict"
    condition: "ASTDict"
    conditions: list["ASTDict"]
    bodies: list[list["ASTDict"]]
    body: list["ASTDict"]
    statements: list["ASTDict"]


def _serialize(value: Any) -> Any:
    if isinstance(value, ASTNode):
        return value.to_dict()
    if isinstance(value, tuple):
        return [_serialize(v) for v in value]
    return value


@dataclass(frozen=True)
class ASTNode:
    """Base class of every B+ AST node."""

    kind: ClassVar[str] = "node"

    def to_dict(self) -> ASTDict:
        data: dict[str, Any] = {"kind": self.kind}
        for f in fields(self):
            data[f.name] = _serialize(getattr(self, f.name))
        return data  # type: ignore[return-value]


# Expressions ------------------------------------------------------------------


@dataclass(frozen=True)
class Number(ASTNode):
    """Integer literal, kept as its source text."""

    kind: ClassVar[str] = "number"
    symbol: str


@dataclass(frozen=True)
class Identifier(ASTNode):
    kind: ClassVar[str] = "identifier"
    symbol: str


@dataclass(frozen=True)
class Unary(ASTNode):
    kind: ClassVar[str] = "unary"
    operator: str
    child: "Expression"


@dataclass(frozen=True)
class Binary(ASTNode):
    kind: ClassVar[str] = "binary"
    operator: str
    left: "Expression"
    right: "Expression"


Expression = Union[Number, Identifier, Unary, Binary]

# Condition paired with a trailing `else` body.
ALWAYS_TRUE = Number("1")


# Statements -------------------------------------------------------------------


@dataclass(frozen=True)
class Assignment(ASTNode):
    """Binds `name` to the value of `rhs`, for both `let` and plain reassignment."""

    kind: ClassVar[str] = "assignment"
    name: str
    rhs: Expression


@dataclass(frozen=True)
class Label(ASTNode):
    kind: ClassVar[str] = "label"
    name: str


@dataclass(frozen=True)
class Goto(ASTNode):
    kind: ClassVar[str] = "goto"
    name: str


@dataclass(frozen=True)
class Conditional(ASTNode):
    """
    An `if` / `else if` / `else` chain.

    `conditions[i]` guards `bodies[i]`. Index 0 is the `if` branch; a final
    `else` is stored with the always-true condition `ALWAYS_TRUE`.

    Raises:
        ValueError: If the two sequences are empty or of different lengths.
    """

    kind: ClassVar[str] = "conditional"
    conditions: tuple[Expression, ...]
    bodies: tuple[tuple["Statement", ...], ...]

    def __post_init__(self) -> None:
        if not self.conditions or len(self.conditions) != len(self.bodies):
            raise ValueError(
                f"Conditional needs matching non-empty conditions and bodies, "
                f"got {len(self.conditions)} and {len(self.bodies)}"
            )


@dataclass(frozen=True)
class For(ASTNode):
    """Counts `name` upward from `start` to `end`, excluding `end`."""

    kind: ClassVar[str] = "for"
    name: str
    start: Expression
    end: Expression
    body: tuple["Statement", ...]


@dataclass(frozen=True)
class While(ASTNode):
    kind: ClassVar[str] = "while"
    condition: Expression
    body: tuple["Statement", ...]


@dataclass(frozen=True)
class Print(ASTNode):
    kind: ClassVar[str] = "print"
    child: Expression


@dataclass(frozen=True)
class Read(ASTNode):
    kind: ClassVar[str] = "read"


Statement = Union[Assignment, Label, Goto, Conditional, For, While, Print, Read]


@dataclass(frozen=True)
class Program(ASTNode):
    kind: ClassVar[str] = "program"
    statements: tuple[Statement, ...]
