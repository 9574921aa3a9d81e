"""
B+ Language Parser

Parses B+ tokens into a single `Program` abstract syntax tree.

Statements are parsed by recursive descent, one method per production.
Expressions are parsed by precedence climbing: the parser tracks a minimum
precedence, iterates to build left-associated chains, and recurses only for
the right operand of a tighter-binding operator.

Supported Constructs
--------------------
- `let name = expr`           definition (name must be new)
- `name = expr`               reassignment (name must already be defined)
- `name:`                     label
- `goto name`                 jump to label
- `if c { } else if c { } else { }`
- `for i = start..end { }`    counts from start up to, not including, end
- `while c { }`
- `print expr`, `read`

Statements are separated by one or more newlines. A separator is not needed
before the end of input or before the `}` closing a block.

Symbol Table
------------
One flat, insertion-ordered table of variable names for the whole program.
`let` and `for` add names; every identifier used in an expression must
already be in it. Labels are not tracked.

Raises
------
ParseError
    On the first syntax or definedness error, carrying the offending token.
"""

from __future__ import annotations

import logging

from bplus.bplus_ast import (
    ALWAYS_TRUE,
    Assignment,
    Binary,
    Conditional,
    Expression,
    For,
    Goto,
    Identifier,
    Label,
    Number,
    Print,
    Program,
    Read,
    Statement,
    Unary,
    While,
)
from bplus.bplus_constants import BINARY_PRECEDENCE, MIN_PRECEDENCE, UNARY_PRECEDENCE
from bplus.bplus_errors import ParseError
from bplus.bplus_lexer import Token, TokenKind

logger = logging.getLogger(__name__)


class Parser:
    """
    B+ Parser Class

    Holds a single read cursor over the token list and the symbol table of
    defined variable names. A parser instance is used for one parse only.

    Attributes
    ----------
    tokens : list[Token]
        The token list, bracketed by START and END.
    position : int
        Index of the current token.
    variables : dict[str, None]
        Defined variable names, in definition order.
    """

    def __init__(self, tokens: list[Token]) -> None:
        self.tokens: list[Token] = tokens or [Token("end", TokenKind.END, 1)]
        self.position: int = 0
        self.variables: dict[str, None] = {}

    # Cursor ----------------------------------------------------------------

    def current(self) -> Token:
        """Returns the current token; past the end, the last token (END)."""
        if self.position < len(self.tokens):
            return self.tokens[self.position]
        return self.tokens[-1]

    def peek(self, offset: int = 1) -> Token:
        index = self.position + offset
        return self.tokens[index] if index < len(self.tokens) else self.tokens[-1]

    def advance(self) -> Token:
        tok = self.current()
        self.position += 1
        return tok

    def check(self, kind: TokenKind) -> bool:
        return self.current().type is kind

    def check_symbol(self, symbol: str) -> bool:
        """True if the current token is the operator or paren `symbol`."""
        tok = self.current()
        return (
            tok.type in (TokenKind.OPERATOR, TokenKind.PAREN) and tok.symbol == symbol
        )

    def accept(self, kind: TokenKind) -> Token | None:
        if self.check(kind):
            return self.advance()
        return None

    def accept_symbol(self, symbol: str) -> Token | None:
        if self.check_symbol(symbol):
            return self.advance()
        return None

    def expect(self, kind: TokenKind, message: str) -> Token:
        tok = self.accept(kind)
        if tok is None:
            raise ParseError(self.current(), message)
        return tok

    def expect_symbol(self, symbol: str, message: str) -> Token:
        tok = self.accept_symbol(symbol)
        if tok is None:
            raise ParseError(self.current(), message)
        return tok

    # Symbol table ----------------------------------------------------------

    def is_defined(self, name: str) -> bool:
        return name in self.variables

    def define(self, name: str) -> None:
        self.variables.setdefault(name, None)

    # Program structure -----------------------------------------------------

    def parse(self) -> Program:
        """Parse a full B+ program.

        Nesting deeper than the interpreter's recursion limit is reported as a
        `ParseError` at the token where the parser gave up.
        """
        self.accept(TokenKind.START)
        self.separator()
        statements: list[Statement] = []
        try:
            while not self.accept(TokenKind.END):
                statements.append(self.parse_statement())
        except RecursionError:
            raise ParseError(self.current(), "Program is nested too deeply") from None
        logger.debug(
            "Parsed %d top-level statements, %d variables",
            len(statements),
            len(self.variables),
        )
        return Program(tuple(statements))

    def separator(self, enforce: bool = False) -> int:
        """
        Consumes newline separators and returns how many were found.

        With `enforce`, at least one is required unless the next token is END
        or a closing `}`.
        """
        count = 0
        while self.accept(TokenKind.NEWLINE):
            count += 1
        if (
            enforce
            and count == 0
            and not self.check(TokenKind.END)
            and not self.check_symbol("}")
        ):
            tok = self.current()
            raise ParseError(tok, f"Expected statement separator before '{tok.symbol}'")
        return count

    def parse_block(self) -> tuple[Statement, ...]:
        """Parse `{ statements }`, allowing newlines before and after `{`."""
        self.separator()
        self.expect_symbol("{", "Expected {")
        self.separator()
        statements: list[Statement] = []
        while not self.accept_symbol("}"):
            if self.check(TokenKind.END):
                raise ParseError(self.current(), "Expected '}' before end of input")
            statements.append(self.parse_statement())
        return tuple(statements)

    # Statements ------------------------------------------------------------

    def parse_statement(self) -> Statement:
        """Parse one statement and the separator that must follow it."""
        tok = self.current()
        statement: Statement
        match tok.type:
            case TokenKind.LET:
                statement = self.parse_let()
            case TokenKind.IDENTIFIER:
                statement = self.parse_assignment_or_label()
            case TokenKind.IF:
                statement = self.parse_if()
            case TokenKind.FOR:
                statement = self.parse_for()
            case TokenKind.WHILE:
                statement = self.parse_while()
            case TokenKind.PRINT:
                self.advance()
                statement = Print(self.parse_expression())
            case TokenKind.READ:
                self.advance()
                statement = Read()
            case TokenKind.GOTO:
                self.advance()
                name = self.expect(TokenKind.IDENTIFIER, "Expected label name after 'goto'")
                statement = Goto(name.symbol)
            case _:
                raise ParseError(tok, f"Unexpected {tok.symbol}")

        self.separator(enforce=True)
        return statement

    def parse_let(self) -> Assignment:
        self.expect(TokenKind.LET, "Expected 'let'")
        name = self.expect(TokenKind.IDENTIFIER, "Expected identifier after 'let'")
        self.expect_symbol("=", "Expected =")
        rhs = self.parse_expression()
        if self.is_defined(name.symbol):
            raise ParseError(name, f"Variable {name.symbol} is already defined")
        self.define(name.symbol)
        return Assignment(name.symbol, rhs)

    def parse_assignment_or_label(self) -> Assignment | Label:
        name = self.expect(TokenKind.IDENTIFIER, "Expected identifier")
        if self.accept_symbol("="):
            if not self.is_defined(name.symbol):
                raise ParseError(
                    name, f"The identifier '{name.symbol}' is not defined."
                )
            return Assignment(name.symbol, self.parse_expression())
        if self.accept_symbol(":"):
            return Label(name.symbol)
        tok = self.current()
        raise ParseError(tok, f"Unexpected {tok.symbol}")

    def parse_if(self) -> Conditional:
        self.expect(TokenKind.IF, "Expected 'if'")
        conditions: list[Expression] = [self.parse_expression()]
        bodies: list[tuple[Statement, ...]] = [self.parse_block()]

        while self.accept_else():
            if self.accept(TokenKind.IF):
                conditions.append(self.parse_expression())
                bodies.append(self.parse_block())
            else:
                conditions.append(ALWAYS_TRUE)
                bodies.append(self.parse_block())
                break

        return Conditional(tuple(conditions), tuple(bodies))

    def accept_else(self) -> bool:
        """
        Consumes an `else`, looking past newlines to find it.

        The newlines are only consumed together with a following `else`;
        otherwise they stay in place as the statement separator.
        """
        offset = 0
        while self.peek(offset).type is TokenKind.NEWLINE:
            offset += 1
        if self.peek(offset).type is not TokenKind.ELSE:
            return False
        self.position += offset + 1
        return True

    def parse_for(self) -> For:
        self.expect(TokenKind.FOR, "Expected 'for'")
        name = self.expect(TokenKind.IDENTIFIER, "Expected loop variable after 'for'")
        self.define(name.symbol)
        self.accept_symbol("=")
        start = self.parse_expression()
        self.expect_symbol("..", "Expected '..'")
        end = self.parse_expression()
        body = self.parse_block()
        return For(name.symbol, start, end, body)

    def parse_while(self) -> While:
        self.expect(TokenKind.WHILE, "Expected 'while'")
        condition = self.parse_expression()
        return While(condition, self.parse_block())

    # Expressions -----------------------------------------------------------

    def parse_atom(self) -> Expression:
        """
        Parse the smallest unit of an expression: a parenthesized expression,
        a unary-prefixed expression, a number, or a defined identifier.
        """
        tok = self.current()

        if self.accept_symbol("("):
            inner = self.parse_expression(MIN_PRECEDENCE)
            self.expect_symbol(")", "Unmatched '(', expected ')'")
            return inner

        if tok.type is TokenKind.OPERATOR:
            precedence = UNARY_PRECEDENCE.get(tok.symbol)
            if precedence is None:
                raise ParseError(tok, "Expected unary prefix operator.")
            self.advance()
            return Unary(tok.symbol, self.parse_expression(precedence))

        if tok.type is TokenKind.NUMBER:
            self.advance()
            return Number(tok.symbol)

        if tok.type is TokenKind.IDENTIFIER:
            if not self.is_defined(tok.symbol):
                raise ParseError(tok, f"The identifier '{tok.symbol}' is not defined.")
            self.advance()
            return Identifier(tok.symbol)

        raise ParseError(tok, f"Expected expression, got '{tok.symbol}'")

    def parse_expression(self, min_precedence: int = MIN_PRECEDENCE) -> Expression:
        """
        Parse an expression by precedence climbing.

        Stops at the first token that is not a binary operator, or whose
        precedence is below `min_precedence`.
        """
        lhs = self.parse_atom()

        while True:
            tok = self.current()
            if tok.type is not TokenKind.OPERATOR:
                break
            precedence = BINARY_PRECEDENCE.get(tok.symbol)
            if precedence is None or precedence < min_precedence:
                break

            self.advance()
            # Every binary operator is left-associative.
            rhs = self.parse_expression(precedence + 1)
            lhs = Binary(tok.symbol, lhs, rhs)

        return lhs


def parse(tokens: list[Token]) -> Program:
    """Parse a token list into a `Program`, starting from an empty symbol table."""
    return Parser(tokens).parse()


__all__ = ["Parser", "parse"]
