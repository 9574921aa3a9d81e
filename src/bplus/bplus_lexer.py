"""
Lexical analyzer for the B+ programming language.

This module converts raw source text into a flat, line-tagged token list:

Classes:
    TokenKind: Closed set of token kinds (structural, literal, and keyword kinds).
    CharacterStream: Character reader with one character of lookahead and line tracking.
    Token: A single token with its symbol, kind, and source line.
    Lexer: Converts a CharacterStream into a sequence of tokens.

Features:
    - Skips spaces, tabs, and `//` comments (a comment also swallows the line
      break(s) that end it, so it never produces a NEWLINE)
    - Collapses each line terminator (`\\n`, `\\r`, or `\\r\\n`) into one NEWLINE
    - Recognizes keywords case-insensitively, identifiers, integer literals,
      operators, and parentheses/braces, matching two-character operators first
    - Silently drops characters it does not recognize

The lexer never raises. Every token list starts with START and ends with END.

Example:
    >>> [tok.symbol for tok in lex("print 42")]
    ['start', 'print', '42', 'end']

Exports:
    - TokenKind
    - CharacterStream
    - Token
    - Lexer
    - lex
    - detokenize
"""

import logging
import string
from enum import Enum
from typing import Any

from bplus.bplus_constants import KEYWORDS, MULTI_CHAR_SYMBOLS, SYMBOLS

logger = logging.getLogger(__name__)

LETTERS = frozenset(string.ascii_letters)
DIGITS = frozenset(string.digits)
LINE_TERMINATORS = frozenset("\r\n")


class TokenKind(str, Enum):
    """Every kind of token the lexer can produce."""

    START = "START"
    END = "END"
    NEWLINE = "NEWLINE"
    IDENTIFIER = "IDENTIFIER"
    NUMBER = "NUMBER"
    OPERATOR = "OPERATOR"
    PAREN = "PAREN"
    LET = "LET"
    FOR = "FOR"
    IF = "IF"
    ELSE = "ELSE"
    WHILE = "WHILE"
    PRINT = "PRINT"
    READ = "READ"
    GOTO = "GOTO"

    def __str__(self) -> str:
        return self.value


class CharacterStream:
    """
    Reads characters from a source string while tracking the current line.

    A `\\r\\n` pair counts as a single line break: the line number advances on
    `\\n`, and on a `\\r` that is not immediately followed by `\\n`.

    Attributes:
        source (str): The input source string.
        position (int): Current index in the source.
        line (int): Current line number (1-indexed).
    """

    def __init__(self, source: str, position: int = 0, line: int = 1):
        self.source = source
        self.position = position
        self.line = line

    def next(self) -> str:
        """
        Consumes and returns the next character in the stream.

        Raises:
            IndexError: If reading past the end of the source.
        """
        if self.position >= len(self.source):
            raise IndexError(
                f"Attempted to read past end of source at position=<{self.position}>, line=<{self.line}>"
            )
        char = self.source[self.position]
        self.position += 1
        if char == "\n" or (char == "\r" and self.peek() != "\n"):
            self.line += 1
        return char

    def peek(self, offset: int = 0) -> str:
        """Returns the character at `offset` from the current position, or "" when out of bounds."""
        index = self.position + offset
        if index < 0 or index >= len(self.source):
            return ""
        return self.source[index]

    def end_of_file(self) -> bool:
        return self.position >= len(self.source)


class Token:
    """Represents a single lexical token in the B+ language.

    Attributes:
        symbol (str): The exact lexeme, or a canonical form ("start", "end",
            "newline") for synthesized tokens. Keywords are lower-cased.
        type (TokenKind): The token's kind.
        line (int): The 1-based line number on which the token begins.
    """

    def __init__(self, symbol: str, type_: TokenKind, line: int = 0):
        self.symbol = symbol
        self.type = type_
        self.line = line

    def __repr__(self) -> str:
        return f"Token({self.type}, {self.symbol!r}, line={self.line})"

    def __eq__(self, other: Any) -> bool:
        return (
            isinstance(other, Token)
            and self.symbol == other.symbol
            and self.type == other.type
            and self.line == other.line
        )

    def __hash__(self) -> int:
        return hash((self.symbol, self.type, self.line))


class Lexer:
    """Lexical analyzer for the B+ language.

    Scans left to right with one character of lookahead and classifies the
    current character as a comment start, whitespace, line terminator,
    alphabetic run, digit run, or symbol.

    Attributes:
        stream (CharacterStream): The source stream to tokenize.
    """

    def __init__(self, stream: CharacterStream) -> None:
        self.stream = stream

    def peek(self, offset: int = 0) -> str:
        return self.stream.peek(offset)

    def advance(self) -> str:
        return self.stream.next()

    def skip_comment(self) -> None:
        """Consumes a `//` comment through the end of its line, line breaks included."""
        while not self.stream.end_of_file() and self.peek() not in LINE_TERMINATORS:
            self.advance()
        while not self.stream.end_of_file() and self.peek() in LINE_TERMINATORS:
            self.advance()

    def read_run(self, allowed: frozenset[str]) -> str:
        """Consumes the maximal run of characters drawn from `allowed`."""
        run = ""
        while not self.stream.end_of_file() and self.peek() in allowed:
            run += self.advance()
        return run

    def match_symbol(self) -> Token | None:
        """Matches an operator or paren, preferring a two-character operator.

        Returns:
            Token | None: The matched token, or None if the current character
            starts no known symbol.
        """
        line = self.stream.line
        pair = self.peek() + self.peek(1)
        if pair in MULTI_CHAR_SYMBOLS:
            self.advance()
            self.advance()
            return Token(pair, TokenKind(SYMBOLS[pair]), line)
        ch = self.peek()
        if ch in SYMBOLS:
            self.advance()
            return Token(ch, TokenKind(SYMBOLS[ch]), line)
        return None

    def next_token(self) -> Token:
        """Consumes and returns the next Token, or an END token at end of input."""
        while not self.stream.end_of_file():
            ch = self.peek()
            line = self.stream.line

            # 1. Comments and whitespace
            if ch == "/" and self.peek(1) == "/":
                self.skip_comment()
                continue
            if ch in " \t":
                self.advance()
                continue

            # 2. Line terminator
            if ch in LINE_TERMINATORS:
                self.advance()
                if ch == "\r" and self.peek() == "\n":
                    self.advance()
                return Token("newline", TokenKind.NEWLINE, line)

            # 3. Keyword or identifier
            if ch in LETTERS:
                word = self.read_run(LETTERS | DIGITS)
                lowered = word.lower()
                if lowered in KEYWORDS:
                    return Token(lowered, TokenKind(lowered.upper()), line)
                return Token(word, TokenKind.IDENTIFIER, line)

            # 4. Integer literal
            if ch in DIGITS:
                return Token(self.read_run(DIGITS), TokenKind.NUMBER, line)

            # 5. Operator or paren
            token = self.match_symbol()
            if token:
                return token

            # 6. Unknown character: dropped without a token
            logger.debug("Dropping unrecognized character %r on line %d", ch, line)
            self.advance()

        return Token("end", TokenKind.END, self.stream.line)

    def tokenize(self) -> list[Token]:
        """Lexes the whole stream into a START ... END bracketed token list."""
        tokens = [Token("start", TokenKind.START, self.stream.line)]
        while True:
            tok = self.next_token()
            tokens.append(tok)
            if tok.type is TokenKind.END:
                return tokens


def lex(source: str) -> list[Token]:
    """Converts B+ source text into a token list bracketed by START and END."""
    return Lexer(CharacterStream(source)).tokenize()


def detokenize(tokens: list[Token]) -> str:
    """Rebuilds source text from tokens.

    Symbols are separated by single spaces and each NEWLINE becomes a line
    break. START and END are omitted. Lexing the result reproduces the same
    token kinds and symbols.
    """
    parts: list[str] = []
    for tok in tokens:
        if tok.type in (TokenKind.START, TokenKind.END):
            continue
        if tok.type is TokenKind.NEWLINE:
            parts.append("\n")
            continue
        if parts and parts[-1] != "\n":
            parts.append(" ")
        parts.append(tok.symbol)
    return "".join(parts)


__all__ = ["CharacterStream", "Lexer", "Token", "TokenKind", "detokenize", "lex"]
