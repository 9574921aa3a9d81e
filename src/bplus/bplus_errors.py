"""
B+ Compiler Error Hierarchy

Exception Hierarchy
-------------------
BPlusError (base)
├── ParseError - syntax or definedness error found while parsing
│                (also a builtin SyntaxError)
└── CompileError - a failed compilation, carrying the formatted report

Report Format
-------------
A failed compilation is reported with the line above, the offending line
(marked), and the line below:

    Error on line 2:
              let x = 1
       --->   x = y
              print x
    The identifier 'y' is not defined.
"""

from bplus.bplus_lexer import Token


class BPlusError(Exception):
    """Base exception for all B+ compiler errors."""


class ParseError(BPlusError, SyntaxError):
    """
    Raised by the parser on the first syntax or definedness error.

    Attributes:
        token: The offending token; its `line` locates the error.
        message: Human-readable description of the problem.
    """

    def __init__(self, token: Token, message: str):
        super().__init__(message)
        self.token = token
        self.message = message
        self.lineno = token.line

    def __str__(self) -> str:
        return f"line {self.token.line}: {self.message}"


class CompileError(BPlusError):
    """
    Raised by `compile_source` when compilation fails. No code is produced.

    Attributes:
        report: The formatted, multi-line error report.
        token: The offending token.
        message: The underlying parse error message.
    """

    def __init__(self, report: str, token: Token, message: str):
        super().__init__(report)
        self.report = report
        self.token = token
        self.message = message


def format_error_report(source: str, token: Token, message: str) -> str:
    """
    Renders an error with one line of context on either side.

    Lines that fall outside the source are shown empty.
    """
    lines = source.split("\n")

    def line_at(number: int) -> str:
        return lines[number - 1] if 1 <= number <= len(lines) else ""

    return "\n".join(
        [
            f"Error on line {token.line}:",
            f"          {line_at(token.line - 1)}",
            f"   --->   {line_at(token.line)}",
            f"          {line_at(token.line + 1)}",
            message,
        ]
    )


__all__ = ["BPlusError", "CompileError", "ParseError", "format_error_report"]
