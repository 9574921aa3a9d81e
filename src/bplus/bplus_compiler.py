"""
The B+ compilation pipeline: source text → tokens → AST → C source.

`compile_source` is the single entry point. Each call builds its own token
list, symbol tables, and output buffer, so independent compilations never
share state.

Diagnostics go to a logger supplied through `CompilerConfig` rather than to
a process-wide debug flag.

Example:
    >>> code = compile_source("let x = 2 + 3\\nprint x")
    >>> "printf" in code
    True
"""

import logging
from dataclasses import dataclass

from bplus.bplus_errors import CompileError, ParseError, format_error_report
from bplus.bplus_lexer import Token, lex
from bplus.bplus_parser import parse
from bplus.bplus_transpile import generate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompilerConfig:
    """
    Per-call compiler settings.

    Attributes:
        verbose: Trace the token list and the AST at DEBUG level.
        logger: Where diagnostics and error reports go. Defaults to this
            module's logger.
    """

    verbose: bool = False
    logger: logging.Logger | None = None

    @property
    def log(self) -> logging.Logger:
        return self.logger or logger


def compile_source(source: str, config: CompilerConfig | None = None) -> str:
    """
    Compiles B+ source text into C source text.

    Windows line endings are normalized to `\\n` first.

    Raises:
        CompileError: If the program is invalid. The error carries the
            formatted report; no code is produced. Nesting too deep for the
            recursive parser or emitter is reported the same way.
    """
    config = config or CompilerConfig()
    log = config.log
    source = source.replace("\r\n", "\n")

    tokens = lex(source)
    if config.verbose:
        log.debug("Tokens: %r", tokens)

    try:
        ast = parse(tokens)
    except ParseError as err:
        raise fail(source, err.token, err.message, log) from err

    if config.verbose:
        log.debug("AST: %r", ast.to_dict())

    try:
        return generate(ast)
    except RecursionError:
        raise fail(source, tokens[-1], "Program is nested too deeply", log) from None


def fail(source: str, token: Token, message: str, log: logging.Logger) -> CompileError:
    """Logs a failed compilation and builds the error carrying its report."""
    log.debug("Compilation failed on line %d: %s", token.line, message)
    return CompileError(format_error_report(source, token, message), token, message)


__all__ = ["CompilerConfig", "compile_source"]
