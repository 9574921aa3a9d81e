"""
Provides the `Transpiler` class and emitter interface for turning B+ ASTs into code.

Classes and Features:
    - Emitter (Protocol): Interface for all backend emitters.
    - CEmitter: Concrete emitter that translates a B+ `Program` to C.
    - Transpiler: Picks the emitter for a target name and runs it over a `Program`.
    - generate(): Shortcut for C output, the compiler's code generation stage.

Example:
    >>> transpiler = Transpiler("c")
    >>> output_code = transpiler.transpile(program)

Raises:
    ValueError: If the target language is not supported.
    TypeError: If given something other than a `Program`.
"""

import logging
from typing import Protocol

from bplus.bplus_ast import Program
from bplus.emitters.c_emitter import CEmitter

logger = logging.getLogger(__name__)


class Emitter(Protocol):  # pragma: no cover
    """Protocol for all B+ emitters.

    An emitter is created fresh for each program, consumes it through
    `emit_program`, and returns the finished text from `get_output`.
    """

    def __init__(self) -> None: ...  # pragma: no cover

    def emit_program(self, node: Program) -> None: ...  # pragma: no cover

    def get_output(self) -> str: ...  # pragma: no cover


EmitterType = type[Emitter]
"""Alias for a concrete Emitter class type."""

EMITTERS: dict[str, EmitterType] = {
    "c": CEmitter,
}


class Transpiler:
    """Runs the emitter for a target language over a B+ program.

    Attributes:
        target (str): The normalized target name.
        emitter_type (EmitterType): The emitter class for the target.
        emitter (Emitter | None): The emitter used by the latest run, if any.
    """

    def __init__(self, target: str = "c") -> None:
        """Initializes the transpiler with the desired output target.

        Raises:
            ValueError: If the target language is not supported.
        """
        target = target.lower()
        if target not in EMITTERS:
            raise ValueError(f"Unknown transpilation target: {target!r}")
        self.target = target
        self.emitter_type = EMITTERS[target]
        self.emitter: Emitter | None = None

    def transpile(self, ast: Program) -> str:
        """Transpiles a whole program into source code for the selected target.

        Each call gets a fresh emitter, so one instance can translate any
        number of programs.

        Raises:
            TypeError: If `ast` is not a `Program`.
        """
        if not isinstance(ast, Program):
            raise TypeError("Transpiler expects a Program node.")
        self.emitter = emitter = self.emitter_type()
        emitter.emit_program(ast)
        code = emitter.get_output()
        logger.debug("Emitted %d lines of %s", code.count("\n") + 1, self.target)
        return code


def generate(ast: Program) -> str:
    """Generates C source for a parsed program."""
    return Transpiler("c").transpile(ast)


__all__ = ["EMITTERS", "Emitter", "Transpiler", "generate"]
