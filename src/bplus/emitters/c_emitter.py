"""
Translates B+ AST nodes into C source code.

This module defines the `CEmitter` class, the backend used by the `Transpiler`
to turn a parsed B+ `Program` into a complete C translation unit.

Output Shape:
    #include <stdio.h>

    int main() {
    <tab>int x;
    <tab>x = (1 + 2);
    <tab>printf("%i\\n", x);
    }

Behavior:
    - Every B+ variable is a C `int`.
    - Variables are declared on first binding. A first binding at the top level
      is declared in place; one inside a nested body is hoisted to the top of
      `main` so the variable outlives the block, as B+ has one flat namespace.
    - Expressions are fully parenthesized, so operator precedence in the output
      never depends on C's own rules.
    - Bodies are indented one tab per nesting level.
    - Names C reserves (`int`, `return`, `printf`, ...) get a trailing underscore,
      and number literals lose their leading zeros so C never reads them as octal.

Emission never fails for a `Program` produced by the parser.
"""

from bplus.bplus_ast import (
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

PROLOGUE: tuple[str, ...] = ("#include <stdio.h>", "", "int main() {")
EPILOGUE: tuple[str, ...] = ("}",)

# B+ operator → C operator. Every B+ operator has a direct C analogue.
C_OPERATORS: dict[str, str] = {
    "+": "+",
    "-": "-",
    "*": "*",
    "/": "/",
    "==": "==",
    ">": ">",
    "<": "<",
    ">=": ">=",
    "<=": "<=",
    "!": "!",
}

# Names a B+ identifier may spell but C cannot take as an `int` variable or
# label inside `main`: keywords (including GNU and C23 ones), the stdio
# functions the generated code calls, `main`, object-like macros from
# <stdio.h>, and the system macros GCC predefines in its default GNU mode.
C_RESERVED: frozenset[str] = frozenset(
    {
        "asm", "auto", "break", "case", "char", "const", "continue", "default",
        "do", "double", "else", "enum", "extern", "float", "for", "goto", "if",
        "inline", "int", "long", "register", "restrict", "return", "short",
        "signed", "sizeof", "static", "struct", "switch", "typedef", "typeof",
        "union", "unsigned", "void", "volatile", "while",
        "alignas", "alignof", "bool", "constexpr", "false", "nullptr",
        "true",
        "main", "printf", "scanf",
        "BUFSIZ", "EOF", "FILE", "NULL", "stderr", "stdin", "stdout",
        "i386", "linux", "unix",
    }
)


def c_name(name: str) -> str:
    """Returns the C spelling of a B+ variable or label name.

    Reserved names get a trailing underscore. B+ identifiers are made of letters
    and digits, so a renamed name can never collide with another B+ name.
    """
    return f"{name}_" if name in C_RESERVED else name


class CEmitter:
    """Emits C code from B+ AST nodes.

    The emitter keeps its own table of variables already declared in the
    output text. It is independent of the parser's symbol table, which tracks
    names defined in the source.

    Attributes:
        lines (list[str]): Emitted body lines of `main`, already indented.
        hoisted (list[str]): Declarations for variables first bound inside a
            nested body, placed at the top of `main`.
        declared (dict[str, None]): Variables declared so far, in order.
        indent (int): Current nesting level inside `main` (1 at top level).
    """

    def __init__(self) -> None:
        self.lines: list[str] = []
        self.hoisted: list[str] = []
        self.declared: dict[str, None] = {}
        self.indent = 1

    def indent_str(self) -> str:
        return "\t" * self.indent

    def line(self, text: str) -> None:
        self.lines.append(f"{self.indent_str()}{text}")

    def get_output(self) -> str:
        """Returns the complete C translation unit as a single string."""
        body = [f"\t{decl}" for decl in self.hoisted] + self.lines
        return "\n".join([*PROLOGUE, *body, *EPILOGUE])

    def declare(self, name: str) -> None:
        """Emits `int name;` the first time `name` is bound."""
        if name in self.declared:
            return
        self.declared[name] = None
        if self.indent == 1:
            self.line(f"int {c_name(name)};")
        else:
            self.hoisted.append(f"int {c_name(name)};")

    def emit_body(self, statements: tuple[Statement, ...]) -> None:
        self.indent += 1
        for stmt in statements:
            self.emit_statement(stmt)
        self.indent -= 1

    # Statements -------------------------------------------------------------

    def emit_program(self, node: Program) -> None:
        for stmt in node.statements:
            self.emit_statement(stmt)

    def emit_statement(self, node: Statement) -> None:
        match node:
            case Assignment():
                self.emit_assignment(node)
            case While():
                self.emit_while(node)
            case For():
                self.emit_for(node)
            case Conditional():
                self.emit_conditional(node)
            case Print():
                self.line(f'printf("%i\\n", {self.emit_expr(node.child)});')
            case Read():
                self.line('scanf("%*i");')
            case Label():
                self.line(f"{c_name(node.name)}: ;")
            case Goto():
                self.line(f"goto {c_name(node.name)};")
            case _:
                raise TypeError(f"Not a B+ statement: {node!r}")

    def emit_assignment(self, node: Assignment) -> None:
        self.declare(node.name)
        self.line(f"{c_name(node.name)} = {self.emit_expr(node.rhs)};")

    def emit_while(self, node: While) -> None:
        self.line(f"while ({self.emit_expr(node.condition)}) {{")
        self.emit_body(node.body)
        self.line("}")

    def emit_for(self, node: For) -> None:
        """
        Emits a counting loop from `start` up to, but not including, `end`.
        """
        self.declare(node.name)
        name = c_name(node.name)
        start = self.emit_expr(node.start)
        end = self.emit_expr(node.end)
        self.line(f"for ({name} = {start}; {name} < {end}; {name}++) {{")
        self.emit_body(node.body)
        self.line("}")

    def emit_conditional(self, node: Conditional) -> None:
        """
        Emits `if` for the first branch and `else if` for every later one.

        A trailing `else` arrives as an always-true condition, so it is
        emitted as `else if (1)`.
        """
        for i, (condition, body) in enumerate(zip(node.conditions, node.bodies)):
            keyword = "if" if i == 0 else "else if"
            self.line(f"{keyword} ({self.emit_expr(condition)}) {{")
            self.emit_body(body)
            self.line("}")

    # Expressions ------------------------------------------------------------

    def emit_expr(self, node: Expression) -> str:
        match node:
            case Number(symbol=symbol):
                # Leading zeros would make C read the literal as octal.
                return str(int(symbol))
            case Identifier(symbol=symbol):
                return c_name(symbol)
            case Unary(operator=op, child=child):
                return f"({C_OPERATORS[op]}{self.emit_expr(child)})"
            case Binary(operator=op, left=left, right=right):
                return f"({self.emit_expr(left)} {C_OPERATORS[op]} {self.emit_expr(right)})"
            case _:
                raise TypeError(f"Not a B+ expression: {node!r}")
