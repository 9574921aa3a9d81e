"""
Static lookup tables shared by the B+ lexer and parser.

Tables:
    KEYWORDS: Reserved words, matched case-insensitively by the lexer.
    SYMBOLS: Surface symbol → token kind name ("OPERATOR" or "PAREN").
    MULTI_CHAR_SYMBOLS: Two-character operators, tried before single characters.
    BINARY_PRECEDENCE: Binary operator → precedence (all left-associative).
    UNARY_PRECEDENCE: Prefix operator → precedence.

Higher precedence binds tighter. Operators absent from `BINARY_PRECEDENCE`
terminate an expression rather than raising.
"""

KEYWORDS: tuple[str, ...] = (
    "let",
    "for",
    "if",
    "else",
    "while",
    "print",
    "read",
    "goto",
)

SYMBOLS: dict[str, str] = {
    "+": "OPERATOR",
    "-": "OPERATOR",
    "*": "OPERATOR",
    "/": "OPERATOR",
    "%": "OPERATOR",
    ">": "OPERATOR",
    "<": "OPERATOR",
    ">=": "OPERATOR",
    "<=": "OPERATOR",
    "==": "OPERATOR",
    "=": "OPERATOR",
    ":": "OPERATOR",
    "..": "OPERATOR",
    "!": "OPERATOR",
    "{": "PAREN",
    "}": "PAREN",
    "(": "PAREN",
    ")": "PAREN",
}

MULTI_CHAR_SYMBOLS: frozenset[str] = frozenset(s for s in SYMBOLS if len(s) == 2)

BINARY_PRECEDENCE: dict[str, int] = {
    "==": 3,
    ">": 3,
    "<": 3,
    ">=": 3,
    "<=": 3,
    "+": 4,
    "-": 4,
    "*": 5,
    "/": 5,
}

UNARY_PRECEDENCE: dict[str, int] = {
    "+": 6,
    "-": 6,
    "!": 6,
}

# Lowest precedence an expression is parsed at (also used inside parentheses).
MIN_PRECEDENCE = 1
