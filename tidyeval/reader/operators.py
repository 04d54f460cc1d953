"""Operator table shared by the parser and the printer.

Binding powers follow R's ?Syntax ordering; higher binds tighter.
"""

from __future__ import annotations

import re

LEFT = "left"
RIGHT = "right"

# name -> (binding power, associativity)
BINARY_OPERATORS: dict[str, tuple[int, str]] = {
    "=": (10, RIGHT),
    "<-": (20, RIGHT),
    "~": (30, LEFT),
    "||": (40, LEFT),
    "|": (40, LEFT),
    "&&": (50, LEFT),
    "&": (50, LEFT),
    "==": (70, LEFT),
    "!=": (70, LEFT),
    "<": (70, LEFT),
    ">": (70, LEFT),
    "<=": (70, LEFT),
    ">=": (70, LEFT),
    "+": (80, LEFT),
    "-": (80, LEFT),
    "*": (90, LEFT),
    "/": (90, LEFT),
    ":": (110, LEFT),
    "^": (130, RIGHT),
    "$": (150, LEFT),
}

SPECIAL_OPERATOR_POWER = 100  # %any%
SPECIAL_OPERATOR_RE = re.compile(r"^%[^%\n]*%$")

# Prefix operators: name -> binding power of the operand
UNARY_OPERATORS: dict[str, int] = {
    "~": 30,
    "!": 60,
    "-": 120,
    "+": 120,
}

UNQUOTE_POWER = 120      # `!!x` and `!!!x` bind like unary minus
KEYWORD_POWER = 15       # bodies of `function` and branches of `if`
ARGUMENT_POWER = 10      # call arguments stop before a bare `=`
POSTFIX_POWER = 150      # calls, `$` and `[[`

# Operators printed without surrounding spaces
TIGHT_OPERATORS = frozenset({"^", ":", "$"})


def binary_operator(name: str) -> tuple[int, str] | None:
    if name in BINARY_OPERATORS:
        return BINARY_OPERATORS[name]
    if SPECIAL_OPERATOR_RE.match(name):
        return SPECIAL_OPERATOR_POWER, LEFT
    return None


def unary_operator(name: str) -> int | None:
    return UNARY_OPERATORS.get(name)
