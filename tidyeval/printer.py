"""Deparser: renders node trees back to canonical surface syntax.

Parentheses are derived from the shape of the tree and the operator table;
a child whose operator binds more loosely than its parent is wrapped. The
printer never inspects or rewrites source text.
"""

from __future__ import annotations

import math
import re
from typing import Any

import numpy as np

from tidyeval.config import get_deparse_width
from tidyeval.reader.lexer import ESCAPES
from tidyeval.reader.operators import (
    ARGUMENT_POWER,
    KEYWORD_POWER,
    LEFT,
    POSTFIX_POWER,
    RIGHT,
    TIGHT_OPERATORS,
    UNQUOTE_POWER,
    binary_operator,
    unary_operator,
)
from tidyeval.types.closure import Closure
from tidyeval.types.environment import Environment
from tidyeval.types.nodes import Arg, Call, Constant, MissingArg, Node, PairList, Unquote
from tidyeval.types.quosure import Quosure
from tidyeval.types.symbol import Symbol

SYNTACTIC_NAME_RE = re.compile(r"^(?:[A-Za-z]|\.(?!\d))[A-Za-z0-9._]*$")
RESERVED_WORDS = frozenset(
    {"if", "else", "function", "TRUE", "FALSE", "NULL", "Inf", "NaN", "for", "while", "repeat", "break", "next"}
)
_REVERSE_ESCAPES = {v: k for k, v in ESCAPES.items() if k not in ("'", '"', "`")}

ATOM = "atom"
BINARY = "binary"
PREFIX = "prefix"


# ----------------- Names and literals -----------------
def is_syntactic(name: str) -> bool:
    return bool(SYNTACTIC_NAME_RE.match(name)) and name not in RESERVED_WORDS


def _escape(text: str, quote: str) -> str:
    out = []
    for c in text:
        if c == quote:
            out.append("\\" + c)
        elif c in _REVERSE_ESCAPES:
            out.append("\\" + _REVERSE_ESCAPES[c])
        else:
            out.append(c)
    return "".join(out)


def format_name(name: str) -> str:
    """`x` stays `x`; anything non-syntactic is backtick-quoted."""
    if is_syntactic(name) or name == "...":
        return name
    return f"`{_escape(name, '`')}`"


def format_scalar(value: Any) -> str:
    """R-style literal for a single atomic value."""
    if isinstance(value, np.generic):
        value = value.item()
    if value is None:
        return "NULL"
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Inf" if value > 0 else "-Inf"
        if value.is_integer() and abs(value) < 1e15:
            return str(int(value))
        return repr(value)
    if isinstance(value, str):
        return '"' + _escape(value, '"') + '"'
    return None


def format_value(value: Any) -> str:
    """Render any runtime value, literal-like where possible."""
    width = get_deparse_width()
    scalar = format_scalar(value)
    if scalar is not None:
        return scalar
    if isinstance(value, Node):
        return deparse(value)
    if isinstance(value, np.ndarray):
        if value.ndim != 1:
            return f"<array[{'x'.join(str(d) for d in value.shape)}]>"
        if value.size == 1:
            return format_scalar(value[0]) or f"<{value.dtype.name}[1]>"
        items = [format_scalar(v) for v in value]
        if any(i is None for i in items):
            return f"<{value.dtype.name}[{value.size}]>"
        text = f"c({', '.join(items)})"
        if len(text) > width:
            return f"<{value.dtype.name}[{value.size}]>"
        return text
    if isinstance(value, dict):
        inner = ", ".join(f"{format_name(str(k))} = {format_value(v)}" for k, v in value.items())
        text = f"list({inner})"
        return text if len(text) <= width else f"<list[{len(value)}]>"
    if isinstance(value, (list, tuple)):
        parts = []
        for item in value:
            if isinstance(item, Arg):
                name = item.name if isinstance(item.name, str) else None
                parts.append(f"{format_name(name)} = {format_value(item.value)}" if name else format_value(item.value))
            else:
                parts.append(format_value(item))
        text = f"list({', '.join(parts)})"
        return text if len(text) <= width else f"<list[{len(value)}]>"
    if isinstance(value, Closure):
        return deparse(value.definition())
    if isinstance(value, Environment):
        return repr(value)
    if callable(value):
        return f"<fn: {getattr(value, '__name__', type(value).__name__)}>"
    return f"<{type(value).__name__}>"


# ----------------- Classification -----------------
def _classify(node: Any) -> tuple[str, int, str | None]:
    """Return (kind, binding power, associativity) of a node as printed."""
    if isinstance(node, Unquote):
        return PREFIX, UNQUOTE_POWER, None
    if isinstance(node, Constant):
        v = node.value
        if isinstance(v, (int, float, np.number)) and not isinstance(v, bool) and v < 0:
            return PREFIX, unary_operator("-"), None
        return ATOM, POSTFIX_POWER, None
    if isinstance(node, Quosure):
        return PREFIX, UNQUOTE_POWER, None
    if isinstance(node, Call) and isinstance(node.fn, Symbol):
        name = node.fn.name
        unnamed = all(a.name is None for a in node.args)
        if name in ("function", "if") and _is_keyword_form(node):
            return PREFIX, KEYWORD_POWER, None
        if unnamed and len(node.args) == 2 and name not in ("[[",):
            info = binary_operator(name)
            if info is not None and (name != "$" or _is_dollar_name(node.args[1].value)):
                return BINARY, info[0], info[1]
        if unnamed and len(node.args) == 1 and unary_operator(name) is not None:
            return PREFIX, unary_operator(name), None
    return ATOM, POSTFIX_POWER, None


def _is_keyword_form(node: Call) -> bool:
    if any(a.name is not None for a in node.args):
        return False
    if node.fn.name == "function":
        return len(node.args) == 2 and isinstance(node.args[0].value, PairList)
    return len(node.args) in (2, 3)


def _is_dollar_name(node: Any) -> bool:
    return isinstance(node, Symbol) or (isinstance(node, Constant) and isinstance(node.value, str))


def _child(node: Any, power: int, side: str, tail: bool) -> str:
    """Render `node` as an operand in a context of binding power `power`.

    side is LEFT or RIGHT of a binary parent (or RIGHT for prefix operands);
    tail is True when nothing follows the operand on the same level.
    """
    kind, child_power, assoc = _classify(node)
    text = _render(node, tail if kind != ATOM else True)
    wrap = False
    if kind == BINARY:
        if child_power < power:
            wrap = True
        elif child_power == power:
            wrap = (assoc == LEFT and side == RIGHT) or (assoc == RIGHT and side == LEFT)
    elif kind == PREFIX:
        wrap = child_power < power and not tail
    if wrap:
        return f"({_render(node, True)})"
    return text


# ----------------- Pretty printer -----------------
def deparse(node: Any) -> str:
    """Render a node (or any value) as canonical source text."""
    return _render(node, True)


def _render(node: Any, tail: bool) -> str:
    if isinstance(node, Symbol):
        return format_name(node.name)
    if isinstance(node, Constant):
        return format_value(node.value)
    if isinstance(node, MissingArg):
        return ""
    if isinstance(node, Unquote):
        marker = "!!!" if node.splice else "!!"
        return marker + _child(node.payload, UNQUOTE_POWER, RIGHT, tail)
    if isinstance(node, Quosure):
        return "^" + _child(node.expr, UNQUOTE_POWER, RIGHT, tail)
    if isinstance(node, PairList):
        return _formals(node)
    if isinstance(node, Call):
        return _render_call(node, tail)
    return format_value(node)


def _formals(formals: PairList) -> str:
    parts = []
    for name, default in formals.entries:
        if isinstance(default, MissingArg):
            parts.append(format_name(name))
        else:
            parts.append(f"{format_name(name)} = {_child(default, ARGUMENT_POWER + 1, RIGHT, True)}")
    return ", ".join(parts)


def _args(args: tuple[Arg, ...]) -> str:
    parts = []
    for name, value in args:
        rendered = _child(value, ARGUMENT_POWER + 1, RIGHT, True)
        if name is None:
            parts.append(rendered)
        elif isinstance(name, Unquote):
            parts.append(f"{deparse(name)} := {rendered}")
        else:
            parts.append(f"{format_name(name)} = {rendered}")
    return ", ".join(parts)


def _callee(fn: Any) -> str:
    if isinstance(fn, Symbol):
        return format_name(fn.name)
    if isinstance(fn, Constant) and isinstance(fn.value, Closure):
        return f"({format_value(fn.value)})"
    if isinstance(fn, Node):
        kind, _, _ = _classify(fn)
        text = _render(fn, True)
        return f"({text})" if kind != ATOM else text
    return format_value(fn)


def _render_call(node: Call, tail: bool) -> str:
    kind, power, assoc = _classify(node)
    if isinstance(node.fn, Symbol):
        name = node.fn.name
        values = node.arg_values
        if kind == BINARY:
            lhs = _child(values[0], power, LEFT, False)
            if name == "$":
                rhs = _render(values[1], True)
            else:
                rhs = _child(values[1], power, RIGHT, tail)
            if name in TIGHT_OPERATORS:
                return f"{lhs}{name}{rhs}"
            return f"{lhs} {name} {rhs}"
        if kind == PREFIX and name == "function":
            return f"function({_formals(values[0])}) {_child(values[1], KEYWORD_POWER, RIGHT, tail)}"
        if kind == PREFIX and name == "if":
            text = f"if ({deparse(values[0])}) {_child(values[1], KEYWORD_POWER, RIGHT, True)}"
            if len(values) == 3:
                text += f" else {_child(values[2], KEYWORD_POWER, RIGHT, tail)}"
            return text
        if kind == PREFIX:
            operand = _child(values[0], power, RIGHT, tail)
            if name == "!" and operand.startswith("!"):
                operand = f"({operand})"
            return f"{name}{operand}"
        if name == "(" and len(values) == 1 and node.args[0].name is None:
            return f"({deparse(values[0])})"
        if name == "[[" and len(values) == 2 and all(a.name is None for a in node.args):
            return f"{_child(values[0], POSTFIX_POWER, LEFT, False)}[[{deparse(values[1])}]]"
        if name == "{" and all(a.name is None for a in node.args):
            if not values:
                return "{}"
            body = "\n".join("    " + deparse(v).replace("\n", "\n    ") for v in values)
            return "{\n" + body + "\n}"
    return f"{_callee(node.fn)}({_args(node.args)})"
