"""Built-in functions for the tidyeval base environment.

This module defines the vectorised arithmetic, comparison and logical
operators, a handful of vector and string helpers, and the metaprogramming
functions exposed to evaluated code. Every binding is an ordinary value in
the base environment, so a child environment can shadow any of them.
"""
from __future__ import annotations

import logging
import operator
from collections.abc import Mapping
from typing import Any

import numpy as np

from tidyeval import Value
from tidyeval.build import build_call, sym, syms
from tidyeval.errors import ArityOrBindingError, EvaluationError, TidyTypeError
from tidyeval.evaluation.apply import raw_args
from tidyeval.evaluation.special_forms import SPECIAL_FORMS
from tidyeval.evaluation.special_forms.access_forms import get_element
from tidyeval.printer import deparse, format_scalar, format_value
from tidyeval.types.environment import Environment, new_environment
from tidyeval.types.nodes import Arg, Call, Node, pack_args, values_identical
from tidyeval.types.quosure import is_quosure, new_quosure, quo_get_env, quo_get_expr, quo_squash
from tidyeval.types.special_form import SpecialForm
from tidyeval.types.symbol import Symbol

logger = logging.getLogger(__name__)

_UNSET = object()
_NUMERIC_KINDS = "biuf"


# -------------------------------
# Coercion helpers
# -------------------------------
def unbox(value: Any) -> Value:
    """numpy scalars and 0-d arrays back to plain Python values."""
    if isinstance(value, np.ndarray) and value.ndim == 0:
        value = value[()]
    if isinstance(value, np.generic):
        return value.item()
    return value


def _numeric(value: Any, label: str) -> Any:
    if isinstance(value, (bool, np.bool_)):
        return int(value)
    if isinstance(value, (int, float, np.number)):
        return value
    if isinstance(value, np.ndarray):
        if value.dtype.kind not in _NUMERIC_KINDS:
            raise TidyTypeError(f"non-numeric argument to `{label}`")
        return value.astype(int) if value.dtype.kind == "b" else value
    if isinstance(value, (list, tuple)) and all(
        isinstance(v, (bool, int, float, np.number)) for v in value
    ):
        return np.asarray(value)
    raise TidyTypeError(f"non-numeric argument to `{label}`: {format_value(value)}")


def _vector(value: Any) -> np.ndarray:
    if value is None:
        return np.asarray([])
    return np.atleast_1d(np.asarray(value))


def _is_atom(value: Any) -> bool:
    return isinstance(value, (bool, int, float, str, np.generic))


# -------------------------------
# Arithmetic
# -------------------------------
def _binary_math(ufunc, label: str):
    def fn(e1, e2=_UNSET):
        if e2 is _UNSET:
            raise ArityOrBindingError(f"`{label}` requires two arguments")
        with np.errstate(divide="ignore", invalid="ignore"):
            return unbox(ufunc(_numeric(e1, label), _numeric(e2, label)))
    fn.__name__ = label
    return fn


def plus(e1, e2=_UNSET) -> Value:
    """Binary addition, or unary plus with one argument."""
    if e2 is _UNSET:
        return unbox(_numeric(e1, "+"))
    return unbox(np.add(_numeric(e1, "+"), _numeric(e2, "+")))


def minus(e1, e2=_UNSET) -> Value:
    """Binary subtraction, or negation with one argument."""
    if e2 is _UNSET:
        return unbox(np.negative(_numeric(e1, "-")))
    return unbox(np.subtract(_numeric(e1, "-"), _numeric(e2, "-")))


times = _binary_math(np.multiply, "*")
divide = _binary_math(np.true_divide, "/")
power = _binary_math(np.float_power, "^")
modulo = _binary_math(np.mod, "%%")
int_divide = _binary_math(np.floor_divide, "%/%")


def _unary_math(ufunc, label: str):
    def fn(x):
        with np.errstate(divide="ignore", invalid="ignore"):
            return unbox(ufunc(_numeric(x, label)))
    fn.__name__ = label
    return fn


sqrt = _unary_math(np.sqrt, "sqrt")
absolute = _unary_math(np.abs, "abs")
exp = _unary_math(np.exp, "exp")


def log(x, base=_UNSET) -> Value:
    with np.errstate(divide="ignore", invalid="ignore"):
        result = np.log(_numeric(x, "log"))
        if base is not _UNSET:
            result = result / np.log(_numeric(base, "log"))
    return unbox(result)


def round_(x, digits=0) -> Value:
    return unbox(np.round(_numeric(x, "round"), int(digits)))


def seq_colon(start, end) -> np.ndarray:
    """`from:to`, counting down when `to` is smaller."""
    start, end = unbox(_numeric(start, ":")), unbox(_numeric(end, ":"))
    if isinstance(start, np.ndarray) or isinstance(end, np.ndarray):
        raise TidyTypeError("`:` expects single numbers")
    step = 1 if end >= start else -1
    count = int(abs(end - start) // 1) + 1
    values = start + step * np.arange(count)
    if float(start).is_integer():
        return values.astype(int)
    return values


# -------------------------------
# Comparison and logic
# -------------------------------
def _comparison(op, label: str):
    def fn(e1, e2):
        try:
            if isinstance(e1, np.ndarray) or isinstance(e2, np.ndarray):
                return op(np.asarray(e1), np.asarray(e2))
            return unbox(op(e1, e2))
        except (TypeError, ValueError) as exc:
            raise TidyTypeError(f"comparison `{label}` is not possible: {exc}") from exc
    fn.__name__ = label
    return fn


def logical_not(x) -> Value:
    if isinstance(x, np.ndarray):
        return np.logical_not(_numeric(x, "!"))
    return not _numeric(x, "!")


def logical_and(e1, e2) -> Value:
    return unbox(np.logical_and(_numeric(e1, "&"), _numeric(e2, "&")))


def logical_or(e1, e2) -> Value:
    return unbox(np.logical_or(_numeric(e1, "|"), _numeric(e2, "|")))


# -------------------------------
# Vectors and lists
# -------------------------------
@raw_args
def combine(args: list[Arg]) -> Value:
    """c(...): flatten the arguments into one vector; NULLs vanish."""
    items: list[Any] = []
    for _, value in args:
        if value is None:
            continue
        if isinstance(value, np.ndarray):
            items.extend(value.reshape(-1).tolist())
        elif isinstance(value, (list, tuple)) and not isinstance(value, Arg):
            items.extend(value)
        else:
            items.append(value)
    if not items:
        return None
    if all(_is_atom(i) for i in items):
        return np.asarray(items)
    return items


@raw_args
def list_builtin(args: list[Arg]) -> Value:
    """list(...): a Python list, a dict when every element is named."""
    return pack_args(args)


def length(x) -> int:
    if x is None:
        return 0
    if isinstance(x, np.ndarray):
        return int(x.size)
    if isinstance(x, (list, tuple, Mapping)):
        return len(x)
    if isinstance(x, Call):
        return len(x.args) + 1
    return 1


def _reduction(reducer, label: str, empty: Any):
    def fn(*values, **options):
        unknown = [k for k in options if k != "na.rm"]
        if unknown:
            raise ArityOrBindingError(f"unused argument ({unknown[0]} = ...) in call to {label}")
        arrays = [_vector(_numeric(v, label)) for v in values if v is not None]
        data = np.concatenate(arrays) if arrays else np.asarray([])
        if options.get("na.rm"):
            data = data[~np.isnan(data.astype(float))]
        if data.size == 0:
            return empty
        return unbox(reducer(data))
    fn.__name__ = label
    return fn


sum_ = _reduction(np.sum, "sum", 0)
mean = _reduction(np.mean, "mean", float("nan"))
min_ = _reduction(np.min, "min", float("inf"))
max_ = _reduction(np.max, "max", float("-inf"))


def subset2(x, i) -> Value:
    """`x[[i]]`: one element, by 1-based position or by name."""
    return get_element(x, i)


# -------------------------------
# Strings and predicates
# -------------------------------
def _as_text(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, Symbol):
        return value.name
    if isinstance(value, Node):
        return deparse(value)
    scalar = format_scalar(value)
    return scalar if scalar is not None else format_value(value)


def _text_items(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, np.ndarray):
        return [_as_text(v) for v in value.reshape(-1).tolist()]
    if isinstance(value, (list, tuple)):
        return [_as_text(v) for v in value]
    return [_as_text(value)]


def paste(*values, sep=" ", collapse=None) -> Value:
    """Element-wise concatenation with recycling, as in R."""
    columns = [items for items in (_text_items(v) for v in values) if items]
    if not columns:
        return "" if collapse is not None else np.asarray([], dtype=str)
    width = max(len(c) for c in columns)
    rows = [sep.join(c[i % len(c)] for c in columns) for i in range(width)]
    if collapse is not None:
        return collapse.join(rows)
    return rows[0] if width == 1 else np.asarray(rows)


def paste0(*values, collapse=None) -> Value:
    return paste(*values, sep="", collapse=collapse)


def identical(x, y) -> bool:
    return values_identical(x, y)


def is_null(x) -> bool:
    return x is None


def stop(*message) -> None:
    raise EvaluationError("".join(_as_text(m) for m in message))


def print_builtin(x) -> Value:
    """Print the deparsed value; returns it unchanged."""
    text = format_value(x)
    logger.debug("print: %s", text)
    print(text)
    return x


# -------------------------------
# Metaprogramming
# -------------------------------
def syms_builtin(x) -> list[Symbol]:
    if isinstance(x, np.ndarray):
        x = x.reshape(-1).tolist()
    if isinstance(x, Mapping):
        x = list(x.values())
    return syms(x)


@raw_args
def call2(args: list[Arg]) -> Call:
    """call2(fn, ...): `fn` is a name, a symbol or a function value."""
    if not args or args[0].name not in (None, ".fn"):
        raise ArityOrBindingError("call2() needs the function as its first argument")
    return build_call(args[0].value, [(a.name, a.value) for a in args[1:]])


def expr_text(x) -> str:
    return deparse(x)


def new_environment_builtin(data=None, parent=None) -> Environment:
    if data is not None and not isinstance(data, Mapping):
        raise TidyTypeError("`data` must be a named list")
    return new_environment(parent, data)


def env_parent(env) -> Value:
    if not isinstance(env, Environment):
        raise TidyTypeError(f"`env` must be an environment, not {type(env).__name__}")
    return env.parent


def _matches_name(x: Any, name: Any) -> bool:
    if name is None:
        return True
    wanted = set(_text_items(name))
    return isinstance(x, Symbol) and x.name in wanted


def is_call(x, name=None) -> bool:
    return isinstance(x, Call) and (name is None or _matches_name(x.fn, name))


def is_symbol(x, name=None) -> bool:
    return isinstance(x, Symbol) and _matches_name(x, name)


def as_string(x) -> str:
    if isinstance(x, Symbol):
        return x.name
    if isinstance(x, str):
        return x
    raise TidyTypeError(f"Can't convert {format_value(x)} to a string")


BUILTINS: dict[str, Any] = {
    "+": plus,
    "-": minus,
    "*": times,
    "/": divide,
    "^": power,
    "%%": modulo,
    "%/%": int_divide,
    "==": _comparison(operator.eq, "=="),
    "!=": _comparison(operator.ne, "!="),
    "<": _comparison(operator.lt, "<"),
    ">": _comparison(operator.gt, ">"),
    "<=": _comparison(operator.le, "<="),
    ">=": _comparison(operator.ge, ">="),
    "!": logical_not,
    "&": logical_and,
    "|": logical_or,
    ":": seq_colon,
    "[[": subset2,
    "c": combine,
    "list": list_builtin,
    "length": length,
    "sum": sum_,
    "mean": mean,
    "min": min_,
    "max": max_,
    "sqrt": sqrt,
    "abs": absolute,
    "exp": exp,
    "log": log,
    "round": round_,
    "paste": paste,
    "paste0": paste0,
    "identical": identical,
    "is.null": is_null,
    "stop": stop,
    "print": print_builtin,
    "sym": sym,
    "syms": syms_builtin,
    "call2": call2,
    "new_quosure": new_quosure,
    "quo_get_expr": quo_get_expr,
    "quo_get_env": quo_get_env,
    "quo_squash": quo_squash,
    "is_quosure": is_quosure,
    "expr_text": expr_text,
    "new_environment": new_environment_builtin,
    "env_parent": env_parent,
    "is_call": is_call,
    "is_symbol": is_symbol,
    "as_string": as_string,
    "pi": float(np.pi),
}


def register(env: Environment) -> None:
    """Register all builtin functions and special forms into the given environment."""
    env.update(BUILTINS)
    env.update({name: SpecialForm(name, handler) for name, handler in SPECIAL_FORMS.items()})
