"""Programmatic construction of expressions."""

from __future__ import annotations

from typing import Any, Iterable

from tidyeval.errors import TidyTypeError
from tidyeval.types.closure import Closure
from tidyeval.types.nodes import Arg, Call, Constant, Node, as_node
from tidyeval.types.symbol import Symbol


def sym(name: str | Symbol) -> Symbol:
    """Turn a string into a symbol without parsing it: `sym(")")` is the name `)`."""
    if isinstance(name, Symbol):
        return name
    if not isinstance(name, str):
        raise TidyTypeError(f"Can't convert a {type(name).__name__} to a symbol")
    return Symbol(name)


def syms(names: Iterable[str | Symbol]) -> list[Symbol]:
    if isinstance(names, str):
        names = [names]
    return [sym(n) for n in names]


def as_callee(fn: Any) -> Any:
    if isinstance(fn, str):
        return Symbol(fn)
    if isinstance(fn, Closure):
        # Inlined function value: printed as `(function(x) ...)(args)`
        return Constant(fn)
    if isinstance(fn, Node) or callable(fn):
        return fn
    raise TidyTypeError(f"`fn` must be a string, an expression or a function, not {type(fn).__name__}")


def build_call(callee: Any, args: Iterable[Any] = ()) -> Call:
    """Build a call from a callee and an ordered argument list.

    Each item is an Arg, a (name, value) pair whose name is a string (or
    None), or a bare positional value. Non-node values become Constants.
    """
    built = []
    for item in args:
        if isinstance(item, Arg):
            name, value = item
        elif isinstance(item, tuple) and len(item) == 2 and (item[0] is None or isinstance(item[0], str)):
            name, value = item
        else:
            name, value = None, item
        built.append(Arg(name, as_node(value)))
    return Call(as_callee(callee), built)


def call2(fn: Any, *args: Any, **kwargs: Any) -> Call:
    """`call2("f", 1, x = y)`: positional arguments first, then keywords."""
    built = [Arg(None, as_node(a)) for a in args]
    built.extend(Arg(k, as_node(v)) for k, v in kwargs.items())
    return Call(as_callee(fn), built)
