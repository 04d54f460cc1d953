"""Capturing code without evaluating it.

Direct capture reads code written at the capture site (`expr`, `quo`).
Argument capture recovers the expression a caller supplied for a formal of
a closure, from that closure's frame (`capture_argument`, the engine behind
`enexpr()` / `enquo()`).
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from tidyeval.errors import TidyError, TidyTypeError, UnboundArgument
from tidyeval.quasiquote import quasiquote, unquote_value
from tidyeval.reader.parser import parse_expr
from tidyeval.types.closure import Dots, Promise
from tidyeval.types.environment import Environment, as_symbol
from tidyeval.types.nodes import MISSING, Arg, Node, Unquote, as_node, contains_unquote, unpack_args
from tidyeval.types.quosure import Quosure
from tidyeval.types.symbol import DOTS

logger = logging.getLogger(__name__)


def expr(source: str | Node, env: Optional[Environment] = None) -> Node:
    """Capture `source` as a tree, resolving `!!` against `env` when given."""
    node = parse_expr(source) if isinstance(source, str) else source
    if not isinstance(node, Node):
        raise TidyTypeError(f"Expected source text or an expression, not {type(source).__name__}")
    if env is None:
        if contains_unquote(node):
            raise TidyError("`!!` needs an environment to evaluate its operand in")
        return node
    return quasiquote(node, env)


def exprs(*sources: str | Node, env: Optional[Environment] = None) -> list[Node]:
    return [expr(s, env) for s in sources]


def quo(source: str | Node, env: Environment) -> Quosure:
    """Capture `source` together with the environment it belongs to."""
    if not isinstance(env, Environment):
        raise TidyTypeError("`quo()` needs the environment the code was written in")
    captured = expr(source, env)
    logger.debug("Captured quosure %s in %r", captured, env)
    return Quosure(captured, env)


def _argument_promise(frame: Environment, name: str) -> Promise:
    if not isinstance(frame, Environment):
        raise TidyTypeError(f"`frame` must be an environment, not {type(frame).__name__}")
    symbol = as_symbol(name)
    if not frame.has(symbol, inherit=False):
        raise UnboundArgument(f"`{symbol.name}` is not an argument of the current function")
    value = frame.get_local(symbol)
    if value is MISSING:
        raise UnboundArgument(f"argument `{symbol.name}` was not supplied")
    if isinstance(value, Dots):
        raise UnboundArgument("`...` holds several arguments; capture them with enexprs(...) or enquos(...)")
    if not isinstance(value, Promise):
        raise UnboundArgument(f"`{symbol.name}` is not an unevaluated argument")
    if not value.supplied:
        raise UnboundArgument(f"argument `{symbol.name}` was not supplied (only its default is available)")
    if value.forced:
        raise UnboundArgument(f"argument `{symbol.name}` has already been evaluated")
    return value


def _supplied_expr(promise: Promise) -> Node:
    # `f(!!x)` in ordinary code: the marker is resolved where it was written
    if contains_unquote(promise.expr):
        return quasiquote(promise.expr, promise.env)
    return promise.expr


def _as_quosure(promise: Promise) -> Quosure:
    captured = _supplied_expr(promise)
    # Arguments injected as quosures keep their own environment
    if isinstance(captured, Quosure):
        return captured
    return Quosure(captured, promise.env)


def capture_argument(frame: Environment, name: str) -> Node:
    """The expression supplied for formal `name` of the call owning `frame`."""
    return _supplied_expr(_argument_promise(frame, name))


def capture_argument_with_env(frame: Environment, name: str) -> Quosure:
    """Like capture_argument, bundled with the caller's environment."""
    promise = _argument_promise(frame, name)
    captured = _as_quosure(promise)
    logger.debug("Captured argument %s as %s", name, captured.expr)
    return captured


def capture_dots(frame: Environment, with_env: bool = False) -> list[Arg]:
    """Every argument collected by `...` in `frame`, names preserved.

    An argument written as `!!!x` is spliced: x is evaluated in the caller's
    frame and each of its elements becomes a captured argument of its own.
    """
    if not isinstance(frame, Environment):
        raise TidyTypeError(f"`frame` must be an environment, not {type(frame).__name__}")
    dots: Any = frame.get_local(DOTS)
    if not isinstance(dots, Dots):
        raise UnboundArgument("`...` is not an argument of the current function")
    captured: list[Arg] = []
    for position, arg in enumerate(dots, start=1):
        promise = arg.value
        if promise.forced:
            raise UnboundArgument(f"argument ..{position} has already been evaluated")
        if isinstance(promise.expr, Unquote) and promise.expr.splice:
            for name, value in unpack_args(unquote_value(promise.expr, promise.env)):
                node = as_node(value)
                if with_env and not isinstance(node, Quosure):
                    node = Quosure(node, promise.env)
                captured.append(Arg(name, node))
            continue
        captured.append(Arg(arg.name, _as_quosure(promise) if with_env else _supplied_expr(promise)))
    return captured
