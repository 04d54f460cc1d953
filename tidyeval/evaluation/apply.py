"""Application engine.

This module centralizes function application semantics for the evaluator:
- Special forms receive the call's argument nodes untouched.
- Closures receive lazy promises, bound to their formals in a fresh frame
  whose parent is the closure environment; the body runs without a mask.
- Python callables (builtins and host functions) receive evaluated values,
  positionally and by keyword, after a signature check.

Keeping this logic in one place prevents duplication between the evaluator
and the builtins that call functions.
"""

from __future__ import annotations

import inspect
import logging
from typing import Any

from tidyeval import EvaluatorFn, Value
from tidyeval.errors import ArityOrBindingError, NotCallable, TidyError
from tidyeval.quasiquote import resolve_name
from tidyeval.types.closure import Closure, Dots, Promise
from tidyeval.types.environment import Environment
from tidyeval.types.nodes import Arg, Unquote
from tidyeval.types.special_form import SpecialForm
from tidyeval.types.symbol import DOTS

logger = logging.getLogger(__name__)


def raw_args(fn):
    """Mark a builtin as taking the ordered list of Args instead of *args/**kwargs."""
    fn._tidy_raw_args = True
    return fn


def expand_dots(args: tuple[Arg, ...], env: Environment) -> list[Arg]:
    """Replace a `...` argument by the promises it stands for, and resolve
    `!!name := value` argument names in the calling frame."""
    expanded: list[Arg] = []
    for arg in args:
        if isinstance(arg.name, Unquote):
            arg = Arg(resolve_name(arg.name, env), arg.value)
        if arg.name is None and arg.value == DOTS:
            dots = env.find(DOTS)
            if dots is None or not isinstance(dots.vars[DOTS], Dots):
                raise TidyError("'...' used in an incorrect context")
            expanded.extend(dots.vars[DOTS])
            continue
        expanded.append(arg)
    return expanded


def apply_closure(fn: Closure, args: list[Arg], evaluate_fn: EvaluatorFn) -> Value:
    """Apply a Closure to promise arguments."""
    frame = fn.extend_env(args)
    logger.debug("Applying closure %s with %d argument(s)", fn.name or "<anonymous>", len(args))
    return evaluate_fn(fn.body, frame, None)


def _check_signature(fn: Any, positional: list, keywords: dict, label: str) -> None:
    try:
        signature = inspect.signature(fn)
    except (TypeError, ValueError):
        return  # some C builtins have no introspectable signature
    try:
        signature.bind(*positional, **keywords)
    except TypeError as exc:
        raise ArityOrBindingError(f"In call to {label}: {exc}") from exc


def apply_builtin(fn: Any, args: list[Arg], label: str = "<fn>") -> Value:
    """Apply a Python callable to already evaluated arguments."""
    if getattr(fn, "_tidy_raw_args", False):
        return fn(list(args))
    positional: list = []
    keywords: dict[str, Any] = {}
    for name, value in args:
        if name is None:
            positional.append(value)
        elif name in keywords:
            raise ArityOrBindingError(f"argument '{name}' supplied more than once in call to {label}")
        else:
            keywords[name] = value
    _check_signature(fn, positional, keywords, label)
    return fn(*positional, **keywords)


def apply(
    fn: Any,
    args: tuple[Arg, ...] | list[Arg],
    env: Environment,
    mask,
    evaluate_fn: EvaluatorFn,
    label: str = "<fn>",
) -> Value:
    """Apply `fn` to unevaluated argument nodes from a call in `env`.

    - SpecialForm: handed the nodes as they are.
    - Closure: each node becomes a promise over (node, env, mask).
    - Python callable: each node is evaluated left to right first.
    - Otherwise NotCallable.
    """
    if isinstance(fn, SpecialForm):
        logger.debug("Dispatching special form %s", fn.name)
        return fn(tuple(args), env, mask, evaluate_fn)
    if isinstance(fn, Closure):
        promises = [
            a if isinstance(a.value, Promise) else Arg(a.name, Promise(a.value, env, mask))
            for a in expand_dots(tuple(args), env)
        ]
        return apply_closure(fn, promises, evaluate_fn)
    if callable(fn):
        values = [
            Arg(a.name, a.value.force() if isinstance(a.value, Promise) else evaluate_fn(a.value, env, mask))
            for a in expand_dots(tuple(args), env)
        ]
        return apply_builtin(fn, values, label)
    raise NotCallable(f"attempt to apply non-function: `{label}` is {type(fn).__name__}")
