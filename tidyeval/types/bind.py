from __future__ import annotations

from typing import Any, Sequence

from tidyeval.errors import ArityOrBindingError
from tidyeval.types.closure import Dots, Promise
from tidyeval.types.environment import Environment
from tidyeval.types.nodes import MISSING, Arg, PairList, Unquote

DOTS_NAME = "..."


def match_arguments(
    formals: Sequence[str],
    supplied: Sequence[Arg],
    label: str | None = None,
) -> tuple[dict[str, Any], list[Arg]]:
    """
    Single source of truth for argument matching.

    Supports:
    - Exact matching of named arguments to formal names
    - Positional filling of the remaining formals, in order, up to `...`
    - `...` collecting whatever is left (named or not); formals after `...`
      can only be matched by name

    Returns (matched, dots) where matched maps formal name -> supplied value
    and dots holds the leftover arguments in call order. Raises
    ArityOrBindingError for unused or doubly matched arguments.
    """
    where = f" in call to {label}" if label else ""
    has_dots = DOTS_NAME in formals
    matched: dict[str, Any] = {}
    leftover: list[tuple[int, Arg]] = []

    # Pass 1: exact names
    for index, arg in enumerate(supplied):
        if isinstance(arg.name, Unquote):
            raise ArityOrBindingError(f"Unresolved `!!` argument name{where}")
        if arg.name and arg.name != DOTS_NAME and arg.name in formals:
            if arg.name in matched:
                raise ArityOrBindingError(
                    f"formal argument \"{arg.name}\" matched by multiple actual arguments{where}"
                )
            matched[arg.name] = arg.value
        else:
            leftover.append((index, arg))

    # Pass 2: positional, up to `...`
    positional_formals = []
    for f in formals:
        if f == DOTS_NAME:
            break
        if f not in matched:
            positional_formals.append(f)

    dots: list[Arg] = []
    for index, arg in leftover:
        if arg.name is None and positional_formals:
            matched[positional_formals.pop(0)] = arg.value
        elif has_dots:
            dots.append(arg)
        elif arg.name is not None:
            raise ArityOrBindingError(f"unused argument ({arg.name} = ...){where}")
        else:
            raise ArityOrBindingError(f"unused argument (position {index + 1}){where}")

    return matched, dots


def bind_arguments(
    formals: PairList,
    supplied: list[Arg],
    closure_env: Environment,
    label: str | None = None,
) -> Environment:
    """
    Match promises to formals and return a new Environment whose parent is
    the closure_env, populated with the bindings for evaluating the body.

    Unsupplied formals with a default get a promise over the default that is
    evaluated lazily in the new frame; those without one are bound to MISSING.
    """
    local_env = Environment(parent=closure_env)
    matched, dots = match_arguments(formals.names, supplied, label)

    for name, default in formals.entries:
        if name == DOTS_NAME:
            local_env.define(DOTS_NAME, Dots(dots))
        elif name in matched:
            local_env.define(name, matched[name])
        elif default is MISSING:
            local_env.define(name, MISSING)
        else:
            local_env.define(name, Promise(default, local_env, None, supplied=False))

    return local_env


def match_form_args(
    formals: Sequence[str],
    supplied: Sequence[Arg],
    label: str,
    required: Sequence[str] = (),
) -> dict[str, Any]:
    """Argument matching for special forms: unevaluated nodes by formal name."""
    matched, _ = match_arguments(formals, supplied, label)
    missing = [f for f in required if f not in matched]
    if missing:
        raise ArityOrBindingError(
            f"argument \"{missing[0]}\" is missing, with no default in call to {label}"
        )
    return matched
