"""Quosures: an expression bundled with the environment it was written in."""

from __future__ import annotations

from typing import Any

from tidyeval.errors import TidyTypeError
from tidyeval.types.environment import Environment
from tidyeval.types.nodes import Arg, Call, Node, PairList, as_node


class Quosure(Node):
    """Immutable (expr, env) pair.

    A quosure is itself a Node so it can be embedded in other trees; the
    evaluator always resolves its expression against the bundled env.
    """

    __slots__ = ("expr", "env")

    def __init__(self, expr: Any, env: Environment):
        if not isinstance(env, Environment):
            raise TidyTypeError(f"A quosure needs an environment, not {type(env).__name__}")
        object.__setattr__(self, "expr", as_node(expr))
        object.__setattr__(self, "env", env)

    def __eq__(self, other) -> bool:
        return isinstance(other, Quosure) and self.env is other.env and self.expr == other.expr

    def __hash__(self) -> int:
        return hash(("quosure", self.expr, id(self.env)))

    def __repr__(self) -> str:
        from tidyeval.printer import deparse
        return f"<quosure>\nexpr: ^{deparse(self.expr)}\nenv:  {self.env.label()}"


def new_quosure(expr: Any, env: Environment) -> Quosure:
    return Quosure(expr, env)


def is_quosure(x: Any) -> bool:
    return isinstance(x, Quosure)


def quo_get_expr(quo: Quosure) -> Node:
    if not isinstance(quo, Quosure):
        raise TidyTypeError("`quo` must be a quosure")
    return quo.expr


def quo_get_env(quo: Quosure) -> Environment:
    if not isinstance(quo, Quosure):
        raise TidyTypeError("`quo` must be a quosure")
    return quo.env


def quo_set_expr(quo: Quosure, expr: Any) -> Quosure:
    return Quosure(expr, quo_get_env(quo))


def quo_squash(x: Any) -> Node:
    """Strip every quosure from a tree, keeping only the expressions.

    Environments are lost: the result is only safe to evaluate where every
    name means the same thing.
    """
    if isinstance(x, Quosure):
        return quo_squash(x.expr)
    if isinstance(x, Call):
        fn = quo_squash(x.fn) if isinstance(x.fn, Node) else x.fn
        return Call(fn, [Arg(a.name, quo_squash(a.value)) for a in x.args])
    if isinstance(x, PairList):
        return PairList([Arg(a.name, quo_squash(a.value)) for a in x.entries])
    return as_node(x)
