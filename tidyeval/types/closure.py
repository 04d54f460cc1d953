"""Closures, promises and `...` for functions defined in evaluated code."""

from __future__ import annotations

import logging
from typing import Any, Optional

from tidyeval import Value
from tidyeval.errors import TidyError
from tidyeval.types.environment import Environment
from tidyeval.types.nodes import Arg, Call, Node, PairList
from tidyeval.types.symbol import Symbol

logger = logging.getLogger(__name__)


class Promise:
    """An argument expression waiting to be evaluated in its caller's frame.

    `supplied` is False for promises created from a formal's default, which
    argument capture refuses to hand out.
    """

    __slots__ = ("expr", "env", "mask", "value", "forced", "supplied", "_forcing")

    def __init__(self, expr: Node, env: Environment, mask=None, supplied: bool = True):
        self.expr = expr
        self.env = env
        self.mask = mask
        self.value: Value = None
        self.forced = False
        self.supplied = supplied
        self._forcing = False

    def force(self) -> Value:
        if self.forced:
            return self.value
        if self._forcing:
            raise TidyError(
                "promise already under evaluation: recursive default argument reference or earlier problems?"
            )
        from tidyeval.evaluation.evaluator import evaluate0
        self._forcing = True
        try:
            logger.debug("Forcing promise %r", self.expr)
            self.value = evaluate0(self.expr, self.env, self.mask)
        finally:
            self._forcing = False
        self.forced = True
        return self.value

    def __repr__(self) -> str:
        state = "forced" if self.forced else "pending"
        return f"<promise {state}: {self.expr}>"


class Dots:
    """The arguments collected by a `...` formal, in call order."""

    __slots__ = ("args",)

    def __init__(self, args: list[Arg] | tuple[Arg, ...] = ()):
        self.args: tuple[Arg, ...] = tuple(args)

    def __len__(self) -> int:
        return len(self.args)

    def __iter__(self):
        return iter(self.args)

    def __repr__(self) -> str:
        return f"<dots: {len(self.args)} argument(s)>"


class Closure:
    """A function value: formals, body, and the environment it closes over."""

    __slots__ = ("formals", "body", "env", "name")

    def __init__(self, formals: PairList, body: Node, env: Environment, name: Optional[str] = None):
        self.formals: PairList = formals
        self.body: Node = body
        self.env: Environment = env
        self.name = name

    def definition(self) -> Call:
        return Call(Symbol("function"), [self.formals, self.body])

    def __str__(self) -> str:
        from tidyeval.printer import deparse
        return deparse(self.definition())

    def __repr__(self) -> str:
        return str(self)

    # --- Evaluation helpers ---
    def extend_env(self, args: list[Arg]) -> Environment:
        """
        Bind the given promises to this closure's formals and return the new
        frame (whose parent is the closure env) for evaluating the body.
        """
        from tidyeval.types.bind import bind_arguments
        return bind_arguments(self.formals, list(args), self.env, label=self.name)


def force_value(value: Any) -> Any:
    if isinstance(value, Promise):
        return value.force()
    return value
