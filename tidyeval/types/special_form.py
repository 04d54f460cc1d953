from __future__ import annotations

from typing import Callable

from tidyeval import EvaluatorFn, Value

# handler(args, env, mask, evaluate_fn) -> Value; args are left unevaluated
FormHandler = Callable[..., Value]


class SpecialForm:
    """A builtin that receives its arguments as unevaluated nodes.

    Special forms live in the base environment like any other function, so a
    child environment can shadow them.
    """

    __slots__ = ("name", "handler")

    def __init__(self, name: str, handler: FormHandler):
        self.name = name
        self.handler = handler

    def __call__(self, args, env, mask, evaluate_fn: EvaluatorFn) -> Value:
        return self.handler(args, env, mask, evaluate_fn)

    def __repr__(self) -> str:
        return f"<special form: {self.name}>"
