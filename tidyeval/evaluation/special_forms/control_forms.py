import numpy as np

from tidyeval import EvaluatorFn, Value
from tidyeval.errors import ArityOrBindingError, TidyTypeError


def as_flag(value, label: str = "condition") -> bool:
    """Collapse a length-one logical (or number) to a Python bool."""
    if isinstance(value, np.ndarray):
        if value.size == 0:
            raise TidyTypeError(f"{label}: argument is of length zero")
        if value.size > 1:
            raise TidyTypeError(f"{label}: the condition has length > 1")
        value = value.reshape(-1)[0]
    if isinstance(value, np.generic):
        value = value.item()
    if value is None:
        raise TidyTypeError(f"{label}: argument is of length zero")
    if isinstance(value, (bool, int, float)):
        if isinstance(value, float) and value != value:
            raise TidyTypeError(f"{label}: missing value where TRUE/FALSE needed")
        return bool(value)
    raise TidyTypeError(f"{label}: argument is not interpretable as logical")


def if_form(args, env, mask, evaluate_fn: EvaluatorFn) -> Value:
    if len(args) not in (2, 3):
        raise ArityOrBindingError("`if` expects a condition, a consequent and an optional alternative")
    if as_flag(evaluate_fn(args[0].value, env, mask), "if"):
        return evaluate_fn(args[1].value, env, mask)
    if len(args) == 3:
        return evaluate_fn(args[2].value, env, mask)
    return None


def block_form(args, env, mask, evaluate_fn: EvaluatorFn) -> Value:
    result = None
    for arg in args:
        result = evaluate_fn(arg.value, env, mask)
    return result


def paren_form(args, env, mask, evaluate_fn: EvaluatorFn) -> Value:
    if len(args) != 1:
        raise ArityOrBindingError("`(` expects exactly one expression")
    return evaluate_fn(args[0].value, env, mask)


def and_form(args, env, mask, evaluate_fn: EvaluatorFn) -> Value:
    if len(args) != 2:
        raise ArityOrBindingError("`&&` expects two arguments")
    if not as_flag(evaluate_fn(args[0].value, env, mask), "&&"):
        return False
    return as_flag(evaluate_fn(args[1].value, env, mask), "&&")


def or_form(args, env, mask, evaluate_fn: EvaluatorFn) -> Value:
    if len(args) != 2:
        raise ArityOrBindingError("`||` expects two arguments")
    if as_flag(evaluate_fn(args[0].value, env, mask), "||"):
        return True
    return as_flag(evaluate_fn(args[1].value, env, mask), "||")
