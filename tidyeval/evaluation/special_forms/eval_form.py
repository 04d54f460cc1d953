from collections.abc import Mapping

from tidyeval import EvaluatorFn, Value
from tidyeval.errors import TidyTypeError
from tidyeval.types.bind import match_form_args
from tidyeval.types.data_mask import as_data_mask
from tidyeval.types.environment import Environment
from tidyeval.types.nodes import Node
from tidyeval.types.quosure import Quosure


def _target_env(value, default: Environment) -> Environment:
    if value is None:
        return default
    if not isinstance(value, Environment):
        raise TidyTypeError(f"`env` must be an environment, not {type(value).__name__}")
    return value


def eval_form(args, env, mask, evaluate_fn: EvaluatorFn) -> Value:
    """eval(expr, env): evaluate a computed expression.

    A list for `env` acts as a data mask in front of the calling frame.
    """
    bound = match_form_args(("expr", "env"), args, "eval", required=("expr",))
    value = evaluate_fn(bound["expr"], env, mask)
    where = evaluate_fn(bound["env"], env, mask) if "env" in bound else None
    if not isinstance(value, Node):
        return value
    if isinstance(where, Mapping):
        target, data = env, as_data_mask(where)
    else:
        target, data = _target_env(where, env), None
    if isinstance(value, Quosure):
        return evaluate_fn(value.expr, value.env, data)
    return evaluate_fn(value, target, data)


def eval_tidy_form(args, env, mask, evaluate_fn: EvaluatorFn) -> Value:
    """eval_tidy(expr, data = NULL, env = current_env())"""
    bound = match_form_args(("expr", "data", "env"), args, "eval_tidy", required=("expr",))
    value = evaluate_fn(bound["expr"], env, mask)
    data = evaluate_fn(bound["data"], env, mask) if "data" in bound else None
    where = evaluate_fn(bound["env"], env, mask) if "env" in bound else None
    if not isinstance(value, Node):
        return value
    if isinstance(value, Quosure):
        return evaluate_fn(value.expr, value.env, as_data_mask(data))
    return evaluate_fn(value, _target_env(where, env), as_data_mask(data))
