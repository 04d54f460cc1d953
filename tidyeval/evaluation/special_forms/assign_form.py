from tidyeval import EvaluatorFn, Value
from tidyeval.errors import ArityOrBindingError, TidyTypeError
from tidyeval.types.closure import Closure
from tidyeval.types.nodes import Constant
from tidyeval.types.symbol import Symbol


def assign_form(args, env, mask, evaluate_fn: EvaluatorFn) -> Value:
    if len(args) != 2:
        raise ArityOrBindingError("assignment expects a target and a value")
    target = args[0].value
    if isinstance(target, Symbol):
        name = target.name
    elif isinstance(target, Constant) and isinstance(target.value, str):
        name = target.value
    else:
        raise TidyTypeError(f"invalid assignment target `{target}`")
    value = evaluate_fn(args[1].value, env, mask)
    if isinstance(value, Closure) and value.name is None:
        value.name = name
    # Always the current lexical frame: the mask is read-only
    env.define(name, value)
    return value
