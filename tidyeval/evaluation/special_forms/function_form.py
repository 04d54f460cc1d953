from tidyeval import EvaluatorFn, Value
from tidyeval.errors import ArityOrBindingError, TidyTypeError
from tidyeval.types.closure import Closure
from tidyeval.types.nodes import PairList


def function_form(args, env, mask, evaluate_fn: EvaluatorFn) -> Value:
    if len(args) != 2:
        raise ArityOrBindingError("`function` expects a formal argument list and a body")
    formals, body = args[0].value, args[1].value
    if not isinstance(formals, PairList):
        raise TidyTypeError("invalid formal argument list for `function`")
    # The closure captures the lexical env only; the mask does not follow it
    return Closure(formals, body, env)
