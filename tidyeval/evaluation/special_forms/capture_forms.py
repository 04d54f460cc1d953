from tidyeval import EvaluatorFn, Value
from tidyeval.capture import capture_argument, capture_argument_with_env, capture_dots
from tidyeval.errors import ArityOrBindingError, TidyTypeError
from tidyeval.types.closure import Dots, Promise
from tidyeval.types.nodes import MISSING, pack_args
from tidyeval.types.symbol import DOTS, Symbol


def _argument_name(args, label: str) -> str:
    if len(args) != 1 or args[0].name is not None:
        raise ArityOrBindingError(f"`{label}()` takes exactly one argument name")
    target = args[0].value
    if not isinstance(target, Symbol) or target == DOTS:
        raise TidyTypeError(f"`{label}()` expects the name of an argument, not `{target}`")
    return target.name


def _dots_only(args, label: str) -> None:
    if len(args) != 1 or args[0].name is not None or args[0].value != DOTS:
        raise ArityOrBindingError(f"`{label}()` must be called as {label}(...)")


def enexpr_form(args, env, mask, evaluate_fn: EvaluatorFn) -> Value:
    return capture_argument(env, _argument_name(args, "enexpr"))


def enquo_form(args, env, mask, evaluate_fn: EvaluatorFn) -> Value:
    return capture_argument_with_env(env, _argument_name(args, "enquo"))


def enexprs_form(args, env, mask, evaluate_fn: EvaluatorFn) -> Value:
    _dots_only(args, "enexprs")
    return pack_args(capture_dots(env, with_env=False))


def enquos_form(args, env, mask, evaluate_fn: EvaluatorFn) -> Value:
    _dots_only(args, "enquos")
    return pack_args(capture_dots(env, with_env=True))


def missing_form(args, env, mask, evaluate_fn: EvaluatorFn) -> Value:
    if len(args) != 1 or not isinstance(args[0].value, Symbol):
        raise ArityOrBindingError("`missing()` takes exactly one argument name")
    symbol = args[0].value
    if not env.has(symbol, inherit=False):
        raise TidyTypeError(f"'missing' can only be used for arguments; `{symbol.name}` is not one")
    value = env.get_local(symbol)
    if isinstance(value, Dots):
        return len(value) == 0
    if isinstance(value, Promise):
        return not value.supplied
    return value is MISSING
