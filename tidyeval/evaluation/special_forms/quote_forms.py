from tidyeval import EvaluatorFn, Value
from tidyeval.errors import ArityOrBindingError, TidyError
from tidyeval.quasiquote import quasiquote
from tidyeval.types.bind import match_form_args
from tidyeval.types.nodes import Arg, Call, pack_args
from tidyeval.types.quosure import Quosure
from tidyeval.types.symbol import Symbol


def _quasiquote_args(args, env) -> list[Arg]:
    # Quasiquote the arguments as one call so that `!!!` and `:=` work
    return list(quasiquote(Call(Symbol("list"), args), env).args)


def quote_form(args, env, mask, evaluate_fn: EvaluatorFn) -> Value:
    bound = match_form_args(("expr",), args, "quote", required=("expr",))
    return bound["expr"]


def expr_form(args, env, mask, evaluate_fn: EvaluatorFn) -> Value:
    bound = match_form_args(("expr",), args, "expr", required=("expr",))
    return quasiquote(bound["expr"], env)


def quo_form(args, env, mask, evaluate_fn: EvaluatorFn) -> Value:
    bound = match_form_args(("expr",), args, "quo", required=("expr",))
    return Quosure(quasiquote(bound["expr"], env), env)


def exprs_form(args, env, mask, evaluate_fn: EvaluatorFn) -> Value:
    return pack_args(_quasiquote_args(args, env))


def quos_form(args, env, mask, evaluate_fn: EvaluatorFn) -> Value:
    return pack_args(
        Arg(a.name, a.value if isinstance(a.value, Quosure) else Quosure(a.value, env))
        for a in _quasiquote_args(args, env)
    )


def tilde_form(args, env, mask, evaluate_fn: EvaluatorFn) -> Value:
    # A one-sided formula is a quosure written with `~`
    if len(args) != 1 or args[0].name is not None:
        if len(args) == 2:
            raise TidyError("Two-sided formulas are not supported")
        raise ArityOrBindingError("`~` expects a single right-hand side")
    return Quosure(args[0].value, env)
