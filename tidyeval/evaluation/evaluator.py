"""Core evaluator.

Walks a node tree and produces a value. Bare symbols are resolved in the data
mask first (when there is one) and then through the lexical chain; the callee
of a call is always resolved through the lexical chain alone, which is what
lets an environment rebind operators while column names live in the mask.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from tidyeval import Value
from tidyeval.errors import AmbiguousReference, ArityOrBindingError, TidyError, TidyTypeError
from tidyeval.evaluation.apply import apply
from tidyeval.runtime_context import enter_evaluation, exit_evaluation
from tidyeval.types.closure import Dots, Promise
from tidyeval.types.data_mask import DataMask, EnvPronoun, as_data_mask
from tidyeval.types.environment import Environment, as_symbol
from tidyeval.types.nodes import MISSING, Call, Constant, MissingArg, Node, Unquote
from tidyeval.types.quosure import Quosure
from tidyeval.types.symbol import DATA_PRONOUN, ENV_PRONOUN, Symbol

logger = logging.getLogger(__name__)


def evaluate(node: Any, env: Optional[Environment] = None, mask: Any = None) -> Value:
    """
    Evaluate `node` in `env`, with `mask` (a DataMask or a mapping of columns)
    layered in front of it for bare symbols. A Quosure brings its own
    environment; `env` is ignored for it.
    """
    data_mask = as_data_mask(mask)
    if isinstance(node, Quosure):
        node, env = node.expr, node.env
    elif env is None:
        raise TidyTypeError("An environment is required to evaluate a bare expression")
    elif not isinstance(env, Environment):
        raise TidyTypeError(f"`env` must be an environment, not {type(env).__name__}")
    try:
        return evaluate0(node, env, data_mask)
    except RecursionError as exc:
        raise TidyError("evaluation nested too deeply: Python stack exhausted") from exc


def eval_tidy(expr: Any, data: Any = None, env: Optional[Environment] = None) -> Value:
    """Evaluate an expression or quosure behind a data mask built from `data`."""
    if not isinstance(expr, Node):
        return expr
    mask = as_data_mask(data)
    logger.debug("eval_tidy %s behind %r", expr, mask)
    return evaluate(expr, env, mask)


def evaluate0(node: Any, env: Environment, mask: Optional[DataMask] = None) -> Value:
    """
    Single evaluation step, shared with special forms as their evaluate_fn.
    """
    enter_evaluation()
    try:
        match node:
            case Constant():
                return node.value
            case Symbol():
                return resolve_symbol(node, env, mask)
            case Quosure():
                # The bundled environment replaces the caller's; the mask stays
                return evaluate0(node.expr, node.env, mask)
            case Call():
                return evaluate_call(node, env, mask)
            case Unquote():
                raise TidyError("`!!` can only be used within a quasiquoted argument such as expr() or quo()")
            case MissingArg():
                raise ArityOrBindingError("argument is missing, with no default")
        # --- Host values embedded in a tree evaluate to themselves ---
        return node
    finally:
        exit_evaluation()


def evaluate_call(call: Call, env: Environment, mask: Optional[DataMask]) -> Value:
    fn_node = call.fn
    if isinstance(fn_node, Symbol):
        # Never through the mask
        fn = resolve_lexical(fn_node, env)
        label = fn_node.name
    elif isinstance(fn_node, Node):
        fn = evaluate0(fn_node, env, mask)
        label = str(fn_node)
    else:
        fn = fn_node
        label = getattr(fn_node, "__name__", "<fn>")
    return apply(fn, call.args, env, mask, evaluate0, label)


def resolve_symbol(symbol: Symbol, env: Environment, mask: Optional[DataMask]) -> Value:
    """Bare symbol lookup: pronouns, then the mask, then the lexical chain."""
    if mask is not None:
        if symbol == DATA_PRONOUN:
            return mask.data
        if symbol == ENV_PRONOUN:
            return EnvPronoun(env)
        if symbol.name in mask:
            return mask[symbol.name]
    elif symbol == DATA_PRONOUN and not env.has(symbol):
        raise AmbiguousReference("Can't use the `.data` pronoun outside of a data mask")
    elif symbol == ENV_PRONOUN and not env.has(symbol):
        return EnvPronoun(env)
    return resolve_lexical(symbol, env)


def resolve_lexical(name: Symbol | str, env: Environment) -> Value:
    """Look `name` up through the lexical chain only, forcing promises."""
    symbol = as_symbol(name)
    value = env.lookup(symbol)
    if isinstance(value, Promise):
        return value.force()
    if value is MISSING:
        raise ArityOrBindingError(f"argument \"{symbol.name}\" is missing, with no default")
    if isinstance(value, Dots):
        raise TidyError("'...' used in an incorrect context")
    return value
