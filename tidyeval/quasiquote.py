"""Quasiquotation: rebuild a template tree with its `!!` / `!!!` markers resolved.

Splicing is structural. An inserted subtree becomes a direct child of the
node that held the marker, so operator grouping is carried by the tree and
the printer adds whatever parentheses that grouping requires. Inserted
values are never turned into text and parsed again.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from tidyeval.errors import TidyError, TidyTypeError
from tidyeval.types.environment import Environment
from tidyeval.types.nodes import Arg, Call, Node, PairList, Unquote, as_node, unpack_args
from tidyeval.types.symbol import Symbol

logger = logging.getLogger(__name__)


def quasiquote(template: Any, env: Optional[Environment] = None) -> Any:
    """Resolve every unquote marker in `template`.

    With `env`, a marker's payload is an expression evaluated in `env`; the
    resulting value is inserted. Without it, the payload is inserted as is,
    which is how a host splices ready-made trees: Unquote(tree).
    """
    if env is not None and not isinstance(env, Environment):
        raise TidyTypeError(f"`env` must be an environment, not {type(env).__name__}")
    result = _walk(template, env)
    if result is not template:
        logger.debug("Quasiquoted %s", template)
    return result


def unquote_value(marker: Unquote, env: Optional[Environment]) -> Any:
    if env is None:
        return marker.payload
    from tidyeval.evaluation.evaluator import evaluate0
    return evaluate0(marker.payload, env, None)


def resolve_name(name: Any, env: Optional[Environment]) -> Optional[str]:
    """Name of an argument: plain names pass through, `!!x := ` evaluates x."""
    if not isinstance(name, Unquote):
        return name
    if name.splice:
        raise TidyError("`!!!` can't be used on the left-hand side of `:=`")
    value = unquote_value(name, env)
    if isinstance(value, Symbol):
        return value.name
    if isinstance(value, str):
        return value
    raise TidyTypeError(f"The left-hand side of `:=` must be a string or a symbol, not {type(value).__name__}")


def _walk(node: Any, env: Optional[Environment]) -> Any:
    if isinstance(node, Unquote):
        if node.splice:
            raise TidyError("`!!!` can only be used within a function call's argument list")
        return as_node(unquote_value(node, env))

    if isinstance(node, Call):
        fn = _walk(node.fn, env) if isinstance(node.fn, Node) else node.fn
        changed = fn is not node.fn
        args: list[Arg] = []
        for arg in node.args:
            if isinstance(arg.value, Unquote) and arg.value.splice:
                if arg.name is not None:
                    raise TidyError("`!!!` can't be used on a named argument")
                spliced = unpack_args(unquote_value(arg.value, env))
                args.extend(Arg(a.name, as_node(a.value)) for a in spliced)
                changed = True
                continue
            name = resolve_name(arg.name, env)
            value = _walk(arg.value, env)
            if name is not arg.name or value is not arg.value:
                changed = True
            args.append(Arg(name, value))
        return Call(fn, args) if changed else node

    if isinstance(node, PairList):
        entries = [Arg(a.name, _walk(a.value, env)) for a in node.entries]
        if all(new.value is old.value for new, old in zip(entries, node.entries)):
            return node
        return PairList(entries)

    # Symbols, constants and already-captured quosures are copied as they are
    return node
