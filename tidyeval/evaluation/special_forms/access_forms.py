from collections.abc import Mapping
from typing import Any

import numpy as np

from tidyeval import EvaluatorFn, Value
from tidyeval.errors import ArityOrBindingError, TidyTypeError, UnresolvedSymbol
from tidyeval.types.data_mask import DataPronoun, EnvPronoun
from tidyeval.types.environment import Environment
from tidyeval.types.nodes import Arg, Call, Constant
from tidyeval.types.symbol import Symbol


def _position(key: Any, length: int) -> int:
    if isinstance(key, np.generic):
        key = key.item()
    if isinstance(key, bool) or not isinstance(key, (int, float)) or key != int(key):
        raise TidyTypeError(f"invalid subscript `{key!r}`")
    index = int(key)
    if index < 1 or index > length:
        raise TidyTypeError(f"subscript {index} out of bounds (length {length})")
    return index - 1


def _named(items, key: str) -> Any:
    for item in items:
        if isinstance(item, Arg) and item.name == key:
            return item.value
    raise UnresolvedSymbol(f"no element named `{key}`")


def get_element(target: Any, key: Any) -> Value:
    """Element `key` of `target`: a name for pronouns, environments and
    mappings, a 1-based position (or an argument name) for sequences and calls."""
    if isinstance(key, np.ndarray) and key.size == 1:
        key = key.reshape(-1)[0]
    if isinstance(key, np.generic):
        key = key.item()
    if isinstance(target, (DataPronoun, EnvPronoun)):
        if not isinstance(key, str):
            raise TidyTypeError("pronouns can only be subset by name")
        return target.get(key)
    if isinstance(target, Environment):
        if not isinstance(key, str):
            raise TidyTypeError("environments can only be subset by name")
        if not target.has(key):
            raise UnresolvedSymbol(f"object '{key}' not found")
        return target.lookup(key)
    if isinstance(target, Mapping):
        if isinstance(key, str):
            if key not in target:
                raise UnresolvedSymbol(f"no element named `{key}`")
            return target[key]
        return list(target.values())[_position(key, len(target))]
    if isinstance(target, Call):
        # Element 1 is the callee, as in R
        if isinstance(key, str):
            return _named(target.args, key)
        index = _position(key, len(target.args) + 1)
        return target.fn if index == 0 else target.args[index - 1].value
    if isinstance(target, (list, tuple, np.ndarray)) and not isinstance(target, Arg):
        if isinstance(key, str):
            return _named(target, key)
        item = target[_position(key, len(target))]
        if isinstance(item, Arg):
            return item.value
        return item.item() if isinstance(item, np.generic) else item
    raise TidyTypeError(f"object of type {type(target).__name__} is not subsettable")


def dollar_form(args, env, mask, evaluate_fn: EvaluatorFn) -> Value:
    if len(args) != 2:
        raise ArityOrBindingError("`$` expects a target and a name")
    target = evaluate_fn(args[0].value, env, mask)
    name = args[1].value
    if isinstance(name, Symbol):
        key = name.name
    elif isinstance(name, Constant) and isinstance(name.value, str):
        key = name.value
    else:
        raise TidyTypeError(f"invalid subscript type for `$`: {name}")
    return get_element(target, key)
