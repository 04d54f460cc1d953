from __future__ import annotations
import os
import sys


# Defaults
_DEFAULT_MAX_DEPTH = 1000
_DEFAULT_DEPARSE_WIDTH = 60

# Python frames one level of evaluation can take (evaluate0, evaluate_call,
# apply, a comprehension or special form handler, promise forcing)
FRAMES_PER_LEVEL = 6
STACK_HEADROOM = 250


def int_from_env(var: str, default: int) -> int:
    raw = os.environ.get(var)
    if not raw or not raw.strip():
        return default
    try:
        value = int(raw.strip())
    except ValueError:
        return default
    return value if value > 0 else default


def default_max_depth() -> int:
    """Nesting the current interpreter recursion limit allows, never below 1000 levels."""
    fits = (sys.getrecursionlimit() - STACK_HEADROOM) // FRAMES_PER_LEVEL
    return max(_DEFAULT_MAX_DEPTH, fits)


def get_max_depth() -> int:
    """Maximum nesting of evaluations before the evaluator gives up."""
    return int_from_env('TIDYEVAL_MAX_DEPTH', default_max_depth())


def get_deparse_width() -> int:
    """Width beyond which injected vectors are elided when deparsed."""
    return int_from_env('TIDYEVAL_DEPARSE_WIDTH', _DEFAULT_DEPARSE_WIDTH)
