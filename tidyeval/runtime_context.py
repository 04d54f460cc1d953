from __future__ import annotations

import sys

from tidyeval.config import FRAMES_PER_LEVEL, STACK_HEADROOM, get_max_depth
from tidyeval.errors import TidyError

# Never raise the interpreter recursion limit past this, whatever the depth setting
_RECURSION_LIMIT_CEILING = 20_000

# NOTE: For now this is process-global. Evaluation is single threaded; if
# threading is introduced, consider switching to contextvars or threading.local.
_eval_depth: int = 0


def ensure_stack_for(depth: int) -> None:
    """Raise the interpreter recursion limit so `depth` nested evaluations fit."""
    needed = min(depth * FRAMES_PER_LEVEL + STACK_HEADROOM, _RECURSION_LIMIT_CEILING)
    if sys.getrecursionlimit() < needed:
        sys.setrecursionlimit(needed)


def enter_evaluation() -> int:
    global _eval_depth
    limit = get_max_depth()
    if _eval_depth == 0:
        ensure_stack_for(limit)
    _eval_depth += 1
    if _eval_depth > limit:
        _eval_depth -= 1
        raise TidyError("evaluation nested too deeply: infinite recursion?")
    return _eval_depth


def exit_evaluation() -> None:
    global _eval_depth
    if _eval_depth > 0:
        _eval_depth -= 1


def get_eval_depth() -> int:
    return _eval_depth


def reset_eval_depth() -> None:
    global _eval_depth
    _eval_depth = 0
