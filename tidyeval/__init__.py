# Core type aliases for tidyeval's data model.
# Code is represented by the immutable node classes in tidyeval.types.nodes;
# runtime values are plain Python objects (numbers, strings, numpy arrays,
# lists, dicts) plus the engine's own Closure, Quosure and Environment types.
# A Node is also a perfectly good Value.

from typing import Any, Callable

# Runtime value alias
Value = Any

# Evaluator function type handed to special forms: (node, env, mask) -> Value
EvaluatorFn = Callable[..., Value]
