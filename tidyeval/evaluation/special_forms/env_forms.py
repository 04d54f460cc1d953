from tidyeval import EvaluatorFn, Value
from tidyeval.errors import ArityOrBindingError

GLOBAL_ENV_NAME = "global"


def current_env_form(args, env, mask, evaluate_fn: EvaluatorFn) -> Value:
    if args:
        raise ArityOrBindingError("current_env() takes no arguments")
    return env


def global_env_form(args, env, mask, evaluate_fn: EvaluatorFn) -> Value:
    if args:
        raise ArityOrBindingError("global_env() takes no arguments")
    root = env
    for frame in env.parents():
        if frame.name == GLOBAL_ENV_NAME:
            return frame
        root = frame
    return root
