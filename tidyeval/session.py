from __future__ import annotations

import logging
from typing import Any, Optional

from tidyeval import Value
from tidyeval.builtins import register
from tidyeval.capture import expr as capture_expr
from tidyeval.capture import quo as capture_quo
from tidyeval.evaluation.evaluator import eval_tidy, evaluate
from tidyeval.reader.parser import parse_expr, parse_exprs
from tidyeval.types.environment import Environment
from tidyeval.types.nodes import Node
from tidyeval.types.quosure import Quosure

logger = logging.getLogger(__name__)


def base_env() -> Environment:
    """A fresh root frame holding the builtins and special forms."""
    env = Environment(name="base")
    register(env)
    return env


class Session:
    """
    Owns a base environment and a global environment (its child) and reads
    and evaluates source text against them. Nothing is shared between
    sessions.
    """

    def __init__(self, prelude: Optional[str] = None):
        self.base_env: Environment = base_env()
        self.global_env: Environment = Environment(parent=self.base_env, name="global")
        if prelude:
            logger.info("Loading prelude (%d characters)", len(prelude))
            self.eval(prelude)

    def parse(self, source: str) -> list[Node]:
        return parse_exprs(source)

    def eval(self, source: str, mask: Any = None) -> Value:
        """Evaluate every expression in `source` in the global environment.

        Returns the value of the last one, or None for empty input.
        """
        result: Value = None
        for node in parse_exprs(source):
            result = evaluate(node, self.global_env, mask)
        return result

    def define(self, name: str, value: Value) -> None:
        self.global_env.define(name, value)

    def eval_tidy(self, source: str | Node, data: Any = None, env: Optional[Environment] = None) -> Value:
        node = parse_expr(source) if isinstance(source, str) else source
        return eval_tidy(node, data, self.global_env if env is None else env)

    def expr(self, source: str) -> Node:
        return capture_expr(source, self.global_env)

    def quo(self, source: str) -> Quosure:
        return capture_quo(source, self.global_env)
