from __future__ import annotations
import sys

from tidyeval.errors import TidyTypeError
from tidyeval.types.nodes import Node


class Symbol(Node):
    __slots__ = ("name",)

    def __init__(self, name: str):
        if not isinstance(name, str):
            raise TidyTypeError(f"Symbol names must be strings, not {type(name).__name__}")
        # Intern to ensure fast equality/hash and reduce memory
        object.__setattr__(self, "name", sys.intern(name))

    def __eq__(self, other) -> bool:
        return isinstance(other, Symbol) and self.name == other.name

    def __hash__(self) -> int:
        return hash(self.name)

    def __repr__(self):
        return f"Symbol({self.name!r})"


DOTS = Symbol("...")
DATA_PRONOUN = Symbol(".data")
ENV_PRONOUN = Symbol(".env")
