"""Lexical environments.

An Environment stores bindings of Symbols to values and links to a parent
frame. Lookup walks outward through the parents; a name found nowhere is an
error, never a default. Frames are shared by reference: closures, promises
and quosures keep the frame they were created in alive.
"""

from __future__ import annotations

import logging
from io import StringIO
from typing import Iterator, Mapping, Optional

from tidyeval import Value
from tidyeval.errors import TidyTypeError, UnresolvedSymbol
from tidyeval.types.symbol import Symbol

logger = logging.getLogger(__name__)


def as_symbol(name: Symbol | str) -> Symbol:
    if isinstance(name, Symbol):
        return name
    if isinstance(name, str):
        return Symbol(name)
    raise TidyTypeError(f"Cannot bind {name!r}: names must be symbols or strings")


class Environment:
    """Hierarchical mapping from Symbols to values."""

    __slots__ = ("vars", "parent", "name", "__weakref__")

    def __init__(
        self,
        parent: Optional[Environment] = None,
        bindings: Mapping[Symbol | str, Value] | None = None,
        name: str | None = None,
    ):
        if parent is not None and not isinstance(parent, Environment):
            raise TidyTypeError(f"The parent of an environment must be an environment, not {type(parent).__name__}")
        self.vars: dict[Symbol, Value] = {}
        self.parent: Environment | None = parent
        self.name: str | None = name
        if bindings:
            self.update(bindings)

    def define(self, name: Symbol | str, value: Value) -> None:
        """Bind `name` to `value` in this frame, shadowing any parent binding."""
        self.vars[as_symbol(name)] = value

    def find(self, name: Symbol | str) -> Optional[Environment]:
        """Find the nearest environment in the chain that binds `name`."""
        symbol = as_symbol(name)
        env: Optional[Environment] = self
        while env is not None:
            if symbol in env.vars:
                return env
            env = env.parent
        return None

    def set(self, name: Symbol | str, value: Value) -> None:
        """Update an existing binding for `name` in the environment chain.

        Raises UnresolvedSymbol if the name is bound nowhere.
        """
        symbol = as_symbol(name)
        env = self.find(symbol)
        if env is None:
            raise UnresolvedSymbol(f"Cannot set unbound symbol '{symbol.name}'")
        env.vars[symbol] = value

    def lookup(self, name: Symbol | str) -> Value:
        """Look up the value bound to `name`, walking outward through parents."""
        symbol = as_symbol(name)
        env = self.find(symbol)
        if env is None:
            raise UnresolvedSymbol(f"object '{symbol.name}' not found")
        return env.vars[symbol]

    def get_local(self, name: Symbol | str, default: Value = None) -> Value:
        return self.vars.get(as_symbol(name), default)

    def has(self, name: Symbol | str, inherit: bool = True) -> bool:
        if not inherit:
            return as_symbol(name) in self.vars
        return self.find(name) is not None

    def __contains__(self, name: Symbol | str) -> bool:
        return self.has(name)

    def update(self, mapping: Mapping[Symbol | str, Value]) -> None:
        """Bulk-define a mapping of names to values in the current frame."""
        for k, v in mapping.items():
            self.vars[as_symbol(k)] = v

    def local_names(self) -> list[str]:
        return [s.name for s in self.vars]

    def parents(self) -> Iterator[Environment]:
        """Yield this frame, then each enclosing frame up to the root."""
        env: Optional[Environment] = self
        while env is not None:
            yield env
            env = env.parent

    def label(self) -> str:
        return self.name if self.name else hex(id(self))

    def _write_vars(self, buffer: StringIO) -> None:
        """Write this frame's variables into the buffer in a compact form."""
        buffer.write("{")
        first = True
        for k, v in self.vars.items():
            if not first:
                buffer.write(", ")
            buffer.write(f"{k.name}: {v!r}")
            first = False
        buffer.write("}")

    def __str__(self) -> str:
        """Human-readable single-frame view with an indicator for parent."""
        with StringIO() as buffer:
            self._write_vars(buffer)
            if self.parent is not None:
                buffer.write(" -> ...")  # indicate parent exists
            return buffer.getvalue()

    def __repr__(self) -> str:
        return f"<environment: {self.label()}>"


def new_environment(
    parent: Optional[Environment] = None,
    bindings: Mapping[Symbol | str, Value] | None = None,
) -> Environment:
    env = Environment(parent, bindings)
    logger.debug("Created %r", env)
    return env
