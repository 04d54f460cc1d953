"""Immutable node classes: code represented as data.

A captured expression is a tree of Nodes:

    - Constant(value)     atomic literal, or a host value injected by `!!`
    - Symbol(name)        a reference to a binding (see tidyeval.types.symbol)
    - Call(fn, args)      fn applied to ordered, optionally named Args
    - PairList(entries)   the formals of `function(...)`
    - Unquote(payload)    a `!!` / `!!!` marker, only meaningful in templates

Nodes never change after construction; "editing" a tree means building a new
one, sharing the untouched subtrees with the old.
"""

from __future__ import annotations

from typing import Any, Iterable, NamedTuple, Optional

import numpy as np

from tidyeval.errors import TidyTypeError


class Node:
    """Base class for every piece of captured code."""

    __slots__ = ()

    def __setattr__(self, key, value):
        raise AttributeError(f"{type(self).__name__} nodes are immutable")

    def __delattr__(self, key):
        raise AttributeError(f"{type(self).__name__} nodes are immutable")

    def __str__(self) -> str:
        from tidyeval.printer import deparse
        return deparse(self)


class MissingArg(Node):
    """The empty argument: a formal without default, or an unsupplied one."""

    def __repr__(self):
        return "MISSING"

    def __bool__(self):
        return False

    def __eq__(self, other):
        return isinstance(other, MissingArg)

    def __hash__(self):
        return hash("tidyeval.MISSING")


MISSING = MissingArg()


def values_identical(a: Any, b: Any) -> bool:
    """Strict value equality used by Constant and `identical()`.

    Booleans never equal numbers, numpy arrays compare element-wise and by
    shape.
    """
    if a is b:
        return True
    if isinstance(a, np.ndarray) or isinstance(b, np.ndarray):
        return (
            isinstance(a, np.ndarray)
            and isinstance(b, np.ndarray)
            and a.shape == b.shape
            and bool(np.array_equal(a, b))
        )
    if isinstance(a, (bool, np.bool_)) != isinstance(b, (bool, np.bool_)):
        return False
    if isinstance(a, str) != isinstance(b, str):
        return False
    if isinstance(a, (list, tuple)) and isinstance(b, (list, tuple)):
        if type(a) is not type(b) or len(a) != len(b):
            return False
        return all(values_identical(x, y) for x, y in zip(a, b))
    try:
        return bool(a == b)
    except (TypeError, ValueError):
        return False


class Constant(Node):
    __slots__ = ("value",)

    def __init__(self, value: Any):
        object.__setattr__(self, "value", value)

    def __eq__(self, other) -> bool:
        return isinstance(other, Constant) and values_identical(self.value, other.value)

    def __hash__(self) -> int:
        try:
            return hash(("const", self.value))
        except TypeError:
            return hash(("const", type(self.value).__name__))

    def __repr__(self):
        return f"Constant({self.value!r})"


class Arg(NamedTuple):
    """One call argument: an optional name and the argument expression.

    While a template is still unresolved the name may be an Unquote marker
    (from `!!name := value`).
    """

    name: Optional[Any]
    value: Any


def _check_expression(value: Any, where: str) -> None:
    if not isinstance(value, Node):
        raise TidyTypeError(
            f"{where} must be an expression node, not {type(value).__name__}"
        )


class Call(Node):
    """`fn(args...)`. The callee is usually a Symbol but may be any Node,
    or a host callable injected into the tree."""

    __slots__ = ("fn", "args")

    def __init__(self, fn: Any, args: Iterable[Arg | Node] = ()):
        if not isinstance(fn, Node) and not callable(fn):
            raise TidyTypeError(
                f"The callee of a call must be an expression or a function, not {type(fn).__name__}"
            )
        normalized = []
        for arg in args:
            if not isinstance(arg, Arg):
                arg = Arg(None, arg)
            _check_expression(arg.value, "A call argument")
            if arg.name is not None and not isinstance(arg.name, (str, Unquote)):
                raise TidyTypeError(f"Argument names must be strings, not {type(arg.name).__name__}")
            normalized.append(arg)
        object.__setattr__(self, "fn", fn)
        object.__setattr__(self, "args", tuple(normalized))

    @property
    def arg_values(self) -> list[Node]:
        return [a.value for a in self.args]

    @property
    def arg_names(self) -> list[Optional[str]]:
        return [a.name for a in self.args]

    def replace(self, fn: Any = None, args: Iterable[Arg | Node] | None = None) -> Call:
        """Copy with the callee and/or the argument list replaced."""
        return Call(self.fn if fn is None else fn, self.args if args is None else args)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Call):
            return False
        if isinstance(self.fn, Node):
            if self.fn != other.fn:
                return False
        elif self.fn is not other.fn:
            return False
        return self.args == other.args

    def __hash__(self) -> int:
        fn_key = self.fn if isinstance(self.fn, Node) else id(self.fn)
        return hash(("call", fn_key, self.args))

    def __repr__(self):
        return f"Call({self.fn!r}, {list(self.args)!r})"


class PairList(Node):
    """Formal argument list of a function definition.

    Each entry is an Arg(name, default) where default is MISSING when the
    formal has none.
    """

    __slots__ = ("entries",)

    def __init__(self, entries: Iterable[Arg | tuple[str, Node]] = ()):
        normalized = []
        seen = set()
        for name, default in entries:
            if not isinstance(name, str) or not name:
                raise TidyTypeError("Formal argument names must be non-empty strings")
            if name in seen:
                raise TidyTypeError(f"repeated formal argument '{name}'")
            seen.add(name)
            _check_expression(default, "A formal default")
            normalized.append(Arg(name, default))
        object.__setattr__(self, "entries", tuple(normalized))

    @property
    def names(self) -> list[str]:
        return [a.name for a in self.entries]

    def __eq__(self, other) -> bool:
        return isinstance(other, PairList) and self.entries == other.entries

    def __hash__(self) -> int:
        return hash(("pairlist", self.entries))

    def __repr__(self):
        return f"PairList({list(self.entries)!r})"


class Unquote(Node):
    """`!!payload` (splice=False) or `!!!payload` (splice=True).

    In parsed code the payload is the expression to evaluate; in a template
    built by the host it is the tree (or value) to insert.
    """

    __slots__ = ("payload", "splice")

    def __init__(self, payload: Any, splice: bool = False):
        object.__setattr__(self, "payload", payload)
        object.__setattr__(self, "splice", bool(splice))

    def __eq__(self, other) -> bool:
        if not isinstance(other, Unquote) or self.splice != other.splice:
            return False
        if isinstance(self.payload, Node):
            return self.payload == other.payload
        return values_identical(self.payload, other.payload)

    def __hash__(self) -> int:
        key = self.payload if isinstance(self.payload, Node) else id(self.payload)
        return hash(("unquote", key, self.splice))

    def __repr__(self):
        return f"Unquote({self.payload!r}, splice={self.splice})"


def is_node(x: Any) -> bool:
    return isinstance(x, Node)


def as_node(x: Any) -> Node:
    """Nodes (quosures included) pass through, anything else becomes a Constant."""
    if isinstance(x, Node):
        return x
    return Constant(x)


def contains_unquote(node: Any) -> bool:
    if isinstance(node, Unquote):
        return True
    if isinstance(node, Call):
        if isinstance(node.fn, Node) and contains_unquote(node.fn):
            return True
        return any(
            isinstance(a.name, Unquote) or contains_unquote(a.value) for a in node.args
        )
    if isinstance(node, PairList):
        return any(contains_unquote(a.value) for a in node.entries)
    return False


# --- Named sequences ---
# A list of arguments surfaces in evaluated code as a plain list when nothing
# is named, a dict when everything is, and a list of Arg pairs otherwise.

def pack_args(args: Iterable[Arg]) -> list | dict:
    args = list(args)
    if not any(a.name for a in args):
        return [a.value for a in args]
    names = [a.name for a in args]
    if all(names) and len(set(names)) == len(names):
        return {a.name: a.value for a in args}
    return args


def unpack_args(value: Any) -> list[Arg]:
    """Inverse of pack_args; also accepts tuples and 1-d numpy arrays."""
    if value is None:
        return []
    if isinstance(value, dict):
        return [Arg(str(k), v) for k, v in value.items()]
    if isinstance(value, np.ndarray):
        if value.ndim != 1:
            raise TidyTypeError("Only one-dimensional vectors can be spliced")
        return [Arg(None, v.item() if isinstance(v, np.generic) else v) for v in value]
    if isinstance(value, (list, tuple)) and not isinstance(value, Arg):
        return [a if isinstance(a, Arg) else Arg(None, a) for a in value]
    raise TidyTypeError(f"Can't splice an object of type {type(value).__name__}; expected a list")
