"""Data masks and the `.data` / `.env` pronouns.

A DataMask is a read-only set of columns consulted before the lexical chain
for bare symbols. It never takes part in resolving the callee of a call.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Iterator

import numpy as np

from tidyeval.errors import TidyTypeError, UnresolvedSymbol
from tidyeval.types.environment import Environment


def as_column(value: Any) -> Any:
    """Sequences become numpy vectors; scalars and arrays are kept as they are."""
    if isinstance(value, (list, tuple, range)):
        return np.asarray(value)
    return value


class DataMask(Mapping):
    __slots__ = ("_columns", "_pronoun")

    def __init__(self, data: Mapping[str, Any] | None = None):
        if data is None:
            data = {}
        if not isinstance(data, Mapping):
            raise TidyTypeError(f"A data mask must be built from a mapping, not {type(data).__name__}")
        self._columns: dict[str, Any] = {str(k): as_column(v) for k, v in data.items()}
        self._pronoun = DataPronoun(self)

    def __getitem__(self, name: str) -> Any:
        return self._columns[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._columns)

    def __len__(self) -> int:
        return len(self._columns)

    @property
    def data(self) -> DataPronoun:
        return self._pronoun

    def __repr__(self) -> str:
        return f"<data mask: {', '.join(self._columns)}>"


def as_data_mask(data: Any) -> DataMask | None:
    if data is None or isinstance(data, DataMask):
        return data
    return DataMask(data)


class DataPronoun:
    """`.data`: resolves names in the mask only."""

    __slots__ = ("_mask",)

    def __init__(self, mask: DataMask):
        self._mask = mask

    def get(self, name: str) -> Any:
        try:
            return self._mask[name]
        except KeyError:
            raise UnresolvedSymbol(f"Column `{name}` not found in `.data`") from None

    def __contains__(self, name: str) -> bool:
        return name in self._mask

    def __repr__(self) -> str:
        return "<pronoun: .data>"


class EnvPronoun:
    """`.env`: resolves names in the lexical chain only, skipping the mask."""

    __slots__ = ("_env",)

    def __init__(self, env: Environment):
        self._env = env

    def get(self, name: str) -> Any:
        from tidyeval.evaluation.evaluator import resolve_lexical
        return resolve_lexical(name, self._env)

    def __contains__(self, name: str) -> bool:
        return self._env.has(name)

    def __repr__(self) -> str:
        return "<pronoun: .env>"
