"""Neighborhood fields and their reductions.

A :class:`Field` is what one device sees of an exported quantity: the value
each aligned neighbor exported in the previous round, plus the device's own
entry.  Reductions fold over the neighbor entries only, starting from an
explicit default that stands in for the device's own contribution, so an
empty neighborhood always reduces to the default.
"""

from __future__ import annotations

import functools
import operator
from typing import Any, Callable, Iterator, Mapping, TypeVar

T = TypeVar("T")
U = TypeVar("U")


class Field(Mapping[int, T]):
    """Immutable mapping ``neighbor id -> value`` with an own entry."""

    __slots__ = ("_own", "_values")

    def __init__(self, own: T, values: Mapping[int, T] | None = None) -> None:
        self._own = own
        self._values: dict[int, T] = dict(values or {})

    @property
    def own(self) -> T:
        return self._own

    def __getitem__(self, nid: int) -> T:
        return self._values[nid]

    def __iter__(self) -> Iterator[int]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"Field(own={self._own!r}, {self._values!r})"

    # ── Pointwise operations ─────────────────────────────────────────

    def map(self, fn: Callable[[T], U]) -> Field[U]:
        """Apply *fn* to every entry, own entry included."""
        return Field(fn(self._own), {n: fn(v) for n, v in self._values.items()})

    def zip(self, other: Field[U], fn: Callable[[T, U], Any] = lambda a, b: (a, b)) -> Field[Any]:
        """Combine two fields over their common neighbors.

        Neighbors missing from either side are dropped: they were not
        aligned on both call paths.
        """
        common = {
            n: fn(v, other[n]) for n, v in self._values.items() if n in other
        }
        return Field(fn(self._own, other.own), common)

    def eq(self, value: Any) -> Field[bool]:
        return self.map(lambda v: v == value)

    def where(self, mask: Field[bool], default: T) -> Field[T]:
        """Keep entries whose *mask* is true, replace the others by *default*."""
        return self.zip(mask, lambda v, keep: v if keep else default)

    def ids_where(self, mask: Field[bool]) -> frozenset[int]:
        """Neighbor ids selected by *mask*."""
        return frozenset(n for n in self._values if mask.get(n, False))


def fold_hood(field: Field[T], acc: Callable[[T, T], T], default: T) -> T:
    """Fold *acc* over the neighbor entries of *field*, starting from *default*."""
    return functools.reduce(acc, field.values(), default)


def max_hood(field: Field[T], default: T) -> T:
    """Maximum of neighbor values and *default*."""
    return fold_hood(field, max, default)


def min_hood(field: Field[T], default: T) -> T:
    """Minimum of neighbor values and *default*.

    Tuples compare lexicographically, so ties on the first component are
    broken by the second one.
    """
    return fold_hood(field, min, default)


def sum_hood(field: Field[T], default: T) -> T:
    """Sum of neighbor values plus *default*."""
    return fold_hood(field, operator.add, default)
