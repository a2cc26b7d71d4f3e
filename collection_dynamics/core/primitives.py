"""Field calculus primitives.

Implements the neighbor broadcast/observe construct the collection blocks are
built on.  Every function receives an explicit :class:`Context`.
"""

from __future__ import annotations

from typing import Callable, TypeVar

from .context import Context
from .field import Field

T = TypeVar("T")
R = TypeVar("R")


def _observe(ctx: Context, path: str, own: T) -> Field[T]:
    nbrs: dict[int, T] = {}
    for nid in ctx.aligned_neighbors(path):
        nval = ctx.read_neighbor_export(nid, path)
        if nval is not None:
            nbrs[nid] = nval
    return Field(own, nbrs)


# ── Core primitives ──────────────────────────────────────────────────

def broadcast_and_observe(
    ctx: Context,
    local_value: T,
    combine: Callable[[Field[T]], tuple[R, T]],
) -> R:
    """Neighbor observation with a separate result and export.

    *combine* receives the field of neighbors' exports from the previous
    round at this call site, whose own entry is this device's previous
    export (or *local_value* on its first round).  It returns
    ``(result, export)``: *export* becomes visible to neighbors next round,
    *result* is returned to the caller.
    """
    path = ctx.push("nbr")
    try:
        field = _observe(ctx, path, ctx.read_own_export(path, local_value))
        result, exported = combine(field)
        ctx.export(exported)
        return result
    finally:
        ctx.pop()


def share(ctx: Context, local_value: T, f: Callable[[Field[T]], T]) -> T:
    """Combined state evolution and neighbor observation.

    The value computed by *f* is both returned and exported.
    """
    def combine(field: Field[T]) -> tuple[T, T]:
        result = f(field)
        return result, result

    return broadcast_and_observe(ctx, local_value, combine)


def nbr(ctx: Context, value: T) -> Field[T]:
    """Neighbor observation.

    Exports *value* (this device's contribution) and returns the field of
    aligned neighbors' values from the previous round at the same call path.
    The own entry is this device's previous value there, or *value* on its
    first round.
    """
    path = ctx.push("nbr")
    try:
        own = ctx.read_own_export(path, value)
        ctx.export(value)
        return _observe(ctx, path, own)
    finally:
        ctx.pop()


# ── Derived operators ────────────────────────────────────────────────

def nbr_uid(ctx: Context) -> Field[int]:
    """Field of neighbor identifiers."""
    return Field(ctx.mid(), {nid: nid for nid in ctx.neighbor_exports})


def mux(cond: bool, then_val: T, else_val: T) -> T:
    """Multiplexer: both values are evaluated; no domain restriction."""
    return then_val if cond else else_val


def mid(ctx: Context) -> int:
    """Current device ID."""
    return ctx.mid()
