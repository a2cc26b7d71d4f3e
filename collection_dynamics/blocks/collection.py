"""C block: convergecast of values along the constraining-node tree.

Data flows *inward* toward the source.  Each device exports its running
subtree sum and, every round, adds to its own local value the sums last
exported by the neighbors it accepts as children.  Two acceptance tests are
provided:

* :func:`parent_filter`, the naive one: the neighbor's parent is this device.
* :func:`monotonic_filter`: additionally the neighbor's hop count must be
  exactly one more than this device's.  An edge can then be accepted from at
  most one of its endpoints in any round, so two devices never count each
  other while the tree is restructuring.
"""

from __future__ import annotations

from typing import Callable, NamedTuple

from ..core.context import Context
from ..core.field import Field, sum_hood
from ..core.primitives import broadcast_and_observe, mid, nbr
from .abf import Pair

EdgePolicy = Callable[[int, int], bool]


class Collected(NamedTuple):
    """Subtree total computed this round and the neighbors it counted."""

    total: float
    children: frozenset[int]


def monotonic_edge(nbr_hops: int, hops: int) -> bool:
    """A neighbor may be a child only if it is exactly one hop further."""
    return nbr_hops == hops + 1


def parent_filter(ctx: Context, parent: int) -> Field[bool]:
    """Neighbors whose exported parent is this device."""
    return nbr(ctx, parent).eq(mid(ctx))


def monotonic_filter(
    ctx: Context,
    pair: Pair,
    edge: EdgePolicy = monotonic_edge,
) -> Field[bool]:
    """Neighbors claiming this device as parent along a monotonic edge."""
    me = mid(ctx)
    hops = nbr(ctx, pair.hops)
    parents = nbr(ctx, pair.parent)
    return hops.zip(parents, lambda h, p: edge(h, pair.hops) and p == me)


def collect_children(
    ctx: Context,
    value: float,
    accept: Callable[[], Field[bool]],
) -> Collected:
    """Sum *value* with the previous totals of the neighbors *accept* selects.

    *accept* is evaluated inside the neighbor exchange, so the parent and
    distance it exports travel with the subtree total.
    """
    def combine(n: Field[float]) -> tuple[Collected, float]:
        mask = accept()
        total = sum_hood(n.where(mask, 0.0), value)
        return Collected(total, n.ids_where(mask)), total

    return broadcast_and_observe(ctx, value, combine)


def basic_collection(ctx: Context, parent: int, value: float) -> Collected:
    """Naive collection toward the constraining node *parent*."""
    return collect_children(ctx, value, lambda: parent_filter(ctx, parent))


def filtered_collection(
    ctx: Context,
    pair: Pair,
    value: float,
    edge: EdgePolicy = monotonic_edge,
) -> Collected:
    """Collection toward ``pair.parent`` with monotonic filtering."""
    return collect_children(ctx, value, lambda: monotonic_filter(ctx, pair, edge))
