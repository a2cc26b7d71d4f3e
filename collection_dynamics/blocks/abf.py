"""Adaptive Bellman-Ford: hop distance to a source and the constraining node.

Every device relaxes its distance estimate against the estimates its
neighbors exported last round, one hop at a time.  The neighbor providing the
minimum becomes the *constraining* node, i.e. the parent in the spanning tree
rooted at the source.  Under a static topology the estimates stabilise to the
shortest hop counts within diameter rounds; after a topology change or a
source relocation they adapt without any reset.
"""

from __future__ import annotations

from typing import NamedTuple

from ..core.context import Context
from ..core.field import Field, min_hood
from ..core.primitives import broadcast_and_observe, mid, nbr_uid

#: Hop count of a device with no known path to the source.
HOP_INF = 2**31 - 2


class Pair(NamedTuple):
    """Hop distance to the source and id of the constraining neighbor."""

    hops: int
    parent: int


def abf_constrain(ctx: Context, source: bool) -> Pair:
    """Distance from *source* devices, together with the constraining node.

    Sources are at distance 0 and constrain themselves.  A device without any
    finite neighbor estimate reports ``HOP_INF`` and itself as parent.  Ties
    on the distance go to the lowest device id.
    """
    loc = 0 if source else HOP_INF
    me = mid(ctx)

    def relax(n: Field[int]) -> tuple[Pair, int]:
        candidates = n.map(lambda h: h + 1).zip(nbr_uid(ctx))
        best = Pair(*min_hood(candidates, (loc, me)))
        return best, best.hops

    return broadcast_and_observe(ctx, loc, relax)
