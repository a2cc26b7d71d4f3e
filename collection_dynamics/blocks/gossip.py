"""Gossip: unbounded diffusion of the maximum value ever seen."""

from __future__ import annotations

from ..core.context import Context
from ..core.field import max_hood
from ..core.primitives import share


def max_gossip(ctx: Context, value: float) -> float:
    """Gossip the maximum of *value* across the network.

    Each round the device keeps the largest of its own *value* and every
    running maximum exported by itself and its neighbors last round.  A
    local increase reaches every device within diameter rounds; the result
    never decreases.
    """
    return share(ctx, value, lambda n: max(max_hood(n, n.own), value))
