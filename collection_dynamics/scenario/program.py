"""Device program comparing naive and filtered collection.

Each round a device moves (if the scenario has a speed), decides whether it
is the source, builds the constraining-node tree, collects one unit per
device along it with both strategies and gossips the network-wide maxima of
the two results.  All derived quantities are written to the device storage
for rendering and metrics, and returned as the round result.
"""

from __future__ import annotations

from typing import Any

import numpy as np

from ..blocks.abf import HOP_INF, abf_constrain
from ..blocks.collection import (
    EdgePolicy,
    basic_collection,
    filtered_collection,
    monotonic_edge,
)
from ..blocks.gossip import max_gossip
from ..core.context import Context
from ..simulation.mobility import rectangle_walk
from .colors import collection_color, distance_color
from .policies import SourcePolicy, elapsed_time_source, hop_radius

SOURCE_SIZE = 20
NODE_SIZE = 12


class CollectionProgram:
    """Aggregate program run by every device each round.

    Parameters
    ----------
    source_policy:
        ``(ctx) -> bool`` electing the source.  Defaults to the source role
        migrating with elapsed time.
    edge:
        Monotonicity test used by the filtered collection.
    """

    def __init__(
        self,
        source_policy: SourcePolicy = elapsed_time_source,
        edge: EdgePolicy = monotonic_edge,
    ) -> None:
        self.source_policy = source_policy
        self.edge = edge

    def __call__(self, ctx: Context) -> dict[str, Any]:
        devices = ctx.storage("devices", 1)
        side = ctx.storage("side", 0.0)

        speed = ctx.storage("speed", 0.0)
        if speed > 0:
            rectangle_walk(ctx, np.zeros(2), np.full(2, side), speed, 1.0)

        source = self.source_policy(ctx)
        out: dict[str, Any] = {
            "source": source,
            "node_size": SOURCE_SIZE if source else NODE_SIZE,
            "node_shape": "cube" if source else "sphere",
        }

        # distances and diameter
        pair = abf_constrain(ctx, source)
        finite = pair.hops < HOP_INF
        out["dist"] = pair.hops
        out["parent"] = pair.parent
        out["dist_c"] = distance_color(pair.hops, hop_radius(ctx))
        out["diam"] = max_gossip(ctx, float(pair.hops) if finite else 0.0)
        out["diamdev"] = out["diam"] * devices

        # collections
        simple = basic_collection(ctx, pair.parent, 1.0)
        filtered = filtered_collection(ctx, pair, 1.0, self.edge)
        out["coll_ideal"] = float(devices)
        out["coll_simple"] = simple.total
        out["coll_filtered"] = filtered.total
        out["coll_max_ideal"] = float(devices)
        out["coll_max_simple"] = max_gossip(ctx, simple.total)
        out["coll_max_filtered"] = max_gossip(ctx, filtered.total)
        out["coll_c_simple"] = collection_color(devices, simple.total)
        out["coll_c_filtered"] = collection_color(devices, filtered.total)
        out["children_simple"] = simple.children
        out["children_filtered"] = filtered.children

        for name, value in out.items():
            ctx.store(name, value)
        return out
