"""Source election policies.

A policy decides, for the running device, whether it is the collection
source this round.  The round driver takes any callable with the signature
``(ctx) -> bool``, so alternative stress scenarios can be plugged in without
touching the tree construction or the collection blocks.
"""

from __future__ import annotations

from typing import Callable

from ..core.context import Context
from .config import COMM, hop_radius_for

SourcePolicy = Callable[[Context], bool]


def hop_radius(ctx: Context) -> int:
    """Estimated hop count across the area, from the stored side and range."""
    return hop_radius_for(ctx.storage("side", 0.0), ctx.storage("comm", COMM))


def elapsed_time_source(ctx: Context) -> bool:
    """Source role moves to the next device id every ``2 * hop_radius`` time.

    Each source holds long enough for the tree to stabilise before the role
    migrates and forces it to rebuild.
    """
    source_id = int(ctx.current_time / hop_radius(ctx) / 2)
    return ctx.mid() == source_id


def fixed_source(source_id: int) -> SourcePolicy:
    """Policy electing *source_id* forever."""
    def policy(ctx: Context) -> bool:
        return ctx.mid() == source_id
    return policy


def stored_source(ctx: Context) -> bool:
    """Source flag read from the device's ``is_source`` storage entry."""
    return bool(ctx.storage("is_source", False))
