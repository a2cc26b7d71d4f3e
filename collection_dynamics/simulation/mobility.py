"""Device mobility."""

from __future__ import annotations

import numpy as np

from ..core.context import Context

_WAYPOINT = "rectangle_walk/target"


def rectangle_walk(
    ctx: Context,
    low: np.ndarray,
    high: np.ndarray,
    speed: float,
    period: float = 1.0,
) -> np.ndarray:
    """Random waypoint motion inside the rectangle ``[low, high]``.

    The device travels in a straight line at *speed* toward a target drawn
    uniformly in the rectangle, covering ``speed * period`` per round, and
    draws a new target once it arrives.  Returns the new position.
    """
    dev = ctx.device
    low = np.asarray(low, dtype=float)
    high = np.asarray(high, dtype=float)
    target = dev.state.get(_WAYPOINT)
    if target is None:
        target = ctx.rng.uniform(low, high)

    step = speed * period
    delta = target - dev.position
    dist = float(np.linalg.norm(delta))
    if dist <= step:
        dev.position = np.array(target, dtype=float)
        target = ctx.rng.uniform(low, high)
    else:
        dev.position = dev.position + delta * (step / dist)
    dev.position = np.clip(dev.position, low, high)
    dev.state[_WAYPOINT] = target
    return dev.position
