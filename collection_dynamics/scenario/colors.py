"""Color encodings of distances and collected values."""

from __future__ import annotations

import math

import matplotlib.colors as mcolors

from ..blocks.abf import HOP_INF

RGB = tuple[float, float, float]

BLACK: RGB = (0.0, 0.0, 0.0)


def hsv(hue: float, saturation: float = 1.0, value: float = 1.0) -> RGB:
    """RGB triple for a hue in degrees (wrapped to ``[0, 360)``)."""
    h = (hue % 360.0) / 360.0
    r, g, b = mcolors.hsv_to_rgb((h, saturation, min(max(value, 0.0), 1.0)))
    return (float(r), float(g), float(b))


def distance_color(hops: int, radius: int) -> RGB:
    """Hue cycling once every *radius* hops; black when unreachable."""
    if hops >= HOP_INF:
        return BLACK
    return hsv(360.0 * hops / radius)


def collection_color(devices: int, value: float) -> RGB:
    """Hue from red to magenta while *value* undercounts *devices*.

    Overcounts stay magenta and darken proportionally.
    """
    if value < devices:
        if devices <= 1 or value <= 0:
            return hsv(0.0)
        return hsv(300.0 * math.log2(value) / math.log2(devices))
    return hsv(300.0, 1.0, devices / value)
