"""
Utility functions for game mechanics
"""

from __future__ import annotations
import colorsys
import math
from typing import Dict, Tuple, TypeVar

import numpy as np

from .entities import CategorySpec

K = TypeVar("K")


def clamp(x: float, lo: float, hi: float) -> float:
    """Clamp value between low and high bounds"""
    return lo if x < lo else hi if x > hi else x


def circle_collide(x1, y1, r1, x2, y2, r2) -> bool:
    """Check if two circles collide"""
    dx = x1 - x2
    dy = y1 - y2
    rr = r1 + r2
    if rr <= 0:
        return False
    return (dx * dx + dy * dy) < (rr * rr)


def rect_overlap(x1, y1, w1, h1, x2, y2, w2, h2, padding: float = 0.0) -> bool:
    """Check if two centred boxes overlap, each shrunk by `padding` on every edge"""
    hw1 = w1 / 2 - padding
    hh1 = h1 / 2 - padding
    hw2 = w2 / 2 - padding
    hh2 = h2 / 2 - padding
    return (x1 - hw1 < x2 + hw2 and
            x1 + hw1 > x2 - hw2 and
            y1 - hh1 < y2 + hh2 and
            y1 + hh1 > y2 - hh2)


def weighted_choice(rng: np.random.Generator, table: Dict[K, CategorySpec]) -> K:
    """
    Pick a key of `table` with probability equal to its weight.

    Falls back to the first key if rounding leaves the roll above the
    accumulated total.
    """
    roll = rng.random()
    cumulative = 0.0
    for key, spec in table.items():
        cumulative += spec.weight
        if roll < cumulative:
            return key
    return next(iter(table))


def hsl_color(hue: float, saturation: float, lightness: float) -> Tuple[int, int, int]:
    """CSS-style hsl (hue in degrees, s/l in [0,1]) to an RGB tuple"""
    r, g, b = colorsys.hls_to_rgb((hue % 360.0) / 360.0, lightness, saturation)
    return int(round(r * 255)), int(round(g * 255)), int(round(b * 255))


def frames_for(dt_ms: float, frame_ms: float) -> float:
    """Number of reference frames covered by `dt_ms`"""
    return dt_ms / frame_ms


def decay(factor: float, frames: float) -> float:
    """Per-frame multiplicative decay applied over a fractional frame count"""
    return math.pow(factor, frames)
