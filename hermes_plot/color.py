from __future__ import annotations

import re
from typing import Any, Sequence

import numpy as np


RGBA = tuple[int, int, int, int]

_HEX_COLOR = re.compile(r"^#[0-9a-fA-F]{6}([0-9a-fA-F]{2})?$")


def parse_color(value: Any) -> RGBA:
    """Accept ``#RRGGBB``/``#RRGGBBAA`` strings or 3/4-tuples of 0..255 ints."""
    if isinstance(value, str):
        if not _HEX_COLOR.match(value):
            raise ValueError(f"color must be a hex color (#RRGGBB or #RRGGBBAA): {value!r}")
        r = int(value[1:3], 16)
        g = int(value[3:5], 16)
        b = int(value[5:7], 16)
        a = int(value[7:9], 16) if len(value) == 9 else 255
        return (r, g, b, a)
    if isinstance(value, (tuple, list)) and len(value) in {3, 4}:
        channels = [int(c) for c in value]
        if any(c < 0 or c > 255 for c in channels):
            raise ValueError(f"color channels must be in [0, 255]: {value!r}")
        if len(channels) == 3:
            channels.append(255)
        return (channels[0], channels[1], channels[2], channels[3])
    raise ValueError(f"unsupported color value: {value!r}")


def scale_to_rgba(colors: Sequence[RGBA], percent: float) -> RGBA:
    """Interpolate linearly along ``colors`` at ``percent`` in [0, 1]."""
    if not colors:
        return (0, 0, 0, 255)
    if len(colors) == 1 or not np.isfinite(percent):
        return colors[0]
    t = float(np.clip(percent, 0.0, 1.0)) * (len(colors) - 1)
    idx = min(int(np.floor(t)), len(colors) - 2)
    frac = t - idx
    c0 = np.asarray(colors[idx], dtype=np.float64)
    c1 = np.asarray(colors[idx + 1], dtype=np.float64)
    out = np.rint(c0 + (c1 - c0) * frac).astype(np.int64)
    return (int(out[0]), int(out[1]), int(out[2]), int(out[3]))
