from __future__ import annotations

from typing import Sequence

import numpy as np

from hermes_plot.raster.canvas import RGBA, blend_mask


def fill_rect(dst: np.ndarray, x: float, y: float, w: float, h: float, color: RGBA) -> None:
    x0 = int(round(min(x, x + w)))
    y0 = int(round(min(y, y + h)))
    x1 = int(round(max(x, x + w)))
    y1 = int(round(max(y, y + h)))
    if x1 <= x0 or y1 <= y0:
        return
    blend_mask(dst, x0, y0, np.ones((y1 - y0, x1 - x0), dtype=bool), color)


def fill_circle(dst: np.ndarray, cx: float, cy: float, radius: float, color: RGBA) -> None:
    r = max(0.0, float(radius))
    x0 = int(np.floor(cx - r))
    y0 = int(np.floor(cy - r))
    size = int(np.ceil(2 * r)) + 1
    yy, xx = np.mgrid[0:size, 0:size]
    mask = ((xx + x0 + 0.5 - cx) ** 2 + (yy + y0 + 0.5 - cy) ** 2) <= r * r
    blend_mask(dst, x0, y0, mask, color)


def fill_polygon(dst: np.ndarray, points: Sequence[tuple[float, float]], color: RGBA) -> None:
    """Even-odd fill sampled at pixel centers."""
    if len(points) < 3:
        return
    px = np.asarray([p[0] for p in points], dtype=np.float64)
    py = np.asarray([p[1] for p in points], dtype=np.float64)
    x0 = int(np.floor(px.min()))
    y0 = int(np.floor(py.min()))
    x1 = int(np.ceil(px.max()))
    y1 = int(np.ceil(py.max()))
    if x1 <= x0 or y1 <= y0:
        return
    yy, xx = np.mgrid[y0:y1, x0:x1]
    sx = xx + 0.5
    sy = yy + 0.5
    inside = np.zeros(sx.shape, dtype=bool)
    j = len(points) - 1
    for i in range(len(points)):
        xi, yi, xj, yj = px[i], py[i], px[j], py[j]
        crosses = (yi > sy) != (yj > sy)
        if yj != yi:
            cross_x = xi + (sy - yi) * (xj - xi) / (yj - yi)
            inside ^= crosses & (sx < cross_x)
        j = i
    blend_mask(dst, x0, y0, inside, color)
