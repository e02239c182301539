from __future__ import annotations

from typing import Any, Sequence

import numpy as np
import torch

from hermes_plot.raster.canvas import RGBA, new_canvas
from hermes_plot.raster.draw_lines import draw_line, draw_polyline
from hermes_plot.raster.draw_shapes import fill_circle, fill_polygon, fill_rect
from hermes_plot.raster.draw_text import draw_text, text_size
from hermes_plot.types import Point, Size


class RasterRenderer:
    """RGBA numpy drawing surface used for measuring and drawing a chart.

    Line styles are any object with ``color`` and ``width``; text styles any
    object with ``font_family``, ``font_size_px`` and ``color``.
    """

    def __init__(self, width: int, height: int, background: RGBA = (0, 0, 0, 255)) -> None:
        self.background = background
        self.canvas = new_canvas(max(1, int(width)), max(1, int(height)), color=background)

    @property
    def size(self) -> Size:
        return Size(w=float(self.canvas.shape[1]), h=float(self.canvas.shape[0]))

    def resize(self, width: int, height: int) -> None:
        self.canvas = new_canvas(max(1, int(width)), max(1, int(height)), color=self.background)

    def clear(self, color: RGBA | None = None) -> None:
        fill = self.background if color is None else color
        self.canvas[:, :] = np.asarray(fill, dtype=np.uint8)

    def measure_text(self, text: str, *, font_family: str, font_size_px: float) -> Size:
        w, h = text_size(text, font_family=font_family, font_size_px=font_size_px)
        return Size(w=float(w), h=float(h))

    def draw_line(self, x0: float, y0: float, x1: float, y1: float, style: Any) -> None:
        draw_line(self.canvas, x0, y0, x1, y1, style.color, width=max(1, int(style.width)))

    def draw_polyline(self, points: Sequence[Point], color: RGBA, width: int = 1) -> None:
        xs = np.asarray([p.x for p in points], dtype=np.float64)
        ys = np.asarray([p.y for p in points], dtype=np.float64)
        draw_polyline(self.canvas, xs, ys, color, width=max(1, int(width)))

    def draw_rect(
        self,
        x: float,
        y: float,
        w: float,
        h: float,
        *,
        stroke: RGBA | None = None,
        fill: RGBA | None = None,
    ) -> None:
        if fill is not None:
            fill_rect(self.canvas, x, y, w, h, fill)
        if stroke is not None:
            corners = (Point(x, y), Point(x + w, y), Point(x + w, y + h), Point(x, y + h))
            self._stroke_closed(corners, stroke)

    def draw_circle(
        self,
        x: float,
        y: float,
        radius: float,
        *,
        stroke: RGBA | None = None,
        fill: RGBA | None = None,
    ) -> None:
        if fill is not None:
            fill_circle(self.canvas, x, y, radius, fill)
        if stroke is not None:
            steps = max(12, int(radius * 4))
            angles = np.linspace(0.0, 2.0 * np.pi, steps, endpoint=False)
            ring = tuple(Point(x + radius * np.cos(a), y + radius * np.sin(a)) for a in angles)
            self._stroke_closed(ring, stroke)

    def draw_text(
        self,
        text: str,
        x: float,
        y: float,
        rad: float | None,
        style: Any,
        *,
        offset_x: float = 0.0,
        offset_y: float = 0.0,
    ) -> None:
        draw_text(
            self.canvas,
            x,
            y,
            text,
            style.color,
            font_family=style.font_family,
            font_size_px=style.font_size_px,
            rad=rad,
            offset_x=offset_x,
            offset_y=offset_y,
        )

    def draw_boundary(
        self,
        boundary: Sequence[Point],
        *,
        stroke: RGBA | None = None,
        fill: RGBA | None = None,
    ) -> None:
        if fill is not None:
            fill_polygon(self.canvas, [(p.x, p.y) for p in boundary], fill)
        if stroke is not None:
            self._stroke_closed(boundary, stroke)

    def to_tensor(self) -> torch.Tensor:
        """Current frame as an HxWx4 uint8 tensor."""
        return torch.from_numpy(self.canvas.copy())

    def _stroke_closed(self, points: Sequence[Point], color: RGBA) -> None:
        for i, p in enumerate(points):
            q = points[(i + 1) % len(points)]
            draw_line(self.canvas, p.x, p.y, q.x, q.y, color)
