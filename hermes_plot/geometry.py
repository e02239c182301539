from __future__ import annotations

from dataclasses import dataclass
import math
from typing import Any, Sequence

from hermes_plot.types import Boundary, Direction, Padding, Point, Rect, Size


@dataclass(frozen=True)
class AxisFrame:
    """Orientation-aware coordinates.

    ``along`` runs parallel to every axis line, ``across`` runs in the direction
    dimensions are laid out in. Horizontal charts have vertical axes, so
    ``along`` is y and ``across`` is x; vertical charts swap the two.
    """

    horizontal: bool

    @classmethod
    def for_direction(cls, direction: Direction) -> "AxisFrame":
        return cls(horizontal=direction == Direction.HORIZONTAL)

    def point(self, along: float, across: float) -> Point:
        if self.horizontal:
            return Point(x=across, y=along)
        return Point(x=along, y=across)

    def rect(self, along: float, across: float, along_len: float, across_len: float) -> Rect:
        if self.horizontal:
            return Rect(x=across, y=along, w=across_len, h=along_len)
        return Rect(x=along, y=across, w=along_len, h=across_len)

    def along(self, point: Point) -> float:
        return point.y if self.horizontal else point.x

    def across(self, point: Point) -> float:
        return point.x if self.horizontal else point.y

    def along_size(self, size: Size | Rect) -> float:
        return size.h if self.horizontal else size.w

    def across_size(self, size: Size | Rect) -> float:
        return size.w if self.horizontal else size.h

    def across_origin(self, rect: Rect) -> float:
        return rect.x if self.horizontal else rect.y

    def with_across_origin(self, rect: Rect, value: float) -> Rect:
        return rect.moved_to(x=value) if self.horizontal else rect.moved_to(y=value)

    def padding_before(self, padding: Padding) -> float:
        """Padding at the start of the axis direction (top or left)."""
        return padding[0] if self.horizontal else padding[3]

    def padding_after(self, padding: Padding) -> float:
        return padding[2] if self.horizontal else padding[1]

    def padding_across(self, padding: Padding) -> float:
        """Padding at the start of the layout direction (left or top)."""
        return padding[3] if self.horizontal else padding[0]


def normalize_padding(padding: Any) -> Padding:
    """Expand CSS-style padding (1, 2 or 4 values) into (top, right, bottom, left)."""
    if isinstance(padding, (int, float)):
        p = float(padding)
        return (p, p, p, p)
    if isinstance(padding, Sequence) and not isinstance(padding, (str, bytes)):
        values = [float(v) for v in padding]
        if len(values) == 1:
            return (values[0], values[0], values[0], values[0])
        if len(values) == 2:
            return (values[0], values[1], values[0], values[1])
        if len(values) == 4:
            return (values[0], values[1], values[2], values[3])
    raise ValueError(f"padding must be a number or a sequence of 1, 2 or 4 numbers: {padding!r}")


def text_boundary(
    x: float,
    y: float,
    w: float,
    h: float,
    rad: float | None = None,
    offset_x: float = 0.0,
    offset_y: float = 0.0,
    padding: float = 0.0,
) -> Boundary:
    """Corners of a padded text box anchored at (x, y), rotated by ``rad`` about the anchor."""
    x0 = offset_x - padding
    y0 = offset_y - padding
    x1 = offset_x + w + padding
    y1 = offset_y + h + padding
    corners = ((x0, y0), (x1, y0), (x1, y1), (x0, y1))
    cos = math.cos(rad or 0.0)
    sin = math.sin(rad or 0.0)
    return tuple(Point(x=x + cx * cos - cy * sin, y=y + cx * sin + cy * cos) for cx, cy in corners)


def is_point_in_boundary(point: Point, boundary: Boundary) -> bool:
    """Even-odd ray casting test; points on an edge count as inside."""
    count = len(boundary)
    if count < 3:
        return False
    inside = False
    j = count - 1
    for i in range(count):
        pi = boundary[i]
        pj = boundary[j]
        if _on_segment(point, pi, pj):
            return True
        if (pi.y > point.y) != (pj.y > point.y):
            cross_x = pi.x + (point.y - pi.y) * (pj.x - pi.x) / (pj.y - pi.y)
            if point.x < cross_x:
                inside = not inside
        j = i
    return inside


def _on_segment(p: Point, a: Point, b: Point, eps: float = 1e-9) -> bool:
    cross = (b.x - a.x) * (p.y - a.y) - (b.y - a.y) * (p.x - a.x)
    if abs(cross) > eps * max(1.0, abs(b.x - a.x) + abs(b.y - a.y)):
        return False
    return min(a.x, b.x) - eps <= p.x <= max(a.x, b.x) + eps and min(a.y, b.y) - eps <= p.y <= max(a.y, b.y) + eps
