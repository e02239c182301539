"""Draw a computed layout onto a renderer surface."""

from __future__ import annotations

from typing import Any, Mapping, Protocol, Sequence

import numpy as np

from hermes_plot.color import RGBA, scale_to_rgba
from hermes_plot.config import ChartOptions
from hermes_plot.interaction import Drag, active_record_mask, get_drag_bound
from hermes_plot.layout import LayoutResult
from hermes_plot.scales import CategoricalScale
from hermes_plot.types import Boundary, Dimension, Filter, LabelPlacement, Point, Size


class Renderer(Protocol):
    def measure_text(self, text: str, *, font_family: str, font_size_px: float) -> Size:
        ...

    def clear(self, color: RGBA | None = None) -> None:
        ...

    def draw_line(self, x0: float, y0: float, x1: float, y1: float, style: Any) -> None:
        ...

    def draw_polyline(self, points: Sequence[Point], color: RGBA, width: int = 1) -> None:
        ...

    def draw_rect(self, x: float, y: float, w: float, h: float, *, stroke: RGBA | None = None, fill: RGBA | None = None) -> None:
        ...

    def draw_circle(self, x: float, y: float, radius: float, *, stroke: RGBA | None = None, fill: RGBA | None = None) -> None:
        ...

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
        ...

    def draw_boundary(self, boundary: Boundary, *, stroke: RGBA | None = None, fill: RGBA | None = None) -> None:
        ...


def dimension_positions(dimension: Dimension, column: np.ndarray) -> np.ndarray:
    """Axis-local pixel position of every record on one dimension (NaN when unmapped)."""
    scale = dimension.axis.scale
    if scale is None:
        return np.full(column.shape[0], np.nan, dtype=np.float64)
    if isinstance(scale, CategoricalScale):
        return np.asarray([scale.value_to_pos(v) for v in column.tolist()], dtype=np.float64)
    values = np.asarray(column, dtype=np.float64)
    out = np.full(values.shape[0], np.nan, dtype=np.float64)
    valid = np.isfinite(values)
    if np.any(valid):
        out[valid] = [scale.value_to_pos(v) for v in values[valid].tolist()]
    return out


def draw_chart(
    renderer: Renderer,
    result: LayoutResult,
    dimensions: Sequence[Dimension],
    columns: Mapping[str, np.ndarray],
    count: int,
    filters: Mapping[str, Sequence[Filter]],
    options: ChartOptions,
    *,
    drag: Drag | None = None,
) -> None:
    renderer.clear(options.style.background)
    if options.debug:
        draw_debug_outline(renderer, result)
    _draw_data(renderer, result, dimensions, columns, count, filters, options, drag)
    _draw_labels(renderer, result, dimensions, options, drag)
    _draw_axes(renderer, result, dimensions, filters, options, drag)


def draw_debug_outline(renderer: Renderer, result: LayoutResult) -> None:
    w, h = result.size.w, result.size.h
    top, right, bottom, left = result.padding
    padding_color = (221, 221, 221, 255)
    renderer.draw_rect(left, top, w - left - right, h - top - bottom, stroke=padding_color)
    frame = result.frame
    for i, dim in enumerate(result.dims):
        bound = dim.layout.bound
        space_rect = frame.rect(
            along=frame.along(Point(bound.x, bound.y)),
            across=result.offset + i * result.space,
            along_len=frame.along_size(bound),
            across_len=result.space,
        )
        renderer.draw_rect(space_rect.x, space_rect.y, space_rect.w, space_rect.h, stroke=(153, 153, 153, 255))
        renderer.draw_rect(bound.x, bound.y, bound.w, bound.h, stroke=(221, 221, 221, 255))
        renderer.draw_boundary(dim.layout.axis_boundary, fill=(238, 238, 238, 60))
        renderer.draw_boundary(dim.layout.label_boundary, fill=(255, 204, 0, 90))
        lp = dim.layout.label_point
        renderer.draw_circle(bound.x + lp.x, bound.y + lp.y, 3, stroke=(0, 153, 204, 255), fill=(0, 204, 255, 255))


def _draw_data(
    renderer: Renderer,
    result: LayoutResult,
    dimensions: Sequence[Dimension],
    columns: Mapping[str, np.ndarray],
    count: int,
    filters: Mapping[str, Sequence[Filter]],
    options: ChartOptions,
    drag: Drag | None,
) -> None:
    if count == 0 or not dimensions:
        return
    data_style = options.style.data
    positions = {d.key: dimension_positions(d, columns[d.key]) for d in dimensions if d.key in columns}
    active = active_record_mask(positions, filters, count)

    origins = [
        result.axis_origin(j, get_drag_bound(j, drag, dim.layout.bound))
        for j, dim in enumerate(result.dims)
    ]
    colors: list[RGBA] | None = None
    color_scale = data_style.color_scale
    if color_scale is not None and color_scale.colors:
        colors = _record_colors(dimensions, columns, count, color_scale.dimension_key, color_scale.colors)

    # Filtered-out records first so active ones stay on top.
    for record_active in (False, True):
        for i in np.flatnonzero(active == record_active).tolist():
            points = []
            for j, dimension in enumerate(dimensions):
                pos = positions.get(dimension.key)
                p = float(pos[i]) if pos is not None else float("nan")
                origin = origins[j]
                if result.horizontal:
                    points.append(Point(x=origin.x, y=origin.y + p))
                else:
                    points.append(Point(x=origin.x + p, y=origin.y))
            if not record_active:
                color = data_style.filtered_color
            elif colors is not None:
                color = colors[i]
            else:
                color = data_style.color
            renderer.draw_polyline(points, color, data_style.width)


def _record_colors(
    dimensions: Sequence[Dimension],
    columns: Mapping[str, np.ndarray],
    count: int,
    key: str,
    palette: Sequence[RGBA],
) -> list[RGBA] | None:
    dimension = next((d for d in dimensions if d.key == key), None)
    if dimension is None or dimension.axis.scale is None or key not in columns:
        return None
    scale = dimension.axis.scale
    column = columns[key]
    out: list[RGBA] = []
    for i in range(count):
        value = column[i]
        if hasattr(scale, "value_to_percent"):
            percent = scale.value_to_percent(value) if np.isfinite(value) else float("nan")
        else:
            length = scale.axis_length
            percent = scale.value_to_pos(value) / length if length > 0 else 0.0
        out.append(scale_to_rgba(palette, percent))
    return out


def _draw_labels(
    renderer: Renderer,
    result: LayoutResult,
    dimensions: Sequence[Dimension],
    options: ChartOptions,
    drag: Drag | None,
) -> None:
    label_style = options.style.dimension.label
    for i, (dimension, dim) in enumerate(zip(dimensions, result.dims)):
        bound = get_drag_bound(i, drag, dim.layout.bound)
        lp = dim.layout.label_point
        renderer.draw_text(
            dimension.label,
            bound.x + lp.x,
            bound.y + lp.y,
            result.label_rad,
            label_style,
            offset_x=dim.layout.label_offset.x,
            offset_y=dim.layout.label_offset.y,
        )


def _draw_axes(
    renderer: Renderer,
    result: LayoutResult,
    dimensions: Sequence[Dimension],
    filters: Mapping[str, Sequence[Filter]],
    options: ChartOptions,
    drag: Drag | None,
) -> None:
    axes_style = options.style.axes
    label_style = axes_style.label
    frame = result.frame
    factor = -1.0 if label_style.placement == LabelPlacement.BEFORE else 1.0
    tick_vec = frame.point(along=0.0, across=factor * axes_style.tick.length)
    label_vec = frame.point(along=0.0, across=factor * (axes_style.tick.length + label_style.offset))

    for i, (dimension, dim) in enumerate(zip(dimensions, result.dims)):
        bound = get_drag_bound(i, drag, dim.layout.bound)
        start = Point(x=bound.x + dim.layout.axis_start.x, y=bound.y + dim.layout.axis_start.y)
        stop = Point(x=bound.x + dim.layout.axis_stop.x, y=bound.y + dim.layout.axis_stop.y)
        renderer.draw_line(start.x, start.y, stop.x, stop.y, axes_style.axis)

        for tick_label, pos in zip(dim.axes.tick_labels, dim.axes.tick_pos):
            p = start.offset(*((0.0, pos) if result.horizontal else (pos, 0.0)))
            renderer.draw_line(p.x, p.y, p.x + tick_vec.x, p.y + tick_vec.y, axes_style.tick)
            text = renderer.measure_text(
                tick_label,
                font_family=label_style.font_family,
                font_size_px=label_style.font_size_px,
            )
            if result.horizontal:
                offset_x = -text.w if factor < 0 else 0.0
                offset_y = -text.h / 2
            else:
                offset_x = -text.w / 2
                offset_y = -text.h if factor < 0 else 0.0
            renderer.draw_text(
                tick_label,
                p.x + label_vec.x,
                p.y + label_vec.y,
                label_style.angle,
                label_style,
                offset_x=offset_x,
                offset_y=offset_y,
            )

        for f in filters.get(dimension.key, ()):
            a = start.offset(*((0.0, f.p0) if result.horizontal else (f.p0, 0.0)))
            b = start.offset(*((0.0, f.p1) if result.horizontal else (f.p1, 0.0)))
            renderer.draw_line(a.x, a.y, b.x, b.y, axes_style.filter)
