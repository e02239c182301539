"""Pixel geometry for every dimension of a parallel-coordinates chart.

:func:`compute_layout` is a pure function of the canvas size, the dimension
list and the options. It builds a fresh :class:`LayoutResult` on every call;
the only side effect is handing the shared axis length to each dimension's
scale so tick positions match the new geometry.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
import math
from typing import Protocol, Sequence

from hermes_plot.config import ChartOptions
from hermes_plot.geometry import AxisFrame, normalize_padding, text_boundary
from hermes_plot.types import (
    Boundary,
    Dimension,
    DimensionLayout,
    LabelPlacement,
    Padding,
    Point,
    Rect,
    Size,
)


LOGGER = logging.getLogger(__name__)


class TextMeasurer(Protocol):
    def measure_text(self, text: str, *, font_family: str, font_size_px: float) -> Size:
        ...


@dataclass(frozen=True)
class LabelMetrics:
    w: float
    h: float
    length_cos: float
    length_sin: float


@dataclass(frozen=True)
class AxisMetrics:
    tick_labels: tuple[str, ...]
    tick_pos: tuple[float, ...]
    max_length: float


@dataclass(frozen=True)
class DimensionGeometry:
    """Bound box in canvas coordinates; every point is relative to ``bound``."""

    bound: Rect
    space_before: float
    space_after: float
    axis_start: Point
    axis_stop: Point
    label_point: Point
    label_offset: Point
    label_boundary: Boundary
    axis_boundary: Boundary


@dataclass(frozen=True)
class DimensionLayoutResult:
    label: LabelMetrics
    axes: AxisMetrics
    layout: DimensionGeometry


@dataclass(frozen=True)
class LayoutResult:
    size: Size
    horizontal: bool
    padding: Padding
    draw_rect: Rect
    axis_start: float
    axis_stop: float
    label_cos: float | None
    label_sin: float | None
    label_rad: float | None
    max_length_cos: float
    max_length_sin: float
    total_bound_space: float
    gap: float
    offset: float
    space: float
    dims: tuple[DimensionLayoutResult, ...]

    @property
    def axis_length(self) -> float:
        return max(0.0, self.axis_stop - self.axis_start)

    @property
    def frame(self) -> AxisFrame:
        return AxisFrame(horizontal=self.horizontal)

    def axis_origin(self, index: int, bound: Rect | None = None) -> Point:
        """Canvas position of a dimension's axis start, optionally for a substitute bound."""
        geometry = self.dims[index].layout
        b = geometry.bound if bound is None else bound
        return Point(x=b.x + geometry.axis_start.x, y=b.y + geometry.axis_start.y)


def compute_layout(
    size: Size,
    dimensions: Sequence[Dimension],
    options: ChartOptions,
    measurer: TextMeasurer,
) -> LayoutResult:
    frame = AxisFrame.for_direction(options.direction)
    style = options.style
    label_style = style.dimension.label
    axes_label_style = style.axes.label
    is_label_before = label_style.placement == LabelPlacement.BEFORE
    is_label_angled = label_style.angle is not None
    is_axes_before = axes_label_style.placement == LabelPlacement.BEFORE
    padding = normalize_padding(style.padding)
    dim_count = len(dimensions)

    draw_rect = Rect(
        x=padding[3],
        y=padding[0],
        w=max(0.0, size.w - padding[1] - padding[3]),
        h=max(0.0, size.h - padding[0] - padding[2]),
    )

    # Dimension label sizes, projected onto the label angle when one is set.
    label_cos = math.cos(label_style.angle) if is_label_angled else None
    label_sin = math.sin(label_style.angle) if is_label_angled else None
    labels: list[LabelMetrics] = []
    max_length_cos = 0.0
    max_length_sin = 0.0
    for dimension in dimensions:
        text = measurer.measure_text(
            dimension.label,
            font_family=label_style.font_family,
            font_size_px=label_style.font_size_px,
        )
        length_cos = text.w * label_cos if label_cos is not None else text.w
        length_sin = text.w * label_sin if label_sin is not None else text.h
        labels.append(LabelMetrics(w=text.w, h=text.h, length_cos=length_cos, length_sin=length_sin))
        if abs(length_cos) > abs(max_length_cos):
            max_length_cos = length_cos
        if abs(length_sin) > abs(max_length_sin):
            max_length_sin = length_sin

    # Shared axis pixel range, after reserving the label band on one side.
    label_extent = max_length_sin if frame.horizontal else max_length_cos
    along_start = frame.padding_before(padding)
    along_stop = frame.along_size(size) - frame.padding_after(padding)
    if is_label_before:
        reserved = max(0.0, -label_extent) if is_label_angled else label_extent
        axis_start = along_start + reserved + label_style.offset
        axis_stop = along_stop
    else:
        reserved = max(0.0, label_extent) if is_label_angled else label_extent
        axis_start = along_start
        axis_stop = along_stop - reserved - label_style.offset
    axis_length = axis_stop - axis_start
    if axis_length <= 0:
        LOGGER.debug("non-positive axis length %.2f; collapsing axes", axis_length)
        axis_length = 0.0
        axis_stop = axis_start

    # Per-dimension tick metrics and the space each needs around its axis.
    axes: list[AxisMetrics] = []
    spaces: list[tuple[float, float]] = []
    total_bound_space = 0.0
    for dimension, label in zip(dimensions, labels):
        scale = dimension.axis.scale
        tick_labels: tuple[str, ...] = ()
        tick_pos: tuple[float, ...] = ()
        max_length = 0.0
        if scale is not None:
            scale.set_axis_length(axis_length)
            tick_labels = tuple(scale.tick_labels)
            tick_pos = tuple(scale.tick_pos)
            for tick_label in tick_labels:
                tick_size = measurer.measure_text(
                    tick_label,
                    font_family=axes_label_style.font_family,
                    font_size_px=axes_label_style.font_size_px,
                )
                max_length = max(max_length, frame.across_size(tick_size))
        axes.append(AxisMetrics(tick_labels=tick_labels, tick_pos=tick_pos, max_length=max_length))

        if not is_label_angled:
            space_before = frame.across_size(Size(w=label.w, h=label.h)) / 2
            space_after = space_before
        else:
            across = label.length_cos if frame.horizontal else label.length_sin
            space_before = max(0.0, -across)
            space_after = max(0.0, across)
        if is_axes_before:
            space_before = max(space_before, max_length)
        else:
            space_after = max(space_after, max_length)
        spaces.append((space_before, space_after))
        total_bound_space += space_before + space_after

    across_total = frame.across_size(draw_rect)
    gap = (across_total - total_bound_space) / (dim_count - 1) if dim_count > 1 else 0.0
    offset = frame.padding_across(padding)
    space = across_total / dim_count if dim_count > 0 else 0.0
    if gap < 0:
        LOGGER.debug("dimensions overflow the draw area by %.2f px", -gap * (dim_count - 1))

    label_rad = label_style.angle if is_label_angled else None
    boundary_padding = style.dimension.label_boundary_padding
    axis_padding = style.axes.axis_boundary_padding
    dims: list[DimensionLayoutResult] = []
    traversed = offset
    for i, (label, axis_metrics, (space_before, space_after)) in enumerate(zip(labels, axes, spaces)):
        bound_across = space_before + space_after
        layout_mode = style.dimension.layout
        if layout_mode == DimensionLayout.AXIS_EVENLY_SPACED:
            origin = offset + i * space + space / 2 - space_before
        elif layout_mode == DimensionLayout.EQUIDISTANT:
            origin = offset + i * space + (space - bound_across) / 2
        else:
            origin = traversed
            traversed += gap + bound_across
        bound = frame.rect(
            along=along_start,
            across=origin,
            along_len=frame.along_size(draw_rect),
            across_len=bound_across,
        )

        local_start = frame.point(along=axis_start - along_start, across=space_before)
        local_stop = frame.point(along=axis_stop - along_start, across=space_before)
        label_along = axis_start - label_style.offset if is_label_before else axis_stop + label_style.offset
        label_point = frame.point(along=label_along - along_start, across=space_before)

        if is_label_angled:
            offset_x, offset_y = 0.0, -label.h / 2
        elif frame.horizontal:
            offset_x, offset_y = -label.w / 2, (-label.h if is_label_before else 0.0)
        else:
            offset_x, offset_y = (-label.w if is_label_before else 0.0), -label.h / 2
        label_boundary = text_boundary(
            bound.x + label_point.x,
            bound.y + label_point.y,
            label.w,
            label.h,
            label_rad,
            offset_x,
            offset_y,
            boundary_padding,
        )

        pad = frame.point(along=0.0, across=axis_padding)
        start = Point(x=bound.x + local_start.x, y=bound.y + local_start.y)
        stop = Point(x=bound.x + local_stop.x, y=bound.y + local_stop.y)
        axis_boundary = (
            start.offset(-pad.x, -pad.y),
            start.offset(pad.x, pad.y),
            stop.offset(pad.x, pad.y),
            stop.offset(-pad.x, -pad.y),
        )

        dims.append(
            DimensionLayoutResult(
                label=label,
                axes=axis_metrics,
                layout=DimensionGeometry(
                    bound=bound,
                    space_before=space_before,
                    space_after=space_after,
                    axis_start=local_start,
                    axis_stop=local_stop,
                    label_point=label_point,
                    label_offset=Point(x=offset_x, y=offset_y),
                    label_boundary=label_boundary,
                    axis_boundary=axis_boundary,
                ),
            )
        )

    return LayoutResult(
        size=size,
        horizontal=frame.horizontal,
        padding=padding,
        draw_rect=draw_rect,
        axis_start=axis_start,
        axis_stop=axis_stop,
        label_cos=label_cos,
        label_sin=label_sin,
        label_rad=label_rad,
        max_length_cos=max_length_cos,
        max_length_sin=max_length_sin,
        total_bound_space=total_bound_space,
        gap=gap,
        offset=offset,
        space=space,
        dims=tuple(dims),
    )
