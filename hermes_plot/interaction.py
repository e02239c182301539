"""Pointer-driven label reordering and per-axis range filters.

The :class:`InteractionModel` is a small state machine: ``Idle`` until a
pointer-down lands on a label or an axis, then one of the
:class:`ActionType` drag states until pointer-up commits or discards the
gesture. Filters are kept per dimension key in axis-local pixels together
with the data values at those pixels.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
import logging
import math
from typing import Mapping, MutableSequence, Sequence

import numpy as np

from hermes_plot.geometry import is_point_in_boundary
from hermes_plot.layout import LayoutResult
from hermes_plot.types import ActionType, Dimension, Filter, FocusType, Point, Rect


LOGGER = logging.getLogger(__name__)

FILTER_REMOVE_THRESHOLD = 1
FILTER_RESIZE_THRESHOLD = 3


def is_filter_empty(f: Filter) -> bool:
    return math.isnan(f.p0) and math.isnan(f.p1)


def is_filter_invalid(f: Filter) -> bool:
    return f.p0 >= f.p1


def is_intersecting_filters(f0: Filter, f1: Filter) -> bool:
    return f0.p0 <= f1.p1 and f1.p0 <= f0.p1


def merge_filters(f0: Filter, f1: Filter) -> Filter:
    """Union of two filters: lowest start and highest end, each with its value."""
    if f0.p0 < f1.p0:
        p0, value0 = f0.p0, f0.value0
    else:
        p0, value0 = f1.p0, f1.value0
    if f0.p1 > f1.p1:
        p1, value1 = f0.p1, f0.value1
    else:
        p1, value1 = f1.p1, f1.value1
    return Filter(p0=p0, p1=p1, value0=value0, value1=value1)


def clean_up_filters(filters: Sequence[Filter]) -> list[Filter]:
    """Merge overlapping (or nearly touching) filters, then drop degenerate ones.

    Filters whose facing edges are closer than ``FILTER_RESIZE_THRESHOLD`` are
    merged as well, since their resize handles could not be told apart. After
    merging, empty, invalid and sub-``FILTER_REMOVE_THRESHOLD`` filters are
    removed. The result is sorted by ``p0`` and pairwise disjoint.
    """
    candidates = sorted((f for f in filters if not is_filter_empty(f)), key=lambda f: f.p0)
    merged: list[Filter] = []
    for f in candidates:
        if math.isnan(f.p0) or math.isnan(f.p1):
            continue
        if merged and (is_intersecting_filters(merged[-1], f) or f.p0 - merged[-1].p1 < FILTER_RESIZE_THRESHOLD):
            merged[-1] = merge_filters(merged[-1], f)
        else:
            merged.append(f)
    return [f for f in merged if not is_filter_invalid(f) and f.p1 - f.p0 >= FILTER_REMOVE_THRESHOLD]


@dataclass(frozen=True)
class Focus:
    type: FocusType
    index: int
    filter_index: int | None = None
    edge: int | None = None


@dataclass
class Drag:
    action: ActionType
    index: int
    origin: Point
    current: Point
    bound0: Rect
    bound1: Rect
    filter_index: int | None = None
    filter0: Filter | None = None
    anchor: float = 0.0


def get_drag_bound(index: int, drag: Drag | None, bound: Rect) -> Rect:
    """Bound to draw a dimension with; the dragged label follows the pointer."""
    if drag is not None and drag.action == ActionType.LABEL_MOVE and drag.index == index:
        return drag.bound1
    return bound


def axis_position(layout: LayoutResult, index: int, point: Point) -> float:
    """Pointer position along a dimension's axis, relative to the axis start."""
    frame = layout.frame
    return frame.along(point) - frame.along(layout.axis_origin(index))


def get_focus_by_point(
    point: Point,
    layout: LayoutResult,
    filters: Sequence[Sequence[Filter]] | None = None,
) -> Focus | None:
    """What lies under ``point``: a label first, then a filter edge, a filter or an axis."""
    for i, dim in enumerate(layout.dims):
        if is_point_in_boundary(point, dim.layout.label_boundary):
            return Focus(type=FocusType.DIMENSION_LABEL, index=i)

    for i, dim in enumerate(layout.dims):
        if not is_point_in_boundary(point, dim.layout.axis_boundary):
            continue
        pos = axis_position(layout, i, point)
        dim_filters = filters[i] if filters is not None and i < len(filters) else ()
        for k, f in enumerate(dim_filters):
            if abs(pos - f.p0) <= FILTER_RESIZE_THRESHOLD:
                return Focus(type=FocusType.FILTER_RESIZE, index=i, filter_index=k, edge=0)
            if abs(pos - f.p1) <= FILTER_RESIZE_THRESHOLD:
                return Focus(type=FocusType.FILTER_RESIZE, index=i, filter_index=k, edge=1)
        for k, f in enumerate(dim_filters):
            if f.p0 <= pos <= f.p1:
                return Focus(type=FocusType.FILTER, index=i, filter_index=k)
        return Focus(type=FocusType.DIMENSION_AXIS, index=i)
    return None


def cursor_for_focus(focus: Focus | None, *, horizontal: bool, dragging: bool = False) -> str:
    if focus is None:
        return "default"
    if focus.type == FocusType.DIMENSION_LABEL:
        return "grabbing" if dragging else "grab"
    if focus.type == FocusType.FILTER:
        return "move"
    if focus.type == FocusType.FILTER_RESIZE:
        return "ns-resize" if horizontal else "ew-resize"
    return "crosshair"


def active_record_mask(
    positions: Mapping[str, np.ndarray],
    filters: Mapping[str, Sequence[Filter]],
    count: int,
) -> np.ndarray:
    """True for records that fall inside at least one filter on every filtered axis."""
    mask = np.ones(count, dtype=bool)
    for key, dim_filters in filters.items():
        if not dim_filters or key not in positions:
            continue
        pos = positions[key]
        inside = np.zeros(count, dtype=bool)
        for f in dim_filters:
            inside |= (pos >= f.p0) & (pos <= f.p1)
        mask &= inside
    return mask


class InteractionModel:
    """Turns pointer sequences into dimension reorders and filter edits."""

    def __init__(self) -> None:
        self.filters: dict[str, list[Filter]] = {}
        self.drag: Drag | None = None

    @property
    def state(self) -> ActionType | None:
        return None if self.drag is None else self.drag.action

    def filters_by_index(self, dimensions: Sequence[Dimension]) -> list[list[Filter]]:
        return [self.filters.get(d.key, []) for d in dimensions]

    def focus_at(self, point: Point, layout: LayoutResult, dimensions: Sequence[Dimension]) -> Focus | None:
        return get_focus_by_point(point, layout, self.filters_by_index(dimensions))

    def cursor_at(self, point: Point, layout: LayoutResult, dimensions: Sequence[Dimension]) -> str:
        if self.drag is not None:
            if self.drag.action == ActionType.LABEL_MOVE:
                return "grabbing"
            if self.drag.action == ActionType.FILTER_MOVE:
                return "move"
            return "ns-resize" if layout.horizontal else "ew-resize"
        focus = self.focus_at(point, layout, dimensions)
        return cursor_for_focus(focus, horizontal=layout.horizontal)

    def pointer_down(self, point: Point, layout: LayoutResult, dimensions: Sequence[Dimension]) -> bool:
        focus = self.focus_at(point, layout, dimensions)
        if focus is None:
            self.drag = None
            return False

        i = focus.index
        bound = layout.dims[i].layout.bound
        drag = Drag(action=ActionType.LABEL_MOVE, index=i, origin=point, current=point, bound0=bound, bound1=bound)
        if focus.type == FocusType.DIMENSION_LABEL:
            self.drag = drag
            return True

        key = dimensions[i].key
        dim_filters = self.filters.setdefault(key, [])
        pos = self._clamp(axis_position(layout, i, point), layout)
        if focus.type == FocusType.FILTER_RESIZE and focus.filter_index is not None:
            f = dim_filters[focus.filter_index]
            drag.action = ActionType.FILTER_RESIZE
            drag.filter_index = focus.filter_index
            drag.filter0 = f
            drag.anchor = f.p1 if focus.edge == 0 else f.p0
        elif focus.type == FocusType.FILTER and focus.filter_index is not None:
            drag.action = ActionType.FILTER_MOVE
            drag.filter_index = focus.filter_index
            drag.filter0 = dim_filters[focus.filter_index]
        else:
            value = self._pos_to_value(dimensions[i], pos)
            dim_filters.append(Filter(p0=pos, p1=pos, value0=value, value1=value))
            drag.action = ActionType.FILTER_CREATE
            drag.filter_index = len(dim_filters) - 1
            drag.anchor = pos
        self.drag = drag
        return True

    def pointer_move(self, point: Point, layout: LayoutResult, dimensions: Sequence[Dimension]) -> bool:
        drag = self.drag
        if drag is None:
            return False
        drag.current = point
        frame = layout.frame

        if drag.action == ActionType.LABEL_MOVE:
            delta = frame.across(point) - frame.across(drag.origin)
            drag.bound1 = frame.with_across_origin(drag.bound0, frame.across_origin(drag.bound0) + delta)
            return True

        dimension = dimensions[drag.index]
        dim_filters = self.filters.setdefault(dimension.key, [])
        if drag.filter_index is None or drag.filter_index >= len(dim_filters):
            return False
        raw = axis_position(layout, drag.index, point)
        if drag.action == ActionType.FILTER_MOVE and drag.filter0 is not None:
            start = axis_position(layout, drag.index, drag.origin)
            f0 = drag.filter0
            delta = min(max(raw - start, -f0.p0), layout.axis_length - f0.p1)
            p0, p1 = f0.p0 + delta, f0.p1 + delta
        else:
            pos = self._clamp(raw, layout)
            p0, p1 = min(drag.anchor, pos), max(drag.anchor, pos)
        dim_filters[drag.filter_index] = Filter(
            p0=p0,
            p1=p1,
            value0=self._pos_to_value(dimension, p0),
            value1=self._pos_to_value(dimension, p1),
        )
        return True

    def pointer_up(
        self,
        point: Point,
        layout: LayoutResult,
        dimensions: MutableSequence[Dimension],
    ) -> bool:
        """Commit the active gesture; returns True when order or filters changed."""
        drag = self.drag
        if drag is None:
            return False
        self.pointer_move(point, layout, dimensions)
        self.drag = None

        if drag.action == ActionType.LABEL_MOVE:
            return self._commit_label_move(drag, layout, dimensions)

        key = dimensions[drag.index].key
        before = list(self.filters.get(key, []))
        cleaned = clean_up_filters(before)
        if cleaned:
            self.filters[key] = cleaned
        else:
            self.filters.pop(key, None)
        LOGGER.debug("filters on `%s` after %s: %d", key, drag.action.value, len(cleaned))
        return True

    def double_click(self, point: Point, layout: LayoutResult, dimensions: Sequence[Dimension]) -> bool:
        """Remove the filter under ``point``, if any."""
        focus = self.focus_at(point, layout, dimensions)
        if focus is None or focus.filter_index is None:
            return False
        key = dimensions[focus.index].key
        dim_filters = self.filters.get(key, [])
        del dim_filters[focus.filter_index]
        if not dim_filters:
            self.filters.pop(key, None)
        return True

    def clear_filters(self, key: str | None = None) -> None:
        if key is None:
            self.filters.clear()
        else:
            self.filters.pop(key, None)

    def rescale_filters(self, dimensions: Sequence[Dimension], old_length: float, new_length: float) -> None:
        """Keep filters at the same relative axis position after the axis length changes.

        Filter values are always re-derived from the current scales, so passing
        equal lengths refreshes them after the data domain changes.
        """
        if old_length <= 0 or new_length <= 0:
            return
        ratio = new_length / old_length
        by_key = {d.key: d for d in dimensions}
        for key, dim_filters in self.filters.items():
            dimension = by_key.get(key)
            rescaled = []
            for f in dim_filters:
                p0, p1 = f.p0 * ratio, f.p1 * ratio
                if dimension is None:
                    rescaled.append(dataclasses.replace(f, p0=p0, p1=p1))
                    continue
                rescaled.append(
                    Filter(
                        p0=p0,
                        p1=p1,
                        value0=self._pos_to_value(dimension, p0),
                        value1=self._pos_to_value(dimension, p1),
                    )
                )
            self.filters[key] = rescaled

    def _commit_label_move(
        self,
        drag: Drag,
        layout: LayoutResult,
        dimensions: MutableSequence[Dimension],
    ) -> bool:
        frame = layout.frame
        dragged_mid = frame.across_origin(drag.bound1) + frame.across_size(drag.bound1) / 2
        new_index = 0
        for j, dim in enumerate(layout.dims):
            if j == drag.index:
                continue
            bound = dim.layout.bound
            if frame.across_origin(bound) + frame.across_size(bound) / 2 < dragged_mid:
                new_index += 1
        if new_index == drag.index:
            return False
        moved = dimensions[drag.index]
        del dimensions[drag.index]
        dimensions.insert(new_index, moved)
        LOGGER.debug("moved dimension `%s` from %d to %d", moved.key, drag.index, new_index)
        return True

    @staticmethod
    def _clamp(pos: float, layout: LayoutResult) -> float:
        return min(max(pos, 0.0), layout.axis_length)

    @staticmethod
    def _pos_to_value(dimension: Dimension, pos: float):
        scale = dimension.axis.scale
        if scale is None:
            return math.nan
        return scale.pos_to_value(pos)
