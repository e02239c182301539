from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
import math
from typing import TYPE_CHECKING, Any, Sequence

if TYPE_CHECKING:
    from hermes_plot.scales import NiceScale


class AxisType(str, Enum):
    LINEAR = "linear"
    LOGARITHMIC = "logarithmic"
    CATEGORICAL = "categorical"


class Direction(str, Enum):
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"


class LabelPlacement(str, Enum):
    BEFORE = "before"
    AFTER = "after"


class DimensionLayout(str, Enum):
    AXIS_EVENLY_SPACED = "axis-evenly-spaced"
    EQUIDISTANT = "equidistant"
    EVENLY_SPACED = "evenly-spaced"


class ActionType(str, Enum):
    LABEL_MOVE = "label-move"
    FILTER_CREATE = "filter-create"
    FILTER_MOVE = "filter-move"
    FILTER_RESIZE = "filter-resize"


class FocusType(str, Enum):
    DIMENSION_LABEL = "dimension-label"
    DIMENSION_AXIS = "dimension-axis"
    FILTER = "filter"
    FILTER_RESIZE = "filter-resize"


@dataclass(frozen=True)
class Point:
    x: float
    y: float

    def offset(self, dx: float = 0.0, dy: float = 0.0) -> "Point":
        return Point(x=self.x + dx, y=self.y + dy)


@dataclass(frozen=True)
class Size:
    w: float
    h: float


@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    w: float
    h: float

    def moved_to(self, *, x: float | None = None, y: float | None = None) -> "Rect":
        return Rect(
            x=self.x if x is None else x,
            y=self.y if y is None else y,
            w=self.w,
            h=self.h,
        )


Boundary = tuple[Point, ...]
Padding = tuple[float, float, float, float]


@dataclass
class AxisSpec:
    type: AxisType = AxisType.LINEAR
    range: tuple[float, float] | None = None
    log_base: float = 10.0
    categories: Sequence[Any] | None = None
    scale: "NiceScale | None" = None


@dataclass
class Dimension:
    key: str
    label: str
    axis: AxisSpec = field(default_factory=AxisSpec)


@dataclass(frozen=True)
class Filter:
    """Range filter along one axis, in axis-local pixels plus the matching data values."""

    p0: float = math.nan
    p1: float = math.nan
    value0: Any = math.nan
    value1: Any = math.nan
