"""Chart options.

Options are nested frozen dataclasses with defaults. User overrides are plain
nested mappings merged onto the defaults with :func:`merge_options`.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, TypeVar

from hermes_plot.color import RGBA, parse_color
from hermes_plot.geometry import normalize_padding
from hermes_plot.raster.draw_text import DEFAULT_FONT_FAMILY, DEFAULT_FONT_SIZE_PX
from hermes_plot.types import DimensionLayout, Direction, LabelPlacement, Padding


@dataclass(frozen=True)
class LineStyle:
    color: RGBA = (124, 138, 156, 255)
    width: int = 1


@dataclass(frozen=True)
class TickStyle:
    length: float = 4.0
    color: RGBA = (124, 138, 156, 255)
    width: int = 1


@dataclass(frozen=True)
class DimensionLabelStyle:
    font_family: str = DEFAULT_FONT_FAMILY
    font_size_px: float = DEFAULT_FONT_SIZE_PX
    color: RGBA = (208, 218, 232, 255)
    angle: float | None = None
    offset: float = 10.0
    placement: LabelPlacement = LabelPlacement.BEFORE


@dataclass(frozen=True)
class AxesLabelStyle:
    font_family: str = DEFAULT_FONT_FAMILY
    font_size_px: float = 10.0
    color: RGBA = (160, 172, 188, 255)
    angle: float | None = None
    offset: float = 5.0
    placement: LabelPlacement = LabelPlacement.AFTER


@dataclass(frozen=True)
class FilterStyle:
    width: int = 4
    color: RGBA = (255, 165, 0, 200)


@dataclass(frozen=True)
class DimensionStyle:
    label: DimensionLabelStyle = field(default_factory=DimensionLabelStyle)
    label_boundary_padding: float = 5.0
    layout: DimensionLayout = DimensionLayout.AXIS_EVENLY_SPACED


@dataclass(frozen=True)
class AxesStyle:
    axis: LineStyle = field(default_factory=LineStyle)
    tick: TickStyle = field(default_factory=TickStyle)
    label: AxesLabelStyle = field(default_factory=AxesLabelStyle)
    filter: FilterStyle = field(default_factory=FilterStyle)
    axis_boundary_padding: float = 15.0


@dataclass(frozen=True)
class ColorScale:
    dimension_key: str
    colors: tuple[RGBA, ...] = ()


@dataclass(frozen=True)
class DataStyle:
    color: RGBA = (62, 149, 255, 96)
    width: int = 1
    filtered_color: RGBA = (90, 98, 110, 40)
    color_scale: ColorScale | None = None


@dataclass(frozen=True)
class ChartStyle:
    padding: Padding = (50.0, 50.0, 50.0, 50.0)
    background: RGBA = (12, 16, 23, 255)
    dimension: DimensionStyle = field(default_factory=DimensionStyle)
    axes: AxesStyle = field(default_factory=AxesStyle)
    data: DataStyle = field(default_factory=DataStyle)


@dataclass(frozen=True)
class ChartOptions:
    direction: Direction = Direction.HORIZONTAL
    style: ChartStyle = field(default_factory=ChartStyle)
    debug: bool = False


DEFAULT_OPTIONS = ChartOptions()

T = TypeVar("T")


def merge_options(base: T, overrides: Mapping[str, Any] | None = None, *, _path: str = "") -> T:
    """Deep-merge a nested mapping of overrides onto an options dataclass.

    Unknown keys raise ``ValueError``. Enum fields accept members or their
    string values, colour fields accept hex strings or tuples, and padding
    accepts CSS-style shorthand.
    """
    if not overrides:
        return base
    if not dataclasses.is_dataclass(base):
        raise TypeError(f"cannot merge options into {type(base).__name__}")

    known = {f.name for f in dataclasses.fields(base)}
    changes: dict[str, Any] = {}
    for key, value in overrides.items():
        path = f"{_path}{key}"
        if key not in known:
            raise ValueError(f"Unknown option: {path}")
        current = getattr(base, key)
        if dataclasses.is_dataclass(current) and isinstance(value, Mapping):
            changes[key] = merge_options(current, value, _path=f"{path}.")
        else:
            changes[key] = _coerce_option(key, current, value, path=path)
    return dataclasses.replace(base, **changes)


def _coerce_option(key: str, current: Any, value: Any, *, path: str) -> Any:
    if isinstance(value, type(current)) and isinstance(current, Enum):
        return value
    if isinstance(current, Enum):
        try:
            return type(current)(value)
        except ValueError as exc:
            raise ValueError(f"Option `{path}` has invalid value: {value!r}") from exc
    if key == "padding":
        return normalize_padding(value)
    if key == "color_scale":
        if value is None or isinstance(value, ColorScale):
            return value
        if not isinstance(value, Mapping) or "dimension_key" not in value:
            raise ValueError(f"Option `{path}` must be a mapping with `dimension_key`")
        colors = tuple(parse_color(c) for c in value.get("colors", ()))
        return ColorScale(dimension_key=str(value["dimension_key"]), colors=colors)
    if key == "color" or key.endswith("_color") or key == "background":
        return parse_color(value)
    if key == "angle":
        return None if value is None else float(value)
    if isinstance(current, bool):
        return bool(value)
    if isinstance(current, (int, float)) and not isinstance(value, (int, float)):
        raise ValueError(f"Option `{path}` must be a number")
    return value
