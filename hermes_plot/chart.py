from __future__ import annotations

import logging
from typing import Any, Callable, Mapping, Protocol, Sequence

import numpy as np

from hermes_plot.adapters import normalize_data, validate_dimensions
from hermes_plot.config import DEFAULT_OPTIONS, ChartOptions, merge_options
from hermes_plot.errors import HermesError
from hermes_plot.interaction import InteractionModel
from hermes_plot.layout import LayoutResult, compute_layout
from hermes_plot.raster.renderer import RasterRenderer
from hermes_plot.render import Renderer, draw_chart
from hermes_plot.scales import build_scale
from hermes_plot.types import Dimension, Filter, Point, Size


LOGGER = logging.getLogger(__name__)

ResizeListener = Callable[[float, float], None]


class ChartRenderer(Renderer, Protocol):
    def resize(self, width: int, height: int) -> None:
        ...


class HostSurface(Protocol):
    """Where a chart lives: reports its size, resize events and a renderer."""

    def size(self) -> tuple[float, float]:
        ...

    def get_renderer(self) -> ChartRenderer | None:
        ...

    def add_resize_listener(self, listener: ResizeListener) -> None:
        ...

    def remove_resize_listener(self, listener: ResizeListener) -> None:
        ...


class RasterSurface:
    """In-memory host backed by a :class:`RasterRenderer`."""

    def __init__(self, width: int, height: int, *, background: tuple[int, int, int, int] = (0, 0, 0, 255)) -> None:
        self._width = float(width)
        self._height = float(height)
        self.renderer = RasterRenderer(width, height, background=background)
        self._listeners: list[ResizeListener] = []

    def size(self) -> tuple[float, float]:
        return (self._width, self._height)

    def get_renderer(self) -> RasterRenderer:
        return self.renderer

    def add_resize_listener(self, listener: ResizeListener) -> None:
        self._listeners.append(listener)

    def remove_resize_listener(self, listener: ResizeListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def resize(self, width: int, height: int) -> None:
        self._width = float(width)
        self._height = float(height)
        for listener in list(self._listeners):
            listener(self._width, self._height)


class Hermes:
    """Interactive parallel-coordinates chart bound to a host surface."""

    def __init__(
        self,
        target: HostSurface | None,
        data: Mapping[str, Any],
        dimensions: Sequence[Dimension],
        options: ChartOptions | Mapping[str, Any] | None = None,
    ) -> None:
        if target is None:
            raise HermesError("Target surface is missing.")
        renderer = target.get_renderer()
        if renderer is None:
            raise HermesError("Unable to get renderer from target surface.")
        self.target = target
        self.renderer = renderer

        self.dimensions = validate_dimensions(dimensions)
        self.columns, self.data_count = normalize_data(data, self.dimensions)
        if isinstance(options, ChartOptions):
            self.options = options
        else:
            self.options = merge_options(DEFAULT_OPTIONS, options)

        self.interaction = InteractionModel()
        self.layout: LayoutResult | None = None
        self.cursor = "default"
        w, h = target.size()
        self.size = Size(w=float(w), h=float(h))
        self._destroyed = False
        target.add_resize_listener(self._handle_resize)
        self.calculate()

    @property
    def filters(self) -> dict[str, list[Filter]]:
        return self.interaction.filters

    def get_data(self) -> dict[str, np.ndarray]:
        return self.columns

    def set_data(self, data: Mapping[str, Any], redraw: bool = True) -> None:
        self.columns, self.data_count = normalize_data(data, self.dimensions)
        self.calculate_scales()
        if self.layout is not None:
            length = self.layout.axis_length
            self.interaction.rescale_filters(self.dimensions, length, length)
        if redraw:
            self.redraw()

    def set_size(self, w: float, h: float) -> None:
        self.size = Size(w=float(w), h=float(h))
        self.renderer.resize(int(w), int(h))

    def destroy(self) -> None:
        if self._destroyed:
            return
        self.target.remove_resize_listener(self._handle_resize)
        self._destroyed = True

    def calculate(self) -> None:
        self.calculate_scales()
        self.redraw()

    def calculate_scales(self) -> None:
        for dimension in self.dimensions:
            scale = build_scale(dimension.axis, self.columns[dimension.key])
            if self.layout is not None:
                scale.set_axis_length(self.layout.axis_length)
            dimension.axis.scale = scale

    def calculate_layout(self) -> LayoutResult:
        previous = self.layout.axis_length if self.layout is not None else 0.0
        layout = compute_layout(self.size, self.dimensions, self.options, self.renderer)
        self.interaction.rescale_filters(self.dimensions, previous, layout.axis_length)
        self.layout = layout
        return layout

    def redraw(self) -> None:
        self.calculate_layout()
        self.draw()

    def draw(self) -> None:
        if self.layout is None:
            return
        draw_chart(
            self.renderer,
            self.layout,
            self.dimensions,
            self.columns,
            self.data_count,
            self.interaction.filters,
            self.options,
            drag=self.interaction.drag,
        )

    def handle_pointer_down(self, x: float, y: float) -> bool:
        if self.layout is None:
            return False
        started = self.interaction.pointer_down(Point(x, y), self.layout, self.dimensions)
        self.cursor = self.interaction.cursor_at(Point(x, y), self.layout, self.dimensions)
        if started:
            self.draw()
        return started

    def handle_pointer_move(self, x: float, y: float) -> bool:
        if self.layout is None:
            return False
        point = Point(x, y)
        moved = self.interaction.pointer_move(point, self.layout, self.dimensions)
        self.cursor = self.interaction.cursor_at(point, self.layout, self.dimensions)
        if moved:
            self.draw()
        return moved

    def handle_pointer_up(self, x: float, y: float) -> bool:
        if self.layout is None:
            return False
        point = Point(x, y)
        changed = self.interaction.pointer_up(point, self.layout, self.dimensions)
        self.cursor = self.interaction.cursor_at(point, self.layout, self.dimensions)
        self.redraw()
        return changed

    def handle_double_click(self, x: float, y: float) -> bool:
        if self.layout is None:
            return False
        removed = self.interaction.double_click(Point(x, y), self.layout, self.dimensions)
        if removed:
            self.draw()
        return removed

    def clear_filters(self, key: str | None = None) -> None:
        self.interaction.clear_filters(key)
        self.draw()

    def _handle_resize(self, w: float, h: float) -> None:
        LOGGER.debug("resize to %.0fx%.0f", w, h)
        self.set_size(w, h)
        self.redraw()
