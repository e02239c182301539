from __future__ import annotations

import math
import unittest

import numpy as np

from hermes_plot.config import DEFAULT_OPTIONS, merge_options
from hermes_plot.geometry import AxisFrame, is_point_in_boundary, normalize_padding, text_boundary
from hermes_plot.layout import compute_layout
from hermes_plot.scales import build_scale
from hermes_plot.types import AxisSpec, AxisType, Dimension, Point, Size


class FakeMeasurer:
    """Monospace stand-in: 6 px per character, 10 px tall, nothing for empty text."""

    def measure_text(self, text: str, *, font_family: str, font_size_px: float) -> Size:
        if not text:
            return Size(w=0.0, h=0.0)
        return Size(w=6.0 * len(text), h=10.0)


def _dimension(key: str, label: str, values, axis_type: AxisType = AxisType.LINEAR) -> Dimension:
    dimension = Dimension(key=key, label=label, axis=AxisSpec(type=axis_type))
    dimension.axis.scale = build_scale(dimension.axis, values)
    return dimension


def _mixed_dimensions(count: int = 50) -> list[Dimension]:
    rng = np.random.default_rng(7)
    return [
        _dimension("lr", "learning rate", rng.uniform(0.0, 1.0, size=count)),
        _dimension("steps", "steps", 10 ** rng.uniform(1.0, 4.0, size=count), AxisType.LOGARITHMIC),
        _dimension("opt", "optimizer", [("adam", "sgd", "rmsprop")[i % 3] for i in range(count)], AxisType.CATEGORICAL),
        _dimension("loss", "loss", rng.uniform(-2.0, 2.0, size=count)),
    ]


class GeometryTests(unittest.TestCase):
    def test_padding_shorthand(self) -> None:
        self.assertEqual(normalize_padding(5), (5.0, 5.0, 5.0, 5.0))
        self.assertEqual(normalize_padding((1, 2)), (1.0, 2.0, 1.0, 2.0))
        self.assertEqual(normalize_padding([1, 2, 3, 4]), (1.0, 2.0, 3.0, 4.0))
        with self.assertRaises(ValueError):
            normalize_padding((1, 2, 3))

    def test_frame_swaps_axes_by_direction(self) -> None:
        horizontal = AxisFrame(horizontal=True)
        vertical = AxisFrame(horizontal=False)
        self.assertEqual(horizontal.point(along=3.0, across=7.0), Point(x=7.0, y=3.0))
        self.assertEqual(vertical.point(along=3.0, across=7.0), Point(x=3.0, y=7.0))

    def test_rotated_text_boundary_contains_its_center(self) -> None:
        boundary = text_boundary(100.0, 100.0, 40.0, 10.0, math.pi / 4, 0.0, -5.0, 2.0)
        self.assertEqual(len(boundary), 4)
        center = Point(x=100.0 + 20.0 * math.cos(math.pi / 4), y=100.0 + 20.0 * math.sin(math.pi / 4))
        self.assertTrue(is_point_in_boundary(center, boundary))
        self.assertFalse(is_point_in_boundary(Point(x=60.0, y=100.0), boundary))

    def test_point_on_edge_is_inside(self) -> None:
        square = (Point(0.0, 0.0), Point(10.0, 0.0), Point(10.0, 10.0), Point(0.0, 10.0))
        self.assertTrue(is_point_in_boundary(Point(10.0, 5.0), square))
        self.assertFalse(is_point_in_boundary(Point(10.5, 5.0), square))


class ComputeLayoutTests(unittest.TestCase):
    def test_single_dimension_axis_spans_full_draw_rect(self) -> None:
        options = merge_options(
            DEFAULT_OPTIONS,
            {"style": {"padding": 0, "dimension": {"label": {"offset": 0}}}},
        )
        for direction, expected in (("horizontal", 100.0), ("vertical", 200.0)):
            with self.subTest(direction=direction):
                opts = merge_options(options, {"direction": direction})
                result = compute_layout(Size(w=200.0, h=100.0), [_dimension("a", "", [0.0, 1.0])], opts, FakeMeasurer())
                self.assertAlmostEqual(result.axis_length, expected)
                geometry = result.dims[0].layout
                span = AxisFrame(horizontal=result.horizontal).along(geometry.axis_stop) - AxisFrame(
                    horizontal=result.horizontal
                ).along(geometry.axis_start)
                self.assertAlmostEqual(span, expected)

    def test_evenly_spaced_end_to_end(self) -> None:
        options = merge_options(DEFAULT_OPTIONS, {"style": {"dimension": {"layout": "evenly-spaced"}}})
        dimensions = _mixed_dimensions()
        result = compute_layout(Size(w=800.0, h=400.0), dimensions, options, FakeMeasurer())

        xs = [dim.layout.bound.x for dim in result.dims]
        self.assertEqual(xs, sorted(xs))
        self.assertEqual(len(set(xs)), 4)
        total = sum(dim.layout.bound.w for dim in result.dims) + 3 * result.gap
        self.assertAlmostEqual(total, result.draw_rect.w)
        self.assertAlmostEqual(xs[0], result.padding[3])
        self.assertEqual(len(result.dims[2].axes.tick_labels), 3)
        self.assertEqual(result.dims[2].axes.tick_labels, ("adam", "sgd", "rmsprop"))

    def test_axis_evenly_spaced_centers_each_axis_in_its_space(self) -> None:
        dimensions = _mixed_dimensions()
        result = compute_layout(Size(w=800.0, h=400.0), dimensions, DEFAULT_OPTIONS, FakeMeasurer())
        self.assertAlmostEqual(result.space, 700.0 / 4)
        for i, dim in enumerate(result.dims):
            axis_x = dim.layout.bound.x + dim.layout.axis_start.x
            self.assertAlmostEqual(axis_x, 50.0 + i * result.space + result.space / 2)

    def test_equidistant_centers_each_bound_in_its_space(self) -> None:
        options = merge_options(DEFAULT_OPTIONS, {"style": {"dimension": {"layout": "equidistant"}}})
        result = compute_layout(Size(w=800.0, h=400.0), _mixed_dimensions(), options, FakeMeasurer())
        for i, dim in enumerate(result.dims):
            center = dim.layout.bound.x + dim.layout.bound.w / 2
            self.assertAlmostEqual(center, 50.0 + i * result.space + result.space / 2)

    def test_label_band_is_reserved_before_the_axis(self) -> None:
        result = compute_layout(Size(w=800.0, h=400.0), _mixed_dimensions(), DEFAULT_OPTIONS, FakeMeasurer())
        # top padding + label height + label offset
        self.assertAlmostEqual(result.axis_start, 70.0)
        self.assertAlmostEqual(result.axis_stop, 350.0)

    def test_label_after_reserves_band_at_the_end(self) -> None:
        options = merge_options(DEFAULT_OPTIONS, {"style": {"dimension": {"label": {"placement": "after"}}}})
        result = compute_layout(Size(w=800.0, h=400.0), _mixed_dimensions(), options, FakeMeasurer())
        self.assertAlmostEqual(result.axis_start, 50.0)
        self.assertAlmostEqual(result.axis_stop, 330.0)
        geometry = result.dims[0].layout
        self.assertGreater(geometry.label_point.y, geometry.axis_stop.y)

    def test_scales_receive_the_shared_axis_length(self) -> None:
        dimensions = _mixed_dimensions()
        result = compute_layout(Size(w=800.0, h=400.0), dimensions, DEFAULT_OPTIONS, FakeMeasurer())
        for dimension, dim in zip(dimensions, result.dims):
            self.assertAlmostEqual(dimension.axis.scale.axis_length, result.axis_length)
            self.assertEqual(dim.axes.tick_pos, tuple(dimension.axis.scale.tick_pos))

    def test_label_boundary_surrounds_the_label_anchor(self) -> None:
        result = compute_layout(Size(w=800.0, h=400.0), _mixed_dimensions(), DEFAULT_OPTIONS, FakeMeasurer())
        for dim in result.dims:
            bound = dim.layout.bound
            anchor = Point(x=bound.x + dim.layout.label_point.x, y=bound.y + dim.layout.label_point.y - 5.0)
            self.assertTrue(is_point_in_boundary(anchor, dim.layout.label_boundary))

    def test_axis_boundary_pads_the_axis_line(self) -> None:
        result = compute_layout(Size(w=800.0, h=400.0), _mixed_dimensions(), DEFAULT_OPTIONS, FakeMeasurer())
        origin = result.axis_origin(1)
        self.assertTrue(is_point_in_boundary(origin.offset(14.0, 20.0), result.dims[1].layout.axis_boundary))
        self.assertFalse(is_point_in_boundary(origin.offset(16.0, 20.0), result.dims[1].layout.axis_boundary))

    def test_angled_labels_project_onto_the_angle(self) -> None:
        options = merge_options(DEFAULT_OPTIONS, {"style": {"dimension": {"label": {"angle": -math.pi / 2}}}})
        result = compute_layout(Size(w=800.0, h=400.0), _mixed_dimensions(), options, FakeMeasurer())
        self.assertAlmostEqual(result.label_rad, -math.pi / 2)
        # "learning rate" is the longest label: 13 chars * 6 px, pointing up.
        self.assertAlmostEqual(result.max_length_sin, -78.0)
        self.assertAlmostEqual(result.axis_start, 50.0 + 78.0 + 10.0)

    def test_vertical_direction_lays_dimensions_top_to_bottom(self) -> None:
        options = merge_options(DEFAULT_OPTIONS, {"direction": "vertical"})
        result = compute_layout(Size(w=800.0, h=400.0), _mixed_dimensions(), options, FakeMeasurer())
        self.assertFalse(result.horizontal)
        ys = [dim.layout.bound.y for dim in result.dims]
        self.assertEqual(ys, sorted(ys))
        for dim in result.dims:
            self.assertAlmostEqual(dim.layout.axis_start.y, dim.layout.axis_stop.y)

    def test_tiny_canvas_collapses_axes_without_error(self) -> None:
        result = compute_layout(Size(w=60.0, h=60.0), _mixed_dimensions(), DEFAULT_OPTIONS, FakeMeasurer())
        self.assertEqual(result.axis_length, 0.0)
        self.assertEqual(result.axis_start, result.axis_stop)
        self.assertEqual(result.draw_rect.h, 0.0)

    def test_layout_is_rebuilt_not_mutated(self) -> None:
        dimensions = _mixed_dimensions()
        first = compute_layout(Size(w=800.0, h=400.0), dimensions, DEFAULT_OPTIONS, FakeMeasurer())
        second = compute_layout(Size(w=600.0, h=300.0), dimensions, DEFAULT_OPTIONS, FakeMeasurer())
        self.assertIsNot(first, second)
        self.assertEqual(first.size, Size(w=800.0, h=400.0))
        self.assertNotEqual(first.axis_stop, second.axis_stop)


class MergeOptionsTests(unittest.TestCase):
    def test_nested_overrides_keep_other_defaults(self) -> None:
        options = merge_options(DEFAULT_OPTIONS, {"style": {"axes": {"tick": {"length": 8}}}})
        self.assertEqual(options.style.axes.tick.length, 8)
        self.assertEqual(options.style.axes.tick.width, DEFAULT_OPTIONS.style.axes.tick.width)
        self.assertEqual(options.style.padding, DEFAULT_OPTIONS.style.padding)

    def test_colors_and_enums_are_coerced(self) -> None:
        options = merge_options(
            DEFAULT_OPTIONS,
            {"direction": "vertical", "style": {"background": "#ff000080"}},
        )
        self.assertEqual(options.direction.value, "vertical")
        self.assertEqual(options.style.background, (255, 0, 0, 128))

    def test_unknown_option_is_rejected(self) -> None:
        with self.assertRaisesRegex(ValueError, "Unknown option: style.nope"):
            merge_options(DEFAULT_OPTIONS, {"style": {"nope": 1}})

    def test_invalid_enum_value_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            merge_options(DEFAULT_OPTIONS, {"direction": "diagonal"})


if __name__ == "__main__":
    unittest.main()
