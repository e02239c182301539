from __future__ import annotations

import math
import unittest

import numpy as np
import torch

from hermes_plot import Hermes, HermesError, RasterSurface
from hermes_plot.adapters import normalize_data, validate_dimensions
from hermes_plot.scales import CategoricalScale, LinearScale, LogScale
from hermes_plot.testing import generate_data, generate_dimensions
from hermes_plot.types import AxisSpec, AxisType, Dimension, Size


class _BrokenSurface(RasterSurface):
    def get_renderer(self):
        return None


def _make(width: int = 600, height: int = 300, count: int = 40, options=None):
    surface = RasterSurface(width, height)
    dimensions = generate_dimensions(3)
    data = generate_data(dimensions, count)
    return surface, Hermes(surface, data, dimensions, options)


class NormalizeDataTests(unittest.TestCase):
    def setUp(self) -> None:
        self.dimensions = [
            Dimension(key="x", label="x"),
            Dimension(key="c", label="c", axis=AxisSpec(type=AxisType.CATEGORICAL)),
        ]

    def test_accepts_tensors_arrays_and_lists(self) -> None:
        columns, count = normalize_data({"x": torch.tensor([1, 2, 3]), "c": np.asarray(["a", "b", "a"])}, self.dimensions)
        self.assertEqual(count, 3)
        self.assertEqual(columns["x"].dtype, np.float64)
        self.assertEqual(columns["c"].dtype, object)
        columns, _ = normalize_data({"x": [1, None, "2.5"], "c": ["a", "b", "c"]}, self.dimensions)
        self.assertTrue(math.isnan(columns["x"][1]))
        self.assertEqual(columns["x"][2], 2.5)

    def test_rejects_non_numeric_values(self) -> None:
        with self.assertRaisesRegex(HermesError, "non-numeric"):
            normalize_data({"x": [1, "nope"], "c": ["a", "b"]}, self.dimensions)

    def test_rejects_missing_and_uneven_columns(self) -> None:
        with self.assertRaisesRegex(HermesError, "Missing data for dimension `c`"):
            normalize_data({"x": [1, 2]}, self.dimensions)
        with self.assertRaisesRegex(HermesError, "not all identical in size"):
            normalize_data({"x": [1, 2], "c": ["a"]}, self.dimensions)

    def test_size_mismatch_in_any_column_is_rejected(self) -> None:
        with self.assertRaisesRegex(HermesError, "not all identical in size"):
            normalize_data({"x": [1, 2], "c": ["a", "b"], "extra": [1, 2, 3]}, self.dimensions)
        columns, count = normalize_data({"x": [], "c": []}, self.dimensions)
        self.assertEqual(count, 0)
        self.assertEqual(columns["x"].size, 0)

    def test_rejects_duplicate_dimension_keys(self) -> None:
        with self.assertRaisesRegex(HermesError, "Duplicate dimension key"):
            validate_dimensions([Dimension(key="x", label="x"), Dimension(key="x", label="y")])


class HermesConstructionTests(unittest.TestCase):
    def test_missing_target(self) -> None:
        with self.assertRaisesRegex(HermesError, "Target surface is missing."):
            Hermes(None, {"x": [1]}, [Dimension(key="x", label="x")])

    def test_missing_renderer(self) -> None:
        with self.assertRaisesRegex(HermesError, "Unable to get renderer from target surface."):
            Hermes(_BrokenSurface(100, 100), {"x": [1]}, [Dimension(key="x", label="x")])

    def test_missing_dimensions(self) -> None:
        with self.assertRaisesRegex(HermesError, "Need at least one dimension defined."):
            Hermes(RasterSurface(100, 100), {"x": [1]}, [])

    def test_missing_data(self) -> None:
        with self.assertRaisesRegex(HermesError, "Need at least one dimension data record."):
            Hermes(RasterSurface(100, 100), {}, [Dimension(key="x", label="x")])

    def test_uneven_data(self) -> None:
        dimensions = generate_dimensions(2)
        with self.assertRaisesRegex(HermesError, "The dimension data are not all identical in size."):
            Hermes(RasterSurface(100, 100), {"dim0": [1, 2], "dim1": [1]}, dimensions)

    def test_unknown_option(self) -> None:
        with self.assertRaisesRegex(ValueError, "Unknown option: style.colour"):
            _make(options={"style": {"colour": "#ffffff"}})

    def test_builds_scales_layout_and_draws(self) -> None:
        surface, hermes = _make()
        self.assertEqual(hermes.data_count, 40)
        self.assertIsInstance(hermes.dimensions[0].axis.scale, LinearScale)
        self.assertIsInstance(hermes.dimensions[1].axis.scale, LogScale)
        self.assertIsInstance(hermes.dimensions[2].axis.scale, CategoricalScale)
        self.assertIsNotNone(hermes.layout)
        self.assertEqual(len(hermes.layout.dims), 3)
        background = np.asarray(hermes.options.style.background, dtype=np.uint8)
        self.assertTrue(np.any(surface.renderer.canvas != background))
        self.assertEqual(surface.listener_count, 1)


class HermesBehaviourTests(unittest.TestCase):
    def test_set_data_recomputes_scales(self) -> None:
        _, hermes = _make()
        dimensions = hermes.dimensions
        data = generate_data(dimensions, 10, seed=1)
        data["dim0"] = [float(v) for v in range(1000, 1010)]
        hermes.set_data(data)
        self.assertEqual(hermes.data_count, 10)
        self.assertGreaterEqual(hermes.dimensions[0].axis.scale.max, 1009.0)

    def test_set_data_without_redraw_keeps_layout(self) -> None:
        _, hermes = _make()
        layout = hermes.layout
        hermes.set_data(generate_data(hermes.dimensions, 5, seed=2), redraw=False)
        self.assertIs(hermes.layout, layout)
        self.assertEqual(hermes.data_count, 5)

    def test_set_data_refreshes_filter_values(self) -> None:
        for redraw in (True, False):
            with self.subTest(redraw=redraw):
                _, hermes = _make()
                origin = hermes.layout.axis_origin(0)
                hermes.handle_pointer_down(origin.x, origin.y + 40.0)
                hermes.handle_pointer_up(origin.x, origin.y + 120.0)
                (before,) = hermes.filters["dim0"]
                data = {key: column.tolist() for key, column in hermes.get_data().items()}
                data["dim0"] = [v * 10.0 for v in data["dim0"]]
                hermes.set_data(data, redraw=redraw)
                scale = hermes.dimensions[0].axis.scale
                (f,) = hermes.filters["dim0"]
                self.assertAlmostEqual(f.p0, before.p0)
                self.assertAlmostEqual(f.p1, before.p1)
                self.assertAlmostEqual(f.value0, scale.pos_to_value(f.p0))
                self.assertAlmostEqual(f.value1, scale.pos_to_value(f.p1))
                self.assertNotAlmostEqual(f.value1, before.value1)

    def test_resize_event_relayouts(self) -> None:
        surface, hermes = _make()
        surface.resize(400, 200)
        self.assertEqual(hermes.size, Size(w=400.0, h=200.0))
        self.assertEqual(hermes.layout.size, Size(w=400.0, h=200.0))
        self.assertEqual(surface.renderer.canvas.shape, (200, 400, 4))

    def test_destroy_detaches_resize_listener(self) -> None:
        surface, hermes = _make()
        hermes.destroy()
        hermes.destroy()
        self.assertEqual(surface.listener_count, 0)
        surface.resize(200, 100)
        self.assertEqual(hermes.size, Size(w=600.0, h=300.0))

    def test_filter_gesture_and_double_click(self) -> None:
        _, hermes = _make()
        origin = hermes.layout.axis_origin(0)
        length = hermes.layout.axis_length
        self.assertTrue(hermes.handle_pointer_down(origin.x, origin.y + length * 0.25))
        self.assertTrue(hermes.handle_pointer_move(origin.x, origin.y + length * 0.5))
        self.assertTrue(hermes.handle_pointer_up(origin.x, origin.y + length * 0.75))
        (f,) = hermes.filters["dim0"]
        self.assertAlmostEqual(f.p0, length * 0.25, delta=1.0)
        self.assertAlmostEqual(f.p1, length * 0.75, delta=1.0)
        self.assertEqual(hermes.cursor, "ns-resize")

        self.assertTrue(hermes.handle_double_click(origin.x, origin.y + length * 0.5))
        self.assertNotIn("dim0", hermes.filters)

    def test_clear_filters(self) -> None:
        _, hermes = _make()
        for i in (0, 1):
            origin = hermes.layout.axis_origin(i)
            hermes.handle_pointer_down(origin.x, origin.y + 40.0)
            hermes.handle_pointer_up(origin.x, origin.y + 90.0)
        self.assertEqual(sorted(hermes.filters), ["dim0", "dim1"])
        hermes.clear_filters("dim0")
        self.assertEqual(list(hermes.filters), ["dim1"])
        hermes.clear_filters()
        self.assertEqual(hermes.filters, {})

    def test_filters_follow_axis_length_on_resize(self) -> None:
        surface, hermes = _make()
        origin = hermes.layout.axis_origin(0)
        old_length = hermes.layout.axis_length
        hermes.handle_pointer_down(origin.x, origin.y + 40.0)
        hermes.handle_pointer_up(origin.x, origin.y + 120.0)
        surface.resize(600, 500)
        ratio = hermes.layout.axis_length / old_length
        (f,) = hermes.filters["dim0"]
        self.assertAlmostEqual(f.p0, 40.0 * ratio)
        self.assertAlmostEqual(f.p1, 120.0 * ratio)

    def test_label_drag_reorders_dimensions(self) -> None:
        _, hermes = _make()
        layout = hermes.layout
        geometry = layout.dims[0].layout
        x = geometry.bound.x + geometry.label_point.x
        y = geometry.bound.y + geometry.label_point.y
        self.assertTrue(hermes.handle_pointer_down(x, y))
        self.assertEqual(hermes.cursor, "grabbing")
        hermes.handle_pointer_move(x + layout.space, y)
        self.assertTrue(hermes.handle_pointer_up(x + layout.space * 1.5, y))
        self.assertEqual([d.key for d in hermes.dimensions], ["dim1", "dim0", "dim2"])

    def test_hover_updates_cursor(self) -> None:
        _, hermes = _make()
        origin = hermes.layout.axis_origin(1)
        self.assertFalse(hermes.handle_pointer_move(origin.x, origin.y + 30.0))
        self.assertEqual(hermes.cursor, "crosshair")
        self.assertFalse(hermes.handle_pointer_move(2.0, 2.0))
        self.assertEqual(hermes.cursor, "default")

    def test_debug_and_color_scale_options_render(self) -> None:
        surface, hermes = _make(
            options={
                "debug": True,
                "direction": "vertical",
                "style": {"data": {"color_scale": {"dimension_key": "dim0", "colors": ["#ff0000", "#0000ff"]}}},
            }
        )
        self.assertTrue(hermes.options.debug)
        self.assertFalse(hermes.layout.horizontal)
        self.assertEqual(hermes.options.style.data.color_scale.colors, ((255, 0, 0, 255), (0, 0, 255, 255)))
        frame = surface.renderer.to_tensor()
        self.assertEqual(tuple(frame.shape), (300, 600, 4))


if __name__ == "__main__":
    unittest.main()
