"""Synthetic dimensions and data for tests and demos."""

from __future__ import annotations

from typing import Sequence

import numpy as np

from hermes_plot.types import AxisSpec, AxisType, Dimension


_AXIS_CYCLE = (AxisType.LINEAR, AxisType.LOGARITHMIC, AxisType.CATEGORICAL)
_CATEGORIES = ("alpha", "beta", "gamma", "delta", "epsilon")


def generate_dimensions(count: int) -> list[Dimension]:
    """``count`` dimensions cycling through linear, logarithmic and categorical axes."""
    dimensions = []
    for i in range(count):
        axis_type = _AXIS_CYCLE[i % len(_AXIS_CYCLE)]
        axis = AxisSpec(type=axis_type)
        if axis_type == AxisType.CATEGORICAL:
            axis.categories = list(_CATEGORIES)
        dimensions.append(Dimension(key=f"dim{i}", label=f"Dimension {i}", axis=axis))
    return dimensions


def generate_data(dimensions: Sequence[Dimension], count: int, *, seed: int = 0) -> dict[str, list]:
    rng = np.random.default_rng(seed)
    data: dict[str, list] = {}
    for dimension in dimensions:
        axis = dimension.axis
        if axis.type == AxisType.CATEGORICAL:
            categories = list(axis.categories or _CATEGORIES)
            data[dimension.key] = [categories[i] for i in rng.integers(0, len(categories), size=count).tolist()]
        elif axis.type == AxisType.LOGARITHMIC:
            data[dimension.key] = (axis.log_base ** rng.uniform(0.0, 4.0, size=count)).tolist()
        else:
            data[dimension.key] = rng.uniform(0.0, 100.0, size=count).tolist()
    return data
