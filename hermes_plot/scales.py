"""Value-to-axis scales and "nice number" tick generation.

The tick algorithm follows the classic "nice numbers for graph labels"
approach: spacing is snapped to 1, 2, 5 or 10 times a power of ten and the
domain is widened outward to whole multiples of that spacing.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal, InvalidOperation
import math
from typing import Any, Sequence

import numpy as np

from hermes_plot.types import AxisSpec, AxisType


MIN_TICK_DISTANCE = 50
LOG_INTERMEDIATE_MULTIPLIERS = (2.0, 5.0)


def nice_number(value: float, *, round_result: bool) -> float:
    """Return a 1/2/5/10 x 10^k number approximately equal to ``value``.

    With ``round_result`` the fraction snaps to the nearest nice fraction,
    otherwise to the smallest nice fraction that is >= the raw fraction.
    Non-positive or non-finite input is returned unchanged.
    """
    if not np.isfinite(value) or value <= 0:
        return float(value)
    exp = np.floor(np.log10(value))
    frac = value / (10**exp)

    if round_result:
        if frac < 1.5:
            nice_frac = 1.0
        elif frac < 3.0:
            nice_frac = 2.0
        elif frac < 7.0:
            nice_frac = 5.0
        else:
            nice_frac = 10.0
    else:
        if frac <= 1.0:
            nice_frac = 1.0
        elif frac <= 2.0:
            nice_frac = 2.0
        elif frac <= 5.0:
            nice_frac = 5.0
        else:
            nice_frac = 10.0

    return float(nice_frac * (10**exp))


def format_tick(value: float, *, step: float | None = None) -> str:
    if not np.isfinite(value):
        return str(value)
    if step is not None and np.isfinite(step) and step > 0 and abs(value) <= step * 1e-9:
        value = 0.0
    abs_v = abs(value)
    decimals = _decimals_from_step(step) if step is not None else 6
    if abs_v != 0 and (abs_v >= 1e6 or (step is not None and abs(step) < 1e-4) or abs_v < 1e-6):
        return f"{value:.4e}"

    d = Decimal(str(value))
    quant = Decimal("1").scaleb(-decimals)
    try:
        q = d.quantize(quant)
    except InvalidOperation:
        q = d
    out = format(q, "f")
    # Only trim trailing zeros for fractional values (preserve integer zeros like 30, 40).
    if "." in out:
        out = out.rstrip("0").rstrip(".")
    if out == "-0":
        out = "0"
    return out


def format_ticks_for_axis(ticks: np.ndarray) -> list[str]:
    if ticks.size == 0:
        return []
    if ticks.size == 1:
        return [format_tick(float(ticks[0]))]
    step = float(abs(ticks[1] - ticks[0]))
    return [format_tick(float(v), step=step) for v in ticks]


def get_data_range(values: Any) -> tuple[float, float] | None:
    """Min/max of the finite entries of ``values``; None when there are none."""
    arr = np.asarray(values, dtype=np.float64)
    finite = arr[np.isfinite(arr)]
    if finite.size == 0:
        return None
    return (float(np.min(finite)), float(np.max(finite)))


class NiceScale(ABC):
    """Shared state and contract of every axis scale.

    Concrete scales recompute ``min``/``max``, ``tick_spacing`` and the
    ``ticks``/``tick_pos``/``tick_labels`` sequences whenever the axis length
    or the domain changes.
    """

    def __init__(self, min_value: float, max_value: float) -> None:
        self.min_value = min_value
        self.max_value = max_value
        self.min = min_value
        self.max = max_value
        self.range = 0.0
        self.tick_spacing = 0.0
        self.ticks: list[float] = []
        self.tick_pos: list[float] = []
        self.tick_labels: list[str] = []
        self.axis_length = 1.0
        self.max_ticks = 1.0 / MIN_TICK_DISTANCE
        self._calculate()

    def set_axis_length(self, axis_length: float) -> None:
        self.axis_length = float(axis_length)
        self.max_ticks = self.axis_length / MIN_TICK_DISTANCE
        self._calculate()

    def set_min_max_values(self, min_value: float, max_value: float) -> None:
        self.min_value = min_value
        self.max_value = max_value
        self._calculate()

    @abstractmethod
    def value_to_pos(self, value: Any) -> float:
        """Axis-local pixel offset of ``value`` within ``[0, axis_length]``."""
        raise NotImplementedError

    @abstractmethod
    def pos_to_value(self, pos: float) -> Any:
        raise NotImplementedError

    @abstractmethod
    def _calculate(self) -> None:
        raise NotImplementedError

    def _max_tick_slots(self) -> float:
        return max(self.max_ticks - 1.0, 1.0)


class LinearScale(NiceScale):
    def value_to_pos(self, value: Any) -> float:
        return self.value_to_percent(value) * self.axis_length

    def value_to_percent(self, value: Any) -> float:
        span = self.max - self.min
        if span == 0 or not np.isfinite(span):
            return 0.5
        return (float(value) - self.min) / span

    def pos_to_value(self, pos: float) -> float:
        if self.axis_length <= 0:
            return self.min
        return self.min + (float(pos) / self.axis_length) * (self.max - self.min)

    def _calculate(self) -> None:
        vmin = float(self.min_value)
        vmax = float(self.max_value)
        if not (np.isfinite(vmin) and np.isfinite(vmax)):
            self._set_ticks(np.asarray([], dtype=np.float64), vmin, vmax, spacing=0.0)
            return
        if vmin > vmax:
            vmin, vmax = vmax, vmin
        if vmin == vmax:
            self._set_ticks(np.asarray([vmin], dtype=np.float64), vmin, vmax, spacing=0.0)
            return

        spacing = nice_number((vmax - vmin) / self._max_tick_slots(), round_result=True)
        lo = math.floor(vmin / spacing)
        hi = math.ceil(vmax / spacing)
        ticks = np.arange(lo, hi + 1, dtype=np.float64) * spacing
        # Normalize floating-point drift so values like -4.44e-16 become 0.
        ticks[np.isclose(ticks, 0.0, rtol=0.0, atol=spacing * 1e-9)] = 0.0
        self._set_ticks(ticks, float(ticks[0]), float(ticks[-1]), spacing=spacing)

    def _set_ticks(self, ticks: np.ndarray, nice_min: float, nice_max: float, *, spacing: float) -> None:
        self.min = nice_min
        self.max = nice_max
        self.range = nice_max - nice_min
        self.tick_spacing = spacing
        self.ticks = ticks.tolist()
        self.tick_pos = [self.value_to_pos(t) for t in self.ticks]
        self.tick_labels = format_ticks_for_axis(ticks)


class LogScale(NiceScale):
    """Logarithmic scale.

    The domain must be strictly positive; non-positive values are a data error
    the caller is responsible for and are not validated here.
    """

    def __init__(self, min_value: float, max_value: float, log_base: float = 10.0) -> None:
        self.log_base = float(log_base)
        self._min_exp = 0.0
        self._max_exp = 1.0
        super().__init__(min_value, max_value)

    def log(self, value: float) -> float:
        exp = math.log(float(value)) / math.log(self.log_base)
        nearest = round(exp)
        if abs(exp - nearest) < 1e-9:
            return float(nearest)
        return exp

    def value_to_pos(self, value: Any) -> float:
        return self.value_to_percent(value) * self.axis_length

    def value_to_percent(self, value: Any) -> float:
        return (self.log(value) - self._min_exp) / (self._max_exp - self._min_exp)

    def pos_to_value(self, pos: float) -> float:
        if self.axis_length <= 0:
            return self.min
        exp = self._min_exp + (float(pos) / self.axis_length) * (self._max_exp - self._min_exp)
        return float(self.log_base**exp)

    def _calculate(self) -> None:
        vmin = min(float(self.min_value), float(self.max_value))
        vmax = max(float(self.min_value), float(self.max_value))
        min_exp = math.floor(self.log(vmin))
        max_exp = math.ceil(self.log(vmax))
        if max_exp == min_exp:
            max_exp += 1

        decades = max_exp - min_exp
        decade_step = max(1, math.ceil(decades / self._max_tick_slots()))
        max_exp = min_exp + math.ceil(decades / decade_step) * decade_step

        self._min_exp = float(min_exp)
        self._max_exp = float(max_exp)
        self.min = float(self.log_base**min_exp)
        self.max = float(self.log_base**max_exp)
        self.range = float(max_exp - min_exp)
        self.tick_spacing = float(decade_step)

        ticks = [float(self.log_base**exp) for exp in range(min_exp, max_exp + 1, decade_step)]
        multipliers = [m for m in LOG_INTERMEDIATE_MULTIPLIERS if m < self.log_base]
        if decade_step == 1 and multipliers and decades * (1 + len(multipliers)) <= self.max_ticks:
            for exp in range(min_exp, max_exp):
                ticks.extend(m * float(self.log_base**exp) for m in multipliers)
            ticks.sort()

        self.ticks = ticks
        self.tick_pos = [self.value_to_pos(t) for t in ticks]
        self.tick_labels = [format_tick(t) for t in ticks]


class CategoricalScale(NiceScale):
    """Discrete scale; categories are positioned in insertion order."""

    def __init__(self, categories: Sequence[Any]) -> None:
        self.categories = list(categories)
        self._index = {}
        for i, category in enumerate(self.categories):
            self._index.setdefault(category, i)
        super().__init__(0.0, float(max(0, len(self.categories) - 1)))

    def value_to_pos(self, value: Any) -> float:
        idx = self._index.get(value)
        if idx is None:
            return math.nan
        return self._index_to_pos(idx)

    def pos_to_value(self, pos: float) -> Any:
        count = len(self.categories)
        if count == 0:
            return None
        if count == 1 or self.tick_spacing <= 0:
            return self.categories[0]
        idx = int(round(float(pos) / self.tick_spacing))
        return self.categories[max(0, min(count - 1, idx))]

    def _index_to_pos(self, idx: int) -> float:
        if len(self.categories) == 1:
            return self.tick_spacing
        return idx * self.tick_spacing

    def _calculate(self) -> None:
        count = len(self.categories)
        self.min = 0.0
        self.max = float(max(0, count - 1))
        self.range = self.max
        if count > 1:
            self.tick_spacing = self.axis_length / (count - 1)
        elif count == 1:
            self.tick_spacing = self.axis_length / 2
        else:
            self.tick_spacing = 0.0
        self.ticks = [float(i) for i in range(count)]
        self.tick_pos = [self._index_to_pos(i) for i in range(count)]
        self.tick_labels = [str(category) for category in self.categories]


def build_scale(axis: AxisSpec, values: Any) -> NiceScale:
    """Create the scale for one dimension from its axis spec and data column."""
    if axis.type == AxisType.CATEGORICAL:
        categories = axis.categories
        if categories is None:
            categories = list(dict.fromkeys(np.asarray(values, dtype=object).tolist()))
        return CategoricalScale(categories)

    data_range = axis.range if axis.range is not None else get_data_range(values)
    if axis.type == AxisType.LOGARITHMIC:
        if data_range is None:
            data_range = (1.0, axis.log_base)
        return LogScale(data_range[0], data_range[1], axis.log_base)
    if data_range is None:
        data_range = (0.0, 1.0)
    return LinearScale(data_range[0], data_range[1])


def _decimals_from_step(step: float) -> int:
    if step <= 0 or not np.isfinite(step):
        return 6
    d = Decimal(str(step)).normalize()
    exp = d.as_tuple().exponent
    decimals = max(0, -int(exp))
    return min(12, decimals)
