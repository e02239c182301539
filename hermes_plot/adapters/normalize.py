from __future__ import annotations

from collections.abc import Mapping, Sequence
from decimal import Decimal
from typing import Any

import numpy as np
import torch

from hermes_plot.errors import HermesError
from hermes_plot.types import AxisType, Dimension


def normalize_data(data: Mapping[str, Any], dimensions: Sequence[Dimension]) -> tuple[dict[str, np.ndarray], int]:
    """Coerce every dimension column and validate the record counts.

    Numeric axes become float64 arrays (non-numeric entries raise, ``None``
    becomes NaN); categorical axes keep their raw values in an object array.
    Returns the columns keyed by dimension key and the shared record count.
    """
    if not isinstance(data, Mapping) or len(data) == 0:
        raise HermesError("Need at least one dimension data record.")

    axis_types = {d.key: d.axis.type for d in dimensions}
    for key in axis_types:
        if key not in data:
            raise HermesError(f"Missing data for dimension `{key}`.")

    columns: dict[str, np.ndarray] = {}
    for key, raw in data.items():
        if axis_types.get(key) == AxisType.CATEGORICAL:
            columns[key] = _coerce_1d_object(raw, label=key)
        else:
            columns[key] = _coerce_1d_numeric(raw, label=key)

    sizes = {int(column.size) for column in columns.values()}
    if len(sizes) != 1:
        raise HermesError("The dimension data are not all identical in size.")
    return columns, sizes.pop()


def validate_dimensions(dimensions: Sequence[Dimension]) -> list[Dimension]:
    if not dimensions:
        raise HermesError("Need at least one dimension defined.")
    seen: set[str] = set()
    for dimension in dimensions:
        if dimension.key in seen:
            raise HermesError(f"Duplicate dimension key `{dimension.key}`.")
        seen.add(dimension.key)
    return list(dimensions)


def _coerce_1d_object(value: Any, *, label: str) -> np.ndarray:
    if isinstance(value, torch.Tensor):
        return np.asarray(_coerce_1d_numeric(value, label=label), dtype=object)
    if isinstance(value, np.ndarray):
        if value.ndim != 1:
            raise HermesError(f"{label} must be 1-D")
        return value.astype(object, copy=False)
    if isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
        out = np.empty(len(value), dtype=object)
        out[:] = list(value)
        return out
    raise HermesError(f"unsupported {label} input type: {type(value)!r}")


def _coerce_1d_numeric(value: Any, *, label: str) -> np.ndarray:
    if isinstance(value, torch.Tensor):
        tensor = value.detach()
        if tensor.ndim != 1:
            raise HermesError(f"{label} must be 1-D")
        if tensor.is_cuda:
            tensor = tensor.cpu()
        return tensor.to(torch.float64).numpy()

    if isinstance(value, np.ndarray):
        if value.ndim != 1:
            raise HermesError(f"{label} must be 1-D")
        return _coerce_ndarray(value, label=label)

    if isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
        return _coerce_ndarray(np.asarray(value, dtype=object), label=label)

    raise HermesError(f"unsupported {label} input type: {type(value)!r}")


def _coerce_ndarray(arr: np.ndarray, *, label: str) -> np.ndarray:
    if arr.dtype.kind in {"i", "u", "f", "b"}:
        return arr.astype(np.float64, copy=False)

    out = np.empty(arr.shape[0], dtype=np.float64)
    for i, raw in enumerate(arr.tolist()):
        if raw is None:
            out[i] = np.nan
            continue
        if isinstance(raw, Decimal):
            out[i] = float(raw)
            continue
        try:
            out[i] = float(raw)
        except (TypeError, ValueError) as exc:
            raise HermesError(f"{label} contains non-numeric value at index {i}: {raw!r}") from exc
    return out
