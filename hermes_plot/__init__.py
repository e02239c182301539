from hermes_plot.chart import Hermes, HostSurface, RasterSurface
from hermes_plot.config import DEFAULT_OPTIONS, ChartOptions, merge_options
from hermes_plot.errors import HermesError
from hermes_plot.interaction import InteractionModel, clean_up_filters
from hermes_plot.layout import LayoutResult, compute_layout
from hermes_plot.raster import RasterRenderer
from hermes_plot.scales import CategoricalScale, LinearScale, LogScale, NiceScale, build_scale
from hermes_plot.types import (
    AxisSpec,
    AxisType,
    Dimension,
    DimensionLayout,
    Direction,
    Filter,
    LabelPlacement,
)

__all__ = [
    "AxisSpec",
    "AxisType",
    "CategoricalScale",
    "ChartOptions",
    "DEFAULT_OPTIONS",
    "Dimension",
    "DimensionLayout",
    "Direction",
    "Filter",
    "Hermes",
    "HermesError",
    "HostSurface",
    "InteractionModel",
    "LabelPlacement",
    "LayoutResult",
    "LinearScale",
    "LogScale",
    "NiceScale",
    "RasterSurface",
    "RasterRenderer",
    "build_scale",
    "clean_up_filters",
    "compute_layout",
    "merge_options",
]
