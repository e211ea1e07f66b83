"""
Compiler stages shared by every backend.

Parser -> Series Validator -> Palette -> Derived transforms -> Downsampler,
tied together by ``prepare_chart``.
"""

from .tabular import parse_chart_data, parse_chart_frame
from .series import validate_series, resolve_value_column, category_key
from .palette import assign_series_colours, assign_row_colours
from .derived import (
    WaterfallSegment,
    GaugeReading,
    HeatmapGrid,
    TreemapLeaf,
    compute_waterfall,
    compute_gauge,
    compute_heatmap,
    compute_treemap,
    gauge_percentage,
    interpolate_colour,
)
from .sampling import downsample, downsample_indices, downsample_series
from .prepare import PreparedChart, prepare_chart, palette_for

__all__ = [
    'parse_chart_data',
    'parse_chart_frame',
    'validate_series',
    'resolve_value_column',
    'category_key',
    'assign_series_colours',
    'assign_row_colours',
    'WaterfallSegment',
    'GaugeReading',
    'HeatmapGrid',
    'TreemapLeaf',
    'compute_waterfall',
    'compute_gauge',
    'compute_heatmap',
    'compute_treemap',
    'gauge_percentage',
    'interpolate_colour',
    'downsample',
    'downsample_indices',
    'downsample_series',
    'PreparedChart',
    'prepare_chart',
    'palette_for',
]
