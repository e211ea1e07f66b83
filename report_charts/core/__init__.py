"""
Core module for the chart compiler.

Contains configuration constants, the injectable compiler config, and base utilities.
"""

from report_charts.core.config import (
    CHART_COLORS,
    PDF_CHART_COLORS,
    PPTX_CHART_COLORS,
    MAX_DATA_POINTS,
    MAX_PPTX_DATA_POINTS,
    MAX_RASTER_DATA_POINTS,
    ChartCompilerConfig,
    DEFAULT_CONFIG,
)
from report_charts.core.utils import format_value, parse_number, to_number, clamp

__all__ = [
    # Config
    'CHART_COLORS',
    'PDF_CHART_COLORS',
    'PPTX_CHART_COLORS',
    'MAX_DATA_POINTS',
    'MAX_PPTX_DATA_POINTS',
    'MAX_RASTER_DATA_POINTS',
    'ChartCompilerConfig',
    'DEFAULT_CONFIG',
    # Utils
    'format_value',
    'parse_number',
    'to_number',
    'clamp',
]
