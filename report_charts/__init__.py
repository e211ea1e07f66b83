"""
Report Charts - one chart description compiled for every report surface.

This package turns a CMS chart section (delimited data + series + kind) into:
- Chart.js configs and init scripts for the web report
- Plotly figures for interactive preview
- native python-pptx charts (or rasterized images) for slide decks
- QuickChart raster requests for PDF / static output
"""

__version__ = "1.0.0"
__author__ = "Report Charts Team"

from .core.config import DEFAULT_CONFIG, ChartCompilerConfig
from .models import (
    ChartKind,
    ValueFormat,
    Surface,
    SeriesSpec,
    ChartSpec,
    Diagnostic,
    CompileResult,
)
from .compiler import parse_chart_data, validate_series, prepare_chart
from .visualization import (
    build_chartjs_config,
    build_charts_init_script,
    build_figure,
    build_presentation_chart,
    add_chart_to_slide,
    build_raster_request,
    QuickChartClient,
    ChartRenderError,
    to_data_uri,
)
from .pipeline import ChartRenderOutcome, compile_chart, render_all_charts

__all__ = [
    'DEFAULT_CONFIG',
    'ChartCompilerConfig',
    'ChartKind',
    'ValueFormat',
    'Surface',
    'SeriesSpec',
    'ChartSpec',
    'Diagnostic',
    'CompileResult',
    'parse_chart_data',
    'validate_series',
    'prepare_chart',
    'build_chartjs_config',
    'build_charts_init_script',
    'build_figure',
    'build_presentation_chart',
    'add_chart_to_slide',
    'build_raster_request',
    'QuickChartClient',
    'ChartRenderError',
    'to_data_uri',
    'ChartRenderOutcome',
    'compile_chart',
    'render_all_charts',
]
