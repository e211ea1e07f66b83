"""
Visualization module for the chart compiler.

Backend emitters:
- chartjs: Chart.js configs and the report init script
- plotly_figures: Plotly figures for interactive preview
- pptx_charts: native slide charts via python-pptx
- raster: QuickChart image requests and client
"""

from .chartjs import (
    KIND_TO_CHARTJS,
    TickFormat,
    MatrixTooltip,
    build_chartjs_config,
    build_charts_init_script,
    chartjs_from_prepared,
    serialize_chartjs,
)
from .plotly_figures import KIND_TO_PLOTLY, build_figure, figure_from_prepared
from .pptx_charts import (
    KIND_TO_PPTX_TYPE,
    PresentationChart,
    add_chart_to_slide,
    build_presentation_chart,
)
from .raster import (
    ChartRenderError,
    QuickChartClient,
    RasterRequest,
    build_raster_request,
    rasterize_config,
    render_chart_png,
    to_data_uri,
)

__all__ = [
    # Chart.js
    'KIND_TO_CHARTJS',
    'TickFormat',
    'MatrixTooltip',
    'build_chartjs_config',
    'build_charts_init_script',
    'chartjs_from_prepared',
    'serialize_chartjs',
    # Plotly
    'KIND_TO_PLOTLY',
    'build_figure',
    'figure_from_prepared',
    # Presentation
    'KIND_TO_PPTX_TYPE',
    'PresentationChart',
    'add_chart_to_slide',
    'build_presentation_chart',
    # Raster
    'ChartRenderError',
    'QuickChartClient',
    'RasterRequest',
    'build_raster_request',
    'rasterize_config',
    'render_chart_png',
    'to_data_uri',
]
