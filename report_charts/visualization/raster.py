"""
Raster-Image Request Builder and QuickChart client.

Static images (PDF pages, waterfall/gauge slides) are produced by posting a
Chart.js configuration to a QuickChart-compatible endpoint.  The request is
built from the same prepared chart as the web canvas output, with three
differences:

    - the print palette is used and plugin kinds fall back
      (treemap -> horizontal bar, heatmap -> stacked column)
    - animation and responsiveness are switched off
    - labels/datasets are downsampled again to the service's own ceiling when
      the upstream config is still too large

Request body::

    {"chart": "<Chart.js literal>", "width": 800, "height": 500,
     "backgroundColor": "transparent", "format": "png", "devicePixelRatio": 2}

The response is a binary PNG.  ``to_data_uri`` re-encodes it for embedding.
"""

import base64
import copy
import logging
from dataclasses import dataclass
from typing import Optional

import requests

from ..core.config import (
    DEFAULT_CONFIG,
    DEFAULT_RASTER_HEIGHT,
    DEFAULT_RASTER_WIDTH,
    QUICKCHART_TIMEOUT,
    QUICKCHART_URL,
    RASTER_BACKGROUND,
    RASTER_DEVICE_PIXEL_RATIO,
    ChartCompilerConfig,
)
from ..compiler.prepare import prepare_chart
from ..compiler.sampling import downsample_series
from ..models.data_models import DOWNSAMPLED_KINDS, ChartSpec, Surface, record
from .chartjs import chartjs_from_prepared, serialize_chartjs

logger = logging.getLogger(__name__)

PNG_SIGNATURE = b'\x89PNG\r\n\x1a\n'


class ChartRenderError(RuntimeError):
    """The rasterization service failed or returned something other than a PNG."""


@dataclass
class RasterRequest:
    """One image request for the rasterization service."""
    chart: dict
    width: int = DEFAULT_RASTER_WIDTH
    height: int = DEFAULT_RASTER_HEIGHT
    background_color: str = RASTER_BACKGROUND
    format: str = 'png'
    device_pixel_ratio: int = RASTER_DEVICE_PIXEL_RATIO

    def to_payload(self) -> dict:
        """JSON body; the chart travels as a JavaScript literal so callbacks survive."""
        return {
            'chart': serialize_chartjs(self.chart),
            'width': self.width,
            'height': self.height,
            'backgroundColor': self.background_color,
            'format': self.format,
            'devicePixelRatio': self.device_pixel_ratio,
        }


def rasterize_config(chart_config: dict, max_points: int, resample: bool = True) -> dict:
    """Return a static-image copy of a Chart.js config.

    Args:
        chart_config: Chart.js config (left unmodified)
        max_points: Service point ceiling
        resample: Whether labels/datasets may be decimated; False for kinds
            whose points are not independent (waterfall, pie)

    Returns:
        New config with animation/responsiveness off and at most
        ``max_points + 1`` labels
    """
    result = copy.deepcopy(chart_config)
    data = result.setdefault('data', {})
    labels = data.get('labels')
    if resample and labels and len(labels) > max_points + 1:
        data['labels'], data['datasets'] = downsample_series(labels, data.get('datasets', []), max_points)

    options = result.setdefault('options', {})
    options['animation'] = False
    options['responsive'] = False
    options['maintainAspectRatio'] = False
    return result


def build_raster_request(spec: ChartSpec, config: ChartCompilerConfig = DEFAULT_CONFIG,
                         width: int = DEFAULT_RASTER_WIDTH, height: int = DEFAULT_RASTER_HEIGHT,
                         dark_mode: bool = False,
                         diagnostics: Optional[list] = None) -> Optional[RasterRequest]:
    """Compile a chart spec into a rasterization request.

    Returns:
        RasterRequest, or None when there is no chart to draw
    """
    prepared = prepare_chart(spec, surface=Surface.RASTER, config=config,
                             diagnostics=diagnostics, plugin_kinds=False)
    if prepared is None:
        return None

    ceiling = config.ceiling_for(Surface.RASTER)
    chart_config = chartjs_from_prepared(prepared, animation=False, dark_mode=dark_mode)
    before = len(chart_config.get('data', {}).get('labels') or [])
    resample = prepared.kind in DOWNSAMPLED_KINDS and prepared.degraded_from is None
    chart_config = rasterize_config(chart_config, ceiling, resample=resample)
    after = len(chart_config['data'].get('labels') or [])
    if after < before:
        record(diagnostics, 'downsampled', f'{before} labels reduced to {after} for the raster service',
               level=logging.INFO)

    return RasterRequest(chart=chart_config, width=width, height=height)


def to_data_uri(png: bytes) -> str:
    """``data:image/png;base64,...`` for embedding in HTML or PDF."""
    return 'data:image/png;base64,' + base64.b64encode(png).decode('ascii')


class QuickChartClient:
    """
    Minimal HTTP client for a QuickChart-compatible rasterization endpoint.

    Renders are synchronous and one at a time; there is no retry.  The only
    timeout is the one passed to ``requests``.

    Attributes:
        base_url: Chart endpoint (``QUICKCHART_URL`` by default)
        timeout: Request timeout in seconds
        session: Optional ``requests.Session``; module-level ``requests`` otherwise
    """

    def __init__(self, base_url: str = QUICKCHART_URL, timeout: int = QUICKCHART_TIMEOUT,
                 session: Optional[requests.Session] = None):
        self.base_url = base_url
        self.timeout = timeout
        self.session = session

    def render(self, request: RasterRequest) -> bytes:
        """
        POST the request and return the PNG bytes.

        Raises:
            ChartRenderError: on transport errors, non-200 responses,
                non-PNG content or an empty body
        """
        payload = request.to_payload()
        http = self.session or requests
        try:
            response = http.post(self.base_url, json=payload, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise ChartRenderError(f"Rasterization request to {self.base_url} failed: {e}") from e

        if response.status_code != 200:
            raise ChartRenderError(f"QuickChart API error: {response.status_code} - {response.text[:200]}")

        content_type = response.headers.get('content-type', '')
        if 'image/png' not in content_type:
            raise ChartRenderError(f"QuickChart returned {content_type or 'no content type'}, expected image/png")

        png = response.content
        if not png or not png.startswith(PNG_SIGNATURE):
            raise ChartRenderError("QuickChart returned an empty or invalid PNG body")

        logger.info(f"[Raster] Rendered {request.width}x{request.height} chart ({len(png):,} bytes)")
        return png


def render_chart_png(spec: ChartSpec, width: int = DEFAULT_RASTER_WIDTH, height: int = DEFAULT_RASTER_HEIGHT,
                     client: Optional[QuickChartClient] = None,
                     config: ChartCompilerConfig = DEFAULT_CONFIG,
                     dark_mode: bool = False,
                     diagnostics: Optional[list] = None) -> Optional[bytes]:
    """Build the raster request for ``spec`` and render it.

    Returns:
        PNG bytes, or None when the spec has no chart to draw

    Raises:
        ChartRenderError: when the service call fails
    """
    request = build_raster_request(spec, config=config, width=width, height=height,
                                   dark_mode=dark_mode, diagnostics=diagnostics)
    if request is None:
        return None
    client = client or QuickChartClient()
    return client.render(request)
