"""
Pipeline Orchestrator - surface dispatch and batch rendering.

Architecture overview
---------------------
Every request goes through the same two steps:

  1. ``ChartSpec.from_section()`` reads the CMS section (or the caller passes
     a ``ChartSpec`` directly).
  2. The shared compile stages run once inside the emitter chosen for the
     output surface:

::

    Surface.WEB          -> chartjs.build_chartjs_config()       -> dict
    Surface.PREVIEW      -> plotly_figures.build_figure()        -> go.Figure
    Surface.PRESENTATION -> pptx_charts.build_presentation_chart -> PresentationChart
    Surface.RASTER       -> raster.build_raster_request()        -> RasterRequest

Batch rendering
---------------
``render_all_charts()`` rasterizes every chart of a report one at a time.
Each chart is isolated: a failed render is logged and recorded as a
placeholder outcome, and the batch carries on.  There is no retry and no
cancellation; the HTTP client's timeout is the only time limit.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Union

from ..core.config import DEFAULT_CONFIG, DEFAULT_RASTER_HEIGHT, DEFAULT_RASTER_WIDTH, ChartCompilerConfig
from ..models.data_models import ChartSpec, CompileResult, Diagnostic, Surface
from ..visualization.chartjs import build_chartjs_config
from ..visualization.plotly_figures import build_figure
from ..visualization.pptx_charts import build_presentation_chart
from ..visualization.raster import QuickChartClient, build_raster_request, to_data_uri

logger = logging.getLogger(__name__)

# Keyword options each emitter understands
SURFACE_OPTIONS = {
    Surface.WEB: frozenset({'animation', 'dark_mode', 'max_points'}),
    Surface.PREVIEW: frozenset(),
    Surface.PRESENTATION: frozenset({'layout'}),
    Surface.RASTER: frozenset({'width', 'height', 'dark_mode'}),
}


def _to_spec(section_or_spec: Union[Mapping, ChartSpec]) -> Optional[ChartSpec]:
    if isinstance(section_or_spec, ChartSpec):
        return section_or_spec
    if isinstance(section_or_spec, Mapping):
        return ChartSpec.from_section(section_or_spec)
    raise TypeError(f"Expected a section mapping or ChartSpec, got {type(section_or_spec).__name__}")


def compile_chart(section_or_spec: Union[Mapping, ChartSpec], surface: Surface = Surface.WEB,
                  config: ChartCompilerConfig = DEFAULT_CONFIG, **options) -> CompileResult:
    """
    Compile one chart for one output surface.

    Args:
        section_or_spec: CMS section dict or a ready ChartSpec
        surface: Output surface selecting the emitter
        config: Compiler constants
        **options: Emitter options (``dark_mode``, ``animation``,
            ``max_points``, ``layout``, ``width``, ``height``); options the
            chosen surface does not use are ignored

    Returns:
        CompileResult whose ``output`` is None when there is no chart

    Raises:
        TypeError: for an unknown surface or a structurally invalid input
    """
    try:
        surface = Surface(surface)
    except ValueError:
        raise TypeError(f"Unknown output surface: {surface!r}")

    diagnostics: List[Diagnostic] = []
    spec = _to_spec(section_or_spec)
    if spec is None:
        return CompileResult(output=None, diagnostics=diagnostics, surface=surface)

    allowed = SURFACE_OPTIONS[surface]
    ignored = sorted(set(options) - allowed)
    if ignored:
        logger.debug(f"[Compile] Ignoring options {ignored} for {surface.value}")
    options = {k: v for k, v in options.items() if k in allowed}

    if surface == Surface.WEB:
        output = build_chartjs_config(spec, surface=surface, config=config, diagnostics=diagnostics, **options)
    elif surface == Surface.PREVIEW:
        output = build_figure(spec, config=config, diagnostics=diagnostics, **options)
    elif surface == Surface.PRESENTATION:
        output = build_presentation_chart(spec, config=config, diagnostics=diagnostics, **options)
    else:
        output = build_raster_request(spec, config=config, diagnostics=diagnostics, **options)

    if output is None:
        logger.info(f"[Compile] No chart for {spec.raw_kind!r} on {surface.value}")
    return CompileResult(output=output, diagnostics=diagnostics, surface=surface)


@dataclass
class ChartRenderOutcome:
    """
    Result of rasterizing one section in a batch.

    Attributes:
        index: Position of the section in the report
        image: ``data:image/png;base64,...`` URI, or None on failure
        placeholder: True when the caller should draw a placeholder instead
        error: Failure message for placeholder outcomes
        diagnostics: Non-fatal findings recorded while compiling
    """
    index: int
    image: Optional[str] = None
    placeholder: bool = False
    error: Optional[str] = None
    diagnostics: List[Diagnostic] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.image is not None and not self.placeholder


def render_all_charts(sections: Sequence[Mapping], client: Optional[QuickChartClient] = None,
                      config: ChartCompilerConfig = DEFAULT_CONFIG,
                      width: int = DEFAULT_RASTER_WIDTH,
                      height: int = DEFAULT_RASTER_HEIGHT) -> Dict[int, ChartRenderOutcome]:
    """
    Rasterize every chart-bearing section, sequentially.

    Sections without a chart, and sections that compile to no chart, produce
    no outcome.  A chart whose render fails produces a placeholder outcome
    carrying the error; the remaining charts still render.

    Returns:
        Mapping of section index -> ChartRenderOutcome, in section order
    """
    client = client or QuickChartClient()
    outcomes: Dict[int, ChartRenderOutcome] = {}

    for index, section in enumerate(sections):
        spec = ChartSpec.from_section(section)
        if spec is None:
            continue

        diagnostics: List[Diagnostic] = []
        request = build_raster_request(spec, config=config, width=width, height=height, diagnostics=diagnostics)
        if request is None:
            logger.info(f"[Batch] Section {index}: no renderable chart")
            continue

        try:
            png = client.render(request)
        except Exception as e:
            logger.error(f"[Batch] Section {index}: chart render failed: {e}")
            outcomes[index] = ChartRenderOutcome(index=index, placeholder=True, error=str(e),
                                                 diagnostics=diagnostics)
            continue

        outcomes[index] = ChartRenderOutcome(index=index, image=to_data_uri(png), diagnostics=diagnostics)

    rendered = sum(1 for o in outcomes.values() if o.ok)
    logger.info(f"[Batch] Rendered {rendered}/{len(outcomes)} charts")
    return outcomes
