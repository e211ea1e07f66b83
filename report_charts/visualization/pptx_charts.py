"""
Presentation-Object Emitter.

Compiles a chart spec into a slide-chart description
(``PresentationChart``: series of ``{name, labels, values}`` plus an options
dict in inches) and places it on a python-pptx slide.

The slide format only has pie/doughnut, line, bar, area, radar and scatter
natively, so the remaining kinds are approximated:

    composed  -> clustered columns (every series as bars)
    treemap   -> horizontal bar, one bar per leaf
    heatmap   -> stacked columns, one series per grid column
    waterfall -> pre-rasterized image
    gauge     -> pre-rasterized image

Native charts are capped at ``MAX_PPTX_DATA_POINTS`` points.
"""

import io
import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from pptx.chart.data import CategoryChartData, XyChartData
from pptx.dml.color import RGBColor
from pptx.enum.chart import XL_CHART_TYPE, XL_LEGEND_POSITION, XL_MARKER_STYLE
from pptx.enum.text import PP_ALIGN
from pptx.util import Inches, Pt

from ..core.config import DEFAULT_CHART_POSITION, DEFAULT_CONFIG, DENSE_LINE_THRESHOLD, ChartCompilerConfig
from ..core.utils import strip_hash, to_number
from ..compiler.prepare import PreparedChart, prepare_chart
from ..models.data_models import ChartKind, ChartSpec, Surface, ValueFormat

logger = logging.getLogger(__name__)

# Logical kind -> slide chart type.  None means "rasterize instead".
KIND_TO_PPTX_TYPE = {
    ChartKind.LINE: 'line',
    ChartKind.COLUMN: 'bar',
    ChartKind.BAR: 'bar',
    ChartKind.AREA: 'area',
    ChartKind.STACKED_COLUMN: 'bar',
    ChartKind.STACKED_AREA: 'area',
    ChartKind.PIE: 'pie',
    ChartKind.DONUT: 'doughnut',
    ChartKind.SCATTER: 'scatter',
    ChartKind.RADAR: 'radar',
    ChartKind.COMPOSED: 'bar',
    ChartKind.TREEMAP: 'bar',
    ChartKind.HEATMAP: 'bar',
    ChartKind.WATERFALL: None,
    ChartKind.GAUGE: None,
}

IMAGE_KINDS = frozenset(kind for kind, native in KIND_TO_PPTX_TYPE.items() if native is None)

VALUE_FORMAT_CODES = {
    ValueFormat.PERCENT: 'General"%"',
    ValueFormat.CURRENCY: '$#,##0',
}

PLACEHOLDER_TEXT = 'Chart could not be rendered'
PIXELS_PER_INCH = 96

ImageRenderer = Callable[[ChartSpec, int, int], Optional[bytes]]


@dataclass
class PresentationChart:
    """A chart ready for slide placement.

    Attributes:
        type: Slide chart type ('line', 'bar', 'area', 'pie', 'doughnut',
            'scatter', 'radar') or 'image' for rasterized kinds
        data: Series as ``{'name', 'labels', 'values'}`` dicts
        options: Box (``x, y, w, h`` inches) and type-specific flags
        render_as_image: True for kinds drawn as a picture
        spec: Source spec, needed to rasterize image kinds
        kind: Effective chart kind after degrade policies
    """
    type: str
    data: List[Dict] = field(default_factory=list)
    options: Dict = field(default_factory=dict)
    render_as_image: bool = False
    spec: Optional[ChartSpec] = None
    kind: Optional[ChartKind] = None

    @property
    def box(self) -> Dict[str, float]:
        return {k: self.options[k] for k in ('x', 'y', 'w', 'h')}


# ============================================================================
# DATA SHAPING
# ============================================================================

def _labels(chart: PreparedChart) -> List[str]:
    return ['' if v is None else str(v) for v in chart.labels]


def _values(chart: PreparedChart, column: str) -> List[float]:
    return [to_number(v, default=0) for v in chart.column_values(column)]


def _series_data(chart: PreparedChart) -> List[Dict]:
    labels = _labels(chart)
    return [{'name': s.label, 'labels': labels, 'values': _values(chart, s.data_column)} for s in chart.series]


def _pie_data(chart: PreparedChart) -> List[Dict]:
    name = chart.series[0].label if chart.series else 'Data'
    return [{'name': name, 'labels': _labels(chart), 'values': _values(chart, chart.value_column)}]


def _scatter_data(chart: PreparedChart) -> List[Dict]:
    lead = next((s for s in chart.series if s.data_column == chart.y_column), None)
    return [
        {'name': chart.x_column, 'values': _values(chart, chart.x_column)},
        {'name': lead.label if lead else 'Data', 'values': _values(chart, chart.y_column)},
    ]


def _base_options(chart: PreparedChart, layout: Dict[str, float]) -> Dict:
    spec = chart.spec
    options = {
        'x': layout['x'], 'y': layout['y'], 'w': layout['w'], 'h': layout['h'],
        'showLegend': True,
        'legendPos': 'b',
        'showTitle': False,
    }
    if spec.x_axis_label:
        options.update(catAxisTitle=spec.x_axis_label, showCatAxisTitle=True)
    if spec.y_axis_label:
        options.update(valAxisTitle=spec.y_axis_label, showValAxisTitle=True)
    code = VALUE_FORMAT_CODES.get(ValueFormat.parse(chart.value_format))
    if code:
        options['valAxisLabelFormatCode'] = code
    return options


# ============================================================================
# COMPILE
# ============================================================================

def build_presentation_chart(spec: ChartSpec, config: ChartCompilerConfig = DEFAULT_CONFIG,
                             layout: Optional[Dict[str, float]] = None,
                             diagnostics: Optional[list] = None) -> Optional[PresentationChart]:
    """Compile a chart spec for slide output.

    Args:
        spec: Chart to compile
        config: Compiler constants (presentation palette, point ceiling)
        layout: Chart box in inches, ``{'x', 'y', 'w', 'h'}``
        diagnostics: Optional list collecting non-fatal findings

    Returns:
        PresentationChart, or None when there is no chart to draw
    """
    layout = {**DEFAULT_CHART_POSITION, **(layout or {})}
    prepared = prepare_chart(spec, surface=Surface.PRESENTATION, config=config,
                             diagnostics=diagnostics, plugin_kinds=False)
    if prepared is None:
        return None

    kind = prepared.kind
    if kind in IMAGE_KINDS:
        logger.info(f"[PPTX] {kind.value} chart will be rendered as an image")
        return PresentationChart(type='image', options=dict(layout), render_as_image=True, spec=spec, kind=kind)

    native = KIND_TO_PPTX_TYPE[kind]
    options = _base_options(prepared, layout)

    if kind.is_proportional:
        data = _pie_data(prepared)
        options.update(
            chartColors=[strip_hash(c) for c in prepared.row_colours],
            legendPos='r',
            showPercent=True,
            showValue=False,
        )
        if kind == ChartKind.DONUT:
            options['holeSize'] = 50
    elif kind == ChartKind.SCATTER:
        data = _scatter_data(prepared)
        lead = [c for s, c in zip(prepared.series, prepared.colours) if s.data_column == prepared.y_column]
        options.update(chartColors=[strip_hash(lead[0] if lead else prepared.palette[0])], lineSize=0)
    else:
        data = _series_data(prepared)
        if prepared.degraded_from == ChartKind.TREEMAP:
            options.update(chartColors=[strip_hash(c) for c in prepared.row_colours], showLegend=False)
        else:
            options['chartColors'] = [strip_hash(c) for c in prepared.colours]

    if native == 'line':
        dense = len(prepared.rows) > DENSE_LINE_THRESHOLD
        options.update(lineSmooth=True, lineSize=2)
        if dense:
            options['lineDataSymbol'] = 'none'
        else:
            options.update(lineDataSymbol='circle', lineDataSymbolSize=6)
    elif native == 'area':
        options['lineSmooth'] = True
        if kind.is_stacked:
            options['barGrouping'] = 'stacked'
    elif native == 'bar':
        options.update(
            barDir='bar' if kind == ChartKind.BAR else 'col',
            barGrouping='stacked' if kind.is_stacked else 'clustered',
            barGapWidthPct=50,
        )

    logger.info(f"[PPTX] {spec.raw_kind} -> {native} ({len(prepared.rows)} points, {len(data)} series)")
    return PresentationChart(type=native, data=data, options=options, spec=spec, kind=kind)


# ============================================================================
# SLIDE PLACEMENT (python-pptx)
# ============================================================================

def native_chart_type(chart: PresentationChart):
    """XL_CHART_TYPE member for a compiled native chart."""
    options = chart.options
    if chart.type == 'line':
        return XL_CHART_TYPE.LINE if options.get('lineDataSymbol') == 'none' else XL_CHART_TYPE.LINE_MARKERS
    if chart.type == 'area':
        return XL_CHART_TYPE.AREA_STACKED if options.get('barGrouping') == 'stacked' else XL_CHART_TYPE.AREA
    if chart.type == 'bar':
        stacked = options.get('barGrouping') == 'stacked'
        if options.get('barDir') == 'bar':
            return XL_CHART_TYPE.BAR_STACKED if stacked else XL_CHART_TYPE.BAR_CLUSTERED
        return XL_CHART_TYPE.COLUMN_STACKED if stacked else XL_CHART_TYPE.COLUMN_CLUSTERED
    return {
        'pie': XL_CHART_TYPE.PIE,
        'doughnut': XL_CHART_TYPE.DOUGHNUT,
        'scatter': XL_CHART_TYPE.XY_SCATTER,
        'radar': XL_CHART_TYPE.RADAR,
    }[chart.type]


def _chart_data(chart: PresentationChart):
    if chart.type == 'scatter':
        xs, ys = chart.data[0]['values'], chart.data[1]['values']
        chart_data = XyChartData()
        series = chart_data.add_series(chart.data[1]['name'])
        for x, y in zip(xs, ys):
            series.add_data_point(x, y)
        return chart_data

    chart_data = CategoryChartData()
    chart_data.categories = chart.data[0]['labels'] if chart.data else []
    for s in chart.data:
        chart_data.add_series(s['name'], s['values'])
    return chart_data


def _rgb(hex_colour: str) -> RGBColor:
    return RGBColor.from_string(strip_hash(hex_colour).upper())


def _style_native_chart(native, chart: PresentationChart):
    """Apply legend, colours, smoothing and axis settings."""
    options = chart.options
    colours = options.get('chartColors') or []

    native.has_title = False
    native.has_legend = options.get('showLegend', True)
    if native.has_legend:
        native.legend.position = XL_LEGEND_POSITION.RIGHT if options.get('legendPos') == 'r' else XL_LEGEND_POSITION.BOTTOM
        native.legend.include_in_layout = False
        native.legend.font.size = Pt(10)

    plot = native.plots[0]
    per_point = chart.type in ('pie', 'doughnut') or (
        chart.kind == ChartKind.BAR and not options.get('showLegend', True)
    )
    if per_point:
        # slices, treemap leaves
        for i, point in enumerate(plot.series[0].points):
            point.format.fill.solid()
            point.format.fill.fore_color.rgb = _rgb(colours[i % len(colours)])
    else:
        for i, series in enumerate(plot.series):
            colour = _rgb(colours[i % len(colours)])
            if chart.type in ('line', 'radar', 'scatter'):
                series.format.line.color.rgb = colour
                if chart.type == 'line':
                    series.smooth = bool(options.get('lineSmooth'))
                    series.format.line.width = Pt(options.get('lineSize', 2))
                    if options.get('lineDataSymbol') == 'none':
                        series.marker.style = XL_MARKER_STYLE.NONE
                    else:
                        series.marker.style = XL_MARKER_STYLE.CIRCLE
                        series.marker.size = options.get('lineDataSymbolSize', 6)
                if chart.type == 'scatter':
                    series.format.line.fill.background()
                    series.marker.format.fill.solid()
                    series.marker.format.fill.fore_color.rgb = colour
            else:
                series.format.fill.solid()
                series.format.fill.fore_color.rgb = colour

    if chart.type == 'bar':
        plot.gap_width = options.get('barGapWidthPct', 50)
    if chart.type == 'doughnut' and hasattr(plot, 'hole_size'):
        plot.hole_size = options.get('holeSize', 50)

    if chart.type in ('pie', 'doughnut', 'radar'):
        if chart.type != 'radar':
            plot.has_data_labels = True
            plot.data_labels.show_percentage = options.get('showPercent', True)
            plot.data_labels.show_value = options.get('showValue', False)
            plot.data_labels.number_format = '0%'
            plot.data_labels.number_format_is_linked = False
        return

    if options.get('showCatAxisTitle'):
        native.category_axis.has_title = True
        native.category_axis.axis_title.text_frame.text = options['catAxisTitle']
    if options.get('showValAxisTitle'):
        native.value_axis.has_title = True
        native.value_axis.axis_title.text_frame.text = options['valAxisTitle']
    if options.get('valAxisLabelFormatCode'):
        native.value_axis.tick_labels.number_format = options['valAxisLabelFormatCode']
        native.value_axis.tick_labels.number_format_is_linked = False
    native.value_axis.has_major_gridlines = True
    native.value_axis.major_gridlines.format.line.color.rgb = RGBColor(0xE8, 0xE8, 0xE8)


def add_placeholder(slide, chart: PresentationChart, message: str = PLACEHOLDER_TEXT):
    """Put an explicit "could not be rendered" text box in the chart's box."""
    box = chart.box
    shape = slide.shapes.add_textbox(Inches(box['x']), Inches(box['y']), Inches(box['w']), Inches(box['h']))
    paragraph = shape.text_frame.paragraphs[0]
    paragraph.text = message
    paragraph.alignment = PP_ALIGN.CENTER
    paragraph.font.size = Pt(14)
    paragraph.font.italic = True
    paragraph.font.color.rgb = RGBColor(0x99, 0x99, 0x99)
    return shape


def _default_image_renderer(spec: ChartSpec, width: int, height: int) -> Optional[bytes]:
    from .raster import render_chart_png

    return render_chart_png(spec, width=width, height=height)


def add_chart_to_slide(slide, chart: PresentationChart,
                       image_renderer: Optional[ImageRenderer] = None) -> bool:
    """
    Place a compiled chart on a python-pptx slide.

    Native kinds become editable chart objects.  Image kinds call
    ``image_renderer(spec, width_px, height_px)`` (QuickChart by default) and
    insert the PNG.  When rendering fails, a text placeholder takes the
    chart's place.

    Returns:
        True if a chart or image was placed, False if a placeholder was used
    """
    box = chart.box
    x, y, cx, cy = Inches(box['x']), Inches(box['y']), Inches(box['w']), Inches(box['h'])

    if not chart.render_as_image:
        frame = slide.shapes.add_chart(native_chart_type(chart), x, y, cx, cy, _chart_data(chart))
        _style_native_chart(frame.chart, chart)
        return True

    renderer = image_renderer or _default_image_renderer
    width, height = int(box['w'] * PIXELS_PER_INCH), int(box['h'] * PIXELS_PER_INCH)
    try:
        png = renderer(chart.spec, width, height)
    except Exception as e:
        logger.error(f"[PPTX] Image render failed for {chart.kind.value if chart.kind else 'chart'}: {e}")
        png = None

    if not png:
        add_placeholder(slide, chart)
        return False

    slide.shapes.add_picture(io.BytesIO(png), x, y, cx, cy)
    return True
