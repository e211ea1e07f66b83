"""
Canvas-Chart Emitter (Chart.js).

Builds Chart.js configuration dicts for the web report, the CMS preview and,
via the raster builder, the external image service.

Formatting callbacks are not stored as code in the config.  Tick formatters
are ``TickFormat`` markers holding a ``ValueFormat``; the heat-map tooltip is a
``MatrixTooltip`` marker.  ``serialize_chartjs`` turns both into JavaScript
function source at the text boundary, which is the only place functions exist.

Kind mapping:
    line -> line            area / stacked-area -> line (fill)
    column / stacked-column -> bar (x)              bar -> bar (indexAxis y)
    pie -> pie              donut -> doughnut       gauge -> doughnut (half arc)
    scatter -> scatter      radar -> radar          composed -> bar + line
    waterfall -> bar (floating [start, end])
    treemap -> treemap (plugin) | bar (no plugin)
    heatmap -> matrix (plugin)  | stacked bar (no plugin / oversized)
"""

import json
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from ..core.config import (
    DEFAULT_CONFIG,
    GRID_COLOR,
    TEXT_PRIMARY,
    TEXT_PRIMARY_DARK,
    TEXT_SECONDARY,
    TEXT_SECONDARY_DARK,
    ChartCompilerConfig,
)
from ..core.utils import format_value, with_alpha
from ..compiler.prepare import PreparedChart, prepare_chart
from ..models.data_models import ChartKind, ChartSpec, Surface, ValueFormat

logger = logging.getLogger(__name__)

KIND_TO_CHARTJS = {
    ChartKind.LINE: 'line',
    ChartKind.COLUMN: 'bar',
    ChartKind.BAR: 'bar',
    ChartKind.AREA: 'line',
    ChartKind.STACKED_COLUMN: 'bar',
    ChartKind.STACKED_AREA: 'line',
    ChartKind.PIE: 'pie',
    ChartKind.DONUT: 'doughnut',
    ChartKind.SCATTER: 'scatter',
    ChartKind.RADAR: 'radar',
    ChartKind.COMPOSED: 'bar',
    ChartKind.WATERFALL: 'bar',
    ChartKind.GAUGE: 'doughnut',
    ChartKind.TREEMAP: 'treemap',
    ChartKind.HEATMAP: 'matrix',
}

TICK_COLOR = '#5F5F5F'


# ============================================================================
# FUNCTION MARKERS
# ============================================================================

@dataclass(frozen=True)
class TickFormat:
    """Placeholder for an axis tick callback formatting with ``value_format``."""
    value_format: ValueFormat

    def to_js(self) -> str:
        fmt = ValueFormat.parse(self.value_format)
        if fmt == ValueFormat.PERCENT:
            body = "return value + '%';"
        elif fmt == ValueFormat.CURRENCY:
            body = "return '$' + Number(value).toLocaleString();"
        else:
            body = "return Number(value).toLocaleString();"
        return f"function (value) {{ {body} }}"

    def __call__(self, value) -> str:
        return format_value(value, self.value_format)


@dataclass(frozen=True)
class MatrixTooltip:
    """Placeholder for the heat-map tooltip label callback."""
    row_labels: tuple
    columns: tuple

    def to_js(self) -> str:
        rows = json.dumps(list(self.row_labels))
        cols = json.dumps(list(self.columns))
        return (
            "function (ctx) { "
            "var d = ctx.dataset.data[ctx.dataIndex]; "
            f"return {rows}[d.y] + ', ' + {cols}[d.x] + ': ' + d.v; "
            "}"
        )


def serialize_chartjs(chart_config: dict, indent: Optional[int] = None) -> str:
    """Serialize a config to a JavaScript object literal.

    Function markers become inline ``function (...) {...}`` source; everything
    else is plain JSON.  ``</`` is escaped so the text is safe inside an inline
    ``<script>`` element.
    """
    functions: List[str] = []

    def _swap(node):
        if hasattr(node, 'to_js'):
            functions.append(node.to_js())
            return f"__js_function_{len(functions) - 1}__"
        if isinstance(node, dict):
            return {k: _swap(v) for k, v in node.items()}
        if isinstance(node, (list, tuple)):
            return [_swap(v) for v in node]
        return node

    text = json.dumps(_swap(chart_config), indent=indent)
    for i, source in enumerate(functions):
        text = text.replace(f'"__js_function_{i}__"', source)
    return text.replace('</', '<\\/')


# ============================================================================
# SHARED OPTION BLOCKS
# ============================================================================

def _text_colours(dark_mode: bool):
    if dark_mode:
        return TEXT_PRIMARY_DARK, TEXT_SECONDARY_DARK
    return TEXT_PRIMARY, TEXT_SECONDARY


def _base_options(animation: bool) -> dict:
    return {
        'responsive': True,
        'maintainAspectRatio': False,
        'animation': {'duration': 800} if animation else False,
    }


def _axis_title(text: Optional[str], colour: str) -> dict:
    return {'display': bool(text), 'text': text or '', 'color': colour}


def _ticks(colour: str, value_format: Optional[ValueFormat] = None) -> dict:
    ticks = {'color': colour, 'font': {'size': 11}}
    if value_format is not None:
        ticks['callback'] = TickFormat(value_format)
    return ticks


def _grid(show: bool = True) -> dict:
    if not show:
        return {'display': False}
    return {'color': GRID_COLOR, 'borderDash': [3, 3]}


def _legend(position: str, primary: str, align: Optional[str] = None, display: bool = True) -> dict:
    if not display:
        return {'display': False}
    legend = {'position': position, 'labels': {'color': primary, 'font': {'size': 11}}}
    if align:
        legend['align'] = align
    return legend


# ============================================================================
# PER-KIND BUILDERS
# ============================================================================

def _standard_config(chart: PreparedChart, animation: bool, dark_mode: bool) -> dict:
    """line, column, bar, area and stacked variants."""
    kind = chart.kind
    primary, secondary = _text_colours(dark_mode)
    spec = chart.spec
    is_bar = kind in (ChartKind.COLUMN, ChartKind.BAR, ChartKind.STACKED_COLUMN)
    per_row = chart.degraded_from == ChartKind.TREEMAP

    datasets = []
    for s, colour in zip(chart.series, chart.colours):
        dataset = {
            'label': s.label,
            'data': chart.column_values(s.data_column),
            'backgroundColor': with_alpha(colour, '40') if kind.is_area else colour,
            'borderColor': colour,
            'borderWidth': 2,
            'borderRadius': 4 if is_bar and not kind.is_stacked else 0,
            'fill': kind.is_area,
            'tension': 0.4,
        }
        if per_row:
            dataset['backgroundColor'] = list(chart.row_colours)
            dataset['borderColor'] = list(chart.row_colours)
            dataset['borderWidth'] = 0
        datasets.append(dataset)

    horizontal = kind == ChartKind.BAR
    value_axis = {
        'stacked': kind.is_stacked,
        'title': _axis_title(spec.y_axis_label, secondary),
        'ticks': _ticks(TICK_COLOR if not dark_mode else secondary, chart.value_format),
        'grid': _grid(),
        'border': {'display': False},
    }
    category_axis = {
        'stacked': kind.is_stacked,
        'title': _axis_title(spec.x_axis_label, secondary),
        'ticks': _ticks(TICK_COLOR if not dark_mode else secondary),
        'grid': _grid(),
        'border': {'display': False},
    }

    options = _base_options(animation)
    options.update({
        'indexAxis': 'y' if horizontal else 'x',
        'plugins': {
            'legend': _legend('top', primary, align='start', display=not per_row),
            'title': {'display': False},
        },
        'scales': {
            'x': value_axis if horizontal else category_axis,
            'y': category_axis if horizontal else value_axis,
        },
    })
    return {
        'type': KIND_TO_CHARTJS[kind],
        'data': {'labels': chart.labels, 'datasets': datasets},
        'options': options,
    }


def _pie_config(chart: PreparedChart, animation: bool, dark_mode: bool) -> dict:
    primary, _ = _text_colours(dark_mode)
    options = _base_options(animation)
    options['plugins'] = {'legend': _legend('right', primary)}
    return {
        'type': KIND_TO_CHARTJS[chart.kind],
        'data': {
            'labels': chart.labels,
            'datasets': [{
                'data': chart.column_values(chart.value_column),
                'backgroundColor': list(chart.row_colours),
                'borderColor': '#fff',
                'borderWidth': 2,
            }],
        },
        'options': options,
    }


def _scatter_config(chart: PreparedChart, animation: bool, dark_mode: bool) -> dict:
    primary, secondary = _text_colours(dark_mode)
    spec = chart.spec
    lead = next((s for s in chart.series if s.data_column == chart.y_column), None)
    colour = chart.colours[chart.series.index(lead)] if lead else chart.palette[0]

    options = _base_options(animation)
    options.update({
        'plugins': {'legend': _legend('top', primary)},
        'scales': {
            'x': {
                'type': 'linear',
                'title': _axis_title(spec.x_axis_label, secondary),
                'ticks': _ticks(TICK_COLOR),
                'grid': _grid(),
                'border': {'display': False},
            },
            'y': {
                'type': 'linear',
                'title': _axis_title(spec.y_axis_label, secondary),
                'ticks': _ticks(TICK_COLOR, chart.value_format),
                'grid': _grid(),
                'border': {'display': False},
            },
        },
    })
    return {
        'type': 'scatter',
        'data': {
            'datasets': [{
                'label': lead.label if lead else 'Data',
                'data': [{'x': row.get(chart.x_column), 'y': row.get(chart.y_column)} for row in chart.rows],
                'backgroundColor': colour,
                'borderColor': colour,
                'pointRadius': 5,
            }],
        },
        'options': options,
    }


def _radar_config(chart: PreparedChart, animation: bool, dark_mode: bool) -> dict:
    primary, _ = _text_colours(dark_mode)
    datasets = [
        {
            'label': s.label,
            'data': chart.column_values(s.data_column),
            'backgroundColor': with_alpha(colour, '66'),
            'borderColor': colour,
            'borderWidth': 2,
            'pointBackgroundColor': colour,
        }
        for s, colour in zip(chart.series, chart.colours)
    ]
    options = _base_options(animation)
    options.update({
        'plugins': {'legend': _legend('top', primary)},
        'scales': {
            'r': {
                'ticks': {'color': TICK_COLOR, 'font': {'size': 10}, 'backdropColor': 'transparent'},
                'grid': {'color': GRID_COLOR},
                'pointLabels': {'color': primary, 'font': {'size': 11}},
            },
        },
    })
    return {'type': 'radar', 'data': {'labels': chart.labels, 'datasets': datasets}, 'options': options}


def _composed_config(chart: PreparedChart, animation: bool, dark_mode: bool) -> dict:
    """First series as bars, the rest as lines over them."""
    primary, secondary = _text_colours(dark_mode)
    spec = chart.spec
    datasets = []
    for index, (s, colour) in enumerate(zip(chart.series, chart.colours)):
        data = chart.column_values(s.data_column)
        if index == 0:
            datasets.append({
                'type': 'bar', 'label': s.label, 'data': data,
                'backgroundColor': colour, 'borderColor': colour,
                'borderWidth': 1, 'borderRadius': 4, 'order': 2,
            })
        else:
            datasets.append({
                'type': 'line', 'label': s.label, 'data': data,
                'borderColor': colour, 'backgroundColor': 'transparent',
                'borderWidth': 2, 'tension': 0.4, 'pointRadius': 0, 'order': 1,
            })

    options = _base_options(animation)
    options.update({
        'plugins': {'legend': _legend('top', primary, align='start')},
        'scales': {
            'x': {
                'title': _axis_title(spec.x_axis_label, secondary),
                'ticks': _ticks(TICK_COLOR),
                'grid': _grid(),
                'border': {'display': False},
            },
            'y': {
                'title': _axis_title(spec.y_axis_label, secondary),
                'ticks': _ticks(TICK_COLOR, chart.value_format),
                'grid': _grid(),
                'border': {'display': False},
            },
        },
    })
    return {'type': 'bar', 'data': {'labels': chart.labels, 'datasets': datasets}, 'options': options}


def _waterfall_config(chart: PreparedChart, animation: bool, dark_mode: bool) -> dict:
    segments = chart.waterfall
    colours = [seg.colour for seg in segments]
    label = chart.series[0].label if chart.series else 'Value'
    options = _base_options(animation)
    options.update({
        'plugins': {'legend': {'display': False}},
        'scales': {
            'x': {'ticks': _ticks(TICK_COLOR), 'grid': _grid(False), 'border': {'display': False}},
            'y': {
                'ticks': _ticks(TICK_COLOR, chart.value_format),
                'grid': _grid(),
                'border': {'display': False},
            },
        },
    })
    return {
        'type': 'bar',
        'data': {
            'labels': [seg.label for seg in segments],
            'datasets': [{
                'label': label,
                'data': [seg.span for seg in segments],
                'backgroundColor': colours,
                'borderColor': list(colours),
                'borderWidth': 1,
                'borderRadius': 4,
            }],
        },
        'options': options,
    }


def _gauge_config(chart: PreparedChart, animation: bool, dark_mode: bool) -> dict:
    gauge = chart.gauge
    options = _base_options(animation)
    options.update({
        'cutout': '70%',
        'plugins': {
            'legend': {'display': False},
            'tooltip': {'enabled': False},
            'centerText': {
                'display': True,
                'value': format_value(gauge.value, chart.value_format),
                'maxValue': format_value(gauge.maximum, chart.value_format),
            },
        },
    })
    return {
        'type': 'doughnut',
        'data': {
            'labels': ['Value', 'Remaining'],
            'datasets': [{
                'data': [gauge.percentage, gauge.remainder],
                'backgroundColor': [gauge.colour, gauge.track_colour],
                'borderWidth': 0,
                'circumference': 180,
                'rotation': 270,
            }],
        },
        'options': options,
    }


def _treemap_config(chart: PreparedChart, animation: bool, dark_mode: bool) -> dict:
    leaves = chart.treemap
    options = _base_options(animation)
    options['plugins'] = {'legend': {'display': False}}
    return {
        'type': 'treemap',
        'data': {
            'datasets': [{
                'tree': [{'label': leaf.label, 'value': leaf.size, 'color': leaf.colour} for leaf in leaves],
                'key': 'value',
                'groups': ['label'],
                'backgroundColor': [leaf.colour for leaf in leaves],
                'borderColor': '#fff',
                'borderWidth': 2,
                'labels': {'display': True, 'color': '#fff', 'font': {'size': 11, 'weight': 'bold'}},
            }],
        },
        'options': options,
    }


def _heatmap_config(chart: PreparedChart, animation: bool, dark_mode: bool) -> dict:
    grid = chart.heatmap
    _, secondary = _text_colours(dark_mode)
    data = []
    colours = []
    for x, y, value, colour in grid.cells():
        data.append({'x': x, 'y': y, 'v': value})
        colours.append(colour)

    options = _base_options(animation)
    options.update({
        'plugins': {
            'legend': {'display': False},
            'tooltip': {'callbacks': {'label': MatrixTooltip(grid.row_labels, grid.columns)}},
        },
        'scales': {
            'x': {'type': 'category', 'labels': list(grid.columns),
                  'ticks': {'color': secondary}, 'grid': {'display': False}},
            'y': {'type': 'category', 'labels': list(grid.row_labels), 'offset': True,
                  'ticks': {'color': secondary}, 'grid': {'display': False}},
        },
    })
    return {
        'type': 'matrix',
        'data': {
            'datasets': [{
                'label': 'Heatmap',
                'data': data,
                'backgroundColor': colours,
                'borderColor': '#fff',
                'borderWidth': 1,
                'width': 30,
                'height': 30,
            }],
        },
        'options': options,
    }


_BUILDERS = {
    ChartKind.PIE: _pie_config,
    ChartKind.DONUT: _pie_config,
    ChartKind.SCATTER: _scatter_config,
    ChartKind.RADAR: _radar_config,
    ChartKind.COMPOSED: _composed_config,
    ChartKind.WATERFALL: _waterfall_config,
    ChartKind.GAUGE: _gauge_config,
    ChartKind.TREEMAP: _treemap_config,
    ChartKind.HEATMAP: _heatmap_config,
}


# ============================================================================
# PUBLIC API
# ============================================================================

def chartjs_from_prepared(chart: PreparedChart, animation: bool = True, dark_mode: bool = False) -> dict:
    """Shape an already-prepared chart as a Chart.js config."""
    builder = _BUILDERS.get(chart.kind, _standard_config)
    config = builder(chart, animation, dark_mode)
    logger.debug(f"[Chart.js] Built {config['type']} config for {chart.kind.value}")
    return config


def build_chartjs_config(spec: ChartSpec, surface: Surface = Surface.WEB,
                         config: ChartCompilerConfig = DEFAULT_CONFIG,
                         animation: bool = True, dark_mode: bool = False,
                         diagnostics: Optional[list] = None,
                         max_points: Optional[int] = None) -> Optional[dict]:
    """Compile a chart spec to a Chart.js configuration.

    Args:
        spec: Chart to compile
        surface: WEB / PREVIEW use the general palette and plugin kinds;
            RASTER uses the print palette and plugin-free fallbacks
        config: Compiler constants
        animation: Whether the config animates on load
        dark_mode: Light text colours for dark backgrounds
        diagnostics: Optional list collecting non-fatal findings
        max_points: Override for the surface point ceiling

    Returns:
        Chart.js config dict, or None when there is no chart to draw
    """
    surface = Surface(surface)
    prepared = prepare_chart(
        spec,
        surface=surface,
        config=config,
        diagnostics=diagnostics,
        plugin_kinds=surface in (Surface.WEB, Surface.PREVIEW),
        max_points=max_points,
    )
    if prepared is None:
        return None
    return chartjs_from_prepared(prepared, animation=animation, dark_mode=dark_mode)


def build_charts_init_script(sections: Sequence[Dict], config: ChartCompilerConfig = DEFAULT_CONFIG) -> str:
    """JavaScript that instantiates every chart of a report page.

    One ``new Chart(document.getElementById('chart-<index>'), {...});`` line
    per chart-bearing section; sections without a chart are skipped.
    """
    lines = []
    for index, section in enumerate(sections):
        spec = ChartSpec.from_section(section)
        if spec is None:
            continue
        chart_config = build_chartjs_config(spec, surface=Surface.WEB, config=config, animation=True)
        if chart_config is None:
            continue
        lines.append(f"new Chart(document.getElementById('chart-{index}'), {serialize_chartjs(chart_config)});")
    return '\n'.join(lines)
