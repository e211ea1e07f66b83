"""
Declarative-Component Emitter (Plotly).

Builds ``plotly.graph_objects.Figure`` objects for interactive views (CMS
preview, notebooks, dashboards).  The figure is handed straight to a render
function, so nothing here crosses a text boundary: tick formatting is applied
through ``tickprefix``/``ticksuffix`` derived from the chart's ``ValueFormat``.

Architecture Overview:
    - All functions are stateless and return go.Figure (or None for "no chart")
    - ``build_figure`` runs the shared ``prepare_chart`` stage itself, so series
      are re-validated against the rows even when the caller built the
      ChartSpec by hand without going through the Series Validator
    - Figures use the 'plotly_white' template

Kind mapping:
    line                -> go.Scatter (lines, spline)
    area / stacked-area -> go.Scatter (fill / stackgroup)
    column / bar        -> go.Bar (vertical / horizontal)
    stacked-column      -> go.Bar, barmode='stack'
    pie / donut         -> go.Pie (hole=0.5 for donut)
    scatter             -> go.Scatter (markers)
    radar               -> go.Scatterpolar (closed, filled)
    composed            -> go.Bar (first series) + go.Scatter (rest)
    waterfall           -> go.Bar with ``base`` (floating segments)
    gauge               -> go.Indicator (gauge, half arc)
    treemap             -> go.Treemap
    heatmap             -> go.Heatmap (light -> dark two-anchor scale)
"""

import logging
from typing import Optional

import plotly.graph_objects as go

from ..core.config import DEFAULT_CONFIG, GRID_COLOR, TEXT_PRIMARY, TEXT_SECONDARY, ChartCompilerConfig
from ..core.utils import format_value, rgb_string, with_alpha
from ..compiler.prepare import PreparedChart, prepare_chart
from ..models.data_models import ChartKind, ChartSpec, Surface, ValueFormat

logger = logging.getLogger(__name__)

KIND_TO_PLOTLY = {
    ChartKind.LINE: 'scatter',
    ChartKind.COLUMN: 'bar',
    ChartKind.BAR: 'bar',
    ChartKind.AREA: 'scatter',
    ChartKind.STACKED_COLUMN: 'bar',
    ChartKind.STACKED_AREA: 'scatter',
    ChartKind.PIE: 'pie',
    ChartKind.DONUT: 'pie',
    ChartKind.SCATTER: 'scatter',
    ChartKind.RADAR: 'scatterpolar',
    ChartKind.COMPOSED: 'bar',
    ChartKind.WATERFALL: 'bar',
    ChartKind.GAUGE: 'indicator',
    ChartKind.TREEMAP: 'treemap',
    ChartKind.HEATMAP: 'heatmap',
}

FIGURE_HEIGHT = 400


def tick_affixes(value_format: ValueFormat) -> dict:
    """Axis ``tickprefix``/``ticksuffix`` for a value format."""
    fmt = ValueFormat.parse(value_format)
    if fmt == ValueFormat.PERCENT:
        return {'ticksuffix': '%', 'tickformat': ','}
    if fmt == ValueFormat.CURRENCY:
        return {'tickprefix': '$', 'tickformat': ','}
    return {'tickformat': ','}


def _hover_template(value_format: ValueFormat, axis: str = 'y') -> str:
    fmt = ValueFormat.parse(value_format)
    if fmt == ValueFormat.PERCENT:
        return f'%{{{axis}:,}}%<extra>%{{fullData.name}}</extra>'
    if fmt == ValueFormat.CURRENCY:
        return f'$%{{{axis}:,}}<extra>%{{fullData.name}}</extra>'
    return f'%{{{axis}:,}}<extra>%{{fullData.name}}</extra>'


def _apply_layout(fig: go.Figure, chart: PreparedChart, show_legend: bool = True,
                  horizontal: bool = False, axes: bool = True) -> go.Figure:
    spec = chart.spec
    fig.update_layout(
        template='plotly_white',
        height=FIGURE_HEIGHT,
        margin=dict(l=50, r=20, t=30, b=50),
        showlegend=show_legend,
        legend=dict(orientation='h', yanchor='bottom', y=1.02, xanchor='left', x=0,
                    font=dict(size=11, color=TEXT_PRIMARY)),
        font=dict(color=TEXT_SECONDARY),
    )
    if axes:
        value_axis = dict(gridcolor=GRID_COLOR, griddash='dot', **tick_affixes(chart.value_format))
        category_axis = dict(gridcolor=GRID_COLOR, griddash='dot')
        x_axis, y_axis = (value_axis, category_axis) if horizontal else (category_axis, value_axis)
        fig.update_xaxes(title_text=spec.x_axis_label or None, **x_axis)
        fig.update_yaxes(title_text=spec.y_axis_label or None, **y_axis)
    return fig


# ============================================================================
# PER-KIND BUILDERS
# ============================================================================

def _standard_figure(chart: PreparedChart) -> go.Figure:
    kind = chart.kind
    labels = chart.labels
    fig = go.Figure()
    per_row = chart.degraded_from == ChartKind.TREEMAP

    for s, colour in zip(chart.series, chart.colours):
        values = chart.column_values(s.data_column)
        if kind in (ChartKind.COLUMN, ChartKind.STACKED_COLUMN, ChartKind.BAR):
            horizontal = kind == ChartKind.BAR
            fig.add_trace(go.Bar(
                name=s.label,
                x=values if horizontal else labels,
                y=labels if horizontal else values,
                orientation='h' if horizontal else 'v',
                marker_color=list(chart.row_colours) if per_row else colour,
                hovertemplate=_hover_template(chart.value_format, 'x' if horizontal else 'y'),
            ))
        else:
            trace = dict(
                name=s.label,
                x=labels,
                y=values,
                mode='lines',
                line=dict(color=colour, width=2, shape='spline'),
                hovertemplate=_hover_template(chart.value_format),
            )
            if kind == ChartKind.STACKED_AREA:
                trace.update(stackgroup='one', fillcolor=with_alpha(colour, '40'))
            elif kind == ChartKind.AREA:
                trace.update(fill='tozeroy', fillcolor=with_alpha(colour, '40'))
            fig.add_trace(go.Scatter(**trace))

    if kind == ChartKind.STACKED_COLUMN:
        fig.update_layout(barmode='stack')
    elif kind in (ChartKind.COLUMN, ChartKind.BAR):
        fig.update_layout(barmode='group')
    return _apply_layout(fig, chart, show_legend=not per_row, horizontal=kind == ChartKind.BAR)


def _pie_figure(chart: PreparedChart) -> go.Figure:
    fig = go.Figure(go.Pie(
        labels=chart.labels,
        values=chart.column_values(chart.value_column),
        hole=0.5 if chart.kind == ChartKind.DONUT else 0,
        marker=dict(colors=list(chart.row_colours), line=dict(color='#fff', width=2)),
        sort=False,
    ))
    fig = _apply_layout(fig, chart, axes=False)
    fig.update_layout(legend=dict(orientation='v', x=1.02, y=0.5, yanchor='middle'))
    return fig


def _scatter_figure(chart: PreparedChart) -> go.Figure:
    lead = next((s for s in chart.series if s.data_column == chart.y_column), None)
    colour = chart.colours[chart.series.index(lead)] if lead else chart.palette[0]
    fig = go.Figure(go.Scatter(
        name=lead.label if lead else 'Data',
        x=chart.column_values(chart.x_column),
        y=chart.column_values(chart.y_column),
        mode='markers',
        marker=dict(color=colour, size=10),
    ))
    return _apply_layout(fig, chart)


def _radar_figure(chart: PreparedChart) -> go.Figure:
    fig = go.Figure()
    labels = chart.labels
    for s, colour in zip(chart.series, chart.colours):
        values = chart.column_values(s.data_column)
        fig.add_trace(go.Scatterpolar(
            name=s.label,
            r=values + values[:1],
            theta=labels + labels[:1],
            fill='toself',
            fillcolor=with_alpha(colour, '66'),
            line=dict(color=colour, width=2),
        ))
    fig = _apply_layout(fig, chart, axes=False)
    fig.update_layout(polar=dict(radialaxis=dict(gridcolor=GRID_COLOR), angularaxis=dict(gridcolor=GRID_COLOR)))
    return fig


def _composed_figure(chart: PreparedChart) -> go.Figure:
    fig = go.Figure()
    labels = chart.labels
    for index, (s, colour) in enumerate(zip(chart.series, chart.colours)):
        values = chart.column_values(s.data_column)
        if index == 0:
            fig.add_trace(go.Bar(name=s.label, x=labels, y=values, marker_color=colour))
        else:
            fig.add_trace(go.Scatter(name=s.label, x=labels, y=values, mode='lines',
                                     line=dict(color=colour, width=2, shape='spline')))
    return _apply_layout(fig, chart)


def _waterfall_figure(chart: PreparedChart) -> go.Figure:
    segments = chart.waterfall
    name = chart.series[0].label if chart.series else 'Value'
    fig = go.Figure(go.Bar(
        name=name,
        x=[seg.label for seg in segments],
        y=[seg.end - seg.start for seg in segments],
        base=[seg.start for seg in segments],
        marker_color=[seg.colour for seg in segments],
        customdata=[seg.end for seg in segments],
    ))
    return _apply_layout(fig, chart, show_legend=False)


def _gauge_figure(chart: PreparedChart) -> go.Figure:
    gauge = chart.gauge
    fmt = ValueFormat.parse(chart.value_format)
    number = {'font': {'size': 36, 'color': TEXT_PRIMARY}}
    if fmt == ValueFormat.PERCENT:
        number['suffix'] = '%'
    elif fmt == ValueFormat.CURRENCY:
        number['prefix'] = '$'

    fig = go.Figure(go.Indicator(
        mode='gauge+number',
        value=gauge.value,
        number=number,
        title={'text': f"of {format_value(gauge.maximum, chart.value_format)}",
               'font': {'size': 12, 'color': TEXT_SECONDARY}},
        gauge={
            'shape': 'angular',
            'axis': {'range': [0, gauge.maximum], 'visible': False},
            'bar': {'color': gauge.colour, 'thickness': 1},
            'bgcolor': gauge.track_colour,
            'borderwidth': 0,
        },
    ))
    fig.update_layout(template='plotly_white', height=FIGURE_HEIGHT, margin=dict(l=30, r=30, t=30, b=30))
    return fig


def _treemap_figure(chart: PreparedChart) -> go.Figure:
    leaves = chart.treemap
    fig = go.Figure(go.Treemap(
        labels=[str(leaf.label) for leaf in leaves],
        parents=[''] * len(leaves),
        values=[leaf.size for leaf in leaves],
        marker=dict(colors=[leaf.colour for leaf in leaves], line=dict(color='#fff', width=2)),
        textfont=dict(color='#fff'),
        textinfo='label+value',
    ))
    fig.update_layout(template='plotly_white', height=FIGURE_HEIGHT, margin=dict(l=10, r=10, t=10, b=10))
    return fig


def _heatmap_figure(chart: PreparedChart, config: ChartCompilerConfig) -> go.Figure:
    grid = chart.heatmap
    zmax = grid.maximum if grid.maximum > grid.minimum else grid.minimum + 1
    fig = go.Figure(go.Heatmap(
        z=[list(row) for row in grid.values],
        x=list(grid.columns),
        y=list(grid.row_labels),
        zmin=grid.minimum,
        zmax=zmax,
        colorscale=[[0, rgb_string(config.heatmap_light_rgb)], [1, rgb_string(config.heatmap_dark_rgb)]],
        xgap=1,
        ygap=1,
        hovertemplate='%{y}, %{x}: %{z}<extra></extra>',
    ))
    fig = _apply_layout(fig, chart, show_legend=False)
    fig.update_yaxes(autorange='reversed')
    return fig


_BUILDERS = {
    ChartKind.PIE: _pie_figure,
    ChartKind.DONUT: _pie_figure,
    ChartKind.SCATTER: _scatter_figure,
    ChartKind.RADAR: _radar_figure,
    ChartKind.COMPOSED: _composed_figure,
    ChartKind.WATERFALL: _waterfall_figure,
    ChartKind.GAUGE: _gauge_figure,
    ChartKind.TREEMAP: _treemap_figure,
}


def figure_from_prepared(chart: PreparedChart, config: ChartCompilerConfig = DEFAULT_CONFIG) -> go.Figure:
    if chart.kind == ChartKind.HEATMAP:
        return _heatmap_figure(chart, config)
    builder = _BUILDERS.get(chart.kind, _standard_figure)
    return builder(chart)


def build_figure(spec: ChartSpec, config: ChartCompilerConfig = DEFAULT_CONFIG,
                 diagnostics: Optional[list] = None, surface: Surface = Surface.PREVIEW) -> Optional[go.Figure]:
    """
    Compile a chart spec to a Plotly figure.

    Series are validated against ``spec.rows`` here as well, so a spec that
    references a missing column loses that series instead of plotting the
    wrong data.

    Args:
        spec: Chart to compile
        config: Compiler constants (palette, heat-map anchors, ceilings)
        diagnostics: Optional list collecting non-fatal findings
        surface: WEB or PREVIEW; selects the point ceiling

    Returns:
        go.Figure, or None when there is no chart to draw
    """
    prepared = prepare_chart(spec, surface=surface, config=config, diagnostics=diagnostics, plugin_kinds=True)
    if prepared is None:
        logger.info(f"[Plotly] No chart for {spec.raw_kind!r}: nothing renderable")
        return None
    fig = figure_from_prepared(prepared, config)
    logger.debug(f"[Plotly] Built {KIND_TO_PLOTLY[prepared.kind]} figure for {prepared.kind.value}")
    return fig
