"""
Shared preparation stage: ChartSpec -> PreparedChart.

This is the one place where chart-kind semantics live.  Every emitter calls
``prepare_chart`` and then only decides how to *shape* the result for its
backend.

Stages, in order:
    1. empty data                  -> no chart
    2. kind resolution             -> unknown kinds fall back to line
    3. series validation           -> drop series with missing columns
    4. no-chart rules              -> series-based kinds need a valid series
    5. degrade policies            -> oversized / unsupported heat-maps become
                                      stacked columns, unsupported treemaps
                                      become horizontal bars
    6. downsampling                -> per-surface point ceiling
    7. palette assignment          -> per series, or per row for slices/leaves
    8. derived series              -> waterfall, gauge, heat-map, treemap
"""

import logging
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence, Tuple

from ..core.config import DEFAULT_CONFIG, ChartCompilerConfig
from ..models.data_models import (
    ChartKind,
    ChartSpec,
    SeriesSpec,
    Surface,
    SELF_DERIVING_KINDS,
    POSITIONAL_FALLBACK_KINDS,
    DOWNSAMPLED_KINDS,
    record,
)
from .derived import (
    GaugeReading,
    HeatmapGrid,
    TreemapLeaf,
    WaterfallSegment,
    compute_gauge,
    compute_heatmap,
    compute_treemap,
    compute_waterfall,
    heatmap_columns,
    heatmap_exceeds_limits,
)
from .palette import assign_row_colours, assign_series_colours
from .sampling import downsample
from .series import category_key, resolve_value_column, validate_series

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PreparedChart:
    """Backend-neutral, fully derived chart ready for an emitter.

    ``kind`` is the *effective* kind after degrade policies; ``spec.kind`` is
    left untouched.
    """
    spec: ChartSpec
    kind: ChartKind
    surface: Surface
    palette: Tuple[str, ...]
    category_key: Optional[str]
    rows: Tuple[dict, ...]
    series: Tuple[SeriesSpec, ...]
    colours: Tuple[str, ...]
    value_column: Optional[str] = None
    x_column: Optional[str] = None
    y_column: Optional[str] = None
    row_colours: Tuple[str, ...] = ()
    waterfall: Optional[Tuple[WaterfallSegment, ...]] = None
    gauge: Optional[GaugeReading] = None
    heatmap: Optional[HeatmapGrid] = None
    treemap: Optional[Tuple[TreemapLeaf, ...]] = None
    degraded_from: Optional[ChartKind] = None
    original_count: int = 0

    @property
    def labels(self) -> List[Any]:
        """Category values in row order."""
        return [row.get(self.category_key) for row in self.rows]

    @property
    def value_format(self):
        return self.spec.value_format

    @property
    def was_downsampled(self) -> bool:
        return len(self.rows) < self.original_count

    def column_values(self, column: str) -> List[Any]:
        return [row.get(column) for row in self.rows]


def palette_for(surface: Surface, config: ChartCompilerConfig) -> Tuple[str, ...]:
    """General palette for web/preview, print palette for raster, brand palette for slides."""
    if surface == Surface.RASTER:
        return tuple(config.print_palette)
    if surface == Surface.PRESENTATION:
        return tuple(config.presentation_palette)
    return tuple(config.general_palette)


def resolve_kind(spec: ChartSpec, diagnostics: Optional[list] = None) -> ChartKind:
    """The spec's kind, or ``ChartKind.LINE`` for a missing/unknown kind."""
    if spec.kind is not None:
        return spec.kind
    if spec.raw_kind:
        record(diagnostics, 'unknown-kind',
               f'Unknown chart type {spec.raw_kind!r}; rendering as line')
    return ChartKind.LINE


def _scatter_columns(valid: Sequence[SeriesSpec], rows: Sequence) -> Tuple[Optional[str], Optional[str]]:
    keys = list(rows[0].keys())
    if len(valid) >= 2:
        return valid[0].data_column, valid[1].data_column
    x_col = keys[0] if keys else None
    if len(valid) == 1:
        return x_col, valid[0].data_column
    return x_col, keys[1] if len(keys) > 1 else None


def prepare_chart(spec: ChartSpec, surface: Surface = Surface.WEB,
                  config: ChartCompilerConfig = DEFAULT_CONFIG,
                  diagnostics: Optional[list] = None,
                  plugin_kinds: bool = True,
                  max_points: Optional[int] = None,
                  palette: Optional[Sequence[str]] = None) -> Optional[PreparedChart]:
    """Run the shared compile stages for one chart.

    Args:
        spec: Chart to compile
        surface: Output surface; selects the default palette and point ceiling
        config: Compiler constants
        diagnostics: Optional list collecting non-fatal findings
        plugin_kinds: False when the target cannot draw treemaps/heat-maps
            natively (print, raster and slide output)
        max_points: Override for the surface point ceiling
        palette: Override for the surface palette

    Returns:
        PreparedChart, or None when the chart has no renderable data
    """
    try:
        surface = Surface(surface)
    except ValueError:
        raise TypeError(f"Unknown output surface: {surface!r}")
    if spec.is_empty:
        return None

    rows = list(spec.rows)
    key = category_key(rows)
    kind = resolve_kind(spec, diagnostics)
    palette = tuple(palette) if palette else palette_for(surface, config)

    valid = validate_series(spec.series, rows, diagnostics)
    supplied = len(spec.series) > 0

    if kind in SELF_DERIVING_KINDS:
        pass
    elif kind in POSITIONAL_FALLBACK_KINDS:
        if supplied and not valid:
            return None
    elif not valid:
        if not supplied:
            record(diagnostics, 'no-valid-series', f'No series configured for {kind.value} chart')
        return None

    degraded_from = None
    series: List[SeriesSpec] = list(valid)
    value_column = None

    # Degrade policies
    if kind == ChartKind.HEATMAP and (
        not plugin_kinds
        or heatmap_exceeds_limits(rows, key, config.heatmap_max_rows, config.heatmap_max_columns)
    ):
        columns = heatmap_columns(rows, key)
        record(diagnostics, 'heatmap-fallback',
               f'Heatmap with {len(rows)} rows x {len(columns)} columns rendered as stacked columns',
               level=logging.INFO)
        degraded_from, kind = kind, ChartKind.STACKED_COLUMN
        series = [SeriesSpec(label=col, data_column=col) for col in columns]
        if not series:
            return None
    elif kind == ChartKind.TREEMAP and not plugin_kinds:
        value_column = resolve_value_column(valid, rows, config, diagnostics)
        if value_column is None:
            return None
        label = valid[0].label if valid else 'Value'
        degraded_from, kind = kind, ChartKind.BAR
        series = [SeriesSpec(label=label, data_column=value_column)]

    original_count = len(rows)
    # Degraded treemaps and heat-maps keep every leaf and row
    if kind in DOWNSAMPLED_KINDS and degraded_from is None:
        ceiling = max_points if max_points is not None else config.ceiling_for(surface)
        rows = downsample(rows, ceiling)
        if len(rows) < original_count:
            record(diagnostics, 'downsampled',
                   f'{original_count} rows reduced to {len(rows)} for {surface.value} output',
                   level=logging.INFO)

    if degraded_from == ChartKind.HEATMAP:
        colours = assign_row_colours(len(series), palette)
    else:
        colours = assign_series_colours(series, palette)

    fields = dict(
        spec=spec,
        kind=kind,
        surface=surface,
        palette=palette,
        category_key=key,
        rows=tuple(rows),
        series=tuple(series),
        colours=tuple(colours),
        degraded_from=degraded_from,
        original_count=original_count,
    )

    if degraded_from == ChartKind.TREEMAP:
        fields.update(value_column=value_column, row_colours=tuple(assign_row_colours(len(rows), palette)))

    elif kind in (ChartKind.PIE, ChartKind.DONUT, ChartKind.GAUGE, ChartKind.WATERFALL, ChartKind.TREEMAP):
        value_column = resolve_value_column(valid, rows, config, diagnostics)
        if value_column is None:
            return None
        fields['value_column'] = value_column
        fields['row_colours'] = tuple(assign_row_colours(len(rows), palette))
        lead_colour = colours[0] if colours else palette[0]

        if kind == ChartKind.GAUGE:
            fields['gauge'] = compute_gauge(
                rows, value_column, spec.gauge_max, config.default_gauge_max,
                colour=lead_colour, track_colour=config.gauge_track, diagnostics=diagnostics,
            )
        elif kind == ChartKind.WATERFALL:
            fields['waterfall'] = compute_waterfall(
                rows, key, value_column,
                total_colour=config.waterfall_total or palette[0],
                positive_colour=config.waterfall_positive,
                negative_colour=config.waterfall_negative,
                diagnostics=diagnostics,
            )
        elif kind == ChartKind.TREEMAP:
            fields['treemap'] = compute_treemap(rows, key, value_column, palette, diagnostics)

    elif kind == ChartKind.HEATMAP:
        fields['heatmap'] = compute_heatmap(
            rows, key, config.heatmap_light_rgb, config.heatmap_dark_rgb, diagnostics,
        )

    elif kind == ChartKind.SCATTER:
        x_col, y_col = _scatter_columns(valid, rows)
        if x_col is None or y_col is None:
            record(diagnostics, 'missing-column', 'Scatter chart needs two numeric columns')
            return None
        fields.update(x_column=x_col, y_column=y_col)

    prepared = PreparedChart(**fields)
    logger.debug(f"[Prepare] {spec.raw_kind} -> {prepared.kind.value} "
                 f"({len(prepared.rows)} rows, {len(prepared.series)} series, {surface.value})")
    return prepared
