"""
Data models for chart compilation.

This module defines the **schema layer** of the compiler: typed dataclasses
describing a backend-agnostic chart (``ChartSpec``), its series
(``SeriesSpec``), the closed enumerations the compiler switches on, and the
records it hands back to callers (``Diagnostic``, ``CompileResult``).

Role in the compiler
--------------------
A ``ChartSpec`` is built fresh from a CMS section on every compile request
(``ChartSpec.from_section``) and is never mutated afterwards.  Every derived
structure (waterfall segments, heat-map grids, downsampled rows) is produced
as new data by the compiler stages, so the same spec can be compiled for
several backends in turn.

Section contract
----------------
::

    {
        "chartType": "line",
        "chartData": "month,fed,ecb\\nJan,0.25,0.00",
        "chartSeries": [{"label": "Fed", "dataColumn": "fed", "colour": "#..."}],
        "xAxisLabel": "...", "yAxisLabel": "...",
        "yAxisFormat": "number" | "percent" | "currency",
        "gaugeMax": 100
    }

The same fields may also be nested under ``chartConfig``.  ``color`` is
accepted as an alias of ``colour``.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)


# ============================================================================
# ENUMERATIONS
# ============================================================================

class ChartKind(str, Enum):
    """The closed set of logical chart kinds."""
    LINE = 'line'
    COLUMN = 'column'
    BAR = 'bar'
    AREA = 'area'
    STACKED_COLUMN = 'stacked-column'
    STACKED_AREA = 'stacked-area'
    PIE = 'pie'
    DONUT = 'donut'
    SCATTER = 'scatter'
    RADAR = 'radar'
    COMPOSED = 'composed'
    WATERFALL = 'waterfall'
    GAUGE = 'gauge'
    TREEMAP = 'treemap'
    HEATMAP = 'heatmap'

    @property
    def is_stacked(self) -> bool:
        return self in (ChartKind.STACKED_COLUMN, ChartKind.STACKED_AREA)

    @property
    def is_area(self) -> bool:
        return self in (ChartKind.AREA, ChartKind.STACKED_AREA)

    @property
    def is_proportional(self) -> bool:
        return self in (ChartKind.PIE, ChartKind.DONUT)


# Kinds that read their own columns and do not require configured series
SELF_DERIVING_KINDS = frozenset({
    ChartKind.PIE, ChartKind.DONUT, ChartKind.TREEMAP, ChartKind.HEATMAP,
})

# Kinds that fall back to positional columns when no series is configured at all
POSITIONAL_FALLBACK_KINDS = SELF_DERIVING_KINDS | {
    ChartKind.GAUGE, ChartKind.WATERFALL, ChartKind.SCATTER,
}

# Kinds whose rows may be decimated by the Downsampler
DOWNSAMPLED_KINDS = frozenset({
    ChartKind.LINE, ChartKind.COLUMN, ChartKind.BAR, ChartKind.AREA,
    ChartKind.STACKED_COLUMN, ChartKind.STACKED_AREA, ChartKind.SCATTER,
    ChartKind.RADAR, ChartKind.COMPOSED,
})

# CMS spellings (camelCase, kebab, snake, spaced) collapse onto these keys
_KIND_ALIASES = {kind.value.replace('-', ''): kind for kind in ChartKind}
_KIND_ALIASES['doughnut'] = ChartKind.DONUT


def normalize_kind(raw) -> Optional[ChartKind]:
    """Map a CMS chart type string onto ``ChartKind``.

    ``'stackedColumn'``, ``'stacked-column'`` and ``'stacked_column'`` all map
    to ``ChartKind.STACKED_COLUMN``.  Returns None for unknown or empty input.
    """
    if isinstance(raw, ChartKind):
        return raw
    if not raw:
        return None
    key = str(raw).strip().lower()
    for sep in ('-', '_', ' '):
        key = key.replace(sep, '')
    return _KIND_ALIASES.get(key)


class ValueFormat(str, Enum):
    """How ticks and tooltips render values.  Never changes the data."""
    NUMBER = 'number'
    PERCENT = 'percent'
    CURRENCY = 'currency'

    @classmethod
    def parse(cls, raw) -> "ValueFormat":
        if isinstance(raw, cls):
            return raw
        try:
            return cls(str(raw).strip().lower())
        except ValueError:
            return cls.NUMBER


class Surface(str, Enum):
    """Output surface a chart is compiled for; selects emitter and ceiling."""
    WEB = 'web'
    PREVIEW = 'preview'
    PRESENTATION = 'presentation'
    RASTER = 'raster'


# ============================================================================
# CHART SPEC
# ============================================================================

@dataclass(frozen=True)
class SeriesSpec:
    """One named data series.

    Attributes:
        label: Display name used in legends and tooltips.
        data_column: Column of the dataset holding this series' values.
        colour: Optional explicit '#RRGGBB'; None means palette-assigned.
    """
    label: str
    data_column: Optional[str]
    colour: Optional[str] = None

    @classmethod
    def from_dict(cls, raw: Mapping) -> "SeriesSpec":
        return cls(
            label=str(raw.get('label') or raw.get('dataColumn') or ''),
            data_column=raw.get('dataColumn') or None,
            colour=raw.get('colour') or raw.get('color') or None,
        )

    def to_dict(self) -> Dict[str, Any]:
        result = {'label': self.label, 'dataColumn': self.data_column}
        if self.colour:
            result['colour'] = self.colour
        return result


@dataclass(frozen=True)
class ChartSpec:
    """Canonical, backend-agnostic description of one chart.

    ``rows`` keeps insertion order (x-axis / category order) and the first
    key of each row is the category column by convention.

    Raises:
        TypeError: if ``rows`` is not a list/tuple of mappings or ``series``
            is not a list/tuple.  These are programming errors upstream.
    """
    kind: Optional[ChartKind]
    rows: Tuple[Mapping, ...]
    series: Tuple[SeriesSpec, ...] = ()
    x_axis_label: Optional[str] = None
    y_axis_label: Optional[str] = None
    value_format: ValueFormat = ValueFormat.NUMBER
    gauge_max: Optional[float] = None
    raw_kind: Optional[str] = None

    def __post_init__(self):
        if not isinstance(self.rows, (list, tuple)):
            raise TypeError(f"ChartSpec.rows must be a list of records, got {type(self.rows).__name__}")
        for row in self.rows:
            if not isinstance(row, Mapping):
                raise TypeError(f"ChartSpec.rows must contain mappings, got {type(row).__name__}")
        if not isinstance(self.series, (list, tuple)):
            raise TypeError(f"ChartSpec.series must be a list, got {type(self.series).__name__}")
        object.__setattr__(self, 'rows', tuple(self.rows))
        object.__setattr__(self, 'series', tuple(
            s if isinstance(s, SeriesSpec) else SeriesSpec.from_dict(s) for s in self.series
        ))
        object.__setattr__(self, 'value_format', ValueFormat.parse(self.value_format))
        if self.raw_kind is None and self.kind is not None:
            object.__setattr__(self, 'raw_kind', getattr(self.kind, 'value', self.kind))
        object.__setattr__(self, 'kind', normalize_kind(self.kind))

    @property
    def columns(self) -> List[str]:
        """Column names of the first row, in order."""
        return list(self.rows[0].keys()) if self.rows else []

    @property
    def is_empty(self) -> bool:
        return len(self.rows) == 0

    @classmethod
    def from_section(cls, section: Mapping) -> Optional["ChartSpec"]:
        """Build a ChartSpec from a CMS section.

        Returns None when the section carries no chart (``hasChart`` is
        explicitly false or there is no chart data).
        """
        from report_charts.compiler.tabular import parse_chart_data

        if section.get('hasChart') is False:
            return None
        source = section.get('chartConfig') or {}
        merged = {**section, **{k: v for k, v in source.items() if v is not None}}

        chart_data = merged.get('chartData')
        if not chart_data:
            return None

        gauge_max = merged.get('gaugeMax')
        return cls(
            kind=merged.get('chartType') or 'line',
            rows=parse_chart_data(chart_data),
            series=[SeriesSpec.from_dict(s) for s in (merged.get('chartSeries') or [])],
            x_axis_label=merged.get('xAxisLabel') or None,
            y_axis_label=merged.get('yAxisLabel') or None,
            value_format=merged.get('yAxisFormat') or ValueFormat.NUMBER,
            gauge_max=gauge_max,
            raw_kind=merged.get('chartType') or 'line',
        )


# ============================================================================
# DIAGNOSTICS
# ============================================================================

@dataclass(frozen=True)
class Diagnostic:
    """A non-fatal data-quality finding recorded during compilation."""
    code: str
    message: str
    series: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {'code': self.code, 'message': self.message, 'series': self.series}


def record(diagnostics: Optional[list], code: str, message: str,
           series: Optional[str] = None, level: int = logging.WARNING) -> Diagnostic:
    """Log a diagnostic and append it to ``diagnostics`` when one is given."""
    diagnostic = Diagnostic(code=code, message=message, series=series)
    logger.log(level, f"[{code}] {message}")
    if diagnostics is not None:
        diagnostics.append(diagnostic)
    return diagnostic


@dataclass
class CompileResult:
    """Output of one compile request; ``output is None`` means no chart."""
    output: Any
    diagnostics: List[Diagnostic] = field(default_factory=list)
    surface: Optional[Surface] = None

    @property
    def has_chart(self) -> bool:
        return self.output is not None
