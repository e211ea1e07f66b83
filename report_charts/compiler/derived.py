"""
Derived-Series Transforms.

Per-kind numeric transforms shared by every backend.  Each function reads the
spec's rows and returns new immutable structures; the input rows are never
modified.

Transforms:
    compute_waterfall() - running cumulative total, one floating segment per row
    compute_gauge()     - single value -> clamped percentage of gauge max
    compute_heatmap()   - R x C grid with a linear light->dark colour scale
    compute_treemap()   - one leaf per row, sized by the value column

Heat-map cells and waterfall steps that are missing or non-numeric count as 0
and emit a diagnostic.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np

from ..core.utils import clamp, rgb_string, to_number
from ..models.data_models import record
from .palette import palette_colour

logger = logging.getLogger(__name__)


# ============================================================================
# WATERFALL
# ============================================================================

@dataclass(frozen=True)
class WaterfallSegment:
    """One floating bar spanning ``[start, end]``."""
    label: object
    value: float
    start: float
    end: float
    colour: str
    is_total: bool = False

    @property
    def span(self) -> List[float]:
        return [self.start, self.end]


def _numeric_cells(rows, column, diagnostics, context) -> List[float]:
    values = []
    bad = 0
    for row in rows:
        number = to_number(row.get(column), default=None)
        if number is None:
            bad += 1
            number = 0
        values.append(number)
    if bad:
        record(diagnostics, 'non-numeric-value',
               f'{context}: {bad} missing or non-numeric value(s) in column "{column}" treated as 0')
    return values


def compute_waterfall(rows: Sequence, label_key: str, value_column: str, total_colour: str,
                      positive_colour: str, negative_colour: str,
                      diagnostics: Optional[list] = None) -> Tuple[WaterfallSegment, ...]:
    """Build cumulative waterfall segments.

    Row ``i`` spans ``[start, start + value]`` where ``start`` is the running
    total before row ``i``.  The final row is coloured as the total; the
    others by the sign of their own value.
    """
    values = _numeric_cells(rows, value_column, diagnostics, 'Waterfall')
    if not values:
        return ()

    ends = np.cumsum(np.asarray(values, dtype=float))
    starts = np.concatenate(([0.0], ends[:-1]))
    last = len(values) - 1

    segments = []
    for i, (row, value) in enumerate(zip(rows, values)):
        if i == last:
            colour = total_colour
        else:
            colour = positive_colour if value >= 0 else negative_colour
        segments.append(WaterfallSegment(
            label=row.get(label_key),
            value=value,
            start=float(starts[i]),
            end=float(ends[i]),
            colour=colour,
            is_total=(i == last),
        ))
    return tuple(segments)


# ============================================================================
# GAUGE
# ============================================================================

@dataclass(frozen=True)
class GaugeReading:
    """Half-circle gauge: ``percentage`` filled, ``remainder`` in the track colour."""
    value: float
    maximum: float
    percentage: float
    colour: str
    track_colour: str

    @property
    def remainder(self) -> float:
        return 100 - self.percentage


def gauge_percentage(value, maximum) -> float:
    """``clamp(value / maximum * 100, 0, 100)``"""
    return float(clamp(value / maximum * 100, 0, 100))


def compute_gauge(rows: Sequence, value_column: str, gauge_max, default_max: float,
                  colour: str, track_colour: str, diagnostics: Optional[list] = None) -> GaugeReading:
    """Read the gauge value from the first row and clamp it against the max."""
    cell = rows[0].get(value_column) if rows else None
    value = to_number(cell, default=None)
    if value is None:
        record(diagnostics, 'non-numeric-value',
               f'Gauge: value {cell!r} in column "{value_column}" is not numeric; using 0')
        value = 0

    maximum = to_number(gauge_max, default=None) if gauge_max is not None else default_max
    if maximum is None or maximum <= 0:
        record(diagnostics, 'invalid-gauge-max',
               f'Gauge: gaugeMax {gauge_max!r} is not a positive number; using {default_max}')
        maximum = default_max

    return GaugeReading(
        value=value,
        maximum=maximum,
        percentage=gauge_percentage(value, maximum),
        colour=colour,
        track_colour=track_colour,
    )


# ============================================================================
# HEATMAP
# ============================================================================

@dataclass(frozen=True)
class HeatmapGrid:
    """Row labels x value columns, with per-cell colour ratios and colours."""
    row_labels: Tuple[object, ...]
    columns: Tuple[str, ...]
    values: Tuple[Tuple[float, ...], ...]
    ratios: Tuple[Tuple[float, ...], ...]
    colours: Tuple[Tuple[str, ...], ...]
    minimum: float
    maximum: float

    def cells(self):
        """Yield ``(column_index, row_index, value, colour)`` row-major."""
        for y, row in enumerate(self.values):
            for x, value in enumerate(row):
                yield x, y, value, self.colours[y][x]


def heatmap_columns(rows: Sequence, label_key: str) -> List[str]:
    return [k for k in rows[0].keys() if k != label_key] if rows else []


def heatmap_exceeds_limits(rows: Sequence, label_key: str, max_rows: int, max_columns: int) -> bool:
    return len(rows) > max_rows or len(heatmap_columns(rows, label_key)) > max_columns


def interpolate_colour(ratio: float, light: Sequence[int], dark: Sequence[int]) -> str:
    """Linear interpolation from the light anchor (0) to the dark anchor (1)."""
    ratio = float(ratio)
    channels = [int(round(lo - ratio * (lo - hi))) for lo, hi in zip(light, dark)]
    return rgb_string(channels)


def compute_heatmap(rows: Sequence, label_key: str, light: Sequence[int], dark: Sequence[int],
                    diagnostics: Optional[list] = None) -> HeatmapGrid:
    """Build the heat-map grid.

    ``ratio = (value - min) / (max - min)``; when every cell is equal the
    ratio is 0 for all cells.
    """
    columns = heatmap_columns(rows, label_key)
    bad = 0
    matrix = []
    for row in rows:
        cells = []
        for col in columns:
            value = to_number(row.get(col), default=None)
            if value is None:
                bad += 1
                value = 0
            cells.append(value)
        matrix.append(cells)
    if bad:
        record(diagnostics, 'non-numeric-value',
               f'Heatmap: {bad} missing or non-numeric cell(s) treated as 0')

    grid = np.asarray(matrix, dtype=float).reshape(len(rows), len(columns))
    minimum = float(grid.min()) if grid.size else 0.0
    maximum = float(grid.max()) if grid.size else 0.0
    spread = maximum - minimum
    ratios = (grid - minimum) / spread if spread else np.zeros_like(grid)

    return HeatmapGrid(
        row_labels=tuple(row.get(label_key) for row in rows),
        columns=tuple(columns),
        values=tuple(tuple(r) for r in matrix),
        ratios=tuple(tuple(float(v) for v in r) for r in ratios),
        colours=tuple(tuple(interpolate_colour(v, light, dark) for v in r) for r in ratios),
        minimum=minimum,
        maximum=maximum,
    )


# ============================================================================
# TREEMAP
# ============================================================================

@dataclass(frozen=True)
class TreemapLeaf:
    label: object
    size: float
    colour: str


def compute_treemap(rows: Sequence, label_key: str, value_column: str, palette: Sequence[str],
                    diagnostics: Optional[list] = None) -> Tuple[TreemapLeaf, ...]:
    """One leaf per row; sizes are raw values (the backend packs the area)."""
    sizes = _numeric_cells(rows, value_column, diagnostics, 'Treemap')
    return tuple(
        TreemapLeaf(label=row.get(label_key), size=size, colour=palette_colour(palette, i))
        for i, (row, size) in enumerate(zip(rows, sizes))
    )
