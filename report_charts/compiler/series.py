"""
Series Validator and column resolution.

Every series must name a column present in the first data row.  Series that
do not are dropped with a diagnostic, never remapped to another column.
Running the validator on its own output is a no-op.
"""

import logging
from typing import List, Optional, Sequence

from ..models.data_models import SeriesSpec, record

logger = logging.getLogger(__name__)


def validate_series(series: Sequence[SeriesSpec], rows: Sequence, diagnostics: Optional[list] = None) -> List[SeriesSpec]:
    """Filter series down to those whose data column exists in the data.

    Args:
        series: Requested series, in legend order
        rows: Parsed data rows
        diagnostics: Optional list collecting a Diagnostic per dropped series

    Returns:
        Surviving series in their original order (empty when there is no data)
    """
    if not rows or not series:
        return []

    data_keys = list(rows[0].keys())
    valid = []
    for s in series:
        if not s.data_column:
            record(diagnostics, 'missing-data-column',
                   f'Chart series "{s.label}" has no dataColumn specified', series=s.label)
            continue
        if s.data_column not in data_keys:
            record(diagnostics, 'missing-column',
                   f'Chart series "{s.label}" references missing column "{s.data_column}". '
                   f'Available columns: {", ".join(data_keys)}', series=s.label)
            continue
        valid.append(s)

    if not valid:
        record(diagnostics, 'no-valid-series', 'No valid series found for chart - all columns missing from data')
    return valid


def category_key(rows: Sequence) -> Optional[str]:
    """The first column of the data, used as the category / x-axis key."""
    if not rows:
        return None
    keys = list(rows[0].keys())
    return keys[0] if keys else None


def resolve_value_column(valid_series: Sequence[SeriesSpec], rows: Sequence, config,
                         diagnostics: Optional[list] = None) -> Optional[str]:
    """Pick the single value column for pie, donut, gauge, waterfall and treemap.

    Order of preference: the first valid series, then
    ``config.fallback_value_column`` when present in the data, then the
    column at ``config.fallback_value_position``.
    """
    if valid_series:
        return valid_series[0].data_column
    if not rows:
        return None

    keys = list(rows[0].keys())
    if config.fallback_value_column and config.fallback_value_column in keys:
        return config.fallback_value_column

    position = config.fallback_value_position
    if 0 <= position < len(keys):
        column = keys[position]
        logger.info(f"[Series] No value series configured; using column {position} ({column!r})")
        return column

    record(diagnostics, 'missing-value-column',
           f'No value column available (data has {len(keys)} column(s))')
    return None
