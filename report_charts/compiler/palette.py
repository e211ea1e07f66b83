"""
Palette Assigner.

Colour for series ``i`` is its explicit colour when given, otherwise
``palette[i % len(palette)]``.  Proportional and grid kinds colour per row
with the same modulo rule over the row index.
"""

from typing import List, Sequence

from ..models.data_models import SeriesSpec


def palette_colour(palette: Sequence[str], index: int) -> str:
    return palette[index % len(palette)]


def assign_series_colours(series: Sequence[SeriesSpec], palette: Sequence[str]) -> List[str]:
    """Return one colour per series, in series order."""
    return [s.colour or palette_colour(palette, i) for i, s in enumerate(series)]


def assign_row_colours(count: int, palette: Sequence[str]) -> List[str]:
    """Return one colour per row (pie slices, treemap leaves, column groups)."""
    return [palette_colour(palette, i) for i in range(count)]
