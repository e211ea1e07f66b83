"""
Central Configuration Module for the chart compiler.

=== PURPOSE ===
Single source of truth for every brand colour, point ceiling, degrade
threshold and backend endpoint used while compiling a chart.  Compiler code
never hard-codes these values; it reads them from a ``ChartCompilerConfig``
which defaults to ``DEFAULT_CONFIG`` built from the constants below.

=== DATA FLOW ===
  1. The palettes drive the Palette Assigner (compiler.palette).  The general
     palette is used for web and CMS preview output, the print palette for
     anything rasterized by the external image service, and the presentation
     palette for native slide charts.
  2. POINT_CEILINGS bound the Downsampler per output surface.
  3. HEATMAP_* limits decide when a heat-map degrades to stacked columns.
  4. QUICKCHART_URL / QUICKCHART_TIMEOUT configure the raster client and can
     be overridden from the environment.

Callers that need different branding build their own config with
``DEFAULT_CONFIG.with_overrides(...)`` and pass it to the compiler.
"""

import os
import logging
from dataclasses import dataclass, field, replace
from typing import Dict, Optional, Tuple

logger = logging.getLogger(__name__)

# ==========================================
# BRAND PALETTES
# ==========================================
# General data-series palette (web report and CMS preview)
CHART_COLORS = (
    '#3E7274',  # Blue Dianne (primary)
    '#3D748F',  # Coast Blue
    '#AC5359',  # Metallic Copper
    '#F07662',  # Orange
    '#3A7862',  # Silver Tree Green
    '#132728',  # Firefly Dark
    '#955073',  # Plum
)

# Print-matched palette (rasterized / PDF output, taken from the reference design)
PDF_CHART_COLORS = (
    '#E86E58',  # Coral/Red (primary data lines)
    '#3E7274',  # Teal (secondary lines)
    '#C9A227',  # Gold (tertiary lines)
    '#3D748F',  # Coast Blue
    '#3A7862',  # Silver Tree Green
    '#CCCCCC',  # Muted/Gray
)

# Presentation brand palette; the slide format wants hex without '#'
PPTX_CHART_COLORS = (
    '009FB1',  # primary teal
    '51BBB4',  # lighter teal
    '61C3D7',  # cyan
    'F49F7B',  # orange
    'A37767',  # brown
    '3E7274',  # dark teal
    '76BCA3',  # mint
)

# ==========================================
# TEXT / GRID COLOURS
# ==========================================
TEXT_PRIMARY = '#1A1A1A'
TEXT_SECONDARY = '#5F5F5F'
TEXT_PRIMARY_DARK = '#FFFFFF'
TEXT_SECONDARY_DARK = '#D9D9D9'
GRID_COLOR = '#E8E8E8'

# ==========================================
# DERIVED-SERIES COLOURS
# ==========================================
WATERFALL_POSITIVE_COLOR = '#3A7862'
WATERFALL_NEGATIVE_COLOR = '#AC5359'
GAUGE_TRACK_COLOR = '#e0e0e0'
DEFAULT_GAUGE_MAX = 100

# Heat-map colour scale anchors (RGB).  Ratio 0 maps to the light anchor.
HEATMAP_LIGHT_RGB = (255, 255, 255)
HEATMAP_DARK_RGB = (62, 114, 116)

# Grids larger than this are illegible as heat-maps and render as stacked columns
HEATMAP_MAX_ROWS = 20
HEATMAP_MAX_COLUMNS = 15

# ==========================================
# POINT CEILINGS
# ==========================================
MAX_DATA_POINTS = 500          # web canvas view
MAX_PPTX_DATA_POINTS = 100     # native presentation charts
MAX_RASTER_DATA_POINTS = 100   # external rasterization service payload limit

# Line charts above this many points hide their markers on slides
DENSE_LINE_THRESHOLD = 30

# ==========================================
# PRESENTATION LAYOUT
# ==========================================
# Default chart box on a 13.33in x 7.5in widescreen slide (inches)
DEFAULT_CHART_POSITION = {'x': 3.33, 'y': 1.93, 'w': 7.61, 'h': 3.94}

# ==========================================
# RASTERIZATION SERVICE
# ==========================================
QUICKCHART_URL = os.environ.get("QUICKCHART_URL", "https://quickchart.io/chart")
QUICKCHART_TIMEOUT = int(os.environ.get("QUICKCHART_TIMEOUT", "30"))
RASTER_DEVICE_PIXEL_RATIO = 2
RASTER_BACKGROUND = 'transparent'
DEFAULT_RASTER_WIDTH = 800
DEFAULT_RASTER_HEIGHT = 500


def _default_ceilings() -> Dict[str, int]:
    return {
        'web': MAX_DATA_POINTS,
        'preview': MAX_DATA_POINTS,
        'presentation': MAX_PPTX_DATA_POINTS,
        'raster': MAX_RASTER_DATA_POINTS,
    }


@dataclass(frozen=True)
class ChartCompilerConfig:
    """Injectable bundle of every constant the compiler consults.

    Attributes:
        general_palette: Series colours for web and preview output.
        print_palette: Series colours for rasterized / print output.
        presentation_palette: Series colours for native slide charts (no '#').
        point_ceilings: Maximum points per surface name
            ('web', 'preview', 'presentation', 'raster').
        heatmap_max_rows: Row count above which a heat-map degrades.
        heatmap_max_columns: Column count above which a heat-map degrades.
        heatmap_light_rgb: Colour at interpolation ratio 0.
        heatmap_dark_rgb: Colour at interpolation ratio 1.
        waterfall_positive: Colour for non-negative intermediate steps.
        waterfall_negative: Colour for negative intermediate steps.
        waterfall_total: Colour for the final step; None means palette[0].
        gauge_track: Colour of the unfilled part of the gauge arc.
        default_gauge_max: Upper bound used when a gauge has none.
        fallback_value_column: Named column used when a single-value chart
            (pie, donut, gauge, waterfall, treemap) has no configured series.
        fallback_value_position: Positional column used when
            ``fallback_value_column`` is unset or absent from the data.
    """
    general_palette: Tuple[str, ...] = CHART_COLORS
    print_palette: Tuple[str, ...] = PDF_CHART_COLORS
    presentation_palette: Tuple[str, ...] = PPTX_CHART_COLORS
    point_ceilings: Dict[str, int] = field(default_factory=_default_ceilings)
    heatmap_max_rows: int = HEATMAP_MAX_ROWS
    heatmap_max_columns: int = HEATMAP_MAX_COLUMNS
    heatmap_light_rgb: Tuple[int, int, int] = HEATMAP_LIGHT_RGB
    heatmap_dark_rgb: Tuple[int, int, int] = HEATMAP_DARK_RGB
    waterfall_positive: str = WATERFALL_POSITIVE_COLOR
    waterfall_negative: str = WATERFALL_NEGATIVE_COLOR
    waterfall_total: Optional[str] = None
    gauge_track: str = GAUGE_TRACK_COLOR
    default_gauge_max: float = DEFAULT_GAUGE_MAX
    fallback_value_column: Optional[str] = None
    fallback_value_position: int = 1

    def ceiling_for(self, surface) -> int:
        """Return the point ceiling for a surface (enum member or name)."""
        name = getattr(surface, 'value', surface)
        try:
            return self.point_ceilings[name]
        except KeyError:
            raise TypeError(f"Unknown output surface: {surface!r}")

    def with_overrides(self, **changes) -> "ChartCompilerConfig":
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)


DEFAULT_CONFIG = ChartCompilerConfig()
