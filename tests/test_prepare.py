"""
Unit tests for the shared preparation stage (compiler/prepare.py)

Covers:
- No-chart rules (empty data, zero valid series)
- Kind fallback and degrade policies
- Per-surface palettes and point ceilings
"""

import unittest
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).parent.parent))

from report_charts.compiler.prepare import prepare_chart
from report_charts.core.config import CHART_COLORS, DEFAULT_CONFIG, PDF_CHART_COLORS, PPTX_CHART_COLORS
from report_charts.models.data_models import ChartKind, ChartSpec, Surface
from tests.fixtures.sample_data import (
    GAUGE_CSV,
    HEATMAP_CSV,
    SHARE_CSV,
    make_grid_csv,
    make_long_csv,
    make_section,
)


def _spec(chart_type, chart_data, series=None, **extra):
    return ChartSpec.from_section(make_section(chart_type, chart_data, series, **extra))


class TestNoChartRules(unittest.TestCase):
    """Test suite for the "no chart" outcomes."""

    def test_empty_rows(self):
        self.assertIsNone(prepare_chart(ChartSpec(kind='line', rows=[])))

    def test_series_kind_without_valid_series(self):
        """Test a line chart whose only series is missing yields no chart."""
        diagnostics = []
        spec = _spec('line', make_long_csv(5), [{'label': 'X', 'dataColumn': 'missing'}])
        self.assertIsNone(prepare_chart(spec, diagnostics=diagnostics))
        self.assertIn('no-valid-series', [d.code for d in diagnostics])

    def test_series_kind_without_any_series(self):
        diagnostics = []
        spec = _spec('column', make_long_csv(5), [])
        self.assertIsNone(prepare_chart(spec, diagnostics=diagnostics))
        self.assertEqual(diagnostics[0].code, 'no-valid-series')

    def test_pie_derives_its_own_column(self):
        """Test pie charts need no series and use the second column."""
        prepared = prepare_chart(_spec('pie', SHARE_CSV, []))
        self.assertEqual(prepared.value_column, 'share')
        self.assertEqual(prepared.row_colours, CHART_COLORS[:3])

    def test_gauge_positional_fallback_only_without_series(self):
        """Test gauge falls back to column 1 only when no series is configured."""
        self.assertEqual(prepare_chart(_spec('gauge', GAUGE_CSV, [])).value_column, 'value')
        self.assertIsNone(prepare_chart(_spec('gauge', GAUGE_CSV, [{'label': 'x', 'dataColumn': 'nope'}])))

    def test_unknown_surface(self):
        with self.assertRaises(TypeError):
            prepare_chart(_spec('line', make_long_csv(3), [{'label': 'v', 'dataColumn': 'value'}]), surface='svg')


class TestKindResolution(unittest.TestCase):
    """Test suite for kind fallback and degrade policies."""

    def test_unknown_kind_renders_as_line(self):
        diagnostics = []
        spec = _spec('sparkline', make_long_csv(3), [{'label': 'v', 'dataColumn': 'value'}])
        prepared = prepare_chart(spec, diagnostics=diagnostics)
        self.assertEqual(prepared.kind, ChartKind.LINE)
        self.assertEqual(diagnostics[0].code, 'unknown-kind')

    def test_small_heatmap_stays_heatmap(self):
        prepared = prepare_chart(_spec('heatmap', HEATMAP_CSV, []))
        self.assertEqual(prepared.kind, ChartKind.HEATMAP)
        self.assertEqual(prepared.heatmap.columns, ('q1', 'q2', 'q3'))

    def test_oversized_heatmap_degrades(self):
        """Test a grid over 20 rows becomes stacked columns, one series per column."""
        diagnostics = []
        prepared = prepare_chart(_spec('heatmap', make_grid_csv(21, 3), []), diagnostics=diagnostics)
        self.assertEqual(prepared.kind, ChartKind.STACKED_COLUMN)
        self.assertEqual(prepared.degraded_from, ChartKind.HEATMAP)
        self.assertEqual([s.data_column for s in prepared.series], ['c0', 'c1', 'c2'])
        self.assertIn('heatmap-fallback', [d.code for d in diagnostics])

    def test_wide_heatmap_degrades(self):
        prepared = prepare_chart(_spec('heatmap', make_grid_csv(3, 16), []))
        self.assertEqual(prepared.kind, ChartKind.STACKED_COLUMN)

    def test_heatmap_limits_configurable(self):
        config = DEFAULT_CONFIG.with_overrides(heatmap_max_rows=1)
        prepared = prepare_chart(_spec('heatmap', HEATMAP_CSV, []), config=config)
        self.assertEqual(prepared.kind, ChartKind.STACKED_COLUMN)

    def test_plugin_free_treemap_becomes_bar(self):
        prepared = prepare_chart(_spec('treemap', SHARE_CSV, []), plugin_kinds=False)
        self.assertEqual(prepared.kind, ChartKind.BAR)
        self.assertEqual(prepared.value_column, 'share')
        self.assertEqual(len(prepared.row_colours), 3)

    def test_plugin_free_treemap_keeps_every_leaf(self):
        prepared = prepare_chart(_spec('treemap', make_long_csv(150), []), Surface.PRESENTATION, plugin_kinds=False)
        self.assertEqual(prepared.kind, ChartKind.BAR)
        self.assertEqual(len(prepared.rows), 150)
        self.assertFalse(prepared.was_downsampled)

    def test_degraded_heatmap_keeps_every_row(self):
        diagnostics = []
        prepared = prepare_chart(_spec('heatmap', make_grid_csv(150, 3), []), Surface.RASTER,
                                 diagnostics=diagnostics, plugin_kinds=False)
        self.assertEqual(prepared.kind, ChartKind.STACKED_COLUMN)
        self.assertEqual(len(prepared.rows), 150)
        self.assertNotIn('downsampled', [d.code for d in diagnostics])


class TestSurfaces(unittest.TestCase):
    """Test suite for per-surface palette and ceilings."""

    def setUp(self):
        self.spec = _spec('line', make_long_csv(600), [{'label': 'v', 'dataColumn': 'value'}])

    def test_palettes(self):
        self.assertEqual(prepare_chart(self.spec, Surface.WEB).colours, (CHART_COLORS[0],))
        self.assertEqual(prepare_chart(self.spec, Surface.RASTER).colours, (PDF_CHART_COLORS[0],))
        self.assertEqual(prepare_chart(self.spec, Surface.PRESENTATION).colours, (PPTX_CHART_COLORS[0],))

    def test_web_ceiling(self):
        diagnostics = []
        prepared = prepare_chart(self.spec, Surface.WEB, diagnostics=diagnostics)
        self.assertLessEqual(len(prepared.rows), 501)
        self.assertEqual(prepared.rows[-1]['value'], 599)
        self.assertTrue(prepared.was_downsampled)
        self.assertIn('downsampled', [d.code for d in diagnostics])

    def test_raster_ceiling(self):
        prepared = prepare_chart(self.spec, Surface.RASTER)
        self.assertLessEqual(len(prepared.rows), 101)
        self.assertEqual(prepared.labels[-1], 'd599')

    def test_waterfall_not_downsampled(self):
        spec = _spec('waterfall', make_long_csv(600), [])
        prepared = prepare_chart(spec, Surface.PRESENTATION)
        self.assertEqual(len(prepared.waterfall), 600)

    def test_spec_untouched(self):
        """Test preparing for several surfaces leaves the spec's rows unchanged."""
        before = self.spec.rows
        prepare_chart(self.spec, Surface.WEB)
        prepare_chart(self.spec, Surface.RASTER)
        self.assertIs(self.spec.rows, before)
        self.assertEqual(len(self.spec.rows), 600)


if __name__ == '__main__':
    unittest.main()
