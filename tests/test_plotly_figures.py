"""
Unit tests for the Plotly emitter (visualization/plotly_figures.py)
"""

import unittest
from pathlib import Path
import sys

import plotly.graph_objects as go

sys.path.insert(0, str(Path(__file__).parent.parent))

from report_charts.compiler.tabular import parse_chart_data
from report_charts.core.config import CHART_COLORS
from report_charts.models.data_models import ChartSpec, SeriesSpec
from report_charts.visualization.plotly_figures import build_figure, tick_affixes
from tests.fixtures.sample_data import (
    BRIDGE_CSV,
    GAUGE_CSV,
    HEATMAP_CSV,
    RATES_CSV,
    SCATTER_CSV,
    SHARE_CSV,
    make_grid_csv,
    make_section,
)


def figure_for(chart_type='line', chart_data=RATES_CSV, series=None, diagnostics=None, **extra):
    spec = ChartSpec.from_section(make_section(chart_type, chart_data, series, **extra))
    return build_figure(spec, diagnostics=diagnostics)


class TestBuildFigure(unittest.TestCase):
    """Test suite for build_figure."""

    def test_line(self):
        fig = figure_for('line')
        self.assertIsInstance(fig, go.Figure)
        self.assertEqual(len(fig.data), 2)
        self.assertEqual(list(fig.data[0].x), ['Jan', 'Apr', 'Jul'])
        self.assertEqual(list(fig.data[0].y), [0.25, 0.5, 2.5])
        self.assertEqual(fig.data[0].line.color, CHART_COLORS[0])
        self.assertEqual(fig.data[1].name, 'ECB')

    def test_revalidates_hand_built_spec(self):
        """Test a spec built without the validator still loses missing-column series."""
        diagnostics = []
        spec = ChartSpec(kind='line', rows=parse_chart_data(RATES_CSV),
                         series=[SeriesSpec('Fed', 'fed'), SeriesSpec('BoE', 'boe')])
        fig = build_figure(spec, diagnostics=diagnostics)
        self.assertEqual([t.name for t in fig.data], ['Fed'])
        self.assertEqual(diagnostics[0].code, 'missing-column')

    def test_no_chart(self):
        self.assertIsNone(figure_for('line', series=[{'label': 'x', 'dataColumn': 'nope'}]))

    def test_stacked_column(self):
        fig = figure_for('stackedColumn')
        self.assertIsInstance(fig.data[0], go.Bar)
        self.assertEqual(fig.layout.barmode, 'stack')

    def test_horizontal_bar(self):
        fig = figure_for('bar')
        self.assertEqual(fig.data[0].orientation, 'h')
        self.assertEqual(list(fig.data[0].y), ['Jan', 'Apr', 'Jul'])

    def test_stacked_area(self):
        fig = figure_for('stackedArea')
        self.assertEqual(fig.data[0].stackgroup, 'one')

    def test_donut(self):
        fig = figure_for('donut', SHARE_CSV, [])
        self.assertIsInstance(fig.data[0], go.Pie)
        self.assertEqual(fig.data[0].hole, 0.5)
        self.assertEqual(list(fig.data[0].values), [40, 35, 25])

    def test_scatter(self):
        fig = figure_for('scatter', SCATTER_CSV, [])
        self.assertEqual(fig.data[0].mode, 'markers')
        self.assertEqual(list(fig.data[0].x), [1, 2, 3])

    def test_radar_closes_polygon(self):
        fig = figure_for('radar')
        self.assertIsInstance(fig.data[0], go.Scatterpolar)
        self.assertEqual(list(fig.data[0].theta), ['Jan', 'Apr', 'Jul', 'Jan'])

    def test_composed(self):
        fig = figure_for('composed')
        self.assertIsInstance(fig.data[0], go.Bar)
        self.assertIsInstance(fig.data[1], go.Scatter)

    def test_waterfall_floating_bars(self):
        fig = figure_for('waterfall', BRIDGE_CSV, [])
        self.assertEqual(list(fig.data[0].base), [0, 100, 130, 110])
        self.assertEqual(list(fig.data[0].y), [100, 30, -20, 10])

    def test_gauge(self):
        fig = figure_for('gauge', GAUGE_CSV, [], gaugeMax=200)
        indicator = fig.data[0]
        self.assertIsInstance(indicator, go.Indicator)
        self.assertEqual(indicator.value, 72)
        self.assertEqual(list(indicator.gauge.axis.range), [0, 200])
        self.assertEqual(indicator.gauge.bgcolor, '#e0e0e0')

    def test_treemap(self):
        fig = figure_for('treemap', SHARE_CSV, [])
        self.assertIsInstance(fig.data[0], go.Treemap)
        self.assertEqual(list(fig.data[0].labels), ['Americas', 'EMEA', 'APAC'])

    def test_heatmap(self):
        fig = figure_for('heatmap', HEATMAP_CSV, [])
        self.assertIsInstance(fig.data[0], go.Heatmap)
        self.assertEqual(fig.data[0].zmin, 1)
        self.assertEqual(fig.data[0].zmax, 6)

    def test_degenerate_heatmap(self):
        """Test an all-equal grid still gets a non-empty colour range."""
        fig = figure_for('heatmap', make_grid_csv(2, 2, value=5), [])
        self.assertEqual(fig.data[0].zmin, 5)
        self.assertEqual(fig.data[0].zmax, 6)

    def test_percent_ticks(self):
        fig = figure_for('line', yAxisFormat='percent')
        self.assertEqual(fig.layout.yaxis.ticksuffix, '%')

    def test_tick_affixes(self):
        self.assertEqual(tick_affixes('currency')['tickprefix'], '$')
        self.assertNotIn('tickprefix', tick_affixes('number'))


if __name__ == '__main__':
    unittest.main()
