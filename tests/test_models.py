"""
Unit tests for the chart spec schema (models/data_models.py)
"""

import unittest
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).parent.parent))

from report_charts.models.data_models import (
    ChartKind,
    ChartSpec,
    CompileResult,
    SeriesSpec,
    ValueFormat,
    normalize_kind,
)
from tests.fixtures.sample_data import RATES_CSV, make_section


class TestChartKind(unittest.TestCase):
    """Test suite for kind normalization."""

    def test_cms_spellings(self):
        """Test camelCase, kebab and snake spellings normalize to one kind."""
        for raw in ('stackedColumn', 'stacked-column', 'stacked_column', 'Stacked Column'):
            self.assertEqual(normalize_kind(raw), ChartKind.STACKED_COLUMN)

    def test_doughnut_alias(self):
        self.assertEqual(normalize_kind('doughnut'), ChartKind.DONUT)

    def test_unknown(self):
        """Test unknown or empty kinds return None."""
        self.assertIsNone(normalize_kind('sparkline'))
        self.assertIsNone(normalize_kind(''))
        self.assertIsNone(normalize_kind(None))

    def test_kind_properties(self):
        self.assertTrue(ChartKind.STACKED_AREA.is_stacked)
        self.assertTrue(ChartKind.STACKED_AREA.is_area)
        self.assertFalse(ChartKind.COLUMN.is_stacked)
        self.assertTrue(ChartKind.DONUT.is_proportional)


class TestValueFormat(unittest.TestCase):

    def test_parse(self):
        self.assertEqual(ValueFormat.parse('percent'), ValueFormat.PERCENT)
        self.assertEqual(ValueFormat.parse(' Currency '), ValueFormat.CURRENCY)
        self.assertEqual(ValueFormat.parse('bogus'), ValueFormat.NUMBER)
        self.assertEqual(ValueFormat.parse(None), ValueFormat.NUMBER)


class TestChartSpec(unittest.TestCase):
    """Test suite for ChartSpec construction."""

    def test_rows_must_be_sequence(self):
        """Test a non-list rows argument is a contract error."""
        with self.assertRaises(TypeError):
            ChartSpec(kind='line', rows="month,fed\nJan,1")
        with self.assertRaises(TypeError):
            ChartSpec(kind='line', rows=None)

    def test_rows_must_hold_mappings(self):
        with self.assertRaises(TypeError):
            ChartSpec(kind='line', rows=[['Jan', 1]])

    def test_series_must_be_sequence(self):
        with self.assertRaises(TypeError):
            ChartSpec(kind='line', rows=[{'a': 1}], series='fed')

    def test_series_dicts_coerced(self):
        """Test dict series become SeriesSpec and the kind is normalized."""
        spec = ChartSpec(kind='stackedArea', rows=[{'m': 'Jan', 'v': 1}],
                         series=[{'label': 'V', 'dataColumn': 'v', 'color': '#010203'}])
        self.assertEqual(spec.kind, ChartKind.STACKED_AREA)
        self.assertEqual(spec.raw_kind, 'stackedArea')
        self.assertEqual(spec.series[0], SeriesSpec('V', 'v', '#010203'))
        self.assertIsInstance(spec.rows, tuple)

    def test_unknown_kind_kept_raw(self):
        spec = ChartSpec(kind='sparkline', rows=[{'a': 1}])
        self.assertIsNone(spec.kind)
        self.assertEqual(spec.raw_kind, 'sparkline')

    def test_empty(self):
        spec = ChartSpec(kind='line', rows=[])
        self.assertTrue(spec.is_empty)
        self.assertEqual(spec.columns, [])


class TestFromSection(unittest.TestCase):
    """Test suite for reading CMS sections."""

    def test_flat_section(self):
        spec = ChartSpec.from_section(make_section('line', yAxisFormat='percent', xAxisLabel='Month'))
        self.assertEqual(spec.kind, ChartKind.LINE)
        self.assertEqual(len(spec.rows), 3)
        self.assertEqual([s.label for s in spec.series], ['Fed', 'ECB'])
        self.assertEqual(spec.value_format, ValueFormat.PERCENT)
        self.assertEqual(spec.x_axis_label, 'Month')

    def test_nested_chart_config(self):
        """Test fields nested under chartConfig are read."""
        section = {
            'title': 'Policy rates',
            'chartConfig': {
                'chartType': 'stackedColumn',
                'chartData': RATES_CSV,
                'chartSeries': [{'label': 'Fed', 'dataColumn': 'fed'}],
                'gaugeMax': None,
            },
        }
        spec = ChartSpec.from_section(section)
        self.assertEqual(spec.kind, ChartKind.STACKED_COLUMN)
        self.assertEqual(len(spec.series), 1)

    def test_has_chart_false(self):
        self.assertIsNone(ChartSpec.from_section(make_section('line', hasChart=False)))

    def test_no_chart_data(self):
        self.assertIsNone(ChartSpec.from_section({'chartType': 'line', 'chartData': ''}))

    def test_default_kind_is_line(self):
        spec = ChartSpec.from_section({'chartData': RATES_CSV})
        self.assertEqual(spec.kind, ChartKind.LINE)

    def test_compile_result(self):
        self.assertFalse(CompileResult(output=None).has_chart)
        self.assertTrue(CompileResult(output={}).has_chart)


if __name__ == '__main__':
    unittest.main()
