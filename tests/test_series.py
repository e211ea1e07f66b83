"""
Unit tests for the series validator (compiler/series.py)
"""

import unittest
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).parent.parent))

from report_charts.compiler.series import category_key, resolve_value_column, validate_series
from report_charts.compiler.tabular import parse_chart_data
from report_charts.core.config import DEFAULT_CONFIG
from report_charts.models.data_models import SeriesSpec
from tests.fixtures.sample_data import RATES_CSV, SHARE_CSV


class TestValidateSeries(unittest.TestCase):
    """Test suite for validate_series."""

    def setUp(self):
        self.rows = parse_chart_data(RATES_CSV)
        self.fed = SeriesSpec('Fed', 'fed')
        self.ecb = SeriesSpec('ECB', 'ecb')

    def test_valid_series_pass_through(self):
        """Test an already-valid list is returned unchanged."""
        result = validate_series([self.fed, self.ecb], self.rows)
        self.assertEqual(result, [self.fed, self.ecb])

    def test_idempotent(self):
        """Test validating twice gives the same result."""
        series = [self.fed, SeriesSpec('BoE', 'boe'), self.ecb]
        once = validate_series(series, self.rows)
        twice = validate_series(once, self.rows)
        self.assertEqual(once, twice)

    def test_missing_column_dropped_with_diagnostic(self):
        """Test a series naming an absent column is dropped, order kept."""
        diagnostics = []
        result = validate_series([self.fed, SeriesSpec('BoE', 'boe'), self.ecb], self.rows, diagnostics)
        self.assertEqual([s.data_column for s in result], ['fed', 'ecb'])
        self.assertEqual(len(diagnostics), 1)
        self.assertEqual(diagnostics[0].code, 'missing-column')
        self.assertEqual(diagnostics[0].series, 'BoE')
        self.assertIn('boe', diagnostics[0].message)

    def test_missing_data_column(self):
        """Test a series without dataColumn is dropped."""
        diagnostics = []
        result = validate_series([SeriesSpec('Empty', None), self.fed], self.rows, diagnostics)
        self.assertEqual(result, [self.fed])
        self.assertEqual(diagnostics[0].code, 'missing-data-column')

    def test_all_dropped(self):
        """Test an all-invalid list returns empty and records no-valid-series."""
        diagnostics = []
        result = validate_series([SeriesSpec('BoE', 'boe')], self.rows, diagnostics)
        self.assertEqual(result, [])
        self.assertEqual([d.code for d in diagnostics], ['missing-column', 'no-valid-series'])

    def test_empty_inputs(self):
        """Test no rows or no series gives an empty list without diagnostics."""
        diagnostics = []
        self.assertEqual(validate_series([self.fed], [], diagnostics), [])
        self.assertEqual(validate_series([], self.rows, diagnostics), [])
        self.assertEqual(diagnostics, [])


class TestValueColumn(unittest.TestCase):
    """Test suite for resolve_value_column and category_key."""

    def setUp(self):
        self.rows = parse_chart_data("region,share,growth\nA,40,1\nB,60,2")

    def test_first_valid_series_wins(self):
        """Test the first configured series names the value column."""
        series = [SeriesSpec('Growth', 'growth')]
        self.assertEqual(resolve_value_column(series, self.rows, DEFAULT_CONFIG), 'growth')

    def test_positional_fallback(self):
        """Test the second column is used when nothing is configured."""
        self.assertEqual(resolve_value_column([], self.rows, DEFAULT_CONFIG), 'share')

    def test_configured_fallback_column(self):
        """Test a configured fallback column is preferred over position."""
        config = DEFAULT_CONFIG.with_overrides(fallback_value_column='growth')
        self.assertEqual(resolve_value_column([], self.rows, config), 'growth')

    def test_configured_fallback_absent_uses_position(self):
        """Test an absent fallback column falls back to position."""
        config = DEFAULT_CONFIG.with_overrides(fallback_value_column='margin', fallback_value_position=2)
        self.assertEqual(resolve_value_column([], self.rows, config), 'growth')

    def test_single_column_data(self):
        """Test a one-column table has no value column."""
        diagnostics = []
        rows = parse_chart_data("region\nA\nB")
        self.assertIsNone(resolve_value_column([], rows, DEFAULT_CONFIG, diagnostics))
        self.assertEqual(diagnostics[0].code, 'missing-value-column')

    def test_category_key(self):
        """Test the first column is the category key."""
        self.assertEqual(category_key(parse_chart_data(SHARE_CSV)), 'region')
        self.assertIsNone(category_key([]))


if __name__ == '__main__':
    unittest.main()
