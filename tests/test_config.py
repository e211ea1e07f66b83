"""
Unit tests for configuration and value formatting (core/)
"""

import unittest
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).parent.parent))

from report_charts.core.config import DEFAULT_CONFIG, ChartCompilerConfig
from report_charts.core.utils import format_value, parse_number, strip_hash, to_number, with_alpha
from report_charts.models.data_models import Surface


class TestChartCompilerConfig(unittest.TestCase):
    """Test suite for the injectable config."""

    def test_default_ceilings(self):
        self.assertEqual(DEFAULT_CONFIG.ceiling_for(Surface.WEB), 500)
        self.assertEqual(DEFAULT_CONFIG.ceiling_for(Surface.PRESENTATION), 100)
        self.assertEqual(DEFAULT_CONFIG.ceiling_for('raster'), 100)

    def test_unknown_surface(self):
        with self.assertRaises(TypeError):
            DEFAULT_CONFIG.ceiling_for('svg')

    def test_with_overrides_copies(self):
        """Test overrides produce a new config and leave the default intact."""
        custom = DEFAULT_CONFIG.with_overrides(general_palette=('#000000',), heatmap_max_rows=5)
        self.assertIsInstance(custom, ChartCompilerConfig)
        self.assertEqual(custom.general_palette, ('#000000',))
        self.assertEqual(custom.heatmap_max_rows, 5)
        self.assertEqual(DEFAULT_CONFIG.heatmap_max_rows, 20)
        self.assertEqual(len(DEFAULT_CONFIG.general_palette), 7)


class TestValueFormatting(unittest.TestCase):
    """Test suite for number/percent/currency formatting."""

    def test_number(self):
        self.assertEqual(format_value(1250), '1,250')
        self.assertEqual(format_value(2.5), '2.5')
        self.assertEqual(format_value(1234.5678), '1,234.568')

    def test_percent(self):
        self.assertEqual(format_value(12, 'percent'), '12%')

    def test_currency(self):
        self.assertEqual(format_value(1250, 'currency'), '$1,250')

    def test_parse_number(self):
        self.assertEqual(parse_number(' 42 '), 42)
        self.assertEqual(parse_number('.5'), 0.5)
        self.assertIsNone(parse_number('4 2'))
        self.assertIsNone(parse_number(''))

    def test_to_number(self):
        self.assertEqual(to_number('3.5'), 3.5)
        self.assertEqual(to_number('abc'), 0)
        self.assertEqual(to_number(True), 0)
        self.assertIsNone(to_number(None, default=None))

    def test_colour_helpers(self):
        self.assertEqual(strip_hash('#3E7274'), '3E7274')
        self.assertEqual(with_alpha('#3E7274', '40'), '#3E727440')


if __name__ == '__main__':
    unittest.main()
