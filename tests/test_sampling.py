"""
Unit tests for the downsampler (compiler/sampling.py)
"""

import unittest
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).parent.parent))

from report_charts.compiler.sampling import downsample, downsample_indices, downsample_series


class TestDownsample(unittest.TestCase):
    """Test suite for downsample."""

    def test_bounds_and_endpoint(self):
        """Test output length <= M + 1 and the last point is kept."""
        for count in (101, 150, 499, 500, 501, 1000, 1234):
            for ceiling in (10, 100, 500):
                if count <= ceiling:
                    continue
                rows = list(range(count))
                sampled = downsample(rows, ceiling)
                self.assertLessEqual(len(sampled), ceiling + 1, (count, ceiling))
                self.assertEqual(sampled[-1], rows[-1])
                self.assertEqual(sampled[0], rows[0])

    def test_unchanged_when_small(self):
        """Test input at or under the ceiling is returned unchanged."""
        rows = list(range(100))
        self.assertEqual(downsample(rows, 100), rows)
        self.assertEqual(downsample(rows[:5], 100), rows[:5])

    def test_order_preserved(self):
        """Test the sample is strictly increasing in index."""
        sampled = downsample(list(range(1000)), 100)
        self.assertEqual(sampled, sorted(sampled))
        self.assertEqual(sampled[:3], [0, 10, 20])

    def test_indices_force_last(self):
        """Test the final index is appended when the stride skips it."""
        self.assertEqual(downsample_indices(10, 4), [0, 3, 6, 9])
        self.assertEqual(downsample_indices(11, 4), [0, 3, 6, 9, 10])

    def test_does_not_modify_input(self):
        """Test the input list is left intact."""
        rows = list(range(50))
        downsample(rows, 10)
        self.assertEqual(rows, list(range(50)))


class TestDownsampleSeries(unittest.TestCase):
    """Test suite for Chart.js label/dataset downsampling."""

    def test_per_point_arrays_follow_labels(self):
        """Test data and per-point colour arrays are decimated with the labels."""
        labels = [f"d{i}" for i in range(20)]
        datasets = [{
            'label': 'v',
            'data': list(range(20)),
            'backgroundColor': [f"c{i}" for i in range(20)],
            'borderColor': '#000',
        }]
        new_labels, new_datasets = downsample_series(labels, datasets, 5)
        self.assertEqual(new_labels, ['d0', 'd4', 'd8', 'd12', 'd16', 'd19'])
        self.assertEqual(new_datasets[0]['data'], [0, 4, 8, 12, 16, 19])
        self.assertEqual(new_datasets[0]['backgroundColor'][-1], 'c19')
        self.assertEqual(new_datasets[0]['borderColor'], '#000')
        self.assertEqual(len(datasets[0]['data']), 20)

    def test_small_input_copied(self):
        """Test small input comes back as equal copies."""
        labels, datasets = downsample_series(['a', 'b'], [{'data': [1, 2]}], 5)
        self.assertEqual(labels, ['a', 'b'])
        self.assertEqual(datasets, [{'data': [1, 2]}])


if __name__ == '__main__':
    unittest.main()
