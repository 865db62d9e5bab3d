"""
Unit tests for the volume assembler (core.volume_assembler).

Tests slice ordering, dimensional filtering, spacing defaults and the
combined select-and-assemble load.
"""

import unittest
import sys
import os

import numpy as np

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from core.volume_types import SliceRecord
from core.volume_assembler import assemble_volume, load_volume, normalize_spacing
from core.mpr_errors import EmptyInputError, NoValidSlicesError


def make_record(order_key, width=4, height=4, series_key="S1", fill=None, **kwargs):
    value = order_key if fill is None else fill
    return SliceRecord(series_key, order_key, width, height, [value] * (width * height), **kwargs)


class TestNormalizeSpacing(unittest.TestCase):
    """Tests for normalize_spacing."""

    def test_valid_value_kept(self):
        self.assertEqual(normalize_spacing(0.7), 0.7)

    def test_missing_or_invalid_defaults_to_one(self):
        for value in (None, 0, -2.5, float("nan"), float("inf"), "abc"):
            self.assertEqual(normalize_spacing(value), 1.0)


class TestAssembleVolume(unittest.TestCase):
    """Tests for assemble_volume."""

    def test_sorted_by_order_key(self):
        volume = assemble_volume([make_record(2), make_record(0), make_record(1)])
        self.assertEqual(volume.depth, 3)
        grid = volume.as_array()
        for z in range(3):
            self.assertTrue(np.all(grid[z] == z))

    def test_voxel_count_invariant(self):
        volume = assemble_volume([make_record(i, width=5, height=3) for i in range(4)])
        self.assertEqual(volume.voxels.size, 5 * 3 * 4)
        self.assertTrue(volume.is_consistent())

    def test_mismatched_slice_dropped(self):
        records = [make_record(0), make_record(1, width=8), make_record(2)]
        volume = assemble_volume(records)
        self.assertEqual(volume.depth, 2)
        grid = volume.as_array()
        self.assertTrue(np.all(grid[0] == 0))
        self.assertTrue(np.all(grid[1] == 2))

    def test_canonical_size_from_first_input_record(self):
        # First in input order is 3x3, even though its order key sorts last
        records = [make_record(5, width=3, height=3), make_record(0), make_record(1)]
        volume = assemble_volume(records)
        self.assertEqual((volume.width, volume.height, volume.depth), (3, 3, 1))

    def test_wrong_sample_count_dropped(self):
        bad = SliceRecord("S1", 1, 4, 4, [0] * 10)
        volume = assemble_volume([make_record(0), bad])
        self.assertEqual(volume.depth, 1)

    def test_equal_order_keys_keep_input_order(self):
        records = [make_record(1, fill=10), make_record(1, fill=20), make_record(0, fill=30)]
        grid = assemble_volume(records).as_array()
        self.assertEqual([int(grid[z, 0, 0]) for z in range(3)], [30, 10, 20])

    def test_spacing_from_first_record(self):
        records = [
            make_record(0, spacing_x=0.5, spacing_y=0.75, spacing_thickness=2.0),
            make_record(1, spacing_x=9.0, spacing_y=9.0, spacing_thickness=9.0),
        ]
        volume = assemble_volume(records)
        self.assertEqual((volume.spacing_x, volume.spacing_y, volume.spacing_thickness), (0.5, 0.75, 2.0))

    def test_spacing_defaults(self):
        volume = assemble_volume([make_record(0, spacing_x=0, spacing_y=None, spacing_thickness=-1)])
        self.assertEqual((volume.spacing_x, volume.spacing_y, volume.spacing_thickness), (1.0, 1.0, 1.0))

    def test_volume_is_read_only(self):
        volume = assemble_volume([make_record(0)])
        with self.assertRaises(ValueError):
            volume.voxels[0] = 5

    def test_empty_raises(self):
        with self.assertRaises(EmptyInputError):
            assemble_volume([])

    def test_no_valid_slices_raises(self):
        bad = SliceRecord("S1", 0, 4, 4, [0] * 3)
        with self.assertRaises(NoValidSlicesError):
            assemble_volume([bad])


class TestLoadVolume(unittest.TestCase):
    """Tests for load_volume (selection + assembly)."""

    def test_end_to_end_three_slices(self):
        buffers = {k: np.arange(16, dtype=np.int16) + k * 100 for k in (2, 0, 1)}
        records = [SliceRecord("S1", k, 4, 4, buffers[k]) for k in (2, 0, 1)]
        volume = load_volume(records)
        self.assertEqual(volume.depth, 3)
        grid = volume.as_array()
        for z in range(3):
            np.testing.assert_array_equal(grid[z].reshape(-1), buffers[z])

    def test_dominant_series_only(self):
        records = [make_record(0, series_key="scout", fill=7)]
        records += [make_record(i, series_key="ct") for i in range(3)]
        volume = load_volume(records)
        self.assertEqual(volume.depth, 3)
        self.assertEqual(volume.series_key, "ct")

    def test_empty_candidates_raise(self):
        with self.assertRaises(EmptyInputError):
            load_volume([])


if __name__ == "__main__":
    unittest.main()
