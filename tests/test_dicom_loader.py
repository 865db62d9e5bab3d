"""
Unit tests for DICOM loader module.

Tests file loading, directory loading, rescaling and error handling using
small synthetic DICOM files written with pydicom.
"""

import unittest
import os
import tempfile

import numpy as np
from pydicom.dataset import FileDataset, FileMetaDataset
from pydicom.uid import ExplicitVRLittleEndian, CTImageStorage, generate_uid

# Add src to path
import sys
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from core.dicom_loader import DICOMLoader, to_int16_samples


def write_slice(path, series_uid, instance, pixels, pixel_spacing=(0.8, 0.5), thickness=2.5,
                slope=None, intercept=None, frames=1):
    """Write a minimal signed 16-bit CT slice."""
    meta = FileMetaDataset()
    meta.MediaStorageSOPClassUID = CTImageStorage
    meta.MediaStorageSOPInstanceUID = generate_uid()
    meta.TransferSyntaxUID = ExplicitVRLittleEndian

    ds = FileDataset(path, {}, file_meta=meta, preamble=b"\0" * 128)
    ds.SOPClassUID = CTImageStorage
    ds.SOPInstanceUID = meta.MediaStorageSOPInstanceUID
    ds.PatientName = "Test^Patient"
    ds.PatientID = "P001"
    ds.Modality = "CT"
    ds.StudyInstanceUID = "1.2.3"
    if series_uid is not None:
        ds.SeriesInstanceUID = series_uid
    ds.InstanceNumber = instance
    ds.Rows, ds.Columns = pixels.shape[-2:]
    if frames > 1:
        ds.NumberOfFrames = frames
    ds.SamplesPerPixel = 1
    ds.PhotometricInterpretation = "MONOCHROME2"
    ds.BitsAllocated = 16
    ds.BitsStored = 16
    ds.HighBit = 15
    ds.PixelRepresentation = 1
    if pixel_spacing is not None:
        ds.PixelSpacing = list(pixel_spacing)
    if thickness is not None:
        ds.SliceThickness = thickness
    if slope is not None:
        ds.RescaleSlope = slope
    if intercept is not None:
        ds.RescaleIntercept = intercept
    ds.PixelData = np.asarray(pixels, dtype="<i2").tobytes()
    ds.save_as(path, enforce_file_format=True)


class TestDICOMLoader(unittest.TestCase):
    """Test cases for DICOMLoader."""

    def setUp(self):
        """Set up test fixtures."""
        self.loader = DICOMLoader()
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp_dir = self._tmp.name

    def tearDown(self):
        self._tmp.cleanup()

    def test_loader_initialization(self):
        """Test loader initialization."""
        self.assertIsNotNone(self.loader)
        self.assertEqual(len(self.loader.loaded_records), 0)
        self.assertEqual(len(self.loader.failed_files), 0)

    def test_load_nonexistent_file(self):
        """Test loading a non-existent file."""
        result = self.loader.load_file("/nonexistent/file.dcm")
        self.assertIsNone(result)
        self.assertEqual(len(self.loader.failed_files), 1)

    def test_load_single_file(self):
        pixels = np.arange(12, dtype=np.int16).reshape(3, 4) - 6
        path = os.path.join(self.tmp_dir, "a.dcm")
        write_slice(path, "1.2.3.4", 7, pixels)

        record = self.loader.load_file(path)
        self.assertIsNotNone(record)
        self.assertEqual(record.series_key, "1.2.3.4")
        self.assertEqual(record.order_key, 7)
        self.assertEqual((record.width, record.height), (4, 3))
        np.testing.assert_array_equal(record.samples, pixels.reshape(-1))
        # PixelSpacing is (row, column)
        self.assertAlmostEqual(record.spacing_y, 0.8)
        self.assertAlmostEqual(record.spacing_x, 0.5)
        self.assertAlmostEqual(record.spacing_thickness, 2.5)
        self.assertEqual(record.patient_id, "P001")
        self.assertEqual(record.source_path, path)

    def test_rescale_applied(self):
        pixels = np.array([[1000, 2000]], dtype=np.int16)
        path = os.path.join(self.tmp_dir, "ct.dcm")
        write_slice(path, "1.2.3.4", 1, pixels, slope=1, intercept=-1024)
        record = self.loader.load_file(path)
        np.testing.assert_array_equal(record.samples, [-24, 976])

    def test_missing_spacing_left_unset(self):
        path = os.path.join(self.tmp_dir, "nospacing.dcm")
        write_slice(path, "1.2.3.4", 1, np.zeros((2, 2), dtype=np.int16), pixel_spacing=None, thickness=None)
        record = self.loader.load_file(path)
        self.assertIsNone(record.spacing_x)
        self.assertIsNone(record.spacing_y)
        self.assertIsNone(record.spacing_thickness)

    def test_multiframe_rejected(self):
        path = os.path.join(self.tmp_dir, "multi.dcm")
        write_slice(path, "1.2.3.4", 1, np.zeros((2, 3, 3), dtype=np.int16), frames=2)
        self.assertIsNone(self.loader.load_file(path))
        self.assertEqual(len(self.loader.get_failed_files()), 1)

    def test_load_directory_filters_pattern(self):
        for i in range(3):
            write_slice(os.path.join(self.tmp_dir, f"slice{i}.dcm"), "1.2.3.4", i,
                        np.full((2, 2), i, dtype=np.int16))
        write_slice(os.path.join(self.tmp_dir, "other.img"), "1.2.3.4", 9, np.zeros((2, 2), dtype=np.int16))

        progress = []
        records = self.loader.load_directory(self.tmp_dir, progress_callback=lambda c, t, f: progress.append((c, t)))
        self.assertEqual(len(records), 3)
        self.assertEqual(progress[-1], (3, 3))

        all_records = self.loader.load_directory(self.tmp_dir, pattern="*")
        self.assertEqual(len(all_records), 4)

    def test_load_directory_recursive(self):
        sub_dir = os.path.join(self.tmp_dir, "sub")
        os.makedirs(sub_dir)
        write_slice(os.path.join(sub_dir, "deep.DCM"), "1.2.3.4", 1, np.zeros((2, 2), dtype=np.int16))
        self.assertEqual(len(self.loader.load_directory(self.tmp_dir)), 0)
        self.assertEqual(len(self.loader.load_directory(self.tmp_dir, recursive=True)), 1)

    def test_invalid_file_recorded(self):
        path = os.path.join(self.tmp_dir, "broken.dcm")
        with open(path, "wb") as f:
            f.write(b"definitely not a DICOM file")
        records = self.loader.load_directory(self.tmp_dir)
        self.assertEqual(records, [])
        self.assertEqual(len(self.loader.get_failed_files()), 1)

    def test_missing_directory(self):
        self.assertEqual(self.loader.load_directory(os.path.join(self.tmp_dir, "nope")), [])
        self.assertEqual(len(self.loader.get_failed_files()), 1)

    def test_clear(self):
        """Test clearing loaded records."""
        self.loader.load_file("/nonexistent/file.dcm")
        self.loader.clear()
        self.assertEqual(len(self.loader.loaded_records), 0)
        self.assertEqual(len(self.loader.failed_files), 0)


class TestToInt16Samples(unittest.TestCase):
    """Tests for to_int16_samples."""

    def test_clipped_to_int16(self):
        out = to_int16_samples(np.array([0, 40000], dtype=np.uint16), slope=1.0, intercept=0.0)
        self.assertEqual(out.dtype, np.int16)
        self.assertEqual(int(out[1]), 32767)

    def test_slope_and_intercept(self):
        out = to_int16_samples(np.array([10, 20]), slope=2.0, intercept=-5.0)
        np.testing.assert_array_equal(out, [15, 35])


if __name__ == '__main__':
    unittest.main()
