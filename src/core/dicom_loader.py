"""
DICOM File Loader

This module decodes DICOM files into slice records for the volume engine:
- Single files
- Multiple files
- Directories (optionally recursive, filtered by a filename pattern)

Each file is read with pydicom; its pixel data is rescaled (slope/intercept)
and clipped to the signed 16-bit range. Files that cannot be read or are not
single-frame grayscale images are recorded as failures and skipped, so one bad
file never blocks a whole folder.

Inputs:
    - File paths (single or multiple)
    - Directory paths

Outputs:
    - List of SliceRecord objects
    - List of files that failed to load (with error messages)

Requirements:
    - pydicom library for DICOM file reading
    - numpy for pixel conversion
    - pathlib / fnmatch for directory scanning
"""

import os
import fnmatch
import warnings
from pathlib import Path
from typing import Callable, List, Optional, Tuple
import numpy as np
import pydicom
from pydicom.errors import InvalidDicomError

from core.volume_types import SliceRecord
from utils.dicom_utils import (
    get_pixel_spacing,
    get_slice_thickness,
    get_rescale_parameters,
    get_series_key,
    get_instance_number,
    get_patient_info,
)
from utils.debug_log import debug_log

INT16_MIN = np.iinfo(np.int16).min
INT16_MAX = np.iinfo(np.int16).max

DEFAULT_FILE_PATTERN = "*.dcm"


def _is_compression_error(error_msg: str) -> bool:
    """True if a pixel decoding error message points at a missing compression plugin."""
    error_msg = error_msg.lower()
    return (
        "pylibjpeg-libjpeg" in error_msg or
        "missing required dependencies" in error_msg or
        "unable to convert" in error_msg or
        "decode" in error_msg
    )


def to_int16_samples(pixel_array: np.ndarray, slope: float = 1.0, intercept: float = 0.0) -> np.ndarray:
    """
    Apply rescale slope/intercept and clip to the int16 range.

    Args:
        pixel_array: Stored pixel values
        slope: Rescale slope
        intercept: Rescale intercept

    Returns:
        int16 array of the same shape
    """
    if slope != 1.0 or intercept != 0.0:
        values = np.rint(np.asarray(pixel_array, dtype=np.float64) * slope + intercept)
    else:
        values = np.asarray(pixel_array, dtype=np.int64)
    return np.clip(values, INT16_MIN, INT16_MAX).astype(np.int16)


class DICOMLoader:
    """
    Decodes DICOM files into SliceRecords.

    Supports:
    - Single file loading
    - Multiple file loading
    - Directory scanning with a filename pattern, optionally recursive
    """

    def __init__(self):
        """Initialize the DICOM loader."""
        self.loaded_records: List[SliceRecord] = []
        self.failed_files: List[Tuple[str, str]] = []  # (path, error_message)
        self._compression_error_files: set = set()  # Files that have already reported compression errors

    def load_file(self, file_path: str) -> Optional[SliceRecord]:
        """
        Decode a single DICOM file.

        Args:
            file_path: Path to the DICOM file

        Returns:
            SliceRecord if successful, None otherwise (failure recorded in failed_files)
        """
        try:
            # pydicom reports excess padding as a warning only
            with warnings.catch_warnings():
                warnings.filterwarnings('ignore', message='.*excess padding.*', category=UserWarning)
                dataset = pydicom.dcmread(file_path, force=True)
        except InvalidDicomError as e:
            self.failed_files.append((file_path, f"Invalid DICOM file: {str(e)}"))
            return None
        except OSError as e:
            # File not found, permission denied, etc.
            self.failed_files.append((file_path, f"File system error: {str(e)}"))
            return None
        except Exception as e:
            self.failed_files.append((file_path, f"{type(e).__name__}: Error reading file: {str(e)}"))
            return None

        if 'PixelData' not in dataset:
            self.failed_files.append((file_path, "No pixel data"))
            return None

        try:
            pixel_array = dataset.pixel_array
        except Exception as e:
            error_msg = str(e)
            if _is_compression_error(error_msg):
                detail = (
                    "Compressed DICOM pixel data cannot be decoded. "
                    "Install optional dependencies: pip install pylibjpeg pyjpegls"
                )
                # Only show error message once per file
                if file_path not in self._compression_error_files:
                    self._compression_error_files.add(file_path)
                    print(f"[LOADER] Compression Error: {file_path}")
                    print(f"  Error: {error_msg[:200]}")
                self.failed_files.append((file_path, detail))
            else:
                self.failed_files.append((file_path, f"{type(e).__name__}: Error decoding pixel data: {error_msg}"))
            return None

        if pixel_array.ndim != 2:
            self.failed_files.append(
                (file_path, f"Unsupported pixel array shape {pixel_array.shape} (multi-frame or color)")
            )
            return None

        height, width = pixel_array.shape
        slope, intercept = get_rescale_parameters(dataset)
        samples = to_int16_samples(pixel_array, slope, intercept)

        spacing = get_pixel_spacing(dataset)
        spacing_y, spacing_x = spacing if spacing is not None else (None, None)
        patient_name, patient_id = get_patient_info(dataset)

        return SliceRecord(
            series_key=get_series_key(dataset),
            order_key=get_instance_number(dataset),
            width=width,
            height=height,
            samples=samples,
            spacing_x=spacing_x,
            spacing_y=spacing_y,
            spacing_thickness=get_slice_thickness(dataset),
            patient_name=patient_name,
            patient_id=patient_id,
            source_path=file_path,
        )

    def load_files(self, file_paths: List[str],
                   progress_callback: Optional[Callable[[int, int, str], None]] = None) -> List[SliceRecord]:
        """
        Decode multiple DICOM files.

        Args:
            file_paths: List of file paths to load
            progress_callback: Optional callback function called during loading.
                              Signature: (current: int, total: int, filename: str) -> None

        Returns:
            List of successfully decoded slice records, in file order
        """
        self.loaded_records = []
        self.failed_files = []

        total_files = len(file_paths)
        for idx, file_path in enumerate(file_paths):
            if progress_callback:
                progress_callback(idx + 1, total_files, os.path.basename(file_path))
            record = self.load_file(file_path)
            if record is not None:
                self.loaded_records.append(record)

        if self.failed_files:
            debug_log(
                "dicom_loader.py:load_files",
                "Some files failed to load",
                {"failed": len(self.failed_files), "total": total_files},
            )
        return self.loaded_records

    def find_files(self, directory_path: str, pattern: Optional[str] = DEFAULT_FILE_PATTERN,
                   recursive: bool = False) -> List[str]:
        """
        List files in a directory matching a filename pattern.

        Matching is case-insensitive; a pattern of None or "*" matches every file.
        Results are sorted by path so loading order is reproducible.

        Args:
            directory_path: Path to the directory
            pattern: fnmatch-style filename pattern
            recursive: If True, search subdirectories recursively

        Returns:
            Sorted list of matching file paths
        """
        dir_path = Path(directory_path)
        candidates = dir_path.rglob('*') if recursive else dir_path.iterdir()
        pattern = pattern.lower() if pattern else None
        file_paths = [
            str(p) for p in candidates
            if p.is_file() and (pattern is None or fnmatch.fnmatch(p.name.lower(), pattern))
        ]
        return sorted(file_paths)

    def load_directory(self, directory_path: str, pattern: Optional[str] = DEFAULT_FILE_PATTERN,
                       recursive: bool = False,
                       progress_callback: Optional[Callable[[int, int, str], None]] = None) -> List[SliceRecord]:
        """
        Decode all matching DICOM files in a directory.

        Args:
            directory_path: Path to the directory
            pattern: fnmatch-style filename pattern (default "*.dcm")
            recursive: If True, search subdirectories recursively
            progress_callback: Optional callback function called during loading.
                              Signature: (current: int, total: int, filename: str) -> None

        Returns:
            List of successfully decoded slice records
        """
        dir_path = Path(directory_path)
        if not dir_path.exists() or not dir_path.is_dir():
            self.loaded_records = []
            self.failed_files = [(directory_path, "Directory does not exist or is not a directory")]
            return []

        file_paths = self.find_files(directory_path, pattern, recursive)
        return self.load_files(file_paths, progress_callback=progress_callback)

    def get_failed_files(self) -> List[Tuple[str, str]]:
        """
        Get list of files that failed to load with error messages.

        Returns:
            List of tuples (file_path, error_message)
        """
        return self.failed_files.copy()

    def clear(self) -> None:
        """Clear loaded records and failed files lists."""
        self.loaded_records = []
        self.failed_files = []
