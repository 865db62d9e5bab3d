"""
DICOM Utility Functions

This module provides helper functions for reading the DICOM fields the volume
engine consumes:
- Pixel spacing and slice thickness
- Rescale slope/intercept
- Series key and instance number
- Patient name and ID for the info summary

Inputs:
    - pydicom.Dataset objects

Outputs:
    - Plain Python values (floats, ints, strings) or None when unavailable

Requirements:
    - pydicom library
"""

from typing import Optional, Tuple
from pydicom.dataset import Dataset


def _first_value(value):
    """First element of a multi-valued element, or the value itself."""
    if isinstance(value, (list, tuple)):
        return value[0] if value else None
    try:
        from pydicom.multival import MultiValue
        if isinstance(value, MultiValue):
            return value[0] if len(value) else None
    except ImportError:
        pass
    return value


def get_pixel_spacing(dataset: Dataset) -> Optional[Tuple[float, float]]:
    """
    Get pixel spacing from DICOM dataset.
    Checks sources in priority order:
    1. Pixel Spacing (0028,0030) - primary
    2. Imager Pixel Spacing (0018,1164) - fallback

    Args:
        dataset: pydicom Dataset

    Returns:
        Tuple of (row_spacing, column_spacing) in mm, or None if not available
    """
    for keyword in ('PixelSpacing', 'ImagerPixelSpacing'):
        try:
            spacing = getattr(dataset, keyword, None)
            if spacing and len(spacing) >= 2:
                row_spacing = float(spacing[0])
                col_spacing = float(spacing[1])
                if row_spacing > 0 and col_spacing > 0:
                    return (row_spacing, col_spacing)
        except (TypeError, ValueError):
            continue
    return None


def get_slice_thickness(dataset: Dataset) -> Optional[float]:
    """
    Get slice thickness from DICOM dataset.

    Args:
        dataset: pydicom Dataset

    Returns:
        Slice thickness in mm, or None if not available or not positive
    """
    try:
        if hasattr(dataset, 'SliceThickness'):
            thickness = float(_first_value(dataset.SliceThickness))
            if thickness > 0:
                return thickness
    except (TypeError, ValueError):
        pass
    return None


def get_rescale_parameters(dataset: Dataset) -> Tuple[float, float]:
    """
    Get rescale slope and intercept.

    Args:
        dataset: pydicom Dataset

    Returns:
        (rescale_slope, rescale_intercept); (1.0, 0.0) when the tags are absent or invalid
    """
    slope = 1.0
    intercept = 0.0
    try:
        if hasattr(dataset, 'RescaleSlope'):
            slope = float(_first_value(dataset.RescaleSlope))
        if hasattr(dataset, 'RescaleIntercept'):
            intercept = float(_first_value(dataset.RescaleIntercept))
    except (TypeError, ValueError) as e:
        print(f"Error extracting rescale parameters: {e}")
        return 1.0, 0.0
    if slope == 0.0:
        slope = 1.0
    return slope, intercept


def get_series_key(dataset: Dataset) -> Optional[str]:
    """SeriesInstanceUID as a string, or None if missing or blank."""
    uid = getattr(dataset, 'SeriesInstanceUID', None)
    if uid is None:
        return None
    uid = str(uid).strip()
    return uid or None


def get_instance_number(dataset: Dataset, default: int = 0) -> int:
    """InstanceNumber as an int, or default if missing or not numeric."""
    try:
        value = _first_value(getattr(dataset, 'InstanceNumber', None))
        if value is None or str(value).strip() == "":
            return default
        return int(float(value))
    except (TypeError, ValueError):
        return default


def get_patient_info(dataset: Dataset) -> Tuple[Optional[str], Optional[str]]:
    """
    Get patient name and ID.

    Args:
        dataset: pydicom Dataset

    Returns:
        (patient_name, patient_id), each None if missing or blank
    """
    name = getattr(dataset, 'PatientName', None)
    patient_id = getattr(dataset, 'PatientID', None)
    name = str(name).strip() if name is not None else ""
    patient_id = str(patient_id).strip() if patient_id is not None else ""
    return (name or None), (patient_id or None)
