"""
MPR Extractor

This module extracts 2D cross-sections from an assembled volume along the three
principal axes (multi-planar reconstruction).

    Axial    (fix Z): width x height plane,  scale_y = spacing_y / spacing_x
    Coronal  (fix Y): width x depth plane,   scale_y = thickness / spacing_x
    Sagittal (fix X): height x depth plane,  scale_y = thickness / spacing_y

Inputs:
    - Volume, axis name, slice index along that axis

Outputs:
    - Plane (int16 samples, shape (height, width)) with its scale_y ratio

Requirements:
    - numpy for array slicing
    - core.volume_types, core.mpr_errors
"""

import numpy as np

from core.volume_types import Volume, Plane, AXIAL, CORONAL, SAGITTAL, AXES
from core.mpr_errors import IndexOutOfRangeError, CorruptVolumeError


def get_axis_extent(volume: Volume, axis: str) -> int:
    """
    Number of slices available along an axis.

    Args:
        volume: Assembled volume
        axis: AXIAL, CORONAL or SAGITTAL

    Returns:
        depth for axial, height for coronal, width for sagittal
    """
    return volume.extent(axis)


def get_scale_y(volume: Volume, axis: str) -> float:
    """Physical row height over column width for the plane of the given axis."""
    if axis == AXIAL:
        return volume.spacing_y / volume.spacing_x
    if axis == CORONAL:
        return volume.spacing_thickness / volume.spacing_x
    if axis == SAGITTAL:
        return volume.spacing_thickness / volume.spacing_y
    raise ValueError(f"Unknown axis: {axis}")


def extract_plane(volume: Volume, axis: str, index: int) -> Plane:
    """
    Extract the plane at a given index along an axis.

    The returned samples are a copy; the volume is never modified.

    Args:
        volume: Assembled volume
        axis: AXIAL, CORONAL or SAGITTAL
        index: Slice index in [0, extent) for the axis

    Returns:
        Plane with samples shaped (plane_height, plane_width)

    Raises:
        ValueError: If axis is not one of AXES
        IndexOutOfRangeError: If index is outside the axis extent
        CorruptVolumeError: If the voxel storage does not match the volume size
    """
    if axis not in AXES:
        raise ValueError(f"Unknown axis: {axis}")

    extent = volume.extent(axis)
    index = int(index)
    if index < 0 or index >= extent:
        raise IndexOutOfRangeError(axis, index, extent)

    if not volume.is_consistent():
        raise CorruptVolumeError(
            f"Volume holds {volume.voxels.size} voxels, expected "
            f"{volume.width}x{volume.height}x{volume.depth} = {volume.voxel_count}"
        )

    grid = volume.as_array()  # (depth, height, width)
    scale_y = get_scale_y(volume, axis)

    if axis == AXIAL:
        # Native storage order: one contiguous slice
        samples = np.array(grid[index], copy=True)
        return Plane(volume.width, volume.height, samples, scale_y)

    if axis == CORONAL:
        # One X-row per slice; output row z is the row at fixed Y of slice z
        samples = np.array(grid[:, index, :], copy=True)
        return Plane(volume.width, volume.depth, samples, scale_y)

    # Sagittal: one voxel per (z, y); output row z runs along Y
    samples = np.array(grid[:, :, index], copy=True)
    return Plane(volume.height, volume.depth, samples, scale_y)
