"""
Crosshair Mapper

Converts the current slice indices of the two other axes into normalized
[0, 1] coordinates on a plane, so each view can draw where the other two
slices intersect it.

    Axial plane    (W x H): crosshair at (x, y)
    Coronal plane  (W x D): crosshair at (x, z)
    Sagittal plane (H x D): crosshair at (y, z)

Requirements:
    - core.volume_types for axis names
"""

from typing import Tuple

from core.volume_types import AXIAL, CORONAL, SAGITTAL


def _normalize(index: int, size: int) -> float:
    # Single-sample axis has no range to divide by
    if size <= 1:
        return 0.0
    value = index / (size - 1)
    return min(1.0, max(0.0, value))


def map_crosshair(other_index_1: int, other_index_2: int,
                  plane_width: int, plane_height: int) -> Tuple[float, float]:
    """
    Map the other-axis indices to normalized plane coordinates.

    Args:
        other_index_1: Index along the plane's horizontal axis
        other_index_2: Index along the plane's vertical axis
        plane_width: Extracted plane width (before resampling)
        plane_height: Extracted plane height (before resampling)

    Returns:
        (norm_x, norm_y), each in [0, 1]
    """
    return _normalize(other_index_1, plane_width), _normalize(other_index_2, plane_height)


def crosshair_indices(axis: str, x: int, y: int, z: int) -> Tuple[int, int]:
    """Indices of the two other axes, in (horizontal, vertical) order for the plane of axis."""
    if axis == AXIAL:
        return x, y
    if axis == CORONAL:
        return x, z
    if axis == SAGITTAL:
        return y, z
    raise ValueError(f"Unknown axis: {axis}")
