"""
Volume Data Types

This module defines the value types passed between the stages of the
multi-planar reconstruction pipeline: decoded slice records, the assembled
voxel volume, window parameters, extracted planes and display images.

Inputs:
    - Decoded slice fields (series key, instance number, size, int16 samples, spacing)

Outputs:
    - SliceRecord, Volume, WindowParams, Plane, GrayscaleImage, DisplayImage objects

Requirements:
    - numpy for sample storage
    - typing for type hints
"""

from typing import Optional, Sequence, Tuple, Union
import numpy as np


AXIAL = "axial"
CORONAL = "coronal"
SAGITTAL = "sagittal"

# Display order used throughout the viewer (Z, Y, X planes)
AXES: Tuple[str, str, str] = (AXIAL, CORONAL, SAGITTAL)


def _readonly_int16(samples: Union[np.ndarray, Sequence[int]]) -> np.ndarray:
    """Return a flat, read-only int16 copy of the given samples."""
    array = np.array(samples, dtype=np.int16).reshape(-1)
    array.flags.writeable = False
    return array


class SliceRecord:
    """
    One decoded 2D image, tagged with the keys used to build a volume.

    Samples are stored as a flat int16 array (row-major, length width*height
    for a well-formed record). The record is immutable once created.
    """

    def __init__(
        self,
        series_key: Optional[str],
        order_key: int,
        width: int,
        height: int,
        samples: Union[np.ndarray, Sequence[int]],
        spacing_x: Optional[float] = None,
        spacing_y: Optional[float] = None,
        spacing_thickness: Optional[float] = None,
        patient_name: Optional[str] = None,
        patient_id: Optional[str] = None,
        source_path: Optional[str] = None,
    ):
        """
        Initialize a slice record.

        Args:
            series_key: Series identifier (e.g. SeriesInstanceUID), None if unavailable
            order_key: Ordering key within the series (e.g. InstanceNumber)
            width: Number of columns
            height: Number of rows
            samples: Row-major signed 16-bit samples
            spacing_x: Column spacing in mm, None if unavailable
            spacing_y: Row spacing in mm, None if unavailable
            spacing_thickness: Slice thickness in mm, None if unavailable
            patient_name: Optional patient name for the info summary
            patient_id: Optional patient ID for the info summary
            source_path: Optional path of the file the record was decoded from
        """
        self.series_key = series_key
        self.order_key = int(order_key)
        self.width = int(width)
        self.height = int(height)
        self.samples = _readonly_int16(samples)
        self.spacing_x = spacing_x
        self.spacing_y = spacing_y
        self.spacing_thickness = spacing_thickness
        self.patient_name = patient_name
        self.patient_id = patient_id
        self.source_path = source_path

    def has_consistent_size(self) -> bool:
        """True if the sample count matches width*height."""
        return self.samples.size == self.width * self.height

    def __repr__(self) -> str:
        return (f"SliceRecord(series_key={self.series_key!r}, order_key={self.order_key}, "
                f"size={self.width}x{self.height})")


class Volume:
    """
    Assembled 3D voxel grid.

    Voxels are a flat read-only int16 array of length width*height*depth:
    row-major within each slice, slices concatenated in ascending order key.
    A Volume is never mutated after assembly; a new load replaces it wholesale.
    """

    def __init__(
        self,
        width: int,
        height: int,
        depth: int,
        spacing_x: float,
        spacing_y: float,
        spacing_thickness: float,
        voxels: Union[np.ndarray, Sequence[int]],
        series_key: Optional[str] = None,
        patient_name: Optional[str] = None,
        patient_id: Optional[str] = None,
    ):
        self.width = int(width)
        self.height = int(height)
        self.depth = int(depth)
        self.spacing_x = float(spacing_x)
        self.spacing_y = float(spacing_y)
        self.spacing_thickness = float(spacing_thickness)
        self.voxels = _readonly_int16(voxels)
        self.series_key = series_key
        self.patient_name = patient_name
        self.patient_id = patient_id

    @property
    def voxel_count(self) -> int:
        """Expected number of voxels (width * height * depth)."""
        return self.width * self.height * self.depth

    def is_consistent(self) -> bool:
        """True if the backing storage holds exactly width*height*depth voxels."""
        return self.voxels.size == self.voxel_count

    def extent(self, axis: str) -> int:
        """
        Number of valid slice indices along the axis orthogonal to a plane.

        Args:
            axis: AXIAL, CORONAL or SAGITTAL

        Returns:
            depth for axial, height for coronal, width for sagittal
        """
        if axis == AXIAL:
            return self.depth
        if axis == CORONAL:
            return self.height
        if axis == SAGITTAL:
            return self.width
        raise ValueError(f"Unknown axis: {axis}")

    def as_array(self) -> np.ndarray:
        """Read-only (depth, height, width) view of the voxels."""
        return self.voxels.reshape(self.depth, self.height, self.width)

    def __repr__(self) -> str:
        return (f"Volume({self.width}x{self.height}x{self.depth}, "
                f"spacing=({self.spacing_x}, {self.spacing_y}, {self.spacing_thickness}))")


class WindowParams:
    """Window level/width pair. Width is clamped to 1 when used."""

    def __init__(self, level: int, width: int):
        self.level = int(level)
        self.width = int(width)

    @property
    def clamped_width(self) -> int:
        return max(1, self.width)

    def __eq__(self, other) -> bool:
        if not isinstance(other, WindowParams):
            return NotImplemented
        return self.level == other.level and self.width == other.width

    def __repr__(self) -> str:
        return f"WindowParams(level={self.level}, width={self.width})"


class Plane:
    """
    2D cross-section extracted from a volume.

    samples has shape (height, width). scale_y is the physical height of one
    row relative to the width of one column, used for display aspect correction.
    """

    def __init__(self, width: int, height: int, samples: np.ndarray, scale_y: float = 1.0):
        self.width = int(width)
        self.height = int(height)
        self.samples = samples
        self.scale_y = float(scale_y)

    def value_at(self, x: int, y: int) -> int:
        """Sample at column x, row y."""
        return int(self.samples[y, x])


class GrayscaleImage:
    """Windowed 8-bit image; pixels has shape (height, width), dtype uint8."""

    def __init__(self, width: int, height: int, pixels: np.ndarray):
        self.width = int(width)
        self.height = int(height)
        self.pixels = pixels


class DisplayImage:
    """
    Final per-plane artifact handed to the renderer.

    cross_norm_x / cross_norm_y are normalized [0, 1] crosshair coordinates,
    or None when no crosshair should be drawn.
    """

    def __init__(
        self,
        width: int,
        height: int,
        pixels: np.ndarray,
        cross_norm_x: Optional[float] = None,
        cross_norm_y: Optional[float] = None,
        axis: Optional[str] = None,
    ):
        self.width = int(width)
        self.height = int(height)
        self.pixels = pixels
        self.cross_norm_x = cross_norm_x
        self.cross_norm_y = cross_norm_y
        self.axis = axis

    def has_crosshair(self) -> bool:
        return self.cross_norm_x is not None and self.cross_norm_y is not None

    def __repr__(self) -> str:
        return (f"DisplayImage(axis={self.axis!r}, size={self.width}x{self.height}, "
                f"cross=({self.cross_norm_x}, {self.cross_norm_y}))")
