"""
MPR Session

This module holds the single live volume of the viewer together with its
navigation state (one slice index per axis), the current window level/width
and the plane shown in the main view. It runs the per-event refresh pipeline
(extract -> window -> resample -> crosshair) for the three planes.

A new volume replaces the current one only after it has been fully assembled:
a failed load leaves the previous volume, indices and window untouched.

Inputs:
    - Decoded slice records or a folder path to decode
    - Navigation events (slice index changes, wheel steps, reset)
    - Window level/width changes

Outputs:
    - DisplayImage per plane with crosshair coordinates
    - Study info summary

Requirements:
    - core engine modules (assembler, extractor, window/level, resampler, crosshair)
    - core.dicom_loader for folder decoding
    - utils.config_manager for defaults
"""

from typing import Callable, Dict, List, Optional, Sequence, Tuple

from core.volume_types import SliceRecord, Volume, WindowParams, DisplayImage, AXIAL, CORONAL, SAGITTAL, AXES
from core.mpr_errors import MPRError, EmptyInputError
from core.volume_assembler import load_volume
from core.mpr_extractor import extract_plane
from core.dicom_window_level import apply_window, default_window_params
from core.display_resampler import resample_for_display, DEFAULT_MAX_DISPLAY_DIM
from core.crosshair_mapper import map_crosshair, crosshair_indices
from core.dicom_loader import DICOMLoader, DEFAULT_FILE_PATTERN
from utils.debug_log import debug_log


class MPRSession:
    """
    Owns the current volume and navigation state for the three MPR views.

    Handles:
    - Replace-only-on-success volume loading
    - Clamped slice navigation (sliders and mouse wheel)
    - Window level/width state and reset to defaults
    - Main view swapping
    - Rendering of one or all three planes
    """

    def __init__(self, config_manager=None, loader: Optional[DICOMLoader] = None):
        """
        Initialize the session.

        Args:
            config_manager: Optional ConfigManager supplying defaults and persisting the last path
            loader: Optional DICOMLoader used by load_directory (a new one is created if omitted)
        """
        self.config_manager = config_manager
        self.loader = loader if loader is not None else DICOMLoader()

        self.volume: Optional[Volume] = None
        self.slice_indices: Dict[str, int] = {AXIAL: 0, CORONAL: 0, SAGITTAL: 0}
        self.window: WindowParams = default_window_params(config_manager)
        if config_manager is not None:
            self.main_view: str = config_manager.get_main_view()
        else:
            self.main_view = AXIAL

    @property
    def has_volume(self) -> bool:
        return self.volume is not None

    @property
    def max_display_dim(self) -> int:
        if self.config_manager is not None:
            return self.config_manager.get_max_display_dim()
        return DEFAULT_MAX_DISPLAY_DIM

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load_records(self, records: Sequence[SliceRecord]) -> Volume:
        """
        Assemble a new volume from decoded records and make it current.

        The current volume is replaced only if assembly succeeds. On success the
        slice indices are centered and the window is reset to the defaults.

        Args:
            records: Decoded slice records (may span several series)

        Returns:
            The new current volume

        Raises:
            EmptyInputError, NoValidSlicesError: Nothing loadable; previous state kept
        """
        volume = load_volume(records)

        self.volume = volume
        self._center_indices()
        self.window = default_window_params(self.config_manager)
        debug_log(
            "mpr_session.py:load_records",
            "Volume replaced",
            {"size": [volume.width, volume.height, volume.depth], "series_key": volume.series_key},
        )
        return volume

    def load_directory(self, directory_path: str,
                       progress_callback: Optional[Callable[[int, int, str], None]] = None) -> Volume:
        """
        Decode a folder and load its dominant series.

        Args:
            directory_path: Folder containing DICOM files
            progress_callback: Optional (current, total, filename) progress callback

        Returns:
            The new current volume

        Raises:
            EmptyInputError: No decodable files in the folder; previous state kept
            NoValidSlicesError: The dominant series has no slice of canonical size
        """
        pattern = DEFAULT_FILE_PATTERN
        recursive = False
        if self.config_manager is not None:
            pattern = self.config_manager.get_load_file_pattern()
            recursive = self.config_manager.get_load_recursive()

        records = self.loader.load_directory(directory_path, pattern=pattern, recursive=recursive,
                                             progress_callback=progress_callback)
        failed = self.loader.get_failed_files()
        if failed:
            print(f"[LOADER] {len(failed)} file(s) could not be loaded from {directory_path}")
        if not records:
            raise EmptyInputError(f"No decodable DICOM files in {directory_path}")

        volume = self.load_records(records)
        if self.config_manager is not None:
            self.config_manager.set_last_path(str(directory_path))
        return volume

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def _center_indices(self) -> None:
        for axis in AXES:
            self.slice_indices[axis] = self.volume.extent(axis) // 2

    def _clamp_index(self, axis: str, index: int) -> int:
        extent = self.volume.extent(axis)
        return min(max(int(index), 0), extent - 1)

    def get_slice_range(self, axis: str) -> Tuple[int, int]:
        """(min, max) slice index for an axis, as used for slider ranges."""
        if self.volume is None:
            return 0, 0
        return 0, self.volume.extent(axis) - 1

    def get_slice_index(self, axis: str) -> int:
        if axis not in AXES:
            raise ValueError(f"Unknown axis: {axis}")
        return self.slice_indices[axis]

    def set_slice_index(self, axis: str, index: int) -> int:
        """
        Set the slice index of an axis, clamped to its valid range.

        Returns:
            The index actually stored (0 when no volume is loaded)
        """
        if axis not in AXES:
            raise ValueError(f"Unknown axis: {axis}")
        if self.volume is None:
            return self.slice_indices[axis]
        self.slice_indices[axis] = self._clamp_index(axis, index)
        return self.slice_indices[axis]

    def step_slice(self, axis: str, direction: int) -> int:
        """
        Move one slice forward (direction > 0) or back (direction < 0), as a wheel tick does.

        Returns:
            The new index for the axis
        """
        step = 1 if direction > 0 else -1
        return self.set_slice_index(axis, self.get_slice_index(axis) + step)

    def set_window(self, level: int, width: int) -> WindowParams:
        """Set window level/width; width is clamped to at least 1."""
        self.window = WindowParams(level, max(1, int(width)))
        return self.window

    def reset(self) -> bool:
        """
        Re-center all slice indices and restore the default window.

        Returns:
            False (and does nothing) when no volume is loaded, True otherwise
        """
        if self.volume is None:
            return False
        self._center_indices()
        self.window = default_window_params(self.config_manager)
        return True

    def swap_main_view(self, axis: str) -> Tuple[str, str, str]:
        """
        Show the given plane in the main view.

        Returns:
            (main, sub_view_1, sub_view_2); sub views keep axial, coronal, sagittal order
        """
        if axis not in AXES:
            raise ValueError(f"Unknown axis: {axis}")
        self.main_view = axis
        if self.config_manager is not None:
            self.config_manager.set_main_view(axis)
        return self.get_layout()

    def get_layout(self) -> Tuple[str, str, str]:
        subs = [axis for axis in AXES if axis != self.main_view]
        return self.main_view, subs[0], subs[1]

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def render_plane(self, axis: str) -> DisplayImage:
        """
        Run extract -> window -> resample -> crosshair for one plane.

        Args:
            axis: AXIAL, CORONAL or SAGITTAL

        Returns:
            DisplayImage for the plane at the current index

        Raises:
            MPRError: If no volume is loaded
        """
        if self.volume is None:
            raise MPRError("No volume loaded")

        plane = extract_plane(self.volume, axis, self.slice_indices[axis])
        gray = apply_window(plane, self.window.level, self.window.width)
        other_1, other_2 = crosshair_indices(
            axis,
            self.slice_indices[SAGITTAL],
            self.slice_indices[CORONAL],
            self.slice_indices[AXIAL],
        )
        cross = map_crosshair(other_1, other_2, plane.width, plane.height)
        return resample_for_display(gray, plane.scale_y, self.max_display_dim, cross, axis)

    def refresh(self) -> Dict[str, DisplayImage]:
        """
        Render all three planes from the same indices and window.

        Returns:
            Dictionary mapping axis name to its DisplayImage
        """
        return {axis: self.render_plane(axis) for axis in AXES}

    # ------------------------------------------------------------------
    # Info
    # ------------------------------------------------------------------

    def get_info(self) -> Optional[Dict[str, object]]:
        """Patient and geometry summary of the current volume, or None without one."""
        if self.volume is None:
            return None
        return {
            "patient_name": self.volume.patient_name or "Unknown",
            "patient_id": self.volume.patient_id or "Unknown",
            "width": self.volume.width,
            "height": self.volume.height,
            "slices": self.volume.depth,
            "thickness": self.volume.spacing_thickness,
        }

    def get_info_text(self) -> str:
        """Multi-line info text for the side panel ("No Data" without a volume)."""
        info = self.get_info()
        if info is None:
            return "No Data"
        lines: List[str] = [
            f"Name: {info['patient_name']}",
            f"ID: {info['patient_id']}",
            f"Size: {info['width']} x {info['height']}",
            f"Slices: {info['slices']}",
            f"Thickness: {info['thickness']:g} mm",
        ]
        return "\n".join(lines)
