"""
DICOM window/level handling.

This module maps signed 16-bit plane samples to 8-bit display intensities using
a linear, saturating window level/width transform:

    lower = level - width / 2
    v <= lower          -> 0
    v >= lower + width  -> 255
    otherwise           -> floor((v - lower) / width * 255)

Width is clamped to a minimum of 1. Level may be negative (e.g. Hounsfield units).

Inputs:
    - Pixel arrays or Planes, window level and width

Outputs:
    - Windowed pixel arrays (0-255 uint8), GrayscaleImage objects
    - Default window parameters from configuration

Requirements:
    - numpy
    - core.volume_types (Plane, GrayscaleImage, WindowParams)
"""

import numpy as np
from typing import Optional, Tuple

from core.volume_types import Plane, GrayscaleImage, WindowParams


DEFAULT_WINDOW_LEVEL = 40
DEFAULT_WINDOW_WIDTH = 400


def clamp_window_width(window_width: float) -> float:
    """Window width clamped to a minimum of 1."""
    return window_width if window_width >= 1 else 1


def window_bounds(window_level: float, window_width: float) -> Tuple[float, float]:
    """Return (lower, upper) raw values of the window after clamping the width."""
    width = clamp_window_width(window_width)
    lower = window_level - width / 2.0
    return lower, lower + width


def apply_window_level(
    pixel_array: np.ndarray,
    window_level: float,
    window_width: float,
) -> np.ndarray:
    """Apply window/level transformation to pixel array. Returns 0-255 uint8 of the same shape."""
    width = clamp_window_width(window_width)
    window_min, window_max = window_bounds(window_level, width)
    values = np.asarray(pixel_array, dtype=np.float64)
    scaled = np.floor((values - window_min) / width * 255.0)
    windowed = np.where(values <= window_min, 0.0, np.where(values >= window_max, 255.0, scaled))
    return np.clip(windowed, 0, 255).astype(np.uint8)


def apply_window(plane: Plane, window_level: float, window_width: float) -> GrayscaleImage:
    """
    Window a plane into an 8-bit grayscale image of the same size.

    Args:
        plane: Extracted plane (int16 samples)
        window_level: Window center in raw sample units
        window_width: Window width in raw sample units (values below 1 act as 1)

    Returns:
        GrayscaleImage with uint8 pixels shaped (height, width)
    """
    pixels = apply_window_level(plane.samples, window_level, window_width)
    return GrayscaleImage(plane.width, plane.height, pixels)


def apply_window_params(plane: Plane, params: WindowParams) -> GrayscaleImage:
    """apply_window() taking a WindowParams pair."""
    return apply_window(plane, params.level, params.width)


def default_window_params(config_manager: Optional[object] = None) -> WindowParams:
    """
    Default window for a freshly loaded volume.

    Args:
        config_manager: Optional ConfigManager; built-in defaults (40/400) are used without one

    Returns:
        WindowParams with the configured default level and width
    """
    if config_manager is None:
        return WindowParams(DEFAULT_WINDOW_LEVEL, DEFAULT_WINDOW_WIDTH)
    return WindowParams(
        config_manager.get_default_window_level(),
        config_manager.get_default_window_width(),
    )
