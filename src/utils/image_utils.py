"""
Image Utility Functions

This module converts display images produced by the MPR engine into the
formats renderers consume.

Inputs:
    - DisplayImage objects (uint8 grayscale pixels)

Outputs:
    - PIL Images
    - Interleaved RGB arrays
    - Qt QImages

Requirements:
    - PIL/Pillow for image handling
    - numpy for array operations
    - PySide6 for QImage (imported on first use)
"""

import numpy as np
from PIL import Image

from core.volume_types import DisplayImage


def display_image_to_pil(image: DisplayImage) -> Image.Image:
    """
    Convert a display image to a grayscale ("L") PIL Image.

    Args:
        image: DisplayImage

    Returns:
        PIL Image of size (image.width, image.height)
    """
    return Image.fromarray(np.ascontiguousarray(image.pixels, dtype=np.uint8))


def display_image_to_rgb(image: DisplayImage) -> np.ndarray:
    """
    Expand a display image to an interleaved RGB array (gray value in all three channels).

    Returns:
        uint8 array of shape (height, width, 3)
    """
    gray = np.asarray(image.pixels, dtype=np.uint8)
    return np.repeat(gray[:, :, np.newaxis], 3, axis=2)


def display_image_to_qimage(image: DisplayImage):
    """
    Convert a display image to a QImage for a Qt renderer.

    The pixel data is deep-copied, so the QImage does not reference the numpy buffer.

    Returns:
        QImage in Format_Grayscale8
    """
    from PySide6.QtGui import QImage

    pixels = np.ascontiguousarray(image.pixels, dtype=np.uint8)
    height, width = pixels.shape
    qimage = QImage(pixels.tobytes(), width, height, pixels.strides[0], QImage.Format.Format_Grayscale8)
    return qimage.copy()
