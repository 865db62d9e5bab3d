"""
Display Resampler

This module converts a windowed plane into a display image with the physical
aspect ratio restored (rows stretched by scale_y) and both sides bounded by a
maximum display footprint. Resampling uses Lanczos filtering so demagnified
planes do not alias.

Inputs:
    - GrayscaleImage, scale_y ratio from extraction, maximum display dimension
    - Optional normalized crosshair coordinates

Outputs:
    - DisplayImage (crosshair coordinates carried through unchanged)

Requirements:
    - PIL/Pillow for resampling
    - numpy for array conversion
"""

from typing import Optional, Tuple
import numpy as np
from PIL import Image

from core.volume_types import GrayscaleImage, DisplayImage


DEFAULT_MAX_DISPLAY_DIM = 800


def compute_display_size(width: int, height: int, scale_y: float,
                         max_dim: int = DEFAULT_MAX_DISPLAY_DIM) -> Tuple[int, int]:
    """
    Compute the aspect-corrected, bounded display size.

    The height is first stretched by scale_y. If either side then exceeds
    max_dim, both are shrunk by the same factor so the larger one equals
    max_dim. Both sides are at least 1.

    Args:
        width: Plane width in samples
        height: Plane height in samples
        scale_y: Physical row height relative to column width
        max_dim: Maximum display size per side

    Returns:
        (display_width, display_height)
    """
    if max_dim < 1:
        raise ValueError(f"max_dim must be at least 1, got {max_dim}")

    final_w = max(1, int(width))
    final_h = max(1, int(round(height * scale_y)))

    if final_w > max_dim or final_h > max_dim:
        shrink = min(max_dim / final_w, max_dim / final_h)
        final_w = int(round(final_w * shrink))
        final_h = int(round(final_h * shrink))

    return max(1, final_w), max(1, final_h)


def resample_for_display(
    image: GrayscaleImage,
    scale_y: float,
    max_dim: int = DEFAULT_MAX_DISPLAY_DIM,
    cross_norm: Optional[Tuple[float, float]] = None,
    axis: Optional[str] = None,
) -> DisplayImage:
    """
    Aspect-correct and bound a grayscale image for display.

    Args:
        image: Windowed grayscale image
        scale_y: Physical row height relative to column width
        max_dim: Maximum display size per side
        cross_norm: Optional (norm_x, norm_y) crosshair position, passed through as-is
        axis: Optional axis name recorded on the result

    Returns:
        DisplayImage with uint8 pixels shaped (display_height, display_width)
    """
    target_w, target_h = compute_display_size(image.width, image.height, scale_y, max_dim)

    pixels = np.ascontiguousarray(image.pixels, dtype=np.uint8)
    if (target_w, target_h) != (image.width, image.height) and pixels.size > 0:
        pil_image = Image.fromarray(pixels)
        pil_image = pil_image.resize((target_w, target_h), Image.Resampling.LANCZOS)
        pixels = np.asarray(pil_image, dtype=np.uint8)

    cross_x, cross_y = cross_norm if cross_norm is not None else (None, None)
    return DisplayImage(target_w, target_h, pixels, cross_x, cross_y, axis)
