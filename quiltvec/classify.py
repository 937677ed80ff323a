"""Pixel classification into ink and light masks."""
from typing import Tuple

import numpy as np

from quiltvec.types import Mask, PixelBuffer

# Fixed classification thresholds
ALPHA_THRESHOLD = 30
INK_LUMINANCE_THRESHOLD = 170

# Rec. 709 luma weights
LUMA_R = 0.2126
LUMA_G = 0.7152
LUMA_B = 0.0722


def luminance(buffer: PixelBuffer) -> np.ndarray:
    """Per-pixel luminance of the RGB channels on the 0-255 scale."""
    rgb = buffer.rgb.astype(np.float64)
    # Summed in R, G, B order
    return LUMA_R * rgb[..., 0] + LUMA_G * rgb[..., 1] + LUMA_B * rgb[..., 2]


def visible_mask(buffer: PixelBuffer) -> Mask:
    """Pixels whose alpha exceeds the visibility threshold."""
    return buffer.alpha > ALPHA_THRESHOLD


def classify_pixels(buffer: PixelBuffer) -> Tuple[Mask, Mask]:
    """
    Split visible pixels into ink (dark) and light masks.

    A pixel is visible when ``alpha > 30``. Visible pixels with luminance
    below 170 are ink; every other visible pixel is light. Transparent
    pixels belong to neither mask.

    Args:
        buffer: RGBA pixel buffer

    Returns:
        Tuple of (ink, light) boolean masks (H, W)
    """
    visible = visible_mask(buffer)
    ink = visible & (luminance(buffer) < INK_LUMINANCE_THRESHOLD)
    light = visible & ~ink
    return ink, light
