"""
Palette extraction from pixel buffers.

This module ties pixel sampling to MMCQ and formats colors for API
responses. It is synchronous and does no I/O.
"""
from typing import Any, Dict, List, Optional

import numpy as np
from loguru import logger

from chromacut.config import config
from .mmcq import Color, quantize
from .sampling import sample_pixels
from .utils import rgb_to_hex

DOMINANT_PALETTE_SIZE = 5


def get_palette(
    rgba: np.ndarray,
    color_count: Optional[int] = None,
    quality: Optional[int] = None,
    ignore_white: Optional[bool] = None
) -> Optional[List[Color]]:
    """
    Use the median cut algorithm to cluster similar colors.

    Args:
        rgba: RGBA (or RGB) pixel buffer
        color_count: Number of colors to extract (2-256)
        quality: 1 is highest quality; higher values sample fewer pixels
        ignore_white: If true, near-white pixels are ignored

    Returns:
        Colors as (r, g, b) tuples, most dominant first, or None when no
        palette is defined (no usable pixels or color_count out of range)
    """
    if color_count is None:
        color_count = config.DEFAULT_COLOR_COUNT
    if quality is None:
        quality = config.DEFAULT_QUALITY
    if ignore_white is None:
        ignore_white = config.DEFAULT_IGNORE_WHITE

    if not config.validate_color_count(color_count):
        logger.info(f"color_count={color_count} outside "
                    f"[{config.MIN_COLOR_COUNT}, {config.MAX_COLOR_COUNT}], no palette")
        return None

    pixels = sample_pixels(rgba, quality=quality, ignore_white=ignore_white)
    palette = quantize(pixels, color_count)
    if palette is None:
        logger.info(f"No palette for {len(pixels)} samples with color_count={color_count}")
    return palette


def get_color(
    rgba: np.ndarray,
    quality: Optional[int] = None,
    ignore_white: Optional[bool] = None
) -> Optional[Color]:
    """Dominant color: the first entry of a five-color palette."""
    palette = get_palette(rgba, DOMINANT_PALETTE_SIZE, quality, ignore_white)
    return palette[0] if palette else None


def color_to_result(color: Color) -> Dict[str, Any]:
    """Format a color as {"rgb": {"r", "g", "b"}, "hex"}."""
    r, g, b = (int(c) for c in color)
    return {
        "rgb": {"r": r, "g": g, "b": b},
        "hex": rgb_to_hex((r, g, b))
    }
