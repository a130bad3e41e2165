"""
Pixel sampling for palette extraction.

Turns an RGBA buffer into the (N, 3) color samples fed to MMCQ.
"""
import numpy as np
from loguru import logger

MIN_ALPHA = 125
WHITE_THRESHOLD = 250


def sample_pixels(rgba: np.ndarray, quality: int = 10, ignore_white: bool = True) -> np.ndarray:
    """
    Subsample and filter pixels for quantization.

    Every `quality`-th pixel in row-major order is visited. Visited pixels
    with alpha below 125 are dropped, and with `ignore_white` so are pixels
    whose three channels all exceed 250.

    Args:
        rgba: Pixel buffer whose last axis holds RGBA (or RGB, treated as opaque)
        quality: Sampling stride; 1 visits every pixel
        ignore_white: Drop near-white pixels

    Returns:
        Filtered RGB samples (N, 3) uint8

    Raises:
        ValueError: If quality < 1 or the buffer has no color channels
    """
    if quality < 1:
        raise ValueError(f"quality must be >= 1, got {quality}")

    buffer = np.asarray(rgba)
    channels = buffer.shape[-1] if buffer.ndim else 0
    if channels not in (3, 4):
        raise ValueError(f"Expected RGB or RGBA pixels, got shape {buffer.shape}")

    candidates = buffer.reshape(-1, channels)[::quality].astype(np.int32)
    if channels == 3:
        keep = np.ones(len(candidates), dtype=bool)
    else:
        keep = candidates[:, 3] >= MIN_ALPHA

    if ignore_white:
        white = np.all(candidates[:, :3] > WHITE_THRESHOLD, axis=1)
        keep &= ~white

    samples = candidates[keep, :3].astype(np.uint8)
    logger.debug(
        f"Sampled {len(samples)}/{len(candidates)} candidates "
        f"(quality={quality}, ignore_white={ignore_white})"
    )
    return samples
