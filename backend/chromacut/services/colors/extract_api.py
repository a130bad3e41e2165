"""
Color Extraction API Orchestrator

Asynchronous entry points for color extraction from image URIs. Loading,
sampling and quantization run in the worker thread pool; any failure along
the way resolves to None instead of raising.
"""
import time
from typing import Any, Callable, Dict, List, Optional

from fastapi.concurrency import run_in_threadpool

from chromacut.services.imaging import load_image
from chromacut.utils.ids import generate_request_id
from chromacut.utils.logging import get_logger
from chromacut.utils.metrics import get_metrics
from .extraction import color_to_result, get_color as extract_color, get_palette as extract_palette


def _run_pipeline(operation: str, image_uri: str, extract: Callable[[Any], Any]) -> Optional[Any]:
    """Load the image and apply `extract` to its pixels; None on any failure."""
    request_id = generate_request_id(operation)
    log = get_logger(request_id=request_id)
    metrics = get_metrics()
    metrics.increment_request_count(operation)
    start_time = time.time()

    try:
        rgba = load_image(image_uri)
        metrics.record_timing("load", (time.time() - start_time) * 1000)
        if rgba is None:
            metrics.increment_failure_count("ImageLoad")
            return None

        quantize_start = time.time()
        result = extract(rgba)
        metrics.record_timing("quantize", (time.time() - quantize_start) * 1000)
    except Exception as e:
        # Boundary policy: failures resolve to an absent result
        metrics.increment_failure_count(type(e).__name__)
        log.exception(f"{operation} extraction failed: {e}")
        return None

    if result is None:
        metrics.increment_no_result_count()
    log.info(f"{operation} extraction finished in {(time.time() - start_time) * 1000:.1f}ms")
    return result


def get_color_sync(
    image_uri: str,
    quality: Optional[int] = None,
    ignore_white: Optional[bool] = None
) -> Optional[Dict[str, Any]]:
    """Dominant color of the image at `image_uri` as a color result."""

    def extract(rgba):
        color = extract_color(rgba, quality=quality, ignore_white=ignore_white)
        return color_to_result(color) if color is not None else None

    return _run_pipeline("color", image_uri, extract)


def get_palette_sync(
    image_uri: str,
    color_count: Optional[int] = None,
    quality: Optional[int] = None,
    ignore_white: Optional[bool] = None
) -> Optional[List[Dict[str, Any]]]:
    """Palette of the image at `image_uri` as a list of color results."""

    def extract(rgba):
        palette = extract_palette(rgba, color_count=color_count, quality=quality,
                                  ignore_white=ignore_white)
        return [color_to_result(color) for color in palette] if palette is not None else None

    return _run_pipeline("palette", image_uri, extract)


async def get_color(
    image_uri: str,
    quality: Optional[int] = None,
    ignore_white: Optional[bool] = None
) -> Optional[Dict[str, Any]]:
    """
    Extract the dominant color from an image.

    Args:
        image_uri: http(s), file, content, asset or data URI, or a path
        quality: Sampling stride, 1 (best) to 10; None reads the configured default
        ignore_white: Skip near-white pixels; None reads the configured default

    Returns:
        {"rgb": {"r", "g", "b"}, "hex"} or None if extraction fails
    """
    return await run_in_threadpool(get_color_sync, image_uri, quality, ignore_white)


async def get_palette(
    image_uri: str,
    color_count: Optional[int] = None,
    quality: Optional[int] = None,
    ignore_white: Optional[bool] = None
) -> Optional[List[Dict[str, Any]]]:
    """
    Extract a color palette from an image.

    Returns:
        Color results ordered most dominant first, or None if extraction fails
    """
    return await run_in_threadpool(get_palette_sync, image_uri, color_count, quality, ignore_white)
