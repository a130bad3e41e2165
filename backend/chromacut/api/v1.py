"""
Chromacut v1 API Routes
Dominant color and palette extraction from image URIs.
"""
from typing import List, Optional

from fastapi import APIRouter, Query

from chromacut.config import config
from chromacut.schemas import ColorResult
from chromacut.services.colors.extract_api import get_color, get_palette

router = APIRouter(prefix="/v1", tags=["colors"])


@router.get("/color",
            response_model=Optional[ColorResult],
            summary="Dominant Color",
            description="Dominant color of an image, or null if it can't be extracted")
async def dominant_color(
    uri: str = Query(..., min_length=1, description="http(s), file, content, asset or data URI"),
    quality: int = Query(config.DEFAULT_QUALITY, ge=config.MIN_QUALITY, le=config.MAX_QUALITY,
                         description="1 is highest quality; higher is faster"),
    ignore_white: bool = Query(config.DEFAULT_IGNORE_WHITE, description="Skip near-white pixels")
):
    """
    Extract the dominant color from an image.

    The dominant color is the first entry of a five-color median-cut palette.
    Load or decode failures return null rather than an error status.
    """
    return await get_color(uri, quality, ignore_white)


@router.get("/palette",
            response_model=Optional[List[ColorResult]],
            summary="Color Palette",
            description="Median-cut palette of an image, or null if it can't be extracted")
async def color_palette(
    uri: str = Query(..., min_length=1, description="http(s), file, content, asset or data URI"),
    color_count: int = Query(config.DEFAULT_COLOR_COUNT,
                             description="Number of colors (2-256); other values return null"),
    quality: int = Query(config.DEFAULT_QUALITY, ge=config.MIN_QUALITY, le=config.MAX_QUALITY,
                         description="1 is highest quality; higher is faster"),
    ignore_white: bool = Query(config.DEFAULT_IGNORE_WHITE, description="Skip near-white pixels")
):
    """
    Extract a color palette from an image.

    Colors are ordered most dominant first; fewer than `color_count` colors
    may be returned for images with few distinct colors.
    """
    return await get_palette(uri, color_count, quality, ignore_white)
