"""
Chromacut API Schemas
Pydantic models for color extraction responses.
"""
from typing import Dict

from pydantic import BaseModel, Field


class RGB(BaseModel):
    """8-bit RGB channels."""
    r: int = Field(..., ge=0, le=255)
    g: int = Field(..., ge=0, le=255)
    b: int = Field(..., ge=0, le=255)


class ColorResult(BaseModel):
    """A palette color in both RGB and hex form."""
    rgb: RGB = Field(..., description="Averaged color of one median-cut region")
    hex: str = Field(
        ...,
        pattern=r"^#[0-9a-f]{6}$",
        description="Lowercase hex color code in format #rrggbb"
    )


class HealthResponse(BaseModel):
    """Health check response."""
    ok: bool = Field(True, description="Service health status")
    version: str = Field(..., description="Service version")
    service: str = Field("chromacut", description="Service name")


class MetricsResponse(BaseModel):
    """In-process metrics summary."""
    uptime_seconds: float
    counters: Dict[str, int]
    timing_stats: Dict[str, Dict[str, float]]
