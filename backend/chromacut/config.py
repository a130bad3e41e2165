"""
Chromacut Configuration
Manages environment variables and defaults for the palette service.
"""
import os
from typing import Optional

from dotenv import load_dotenv

load_dotenv()


class Config:
    """Configuration class for Chromacut services."""

    # Logging
    LOG_LEVEL: str = os.environ.get("CHROMACUT_LOG_LEVEL", "INFO")

    # Extraction defaults
    DEFAULT_QUALITY: int = int(os.environ.get("CHROMACUT_DEFAULT_QUALITY", "10"))
    DEFAULT_IGNORE_WHITE: bool = bool(int(os.environ.get("CHROMACUT_DEFAULT_IGNORE_WHITE", "1")))
    DEFAULT_COLOR_COUNT: int = int(os.environ.get("CHROMACUT_DEFAULT_COLOR_COUNT", "5"))

    # Image loading
    HTTP_TIMEOUT: float = float(os.environ.get("CHROMACUT_HTTP_TIMEOUT", "10"))
    MAX_FILE_MB: int = int(os.environ.get("CHROMACUT_MAX_FILE_MB", "10"))
    ASSET_DIR: Optional[str] = os.environ.get("CHROMACUT_ASSET_DIR")
    CONTENT_ROOT: Optional[str] = os.environ.get("CHROMACUT_CONTENT_ROOT")

    # CORS settings
    ALLOWED_ORIGINS: str = os.environ.get("CHROMACUT_ALLOWED_ORIGINS", "")

    # Quantization limits (fixed by the 5-bit histogram)
    MIN_COLOR_COUNT: int = 2
    MAX_COLOR_COUNT: int = 256
    MIN_QUALITY: int = 1
    MAX_QUALITY: int = 10

    @property
    def max_file_bytes(self) -> int:
        return self.MAX_FILE_MB * 1024 * 1024

    @property
    def allowed_origins(self) -> list:
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",") if origin.strip()]

    @classmethod
    def validate_quality(cls, quality: int) -> bool:
        """Validate sampling quality parameter."""
        return cls.MIN_QUALITY <= quality <= cls.MAX_QUALITY

    @classmethod
    def validate_color_count(cls, color_count: int) -> bool:
        """Validate requested palette size."""
        return cls.MIN_COLOR_COUNT <= color_count <= cls.MAX_COLOR_COUNT


# Global config instance
config = Config()
