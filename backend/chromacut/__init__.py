"""
Chromacut

Dominant color and palette extraction for images using modified median cut
quantization (MMCQ), served over FastAPI.
"""

__version__ = "1.0.0"
