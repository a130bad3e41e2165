"""
Chromacut Colors Module

Provides pixel sampling, median cut quantization and palette extraction for
images, plus RGB/hex formatting helpers.
"""
from .mmcq import ColorMap, VBox, VBoxCutError, build_color_map, quantize
from .extraction import get_color, get_palette
from .utils import hex_to_rgb, rgb_to_hex

__all__ = [
    'ColorMap',
    'VBox',
    'VBoxCutError',
    'build_color_map',
    'quantize',
    'get_color',
    'get_palette',
    'hex_to_rgb',
    'rgb_to_hex'
]
