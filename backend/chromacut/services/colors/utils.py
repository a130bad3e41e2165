"""
Color formatting helpers.
"""
import math
import re
from typing import Optional, Sequence, Tuple

HEX_RE = re.compile(r"#?([0-9a-f]{2})([0-9a-f]{2})([0-9a-f]{2})", re.IGNORECASE)


def _channel(value: float) -> int:
    # round half up, then clamp to a byte
    return max(0, min(255, int(math.floor(float(value) + 0.5))))


def rgb_to_hex(rgb: Sequence[float]) -> str:
    """Convert an (r, g, b) triple to a lowercase '#rrggbb' string."""
    r, g, b = (_channel(v) for v in rgb[:3])
    return f"#{r:02x}{g:02x}{b:02x}"


def hex_to_rgb(hex_color: str) -> Optional[Tuple[int, int, int]]:
    """Parse '#rrggbb' or 'rrggbb' (any case); None if malformed."""
    match = HEX_RE.fullmatch(hex_color) if isinstance(hex_color, str) else None
    if match is None:
        return None
    return tuple(int(part, 16) for part in match.groups())
