"""
Display colors for satellites, sensors and footprint regions.

Colorblind-safe base palette (Okabe-Ito); larger constellations get
generated colors spread by the golden angle in HSL space.
"""

import re
from typing import List, Optional, Tuple

SATELLITE_COLOR_PALETTE = [
    "#56B4E9",  # Sky Blue
    "#E69F00",  # Orange
    "#CC79A7",  # Rose/Pink
    "#009E73",  # Teal/Green
    "#F5C242",  # Amber/Gold
    "#0072B2",  # Deep Blue
    "#D55E00",  # Vermillion
    "#999999",  # Gray
]

DEFAULT_REGION_COLOR = "#FF0000"

_HEX_RE = re.compile(r"^#?[0-9A-Fa-f]{6}$")


def _hsl_to_rgb(h: float, s: float, l: float) -> Tuple[int, int, int]:
    """Convert HSL to RGB values."""
    s /= 100
    l /= 100
    a = s * min(l, 1 - l)

    def f(n: int) -> int:
        k = (n + h / 30) % 12
        color = l - a * max(min(k - 3, 9 - k, 1), -1)
        return round(255 * color)

    return (f(0), f(8), f(4))


def _generated_color(index: int) -> str:
    golden_angle = 137.508  # degrees
    hue = (200 + index * golden_angle) % 360
    saturation = 65 + (index % 3) * 10
    lightness = 55 + (index % 2) * 10
    r, g, b = _hsl_to_rgb(hue, saturation, lightness)
    return f"#{r:02x}{g:02x}{b:02x}".upper()


def get_color_by_index(index: int) -> str:
    """
    Get a display color by index - handles any constellation size.

    Args:
        index: Satellite index (0-based)

    Returns:
        Hex color string (e.g., "#56B4E9")
    """
    if index < len(SATELLITE_COLOR_PALETTE):
        return SATELLITE_COLOR_PALETTE[index]
    return _generated_color(index - len(SATELLITE_COLOR_PALETTE))


def normalize_hex(color: Optional[str]) -> Optional[str]:
    """Return ``#RRGGBB`` (upper case) or None for blank/invalid input."""
    if not color or not _HEX_RE.match(color.strip()):
        return None
    return "#" + color.strip().lstrip("#").upper()


def hex_to_rgba(hex_color: str, alpha: int = 255) -> List[int]:
    """Convert hex color to RGBA list."""
    hex_color = hex_color.lstrip('#')
    return [
        int(hex_color[0:2], 16),
        int(hex_color[2:4], 16),
        int(hex_color[4:6], 16),
        alpha
    ]
