"""Color parsing for CSS and legacy HTML color values."""

from __future__ import annotations

import re

RGB_PATTERN = re.compile(r"rgb\s*\(\s*(\d+)\s*,\s*(\d+)\s*,\s*(\d+)\s*\)")
HEX_PATTERN = re.compile(r"#([0-9a-f]{3}|[0-9a-f]{6})")

NAMED_COLORS = {
    "black": "000000",
    "white": "FFFFFF",
    "red": "FF0000",
    "green": "00FF00",
    "blue": "0000FF",
    "yellow": "FFFF00",
    "gray": "808080",
    "grey": "808080",
    "orange": "FFC800",
    "purple": "800080",
    "brown": "A52A2A",
    "pink": "FFAFAF",
    "cyan": "00FFFF",
    "magenta": "FF00FF",
}


def parse_color(value: str | None) -> str | None:
    """Parse a color value into an upper-case ``RRGGBB`` hex string.

    Accepts ``#RGB``, ``#RRGGBB``, ``rgb(r, g, b)`` with components in
    0-255, and a small palette of named colors. Anything else yields None so
    the caller can leave the color unset.

    Args:
        value: Raw color value from a style declaration or attribute.

    Returns:
        str | None: Six hex digits without ``#``, or None when unrecognized.

    Examples:
        parse_color("#f00")  # "FF0000"
        parse_color("rgb(0, 128, 0)")  # "008000"
        parse_color("Grey")  # "808080"
        parse_color("rgb(300,0,0)")  # None
    """
    if value is None:
        return None

    text = value.strip().lower()
    if text.startswith("#"):
        match = HEX_PATTERN.fullmatch(text)
        if match is None:
            return None
        digits = match.group(1)
        if len(digits) == 3:
            digits = "".join(digit * 2 for digit in digits)
        return digits.upper()

    if text.startswith("rgb"):
        match = RGB_PATTERN.match(text)
        if match is None:
            return None
        components = [int(group) for group in match.groups()]
        if any(component > 255 for component in components):
            return None
        return "".join(f"{component:02X}" for component in components)

    return NAMED_COLORS.get(text)


def to_argb(rgb: str) -> str:
    """Prefix an ``RRGGBB`` value with an opaque alpha channel."""
    return f"FF{rgb}"
