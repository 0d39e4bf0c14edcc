"""Inline style declaration parsing and font value normalization."""

from __future__ import annotations

import math
import re

from .constants import MIN_FONT_SIZE, PX_TO_PT

_NON_NUMERIC = re.compile(r"[^0-9.]")
_QUOTES = "'\""


def parse_declaration(css_text: str | None) -> dict[str, str]:
    """Parse an inline ``style`` attribute into a property map.

    Splits on ``;`` and then on the first ``:`` of each segment. Property
    names are trimmed and lower-cased; values are trimmed and lose one leading
    and one trailing quote character. Segments without a colon, with an empty
    name, or with an empty value are dropped. Unknown properties are kept so
    that consumers can decide what to ignore.

    Args:
        css_text: Declaration text such as ``"color: red; font-size: 14px"``.

    Returns:
        dict[str, str]: Parsed properties; empty when nothing usable was found.

    Examples:
        parse_declaration("color:red;font-size:14px")  # {"color": "red", "font-size": "14px"}
        parse_declaration("font-family: 'Arial'")  # {"font-family": "Arial"}
        parse_declaration("garbage")  # {}
    """
    result: dict[str, str] = {}
    if not css_text or not css_text.strip():
        return result

    for declaration in css_text.split(";"):
        name, separator, value = declaration.partition(":")
        if not separator:
            continue

        name = name.strip().lower()
        value = _strip_quotes(value.strip())
        if name and value:
            result[name] = value

    return result


def _strip_quotes(value: str) -> str:
    if value and value[0] in _QUOTES:
        value = value[1:]
    if value and value[-1] in _QUOTES:
        value = value[:-1]
    return value


def normalize_font_name(name: str | None) -> str | None:
    """Return the first family of a ``font-family`` list without quotes.

    Examples:
        normalize_font_name("'Segoe UI', Arial, sans-serif")  # "Segoe UI"
        normalize_font_name(" , Arial")  # None
    """
    if name is None:
        return None
    first = name.split(",", 1)[0]
    for quote in _QUOTES:
        first = first.replace(quote, "")
    first = first.strip()
    return first or None


def parse_font_size(
    raw: str | None, px_to_pt: float = PX_TO_PT, min_size: int = MIN_FONT_SIZE
) -> int | None:
    """Convert a CSS font size to whole points.

    Every character other than digits and ``.`` is discarded before parsing.
    Pixel values are scaled by `px_to_pt`; the result is rounded half up and
    never smaller than `min_size`.

    Args:
        raw: Raw size value, e.g. ``"12px"``, ``"14pt"``, ``"14"``.
        px_to_pt: Ratio used to approximate points from pixels.
        min_size: Smallest size returned.

    Returns:
        int | None: Size in points, or None when no number could be read.

    Examples:
        parse_font_size("16px")  # 12
        parse_font_size("14.0pt")  # 14
        parse_font_size("4")  # 8
        parse_font_size("large")  # None
    """
    if not raw:
        return None

    digits = _NON_NUMERIC.sub("", raw)
    if not digits:
        return None

    try:
        value = float(digits)
    except ValueError:
        # e.g. "1.2.3" survives the character filter
        return None

    if raw.strip().lower().endswith("px"):
        value *= px_to_pt

    return max(min_size, math.floor(value + 0.5))
