"""Build openpyxl inline fonts from resolved styles."""

from __future__ import annotations

import logging
from collections.abc import Mapping

from openpyxl.cell.text import InlineFont
from openpyxl.styles.colors import Color

from .cache import FontCache, is_bold, is_italic, is_underline
from .colors import parse_color, to_argb
from .css import normalize_font_name, parse_font_size

logger = logging.getLogger(__name__)


class FontBuilder:
    """Create (or reuse) the inline font for a style map.

    Args:
        font_cache: Interning cache shared by every conversion of a workbook.
    """

    def __init__(self, font_cache: FontCache[InlineFont]):
        self.font_cache = font_cache

    def build_font(self, style: Mapping[str, str]) -> InlineFont:
        key = FontCache.generate_key(style)
        return self.font_cache.get_or_create(key, lambda: create_font(style))


def create_font(style: Mapping[str, str]) -> InlineFont:
    """Translate a style map into a new `InlineFont`.

    Unset or unparseable properties are left unset so the cell's default font
    applies. A property the host rejects is logged and skipped; the font keeps
    whatever was already set.

    Examples:
        create_font({"font-weight": "bold", "font-size": "16px"})  # InlineFont(b=True, sz=12)
    """
    font = InlineFont()

    family = normalize_font_name(style.get("font-family"))
    if family:
        _set(font, "rFont", family)

    size = parse_font_size(style.get("font-size"))
    if size is not None:
        _set(font, "sz", size)

    if is_bold(style.get("font-weight")):
        font.b = True
    if is_italic(style.get("font-style")):
        font.i = True
    if is_underline(style.get("text-decoration")):
        font.u = "single"

    color = style.get("color")
    rgb = parse_color(color)
    if rgb is not None:
        try:
            font.color = Color(rgb=to_argb(rgb))
        except (TypeError, ValueError) as error:
            logger.warning("Failed to set font color to %r: %s", color, error)

    return font


def _set(font: InlineFont, attribute: str, value: object) -> None:
    try:
        setattr(font, attribute, value)
    except (TypeError, ValueError) as error:
        logger.warning("Failed to set font %s to %r: %s", attribute, value, error)
