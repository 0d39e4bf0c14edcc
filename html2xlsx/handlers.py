"""Cell-level collaborators: background color, hyperlinks, target checks."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from bs4 import Tag
from openpyxl.cell.cell import Cell, MergedCell
from openpyxl.styles import Alignment, PatternFill

from .cache import StyleCache
from .colors import parse_color, to_argb
from .exceptions import TargetCellError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BackgroundStyle:
    """Cell style applied for a block background color.

    Attributes:
        fill: Solid fill, or None when the color could not be parsed.
        alignment: Alignment applied alongside the fill.
    """

    fill: PatternFill | None
    alignment: Alignment


def ensure_target_cell(cell: object) -> Cell:
    """Return `cell` when it can receive a value, otherwise raise.

    Raises:
        TargetCellError: If `cell` is None, a merged (read-only) cell, or not
            an openpyxl cell at all.
    """
    if cell is None:
        raise TargetCellError("cell cannot be None")
    if isinstance(cell, MergedCell):
        raise TargetCellError("cell is part of a merged range", cell.coordinate)
    if not isinstance(cell, Cell):
        raise TargetCellError(f"expected an openpyxl cell, got {type(cell).__name__}")
    return cell


def has_background(cell: Cell) -> bool:
    fill = cell.fill
    return fill is not None and fill.fill_type not in (None, "none")


class BackgroundHandler:
    """Apply cached background styles to cells that have none yet.

    Args:
        style_cache: Interning cache shared by every conversion of a workbook.
    """

    def __init__(self, style_cache: StyleCache[BackgroundStyle]):
        self.style_cache = style_cache

    def apply_background(self, cell: Cell, color: str | None) -> bool:
        """Give `cell` a solid background unless it already has one.

        Args:
            cell: Target cell.
            color: Raw color value from the markup.

        Returns:
            bool: True when the cell received a fill. An unparseable color
                leaves the cell untouched and returns False.
        """
        if color is None or not color.strip():
            return False
        if has_background(cell):
            return False

        key = StyleCache.generate_background_key(color)
        style = self.style_cache.get_or_create(key, lambda: create_background_style(color))
        if style.fill is None:
            return False
        cell.fill = style.fill
        cell.alignment = style.alignment
        return True


def create_background_style(color: str) -> BackgroundStyle:
    fill = None
    rgb = parse_color(color)
    if rgb is not None:
        try:
            fill = PatternFill(fill_type="solid", start_color=to_argb(rgb), end_color=to_argb(rgb))
        except (TypeError, ValueError) as error:
            logger.warning("Failed to build background fill for %r: %s", color, error)
    return BackgroundStyle(fill=fill, alignment=Alignment(vertical="top"))


class HyperlinkHandler:
    """Find the first link of a fragment and attach it to a cell."""

    @staticmethod
    def find_first_href(root: Tag) -> str | None:
        """Return the ``href`` of the first ``<a href>`` in document order.

        Anchors without an ``href`` attribute are skipped. When the first
        linking anchor has a blank target the fragment has no link.
        """
        anchor = root.find("a", href=True)
        if anchor is None:
            return None
        return str(anchor["href"]).strip() or None

    @staticmethod
    def apply_hyperlink(cell: Cell, href: str | None) -> bool:
        if href is None or not href.strip():
            return False
        try:
            cell.hyperlink = href.strip()
        except (TypeError, ValueError) as error:
            logger.warning("Failed to set hyperlink %r on %s: %s", href, cell.coordinate, error)
            return False
        return True
