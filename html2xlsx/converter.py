"""Convert HTML fragments into styled Excel cell content."""

from __future__ import annotations

import logging

from bs4 import BeautifulSoup, NavigableString, ParserRejectedMarkup
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.cell.rich_text import CellRichText
from openpyxl.workbook.workbook import Workbook

from .assembler import assemble, build_rich_text, flatten_runs
from .cache import FontCache, StyleCache
from .config import ConverterConfig
from .fonts import FontBuilder
from .handlers import BackgroundHandler, HyperlinkHandler, ensure_target_cell
from .images import ImageHandler
from .models import ConversionResult
from .traverser import HtmlTraverser

logger = logging.getLogger(__name__)


def parse_html(html: str | None, features: str = "lxml") -> BeautifulSoup:
    """Parse a markup fragment as the body of a document.

    None is treated as an empty fragment. The fragment is parsed inside an
    explicit ``<body>``, so the parser repairs unclosed elements (``<p>a<p>b``
    gives two paragraphs) without wrapping leading text in a paragraph of its
    own. Control characters a worksheet cannot store are removed first.
    Markup the parser refuses is kept as a single text node so that its
    content still reaches the cell.

    Examples:
        parse_html("<p>a<p>b").find_all("p")  # [<p>a</p>, <p>b</p>]
    """
    markup = ILLEGAL_CHARACTERS_RE.sub("", html or "")
    try:
        return BeautifulSoup(f"<body>{markup}</body>", features)
    except ParserRejectedMarkup as error:
        logger.warning("Markup rejected by the parser, converting it as plain text: %s", error)
        soup = BeautifulSoup("", features)
        soup.append(NavigableString(markup))
        return soup


class HtmlToExcelConverter:
    """Turn HTML fragments into rich text for the cells of one workbook.

    Fonts and background styles are interned per converter, so one converter
    should serve every cell of a workbook. A converter may be shared between
    threads converting different cells.

    Args:
        workbook: Workbook whose cells receive the converted content.
        config: Conversion settings; defaults when omitted.
        image_handler: Collaborator embedding ``<img>`` pictures. When omitted
            the converter creates one and closes it in `close`.

    Examples:
        workbook = Workbook()
        with HtmlToExcelConverter(workbook) as converter:
            converter.apply_html_to_cell(workbook.active["A1"], "<b>Total</b>: 42")
    """

    def __init__(
        self,
        workbook: Workbook,
        config: ConverterConfig | None = None,
        image_handler: ImageHandler | None = None,
    ):
        if workbook is None:
            raise ValueError("workbook cannot be None")

        self.workbook = workbook
        self.config = config or ConverterConfig()

        self.font_cache = FontCache(enabled=self.config.enable_font_cache)
        self.style_cache = StyleCache(enabled=self.config.enable_style_cache)
        self.font_builder = FontBuilder(self.font_cache)
        self.background_handler = BackgroundHandler(self.style_cache)
        self.hyperlink_handler = HyperlinkHandler()
        self.traverser = HtmlTraverser(self.font_builder.build_font)

        self._owns_image_handler = image_handler is None
        self.image_handler = image_handler or ImageHandler(self.config)

    def __enter__(self) -> HtmlToExcelConverter:
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_image_handler:
            self.image_handler.close()

    def convert(self, html: str | None) -> ConversionResult:
        """Convert a fragment into final text, flattened runs and metadata.

        Args:
            html: Markup to convert; None counts as empty.

        Returns:
            ConversionResult: Truncated text with runs that never reach past
                it, the block backgrounds and the first link target.

        Examples:
            converter.convert("<p><b>Bold</b> text</p>").text  # "Bold text\\n"
        """
        return self._convert(parse_html(html, self.config.parser_features))

    def convert_to_rich_text(self, html: str | None) -> CellRichText:
        """Convert a fragment into openpyxl rich text, truncating when needed."""
        result = self.convert(html)
        return build_rich_text(result.text, result.runs)

    def apply_html_to_cell(self, cell, html: str | None) -> ConversionResult:
        """Write converted markup into `cell`.

        The cell receives rich text (plain text when nothing is formatted),
        then the first block background unless the cell already has a fill,
        then the first link, then the images of the fragment.

        Args:
            cell: Target openpyxl cell.
            html: Markup to convert; None counts as empty.

        Returns:
            ConversionResult: What was written to the cell.

        Raises:
            TargetCellError: If `cell` is None, merged, or not a cell.
        """
        cell = ensure_target_cell(cell)
        soup = parse_html(html, self.config.parser_features)
        result = self._convert(soup)

        if result.runs:
            cell.value = build_rich_text(result.text, result.runs)
        else:
            cell.value = result.text
            # Converted text is content, never a formula
            if cell.data_type == "f":
                cell.data_type = "s"

        for color in result.backgrounds:
            if self.background_handler.apply_background(cell, color):
                break

        if result.href is not None:
            self.hyperlink_handler.apply_hyperlink(cell, result.href)

        if self.config.enable_image_download:
            self.image_handler.process_images(soup, cell)

        return result

    def _convert(self, soup: BeautifulSoup) -> ConversionResult:
        fragment = self.traverser.traverse(soup)
        text, runs, truncated = assemble(
            fragment.text,
            fragment.runs,
            self.config.max_cell_length,
            self.config.truncate_suffix,
        )
        if truncated:
            logger.debug(
                "Truncated converted text from %d to %d characters", len(fragment), len(text)
            )
        return ConversionResult(
            text=text,
            runs=flatten_runs(len(text), runs),
            truncated=truncated,
            backgrounds=fragment.backgrounds,
            href=self.hyperlink_handler.find_first_href(soup),
        )

    @property
    def font_cache_size(self) -> int:
        return self.font_cache.size()

    @property
    def style_cache_size(self) -> int:
        return self.style_cache.size()

    def clear_caches(self) -> None:
        """Drop every interned font and style; later conversions rebuild them."""
        self.font_cache.clear()
        self.style_cache.clear()
