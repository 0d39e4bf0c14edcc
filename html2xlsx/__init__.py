"""
html2xlsx: Convert HTML fragments into Excel rich-text cells.

This package can be used both as a CLI tool and as a library.

CLI Usage:
    html2xlsx summary.html -o report.xlsx

Library Usage:
    from openpyxl import Workbook
    from html2xlsx import HtmlToExcelConverter

    workbook = Workbook()
    with HtmlToExcelConverter(workbook) as converter:
        converter.apply_html_to_cell(workbook.active["A1"], "<p><b>Total</b>: 42</p>")
    workbook.save("report.xlsx")
"""

import logging

from .assembler import assemble, build_rich_text, flatten_runs
from .cache import FontCache, ObjectCache, StyleCache
from .cascade import has_effective_style, resolve_style
from .colors import parse_color
from .config import ConfigError, ConverterConfig, build_config, load_config
from .converter import HtmlToExcelConverter, parse_html
from .css import normalize_font_name, parse_declaration, parse_font_size
from .exceptions import ConversionError, ImageDownloadError, TargetCellError
from .images import ImageHandler
from .models import ConversionResult, Fragment, Run
from .traverser import HtmlTraverser

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    # Core functionality
    "HtmlToExcelConverter",
    "HtmlTraverser",
    "parse_html",
    "assemble",
    "flatten_runs",
    "build_rich_text",
    # Style parsing
    "parse_declaration",
    "normalize_font_name",
    "parse_font_size",
    "parse_color",
    "resolve_style",
    "has_effective_style",
    # Interning
    "ObjectCache",
    "FontCache",
    "StyleCache",
    # Collaborators
    "ImageHandler",
    # Data models
    "ConversionResult",
    "Fragment",
    "Run",
    # Configuration
    "ConverterConfig",
    "build_config",
    "load_config",
    # Exceptions
    "ConfigError",
    "ConversionError",
    "ImageDownloadError",
    "TargetCellError",
    # Version
    "__version__",
]
