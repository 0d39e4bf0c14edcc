"""Constants used across the html2xlsx package."""

from __future__ import annotations

import re

# Unit conversion
PX_TO_PT = 0.75
MIN_FONT_SIZE = 8
FONT_TAG_BASE_SIZE = 10

# Tag-implied styling
LINK_COLOR = "#0563C1"  # Excel hyperlink blue
MONOSPACE_FONT = "Courier New"

# Text layout
BULLET = "\u2022 "
CELL_SEPARATOR = " | "
NBSP = "\u00a0"
# Line-ish whitespace collapsed to a single space inside text nodes
COLLAPSIBLE_WHITESPACE = re.compile(r"[\t\n\r\f\v\x85\u2028\u2029]+")

# Excel limits and defaults
MAX_CELL_LENGTH = 32767
TRUNCATE_SUFFIX = "...(truncated)"

STYLE_PROPERTIES = (
    "font-family",
    "font-size",
    "font-weight",
    "font-style",
    "text-decoration",
    "color",
    "background-color",
)
# Properties that decide whether an inline element needs its own run
FONT_PROPERTIES = (
    "font-weight",
    "font-style",
    "text-decoration",
    "color",
    "font-family",
    "font-size",
)

BLOCK_TAGS = frozenset(
    {"p", "div", "h1", "h2", "h3", "h4", "h5", "h6", "li", "ul", "ol", "table", "tr", "blockquote"}
)
LIST_TAGS = frozenset({"ul", "ol"})
TABLE_CELL_TAGS = frozenset({"td", "th"})

HTML_EXTENSIONS = (".html", ".htm")
DEFAULT_MAX_FILE_SIZE = 10 * 1024 * 1024
