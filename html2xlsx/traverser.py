"""Walk a parsed HTML tree and produce plain text with formatting runs."""

from __future__ import annotations

from collections.abc import Callable, Mapping

from bs4 import NavigableString, PageElement, Script, Stylesheet, Tag
from bs4.element import PreformattedString
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.cell.text import InlineFont

from .cascade import has_effective_style, resolve_style
from .constants import (
    BLOCK_TAGS,
    BULLET,
    CELL_SEPARATOR,
    COLLAPSIBLE_WHITESPACE,
    LIST_TAGS,
    NBSP,
    TABLE_CELL_TAGS,
)
from .models import Fragment, Run, TagKind, TraverseContext

FontFactory = Callable[[Mapping[str, str]], InlineFont]


def classify_tag(tag: str) -> TagKind:
    """Map a lower-case tag name to the way it is rendered.

    Examples:
        classify_tag("li")  # TagKind.LIST_ITEM
        classify_tag("span")  # TagKind.INLINE
    """
    if tag == "br":
        return TagKind.LINE_BREAK
    if tag == "li":
        return TagKind.LIST_ITEM
    if tag == "tr":
        return TagKind.TABLE_ROW
    if tag in TABLE_CELL_TAGS:
        return TagKind.TABLE_CELL
    if tag in BLOCK_TAGS:
        return TagKind.BLOCK
    return TagKind.INLINE


def normalize_text(text: str) -> str:
    """Map non-breaking spaces to spaces and collapse line-ish whitespace.

    Runs of tabs, newlines, carriage returns, form feeds and vertical tabs
    become one space. Ordinary spaces are kept as they are. Control characters
    a worksheet cannot store are dropped.
    """
    text = COLLAPSIBLE_WHITESPACE.sub(" ", text.replace(NBSP, " "))
    return ILLEGAL_CHARACTERS_RE.sub("", text)


class _Builder:
    """Accumulates child fragments while shifting their runs into place."""

    def __init__(self):
        self.parts: list[str] = []
        self.runs: list[Run] = []
        self.backgrounds: list[str] = []
        self.length = 0

    def text(self, text: str) -> None:
        if text:
            self.parts.append(text)
            self.length += len(text)

    def fragment(self, fragment: Fragment) -> None:
        offset = self.length
        self.text(fragment.text)
        self.runs.extend(run.shifted(offset) for run in fragment.runs)
        self.backgrounds.extend(fragment.backgrounds)

    def build(self) -> Fragment:
        return Fragment("".join(self.parts), self.runs, self.backgrounds)


class HtmlTraverser:
    """Render a parsed tree into a `Fragment`.

    Args:
        font_factory: Returns the (interned) font for an effective style. It is
            called only for inline elements whose content is non-empty and whose
            style differs from the inherited one.

    Examples:
        traverser = HtmlTraverser(FontBuilder(FontCache()).build_font)
        fragment = traverser.traverse(BeautifulSoup("<b>x</b>", "html.parser"))
    """

    def __init__(self, font_factory: FontFactory):
        self.font_factory = font_factory

    def traverse(
        self,
        node: PageElement,
        inherited: Mapping[str, str] | None = None,
        context: TraverseContext | None = None,
    ) -> Fragment:
        """Render `node` and its descendants.

        Args:
            node: Root of the subtree, typically the parsed document.
            inherited: Style inherited from outside the subtree.
            context: List and table position; a fresh context when omitted.

        Returns:
            Fragment: Text, runs relative to the subtree, and block backgrounds.
        """
        return self._visit(node, dict(inherited or {}), context or TraverseContext())

    def _visit(
        self, node: PageElement, inherited: Mapping[str, str], context: TraverseContext
    ) -> Fragment:
        if isinstance(node, NavigableString):
            # Comments, doctypes, script and style bodies carry no text
            if isinstance(node, (PreformattedString, Script, Stylesheet)):
                return Fragment()
            return Fragment(normalize_text(str(node)))

        if not isinstance(node, Tag):
            return Fragment()

        tag = (node.name or "").lower()
        kind = classify_tag(tag)
        if kind is TagKind.LINE_BREAK:
            return Fragment("\n")

        style = resolve_style(tag, node.attrs, inherited)

        if kind is TagKind.LIST_ITEM:
            return self._list_item(node, style, context)
        if kind is TagKind.TABLE_ROW:
            return self._table_row(node, style, context)
        if kind is TagKind.TABLE_CELL:
            return self._table_cell(node, style, context)
        if kind is TagKind.BLOCK:
            return self._block(node, tag, style, context)
        return self._inline(node, style, inherited, context)

    def _children(self, node: Tag, style: Mapping[str, str], context: TraverseContext) -> _Builder:
        builder = _Builder()
        for child in node.children:
            builder.fragment(self._visit(child, style, context))
        return builder

    def _list_item(self, node: Tag, style: Mapping[str, str], context: TraverseContext) -> Fragment:
        builder = _Builder()
        if context.ordered:
            builder.text(f"{context.list_frame.take_number()}. ")
        else:
            builder.text(BULLET)
        for child in node.children:
            builder.fragment(self._visit(child, style, context))
        builder.text("\n")
        return builder.build()

    def _table_row(self, node: Tag, style: Mapping[str, str], context: TraverseContext) -> Fragment:
        builder = self._children(node, style, context.with_row())
        builder.text("\n")
        return builder.build()

    def _table_cell(
        self, node: Tag, style: Mapping[str, str], context: TraverseContext
    ) -> Fragment:
        builder = _Builder()
        row = context.row_frame
        if row.cell_index > 0:
            builder.text(CELL_SEPARATOR)
        row.cell_index += 1
        for child in node.children:
            builder.fragment(self._visit(child, style, context))
        return builder.build()

    def _block(
        self, node: Tag, tag: str, style: Mapping[str, str], context: TraverseContext
    ) -> Fragment:
        if tag in LIST_TAGS:
            context = context.with_list(ordered=tag == "ol")

        builder = self._children(node, style, context)
        # Empty blocks must not leave blank lines behind
        if builder.length > 0:
            builder.text("\n")

        background = style.get("background-color")
        if background:
            builder.backgrounds.append(background)
        return builder.build()

    def _inline(
        self,
        node: Tag,
        style: Mapping[str, str],
        inherited: Mapping[str, str],
        context: TraverseContext,
    ) -> Fragment:
        builder = self._children(node, style, context)
        if builder.length > 0 and has_effective_style(style, inherited):
            font = self.font_factory(style)
            # The element's run goes first so runs of nested elements override it
            builder.runs.insert(0, Run(0, builder.length, font))
        return builder.build()
