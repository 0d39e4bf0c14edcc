"""Data models for html2xlsx."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum, auto

from openpyxl.cell.text import InlineFont


class TagKind(Enum):
    """How the traverser treats an element.

    Attributes:
        LINE_BREAK: ``<br>``; emits a newline and nothing else.
        LIST_ITEM: ``<li>``; prefixed with a bullet or its number.
        TABLE_ROW: ``<tr>``; one line of ``" | "``-separated cells.
        TABLE_CELL: ``<td>``/``<th>``; separated from earlier cells of the row.
        BLOCK: Elements ending with a newline when they produce text.
        INLINE: Everything else; may carry a formatting run.
    """

    LINE_BREAK = auto()
    LIST_ITEM = auto()
    TABLE_ROW = auto()
    TABLE_CELL = auto()
    BLOCK = auto()
    INLINE = auto()


@dataclass
class ListFrame:
    """Counter state of one ``<ul>``/``<ol>`` element.

    Attributes:
        ordered: Whether items are numbered.
        next_number: Number given to the next item of an ordered list.
    """

    ordered: bool
    next_number: int = 1

    def take_number(self) -> int:
        number = self.next_number
        self.next_number += 1
        return number


@dataclass
class RowFrame:
    """Cell counter of one table row."""

    cell_index: int = 0


@dataclass(frozen=True)
class TraverseContext:
    """Positional context handed down the tree.

    A context is never modified in place: entering a list or a row produces a
    new context that owns a fresh frame, so state cannot leak into siblings of
    the list or row, and an enclosing list resumes its own numbering after a
    nested one.

    Attributes:
        list_frame: Innermost enclosing list, if any.
        row_frame: Innermost enclosing table row. A top-level frame catches
            cells that are not inside any row.
    """

    list_frame: ListFrame | None = None
    row_frame: RowFrame = field(default_factory=RowFrame)

    def with_list(self, ordered: bool) -> TraverseContext:
        return replace(self, list_frame=ListFrame(ordered=ordered))

    def with_row(self) -> TraverseContext:
        return replace(self, row_frame=RowFrame())

    @property
    def ordered(self) -> bool:
        return self.list_frame is not None and self.list_frame.ordered


@dataclass(frozen=True)
class Run:
    """Formatting applied to the half-open text range ``[start, end)``.

    Attributes:
        start: Offset of the first formatted character.
        end: Offset just past the last formatted character.
        font: Interned font, or None for unformatted text.
    """

    start: int
    end: int
    font: InlineFont | None

    def __len__(self) -> int:
        return max(self.end - self.start, 0)

    def shifted(self, offset: int) -> Run:
        return replace(self, start=self.start + offset, end=self.end + offset)

    def clipped(self, limit: int) -> Run | None:
        """Return the part of the run before `limit`, or None if nothing is left."""
        end = min(self.end, limit)
        if end <= self.start:
            return None
        return replace(self, end=end)


@dataclass
class Fragment:
    """Text and formatting produced by one subtree.

    Attributes:
        text: Plain text of the subtree.
        runs: Runs relative to the start of `text`, in application order;
            a later run wins where runs overlap.
        backgrounds: Background colors of completed blocks, innermost first.
    """

    text: str = ""
    runs: list[Run] = field(default_factory=list)
    backgrounds: list[str] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.text)


@dataclass
class ConversionResult:
    """Outcome of converting one markup fragment.

    Attributes:
        text: Final cell text, truncated when needed.
        runs: Non-overlapping runs ordered by offset.
        truncated: Whether `text` was shortened.
        backgrounds: Block background colors in application order.
        href: First hyperlink target of the fragment, if any.
    """

    text: str
    runs: list[Run]
    truncated: bool = False
    backgrounds: list[str] = field(default_factory=list)
    href: str | None = None
