"""Final assembly of cell text: truncation, run flattening, rich text."""

from __future__ import annotations

from openpyxl.cell.rich_text import CellRichText, TextBlock

from .models import Run


def assemble(
    text: str, runs: list[Run], max_length: int, suffix: str
) -> tuple[str, list[Run], bool]:
    """Fit converted text into a cell of at most `max_length` characters.

    Text that fits is returned unchanged. Longer text keeps its first
    ``max_length - len(suffix)`` characters followed by `suffix`; when the
    suffix alone does not fit it is cut to `max_length`. Runs are clipped to
    the kept prefix and runs left empty are dropped, so no run points past
    the end of the returned text. The suffix itself is never formatted.

    Args:
        text: Converted plain text.
        runs: Runs over `text` in application order.
        max_length: Maximum length of the returned text.
        suffix: Marker appended after truncated text.

    Returns:
        tuple[str, list[Run], bool]: Final text, runs, and whether truncation
            happened.

    Examples:
        assemble("abcdef", [], 5, "..")  # ("abc..", [], True)
        assemble("abc", [], 5, "..")  # ("abc", [], False)
    """
    if len(text) <= max_length:
        return text, list(runs), False

    keep = max_length - len(suffix)
    if keep < 0:
        return suffix[:max_length], [], True

    clipped = [run.clipped(keep) for run in runs]
    return text[:keep] + suffix, [run for run in clipped if run is not None], True


def flatten_runs(length: int, runs: list[Run]) -> list[Run]:
    """Resolve overlapping runs into ordered, non-overlapping ones.

    Runs are applied in order and the last run covering a character decides
    its font. Neighbouring characters with the same font are merged; text
    covered by no run is left out of the result.

    Examples:
        flatten_runs(4, [Run(0, 4, bold), Run(1, 2, italic)])
        # [Run(0, 1, bold), Run(1, 2, italic), Run(2, 4, bold)]
    """
    if length <= 0 or not runs:
        return []

    owners: list[int | None] = [None] * length
    for index, run in enumerate(runs):
        start = max(run.start, 0)
        end = min(run.end, length)
        if start < end:
            owners[start:end] = [index] * (end - start)

    flattened: list[Run] = []
    position = 0
    while position < length:
        owner = owners[position]
        end = position + 1
        while end < length and _same_font(runs, owners[end], owner):
            end += 1
        if owner is not None and runs[owner].font is not None:
            font = runs[owner].font
            if flattened and flattened[-1].end == position and flattened[-1].font is font:
                flattened[-1] = Run(flattened[-1].start, end, font)
            else:
                flattened.append(Run(position, end, font))
        position = end
    return flattened


def _same_font(runs: list[Run], left: int | None, right: int | None) -> bool:
    if left is None or right is None:
        return left is right
    return runs[left].font is runs[right].font


def build_rich_text(text: str, runs: list[Run]) -> CellRichText:
    """Combine text and non-overlapping runs into openpyxl rich text.

    Args:
        text: Cell text.
        runs: Runs as returned by `flatten_runs`.

    Returns:
        CellRichText: Plain strings for unformatted stretches and
            `TextBlock` items for formatted ones.
    """
    parts: list[str | TextBlock] = []
    position = 0
    for run in runs:
        if run.start > position:
            parts.append(text[position : run.start])
        parts.append(TextBlock(run.font, text[run.start : run.end]))
        position = run.end
    if position < len(text):
        parts.append(text[position:])
    return CellRichText(parts)
