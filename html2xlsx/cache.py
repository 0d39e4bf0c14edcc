"""Interning caches for fonts and cell styles.

Spreadsheet formats cap the number of distinct font and style records a
workbook may hold. Conversions that repeat the same formatting across many
cells reuse one object per distinct signature instead of building a new one
each time.
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Mapping
from typing import Generic, TypeVar

T = TypeVar("T")


class ObjectCache(Generic[T]):
    """Thread-safe get-or-create store keyed by a signature string.

    Args:
        enabled: When False every lookup builds a fresh object and nothing is
            retained.

    Examples:
        cache = ObjectCache()
        font = cache.get_or_create("bold", lambda: InlineFont(b=True))
    """

    def __init__(self, enabled: bool = True):
        self.enabled = enabled
        self._entries: dict[str, T] = {}
        self._lock = threading.Lock()

    def get_or_create(self, key: str, factory: Callable[[], T]) -> T:
        """Return the object stored under `key`, building it on first use.

        The factory runs while the lock is held, so concurrent callers asking
        for the same key observe a single object.
        """
        if not self.enabled:
            return factory()

        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                entry = factory()
                self._entries[key] = entry
            return entry

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def size(self) -> int:
        with self._lock:
            return len(self._entries)

    def __len__(self) -> int:
        return self.size()

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries


class FontCache(ObjectCache[T]):
    """Cache of inline fonts keyed by style signature."""

    @staticmethod
    def generate_key(style: Mapping[str, str]) -> str:
        """Build the style signature of the font-relevant properties.

        Weight, style and decoration are reduced to the values the font
        builder can express; family, size and color are kept verbatim with
        ``default`` standing in for an unset value.

        Examples:
            FontCache.generate_key({"font-weight": "bold", "color": "red"})
            # "family:default|size:default|weight:bold|style:normal|decoration:none|color:red"
        """
        family = style.get("font-family") or "default"
        size = style.get("font-size") or "default"
        weight = "bold" if is_bold(style.get("font-weight")) else "normal"
        font_style = "italic" if is_italic(style.get("font-style")) else "normal"
        decoration = "underline" if is_underline(style.get("text-decoration")) else "none"
        color = style.get("color") or "default"
        return (
            f"family:{family}|size:{size}|weight:{weight}|style:{font_style}"
            f"|decoration:{decoration}|color:{color}"
        )


class StyleCache(ObjectCache[T]):
    """Cache of cell styles keyed by normalized background color."""

    @staticmethod
    def generate_background_key(color: str | None) -> str:
        if color is None:
            return "bg:none"
        return f"bg:{color.strip().lower()}"


def is_bold(weight: str | None) -> bool:
    """Return True for ``bold``, ``bolder`` and numeric weights of 600 or more."""
    if not weight:
        return False
    weight = weight.strip().lower()
    if weight in ("bold", "bolder"):
        return True
    return weight.isdigit() and int(weight) >= 600


def is_italic(font_style: str | None) -> bool:
    return bool(font_style) and font_style.strip().lower() in ("italic", "oblique")


def is_underline(decoration: str | None) -> bool:
    return bool(decoration) and "underline" in decoration.lower().split()
