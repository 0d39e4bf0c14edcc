"""Style cascade: inherited, tag-implied, attribute and inline styles."""

from __future__ import annotations

from collections.abc import Mapping

from .constants import FONT_PROPERTIES, FONT_TAG_BASE_SIZE, LINK_COLOR, MONOSPACE_FONT
from .css import parse_declaration

TAG_STYLES: dict[str, dict[str, str]] = {
    "b": {"font-weight": "bold"},
    "strong": {"font-weight": "bold"},
    "i": {"font-style": "italic"},
    "em": {"font-style": "italic"},
    "u": {"text-decoration": "underline"},
    "a": {"color": LINK_COLOR, "text-decoration": "underline"},
    "code": {"font-family": MONOSPACE_FONT},
}


def resolve_style(
    tag: str, attrs: Mapping[str, object], inherited: Mapping[str, str]
) -> dict[str, str]:
    """Compute the effective style of an element.

    Layers are applied from lowest to highest precedence: the inherited
    style, the rules implied by the tag, presentational attributes (``color``,
    ``bgcolor``, and ``face``/``size``/``color`` on ``<font>``), then the
    inline ``style`` attribute. A layer only adds or overwrites keys.

    Args:
        tag: Lower-case tag name.
        attrs: Element attributes.
        inherited: Style of the parent element; left untouched.

    Returns:
        dict[str, str]: A new style map for the element.

    Examples:
        resolve_style("b", {"style": "color: red"}, {"font-size": "12pt"})
        # {"font-size": "12pt", "font-weight": "bold", "color": "red"}
    """
    style = dict(inherited)
    style.update(TAG_STYLES.get(tag, {}))
    _apply_attributes(tag, attrs, style)
    style.update(parse_declaration(_attr(attrs, "style")))
    return style


def _apply_attributes(tag: str, attrs: Mapping[str, object], style: dict[str, str]) -> None:
    color = _attr(attrs, "color")
    if color:
        style["color"] = color
    bgcolor = _attr(attrs, "bgcolor")
    if bgcolor:
        style["background-color"] = bgcolor

    if tag != "font":
        return

    face = _attr(attrs, "face")
    if face:
        style["font-family"] = face
    size = _attr(attrs, "size")
    if size is not None:
        try:
            style["font-size"] = str(FONT_TAG_BASE_SIZE + int(size.strip()))
        except ValueError:
            pass


def _attr(attrs: Mapping[str, object], name: str) -> str | None:
    value = attrs.get(name)
    if value is None:
        return None
    # bs4 hands multi-valued attributes (class, rel, ...) back as lists
    if isinstance(value, (list, tuple)):
        return " ".join(str(item) for item in value)
    return str(value)


def has_effective_style(current: Mapping[str, str], inherited: Mapping[str, str]) -> bool:
    """Report whether `current` changes any font-related property.

    Only properties set in `current` count; a property removed relative to
    `inherited` is not a change because layers never remove keys.
    """
    for prop in FONT_PROPERTIES:
        value = current.get(prop)
        if value is not None and value != inherited.get(prop):
            return True
    return False
