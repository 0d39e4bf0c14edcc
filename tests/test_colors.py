from __future__ import annotations

import pytest

from html2xlsx.colors import NAMED_COLORS, parse_color, to_argb


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("#f00", "FF0000"),
        ("#F0A", "FF00AA"),
        ("#1a2b3c", "1A2B3C"),
        ("  #ABCDEF  ", "ABCDEF"),
        ("rgb(0, 128, 0)", "008000"),
        ("RGB( 255 ,255,255 )", "FFFFFF"),
        ("rgb(0,0,0)", "000000"),
        ("red", "FF0000"),
        ("Grey", "808080"),
        ("gray", "808080"),
        ("green", "00FF00"),
        ("orange", "FFC800"),
        ("pink", "FFAFAF"),
        ("purple", "800080"),
        ("brown", "A52A2A"),
    ],
)
def test_parse_color_accepts_supported_forms(raw, expected):
    assert parse_color(raw) == expected


@pytest.mark.parametrize(
    "raw",
    [
        None,
        "",
        "#ff",
        "#ffff",
        "#gggggg",
        "#1234567",
        "rgb(300, 0, 0)",
        "rgb(1, 2)",
        "rgba(1, 2, 3, 0.5)",
        "hsl(0, 100%, 50%)",
        "transparent",
        "navy",
    ],
)
def test_parse_color_rejects_everything_else(raw):
    assert parse_color(raw) is None


def test_named_palette_is_upper_case_hex():
    for rgb in NAMED_COLORS.values():
        assert len(rgb) == 6
        assert rgb == rgb.upper()
        int(rgb, 16)


def test_to_argb_adds_opaque_alpha():
    assert to_argb("0563C1") == "FF0563C1"
