from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor

from html2xlsx.cache import FontCache, ObjectCache, StyleCache, is_bold, is_italic, is_underline


def test_get_or_create_returns_same_instance_for_same_key():
    cache = ObjectCache()

    first = cache.get_or_create("bold", object)
    second = cache.get_or_create("bold", object)

    assert first is second
    assert cache.size() == 1
    assert "bold" in cache


def test_get_or_create_distinguishes_keys():
    cache = ObjectCache()

    assert cache.get_or_create("a", object) is not cache.get_or_create("b", object)
    assert len(cache) == 2


def test_disabled_cache_always_builds_and_stores_nothing():
    cache = ObjectCache(enabled=False)

    first = cache.get_or_create("bold", object)
    second = cache.get_or_create("bold", object)

    assert first is not second
    assert cache.size() == 0
    assert "bold" not in cache


def test_clear_drops_entries():
    cache = ObjectCache()
    first = cache.get_or_create("bold", object)

    cache.clear()

    assert cache.size() == 0
    assert cache.get_or_create("bold", object) is not first


def test_concurrent_callers_share_one_instance():
    cache = ObjectCache()
    calls = []
    barrier = threading.Barrier(8)

    def factory():
        calls.append(1)
        return object()

    def worker(_):
        barrier.wait()
        return cache.get_or_create("shared", factory)

    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(worker, range(8)))

    assert len(calls) == 1
    assert all(result is results[0] for result in results)
    assert cache.size() == 1


def test_font_key_format():
    key = FontCache.generate_key(
        {
            "font-family": "Arial",
            "font-size": "12px",
            "font-weight": "700",
            "font-style": "italic",
            "text-decoration": "underline",
            "color": "red",
        }
    )

    assert key == (
        "family:Arial|size:12px|weight:bold|style:italic|decoration:underline|color:red"
    )


def test_font_key_defaults():
    assert FontCache.generate_key({}) == (
        "family:default|size:default|weight:normal|style:normal|decoration:none|color:default"
    )


def test_font_key_ignores_non_font_properties():
    base = {"font-weight": "bold"}
    extended = {**base, "background-color": "red", "margin": "0"}

    assert FontCache.generate_key(base) == FontCache.generate_key(extended)


def test_background_key():
    assert StyleCache.generate_background_key(None) == "bg:none"
    assert StyleCache.generate_background_key("  #FF0000 ") == "bg:#ff0000"


def test_weight_style_and_decoration_helpers():
    assert is_bold("bold")
    assert is_bold("BOLDER")
    assert is_bold("600")
    assert not is_bold("500")
    assert not is_bold("normal")
    assert not is_bold(None)

    assert is_italic("italic")
    assert is_italic("oblique")
    assert not is_italic("normal")
    assert not is_italic(None)

    assert is_underline("underline")
    assert is_underline("underline dotted")
    assert not is_underline("line-through")
    assert not is_underline(None)
