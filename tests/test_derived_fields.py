"""
Tests for the derived-field helpers.
"""

import pytest

from inkpress.core.models import make_excerpt, make_slug, normalize_tags, reading_time


class TestSlug:
    @pytest.mark.parametrize("title, expected", [
        ("Hello World", "hello-world"),
        ("  Trailing -- dashes!  ", "trailing-dashes"),
        ("Café au lait", "cafe-au-lait"),
        ("Über Straße", "uber-strasse"),
        ("Привет мир", "privet-mir"),
    ])
    def test_transliterates(self, title, expected):
        assert make_slug(title) == expected

    @pytest.mark.parametrize("title", ["", "!!!", "   "])
    def test_never_empty(self, title):
        assert make_slug(title) == "post"


class TestOtherFields:
    def test_excerpt(self):
        assert make_excerpt("x" * 200) == "x" * 150 + "..."

    def test_tags(self):
        assert normalize_tags([" A", "a", "b ", ""]) == ["a", "b"]
        assert normalize_tags(None) == []

    def test_reading_time(self):
        assert reading_time("one two") == 1
        assert reading_time(" ".join(["w"] * 401)) == 3
