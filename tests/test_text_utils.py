# FILE: tests/test_text_utils.py
"""
Tests for astroscope/utils/text.py
Markup stripping, truncation and term normalization.
"""

import sys
from pathlib import Path

_project_root = Path(__file__).parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

import pytest

from astroscope.utils.text import normalize_terms, strip_markup, tokenize_field, truncate


class TestStripMarkup:
    def test_removes_simple_tags(self):
        assert strip_markup("<p>Heat shield</p>") == "Heat shield"

    def test_tags_become_word_breaks(self):
        assert strip_markup("Heat<br>shield") == "Heat shield"

    def test_nested_tags(self):
        assert strip_markup("<div><p><b>Valve</b> leak</p></div>") == "Valve leak"

    def test_unclosed_tag_swallows_rest(self):
        assert strip_markup("Seal failure <span class=") == "Seal failure"

    def test_stray_closing_bracket(self):
        assert strip_markup("pressure > limit") == "pressure limit"

    def test_entities_decoded(self):
        assert strip_markup("LO2 &amp; LH2") == "LO2 & LH2"

    def test_whitespace_collapsed(self):
        assert strip_markup("  a \n\n b\t c ") == "a b c"

    @pytest.mark.parametrize("value", ["", None])
    def test_empty_input(self, value):
        assert strip_markup(value) == ""

    def test_no_angle_brackets_survive(self):
        out = strip_markup("<<a>>b<c <d>e>f<")
        assert "<" not in out
        assert ">" not in out


class TestTruncate:
    def test_short_text_untouched(self):
        assert truncate("short", 10) == "short"

    def test_cuts_to_max(self):
        assert truncate("abcdefghij", 4) == "abcd"

    def test_trailing_space_dropped(self):
        assert truncate("abc defg", 4) == "abc"

    def test_multibyte_characters_counted_once(self):
        assert truncate("éééé", 2) == "éé"

    def test_non_positive_bound(self):
        assert truncate("abc", 0) == ""


class TestNormalizeTerms:
    def test_lowercases_and_splits(self):
        assert normalize_terms("Mars  Lander") == ["mars", "lander"]

    def test_deletes_punctuation(self):
        assert normalize_terms("I-X, (Ares)!") == ["ix", "ares"]

    def test_underscore_is_punctuation(self):
        assert normalize_terms("lo2_tank") == ["lo2tank"]

    def test_empty(self):
        assert normalize_terms("") == []

    def test_tokenize_field_strips_markup_first(self):
        assert tokenize_field("<b>Thermal</b>protection") == ["thermal", "protection"]
