"""Tests for text normalization."""
from catmatch.text import ProductText, extract_terms, normalize_text, round_half_up


class TestNormalizeText:
    def test_lowercases_and_strips_punctuation(self):
        assert normalize_text("Apple iPad Air (5th Gen)!") == "apple ipad air 5th gen"

    def test_collapses_whitespace(self):
        assert normalize_text("  Blue \t Shirt\n\nXL ") == "blue shirt xl"

    def test_hyphen_splits_words(self):
        assert normalize_text("T-Shirt") == "t shirt"

    def test_empty(self):
        assert normalize_text("") == ""
        assert normalize_text(None) == ""


class TestExtractTerms:
    def test_keeps_terms_longer_than_two(self):
        assert extract_terms("a tv for the ipad") == ["for", "the", "ipad"]

    def test_empty(self):
        assert extract_terms("") == []


class TestProductText:
    def test_search_text_joins_name_and_description(self):
        p = ProductText("Red Shirt", "100% Cotton")
        assert p.normalized_name == "red shirt"
        assert p.search_text == "red shirt 100 cotton"

    def test_raw_text_keeps_original_case(self):
        p = ProductText("Men's Shirt", "Slim fit")
        assert p.raw_text == "Men's Shirt Slim fit"


class TestRoundHalfUp:
    def test_half_rounds_up(self):
        assert round_half_up(2.5) == 3
        assert round_half_up(12.5) == 13

    def test_below_half(self):
        assert round_half_up(0.49) == 0
        assert round_half_up(22.58) == 23
