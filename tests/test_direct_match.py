"""Tests for direct and partial term matching."""
import pytest

from catmatch.direct_match import MatchKind, find_direct_match
from catmatch.term_tables import DEFAULT_TERM_TABLE, table_from_dict
from catmatch.text import extract_terms, normalize_text


def _match(name, table, description=""):
    normalized = normalize_text(name)
    search_text = f"{normalized} {normalize_text(description)}"
    return find_direct_match(extract_terms(normalized), search_text, table)


class TestDirectMatch:
    def test_longer_phrase_wins(self):
        table = table_from_dict({
            "watch": ("Category A", "", 90),
            "apple watch": ("Category B", "", 90),
        })
        m = _match("Apple Watch Series 9", table)
        assert m.category == "Category B"
        assert m.kind == MatchKind.MULTI_WORD

    def test_multi_word_starts_at_word(self):
        table = table_from_dict({"t-shirt": ("Fashion", "T-Shirts", 90)})
        assert _match("Velvet Shirt", table) is None
        assert _match("Graphic T-Shirt", table).kind == MatchKind.MULTI_WORD

    def test_multi_word_searches_description(self):
        m = _match("Series 9 GPS", DEFAULT_TERM_TABLE, description="The new Apple Watch")
        assert m.phrase == "apple watch"

    def test_exact_term_in_name_order(self):
        m = _match("Apple iPad Air 5th Gen", DEFAULT_TERM_TABLE)
        assert m.kind == MatchKind.EXACT
        assert (m.category, m.subcategory, m.weight) == ("Tablets", "iPad", 100)

    def test_exact_ignores_description(self):
        assert _match("Mystery Parcel", DEFAULT_TERM_TABLE, description="works with any ipad") is None

    def test_partial_match_scaled(self):
        table = table_from_dict({"phone": ("Phones", "", 90)})
        m = _match("Smartphones Bundle", table)
        assert m.kind == MatchKind.PARTIAL
        assert m.weight == pytest.approx(72.0)

    def test_partial_tie_keeps_first(self):
        table = table_from_dict({
            "phone": ("Phones", "", 90),
            "smart": ("Smart Home", "", 90),
        })
        m = _match("Smartphone", table)
        assert m.category == "Phones"

    def test_partial_higher_weight_wins(self):
        table = table_from_dict({
            "phone": ("Phones", "", 70),
            "smart": ("Smart Home", "", 90),
        })
        assert _match("Smartphone", table).category == "Smart Home"

    def test_no_match(self):
        assert _match("Generic Plastic Widget", DEFAULT_TERM_TABLE) is None

    def test_empty_input(self):
        assert find_direct_match([], "", DEFAULT_TERM_TABLE) is None
