"""Tests for confidence calculation and product-family overrides."""
from catmatch.confidence import apply_family_override, compute_confidence, find_family_override
from catmatch.scoring import CategoryScore
from catmatch.taxonomy import Category
from catmatch.term_tables import FamilyOverride


def _scores(*pairs):
    return [CategoryScore(Category(str(i), name), score) for i, (name, score) in enumerate(pairs)]


class TestComputeConfidence:
    def test_normalized_by_name_length(self):
        # 21 / (31 * 3)
        assert compute_confidence(21, "Stainless Steel Kitchen Blender") == 23

    def test_half_rounds_up(self):
        assert compute_confidence(3, "abcdefgh") == 13

    def test_capped_at_100(self):
        assert compute_confidence(1000, "abc") == 100

    def test_zero_cases(self):
        assert compute_confidence(0, "Blender") == 0
        assert compute_confidence(10, "") == 0


class TestFamilyOverride:
    def test_find(self):
        assert find_family_override("apple ipad air").subcategory == "iPad"
        assert find_family_override("apple iphone 15") is None

    def test_overrides_other_top_category(self):
        scores = _scores(("Electronics", 30), ("Fashion", 10), ("Tablets", 5))
        assert apply_family_override("apple ipad air 5th gen", scores) == ("Tablets", "iPad", 90)

    def test_uses_taxonomy_spelling(self):
        scores = _scores(("Electronics", 30), ("TABLETS", 0))
        assert apply_family_override("ipad mini", scores) == ("TABLETS", "iPad", 90)

    def test_no_override_when_already_top(self):
        assert apply_family_override("ipad mini", _scores(("Tablets", 50), ("Electronics", 5))) is None

    def test_no_override_without_category(self):
        assert apply_family_override("ipad mini", _scores(("Electronics", 30))) is None

    def test_no_override_without_term(self):
        assert apply_family_override("galaxy tab s9", _scores(("Electronics", 30), ("Tablets", 5))) is None

    def test_custom_override_table(self):
        overrides = [FamilyOverride("kindle", "E-Readers", "Kindle", 88)]
        scores = _scores(("Electronics", 30), ("E-Readers", 2))
        assert apply_family_override("kindle paperwhite", scores, overrides) == ("E-Readers", "Kindle", 88)

    def test_empty_scores(self):
        assert apply_family_override("ipad", []) is None
