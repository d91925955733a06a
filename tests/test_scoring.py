"""Tests for keyword-overlap scoring."""
from catmatch.scoring import keyword_score, score_category, score_taxonomy
from catmatch.taxonomy import Category, Subcategory, find_category
from catmatch.term_tables import DEFAULT_TERM_TABLE, TermTable, table_from_dict
from catmatch.text import ProductText

EMPTY_TABLE = TermTable()


class TestKeywordScore:
    def test_name_match_weighs_three(self):
        assert keyword_score("Home & Kitchen", "kitchen blender", "kitchen blender ") == 21

    def test_description_match_weighs_one(self):
        assert keyword_score("Home & Kitchen", "blender", "blender for any kitchen") == 7

    def test_short_keywords_ignored(self):
        assert keyword_score("TV & Audio", "tv stand", "tv stand ") == 0


class TestScoreCategory:
    def test_term_table_boost(self):
        table = table_from_dict({"blender": ("Home & Kitchen", "Kitchen Appliances", 90)})
        category = Category("c", "Home & Kitchen", (Subcategory("s", "Kitchen Appliances"),))
        score = score_category(ProductText("Kitchen Blender"), category, table)
        assert score.score == 21 + 45
        assert score.best_subcategory.name == "Kitchen Appliances"
        assert score.best_subcategory.score == 21 + 45

    def test_subcategory_tie_keeps_first(self):
        category = Category("c", "Home & Kitchen", (
            Subcategory("s1", "Kitchen Tools"),
            Subcategory("s2", "Kitchen Appliances"),
        ))
        score = score_category(ProductText("Kitchen Blender"), category, EMPTY_TABLE)
        assert score.best_subcategory.id == "s1"

    def test_zero_subcategory_score_is_none(self):
        category = Category("c", "Home & Kitchen", (Subcategory("s", "Decor"),))
        score = score_category(ProductText("Kitchen Blender"), category, EMPTY_TABLE)
        assert score.best_subcategory is None
        assert score.subcategory_name == ""


class TestScoreTaxonomy:
    def test_sorted_descending(self, taxonomy):
        scores = score_taxonomy(ProductText("Kitchen Blender 500W"), taxonomy, DEFAULT_TERM_TABLE)
        assert scores[0].name == "Home & Kitchen"
        assert scores[0].subcategory_name == "Kitchen Appliances"
        assert [s.score for s in scores] == sorted((s.score for s in scores), reverse=True)

    def test_ties_keep_taxonomy_order(self, taxonomy):
        scores = score_taxonomy(ProductText("Generic Plastic Widget"), taxonomy, DEFAULT_TERM_TABLE)
        assert all(s.score == 0 for s in scores)
        assert [s.name for s in scores] == [c.name for c in taxonomy]

    def test_empty_taxonomy(self):
        assert score_taxonomy(ProductText("anything"), [], DEFAULT_TERM_TABLE) == []

    def test_description_counts_less(self, taxonomy):
        in_name = score_taxonomy(ProductText("Kitchen Scale"), taxonomy, EMPTY_TABLE)[0]
        in_desc = score_taxonomy(ProductText("Digital Scale", "for the kitchen"), taxonomy, EMPTY_TABLE)[0]
        assert in_name.name == in_desc.name == find_category(taxonomy, "Home & Kitchen").name
        assert in_name.score == 3 * in_desc.score
