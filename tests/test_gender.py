"""Tests for men's / women's disambiguation."""
from catmatch.gender import Gender, apply_gender_prefix, detect_gender, has_gender_qualifier


class TestDetectGender:
    def test_men(self):
        assert detect_gender("Men's Oxford Shirt") == Gender.MEN
        assert detect_gender("shirt for the modern man") == Gender.MEN
        assert detect_gender("MALE fit") == Gender.MEN

    def test_women(self):
        assert detect_gender("Womens Summer Dress") == Gender.WOMEN
        assert detect_gender("Ladies blouse") == Gender.WOMEN
        assert detect_gender("female cut") == Gender.WOMEN

    def test_women_does_not_imply_men(self):
        assert detect_gender("women") == Gender.WOMEN

    def test_word_boundaries(self):
        assert detect_gender("Manual coffee grinder") == Gender.UNKNOWN
        assert detect_gender("Mental health journal") == Gender.UNKNOWN

    def test_both_or_neither(self):
        assert detect_gender("Unisex tee for men and women") == Gender.UNKNOWN
        assert detect_gender("Plain tee") == Gender.UNKNOWN
        assert detect_gender("") == Gender.UNKNOWN


class TestApplyGenderPrefix:
    def test_men_prefix(self):
        assert apply_gender_prefix("Fashion", "Shirts", "Men's cotton shirt") == "Men's Shirts"

    def test_women_prefix(self):
        assert apply_gender_prefix("fashion", "Dresses", "Ladies summer dress") == "Women's Dresses"

    def test_non_apparel_untouched(self):
        assert apply_gender_prefix("Health & Beauty", "Fragrances", "Men's cologne") == "Fragrances"

    def test_ambiguous_untouched(self):
        assert apply_gender_prefix("Fashion", "Socks", "Socks for men and women") == "Socks"

    def test_existing_qualifier_untouched(self):
        assert has_gender_qualifier("Women's Dresses")
        assert apply_gender_prefix("Fashion", "Women's Dresses", "Men's dress") == "Women's Dresses"

    def test_other_gender_words_count_as_qualifiers(self):
        assert apply_gender_prefix("Fashion", "Ladies Tops", "Women's blouse") == "Ladies Tops"
        assert apply_gender_prefix("Fashion", "Male Grooming", "Men's beard kit") == "Male Grooming"
        assert apply_gender_prefix("Fashion", "Female Fit", "for men") == "Female Fit"

    def test_empty_subcategory(self):
        assert apply_gender_prefix("Fashion", "", "Men's shirt") == ""

    def test_idempotent(self):
        text = "Men's Slim Fit Shirt"
        once = apply_gender_prefix("Fashion", "Shirts", text)
        twice = apply_gender_prefix("Fashion", once, text)
        assert once == twice == "Men's Shirts"

    def test_custom_apparel_categories(self):
        assert apply_gender_prefix("Clothing", "Jeans", "mens jeans", apparel_categories=["Clothing"]) == "Men's Jeans"
