"""Men's / women's disambiguation for apparel subcategories."""
import re
from enum import Enum
from typing import Iterable

MEN_PATTERN = re.compile(r"\bmen'?s?\b|\bman'?s?\b|\bmale\b", re.IGNORECASE)
WOMEN_PATTERN = re.compile(r"\bwomen'?s?\b|\bwoman'?s?\b|\bfemale\b|\bladies\b", re.IGNORECASE)

APPAREL_CATEGORIES = ("Fashion", "Apparel & Accessories")


class Gender(str, Enum):
    MEN = "men"
    WOMEN = "women"
    UNKNOWN = "unknown"


PREFIXES = {
    Gender.MEN: "Men's ",
    Gender.WOMEN: "Women's ",
}


def detect_gender(text: str) -> Gender:
    """Gender cue in the text; both or neither gives UNKNOWN."""
    men = bool(MEN_PATTERN.search(text or ""))
    women = bool(WOMEN_PATTERN.search(text or ""))
    if men and not women:
        return Gender.MEN
    if women and not men:
        return Gender.WOMEN
    return Gender.UNKNOWN


def has_gender_qualifier(subcategory: str) -> bool:
    return bool(MEN_PATTERN.search(subcategory or "") or WOMEN_PATTERN.search(subcategory or ""))


def is_apparel(category: str, apparel_categories: Iterable[str] = APPAREL_CATEGORIES) -> bool:
    wanted = (category or "").lower()
    return any(wanted == c.lower() for c in apparel_categories)


def apply_gender_prefix(category: str, subcategory: str, text: str,
                        apparel_categories: Iterable[str] = APPAREL_CATEGORIES) -> str:
    """Prefix an apparel subcategory with "Men's " or "Women's ".

    Leaves the subcategory alone for non-apparel categories, empty
    subcategories, subcategories that already carry a gender, and text with
    no (or conflicting) gender cues.
    """
    if not subcategory or not is_apparel(category, apparel_categories):
        return subcategory
    if has_gender_qualifier(subcategory):
        return subcategory
    gender = detect_gender(text)
    if gender is Gender.UNKNOWN:
        return subcategory
    return PREFIXES[gender] + subcategory
