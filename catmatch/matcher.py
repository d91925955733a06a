"""Decision orchestrator: the single public entry point for local matching.

    START -> DIRECT_MATCH_ATTEMPTED -> HIGH_CONFIDENCE_DIRECT -> DONE
                                    -> KEYWORD_SCORING        -> DONE

A direct term-table hit at or above the floor is resolved against the real
taxonomy; everything else goes through keyword scoring. The matcher keeps no
state between calls.
"""
import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from catmatch.confidence import apply_family_override, compute_confidence, find_family_override
from catmatch.direct_match import DirectMatch, find_direct_match
from catmatch.gender import APPAREL_CATEGORIES, apply_gender_prefix
from catmatch.scoring import score_taxonomy
from catmatch.taxonomy import Category, find_category
from catmatch.term_tables import DEFAULT_TERM_TABLE, PRODUCT_FAMILY_OVERRIDES, FamilyOverride, TermTable
from catmatch.text import ProductText, extract_terms

logger = logging.getLogger(__name__)

DEFAULT_DIRECT_MATCH_FLOOR = 70

EXACT_SUBCATEGORY_CONFIDENCE = 95
PARTIAL_SUBCATEGORY_CONFIDENCE = 85
CATEGORY_ONLY_CONFIDENCE = 80


@dataclass(frozen=True)
class MatchResult:
    main_category: str = ""
    sub_category: str = ""
    confidence: int = 0

    @property
    def is_match(self) -> bool:
        return bool(self.main_category) and self.confidence > 0

    def to_dict(self) -> dict:
        return {
            "mainCategory": self.main_category,
            "subCategory": self.sub_category,
            "confidence": self.confidence,
        }


NO_MATCH = MatchResult()


# ── Taxonomy resolution ────────────────────────────────────

def resolve_category(taxonomy: Sequence[Category], name: str) -> Optional[Category]:
    """Exact case-insensitive name first, then substring overlap either way."""
    exact = find_category(taxonomy, name)
    if exact is not None:
        return exact
    wanted = (name or "").lower()
    if not wanted:
        return None
    for category in taxonomy:
        candidate = category.name.lower()
        if candidate and (wanted in candidate or candidate in wanted):
            return category
    return None


def _overlapping_subcategory(category: Category, name: str):
    wanted = name.lower()
    for sub in category.subcategories:
        candidate = sub.name.lower()
        if wanted in candidate or candidate in wanted:
            return sub
    return None


class CategoryMatcher:
    """Local heuristic matcher over a term table and a taxonomy."""

    def __init__(self, term_table: TermTable = DEFAULT_TERM_TABLE,
                 direct_match_floor: float = DEFAULT_DIRECT_MATCH_FLOOR,
                 apparel_categories: Iterable[str] = APPAREL_CATEGORIES,
                 family_overrides: Iterable[FamilyOverride] = PRODUCT_FAMILY_OVERRIDES):
        self.term_table = term_table
        self.direct_match_floor = direct_match_floor
        self.apparel_categories = tuple(apparel_categories)
        self.family_overrides = tuple(family_overrides)

    def match(self, name: str, description: str,
              taxonomy: Optional[Sequence[Category]]) -> MatchResult:
        if taxonomy is None:
            raise TypeError("taxonomy must be a list of categories, not None")
        if not taxonomy:
            return NO_MATCH

        product = ProductText(name or "", description or "")
        terms = extract_terms(product.normalized_name)

        direct = find_direct_match(terms, product.search_text, self.term_table)
        if direct is not None and direct.weight >= self.direct_match_floor:
            result = self._resolve_direct(direct, product, taxonomy)
            if result is not None:
                logger.debug("Direct match %r (%s) -> %s", direct.phrase, direct.kind.value, result)
                return result
            logger.debug("Direct match %r has no category in taxonomy", direct.phrase)

        return self._score_keywords(product, taxonomy)

    def _resolve_direct(self, direct: DirectMatch, product: ProductText,
                        taxonomy: Sequence[Category]) -> Optional[MatchResult]:
        category = resolve_category(taxonomy, direct.category)
        if category is None:
            return None

        subcategory = apply_gender_prefix(
            direct.category, direct.subcategory, product.raw_text, self.apparel_categories)

        if subcategory:
            sub = category.find_subcategory(subcategory)
            if sub is not None:
                return MatchResult(category.name, sub.name, EXACT_SUBCATEGORY_CONFIDENCE)
            sub = _overlapping_subcategory(category, subcategory)
            if sub is not None:
                return MatchResult(category.name, sub.name, PARTIAL_SUBCATEGORY_CONFIDENCE)

        override = find_family_override(product.normalized_name, self.family_overrides)
        if override is not None and override.category.lower() == category.name.lower():
            return MatchResult(category.name, override.subcategory, override.confidence)

        return MatchResult(category.name, subcategory, CATEGORY_ONLY_CONFIDENCE)

    def _score_keywords(self, product: ProductText, taxonomy: Sequence[Category]) -> MatchResult:
        scores = score_taxonomy(product, taxonomy, self.term_table)

        top = scores[0]
        if top.score <= 0:
            return NO_MATCH

        override = apply_family_override(product.normalized_name, scores, self.family_overrides)
        if override is not None:
            return MatchResult(*override)

        confidence = compute_confidence(top.score, product.name)
        if confidence <= 0:
            return NO_MATCH
        return MatchResult(top.name, top.subcategory_name, confidence)


def match_category(name: str, description: str, taxonomy: Optional[Sequence[Category]],
                   matcher: Optional[CategoryMatcher] = None) -> MatchResult:
    """Match one product with the default matcher."""
    return (matcher or _default_matcher).match(name, description, taxonomy)


_default_matcher = CategoryMatcher()
