"""Keyword-overlap scoring.

Fallback used when no term-table hit clears the direct-match floor. Every
category (and each of its subcategories) is scored by how many of its name
keywords show up in the product text:

- keyword in the normalized product name: ``len(keyword) * 3``
- otherwise keyword anywhere in name + description: ``len(keyword)``
- each product term that partially overlaps a term-table phrase mapped to
  this category (or subcategory): ``weight / 2``
"""
from dataclasses import dataclass
from typing import Optional, Sequence

from catmatch.taxonomy import Category
from catmatch.term_tables import TermTable
from catmatch.text import ProductText, extract_terms, normalize_text

NAME_MATCH_FACTOR = 3
TEXT_MATCH_FACTOR = 1
TERM_BOOST_FACTOR = 0.5


@dataclass(frozen=True)
class SubcategoryScore:
    id: str
    name: str
    score: float


@dataclass(frozen=True)
class CategoryScore:
    category: Category
    score: float
    best_subcategory: Optional[SubcategoryScore] = None

    @property
    def name(self) -> str:
        return self.category.name

    @property
    def subcategory_name(self) -> str:
        return self.best_subcategory.name if self.best_subcategory else ""


def keyword_score(label: str, normalized_name: str, search_text: str) -> float:
    """Score a category or subcategory name against the product text."""
    score = 0
    for keyword in extract_terms(normalize_text(label)):
        if keyword in normalized_name:
            score += len(keyword) * NAME_MATCH_FACTOR
        elif keyword in search_text:
            score += len(keyword) * TEXT_MATCH_FACTOR
    return score


def _overlaps(term: str, phrase: str) -> bool:
    return term in phrase or phrase in term


def _category_boost(category_name: str, terms: Sequence[str], table: TermTable) -> float:
    wanted = category_name.lower()
    boost = 0.0
    for term in terms:
        for m in table:
            if m.category.lower() == wanted and _overlaps(term, m.phrase):
                boost += m.weight * TERM_BOOST_FACTOR
    return boost


def _subcategory_boost(subcategory_name: str, terms: Sequence[str], table: TermTable) -> float:
    wanted = subcategory_name.lower()
    boost = 0.0
    for term in terms:
        for m in table:
            if m.subcategory and m.subcategory.lower() == wanted and _overlaps(term, m.phrase):
                boost += m.weight * TERM_BOOST_FACTOR
    return boost


def score_category(product: ProductText, category: Category, table: TermTable) -> CategoryScore:
    name = product.normalized_name
    search_text = product.search_text
    terms = extract_terms(name)

    score = keyword_score(category.name, name, search_text)
    score += _category_boost(category.name, terms, table)

    best: Optional[SubcategoryScore] = None
    for sub in category.subcategories:
        sub_score = keyword_score(sub.name, name, search_text)
        sub_score += _subcategory_boost(sub.name, terms, table)
        if sub_score > (best.score if best else 0):
            best = SubcategoryScore(id=sub.id, name=sub.name, score=sub_score)

    return CategoryScore(category=category, score=score, best_subcategory=best)


def score_taxonomy(product: ProductText, taxonomy: Sequence[Category],
                   table: TermTable) -> list[CategoryScore]:
    """Score every category, highest first. Equal scores keep taxonomy order."""
    scores = [score_category(product, category, table) for category in taxonomy]
    return sorted(scores, key=lambda s: -s.score)
