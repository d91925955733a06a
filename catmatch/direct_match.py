"""Direct and partial term-table matching."""
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

from catmatch.term_tables import TermTable

PARTIAL_MATCH_FACTOR = 0.8


def _starts_at_word(text: str, phrase: str) -> bool:
    return f" {phrase}" in f" {text}"


class MatchKind(str, Enum):
    MULTI_WORD = "multi_word"
    EXACT = "exact"
    PARTIAL = "partial"


@dataclass(frozen=True)
class DirectMatch:
    category: str
    subcategory: str
    weight: float
    phrase: str
    kind: MatchKind


def find_direct_match(product_terms: Sequence[str], search_text: str,
                      table: TermTable) -> Optional[DirectMatch]:
    """Find the best term-table hit for a product.

    Multi-word phrases starting at a word in ``search_text`` win first
    (longest phrase first). Next comes the first name term that is an exact table key.
    Last, partial matches: a single-word key and a name term where either
    contains the other, scored at ``weight * 0.8``; the highest score wins and
    ties keep the earliest pair.
    """
    for m in table.multi_word:
        if _starts_at_word(search_text, m.phrase):
            return DirectMatch(m.category, m.subcategory, m.weight, m.phrase, MatchKind.MULTI_WORD)

    for term in product_terms:
        m = table.get(term)
        if m is not None:
            return DirectMatch(m.category, m.subcategory, m.weight, m.phrase, MatchKind.EXACT)

    best: Optional[DirectMatch] = None
    for m in table.single_word:
        for term in product_terms:
            if term in m.phrase or m.phrase in term:
                score = m.weight * PARTIAL_MATCH_FACTOR
                if best is None or score > best.weight:
                    best = DirectMatch(m.category, m.subcategory, score, m.phrase, MatchKind.PARTIAL)
    return best
