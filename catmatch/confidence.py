"""Confidence calculation for keyword-scored matches."""
from typing import Iterable, Optional, Sequence

from catmatch.scoring import CategoryScore
from catmatch.term_tables import PRODUCT_FAMILY_OVERRIDES, FamilyOverride
from catmatch.text import round_half_up

NAME_CEILING_FACTOR = 3
MAX_CONFIDENCE = 100


def compute_confidence(top_score: float, product_name: str) -> int:
    """Normalize a keyword score against the best score the name could reach.

    The ceiling is ``len(product_name) * 3``, i.e. every character of the name
    matched at the name-match weight.
    """
    max_possible = len(product_name or "") * NAME_CEILING_FACTOR
    if max_possible <= 0 or top_score <= 0:
        return 0
    return min(MAX_CONFIDENCE, round_half_up(top_score / max_possible * 100))


def find_family_override(normalized_name: str,
                         overrides: Iterable[FamilyOverride] = PRODUCT_FAMILY_OVERRIDES
                         ) -> Optional[FamilyOverride]:
    for override in overrides:
        if override.term in normalized_name:
            return override
    return None


def apply_family_override(normalized_name: str, scores: Sequence[CategoryScore],
                          overrides: Iterable[FamilyOverride] = PRODUCT_FAMILY_OVERRIDES
                          ) -> Optional[tuple[str, str, int]]:
    """Override the keyword winner for an undercounted product family.

    Fires when the name contains the family term, the top scored category is
    not the family's category, and that category is somewhere in ``scores``.
    Returns ``(category, subcategory, confidence)`` using the taxonomy's
    spelling of the category name.
    """
    if not scores:
        return None
    override = find_family_override(normalized_name, overrides)
    if override is None:
        return None

    wanted = override.category.lower()
    if scores[0].name.lower() == wanted:
        return None
    for entry in scores:
        if entry.name.lower() == wanted:
            return entry.name, override.subcategory, override.confidence
    return None
