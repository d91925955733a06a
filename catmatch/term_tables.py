"""Term-mapping tables.

Static dictionaries that map known product-type phrases to a suggested
(category, subcategory, weight). The general table covers tech and lifestyle
products, the fashion table covers apparel, footwear and accessories; both
are merged into one ``TermTable`` for lookups.

Weights are on a 0-100 scale. Short fashion keys that are also common
substrings of unrelated words ("bra", "tie", "ring", ...) carry a weight below
the direct-match floor once the 0.8 partial-match penalty is applied, so they
only win on an exact term match.
"""
from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, Optional

from catmatch.text import normalize_text

FASHION_CATEGORY = "Fashion"

# phrase -> (category, subcategory, weight)
GENERAL_TERMS = {
    # Tablets
    "ipad": ("Tablets", "iPad", 100),
    "tablet": ("Tablets", "", 80),
    "galaxy tab": ("Tablets", "Samsung", 90),
    "surface": ("Tablets", "Microsoft", 90),
    # Phones
    "iphone": ("Mobile Phones", "iPhone", 100),
    "galaxy": ("Mobile Phones", "Samsung", 90),
    "pixel": ("Mobile Phones", "Google", 90),
    "smartphone": ("Mobile Phones", "", 80),
    "phone": ("Mobile Phones", "", 70),
    # Laptops
    "macbook": ("Laptops", "Apple", 100),
    "laptop": ("Laptops", "", 80),
    "notebook": ("Laptops", "", 70),
    "chromebook": ("Laptops", "Chrome OS", 90),
    # Accessories
    "case": ("Accessories", "", 60),
    "cover": ("Accessories", "", 60),
    "charger": ("Accessories", "", 70),
    "cable": ("Accessories", "", 60),
    "headphone": ("Accessories", "Audio", 80),
    "earphone": ("Accessories", "Audio", 80),
    "airpod": ("Accessories", "Audio", 90),
    # Wearables
    "watch": ("Wearable Tech", "", 70),
    "smartwatch": ("Wearable Tech", "", 90),
    "apple watch": ("Wearable Tech", "Apple", 100),
    "fitbit": ("Wearable Tech", "Fitness Trackers", 100),
    "fitness tracker": ("Wearable Tech", "Fitness Trackers", 90),
    # Gaming
    "playstation": ("Gaming", "PlayStation", 100),
    "ps5": ("Gaming", "PlayStation", 100),
    "ps4": ("Gaming", "PlayStation", 100),
    "xbox": ("Gaming", "Xbox", 100),
    "nintendo": ("Gaming", "Nintendo", 100),
    "switch": ("Gaming", "Nintendo", 90),
    "controller": ("Gaming", "Accessories", 80),
    "gaming": ("Gaming", "", 70),
    # PC components
    "gpu": ("PC Gaming", "Graphics Cards", 100),
    "graphics card": ("PC Gaming", "Graphics Cards", 100),
    "cpu": ("PC Gaming", "Processors", 100),
    "processor": ("PC Gaming", "Processors", 90),
    "ram": ("PC Gaming", "Memory", 85),
    # Storage
    "ssd": ("Data Storage", "SSD", 100),
    "hdd": ("Data Storage", "HDD", 100),
    "hard drive": ("Data Storage", "", 90),
    # Kitchen
    "blender": ("Kitchen & Dining", "Small Appliances", 90),
    "mixer": ("Kitchen & Dining", "Small Appliances", 90),
    "toaster": ("Kitchen & Dining", "Small Appliances", 90),
    "coffee": ("Kitchen & Dining", "Coffee & Tea", 90),
    # Health & beauty
    "skincare": ("Health & Beauty", "Skin Care", 90),
    "makeup": ("Health & Beauty", "Makeup", 90),
    "hair": ("Health & Beauty", "Hair Care", 85),
    "fragrance": ("Health & Beauty", "Fragrances", 90),
}

FASHION_TERMS = {
    # Headwear
    "bucket hat": (FASHION_CATEGORY, "Hats", 95),
    "cadet cap": (FASHION_CATEGORY, "Hats", 95),
    "baseball cap": (FASHION_CATEGORY, "Hats", 95),
    "stone bucket": (FASHION_CATEGORY, "Hats", 90),
    "cap": (FASHION_CATEGORY, "Hats", 85),
    "beanie": (FASHION_CATEGORY, "Hats", 90),
    "hat": (FASHION_CATEGORY, "Hats", 85),
    "headband": (FASHION_CATEGORY, "Hair Accessories", 90),
    # Tops
    "tank top": (FASHION_CATEGORY, "Tank Tops", 95),
    "tank": (FASHION_CATEGORY, "Tank Tops", 85),
    "tshirt": (FASHION_CATEGORY, "T-Shirts", 90),
    "tee": (FASHION_CATEGORY, "T-Shirts", 85),
    "long sleeve shirt": (FASHION_CATEGORY, "Casual Shirts", 95),
    "resort shirt": (FASHION_CATEGORY, "Casual Shirts", 95),
    "check shirt": (FASHION_CATEGORY, "Casual Shirts", 95),
    "shirt": (FASHION_CATEGORY, "Shirts", 90),
    "sweatshirt": (FASHION_CATEGORY, "Sweatshirts", 95),
    "hoodie": (FASHION_CATEGORY, "Hoodies", 90),
    "polo": (FASHION_CATEGORY, "Polo Shirts", 90),
    "blouse": (FASHION_CATEGORY, "Blouses", 90),
    "top": (FASHION_CATEGORY, "Tops", 80),
    "tube": (FASHION_CATEGORY, "Accessories", 80),
    # Bottoms
    "linen shorts": (FASHION_CATEGORY, "Shorts", 95),
    "chill linen": (FASHION_CATEGORY, "Shorts", 95),
    "shorts": (FASHION_CATEGORY, "Shorts", 90),
    "jeans": (FASHION_CATEGORY, "Jeans", 90),
    "pants": (FASHION_CATEGORY, "Pants", 90),
    "trousers": (FASHION_CATEGORY, "Pants", 90),
    "chinos": (FASHION_CATEGORY, "Pants", 90),
    "skirt": (FASHION_CATEGORY, "Skirts", 90),
    "leggings": (FASHION_CATEGORY, "Leggings", 90),
    # Swimwear
    "swimwear": (FASHION_CATEGORY, "Swimwear", 95),
    "swimming": (FASHION_CATEGORY, "Swimwear", 90),
    "bikini": (FASHION_CATEGORY, "Swimwear", 90),
    "trunk": (FASHION_CATEGORY, "Swimwear", 85),
    "swim": (FASHION_CATEGORY, "Swimwear", 85),
    # Footwear
    "bit loafer": (FASHION_CATEGORY, "Loafers", 95),
    "fringe loafers": (FASHION_CATEGORY, "Loafers", 95),
    "loafer": (FASHION_CATEGORY, "Loafers", 95),
    "loafers": (FASHION_CATEGORY, "Loafers", 95),
    "shoes": (FASHION_CATEGORY, "Shoes", 90),
    "sneakers": (FASHION_CATEGORY, "Sneakers", 90),
    "boots": (FASHION_CATEGORY, "Boots", 90),
    "sandals": (FASHION_CATEGORY, "Sandals", 90),
    "slippers": (FASHION_CATEGORY, "Slippers", 90),
    # Accessories
    "belt": (FASHION_CATEGORY, "Belts", 90),
    "wallet": (FASHION_CATEGORY, "Wallets", 90),
    "backpack": (FASHION_CATEGORY, "Backpacks", 90),
    "bag": (FASHION_CATEGORY, "Bags", 85),
    "purse": (FASHION_CATEGORY, "Purses", 90),
    "scarf": (FASHION_CATEGORY, "Scarves", 90),
    "gloves": (FASHION_CATEGORY, "Gloves", 90),
    "socks": (FASHION_CATEGORY, "Socks", 90),
    "tie": (FASHION_CATEGORY, "Ties", 85),
    "jewelry": (FASHION_CATEGORY, "Jewelry", 90),
    "necklace": (FASHION_CATEGORY, "Necklaces", 90),
    "bracelet": (FASHION_CATEGORY, "Bracelets", 90),
    "earrings": (FASHION_CATEGORY, "Earrings", 90),
    "ring": (FASHION_CATEGORY, "Rings", 85),
    "sunglasses": (FASHION_CATEGORY, "Sunglasses", 90),
    # Outerwear
    "jacket": (FASHION_CATEGORY, "Jackets & Coats", 90),
    "coat": (FASHION_CATEGORY, "Jackets & Coats", 85),
    "overcoat": (FASHION_CATEGORY, "Jackets & Coats", 90),
    "puffer": (FASHION_CATEGORY, "Jackets & Coats", 90),
    "blazer": (FASHION_CATEGORY, "Blazers", 90),
    "cardigan": (FASHION_CATEGORY, "Cardigans", 90),
    "sweater": (FASHION_CATEGORY, "Sweaters", 90),
    "vest": (FASHION_CATEGORY, "Vests", 85),
    # Dresses
    "maxi dress": (FASHION_CATEGORY, "Maxi Dresses", 95),
    "mini dress": (FASHION_CATEGORY, "Mini Dresses", 95),
    "dress": (FASHION_CATEGORY, "Dresses", 90),
    "gown": (FASHION_CATEGORY, "Gowns", 90),
    # Underwear
    "underwear": (FASHION_CATEGORY, "Underwear", 90),
    "boxers": (FASHION_CATEGORY, "Boxers", 90),
    "briefs": (FASHION_CATEGORY, "Briefs", 90),
    "bra": (FASHION_CATEGORY, "Bras", 85),
    "panties": (FASHION_CATEGORY, "Panties", 90),
    "lingerie": (FASHION_CATEGORY, "Lingerie", 90),
    # Store-specific product lines
    "sovereign bit": (FASHION_CATEGORY, "Loafers", 95),
    "savanna fringe": (FASHION_CATEGORY, "Loafers", 95),
    "jacnorman contrast": (FASHION_CATEGORY, "Swimwear", 95),
    "sovereign": (FASHION_CATEGORY, "Loafers", 90),
    "savanna": (FASHION_CATEGORY, "Loafers", 90),
    "kalmar": (FASHION_CATEGORY, "Tank Tops", 90),
    "stanford": (FASHION_CATEGORY, "Hats", 85),
    "jacnorman": (FASHION_CATEGORY, "Swimwear", 90),
    "jacsimon": (FASHION_CATEGORY, "Belts", 90),
    "invalli": (FASHION_CATEGORY, "Sweatshirts", 90),
    "jprbl": (FASHION_CATEGORY, "Shirts", 90),
}


@dataclass(frozen=True)
class TermMapping:
    phrase: str
    category: str
    subcategory: str = ""
    weight: float = 0

    @property
    def is_multi_word(self) -> bool:
        return " " in self.phrase


@dataclass(frozen=True)
class FamilyOverride:
    """A product family the keyword scorer systematically undercounts."""
    term: str
    category: str
    subcategory: str
    confidence: int = 90


PRODUCT_FAMILY_OVERRIDES = (
    FamilyOverride(term="ipad", category="Tablets", subcategory="iPad", confidence=90),
)


class TermTable:
    """Immutable phrase -> TermMapping lookup.

    Phrases are normalized the same way product text is, so "t-shirt" is
    stored as the two-word phrase "t shirt". When two entries normalize to the
    same phrase the first one wins.
    """

    def __init__(self, mappings: Iterable[TermMapping] = ()):
        entries: dict[str, TermMapping] = {}
        for m in mappings:
            phrase = normalize_text(m.phrase)
            if not phrase or phrase in entries:
                continue
            entries[phrase] = TermMapping(phrase, m.category, m.subcategory or "", m.weight)
        self._entries = entries
        self._multi_word = tuple(sorted(
            (m for m in entries.values() if m.is_multi_word),
            key=lambda m: -len(m.phrase),
        ))
        self._single_word = tuple(m for m in entries.values() if not m.is_multi_word)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[TermMapping]:
        return iter(self._entries.values())

    def __contains__(self, phrase: str) -> bool:
        return phrase in self._entries

    def get(self, phrase: str) -> Optional[TermMapping]:
        return self._entries.get(phrase)

    @property
    def multi_word(self) -> tuple[TermMapping, ...]:
        """Multi-word mappings, longest phrase first."""
        return self._multi_word

    @property
    def single_word(self) -> tuple[TermMapping, ...]:
        return self._single_word

    def for_category(self, category: str) -> list[TermMapping]:
        wanted = category.lower()
        return [m for m in self._entries.values() if m.category.lower() == wanted]

    def merged_with(self, *others: "TermTable") -> "TermTable":
        """New table with this table's entries first, then the others'."""
        mappings = list(self)
        for other in others:
            mappings.extend(other)
        return TermTable(mappings)


def table_from_dict(terms: dict) -> TermTable:
    return TermTable(
        TermMapping(phrase, category, subcategory, weight)
        for phrase, (category, subcategory, weight) in terms.items()
    )


def load_term_table(path: str | Path) -> TermTable:
    """Load extra mappings from a JSON file.

    The file holds a list of ``{"phrase", "category", "subcategory", "weight"}``
    objects; ``subcategory`` may be omitted.
    """
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, list):
        raise ValueError(f"Term table {path} must be a JSON array")

    mappings = []
    for item in data:
        weight = float(item.get("weight", 0))
        if not 0 <= weight <= 100:
            raise ValueError(f"Weight for {item.get('phrase')!r} must be between 0 and 100")
        mappings.append(TermMapping(
            phrase=item["phrase"],
            category=item["category"],
            subcategory=item.get("subcategory") or "",
            weight=weight,
        ))
    return TermTable(mappings)


GENERAL_TABLE = table_from_dict(GENERAL_TERMS)
FASHION_TABLE = table_from_dict(FASHION_TERMS)
DEFAULT_TERM_TABLE = GENERAL_TABLE.merged_with(FASHION_TABLE)
