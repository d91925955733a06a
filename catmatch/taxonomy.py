"""Marketplace taxonomy model and loaders.

The matcher only ever sees canonical ``Category`` objects. Raw category
payloads from the marketplace API are inconsistent (``subcategories`` vs
``subCategories``, missing ids, missing names), so they are normalized here,
at the loading boundary, and nowhere else.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Optional

import httpx

logger = logging.getLogger(__name__)

UNCATEGORIZED = "Uncategorized"


@dataclass(frozen=True)
class Subcategory:
    id: str
    name: str


@dataclass(frozen=True)
class Category:
    id: str
    name: str
    subcategories: tuple[Subcategory, ...] = field(default_factory=tuple)

    def find_subcategory(self, name: str) -> Optional[Subcategory]:
        """Case-insensitive exact lookup of a subcategory by name."""
        wanted = (name or "").lower()
        for sub in self.subcategories:
            if sub.name.lower() == wanted:
                return sub
        return None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "subcategories": [{"id": s.id, "name": s.name} for s in self.subcategories],
        }


# ── Lookup helpers ─────────────────────────────────────────

def find_category(taxonomy: Iterable[Category], name: str) -> Optional[Category]:
    """Case-insensitive exact lookup of a main category by name."""
    wanted = (name or "").lower()
    for category in taxonomy:
        if category.name.lower() == wanted:
            return category
    return None


def category_pairs(taxonomy: Iterable[Category]) -> list[str]:
    """Every "Category > Subcategory" pair, in taxonomy order."""
    return [
        f"{category.name} > {sub.name}"
        for category in taxonomy
        for sub in category.subcategories
    ]


# ── Normalization ──────────────────────────────────────────

def _clean(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def normalize_taxonomy(raw: Any) -> list[Category]:
    """Turn a raw category payload into canonical ``Category`` objects.

    Accepts a list of dicts or ``{"categories": [...]}``. Entries that are not
    dicts are dropped; missing ids and names get generated placeholders.
    """
    if isinstance(raw, dict):
        raw = raw.get("categories", raw.get("data", []))
    if not isinstance(raw, list):
        return []

    categories = []
    for i, item in enumerate(raw):
        if not isinstance(item, dict):
            continue
        cat_id = _clean(item.get("id") or item.get("_id")) or f"category-{i + 1}"
        cat_name = _clean(item.get("name")) or f"Category {i + 1}"

        raw_subs = item.get("subcategories")
        if raw_subs is None:
            raw_subs = item.get("subCategories")
        if not isinstance(raw_subs, list):
            raw_subs = []

        subs = []
        for j, sub in enumerate(raw_subs):
            if isinstance(sub, str):
                sub = {"name": sub}
            if not isinstance(sub, dict):
                continue
            sub_name = _clean(sub.get("name"))
            if not sub_name:
                continue
            sub_id = _clean(sub.get("id") or sub.get("_id")) or f"{cat_id}-sub-{j + 1}"
            subs.append(Subcategory(id=sub_id, name=sub_name))

        categories.append(Category(id=cat_id, name=cat_name, subcategories=tuple(subs)))
    return categories


def load_taxonomy_file(path: str | Path) -> list[Category]:
    """Load a taxonomy from a JSON file."""
    with open(path, encoding="utf-8") as f:
        return normalize_taxonomy(json.load(f))


# ── Remote source ──────────────────────────────────────────

class TaxonomyClient:
    """Fetches the marketplace category tree."""

    def __init__(self, url: str, timeout: float = 30,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.url = url
        self.timeout = timeout
        self.transport = transport

    async def fetch(self) -> list[Category]:
        """Fetch and normalize the taxonomy. Failures yield an empty list."""
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                resp = await client.get(self.url, headers={"Cache-Control": "no-store"})
                resp.raise_for_status()
                data = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("Failed to fetch taxonomy from %s: %s", self.url, e)
            return []

        categories = normalize_taxonomy(data)
        logger.info("Loaded taxonomy: %d categories from %s", len(categories), self.url)
        return categories
