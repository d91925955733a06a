"""Platform row adapter.

Turns already-parsed Shopify / WooCommerce export rows into products, runs
them through a ``Categorizer`` and falls back to the export's own category
columns when the match is not confident enough.
"""
import csv
import io
import json
import re
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from bs4 import BeautifulSoup

from catmatch.categorizer import Categorizer, Decision
from catmatch.taxonomy import UNCATEGORIZED
from catmatch.text import ProductText


class Platform(str, Enum):
    SHOPIFY = "shopify"
    WOOCOMMERCE = "woocommerce"


DEFAULT_TITLE = "Default Title"
OPTION_COLUMNS = ("Option1 Value", "Option2 Value", "Option3 Value")

_CATEGORY_DELIMITERS = re.compile(r"[>\\/,]")


# ── Field extraction ───────────────────────────────────────

def html_to_text(html: Optional[str]) -> str:
    if not html:
        return ""
    text = BeautifulSoup(html, "html.parser").get_text(" ")
    return " ".join(text.split())


def _first(row: dict, *keys: str) -> str:
    for key in keys:
        value = row.get(key)
        if value:
            return str(value).strip()
    return ""


def extract_main_category(value: Optional[str]) -> str:
    """First non-empty segment of a "A > B / C" style category path."""
    for part in _CATEGORY_DELIMITERS.split(value or ""):
        if part.strip():
            return part.strip()
    return ""


def _option_values(row: dict) -> list[str]:
    values = []
    for col in OPTION_COLUMNS:
        value = (row.get(col) or "").strip()
        if value and value != DEFAULT_TITLE:
            values.append(value)
    return values


def product_text_from_row(row: dict, platform: Platform,
                          base: Optional[dict] = None) -> ProductText:
    """Name and description for one row.

    Shopify variant rows usually leave Title and Body empty, so those come
    from ``base`` (the first row of the product) when given.
    """
    if platform == Platform.SHOPIFY:
        base = base or row
        title = _first(row, "Title") or _first(base, "Title")
        name = " - ".join(v for v in [title] + _option_values(row) if v)
        body = _first(row, "Body (HTML)") or _first(base, "Body (HTML)")
        return ProductText(name, html_to_text(body))

    name = _first(row, "Name", "name", "product_name")
    description = html_to_text(_first(row, "Description", "description"))
    return ProductText(name, description)


def fallback_category(row: dict, platform: Platform) -> tuple[str, str]:
    """Category the export itself carries, used below the review threshold."""
    if platform == Platform.SHOPIFY:
        main = extract_main_category(row.get("Product Category"))
        sub = _first(row, "Type")
    else:
        main = extract_main_category(_first(row, "Categories", "categories"))
        sub = _first(row, "Tags", "tags")
    return main or UNCATEGORIZED, sub or UNCATEGORIZED


def expand_shopify_rows(rows: list[dict]) -> list[tuple[dict, ProductText]]:
    """One product per Shopify handle, or one per variant when it has real options.

    Rows without a Handle are skipped, as are variant rows whose only option
    value is the "Default Title" placeholder.
    """
    groups: dict[str, list[dict]] = {}
    for row in rows:
        handle = (row.get("Handle") or "").strip()
        if handle:
            groups.setdefault(handle, []).append(row)

    products = []
    for group in groups.values():
        base = group[0]
        if not any(_option_values(r) for r in group):
            products.append((base, product_text_from_row(base, Platform.SHOPIFY)))
            continue
        for row in group:
            if not _option_values(row):
                continue
            products.append((row, product_text_from_row(row, Platform.SHOPIFY, base=base)))
    return products


# ── Batch ──────────────────────────────────────────────────

@dataclass
class RowResult:
    name: str
    main_category: str
    sub_category: str
    confidence: int
    needs_review: bool
    source: str
    used_fallback: bool = False

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "mainCategory": self.main_category,
            "subCategory": self.sub_category,
            "confidence": self.confidence,
            "needsReview": self.needs_review,
        }


@dataclass
class RowBatchResult:
    rows: list[RowResult] = field(default_factory=list)
    elapsed_ms: int = 0

    @property
    def matched(self) -> int:
        return sum(1 for r in self.rows if not r.needs_review)

    @property
    def needs_review(self) -> int:
        return sum(1 for r in self.rows if r.needs_review)

    @property
    def fallbacks(self) -> int:
        return sum(1 for r in self.rows if r.used_fallback)

    def summary(self) -> str:
        lines = [
            "Categorization complete",
            f"   Products: {len(self.rows)}",
            f"   Matched: {self.matched}",
            f"   Needs review: {self.needs_review}",
            f"   From export columns: {self.fallbacks}",
            f"   Time: {self.elapsed_ms / 1000:.1f}s",
        ]
        return "\n".join(lines)

    def to_json(self) -> str:
        data = {
            "summary": {
                "products": len(self.rows),
                "matched": self.matched,
                "needs_review": self.needs_review,
                "fallbacks": self.fallbacks,
                "elapsed_ms": self.elapsed_ms,
            },
            "rows": [r.to_dict() for r in self.rows],
        }
        return json.dumps(data, ensure_ascii=False, indent=2)


def _row_result(row: dict, product: ProductText, decision: Decision,
                platform: Platform) -> RowResult:
    r = decision.result
    if not decision.needs_review:
        return RowResult(product.name, r.main_category, r.sub_category, r.confidence,
                         False, decision.source.value)
    main, sub = fallback_category(row, platform)
    return RowResult(product.name, main, sub, r.confidence, True, decision.source.value,
                     used_fallback=True)


def categorize_rows(rows: list[dict], platform: Platform, categorizer: Categorizer,
                    max_workers: Optional[int] = None, record: bool = False) -> RowBatchResult:
    """Categorize export rows. With ``record``, confident decisions go to history."""
    start = time.time()
    platform = Platform(platform)
    if platform == Platform.SHOPIFY:
        products = expand_shopify_rows(rows)
    else:
        products = [(row, product_text_from_row(row, platform)) for row in rows]

    decisions = categorizer.categorize_batch([p for _, p in products], max_workers=max_workers)
    if record:
        for (_, product), decision in zip(products, decisions):
            if not decision.needs_review:
                categorizer.record_decision(product, decision)

    result = RowBatchResult(rows=[
        _row_result(row, product, decision, platform)
        for (row, product), decision in zip(products, decisions)
    ])
    result.elapsed_ms = int((time.time() - start) * 1000)
    return result


# ── Input ──────────────────────────────────────────────────

def parse_rows(text: str) -> list[dict]:
    """Rows from a JSON array (or ``{"rows": [...]}``) or CSV text with a header."""
    stripped = text.strip()
    if stripped.startswith("[") or stripped.startswith("{"):
        data = json.loads(stripped)
        if isinstance(data, dict):
            data = data.get("rows", data.get("products", []))
        if not isinstance(data, list):
            raise ValueError("JSON must be an array or contain a 'rows' array")
        return [row for row in data if isinstance(row, dict)]
    return [dict(row) for row in csv.DictReader(io.StringIO(stripped))]
