"""Text normalization shared by every matching stage."""
import re
from dataclasses import dataclass
from typing import Optional

_NON_WORD = re.compile(r"[^\w\s]")
_WHITESPACE = re.compile(r"\s+")

MIN_TERM_LENGTH = 3


@dataclass(frozen=True)
class ProductText:
    """What the matcher needs to know about a product."""
    name: str
    description: str = ""

    @property
    def normalized_name(self) -> str:
        return normalize_text(self.name)

    @property
    def search_text(self) -> str:
        """Normalized name and description joined by a single space."""
        return f"{self.normalized_name} {normalize_text(self.description)}"

    @property
    def raw_text(self) -> str:
        return f"{self.name or ''} {self.description or ''}"


def normalize_text(text: Optional[str]) -> str:
    """Lowercase, turn punctuation into spaces and collapse whitespace."""
    if not text:
        return ""
    text = _NON_WORD.sub(" ", text.lower())
    return _WHITESPACE.sub(" ", text).strip()


def extract_terms(normalized: str) -> list[str]:
    """Significant terms of an already-normalized string (length > 2)."""
    return [t for t in normalized.split() if len(t) >= MIN_TERM_LENGTH]


def round_half_up(value: float) -> int:
    # half-up, unlike round()
    return int(value + 0.5) if value >= 0 else -int(-value + 0.5)
