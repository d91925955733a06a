"""Redis-backed categorization history and user corrections."""
import json
import logging
import threading
import time
from collections import Counter
from typing import Callable, Iterable, Optional

import redis

from catmatch.matcher import MatchResult
from catmatch.text import extract_terms, normalize_text, round_half_up

logger = logging.getLogger(__name__)

MAPPINGS_KEY = "catmatch:mappings"
CORRECTIONS_KEY = "catmatch:corrections"

SIMILAR_LIMIT = 5
MIN_TERM_OVERLAP = 0.5
DEFAULT_STORED_CONFIDENCE = 50
VERIFIED_WEIGHT = 1.5


def correction_key(main_category: str, sub_category: str) -> str:
    return f"{main_category}|{sub_category}"


def term_overlap(query_terms: Iterable[str], stored_name: str) -> float:
    """Share of the query's significant terms that appear in ``stored_name``."""
    query = set(query_terms)
    if not query:
        return 0.0
    stored = set(extract_terms(normalize_text(stored_name)))
    return len(query & stored) / len(query)


class HistoryStore:
    """Past categorization decisions and corrections (Redis, falls back to in-memory)."""

    def __init__(self, redis_url: str = "redis://localhost:6379/0", max_history: int = 5000,
                 retries: int = 3, backoff: float = 0.5):
        self.max_history = max_history
        self.retries = retries
        self.backoff = backoff
        self.redis = None
        self._memory_mappings: list[dict] = []
        self._memory_corrections: list[dict] = []
        self._lock = threading.Lock()
        try:
            self.redis = redis.from_url(redis_url, decode_responses=True)
            self.redis.ping()
        except Exception as e:
            logger.info("Redis unavailable (%s), keeping history in memory", e)
            self.redis = None

    # ── Writes ─────────────────────────────────────────────

    def _push(self, key: str, memory: list, record: dict) -> bool:
        if not self.redis:
            with self._lock:
                memory.insert(0, record)
                del memory[self.max_history:]
            return True

        payload = json.dumps(record)
        for attempt in range(self.retries):
            try:
                pipe = self.redis.pipeline()
                pipe.lpush(key, payload)
                pipe.ltrim(key, 0, self.max_history - 1)
                pipe.execute()
                return True
            except redis.RedisError as e:
                logger.warning("Write to %s failed (attempt %d/%d): %s",
                               key, attempt + 1, self.retries, e)
                if attempt < self.retries - 1:
                    time.sleep(self.backoff * 2 ** attempt)
        return False

    def save_mapping(self, name: str, description: Optional[str], main_category: str,
                     sub_category: str, confidence: float, user_verified: bool = False) -> bool:
        """Record a finalized decision. Returns False if it could not be stored."""
        record = {
            "product_name": name,
            "product_description": description,
            "main_category": main_category,
            "sub_category": sub_category,
            "confidence": confidence,
            "user_verified": user_verified,
            "ts": int(time.time()),
        }
        return self._push(MAPPINGS_KEY, self._memory_mappings, record)

    def save_correction(self, title: str, original_main: str, original_sub: str,
                        corrected_main: str, corrected_sub: str,
                        user_id: Optional[str] = None) -> bool:
        record = {
            "product_title": title,
            "original_main_category": original_main,
            "original_subcategory": original_sub,
            "corrected_main_category": corrected_main,
            "corrected_subcategory": corrected_sub,
            "user_id": user_id,
            "ts": int(time.time()),
        }
        return self._push(CORRECTIONS_KEY, self._memory_corrections, record)

    # ── Reads ──────────────────────────────────────────────

    def _recent(self, key: str, memory: list, limit: int) -> list[dict]:
        """Newest-first records; an unreachable Redis reads as empty."""
        if not self.redis:
            with self._lock:
                return list(memory[:limit])
        try:
            items = self.redis.lrange(key, 0, limit - 1)
        except redis.RedisError as e:
            logger.warning("Read from %s failed: %s", key, e)
            return []
        records = []
        for item in items:
            try:
                records.append(json.loads(item))
            except ValueError:
                logger.warning("Skipping unreadable record in %s", key)
        return records

    def find_similar(self, name: str, limit: int = SIMILAR_LIMIT) -> list[dict]:
        """Stored mappings sharing at least half of the name's significant terms.

        Highest stored confidence first; equal confidence keeps newest first.
        """
        query_terms = extract_terms(normalize_text(name))
        if not query_terms:
            return []
        matches = [
            r for r in self._recent(MAPPINGS_KEY, self._memory_mappings, self.max_history)
            if term_overlap(query_terms, r.get("product_name", "")) >= MIN_TERM_OVERLAP
        ]
        matches.sort(key=lambda r: -float(r.get("confidence") or DEFAULT_STORED_CONFIDENCE))
        return matches[:limit]

    def lookup_similar(self, name: str) -> Optional[MatchResult]:
        """Most common category among similar past products.

        Ties on count go to the higher average confidence. User-verified
        records count 1.5x towards the confidence.
        """
        similar = self.find_similar(name)
        if not similar:
            return None

        counts: Counter = Counter()
        totals: dict[tuple[str, str], float] = {}
        for r in similar:
            pair = (r.get("main_category", ""), r.get("sub_category", ""))
            confidence = float(r.get("confidence") or DEFAULT_STORED_CONFIDENCE)
            if r.get("user_verified"):
                confidence *= VERIFIED_WEIGHT
            counts[pair] += 1
            totals[pair] = totals.get(pair, 0.0) + confidence

        best, best_count, best_avg = None, 0, 0.0
        for pair, count in counts.items():
            avg = totals[pair] / count
            if count > best_count or (count == best_count and avg > best_avg):
                best, best_count, best_avg = pair, count, avg

        if best is None or not best[0]:
            return None
        return MatchResult(best[0], best[1], min(100, round_half_up(best_avg)))

    def lookup_corrections(self, limit: int = 100) -> dict[str, tuple[str, str]]:
        """``"main|sub" -> (main, sub)`` from recent corrections; the newest wins."""
        corrections: dict[str, tuple[str, str]] = {}
        for r in self._recent(CORRECTIONS_KEY, self._memory_corrections, limit):
            key = correction_key(r.get("original_main_category", ""),
                                 r.get("original_subcategory", ""))
            if key not in corrections:
                corrections[key] = (r.get("corrected_main_category", ""),
                                    r.get("corrected_subcategory", ""))
        return corrections

    def get_stats(self) -> dict:
        mappings = self._recent(MAPPINGS_KEY, self._memory_mappings, self.max_history)
        categories = Counter(r.get("main_category", "") for r in mappings)
        return {
            "backend": "redis" if self.redis else "memory",
            "mappings": len(mappings),
            "verified": sum(1 for r in mappings if r.get("user_verified")),
            "categories": dict(categories.most_common(10)),
        }


class CorrectionCache:
    """Caller-owned cache of category corrections.

    Loaded on first use from ``loader`` (usually ``HistoryStore.lookup_corrections``)
    and shared by every row of a batch.
    """

    def __init__(self, loader: Optional[Callable[[], dict]] = None,
                 corrections: Optional[dict] = None):
        self._loader = loader
        self._corrections = dict(corrections) if corrections is not None else None
        self._lock = threading.Lock()

    @property
    def corrections(self) -> dict[str, tuple[str, str]]:
        with self._lock:
            if self._corrections is None:
                self._corrections = dict(self._loader()) if self._loader else {}
            return self._corrections

    def get(self, main_category: str, sub_category: str) -> Optional[tuple[str, str]]:
        return self.corrections.get(correction_key(main_category, sub_category))

    def add(self, original_main: str, original_sub: str,
            corrected_main: str, corrected_sub: str):
        corrections = self.corrections
        with self._lock:
            corrections[correction_key(original_main, original_sub)] = (corrected_main, corrected_sub)

    def refresh(self):
        """Drop cached corrections; the next lookup reloads them."""
        with self._lock:
            self._corrections = None

    def __len__(self) -> int:
        return len(self.corrections)
