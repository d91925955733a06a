"""Fallback chain around the local matcher, and batch categorization.

local match -> history lookup -> remote classifier -> correction override

History and remote calls each run under their own timeout. A slow or failing
lookup is logged and skipped; the decision made so far stands.
"""
import logging
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FuturesTimeout
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, Optional, Sequence, Union

from catmatch.history import CorrectionCache, HistoryStore
from catmatch.matcher import CategoryMatcher, MatchResult
from catmatch.remote import RemoteClassifier
from catmatch.taxonomy import Category
from catmatch.text import ProductText

logger = logging.getLogger(__name__)

DEFAULT_REVIEW_THRESHOLD = 60
DEFAULT_LOOKUP_TIMEOUT = 10.0
DEFAULT_MAX_WORKERS = 8


class DecisionSource(str, Enum):
    LOCAL = "local"
    HISTORY = "history"
    REMOTE = "remote"
    CORRECTION = "correction"
    NONE = "none"


@dataclass(frozen=True)
class Decision:
    result: MatchResult
    source: DecisionSource
    needs_review: bool

    def to_dict(self) -> dict:
        d = self.result.to_dict()
        d["source"] = self.source.value
        d["needsReview"] = self.needs_review
        return d


ProductInput = Union[ProductText, tuple, str]


def as_product(item: ProductInput) -> ProductText:
    if isinstance(item, ProductText):
        return item
    if isinstance(item, str):
        return ProductText(item)
    name, description = (tuple(item) + ("",))[:2]
    return ProductText(name or "", description or "")


class Categorizer:
    """Categorizes products against one taxonomy for the length of a session."""

    def __init__(self, taxonomy: Sequence[Category],
                 matcher: Optional[CategoryMatcher] = None,
                 history: Optional[HistoryStore] = None,
                 classifier: Optional[RemoteClassifier] = None,
                 corrections: Optional[CorrectionCache] = None,
                 review_threshold: float = DEFAULT_REVIEW_THRESHOLD,
                 lookup_timeout: float = DEFAULT_LOOKUP_TIMEOUT,
                 max_workers: int = DEFAULT_MAX_WORKERS):
        if taxonomy is None:
            raise TypeError("taxonomy must be a list of categories, not None")
        self.taxonomy = list(taxonomy)
        self.matcher = matcher or CategoryMatcher()
        self.history = history
        self.classifier = classifier
        self.corrections = corrections
        self.review_threshold = review_threshold
        self.lookup_timeout = lookup_timeout
        self.max_workers = max_workers
        self._lookups = ThreadPoolExecutor(max_workers=max_workers * 2,
                                           thread_name_prefix="catmatch-lookup")

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def close(self):
        self._lookups.shutdown(wait=True)

    def _lookup(self, label: str, fn: Callable, *args):
        future = self._lookups.submit(fn, *args)
        try:
            return future.result(timeout=self.lookup_timeout)
        except FuturesTimeout:
            future.cancel()
            logger.warning("%s lookup timed out after %ss", label, self.lookup_timeout)
        except Exception as e:
            logger.warning("%s lookup failed: %s", label, e)
        return None

    def categorize(self, name: str, description: str = "") -> Decision:
        result = self.matcher.match(name, description, self.taxonomy)
        source = DecisionSource.LOCAL if result.is_match else DecisionSource.NONE

        if result.confidence < self.review_threshold and self.history is not None:
            similar = self._lookup("History", self.history.lookup_similar, name)
            if similar is not None and similar.confidence > result.confidence:
                result, source = similar, DecisionSource.HISTORY

        if result.confidence < self.review_threshold and self.classifier is not None:
            remote = self._lookup("Remote", self.classifier.classify, name, self.taxonomy)
            if (remote is not None and not remote.no_match
                    and remote.confidence_percent > result.confidence):
                result = MatchResult(remote.main_category, remote.subcategory,
                                     remote.confidence_percent)
                source = DecisionSource.REMOTE

        if self.corrections is not None and result.is_match:
            corrected = self.corrections.get(result.main_category, result.sub_category)
            if corrected is not None:
                result = MatchResult(corrected[0], corrected[1], result.confidence)
                source = DecisionSource.CORRECTION

        return Decision(result, source, result.confidence < self.review_threshold)

    def categorize_batch(self, products: Iterable[ProductInput],
                         max_workers: Optional[int] = None) -> list[Decision]:
        """Categorize many products concurrently; output order matches input."""
        items = [as_product(p) for p in products]
        if not items:
            return []
        workers = max(1, min(max_workers or self.max_workers, len(items)))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="catmatch-row") as pool:
            return list(pool.map(lambda p: self.categorize(p.name, p.description), items))

    def record_decision(self, product: ProductInput, decision: Decision,
                        user_verified: bool = False) -> Optional[Future]:
        """Write a finalized decision back to history without waiting for it."""
        if self.history is None or not decision.result.is_match:
            return None
        product = as_product(product)
        r = decision.result
        future = self._lookups.submit(
            self.history.save_mapping, product.name, product.description,
            r.main_category, r.sub_category, r.confidence, user_verified)
        future.add_done_callback(_log_failed_write)
        return future


def _log_failed_write(future: Future):
    if future.cancelled():
        return
    error = future.exception()
    if error is not None:
        logger.warning("Saving decision failed: %s", error)
    elif future.result() is False:
        logger.warning("Saving decision failed after retries")
