"""Remote-model fallback: prompt construction and response validation.

The model is only ever trusted after its answer has been checked against the
taxonomy. Anything it invents is turned into an Uncategorized no-match.
"""
import json
import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional, Sequence

from catmatch.ai_engine import AIEngineError, call_ai
from catmatch.taxonomy import UNCATEGORIZED, Category, category_pairs, find_category

logger = logging.getLogger(__name__)

MIN_REMOTE_CONFIDENCE = 0.3
INVALID_CATEGORY_CONFIDENCE = 0.1
SUBSTITUTED_SUBCATEGORY_FACTOR = 0.7
MISSING_SUBCATEGORY_FACTOR = 0.5
DEFAULT_REMOTE_CONFIDENCE = 0.5


class RemoteSchemaError(ValueError):
    """The model's JSON does not have the expected fields."""


@dataclass(frozen=True)
class RemoteMatch:
    main_category: str
    subcategory: str
    confidence: float
    no_match: bool = False

    @property
    def confidence_percent(self) -> int:
        return max(0, min(100, int(round(self.confidence * 100))))


def uncategorized(confidence: float = 0.0) -> RemoteMatch:
    return RemoteMatch(UNCATEGORIZED, UNCATEGORIZED, confidence, no_match=True)


# ── Prompt ─────────────────────────────────────────────────

PROMPT_TEMPLATE = """You are an AI product classifier for an e-commerce marketplace.
Classify the product below into the best available category.

Title: {title}

Available Categories:
{categories}

IMPORTANT:
1. You MUST ONLY use categories from the provided list. Do not invent new categories.
2. If the product name doesn't seem like a real product or doesn't match any category, set "no_match" to true.
3. Include a confidence score between 0 and 1 indicating how confident you are in the match.
4. You MUST respond with ONLY a JSON object and nothing else. No explanations, no text before or after the JSON.
5. The main_category and subcategory MUST EXACTLY match one of the provided categories.

The JSON must follow this exact format:
{{
  "main_category": "...",
  "subcategory": "...",
  "confidence": 0.0,
  "no_match": false
}}

If no match is found, respond with:
{{
  "main_category": "Uncategorized",
  "subcategory": "Uncategorized",
  "confidence": 0.0,
  "no_match": true
}}"""


def build_prompt(title: str, taxonomy: Sequence[Category]) -> str:
    categories = "\n".join(f"- {pair}" for pair in category_pairs(taxonomy))
    return PROMPT_TEMPLATE.format(title=title, categories=categories)


# ── Response parsing ───────────────────────────────────────

def extract_json_object(text: str) -> dict:
    """Return the first top-level JSON object embedded in ``text``.

    Models wrap answers in prose or code fences; every ``{`` is tried as the
    start of an object until one decodes.
    """
    if not isinstance(text, str):
        raise ValueError("Model response is not text")
    decoder = json.JSONDecoder()
    start = text.find("{")
    while start != -1:
        try:
            obj, _ = decoder.raw_decode(text, start)
        except json.JSONDecodeError:
            start = text.find("{", start + 1)
            continue
        if isinstance(obj, dict):
            return obj
        start = text.find("{", start + 1)
    raise ValueError("No JSON object found in model response")


def _confidence(raw: dict) -> float:
    value = raw.get("confidence")
    if value is None:
        return DEFAULT_REMOTE_CONFIDENCE
    if isinstance(value, bool):
        raise RemoteSchemaError(f"confidence must be a number, got {value!r}")
    try:
        value = float(value)
    except (TypeError, ValueError) as e:
        raise RemoteSchemaError(f"confidence must be a number, got {value!r}") from e
    return max(0.0, min(1.0, value))


def validate_remote_response(raw: Any, taxonomy: Sequence[Category]) -> RemoteMatch:
    """Check a decoded model answer against the taxonomy."""
    if not isinstance(raw, dict):
        raise RemoteSchemaError("model response must be a JSON object")

    confidence = _confidence(raw)
    if raw.get("no_match") is True or confidence < MIN_REMOTE_CONFIDENCE:
        return uncategorized(confidence)

    main = raw.get("main_category")
    sub = raw.get("subcategory")
    if not isinstance(main, str) or (sub is not None and not isinstance(sub, str)):
        raise RemoteSchemaError("main_category and subcategory must be strings")

    category = find_category(taxonomy, main)
    if category is None:
        logger.warning("Model returned unknown category %r", main)
        return uncategorized(INVALID_CATEGORY_CONFIDENCE)

    subcategory = category.find_subcategory(sub or "")
    if subcategory is not None:
        return RemoteMatch(category.name, subcategory.name, confidence)

    logger.warning("Model returned unknown subcategory %r under %r", sub, category.name)
    if category.subcategories:
        return RemoteMatch(category.name, category.subcategories[0].name,
                           confidence * SUBSTITUTED_SUBCATEGORY_FACTOR)
    return RemoteMatch(category.name, UNCATEGORIZED, confidence * MISSING_SUBCATEGORY_FACTOR)


# ── Classifier ─────────────────────────────────────────────

class RemoteClassifier:
    """Asks a remote model for a category and validates the answer."""

    def __init__(self, call: Callable[..., str] = call_ai, timeout: Optional[float] = None):
        self.call = call
        self.timeout = timeout

    def classify(self, title: str, taxonomy: Sequence[Category]) -> Optional[RemoteMatch]:
        """Validated match, or ``None`` when the model could not be used."""
        if not taxonomy:
            return None
        prompt = build_prompt(title, taxonomy)
        try:
            content = self.call(prompt, timeout=self.timeout)
            return validate_remote_response(extract_json_object(content), taxonomy)
        except AIEngineError as e:
            logger.warning("Remote classifier unavailable for %r: %s", title, e)
        except ValueError as e:
            logger.warning("Unusable remote classifier response for %r: %s", title, e)
        return None
