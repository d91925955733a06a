"""Remote classifier call with retry logic."""
import logging
import time
from typing import Optional

import requests

from catmatch.config import config

logger = logging.getLogger(__name__)

CLASSIFIER_SYSTEM_MSG = (
    "You are a product categorization expert for an e-commerce marketplace. "
    "Reply with a single JSON object and nothing else."
)


class AIEngineError(Exception):
    """The remote model could not produce a completion."""


def call_ai(
    prompt: str,
    system_msg: str = CLASSIFIER_SYSTEM_MSG,
    retries: int = 3,
    timeout: Optional[float] = None,
) -> str:
    """Call an OpenAI-compatible chat completion API with retry logic.

    Timeouts, connection errors and 5xx responses are retried with
    exponential backoff, 429 backs off longer, other 4xx fail immediately.
    """
    if not config.OPENAI_KEY:
        raise AIEngineError("OPENAI_API_KEY is not set")

    headers = {
        "Authorization": f"Bearer {config.OPENAI_KEY}",
        "Content-Type": "application/json",
    }
    data = {
        "model": config.OPENAI_MODEL,
        "messages": [
            {"role": "system", "content": system_msg},
            {"role": "user", "content": prompt},
        ],
        "temperature": config.AI_TEMPERATURE,
        "max_tokens": config.AI_MAX_TOKENS,
    }

    last_err = None
    for attempt in range(retries):
        try:
            r = requests.post(
                f"{config.OPENAI_BASE}/chat/completions",
                headers=headers,
                json=data,
                timeout=timeout or config.AI_TIMEOUT,
            )
            r.raise_for_status()
            return r.json()["choices"][0]["message"]["content"]
        except requests.exceptions.Timeout:
            last_err = "request timed out"
            time.sleep(2 ** attempt)
        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else 0
            if status == 429:
                last_err = "rate limited"
                time.sleep(5 * (attempt + 1))
            elif status >= 500:
                last_err = f"server error ({status})"
                time.sleep(2 ** attempt)
            else:
                raise AIEngineError(f"HTTP {status}") from e
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise AIEngineError(f"unexpected response shape: {e}") from e
        except requests.exceptions.RequestException as e:
            last_err = str(e)
            time.sleep(2 ** attempt)
        logger.debug("AI call attempt %d/%d failed: %s", attempt + 1, retries, last_err)

    raise AIEngineError(f"failed after {retries} attempts: {last_err}")
