import json
import re
import functools
import hashlib
import logging
import random
import time

logger = logging.getLogger("sitegen.utils")


_FENCE = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```")
_decoder = json.JSONDecoder()


def clean_json_response(response: str):
    """
    Parses the first JSON object or array in a model reply.

    Fenced blocks (```json ... ```) are unwrapped first; chatty text before
    or after the JSON is ignored. Returns None when nothing parses.
    """
    if not response:
        return None

    text = response.strip()
    fenced = _FENCE.search(text)
    if fenced:
        text = fenced.group(1)

    for start, char in enumerate(text):
        if char not in "{[":
            continue
        try:
            value, _ = _decoder.raw_decode(text, start)
        except json.JSONDecodeError:
            continue
        return value
    return None


def with_retry(max_retries=3, delay=1.0, retry_on=(Exception,)):
    """
    Decorator to retry a call that raises.

    The last exception is re-raised once retries are exhausted so callers
    can decide how to degrade.

    Args:
        max_retries (int): Maximum number of retries.
        delay (float): Base delay in seconds between retries.
        retry_on (tuple): Exception types that trigger a retry.
    """
    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            for attempt in range(max_retries + 1):
                try:
                    return func(*args, **kwargs)
                except retry_on as e:
                    if attempt >= max_retries:
                        logger.error("Max retries (%d) reached. Last error: %s", max_retries, e)
                        raise
                    # Exponential backoff with jitter
                    sleep_time = delay * (2 ** attempt) + random.uniform(0, delay)
                    logger.warning("Attempt %d failed with error: %s. Retrying in %.2fs...",
                                   attempt + 1, e, sleep_time)
                    time.sleep(sleep_time)
        return wrapper
    return decorator


def slugify(value: str) -> str:
    """Lower-case, hyphen separated, ascii-only slug."""
    value = (value or "").lower().strip()
    value = re.sub(r"[^a-z0-9\s-]", "", value)
    value = re.sub(r"[\s_-]+", "-", value)
    return value.strip("-")


def fingerprint(*parts) -> str:
    """Stable short hash over JSON-serializable parts."""
    payload = json.dumps(parts, sort_keys=True, default=str)
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()[:24]


def truncate(text: str, limit: int) -> str:
    """Cut text to limit characters on a word boundary, adding an ellipsis."""
    if len(text) <= limit:
        return text
    cut = text[: limit - 3].rsplit(" ", 1)[0]
    return cut.rstrip(" ,.;:") + "..."
