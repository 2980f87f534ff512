# src/decoding/retry.py

import asyncio
import json
import logging

from src.decoding.errors import ErrorKind, ExtractionError
from src.decoding.extractor import extract_json_from_text
from src.decoding.sanitizer import is_html_error_payload, sanitize_chunk_text

logger = logging.getLogger(__name__)


class CancelToken:
    """Abort flag checked by the retry loop before and after every delay."""

    def __init__(self):
        self._cancelled = False

    def cancel(self):
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


def decode_once(content: str) -> dict:
    sanitized = sanitize_chunk_text(content)
    if is_html_error_payload(sanitized):
        return json.loads(sanitized)
    return extract_json_from_text(sanitized)


def retry_delay(retry_count: int, base_delay_ms: int = 500) -> float:
    """Backoff in seconds before retry number retry_count (0-based)."""
    return base_delay_ms * 2**retry_count / 1000


async def parse_json_with_retry(
    content: str,
    max_retries: int = 3,
    *,
    base_delay_ms: int = 500,
    cancel_token: CancelToken = None,
) -> dict:
    """
    Sanitize and extract the payload, retrying the identical input with
    exponential backoff while a stream may still be arriving.

    An HTML error page is returned as its synthetic error object right away.

    Raises:
        ExtractionError: RETRY_EXHAUSTED after max_retries + 1 failed attempts.
        asyncio.CancelledError: if cancel_token was cancelled between attempts.
    """
    retry_count = 0
    while True:
        try:
            return decode_once(content)
        except ExtractionError as e:
            logger.error(
                f"JSON parsing attempt {retry_count + 1}/{max_retries + 1} failed: {e}"
            )
            if retry_count >= max_retries:
                raise ExtractionError(
                    ErrorKind.RETRY_EXHAUSTED,
                    "Failed to parse JSON after maximum retries",
                ) from e

        if cancel_token is not None and cancel_token.cancelled:
            logger.info("JSON parsing retries cancelled")
            raise asyncio.CancelledError()
        await asyncio.sleep(retry_delay(retry_count, base_delay_ms))
        if cancel_token is not None and cancel_token.cancelled:
            logger.info("JSON parsing retries cancelled")
            raise asyncio.CancelledError()
        retry_count += 1
