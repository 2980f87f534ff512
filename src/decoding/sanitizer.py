# src/decoding/sanitizer.py

import json
import logging
import re

from src.decoding import repair
from src.decoding.errors import ErrorKind
from src.sysops.names import HTML_ERROR_MESSAGE

logger = logging.getLogger(__name__)

LONE_BACKSLASH_RX = re.compile(r'\\(?![\\bfnrtu"])')
CONTROL_CHARS_RX = re.compile(r"[\x00-\x1f]")
BLANK_LINES_RX = re.compile(r"\n\s*\n")


def is_html(text: str) -> bool:
    stripped = text.strip()
    return (
        stripped.startswith("<!DOCTYPE")
        or stripped.startswith("<html")
        or "</html>" in text
    )


def html_error_payload() -> str:
    return json.dumps(
        {"error": HTML_ERROR_MESSAGE, "errorType": ErrorKind.HTML_RESPONSE.value}
    )


def is_html_error_payload(text: str) -> bool:
    try:
        parsed = json.loads(text)
    except (TypeError, ValueError, RecursionError):
        return False
    return (
        isinstance(parsed, dict)
        and parsed.get("errorType") == ErrorKind.HTML_RESPONSE.value
    )


def sanitize_chunk_text(text: str) -> str:
    """
    Normalize a raw chunk before any parsing is attempted.

    HTML error pages are replaced by a small synthetic error object,
    JSON-shaped text is run through the repair primitive, anything else gets
    lone backslashes escaped, control characters removed and blank line runs
    collapsed. Never raises: on failure the original text is returned.
    """
    try:
        if is_html(text):
            logger.warning(
                "Received HTML content instead of JSON. This is likely an error page."
            )
            return html_error_payload()

        stripped = text.strip()
        if stripped.startswith("{") and stripped.endswith("}"):
            try:
                repaired = repair.repair_json(text)
                json.loads(repaired)
                logger.debug("Successfully repaired JSON chunk")
                return repaired
            except Exception as e:
                logger.debug(
                    f"Chunk is not valid JSON, proceeding with standard sanitization: {e}"
                )

        text_clean = LONE_BACKSLASH_RX.sub(r"\\\\", text)
        text_clean = CONTROL_CHARS_RX.sub("", text_clean)
        return BLANK_LINES_RX.sub("\n", text_clean)
    except Exception as e:
        logger.error(f"Error sanitizing chunk text: {e}")
        return text
