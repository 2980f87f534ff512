# src/decoding/extractor.py

import logging
import re
from typing import List, Tuple

from src.decoding.errors import ErrorKind, ExtractionError
from src.decoding.repair import attempt_decode
from src.sysops.names import DATA_ANCHORS

logger = logging.getLogger(__name__)

SEGMENT_DELIMITER = "\x00__segment__\x00"
OBJECT_BOUNDARY_RX = re.compile(r"\}\s*\{")
FENCE_RX = re.compile(r"```(?:json)?\s*(\{[\s\S]*?\})\s*```")


def split_concatenated(text: str) -> List[str]:
    """Split back-to-back JSON objects such as '{...}{...}' into segments."""
    marked = OBJECT_BOUNDARY_RX.sub("}" + SEGMENT_DELIMITER + "{", text)
    return [s for s in marked.split(SEGMENT_DELIMITER) if s.strip()]


def find_data_region(text: str) -> Tuple[int, int]:
    """
    Locate the first balanced region opened by a '{"data":' anchor.

    Braces inside string literals are counted like any other brace.

    Returns:
        (start, end) with end inclusive, -1 marks a position not found.
    """
    positions = [text.find(anchor) for anchor in DATA_ANCHORS]
    positions = [p for p in positions if p != -1]
    if not positions:
        return -1, -1
    start = min(positions)

    brace_count = 1
    for i in range(start + 1, len(text)):
        if text[i] == "{":
            brace_count += 1
        elif text[i] == "}":
            brace_count -= 1
        if brace_count == 0:
            return start, i
    return start, -1


def extract_json_from_text(text: str) -> dict:
    """
    Extract the first object carrying a "data" field from unreliable text.

    Strategies, in order: repair of the whole text, strict parse, split of
    concatenated objects, markdown code fence, brace matching from the
    '{"data":' anchor. Each stage tries repair first and strict parsing second.

    Raises:
        ExtractionError: once every strategy has failed.
    """
    if not text or not isinstance(text, str):
        raise ExtractionError(
            ErrorKind.INVALID_INPUT, "Invalid text input for JSON extraction"
        )

    cleaned_text = text.strip()

    payload = attempt_decode(cleaned_text, "direct")
    if payload is not None:
        return payload

    for segment in split_concatenated(cleaned_text):
        payload = attempt_decode(segment, "segment")
        if payload is not None:
            return payload

    fence_match = FENCE_RX.search(cleaned_text)
    if fence_match:
        payload = attempt_decode(fence_match.group(1), "markdown")
        if payload is not None:
            return payload

    start, end = find_data_region(cleaned_text)
    if start == -1:
        logger.error("No '{\"data\":' or '{ \"data\":' found in response")
        raise ExtractionError(
            ErrorKind.NO_DATA_FIELD, "No valid JSON 'data' object found in response"
        )
    if end == -1:
        logger.error("No matching closing brace found in response")
        raise ExtractionError(
            ErrorKind.NO_CLOSING_BRACE, "No valid JSON end found in response"
        )

    payload = attempt_decode(cleaned_text[start : end + 1], "brace-matching")
    if payload is not None:
        return payload

    logger.error(
        f"Error parsing extracted JSON: {cleaned_text[start : start + 100]}..."
    )
    raise ExtractionError(
        ErrorKind.PARSE_FAILURE, "Failed to parse extracted JSON 'data' object"
    )
