# src/decoding/repair.py

import json
import logging
from typing import Optional

import json_repair

logger = logging.getLogger(__name__)


def _has_trailing_object(text: str) -> bool:
    # a complete document followed by a later object, with or without prose between
    start = text.find("{")
    if start == -1:
        return False
    try:
        _, end = json.JSONDecoder().raw_decode(text, start)
    except (ValueError, RecursionError):
        return False
    return "{" in text[end:]


def repair_json(text: str) -> str:
    """
    Best-effort syntax fix of near-JSON text. May raise, and the result is not
    guaranteed to be valid JSON.

    Text holding a complete document followed by another object is rejected:
    json_repair keeps the last of several similar objects, while the first one
    is the payload.
    """
    if _has_trailing_object(text):
        raise ValueError("Multiple JSON documents")
    return json_repair.repair_json(text)


def as_payload(parsed) -> Optional[dict]:
    # only objects carrying a truthy "data" value count as decoded
    if isinstance(parsed, dict) and parsed.get("data"):
        return parsed
    return None


def attempt_decode(candidate: str, stage: str) -> Optional[dict]:
    """
    Try repair followed by strict parsing, then strict parsing alone.
    Returns the payload or None, a failure never propagates.
    """
    try:
        payload = as_payload(json.loads(repair_json(candidate)))
        if payload is not None:
            logger.info(f"[{stage}] Successfully parsed repaired JSON")
            return payload
    except Exception as e:
        logger.debug(f"[{stage}] JSON repair attempt failed: {e}")

    try:
        payload = as_payload(json.loads(candidate))
        if payload is not None:
            logger.info(f"[{stage}] Successfully parsed JSON")
            return payload
    except (TypeError, ValueError, RecursionError) as e:
        logger.debug(f"[{stage}] Direct JSON parse failed: {e}")
    return None
