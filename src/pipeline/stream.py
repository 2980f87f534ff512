# src/pipeline/stream.py

import codecs
import json
import logging
import re
from typing import Iterable, Iterator, List, Union

from src.decoding import repair

logger = logging.getLogger(__name__)

OBJECT_BOUNDARY_RX = re.compile(r"\}\s*\{")


def _parse_line(line: str) -> Iterator:
    try:
        parsed = json.loads(line)
    except (ValueError, RecursionError):
        pass
    else:
        yield parsed
        return

    # a line may carry several objects written back-to-back
    if "}{" in line:
        for part in OBJECT_BOUNDARY_RX.sub("}\n{", line).split("\n"):
            if not part.strip():
                continue
            try:
                parsed = json.loads(part)
            except (ValueError, RecursionError):
                logger.warning(f"Failed to parse part: {part}")
                continue
            yield parsed
    elif line.strip().startswith("{") and line.strip().endswith("}"):
        try:
            parsed = json.loads(repair.repair_json(line))
        except Exception as e:
            logger.warning(f"Failed to repair JSON line: {line} ({e})")
            return
        yield parsed
    else:
        logger.warning(f"Failed to parse line: {line}")


def iter_stream_objects(pieces: Iterable[Union[str, bytes]]) -> Iterator:
    """
    Yield JSON objects from a newline-delimited stream delivered in pieces of
    arbitrary size. An incomplete trailing line stays buffered until the next
    piece arrives.
    """
    decoder = codecs.getincrementaldecoder("utf-8")()
    buffer = ""
    for piece in pieces:
        if isinstance(piece, bytes):
            piece = decoder.decode(piece)
        buffer += piece
        lines = buffer.split("\n")
        buffer = lines.pop()
        for line in lines:
            if not line.strip():
                continue
            yield from _parse_line(line)

    buffer += decoder.decode(b"", final=True)
    if buffer.strip():
        try:
            parsed = json.loads(buffer)
        except (ValueError, RecursionError):
            logger.warning(f"Failed to parse final buffer: {buffer}")
            return
        yield parsed


def _first_candidate(chunk: dict) -> dict:
    candidates = chunk.get("candidates") or [{}]
    return candidates[0] or {}


def aggregate_stream_chunks(chunks: List[dict]) -> dict:
    """
    Collect content parts, finish reason, model version and usage metadata
    from a list of stream chunks.
    """
    aggregated = {
        "contentParts": [],
        "finishReason": None,
        "modelVersion": "unknown",
        "usageMetadata": {},
    }
    for chunk in chunks:
        candidate = _first_candidate(chunk)
        parts = (candidate.get("content") or {}).get("parts")
        if parts:
            text = parts[0].get("text") or ""
            try:
                parsed = json.loads(text)
            except (ValueError, RecursionError):
                parsed = None
            if isinstance(parsed, dict) and parsed.get("data"):
                aggregated["contentParts"].append(
                    {"text": json.dumps({"data": parsed["data"]})}
                )
            else:
                aggregated["contentParts"].extend(parts)
        if candidate.get("finishReason"):
            aggregated["finishReason"] = candidate["finishReason"]

    if chunks:
        aggregated["modelVersion"] = chunks[0].get("modelVersion") or "unknown"
        if chunks[0].get("usageMetadata"):
            aggregated["usageMetadata"] = chunks[0]["usageMetadata"]
    return aggregated


def process_aggregated_data(aggregated: dict) -> dict:
    combined = "".join(part.get("text", "") for part in aggregated["contentParts"])
    try:
        parsed = json.loads(combined)
    except (ValueError, RecursionError) as e:
        raise ValueError(f"Failed to parse JSON content: {e}") from e
    data = parsed.get("data") if isinstance(parsed, dict) else None
    return {
        "modelVersion": aggregated.get("modelVersion", "unknown"),
        "usageMetadata": aggregated.get("usageMetadata") or {},
        "data": data or None,
    }
