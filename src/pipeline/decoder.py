# src/pipeline/decoder.py

import json
import logging
import re
from typing import List, Optional

from src.decoding import repair
from src.decoding.errors import ErrorKind, ExtractionError
from src.decoding.extractor import extract_json_from_text
from src.decoding.fallback import (
    extract_basic_script_content,
    extract_fallback_data,
    script_payload,
)
from src.decoding.retry import CancelToken, parse_json_with_retry
from src.decoding.sanitizer import sanitize_chunk_text
from src.pipeline.stream import (
    aggregate_stream_chunks,
    iter_stream_objects,
    process_aggregated_data,
)
from src.sysops.names import DEFAULT_SCRIPT_TITLE, get_config_value


logger = logging.getLogger(__name__)

CODE_BLOCK_RX = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```")
THINKING_MARKERS = ('"thinking":true', '"thinking": true')


class DecodePipeline:

    def __init__(self, cfg: dict = None) -> None:
        self._cfg = dict(cfg or {})
        self.max_retries = get_config_value(self._cfg, "max_retries")
        self.base_delay_ms = get_config_value(self._cfg, "base_delay_ms")
        self.min_script_length = get_config_value(self._cfg, "min_script_length")
        self.max_chunks = get_config_value(self._cfg, "max_chunks")
        self.duplicate_warnings = get_config_value(self._cfg, "duplicate_warnings")
        self.cancel_token = CancelToken()
        self.reset()

    def reset(self):
        self.chunks: List[dict] = []
        self.stream_chunks: List[dict] = []
        self.stream_info: dict = {}
        self.raw_text = ""
        self.chunk_count = 0
        self.total_chars = 0
        self.duplicates = 0
        self._seen = set()

    @property
    def stats(self) -> dict:
        return {
            "chunks": self.chunk_count,
            "chars": self.total_chars,
            "duplicates": self.duplicates,
        }

    def feed(self, raw_text: str) -> bool:
        """
        Sanitize one raw chunk and accumulate it. Exact duplicates are
        skipped, only the latest max_chunks chunks are kept for combining.
        """
        if not isinstance(raw_text, str) or not raw_text:
            logger.warning(f"Invalid chunk at index {self.chunk_count}: {raw_text!r}")
            return False

        chunk_text = sanitize_chunk_text(raw_text)
        if chunk_text in self._seen:
            self.duplicates += 1
            if len(self.chunks) < self.duplicate_warnings:
                logger.warning(f"Duplicate chunk detected: {chunk_text[:50]}...")
            return False
        self._seen.add(chunk_text)

        self.raw_text += raw_text
        self.chunk_count += 1
        self.total_chars += len(chunk_text)
        self.chunks.append(
            {"candidates": [{"content": {"parts": [{"text": chunk_text}]}}]}
        )
        if len(self.chunks) > self.max_chunks:
            self.chunks.pop(0)
        return True

    def feed_stream(self, pieces) -> int:
        """
        Feed the text parts of every stream chunk read from a newline
        delimited stream. Returns the number of accepted chunks.
        """
        accepted = 0
        for chunk in iter_stream_objects(pieces):
            if not isinstance(chunk, dict):
                continue
            self.stream_chunks.append(chunk)
            candidates = chunk.get("candidates") or [{}]
            parts = (candidates[0].get("content") or {}).get("parts") or []
            for part in parts:
                if self.feed(part.get("text")):
                    accepted += 1
        return accepted

    def combined_content(self) -> str:
        text_parts = []
        for chunk in self.chunks:
            candidates = chunk.get("candidates") or [{}]
            parts = (candidates[0].get("content") or {}).get("parts") or []
            for part in parts:
                text = part.get("text")
                if not isinstance(text, str) or not text:
                    continue
                # skip thinking notifications
                if any(marker in text for marker in THINKING_MARKERS):
                    continue
                try:
                    parsed = json.loads(text)
                except (ValueError, RecursionError):
                    parsed = None
                if isinstance(parsed, dict) and isinstance(parsed.get("text"), str):
                    text = parsed["text"]
                text_parts.append(text)
        return "".join(text_parts)

    def process_combined_content(self, content: str) -> dict:
        """
        Decode the combined stream text: code block first, then the whole
        content, then the full extraction cascade.
        """
        code_block = CODE_BLOCK_RX.search(content)
        if code_block and code_block.group(1):
            logger.debug("Found JSON code block in content")
            payload = repair.attempt_decode(code_block.group(1).strip(), "code-block")
            if payload is not None:
                return payload

        payload = repair.attempt_decode(content, "full-content")
        if payload is not None:
            return payload

        return extract_json_from_text(content)

    def process_stream(self) -> Optional[dict]:
        """
        Decode the stream chunks as one aggregated response. Model version and
        usage metadata are kept in stream_info.

        Returns:
            The payload, or None if the joined parts carry no data.
        """
        processed = process_aggregated_data(aggregate_stream_chunks(self.stream_chunks))
        self.stream_info = {
            "modelVersion": processed["modelVersion"],
            "usageMetadata": processed["usageMetadata"],
        }
        if processed["data"] is None:
            return None
        return {"data": processed["data"]}

    async def decode(self, content: str = None) -> dict:
        """
        Run the fallback order: sanitize and extract with retries,
        then field regexes, then the basic content scan. Without content the
        aggregated stream from feed_stream is tried first, then the accumulated
        chunks are decoded and the fallbacks scan the raw chunk text.

        Raises:
            ExtractionError: RETRY_EXHAUSTED if no stage recovered a script.
        """
        raw = content
        if content is None:
            content = self.combined_content()
            raw = self.raw_text
            if self.stream_chunks:
                try:
                    payload = self.process_stream()
                except ValueError as e:
                    logger.debug(f"Aggregated stream is not a JSON document: {e}")
                else:
                    if payload is not None:
                        logger.info(
                            f"Decoded aggregated stream (model {self.stream_info['modelVersion']})"
                        )
                        return payload
            try:
                payload = self.process_combined_content(content)
                logger.info("Successfully processed combined content")
                return payload
            except ExtractionError as e:
                logger.error(f"Error processing combined content: {e}")

        try:
            return await parse_json_with_retry(
                content,
                self.max_retries,
                base_delay_ms=self.base_delay_ms,
                cancel_token=self.cancel_token,
            )
        except ExtractionError as e:
            if e.kind != ErrorKind.RETRY_EXHAUSTED:
                raise
            exhausted = e

        payload = extract_fallback_data(raw, self.min_script_length)
        if payload is not None:
            logger.info("Recovered script fields via regex fallback")
            return payload

        basic = extract_basic_script_content(
            raw,
            window=get_config_value(self._cfg, "basic_window"),
            lead=get_config_value(self._cfg, "basic_lead"),
            min_block=get_config_value(self._cfg, "min_block_length"),
        )
        if basic and len(basic) > self.min_script_length:
            logger.info("Extracted basic script content as fallback")
            return script_payload(DEFAULT_SCRIPT_TITLE, basic, 0)

        logger.error("All decoding and fallback strategies failed")
        raise exhausted

    def cancel(self):
        self.cancel_token.cancel()
