# src/decoding/fallback.py

import logging
import re
from typing import Optional

from src.sysops.names import DEFAULT_SCRIPT_TITLE, SCRIPT_MARKERS

logger = logging.getLogger(__name__)

TITLE_RX = re.compile(r'"scriptTitle"\s*:\s*"([^"]+)"')
SCRIPT_RX = re.compile(r'"script"\s*:\s*"((?:\\"|[^"])+)"')
DURATION_RX = re.compile(r'"scriptDuration"\s*:\s*(\d+)')

MARKER_RX = re.compile(
    r"^[ \t]*(?:"
    + "|".join(re.escape(marker) for marker in SCRIPT_MARKERS)
    + r")(?![A-Za-z]).*$",
    re.IGNORECASE | re.MULTILINE,
)
# a single CRLF also counts as a block break
BLOCK_SPLIT_RX = re.compile(r"[\r\n]{2,}")


def script_payload(title: str, script: str, duration: int) -> dict:
    return {
        "data": {
            "scriptTitle": title,
            "script": script,
            "scriptDuration": duration,
        }
    }


def extract_fallback_data(content: str, min_length: int = 20) -> Optional[dict]:
    """
    Recover scriptTitle, script and scriptDuration from malformed JSON with
    field regexes. Returns None unless the script is longer than min_length.
    """
    title_match = TITLE_RX.search(content)
    title = (
        title_match.group(1).replace('\\"', '"')
        if title_match
        else DEFAULT_SCRIPT_TITLE
    )

    script = ""
    script_match = SCRIPT_RX.search(content)
    if script_match:
        script = (
            script_match.group(1)
            .replace('\\"', '"')
            .replace("\\n", "\n")
            .replace("\\\\", "\\")
        )

    duration_match = DURATION_RX.search(content)
    duration = int(duration_match.group(1)) if duration_match else 0

    logger.debug(
        f"Extracted script via regex: {script[:100] + '...' if script else 'None found'}"
    )

    if script and len(script) > min_length:
        return script_payload(title, script, duration)
    return None


def extract_basic_script_content(
    content: str, window: int = 5000, lead: int = 50, min_block: int = 50
) -> Optional[str]:
    """
    Last resort: a chunk of narrative text starting shortly before the first
    script marker line, else the largest paragraph block.
    """
    marker_match = MARKER_RX.search(content)
    if marker_match:
        start = max(0, marker_match.start() - lead)
        return content[start : start + window]

    largest = ""
    for block in BLOCK_SPLIT_RX.split(content):
        if len(block) > len(largest):
            largest = block
    if len(largest) > min_block:
        return largest
    return None
