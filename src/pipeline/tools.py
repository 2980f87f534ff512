# src/pipeline/tools.py

import logging

from src.core import fastmcp_app
from src.decoding.errors import ExtractionError
from src.pipeline.decoder import DecodePipeline
from src.sysops.filesystem import load_config, read_text_file


logger = logging.getLogger(__name__)


async def _decode_inner(content: str, config_file: str = None) -> dict:
    cfg = load_config(config_file)
    pipeline = DecodePipeline(cfg)
    pipeline.feed(content)
    logger.info(f"Accumulated content: {pipeline.stats}")
    try:
        return await pipeline.decode()
    except ExtractionError as e:
        logger.error(f"Unable to decode content: {e}")
        return {"error": str(e), "errorType": e.kind.value}


@fastmcp_app.tool()
async def decode_text(content: str, config_file: str = None) -> dict:
    """
    Decode a {"data": ...} payload from raw LLM output. Falls back to regex
    recovery of scriptTitle, script and scriptDuration when no valid JSON can
    be extracted.

    accepted payload:
    {
        'content': str,     # raw completion text
        'config_file': str  # optional path to decoder_config.yaml
    }
    """
    return await _decode_inner(content, config_file)


@fastmcp_app.tool()
async def decode_file(path: str, config_file: str = None) -> dict:
    """
    Same as decode_text for a completion stored in a text file.
    """
    return await _decode_inner(read_text_file(path), config_file)
