# src/client.py
import argparse
import asyncio
import json
from fastmcp import Client
from pathlib import Path


from src.sysops.filesystem import CONFIG_FILENAME, get_repo_root

CFG_DEFAULT = Path(get_repo_root()) / CONFIG_FILENAME
URL_DEFAULT = "http://127.0.0.1:8000/mcp"


parser = argparse.ArgumentParser(
    prog="Client", description="Uses the MCP server to decode a stored LLM completion"
)

parser.add_argument(
    "--file",
    type=str,
    required=True,
    help="Text file holding the raw completion",
)

parser.add_argument(
    "--cfg",
    type=str,
    default=CFG_DEFAULT,
    help="Give configuration file",
)

parser.add_argument(
    "--url",
    type=str,
    default=URL_DEFAULT,
    help="Give MCP server URL",
)


async def main():
    args = parser.parse_args()

    async with Client(args.url) as client:
        print(f"STATUS\tDecode completion file: {args.file}")
        result = await client.call_tool(
            "decode_file", {"path": str(args.file), "config_file": str(args.cfg)}
        )
        print(json.dumps(result.data, indent=2, ensure_ascii=False))


if __name__ == "__main__":
    asyncio.run(main())
