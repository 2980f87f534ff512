# src/server.py

import argparse
import logging

from src.core import fastmcp_app
from src.pipeline import tools  # noqa: F401  registers the decode tools


parser = argparse.ArgumentParser(prog="Server", description="Runs the local MCP decoding server")

parser.add_argument(
    "-l",
    "--log_level",
    type=str,
    default="INFO",
    help="Set log level to either: INFO [default], DEBUG, WARNING, or ERROR",
)
parser.add_argument("--host", type=str, default="127.0.0.1", help="Bind address")
parser.add_argument("--port", type=int, default=8000, help="Bind port")


def configure_logging(level: str = "INFO"):
    level = level.upper()
    assert level in logging._nameToLevel
    logging.basicConfig(
        level=logging._nameToLevel[level],
        format="[%(levelname)s] %(name)s: %(message)s",
    )


if __name__ == "__main__":
    args = parser.parse_args()
    configure_logging(level=args.log_level)

    print("Starting FastMCP Server with HTTP transport layer ...")
    fastmcp_app.run(transport="http", host=args.host, port=args.port)
    print("Shut down FastMCP Server.")
