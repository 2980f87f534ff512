# src/core.py

from fastmcp import FastMCP

fastmcp_app = FastMCP("Script Payload Decoder")
