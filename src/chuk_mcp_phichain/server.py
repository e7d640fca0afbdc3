#!/usr/bin/env python3
"""
Entry point for the CHUK Phichain MCP Server.

Serves the phichain chart tools over stdio (default) or HTTP. Charts are
kept under ./charts, exported documents are written to ./output, and
conversion defaults come from ./phichain.yaml when that file exists.

Usage:
    chuk-mcp-phichain
    chuk-mcp-phichain --transport http --port 8000 --debug
"""

import argparse
import asyncio
import logging

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def main() -> None:
    """Main entry point with transport detection."""
    parser = argparse.ArgumentParser(description="CHUK Phichain MCP Server")
    parser.add_argument(
        "--transport",
        choices=["stdio", "http"],
        default="stdio",
        help="Transport mode (default: stdio)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=8000,
        help="HTTP port (only for http transport)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging (compiler and converter steps)",
    )

    args = parser.parse_args()

    if args.debug:
        logging.getLogger().setLevel(logging.DEBUG)

    # Import after argument parsing so --debug applies to server setup
    from chuk_mcp_phichain.async_server import TOOL_GROUPS, mcp

    for group, tools in TOOL_GROUPS.items():
        logger.debug("%s tools: %s", group, ", ".join(tools))
    tool_count = sum(len(tools) for tools in TOOL_GROUPS.values())

    if args.transport == "stdio":
        logger.info("Serving %d phichain tools over stdio", tool_count)
        asyncio.run(mcp.run_stdio())
    else:
        logger.info("Serving %d phichain tools on http port %d", tool_count, args.port)
        asyncio.run(mcp.run_http(port=args.port))


if __name__ == "__main__":
    main()
