#!/usr/bin/env python3
"""
Trello MCP Server
A Model Context Protocol server exposing Trello boards, lists and cards,
served over streamable HTTP (/mcp) and legacy SSE (/sse + /messages).
"""

import json
import logging
import sys

import uvicorn
from mcp.server.lowlevel import Server
from mcp.types import Tool, TextContent

import config
from errors import ConfigurationError
from http_app import create_app
from tools import ToolRegistry, build_registry
from tools.trello.client import TrelloClient

__version__ = "0.1.0"

SERVER_NAME = "trello-mcp"

logger = logging.getLogger(__name__)


def configure_logging(level: int = logging.INFO) -> None:
    """Log to stderr. httpx logs full request URLs, credentials included, so keep it quiet."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)


def create_server(registry: ToolRegistry) -> Server:
    """Create the MCP server, answering tool calls from the registry."""
    app = Server(SERVER_NAME, version=__version__)

    @app.list_tools()
    async def list_tools() -> list[Tool]:
        """List available Trello tools."""
        return registry.list_tools()

    @app.call_tool()
    async def call_tool(name: str, arguments: dict) -> list[TextContent]:
        """Handle tool calls."""
        logger.info("Executing tool: %s", name)
        try:
            result = await registry.invoke(name, arguments)
        except Exception as e:
            logger.warning("Tool %s failed: %s", name, e)
            raise
        return [TextContent(type="text", text=json.dumps(result, indent=2))]

    return app


def main() -> None:
    """Run the MCP server over HTTP."""
    configure_logging()
    config.load_environment()

    try:
        port = config.get_port()
        api_key, api_token = config.get_trello_credentials()
        registry = build_registry(TrelloClient(api_key, api_token))
    except ConfigurationError as e:
        logger.error("Cannot start %s: %s", SERVER_NAME, e)
        sys.exit(1)

    app = create_app(create_server(registry))

    logger.info("%s listening on %d", SERVER_NAME, port)
    uvicorn.run(app, host="0.0.0.0", port=port)


if __name__ == "__main__":
    main()
