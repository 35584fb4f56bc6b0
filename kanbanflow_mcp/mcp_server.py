import argparse
import asyncio
import logging
import os
import sys
from typing import Any

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from .client import DEFAULT_API_URL, KanbanFlowClient
from .logging_config import configure_logging
from .setup_wizard import run_setup_wizard
from .tool_executor import ToolExecutor
from .tool_schemas import TOOLS

logger = logging.getLogger(__name__)

EPILOG = """examples:
  kanbanflow-mcp --setup    # Interactive setup wizard
  kanbanflow-mcp            # Start the MCP server (used by the MCP host)
  kanbanflow-mcp --verbose  # Start the server and log each API request to stderr

environment:
  KANBAN_API_TOKEN   KanbanFlow API token (required to serve)
  KANBAN_API_URL     API base URL (default: %s)
  LOG_LEVEL          Log level for stderr logging (default: WARNING)
""" % DEFAULT_API_URL


class KanbanFlowMCPServer:
    def __init__(self, token: str, api_url: str = DEFAULT_API_URL):
        self.client = KanbanFlowClient(token=token, base_url=api_url)
        self.executor = ToolExecutor(self.client)
        self.server = Server("kanban-flow")
        self._setup_handlers()

    def _setup_handlers(self):
        @self.server.list_tools()
        async def list_tools() -> list[Tool]:
            return [Tool(name=t["name"], description=t["description"], inputSchema=t["input_schema"]) for t in TOOLS]

        # Arguments are validated by the executor so failures keep the "Failed to ..." form
        @self.server.call_tool(validate_input=False)
        async def call_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
            return [TextContent(type="text", text=await self.call(name, arguments))]

    async def call(self, name: str, arguments: dict[str, Any] | None) -> str:
        """Run one tool call; never raises."""
        try:
            return await self.executor.execute(name, arguments)
        except Exception as e:
            logger.exception(f"Unexpected error in tool {name}")
            return f"Failed to run {name}: {e}"

    async def run(self):
        logger.info("Starting KanbanFlow MCP server on stdio")
        try:
            async with stdio_server() as (read_stream, write_stream):
                await self.server.run(read_stream, write_stream, self.server.create_initialization_options())
        finally:
            await self.client.aclose()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="kanbanflow-mcp",
        description="KanbanFlow MCP Server",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--setup",
        "--init",
        dest="setup",
        action="store_true",
        help="Set up MCP configuration for the current project",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log every API request to stderr (overrides LOG_LEVEL for this package)",
    )
    return parser


def main():
    parser = build_parser()
    args = parser.parse_args()

    if args.setup:
        sys.exit(run_setup_wizard())

    token = os.environ.get("KANBAN_API_TOKEN")
    api_url = os.environ.get("KANBAN_API_URL") or DEFAULT_API_URL
    if not token:
        parser.error("KANBAN_API_TOKEN is required (run with --setup to configure it)")

    configure_logging(verbose=args.verbose)
    server = KanbanFlowMCPServer(token, api_url)
    asyncio.run(server.run())


if __name__ == "__main__":
    main()
