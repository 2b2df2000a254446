"""The MCP server exposing the screenshot tool over stdio."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import anyio
from mcp.server.lowlevel.server import NotificationOptions
from mcp.server.lowlevel.server import Server as MCPServer
from mcp.server.stdio import stdio_server
from mcp.types import ContentBlock, TextContent, ToolAnnotations
from mcp.types import Tool as MCPTool

import mcp_screenshot_mac.settings
from mcp_screenshot_mac.capture import Capturer
from mcp_screenshot_mac.exceptions import NotFoundError, ToolError
from mcp_screenshot_mac.handler import ScreenshotHandler
from mcp_screenshot_mac.request import INPUT_SCHEMA
from mcp_screenshot_mac.temp_files import CleanupScheduler, get_ttl_ms
from mcp_screenshot_mac.tools import Tool, ToolManager
from mcp_screenshot_mac.utilities.logging import get_logger
from mcp_screenshot_mac.window import JXAScript, WindowResolver

logger = get_logger(__name__)

SERVER_NAME = "mcp-screenshot-mac"
TOOL_NAME = "screenshot_app_window"
TOOL_ALIASES = (
    "mcp__screenshot__screenshot_app_window",
    "screenshot__screenshot_app_window",
)
TOOL_TITLE = "Screenshot macOS app window"
TOOL_DESCRIPTION = (
    "Capture the window of a macOS application and return the image's file "
    "path and file:// URI together with the window rectangle in device pixels."
)


class ScreenshotServer:
    """A thin wrapper around the low-level MCP server.

    The cleanup scheduler runs for as long as the server does, so captures
    scheduled for deletion are cleaned up in the background of the session.
    """

    def __init__(
        self,
        name: str | None = None,
        instructions: str | None = None,
        cleanup_scheduler: CleanupScheduler | None = None,
    ):
        self.cleanup_scheduler = cleanup_scheduler or CleanupScheduler()
        self._tool_manager = ToolManager()
        self._mcp_server = MCPServer(
            name=name or SERVER_NAME,
            instructions=instructions,
            lifespan=self._lifespan,
        )
        self._setup_handlers()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"

    @property
    def name(self) -> str:
        return self._mcp_server.name

    @asynccontextmanager
    async def _lifespan(self, server: MCPServer) -> AsyncIterator[dict[str, Any]]:
        async with self.cleanup_scheduler.running():
            yield {}

    def _setup_handlers(self) -> None:
        """Set up core MCP protocol handlers."""
        self._mcp_server.list_tools()(self._mcp_list_tools)
        # arguments are validated by ScreenshotRequest alone
        self._mcp_server.call_tool(validate_input=False)(self._mcp_call_tool)

    def get_tools(self) -> dict[str, Tool]:
        """Get all registered tools, indexed by registered key."""
        return self._tool_manager.get_tools()

    def add_tool(self, tool: Tool, aliases: tuple[str, ...] = ()) -> None:
        """Register a tool under its own name and under each alias."""
        self._tool_manager.add_tool(tool)
        for alias in aliases:
            self._tool_manager.add_tool(tool, key=alias)
            logger.debug(f'Registered tool "{tool.name}" as "{alias}"')

    async def _mcp_list_tools(self) -> list[MCPTool]:
        """
        List all available tools, in the format expected by the low-level MCP
        server.
        """
        return self._tool_manager.list_mcp_tools()

    async def _mcp_call_tool(
        self, key: str, arguments: dict[str, Any]
    ) -> tuple[list[ContentBlock], dict[str, Any] | None]:
        """Call a tool by name with arguments.

        An error result is raised as a ToolError, which the low-level server
        reports as a result with isError set.
        """
        if not self._tool_manager.has_tool(key):
            raise NotFoundError(f"Unknown tool: {key}")

        result = await self._tool_manager.call_tool(key, arguments)
        if result.isError:
            raise ToolError(
                "\n".join(
                    block.text for block in result.content if isinstance(block, TextContent)
                )
            )
        return result.content, result.structuredContent

    async def run_stdio_async(self) -> None:
        """Run the server using stdio transport."""
        async with stdio_server() as (read_stream, write_stream):
            await self._mcp_server.run(
                read_stream,
                write_stream,
                self._mcp_server.create_initialization_options(
                    NotificationOptions(tools_changed=False)
                ),
            )

    def run(self) -> None:
        """Run the server over stdio. Note this is a synchronous function."""
        logger.info(f'Starting server "{self.name}"...')
        anyio.run(self.run_stdio_async)


def create_server(
    settings: mcp_screenshot_mac.settings.Settings | None = None,
) -> ScreenshotServer:
    """Build a server wired to osascript, screencapture and the cleanup scheduler."""
    settings = settings or mcp_screenshot_mac.settings.settings

    server = ScreenshotServer()
    handler = ScreenshotHandler(
        resolve_window=WindowResolver(JXAScript()).resolve,
        capture=Capturer(temp_root=settings.tmp_dir).capture,
        schedule_cleanup=server.cleanup_scheduler.schedule,
        get_ttl_ms=get_ttl_ms,
    )
    tool = Tool.from_handler(
        handler,
        name=TOOL_NAME,
        title=TOOL_TITLE,
        description=TOOL_DESCRIPTION,
        parameters=INPUT_SCHEMA,
        annotations=ToolAnnotations(
            readOnlyHint=True, destructiveHint=False, openWorldHint=False
        ),
    )
    server.add_tool(tool, aliases=TOOL_ALIASES)
    return server
