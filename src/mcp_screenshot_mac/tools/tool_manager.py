from __future__ import annotations as _annotations

from typing import Any

from mcp.types import CallToolResult
from mcp.types import Tool as MCPTool

from mcp_screenshot_mac.exceptions import NotFoundError
from mcp_screenshot_mac.tools.tool import Tool
from mcp_screenshot_mac.utilities.logging import get_logger

logger = get_logger(__name__)


class ToolManager:
    """Manages registered tools, indexed by key.

    A tool may be registered under several keys, which is how aliases work.
    """

    def __init__(self):
        self._tools: dict[str, Tool] = {}

    def has_tool(self, key: str) -> bool:
        """Check if a tool exists."""
        return key in self._tools

    def get_tool(self, key: str) -> Tool | None:
        """Get tool by key."""
        return self._tools.get(key)

    def get_tools(self) -> dict[str, Tool]:
        """Get all registered tools, indexed by registered key."""
        return self._tools

    def list_tools(self) -> list[Tool]:
        """List all registered tools."""
        return list(self.get_tools().values())

    def list_mcp_tools(self) -> list[MCPTool]:
        """List all registered tools in the format expected by the low-level MCP server."""
        return [tool.to_mcp_tool(name=key) for key, tool in self._tools.items()]

    def add_tool(self, tool: Tool, key: str | None = None) -> Tool:
        """Register a tool, optionally under a key other than its name.

        A tool already registered under the same key is replaced, with a warning.
        """
        key = key or tool.name
        if key in self._tools:
            logger.warning(f"Tool already exists: {key}")
        self._tools[key] = tool
        return tool

    async def call_tool(self, key: str, arguments: dict[str, Any]) -> CallToolResult:
        """Call a tool by key with arguments."""
        tool = self.get_tool(key)
        if not tool:
            raise NotFoundError(f"Unknown tool: {key}")

        return await tool.run(arguments)
