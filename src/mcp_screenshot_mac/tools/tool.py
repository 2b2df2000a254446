from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any

from mcp.types import CallToolResult, ToolAnnotations
from mcp.types import Tool as MCPTool
from pydantic import BaseModel, Field

from mcp_screenshot_mac.exceptions import ToolError


class Tool(BaseModel):
    """Internal tool registration info.

    Unlike a function-derived tool, the input schema is declared by hand and
    the handler receives the raw arguments, doing its own validation.
    """

    fn: Callable[[dict[str, Any]], Awaitable[CallToolResult]] = Field(exclude=True)
    name: str = Field(description="Name of the tool")
    title: str | None = Field(None, description="Human-readable name of the tool")
    description: str = Field(description="Description of what the tool does")
    parameters: dict[str, Any] = Field(description="JSON schema for tool parameters")
    annotations: ToolAnnotations | None = Field(
        None, description="Hints about the tool's behavior"
    )

    @classmethod
    def from_handler(
        cls,
        fn: Callable[[dict[str, Any]], Awaitable[CallToolResult]],
        name: str,
        parameters: dict[str, Any],
        description: str | None = None,
        title: str | None = None,
        annotations: ToolAnnotations | None = None,
    ) -> Tool:
        """Create a Tool from an async handler of raw arguments."""
        return cls(
            fn=fn,
            name=name,
            title=title,
            description=description or fn.__doc__ or "",
            parameters=parameters,
            annotations=annotations,
        )

    def to_mcp_tool(self, **overrides: Any) -> MCPTool:
        kwargs = {
            "name": self.name,
            "title": self.title,
            "description": self.description,
            "inputSchema": self.parameters,
            "annotations": self.annotations,
        }
        return MCPTool(**kwargs | overrides)

    async def run(self, arguments: dict[str, Any]) -> CallToolResult:
        """Run the tool with arguments."""
        try:
            return await self.fn(arguments)
        except Exception as e:
            raise ToolError(f"Error executing tool {self.name}: {e}") from e
