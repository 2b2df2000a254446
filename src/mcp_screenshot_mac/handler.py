"""Orchestration of a screenshot request into an MCP tool result."""

from __future__ import annotations

import json
import os
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Any

from mcp.types import CallToolResult, ResourceLink, TextContent

from mcp_screenshot_mac.exceptions import ScreenshotError
from mcp_screenshot_mac.models import CaptureResult, WindowInfo
from mcp_screenshot_mac.request import ScreenshotRequest, validate_request
from mcp_screenshot_mac.utilities.logging import get_logger

logger = get_logger(__name__)

FORMAT_MIME = {
    "png": "image/png",
    "jpg": "image/jpeg",
}

ResolveWindow = Callable[[ScreenshotRequest], Awaitable[WindowInfo]]
Capture = Callable[[ScreenshotRequest, WindowInfo], Awaitable[CaptureResult]]
ScheduleCleanup = Callable[[str, int], None]
GetTtlMs = Callable[[], int]


class ScreenshotHandler:
    """Validates, resolves, captures and schedules cleanup, in that order.

    Every collaborator is injected, so the handler never touches a
    subprocess or the filesystem itself. ``handle`` always returns exactly
    one result: the structured capture, or an error naming its kind.
    """

    def __init__(
        self,
        resolve_window: ResolveWindow,
        capture: Capture,
        schedule_cleanup: ScheduleCleanup,
        get_ttl_ms: GetTtlMs,
    ):
        self.resolve_window = resolve_window
        self.capture = capture
        self.schedule_cleanup = schedule_cleanup
        self.get_ttl_ms = get_ttl_ms

    async def __call__(self, arguments: Any) -> CallToolResult:
        return await self.handle(arguments)

    async def handle(self, arguments: Any) -> CallToolResult:
        try:
            request = validate_request(arguments)
            window = await self.resolve_window(request)
            result = await self.capture(request, window)

            ttl_ms = self.get_ttl_ms()
            if ttl_ms > 0:
                self.schedule_cleanup(os.path.dirname(result.path), ttl_ms)
        except ScreenshotError as e:
            logger.debug(f"Screenshot failed with {e.kind}: {e}")
            return error_result(f"{e.kind}: {e}")
        except Exception as e:
            logger.exception("Unexpected error while taking a screenshot")
            return error_result(f"{type(e).__name__}: {e}")

        return success_result(result)


def success_result(result: CaptureResult) -> CallToolResult:
    path = Path(result.path)
    uri = path.as_uri()
    structured = {
        "path": result.path,
        "uri": uri,
        "appName": result.app_name,
        "rect": result.rect.model_dump(),
        "scale": result.scale,
        "format": result.format,
    }
    return CallToolResult(
        content=[
            TextContent(type="text", text=json.dumps(structured, indent=2)),
            ResourceLink(
                type="resource_link",
                uri=uri,
                name=path.name,
                title=result.app_name,
                description=f"Screenshot of {result.app_name}",
                mimeType=FORMAT_MIME[result.format],
            ),
        ],
        structuredContent=structured,
    )


def error_result(message: str) -> CallToolResult:
    return CallToolResult(
        isError=True,
        content=[TextContent(type="text", text=message)],
    )
