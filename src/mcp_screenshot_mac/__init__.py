"""mcp-screenshot-mac - screenshots of macOS application windows over MCP."""

from importlib.metadata import PackageNotFoundError, version

import mcp_screenshot_mac.settings

from mcp_screenshot_mac.handler import ScreenshotHandler
from mcp_screenshot_mac.server.server import ScreenshotServer, create_server

try:
    __version__ = version("mcp-screenshot-mac")
except PackageNotFoundError:
    __version__ = "0.0.0"

__all__ = ["ScreenshotHandler", "ScreenshotServer", "create_server"]
