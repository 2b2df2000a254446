from .server import ScreenshotServer, create_server

__all__ = ["ScreenshotServer", "create_server"]
