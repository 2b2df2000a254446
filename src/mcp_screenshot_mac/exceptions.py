"""Custom exceptions for mcp-screenshot-mac."""

from typing import ClassVar

ACCESSIBILITY_GUIDANCE = (
    "Grant the app running this server access under System Settings > "
    "Privacy & Security > Accessibility, and allow it to control "
    '"System Events" under Privacy & Security > Automation.'
)


class ScreenshotError(Exception):
    """Base error for a failed screenshot request.

    Every error is terminal for the request. ``kind`` is the stable name
    reported to MCP clients.
    """

    kind: ClassVar[str] = "ScreenshotError"

    def __init__(self, message: str, app_name: str | None = None):
        super().__init__(message)
        self.message = message
        self.app_name = app_name

    @property
    def context(self) -> dict[str, str]:
        return {"appName": self.app_name} if self.app_name else {}

    def __str__(self) -> str:
        return self.message


class RequestValidationError(ScreenshotError):
    """The tool arguments are missing or malformed."""

    kind = "ValidationError"


class ProcessNotFoundError(ScreenshotError):
    """No running process matches the application's display name."""

    kind = "ProcessNotFound"


class NoWindowError(ScreenshotError):
    """The application has no window, even after polling."""

    kind = "NoWindow"


class AccessibilityPermissionDeniedError(ScreenshotError):
    """osascript was refused assistive access or Apple events."""

    kind = "AccessibilityPermissionDenied"

    def __init__(self, app_name: str | None = None):
        super().__init__(
            f"Accessibility permission has not been granted. {ACCESSIBILITY_GUIDANCE}",
            app_name=app_name,
        )


class JXAExecutionError(ScreenshotError):
    """The JXA window lookup failed for any other reason."""

    kind = "JXAExecutionFailed"

    def __init__(self, raw_message: str, app_name: str | None = None):
        super().__init__(f"JXA execution failed: {raw_message}", app_name=app_name)
        self.raw_message = raw_message


class OutputParseError(ScreenshotError):
    """The JXA script printed something that is not the expected JSON."""

    kind = "OutputParseError"


class CaptureFailedError(ScreenshotError):
    """screencapture exited non-zero, timed out or could not be started."""

    kind = "CaptureFailed"


class ToolError(Exception):
    """Error in tool operations."""


class NotFoundError(Exception):
    """Object not found."""
