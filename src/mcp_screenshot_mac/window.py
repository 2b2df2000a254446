"""Locating an application's window through JXA (JavaScript for Automation).

The script runs under ``osascript -l JavaScript`` with a single JSON argument
and prints a single JSON line: either ``{appName, rect, scale}`` with the rect
already in device pixels, or ``{error, appName}``.
"""

from __future__ import annotations

import json
import tempfile
import threading
from pathlib import Path

import anyio
import pydantic

from mcp_screenshot_mac.exceptions import (
    AccessibilityPermissionDeniedError,
    JXAExecutionError,
    NoWindowError,
    OutputParseError,
    ProcessNotFoundError,
    ScreenshotError,
)
from mcp_screenshot_mac.models import WindowInfo
from mcp_screenshot_mac.request import ScreenshotRequest
from mcp_screenshot_mac.utilities.logging import get_logger

logger = get_logger(__name__)

SCRIPT_DIR_PREFIX = "mcp-screenshot-script-"
SCRIPT_FILENAME = "window-rect.jxa.js"

# Substrings osascript prints when the host lacks assistive access or may not
# send Apple events to System Events.
PERMISSION_MARKERS = (
    "-1743",
    "-25211",
    "not allowed assistive access",
    "not authorized to send apple events",
)

JXA_SOURCE = """
function run(argv) {
  ObjC.import('AppKit');
  const arg = JSON.parse(argv[0]);
  const targetApp = arg.bundleId ? Application(arg.bundleId) : Application(arg.appName);
  const appName = targetApp.name();
  targetApp.activate();
  delay(0.25);

  const systemEvents = Application('System Events');
  const proc = systemEvents.processes.byName(appName);
  if (!proc.exists()) {
    return JSON.stringify({ error: 'ProcessNotFound', appName: appName });
  }

  const deadline = Date.now() + (arg.waitMs || 0);
  while (proc.windows.length === 0 && Date.now() < deadline) {
    delay(0.1);
  }
  const windowCount = proc.windows.length;
  if (windowCount === 0) {
    return JSON.stringify({ error: 'NoWindow', appName: appName });
  }

  const index = Math.max(0, Math.min(arg.windowIndex || 0, windowCount - 1));
  const win = proc.windows[index];
  const position = win.position();
  const size = win.size();

  // System Events reports top-left origin coordinates, NSScreen frames are
  // bottom-left relative to the primary display.
  const screens = $.NSScreen.screens;
  const primaryHeight = screens.count > 0 ? screens.objectAtIndex(0).frame.size.height : 0;
  const centerX = position[0] + size[0] / 2;
  const centerY = primaryHeight - (position[1] + size[1] / 2);

  var scale = 0;
  for (var i = 0; i < screens.count; i++) {
    const screen = screens.objectAtIndex(i);
    const frame = screen.frame;
    if (
      centerX >= frame.origin.x && centerX <= frame.origin.x + frame.size.width &&
      centerY >= frame.origin.y && centerY <= frame.origin.y + frame.size.height
    ) {
      scale = screen.backingScaleFactor;
      break;
    }
  }
  if (!scale) {
    scale = $.NSScreen.mainScreen ? $.NSScreen.mainScreen.backingScaleFactor : 1;
  }

  const rect = {
    x: Math.round(position[0] * scale),
    y: Math.round(position[1] * scale),
    w: Math.round(size[0] * scale),
    h: Math.round(size[1] * scale),
  };

  return JSON.stringify({ appName: appName, rect: rect, scale: Number(scale) });
}
"""


class JXAScript:
    """The window lookup script, written to disk on first use.

    One instance is shared by every request of a server. The first call to
    ``path()`` writes the file; later calls return the same path.
    """

    def __init__(self, source: str = JXA_SOURCE, directory: Path | None = None):
        self.source = source
        self._directory = directory
        self._path: Path | None = None
        self._lock = threading.Lock()

    def path(self) -> Path:
        with self._lock:
            if self._path is None:
                directory = Path(
                    tempfile.mkdtemp(prefix=SCRIPT_DIR_PREFIX, dir=self._directory)
                )
                path = directory / SCRIPT_FILENAME
                path.write_text(self.source, encoding="utf-8")
                logger.debug(f"Wrote JXA script to {path}")
                self._path = path
            return self._path


class WindowResolver:
    """Activates the target app and measures one of its windows."""

    def __init__(self, script: JXAScript | None = None):
        self.script = script or JXAScript()

    async def resolve(self, request: ScreenshotRequest) -> WindowInfo:
        """Resolve the requested window to a device-pixel rectangle.

        Raises:
            ScreenshotError: ProcessNotFound, NoWindow,
                AccessibilityPermissionDenied, JXAExecutionFailed or
                OutputParseError
        """
        argument = json.dumps(
            {
                "bundleId": request.bundle_id,
                "appName": request.app_name,
                "windowIndex": request.window_index,
                "waitMs": request.timeout_ms // 2,
            }
        )
        command = ["osascript", "-l", "JavaScript", str(self.script.path()), argument]
        logger.debug(f"Resolving window for {request.app_label!r}")

        try:
            with anyio.fail_after(request.timeout_seconds):
                result = await anyio.run_process(command, check=False)
        except TimeoutError as e:
            raise JXAExecutionError(
                f"osascript timed out after {request.timeout_ms}ms",
                app_name=request.app_label,
            ) from e
        except OSError as e:
            raise JXAExecutionError(str(e), app_name=request.app_label) from e

        stdout = result.stdout.decode("utf-8", errors="replace")
        stderr = result.stderr.decode("utf-8", errors="replace")
        if result.returncode != 0:
            raise _execution_error(stdout, stderr, request.app_label)

        return parse_jxa_output(stdout)


def parse_jxa_output(stdout: str) -> WindowInfo:
    """Turn the script's output line into a WindowInfo or a typed error."""
    lines = [line for line in stdout.splitlines() if line.strip()]
    if not lines:
        raise OutputParseError("JXA script produced no output")

    try:
        payload = json.loads(lines[-1])
    except json.JSONDecodeError as e:
        raise OutputParseError(f"JXA output is not valid JSON: {lines[-1]!r}") from e
    if not isinstance(payload, dict):
        raise OutputParseError(f"JXA output is not a JSON object: {lines[-1]!r}")

    if "error" in payload:
        app_name = payload.get("appName")
        raise _reported_error(
            str(payload["error"]), str(app_name) if app_name else None
        )

    try:
        return WindowInfo.model_validate(payload)
    except pydantic.ValidationError as e:
        raise OutputParseError(f"Unexpected JXA output shape: {lines[-1]!r}") from e


def _reported_error(error: str, app_name: str | None) -> ScreenshotError:
    if error == "ProcessNotFound":
        return ProcessNotFoundError(
            f"No running process named {app_name!r}", app_name=app_name
        )
    if error == "NoWindow":
        return NoWindowError(f"{app_name!r} has no open window", app_name=app_name)
    return JXAExecutionError(error, app_name=app_name)


def _execution_error(stdout: str, stderr: str, app_name: str) -> ScreenshotError:
    diagnostics = "\n".join(part.strip() for part in (stderr, stdout) if part.strip())
    lowered = diagnostics.lower()
    if any(marker in lowered for marker in PERMISSION_MARKERS):
        return AccessibilityPermissionDeniedError(app_name=app_name)
    return JXAExecutionError(
        diagnostics or "osascript exited with a non-zero status", app_name=app_name
    )
