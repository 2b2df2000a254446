"""Capturing a window with the ``screencapture`` utility."""

from __future__ import annotations

import shlex
import shutil
import tempfile
import uuid
from pathlib import Path

import anyio

from mcp_screenshot_mac.exceptions import CaptureFailedError
from mcp_screenshot_mac.models import CaptureResult, WindowInfo
from mcp_screenshot_mac.request import ScreenshotRequest
from mcp_screenshot_mac.utilities.logging import get_logger

logger = get_logger(__name__)

TMP_PREFIX = "mcp-screenshot-"


def build_capture_args(
    request: ScreenshotRequest, window: WindowInfo, window_id: str | None = None
) -> list[str]:
    """Arguments for screencapture, without the destination path.

    ``-x`` silences the shutter sound and ``-o`` drops the window shadow.
    A window id selects the window with ``-l``, otherwise the rectangle is
    captured with ``-R``.
    """
    args = ["-x", "-t", request.format]
    if not request.include_shadow:
        args.append("-o")
    if window_id:
        args += ["-l", window_id]
    else:
        args += ["-R", window.rect.to_screencapture_arg()]
    return args


async def find_window_id(app_name: str, timeout_ms: int) -> str | None:
    """Look up a native window id with the optional GetWindowID tool.

    Returns None when the tool is not installed, exits non-zero, prints
    nothing or does not finish within the timeout. Never raises.
    """
    script = (
        "command -v GetWindowID >/dev/null 2>&1 && "
        f"GetWindowID {shlex.quote(app_name)} --list | "
        "awk -F 'id=' '/size=[1-9]/{print $3; exit 0}'"
    )
    try:
        with anyio.fail_after(timeout_ms / 1000):
            result = await anyio.run_process(["bash", "-lc", script], check=False)
    except Exception as e:
        logger.debug(f"Window id lookup for {app_name!r} failed: {e!r}")
        return None

    if result.returncode != 0:
        logger.debug(f"GetWindowID unavailable or failed for {app_name!r}")
        return None
    window_id = result.stdout.decode("utf-8", errors="replace").strip()
    return window_id or None


class Capturer:
    """Writes one screenshot per request into a fresh temporary directory."""

    def __init__(self, temp_root: Path | None = None):
        self.temp_root = temp_root

    async def capture(
        self, request: ScreenshotRequest, window: WindowInfo
    ) -> CaptureResult:
        """Capture the resolved window.

        Raises:
            CaptureFailedError: if screencapture fails, times out or is missing
        """
        directory = Path(tempfile.mkdtemp(prefix=TMP_PREFIX, dir=self.temp_root))
        path = directory / f"shot-{uuid.uuid4()}.{request.format}"

        window_id = None
        if request.prefer_window_id:
            window_id = await find_window_id(window.app_name, request.timeout_ms)

        command = ["screencapture", *build_capture_args(request, window, window_id), str(path)]
        logger.debug(f"Running {shlex.join(command)}")

        try:
            await self._run(command, request, window)
        except CaptureFailedError:
            # nothing was written, so there is no artifact to hand over
            shutil.rmtree(directory, ignore_errors=True)
            raise

        logger.info(f"Captured {window.app_name!r} to {path}")
        return CaptureResult(
            path=str(path),
            format=request.format,
            rect=window.rect,
            scale=window.scale,
            app_name=window.app_name,
        )

    async def _run(
        self, command: list[str], request: ScreenshotRequest, window: WindowInfo
    ) -> None:
        try:
            with anyio.fail_after(request.timeout_seconds):
                result = await anyio.run_process(command, check=False)
        except TimeoutError as e:
            raise CaptureFailedError(
                f"screencapture timed out after {request.timeout_ms}ms",
                app_name=window.app_name,
            ) from e
        except OSError as e:
            raise CaptureFailedError(
                f"screencapture could not be started: {e}", app_name=window.app_name
            ) from e

        if result.returncode != 0:
            stderr = result.stderr.decode("utf-8", errors="replace").strip()
            raise CaptureFailedError(
                f"screencapture exited with status {result.returncode}"
                + (f": {stderr}" if stderr else ""),
                app_name=window.app_name,
            )
