import json
from unittest.mock import AsyncMock, Mock

import pytest
from mcp.types import ResourceLink, TextContent

from mcp_screenshot_mac.exceptions import (
    AccessibilityPermissionDeniedError,
    CaptureFailedError,
    NoWindowError,
)
from mcp_screenshot_mac.handler import ScreenshotHandler
from mcp_screenshot_mac.models import CaptureResult, Rect, WindowInfo

BASE_INPUT = {"bundleId": "com.example.app"}

WINDOW_INFO = WindowInfo(
    app_name="ExampleApp", rect=Rect(x=10, y=20, w=300, h=200), scale=2
)

CAPTURE_RESULT = CaptureResult(
    path="/tmp/example/shot.png",
    format="png",
    rect=WINDOW_INFO.rect,
    scale=WINDOW_INFO.scale,
    app_name=WINDOW_INFO.app_name,
)


@pytest.fixture
def deps():
    return {
        "resolve_window": AsyncMock(return_value=WINDOW_INFO),
        "capture": AsyncMock(return_value=CAPTURE_RESULT),
        "schedule_cleanup": Mock(),
        "get_ttl_ms": Mock(return_value=600_000),
    }


@pytest.fixture
def handler(deps):
    return ScreenshotHandler(**deps)


class TestSuccess:
    async def test_returns_structured_result_with_resource_link(self, handler, deps):
        result = await handler.handle(BASE_INPUT)

        deps["resolve_window"].assert_awaited_once()
        deps["capture"].assert_awaited_once()
        deps["schedule_cleanup"].assert_called_once_with("/tmp/example", 600_000)
        assert not result.isError
        assert result.structuredContent == {
            "path": "/tmp/example/shot.png",
            "uri": "file:///tmp/example/shot.png",
            "appName": "ExampleApp",
            "rect": {"x": 10, "y": 20, "w": 300, "h": 200},
            "scale": 2.0,
            "format": "png",
        }

        text, link = result.content
        assert isinstance(text, TextContent)
        assert json.loads(text.text) == result.structuredContent
        assert isinstance(link, ResourceLink)
        assert str(link.uri) == "file:///tmp/example/shot.png"
        assert link.mimeType == "image/png"
        assert link.name == "shot.png"
        assert link.title == "ExampleApp"
        assert link.description == "Screenshot of ExampleApp"

    async def test_passes_validated_request_through(self, handler, deps):
        await handler.handle({"appName": "ExampleApp", "windowIndex": 1})

        request = deps["resolve_window"].call_args.args[0]
        assert request.app_name == "ExampleApp"
        assert request.window_index == 1
        assert deps["capture"].call_args.args == (request, WINDOW_INFO)

    async def test_jpeg_mime_type(self, handler, deps):
        deps["capture"].return_value = CAPTURE_RESULT.model_copy(
            update={"path": "/tmp/example/shot.jpg", "format": "jpg"}
        )

        result = await handler.handle({**BASE_INPUT, "format": "jpg"})

        assert result.content[1].mimeType == "image/jpeg"
        assert result.structuredContent["format"] == "jpg"

    async def test_honors_ttl(self, handler, deps):
        deps["get_ttl_ms"].return_value = 10_000

        await handler.handle(BASE_INPUT)

        deps["schedule_cleanup"].assert_called_once_with("/tmp/example", 10_000)

    async def test_zero_ttl_skips_cleanup(self, handler, deps):
        deps["get_ttl_ms"].return_value = 0

        result = await handler.handle(BASE_INPUT)

        assert not result.isError
        deps["schedule_cleanup"].assert_not_called()

    async def test_handler_is_callable(self, handler):
        result = await handler(BASE_INPUT)
        assert not result.isError


class TestErrors:
    async def test_validation_error_before_any_subprocess(self, handler, deps):
        result = await handler.handle({})

        assert result.isError
        assert result.structuredContent is None
        assert len(result.content) == 1
        assert result.content[0].text.startswith("ValidationError: ")
        assert "bundleId" in result.content[0].text
        deps["resolve_window"].assert_not_awaited()
        deps["capture"].assert_not_awaited()

    async def test_resolution_error(self, handler, deps):
        deps["resolve_window"].side_effect = NoWindowError(
            "'ExampleApp' has no open window", app_name="ExampleApp"
        )

        result = await handler.handle(BASE_INPUT)

        assert result.isError
        assert result.structuredContent is None
        assert result.content[0].text == "NoWindow: 'ExampleApp' has no open window"
        deps["capture"].assert_not_awaited()
        deps["schedule_cleanup"].assert_not_called()

    async def test_permission_error_carries_guidance(self, handler, deps):
        deps["resolve_window"].side_effect = AccessibilityPermissionDeniedError("ExampleApp")

        result = await handler.handle(BASE_INPUT)

        assert result.content[0].text.startswith("AccessibilityPermissionDenied: ")
        assert "System Settings" in result.content[0].text

    async def test_capture_error(self, handler, deps):
        deps["capture"].side_effect = CaptureFailedError(
            "screencapture exited with status 1", app_name="ExampleApp"
        )

        result = await handler.handle(BASE_INPUT)

        assert result.isError
        assert result.content[0].text == "CaptureFailed: screencapture exited with status 1"
        deps["schedule_cleanup"].assert_not_called()

    async def test_unexpected_error_still_yields_one_error_result(self, handler, deps):
        deps["capture"].side_effect = KeyError("boom")

        result = await handler.handle(BASE_INPUT)

        assert result.isError
        assert result.structuredContent is None
        assert result.content[0].text.startswith("KeyError: ")
