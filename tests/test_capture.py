import subprocess
import uuid
from pathlib import Path
from unittest.mock import AsyncMock, patch

import anyio
import pytest

from mcp_screenshot_mac.capture import Capturer, build_capture_args, find_window_id
from mcp_screenshot_mac.exceptions import CaptureFailedError
from mcp_screenshot_mac.models import Rect, WindowInfo
from mcp_screenshot_mac.request import validate_request

FIXED_UUID = uuid.UUID(int=0)


def completed(stdout: str = "", stderr: str = "", returncode: int = 0):
    return subprocess.CompletedProcess(
        args=[], returncode=returncode, stdout=stdout.encode(), stderr=stderr.encode()
    )


@pytest.fixture
def window():
    return WindowInfo(app_name="Example", rect=Rect(x=10, y=20, w=300, h=200), scale=2)


@pytest.fixture
def base_request():
    return validate_request({"bundleId": "com.example.app", "timeoutMs": 10_000})


@pytest.fixture
def capturer(tmp_path):
    return Capturer(temp_root=tmp_path)


@pytest.fixture
def run_process():
    with patch("anyio.run_process", new_callable=AsyncMock) as mock:
        yield mock


@pytest.fixture(autouse=True)
def fixed_uuid():
    with patch("uuid.uuid4", return_value=FIXED_UUID):
        yield


class TestBuildCaptureArgs:
    def test_rectangle_without_shadow(self, base_request, window):
        args = build_capture_args(base_request, window)
        assert args == ["-x", "-t", "png", "-o", "-R", "10,20,300,200"]

    def test_shadow_keeps_default_flags(self, window):
        request = validate_request({"appName": "Example", "includeShadow": True, "format": "jpg"})
        assert build_capture_args(request, window) == ["-x", "-t", "jpg", "-R", "10,20,300,200"]

    def test_window_id_replaces_rectangle(self, base_request, window):
        args = build_capture_args(base_request, window, window_id="42")
        assert args == ["-x", "-t", "png", "-o", "-l", "42"]
        assert "-R" not in args


class TestCapture:
    async def test_captures_rectangle(self, capturer, base_request, window, run_process, tmp_path):
        run_process.return_value = completed()

        result = await capturer.capture(base_request, window)

        run_process.assert_awaited_once()
        command = run_process.call_args.args[0]
        assert command[0] == "screencapture"
        assert command[-3:-1] == ["-R", "10,20,300,200"]
        assert command[-1] == result.path
        assert result.path.endswith(f"/shot-{FIXED_UUID}.png")
        directory = Path(result.path).parent
        assert directory.name.startswith("mcp-screenshot-")
        assert str(directory.parent) == str(tmp_path)
        assert result.rect == window.rect
        assert result.scale == 2
        assert result.app_name == "Example"
        assert result.format == "png"

    async def test_each_capture_gets_its_own_directory(self, capturer, base_request, window, run_process):
        run_process.return_value = completed()

        first = await capturer.capture(base_request, window)
        second = await capturer.capture(base_request, window)

        assert Path(first.path).parent != Path(second.path).parent

    async def test_prefers_window_id(self, capturer, base_request, window, run_process):
        run_process.side_effect = [completed(" 42\n"), completed()]
        request = base_request.model_copy(update={"prefer_window_id": True})

        result = await capturer.capture(request, window)

        lookup, capture = run_process.call_args_list
        assert lookup.args[0][:2] == ["bash", "-lc"]
        assert "GetWindowID Example --list" in lookup.args[0][2]
        assert capture.args[0][0] == "screencapture"
        assert capture.args[0][-3:-1] == ["-l", "42"]
        assert "-R" not in capture.args[0]
        assert result.path.endswith(f"shot-{FIXED_UUID}.png")

    async def test_falls_back_to_rectangle_when_lookup_fails(
        self, capturer, base_request, window, run_process
    ):
        run_process.side_effect = [completed(returncode=1), completed()]
        request = base_request.model_copy(update={"prefer_window_id": True})

        await capturer.capture(request, window)

        capture = run_process.call_args_list[1]
        assert capture.args[0][-3:-1] == ["-R", "10,20,300,200"]

    async def test_non_zero_exit(self, capturer, base_request, window, run_process, tmp_path):
        run_process.return_value = completed(stderr="could not create image", returncode=1)

        with pytest.raises(CaptureFailedError, match="could not create image") as exc_info:
            await capturer.capture(base_request, window)

        assert exc_info.value.kind == "CaptureFailed"
        assert exc_info.value.context == {"appName": "Example"}
        # the empty capture directory is not left behind
        assert list(tmp_path.iterdir()) == []

    async def test_missing_screencapture(self, capturer, base_request, window, run_process):
        run_process.side_effect = FileNotFoundError("screencapture")

        with pytest.raises(CaptureFailedError, match="could not be started"):
            await capturer.capture(base_request, window)

    async def test_timeout(self, capturer, window, run_process):
        request = validate_request({"appName": "Example", "timeoutMs": 1_000})

        async def hang(*args, **kwargs):
            await anyio.sleep_forever()

        run_process.side_effect = hang

        with pytest.raises(CaptureFailedError, match="timed out"):
            await capturer.capture(request, window)


class TestFindWindowId:
    async def test_returns_stripped_id(self, run_process):
        run_process.return_value = completed("42\n")
        assert await find_window_id("Example", 1_000) == "42"

    async def test_quotes_app_name(self, run_process):
        run_process.return_value = completed("7")
        await find_window_id("Bob's App", 1_000)
        assert "GetWindowID 'Bob'\"'\"'s App' --list" in run_process.call_args.args[0][2]

    @pytest.mark.parametrize(
        "outcome",
        [
            completed(returncode=1),
            completed(""),
            completed("  \n"),
            FileNotFoundError("bash"),
            RuntimeError("boom"),
        ],
    )
    async def test_failures_mean_no_id(self, run_process, outcome):
        if isinstance(outcome, Exception):
            run_process.side_effect = outcome
        else:
            run_process.return_value = outcome

        assert await find_window_id("Example", 1_000) is None

    async def test_timeout_means_no_id(self, run_process):
        async def hang(*args, **kwargs):
            await anyio.sleep_forever()

        run_process.side_effect = hang

        assert await find_window_id("Example", 1_000) is None
