"""Time-to-live handling for capture directories."""

from __future__ import annotations

import functools
import shutil
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from pathlib import Path

import anyio
import anyio.to_thread
from anyio.abc import TaskGroup

from mcp_screenshot_mac.settings import CleanupSettings
from mcp_screenshot_mac.utilities.logging import get_logger

logger = get_logger(__name__)


def get_ttl_ms() -> int:
    """Read the cleanup TTL in milliseconds; 0 means never delete.

    The environment is re-read on every call.
    """
    return CleanupSettings().ttl_ms


class CleanupScheduler:
    """Deletes capture directories once their TTL has elapsed.

    Deletion is fire-and-forget: ``schedule`` returns immediately, and a
    failed removal is ignored. Deletions run in a task group that lives as
    long as ``running()``; any still pending when it exits are dropped.

    Example:
        ```python
        scheduler = CleanupScheduler()
        async with scheduler.running():
            scheduler.schedule("/tmp/mcp-screenshot-abc123", 600_000)
        ```
    """

    def __init__(self, sleep: Callable[[float], Awaitable[None]] = anyio.sleep):
        self._sleep = sleep
        self._task_group: TaskGroup | None = None

    @property
    def is_running(self) -> bool:
        return self._task_group is not None

    @asynccontextmanager
    async def running(self) -> AsyncIterator[CleanupScheduler]:
        async with anyio.create_task_group() as tg:
            self._task_group = tg
            try:
                yield self
            finally:
                self._task_group = None
                tg.cancel_scope.cancel()

    def schedule(self, directory: str | Path, ttl_ms: int) -> None:
        """Remove ``directory`` recursively after ``ttl_ms`` milliseconds.

        Raises:
            RuntimeError: if the scheduler is not running
        """
        if ttl_ms <= 0:
            return
        if self._task_group is None:
            raise RuntimeError("Cleanup scheduler is not running")
        self._task_group.start_soon(self._remove_later, Path(directory), ttl_ms)

    async def _remove_later(self, directory: Path, ttl_ms: int) -> None:
        await self._sleep(ttl_ms / 1000)
        await anyio.to_thread.run_sync(
            functools.partial(shutil.rmtree, directory, ignore_errors=True)
        )
        logger.debug(f"Removed {directory}")
