from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable, Coroutine
from pathlib import Path
from typing import Any

from watchfiles import Change, awatch

logger = logging.getLogger(__name__)

PathFilter = Callable[[Path], bool]
ChangeCallback = Callable[[set[Path]], Coroutine[Any, Any, None]]


class WatchfilesWatcher:
    """Forward on-disk changes of workspace scripts to a callback.

    Implements the ``FileWatcherPort`` protocol. ``accept`` decides which paths
    belong to the workspace; it must select the same files as the initial bulk
    analysis. Added, modified and deleted paths are forwarded alike, and the
    callback decides what a missing file means.
    """

    def __init__(self, directory: str | Path, on_change: ChangeCallback, accept: PathFilter) -> None:
        self._directory = Path(directory)
        self._on_change = on_change
        self._accept = accept
        self._task: asyncio.Task[None] | None = None

    @property
    def is_running(self) -> bool:
        return self._task is not None

    async def start(self) -> None:
        if self._task is not None:
            return
        self._task = asyncio.create_task(self._watch())
        logger.info("Watching %s for script changes", self._directory)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
        logger.info("Stopped watching %s", self._directory)

    def _selected(self, changes: set[tuple[Change, str]]) -> set[Path]:
        return {Path(raw) for _, raw in changes if self._accept(Path(raw))}

    async def _watch(self) -> None:
        async for changes in awatch(self._directory):
            paths = self._selected(changes)
            if not paths:
                continue
            logger.info("Detected changes in %d workspace script(s)", len(paths))
            try:
                await self._on_change(paths)
            except Exception:
                logger.exception("Error in watcher callback")
