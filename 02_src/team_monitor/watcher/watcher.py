"""Filesystem notification source backed by watchdog.

watchdog delivers events on its own observer thread. The handler here only
forwards them onto the event loop; a single consumer task feeds them to the
change detector one at a time, so every store mutation happens on the loop
thread in arrival order.
"""

import asyncio
import contextlib
import os
from pathlib import Path
from typing import Protocol

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from ..logging_config import get_logger
from .detector import ChangeKind, FileChange, IChangeDetector

logger = get_logger(__name__)

# Seconds to wait for the observer thread on shutdown
OBSERVER_JOIN_TIMEOUT = 5.0


class IFileWatcher(Protocol):
    """Long-lived watch over the teams and tasks roots."""

    async def start(self) -> None:
        """Begin watching and processing notifications."""
        ...

    async def stop(self) -> None:
        """Stop the observer and the consumer task."""
        ...


class _ForwardingHandler(FileSystemEventHandler):
    """Runs on the observer thread; hands each file event to the loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop, queue: "asyncio.Queue[FileChange]"):
        super().__init__()
        self._loop = loop
        self._queue = queue

    def on_created(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._forward(event.src_path, ChangeKind.CREATED)

    def on_modified(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._forward(event.src_path, ChangeKind.MODIFIED)

    def on_deleted(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._forward(event.src_path, ChangeKind.REMOVED)

    def on_moved(self, event: FileSystemEvent) -> None:
        # write-to-temp-then-rename shows up as a move onto the record file
        if not event.is_directory:
            self._forward(event.src_path, ChangeKind.REMOVED)
            self._forward(event.dest_path, ChangeKind.CREATED)

    def _forward(self, raw_path: str | bytes, kind: ChangeKind) -> None:
        change = FileChange(Path(os.fsdecode(raw_path)), kind)
        # The loop may already be closed during shutdown
        with contextlib.suppress(RuntimeError):
            self._loop.call_soon_threadsafe(self._queue.put_nowait, change)


class FileWatcher:
    """Watches directory roots recursively and drives the change detector."""

    def __init__(self, detector: IChangeDetector, roots: list[Path]):
        self._detector = detector
        self._roots = roots
        self._queue: asyncio.Queue[FileChange] = asyncio.Queue()
        self._observer: Observer | None = None
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """Begin watching and processing notifications."""
        if self.running:
            return

        loop = asyncio.get_running_loop()
        handler = _ForwardingHandler(loop, self._queue)
        observer = Observer()
        for root in self._roots:
            if root.is_dir():
                observer.schedule(handler, str(root), recursive=True)
                logger.info("Watching %s", root)
            else:
                logger.warning("Not watching missing directory %s", root)
        observer.start()

        self._observer = observer
        self._task = asyncio.create_task(self._consume())

    async def stop(self) -> None:
        """Stop the observer and the consumer task."""
        if self._observer:
            self._observer.stop()
            await asyncio.to_thread(self._observer.join, OBSERVER_JOIN_TIMEOUT)
            self._observer = None
            logger.info("Watcher stopped")

        if self._task:
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
            self._task = None

    def submit(self, change: FileChange) -> None:
        """Queue a notification as if it came from the observer."""
        self._queue.put_nowait(change)

    async def drain(self) -> None:
        """Wait until every queued notification has been processed."""
        await self._queue.join()

    async def _consume(self) -> None:
        while True:
            change = await self._queue.get()
            try:
                await self._detector.process(change)
            except Exception:
                logger.exception("Error processing %s %s", change.kind.value, change.path)
            finally:
                self._queue.task_done()
