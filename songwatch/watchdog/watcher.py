"""Filesystem watcher for the music library.

Uses the ``watchdog`` library's polling observer to detect created, moved
and removed files. The observer runs in a background thread and hands each
change to the asyncio loop, where a single dispatcher worker drains a
bounded queue in arrival order.
"""

import asyncio
import logging
import os
from fnmatch import fnmatchcase
from pathlib import PurePosixPath

from pydantic import ValidationError
from watchdog.events import (
    FileSystemEvent,
    FileSystemEventHandler,
    FileSystemMovedEvent,
)
from watchdog.observers.polling import PollingObserver

from songwatch.config import SyncConfig
from songwatch.errors import FatalWatchError
from songwatch.schemas.sync import ChangeEvent, Operation
from songwatch.sync.dispatcher import Dispatcher

logger = logging.getLogger(__name__)

# How often the watch loop checks that the root and observer are still alive
HEALTH_CHECK_SECONDS = 1.0


class LibraryEventHandler(FileSystemEventHandler):
    """Converts watchdog events into ``ChangeEvent``s and queues them.

    Only files matching the configured patterns are forwarded. Directory
    moves are forwarded too so the dispatcher can reject and report them.
    Modifications and directory creation/removal are ignored.

    The queue is bounded: when it is full the new event is dropped, so a
    burst of changes coalesces instead of piling up.
    """

    def __init__(
        self,
        *,
        loop: asyncio.AbstractEventLoop,
        queue: "asyncio.Queue[ChangeEvent]",
        file_patterns: tuple[str, ...] | list[str],
    ) -> None:
        super().__init__()
        self._loop = loop
        self._queue = queue
        self._file_patterns = list(file_patterns)

    def _matches_pattern(self, path: str) -> bool:
        """Check the file name against the patterns (case-sensitive)."""
        name = PurePosixPath(path).name
        return any(fnmatchcase(name, pattern) for pattern in self._file_patterns)

    def on_created(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return
        path = os.fsdecode(event.src_path)
        if self._matches_pattern(path):
            self._offer(operation=Operation.CREATED, path=path)

    def on_deleted(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return
        path = os.fsdecode(event.src_path)
        if self._matches_pattern(path):
            self._offer(operation=Operation.REMOVED, path=path)

    def on_moved(self, event: FileSystemMovedEvent) -> None:
        old_path = os.fsdecode(event.src_path)
        new_path = os.fsdecode(event.dest_path)
        if not event.is_directory and not (
            self._matches_pattern(old_path) or self._matches_pattern(new_path)
        ):
            return
        self._offer(
            operation=Operation.MOVED,
            path=new_path,
            old_path=old_path,
            is_directory=event.is_directory,
        )

    def _offer(self, **fields) -> None:
        """Build a ChangeEvent and pass it to the loop thread."""
        try:
            change = ChangeEvent(**fields)
        except ValidationError as exc:
            logger.debug("Ignoring invalid change %s: %s", fields, exc)
            return
        self._loop.call_soon_threadsafe(self._enqueue, change)

    def _enqueue(self, change: ChangeEvent) -> None:
        try:
            self._queue.put_nowait(change)
        except asyncio.QueueFull:
            logger.debug("Queue full, dropping %s %s", change.operation, change.path)


async def watch_library(config: SyncConfig, dispatcher: Dispatcher) -> None:
    """Watch the library tree and dispatch changes continuously.

    Runs until cancelled or interrupted.

    Raises:
        FatalWatchError: If the watch root is missing or disappears, or the
            observer thread dies.
    """
    watch_dir = config.watch_dir
    if not watch_dir.is_dir():
        raise FatalWatchError(f"Watch directory does not exist: {watch_dir}")

    loop = asyncio.get_running_loop()
    queue: asyncio.Queue[ChangeEvent] = asyncio.Queue(maxsize=config.queue_size)

    handler = LibraryEventHandler(
        loop=loop,
        queue=queue,
        file_patterns=config.file_patterns,
    )

    observer = PollingObserver(timeout=config.poll_interval)
    observer.schedule(handler, str(watch_dir), recursive=True)
    observer.start()
    worker = asyncio.create_task(dispatcher.run(queue))
    logger.info("Watching %s every %ss…", watch_dir, config.poll_interval)

    try:
        while True:
            await asyncio.sleep(HEALTH_CHECK_SECONDS)
            if not watch_dir.is_dir():
                raise FatalWatchError(f"Watch directory disappeared: {watch_dir}")
            if not observer.is_alive():
                raise FatalWatchError("Filesystem observer stopped unexpectedly")
            if worker.done():
                cause = None if worker.cancelled() else worker.exception()
                raise FatalWatchError("Dispatcher worker exited unexpectedly") from cause
    except (asyncio.CancelledError, KeyboardInterrupt):
        pass
    finally:
        worker.cancel()
        observer.stop()
        observer.join()
        logger.info("Watcher stopped.")
