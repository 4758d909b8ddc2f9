"""
Wakes the polling loop early when the log file changes, using watchdog.
"""

import threading
from pathlib import Path
from typing import TYPE_CHECKING

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer as WatchdogObserver

from urlbeacon.logging_config import get_logger

if TYPE_CHECKING:
    from watchdog.observers.api import BaseObserver

logger = get_logger(__name__)


def _event_path(path: str | bytes) -> Path:
    """watchdog reports str or bytes paths depending on how it was scheduled."""
    if isinstance(path, bytes):
        path = path.decode()
    return Path(path).absolute()


class FileEventWakeup:
    """
    Shortens poll waits by signalling on file system events.

    Polling stays the source of truth; this only interrupts the sleep
    between polls when the log or its rotated sibling is touched.

    Config:
        log_file: The followed log file
        rotated_suffix: Suffix of the rotated sibling (default: ".1")
    """

    def __init__(self, log_file: str | Path, rotated_suffix: str = ".1") -> None:
        self.log_file = Path(log_file)
        absolute = self.log_file.absolute()
        self.watched = {absolute, Path(str(absolute) + rotated_suffix)}
        self.event = threading.Event()
        self.observer: BaseObserver | None = None

    def start(self) -> None:
        """Start watching the log's directory."""
        directory = self.log_file.absolute().parent
        if not directory.is_dir():
            logger.warning("Cannot watch %s: directory does not exist", directory)
            return

        self.observer = WatchdogObserver()
        self.observer.schedule(self.create_event_handler(), str(directory), recursive=False)
        self.observer.start()
        logger.debug("Watching %s for changes", directory)

    def stop(self) -> None:
        """Stop watching and release any waiter."""
        self.event.set()
        if self.observer:
            self.observer.stop()
            self.observer.join()
            self.observer = None

    def set(self) -> None:
        """Wake the waiter now."""
        self.event.set()

    def wait(self, timeout: float) -> bool:
        """
        Sleep until an event arrives or the timeout elapses.

        Returns:
            True if woken by an event
        """
        woken = self.event.wait(timeout)
        self.event.clear()
        return woken

    def create_event_handler(self) -> FileSystemEventHandler:
        """Create a watchdog event handler that sets our event."""
        wakeup = self
        watched = self.watched

        class Handler(FileSystemEventHandler):
            """Signals on any change to the watched files."""

            def _matches(self, event: FileSystemEvent) -> bool:
                if _event_path(event.src_path) in watched:
                    return True
                dest = getattr(event, "dest_path", "")
                return bool(dest) and _event_path(dest) in watched

            def on_modified(self, event: FileSystemEvent) -> None:
                if self._matches(event):
                    wakeup.set()

            def on_created(self, event: FileSystemEvent) -> None:
                if self._matches(event):
                    wakeup.set()

            def on_deleted(self, event: FileSystemEvent) -> None:
                if self._matches(event):
                    wakeup.set()

            def on_moved(self, event: FileSystemEvent) -> None:
                if self._matches(event):
                    wakeup.set()

        return Handler()
