"""
Follows a growing log file line by line.

The reader is robust against log rotation (move/create and copytruncate),
truncation, and the file disappearing for a while. It never replays history:
the first open starts at the current end of the file.
"""

import os
import threading
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO

from urlbeacon.logging_config import get_logger
from urlbeacon.platform import Fingerprint, get_file_fingerprint, get_handle_fingerprint

logger = get_logger(__name__)

ROTATION_POLICIES = ("end", "start")

# Bytes kept from just before the read position to spot in-place rewrites
TAIL_GUARD_BYTES = 16


class SourceUnavailable(Exception):
    """The log file cannot be opened or read right now; retry after a backoff."""


@dataclass
class TailCursor:
    """Open handle on the log file and the identity it was opened with."""
    handle: BinaryIO
    fingerprint: Fingerprint
    position: int
    rotated_fingerprint: Fingerprint | None
    tail: bytes = b""
    idle: bool = True


class RotationDetector:
    """Detects why the file behind an open cursor is no longer the log."""

    def detect(
        self,
        log_file: Path,
        rotated_log_file: Path,
        cursor: TailCursor
    ) -> str | None:
        """
        Compare the cursor against the files currently on disk.

        Args:
            log_file: Path to the main log file
            rotated_log_file: Path to the rotated log file (.log.1)
            cursor: Cursor opened on the log file

        Returns:
            "missing", "move_create", "copytruncate" or "truncated" when the
            cursor must be dropped, None if it is still current

        Raises:
            OSError: If the bytes before the cursor cannot be read back
        """
        try:
            stat_info = log_file.stat()
        except FileNotFoundError:
            return "missing"
        except OSError as e:
            logger.warning("Cannot stat %s: %s", log_file, e)
            return "missing"

        if (stat_info.st_dev, stat_info.st_ino) != cursor.fingerprint:
            return "move_create"

        current_rotated = get_file_fingerprint(rotated_log_file)
        if current_rotated != cursor.rotated_fingerprint:
            return "copytruncate"

        if stat_info.st_size < cursor.position:
            return "truncated"

        if self.rewritten(cursor):
            return "truncated"

        return None

    def rewritten(self, cursor: TailCursor) -> bool:
        """
        Check whether the bytes just before the cursor changed since they were read.

        This catches a file truncated and written past the old offset between
        two polls, which the size check cannot see. The cursor is left in place.
        """
        if not cursor.tail:
            return False
        cursor.handle.seek(cursor.position - len(cursor.tail))
        data = cursor.handle.read(len(cursor.tail))
        cursor.handle.seek(cursor.position)
        return data != cursor.tail


class TailingReader:
    """
    Yields lines appended to a log file.

    Config:
        log_file: Path to the log file to follow
        max_line_length: Longest line in bytes; longer lines are truncated
        rotated_suffix: Suffix of the rotated sibling used to spot copytruncate
        on_rotation: Where to resume after a rotation, "end" or "start"
    """

    def __init__(
        self,
        log_file: str | Path,
        max_line_length: int = 4096,
        rotated_suffix: str = ".1",
        on_rotation: str = "end"
    ) -> None:
        if on_rotation not in ROTATION_POLICIES:
            raise ValueError(f"Unknown rotation policy: {on_rotation}")
        if max_line_length < 1:
            raise ValueError("max_line_length must be positive")

        self.log_file = Path(log_file)
        self.rotated_log_file = Path(str(self.log_file) + rotated_suffix)
        self.max_line_length = max_line_length
        self.on_rotation = on_rotation
        self.rotation_detector = RotationDetector()
        self.cursor: TailCursor | None = None
        self._opened_once = False
        self._partial = b""
        self._discarding = False

    def open(self) -> TailCursor:
        """
        Open the log file and position the cursor.

        The first open seeks to the end of the file. Later opens (after a
        rotation or the file vanishing) follow the rotation policy.

        Raises:
            SourceUnavailable: If the file cannot be opened
        """
        self.close()

        try:
            handle = self.log_file.open('rb')
        except OSError as e:
            raise SourceUnavailable(f"Cannot open {self.log_file}: {e}") from e

        try:
            fingerprint = get_handle_fingerprint(handle.fileno())
            if self._opened_once and self.on_rotation == "start":
                position = 0
            else:
                position = handle.seek(0, os.SEEK_END)
            tail = b""
            if position:
                handle.seek(max(position - TAIL_GUARD_BYTES, 0))
                tail = handle.read(min(position, TAIL_GUARD_BYTES))
                handle.seek(position)
        except OSError as e:
            handle.close()
            raise SourceUnavailable(f"Cannot position in {self.log_file}: {e}") from e

        self.cursor = TailCursor(
            handle=handle,
            fingerprint=fingerprint,
            position=position,
            rotated_fingerprint=get_file_fingerprint(self.rotated_log_file),
            tail=tail
        )
        self._opened_once = True
        logger.info("Tailing %s from offset %d", self.log_file, position)
        return self.cursor

    def close(self) -> None:
        """Close the cursor and drop any partially read line."""
        if self.cursor is not None:
            self.cursor.handle.close()
            self.cursor = None
        self._partial = b""
        self._discarding = False

    def next_line(self) -> str | None:
        """
        Read the next complete line.

        Returns:
            The line without its line terminator, or None if no new complete
            line is available right now

        Raises:
            SourceUnavailable: If the file has to be (re)opened and cannot be,
                or reading it fails. The cursor is closed in the latter case.
        """
        if self.cursor is None:
            self.open()
        elif self.cursor.idle:
            self._reopen_if_rewritten(self.cursor)

        checked_rotation = False
        while self.cursor is not None:
            chunk = self._read_chunk(self.cursor)

            if chunk:
                line = self._accept(chunk)
                if line is not None:
                    return line
                continue

            if checked_rotation:
                return None
            checked_rotation = True

            try:
                reason = self.rotation_detector.detect(
                    self.log_file, self.rotated_log_file, self.cursor
                )
            except OSError as e:
                raise self._read_failed(e) from e
            if reason is None:
                return None

            if reason == "missing":
                logger.info("Log file %s disappeared; waiting for it to return", self.log_file)
                self.close()
                return None

            logger.info("Detected %s rotation of %s; reopening", reason, self.log_file)
            self.open()

        return None

    def _read_chunk(self, cursor: TailCursor) -> bytes:
        """Read up to the next newline without exceeding the line limit."""
        limit = self.max_line_length - len(self._partial)
        try:
            chunk = cursor.handle.readline(max(limit, 1))
            cursor.position = cursor.handle.tell()
        except OSError as e:
            raise self._read_failed(e) from e

        cursor.tail = (cursor.tail + chunk)[-TAIL_GUARD_BYTES:]
        cursor.idle = not chunk
        return chunk

    def _read_failed(self, error: OSError) -> SourceUnavailable:
        """Drop the cursor after a read error so the next call reopens the file."""
        logger.warning("Error reading log file %s: %s", self.log_file, error)
        self.close()
        return SourceUnavailable(f"Cannot read {self.log_file}: {error}")

    def _reopen_if_rewritten(self, cursor: TailCursor) -> None:
        """Before resuming after end of stream, make sure the file was not rewritten."""
        try:
            rewritten = self.rotation_detector.rewritten(cursor)
        except OSError as e:
            raise self._read_failed(e) from e

        if rewritten:
            logger.info("Detected truncated rotation of %s; reopening", self.log_file)
            self.open()

    def _accept(self, chunk: bytes) -> str | None:
        """Assemble chunks into lines, truncating over-long ones."""
        if self._discarding:
            if chunk.endswith(b"\n"):
                self._discarding = False
            return None

        self._partial += chunk

        if self._partial.endswith(b"\n"):
            raw = self._partial
            self._partial = b""
            return raw.decode('utf-8', errors='replace').rstrip("\r\n")

        if len(self._partial) >= self.max_line_length:
            raw = self._partial
            self._partial = b""
            self._discarding = True
            logger.debug(
                "Line longer than %d bytes in %s; truncated",
                self.max_line_length,
                self.log_file
            )
            return raw.decode('utf-8', errors='replace')

        # Partial write; wait for the rest of the line
        return None

    def follow(
        self,
        stop_event: threading.Event | None = None,
        poll_interval: float = 0.3,
        wait: Callable[[float], object] | None = None
    ) -> Iterator[str]:
        """
        Yield lines forever, waiting between polls.

        Args:
            stop_event: Ends the iteration once set
            poll_interval: Seconds to wait when no line is available
            wait: Called with poll_interval to suspend; defaults to
                stop_event.wait so stopping interrupts the sleep
        """
        stop = stop_event or threading.Event()
        pause = wait or stop.wait

        try:
            while not stop.is_set():
                try:
                    line = self.next_line()
                except SourceUnavailable as e:
                    logger.debug("%s", e)
                    pause(poll_interval)
                    continue

                if line is None:
                    pause(poll_interval)
                    continue

                yield line
        finally:
            self.close()
