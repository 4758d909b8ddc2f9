"""
Persistent marker of the last notified value.
"""

import os
from pathlib import Path

from urlbeacon.logging_config import get_logger

logger = get_logger(__name__)


def atomic_write(path: str | Path, data: str) -> None:
    """
    Replace the contents of a file atomically.

    The data is written to a sibling ``<name>.tmp.<pid>`` file, flushed to
    disk, and renamed over the target. The directory is synced afterwards so
    the rename itself is durable. Readers see either the old or the new
    complete contents.

    Args:
        path: File to replace
        data: Text to write

    Raises:
        OSError: If the temp file cannot be written or renamed. The temp
            file is removed and the target is left untouched.
    """
    target = Path(path)
    tmp = target.with_name(f"{target.name}.tmp.{os.getpid()}")

    try:
        with tmp.open('w', encoding='utf-8') as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp, target)
        fsync_directory(target.parent)
    except OSError:
        tmp.unlink(missing_ok=True)
        raise


def fsync_directory(directory: str | Path) -> None:
    """Flush a directory entry to disk; a no-op where directories cannot be opened."""
    if not hasattr(os, "O_DIRECTORY"):
        return
    fd = os.open(directory, os.O_RDONLY | os.O_DIRECTORY)
    try:
        os.fsync(fd)
    finally:
        os.close(fd)


class MarkerStore:
    """
    Durable single-value store for the last notified value.

    The marker is a plain text file holding exactly the value. A trailing
    newline is tolerated on read so the file can be edited by hand.
    """

    def __init__(self, marker_file: str | Path) -> None:
        """
        Initialize the store.

        Args:
            marker_file: Path to the canonical marker file
        """
        self.marker_file = Path(marker_file)

    def load(self) -> str | None:
        """
        Read the marker.

        Returns:
            The last notified value, or None if there is no prior marker
        """
        try:
            content = self.marker_file.read_text(encoding='utf-8', errors='replace')
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.warning("Could not read marker file %s: %s", self.marker_file, e)
            return None

        value = content.split('\n', 1)[0].strip()
        return value or None

    def save(self, value: str) -> None:
        """
        Atomically replace the marker with a new value.

        Raises:
            OSError: If the marker could not be written; the previous marker
                is left in place.
        """
        self.marker_file.parent.mkdir(parents=True, exist_ok=True)
        atomic_write(self.marker_file, value)
        logger.debug("Saved marker %s to %s", value, self.marker_file)

    def clear(self) -> bool:
        """
        Remove the marker.

        Returns:
            True if a marker file was removed
        """
        try:
            self.marker_file.unlink()
        except FileNotFoundError:
            return False
        logger.info("Cleared marker %s", self.marker_file)
        return True
