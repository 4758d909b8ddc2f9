"""
File identity helpers used for rotation detection.
"""

import os
from pathlib import Path

from urlbeacon.logging_config import get_logger

logger = get_logger(__name__)

Fingerprint = tuple[int, int]


def fingerprint_from_stat(stat_info: os.stat_result) -> Fingerprint:
    """Build a fingerprint from an existing stat result."""
    return (stat_info.st_dev, stat_info.st_ino)


def get_file_fingerprint(path: str | Path) -> Fingerprint | None:
    """
    Get a unique fingerprint for a file that is stable across renames.

    This is (device, inode). On Windows, ``os.stat`` fills both fields from
    the volume serial number and file index.

    Args:
        path: The path to the file.

    Returns:
        A tuple representing the file fingerprint, or None if the file
        cannot be accessed.
    """
    try:
        return fingerprint_from_stat(os.stat(path))
    except FileNotFoundError:
        return None
    except OSError as e:
        logger.error("Error getting fingerprint for file %s: %s", path, e)
        return None


def get_handle_fingerprint(fileno: int) -> Fingerprint:
    """Fingerprint of an already open file descriptor."""
    return fingerprint_from_stat(os.fstat(fileno))
