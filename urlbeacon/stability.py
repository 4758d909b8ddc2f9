"""
Debounces extracted values until one is seen unchanged several times in a row.
"""

from dataclasses import dataclass

from urlbeacon.logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class Candidate:
    """The value currently awaiting confirmation."""
    value: str
    count: int = 1


class StabilityTracker:
    """
    Emits a value once it has been observed ``threshold`` consecutive times.

    Lines without a match are transparent: they neither count nor reset the
    candidate. After emitting, the tracker forgets the value, so it must be
    seen ``threshold`` more times before it is emitted again.
    """

    def __init__(self, threshold: int = 3) -> None:
        if threshold < 1:
            raise ValueError("threshold must be at least 1")
        self.threshold = threshold
        self._candidate: Candidate | None = None

    @property
    def candidate(self) -> Candidate | None:
        """Snapshot of the active candidate, if any."""
        if self._candidate is None:
            return None
        return Candidate(self._candidate.value, self._candidate.count)

    def reset(self) -> None:
        """Forget the active candidate."""
        self._candidate = None

    def observe(self, value: str | None) -> str | None:
        """
        Feed one extraction result.

        Args:
            value: The extracted value, or None when the line had no match

        Returns:
            The value when it just became stable, None otherwise
        """
        if value is None:
            return None

        if self._candidate is None or self._candidate.value != value:
            self._candidate = Candidate(value)
        else:
            self._candidate.count += 1

        logger.debug("Candidate %s (%d/%d)", value, self._candidate.count, self.threshold)

        if self._candidate.count >= self.threshold:
            self._candidate = None
            return value
        return None
