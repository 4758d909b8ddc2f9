"""
Delivers stable values once, deduplicated against the persisted marker.
"""

from enum import Enum
from pathlib import Path

from urlbeacon.core import DeliveryResult, Transport
from urlbeacon.logging_config import get_logger
from urlbeacon.state import MarkerStore, atomic_write

logger = get_logger(__name__)


class MarkerPolicy(str, Enum):
    """When a value is recorded as notified."""
    ALWAYS = "always"          # after every attempt, delivered or not
    ON_SUCCESS = "on_success"  # only when the transport reports delivery


class NotifyOutcome(str, Enum):
    """What on_stable did with a value."""
    SKIPPED = "skipped"
    DELIVERED = "delivered"
    FAILED = "failed"


class IdempotentNotifier:
    """
    Hands each new stable value to the transport and records it.

    ``last_notified`` is a write-through view of the marker store: it only
    advances when the marker was saved, so memory and disk agree after a
    restart. ``legacy_cache_advance`` restores the older behaviour where the
    cached value advanced even if delivery or persistence failed.
    """

    def __init__(  # pylint: disable=too-many-arguments,too-many-positional-arguments
        self,
        transport: Transport,
        store: MarkerStore,
        domain: str,
        policy: MarkerPolicy = MarkerPolicy.ALWAYS,
        legacy_cache_advance: bool = False,
        value_file: str | Path | None = None
    ) -> None:
        """
        Initialize the notifier and load the persisted marker.

        Args:
            transport: Destination for stable values
            store: Persistent marker of the last notified value
            domain: Identifier sent alongside each value
            policy: When to persist the marker
            legacy_cache_advance: Advance the cache even when saving failed
            value_file: Optional file that mirrors every value sent
        """
        self.transport = transport
        self.store = store
        self.domain = domain
        self.policy = MarkerPolicy(policy)
        self.legacy_cache_advance = legacy_cache_advance
        self.value_file = Path(value_file) if value_file else None

        self.last_notified = store.load()
        if self.last_notified:
            logger.info("Loaded last notified value %s", self.last_notified)

    def on_stable(self, value: str) -> NotifyOutcome:
        """
        Deliver a stable value unless it was already notified.

        Args:
            value: A value confirmed by the stability tracker

        Returns:
            SKIPPED if it matched the marker, otherwise DELIVERED or FAILED
            depending on the transport result
        """
        if value == self.last_notified:
            logger.info("Stable value %s already notified; skipping", value)
            return NotifyOutcome.SKIPPED

        self._mirror(value)
        result = self._send(value)

        saved = False
        if result.delivered or self.policy is MarkerPolicy.ALWAYS:
            saved = self._persist(value)
        else:
            logger.warning(
                "Not recording %s as notified: delivery failed (%s)",
                value,
                result.reason
            )

        if saved or self.legacy_cache_advance:
            self.last_notified = value

        return NotifyOutcome.DELIVERED if result.delivered else NotifyOutcome.FAILED

    def _send(self, value: str) -> DeliveryResult:
        """Call the transport, turning unexpected errors into a failed result."""
        logger.info("Notifying %s for '%s'", value, self.domain)
        try:
            result = self.transport.send(self.domain, value)
        except Exception as e:  # pylint: disable=broad-exception-caught
            logger.error(
                "Error delivering %s via %s",
                value,
                self.transport.__class__.__name__,
                exc_info=True
            )
            return DeliveryResult.failed(str(e))

        if not result.delivered:
            logger.warning(
                "Transport %s failed for %s: %s",
                self.transport.__class__.__name__,
                value,
                result.reason
            )
        return result

    def _persist(self, value: str) -> bool:
        """Save the marker; on failure the previous marker stays on disk."""
        try:
            self.store.save(value)
        except OSError as e:
            logger.error("Could not save marker %s: %s", value, e)
            return False
        logger.info("Recorded %s as last notified", value)
        return True

    def _mirror(self, value: str) -> None:
        """Write the value to the optional mirror file."""
        if self.value_file is None:
            return
        try:
            self.value_file.parent.mkdir(parents=True, exist_ok=True)
            atomic_write(self.value_file, value)
        except OSError as e:
            logger.warning("Could not write value file %s: %s", self.value_file, e)
