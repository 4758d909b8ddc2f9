"""
Console transport for urlbeacon.
"""

from urlbeacon.core import DeliveryResult, Transport
from urlbeacon.logging_config import get_logger
from urlbeacon.registry import register_transport

logger = get_logger(__name__)


@register_transport("console")
class ConsoleTransport(Transport):
    """
    Prints deliveries to stdout.

    Useful for testing and debugging.

    Config:
        (none required)
    """

    def send(self, key: str, value: str) -> DeliveryResult:
        """Print the pair to the console."""
        logger.info("Console delivery for '%s': %s", key, value)

        print(f"\n{'=' * 60}")
        print(f"URL for {key}")
        print(value)
        print(f"{'=' * 60}\n")
        return DeliveryResult.ok()


# Export for dynamic importing
__all__ = ["ConsoleTransport"]
