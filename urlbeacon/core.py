"""
Core interfaces and data structures for urlbeacon.

The pipeline itself (tailer, extractor, stability tracker, notifier) lives in
its own modules. This module only defines the boundary to the outside world:
the Transport plugin interface and the typed result it reports.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class DeliveryResult:
    """Outcome of handing a value to a transport."""
    delivered: bool
    reason: str = ""  # Why delivery failed, empty on success

    @classmethod
    def ok(cls) -> "DeliveryResult":
        """Build a successful result."""
        return cls(delivered=True)

    @classmethod
    def failed(cls, reason: str) -> "DeliveryResult":
        """Build a failed result carrying a short reason."""
        return cls(delivered=False, reason=reason)


class Transport(ABC):
    """
    Base class for all notification transports.

    Transports deliver a (key, value) pair to an external destination. They
    may block, but must bound the blocking with a timeout of their own.
    """

    def __init__(self, config: dict[str, Any]):
        """
        Initialize the transport with configuration.

        Args:
            config: Type-specific configuration dictionary
        """
        self.config = config

    @abstractmethod
    def send(self, key: str, value: str) -> DeliveryResult:
        """
        Deliver a value.

        Args:
            key: Identifier of the watched source (the configured domain)
            value: The stable value to deliver

        Returns:
            DeliveryResult describing whether the destination accepted it
        """
        raise NotImplementedError
