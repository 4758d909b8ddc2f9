"""
Plugin registry and factory system for urlbeacon.

Transports register themselves by type name so the configuration file can
select one without the rest of the code knowing the concrete class.
"""

from collections.abc import Callable
from typing import Any

from urlbeacon.core import Transport


class PluginRegistry:
    """
    Central registry for transport plugins.

    Maintains a mapping of type names to implementation classes.
    """

    def __init__(self) -> None:
        self._transports: dict[str, type[Transport]] = {}

    def register_transport(self, type_name: str, cls: type[Transport]) -> None:
        """Register a transport implementation."""
        self._transports[type_name] = cls

    def get_transport(self, type_name: str) -> type[Transport]:
        """Get a transport class by type name."""
        if type_name not in self._transports:
            raise ValueError(f"Unknown transport type: {type_name}")
        return self._transports[type_name]

    def list_plugins(self) -> dict[str, list[str]]:
        """List all registered plugins by category."""
        return {
            "transports": list(self._transports.keys()),
        }


# Global registry instance
_registry = PluginRegistry()


def create_transport(type_name: str, config: dict[str, Any]) -> Transport:
    """Create a transport instance from configuration."""
    cls = _registry.get_transport(type_name)
    return cls(config)


def register_transport(type_name: str) -> Callable[[type[Transport]], type[Transport]]:
    """Decorator to register a transport class."""
    def decorator(cls: type[Transport]) -> type[Transport]:
        _registry.register_transport(type_name, cls)
        return cls
    return decorator


def get_registry() -> PluginRegistry:
    """Get the global plugin registry."""
    return _registry
