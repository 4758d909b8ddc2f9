"""
Tests for the transport registry and plugin discovery.
"""

import pytest

from urlbeacon import transports
from urlbeacon.core import DeliveryResult, Transport
from urlbeacon.plugins import create_transport, get_registry
from urlbeacon.registry import PluginRegistry, register_transport
from urlbeacon.transports import CommandTransport, ConsoleTransport, WebhookTransport


class TestPluginRegistry:
    """Tests for PluginRegistry."""

    def test_register_and_get(self) -> None:
        """Test registering a transport on a private registry."""
        registry = PluginRegistry()
        registry.register_transport("console", ConsoleTransport)

        assert registry.get_transport("console") is ConsoleTransport
        assert registry.list_plugins() == {"transports": ["console"]}

    def test_unknown_type(self) -> None:
        """Test that unknown types raise ValueError."""
        registry = PluginRegistry()

        with pytest.raises(ValueError, match="Unknown transport type: carrier-pigeon"):
            registry.get_transport("carrier-pigeon")


class TestBuiltinTransports:
    """Tests for the built-in transports registered on import."""

    def test_builtins_registered(self) -> None:
        """Test that every built-in transport is available by name."""
        names = get_registry().list_plugins()["transports"]

        assert {"webhook", "command", "console"} <= set(names)

    def test_create_transport(self) -> None:
        """Test the factory passes configuration through."""
        transport = create_transport("webhook", {"url": "https://hooks.example.org"})

        assert isinstance(transport, WebhookTransport)
        assert transport.config["url"] == "https://hooks.example.org"

    def test_create_unknown_transport(self) -> None:
        """Test that the factory rejects unknown types."""
        with pytest.raises(ValueError):
            create_transport("nonexistent", {})

    def test_package_exports(self) -> None:
        """Test that discovery exported every transport class."""
        assert set(transports.__all__) >= {
            "WebhookTransport", "CommandTransport", "ConsoleTransport"
        }
        assert transports.CommandTransport is CommandTransport

    def test_decorator_registration(self) -> None:
        """Test registering a custom transport with the decorator."""

        @register_transport("test_null")
        class NullTransport(Transport):
            def send(self, key: str, value: str) -> DeliveryResult:
                return DeliveryResult.ok()

        transport = create_transport("test_null", {})

        assert isinstance(transport, NullTransport)
        assert transport.send("k", "v") == DeliveryResult(delivered=True)
