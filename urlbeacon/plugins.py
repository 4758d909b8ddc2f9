"""
Plugin initialization for urlbeacon.

This module imports all built-in transports to register them with the
registry. Import this module to ensure all plugins are available.
"""

# Import the plugin package to trigger registration decorators
# pylint: disable=unused-import
# ruff: noqa: F401
from urlbeacon import transports

# Re-export registry functions for convenience
from urlbeacon.registry import create_transport, get_registry

__all__ = [
    "create_transport",
    "get_registry",
]
