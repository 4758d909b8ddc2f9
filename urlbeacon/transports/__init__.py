"""
Built-in notification transports.

Every module in this package is imported on package import so that its
``@register_transport`` decorator runs. Transport classes listed in a
module's ``__all__`` are re-exported here.
"""

import importlib
import inspect
import pkgutil

from urlbeacon.core import Transport as BaseTransport
from urlbeacon.logging_config import get_logger

logger = get_logger(__name__)


def _discover_transports() -> dict[str, type[BaseTransport]]:
    """Import every transport module and collect its exported classes."""
    found: dict[str, type[BaseTransport]] = {}

    for module_info in pkgutil.iter_modules(__path__):
        module = importlib.import_module(f"{__name__}.{module_info.name}")

        for name in getattr(module, "__all__", ()):
            cls = getattr(module, name, None)

            if name in found:
                logger.warning(
                    "Duplicate transport name '%s' in module '%s' - skipping",
                    name,
                    module_info.name
                )
            elif not (inspect.isclass(cls) and issubclass(cls, BaseTransport)):
                logger.warning(
                    "Export '%s' in module '%s' is not a Transport subclass - skipping",
                    name,
                    module_info.name
                )
            else:
                found[name] = cls

    return found


_transports = _discover_transports()
globals().update(_transports)
__all__ = sorted(_transports)
