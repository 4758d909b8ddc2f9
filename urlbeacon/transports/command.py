"""
Command transport: hands the value to an external program.
"""

import subprocess  # nosec B404 - Required to run the configured delivery command
from typing import Any

from urlbeacon.core import DeliveryResult, Transport
from urlbeacon.logging_config import get_logger
from urlbeacon.registry import register_transport

logger = get_logger(__name__)


@register_transport("command")
class CommandTransport(Transport):
    """
    Runs a command for each delivery; exit status 0 means delivered.

    Config:
        argv: Command and arguments. "{key}" and "{value}" are substituted
        timeout: Seconds before the command is killed (default: 30)
    """

    def __init__(self, config: dict[str, Any]):
        super().__init__(config)
        argv = config.get("argv")
        if (
            not isinstance(argv, list)
            or not argv
            or not all(isinstance(arg, str) for arg in argv)
        ):
            raise ValueError("Command transport requires 'argv' as a non-empty list of strings")

    def build_argv(self, key: str, value: str) -> list[str]:
        """Substitute the placeholders into the configured argv."""
        return [arg.replace("{key}", key).replace("{value}", value) for arg in self.config["argv"]]

    def send(self, key: str, value: str) -> DeliveryResult:
        """Run the command and report its exit status."""
        argv = self.build_argv(key, value)
        timeout = self.config.get("timeout", 30)

        try:
            result = subprocess.run(
                argv,  # nosec B603 - argv comes from the operator's config file
                capture_output=True,
                text=True,
                timeout=timeout,
                check=False
            )
        except subprocess.TimeoutExpired:
            logger.error("Delivery command %s timed out after %ss", argv[0], timeout)
            return DeliveryResult.failed(f"timed out after {timeout}s")
        except OSError as e:
            logger.error("Could not run delivery command %s: %s", argv[0], e)
            return DeliveryResult.failed(str(e))

        if result.returncode != 0:
            logger.error(
                "Delivery command %s exited %d: %s",
                argv[0],
                result.returncode,
                result.stderr.strip()
            )
            return DeliveryResult.failed(f"exit status {result.returncode}")

        logger.info("Delivery command %s exited 0", argv[0])
        return DeliveryResult.ok()


# Export for dynamic importing
__all__ = ["CommandTransport"]
