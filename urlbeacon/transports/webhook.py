"""
Webhook transport for urlbeacon.
"""

from typing import Any

import requests

from urlbeacon.core import DeliveryResult, Transport
from urlbeacon.logging_config import get_logger
from urlbeacon.registry import register_transport

logger = get_logger(__name__)

SUPPORTED_METHODS = ("POST", "PUT")


@register_transport("webhook")
class WebhookTransport(Transport):
    """
    Delivers the value via an HTTP request.

    Config:
        url: Endpoint to send to
        method: HTTP method (default: POST)
        encoding: "form" (url-encoded body, default) or "json"
        key_field: Name of the field carrying the key (default: "domain")
        value_field: Name of the field carrying the value (default: "url")
        headers: Optional HTTP headers
        timeout: Request timeout in seconds (default: 10)
    """

    def __init__(self, config: dict[str, Any]):
        super().__init__(config)
        url = config.get("url")
        if not isinstance(url, str) or not url:
            raise ValueError("Webhook transport requires a 'url'")
        method = str(config.get("method", "POST")).upper()
        if method not in SUPPORTED_METHODS:
            raise ValueError(f"Unsupported HTTP method: {method}")

    def send(self, key: str, value: str) -> DeliveryResult:
        """Send the pair to the configured endpoint."""
        url = self.config["url"]
        method = self.config.get("method", "POST").upper()
        encoding = self.config.get("encoding", "form")
        headers = self.config.get("headers", {})
        timeout = self.config.get("timeout", 10)

        payload = {
            self.config.get("key_field", "domain"): key,
            self.config.get("value_field", "url"): value,
        }
        body_arg = "json" if encoding == "json" else "data"

        try:
            if method == "POST":
                response = requests.post(
                    url, headers=headers, timeout=timeout, **{body_arg: payload}
                )
            else:
                response = requests.put(
                    url, headers=headers, timeout=timeout, **{body_arg: payload}
                )

            response.raise_for_status()
            logger.info(
                "Webhook delivered %s for '%s' to %s (HTTP %s)",
                value,
                key,
                url,
                response.status_code
            )
            return DeliveryResult.ok()
        except requests.RequestException as e:
            logger.error(
                "Failed to deliver %s for '%s' to %s",
                value,
                key,
                url,
                exc_info=True
            )
            return DeliveryResult.failed(str(e))


# Export for dynamic importing
__all__ = ["WebhookTransport"]
