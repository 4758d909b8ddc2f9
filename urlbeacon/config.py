"""
Configuration loading and validation for urlbeacon.
"""

import socket
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, ValidationError

from urlbeacon.notifier import MarkerPolicy

MARKER_FILENAME = "last_sent"


class SourceConfig(BaseModel):
    """The log file to follow."""
    log_file: str = Field(..., min_length=1)
    poll_interval: float = Field(default=0.3, gt=0)
    max_line_length: int = Field(default=4096, ge=64)
    rotated_suffix: str = Field(default=".1", min_length=1)
    on_rotation: Literal["end", "start"] = "end"
    use_file_events: bool = False


class ExtractorConfig(BaseModel):
    """What counts as a URL worth reporting."""
    prefix: str = Field(default="https://", min_length=1)
    match: str = Field(default="trycloudflare.com", min_length=1)
    max_value_length: int = Field(default=1024, ge=16)


class StabilityConfig(BaseModel):
    """Debounce settings."""
    threshold: int = Field(default=3, ge=1)


class DeliveryConfig(BaseModel):
    """How stable values are recorded and labelled."""
    domain: str | None = None  # Defaults to the host name
    marker_policy: MarkerPolicy = MarkerPolicy.ALWAYS
    legacy_cache_advance: bool = False
    value_file: str | None = None

    def resolve_domain(self) -> str:
        """Configured domain, else the host name, else "unknown"."""
        if self.domain:
            return self.domain
        try:
            hostname = socket.gethostname()
        except OSError:
            hostname = ""
        return hostname or "unknown"


class TransportConfig(BaseModel):
    """Configuration for the notification destination."""
    type: str  # "webhook", "command", "console", etc.
    config: dict[str, Any] = Field(default_factory=dict)  # Type-specific configuration


class Config(BaseModel):
    """Main configuration for urlbeacon."""
    source: SourceConfig
    transport: TransportConfig
    extractor: ExtractorConfig = Field(default_factory=ExtractorConfig)
    stability: StabilityConfig = Field(default_factory=StabilityConfig)
    delivery: DeliveryConfig = Field(default_factory=DeliveryConfig)
    state_dir: str = "/var/lib/urlbeacon"  # Directory for the marker file

    @property
    def marker_file(self) -> Path:
        """Canonical location of the persisted marker."""
        return Path(self.state_dir) / MARKER_FILENAME


def load_config(config_path: str | Path) -> Config:
    """
    Load and validate configuration from YAML file.

    Args:
        config_path: Path to the YAML configuration file

    Returns:
        Validated Config object

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If config is invalid
        yaml.YAMLError: If YAML parsing fails
    """
    path = Path(config_path)

    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with path.open('r', encoding='utf-8') as f:
        raw_config: dict[str, Any] = yaml.safe_load(f)

    try:
        return Config.model_validate(raw_config)
    except ValidationError as e:
        raise ValueError(f"Configuration validation error: {e}") from e
