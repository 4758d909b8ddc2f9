"""
Tests for configuration loading and validation.
"""

from pathlib import Path
from unittest.mock import patch

import pytest

from urlbeacon.config import Config, DeliveryConfig, load_config
from urlbeacon.notifier import MarkerPolicy


class TestLoadConfig:
    """Tests for load_config function."""

    def test_load_valid_config(self, tmp_path: Path) -> None:
        """Test loading a fully specified configuration file."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("""
source:
  log_file: "/var/log/cloudflared.log"
  poll_interval: 0.5
  max_line_length: 8192
  on_rotation: "start"
  use_file_events: true
extractor:
  prefix: "https://"
  match: "trycloudflare.com"
stability:
  threshold: 5
delivery:
  domain: "example.org"
  marker_policy: "on_success"
  value_file: "/run/urlbeacon/current"
transport:
  type: "webhook"
  config:
    url: "https://hooks.example.org/notify"
state_dir: "/var/lib/urlbeacon"
""")

        config = load_config(config_file)

        assert config.source.log_file == "/var/log/cloudflared.log"
        assert config.source.poll_interval == 0.5
        assert config.source.on_rotation == "start"
        assert config.source.use_file_events is True
        assert config.stability.threshold == 5
        assert config.delivery.marker_policy is MarkerPolicy.ON_SUCCESS
        assert config.transport.type == "webhook"
        assert config.transport.config["url"] == "https://hooks.example.org/notify"
        assert config.marker_file == Path("/var/lib/urlbeacon/last_sent")

    def test_defaults(self, tmp_path: Path) -> None:
        """Test that only the source and transport are required."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("""
source:
  log_file: "/var/log/cloudflared.log"
transport:
  type: "console"
""")

        config = load_config(config_file)

        assert config.source.poll_interval == 0.3
        assert config.source.max_line_length == 4096
        assert config.source.on_rotation == "end"
        assert config.extractor.prefix == "https://"
        assert config.extractor.match == "trycloudflare.com"
        assert config.extractor.max_value_length == 1024
        assert config.stability.threshold == 3
        assert config.delivery.marker_policy is MarkerPolicy.ALWAYS
        assert config.delivery.legacy_cache_advance is False
        assert config.transport.config == {}
        assert config.state_dir == "/var/lib/urlbeacon"

    def test_load_missing_file(self) -> None:
        """Test that loading a missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_config("/nonexistent/config.yaml")

    def test_missing_source(self, tmp_path: Path) -> None:
        """Test that a config without a source is rejected."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("""
transport:
  type: "console"
""")

        with pytest.raises(ValueError, match="Configuration validation error"):
            load_config(config_file)

    @pytest.mark.parametrize("snippet", [
        "stability:\n  threshold: 0\n",
        "extractor:\n  match: \"\"\n",
        "delivery:\n  marker_policy: sometimes\n",
    ])
    def test_invalid_values(self, tmp_path: Path, snippet: str) -> None:
        """Test that out-of-range settings are rejected."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text(
            "source:\n  log_file: /var/log/x.log\n"
            "transport:\n  type: console\n" + snippet
        )

        with pytest.raises(ValueError):
            load_config(config_file)

    def test_invalid_rotation_policy(self) -> None:
        """Test that only known rotation policies validate."""
        with pytest.raises(ValueError):
            Config.model_validate({
                "source": {"log_file": "/var/log/x.log", "on_rotation": "middle"},
                "transport": {"type": "console"},
            })

    def test_empty_file(self, tmp_path: Path) -> None:
        """Test that an empty file is reported as invalid."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("")

        with pytest.raises(ValueError):
            load_config(config_file)


class TestDeliveryConfig:
    """Tests for DeliveryConfig helpers."""

    def test_configured_domain(self) -> None:
        """Test that an explicit domain wins."""
        assert DeliveryConfig(domain="example.org").resolve_domain() == "example.org"

    def test_hostname_fallback(self) -> None:
        """Test falling back to the host name."""
        with patch("urlbeacon.config.socket.gethostname", return_value="edge-01"):
            assert DeliveryConfig().resolve_domain() == "edge-01"

    def test_unknown_fallback(self) -> None:
        """Test the last-resort domain."""
        with patch("urlbeacon.config.socket.gethostname", side_effect=OSError("no name")):
            assert DeliveryConfig().resolve_domain() == "unknown"
