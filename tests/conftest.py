"""
Pytest configuration and fixtures for urlbeacon tests.
"""

from pathlib import Path

import pytest

from urlbeacon.core import DeliveryResult, Transport

URL = "https://ex.trycloudflare.com"


class RecordingTransport(Transport):
    """Transport double that records every send."""

    def __init__(self) -> None:
        super().__init__({})
        self.calls: list[tuple[str, str]] = []
        self.deliver = True

    def send(self, key: str, value: str) -> DeliveryResult:
        self.calls.append((key, value))
        if self.deliver:
            return DeliveryResult.ok()
        return DeliveryResult.failed("refused")


@pytest.fixture
def transport() -> RecordingTransport:
    """Provide a fresh recording transport."""
    return RecordingTransport()


@pytest.fixture
def log_file(tmp_path: Path) -> Path:
    """Provide an empty log file to tail."""
    path = tmp_path / "tunnel.log"
    path.write_text("")
    return path


@pytest.fixture
def config_file(tmp_path: Path, log_file: Path) -> Path:
    """Write a minimal configuration using the console transport."""
    path = tmp_path / "config.yaml"
    path.write_text(f"""
source:
  log_file: "{log_file}"
  poll_interval: 0.01
transport:
  type: "console"
  config: {{}}
delivery:
  domain: "example.org"
state_dir: "{tmp_path / 'state'}"
""")
    return path


def append(path: Path, *lines: str) -> None:
    """Append complete lines to a log file."""
    with path.open("a", encoding="utf-8") as f:
        for line in lines:
            f.write(line + "\n")


@pytest.fixture
def append_lines():
    """Provide the append helper to tests."""
    return append
