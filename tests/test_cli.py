"""
Tests for the command line interface.
"""

import sys
from pathlib import Path
from typing import Any

import pytest

from urlbeacon.cli import main
from urlbeacon.state import MarkerStore

URL = "https://ex.trycloudflare.com"


def run_cli(monkeypatch: pytest.MonkeyPatch, config_file: Path, *argv: str) -> int:
    monkeypatch.setattr(sys, "argv", ["urlbeacon", "-c", str(config_file), *argv])
    return main()


class TestCli:
    """Tests for CLI commands."""

    def test_config_validate(
        self, monkeypatch: pytest.MonkeyPatch, config_file: Path, capsys: Any
    ) -> None:
        """Test validating a good configuration."""
        assert run_cli(monkeypatch, config_file, "config", "validate") == 0

        out = capsys.readouterr().out
        assert "Configuration valid" in out
        assert "Transport: console" in out

    def test_config_validate_missing(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path, capsys: Any
    ) -> None:
        """Test validating a missing configuration."""
        assert run_cli(monkeypatch, tmp_path / "nope.yaml", "config", "validate") == 1
        assert "not found" in capsys.readouterr().err

    def test_config_validate_invalid(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path, capsys: Any
    ) -> None:
        """Test validating a broken configuration."""
        config_file = tmp_path / "bad.yaml"
        config_file.write_text("transport:\n  type: console\n")

        assert run_cli(monkeypatch, config_file, "config", "validate") == 1
        assert "Configuration invalid" in capsys.readouterr().err

    def test_config_validate_checks_transport(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path, log_file: Path, capsys: Any
    ) -> None:
        """Test that a transport missing its endpoint fails validation."""
        config_file = tmp_path / "no-url.yaml"
        config_file.write_text(
            f"source:\n  log_file: \"{log_file}\"\ntransport:\n  type: webhook\n"
        )

        assert run_cli(monkeypatch, config_file, "config", "validate") == 1
        assert "requires a 'url'" in capsys.readouterr().err

    def test_marker_show_and_clear(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path, config_file: Path, capsys: Any
    ) -> None:
        """Test inspecting and clearing the marker."""
        assert run_cli(monkeypatch, config_file, "marker", "show") == 0
        assert "No marker recorded" in capsys.readouterr().out

        MarkerStore(tmp_path / "state" / "last_sent").save(URL)
        assert run_cli(monkeypatch, config_file, "marker", "show") == 0
        assert capsys.readouterr().out.strip() == URL

        assert run_cli(monkeypatch, config_file, "marker", "clear") == 0
        assert "Marker cleared" in capsys.readouterr().out
        assert MarkerStore(tmp_path / "state" / "last_sent").load() is None

    def test_scan(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path, config_file: Path, capsys: Any
    ) -> None:
        """Test dry-run scanning of an existing log."""
        history = tmp_path / "history.log"
        history.write_text(
            "INF Starting tunnel\n"
            + "INF |  https://ex.trycloudflare.com  |\n" * 3
        )

        assert run_cli(monkeypatch, config_file, "scan", str(history)) == 0

        out = capsys.readouterr().out
        assert "line 2: https://ex.trycloudflare.com (1/3)" in out
        assert "line 4: stable https://ex.trycloudflare.com" in out
        assert "1 stable value(s) found" in out

    def test_scan_missing_file(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path, config_file: Path
    ) -> None:
        """Test scanning a file that does not exist."""
        assert run_cli(monkeypatch, config_file, "scan", str(tmp_path / "none.log")) == 1

    def test_notify(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path, config_file: Path, capsys: Any
    ) -> None:
        """Test manual notification, deduplication, and --force."""
        assert run_cli(monkeypatch, config_file, "notify", URL) == 0
        out = capsys.readouterr().out
        assert "Delivered" in out
        assert URL in out
        assert MarkerStore(tmp_path / "state" / "last_sent").load() == URL

        assert run_cli(monkeypatch, config_file, "notify", URL) == 0
        assert "Already notified" in capsys.readouterr().out

        assert run_cli(monkeypatch, config_file, "notify", URL, "--force") == 0
        assert "Delivered" in capsys.readouterr().out

    def test_no_command(
        self, monkeypatch: pytest.MonkeyPatch, config_file: Path, capsys: Any
    ) -> None:
        """Test that running without a command prints help."""
        assert run_cli(monkeypatch, config_file) == 0
        assert "usage" in capsys.readouterr().out
