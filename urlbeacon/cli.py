"""
urlbeacon CLI - Command line interface for managing the urlbeacon daemon.

Provides commands for:
- Configuration validation
- Daemon management (start)
- Marker inspection and reset
- Dry-run scanning of an existing log
- Manual notifications
"""

import argparse
import sys
from pathlib import Path

from urlbeacon.config import Config, load_config
from urlbeacon.daemon import BeaconDaemon
from urlbeacon.extractor import PatternExtractor
from urlbeacon.logging_config import get_logger
from urlbeacon.notifier import NotifyOutcome
from urlbeacon.plugins import create_transport
from urlbeacon.stability import StabilityTracker
from urlbeacon.state import MarkerStore
from urlbeacon.watcher import create_notifier

logger = get_logger(__name__)


def _load(args: argparse.Namespace) -> Config | None:
    """Load the configuration, printing an error if it is missing."""
    config_path = Path(args.config)

    if not config_path.exists():
        print(f"Error: Config file not found: {config_path}", file=sys.stderr)
        return None

    return load_config(config_path)


def cmd_config_validate(args: argparse.Namespace) -> int:
    """Validate configuration file."""
    try:
        config = _load(args)
        if config is not None:
            create_transport(config.transport.type, config.transport.config)
    except Exception as e:
        print(f"✗ Configuration invalid: {e}", file=sys.stderr)
        return 1
    if config is None:
        return 1

    print(f"✓ Configuration valid: {args.config}")
    print(f"  - Log file: {config.source.log_file}")
    print(f"  - Match: {config.extractor.prefix}...{config.extractor.match}")
    print(f"  - Threshold: {config.stability.threshold}")
    print(f"  - Transport: {config.transport.type}")
    print(f"  - Marker file: {config.marker_file}")
    return 0


def cmd_daemon_start(args: argparse.Namespace) -> int:
    """Start the urlbeacon daemon."""
    config_path = Path(args.config)

    if not config_path.exists():
        print(f"Error: Config file not found: {config_path}", file=sys.stderr)
        return 1

    try:
        print(f"Starting urlbeacon daemon with config: {config_path}")
        daemon = BeaconDaemon(str(config_path))
        daemon.start()
        return 0
    except KeyboardInterrupt:
        print("\nShutting down...")
        return 0
    except Exception as e:
        print(f"Error starting daemon: {e}", file=sys.stderr)
        return 1


def cmd_marker_show(args: argparse.Namespace) -> int:
    """Print the last notified value."""
    try:
        config = _load(args)
    except Exception as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        return 1
    if config is None:
        return 1

    value = MarkerStore(config.marker_file).load()
    if value is None:
        print(f"No marker recorded ({config.marker_file})")
    else:
        print(value)
    return 0


def cmd_marker_clear(args: argparse.Namespace) -> int:
    """Forget the last notified value so the next stable URL is sent."""
    try:
        config = _load(args)
    except Exception as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        return 1
    if config is None:
        return 1

    try:
        removed = MarkerStore(config.marker_file).clear()
    except OSError as e:
        print(f"✗ Could not remove {config.marker_file}: {e}", file=sys.stderr)
        return 1

    if removed:
        print(f"✓ Marker cleared: {config.marker_file}")
    else:
        print(f"No marker to clear ({config.marker_file})")
    return 0


def cmd_scan(args: argparse.Namespace) -> int:
    """Run the extractor and tracker over an existing file without delivering."""
    try:
        config = _load(args)
    except Exception as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        return 1
    if config is None:
        return 1

    log_path = Path(args.file)
    extractor = PatternExtractor(
        prefix=config.extractor.prefix,
        match=config.extractor.match,
        max_value_length=config.extractor.max_value_length,
    )
    tracker = StabilityTracker(config.stability.threshold)

    stable_count = 0
    try:
        with log_path.open('r', encoding='utf-8', errors='replace') as f:
            for number, line in enumerate(f, 1):
                value = extractor.extract(line)
                if value is None:
                    continue
                stable = tracker.observe(value)
                if stable is not None:
                    stable_count += 1
                    print(f"✓ line {number}: stable {stable}")
                else:
                    candidate = tracker.candidate
                    count = candidate.count if candidate else 0
                    print(f"  line {number}: {value} ({count}/{tracker.threshold})")
    except OSError as e:
        print(f"Error reading {log_path}: {e}", file=sys.stderr)
        return 1

    print(f"\n{stable_count} stable value(s) found")
    return 0


def cmd_notify(args: argparse.Namespace) -> int:
    """Send a value through the configured transport."""
    try:
        config = _load(args)
        if config is None:
            return 1
        notifier = create_notifier(config)
    except Exception as e:
        print(f"Error preparing notification: {e}", file=sys.stderr)
        logger.exception("Error building notifier")
        return 1

    if args.force:
        notifier.last_notified = None

    print(f"Sending {args.value} for '{notifier.domain}' via {config.transport.type}")
    outcome = notifier.on_stable(args.value)

    if outcome is NotifyOutcome.SKIPPED:
        print("  - Already notified (use --force to resend)")
        return 0
    if outcome is NotifyOutcome.DELIVERED:
        print("  ✓ Delivered")
        return 0
    print("  ✗ Delivery failed")
    return 1


def main() -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="urlbeacon",
        description="urlbeacon - report a tunnel URL from a process log exactly once"
    )
    parser.add_argument(
        "-c", "--config",
        default="config.yaml",
        help="Path to configuration file (default: config.yaml)"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Config commands
    config_parser = subparsers.add_parser("config", help="Configuration management")
    config_subparsers = config_parser.add_subparsers(dest="subcommand")
    config_subparsers.add_parser("validate", help="Validate configuration file")

    # Daemon commands
    daemon_parser = subparsers.add_parser("daemon", help="Daemon management")
    daemon_subparsers = daemon_parser.add_subparsers(dest="subcommand")
    daemon_subparsers.add_parser("start", help="Start daemon (foreground)")

    # Marker commands
    marker_parser = subparsers.add_parser("marker", help="Last notified value")
    marker_subparsers = marker_parser.add_subparsers(dest="subcommand")
    marker_subparsers.add_parser("show", help="Print the last notified value")
    marker_subparsers.add_parser("clear", help="Forget the last notified value")

    # Scan command
    scan_parser = subparsers.add_parser("scan", help="Dry-run the matcher over a file")
    scan_parser.add_argument("file", help="Log file to scan from the beginning")

    # Notify command
    notify_parser = subparsers.add_parser("notify", help="Send a value manually")
    notify_parser.add_argument("value", help="Value to deliver")
    notify_parser.add_argument(
        "--force",
        action="store_true",
        help="Send even if the value equals the last notified one"
    )

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return 0

    if args.command == "config":
        if args.subcommand == "validate":
            return cmd_config_validate(args)
        parser.print_help()
        return 0

    if args.command == "daemon":
        if args.subcommand == "start":
            return cmd_daemon_start(args)
        parser.print_help()
        return 0

    if args.command == "marker":
        if args.subcommand == "show":
            return cmd_marker_show(args)
        if args.subcommand == "clear":
            return cmd_marker_clear(args)
        parser.print_help()
        return 0

    if args.command == "scan":
        return cmd_scan(args)

    if args.command == "notify":
        return cmd_notify(args)

    parser.print_help()
    return 0


if __name__ == '__main__':
    sys.exit(main())
