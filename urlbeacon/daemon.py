"""
Main daemon entry point for urlbeacon.
"""

import argparse
import signal
import sys
from typing import Any

from urlbeacon.config import load_config
from urlbeacon.logging_config import get_logger, is_watched_file, setup_logging
from urlbeacon.watcher import UrlWatcher, create_url_watcher

logger = get_logger(__name__)


class BeaconDaemon:
    """Main daemon class that owns the watcher."""

    def __init__(self, config_path: str) -> None:
        """
        Initialize the daemon.

        Args:
            config_path: Path to configuration file
        """
        self.config = load_config(config_path)
        self.watcher: UrlWatcher | None = None
        self.running = False

    def setup_watcher(self) -> UrlWatcher:
        """Build the watcher from configuration."""
        self.watcher = create_url_watcher(self.config)
        logger.info(
            "Configured watcher on %s (threshold %d, transport %s)",
            self.config.source.log_file,
            self.config.stability.threshold,
            self.config.transport.type
        )
        return self.watcher

    def start(self) -> None:
        """Start the daemon; blocks until stop() is called."""
        logger.info("Starting urlbeacon daemon")

        watcher = self.setup_watcher()
        self.running = True
        logger.info("urlbeacon daemon running")

        try:
            watcher.run()
        except KeyboardInterrupt:
            logger.info("Shutdown signal received")
        finally:
            self.running = False

    def stop(self) -> None:
        """Stop the daemon."""
        logger.info("Stopping urlbeacon daemon")
        self.running = False
        if self.watcher is not None:
            self.watcher.stop()


def main() -> None:
    """Entry point for the daemon."""
    parser = argparse.ArgumentParser(description="urlbeacon log watching daemon")
    parser.add_argument(
        '--config',
        default='/etc/urlbeacon/config.yaml',
        help='Path to configuration file (default: /etc/urlbeacon/config.yaml)'
    )
    parser.add_argument(
        '--log-level',
        default='INFO',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
        help='Log level (default: INFO)'
    )
    parser.add_argument(
        '--log-file',
        help='Optional log file path (logs to console if not specified)'
    )
    args = parser.parse_args()

    # Console only until we know the log file is not the watched source
    setup_logging(level=args.log_level)

    try:
        daemon = BeaconDaemon(args.config)
    except (FileNotFoundError, ValueError) as e:
        logger.critical("Cannot load configuration: %s", e)
        sys.exit(1)

    if is_watched_file(args.log_file, daemon.config.source.log_file):
        logger.critical(
            "Refusing to log into the watched file %s", daemon.config.source.log_file
        )
        sys.exit(1)
    setup_logging(level=args.log_level, log_file=args.log_file)

    def signal_handler(_sig: int, _frame: Any) -> None:
        logger.info("Shutdown signal received")
        daemon.stop()

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    try:
        daemon.start()
    except Exception:
        logger.critical("Fatal error", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
