"""
Watcher that wires together the tailer, extractor, tracker, and notifier.
"""

import threading
from collections.abc import Callable

from urlbeacon.config import Config
from urlbeacon.extractor import PatternExtractor
from urlbeacon.logging_config import get_logger
from urlbeacon.notifier import IdempotentNotifier, NotifyOutcome
from urlbeacon.plugins import create_transport
from urlbeacon.stability import StabilityTracker
from urlbeacon.state import MarkerStore
from urlbeacon.tailer import SourceUnavailable, TailingReader
from urlbeacon.wakeup import FileEventWakeup

logger = get_logger(__name__)


class UrlWatcher:
    """
    Runs the polling loop: tail -> extract -> debounce -> notify.

    All mutable state (the candidate and the cached marker) is touched only
    from the thread calling run(), so no locking is needed.
    """

    def __init__(  # pylint: disable=too-many-arguments,too-many-positional-arguments
        self,
        reader: TailingReader,
        extractor: PatternExtractor,
        tracker: StabilityTracker,
        notifier: IdempotentNotifier,
        poll_interval: float = 0.3,
        wakeup: FileEventWakeup | None = None,
        wait: Callable[[float], object] | None = None
    ):
        """
        Initialize the watcher.

        Args:
            reader: Follows the log file
            extractor: Finds the URL in a line
            tracker: Debounces extracted values
            notifier: Delivers stable values once
            poll_interval: Seconds to sleep when no line is available
            wakeup: Optional file event source that cuts sleeps short
            wait: Replaces the sleep between polls (for tests)
        """
        self.reader = reader
        self.extractor = extractor
        self.tracker = tracker
        self.notifier = notifier
        self.poll_interval = poll_interval
        self.wakeup = wakeup
        self.stop_event = threading.Event()
        self._wait = wait or self._default_wait

    def _default_wait(self, timeout: float) -> None:
        if self.wakeup is not None:
            self.wakeup.wait(timeout)
        else:
            self.stop_event.wait(timeout)

    def process_line(self, line: str) -> NotifyOutcome | None:
        """
        Run one line through the pipeline.

        Returns:
            The notifier outcome if the line made a value stable, else None
        """
        value = self.extractor.extract(line)
        stable = self.tracker.observe(value)
        if stable is None:
            return None

        logger.info(
            "Value %s stable after %d consecutive observations",
            stable,
            self.tracker.threshold
        )
        return self.notifier.on_stable(stable)

    def poll_once(self) -> bool:
        """
        Consume every line currently available.

        Returns:
            True if at least one line was read
        """
        read_any = False
        while not self.stop_event.is_set():
            try:
                line = self.reader.next_line()
            except SourceUnavailable as e:
                logger.debug("%s", e)
                break
            if line is None:
                break
            read_any = True
            self.process_line(line)
        return read_any

    def run(self) -> None:
        """Follow the log until stop() is called."""
        logger.info("Watching %s", self.reader.log_file)
        if self.wakeup is not None:
            self.wakeup.start()

        try:
            for line in self.reader.follow(
                self.stop_event, self.poll_interval, wait=self._wait
            ):
                self.process_line(line)
        finally:
            if self.wakeup is not None:
                self.wakeup.stop()
            self.reader.close()
            logger.info("Stopped watching %s", self.reader.log_file)

    def stop(self) -> None:
        """Ask run() to return; safe to call from a signal handler."""
        self.stop_event.set()
        if self.wakeup is not None:
            self.wakeup.set()


def create_notifier(config: Config) -> IdempotentNotifier:
    """Build the transport, marker store, and notifier from configuration."""
    transport = create_transport(config.transport.type, config.transport.config)
    return IdempotentNotifier(
        transport=transport,
        store=MarkerStore(config.marker_file),
        domain=config.delivery.resolve_domain(),
        policy=config.delivery.marker_policy,
        legacy_cache_advance=config.delivery.legacy_cache_advance,
        value_file=config.delivery.value_file,
    )


def create_url_watcher(config: Config) -> UrlWatcher:
    """
    Factory function to create a watcher from configuration.

    Args:
        config: The validated configuration

    Returns:
        UrlWatcher instance
    """
    source = config.source

    reader = TailingReader(
        source.log_file,
        max_line_length=source.max_line_length,
        rotated_suffix=source.rotated_suffix,
        on_rotation=source.on_rotation,
    )
    extractor = PatternExtractor(
        prefix=config.extractor.prefix,
        match=config.extractor.match,
        max_value_length=config.extractor.max_value_length,
    )
    tracker = StabilityTracker(config.stability.threshold)
    notifier = create_notifier(config)

    wakeup = None
    if source.use_file_events:
        wakeup = FileEventWakeup(source.log_file, source.rotated_suffix)

    return UrlWatcher(
        reader=reader,
        extractor=extractor,
        tracker=tracker,
        notifier=notifier,
        poll_interval=source.poll_interval,
        wakeup=wakeup,
    )
