"""Filesystem monitoring loop with a simple polling backend."""
from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, List, Optional

from .config import MonitorConfig
from .errors import DeliveryError, ScanError, SerializationError
from .events import ChangeEvent, ChangeKind, FileRecord, utc_now
from .notifier import Notifier
from .store import SnapshotStore
from .walk import walk_entries

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


@dataclass
class MonitorStats:
    """Counters emitted by the monitor for observability."""

    cycles: int = 0
    events_emitted: int = 0
    delivery_failures: int = 0
    scan_errors: int = 0


class DirectoryMonitor:
    """Polls directory trees and reports changes against a snapshot."""

    def __init__(
        self,
        config: MonitorConfig,
        notifier: Notifier,
        store: Optional[SnapshotStore] = None,
        clock: Optional[Clock] = None,
    ):
        self._config = config
        self._notifier = notifier
        self._store = store if store is not None else SnapshotStore()
        self._clock = clock or utc_now
        self._stop_event = threading.Event()
        self._stats = MonitorStats()

    @property
    def store(self) -> SnapshotStore:
        return self._store

    @property
    def stats(self) -> MonitorStats:
        return self._stats

    def run(self) -> None:
        """Scan once, then poll every interval until stopped."""

        roots = ", ".join(str(root) for root in self._config.roots)
        logger.info("Starting monitor for %s (interval %ss)", roots, self._config.poll_interval)
        try:
            self.initial_scan()
            last_started = time.monotonic()
            while not self._stop_event.wait(self._remaining(last_started)):
                last_started = time.monotonic()
                self.poll_once()
        except KeyboardInterrupt:
            logger.info("Monitor interrupted by user")
        finally:
            logger.info(
                "Monitor stopped after %s cycles, %s events, %s delivery failures, %s scan errors",
                self._stats.cycles,
                self._stats.events_emitted,
                self._stats.delivery_failures,
                self._stats.scan_errors,
            )

    def stop(self) -> None:
        """Signal the monitor to stop at the next opportunity."""

        self._stop_event.set()

    def initial_scan(self) -> None:
        """Record every entry under every root without emitting events."""

        for root in self._config.roots:
            try:
                for record in walk_entries(root):
                    self._store.put(record)
            except ScanError as exc:
                self._stats.scan_errors += 1
                logger.warning("Error scanning path %s: %s", root, exc.cause or exc)
        logger.info("Initial scan recorded %s entries", len(self._store))

    def poll_once(self) -> List[ChangeEvent]:
        """Run one scan-compare-update cycle over all roots."""

        emitted: List[ChangeEvent] = []
        for root in self._config.roots:
            try:
                for record in walk_entries(root):
                    for event in self._compare(record):
                        self._emit(event)
                        emitted.append(event)
                    self._store.put(record)
            except ScanError as exc:
                self._stats.scan_errors += 1
                logger.warning("Error monitoring path %s: %s", root, exc.cause or exc)

        self._stats.cycles += 1
        self._stats.events_emitted += len(emitted)
        return emitted

    def _remaining(self, started_at: float) -> float:
        elapsed = time.monotonic() - started_at
        return max(self._config.poll_interval - elapsed, 0.0)

    def _compare(self, current: FileRecord) -> List[ChangeEvent]:
        kinds = detect_changes(self._store.get(current.path), current)
        if not kinds:
            return []
        detected_at = self._clock()
        return [ChangeEvent.from_record(kind, current, detected_at) for kind in kinds]

    def _emit(self, event: ChangeEvent) -> None:
        logger.info("%s", _describe_event(event))
        try:
            self._notifier.send(event)
        except (DeliveryError, SerializationError) as exc:
            self._stats.delivery_failures += 1
            logger.warning("Failed to send notification for %s: %s", event.path, exc)


def detect_changes(previous: Optional[FileRecord], current: FileRecord) -> List[ChangeKind]:
    """Classify ``current`` against the stored record.

    Fields are checked independently in the order size, modification time,
    permissions, so one entry may produce up to three kinds.
    """

    if previous is None:
        return [ChangeKind.CREATED]

    kinds: List[ChangeKind] = []
    if current.size != previous.size:
        kinds.append(ChangeKind.SIZE_CHANGED)
    if current.modified_ns != previous.modified_ns:
        kinds.append(ChangeKind.MODIFIED)
    if current.permissions != previous.permissions:
        kinds.append(ChangeKind.PERMISSIONS_CHANGED)
    return kinds


def _describe_event(event: ChangeEvent) -> str:
    if event.kind is ChangeKind.CREATED:
        return f"File created: {event.path}"
    if event.kind is ChangeKind.SIZE_CHANGED:
        return f"File size changed: {event.path} ({event.size} bytes)"
    if event.kind is ChangeKind.MODIFIED:
        return f"File modified: {event.path}"
    return f"File permissions changed: {event.path} ({event.permissions_string})"
