"""Shared fixtures for the dirwatch tests."""
from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import List

import pytest

from dirwatch.config import MonitorConfig
from dirwatch.errors import DeliveryError
from dirwatch.events import ChangeEvent
from dirwatch.monitor import DirectoryMonitor

FIXED_NOW = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


class RecordingNotifier:
    """In-memory notifier that keeps every event it is handed."""

    def __init__(self, fail: bool = False):
        self.events: List[ChangeEvent] = []
        self.fail = fail
        self.closed = False

    def send(self, event: ChangeEvent) -> None:
        self.events.append(event)
        if self.fail:
            raise DeliveryError(f"refusing {event.path}")

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def recorder() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def make_monitor(recorder):
    def _make(*roots: Path, notifier=None) -> DirectoryMonitor:
        config = MonitorConfig(roots=list(roots), poll_interval=0.01)
        return DirectoryMonitor(config, notifier or recorder, clock=lambda: FIXED_NOW)

    return _make
