"""Delivery of change events to an external webhook."""
from __future__ import annotations

import json
import logging
import queue
import threading
from typing import Optional, Protocol

import httpx

from .config import NotifierConfig
from .errors import DeliveryError, SerializationError
from .events import ChangeEvent

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    """Anything that can deliver a single change event."""

    def send(self, event: ChangeEvent) -> None:
        """Deliver ``event`` or raise :class:`DeliveryError`."""

    def close(self) -> None:
        """Release resources held by the notifier."""


class NullNotifier:
    """Accepts every event without delivering it anywhere."""

    def send(self, event: ChangeEvent) -> None:
        logger.debug("Webhook delivery disabled; not sending %s for %s", event.kind.value, event.path)

    def close(self) -> None:
        pass


class WebhookNotifier:
    """Posts each event as JSON to a webhook, once, with a bounded timeout."""

    def __init__(self, url: str, *, timeout: float = 10.0, client: Optional[httpx.Client] = None):
        self._url = url
        self._timeout = timeout
        self._owns_client = client is None
        self._client = client if client is not None else httpx.Client(timeout=timeout)

    @property
    def url(self) -> str:
        return self._url

    def send(self, event: ChangeEvent) -> None:
        try:
            body = json.dumps(event.to_payload())
        except (TypeError, ValueError) as exc:
            raise SerializationError(f"Error encoding {event.kind.value} event for {event.path}: {exc}") from exc

        try:
            resp = self._client.post(
                self._url,
                content=body.encode("utf-8"),
                headers={"Content-Type": "application/json"},
                timeout=self._timeout,
            )
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise DeliveryError(f"Error sending notification to {self._url}: {exc}") from exc

        if resp.status_code >= 400:
            raise DeliveryError(f"Webhook {self._url} returned error status: {resp.status_code}")

    def close(self) -> None:
        if self._owns_client:
            self._client.close()


_STOP = object()


class QueuedNotifier:
    """Moves delivery off the polling thread onto a single worker.

    Events are queued in order and handed to ``inner`` one at a time. Each
    event gets at most one delivery attempt; a full queue drops the event.
    """

    def __init__(self, inner: Notifier, *, maxsize: int = 100):
        if maxsize <= 0:
            raise ValueError("maxsize must be positive")
        self._inner = inner
        self._queue: "queue.Queue[object]" = queue.Queue(maxsize=maxsize)
        self._closed = False
        self._worker = threading.Thread(target=self._run, name="dirwatch-notifier", daemon=True)
        self._worker.start()

    def send(self, event: ChangeEvent) -> None:
        if self._closed:
            raise DeliveryError("Notifier is closed")
        try:
            self._queue.put_nowait(event)
        except queue.Full as exc:
            raise DeliveryError(
                f"Notification queue full ({self._queue.maxsize} pending); dropping event for {event.path}"
            ) from exc

    def close(self, timeout: Optional[float] = None) -> None:
        """Deliver what is already queued, then stop the worker."""

        if self._closed:
            return
        self._closed = True
        self._queue.put(_STOP)
        self._worker.join(timeout)
        if self._worker.is_alive():
            logger.warning("Notification worker did not finish within %ss", timeout)
        self._inner.close()

    def _run(self) -> None:
        while True:
            item = self._queue.get()
            try:
                if item is _STOP:
                    return
                self._deliver(item)  # type: ignore[arg-type]
            finally:
                self._queue.task_done()

    def _deliver(self, event: ChangeEvent) -> None:
        try:
            self._inner.send(event)
        except (DeliveryError, SerializationError) as exc:
            logger.warning("Failed to send notification for %s: %s", event.path, exc)
        except Exception:
            logger.exception("Unexpected error delivering notification for %s", event.path)


def build_notifier(config: NotifierConfig) -> Notifier:
    """Create the notifier described by ``config``."""

    if not config.enabled:
        logger.info("No webhook URL configured; changes will only be logged")
        return NullNotifier()

    notifier: Notifier = WebhookNotifier(str(config.webhook_url), timeout=config.timeout)
    if config.queue_size > 0:
        logger.info("Delivering notifications through a queue of %s events", config.queue_size)
        notifier = QueuedNotifier(notifier, maxsize=config.queue_size)
    return notifier
