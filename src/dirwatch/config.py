"""Configuration loading utilities for the directory monitor."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, List, Optional, Sequence
from urllib.parse import urlsplit

import httpx
import yaml # type: ignore


logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 5.0
DEFAULT_TIMEOUT = 10.0


class ConfigError(Exception):
    """Raised when the configuration file is missing or invalid."""


@dataclass
class MonitorConfig:
    """Options describing which trees are polled and how often."""

    roots: List[Path] = field(default_factory=lambda: [Path(".")])
    poll_interval: float = DEFAULT_POLL_INTERVAL


@dataclass
class NotifierConfig:
    """Webhook delivery options. Delivery is disabled without a URL."""

    webhook_url: Optional[str] = None
    timeout: float = DEFAULT_TIMEOUT
    queue_size: int = 0  # 0 delivers synchronously on the polling thread

    @property
    def enabled(self) -> bool:
        return self.webhook_url is not None


@dataclass
class AppConfig:
    """Top-level configuration structure."""

    monitor: MonitorConfig = field(default_factory=MonitorConfig)
    notifier: NotifierConfig = field(default_factory=NotifierConfig)


def default_config() -> AppConfig:
    return AppConfig()


def load_config(path: Path) -> AppConfig:
    """Load and validate the YAML configuration file."""

    if not path.exists():
        raise ConfigError(f"Configuration file not found: {path}")

    try:
        data = yaml.safe_load(path.read_text())
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse YAML configuration: {exc}") from exc

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError("Configuration root must be a mapping")

    monitor_cfg = _parse_monitor_config(data.get("monitor"), config_path=path)
    notifier_cfg = _parse_notifier_config(data.get("notifier"))

    logger.debug(
        "Loaded configuration from %s: %s roots, interval=%ss, webhook=%s",
        path,
        len(monitor_cfg.roots),
        monitor_cfg.poll_interval,
        notifier_cfg.webhook_url or "<disabled>",
    )
    return AppConfig(monitor=monitor_cfg, notifier=notifier_cfg)


def apply_overrides(
    config: AppConfig,
    *,
    roots: Optional[Sequence[str]] = None,
    poll_interval: Optional[float] = None,
    webhook_url: Optional[str] = None,
    timeout: Optional[float] = None,
    queue_size: Optional[int] = None,
) -> AppConfig:
    """Return a copy of ``config`` with every non-``None`` override applied.

    Command-line roots are taken as given, relative to the working directory.
    """

    monitor = config.monitor
    notifier = config.notifier

    if roots:
        monitor = replace(monitor, roots=[Path(root) for root in roots])
    if poll_interval is not None:
        monitor = replace(monitor, poll_interval=_positive_float(poll_interval, "poll interval"))
    if webhook_url is not None:
        notifier = replace(notifier, webhook_url=_parse_url(webhook_url, "webhook URL"))
    if timeout is not None:
        notifier = replace(notifier, timeout=_positive_float(timeout, "timeout"))
    if queue_size is not None:
        notifier = replace(notifier, queue_size=_non_negative_int(queue_size, "queue size"))

    return AppConfig(monitor=monitor, notifier=notifier)


def _parse_monitor_config(raw: Any, *, config_path: Path) -> MonitorConfig:
    if raw is None:
        return MonitorConfig()
    if not isinstance(raw, dict):
        raise ConfigError("'monitor' section must be a mapping")

    roots_raw = _ensure_str_list(raw.get("roots", ["."]), "monitor.roots")
    if not roots_raw:
        raise ConfigError("monitor.roots must list at least one path")

    roots: List[Path] = []
    for root_raw in roots_raw:
        root = Path(root_raw)
        if not root.is_absolute():
            root = (config_path.parent / root).resolve()
        roots.append(root)

    poll_interval = _positive_float(raw.get("poll_interval", DEFAULT_POLL_INTERVAL), "monitor.poll_interval")

    return MonitorConfig(roots=roots, poll_interval=poll_interval)


def _parse_notifier_config(raw: Any) -> NotifierConfig:
    if raw is None:
        return NotifierConfig()
    if not isinstance(raw, dict):
        raise ConfigError("'notifier' section must be a mapping")

    url_raw = raw.get("webhook_url")
    webhook_url = None
    if url_raw is not None:
        webhook_url = _parse_url(url_raw, "notifier.webhook_url")

    timeout = _positive_float(raw.get("timeout", DEFAULT_TIMEOUT), "notifier.timeout")
    queue_size = _non_negative_int(raw.get("queue_size", 0), "notifier.queue_size")

    return NotifierConfig(webhook_url=webhook_url, timeout=timeout, queue_size=queue_size)


def _parse_url(value: Any, field_name: str) -> str:
    if not isinstance(value, str):
        raise ConfigError(f"{field_name} must be a string")
    # Both the stdlib splitter and the HTTP client must accept the URL.
    try:
        urlsplit(value).port
        parsed = httpx.URL(value)
    except (httpx.InvalidURL, ValueError) as exc:
        raise ConfigError(f"{field_name} is not a valid URL: {exc}") from exc
    if parsed.scheme not in ("http", "https") or not parsed.host:
        raise ConfigError(f"{field_name} must be an http or https URL")
    return value


def _positive_float(value: Any, field_name: str) -> float:
    if isinstance(value, bool):
        raise ConfigError(f"{field_name} must be numeric")
    try:
        result = float(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{field_name} must be numeric") from exc
    if result <= 0:
        raise ConfigError(f"{field_name} must be positive")
    return result


def _non_negative_int(value: Any, field_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"{field_name} must be an integer")
    if value < 0:
        raise ConfigError(f"{field_name} must not be negative")
    return value


def _ensure_str_list(value: Any, field_name: str) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if not isinstance(value, list):
        raise ConfigError(f"{field_name} must be a list of strings")
    items: List[str] = []
    for elem in value:
        if not isinstance(elem, str):
            raise ConfigError(f"{field_name} must contain only strings")
        items.append(elem)
    return items
