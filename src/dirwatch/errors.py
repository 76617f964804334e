"""Exceptions raised by the directory monitor components."""
from __future__ import annotations

from pathlib import Path
from typing import Optional


class DirwatchError(Exception):
    """Base exception for all dirwatch errors."""


class ScanError(DirwatchError):
    """A root could not be walked to completion.

    Covers unreadable directories, permission denials and entries that vanish
    between listing and ``lstat``; the cause is kept on ``__cause__``.
    """

    def __init__(self, root: Path, path: Path, cause: Optional[OSError] = None):
        self.root = root
        self.path = path
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"Error scanning {path} under root {root}{detail}")


class SerializationError(DirwatchError):
    """An event could not be encoded into a webhook payload."""


class DeliveryError(DirwatchError):
    """A notification could not be delivered to its endpoint."""
