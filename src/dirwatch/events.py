"""Event models shared across monitor components."""
from __future__ import annotations

import os
import stat
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict


class ChangeKind(str, Enum):
    """Types of filesystem changes emitted by the monitor."""

    CREATED = "created"
    SIZE_CHANGED = "size_changed"
    MODIFIED = "modified"
    PERMISSIONS_CHANGED = "permissions_changed"

    @property
    def wire_name(self) -> str:
        return _WIRE_NAMES[self]


_WIRE_NAMES = {
    ChangeKind.CREATED: "file_created",
    ChangeKind.SIZE_CHANGED: "size_changed",
    ChangeKind.MODIFIED: "file_modified",
    ChangeKind.PERMISSIONS_CHANGED: "permissions_changed",
}


@dataclass(frozen=True)
class FileRecord:
    """Last observed metadata for one walked path."""

    path: Path
    size: int
    modified_ns: int  # st_mtime_ns, compared at full resolution
    permissions: int  # full st_mode bit pattern

    @classmethod
    def from_stat(cls, path: Path, st: os.stat_result) -> "FileRecord":
        return cls(
            path=path,
            size=st.st_size,
            modified_ns=st.st_mtime_ns,
            permissions=st.st_mode,
        )

    @property
    def modified_at(self) -> datetime:
        return _from_ns(self.modified_ns)

    @property
    def permissions_string(self) -> str:
        return stat.filemode(self.permissions)


@dataclass(frozen=True)
class ChangeEvent:
    """A single change observed in a watched directory tree."""

    kind: ChangeKind
    path: Path
    size: int
    modified_at: datetime
    permissions: int
    detected_at: datetime

    @classmethod
    def from_record(cls, kind: ChangeKind, record: FileRecord, detected_at: datetime) -> "ChangeEvent":
        return cls(
            kind=kind,
            path=record.path,
            size=record.size,
            modified_at=record.modified_at,
            permissions=record.permissions,
            detected_at=detected_at,
        )

    @property
    def permissions_string(self) -> str:
        return stat.filemode(self.permissions)

    def to_payload(self) -> Dict[str, Any]:
        """Return the JSON-ready mapping posted to the webhook."""

        return {
            "event_type": self.kind.wire_name,
            "path": str(self.path),
            "size": self.size,
            "last_modified": self.modified_at.isoformat(),
            "permissions": self.permissions_string,
            "timestamp": self.detected_at.isoformat(),
        }


def _from_ns(value: int) -> datetime:
    seconds, nanos = divmod(value, 1_000_000_000)
    return datetime.fromtimestamp(seconds, tz=timezone.utc).replace(microsecond=nanos // 1000)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)
