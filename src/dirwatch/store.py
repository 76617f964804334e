"""In-memory snapshot of the last observed state of every walked path."""
from __future__ import annotations

from pathlib import Path
from typing import Dict, Iterator, List, Optional

from .events import FileRecord


class SnapshotStore:
    """Maps a path to its most recent :class:`FileRecord`.

    Records are overwritten on every observation and never removed, so paths
    deleted from disk keep their last known metadata. The store is not
    thread-safe; it is owned by a single monitor and touched only from its
    polling thread.
    """

    def __init__(self) -> None:
        self._records: Dict[Path, FileRecord] = {}

    def get(self, path: Path) -> Optional[FileRecord]:
        return self._records.get(path)

    def put(self, record: FileRecord) -> None:
        self._records[record.path] = record

    def records(self) -> List[FileRecord]:
        return list(self._records.values())

    def __contains__(self, path: object) -> bool:
        return path in self._records

    def __iter__(self) -> Iterator[Path]:
        return iter(self._records)

    def __len__(self) -> int:
        return len(self._records)
