"""Recursive directory walk producing one record per entry."""
from __future__ import annotations

import os
import stat
from pathlib import Path
from typing import Iterator, List

from .errors import ScanError
from .events import FileRecord


def walk_entries(root: Path) -> Iterator[FileRecord]:
    """Yield a record for ``root`` and every entry below it.

    Entries are visited depth-first in lexical name order, directories
    included. Symlinks are reported with their own ``lstat`` metadata and
    never followed. The first ``OSError`` raises :class:`ScanError` and ends
    the walk; records already yielded stay valid.
    """

    yield from _walk(root, root)


def _walk(root: Path, path: Path) -> Iterator[FileRecord]:
    try:
        st = os.lstat(path)
    except OSError as exc:
        raise ScanError(root, path, exc) from exc

    if not stat.S_ISDIR(st.st_mode):
        yield FileRecord.from_stat(path, st)
        return

    # A directory that cannot be listed is not recorded either.
    names = _list_directory(root, path)
    yield FileRecord.from_stat(path, st)
    for name in names:
        yield from _walk(root, path / name)


def _list_directory(root: Path, directory: Path) -> List[str]:
    try:
        return sorted(os.listdir(directory))
    except OSError as exc:
        raise ScanError(root, directory, exc) from exc
