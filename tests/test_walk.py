import os
from pathlib import Path

import pytest

from dirwatch import walk
from dirwatch.errors import ScanError
from dirwatch.walk import walk_entries


def test_walk_visits_root_then_entries_in_name_order(tmp_path: Path):
    (tmp_path / "b.txt").write_text("b")
    (tmp_path / "a").mkdir()
    (tmp_path / "a" / "inner.txt").write_text("i")
    (tmp_path / "c.txt").write_text("c")

    paths = [record.path for record in walk_entries(tmp_path)]

    assert paths == [
        tmp_path,
        tmp_path / "a",
        tmp_path / "a" / "inner.txt",
        tmp_path / "b.txt",
        tmp_path / "c.txt",
    ]


def test_walk_records_directories_and_files(tmp_path: Path):
    (tmp_path / "sub").mkdir()
    (tmp_path / "sub" / "f.bin").write_bytes(b"\0" * 12)

    records = {record.path: record for record in walk_entries(tmp_path)}

    assert records[tmp_path / "sub"].permissions_string.startswith("d")
    assert records[tmp_path / "sub" / "f.bin"].size == 12


def test_walk_does_not_follow_symlinks(tmp_path: Path):
    target = tmp_path / "real"
    target.mkdir()
    (target / "file.txt").write_text("x")
    os.symlink(target, tmp_path / "link")

    paths = [record.path for record in walk_entries(tmp_path)]

    assert tmp_path / "link" in paths
    assert tmp_path / "link" / "file.txt" not in paths


def test_walk_missing_root_raises_scan_error(tmp_path: Path):
    missing = tmp_path / "missing"

    with pytest.raises(ScanError) as excinfo:
        list(walk_entries(missing))

    assert excinfo.value.root == missing
    assert isinstance(excinfo.value.cause, FileNotFoundError)


def test_walk_is_lazy(tmp_path: Path):
    (tmp_path / "a").mkdir()
    (tmp_path / "b").mkdir()
    walker = walk_entries(tmp_path)

    assert next(walker).path == tmp_path
    (tmp_path / "b" / "new.txt").write_text("n")
    assert [record.path for record in walker] == [
        tmp_path / "a",
        tmp_path / "b",
        tmp_path / "b" / "new.txt",
    ]


def test_unlistable_directory_is_not_yielded(tmp_path: Path, monkeypatch):
    (tmp_path / "a.txt").write_text("a")
    (tmp_path / "locked").mkdir()
    (tmp_path / "locked" / "inside.txt").write_text("i")

    original = walk._list_directory

    def _deny_locked(root, directory):
        if directory.name == "locked":
            raise ScanError(root, directory, PermissionError(13, "Permission denied"))
        return original(root, directory)

    monkeypatch.setattr(walk, "_list_directory", _deny_locked)

    seen = []
    with pytest.raises(ScanError) as excinfo:
        for record in walk_entries(tmp_path):
            seen.append(record.path)

    assert seen == [tmp_path, tmp_path / "a.txt"]
    assert excinfo.value.path == tmp_path / "locked"
    assert isinstance(excinfo.value.cause, PermissionError)
