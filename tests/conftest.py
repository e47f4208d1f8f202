from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional, Set

import pytest

from pew.lines import has_marker
from pew.manager import TaskManager
from pew.storage import TaskFileError, TaskFileStore


class MemoryStore(TaskFileStore):
    """Task files kept in a dict, keyed by path string"""

    def __init__(self, files: Optional[Dict[str, str]] = None):
        self.files: Dict[str, str] = dict(files or {})
        self.unreadable: Set[str] = set()
        self.writes: List[str] = []

    def exists(self, path) -> bool:
        return str(path) in self.files or str(path) in self.unreadable

    def read_text(self, path) -> str:
        key = str(path)
        if key in self.unreadable:
            raise PermissionError(f"Permission denied: {key}")
        if key not in self.files:
            raise TaskFileError(f"Task file not found: {key}")
        return self.files[key]

    def write_text(self, path, content: str) -> None:
        self.files[str(path)] = content
        self.writes.append(str(path))

    def marker_count(self) -> int:
        return sum(
            1 for content in self.files.values() for line in content.split("\n") if has_marker(line)
        )


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def manager(store: MemoryStore) -> TaskManager:
    return TaskManager(store=store, cwd="/work")


@pytest.fixture
def workspace(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Empty working directory with its own home directory"""
    home = tmp_path / "home"
    work = tmp_path / "work"
    home.mkdir()
    work.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(work)
    return work
