"""Shared pytest fixtures and test helpers."""

from __future__ import annotations

import os
import threading
from pathlib import Path
from typing import Dict, Optional, Union

import pytest

from mediadex.core import config as config_module
from mediadex.runtime import runtime_config

FileContent = Union[bytes, str, tuple]


def write_tree(root: Path, files: Dict[str, Optional[FileContent]]) -> Path:
    """
    Create files below ``root``.

    Values are the file content (bytes or str), a ``(content, mtime)``
    tuple, or None for an empty directory.
    """
    root.mkdir(parents=True, exist_ok=True)
    for rel, content in files.items():
        path = root / rel
        if content is None:
            path.mkdir(parents=True, exist_ok=True)
            continue
        path.parent.mkdir(parents=True, exist_ok=True)
        mtime = None
        if isinstance(content, tuple):
            content, mtime = content
        if isinstance(content, str):
            content = content.encode("utf-8")
        path.write_bytes(content)
        if mtime is not None:
            os.utime(path, (mtime, mtime))
    return root


@pytest.fixture
def make_tree(tmp_path):
    """
    Fixture providing a factory that builds a directory tree.

    Usage:
        def test_example(make_tree):
            root = make_tree({"a.jpg": (b"jpeg", 100), "sub/b.mp4": b"mp4"})
    """
    def _make(files: Dict[str, Optional[FileContent]], name: str = "root") -> Path:
        return write_tree(tmp_path / name, files)
    return _make


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    """Point runtime directories at a temporary home and drop global config."""
    home = tmp_path / "home"
    monkeypatch.setenv(runtime_config.HOME_ENV_VAR, str(home))
    runtime_config.reset_runtime_config()
    monkeypatch.setattr(config_module, "_config_manager", None)
    yield home
    runtime_config.reset_runtime_config()


class Recorder:
    """Collects callback values and lets tests wait for them."""

    def __init__(self):
        self.items = []
        self._cond = threading.Condition()

    def __call__(self, item) -> None:
        with self._cond:
            self.items.append(item)
            self._cond.notify_all()

    def wait_for(self, predicate, timeout: float = 5.0) -> bool:
        with self._cond:
            return self._cond.wait_for(lambda: predicate(self.items), timeout=timeout)


@pytest.fixture
def recorder():
    return Recorder()


@pytest.fixture
def deep_tree(tmp_path):
    """
    Fixture providing a factory for a single chain of nested directories.

    Returns ``(root, deepest)``. Directories are created and removed one
    level at a time so setup and teardown work past the recursion limit.
    """
    created = []

    def _make(depth: int, leaf_file: Optional[str] = None):
        root = tmp_path / "deep"
        root.mkdir()
        created.append(root)
        path = root
        for _ in range(depth):
            path = path / "d"
            path.mkdir()
            created.append(path)
        if leaf_file:
            (path / leaf_file).write_bytes(b"leaf")
        return root, path

    yield _make

    for path in reversed(created):
        for child in path.iterdir():
            if not child.is_dir():
                child.unlink()
        path.rmdir()
