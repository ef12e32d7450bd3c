"""
Shared fixtures for transactional-io tests.

Provides target files under tmp_path, deterministic token factories and a
file system that fails on demand at a chosen call.
"""

from collections import defaultdict
from pathlib import Path
from typing import List

import pytest

from transactional_io import LocalFileSystem, SequentialTokens


class CloseFailingStream:
    """Wraps a real stream; close() closes it and then raises."""

    def __init__(self, stream):
        self._stream = stream

    def __getattr__(self, name):
        return getattr(self._stream, name)

    def close(self):
        self._stream.close()
        raise OSError("injected close failure")


class FaultyFileSystem(LocalFileSystem):
    """LocalFileSystem that raises at the n-th call of an operation.

    Usage:
        fs = FaultyFileSystem()
        fs.fail('move', call=2)   # second move() raises OSError
    """

    def __init__(self):
        self.failures = {}
        self.calls = defaultdict(int)
        self.fail_close = False

    def fail(self, operation: str, call: int = 1, exc: Exception = None) -> None:
        self.failures[(operation, call)] = exc or OSError(f"injected {operation} failure")

    def _maybe_fail(self, operation: str) -> None:
        self.calls[operation] += 1
        exc = self.failures.get((operation, self.calls[operation]))
        if exc is not None:
            raise exc

    def copy(self, source, destination):
        self._maybe_fail('copy')
        super().copy(source, destination)

    def create(self, path):
        self._maybe_fail('create')
        super().create(path)

    def move(self, source, destination):
        self._maybe_fail('move')
        super().move(source, destination)

    def delete(self, path, missing_ok=True):
        self._maybe_fail('delete')
        super().delete(path, missing_ok=missing_ok)

    def open(self, path, mode):
        self._maybe_fail('open')
        stream = super().open(path, mode)
        if self.fail_close:
            return CloseFailingStream(stream)
        return stream


def leftovers(target: Path) -> List[str]:
    """Names of every file next to ``target`` other than the target itself."""
    return sorted(p.name for p in target.parent.iterdir() if p != target)


@pytest.fixture
def target(tmp_path) -> Path:
    """Path of a target file that does not exist yet."""
    return tmp_path / "settings.xml"


@pytest.fixture
def existing(target) -> Path:
    """Target file holding b"A"."""
    target.write_bytes(b"A")
    return target


@pytest.fixture
def tokens() -> SequentialTokens:
    return SequentialTokens()


@pytest.fixture
def faulty_fs() -> FaultyFileSystem:
    return FaultyFileSystem()
