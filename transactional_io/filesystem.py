"""File-system operations used by transactional handles."""

import os
import shutil
from pathlib import Path
from typing import IO


class LocalFileSystem:
    """Blocking operations on the local file system.

    Every transactional handle goes through one of these, so tests can
    subclass it to inject failures at a precise step.
    """

    def exists(self, path: Path) -> bool:
        return Path(path).exists()

    def copy(self, source: Path, destination: Path) -> None:
        """Copy bytes, permission bits and timestamps of ``source``."""
        shutil.copy2(source, destination)

    def create(self, path: Path) -> None:
        """Create an empty file; fails if ``path`` already exists."""
        with open(path, 'xb'):
            pass

    def move(self, source: Path, destination: Path) -> None:
        """Atomically rename ``source`` onto ``destination``.

        Raises:
            FileExistsError: If ``destination`` already exists
            FileNotFoundError: If ``source`` is missing
        """
        if os.path.lexists(destination):
            raise FileExistsError(
                f"Cannot move '{source}' to '{destination}': destination exists"
            )
        os.replace(source, destination)

    def delete(self, path: Path, missing_ok: bool = True) -> None:
        Path(path).unlink(missing_ok=missing_ok)

    def mtime(self, path: Path) -> float:
        return Path(path).stat().st_mtime

    def open(self, path: Path, mode: str) -> IO[bytes]:
        return open(path, mode)
