"""Open modes for transactional file handles."""

from enum import Enum
from typing import Union


class FileMode(Enum):
    """Open mode of a transactional file handle.

    Each member follows the usual file-open contract for the target path:

    - OPEN: target must exist, read/write from the start
    - TRUNCATE: target must exist, content is emptied
    - CREATE_NEW: target must not exist
    - OPEN_OR_CREATE: open if present, otherwise start empty
    - CREATE: start empty whether or not the target exists
    - APPEND: keep existing content, every write lands at end-of-file
    """
    OPEN = "open"
    TRUNCATE = "truncate"
    CREATE_NEW = "create_new"
    OPEN_OR_CREATE = "open_or_create"
    CREATE = "create"
    APPEND = "append"

    @property
    def requires_existing(self) -> bool:
        return self in (FileMode.OPEN, FileMode.TRUNCATE)

    @property
    def forbids_existing(self) -> bool:
        return self is FileMode.CREATE_NEW

    @property
    def is_creating(self) -> bool:
        """True for modes that may bring the target into existence."""
        return not self.requires_existing

    @property
    def stream_mode(self) -> str:
        """Mode string used for the working stream over the temp copy."""
        return _STREAM_MODES[self]

    @classmethod
    def parse(cls, value: Union['FileMode', str]) -> 'FileMode':
        """Resolve a mode from a member, its value or its name.

        Case, underscores and hyphens are ignored, so "open_or_create",
        "OPEN_OR_CREATE", "open-or-create", "OpenOrCreate" and "OPENORCREATE"
        all name the same mode.

        Raises:
            ValueError: If the value names no mode
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            mode = _BY_KEY.get(_normalize(value))
            if mode is not None:
                return mode
        choices = ', '.join(m.value for m in cls)
        raise ValueError(f"Unknown file mode: {value!r} (expected one of: {choices})")


_STREAM_MODES = {
    FileMode.OPEN: 'r+b',
    FileMode.TRUNCATE: 'w+b',
    FileMode.CREATE_NEW: 'w+b',
    FileMode.OPEN_OR_CREATE: 'r+b',
    FileMode.CREATE: 'w+b',
    FileMode.APPEND: 'a+b',
}


def _normalize(name: str) -> str:
    return name.strip().replace('_', '').replace('-', '').lower()


_BY_KEY = {_normalize(m.value): m for m in FileMode}
