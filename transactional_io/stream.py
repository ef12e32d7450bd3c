"""All-or-nothing writes to a single file.

A TransactionalFile works on a private copy of the target. Nothing reaches
the target until the handle is committed and then closed; closing an
uncommitted handle throws the copy away.

Usage:
    with TransactionalFile(path, FileMode.TRUNCATE) as f:
        f.write(data)
        f.commit()

    # Text through a buffered wrapper; closing the wrapper flushes it
    # before the handle is finalized.
    with open_transactional(path, 'create', encoding='utf-8') as f:
        f.write(text)
        f.buffer.commit()
"""

import io
import logging
from pathlib import Path
from typing import Iterator, List, Optional, Union

from .errors import (
    AlreadyCommittedError,
    HandleClosedError,
    TargetExistsError,
    TargetNotFoundError,
    TransactionFailedError,
    TransactionIOError,
)
from .filesystem import LocalFileSystem
from .modes import FileMode
from .naming import TokenFactory, backup_path_for, temp_path_for, uuid_token


logger = logging.getLogger(__name__)


class TransactionalFile:
    """Binary stream over a working copy that replaces the target on commit.

    The handle owns its working stream and temp file. Reads, writes and
    seeks go to the working copy only. ``commit()`` merely marks the
    transaction; the target is swapped when the handle is closed, after the
    last buffered bytes have reached the working copy.

    Attributes:
        target_path: File the caller wants modified
        temp_path: Private working copy, unique per handle
        mode: Requested open mode
        existed_at_open: Whether the target existed when the handle was opened
    """

    def __init__(
        self,
        path: Union[str, Path],
        mode: Union[FileMode, str] = FileMode.OPEN,
        *,
        token_factory: Optional[TokenFactory] = None,
        filesystem: Optional[LocalFileSystem] = None,
    ):
        """
        Args:
            path: Target file path
            mode: FileMode member or its name (e.g. "truncate")
            token_factory: Produces the unique part of temp and backup names
            filesystem: File-system operations (defaults to LocalFileSystem)

        Raises:
            TargetNotFoundError: OPEN or TRUNCATE on a missing target
            TargetExistsError: CREATE_NEW on an existing target
            TransactionIOError: The working copy could not be prepared
        """
        self.target_path = Path(path)
        self.mode = FileMode.parse(mode)
        self._fs = filesystem or LocalFileSystem()
        self._new_token = token_factory or uuid_token
        self._committed = False
        self._finalized = False

        self.existed_at_open = self._fs.exists(self.target_path)
        if self.mode.requires_existing and not self.existed_at_open:
            raise TargetNotFoundError(
                f"Cannot open '{self.target_path}' in {self.mode.value} mode: "
                f"file does not exist",
                self.target_path,
            )
        if self.mode.forbids_existing and self.existed_at_open:
            raise TargetExistsError(
                f"Cannot open '{self.target_path}' in {self.mode.value} mode: "
                f"file already exists",
                self.target_path,
            )

        self.temp_path = temp_path_for(self.target_path, self._new_token())
        self._stream = self._open_working_copy()
        logger.debug(
            f"Opened transaction on {self.target_path} "
            f"(mode={self.mode.value}, existed={self.existed_at_open}, "
            f"temp={self.temp_path.name})"
        )

    def _open_working_copy(self):
        """Materialize the temp file and open the working stream on it."""
        try:
            if self.existed_at_open:
                self._fs.copy(self.target_path, self.temp_path)
            else:
                self._fs.create(self.temp_path)
            return self._fs.open(self.temp_path, self.mode.stream_mode)
        except OSError as exc:
            # An existing temp file at our name is not ours to remove
            if not isinstance(exc, FileExistsError):
                self._remove_temp_quietly()
            raise TransactionIOError(
                f"Could not prepare a working copy of '{self.target_path}': {exc}",
                self.target_path,
            ) from exc

    # -- transaction state -------------------------------------------------

    @property
    def committed(self) -> bool:
        return self._committed

    @property
    def finalized(self) -> bool:
        return self._finalized

    @property
    def closed(self) -> bool:
        return self._finalized

    @property
    def name(self) -> str:
        return str(self.target_path)

    def commit(self) -> None:
        """Mark the transaction to be applied when the handle is closed.

        The file system is not touched here; buffered writers layered on
        this handle may still hold bytes that only land on close.

        Raises:
            HandleClosedError: The handle was already closed
            AlreadyCommittedError: commit() was already called
        """
        if self._finalized:
            raise HandleClosedError(
                f"Cannot commit '{self.target_path}': handle is closed",
                self.target_path,
            )
        if self._committed:
            raise AlreadyCommittedError(
                f"Cannot commit '{self.target_path}': already committed",
                self.target_path,
            )
        self._committed = True

    def close(self) -> None:
        """Close the working stream and apply or discard the transaction.

        Only the first call does anything.

        Raises:
            TransactionFailedError: A committed transaction could not be applied
            TransactionIOError: The working copy could not be flushed or removed
        """
        if self._finalized:
            return

        try:
            self._stream.close()
        except OSError as exc:
            self._finalized = True
            self._remove_temp_quietly()
            if self._committed:
                raise TransactionFailedError(self.target_path, exc) from exc
            raise TransactionIOError(
                f"Could not close the working copy of '{self.target_path}': {exc}",
                self.target_path,
            ) from exc

        self._finalized = True
        if self._committed:
            self._apply()
        else:
            self._discard()

    # -- finalize ----------------------------------------------------------

    def _apply(self) -> None:
        """Swap the working copy into place, rolling back on failure."""
        backup_path = backup_path_for(self.target_path, self._new_token())
        direct = self.mode.is_creating and not self.existed_at_open
        swapped = False

        try:
            if direct:
                # Nothing to preserve
                self._fs.move(self.temp_path, self.target_path)
                swapped = True
            else:
                self._fs.move(self.target_path, backup_path)
                self._fs.move(self.temp_path, self.target_path)
                swapped = True
                self._fs.delete(backup_path)
        except Exception as exc:
            rollback_error = None
            try:
                self._rollback(backup_path)
            except Exception as err:
                rollback_error = err
                logger.error(
                    f"Rollback failed for {self.target_path}, "
                    f"original content is in {backup_path}: {err}"
                )
            self._remove_temp_quietly()
            raise TransactionFailedError(
                self.target_path,
                exc,
                rolled_back=not swapped and rollback_error is None,
                rollback_error=rollback_error,
            ) from exc

        logger.info(f"Committed transaction on {self.target_path}")

    def _rollback(self, backup_path: Path) -> None:
        if not self._fs.exists(self.target_path) and self._fs.exists(backup_path):
            self._fs.move(backup_path, self.target_path)
            logger.warning(f"Rolled back {self.target_path} to its original content")

    def _discard(self) -> None:
        try:
            self._fs.delete(self.temp_path)
        except OSError as exc:
            raise TransactionIOError(
                f"Could not remove the working copy '{self.temp_path}': {exc}",
                self.target_path,
            ) from exc
        logger.debug(f"Discarded uncommitted changes to {self.target_path}")

    def _remove_temp_quietly(self) -> None:
        try:
            self._fs.delete(self.temp_path)
        except OSError as exc:
            logger.warning(f"Could not remove working copy {self.temp_path}: {exc}")

    # -- stream surface ----------------------------------------------------

    def _check_open(self) -> None:
        if self._finalized:
            raise HandleClosedError(
                f"I/O operation on closed transactional file '{self.target_path}'",
                self.target_path,
            )

    def read(self, size: int = -1) -> bytes:
        self._check_open()
        return self._stream.read(size)

    def read1(self, size: int = -1) -> bytes:
        self._check_open()
        return self._stream.read1(size)

    def readinto(self, buffer) -> int:
        self._check_open()
        return self._stream.readinto(buffer)

    def readline(self, size: int = -1) -> bytes:
        self._check_open()
        return self._stream.readline(size)

    def readlines(self, hint: int = -1) -> List[bytes]:
        self._check_open()
        return self._stream.readlines(hint)

    def write(self, data) -> int:
        self._check_open()
        return self._stream.write(data)

    def writelines(self, lines) -> None:
        self._check_open()
        self._stream.writelines(lines)

    def seek(self, offset: int, whence: int = io.SEEK_SET) -> int:
        self._check_open()
        return self._stream.seek(offset, whence)

    def tell(self) -> int:
        self._check_open()
        return self._stream.tell()

    def truncate(self, size: Optional[int] = None) -> int:
        self._check_open()
        return self._stream.truncate(size)

    def flush(self) -> None:
        self._check_open()
        self._stream.flush()

    def fileno(self) -> int:
        self._check_open()
        return self._stream.fileno()

    def readable(self) -> bool:
        self._check_open()
        return self._stream.readable()

    def writable(self) -> bool:
        self._check_open()
        return self._stream.writable()

    def seekable(self) -> bool:
        self._check_open()
        return self._stream.seekable()

    def isatty(self) -> bool:
        self._check_open()
        return self._stream.isatty()

    def __iter__(self) -> Iterator[bytes]:
        self._check_open()
        return iter(self._stream)

    def text(
        self,
        encoding: str = 'utf-8',
        errors: Optional[str] = None,
        newline: Optional[str] = None,
    ) -> io.TextIOWrapper:
        """Wrap the handle for text I/O.

        Closing the wrapper flushes it and then closes (finalizes) this
        handle. The handle stays reachable as ``wrapper.buffer``.
        """
        self._check_open()
        return io.TextIOWrapper(self, encoding=encoding, errors=errors, newline=newline)

    def __enter__(self) -> 'TransactionalFile':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __repr__(self) -> str:
        if not self._finalized:
            state = 'committed' if self._committed else 'open'
        else:
            state = 'closed'
        return (
            f"<TransactionalFile {str(self.target_path)!r} "
            f"mode={self.mode.value} {state}>"
        )


def open_transactional(
    path: Union[str, Path],
    mode: Union[FileMode, str] = FileMode.OPEN,
    *,
    encoding: Optional[str] = None,
    errors: Optional[str] = None,
    newline: Optional[str] = None,
    token_factory: Optional[TokenFactory] = None,
    filesystem: Optional[LocalFileSystem] = None,
) -> Union[TransactionalFile, io.TextIOWrapper]:
    """Open a transactional handle, wrapped for text if an encoding is given.

    For text, commit through ``f.buffer.commit()``.
    """
    handle = TransactionalFile(
        path, mode, token_factory=token_factory, filesystem=filesystem
    )
    if encoding is None:
        return handle
    try:
        return handle.text(encoding=encoding, errors=errors, newline=newline)
    except Exception:
        handle.close()
        raise
