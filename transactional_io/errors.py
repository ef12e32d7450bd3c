"""Errors raised by transactional file handles."""

from pathlib import Path
from typing import Optional


class TransactionalIOError(Exception):
    """Base class for every transactional file error."""

    def __init__(self, message: str, target_path: Optional[Path] = None):
        super().__init__(message)
        self.target_path = target_path


class TargetNotFoundError(TransactionalIOError, FileNotFoundError):
    """A must-exist mode was requested but the target is absent."""
    pass


class TargetExistsError(TransactionalIOError, FileExistsError):
    """A must-not-exist mode was requested but the target is present."""
    pass


class TransactionIOError(TransactionalIOError, OSError):
    """Copy, create, open, rename or delete failed underneath a handle."""
    pass


class AlreadyCommittedError(TransactionalIOError):
    """commit() was called a second time on the same handle."""
    pass


class HandleClosedError(TransactionalIOError, ValueError):
    """The handle was already finalized."""
    pass


class TransactionFailedError(TransactionalIOError):
    """A committed transaction could not be applied to the target.

    Attributes:
        cause: The exception that interrupted the swap
        rolled_back: True if the target holds its pre-transaction content
        rollback_error: The exception raised while rolling back, if any.
            When set, the target is in an indeterminate state.
    """

    def __init__(
        self,
        target_path: Path,
        cause: BaseException,
        rolled_back: bool = True,
        rollback_error: Optional[BaseException] = None,
    ):
        if rollback_error is not None:
            outcome = (
                f"rollback also failed ({rollback_error}); "
                f"'{target_path}' may be missing or left in an indeterminate state"
            )
        elif rolled_back:
            outcome = f"'{target_path}' was left as it was before the transaction"
        else:
            outcome = f"'{target_path}' may already hold the new content"
        super().__init__(
            f"Could not complete the transaction for '{target_path}': "
            f"{cause}; {outcome}",
            target_path,
        )
        self.cause = cause
        self.rolled_back = rolled_back
        self.rollback_error = rollback_error
