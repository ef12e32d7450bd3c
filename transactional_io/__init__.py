"""All-or-nothing file writes.

Open a TransactionalFile, write to it like any binary stream, call
commit(), and the target is replaced when the handle closes. Without
commit() the target is left byte-for-byte unchanged.
"""

from .errors import (
    TransactionalIOError,
    TargetNotFoundError,
    TargetExistsError,
    TransactionIOError,
    AlreadyCommittedError,
    HandleClosedError,
    TransactionFailedError,
)
from .modes import FileMode
from .naming import (
    SequentialTokens,
    TransactionArtifacts,
    find_artifacts,
    timestamp_token,
    uuid_token,
)
from .filesystem import LocalFileSystem
from .stream import TransactionalFile, open_transactional
from .recovery import RecoveryReport, recover

__version__ = '0.1.0'

__all__ = [
    'TransactionalIOError',
    'TargetNotFoundError',
    'TargetExistsError',
    'TransactionIOError',
    'AlreadyCommittedError',
    'HandleClosedError',
    'TransactionFailedError',
    'FileMode',
    'SequentialTokens',
    'TransactionArtifacts',
    'find_artifacts',
    'timestamp_token',
    'uuid_token',
    'LocalFileSystem',
    'TransactionalFile',
    'open_transactional',
    'RecoveryReport',
    'recover',
]
