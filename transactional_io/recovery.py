"""Recovery of artifacts left behind by interrupted transactions.

A handle never leaves artifacts on a normal exit, but a crash mid-swap or a
failed rollback can leave the original content parked in a backup file
while the target is missing. ``recover`` puts it back.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Union

from .errors import TransactionIOError
from .filesystem import LocalFileSystem
from .naming import find_artifacts


logger = logging.getLogger(__name__)


@dataclass
class RecoveryReport:
    """Outcome of a recover() call."""
    target: Path
    restored_from: Optional[Path] = None
    removed: List[Path] = field(default_factory=list)
    remaining: List[Path] = field(default_factory=list)

    @property
    def restored(self) -> bool:
        return self.restored_from is not None


def recover(
    target: Union[str, Path],
    *,
    clean: bool = False,
    filesystem: Optional[LocalFileSystem] = None,
) -> RecoveryReport:
    """Restore a missing target from its newest backup.

    Args:
        target: Target file path
        clean: Also delete leftover working copies and remaining backups
        filesystem: File-system operations (defaults to LocalFileSystem)

    Returns:
        What was restored, removed and left in place

    Raises:
        TransactionIOError: If restoring or removing an artifact fails
    """
    fs = filesystem or LocalFileSystem()
    target = Path(target)
    report = RecoveryReport(target=target)
    artifacts = find_artifacts(target)
    backups = list(artifacts.backup_files)

    try:
        if backups and not fs.exists(target):
            newest = max(backups, key=fs.mtime)
            fs.move(newest, target)
            backups.remove(newest)
            report.restored_from = newest
            logger.warning(f"Restored {target} from {newest.name}")

        leftovers = artifacts.temp_files + backups
        if clean:
            for path in leftovers:
                fs.delete(path)
                report.removed.append(path)
                logger.info(f"Removed leftover {path.name}")
        else:
            report.remaining = leftovers
    except OSError as exc:
        raise TransactionIOError(
            f"Could not recover '{target}': {exc}", target
        ) from exc

    return report
