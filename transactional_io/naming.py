"""Unique tokens and the on-disk names of transaction artifacts.

For a target ``P`` a handle works on ``P.<token>.tmp`` and, only while a
commit is being applied, parks the original content at
``P.<token>.original.tmp``. Tokens are unique per call so concurrent
handles on the same target never share an artifact.
"""

import re
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, List


TokenFactory = Callable[[], str]

TEMP_SUFFIX = '.tmp'
BACKUP_SUFFIX = '.original.tmp'


def uuid_token() -> str:
    return uuid.uuid4().hex


def timestamp_token() -> str:
    """Sortable timestamp token, e.g. "20250210153000123456-1a2b3c4d"."""
    return f"{datetime.now():%Y%m%d%H%M%S%f}-{uuid.uuid4().hex[:8]}"


class SequentialTokens:
    """Deterministic token factory: "t1", "t2", ..."""

    def __init__(self, prefix: str = 't'):
        self.prefix = prefix
        self.count = 0

    def __call__(self) -> str:
        self.count += 1
        return f"{self.prefix}{self.count}"


TOKEN_FACTORIES: Dict[str, TokenFactory] = {
    'uuid': uuid_token,
    'timestamp': timestamp_token,
}


def resolve_token_factory(name: str) -> TokenFactory:
    """Look up a token factory by its config name."""
    try:
        return TOKEN_FACTORIES[name]
    except KeyError:
        raise ValueError(
            f"Unknown token strategy: {name!r} "
            f"(expected one of: {', '.join(TOKEN_FACTORIES)})"
        ) from None


def temp_path_for(target: Path, token: str) -> Path:
    target = Path(target)
    return target.with_name(f"{target.name}.{token}{TEMP_SUFFIX}")


def backup_path_for(target: Path, token: str) -> Path:
    target = Path(target)
    return target.with_name(f"{target.name}.{token}{BACKUP_SUFFIX}")


@dataclass
class TransactionArtifacts:
    """Leftover working copies and backups found next to a target."""
    target: Path
    temp_files: List[Path] = field(default_factory=list)
    backup_files: List[Path] = field(default_factory=list)

    @property
    def empty(self) -> bool:
        return not self.temp_files and not self.backup_files

    def all(self) -> List[Path]:
        return self.temp_files + self.backup_files


def find_artifacts(target: Path) -> TransactionArtifacts:
    """List temp and backup files belonging to ``target``.

    Only names of the form ``<name>.<token>.tmp`` and
    ``<name>.<token>.original.tmp`` count; the token may not contain dots,
    so artifacts of ``<name>.bak`` are not mistaken for ours.
    """
    target = Path(target)
    artifacts = TransactionArtifacts(target=target)
    directory = target.parent
    if not directory.is_dir():
        return artifacts

    pattern = re.compile(
        re.escape(target.name) + r'\.([^.]+)(\.original)?\.tmp$'
    )
    for candidate in sorted(directory.iterdir()):
        match = pattern.fullmatch(candidate.name)
        if not match or not candidate.is_file():
            continue
        if match.group(2):
            artifacts.backup_files.append(candidate)
        else:
            artifacts.temp_files.append(candidate)
    return artifacts
