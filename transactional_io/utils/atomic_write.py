"""One-shot atomic writes built on transactional file handles."""

import json
from pathlib import Path
from typing import Optional, Union

from ..modes import FileMode
from ..naming import TokenFactory
from ..stream import TransactionalFile


YAML_SUFFIXES = ('.yaml', '.yml')


def atomic_write(
    file_path: Union[str, Path],
    content: Union[str, bytes, dict],
    mode: str = 'w',
    encoding: str = 'utf-8',
    token_factory: Optional[TokenFactory] = None,
) -> None:
    """
    Replace a file's content in one step, or leave it untouched.

    Args:
        file_path: Target file path
        content: Content to write (string, bytes, or dict for JSON/YAML)
        mode: Write mode ('w' for text, 'wb' for binary)
        encoding: Text encoding (text mode only)
        token_factory: Unique token generator for temp file names

    Raises:
        TransactionFailedError: If the new content could not be swapped in
        TransactionIOError: If the working copy could not be prepared
    """
    file_path = Path(file_path)
    file_path.parent.mkdir(parents=True, exist_ok=True)

    if isinstance(content, dict):
        content = _serialize(content, file_path)

    if 'b' in mode and isinstance(content, str):
        content = content.encode(encoding)
    elif 'b' not in mode and isinstance(content, bytes):
        content = content.decode(encoding)

    handle = TransactionalFile(file_path, FileMode.CREATE, token_factory=token_factory)
    if isinstance(content, bytes):
        with handle as f:
            f.write(content)
            f.commit()
    else:
        with handle.text(encoding=encoding) as f:
            f.write(content)
            handle.commit()


def _serialize(data: dict, file_path: Path) -> str:
    if file_path.suffix.lower() in YAML_SUFFIXES:
        import yaml
        return yaml.safe_dump(data, default_flow_style=False, allow_unicode=True)
    return json.dumps(data, indent=2, ensure_ascii=False)
