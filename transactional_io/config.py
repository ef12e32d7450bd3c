"""YAML configuration for the transactional-io command line."""

import copy
from pathlib import Path
from typing import Any, Dict

from .utils.atomic_write import atomic_write


DEFAULT_CONFIG: Dict[str, Any] = {
    'logging': {
        'level': 'INFO',
        'file': None,
    },
    'naming': {
        'token': 'uuid',
    },
    'defaults': {
        'mode': 'create',
        'chunk_size': 65536,
    },
}


def load_config(config_path: Path) -> Dict[str, Any]:
    """Load a YAML config file, filling unset keys from DEFAULT_CONFIG.

    Raises:
        FileNotFoundError: If the config file does not exist
        ValueError: If the file is not valid YAML, not a mapping, or holds
            an invalid value
    """
    import yaml

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    try:
        with open(config_path) as f:
            loaded = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid config file {config_path}: {e}") from e

    if not isinstance(loaded, dict):
        raise ValueError(f"Config file must contain a mapping: {config_path}")

    config = copy.deepcopy(DEFAULT_CONFIG)
    for section, values in loaded.items():
        if section in DEFAULT_CONFIG:
            if not isinstance(values, dict):
                raise ValueError(
                    f"Config section '{section}' must be a mapping: {config_path}"
                )
            config[section].update(values)
        else:
            config[section] = values

    _validate(config, config_path)
    return config


def _validate(config: Dict[str, Any], config_path: Path) -> None:
    chunk_size = config['defaults']['chunk_size']
    if isinstance(chunk_size, bool) or not isinstance(chunk_size, int) or chunk_size < 1:
        raise ValueError(
            f"defaults.chunk_size must be a positive integer, "
            f"got {chunk_size!r}: {config_path}"
        )


def create_default_config(output_path: Path) -> None:
    """Write DEFAULT_CONFIG to ``output_path`` as YAML."""
    atomic_write(Path(output_path), DEFAULT_CONFIG)
