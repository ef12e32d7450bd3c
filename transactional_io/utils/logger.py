"""Logging setup for the transactional-io command line."""

import logging
import sys
from pathlib import Path
from typing import Optional, Union


DEFAULT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def _resolve_level(level: Union[int, str]) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {level}")
    return resolved


def setup_logger(
    name: str = 'transactional_io',
    log_file: Optional[Path] = None,
    level: Union[int, str] = logging.INFO,
    format_string: Optional[str] = None
) -> logging.Logger:
    """
    Route transaction logs to stderr and, optionally, a log file.

    Calling it again replaces the handlers installed by the previous call,
    so each CLI invocation starts from its own config.

    Args:
        name: Logger name; the package logger covers every module logger
        log_file: Optional file that also receives the records
        level: Logging level (number or name such as "DEBUG")
        format_string: Custom format string

    Returns:
        Configured logger instance

    Raises:
        ValueError: If the level name is unknown
    """
    level = _resolve_level(level)
    formatter = logging.Formatter(format_string or DEFAULT_FORMAT)

    logger = logging.getLogger(name)
    logger.setLevel(level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    handlers = [logging.StreamHandler(sys.stderr)]
    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger
