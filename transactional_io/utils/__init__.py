"""Utility modules for transactional-io."""

from .atomic_write import atomic_write
from .logger import setup_logger

__all__ = [
    'atomic_write',
    'setup_logger',
]
