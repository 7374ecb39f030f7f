"""
layercache Utils Module

- logger: Logging setup and configuration
- rwlock: Reader/writer lock guarding the local cache regions

Usage:
    from layercache.utils import setup_logger, ReadWriteLock
"""

from .logger import setup_logger, parse_module_levels
from .rwlock import ReadWriteLock

__all__ = [
    'setup_logger',
    'parse_module_levels',
    'ReadWriteLock',
]
