"""
Utility Module for the Invoice Import Subsystem.

This module provides common utilities used across all other modules:
    - Logging configuration
    - Exceptions
    - Common helpers
"""

from .logger import setup_logger, get_logger
from .helpers import ensure_directory, get_file_extension, generate_timestamp, new_identifier

__all__ = [
    'setup_logger',
    'get_logger',
    'ensure_directory',
    'get_file_extension',
    'generate_timestamp',
    'new_identifier'
]
