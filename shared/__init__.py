"""
FORMCOACH Shared Module

Common utilities used across all services.
"""

from .utils import setup_logger, handle_exceptions

__all__ = [
    'setup_logger',
    'handle_exceptions',
]
