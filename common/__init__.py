"""Common utilities for the countdown service."""
from .config import configure_logger, get_config

__all__ = ['get_config', 'configure_logger']
