"""Utility modules for netview."""

from .logger import get_logger, setup_logging, shutdown_logging, LogLevel

__all__ = ['get_logger', 'setup_logging', 'shutdown_logging', 'LogLevel']
