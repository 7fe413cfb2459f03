"""
Centralized logging infrastructure for netview.

Usage:
    from netview.utils.logger import get_logger

    logger = get_logger(__name__)
    logger.info("Training started")
    logger.debug("Frame composed in 3ms")

Configuration:
    setup_logging() is called once by main.py. Interactive modes pass
    console_output=False so log lines never land on the terminal that
    the curses display owns; everything still goes to the log file.
"""

import logging
import sys
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Dict, Optional


ROOT_LOGGER_NAME = 'netview'

CONSOLE_FORMAT = '%(asctime)s | %(levelname)-8s | %(name)s | %(message)s'
FILE_FORMAT = '%(asctime)s | %(levelname)-8s | %(threadName)s | %(name)s | %(message)s'


class LogLevel(Enum):
    """Log levels for configuration."""
    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR


_initialized = False
_file_handler: Optional[logging.FileHandler] = None


class ColoredFormatter(logging.Formatter):
    """Tints the level name on a TTY stderr; plain text everywhere else."""

    RESET = '\033[0m'
    LEVEL_COLORS: Dict[int, str] = {
        logging.DEBUG: '\033[36m',
        logging.INFO: '\033[32m',
        logging.WARNING: '\033[33m',
        logging.ERROR: '\033[31m',
        logging.CRITICAL: '\033[35m',
    }

    def __init__(self, fmt: str, stream=None):
        super().__init__(fmt)
        stream = stream if stream is not None else sys.stderr
        self.enabled = hasattr(stream, 'isatty') and stream.isatty()

    def format(self, record: logging.LogRecord) -> str:
        if not self.enabled:
            return super().format(record)
        # Copy so the file handler still sees the bare level name
        tinted = logging.makeLogRecord(record.__dict__)
        color = self.LEVEL_COLORS.get(record.levelno, '')
        tinted.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(tinted)


def _make_console_handler(level: LogLevel) -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level.value)
    handler.setFormatter(ColoredFormatter(CONSOLE_FORMAT, sys.stderr))
    return handler


def _make_file_handler(log_dir: str, log_filename: Optional[str]) -> logging.FileHandler:
    directory = Path(log_dir)
    directory.mkdir(parents=True, exist_ok=True)
    if log_filename is None:
        log_filename = f"netview_{datetime.now():%Y%m%d_%H%M%S}.log"

    handler = logging.FileHandler(directory / log_filename, mode='a', encoding='utf-8')
    handler.setLevel(logging.DEBUG)  # file keeps everything, worker thread included
    handler.setFormatter(logging.Formatter(FILE_FORMAT))
    return handler


def setup_logging(
    log_dir: str = 'logs',
    level: LogLevel = LogLevel.INFO,
    console_output: bool = True,
    file_output: bool = True,
    log_filename: Optional[str] = None,
) -> None:
    """
    Initialize the logging system. Later calls are ignored until
    shutdown_logging() runs.

    Args:
        log_dir: Directory for log files
        level: Minimum log level to capture
        console_output: Whether to write to stderr
        file_output: Whether to write to a log file
        log_filename: Custom log filename (default: netview_YYYYMMDD_HHMMSS.log)
    """
    global _initialized, _file_handler

    if _initialized:
        return

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(level.value)
    root_logger.handlers.clear()
    root_logger.propagate = False

    if console_output:
        root_logger.addHandler(_make_console_handler(level))
    if file_output:
        _file_handler = _make_file_handler(log_dir, log_filename)
        root_logger.addHandler(_file_handler)
    if not root_logger.handlers:
        root_logger.addHandler(logging.NullHandler())

    _initialized = True
    root_logger.info(f"Logging initialized (level={level.name}, file={file_output})")


def shutdown_logging() -> None:
    """Close all handlers so setup_logging() can run again."""
    global _initialized, _file_handler

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(root_logger.handlers):
        handler.close()
        root_logger.removeHandler(handler)

    _initialized = False
    _file_handler = None


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger under the 'netview' namespace.

    Never creates handlers, so importing a module (or running the test
    suite) leaves the filesystem alone.
    """
    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + '.'):
        return logging.getLogger(name)
    return logging.getLogger(f'{ROOT_LOGGER_NAME}.{name}')


def get_log_path() -> Optional[Path]:
    """Get the current log file path."""
    if _file_handler is not None:
        return Path(_file_handler.baseFilename)
    return None


def _fields(**context) -> str:
    return " | ".join(f"{k}={v}" for k, v in context.items() if v is not None)


def log_training_metrics(
    epoch: int,
    error: float,
    accuracy: Optional[float] = None,
    duration: Optional[float] = None,
) -> None:
    """
    One line per completed epoch.

    Args:
        epoch: Completed epoch number
        error: Mean loss over the epoch
        accuracy: Training accuracy (if computed)
        duration: Epoch wall time in seconds (if measured)
    """
    get_logger('training').info(_fields(
        epoch=epoch,
        error=f"{error:.6f}",
        acc=None if accuracy is None else f"{accuracy:.4f}",
        time=None if duration is None else f"{duration:.2f}s",
    ))


def log_model_event(event: str, path: str, **context) -> None:
    """Log a checkpoint save or load, e.g. ``SAVE | models/x.pth | epochs=3``."""
    line = " | ".join(part for part in (event.upper(), path, _fields(**context)) if part)
    get_logger('model').info(line)


def log_display_event(backend: str, event: str, **context) -> None:
    """Log a display backend opening or closing, with its cell size."""
    line = " | ".join(part for part in (backend, event.upper(), _fields(**context)) if part)
    get_logger('display').info(line)
