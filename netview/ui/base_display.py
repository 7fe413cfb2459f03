"""
Base Display Interface
======================

Abstract base class for render backends. A display is both the frame sink
and the input source, and it is a scoped resource: entering it switches
the terminal (or window) into interactive mode, leaving it restores the
previous state on every exit path.

    with TerminalDisplay() as display:
        display.draw(frame)
        event = display.poll(0.05)

To add a backend:
1. Inherit from BaseDisplay
2. Implement open(), close(), size(), draw() and poll()
3. Register it in netview.ui.create_display()
"""

from abc import ABC, abstractmethod
from typing import Optional, Tuple

from ..utils.logger import get_logger
from ..visualizer.frame import Frame
from .events import RawEvent


logger = get_logger(__name__)


class DisplayError(RuntimeError):
    """Interactive mode could not be entered or restored."""


class BaseDisplay(ABC):
    """
    Scoped render target and event source.

    Methods:
        open() -> None
            Acquire the display. If it raises, close() is called to undo
            any partial setup and the error surfaces as DisplayError.

        close() -> None
            Release the display. Must be safe to call after a partial open
            and more than once.

        size() -> (columns, rows)
        draw(frame) -> None
        poll(timeout) -> RawEvent | None
    """

    def __init__(self):
        self.is_open = False

    @abstractmethod
    def open(self) -> None:
        pass

    @abstractmethod
    def close(self) -> None:
        pass

    @abstractmethod
    def size(self) -> Tuple[int, int]:
        """Current size in character cells, (columns, rows)."""
        pass

    @abstractmethod
    def draw(self, frame: Frame) -> None:
        pass

    @abstractmethod
    def poll(self, timeout: float) -> Optional[RawEvent]:
        """Next input event, waiting at most ``timeout`` seconds."""
        pass

    def __enter__(self) -> 'BaseDisplay':
        try:
            self.open()
        except Exception as e:
            self._restore_after_failure()
            if isinstance(e, DisplayError):
                raise
            raise DisplayError(f"{type(self).__name__} could not start: {e}") from e
        self.is_open = True
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.is_open = False
        try:
            self.close()
        except Exception as e:
            # An error already propagating out of the with-block wins
            if exc_type is None:
                raise DisplayError(f"{type(self).__name__} could not restore the terminal: {e}") from e
            logger.error(f"Display teardown failed during error exit: {e}")

    def _restore_after_failure(self) -> None:
        try:
            self.close()
        except Exception as e:
            logger.error(f"Best-effort display restore failed: {e}")
