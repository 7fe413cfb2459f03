"""
Input Events & Commands
=======================

Raw events are what a display backend's poll() yields. Commands are the
closed set the render loop acts on. InputController translates one into
the other.
"""

from dataclasses import dataclass
from typing import Tuple, Union


Position = Tuple[int, int]  # (column, row) in screen cells


# =============================================================================
# RAW EVENTS (backend -> InputController)
# =============================================================================

@dataclass(frozen=True)
class KeyEvent:
    """Normalized key name: single characters as-is, plus 'up', 'down',
    'left', 'right', 'escape', 'enter'."""
    key: str


@dataclass(frozen=True)
class PointerMove:
    position: Position
    button_held: bool = False


@dataclass(frozen=True)
class PointerButton:
    position: Position
    pressed: bool
    button: int = 1


@dataclass(frozen=True)
class ResizeEvent:
    size: Tuple[int, int]


RawEvent = Union[KeyEvent, PointerMove, PointerButton, ResizeEvent]


# =============================================================================
# COMMANDS (InputController -> RenderScheduler)
# =============================================================================

@dataclass(frozen=True)
class Quit:
    pass


@dataclass(frozen=True)
class PanUp:
    amount: float


@dataclass(frozen=True)
class PanDown:
    amount: float


@dataclass(frozen=True)
class PanLeft:
    amount: float


@dataclass(frozen=True)
class PanRight:
    amount: float


@dataclass(frozen=True)
class ZoomIn:
    pass


@dataclass(frozen=True)
class ZoomOut:
    pass


@dataclass(frozen=True)
class PointerDown:
    position: Position


@dataclass(frozen=True)
class PointerDrag:
    position: Position


@dataclass(frozen=True)
class PointerUp:
    position: Position


@dataclass(frozen=True)
class Reset:
    pass


@dataclass(frozen=True)
class Resize:
    """Forces a relayout on the next pass; carries no state of its own."""
    size: Tuple[int, int]


Command = Union[Quit, PanUp, PanDown, PanLeft, PanRight, ZoomIn, ZoomOut,
                PointerDown, PointerDrag, PointerUp, Reset, Resize]
