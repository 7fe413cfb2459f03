"""
Input Controller
================

One blocking poll per loop pass (bounded by the poll timeout), then a
non-blocking drain of whatever is already queued, translated into
commands. Unknown keys and non-primary buttons are dropped.
"""

from typing import Callable, Dict, List, Optional

from .events import (
    Command, KeyEvent, PanDown, PanLeft, PanRight, PanUp, PointerButton,
    PointerDown, PointerDrag, PointerMove, PointerUp, Quit, RawEvent, Reset,
    Resize, ResizeEvent, ZoomIn, ZoomOut,
)


PollFn = Callable[[float], Optional[RawEvent]]


def default_keymap(pan_step: float) -> Dict[str, Command]:
    return {
        'q': Quit(),
        'Q': Quit(),
        'escape': Quit(),
        'close': Quit(),
        'up': PanUp(pan_step),
        'down': PanDown(pan_step),
        'left': PanLeft(pan_step),
        'right': PanRight(pan_step),
        '+': ZoomIn(),
        '=': ZoomIn(),
        '-': ZoomOut(),
        '_': ZoomOut(),
        'r': Reset(),
        'R': Reset(),
    }


class InputController:
    """
    Maps raw events from ``poll`` to commands.

    Args:
        poll: ``poll(timeout_seconds) -> RawEvent | None``
        timeout: Seconds the first poll of each pass may block
        max_events: Cap on events handled per pass
        pan_step: Screen distance of one arrow-key pan
        keymap: Override the key bindings
    """

    def __init__(
        self,
        poll: PollFn,
        timeout: float = 0.05,
        max_events: int = 64,
        pan_step: float = 10.0,
        keymap: Optional[Dict[str, Command]] = None
    ):
        self._poll = poll
        self.timeout = timeout
        self.max_events = max_events
        self.keymap = keymap if keymap is not None else default_keymap(pan_step)

    def poll(self) -> List[Command]:
        """Commands available now, waiting at most ``timeout`` for the first one."""
        commands: List[Command] = []
        event = self._poll(self.timeout)
        handled = 0
        while event is not None and handled < self.max_events:
            handled += 1
            command = self.translate(event)
            if command is not None:
                commands.append(command)
            if handled < self.max_events:
                event = self._poll(0.0)
        return commands

    def translate(self, event: RawEvent) -> Optional[Command]:
        if isinstance(event, KeyEvent):
            return self.keymap.get(event.key)
        if isinstance(event, PointerButton):
            if event.button != 1:
                return None
            return PointerDown(event.position) if event.pressed else PointerUp(event.position)
        if isinstance(event, PointerMove):
            return PointerDrag(event.position) if event.button_held else None
        if isinstance(event, ResizeEvent):
            return Resize(event.size)
        return None
