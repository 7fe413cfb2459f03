"""
UI Module
=========

Display backends, input translation and the render loop.

Classes:
    BaseDisplay      - Scoped render target and event source
    TerminalDisplay  - curses backend (default)
    WindowDisplay    - pygame backend
    InputController  - Raw events to commands
    RenderScheduler  - Timed redraw and command dispatch
"""

from .base_display import BaseDisplay, DisplayError
from .input_controller import InputController, default_keymap
from .scheduler import Panels, RenderScheduler, SchedulerState, compute_screen_layout


def create_display(config) -> BaseDisplay:
    """
    Build the display backend named by ``config.BACKEND``.

    Backends are imported lazily so the terminal mode never initializes
    pygame, and the window mode never touches curses.
    """
    if config.BACKEND == 'terminal':
        from .terminal import TerminalDisplay
        return TerminalDisplay()
    if config.BACKEND == 'window':
        from .window import WindowDisplay
        return WindowDisplay(
            columns=config.WINDOW_COLUMNS,
            rows=config.WINDOW_ROWS,
            cell_width=config.WINDOW_CELL_WIDTH,
            cell_height=config.WINDOW_CELL_HEIGHT,
        )
    raise ValueError(f"Unknown display backend: {config.BACKEND}")


__all__ = [
    'BaseDisplay', 'DisplayError', 'create_display',
    'InputController', 'default_keymap',
    'Panels', 'RenderScheduler', 'SchedulerState', 'compute_screen_layout',
]
