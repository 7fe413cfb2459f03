"""
Terminal Display (curses)
=========================

Draws frames into the terminal and reads keys and mouse events from it.

Entering the display puts the terminal into cbreak/no-echo mode, hides the
cursor and turns on mouse capture with button-event tracking, so drags
arrive as motion reports while a button is held. Leaving it undoes each of
those steps even if some of them fail.
"""

import curses
import locale
import math
import os
import sys
from collections import deque
from typing import Deque, Dict, Iterator, List, Optional, Tuple

from ..utils.logger import log_display_event
from ..visualizer.frame import Area, Frame, Panel
from ..visualizer.view_state import project
from .base_display import BaseDisplay
from .events import KeyEvent, PointerButton, PointerMove, RawEvent, ResizeEvent


# xterm button-event mouse tracking: report motion while a button is held
MOUSE_DRAG_ON = '\033[?1002h'
MOUSE_DRAG_OFF = '\033[?1002l'

EDGE_CHAR = '·'
LINE_CHAR = '•'

COLOR_NAMES = {
    'black': curses.COLOR_BLACK,
    'red': curses.COLOR_RED,
    'green': curses.COLOR_GREEN,
    'yellow': curses.COLOR_YELLOW,
    'blue': curses.COLOR_BLUE,
    'magenta': curses.COLOR_MAGENTA,
    'cyan': curses.COLOR_CYAN,
    'white': curses.COLOR_WHITE,
    'gray': curses.COLOR_WHITE,
}

SPECIAL_KEYS = {
    curses.KEY_UP: 'up',
    curses.KEY_DOWN: 'down',
    curses.KEY_LEFT: 'left',
    curses.KEY_RIGHT: 'right',
    curses.KEY_ENTER: 'enter',
}


def rasterize_segment(x1: float, y1: float, x2: float, y2: float) -> Iterator[Tuple[int, int]]:
    """Cells along a segment between two fractional cell positions (Bresenham)."""
    cx, cy = math.floor(x1), math.floor(y1)
    ex, ey = math.floor(x2), math.floor(y2)
    dx, dy = abs(ex - cx), -abs(ey - cy)
    sx = 1 if cx < ex else -1
    sy = 1 if cy < ey else -1
    err = dx + dy
    while True:
        yield (cx, cy)
        if cx == ex and cy == ey:
            return
        e2 = 2 * err
        if e2 >= dy:
            err += dy
            cx += sx
        if e2 <= dx:
            err += dx
            cy += sy


def clip_segment(
    x1: float, y1: float, x2: float, y2: float, area: Area
) -> Optional[Tuple[float, float, float, float]]:
    """
    Liang-Barsky clip of a segment to ``area`` (in fractional cells).

    Keeps rasterization cost proportional to the visible part when the
    view is zoomed far into a long edge.
    """
    xmin, ymin = float(area.x), float(area.y)
    xmax, ymax = area.right - 1e-9, area.bottom - 1e-9
    dx, dy = x2 - x1, y2 - y1
    t0, t1 = 0.0, 1.0
    for p, q in ((-dx, x1 - xmin), (dx, xmax - x1), (-dy, y1 - ymin), (dy, ymax - y1)):
        if p == 0:
            if q < 0:
                return None
            continue
        t = q / p
        if p < 0:
            if t > t1:
                return None
            t0 = max(t0, t)
        else:
            if t < t0:
                return None
            t1 = min(t1, t)
    return (x1 + t0 * dx, y1 + t0 * dy, x1 + t1 * dx, y1 + t1 * dy)


def rect_cells(x: float, y: float, width: float, height: float, clip: Area) -> Iterator[Tuple[int, int]]:
    """Cells covered by a fractional rectangle, clipped to ``clip``."""
    x0 = max(math.floor(x), clip.x)
    y0 = max(math.floor(y), clip.y)
    x1 = min(max(math.ceil(x + width), math.floor(x) + 1), clip.right)
    y1 = min(max(math.ceil(y + height), math.floor(y) + 1), clip.bottom)
    for cy in range(y0, y1):
        for cx in range(x0, x1):
            yield (cx, cy)


class TerminalDisplay(BaseDisplay):
    """
    curses render backend and input source.

    Example:
        >>> with TerminalDisplay() as display:
        ...     display.draw(frame)
    """

    def __init__(self, escape_delay_ms: int = 25):
        super().__init__()
        self.escape_delay_ms = escape_delay_ms
        self._screen = None
        self._mouse_tracking = False
        self._curses_started = False
        self._colors = False
        self._pairs: Dict[Tuple[int, int], int] = {}
        self._pending: Deque[RawEvent] = deque()
        self._button_down = False

    # =========================================================================
    # SCOPED ACQUISITION
    # =========================================================================

    def open(self) -> None:
        locale.setlocale(locale.LC_ALL, '')
        os.environ.setdefault('ESCDELAY', str(self.escape_delay_ms))

        self._screen = curses.initscr()
        self._curses_started = True
        curses.noecho()
        curses.cbreak()
        self._screen.keypad(True)
        try:
            curses.curs_set(0)
        except curses.error:
            pass  # Terminal cannot hide the cursor

        if curses.has_colors():
            curses.start_color()
            curses.use_default_colors()
            self._colors = True

        curses.mousemask(curses.ALL_MOUSE_EVENTS | curses.REPORT_MOUSE_POSITION)
        curses.mouseinterval(0)
        sys.stdout.write(MOUSE_DRAG_ON)
        sys.stdout.flush()
        self._mouse_tracking = True
        columns, rows = self.size()
        log_display_event("terminal", "open", cells=f"{columns}x{rows}", colors=self._colors)

    def close(self) -> None:
        """Undo every step open() got through; raise the first failure afterwards."""
        errors: List[Exception] = []

        if self._mouse_tracking:
            try:
                sys.stdout.write(MOUSE_DRAG_OFF)
                sys.stdout.flush()
            except OSError as e:
                errors.append(e)
            self._mouse_tracking = False

        if self._curses_started:
            if self._screen is not None:
                try:
                    self._screen.keypad(False)
                except curses.error as e:
                    errors.append(e)
            for step in (curses.nocbreak, curses.echo):
                try:
                    step()
                except curses.error as e:
                    errors.append(e)
            try:
                curses.curs_set(1)
            except curses.error:
                pass  # Same as in open()
            try:
                curses.endwin()
            except curses.error as e:
                errors.append(e)
            self._curses_started = False
            log_display_event("terminal", "close")

        self._screen = None
        self._pairs.clear()
        if errors:
            raise errors[0]

    # =========================================================================
    # INPUT
    # =========================================================================

    def size(self) -> Tuple[int, int]:
        rows, cols = self._screen.getmaxyx()
        return (cols, rows)

    def poll(self, timeout: float) -> Optional[RawEvent]:
        if self._pending:
            return self._pending.popleft()

        self._screen.timeout(max(0, int(timeout * 1000)))
        try:
            key = self._screen.get_wch()
        except curses.error:
            return None  # No input within the timeout

        if isinstance(key, str):
            if key == '\x1b':
                return KeyEvent('escape')
            if key in ('\n', '\r'):
                return KeyEvent('enter')
            return KeyEvent(key)
        if key == curses.KEY_RESIZE:
            curses.update_lines_cols()
            return ResizeEvent(self.size())
        if key == curses.KEY_MOUSE:
            return self._mouse_event()
        name = SPECIAL_KEYS.get(key)
        return KeyEvent(name) if name else None

    def _mouse_event(self) -> Optional[RawEvent]:
        try:
            _, x, y, _, bstate = curses.getmouse()
        except curses.error:
            return None  # Report outside the window or garbled
        position = (x, y)

        if bstate & curses.BUTTON1_PRESSED:
            self._button_down = True
            return PointerButton(position, pressed=True)
        if bstate & curses.BUTTON1_RELEASED:
            self._button_down = False
            return PointerButton(position, pressed=False)
        if bstate & curses.BUTTON1_CLICKED:
            # Press and release collapsed into one report
            self._pending.append(PointerButton(position, pressed=False))
            return PointerButton(position, pressed=True)
        if bstate & curses.REPORT_MOUSE_POSITION:
            return PointerMove(position, button_held=self._button_down)
        return None

    # =========================================================================
    # OUTPUT
    # =========================================================================

    def _attr(self, color: str, background: Optional[str] = None) -> int:
        attr = curses.A_DIM if color == 'gray' else curses.A_NORMAL
        if not self._colors:
            return attr | (curses.A_REVERSE if background else 0)
        fg = COLOR_NAMES.get(color, curses.COLOR_WHITE)
        bg = COLOR_NAMES.get(background, -1) if background else -1
        pair = self._pairs.get((fg, bg))
        if pair is None:
            if len(self._pairs) + 1 >= curses.COLOR_PAIRS:
                return attr
            pair = len(self._pairs) + 1
            curses.init_pair(pair, fg, bg)
            self._pairs[(fg, bg)] = pair
        return attr | curses.color_pair(pair)

    def _put(self, x: int, y: int, text: str, attr: int) -> None:
        try:
            self._screen.addstr(y, x, text, attr)
        except curses.error:
            pass  # Writing the bottom-right cell always "fails" after the write

    def draw(self, frame: Frame) -> None:
        self._screen.erase()
        cols, rows = self.size()
        screen = Area(0, 0, cols, rows)
        for panel in frame.panels:
            self._draw_panel(panel, screen)
        self._screen.noutrefresh()
        curses.doupdate()

    def _draw_panel(self, panel: Panel, screen: Area) -> None:
        if panel.border:
            self._draw_border(panel, screen)

        inner = panel.area.inner() if panel.border else panel.area
        clip = _intersect(inner, screen) if panel.bounds is not None else screen
        char = EDGE_CHAR if panel.bounds is not None else LINE_CHAR

        for seg in panel.segments:
            x1, y1, x2, y2 = seg.x1, seg.y1, seg.x2, seg.y2
            if panel.bounds is not None:
                x1, y1 = project(panel.bounds, inner, (x1, y1))
                x2, y2 = project(panel.bounds, inner, (x2, y2))
            clipped = clip_segment(x1, y1, x2, y2, clip)
            if clipped is None:
                continue
            attr = self._attr(seg.color)
            for cx, cy in rasterize_segment(*clipped):
                if clip.contains(cx, cy):
                    self._put(cx, cy, char, attr)

        for rect in panel.rects:
            x, y, w, h = rect.x, rect.y, rect.width, rect.height
            if panel.bounds is not None:
                x, y = project(panel.bounds, inner, (x, y))
                x2, y2 = project(panel.bounds, inner, (rect.x + w, rect.y + h))
                w, h = x2 - x, y2 - y
            attr = self._attr(rect.color, rect.color)
            for cx, cy in rect_cells(x, y, w, h, clip):
                self._put(cx, cy, ' ', attr | (0 if self._colors else curses.A_REVERSE))

        for text in panel.texts:
            if not screen.contains(text.x, text.y):
                continue
            limit = screen.right - text.x
            if text.width is not None:
                limit = min(limit, text.width)
            self._put(text.x, text.y, text.text[:limit], self._attr(text.color, text.background))

    def _draw_border(self, panel: Panel, screen: Area) -> None:
        area = _intersect(panel.area, screen)
        if area.width < 2 or area.height < 2:
            return
        scr = self._screen
        try:
            scr.hline(area.y, area.x + 1, curses.ACS_HLINE, area.width - 2)
            scr.hline(area.bottom - 1, area.x + 1, curses.ACS_HLINE, area.width - 2)
            scr.vline(area.y + 1, area.x, curses.ACS_VLINE, area.height - 2)
            scr.vline(area.y + 1, area.right - 1, curses.ACS_VLINE, area.height - 2)
            scr.addch(area.y, area.x, curses.ACS_ULCORNER)
            scr.addch(area.y, area.right - 1, curses.ACS_URCORNER)
            scr.addch(area.bottom - 1, area.x, curses.ACS_LLCORNER)
            scr.addch(area.bottom - 1, area.right - 1, curses.ACS_LRCORNER)
        except curses.error:
            pass  # Lower-right corner of the screen
        if panel.title:
            self._put(area.x + 1, area.y, panel.title[:max(0, area.width - 2)], self._attr(panel.title_color))


def _intersect(a: Area, b: Area) -> Area:
    x, y = max(a.x, b.x), max(a.y, b.y)
    return Area(x, y, max(0, min(a.right, b.right) - x), max(0, min(a.bottom, b.bottom) - y))
