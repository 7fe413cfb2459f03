"""
Window Display (pygame)
=======================

Renders the same cell-based frames as the terminal backend into a pygame
window. Every screen cell maps to a fixed pixel block, so layouts, hit
tests and mouse positions stay in cell coordinates.

Useful where the terminal has no mouse support, or for a smoother view of
the topology edges (drawn as anti-aliased lines rather than dots).
"""

import os
from typing import Dict, Optional, Tuple

import pygame

from ..utils.logger import log_display_event
from ..visualizer.frame import Area, Frame, Panel
from ..visualizer.view_state import project
from .base_display import BaseDisplay
from .events import KeyEvent, PointerButton, PointerMove, RawEvent, ResizeEvent


BG_COLOR = (12, 12, 24)
BORDER_COLOR = (70, 85, 110)

PALETTE: Dict[str, Tuple[int, int, int]] = {
    'black': (12, 12, 24),
    'white': (220, 220, 230),
    'gray': (150, 150, 150),
    'red': (231, 76, 60),
    'green': (46, 204, 113),
    'yellow': (241, 196, 15),
    'blue': (52, 152, 219),
    'cyan': (100, 200, 255),
    'magenta': (155, 89, 182),
}

SPECIAL_KEYS = {
    pygame.K_UP: 'up',
    pygame.K_DOWN: 'down',
    pygame.K_LEFT: 'left',
    pygame.K_RIGHT: 'right',
    pygame.K_ESCAPE: 'escape',
    pygame.K_RETURN: 'enter',
}


def color_of(name: Optional[str]) -> Tuple[int, int, int]:
    return PALETTE.get(name or 'white', PALETTE['white'])


class WindowDisplay(BaseDisplay):
    """
    pygame render backend and input source.

    Args:
        columns: Initial window width in cells
        rows: Initial window height in cells
        cell_width: Pixel width of one cell
        cell_height: Pixel height of one cell
        caption: Window title
    """

    def __init__(
        self,
        columns: int = 120,
        rows: int = 40,
        cell_width: int = 10,
        cell_height: int = 18,
        caption: str = "netview"
    ):
        super().__init__()
        self.columns = columns
        self.rows = rows
        self.cell_width = cell_width
        self.cell_height = cell_height
        self.caption = caption

        self.screen: Optional[pygame.Surface] = None
        self._font: Optional[pygame.font.Font] = None
        self._started = False

    # =========================================================================
    # SCOPED ACQUISITION
    # =========================================================================

    def open(self) -> None:
        pygame.init()
        self._started = True
        pygame.display.set_caption(self.caption)
        self.screen = pygame.display.set_mode(
            (self.columns * self.cell_width, self.rows * self.cell_height),
            pygame.RESIZABLE
        )
        # Cache the font; creating one per frame is slow
        self._font = pygame.font.Font(None, int(self.cell_height * 1.2))
        log_display_event(
            "window", "open", cells=f"{self.columns}x{self.rows}",
            driver=os.environ.get('SDL_VIDEODRIVER', 'default')
        )

    def close(self) -> None:
        if self._started:
            pygame.quit()
            self._started = False
            log_display_event("window", "close")
        self.screen = None
        self._font = None

    # =========================================================================
    # INPUT
    # =========================================================================

    def size(self) -> Tuple[int, int]:
        width, height = self.screen.get_size()
        return (width // self.cell_width, height // self.cell_height)

    def _to_cell(self, pixel: Tuple[int, int]) -> Tuple[int, int]:
        return (pixel[0] // self.cell_width, pixel[1] // self.cell_height)

    def poll(self, timeout: float) -> Optional[RawEvent]:
        wait_ms = int(timeout * 1000)
        # wait(0) would block until the next event
        if wait_ms > 0:
            event = pygame.event.wait(wait_ms)
        else:
            event = pygame.event.poll()
        if event.type == pygame.NOEVENT:
            return None

        if event.type == pygame.QUIT:
            return KeyEvent('close')
        if event.type == pygame.VIDEORESIZE:
            self.screen = pygame.display.set_mode(
                (max(event.w, self.cell_width), max(event.h, self.cell_height)),
                pygame.RESIZABLE
            )
            return ResizeEvent(self.size())
        if event.type == pygame.KEYDOWN:
            name = SPECIAL_KEYS.get(event.key)
            if name:
                return KeyEvent(name)
            return KeyEvent(event.unicode) if event.unicode else None
        if event.type in (pygame.MOUSEBUTTONDOWN, pygame.MOUSEBUTTONUP):
            return PointerButton(
                self._to_cell(event.pos),
                pressed=event.type == pygame.MOUSEBUTTONDOWN,
                button=event.button
            )
        if event.type == pygame.MOUSEMOTION:
            return PointerMove(self._to_cell(event.pos), button_held=bool(event.buttons[0]))
        return None

    # =========================================================================
    # OUTPUT
    # =========================================================================

    def _pixels(self, area: Area) -> pygame.Rect:
        return pygame.Rect(
            area.x * self.cell_width, area.y * self.cell_height,
            area.width * self.cell_width, area.height * self.cell_height
        )

    def draw(self, frame: Frame) -> None:
        self.screen.fill(BG_COLOR)
        for panel in frame.panels:
            self._draw_panel(panel)
        pygame.display.flip()

    def _draw_panel(self, panel: Panel) -> None:
        cw, ch = self.cell_width, self.cell_height
        inner = panel.area.inner() if panel.border else panel.area

        if panel.border:
            outline = self._pixels(panel.area).inflate(-cw // 2, -ch // 2)
            pygame.draw.rect(self.screen, BORDER_COLOR, outline, 1, border_radius=4)

        if panel.bounds is not None:
            self.screen.set_clip(self._pixels(inner))

        def to_px(x: float, y: float) -> Tuple[float, float]:
            if panel.bounds is not None:
                x, y = project(panel.bounds, inner, (x, y))
            return (x * cw, y * ch)

        for seg in panel.segments:
            pygame.draw.aaline(self.screen, color_of(seg.color), to_px(seg.x1, seg.y1), to_px(seg.x2, seg.y2))

        for rect in panel.rects:
            x1, y1 = to_px(rect.x, rect.y)
            x2, y2 = to_px(rect.x + rect.width, rect.y + rect.height)
            box = pygame.Rect(int(x1), int(y1), max(1, int(x2 - x1)), max(1, int(y2 - y1)))
            pygame.draw.rect(self.screen, color_of(rect.color), box)

        self.screen.set_clip(None)

        if panel.border and panel.title:
            self._text(panel.area.x + 1, panel.area.y, panel.title, panel.title_color, 'black')
        for text in panel.texts:
            content = text.text if text.width is None else text.text[:text.width]
            self._text(text.x, text.y, content, text.color, text.background)

    def _text(self, x: int, y: int, content: str, color: str, background: Optional[str]) -> None:
        if not content:
            return
        bg = color_of(background) if background else None
        surface = self._font.render(content, True, color_of(color), bg)
        self.screen.blit(surface, (x * self.cell_width, y * self.cell_height))
