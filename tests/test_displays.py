"""
Tests for the display backends.

The curses backend is covered through its rasterization helpers (a real
terminal is not available under pytest); the pygame backend runs against
SDL's dummy video driver.
"""

import os

os.environ.setdefault('SDL_VIDEODRIVER', 'dummy')

import pygame
import pytest

from config import Config
from netview.ui import DisplayError, create_display
from netview.ui.events import KeyEvent, PointerButton, PointerMove, ResizeEvent
from netview.ui.terminal import TerminalDisplay, clip_segment, rasterize_segment, rect_cells
from netview.ui.window import WindowDisplay
from netview.visualizer.frame import Area, FilledRect, Frame, Panel, Segment, TextBlock, WorldBounds


class TestRasterization:

    def test_horizontal(self):
        assert list(rasterize_segment(0, 0, 3, 0)) == [(0, 0), (1, 0), (2, 0), (3, 0)]

    def test_diagonal(self):
        assert list(rasterize_segment(0, 0, 2, 2)) == [(0, 0), (1, 1), (2, 2)]

    def test_reverse_direction(self):
        assert list(rasterize_segment(3, 1, 0, 1)) == [(3, 1), (2, 1), (1, 1), (0, 1)]

    def test_single_point(self):
        assert list(rasterize_segment(4.7, 2.2, 4.1, 2.9)) == [(4, 2)]

    def test_steep_line_is_connected(self):
        cells = list(rasterize_segment(0, 0, 2, 9))
        for (x1, y1), (x2, y2) in zip(cells, cells[1:]):
            assert abs(x2 - x1) <= 1 and abs(y2 - y1) <= 1
        assert cells[-1] == (2, 9)


class TestClipping:

    def test_inside_unchanged(self):
        assert clip_segment(1, 1, 5, 5, Area(0, 0, 10, 10)) == (1, 1, 5, 5)

    def test_crossing_clipped(self):
        x1, y1, x2, y2 = clip_segment(-10, 5, 50, 5, Area(0, 0, 20, 10))
        assert x1 == pytest.approx(0.0)
        assert x2 == pytest.approx(20.0)
        assert y1 == y2 == 5

    def test_outside_rejected(self):
        assert clip_segment(-5, -5, -1, -1, Area(0, 0, 10, 10)) is None

    def test_rect_cells(self):
        cells = list(rect_cells(1.5, 2.0, 2.0, 1.0, Area(0, 0, 10, 10)))
        assert cells == [(1, 2), (2, 2), (3, 2)]

    def test_tiny_rect_covers_one_cell(self):
        assert list(rect_cells(4.2, 4.2, 0.1, 0.1, Area(0, 0, 10, 10))) == [(4, 4)]

    def test_rect_clipped(self):
        assert list(rect_cells(-5, -5, 2, 2, Area(0, 0, 10, 10))) == []


class TestTerminalDisplay:

    def test_close_without_open_is_noop(self):
        display = TerminalDisplay()
        display.close()
        display.close()


class TestCreateDisplay:

    def test_terminal_default(self):
        assert isinstance(create_display(Config()), TerminalDisplay)

    def test_window(self):
        cfg = Config()
        cfg.BACKEND = 'window'
        display = create_display(cfg)
        assert isinstance(display, WindowDisplay)
        assert (display.columns, display.rows) == (cfg.WINDOW_COLUMNS, cfg.WINDOW_ROWS)

    def test_unknown(self):
        cfg = Config()
        cfg.BACKEND = 'html'
        with pytest.raises(ValueError):
            create_display(cfg)


@pytest.fixture
def window():
    display = WindowDisplay(columns=80, rows=30, cell_width=8, cell_height=16)
    with display:
        pygame.event.clear()
        yield display


class TestWindowDisplay:

    def test_size_in_cells(self, window):
        assert window.size() == (80, 30)

    def test_timeout_returns_none(self, window):
        assert window.poll(0.0) is None

    def test_key_events(self, window):
        pygame.event.post(pygame.event.Event(pygame.KEYDOWN, key=pygame.K_UP, unicode=''))
        pygame.event.post(pygame.event.Event(pygame.KEYDOWN, key=pygame.K_EQUALS, unicode='+'))
        assert window.poll(0.0) == KeyEvent('up')
        assert window.poll(0.0) == KeyEvent('+')

    def test_close_button_quits(self, window):
        pygame.event.post(pygame.event.Event(pygame.QUIT))
        assert window.poll(0.0) == KeyEvent('close')

    def test_mouse_events_in_cells(self, window):
        pygame.event.post(pygame.event.Event(pygame.MOUSEBUTTONDOWN, pos=(17, 33), button=1))
        pygame.event.post(pygame.event.Event(pygame.MOUSEMOTION, pos=(25, 33), rel=(8, 0), buttons=(1, 0, 0)))
        pygame.event.post(pygame.event.Event(pygame.MOUSEBUTTONUP, pos=(25, 33), button=1))
        assert window.poll(0.0) == PointerButton((2, 2), pressed=True, button=1)
        assert window.poll(0.0) == PointerMove((3, 2), button_held=True)
        assert window.poll(0.0) == PointerButton((3, 2), pressed=False, button=1)

    def test_resize(self, window):
        pygame.event.post(pygame.event.Event(pygame.VIDEORESIZE, w=400, h=320, size=(400, 320)))
        assert window.poll(0.0) == ResizeEvent((50, 20))

    def test_draw_frame(self, window):
        panel = Panel(Area(0, 0, 40, 20), title=" Test ", bounds=WorldBounds(0, 0, 38, 18))
        panel.segments.append(Segment(1.0, 1.0, 30.0, 15.0))
        panel.rects.append(FilledRect(5.0, 5.0, 2.0, 2.0))
        panel.texts.append(TextBlock(2, 18, "label", 'cyan', background='red'))
        window.draw(Frame((80, 30), [panel]))

    def test_closed_after_exit(self):
        display = WindowDisplay(columns=10, rows=5)
        with display:
            assert display.is_open
        assert not display.is_open
        assert display.screen is None


class TestBaseDisplayFailure:

    def test_open_error_wrapped(self):
        class Broken(WindowDisplay):
            def open(self):
                super().open()
                raise OSError("boom")

        display = Broken(columns=10, rows=5)
        with pytest.raises(DisplayError):
            with display:
                pass
        assert display.screen is None
