"""
Pixel Canvas
============

An N x N drawing grid painted with pointer drags. The grid is flattened
row-major into a 1.0/0.0 vector on every frame and fed to the classifier.

Screen geometry (terminal cells):

    +--- Draw a number! ---+     border is one cell wide
    |##  ##                |     each grid cell is cell_w x cell_h
    |                      |
    +----------------------+
                   [Reset]       7x1 control below the right edge
"""

import math
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from .frame import Area, FilledRect, Panel, TextBlock


Cell = Tuple[int, int]  # (column, row)

RESET_LABEL = " Reset "


def hit_test(
    screen: Tuple[float, float],
    canvas_origin: Tuple[int, int],
    cell_size: Tuple[int, int],
    size: int,
) -> Optional[Cell]:
    """
    Map a screen point to the grid cell under it.

    The origin is the top-left corner of the bordered widget, so the
    one-cell border is skipped before dividing by the cell size.

    Returns:
        ``(column, row)`` or None when the point is outside the grid
    """
    rel_x = math.floor(screen[0]) - (canvas_origin[0] + 1)
    rel_y = math.floor(screen[1]) - (canvas_origin[1] + 1)
    if rel_x < 0 or rel_y < 0:
        return None
    col = rel_x // cell_size[0]
    row = rel_y // cell_size[1]
    if col >= size or row >= size:
        return None
    return (col, row)


@dataclass(frozen=True)
class CanvasGeometry:
    """Where the canvas widget and its reset control sit on screen."""
    origin: Tuple[int, int]
    cell_size: Tuple[int, int]
    size: int

    @property
    def widget_width(self) -> int:
        return self.size * self.cell_size[0] + 2

    @property
    def widget_height(self) -> int:
        return self.size * self.cell_size[1] + 2

    @property
    def area(self) -> Area:
        return Area(self.origin[0], self.origin[1], self.widget_width, self.widget_height)

    @property
    def reset_area(self) -> Area:
        area = self.area
        return Area(area.right - 9, area.bottom + 1, len(RESET_LABEL), 1)

    def hit_test(self, screen: Tuple[float, float]) -> Optional[Cell]:
        return hit_test(screen, self.origin, self.cell_size, self.size)

    def cell_origin(self, cell: Cell) -> Tuple[int, int]:
        """Top-left screen cell of a grid cell."""
        return (
            self.origin[0] + 1 + cell[0] * self.cell_size[0],
            self.origin[1] + 1 + cell[1] * self.cell_size[1],
        )

    @classmethod
    def centered_in(cls, column: Area, size: int, cell_size: Tuple[int, int]) -> 'CanvasGeometry':
        """Left-aligned in ``column`` and vertically centered on it."""
        height = size * cell_size[1] + 2
        y = column.y + max(0, (column.height - height) // 2)
        return cls((column.x, y), cell_size, size)


class PixelCanvas:
    """
    Boolean drawing grid with a pointer-down latch.

    Owned by the render/input thread; the classifier only ever sees the
    copy returned by to_vector().

    Example:
        >>> canvas = PixelCanvas(28)
        >>> canvas.on_pointer_down((3, 4))
        >>> canvas.on_pointer_drag((4, 4))
        >>> canvas.on_pointer_up()
        >>> canvas.painted
        2
    """

    def __init__(self, size: int = 28):
        if size <= 0:
            raise ValueError(f"canvas size must be positive, got {size}")
        self.size = size
        self.bits = np.zeros((size, size), dtype=bool)
        self.drawing = False

    def _contains(self, cell: Cell) -> bool:
        return 0 <= cell[0] < self.size and 0 <= cell[1] < self.size

    def on_pointer_down(self, cell: Cell) -> None:
        if not self._contains(cell):
            return
        self.drawing = True
        self.bits[cell[1], cell[0]] = True

    def on_pointer_drag(self, cell: Cell) -> None:
        if self.drawing and self._contains(cell):
            self.bits[cell[1], cell[0]] = True

    def on_pointer_up(self) -> None:
        self.drawing = False

    def reset(self) -> None:
        self.bits[:] = False
        self.drawing = False

    def to_vector(self) -> np.ndarray:
        """Row-major 1.0/0.0 vector of length size * size."""
        return self.bits.astype(np.float64).ravel()

    @property
    def painted(self) -> int:
        return int(self.bits.sum())

    def build(self, geometry: CanvasGeometry, title: str = " Draw a number! ") -> Panel:
        """Panel with one white rectangle per painted cell and the reset control."""
        panel = Panel(area=geometry.area, title=title)
        cw, ch = geometry.cell_size
        rows, cols = np.nonzero(self.bits)
        for row, col in zip(rows.tolist(), cols.tolist()):
            x, y = geometry.cell_origin((col, row))
            panel.rects.append(FilledRect(x, y, cw, ch, 'white'))

        reset = geometry.reset_area
        panel.texts.append(TextBlock(reset.x, reset.y, RESET_LABEL, 'white', background='red'))
        return panel
