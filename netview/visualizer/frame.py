"""
Frame Description
=================

The geometric vocabulary shared by the panel builders and the display
backends. A frame is a list of panels; each panel owns a screen area (in
character cells) and a set of filled rectangles, line segments and text
blocks.

Coordinates:
    - Panels with ``bounds`` set carry world-space rectangles and segments.
      The backend maps ``bounds`` onto the panel interior and clips to it.
    - Panels without ``bounds`` carry absolute screen-cell coordinates.
    - Text blocks are always placed in absolute screen cells.
"""

from dataclasses import dataclass, field
from typing import List, NamedTuple, Optional, Tuple


class Area(NamedTuple):
    """Axis-aligned rectangle in screen cells."""
    x: int
    y: int
    width: int
    height: int

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height

    def inner(self) -> 'Area':
        """The area left inside a one-cell border."""
        return Area(self.x + 1, self.y + 1, max(0, self.width - 2), max(0, self.height - 2))

    def contains(self, x: float, y: float) -> bool:
        return self.x <= x < self.right and self.y <= y < self.bottom

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0


class WorldBounds(NamedTuple):
    """Visible window of world space, ``(x_min, y_min)`` to ``(x_max, y_max)``."""
    x_min: float
    y_min: float
    x_max: float
    y_max: float

    @property
    def width(self) -> float:
        return self.x_max - self.x_min

    @property
    def height(self) -> float:
        return self.y_max - self.y_min


@dataclass(frozen=True)
class FilledRect:
    x: float
    y: float
    width: float
    height: float
    color: str = 'white'


@dataclass(frozen=True)
class Segment:
    x1: float
    y1: float
    x2: float
    y2: float
    color: str = 'blue'


@dataclass(frozen=True)
class TextBlock:
    """A single line of text; ``width`` bounds it (None = up to the panel edge)."""
    x: int
    y: int
    text: str
    color: str = 'white'
    background: Optional[str] = None
    width: Optional[int] = None


@dataclass
class Panel:
    area: Area
    title: Optional[str] = None
    title_color: str = 'cyan'
    border: bool = True
    bounds: Optional[WorldBounds] = None
    rects: List[FilledRect] = field(default_factory=list)
    segments: List[Segment] = field(default_factory=list)
    texts: List[TextBlock] = field(default_factory=list)


@dataclass
class Frame:
    size: Tuple[int, int]
    panels: List[Panel] = field(default_factory=list)

    def panel(self, title: str) -> Optional[Panel]:
        """First panel whose title contains ``title``."""
        for panel in self.panels:
            if panel.title and title in panel.title:
                return panel
        return None
