"""
View State & Coordinate Mapping
===============================

Pan/zoom state of the topology view plus the pure functions that move
points between screen space (cells relative to the panel origin) and world
space:

    world  = pan + screen / zoom
    screen = (world - pan) * zoom

Screen y grows downward, so panning "up" lowers pan.y.
"""

import math
from dataclasses import dataclass
from typing import Tuple

from .frame import Area, WorldBounds


Point = Tuple[float, float]

DEFAULT_ZOOM_FACTOR = 1.2


@dataclass
class ViewState:
    """
    Pan offset and zoom level.

    Invariant: ``zoom`` is finite and strictly positive. Any operation that
    would break it leaves the state untouched.
    """
    pan_x: float = 0.0
    pan_y: float = 0.0
    zoom: float = 1.0
    zoom_factor: float = DEFAULT_ZOOM_FACTOR

    def __post_init__(self):
        if not (math.isfinite(self.zoom) and self.zoom > 0):
            raise ValueError(f"zoom must be finite and positive, got {self.zoom}")
        if not (math.isfinite(self.zoom_factor) and self.zoom_factor > 1.0):
            raise ValueError(f"zoom_factor must be > 1, got {self.zoom_factor}")

    @property
    def pan(self) -> Point:
        return (self.pan_x, self.pan_y)

    def pan_by(self, dx: float, dy: float) -> None:
        """Move by a screen-space offset; the world distance shrinks as zoom grows."""
        new_x = self.pan_x + dx / self.zoom
        new_y = self.pan_y + dy / self.zoom
        if math.isfinite(new_x) and math.isfinite(new_y):
            self.pan_x = new_x
            self.pan_y = new_y

    def zoom_in(self) -> bool:
        return self._set_zoom(self.zoom * self.zoom_factor)

    def zoom_out(self) -> bool:
        return self._set_zoom(self.zoom / self.zoom_factor)

    def _set_zoom(self, value: float) -> bool:
        # Repeated zoom_out eventually underflows to 0.0
        if not (math.isfinite(value) and value > 0):
            return False
        self.zoom = value
        return True


def to_world(view: ViewState, screen: Point) -> Point:
    """Screen point (relative to the viewport origin) to world coordinates."""
    return (view.pan_x + screen[0] / view.zoom, view.pan_y + screen[1] / view.zoom)


def to_screen(view: ViewState, world: Point) -> Point:
    """World point to screen coordinates relative to the viewport origin."""
    return ((world[0] - view.pan_x) * view.zoom, (world[1] - view.pan_y) * view.zoom)


def world_bounds(view: ViewState, viewport: Tuple[float, float]) -> WorldBounds:
    """The world-space window visible through a ``(width, height)`` viewport."""
    width, height = viewport
    return WorldBounds(
        view.pan_x,
        view.pan_y,
        view.pan_x + width / view.zoom,
        view.pan_y + height / view.zoom,
    )


def project(bounds: WorldBounds, area: Area, world: Point) -> Point:
    """
    Map a world point into fractional screen cells of ``area``.

    Used by the display backends to place world-space primitives; the
    result may lie outside ``area`` and is clipped by the caller.
    """
    if bounds.width <= 0 or bounds.height <= 0:
        return (float(area.x), float(area.y))
    sx = area.x + (world[0] - bounds.x_min) * area.width / bounds.width
    sy = area.y + (world[1] - bounds.y_min) * area.height / bounds.height
    return (sx, sy)
