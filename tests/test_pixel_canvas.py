"""
Tests for the drawing canvas and its hit testing.
"""

import numpy as np
import pytest

from netview.visualizer.frame import Area
from netview.visualizer.pixel_canvas import CanvasGeometry, PixelCanvas, hit_test


@pytest.fixture
def geometry():
    return CanvasGeometry(origin=(10, 5), cell_size=(2, 1), size=28)


@pytest.fixture
def canvas():
    return PixelCanvas(28)


class TestHitTest:

    def test_every_drawn_point_maps_to_its_cell(self, geometry):
        for row in range(geometry.size):
            for col in range(geometry.size):
                x, y = geometry.cell_origin((col, row))
                for dx in range(geometry.cell_size[0]):
                    assert geometry.hit_test((x + dx, y)) == (col, row)

    def test_fractional_points(self, geometry):
        x, y = geometry.cell_origin((3, 4))
        assert geometry.hit_test((x + 1.9, y + 0.5)) == (3, 4)

    @pytest.mark.parametrize("point", [
        (10, 5),        # border corner
        (10, 10),       # left border
        (11, 5),        # top border
        (67, 10),       # right border
        (20, 34),       # bottom border
        (0, 0),
        (9.5, 10),
        (200, 200),
    ])
    def test_outside_points(self, geometry, point):
        assert geometry.hit_test(point) is None

    def test_first_and_last_cells(self):
        assert hit_test((11, 6), (10, 5), (2, 1), 28) == (0, 0)
        assert hit_test((66, 33), (10, 5), (2, 1), 28) == (27, 27)

    def test_widget_size(self, geometry):
        assert geometry.widget_width == 58
        assert geometry.widget_height == 30
        assert geometry.area == Area(10, 5, 58, 30)

    def test_reset_area_below_right_edge(self, geometry):
        assert geometry.reset_area == Area(10 + 58 - 9, 5 + 30 + 1, 7, 1)

    def test_centered_in(self):
        geometry = CanvasGeometry.centered_in(Area(1, 1, 58, 40), 28, (2, 1))
        assert geometry.origin == (1, 6)


class TestPixelCanvas:

    def test_starts_empty(self, canvas):
        assert canvas.painted == 0
        assert not canvas.drawing

    def test_press_drag_release(self, canvas):
        canvas.on_pointer_down((3, 4))
        canvas.on_pointer_drag((4, 4))
        canvas.on_pointer_drag((5, 4))
        canvas.on_pointer_up()
        assert canvas.painted == 3
        assert canvas.bits[4, 3] and canvas.bits[4, 5]

    def test_drag_without_press_is_ignored(self, canvas):
        canvas.on_pointer_drag((1, 1))
        assert canvas.painted == 0

    def test_drag_after_release_is_ignored(self, canvas):
        canvas.on_pointer_down((1, 1))
        canvas.on_pointer_up()
        canvas.on_pointer_drag((2, 2))
        assert canvas.painted == 1

    def test_out_of_range_cells_ignored(self, canvas):
        canvas.on_pointer_down((28, 0))
        canvas.on_pointer_down((-1, 3))
        assert canvas.painted == 0
        assert not canvas.drawing

    def test_reset_clears_everything(self, canvas):
        canvas.on_pointer_down((0, 0))
        for i in range(28):
            canvas.on_pointer_drag((i, i))
        canvas.reset()
        assert not canvas.bits.any()
        assert not canvas.drawing

    def test_vector_is_row_major(self, canvas):
        canvas.on_pointer_down((2, 1))
        vector = canvas.to_vector()
        assert vector.shape == (784,)
        assert vector.dtype == np.float64
        assert vector[1 * 28 + 2] == 1.0
        assert vector.sum() == 1.0

    def test_vector_is_a_copy(self, canvas):
        vector = canvas.to_vector()
        vector[0] = 1.0
        assert canvas.painted == 0

    def test_invalid_size(self):
        with pytest.raises(ValueError):
            PixelCanvas(0)


class TestCanvasPanel:

    def test_panel_has_one_rect_per_painted_cell(self, canvas, geometry):
        canvas.on_pointer_down((0, 0))
        canvas.on_pointer_drag((27, 27))
        panel = canvas.build(geometry)
        assert panel.title == " Draw a number! "
        assert len(panel.rects) == 2
        first = panel.rects[0]
        assert (first.x, first.y, first.width, first.height) == (11, 6, 2, 1)

    def test_reset_control_drawn(self, canvas, geometry):
        panel = canvas.build(geometry)
        reset = panel.texts[-1]
        assert reset.text == " Reset "
        assert reset.background == 'red'
        assert (reset.x, reset.y) == geometry.reset_area[:2]
