"""
Render Scheduler
================

The single interactive loop behind every entry point. Which panels it shows
is a parameter, not a separate loop:

    Panels.TOPOLOGY                     topology viewer
    Panels.CANVAS | Panels.PREDICTIONS  draw-a-digit
    Panels.ALL                          training monitor

Each pass:
    1. Poll input (blocks at most the poll timeout) and dispatch commands
    2. If the refresh interval has elapsed (or a resize is pending), compose
       a frame from ViewState, PixelCanvas and a progress snapshot, run the
       classifier on the canvas vector and hand the frame to the display

Quit moves RUNNING -> STOPPED. On the way out the training worker is
cancelled and joined before the display is released.
"""

import time
from dataclasses import dataclass
from enum import Enum, Flag, auto
from typing import Callable, List, Optional, Tuple

import numpy as np

from ..ai.progress import ProgressChannel
from ..utils.logger import get_logger
from ..visualizer.chart import ProgressChart, chart_width
from ..visualizer.frame import Area, Frame, Panel, TextBlock
from ..visualizer.pixel_canvas import CanvasGeometry, PixelCanvas
from ..visualizer.predictions import PredictionsView
from ..visualizer.topology import TopologyView
from ..visualizer.view_state import ViewState
from .base_display import BaseDisplay
from .events import (
    Command, PanDown, PanLeft, PanRight, PanUp, PointerDown, PointerDrag,
    PointerUp, Quit, Reset, Resize, ZoomIn, ZoomOut,
)
from .input_controller import InputController


logger = get_logger(__name__)


class Panels(Flag):
    NONE = 0
    TOPOLOGY = auto()
    CANVAS = auto()
    PREDICTIONS = auto()
    CHART = auto()
    ALL = TOPOLOGY | CANVAS | PREDICTIONS | CHART


class SchedulerState(Enum):
    RUNNING = auto()
    STOPPED = auto()


PREDICTIONS_WIDTH = 30
MIN_SIDE_WIDTH = 20
MIN_SIDE_HEIGHT = 8
TOO_SMALL_MESSAGE = "Terminal too small. Please resize."


@dataclass
class ScreenLayout:
    size: Tuple[int, int]
    too_small: bool = False
    topology: Optional[Area] = None
    chart: Optional[Area] = None
    canvas: Optional[CanvasGeometry] = None
    predictions: Optional[Area] = None


def compute_screen_layout(
    size: Tuple[int, int],
    panels: Panels,
    canvas_size: int = 28,
    cell_size: Tuple[int, int] = (2, 1),
    topology_ratio: float = 0.7,
) -> ScreenLayout:
    """
    Split the screen between the active panels.

    Canvas and predictions form a left block (canvas vertically centered,
    reset control underneath); topology and chart share the remaining
    width, stacked with ``topology_ratio`` of the height on top.
    """
    width, height = size
    layout = ScreenLayout(size)
    body = Area(1, 1, width - 2, height - 2)
    side = panels & (Panels.TOPOLOGY | Panels.CHART)

    need_w = 2
    need_h = 2 + MIN_SIDE_HEIGHT
    canvas_w = canvas_size * cell_size[0] + 2
    canvas_h = canvas_size * cell_size[1] + 2
    if Panels.CANVAS in panels:
        need_w += canvas_w + 4
        need_h = max(need_h, canvas_h + 4)
    if Panels.PREDICTIONS in panels:
        need_w += PREDICTIONS_WIDTH + 1
        need_h = max(need_h, 2 + 18)
    if side:
        need_w += MIN_SIDE_WIDTH
    if width < need_w or height < need_h:
        layout.too_small = True
        return layout

    left = body.x
    block_y, block_h = body.y, body.height
    if Panels.CANVAS in panels:
        # Two rows below the widget stay free for the reset control
        column = Area(left, body.y, canvas_w, body.height - 2)
        layout.canvas = CanvasGeometry.centered_in(column, canvas_size, cell_size)
        block_y, block_h = layout.canvas.origin[1], canvas_h
        left += canvas_w + 4

    if Panels.PREDICTIONS in panels:
        pred_w = PREDICTIONS_WIDTH if side else body.right - left
        layout.predictions = Area(left, block_y, pred_w, block_h)
        left += pred_w + 1

    if side:
        rest = Area(left, body.y, body.right - left, body.height)
        if Panels.TOPOLOGY in panels and Panels.CHART in panels:
            top_h = int(rest.height * topology_ratio)
            layout.topology = Area(rest.x, rest.y, rest.width, top_h)
            layout.chart = Area(rest.x, rest.y + top_h, rest.width, rest.height - top_h)
        elif Panels.TOPOLOGY in panels:
            layout.topology = rest
        else:
            layout.chart = rest
    return layout


class RenderScheduler:
    """
    Timed redraw, input dispatch and orderly shutdown.

    Example:
        >>> scheduler = RenderScheduler(display, controller, Panels.TOPOLOGY,
        ...                             topology=TopologyView(LayerSpec.of([2, 3])))
        >>> scheduler.run()
    """

    def __init__(
        self,
        display: BaseDisplay,
        input_controller: InputController,
        panels: Panels,
        view: Optional[ViewState] = None,
        canvas: Optional[PixelCanvas] = None,
        topology: Optional[TopologyView] = None,
        channel: Optional[ProgressChannel] = None,
        model=None,
        worker=None,
        refresh_interval: float = 0.1,
        cell_size: Tuple[int, int] = (2, 1),
        topology_ratio: float = 0.7,
        worker_join_timeout: float = 5.0,
        clock: Callable[[], float] = time.monotonic
    ):
        """
        Args:
            display: Render backend, entered for the duration of run()
            input_controller: Command source
            panels: Active panel set
            view: Pan/zoom state (default: origin, zoom 1.0)
            canvas: Drawing grid (created if CANVAS is active)
            topology: Topology panel builder (required for TOPOLOGY)
            channel: Progress channel (required for CHART)
            model: Object with run(vector) -> scores, used for PREDICTIONS
            worker: Object with start()/stop()/join(timeout), started by run()
            refresh_interval: Seconds between frames
        """
        if panels == Panels.NONE:
            raise ValueError("at least one panel must be active")
        if Panels.TOPOLOGY in panels and topology is None:
            raise ValueError("TOPOLOGY panel needs a TopologyView")
        if Panels.CHART in panels and channel is None:
            raise ValueError("CHART panel needs a ProgressChannel")

        self.display = display
        self.input = input_controller
        self.panels = panels
        self.view = view or ViewState()
        self.canvas = canvas or PixelCanvas()
        self.topology = topology
        self.channel = channel
        self.model = model
        self.worker = worker
        self.refresh_interval = refresh_interval
        self.cell_size = cell_size
        self.topology_ratio = topology_ratio
        self.worker_join_timeout = worker_join_timeout
        self.clock = clock

        self.chart = ProgressChart()
        self.predictions = PredictionsView()

        self.state = SchedulerState.RUNNING
        self.frames_rendered = 0
        self._last_frame: Optional[float] = None
        self._layout: Optional[ScreenLayout] = None
        self._relayout_pending = False

    # =========================================================================
    # LOOP
    # =========================================================================

    def run(self) -> None:
        """Enter the display, loop until Quit, then shut down in order."""
        with self.display:
            try:
                if self.worker is not None:
                    self.worker.start()
                while self.state is SchedulerState.RUNNING:
                    self.tick()
            except KeyboardInterrupt:
                logger.info("Interrupted, shutting down")
            finally:
                self.state = SchedulerState.STOPPED
                self._stop_worker()
        logger.info(f"Render loop stopped after {self.frames_rendered} frames")

    def tick(self) -> None:
        """One loop pass: poll input, dispatch, maybe render."""
        for command in self.input.poll():
            self.dispatch(command)
            if self.state is SchedulerState.STOPPED:
                return

        now = self.clock()
        due = self._last_frame is None or now - self._last_frame >= self.refresh_interval
        if due or self._relayout_pending:
            self._last_frame = now
            self.render()

    def render(self) -> None:
        frame = self.compose(self.display.size())
        self.display.draw(frame)
        self.frames_rendered += 1

    def _stop_worker(self) -> None:
        if self.worker is None:
            return
        self.worker.stop()
        if not self.worker.join(self.worker_join_timeout):
            logger.warning(f"Training thread still running after {self.worker_join_timeout}s")

    # =========================================================================
    # COMMANDS
    # =========================================================================

    def dispatch(self, command: Command) -> None:
        if isinstance(command, Quit):
            self.state = SchedulerState.STOPPED
            if self.worker is not None:
                self.worker.stop()
        elif isinstance(command, PanUp):
            self.view.pan_by(0.0, -command.amount)
        elif isinstance(command, PanDown):
            self.view.pan_by(0.0, command.amount)
        elif isinstance(command, PanLeft):
            self.view.pan_by(-command.amount, 0.0)
        elif isinstance(command, PanRight):
            self.view.pan_by(command.amount, 0.0)
        elif isinstance(command, ZoomIn):
            self.view.zoom_in()
        elif isinstance(command, ZoomOut):
            self.view.zoom_out()
        elif isinstance(command, PointerDown):
            self._pointer_down(command.position)
        elif isinstance(command, PointerDrag):
            geometry = self._canvas_geometry()
            cell = geometry.hit_test(command.position) if geometry else None
            if cell is not None:
                self.canvas.on_pointer_drag(cell)
        elif isinstance(command, PointerUp):
            self.canvas.on_pointer_up()
        elif isinstance(command, Reset):
            self.canvas.reset()
        elif isinstance(command, Resize):
            self._layout = None
            self._relayout_pending = True

    def _pointer_down(self, position: Tuple[int, int]) -> None:
        geometry = self._canvas_geometry()
        if geometry is None:
            return
        if geometry.reset_area.contains(*position):
            self.canvas.reset()
            return
        cell = geometry.hit_test(position)
        if cell is not None:
            self.canvas.on_pointer_down(cell)

    def _canvas_geometry(self) -> Optional[CanvasGeometry]:
        if Panels.CANVAS not in self.panels:
            return None
        if self._layout is None:
            self._layout = self.layout(self.display.size())
        return self._layout.canvas

    # =========================================================================
    # FRAME COMPOSITION
    # =========================================================================

    def layout(self, size: Tuple[int, int]) -> ScreenLayout:
        return compute_screen_layout(
            size, self.panels, self.canvas.size, self.cell_size, self.topology_ratio
        )

    def compose(self, size: Tuple[int, int]) -> Frame:
        layout = self.layout(size)
        self._layout = layout
        self._relayout_pending = False

        if layout.too_small:
            warning = Panel(area=Area(0, 0, size[0], size[1]), border=False)
            warning.texts.append(TextBlock(0, 0, TOO_SMALL_MESSAGE[:max(0, size[0])], 'red'))
            return Frame(size, [warning])

        panels: List[Panel] = []
        if layout.topology is not None:
            panels.append(self.topology.build(layout.topology, self.view))
        if layout.chart is not None:
            snapshot = self.channel.snapshot(chart_width(layout.chart))
            panels.append(self.chart.build(layout.chart, snapshot))
        if layout.canvas is not None:
            panels.append(self.canvas.build(layout.canvas))
        if layout.predictions is not None:
            panels.append(self.predictions.build(layout.predictions, self.infer()))
        return Frame(size, panels)

    def infer(self) -> Optional[np.ndarray]:
        """Classifier scores for the current canvas, or None without a model."""
        if self.model is None:
            return None
        return self.model.run(self.canvas.to_vector())
