"""
Progress Chart
==============

Streaming line chart of training error. One sample per column: the chart
shows the window of the last ``inner.width`` samples, so the line scrolls
left as training advances.

Non-finite errors (a diverging run) are skipped: they add no point and
break no scale, the line simply resumes at the next finite sample.
"""

import math
from typing import List, Optional, Tuple

from ..ai.progress import ProgressSnapshot, TrainingState
from .frame import Area, Panel, Segment, TextBlock


STATE_COLORS = {
    TrainingState.WAITING: 'gray',
    TrainingState.RUNNING: 'green',
    TrainingState.DONE: 'cyan',
    TrainingState.CANCELLED: 'yellow',
    TrainingState.FAILED: 'red',
}


def chart_width(area: Area) -> int:
    """Number of samples the chart in ``area`` can show."""
    return max(0, area.inner().width)


class ProgressChart:
    """
    Builds the training progress panel from a channel snapshot.

    The top inner row holds the status line, the rest is plot area.
    """

    def __init__(self, title: str = " Training Progress "):
        self.title = title
        self.line_color = 'red'
        self.text_color = 'white'
        self.dim_color = 'gray'

    def build(self, area: Area, snapshot: ProgressSnapshot) -> Panel:
        panel = Panel(area=area, title=self.title)
        inner = area.inner()
        if inner.is_empty:
            return panel

        panel.texts.append(self._status_line(inner, snapshot))

        plot = Area(inner.x, inner.y + 1, inner.width, inner.height - 1)
        if plot.is_empty:
            return panel

        scale = self._scale(snapshot)
        if scale is None:
            if not snapshot.samples:
                panel.texts.append(TextBlock(plot.x, plot.y, "Waiting for training progress...", self.dim_color))
            return panel

        lo, hi = scale
        panel.segments = self._segments(plot, snapshot, lo, hi)
        label_width = min(plot.width, 12)
        panel.texts.append(TextBlock(plot.right - label_width, plot.y, f"{hi:>{label_width}.4g}", self.dim_color, width=label_width))
        if plot.height > 1:
            panel.texts.append(TextBlock(plot.right - label_width, plot.bottom - 1, f"{lo:>{label_width}.4g}", self.dim_color, width=label_width))
        return panel

    def _status_line(self, inner: Area, snapshot: ProgressSnapshot) -> TextBlock:
        error = snapshot.last_finite_error
        error_text = f"{error:.6f}" if error is not None else "--"
        epoch_text = snapshot.last_iteration if snapshot.last_iteration is not None else "--"
        text = f"[{snapshot.state}] epoch {epoch_text}  error {error_text}  samples {snapshot.total}"
        color = STATE_COLORS.get(snapshot.state, self.text_color)
        return TextBlock(inner.x, inner.y, text[:inner.width], color, width=inner.width)

    @staticmethod
    def _scale(snapshot: ProgressSnapshot) -> Optional[Tuple[float, float]]:
        finite = [s.error for s in snapshot.samples if math.isfinite(s.error)]
        if not finite:
            return None
        lo, hi = min(finite), max(finite)
        if hi - lo < 1e-12:
            pad = abs(hi) * 0.1 or 1.0
            lo, hi = lo - pad, hi + pad
        return lo, hi

    def _segments(self, plot: Area, snapshot: ProgressSnapshot, lo: float, hi: float) -> List[Segment]:
        def row_of(error: float) -> float:
            frac = (error - lo) / (hi - lo)
            return plot.y + (1.0 - frac) * (plot.height - 1)

        points = [
            (plot.x + column, row_of(sample.error)) if math.isfinite(sample.error) else None
            for column, sample in enumerate(snapshot.samples)
        ]

        segments = []
        for a, b in zip(points, points[1:]):
            if a is not None and b is not None:
                segments.append(Segment(a[0], a[1], b[0], b[1], self.line_color))
        if len(points) == 1 and points[0] is not None:
            x, y = points[0]
            segments.append(Segment(x, y, x, y, self.line_color))
        return segments
