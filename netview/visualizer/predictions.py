"""
Predictions Panel
=================

Softmax over the classifier output for the current canvas: the most likely
digit in large emphasis, then every class with its percentage.
"""

from typing import Optional, Sequence

import numpy as np

from .frame import Area, Panel, TextBlock


def softmax(outputs: Sequence[float]) -> Optional[np.ndarray]:
    """Numerically stable softmax; None when the outputs are not all finite."""
    values = np.asarray(outputs, dtype=np.float64)
    if values.size == 0 or not np.all(np.isfinite(values)):
        return None
    exps = np.exp(values - values.max())
    return exps / exps.sum()


class PredictionsView:
    def __init__(self, title: str = " Predictions "):
        self.title = title
        self.best_color = 'green'
        self.text_color = 'white'
        self.dim_color = 'gray'

    def build(self, area: Area, outputs: Optional[Sequence[float]]) -> Panel:
        panel = Panel(area=area, title=self.title)
        inner = area.inner()
        if inner.is_empty:
            return panel

        probs = softmax(outputs) if outputs is not None else None
        if probs is None:
            lines = [("No prediction available", self.dim_color)]
        else:
            best = int(np.argmax(probs))
            lines = [
                ("Most likely digit:", self.text_color),
                ("", self.text_color),
                (f"   {best} ({probs[best] * 100:.1f}%)", self.best_color),
                ("", self.text_color),
                ("All predictions:", self.text_color),
                ("", self.text_color),
            ]
            for i, p in enumerate(probs):
                color = self.best_color if i == best else self.dim_color
                lines.append((f"  {i}: {p * 100:>5.1f}%", color))

        for row, (text, color) in enumerate(lines[:inner.height]):
            if text:
                panel.texts.append(TextBlock(inner.x, inner.y + row, text[:inner.width], color, width=inner.width))
        return panel
