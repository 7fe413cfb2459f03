"""
Visualizer Module
=================

Pure view state and panel builders. Nothing here draws: every builder
returns a Panel of rectangles, segments and text for a display backend.

Classes:
    ViewState       - Pan/zoom state of the topology view
    TopologyView    - Layered node-and-edge network drawing
    PixelCanvas     - Pointer-painted input grid
    ProgressChart   - Streaming training error chart
    PredictionsView - Softmax summary of the classifier output
"""

from .frame import Area, Frame, Panel, WorldBounds
from .view_state import ViewState
from .topology import LayerSpec, TopologyView, compute_layout
from .pixel_canvas import CanvasGeometry, PixelCanvas, hit_test
from .chart import ProgressChart
from .predictions import PredictionsView

__all__ = [
    'Area', 'Frame', 'Panel', 'WorldBounds',
    'ViewState', 'LayerSpec', 'TopologyView', 'compute_layout',
    'CanvasGeometry', 'PixelCanvas', 'hit_test',
    'ProgressChart', 'PredictionsView',
]
