"""
Network Topology View
=====================

Layered node-and-edge drawing of a network architecture.

compute_layout() is a pure function: for a fixed layer spec and viewport
it always yields the same node and edge coordinates, which keeps pan/zoom
redraws stable. Layer i of L sits at x = (i+1) * width/(L+1); node j of
n_i nodes sits at y = (j+1) * height/(n_i+1). Consecutive layers are
densely connected. Edges are emitted whether or not they are visible;
clipping is left to the display backend.
"""

from dataclasses import dataclass
from typing import List, Sequence, Tuple

from .frame import Area, FilledRect, Panel, Segment, TextBlock
from .view_state import ViewState, to_screen, world_bounds


NODE_SIZE = 2.0


@dataclass(frozen=True)
class LayerSpec:
    """Ordered node counts, one per layer."""
    sizes: Tuple[int, ...]

    def __post_init__(self):
        if not self.sizes:
            raise ValueError("a network needs at least one layer")
        for size in self.sizes:
            if isinstance(size, bool) or not isinstance(size, int) or size <= 0:
                raise ValueError(f"layer sizes must be positive integers, got {list(self.sizes)}")

    @classmethod
    def of(cls, sizes: Sequence[int]) -> 'LayerSpec':
        return cls(tuple(sizes))

    def capped(self, max_nodes: int) -> 'LayerSpec':
        """Same shape with every layer limited to ``max_nodes`` drawn nodes."""
        return LayerSpec(tuple(min(n, max_nodes) for n in self.sizes))

    def __len__(self) -> int:
        return len(self.sizes)

    def __iter__(self):
        return iter(self.sizes)


@dataclass(frozen=True)
class Node:
    layer: int
    index: int
    x: float
    y: float


@dataclass(frozen=True)
class Edge:
    source: Node
    target: Node


@dataclass(frozen=True)
class TopologyLayout:
    nodes: Tuple[Node, ...]
    edges: Tuple[Edge, ...]

    def layer_x(self, layer: int) -> float:
        for node in self.nodes:
            if node.layer == layer:
                return node.x
        raise IndexError(layer)

    def outgoing(self, node: Node) -> List[Edge]:
        return [edge for edge in self.edges if edge.source == node]


def compute_layout(layers: LayerSpec, viewport: Tuple[float, float]) -> TopologyLayout:
    """
    Place every node and edge of ``layers`` in a ``(width, height)`` viewport.

    Args:
        layers: Node count per layer
        viewport: World-space extent the graph is spread over

    Returns:
        Nodes in layer-major order and edges grouped by source node
    """
    width, height = viewport
    layer_spacing = width / (len(layers) + 1)

    columns: List[List[Node]] = []
    for i, count in enumerate(layers):
        node_spacing = height / (count + 1)
        x = (i + 1) * layer_spacing
        columns.append([Node(i, j, x, (j + 1) * node_spacing) for j in range(count)])

    edges = [
        Edge(source, target)
        for left, right in zip(columns, columns[1:])
        for source in left
        for target in right
    ]
    nodes = tuple(node for column in columns for node in column)
    return TopologyLayout(nodes, tuple(edges))


class TopologyView:
    """
    Builds the topology panel for the current view state.

    Large layers (the 784-input layer, say) are drawn with at most
    ``max_nodes`` nodes; the label under each column shows the real count.

    Example:
        >>> view = TopologyView(LayerSpec.of([784, 512, 10]), max_nodes=16)
        >>> panel = view.build(Area(0, 0, 80, 30), ViewState())
    """

    def __init__(self, layers: LayerSpec, max_nodes: int = 16, title: str = " Neural Network Topology "):
        self.layers = layers
        self.drawn_layers = layers.capped(max_nodes)
        self.title = title

        self.edge_color = 'blue'
        self.node_color = 'white'
        self.input_color = 'cyan'
        self.output_color = 'yellow'
        self.hidden_color = 'green'

    def build(self, area: Area, view: ViewState) -> Panel:
        inner = area.inner()
        viewport = (float(inner.width), float(inner.height))
        layout = compute_layout(self.drawn_layers, viewport)

        panel = Panel(area=area, title=self.title, bounds=world_bounds(view, viewport))
        panel.segments = [
            Segment(e.source.x, e.source.y, e.target.x, e.target.y, self.edge_color)
            for e in layout.edges
        ]
        half = NODE_SIZE / 2
        panel.rects = [
            FilledRect(n.x - half, n.y - half, NODE_SIZE, NODE_SIZE, self.node_color)
            for n in layout.nodes
        ]
        if not inner.is_empty:
            panel.texts = self._layer_labels(layout, inner, view)
        return panel

    def _layer_labels(self, layout: TopologyLayout, inner: Area, view: ViewState) -> List[TextBlock]:
        """Column labels (IN, H1.., OUT) with node counts on the bottom row."""
        labels = []
        last = len(self.layers) - 1
        for i, count in enumerate(self.layers):
            if i == 0 and last > 0:
                name, color = "IN", self.input_color
            elif i == last and last > 0:
                name, color = "OUT", self.output_color
            else:
                name, color = f"H{i}", self.hidden_color
            text = f"{name}({count})"

            sx, _ = to_screen(view, (layout.layer_x(i), 0.0))
            x = inner.x + int(round(sx)) - len(text) // 2
            if x < inner.x or x + len(text) > inner.right:
                continue
            labels.append(TextBlock(x, inner.bottom - 1, text, color))
        return labels
