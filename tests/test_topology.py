"""
Tests for the topology layout and panel.
"""

import pytest

from netview.visualizer.frame import Area
from netview.visualizer.topology import LayerSpec, TopologyView, compute_layout
from netview.visualizer.view_state import ViewState


class TestLayerSpec:

    def test_of(self):
        assert LayerSpec.of([2, 3]).sizes == (2, 3)
        assert len(LayerSpec.of([2, 7, 5])) == 3

    @pytest.mark.parametrize("sizes", [[], [2, 0], [-1], [2.5], [True]])
    def test_invalid(self, sizes):
        with pytest.raises(ValueError):
            LayerSpec.of(sizes)

    def test_capped(self):
        assert LayerSpec.of([784, 512, 10]).capped(16).sizes == (16, 16, 10)


class TestComputeLayout:

    def test_two_layer_example(self):
        layout = compute_layout(LayerSpec.of([2, 3]), (40.0, 20.0))
        first = layout.nodes[0]
        assert (first.layer, first.index) == (0, 0)
        assert first.x == pytest.approx(40 / 3)
        assert first.y == pytest.approx(20 / 3)
        assert len(layout.outgoing(first)) == 3

    def test_deterministic(self):
        spec = LayerSpec.of([2, 7, 5, 2, 4, 1])
        assert compute_layout(spec, (80.0, 30.0)) == compute_layout(spec, (80.0, 30.0))

    def test_dense_edge_count(self):
        layout = compute_layout(LayerSpec.of([2, 7, 5, 2, 4, 1]), (80.0, 30.0))
        assert len(layout.nodes) == 21
        assert len(layout.edges) == 2 * 7 + 7 * 5 + 5 * 2 + 2 * 4 + 4 * 1

    def test_single_layer_has_no_edges(self):
        layout = compute_layout(LayerSpec.of([4]), (10.0, 10.0))
        assert len(layout.nodes) == 4
        assert layout.edges == ()

    def test_nodes_inside_viewport(self):
        layout = compute_layout(LayerSpec.of([3, 9, 1]), (50.0, 25.0))
        for node in layout.nodes:
            assert 0 < node.x < 50
            assert 0 < node.y < 25

    def test_layers_left_to_right(self):
        layout = compute_layout(LayerSpec.of([1, 1, 1]), (40.0, 10.0))
        xs = [layout.layer_x(i) for i in range(3)]
        assert xs == sorted(xs)
        assert xs == pytest.approx([10.0, 20.0, 30.0])


class TestTopologyView:

    def test_panel_contents(self):
        view = TopologyView(LayerSpec.of([2, 3]))
        panel = view.build(Area(0, 0, 42, 22), ViewState())
        assert panel.title == " Neural Network Topology "
        assert len(panel.segments) == 6
        assert len(panel.rects) == 5
        assert all(r.width == 2.0 and r.height == 2.0 for r in panel.rects)

    def test_node_rect_centered_on_node(self):
        view = TopologyView(LayerSpec.of([2, 3]))
        panel = view.build(Area(0, 0, 42, 22), ViewState())
        rect = panel.rects[0]
        assert rect.x == pytest.approx(40 / 3 - 1)
        assert rect.y == pytest.approx(20 / 3 - 1)

    def test_bounds_follow_view(self):
        view = TopologyView(LayerSpec.of([2, 3]))
        state = ViewState(pan_x=5.0, pan_y=-2.0, zoom=2.0)
        panel = view.build(Area(0, 0, 42, 22), state)
        assert panel.bounds.x_min == 5.0
        assert panel.bounds.y_min == -2.0
        assert panel.bounds.width == pytest.approx(20.0)
        assert panel.bounds.height == pytest.approx(10.0)

    def test_large_layers_capped_with_real_counts_labelled(self):
        view = TopologyView(LayerSpec.of([784, 512, 10]), max_nodes=16)
        panel = view.build(Area(0, 0, 80, 30), ViewState())
        assert len(panel.rects) == 16 + 16 + 10
        labels = [t.text for t in panel.texts]
        assert "IN(784)" in labels
        assert "H1(512)" in labels
        assert "OUT(10)" in labels

    def test_labels_hidden_when_panned_away(self):
        view = TopologyView(LayerSpec.of([2, 3]))
        panel = view.build(Area(0, 0, 42, 22), ViewState(pan_x=1000.0))
        assert panel.texts == []
