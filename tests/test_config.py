"""
Tests for Config validation.

These tests verify that invalid configurations are caught early
rather than causing confusing failures inside the render loop or
the training thread.
"""

import pytest
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import torch

from config import Config


class TestConfigDefaults:
    """Defaults match the classifier and display geometry."""

    def test_valid_config_passes(self):
        cfg = Config()
        assert cfg is not None

    def test_input_size_matches_canvas(self):
        cfg = Config()
        assert cfg.INPUT_SIZE == cfg.CANVAS_SIZE * cfg.CANVAS_SIZE == 784

    def test_layers(self):
        cfg = Config()
        assert cfg.LAYERS == [784, 512, 10]

    def test_layers_follow_hidden_layers(self):
        cfg = Config()
        cfg.HIDDEN_LAYERS = [64, 32]
        assert cfg.LAYERS == [784, 64, 32, 10]

    def test_topology_demo_layers(self):
        assert Config().TOPOLOGY_LAYERS == [2, 7, 5, 2, 4, 1]

    def test_history_unbounded_by_default(self):
        assert Config().HISTORY_CAPACITY is None

    def test_force_cpu_device(self):
        cfg = Config()
        cfg.FORCE_CPU = True
        assert cfg.DEVICE == torch.device('cpu')

    def test_topology_layers_not_shared(self):
        """Mutable defaults must not leak between instances."""
        a, b = Config(), Config()
        a.TOPOLOGY_LAYERS.append(9)
        assert b.TOPOLOGY_LAYERS == [2, 7, 5, 2, 4, 1]


class TestConfigValidation:
    """Test Config.__post_init__ validation."""

    @pytest.mark.parametrize("field,value", [
        ('BACKEND', 'html'),
        ('REFRESH_INTERVAL_MS', 0),
        ('INPUT_POLL_TIMEOUT_MS', -1),
        ('MAX_EVENTS_PER_POLL', 0),
        ('ZOOM_FACTOR', 1.0),
        ('ZOOM_FACTOR', float('inf')),
        ('PAN_STEP', 0),
        ('CANVAS_SIZE', 0),
        ('TOPOLOGY_LAYERS', []),
        ('TOPOLOGY_LAYERS', [2, 0, 1]),
        ('TOPOLOGY_HEIGHT_RATIO', 1.0),
        ('HIDDEN_LAYERS', [0]),
        ('EPOCHS', -1),
        ('LEARNING_RATE', 0),
        ('MOMENTUM', 1.0),
        ('BATCH_SIZE', 0),
        ('LOSS_FUNCTION', 'hinge'),
        ('LOG_INTERVAL', 0),
        ('HISTORY_CAPACITY', 0),
    ])
    def test_invalid_value_fails(self, field, value):
        cfg = Config()
        setattr(cfg, field, value)
        with pytest.raises(AssertionError):
            cfg.__post_init__()

    def test_zero_epochs_allowed(self):
        """EPOCHS=0 means train until cancelled."""
        cfg = Config()
        cfg.EPOCHS = 0
        cfg.__post_init__()

    def test_window_backend_allowed(self):
        cfg = Config()
        cfg.BACKEND = 'window'
        cfg.__post_init__()
