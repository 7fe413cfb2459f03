"""
Configuration file for netview
==============================

Display, navigation, canvas, network and training settings are centralized
here. Command line flags in main.py override individual fields.

Usage:
    from config import Config
    cfg = Config()
    print(cfg.REFRESH_INTERVAL_MS)
"""

from dataclasses import dataclass, field
from typing import List, Optional
import math
import torch


@dataclass
class Config:
    """
    Central configuration for the entire project.

    Sections:
    1. Display - Backend, frame rate and input polling
    2. Navigation - Pan/zoom behaviour of the topology view
    3. Canvas - Drawing grid geometry
    4. Topology - Demo graph and panel split
    5. Neural Network - Classifier architecture
    6. Training - Hyperparameters and progress reporting
    7. System - Hardware and paths
    """

    # =========================================================================
    # DISPLAY SETTINGS
    # =========================================================================

    # Render backend: 'terminal' (curses) or 'window' (pygame)
    BACKEND: str = 'terminal'

    # Minimum time between two frames
    REFRESH_INTERVAL_MS: int = 100

    # How long one input poll may block the render/input thread.
    # Shorter = snappier input, more CPU spent spinning.
    INPUT_POLL_TIMEOUT_MS: int = 50

    # Upper bound on queued events drained after the blocking poll
    MAX_EVENTS_PER_POLL: int = 64

    # Pixel size of one character cell in the pygame window backend
    WINDOW_CELL_WIDTH: int = 10
    WINDOW_CELL_HEIGHT: int = 18
    WINDOW_COLUMNS: int = 120
    WINDOW_ROWS: int = 40

    # =========================================================================
    # NAVIGATION
    # =========================================================================

    ZOOM_FACTOR: float = 1.2
    PAN_STEP: float = 10.0

    # =========================================================================
    # CANVAS SETTINGS
    # =========================================================================

    # The classifier expects CANVAS_SIZE * CANVAS_SIZE inputs (28x28 = 784)
    CANVAS_SIZE: int = 28

    # Terminal cells are roughly twice as tall as wide, so each grid cell
    # spans two columns and one row
    CANVAS_CELL_WIDTH: int = 2
    CANVAS_CELL_HEIGHT: int = 1

    # =========================================================================
    # TOPOLOGY
    # =========================================================================

    # Layers shown by the standalone topology viewer
    TOPOLOGY_LAYERS: List[int] = field(default_factory=lambda: [2, 7, 5, 2, 4, 1])

    # Share of the right-hand column given to the topology panel when the
    # progress chart is shown underneath it
    TOPOLOGY_HEIGHT_RATIO: float = 0.7

    # Large layers are drawn with at most this many nodes
    TOPOLOGY_MAX_NODES: int = 16

    # =========================================================================
    # NEURAL NETWORK ARCHITECTURE
    # =========================================================================

    OUTPUT_SIZE: int = 10

    HIDDEN_LAYERS: List[int] = field(default_factory=lambda: [512])

    # Activation function: 'relu', 'leaky_relu', 'tanh', 'sigmoid'
    ACTIVATION: str = 'leaky_relu'

    @property
    def INPUT_SIZE(self) -> int:
        """Input layer size: one input per canvas cell."""
        return self.CANVAS_SIZE * self.CANVAS_SIZE

    @property
    def LAYERS(self) -> List[int]:
        """Full layer specification of the classifier."""
        return [self.INPUT_SIZE] + list(self.HIDDEN_LAYERS) + [self.OUTPUT_SIZE]

    # =========================================================================
    # TRAINING HYPERPARAMETERS
    # =========================================================================

    # Number of passes over the training set (0 = until quit)
    EPOCHS: int = 50

    LEARNING_RATE: float = 0.002
    MOMENTUM: float = 0.9
    BATCH_SIZE: int = 32

    # Loss function: 'cross_entropy' or 'mse'
    LOSS_FUNCTION: str = 'cross_entropy'

    # Report progress every N epochs
    LOG_INTERVAL: int = 1

    # Maximum number of progress samples kept in memory.
    # None keeps the full history; only the chart window is limited.
    HISTORY_CAPACITY: Optional[int] = None

    # Seconds to wait for the training thread after quit
    WORKER_JOIN_TIMEOUT: float = 5.0

    # =========================================================================
    # SYSTEM SETTINGS
    # =========================================================================

    FORCE_CPU: bool = False

    @property
    def DEVICE(self) -> torch.device:
        """Auto-detect CUDA/MPS/CPU, or force CPU if configured."""
        if self.FORCE_CPU:
            return torch.device('cpu')
        if torch.cuda.is_available():
            return torch.device('cuda')
        elif hasattr(torch.backends, 'mps') and torch.backends.mps.is_available():
            return torch.device('mps')
        return torch.device('cpu')

    # Paths
    MODEL_DIR: str = 'models'
    MODEL_FILE: str = 'classifier.pth'
    LOG_DIR: str = 'logs'
    TRAIN_DATA: str = 'samples/train.csv'
    TEST_DATA: str = 'samples/test.csv'

    # Random seed for reproducibility (None for random)
    SEED: Optional[int] = None

    def __post_init__(self):
        """Validation."""
        assert self.BACKEND in ('terminal', 'window'), "Backend must be 'terminal' or 'window'"
        assert self.REFRESH_INTERVAL_MS > 0, "Refresh interval must be positive"
        assert self.INPUT_POLL_TIMEOUT_MS >= 0, "Poll timeout must be non-negative"
        assert self.MAX_EVENTS_PER_POLL > 0, "Must process at least one event per poll"
        assert math.isfinite(self.ZOOM_FACTOR) and self.ZOOM_FACTOR > 1.0, "Zoom factor must be > 1"
        assert self.PAN_STEP > 0, "Pan step must be positive"
        assert self.CANVAS_SIZE > 0, "Canvas size must be positive"
        assert self.CANVAS_CELL_WIDTH > 0 and self.CANVAS_CELL_HEIGHT > 0, "Canvas cells must be positive"
        assert self.TOPOLOGY_LAYERS and all(n > 0 for n in self.TOPOLOGY_LAYERS), "Topology layers must be positive"
        assert 0 < self.TOPOLOGY_HEIGHT_RATIO < 1, "Topology height ratio must be in (0, 1)"
        assert self.HIDDEN_LAYERS and all(n > 0 for n in self.HIDDEN_LAYERS), "Hidden layers must be positive"
        assert self.EPOCHS >= 0, "Epochs must be non-negative"
        assert self.LEARNING_RATE > 0, "Learning rate must be positive"
        assert 0 <= self.MOMENTUM < 1, "Momentum must be in [0, 1)"
        assert self.BATCH_SIZE > 0, "Batch size must be positive"
        assert self.LOSS_FUNCTION in ('cross_entropy', 'mse'), "Unknown loss function"
        assert self.LOG_INTERVAL > 0, "Log interval must be positive"
        assert self.HISTORY_CAPACITY is None or self.HISTORY_CAPACITY > 0, "History capacity must be positive"


# Global config instance for easy importing
config = Config()


if __name__ == "__main__":
    cfg = Config()
    print("=" * 60)
    print("netview - Configuration Summary")
    print("=" * 60)
    print(f"\nDisplay: {cfg.BACKEND}, {cfg.REFRESH_INTERVAL_MS}ms refresh, "
          f"{cfg.INPUT_POLL_TIMEOUT_MS}ms poll")
    print(f"Canvas: {cfg.CANVAS_SIZE}x{cfg.CANVAS_SIZE}")
    print(f"\nNetwork: {cfg.LAYERS} ({cfg.ACTIVATION})")
    print(f"\nTraining:")
    print(f"   Epochs: {cfg.EPOCHS}")
    print(f"   Learning rate: {cfg.LEARNING_RATE}")
    print(f"   Momentum: {cfg.MOMENTUM}")
    print(f"   Batch size: {cfg.BATCH_SIZE}")
    print(f"   Loss: {cfg.LOSS_FUNCTION}")
    print(f"\nDevice: {cfg.DEVICE}")
    print("=" * 60)
