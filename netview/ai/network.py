"""
Digit Classifier Network
========================

Fully connected network mapping a flattened canvas to one raw score per
class. The render loop calls run() once per frame; the trainer updates the
same module from its own thread.

    Input (784) -> Hidden layers (LeakyReLU) -> Output (10)

Key Features:
    - Architecture taken from a layer list, e.g. [784, 512, 10]
    - Xavier weight initialization
    - Checkpoints store the layer list so mismatched loads are refused
"""

import os
from typing import Any, Callable, Dict, List, Optional, Sequence

import numpy as np
import torch
import torch.nn as nn
import torch.nn.functional as F

from ..utils.logger import get_logger, log_model_event


logger = get_logger(__name__)


ACTIVATIONS: Dict[str, Callable[[torch.Tensor], torch.Tensor]] = {
    'relu': F.relu,
    'leaky_relu': F.leaky_relu,
    'tanh': torch.tanh,
    'sigmoid': torch.sigmoid,
}


class Classifier(nn.Module):
    """
    Multi-layer perceptron classifier.

    Attributes:
        layer_sizes (List[int]): Node count per layer, input first
        layers (nn.ModuleList): Linear layers between consecutive sizes

    Example:
        >>> net = Classifier([784, 512, 10])
        >>> scores = net.run(np.zeros(784))  # Shape: (10,)
    """

    def __init__(
        self,
        layer_sizes: Sequence[int],
        activation: str = 'leaky_relu',
        device: Optional[torch.device] = None
    ):
        """
        Initialize the classifier.

        Args:
            layer_sizes: Node counts, at least an input and an output layer
            activation: Hidden activation name (see ACTIVATIONS)
            device: Torch device (default: CPU)
        """
        super(Classifier, self).__init__()

        if len(layer_sizes) < 2 or any(int(n) <= 0 for n in layer_sizes):
            raise ValueError(f"need at least two positive layer sizes, got {list(layer_sizes)}")
        if activation not in ACTIVATIONS:
            raise ValueError(f"unknown activation '{activation}', expected one of {sorted(ACTIVATIONS)}")

        self.layer_sizes: List[int] = [int(n) for n in layer_sizes]
        self.activation = activation
        self._activation_fn = ACTIVATIONS[activation]
        self.device = device or torch.device('cpu')

        self.layers = nn.ModuleList(
            nn.Linear(n_in, n_out) for n_in, n_out in zip(self.layer_sizes, self.layer_sizes[1:])
        )
        self._init_weights()
        self.to(self.device)

    def _init_weights(self) -> None:
        for layer in self.layers:
            nn.init.xavier_uniform_(layer.weight)
            nn.init.constant_(layer.bias, 0.0)

    @property
    def input_size(self) -> int:
        return self.layer_sizes[0]

    @property
    def output_size(self) -> int:
        return self.layer_sizes[-1]

    def forward(self, x: torch.Tensor) -> torch.Tensor:
        for layer in self.layers[:-1]:
            x = self._activation_fn(layer(x))
        return self.layers[-1](x)

    def run(self, vector: Sequence[float]) -> np.ndarray:
        """
        Raw output scores for a single input vector.

        Args:
            vector: Flat input of length input_size

        Returns:
            Output scores, shape (output_size,)
        """
        values = np.asarray(vector, dtype=np.float32).reshape(-1)
        if values.shape[0] != self.input_size:
            raise ValueError(f"expected {self.input_size} inputs, got {values.shape[0]}")
        with torch.no_grad():
            x = torch.from_numpy(values).to(self.device).unsqueeze(0)
            return self(x).squeeze(0).cpu().numpy().astype(np.float64)

    def save(self, filepath: str, **metadata: Any) -> None:
        """Save weights together with the architecture they belong to."""
        dir_path = os.path.dirname(filepath)
        if dir_path:
            os.makedirs(dir_path, exist_ok=True)
        torch.save({
            'layer_sizes': self.layer_sizes,
            'activation': self.activation,
            'state_dict': self.state_dict(),
            'metadata': metadata,
        }, filepath)
        log_model_event('save', filepath, layers=self.layer_sizes, **metadata)

    @classmethod
    def load(
        cls,
        filepath: str,
        expected_layers: Optional[Sequence[int]] = None,
        device: Optional[torch.device] = None
    ) -> Optional['Classifier']:
        """
        Load a saved classifier.

        Args:
            filepath: Checkpoint written by save()
            expected_layers: Refuse checkpoints of a different architecture
            device: Torch device to load onto

        Returns:
            The classifier, or None if the file is missing, unreadable or
            of a different architecture
        """
        if not os.path.exists(filepath):
            logger.error(f"Model file not found: {filepath}")
            return None

        try:
            checkpoint = torch.load(filepath, map_location=device or 'cpu', weights_only=False)
        except Exception as e:
            logger.error(f"Failed to load model {filepath}: {e}")
            return None

        saved_layers = list(checkpoint.get('layer_sizes', []))
        if expected_layers is not None and saved_layers != list(expected_layers):
            logger.error(
                f"Model incompatible: layer mismatch (saved: {saved_layers}, expected: {list(expected_layers)})"
            )
            return None

        net = cls(saved_layers, checkpoint.get('activation', 'leaky_relu'), device)
        net.load_state_dict(checkpoint['state_dict'])
        net.eval()
        log_model_event('load', filepath, layers=saved_layers)
        return net
