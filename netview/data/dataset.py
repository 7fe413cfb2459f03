"""
Labeled Digit Data
==================

Loads CSV files in the common MNIST layout, one example per row:

    label,pixel0,pixel1,...,pixel783

An optional header row is skipped. Pixels are scaled from 0..255 to
0..1 and labels become one-hot target vectors.
"""

import os
from dataclasses import dataclass

import numpy as np

from ..utils.logger import get_logger


logger = get_logger(__name__)


@dataclass
class Dataset:
    """Inputs of shape (n, input_size) and one-hot targets of shape (n, num_classes)."""
    inputs: np.ndarray
    targets: np.ndarray

    def __post_init__(self):
        if self.inputs.ndim != 2 or self.targets.ndim != 2:
            raise ValueError("inputs and targets must be 2-D arrays")
        if len(self.inputs) != len(self.targets):
            raise ValueError(f"{len(self.inputs)} inputs but {len(self.targets)} targets")

    def __len__(self) -> int:
        return len(self.inputs)

    @property
    def labels(self) -> np.ndarray:
        return self.targets.argmax(axis=1)

    @property
    def input_size(self) -> int:
        return self.inputs.shape[1]

    @classmethod
    def from_labels(cls, inputs: np.ndarray, labels: np.ndarray, num_classes: int = 10) -> 'Dataset':
        labels = np.asarray(labels, dtype=np.int64)
        if labels.size and (labels.min() < 0 or labels.max() >= num_classes):
            raise ValueError(f"labels must be in [0, {num_classes})")
        targets = np.zeros((len(labels), num_classes), dtype=np.float32)
        targets[np.arange(len(labels)), labels] = 1.0
        return cls(np.asarray(inputs, dtype=np.float32), targets)


def _has_header(path: str) -> bool:
    with open(path, 'r', encoding='utf-8') as f:
        first = f.readline().strip()
    if not first:
        return False
    try:
        float(first.split(',')[0])
    except ValueError:
        return True
    return False


def load_csv(path: str, input_size: int = 784, num_classes: int = 10, scale: float = 255.0) -> Dataset:
    """
    Read a labeled CSV file.

    Args:
        path: CSV file path
        input_size: Expected number of pixel columns
        num_classes: Number of label classes
        scale: Pixel values are divided by this

    Returns:
        Dataset with float32 inputs and one-hot targets

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If a row has the wrong width or a label is out of range
    """
    if not os.path.exists(path):
        raise FileNotFoundError(f"Data file not found: {path}")

    raw = np.loadtxt(path, delimiter=',', skiprows=1 if _has_header(path) else 0, ndmin=2, dtype=np.float64)
    if raw.size == 0:
        raise ValueError(f"No examples in {path}")
    if raw.shape[1] != input_size + 1:
        raise ValueError(f"{path}: expected {input_size + 1} columns, found {raw.shape[1]}")

    labels = raw[:, 0]
    if not np.all(labels == np.round(labels)):
        raise ValueError(f"{path}: labels must be integers")

    dataset = Dataset.from_labels(raw[:, 1:] / scale, labels.astype(np.int64), num_classes)
    logger.info(f"Loaded {len(dataset)} examples from {path}")
    return dataset
