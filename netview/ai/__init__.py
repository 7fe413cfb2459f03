"""
AI Module
=========

The classifier, its training loop and the progress channel the training
thread reports through.

Classes:
    Classifier      - Fully connected digit classifier (PyTorch)
    Trainer         - SGD training and evaluation
    TrainingWorker  - Background training thread with cancellation
    ProgressChannel - Thread-safe progress sink shared with the renderer
"""

from .network import Classifier
from .progress import ProgressChannel, ProgressSample, ProgressSnapshot, SampleHistory, TrainingState
from .trainer import Trainer, TrainOptions, TrainingWorker, EvaluationResult

__all__ = [
    'Classifier', 'ProgressChannel', 'ProgressSample', 'ProgressSnapshot',
    'SampleHistory', 'TrainingState', 'Trainer', 'TrainOptions',
    'TrainingWorker', 'EvaluationResult',
]
