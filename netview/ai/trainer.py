"""
Training Loop
=============

Orchestrates training of the classifier:
    1. Shuffle and batch the examples every epoch
    2. SGD with momentum on cross-entropy (or MSE) loss
    3. Report (epoch, mean loss) through the progress callback
    4. Stop on the epoch limit or when the cancel token is set

TrainingWorker runs the loop on a background thread so the render loop can
keep drawing; it owns the cancellation token and is joined on shutdown.
"""

import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

import numpy as np
import torch
import torch.nn.functional as F

from config import Config
from ..data.dataset import Dataset
from ..utils.logger import get_logger, log_training_metrics
from .network import Classifier
from .progress import ProgressChannel, TrainingState


logger = get_logger(__name__)

ProgressCallback = Callable[[int, float], None]


@dataclass
class TrainOptions:
    """Hyperparameters for one training run."""
    epochs: int = 50            # 0 = until cancelled
    learning_rate: float = 0.002
    momentum: float = 0.9
    batch_size: int = 32
    loss_function: str = 'cross_entropy'
    log_interval: int = 1
    seed: Optional[int] = None

    @classmethod
    def from_config(cls, config: Config) -> 'TrainOptions':
        return cls(
            epochs=config.EPOCHS,
            learning_rate=config.LEARNING_RATE,
            momentum=config.MOMENTUM,
            batch_size=config.BATCH_SIZE,
            loss_function=config.LOSS_FUNCTION,
            log_interval=config.LOG_INTERVAL,
            seed=config.SEED,
        )


@dataclass
class EvaluationResult:
    correct: int
    total: int

    @property
    def accuracy(self) -> float:
        return self.correct / self.total if self.total else 0.0


class Trainer:
    """
    Trains and evaluates a Classifier.

    Example:
        >>> trainer = Trainer(Classifier([784, 512, 10]), TrainOptions(epochs=5))
        >>> trainer.train(dataset, on_progress=lambda epoch, error: print(epoch, error))
    """

    def __init__(self, network: Classifier, options: Optional[TrainOptions] = None):
        self.network = network
        self.options = options or TrainOptions()

    def _loss(self, outputs: torch.Tensor, targets: torch.Tensor, options: TrainOptions) -> torch.Tensor:
        if options.loss_function == 'cross_entropy':
            return F.cross_entropy(outputs, targets.argmax(dim=1))
        if options.loss_function == 'mse':
            return F.mse_loss(outputs, targets)
        raise ValueError(f"unknown loss function '{options.loss_function}'")

    def train(
        self,
        examples: Dataset,
        options: Optional[TrainOptions] = None,
        on_progress: Optional[ProgressCallback] = None,
        cancel: Optional[threading.Event] = None
    ) -> int:
        """
        Run the training loop.

        Args:
            examples: Training data
            options: Override the trainer's options for this run
            on_progress: Called as on_progress(epoch, mean_loss) every
                log_interval epochs, from the calling thread
            cancel: Training stops at the next batch boundary once set

        Returns:
            Number of completed epochs
        """
        options = options or self.options
        if len(examples) == 0:
            raise ValueError("no training examples")
        if examples.input_size != self.network.input_size:
            raise ValueError(
                f"examples have {examples.input_size} inputs, network expects {self.network.input_size}"
            )

        device = self.network.device
        inputs = torch.as_tensor(examples.inputs, dtype=torch.float32, device=device)
        targets = torch.as_tensor(examples.targets, dtype=torch.float32, device=device)
        generator = torch.Generator()
        if options.seed is not None:
            generator.manual_seed(options.seed)

        optimizer = torch.optim.SGD(
            self.network.parameters(), lr=options.learning_rate, momentum=options.momentum
        )

        n = len(examples)
        completed = 0
        logger.info(
            f"Training on {n} examples | layers={self.network.layer_sizes} | "
            f"epochs={options.epochs or 'unlimited'} | lr={options.learning_rate} | "
            f"momentum={options.momentum} | loss={options.loss_function}"
        )

        self.network.train()
        try:
            while options.epochs == 0 or completed < options.epochs:
                start_time = time.time()
                order = torch.randperm(n, generator=generator).to(device)
                total_loss = 0.0

                for start in range(0, n, options.batch_size):
                    if cancel is not None and cancel.is_set():
                        logger.info(f"Training cancelled during epoch {completed + 1}")
                        return completed
                    batch = order[start:start + options.batch_size]
                    loss = self._loss(self.network(inputs[batch]), targets[batch], options)
                    optimizer.zero_grad()
                    loss.backward()
                    optimizer.step()
                    total_loss += loss.item() * len(batch)

                completed += 1
                error = total_loss / n
                if completed % options.log_interval == 0:
                    log_training_metrics(completed, error, duration=time.time() - start_time)
                    if on_progress is not None:
                        on_progress(completed, error)
        finally:
            self.network.eval()

        logger.info(f"Training complete after {completed} epochs")
        return completed

    def evaluate(self, examples: Dataset) -> EvaluationResult:
        """Count examples whose arg-max output matches the label."""
        if len(examples) == 0:
            return EvaluationResult(0, 0)
        self.network.eval()
        with torch.no_grad():
            inputs = torch.as_tensor(examples.inputs, dtype=torch.float32, device=self.network.device)
            predicted = self.network(inputs).argmax(dim=1).cpu().numpy()
        correct = int(np.sum(predicted == examples.labels))
        return EvaluationResult(correct, len(examples))


class TrainingWorker:
    """
    Runs Trainer.train on a background thread, publishing into a channel.

    The worker never touches view state; it only writes progress samples and
    its lifecycle state into the channel. stop() sets the cancellation
    token, join() waits for the thread to finish.
    """

    def __init__(
        self,
        trainer: Trainer,
        examples: Dataset,
        channel: ProgressChannel,
        options: Optional[TrainOptions] = None
    ):
        self.trainer = trainer
        self.examples = examples
        self.channel = channel
        self.options = options
        self.cancel = threading.Event()
        self.epochs_completed = 0
        self.error: Optional[BaseException] = None
        self._thread: Optional[threading.Thread] = None

    def start(self) -> None:
        if self._thread is not None:
            raise RuntimeError("worker already started")
        self._thread = threading.Thread(target=self._run, name='trainer', daemon=True)
        self._thread.start()

    def _run(self) -> None:
        self.channel.set_state(TrainingState.RUNNING)
        try:
            self.epochs_completed = self.trainer.train(
                self.examples, self.options, on_progress=self.channel, cancel=self.cancel
            )
        except Exception as e:
            # The render thread cannot see this traceback; keep it for the caller
            logger.exception("Training failed")
            self.error = e
            self.channel.set_state(TrainingState.FAILED)
            return
        self.channel.set_state(TrainingState.CANCELLED if self.cancel.is_set() else TrainingState.DONE)

    def stop(self) -> None:
        self.cancel.set()

    def join(self, timeout: Optional[float] = None) -> bool:
        """Wait for the thread; True if it has finished."""
        if self._thread is None:
            return True
        self._thread.join(timeout)
        return not self._thread.is_alive()

    @property
    def is_alive(self) -> bool:
        return self._thread is not None and self._thread.is_alive()
