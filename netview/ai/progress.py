"""
Training Progress Channel
=========================

The one piece of state shared between the training thread (writer) and the
render thread (reader).

    worker thread                      render thread
    -------------                      -------------
    channel.report(epoch, error) --->  channel.snapshot(chart_width)
                  |                   |
                   +-- one Lock ------+
                   | history          |
                   | last_iteration   |
                   | last_error       |
                   | state            |
                   +------------------+

Both sides hold the lock for O(1) work: one append plus two scalar writes,
or one bounded slice copy. The worker never waits for the renderer to
consume anything and the renderer never waits for new samples.
"""

import math
import threading
from dataclasses import dataclass
from typing import List, NamedTuple, Optional, Tuple

from ..utils.logger import get_logger


logger = get_logger(__name__)


class ProgressSample(NamedTuple):
    iteration: int
    error: float


class TrainingState:
    """Lifecycle labels published through the channel."""
    WAITING = 'waiting'
    RUNNING = 'running'
    DONE = 'done'
    CANCELLED = 'cancelled'
    FAILED = 'failed'

    FINAL = (DONE, CANCELLED, FAILED)


class SampleHistory:
    """
    Ordered log of progress samples.

    Not thread-safe on its own; ProgressChannel guards it.

    Args:
        capacity: Keep at most this many samples (None = keep everything).
            Trimming happens in chunks so append stays amortized O(1).

    ``len()`` is the number of samples still held; ``total`` counts every
    sample ever appended.
    """

    def __init__(self, capacity: Optional[int] = None):
        if capacity is not None and capacity <= 0:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self.capacity = capacity
        self.total = 0
        self._samples: List[ProgressSample] = []

    def append(self, sample: ProgressSample) -> None:
        self._samples.append(sample)
        self.total += 1
        if self.capacity is not None and len(self._samples) >= 2 * self.capacity:
            del self._samples[:-self.capacity]

    def window(self, width: int) -> Tuple[ProgressSample, ...]:
        """The last ``min(width, len)`` samples in iteration order."""
        if width <= 0:
            return ()
        if self.capacity is not None:
            width = min(width, self.capacity)
        if len(self._samples) <= width:
            return tuple(self._samples)
        return tuple(self._samples[-width:])

    @property
    def last(self) -> Optional[ProgressSample]:
        return self._samples[-1] if self._samples else None

    def __len__(self) -> int:
        if self.capacity is not None:
            return min(len(self._samples), self.capacity)
        return len(self._samples)


@dataclass(frozen=True)
class ProgressSnapshot:
    """Consistent view of the channel taken under a single lock acquisition."""
    samples: Tuple[ProgressSample, ...]
    last_iteration: Optional[int]
    last_error: Optional[float]
    total: int
    state: str

    @property
    def last_finite_error(self) -> Optional[float]:
        if self.last_error is not None and math.isfinite(self.last_error):
            return self.last_error
        for sample in reversed(self.samples):
            if math.isfinite(sample.error):
                return sample.error
        return None


class ProgressChannel:
    """
    Thread-safe progress sink.

    The instance itself is the ``on_progress`` callback handed to the
    trainer, so it can be passed wherever ``Callable[[int, float], None]``
    is expected.

    Example:
        >>> channel = ProgressChannel()
        >>> channel(1, 0.93)
        >>> channel.snapshot(10).last_iteration
        1
    """

    def __init__(self, capacity: Optional[int] = None):
        self._lock = threading.Lock()
        self._history = SampleHistory(capacity)
        self._last_iteration: Optional[int] = None
        self._last_error: Optional[float] = None
        self._state = TrainingState.WAITING
        self.dropped = 0

    def report(self, iteration: int, error: float) -> bool:
        """
        Record one progress sample. Safe to call from any thread.

        Samples whose iteration does not increase are dropped and logged
        rather than raised, so a misbehaving caller cannot kill training.

        Returns:
            True if the sample was recorded
        """
        sample = ProgressSample(int(iteration), float(error))
        with self._lock:
            last = self._last_iteration
            accepted = sample.iteration >= 0 and (last is None or sample.iteration > last)
            if accepted:
                self._history.append(sample)
                self._last_iteration = sample.iteration
                self._last_error = sample.error
                if self._state == TrainingState.WAITING:
                    self._state = TrainingState.RUNNING
            else:
                self.dropped += 1

        if not accepted:
            logger.warning(f"Dropped out-of-order progress sample {sample} (last iteration {last})")
        return accepted

    __call__ = report

    def set_state(self, state: str) -> None:
        with self._lock:
            self._state = state

    def snapshot(self, width: int) -> ProgressSnapshot:
        """Chart window of ``width`` samples plus the scalar mirrors, atomically."""
        with self._lock:
            return ProgressSnapshot(
                samples=self._history.window(width),
                last_iteration=self._last_iteration,
                last_error=self._last_error,
                total=self._history.total,
                state=self._state,
            )

    def __len__(self) -> int:
        with self._lock:
            return len(self._history)
