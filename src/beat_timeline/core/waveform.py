"""
Waveform envelope extraction for bounded-width displays.
"""

import math
from dataclasses import dataclass
from typing import Iterator, List, NamedTuple, Optional, Sequence, Tuple, Union

import numpy as np

from ..config.settings import Settings
from ..config.constants import ENVELOPE_COLUMN_COUNT
from ..utils.validators import validate_column_count
from ..utils.logging import get_logger

logger = get_logger(__name__)

SampleBuffer = Union[np.ndarray, Sequence[float]]


class EnvelopeColumn(NamedTuple):
    """Extremes of the samples covered by one display column."""
    min: float
    max: float


@dataclass(frozen=True, eq=False)
class Envelope:
    """Per-column min/max summary of a sample buffer."""
    mins: np.ndarray
    maxs: np.ndarray

    def __post_init__(self):
        if self.mins.shape != self.maxs.shape:
            raise ValueError("Envelope mins and maxs must have the same shape")
        self.mins.setflags(write=False)
        self.maxs.setflags(write=False)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Envelope):
            return NotImplemented
        return np.array_equal(self.mins, other.mins) and np.array_equal(self.maxs, other.maxs)

    def __hash__(self) -> int:
        return hash((self.mins.tobytes(), self.maxs.tobytes()))

    @property
    def column_count(self) -> int:
        return int(self.mins.shape[0])

    def __len__(self) -> int:
        return self.column_count

    def __getitem__(self, index: int) -> EnvelopeColumn:
        return EnvelopeColumn(float(self.mins[index]), float(self.maxs[index]))

    def __iter__(self) -> Iterator[EnvelopeColumn]:
        for lo, hi in zip(self.mins, self.maxs):
            yield EnvelopeColumn(float(lo), float(hi))

    def columns(self) -> List[EnvelopeColumn]:
        return list(self)


def column_bounds(length: int, column_count: int) -> List[Tuple[int, int]]:
    """
    Sample ranges scanned by each column.

    Every index in ``[0, length)`` belongs to exactly one range. Trailing
    columns may be empty when ``step * column_count`` exceeds the length.

    Args:
        length: Number of samples
        column_count: Number of display columns

    Returns:
        List of ``(start, stop)`` pairs, one per column
    """
    validate_column_count(column_count)
    step = math.ceil(length / column_count) if length > 0 else 0

    bounds = []
    for i in range(column_count):
        start = min(i * step, length)
        stop = min((i + 1) * step, length)
        bounds.append((start, stop))
    return bounds


def reduce(samples: SampleBuffer, column_count: int) -> Envelope:
    """
    Reduce a sample buffer to a fixed number of min/max columns.

    Args:
        samples: Decoded amplitudes in [-1.0, 1.0]
        column_count: Number of columns to produce, must be positive

    Returns:
        Envelope with exactly ``column_count`` columns

    Raises:
        ValidationError: If ``column_count`` is not positive
    """
    data = np.asarray(samples, dtype=np.float64).reshape(-1)
    bounds = column_bounds(len(data), column_count)

    mins = np.zeros(column_count, dtype=np.float64)
    maxs = np.zeros(column_count, dtype=np.float64)

    for i, (start, stop) in enumerate(bounds):
        if start >= stop:
            # Past the end of the buffer: flat column
            continue
        segment = data[start:stop]
        mins[i] = segment.min()
        maxs[i] = segment.max()

    return Envelope(mins=mins, maxs=maxs)


class WaveformReducer:
    """
    Envelope extraction with a configured default width.
    """

    def __init__(self, settings: Optional[Settings] = None, column_count: Optional[int] = None):
        """
        Initialize waveform reducer.

        Args:
            settings: Application settings
            column_count: Overrides the configured column count
        """
        if column_count is None:
            column_count = settings.waveform.column_count if settings else ENVELOPE_COLUMN_COUNT
        self.column_count = validate_column_count(column_count)

    def reduce(self, samples: SampleBuffer, column_count: Optional[int] = None) -> Envelope:
        """Reduce ``samples`` to ``column_count`` columns (default: configured width)."""
        columns = self.column_count if column_count is None else column_count
        envelope = reduce(samples, columns)
        logger.debug(f"Reduced {len(samples)} samples to {columns} envelope columns")
        return envelope
