"""
Drawing helpers for waveform envelopes.
"""

from pathlib import Path
from typing import Optional, Sequence, Tuple

import numpy as np
import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt

from ..config.constants import ENVELOPE_HEIGHT
from ..core.waveform import Envelope
from ..utils.exceptions import ProcessingError
from ..utils.logging import get_logger

logger = get_logger(__name__)

WAVEFORM_COLOR = '#22c55e'
PLAYHEAD_COLOR = '#ef4444'
BEAT_COLOR = '#facc15'
BACKGROUND_COLOR = '#1f2937'


def envelope_to_polyline(envelope: Envelope, height: float = ENVELOPE_HEIGHT) -> Tuple[np.ndarray, np.ndarray]:
    """
    Pixel coordinates tracing the lower edge of the envelope.

    Column ``i`` maps to ``x = i`` and its minimum to ``y = (1 + min) * height / 2``,
    with y growing downwards as on a canvas.

    Returns:
        Tuple of (x, y) arrays
    """
    x = np.arange(envelope.column_count, dtype=np.float64)
    y = (1.0 + envelope.mins) * (height / 2.0)
    return x, y


def plot_envelope(envelope: Envelope,
                  output_path: str,
                  playhead_ratio: Optional[float] = None,
                  beat_ratios: Sequence[float] = (),
                  height: int = ENVELOPE_HEIGHT,
                  title: Optional[str] = None) -> str:
    """
    Render the envelope to an image file.

    Args:
        envelope: Envelope to draw
        output_path: Target image path (format from the extension)
        playhead_ratio: Playhead position as a fraction of the track, if known
        beat_ratios: Beat positions as fractions of the track
        height: Image height in pixels
        title: Optional plot title

    Returns:
        Path of the written file

    Raises:
        ProcessingError: If the image cannot be written
    """
    width = envelope.column_count
    dpi = 100
    fig, ax = plt.subplots(figsize=(max(width, 1) / dpi, max(height, 1) / dpi), dpi=dpi)
    try:
        x = np.arange(width)
        ax.set_facecolor(BACKGROUND_COLOR)
        ax.fill_between(x, envelope.mins, envelope.maxs, color=WAVEFORM_COLOR, linewidth=0.5)
        ax.set_xlim(0, max(width - 1, 1))
        ax.set_ylim(-1.0, 1.0)
        ax.axis('off')

        for ratio in beat_ratios:
            ax.axvline(ratio * width, color=BEAT_COLOR, linewidth=0.5, alpha=0.6)
        if playhead_ratio is not None:
            ax.axvline(playhead_ratio * width, color=PLAYHEAD_COLOR, linewidth=1.0)
        if title:
            ax.set_title(title, fontsize=8)

        output = Path(output_path)
        output.parent.mkdir(parents=True, exist_ok=True)
        fig.savefig(output, facecolor=BACKGROUND_COLOR)
    except (OSError, ValueError) as e:
        raise ProcessingError(f"Failed to write waveform image {output_path}: {e}") from e
    finally:
        plt.close(fig)

    logger.info(f"Waveform written to {output_path}")
    return str(output_path)
