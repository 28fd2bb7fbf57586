"""
Consumers of the analysis output: beat indicator and waveform drawing.
"""

from .indicator import BeatIndicator
from .waveform_plot import envelope_to_polyline, plot_envelope

__all__ = [
    "BeatIndicator",
    "envelope_to_polyline",
    "plot_envelope",
]
