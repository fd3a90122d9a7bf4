"""Velocity analysis package.

Design principle:
  - Ingest produces validated :class:`~pdv_analyzer.models.signals.SignalTriple` objects.
  - Analysis consumes them and produces immutable result snapshots.

Two independent velocity estimates are computed:
  - quadrature: fixed 3-to-2 I/Q projection, phase unwrapping, derivative
  - spectrogram: STFT peak tracking of the beat frequency (PDV)
"""

from .controller import AnalysisController, ControllerState
from .parameters import ParameterStore
from .quadrature import demodulate
from .spectrogram import track_spectrogram

__all__ = [
    "AnalysisController",
    "ControllerState",
    "ParameterStore",
    "demodulate",
    "track_spectrogram",
]
