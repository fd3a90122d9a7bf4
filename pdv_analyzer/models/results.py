from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from pdv_analyzer.models.config import STFTConfig
from pdv_analyzer.models.signals import ScenarioType


@dataclass(frozen=True)
class QuadratureResult:
    """Output of the quadrature demodulation of one SignalTriple.

    Attributes
    ----------
    I, Q:
        In-phase and quadrature components, shape ``(n_samples,)``.
    phase:
        Unwrapped ``atan2(Q, I)`` in radians.
    inst_freq:
        Instantaneous frequency in Hz (numerical derivative of ``phase``).
    raw_velocity:
        ``(lambda_sig/2) * inst_freq`` in m/s.
    smoothed_velocity:
        NaN-aware centred moving average of ``raw_velocity``.
    smoothing_window:
        Moving-average window length in samples.
    scenario:
        Scenario that selected the smoothing window.
    """

    I: np.ndarray
    Q: np.ndarray
    phase: np.ndarray
    inst_freq: np.ndarray
    raw_velocity: np.ndarray
    smoothed_velocity: np.ndarray
    smoothing_window: int
    scenario: ScenarioType


@dataclass(frozen=True)
class SpectrogramResult:
    """Output of one STFT tracking run.

    Attributes
    ----------
    S:
        Complex STFT matrix of shape ``(n_frames, n_bins)``.
    F:
        One-sided frequency axis in Hz, shape ``(n_bins,)``, over ``[0, Fs/2]``.
    T:
        Frame-centre times in seconds on the input time axis, shape ``(n_frames,)``.
    f_measured:
        Dominant frequency per frame (bin of maximum magnitude), shape ``(n_frames,)``.
    v_pdv:
        ``(lambda_sig/2) * (f_measured - f_offset)`` in m/s.
    config:
        STFT configuration snapshot this result was computed with.
    f_offset:
        Optical frequency offset subtracted before the velocity conversion.
    """

    S: np.ndarray
    F: np.ndarray
    T: np.ndarray
    f_measured: np.ndarray
    v_pdv: np.ndarray
    config: STFTConfig
    f_offset: float
    warnings: Tuple[str, ...] = ()

    @property
    def n_frames(self) -> int:
        return int(self.S.shape[0])

    @property
    def bin_width_hz(self) -> float:
        if self.F.size < 2:
            return float("nan")
        return float(self.F[1] - self.F[0])

    def magnitude_db(self, floor: Optional[float] = 1e-20) -> np.ndarray:
        """Magnitude surface ``20*log10(|S|)``, shape ``(n_frames, n_bins)``."""
        mag = np.abs(self.S)
        if floor is not None:
            mag = np.maximum(mag, floor)
        return 20.0 * np.log10(mag)
