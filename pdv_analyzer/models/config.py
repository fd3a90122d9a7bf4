"""STFT configuration defaults and domain constants.

Defines the STFTConfig dataclass. This module holds configuration data only;
validation and quantisation of edits live in
:mod:`pdv_analyzer.analysis.parameters`.
"""

from __future__ import annotations

from dataclasses import dataclass


WINDOW_TYPES = ("hanning", "hamming", "blackman", "kaiser")

#: Kaiser window shape parameter.
KAISER_BETA = 5.0

WINDOW_SIZE_MIN = 16
WINDOW_SIZE_MAX = 4096
NFFT_MIN = 16
NFFT_MAX = 8192
OVERLAP_MIN = 0.0
OVERLAP_MAX = 95.0
OVERLAP_STEP = 5.0


@dataclass(frozen=True)
class STFTConfig:
    """
    Configuration of the spectrogram tracker.

    Notes
    window_size and nfft are powers of two once they went through the
    ParameterStore. nfft may be smaller than window_size (frames are then
    truncated before the FFT).
    """

    window_type: str = "hanning"
    window_size: int = 256
    overlap_percent: float = 75.0
    nfft: int = 1024

    @property
    def overlap_samples(self) -> int:
        # Round half away from zero.
        return int(self.window_size * self.overlap_percent / 100.0 + 0.5)

    @property
    def hop_samples(self) -> int:
        return max(self.window_size - self.overlap_samples, 1)
