"""STFT beat-frequency tracking (photonic Doppler velocimetry).

A single detector trace is cut into overlapping frames of ``window_size``
samples, each frame is windowed and transformed with an ``nfft``-point real
FFT (zero-padded or truncated). The dominant bin of each frame gives the beat
frequency, which converts to velocity through

    v_pdv = (lambda_sig / 2) * (f_measured - f_offset)

Peak picking is plain argmax over bins: no interpolation between bins and no
multi-peak disambiguation.
"""

from __future__ import annotations

import logging

import numpy as np
from scipy.signal import get_window

from pdv_analyzer.errors import DegenerateTransform
from pdv_analyzer.models.config import KAISER_BETA, STFTConfig
from pdv_analyzer.models.results import SpectrogramResult
from pdv_analyzer.models.signals import PhysicalConstants, SignalTriple


logger = logging.getLogger(__name__)

_SCIPY_WINDOWS = {
    "hanning": "hann",
    "hamming": "hamming",
    "blackman": "blackman",
    "kaiser": ("kaiser", KAISER_BETA),
}


def analysis_window(window_type: str, window_size: int) -> np.ndarray:
    """Symmetric analysis window of length ``window_size``."""
    if window_type not in _SCIPY_WINDOWS:
        raise ValueError(f"Unsupported window type: {window_type!r}")
    return get_window(_SCIPY_WINDOWS[window_type], int(window_size), fftbins=False)


def frame_starts(n_samples: int, config: STFTConfig) -> np.ndarray:
    """Start index of every complete frame.

    Raises
    ------
    DegenerateTransform
        If the window is longer than the signal (no complete frame exists).
    """
    if config.window_size > n_samples:
        raise DegenerateTransform(
            f"window_size={config.window_size} exceeds signal length {n_samples}"
        )
    hop = config.hop_samples
    n_frames = 1 + (n_samples - config.window_size) // hop
    return np.arange(n_frames, dtype=np.int64) * hop


def stft(
    x: np.ndarray,
    fs_hz: float,
    config: STFTConfig,
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Framed short-time Fourier transform.

    Returns
    -------
    S:
        Complex matrix of shape ``(n_frames, nfft//2 + 1)``.
    F:
        Frequency axis in Hz over ``[0, fs_hz/2]``.
    centers:
        Frame-centre offsets in seconds relative to the first sample.
    """
    x = np.asarray(x, dtype=np.float64)
    if x.ndim != 1:
        raise ValueError(f"Expected 1D signal, got shape {x.shape}")

    n = int(config.window_size)
    starts = frame_starts(x.size, config)
    win = analysis_window(config.window_type, n)

    frames = x[starts[:, None] + np.arange(n)[None, :]] * win[None, :]
    S = np.fft.rfft(frames, n=int(config.nfft), axis=1)
    F = np.fft.rfftfreq(int(config.nfft), d=1.0 / float(fs_hz))
    centers = (starts + n / 2.0) / float(fs_hz)
    return S, F, centers


def dominant_frequency(S: np.ndarray, F: np.ndarray) -> np.ndarray:
    """Frequency of the maximum-magnitude bin for every frame."""
    S = np.asarray(S)
    if S.ndim != 2 or S.shape[1] != F.size:
        raise ValueError(f"S must be (n_frames, {F.size}), got shape {S.shape}")
    return F[np.argmax(np.abs(S), axis=1)]


def track_spectrogram(
    signals: SignalTriple,
    constants: PhysicalConstants,
    config: STFTConfig,
) -> SpectrogramResult:
    """Compute the spectrogram of ``signal1`` and its PDV velocity trace."""
    S, F, centers = stft(signals.signal1, signals.sample_rate_hz, config)
    f_measured = dominant_frequency(S, F)
    f_offset = constants.f_offset
    v_pdv = 0.5 * constants.lambda_sig * (f_measured - f_offset)

    logger.debug(
        "STFT tracking: %d frames x %d bins (%s, window=%d, overlap=%g%%, nfft=%d)",
        S.shape[0],
        S.shape[1],
        config.window_type,
        config.window_size,
        config.overlap_percent,
        config.nfft,
    )

    return SpectrogramResult(
        S=S,
        F=F,
        T=signals.t[0] + centers,
        f_measured=f_measured,
        v_pdv=v_pdv,
        config=config,
        f_offset=f_offset,
    )
