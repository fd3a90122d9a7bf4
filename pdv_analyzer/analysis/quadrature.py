"""Quadrature (I/Q) demodulation of three-detector interferometer traces.

The three detectors are assumed to sit 120 degrees apart in interferometric
phase. A fixed linear projection turns them into an orthogonal I/Q pair, from
which the phase, instantaneous frequency and velocity follow.

Functions
---------
iq_from_signals
    Apply the fixed 3-to-2 projection.
unwrap_phase
    ``unwrap(atan2(Q, I))``.
instantaneous_frequency
    Centred finite difference of the phase, in Hz.
nan_moving_mean
    Centred, NaN-aware moving average with a shrinking window at the edges.
demodulate
    Full pipeline producing a :class:`~pdv_analyzer.models.results.QuadratureResult`.
"""

from __future__ import annotations

import logging
from typing import Tuple

import numpy as np

from pdv_analyzer.models.results import QuadratureResult
from pdv_analyzer.models.signals import (
    PhysicalConstants,
    ScenarioType,
    SignalTriple,
    smoothing_window_length,
)


logger = logging.getLogger(__name__)

_SQRT3 = np.sqrt(3.0)

#: Fixed projection of (s1, s2, s3) onto (I, Q) for detectors spaced 120 degrees apart.
IQ_MATRIX = np.array(
    [
        [2.0 / 3.0, -1.0 / 3.0, -1.0 / 3.0],
        [0.0, 1.0 / _SQRT3, -1.0 / _SQRT3],
    ]
)


def iq_from_signals(signals: SignalTriple) -> Tuple[np.ndarray, np.ndarray]:
    """Return ``(I, Q)`` from the three detector traces."""
    iq = IQ_MATRIX @ signals.stacked()
    return iq[0], iq[1]


def unwrap_phase(I: np.ndarray, Q: np.ndarray) -> np.ndarray:
    """Continuous phase track of ``atan2(Q, I)``.

    Jumps of magnitude >= pi between consecutive samples are removed by adding
    multiples of 2*pi, carried cumulatively from left to right. Non-finite
    samples stay NaN and are skipped, so a dropout does not poison the rest of
    the track.
    """
    wrapped = np.arctan2(Q, I)
    ok = np.isfinite(wrapped)
    phase = np.full_like(wrapped, np.nan)
    phase[ok] = np.unwrap(wrapped[ok])
    return phase


def instantaneous_frequency(phase: np.ndarray, dt: float) -> np.ndarray:
    r"""Instantaneous frequency in Hz.

    Interior samples use the centred difference
    :math:`(\phi_{k+1} - \phi_{k-1}) / (2 \cdot 2\pi dt)`; the two endpoints use
    forward/backward differences. No pre-filtering is applied.
    """
    phase = np.asarray(phase, dtype=np.float64)
    if phase.size < 2:
        raise ValueError(f"Need at least 2 phase samples, got {phase.size}")
    return np.gradient(phase) / (2.0 * np.pi * float(dt))


def nan_moving_mean(x: np.ndarray, window: int) -> np.ndarray:
    """Centred moving average ignoring non-finite samples.

    For an even ``window`` the average covers ``window//2`` samples before and
    ``window//2 - 1`` after the centre. Near the boundaries the window shrinks
    to the samples that exist (no padding). A window holding no finite sample
    yields NaN.
    """
    x = np.asarray(x, dtype=np.float64)
    window = int(window)
    if window < 1:
        raise ValueError(f"window must be >= 1, got {window}")
    n = x.size
    if n == 0:
        return x.copy()

    finite = np.isfinite(x)
    csum = np.concatenate(([0.0], np.cumsum(np.where(finite, x, 0.0))))
    ccount = np.concatenate(([0], np.cumsum(finite.astype(np.int64))))

    before = window // 2
    after = window - before - 1
    idx = np.arange(n)
    lo = np.clip(idx - before, 0, n)
    hi = np.clip(idx + after + 1, 0, n)

    total = csum[hi] - csum[lo]
    count = ccount[hi] - ccount[lo]
    out = np.full(n, np.nan)
    np.divide(total, count, out=out, where=count > 0)
    return out


def demodulate(
    signals: SignalTriple,
    constants: PhysicalConstants,
    scenario: ScenarioType = ScenarioType.RAMP,
) -> QuadratureResult:
    """Run the quadrature pipeline.

    Parameters
    ----------
    signals:
        Raw detector traces and time axis.
    constants:
        Only ``lambda_sig`` is used.
    scenario:
        Selects the smoothing window (50 samples times the scenario multiplier).

    Returns
    -------
    QuadratureResult
    """
    scenario = ScenarioType(scenario)
    I, Q = iq_from_signals(signals)
    phase = unwrap_phase(I, Q)
    inst_freq = instantaneous_frequency(phase, signals.dt)
    raw_velocity = 0.5 * constants.lambda_sig * inst_freq

    window = smoothing_window_length(scenario)
    smoothed = nan_moving_mean(raw_velocity, window)

    logger.debug(
        "Quadrature demodulation: n=%d, dt=%.3g s, scenario=%s, window=%d",
        signals.n_samples,
        signals.dt,
        scenario.name,
        window,
    )

    return QuadratureResult(
        I=I,
        Q=Q,
        phase=phase,
        inst_freq=inst_freq,
        raw_velocity=raw_velocity,
        smoothed_velocity=smoothed,
        smoothing_window=window,
        scenario=scenario,
    )
