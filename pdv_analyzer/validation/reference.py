"""Comparison of computed velocities against a reference velocity trace.

The quadrature velocity lives on the sample time axis ``t`` and is compared
sample by sample. The PDV velocity lives on frame-centre times ``T``; the
reference is linearly interpolated onto ``T`` before comparison. Non-finite
samples on either side are ignored.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np
import pandas as pd

from pdv_analyzer.errors import InputShapeError
from pdv_analyzer.models.results import QuadratureResult, SpectrogramResult


@dataclass(frozen=True)
class ErrorStats:
    """Error of one velocity estimate against the reference (m/s)."""

    rms: float
    max_abs: float
    mean: float
    n_compared: int


@dataclass(frozen=True)
class VelocityComparison:
    quadrature_raw: ErrorStats
    quadrature_smoothed: ErrorStats
    pdv: Optional[ErrorStats] = None


def error_stats(estimate: np.ndarray, reference: np.ndarray) -> ErrorStats:
    est = np.asarray(estimate, dtype=np.float64)
    ref = np.asarray(reference, dtype=np.float64)
    if est.shape != ref.shape:
        raise InputShapeError(f"Shape mismatch: estimate {est.shape} vs reference {ref.shape}")
    ok = np.isfinite(est) & np.isfinite(ref)
    n = int(np.count_nonzero(ok))
    if n == 0:
        return ErrorStats(rms=float("nan"), max_abs=float("nan"), mean=float("nan"), n_compared=0)
    err = est[ok] - ref[ok]
    return ErrorStats(
        rms=float(np.sqrt(np.mean(err**2))),
        max_abs=float(np.max(np.abs(err))),
        mean=float(np.mean(err)),
        n_compared=n,
    )


def reference_at(t: np.ndarray, v_t: np.ndarray, times: np.ndarray) -> np.ndarray:
    """Reference velocity linearly interpolated at ``times`` (NaN outside ``t``)."""
    return np.interp(times, t, v_t, left=np.nan, right=np.nan)


def compare_with_reference(
    quadrature: QuadratureResult,
    spectrogram: Optional[SpectrogramResult],
    t: np.ndarray,
    v_t: np.ndarray,
) -> VelocityComparison:
    """Error statistics of both velocity estimates against ``v_t``."""
    t = np.asarray(t, dtype=np.float64)
    v_t = np.asarray(v_t, dtype=np.float64)
    if t.shape != v_t.shape:
        raise InputShapeError(f"t and v_t must match, got {t.shape} and {v_t.shape}")

    pdv = None
    if spectrogram is not None:
        pdv = error_stats(spectrogram.v_pdv, reference_at(t, v_t, spectrogram.T))

    return VelocityComparison(
        quadrature_raw=error_stats(quadrature.raw_velocity, v_t),
        quadrature_smoothed=error_stats(quadrature.smoothed_velocity, v_t),
        pdv=pdv,
    )


def quadrature_table(
    quadrature: QuadratureResult,
    t: np.ndarray,
    v_t: Optional[np.ndarray] = None,
) -> pd.DataFrame:
    """Per-sample table: time, I, Q, phase, velocities and optional reference."""
    df = pd.DataFrame(
        {
            "t": np.asarray(t, dtype=np.float64),
            "I": quadrature.I,
            "Q": quadrature.Q,
            "phase_rad": quadrature.phase,
            "inst_freq_hz": quadrature.inst_freq,
            "v_raw": quadrature.raw_velocity,
            "v_smoothed": quadrature.smoothed_velocity,
        }
    )
    if v_t is not None:
        df["v_reference"] = np.asarray(v_t, dtype=np.float64)
    return df


def pdv_table(
    spectrogram: SpectrogramResult,
    t: Optional[np.ndarray] = None,
    v_t: Optional[np.ndarray] = None,
) -> pd.DataFrame:
    """Per-frame table: frame time, dominant frequency, PDV velocity and optional reference."""
    df = pd.DataFrame(
        {
            "T": spectrogram.T,
            "f_measured_hz": spectrogram.f_measured,
            "v_pdv": spectrogram.v_pdv,
        }
    )
    if t is not None and v_t is not None:
        df["v_reference"] = reference_at(
            np.asarray(t, dtype=np.float64), np.asarray(v_t, dtype=np.float64), spectrogram.T
        )
    return df
