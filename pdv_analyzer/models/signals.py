from __future__ import annotations

import enum
import math
from dataclasses import dataclass
from typing import Tuple

import numpy as np
import pandas as pd

from pdv_analyzer.errors import InputShapeError


SPEED_OF_LIGHT_M_PER_S = 299_792_458.0

DEFAULT_LAMBDA_SIG_M = 1550.120e-9
DEFAULT_LAMBDA_REF_M = 1550.150e-9

#: Base smoothing window (samples) before the scenario multiplier is applied.
BASE_SMOOTHING_WINDOW = 50

SIGNAL_COLUMNS = ("signal1", "signal2", "signal3")

# Relative deviation of individual sample spacings from dt before a warning is recorded.
_DT_REL_TOL = 1e-3


class ScenarioType(enum.IntEnum):
    """Simulation scenario, as encoded by the integer ``simulation_type`` of a dataset."""

    UNKNOWN = 0
    RAMP = 1
    TARGET_REFLECTIVITY_CHANGE = 2
    COMBINED_CHANGES = 3

    @classmethod
    def from_code(cls, code: object) -> "ScenarioType":
        """Map an integer code to a scenario; anything unrecognised is UNKNOWN."""
        try:
            x = float(code)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            return cls.UNKNOWN
        if not math.isfinite(x) or not x.is_integer():
            return cls.UNKNOWN
        value = int(x)
        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN

    @property
    def smoothing_multiplier(self) -> int:
        return _SMOOTHING_MULTIPLIER[self]


_SMOOTHING_MULTIPLIER = {
    ScenarioType.RAMP: 1,
    ScenarioType.TARGET_REFLECTIVITY_CHANGE: 2,
    ScenarioType.COMBINED_CHANGES: 3,
    ScenarioType.UNKNOWN: 1,
}


def smoothing_window_length(scenario: ScenarioType) -> int:
    """Moving-average window (samples) used for the smoothed quadrature velocity."""
    return BASE_SMOOTHING_WINDOW * ScenarioType(scenario).smoothing_multiplier


@dataclass(frozen=True)
class PhysicalConstants:
    """
    Optical constants of the heterodyne setup.

    Notes
    - Wavelengths are in meters.
    - f_offset is signed: f_sig - f_ref.
    """
    lambda_sig: float = DEFAULT_LAMBDA_SIG_M
    lambda_ref: float = DEFAULT_LAMBDA_REF_M
    c: float = SPEED_OF_LIGHT_M_PER_S

    def __post_init__(self) -> None:
        for name in ("lambda_sig", "lambda_ref", "c"):
            v = float(getattr(self, name))
            if not math.isfinite(v) or v <= 0.0:
                raise ValueError(f"{name} must be finite and > 0, got {v!r}")
            object.__setattr__(self, name, v)

    @property
    def f_sig(self) -> float:
        return self.c / self.lambda_sig

    @property
    def f_ref(self) -> float:
        return self.c / self.lambda_ref

    @property
    def f_offset(self) -> float:
        return self.f_sig - self.f_ref


@dataclass(frozen=True)
class SignalTriple:
    """
    Three raw detector traces on a shared, uniformly sampled time axis.

    Notes
    - All arrays are float64 and of identical length >= 2.
    - 't' must be finite and strictly increasing; small spacing jitter is
      tolerated and reported in ``warnings``.
    """
    t: np.ndarray
    signal1: np.ndarray
    signal2: np.ndarray
    signal3: np.ndarray
    warnings: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        arrays = {}
        for name in ("t",) + SIGNAL_COLUMNS:
            a = np.asarray(getattr(self, name), dtype=np.float64)
            if a.ndim != 1:
                raise InputShapeError(f"{name} must be 1D, got shape {a.shape}")
            arrays[name] = a

        n = arrays["t"].size
        lengths = {name: a.size for name, a in arrays.items()}
        if len(set(lengths.values())) != 1:
            raise InputShapeError(f"Signal length mismatch: {lengths}")
        if n < 2:
            raise InputShapeError(f"Need at least 2 samples, got {n}")

        t = arrays["t"]
        if not np.all(np.isfinite(t)):
            raise InputShapeError("Time axis contains non-finite values")
        steps = np.diff(t)
        if np.any(steps <= 0.0):
            raise InputShapeError("Time axis must be strictly increasing")

        for name, a in arrays.items():
            object.__setattr__(self, name, a)

        dt = (t[-1] - t[0]) / float(n - 1)
        dev = float(np.max(np.abs(steps - dt))) / dt
        if dev > _DT_REL_TOL:
            msg = f"Time axis is not uniform: max |dt_k - dt|/dt = {dev:.3g}"
            object.__setattr__(self, "warnings", tuple(self.warnings) + (msg,))

    @property
    def n_samples(self) -> int:
        return int(self.t.size)

    @property
    def dt(self) -> float:
        return float((self.t[-1] - self.t[0]) / (self.n_samples - 1))

    @property
    def sample_rate_hz(self) -> float:
        return 1.0 / self.dt

    def stacked(self) -> np.ndarray:
        """Signals as an array of shape ``(3, n_samples)``."""
        return np.vstack([self.signal1, self.signal2, self.signal3])

    def scaled(self, k: float) -> "SignalTriple":
        return SignalTriple(
            t=self.t,
            signal1=k * self.signal1,
            signal2=k * self.signal2,
            signal3=k * self.signal3,
        )

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(
            {
                "t": self.t,
                "signal1": self.signal1,
                "signal2": self.signal2,
                "signal3": self.signal3,
            }
        )

    @classmethod
    def from_frame(cls, df: pd.DataFrame) -> "SignalTriple":
        missing = [c for c in ("t",) + SIGNAL_COLUMNS if c not in df.columns]
        if missing:
            raise KeyError(f"Missing required columns in DataFrame: {missing}")
        return cls(
            t=df["t"].to_numpy(dtype=np.float64),
            signal1=df["signal1"].to_numpy(dtype=np.float64),
            signal2=df["signal2"].to_numpy(dtype=np.float64),
            signal3=df["signal3"].to_numpy(dtype=np.float64),
        )
