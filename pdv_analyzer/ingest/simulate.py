"""Simulated three-detector datasets with a known reference velocity.

Each scenario defines a velocity history ``v(t)`` and a return-intensity
history ``r(t)``. The interferometric phase is

    phi(t) = 2*pi*f_offset*t + (4*pi/lambda_sig) * integral(v dt)

(the offset term is dropped for ``heterodyne=False``) and detector ``k``
records ``r(t) * (dc_level + m*cos(phi - 2*pi*k/3))`` plus optional white noise.
The default ``dc_level=0`` models AC-coupled detectors.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np
from scipy.integrate import cumulative_trapezoid

from pdv_analyzer.ingest.dataset import SimulationDataset
from pdv_analyzer.models.signals import PhysicalConstants, ScenarioType, SignalTriple


@dataclass(frozen=True)
class SimulationSettings:
    """
    Settings for :func:`simulate_dataset`.

    dt / n_samples:
      Sampling of the record. The defaults (50 GS/s, 400 ns) resolve the
      ~3.7 GHz offset of the default wavelengths plus a few hundred m/s.
    v_start / v_end:
      Ramp endpoints in m/s. Scenarios without a ramp hold ``v_end``.
    reflectivity_steps:
      Relative return intensity for equal thirds of the record, used by the
      reflectivity-change scenarios.
    modulation_depth:
      Fringe amplitude ``m``.
    dc_level:
      DC pedestal relative to the return intensity (0 for AC-coupled detectors).
    noise_std:
      Standard deviation of additive Gaussian noise (0 disables noise).
    heterodyne:
      Include the ``f_offset`` carrier in the phase.
    """
    dt: float = 2e-11
    n_samples: int = 20_000
    v_start: float = 0.0
    v_end: float = 300.0
    reflectivity_steps: Tuple[float, float, float] = (1.0, 0.4, 0.8)
    modulation_depth: float = 0.9
    dc_level: float = 0.0
    noise_std: float = 0.0
    heterodyne: bool = True
    seed: Optional[int] = None


def velocity_profile(t: np.ndarray, scenario: ScenarioType, settings: SimulationSettings) -> np.ndarray:
    """Reference velocity in m/s on ``t``."""
    if scenario in (ScenarioType.RAMP, ScenarioType.COMBINED_CHANGES):
        frac = (t - t[0]) / (t[-1] - t[0])
        return settings.v_start + (settings.v_end - settings.v_start) * frac
    return np.full(t.shape, float(settings.v_end))


def reflectivity_profile(t: np.ndarray, scenario: ScenarioType, settings: SimulationSettings) -> np.ndarray:
    """Relative return intensity on ``t`` (piecewise constant over thirds)."""
    if scenario not in (ScenarioType.TARGET_REFLECTIVITY_CHANGE, ScenarioType.COMBINED_CHANGES):
        return np.ones(t.shape)
    n = t.size
    third = np.minimum(np.arange(n) * 3 // n, 2)
    return np.asarray(settings.reflectivity_steps, dtype=np.float64)[third]


def simulate_dataset(
    scenario: ScenarioType = ScenarioType.RAMP,
    *,
    settings: Optional[SimulationSettings] = None,
    constants: Optional[PhysicalConstants] = None,
) -> SimulationDataset:
    """Build detector traces, reference velocity and intensity variations for one scenario."""
    settings = settings or SimulationSettings()
    constants = constants or PhysicalConstants()
    scenario = ScenarioType(scenario)

    if settings.n_samples < 2:
        raise ValueError("n_samples must be >= 2")
    if not settings.dt > 0.0:
        raise ValueError("dt must be > 0")

    t = np.arange(settings.n_samples, dtype=np.float64) * settings.dt
    v = velocity_profile(t, scenario, settings)
    r = reflectivity_profile(t, scenario, settings)

    displacement = cumulative_trapezoid(v, t, initial=0.0)
    phase = 4.0 * np.pi * displacement / constants.lambda_sig
    if settings.heterodyne:
        phase = phase + 2.0 * np.pi * constants.f_offset * t

    rng = np.random.default_rng(settings.seed)
    traces = []
    for k in range(3):
        s = r * (settings.dc_level + settings.modulation_depth * np.cos(phase - 2.0 * np.pi * k / 3.0))
        if settings.noise_std > 0.0:
            s = s + rng.normal(0.0, settings.noise_std, size=s.shape)
        traces.append(s)

    signals = SignalTriple(t=t, signal1=traces[0], signal2=traces[1], signal3=traces[2])
    return SimulationDataset(
        signals=signals,
        constants=constants,
        scenario=scenario,
        v_t=v,
        intensity_variations=r,
    )
