"""Dataset interface between an external loader and the analysis core.

A loader (MAT-file reader, HDF5 reader, hand-built dict, ...) hands over a
mapping of named arrays/scalars, or a DataFrame whose ``attrs`` carry the
scalars. This module validates it and substitutes documented defaults:

- ``lambda_sig``: 1550.120 nm
- ``lambda_ref``: 1550.150 nm
- ``simulation_type``: 1 (ramp)

Every substitution is recorded in ``SimulationDataset.warnings``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

import numpy as np
import pandas as pd

from pdv_analyzer.errors import InputShapeError, MissingConstantError
from pdv_analyzer.models.signals import (
    DEFAULT_LAMBDA_REF_M,
    DEFAULT_LAMBDA_SIG_M,
    SIGNAL_COLUMNS,
    PhysicalConstants,
    ScenarioType,
    SignalTriple,
)


logger = logging.getLogger(__name__)

CONSTANT_DEFAULTS: Dict[str, Any] = {
    "lambda_sig": DEFAULT_LAMBDA_SIG_M,
    "lambda_ref": DEFAULT_LAMBDA_REF_M,
    "simulation_type": int(ScenarioType.RAMP),
}


@dataclass(frozen=True)
class SimulationDataset:
    """Validated inputs for one analysis session.

    ``v_t`` is the reference velocity (m/s) on ``signals.t`` and is only used
    for validation. ``intensity_variations`` is passed through unmodified.
    """

    signals: SignalTriple
    constants: PhysicalConstants
    scenario: ScenarioType
    v_t: Optional[np.ndarray] = None
    intensity_variations: Optional[Any] = None
    warnings: Tuple[str, ...] = ()


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    return isinstance(value, np.ndarray) and value.size == 0


def _scalar(value: Any, key: str) -> float:
    arr = np.ravel(np.asarray(value, dtype=np.float64))
    if arr.size != 1:
        raise ValueError(f"'{key}' must be a scalar, got {arr.size} values")
    return float(arr[0])


def _vector(source: Mapping[str, Any], key: str) -> np.ndarray:
    if key not in source or _is_missing(source[key]):
        raise KeyError(f"Missing required dataset entry '{key}'")
    return np.ravel(np.asarray(source[key], dtype=np.float64))


def _constant(
    source: Mapping[str, Any],
    key: str,
    *,
    use_defaults: bool,
    warnings: List[str],
) -> Any:
    value = source.get(key)
    if not _is_missing(value):
        return value
    if not use_defaults:
        raise MissingConstantError(f"Missing required constant '{key}'")
    default = CONSTANT_DEFAULTS[key]
    msg = f"'{key}' not found, using default {default!r}"
    logger.warning(msg)
    warnings.append(msg)
    return default


def load_dataset(
    source: Union[Mapping[str, Any], pd.DataFrame],
    *,
    use_defaults: bool = True,
) -> SimulationDataset:
    """Build a :class:`SimulationDataset` from loader output.

    Parameters
    ----------
    source:
        Mapping with ``t``, ``signal1``, ``signal2``, ``signal3`` and optional
        ``lambda_sig``, ``lambda_ref``, ``simulation_type``, ``v_t``,
        ``intensity_variations``. A DataFrame provides the arrays as columns
        and the scalars through ``DataFrame.attrs``.
    use_defaults:
        If False, a missing constant raises :class:`MissingConstantError`
        instead of falling back to its default.

    Raises
    ------
    KeyError
        A signal or the time axis is absent.
    InputShapeError
        Lengths differ or fewer than 2 samples.
    """
    if isinstance(source, pd.DataFrame):
        mapping: Dict[str, Any] = dict(source.attrs)
        for col in source.columns:
            mapping[str(col)] = source[col].to_numpy()
    else:
        mapping = dict(source)

    warnings: List[str] = []

    signals = SignalTriple(
        t=_vector(mapping, "t"),
        signal1=_vector(mapping, SIGNAL_COLUMNS[0]),
        signal2=_vector(mapping, SIGNAL_COLUMNS[1]),
        signal3=_vector(mapping, SIGNAL_COLUMNS[2]),
    )
    warnings.extend(signals.warnings)

    lambda_sig = _scalar(_constant(mapping, "lambda_sig", use_defaults=use_defaults, warnings=warnings), "lambda_sig")
    lambda_ref = _scalar(_constant(mapping, "lambda_ref", use_defaults=use_defaults, warnings=warnings), "lambda_ref")
    constants = PhysicalConstants(lambda_sig=lambda_sig, lambda_ref=lambda_ref)

    code = _constant(mapping, "simulation_type", use_defaults=use_defaults, warnings=warnings)
    scenario = ScenarioType.from_code(_scalar(code, "simulation_type"))
    if scenario is ScenarioType.UNKNOWN:
        warnings.append(f"Unrecognised simulation_type {code!r}, smoothing uses the base window")

    v_t = None
    if not _is_missing(mapping.get("v_t")):
        v_t = np.ravel(np.asarray(mapping["v_t"], dtype=np.float64))
        if v_t.size != signals.n_samples:
            raise InputShapeError(
                f"v_t length {v_t.size} does not match signal length {signals.n_samples}"
            )

    return SimulationDataset(
        signals=signals,
        constants=constants,
        scenario=scenario,
        v_t=v_t,
        intensity_variations=mapping.get("intensity_variations"),
        warnings=tuple(warnings),
    )
