"""STFT parameter store with clamping, power-of-two quantisation and change notification.

Every edit is projected onto the valid domain:

- ``window_size``: clamp to [16, 4096], then round down to a power of two
- ``nfft``: clamp to [16, 8192], then round down to a power of two
- ``overlap_percent``: clamp to [0, 95]
- ``window_type``: one of hanning / hamming / blackman / kaiser

Rejected edits keep the previous configuration and are reported through
:attr:`ParameterStore.last_error`; they never raise.
"""

from __future__ import annotations

import logging
import math
from dataclasses import replace
from typing import Callable, List, Optional

from pdv_analyzer.errors import InvalidParameterEdit
from pdv_analyzer.models.config import (
    NFFT_MAX,
    NFFT_MIN,
    OVERLAP_MAX,
    OVERLAP_MIN,
    OVERLAP_STEP,
    WINDOW_SIZE_MAX,
    WINDOW_SIZE_MIN,
    WINDOW_TYPES,
    STFTConfig,
)


logger = logging.getLogger(__name__)

ConfigCallback = Callable[[STFTConfig], None]

_ALIASES = {
    "windowType": "window_type",
    "windowSize": "window_size",
    "overlapPercent": "overlap_percent",
    "nfft": "nfft",
}

_WINDOW_ALIASES = {"hann": "hanning"}

_NUMERIC_PARAMS = ("window_size", "overlap_percent", "nfft")


def floor_power_of_two(x: float) -> int:
    """Largest power of two ``<= x`` (``x`` must be >= 1)."""
    if not x >= 1.0:
        raise ValueError(f"x must be >= 1, got {x!r}")
    # frexp: x = m * 2**e with 0.5 <= m < 1, so floor(log2(x)) == e - 1 exactly.
    _, e = math.frexp(float(x))
    return 1 << (e - 1)


def _clamp(x: float, lo: float, hi: float) -> float:
    return min(max(x, lo), hi)


def canonical_param(param: str) -> str:
    return _ALIASES.get(param, param)


def quantize(param: str, value):
    """Project a raw value onto the valid domain of ``param``.

    Unknown parameter names pass through unchanged.
    """
    param = canonical_param(param)
    if param == "window_size":
        return floor_power_of_two(_clamp(float(value), WINDOW_SIZE_MIN, WINDOW_SIZE_MAX))
    if param == "nfft":
        return floor_power_of_two(_clamp(float(value), NFFT_MIN, NFFT_MAX))
    if param == "overlap_percent":
        return float(_clamp(float(value), OVERLAP_MIN, OVERLAP_MAX))
    return value


def normalize_window_type(name: object) -> Optional[str]:
    """Canonical window name, or None if ``name`` is not a supported window."""
    if not isinstance(name, str):
        return None
    key = name.strip().lower()
    key = _WINDOW_ALIASES.get(key, key)
    return key if key in WINDOW_TYPES else None


def _as_number(value: object) -> Optional[float]:
    if isinstance(value, bool):
        return None
    try:
        x = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None
    return x if math.isfinite(x) else None


class ParameterStore:
    """Owns the live :class:`~pdv_analyzer.models.config.STFTConfig`.

    Subscribers are called with the new configuration after every accepted
    edit that changes it. The store is not thread-safe; callers serialise
    access.
    """

    def __init__(self, config: Optional[STFTConfig] = None) -> None:
        self._config = STFTConfig()
        self._subscribers: List[ConfigCallback] = []
        self.last_error: Optional[InvalidParameterEdit] = None
        if config is not None:
            self.load(config)

    @property
    def config(self) -> STFTConfig:
        return self._config

    def subscribe(self, callback: ConfigCallback) -> None:
        self._subscribers.append(callback)

    def unsubscribe(self, callback: ConfigCallback) -> None:
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    # -------------------------
    # Edits
    # -------------------------
    def set(self, param: str, value) -> STFTConfig:
        """Clamp, quantise and store one parameter. Returns the live configuration."""
        name = canonical_param(param)
        if name == "window_type":
            return self.set_window_type(value)
        if name not in _NUMERIC_PARAMS:
            return self._reject(param, value, "unknown parameter")

        x = _as_number(value)
        if x is None:
            return self._reject(param, value, "not a finite number")
        return self._commit(replace(self._config, **{name: quantize(name, x)}))

    def step(self, param: str, direction: str) -> STFTConfig:
        """Double/halve ``window_size`` or ``nfft``, or move ``overlap_percent`` by 5."""
        name = canonical_param(param)
        d = str(direction).strip().lower()
        if d not in ("up", "down"):
            return self._reject(param, direction, "direction must be 'up' or 'down'")

        cfg = self._config
        if name == "window_size":
            target = cfg.window_size * 2 if d == "up" else cfg.window_size / 2
        elif name == "nfft":
            # Halving nfft stops at the current window size and never raises nfft.
            target = cfg.nfft * 2 if d == "up" else min(cfg.nfft, max(cfg.nfft / 2, cfg.window_size))
        elif name == "overlap_percent":
            target = cfg.overlap_percent + (OVERLAP_STEP if d == "up" else -OVERLAP_STEP)
        else:
            return self._reject(param, direction, "parameter cannot be stepped")
        return self.set(name, target)

    def set_window_type(self, name: object) -> STFTConfig:
        window = normalize_window_type(name)
        if window is None:
            return self._reject("window_type", name, f"must be one of {', '.join(WINDOW_TYPES)}")
        return self._commit(replace(self._config, window_type=window))

    def load(self, config: STFTConfig) -> STFTConfig:
        """Load a complete configuration; every field is re-validated."""
        try:
            new = self._validated(config)
        except InvalidParameterEdit as exc:
            return self._reject(exc.param, exc.value, exc.reason)
        return self._commit(new)

    # -------------------------
    # Internals
    # -------------------------
    def _validated(self, config: STFTConfig) -> STFTConfig:
        window = normalize_window_type(config.window_type)
        if window is None:
            raise InvalidParameterEdit("window_type", config.window_type, "unsupported window")
        values = {}
        for name in _NUMERIC_PARAMS:
            raw = getattr(config, name)
            x = _as_number(raw)
            if x is None:
                raise InvalidParameterEdit(name, raw, "not a finite number")
            values[name] = quantize(name, x)
        return STFTConfig(window_type=window, **values)

    def _commit(self, new: STFTConfig) -> STFTConfig:
        self.last_error = None
        if new == self._config:
            return self._config
        self._config = new
        logger.debug("STFT configuration changed: %s", new)
        for callback in list(self._subscribers):
            callback(new)
        return self._config

    def _reject(self, param: str, value: object, reason: str) -> STFTConfig:
        self.last_error = InvalidParameterEdit(param, value, reason)
        logger.warning("%s; keeping %s", self.last_error, self._config)
        return self._config
