"""Recomputation controller between the numerical core and a UI layer.

Design principle:
  - ``initialize`` runs the quadrature pipeline once and the spectrogram
    tracker once. Quadrature results never depend on STFT parameters and are
    not recomputed afterwards.
  - STFT parameter edits reach the controller through the ParameterStore
    subscription. With auto-update enabled the tracker re-runs immediately;
    otherwise the spectrogram is marked stale until ``force_update``.
  - A recomputation is all-or-nothing: the SpectrogramResult is replaced
    wholesale or, on a degenerate transform, the previous one is kept.

All calls are synchronous and must be serialised by the caller.
"""

from __future__ import annotations

import enum
import logging
from typing import Callable, List, Optional, Union

from pdv_analyzer.analysis.parameters import ParameterStore
from pdv_analyzer.analysis.quadrature import demodulate
from pdv_analyzer.analysis.spectrogram import track_spectrogram
from pdv_analyzer.errors import DegenerateTransform
from pdv_analyzer.models.config import STFTConfig
from pdv_analyzer.models.results import QuadratureResult, SpectrogramResult
from pdv_analyzer.models.signals import PhysicalConstants, ScenarioType, SignalTriple


logger = logging.getLogger(__name__)

AutoUpdate = Union[bool, Callable[[], bool]]


class ControllerState(enum.Enum):
    IDLE = "idle"
    RECOMPUTING = "recomputing"


class AnalysisController:
    """Owns the current QuadratureResult and SpectrogramResult.

    Parameters
    ----------
    store:
        Parameter store holding the live STFT configuration. The controller
        subscribes to it on construction.
    auto_update:
        Either a bool or a zero-argument callable returning the UI's
        auto-update flag. Read on every parameter change.
    """

    def __init__(self, store: Optional[ParameterStore] = None, *, auto_update: AutoUpdate = True) -> None:
        self.store = store if store is not None else ParameterStore()
        self.auto_update = auto_update
        self.state = ControllerState.IDLE
        self.stale = False
        self.recompute_count = 0

        self._signals: Optional[SignalTriple] = None
        self._constants: Optional[PhysicalConstants] = None
        self._quadrature: Optional[QuadratureResult] = None
        self._spectrogram: Optional[SpectrogramResult] = None
        self._warnings: List[str] = []
        self._degenerate_warning: Optional[str] = None

        self.store.subscribe(self.on_parameter_changed)

    # -------------------------
    # Read-only views
    # -------------------------
    @property
    def quadrature(self) -> Optional[QuadratureResult]:
        return self._quadrature

    @property
    def spectrogram(self) -> Optional[SpectrogramResult]:
        return self._spectrogram

    @property
    def config(self) -> STFTConfig:
        return self.store.config

    @property
    def warnings(self) -> tuple[str, ...]:
        if self._degenerate_warning is None:
            return tuple(self._warnings)
        return tuple(self._warnings) + (self._degenerate_warning,)

    @property
    def initialized(self) -> bool:
        return self._quadrature is not None

    def auto_update_enabled(self) -> bool:
        flag = self.auto_update
        return bool(flag()) if callable(flag) else bool(flag)

    # -------------------------
    # Transitions
    # -------------------------
    def initialize(
        self,
        signals: SignalTriple,
        constants: PhysicalConstants,
        scenario: ScenarioType = ScenarioType.RAMP,
        config: Optional[STFTConfig] = None,
    ) -> None:
        """Run both pipelines once. Input errors propagate and leave no partial result."""
        self.state = ControllerState.RECOMPUTING
        try:
            quadrature = demodulate(signals, constants, scenario)
        finally:
            self.state = ControllerState.IDLE

        self._signals = signals
        self._constants = constants
        self._quadrature = quadrature
        self._spectrogram = None
        self._warnings = list(signals.warnings)
        self._degenerate_warning = None

        if config is not None:
            # Silence the subscription while loading; the tracker runs once below.
            self.store.unsubscribe(self.on_parameter_changed)
            try:
                self.store.load(config)
            finally:
                self.store.subscribe(self.on_parameter_changed)
            if self.store.last_error is not None:
                self._warnings.append(str(self.store.last_error))

        self._recompute_spectrogram()

    def from_dataset(self, dataset) -> None:
        """Initialise from a :class:`~pdv_analyzer.ingest.dataset.SimulationDataset`."""
        self.initialize(dataset.signals, dataset.constants, dataset.scenario)
        self._warnings.extend(w for w in dataset.warnings if w not in self._warnings)

    def on_parameter_changed(self, config: Optional[STFTConfig] = None) -> None:
        if not self.initialized:
            return
        if self.auto_update_enabled():
            self._recompute_spectrogram()
        else:
            self.stale = True

    def force_update(self) -> None:
        if not self.initialized:
            raise RuntimeError("Controller is not initialized.")
        self._recompute_spectrogram()

    def close(self) -> None:
        self.store.unsubscribe(self.on_parameter_changed)

    # -------------------------
    # Internals
    # -------------------------
    def _recompute_spectrogram(self) -> None:
        assert self._signals is not None and self._constants is not None
        config = self.store.config
        self.state = ControllerState.RECOMPUTING
        try:
            result = track_spectrogram(self._signals, self._constants, config)
        except DegenerateTransform as exc:
            msg = f"Spectrogram not updated: {exc}"
            logger.warning(msg)
            self._degenerate_warning = msg
            self.stale = True
            return
        finally:
            self.state = ControllerState.IDLE

        self._spectrogram = result
        self._degenerate_warning = None
        self.stale = False
        self.recompute_count += 1
