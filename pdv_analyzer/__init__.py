"""PDV Analyzer -- velocity extraction from three-detector heterodyne interferometer traces.

This package provides tools for:
- Converting three 120-degree phase-shifted detector traces into I/Q components
- Unwrapping the I/Q phase and deriving instantaneous frequency and velocity
- Scenario-dependent smoothing of the quadrature velocity
- Tracking the dominant beat frequency with a configurable STFT (photonic
  Doppler velocimetry, PDV) as an independent velocity estimate
- Validating both estimates against a known reference velocity

Key principles:
- Results are immutable snapshots, replaced wholesale on recomputation
- STFT parameters live in an explicitly owned ParameterStore, never in globals
- The numerical core has no UI coupling; a UI layer drives it through
  AnalysisController

Main subpackages:
- analysis: Quadrature demodulation, STFT tracking, parameter store, controller
- ingest: Dataset loading interface and simulated datasets
- models: Data models (SignalTriple, PhysicalConstants, STFTConfig, results)
- validation: Comparison against a reference velocity trace
"""

__all__ = []
