import unittest

import numpy as np

from pdv_analyzer.analysis.controller import AnalysisController
from pdv_analyzer.analysis.parameters import ParameterStore
from pdv_analyzer.models.signals import SPEED_OF_LIGHT_M_PER_S, PhysicalConstants, ScenarioType, SignalTriple


class TestEndToEnd(unittest.TestCase):
    """Fixed 50 MHz beat, 1 GS/s, 1000 samples, default STFT configuration."""

    def setUp(self):
        n = 1000
        dt = 1e-9
        self.f_beat = 50e6
        t = np.arange(n, dtype=float) * dt
        phi = 2.0 * np.pi * self.f_beat * t
        self.signals = SignalTriple(
            t=t,
            signal1=np.cos(phi),
            signal2=np.cos(phi - 2.0 * np.pi / 3.0),
            signal3=np.cos(phi + 2.0 * np.pi / 3.0),
        )
        self.constants = PhysicalConstants(lambda_sig=1550.12e-9, lambda_ref=1550.15e-9)
        self.ctrl = AnalysisController(ParameterStore())
        self.ctrl.initialize(self.signals, self.constants, ScenarioType.RAMP)

    def test_frequency_offset(self):
        expected = SPEED_OF_LIGHT_M_PER_S * (1.0 / 1550.12e-9 - 1.0 / 1550.15e-9)
        self.assertAlmostEqual(self.constants.f_offset / expected, 1.0, places=6)
        self.assertGreater(self.constants.f_offset, 0.0)

    def test_raw_velocity_is_flat(self):
        quad = self.ctrl.quadrature
        expected = 0.5 * self.constants.lambda_sig * self.f_beat
        self.assertTrue(np.allclose(quad.raw_velocity, expected, rtol=1e-6))
        self.assertTrue(np.allclose(quad.smoothed_velocity, expected, rtol=1e-6))
        self.assertLess(np.ptp(quad.raw_velocity) / expected, 1e-6)

    def test_spectrogram_tracks_beat_within_one_bin(self):
        spec = self.ctrl.spectrogram
        self.assertGreater(spec.n_frames, 1)
        self.assertTrue(np.all(np.abs(spec.f_measured - self.f_beat) <= spec.bin_width_hz))
        self.assertEqual(self.signals.warnings, ())


if __name__ == "__main__":
    unittest.main()
