"""Tests for the STFT parameter store.

Covers:
- power-of-two quantisation and clamping
- idempotence of set()
- step() monotonicity and the nfft floor at the window size
- rejected edits (window type, non-numeric values, unknown names)
- change notification
"""

from __future__ import annotations

import math

import numpy as np
import pytest

from pdv_analyzer.analysis.parameters import ParameterStore, floor_power_of_two, quantize
from pdv_analyzer.errors import InvalidParameterEdit
from pdv_analyzer.models.config import STFTConfig


RAW_VALUES = [-5, 0, 1, 15.9, 16, 17, 100.7, 255, 256, 257, 1000, 4095, 4096, 5000, 8191, 8192, 9000, 1e9]

WINDOW_SIZES = {2**k for k in range(4, 13)}
NFFTS = {2**k for k in range(4, 14)}


def test_floor_power_of_two() -> None:
    assert floor_power_of_two(1) == 1
    assert floor_power_of_two(2) == 2
    assert floor_power_of_two(3) == 2
    assert floor_power_of_two(1023.9) == 512
    assert floor_power_of_two(1024) == 1024
    assert floor_power_of_two(4096) == 4096
    with pytest.raises(ValueError):
        floor_power_of_two(0.5)


def test_quantize_unknown_param_passes_through() -> None:
    sentinel = object()
    assert quantize("colormap", sentinel) is sentinel


@pytest.mark.parametrize("x", RAW_VALUES)
def test_set_is_idempotent(x: float) -> None:
    for param in ("window_size", "nfft", "overlap_percent"):
        store = ParameterStore()
        once = getattr(store.set(param, x), param)
        twice = getattr(store.set(param, once), param)
        assert once == twice


@pytest.mark.parametrize("x", RAW_VALUES + [-1e9, 47.5, 95.0, 96.0])
def test_bounds_enforcement(x: float) -> None:
    store = ParameterStore()
    assert 0.0 <= store.set("overlap_percent", x).overlap_percent <= 95.0
    assert store.set("window_size", x).window_size in WINDOW_SIZES
    assert store.set("nfft", x).nfft in NFFTS


def test_set_examples() -> None:
    store = ParameterStore()
    assert store.set("window_size", 1000).window_size == 512
    assert store.set("window_size", 3).window_size == 16
    assert store.set("window_size", 10_000).window_size == 4096
    assert store.set("nfft", 10_000).nfft == 8192
    assert store.set("overlap_percent", 37.5).overlap_percent == 37.5
    assert store.set("overlap_percent", 120).overlap_percent == 95.0


def test_camel_case_aliases() -> None:
    store = ParameterStore()
    assert store.set("windowSize", 700).window_size == 512
    assert store.set("overlapPercent", -3).overlap_percent == 0.0
    assert store.step("windowSize", "up").window_size == 1024
    assert store.set("windowType", "blackman").window_type == "blackman"


def test_step_window_size_monotonic_and_clamped() -> None:
    store = ParameterStore(STFTConfig(window_size=16))
    assert store.step("window_size", "down").window_size == 16

    prev = store.config.window_size
    for _ in range(12):
        cur = store.step("window_size", "up").window_size
        assert cur >= prev
        prev = cur
    assert prev == 4096

    for _ in range(12):
        cur = store.step("window_size", "down").window_size
        assert cur <= prev
        prev = cur
    assert prev == 16


def test_step_nfft_floor_is_current_window_size() -> None:
    store = ParameterStore(STFTConfig(window_size=256, nfft=1024))
    assert store.step("nfft", "down").nfft == 512
    assert store.step("nfft", "down").nfft == 256
    assert store.step("nfft", "down").nfft == 256
    assert store.step("nfft", "up").nfft == 512

    store.set("nfft", 8192)
    assert store.step("nfft", "up").nfft == 8192


def test_set_nfft_below_window_size_is_allowed() -> None:
    store = ParameterStore(STFTConfig(window_size=1024, nfft=1024))
    assert store.set("nfft", 64).nfft == 64


def test_step_nfft_down_never_increases_nfft() -> None:
    store = ParameterStore(STFTConfig(window_size=1024, nfft=64))
    assert store.step("nfft", "down").nfft == 64
    assert store.last_error is None


def test_step_overlap() -> None:
    store = ParameterStore(STFTConfig(overlap_percent=75.0))
    assert store.step("overlap_percent", "up").overlap_percent == 80.0
    store.set("overlap_percent", 93.0)
    assert store.step("overlap_percent", "up").overlap_percent == 95.0
    store.set("overlap_percent", 2.0)
    assert store.step("overlap_percent", "down").overlap_percent == 0.0


def test_invalid_window_type_rejected() -> None:
    store = ParameterStore(STFTConfig(window_type="hamming"))
    cfg = store.set_window_type("invalid")
    assert cfg.window_type == "hamming"
    assert store.config.window_type == "hamming"
    assert isinstance(store.last_error, InvalidParameterEdit)
    assert store.last_error.param == "window_type"


def test_window_type_normalisation() -> None:
    store = ParameterStore()
    assert store.set_window_type("Kaiser").window_type == "kaiser"
    assert store.set_window_type("hann").window_type == "hanning"
    assert store.last_error is None


@pytest.mark.parametrize("bad", ["abc", None, float("nan"), float("inf"), True, [256]])
def test_non_numeric_edit_keeps_last_valid_value(bad) -> None:
    store = ParameterStore()
    before = store.config
    assert store.set("window_size", bad) == before
    assert isinstance(store.last_error, InvalidParameterEdit)

    store.set("window_size", 64)
    assert store.last_error is None
    assert store.config.window_size == 64


def test_unknown_parameter_and_direction_rejected() -> None:
    store = ParameterStore()
    before = store.config
    store.set("gain", 3)
    assert isinstance(store.last_error, InvalidParameterEdit)
    store.step("window_size", "sideways")
    assert isinstance(store.last_error, InvalidParameterEdit)
    store.step("window_type", "up")
    assert isinstance(store.last_error, InvalidParameterEdit)
    assert store.config == before


def test_numeric_strings_are_accepted() -> None:
    store = ParameterStore()
    assert store.set("nfft", "2000").nfft == 1024


def test_load_revalidates_every_field() -> None:
    store = ParameterStore()
    cfg = store.load(STFTConfig(window_type="HAMMING", window_size=300, overlap_percent=120.0, nfft=20000))
    assert cfg == STFTConfig(window_type="hamming", window_size=256, overlap_percent=95.0, nfft=8192)

    store.load(STFTConfig(window_type="triangle"))
    assert isinstance(store.last_error, InvalidParameterEdit)
    assert store.config == cfg


def test_constructor_falls_back_to_default_on_invalid_config() -> None:
    store = ParameterStore(STFTConfig(window_type="rect"))
    assert store.config == STFTConfig()
    assert isinstance(store.last_error, InvalidParameterEdit)
    assert store.last_error.param == "window_type"


def test_subscribers_notified_only_on_change() -> None:
    store = ParameterStore()
    seen = []
    store.subscribe(seen.append)

    store.set("window_size", 128)
    store.set("window_size", 128)  # no change
    store.set("window_size", 150)  # quantises to 128, no change
    store.set_window_type("bogus")  # rejected
    store.step("overlap_percent", "up")

    assert [c.window_size for c in seen] == [128, 128]
    assert seen[-1].overlap_percent == 80.0

    store.unsubscribe(seen.append)
    store.set("window_size", 64)
    assert len(seen) == 2


def test_overlap_samples_rounding() -> None:
    assert STFTConfig(window_size=16, overlap_percent=95.0).overlap_samples == 15
    assert STFTConfig(window_size=256, overlap_percent=75.0).overlap_samples == 192
    assert STFTConfig(window_size=16, overlap_percent=50.0).hop_samples == 8
    assert STFTConfig(window_size=16, overlap_percent=0.0).hop_samples == 16
    # 0.5 rounds away from zero: 16 * 3.125 / 100 = 0.5
    assert STFTConfig(window_size=16, overlap_percent=3.125).overlap_samples == 1
    assert math.isclose(STFTConfig().overlap_percent, 75.0)
    assert np.isfinite(STFTConfig().hop_samples)
