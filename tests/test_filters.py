"""Unit tests for the noise-reduction, detrend and band-pass stages."""

from __future__ import annotations

import numpy as np
import pytest

from camera_ppg.filters import (
    BandpassFilter,
    DetrendMethod,
    MedianFilter,
    NoiseReductionPipeline,
    SavitzkyGolayFilter,
    SignalDetrend,
    TemporalAverageFilter,
)
from camera_ppg.filters.bandpass import bandpass_response, next_power_of_two


# ---------------------------------------------------------------------------
# TemporalAverageFilter
# ---------------------------------------------------------------------------

class TestTemporalAverageFilter:

    def test_warm_up_averages_available_samples(self):
        f = TemporalAverageFilter(3)
        assert f.add_and_get(3.0) == pytest.approx(3.0)
        assert f.add_and_get(6.0) == pytest.approx(4.5)
        assert f.add_and_get(9.0) == pytest.approx(6.0)

    def test_window_slides(self):
        f = TemporalAverageFilter(3)
        for v in (1.0, 2.0, 3.0):
            f.add_and_get(v)
        assert f.add_and_get(10.0) == pytest.approx(5.0)   # (2 + 3 + 10) / 3

    def test_reset(self):
        f = TemporalAverageFilter(3)
        f.add_and_get(100.0)
        f.reset()
        assert f.add_and_get(1.0) == pytest.approx(1.0)


# ---------------------------------------------------------------------------
# MedianFilter / SavitzkyGolayFilter
# ---------------------------------------------------------------------------

class TestMedianFilter:

    def test_removes_isolated_spike(self):
        signal = np.array([1.0, 1.0, 1.0, 50.0, 1.0, 1.0, 1.0])
        out = MedianFilter(3).filter(signal)
        np.testing.assert_array_equal(out, np.ones(7))

    def test_edges_use_clamped_window(self):
        signal = np.array([5.0, 1.0, 2.0, 3.0, 0.0])
        out = MedianFilter(3).filter(signal)
        # Edge windows hold two samples; the upper one of the sorted pair wins
        assert out[0] == 5.0
        assert out[-1] == 3.0
        np.testing.assert_array_equal(out[1:4], [2.0, 2.0, 2.0])

    def test_short_signal_unchanged(self):
        signal = np.array([1.0, 9.0])
        np.testing.assert_array_equal(MedianFilter(3).filter(signal), signal)


class TestSavitzkyGolayFilter:

    @pytest.mark.parametrize("window", [5, 7, 9])
    def test_kernels_are_normalised(self, window):
        assert SavitzkyGolayFilter.KERNELS[window].sum() == pytest.approx(1.0)

    def test_kernels_are_read_only(self):
        with pytest.raises(ValueError):
            SavitzkyGolayFilter.KERNELS[7][0] = 1.0

    def test_unknown_window_falls_back_to_seven(self):
        assert SavitzkyGolayFilter(11).coefficients is SavitzkyGolayFilter.KERNELS[7]

    @pytest.mark.parametrize("window", [5, 7, 9])
    def test_preserves_quadratic(self, window):
        x = np.arange(40, dtype=np.float64)
        signal = 0.5 * x ** 2 - 3 * x + 2
        out = SavitzkyGolayFilter(window).filter(signal)
        np.testing.assert_allclose(out, signal, atol=1e-8)

    def test_edges_pass_through(self):
        rng = np.random.default_rng(0)
        signal = rng.normal(size=30)
        out = SavitzkyGolayFilter(7).filter(signal)
        np.testing.assert_array_equal(out[:3], signal[:3])
        np.testing.assert_array_equal(out[-3:], signal[-3:])
        assert not np.allclose(out[3:-3], signal[3:-3])

    def test_short_signal_unchanged(self):
        signal = np.arange(5, dtype=np.float64)
        np.testing.assert_array_equal(SavitzkyGolayFilter(7).filter(signal), signal)


class TestNoiseReductionPipeline:

    def test_spike_removed_and_length_kept(self):
        signal = np.full(50, 10.0)
        signal[25] = 80.0
        out = NoiseReductionPipeline().process(signal)
        assert out.shape == signal.shape
        np.testing.assert_allclose(out, 10.0)


# ---------------------------------------------------------------------------
# SignalDetrend
# ---------------------------------------------------------------------------

class TestSignalDetrend:

    def test_linear_trend_removed(self):
        i = np.arange(100, dtype=np.float64)
        residual = SignalDetrend().remove(3 * i + 7, DetrendMethod.LINEAR)
        np.testing.assert_allclose(residual, 0.0, atol=1e-9)

    def test_linear_is_default(self):
        i = np.arange(20, dtype=np.float64)
        np.testing.assert_allclose(SignalDetrend().remove(-2 * i + 1), 0.0, atol=1e-9)

    def test_linear_keeps_oscillation(self):
        i = np.arange(300, dtype=np.float64)
        wave = np.sin(2 * np.pi * i / 25)
        residual = SignalDetrend().remove(wave + 0.05 * i + 100)
        np.testing.assert_allclose(residual, wave, atol=0.1)

    def test_constant_removes_mean(self):
        signal = np.array([1.0, 2.0, 3.0, 10.0])
        out = SignalDetrend().remove(signal, DetrendMethod.CONSTANT)
        assert out.mean() == pytest.approx(0.0)
        np.testing.assert_allclose(out, signal - 4.0)

    def test_degenerate_inputs_unchanged(self):
        d = SignalDetrend()
        np.testing.assert_array_equal(d.remove(np.array([5.0])), [5.0])
        assert d.remove(np.array([]), DetrendMethod.CONSTANT).size == 0


# ---------------------------------------------------------------------------
# BandpassFilter
# ---------------------------------------------------------------------------

class TestBandpassFilter:

    def test_next_power_of_two(self):
        assert next_power_of_two(1) == 1
        assert next_power_of_two(300) == 512
        assert next_power_of_two(512) == 512

    def test_response_shape(self):
        freqs = np.array([0.0, 0.3, 0.5, 1.0, 2.0, 3.5, 5.0])
        gain = bandpass_response(freqs, 0.5, 3.5)
        assert gain[0] == 0.0
        assert gain[1] == 0.0                      # below 0.5 × 0.7
        assert gain[2] == pytest.approx(0.5)       # midpoint of the low ramp
        assert gain[3] == pytest.approx(1.0)
        assert gain[4] == pytest.approx(1.0)
        assert gain[5] == pytest.approx(0.5)       # midpoint of the high ramp
        assert gain[6] == 0.0                      # above 3.5 × 1.3

    def test_length_preserved(self):
        out = BandpassFilter(30).bandpass(np.random.default_rng(1).normal(size=300), 0.5, 3.5)
        assert out.shape == (300,)

    def test_short_signal_returned(self):
        signal = np.array([1.0, 2.0, 3.0])
        np.testing.assert_array_equal(BandpassFilter(30).bandpass(signal, 0.5, 3.5), signal)
        assert BandpassFilter(30).bandpass(np.array([]), 0.5, 3.5).size == 0

    def test_dc_offset_removed(self):
        t = np.arange(300) / 30.0
        wave = np.sin(2 * np.pi * 1.2 * t)
        bp = BandpassFilter(30)
        np.testing.assert_allclose(
            bp.bandpass(wave + 50.0, 0.5, 3.5),
            bp.bandpass(wave, 0.5, 3.5),
            atol=1e-9,
        )

    def test_rejects_high_frequency_keeps_pulse(self):
        t = np.arange(300) / 30.0
        pulse = np.sin(2 * np.pi * 1.2 * t)
        flicker = 0.5 * np.sin(2 * np.pi * 12.0 * t)
        out = BandpassFilter(30).bandpass(pulse + flicker, 0.5, 3.5)
        interior = slice(75, 225)
        assert np.max(np.abs(out[interior] - pulse[interior])) < 0.2
