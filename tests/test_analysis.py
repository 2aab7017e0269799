"""Unit tests for HeartRateCalculator and HRVAnalyzer."""

from __future__ import annotations

import numpy as np
import pytest

from camera_ppg.analysis import HeartRateCalculator, HeartRateMetrics, HRVAnalyzer, HRVMetrics
from camera_ppg.analysis.heart_rate import remove_outliers_iqr
from camera_ppg.peaks import PeakDetector, PeakMethod
from camera_ppg.processor import PPGProcessor


def _peaks_from_intervals(intervals_s, fs):
    return np.concatenate(([0], np.cumsum(np.round(np.asarray(intervals_s) * fs)))).astype(int)


# ---------------------------------------------------------------------------
# HeartRateCalculator
# ---------------------------------------------------------------------------

class TestHeartRateCalculator:

    def test_outlier_interval_excluded(self):
        hr = HeartRateCalculator(100).calculate(
            _peaks_from_intervals([0.8, 0.81, 0.79, 2.5, 0.80], fs=100)
        )
        assert hr.is_valid
        assert hr.mean_bpm == pytest.approx(75.0, abs=0.5)
        assert len(hr.instantaneous_bpm) == 4
        assert hr.min_bpm > 70.0            # 2.5 s would be 24 BPM

    def test_iqr_fence_drops_in_range_outlier(self):
        hr = HeartRateCalculator(30).from_intervals([0.8, 0.8, 0.81, 0.79, 0.8, 1.4])
        assert len(hr.instantaneous_bpm) == 5
        assert hr.max_bpm == pytest.approx(60 / 0.79)
        assert hr.min_bpm == pytest.approx(60 / 0.81)

    def test_median_used_when_mean_disagrees(self):
        hr = HeartRateCalculator(30).from_intervals([0.5, 0.5, 0.5, 1.2])
        # mean 102.5 vs median 120 → the median alone is reported
        assert hr.mean_bpm == pytest.approx(120.0)
        assert hr.min_bpm == pytest.approx(50.0)
        assert hr.std_dev == pytest.approx(35.0)

    def test_blend_of_mean_and_median(self):
        hr = HeartRateCalculator(30).from_intervals([0.6, 0.75, 1.0])
        bpm = np.array([100.0, 80.0, 60.0])
        assert hr.mean_bpm == pytest.approx((bpm.mean() + np.median(bpm)) / 2)

    def test_too_few_peaks(self):
        assert not HeartRateCalculator(30).calculate([10, 35]).is_valid

    def test_too_few_physiological_intervals(self):
        hr = HeartRateCalculator(30).from_intervals([0.1, 0.8, 3.0])
        assert hr == HeartRateMetrics.invalid()
        assert not hr.is_valid

    def test_iqr_helper_skips_small_samples(self):
        values = np.array([0.5, 0.8, 1.4])
        np.testing.assert_array_equal(remove_outliers_iqr(values), values)

    @pytest.mark.parametrize("method", list(PeakMethod))
    def test_synthetic_72_bpm(self, method, ppg_wave):
        cleaned = PPGProcessor(30, 10, method).clean_signal(ppg_wave(bpm=72.0, noise=0.05))
        peaks = PeakDetector(30, method).find_peaks(cleaned)
        hr = HeartRateCalculator(30).calculate(peaks)
        assert hr.is_valid
        assert hr.mean_bpm == pytest.approx(72.0, abs=5.0)


# ---------------------------------------------------------------------------
# HRVAnalyzer
# ---------------------------------------------------------------------------

class TestHRVAnalyzer:

    def test_regular_intervals_have_no_variability(self):
        hrv = HRVAnalyzer(30).analyze(np.arange(0, 300, 24))   # 800 ms apart
        assert hrv.is_valid
        assert hrv.mean_nn == pytest.approx(800.0)
        assert hrv.rmssd == 0.0
        assert hrv.sdnn == 0.0
        assert hrv.pnn50 == 0.0
        assert hrv.nn50 == 0
        assert hrv.triangular_index == 0.0

    def test_known_values(self):
        hrv = HRVAnalyzer(30).analyze_intervals([800.0, 850.0, 800.0, 900.0])
        assert hrv.mean_nn == pytest.approx(837.5)
        assert hrv.sdnn == pytest.approx(np.sqrt(1718.75))
        assert hrv.rmssd == pytest.approx(np.sqrt(5000.0))
        assert hrv.sdsd == pytest.approx(np.std([50.0, -50.0, 100.0]))
        assert hrv.nn50 == 1                    # |±50| is not above 50
        assert hrv.pnn50 == pytest.approx(100.0 / 3)
        assert hrv.triangular_index == pytest.approx(2.0)

    def test_out_of_range_intervals_filtered(self):
        hrv = HRVAnalyzer(30).analyze_intervals([250.0, 800.0, 2500.0, 820.0])
        assert hrv.mean_nn == pytest.approx(810.0)

    def test_too_few_peaks(self):
        assert HRVAnalyzer(30).analyze([0, 25]) == HRVMetrics.invalid()

    def test_too_few_valid_intervals(self):
        hrv = HRVAnalyzer(30).analyze_intervals([100.0, 800.0, 5000.0])
        assert not hrv.is_valid
