"""
Quality gate for detected peaks.

Camera PPG is much noisier than a clinical finger clip, so the limits here
are looser than the textbook ones: interval CV up to 0.8 and amplitude CV up
to 1.2 still pass, but they pull the quality score down.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

MIN_PEAKS = 3
MAX_INTERVAL_CV = 0.8
MAX_AMPLITUDE_CV = 1.2
MIN_PEAKS_PER_MIN = 20.0
MAX_PEAKS_PER_MIN = 220.0


@dataclass(frozen=True)
class PeakValidation:
    is_valid: bool
    reason: str
    confidence: float   # 0 – 1
    quality: float      # 0 – 1


def coefficient_of_variation(values: np.ndarray) -> float:
    """Population std / |mean|; infinite when undefined."""
    values = np.asarray(values, dtype=np.float64)
    if values.size == 0:
        return float("inf")
    mean = float(np.mean(values))
    if abs(mean) < 1e-10:
        return float("inf")
    return float(np.std(values)) / abs(mean)


class PeakValidator:
    """
    Decide whether a set of peaks looks like a heartbeat.

    Parameters
    ----------
    sampling_rate:
        Sample rate of the window the peaks index into (Hz).
    """

    def __init__(self, sampling_rate: float) -> None:
        self.sampling_rate = float(sampling_rate)

    def validate(self, peaks: np.ndarray, signal: np.ndarray) -> PeakValidation:
        peaks = np.asarray(peaks, dtype=np.int64)
        signal = np.asarray(signal, dtype=np.float64)

        if peaks.size < MIN_PEAKS:
            return PeakValidation(
                is_valid=False,
                reason=f"Insufficient peaks (found {peaks.size}, need ≥{MIN_PEAKS})",
                confidence=0.0,
                quality=0.0,
            )

        duration = signal.size / self.sampling_rate
        peaks_per_minute = peaks.size / duration * 60.0 if duration > 0 else float("inf")
        if not MIN_PEAKS_PER_MIN <= peaks_per_minute <= MAX_PEAKS_PER_MIN:
            return PeakValidation(
                is_valid=False,
                reason=f"Unrealistic peak rate: {int(peaks_per_minute)} peaks/min",
                confidence=0.3,
                quality=0.2,
            )

        interval_cv = coefficient_of_variation(np.diff(peaks) / self.sampling_rate)
        if interval_cv > MAX_INTERVAL_CV:
            return PeakValidation(
                is_valid=False,
                reason=f"Irregular peak intervals (CV={interval_cv:.2f}), hold still for reading",
                confidence=max(0.3, 0.6 - interval_cv * 0.3),
                quality=0.3,
            )

        amplitudes = np.array([signal[p] if 0 <= p < signal.size else 0.0 for p in peaks])
        amplitude_cv = coefficient_of_variation(amplitudes)
        if amplitude_cv > MAX_AMPLITUDE_CV:
            return PeakValidation(
                is_valid=False,
                reason="Inconsistent peak amplitudes - improve lighting",
                confidence=0.5,
                quality=0.4,
            )

        quality = self.quality(interval_cv, amplitude_cv)
        return PeakValidation(is_valid=True, reason="Valid", confidence=quality, quality=quality)

    @staticmethod
    def quality(interval_cv: float, amplitude_cv: float) -> float:
        # Interval regularity matters more than amplitude
        interval_score = max(0.0, 1.0 - interval_cv * 1.2)
        amplitude_score = max(0.0, 1.0 - amplitude_cv * 0.5)
        return interval_score * 0.7 + amplitude_score * 0.3
