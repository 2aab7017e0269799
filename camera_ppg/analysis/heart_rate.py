"""
Heart-rate estimation from peak positions.

Camera PPG routinely produces a missed or doubled beat per window, so the
estimate is built from robust statistics: physiological RR limits, an IQR
fence, and a median / mean blend that falls back to the median when the two
disagree.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Sequence

import numpy as np

MIN_RR_INTERVAL = 0.3     # s, 200 BPM
MAX_RR_INTERVAL = 1.5     # s, 40 BPM
IQR_OUTLIER_FACTOR = 1.5
MAX_MEAN_MEDIAN_GAP = 10.0  # BPM


@dataclass(frozen=True)
class HeartRateMetrics:
    mean_bpm: float
    min_bpm: float
    max_bpm: float
    std_dev: float
    instantaneous_bpm: List[float] = field(default_factory=list)

    @classmethod
    def invalid(cls) -> "HeartRateMetrics":
        return cls(0.0, 0.0, 0.0, 0.0, [])

    @property
    def is_valid(self) -> bool:
        return self.mean_bpm > 0


def remove_outliers_iqr(values: np.ndarray, factor: float = IQR_OUTLIER_FACTOR) -> np.ndarray:
    """
    Drop values outside ``[Q1 − f·IQR, Q3 + f·IQR]``.

    Quartiles are read at the truncated indices ``n // 4`` and ``3n // 4`` of
    the sorted values, not interpolated.  Fewer than four values are returned
    as-is.
    """
    values = np.asarray(values, dtype=np.float64)
    if values.size < 4:
        return values
    ordered = np.sort(values)
    q1 = ordered[ordered.size // 4]
    q3 = ordered[(ordered.size * 3) // 4]
    iqr = q3 - q1
    keep = (values >= q1 - factor * iqr) & (values <= q3 + factor * iqr)
    return values[keep]


class HeartRateCalculator:
    """
    Parameters
    ----------
    sampling_rate:
        Sample rate of the window the peak indices refer to (Hz).
    """

    def __init__(self, sampling_rate: float) -> None:
        self.sampling_rate = float(sampling_rate)

    def calculate(self, peaks: Sequence[int]) -> HeartRateMetrics:
        """Heart-rate metrics from peak sample indices (three or more needed)."""
        peaks = np.asarray(peaks, dtype=np.int64)
        if peaks.size < 3:
            return HeartRateMetrics.invalid()
        return self.from_intervals(np.diff(peaks) / self.sampling_rate)

    def from_intervals(self, rr_intervals: Sequence[float]) -> HeartRateMetrics:
        """Heart-rate metrics from RR intervals in seconds."""
        rr = np.asarray(rr_intervals, dtype=np.float64)

        rr = rr[(rr >= MIN_RR_INTERVAL) & (rr <= MAX_RR_INTERVAL)]
        if rr.size < 2:
            return HeartRateMetrics.invalid()

        rr = remove_outliers_iqr(rr)
        if rr.size < 2:
            return HeartRateMetrics.invalid()

        instantaneous = 60.0 / rr
        median_bpm = float(np.median(instantaneous))
        mean_bpm = float(np.mean(instantaneous))

        if abs(mean_bpm - median_bpm) > MAX_MEAN_MEDIAN_GAP:
            final_bpm = median_bpm
        else:
            final_bpm = (mean_bpm + median_bpm) / 2

        std_dev = float(np.sqrt(np.mean((instantaneous - final_bpm) ** 2)))

        return HeartRateMetrics(
            mean_bpm=final_bpm,
            min_bpm=float(instantaneous.min()),
            max_bpm=float(instantaneous.max()),
            std_dev=std_dev,
            instantaneous_bpm=instantaneous.tolist(),
        )
