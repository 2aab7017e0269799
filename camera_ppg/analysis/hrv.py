"""
Time-domain heart-rate variability.

Metrics follow the Task Force of the ESC/NASPE (1996) definitions:

meanNN
    Mean NN interval (ms).
SDNN
    Standard deviation of NN intervals (ms), overall variability.
RMSSD
    Root mean square of successive differences (ms), vagal tone.
SDSD
    Standard deviation of successive differences (ms).
NN50 / pNN50
    Count / percentage of successive differences above 50 ms.
Triangular index
    Number of intervals divided by the height of the histogram's modal bin,
    using the standard 1/128 s (7.8125 ms) bin width.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import numpy as np

MIN_NN_MS = 300.0
MAX_NN_MS = 2000.0
NN50_THRESHOLD_MS = 50.0
HISTOGRAM_BIN_MS = 7.8125


@dataclass(frozen=True)
class HRVMetrics:
    mean_nn: float
    sdnn: float
    rmssd: float
    sdsd: float
    nn50: int
    pnn50: float
    triangular_index: float

    @classmethod
    def invalid(cls) -> "HRVMetrics":
        return cls(0.0, 0.0, 0.0, 0.0, 0, 0.0, 0.0)

    @property
    def is_valid(self) -> bool:
        return self.mean_nn > 0


def triangular_index(intervals: np.ndarray, bin_width: float = HISTOGRAM_BIN_MS) -> float:
    if intervals.size == 0:
        return 0.0
    lo, hi = float(intervals.min()), float(intervals.max())
    if hi <= lo:
        return 0.0
    n_bins = int((hi - lo) / bin_width) + 1
    bins = np.clip(((intervals - lo) / bin_width).astype(np.int64), 0, n_bins - 1)
    modal_count = int(np.bincount(bins, minlength=n_bins).max())
    return intervals.size / modal_count if modal_count > 0 else 0.0


class HRVAnalyzer:
    """
    Parameters
    ----------
    sampling_rate:
        Sample rate of the window the peak indices refer to (Hz).
    """

    def __init__(self, sampling_rate: float) -> None:
        self.sampling_rate = float(sampling_rate)

    def analyze(self, peaks: Sequence[int]) -> HRVMetrics:
        peaks = np.asarray(peaks, dtype=np.int64)
        if peaks.size < 3:
            return HRVMetrics.invalid()
        return self.analyze_intervals(np.diff(peaks) * 1000.0 / self.sampling_rate)

    def analyze_intervals(self, rr_intervals_ms: Sequence[float]) -> HRVMetrics:
        """HRV metrics from RR intervals in milliseconds."""
        nn = np.asarray(rr_intervals_ms, dtype=np.float64)
        nn = nn[(nn >= MIN_NN_MS) & (nn <= MAX_NN_MS)]
        if nn.size < 2:
            return HRVMetrics.invalid()

        diffs = np.diff(nn)
        nn50 = int(np.count_nonzero(np.abs(diffs) > NN50_THRESHOLD_MS))

        return HRVMetrics(
            mean_nn=float(np.mean(nn)),
            sdnn=float(np.std(nn)),
            rmssd=float(np.sqrt(np.mean(diffs ** 2))),
            sdsd=float(np.std(diffs)),
            nn50=nn50,
            pnn50=nn50 / diffs.size * 100.0,
            triangular_index=triangular_index(nn),
        )
