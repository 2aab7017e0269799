"""
Systolic peak detection for camera PPG.

Two strategies are available, selected with :class:`PeakMethod`:

ELGENDI
    Characteristic-wave detector after Elgendi et al., "Systolic peak
    detection in acceleration photoplethysmograms measured from emergency
    responders in tropical conditions", PLoS ONE, 2013.  The clipped and
    squared signal is averaged over a short *peak* window and a long *beat*
    window; blocks where the first exceeds the second mark beats.

BISHOP
    Adaptive-percentile detector tuned for camera signals: local maxima that
    clear a percentile threshold and a prominence floor, accepted greedily
    with a refractory distance.

Both run on a lightly smoothed copy of the cleaned window, and each method
carries the band-pass preset it was tuned with.
"""

from __future__ import annotations

import abc
import logging
from enum import Enum
from typing import List, Tuple

import numpy as np

logger = logging.getLogger(__name__)

# Windows shorter than this cannot hold even one beat at any sane rate
MIN_SIGNAL_LENGTH = 10


class PeakMethod(Enum):
    ELGENDI = "elgendi"
    BISHOP = "bishop"

    @property
    def band(self) -> Tuple[float, float]:
        """Band-pass preset ``(low_hz, high_hz)`` used with this method."""
        if self is PeakMethod.ELGENDI:
            return 0.5, 8.0     # 30 – 480 BPM
        return 0.5, 3.5         # 30 – 210 BPM, tighter for camera noise

    @classmethod
    def parse(cls, value: "PeakMethod | str") -> "PeakMethod":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            names = ", ".join(m.value for m in cls)
            raise ValueError(f"Unknown peak method {value!r} (expected one of: {names})") from None


def moving_average(signal: np.ndarray, window: int) -> np.ndarray:
    """Centred moving average; the window shrinks at the edges."""
    signal = np.asarray(signal, dtype=np.float64)
    n = signal.size
    if n == 0 or window < 2:
        return signal.copy()
    half = window // 2
    cumsum = np.concatenate(([0.0], np.cumsum(signal)))
    idx = np.arange(n)
    start = np.maximum(0, idx - half)
    end = np.minimum(n, idx + half + 1)
    return (cumsum[end] - cumsum[start]) / (end - start)


def enforce_min_distance(
    peaks: List[int], signal: np.ndarray, min_distance: int
) -> np.ndarray:
    """Of two peaks closer than *min_distance*, keep the taller one."""
    kept: List[int] = []
    for p in peaks:
        if not kept or p - kept[-1] >= min_distance:
            kept.append(p)
        elif signal[p] > signal[kept[-1]]:
            kept[-1] = p
    return np.array(kept, dtype=np.int64)


class PeakDetectionStrategy(abc.ABC):
    """A peak-finding algorithm operating on an already smoothed window."""

    def __init__(self, sampling_rate: float) -> None:
        self.sampling_rate = sampling_rate

    @abc.abstractmethod
    def find_peaks(self, signal: np.ndarray) -> np.ndarray:
        """Return strictly increasing peak indices into *signal*."""


class ElgendiStrategy(PeakDetectionStrategy):

    peak_seconds = 0.111
    beat_seconds = 0.667
    min_distance_seconds = 0.3     # 200 BPM ceiling
    alpha = 0.01                   # threshold offset, low for camera PPG

    def find_peaks(self, signal: np.ndarray) -> np.ndarray:
        fs = self.sampling_rate
        peak_window = max(3, int(self.peak_seconds * fs))
        beat_window = max(5, int(self.beat_seconds * fs))
        min_distance = max(4, int(self.min_distance_seconds * fs))

        squared = np.clip(signal, 0.0, None) ** 2
        ma_peak = moving_average(squared, peak_window)
        ma_beat = moving_average(squared, beat_window)
        above = ma_peak > ma_beat * (1.0 + self.alpha)

        candidates: List[int] = []
        in_block = False
        block_start = 0
        last = above.size - 1
        for i, is_above in enumerate(above):
            if is_above and not in_block:
                in_block = True
                block_start = i
            elif in_block and (not is_above or i == last):
                in_block = False
                block_end = i + 1 if is_above else i
                candidates.append(block_start + int(np.argmax(signal[block_start:block_end])))

        return enforce_min_distance(candidates, signal, min_distance)


class BishopStrategy(PeakDetectionStrategy):

    neighbourhood = 3
    min_distance_seconds = 0.35    # 170 BPM ceiling
    threshold_iqr_factor = 0.4
    prominence_iqr_factor = 0.2

    def find_peaks(self, signal: np.ndarray) -> np.ndarray:
        n = signal.size
        k = self.neighbourhood
        min_distance = max(9, int(self.min_distance_seconds * self.sampling_rate))

        ordered = np.sort(signal)
        p25 = ordered[int(n * 0.25)]
        p60 = ordered[int(n * 0.60)]
        p75 = ordered[int(n * 0.75)]
        iqr = p75 - p25
        threshold = p60 + self.threshold_iqr_factor * iqr
        min_prominence = self.prominence_iqr_factor * iqr

        peaks: List[int] = []
        last_peak = -min_distance
        for i in range(k, n - k):
            value = signal[i]
            left = signal[i - k:i]
            right = signal[i + 1:i + k + 1]

            # Strict against the immediate neighbours, non-strict further out
            if not (value > left[-1] and value > right[0]):
                continue
            if value < left.max() or value < right.max():
                continue
            prominence = value - max(left.min(), right.min())
            if prominence < min_prominence or value <= threshold:
                continue
            if i - last_peak < min_distance:
                continue

            peaks.append(i)
            last_peak = i

        return np.array(peaks, dtype=np.int64)


_STRATEGIES = {
    PeakMethod.ELGENDI: ElgendiStrategy,
    PeakMethod.BISHOP: BishopStrategy,
}


class PeakDetector:
    """
    Find systolic peaks in a cleaned PPG window.

    Parameters
    ----------
    sampling_rate:
        Sample rate of the window (Hz).
    method:
        :class:`PeakMethod` (or its name) selecting the strategy.
    smoothing_window:
        Moving-average width applied before detection.
    """

    def __init__(
        self,
        sampling_rate: float,
        method: "PeakMethod | str" = PeakMethod.BISHOP,
        smoothing_window: int = 3,
    ) -> None:
        self.sampling_rate = sampling_rate
        self.method = PeakMethod.parse(method)
        self.smoothing_window = smoothing_window
        self.strategy: PeakDetectionStrategy = _STRATEGIES[self.method](sampling_rate)

    def find_peaks(self, cleaned_signal: np.ndarray) -> np.ndarray:
        cleaned_signal = np.asarray(cleaned_signal, dtype=np.float64)
        if cleaned_signal.size < MIN_SIGNAL_LENGTH:
            return np.array([], dtype=np.int64)

        smoothed = moving_average(cleaned_signal, self.smoothing_window)
        peaks = self.strategy.find_peaks(smoothed)
        logger.debug("%s: %d peaks in %d samples", self.method.name, peaks.size, smoothed.size)
        return peaks
