"""
Noise reduction stages for camera PPG.

Two flavours live here:

* :class:`TemporalAverageFilter` runs per sample, before the signal enters
  the long buffer, and knocks down frame-to-frame shot noise.
* :class:`NoiseReductionPipeline` runs on a whole window: a short median
  filter removes isolated motion spikes, then a Savitzky-Golay kernel
  smooths the waveform while keeping the systolic peaks in place.
"""

from __future__ import annotations

from collections import deque
from typing import Deque, Dict

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view


def _kernel(*coefficients: float, norm: float) -> np.ndarray:
    k = np.array(coefficients, dtype=np.float64) / norm
    k.setflags(write=False)
    return k


class TemporalAverageFilter:
    """
    Streaming mean over the last *window_size* raw samples.

    During warm-up the mean is taken over however many samples have arrived.
    """

    def __init__(self, window_size: int = 3) -> None:
        if window_size < 1:
            raise ValueError(f"window_size must be positive, got {window_size}")
        self.window_size = window_size
        self._history: Deque[float] = deque(maxlen=window_size)

    def add_and_get(self, value: float) -> float:
        """Push *value* and return the smoothed sample."""
        self._history.append(float(value))
        return sum(self._history) / len(self._history)

    def reset(self) -> None:
        self._history.clear()


class MedianFilter:
    """Sliding median; the neighbourhood is clamped at the signal edges."""

    def __init__(self, window_size: int = 3) -> None:
        self.window_size = window_size

    def filter(self, signal: np.ndarray) -> np.ndarray:
        signal = np.asarray(signal, dtype=np.float64)
        n = signal.size
        if n < self.window_size:
            return signal.copy()

        half = self.window_size // 2
        result = np.empty(n, dtype=np.float64)
        if n > 2 * half:
            windows = sliding_window_view(signal, 2 * half + 1)
            result[half:n - half] = np.median(windows, axis=1)

        # Edge samples see a truncated window; take the upper-middle element
        for i in list(range(min(half, n))) + list(range(max(half, n - half), n)):
            window = np.sort(signal[max(0, i - half):min(n, i + half + 1)])
            result[i] = window[window.size // 2]
        return result


class SavitzkyGolayFilter:
    """
    Quadratic Savitzky-Golay smoothing with precomputed kernels.

    Only window sizes 5, 7 and 9 have kernels; anything else uses 7.  The
    first and last ``window // 2`` samples are passed through untouched so
    boundary values are not pulled towards a half-empty fit.
    """

    KERNELS: Dict[int, np.ndarray] = {
        5: _kernel(-3, 12, 17, 12, -3, norm=35.0),
        7: _kernel(-2, 3, 6, 7, 6, 3, -2, norm=21.0),
        9: _kernel(-21, 14, 39, 54, 59, 54, 39, 14, -21, norm=231.0),
    }

    def __init__(self, window_size: int = 7) -> None:
        self.window_size = window_size

    @property
    def coefficients(self) -> np.ndarray:
        return self.KERNELS.get(self.window_size, self.KERNELS[7])

    def filter(self, signal: np.ndarray) -> np.ndarray:
        signal = np.asarray(signal, dtype=np.float64)
        if signal.size < self.window_size:
            return signal.copy()

        kernel = self.coefficients
        half = kernel.size // 2
        result = signal.copy()
        result[half:signal.size - half] = np.correlate(signal, kernel, mode="valid")
        return result


class NoiseReductionPipeline:
    """Median de-spiking followed by Savitzky-Golay smoothing."""

    def __init__(self, median_window: int = 3, smoothing_window: int = 7) -> None:
        self.median = MedianFilter(median_window)
        self.smoother = SavitzkyGolayFilter(smoothing_window)

    def process(self, signal: np.ndarray) -> np.ndarray:
        despiked = self.median.filter(signal)
        return self.smoother.filter(despiked)
