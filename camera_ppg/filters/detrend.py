"""Baseline drift removal."""

from __future__ import annotations

from enum import Enum

import numpy as np
from scipy import signal as sps


class DetrendMethod(Enum):
    LINEAR = "linear"       # least-squares line y = m·i + b
    CONSTANT = "constant"   # mean only


class SignalDetrend:
    """
    Remove slow baseline drift (illumination changes, auto-exposure creep)
    from a window before band-pass filtering.
    """

    def remove(
        self,
        signal: np.ndarray,
        method: DetrendMethod = DetrendMethod.LINEAR,
    ) -> np.ndarray:
        signal = np.asarray(signal, dtype=np.float64)
        if method is DetrendMethod.LINEAR:
            # A line through fewer than two points is undefined
            if signal.size < 2:
                return signal.copy()
        elif signal.size == 0:
            return signal.copy()
        return sps.detrend(signal, type=method.value)
