"""
Camera PPG: heart rate and HRV from a camera-derived brightness signal.

Feed one mean green-channel value per frame into :class:`PPGProcessor`
and poll :meth:`PPGProcessor.process` for a :data:`PPGResult`.
"""

from camera_ppg.analysis import HeartRateMetrics, HRVMetrics
from camera_ppg.peaks import PeakMethod
from camera_ppg.processor import PPGProcessor
from camera_ppg.results import Error, Insufficient, Invalid, PPGResult, ResultKind, Success

__version__ = "0.1.0"
__author__ = "camera_ppg"

__all__ = [
    "Error",
    "HeartRateMetrics",
    "HRVMetrics",
    "Insufficient",
    "Invalid",
    "PPGProcessor",
    "PPGResult",
    "PeakMethod",
    "ResultKind",
    "Success",
]
