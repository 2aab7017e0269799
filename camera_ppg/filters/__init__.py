"""Signal-conditioning stages applied to each analysis window."""

from camera_ppg.filters.bandpass import BandpassFilter
from camera_ppg.filters.detrend import DetrendMethod, SignalDetrend
from camera_ppg.filters.noise_reduction import (
    MedianFilter,
    NoiseReductionPipeline,
    SavitzkyGolayFilter,
    TemporalAverageFilter,
)

__all__ = [
    "BandpassFilter",
    "DetrendMethod",
    "MedianFilter",
    "NoiseReductionPipeline",
    "SavitzkyGolayFilter",
    "SignalDetrend",
    "TemporalAverageFilter",
]
