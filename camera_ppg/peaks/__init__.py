"""Peak detection and validation."""

from camera_ppg.peaks.detector import (
    BishopStrategy,
    ElgendiStrategy,
    PeakDetectionStrategy,
    PeakDetector,
    PeakMethod,
)
from camera_ppg.peaks.validator import PeakValidation, PeakValidator

__all__ = [
    "BishopStrategy",
    "ElgendiStrategy",
    "PeakDetectionStrategy",
    "PeakDetector",
    "PeakMethod",
    "PeakValidation",
    "PeakValidator",
]
