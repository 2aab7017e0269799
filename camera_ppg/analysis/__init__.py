"""Heart-rate and HRV statistics from detected peaks."""

from camera_ppg.analysis.heart_rate import HeartRateCalculator, HeartRateMetrics
from camera_ppg.analysis.hrv import HRVAnalyzer, HRVMetrics

__all__ = ["HeartRateCalculator", "HeartRateMetrics", "HRVAnalyzer", "HRVMetrics"]
