"""
Camera PPG processor.

Pipeline
--------
1. Each incoming sample (mean green intensity over the region of interest)
   is smoothed by a short temporal average and pushed into a circular
   buffer of ``window_seconds`` samples.
2. Once the buffer is full, every :meth:`PPGProcessor.process` call runs on
   the whole window:

   a. variance gate (rejects a still image or a covered lens),
   b. noise reduction (median + Savitzky-Golay),
   c. linear detrend,
   d. FFT band-pass with the band preset of the peak method,
   e. systolic peak detection and validation,
   f. heart rate and HRV,
   g. composite confidence.

The processor is synchronous and not thread-safe; one producer is expected
to call :meth:`add_sample` on every frame and :meth:`process` every few
frames.

References
----------
- Elgendi M. et al., "Systolic peak detection in acceleration
  photoplethysmograms", PLoS ONE, 2013.
- Verkruysse W. et al., "Remote plethysmographic imaging using ambient light."
  Opt Express, 2008.
"""

from __future__ import annotations

import logging

import numpy as np

from camera_ppg.analysis.heart_rate import HeartRateCalculator, HeartRateMetrics
from camera_ppg.analysis.hrv import HRVAnalyzer, HRVMetrics
from camera_ppg.filters.bandpass import BandpassFilter
from camera_ppg.filters.detrend import DetrendMethod, SignalDetrend
from camera_ppg.filters.noise_reduction import NoiseReductionPipeline, TemporalAverageFilter
from camera_ppg.peaks.detector import PeakDetector, PeakMethod
from camera_ppg.peaks.validator import PeakValidation, PeakValidator
from camera_ppg.results import Error, Insufficient, Invalid, PPGResult, Success
from camera_ppg.signal_buffer import SignalBuffer

logger = logging.getLogger(__name__)

# Below this the window is a still image, not skin with blood flow
MIN_SIGNAL_VARIANCE = 0.5

MIN_VALID_BPM = 40.0
MAX_VALID_BPM = 200.0

# RMSSD range (ms) considered plausible for a resting adult
PLAUSIBLE_RMSSD = (5.0, 150.0)


class PPGProcessor:
    """
    Stateful heart-rate / HRV estimator for a camera PPG stream.

    Parameters
    ----------
    sampling_rate:
        Rate at which :meth:`add_sample` is called (Hz).  Must match the
        camera's actual frame rate for correct BPM.
    window_seconds:
        Length of the analysis window.  Nothing is analysed until this much
        signal has been collected.
    method:
        Peak-detection strategy, :class:`PeakMethod` or its name.  Also
        selects the band-pass preset.
    """

    def __init__(
        self,
        sampling_rate: int = 30,
        window_seconds: int = 10,
        method: "PeakMethod | str" = PeakMethod.BISHOP,
    ) -> None:
        if sampling_rate <= 0:
            raise ValueError(f"sampling_rate must be positive, got {sampling_rate}")
        if window_seconds <= 0:
            raise ValueError(f"window_seconds must be positive, got {window_seconds}")

        self.sampling_rate = sampling_rate
        self.window_seconds = window_seconds
        self._method = PeakMethod.parse(method)
        self._window_size = int(sampling_rate * window_seconds)

        self._buffer = SignalBuffer(self._window_size)
        self._temporal_filter = TemporalAverageFilter(3)

        self._noise_reduction = NoiseReductionPipeline()
        self._detrend = SignalDetrend()
        self._bandpass = BandpassFilter(sampling_rate)
        self._peak_detector = PeakDetector(sampling_rate, self._method)
        self._peak_validator = PeakValidator(sampling_rate)
        self._hr_calculator = HeartRateCalculator(sampling_rate)
        self._hrv_analyzer = HRVAnalyzer(sampling_rate)

        self._frame_count = 0
        self._last_valid_bpm = 0.0
        self._consecutive_failures = 0

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def add_sample(self, value: float) -> None:
        """Push one sample (mean green value of the region for one frame)."""
        self._buffer.add(self._temporal_filter.add_and_get(value))
        self._frame_count += 1

    def process(self) -> PPGResult:
        """Analyse the current window and return a :data:`PPGResult`."""
        if not self._buffer.is_full:
            return Insufficient(progress=self._buffer.size, required=self._window_size)

        try:
            return self._analyze(self._buffer.to_array())
        except Exception as exc:
            self._consecutive_failures += 1
            logger.warning("PPG processing failed: %s", exc, exc_info=True)
            return Error(message=str(exc) or type(exc).__name__)

    def reset(self) -> None:
        """Drop all collected samples and history."""
        self._buffer.clear()
        self._temporal_filter.reset()
        self._frame_count = 0
        self._consecutive_failures = 0
        self._last_valid_bpm = 0.0

    def get_buffer_progress(self) -> int:
        """Buffer fill level as a percentage (0 – 100)."""
        return max(0, min(100, self._buffer.size * 100 // self._window_size))

    def is_ready(self) -> bool:
        return self._buffer.is_full

    @property
    def method(self) -> PeakMethod:
        return self._method

    @property
    def window_size(self) -> int:
        return self._window_size

    @property
    def frame_count(self) -> int:
        return self._frame_count

    @property
    def consecutive_failures(self) -> int:
        return self._consecutive_failures

    @property
    def last_valid_bpm(self) -> float:
        return self._last_valid_bpm

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    def _analyze(self, raw: np.ndarray) -> PPGResult:
        if not np.all(np.isfinite(raw)):
            return self._fail("Non-finite samples in window", 0.0)
        if float(np.var(raw)) < MIN_SIGNAL_VARIANCE:
            return self._fail("Static signal detected - no blood flow variation", 0.0)

        cleaned = self.clean_signal(raw)
        peaks = self._peak_detector.find_peaks(cleaned)
        validation = self._peak_validator.validate(peaks, cleaned)
        if not validation.is_valid:
            return self._fail(validation.reason, validation.confidence * 100)

        heart_rate = self._hr_calculator.calculate(peaks)
        if not heart_rate.is_valid:
            return self._fail("Could not calculate heart rate", 30.0)

        hrv = self._hrv_analyzer.analyze(peaks)
        confidence = self._confidence(heart_rate, hrv, validation)

        bpm = heart_rate.mean_bpm
        if not MIN_VALID_BPM <= bpm <= MAX_VALID_BPM:
            logger.debug("Rejecting out-of-range BPM %.1f", bpm)
            return Invalid(reason=f"BPM out of range: {int(bpm)}", confidence=confidence)

        self._consecutive_failures = 0
        self._last_valid_bpm = bpm
        logger.debug("BPM=%.1f conf=%.0f peaks=%d", bpm, confidence, peaks.size)

        return Success(
            bpm=bpm,
            instantaneous_bpm=heart_rate.instantaneous_bpm,
            hrv=hrv,
            confidence=confidence,
            peak_count=int(peaks.size),
            signal_quality=validation.quality,
        )

    def clean_signal(self, raw: np.ndarray) -> np.ndarray:
        """Noise reduction → linear detrend → band-pass for the active method."""
        denoised = self._noise_reduction.process(raw)
        detrended = self._detrend.remove(denoised, DetrendMethod.LINEAR)
        low, high = self._method.band
        return self._bandpass.bandpass(detrended, low, high)

    def _fail(self, reason: str, confidence: float) -> Invalid:
        self._consecutive_failures += 1
        logger.debug("Invalid window (%d in a row): %s", self._consecutive_failures, reason)
        return Invalid(reason=reason, confidence=confidence)

    def _confidence(
        self,
        heart_rate: HeartRateMetrics,
        hrv: HRVMetrics,
        validation: PeakValidation,
    ) -> float:
        """Composite 0 – 100 score; each factor scales the score down."""
        confidence = 100.0

        # Peak quality, weight 0.4
        confidence *= validation.quality * 0.4 + 0.6

        # BPM stability, weight 0.3
        mean_bpm = heart_rate.mean_bpm
        cv = heart_rate.std_dev / mean_bpm if mean_bpm > 0 else 1.0
        confidence *= max(0.0, 1.0 - cv * 2.0) * 0.3 + 0.7

        # HRV plausibility, weight 0.2
        lo, hi = PLAUSIBLE_RMSSD
        hrv_score = 1.0 if lo <= hrv.rmssd <= hi else 0.5
        confidence *= hrv_score * 0.2 + 0.8

        # Agreement with the last accepted reading, weight 0.1
        if self._last_valid_bpm > 0:
            difference = abs(mean_bpm - self._last_valid_bpm)
            confidence *= max(0.0, 1.0 - difference / 30.0) * 0.1 + 0.9

        if self._consecutive_failures > 0:
            confidence *= max(0.5, 1.0 - self._consecutive_failures * 0.1)

        return min(100.0, max(0.0, confidence))
