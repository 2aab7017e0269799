"""
Frame-level glue between a video source and :class:`PPGProcessor`.

For every frame the region detector is asked for a region of interest; the
mean green value inside it becomes one PPG sample.  The processor runs
every ``analyze_every`` frames once its window is full, and is reset when
the region has been missing for ``lost_threshold`` frames in a row so stale
samples from before the gap never mix with new ones.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

import numpy as np

from camera_ppg.processor import PPGProcessor
from camera_ppg.results import PPGResult
from camera_ppg.roi import Region, mean_green

logger = logging.getLogger(__name__)

RegionDetector = Callable[[np.ndarray], Optional[Region]]

ANALYZE_EVERY_N_FRAMES = 15   # twice per second at 30 fps
REGION_LOST_THRESHOLD = 15    # ~0.5 s without a region resets the window


class FrameAnalyzer:
    """
    Parameters
    ----------
    processor:
        Processor fed with one sample per frame.
    region_detector:
        Callable returning the :class:`Region` to sample, or ``None`` when no
        usable region is visible.
    analyze_every:
        Run :meth:`PPGProcessor.process` every this many sampled frames.
    lost_threshold:
        Consecutive frames without a region before the processor is reset.
    on_result, on_progress, on_region:
        Optional callbacks receiving a :data:`PPGResult`, the buffer progress
        (0 – 100), and ``(detected, region)`` respectively.
    """

    def __init__(
        self,
        processor: PPGProcessor,
        region_detector: RegionDetector,
        analyze_every: int = ANALYZE_EVERY_N_FRAMES,
        lost_threshold: int = REGION_LOST_THRESHOLD,
        on_result: Optional[Callable[[PPGResult], None]] = None,
        on_progress: Optional[Callable[[int], None]] = None,
        on_region: Optional[Callable[[bool, Optional[Region]], None]] = None,
    ) -> None:
        self.processor = processor
        self.region_detector = region_detector
        self.analyze_every = max(1, analyze_every)
        self.lost_threshold = max(1, lost_threshold)
        self.on_result = on_result
        self.on_progress = on_progress
        self.on_region = on_region

        self._frame_count = 0
        self._missing_streak = 0
        self._last_result: Optional[PPGResult] = None

    @property
    def last_result(self) -> Optional[PPGResult]:
        return self._last_result

    @property
    def frame_count(self) -> int:
        """Frames sampled since the last reset."""
        return self._frame_count

    def analyze(self, frame: np.ndarray) -> Optional[PPGResult]:
        """
        Consume one BGR frame.

        Returns the :data:`PPGResult` when this frame triggered a processing
        run, otherwise ``None``.  Errors raised by the detector or by a
        callback are logged and the frame is dropped.
        """
        try:
            return self._analyze(frame)
        except Exception as exc:                         # noqa: BLE001
            logger.error("Frame analysis failed: %s", exc, exc_info=True)
            return None

    def reset(self) -> None:
        self.processor.reset()
        self._frame_count = 0
        self._missing_streak = 0
        self._last_result = None

    def _analyze(self, frame: np.ndarray) -> Optional[PPGResult]:
        region = self.region_detector(frame)
        if region is None or not region.is_valid:
            self._region_missing()
            return None

        self._missing_streak = 0
        if self.on_region is not None:
            self.on_region(True, region)

        self.processor.add_sample(mean_green(frame, region))
        if self.on_progress is not None:
            self.on_progress(self.processor.get_buffer_progress())

        self._frame_count += 1
        if self._frame_count % self.analyze_every != 0 or not self.processor.is_ready():
            return None

        result = self.processor.process()
        self._last_result = result
        logger.debug("Frame %d: %s", self._frame_count, result)
        if self.on_result is not None:
            self.on_result(result)
        return result

    def _region_missing(self) -> None:
        self._missing_streak += 1
        if self._missing_streak < self.lost_threshold:
            return
        if self._missing_streak == self.lost_threshold:
            logger.info("Region lost for %d frames – resetting signal.", self._missing_streak)
        self.reset()
        # reset() clears the streak; keep counting so the log fires once per gap
        self._missing_streak = self.lost_threshold + 1
        if self.on_region is not None:
            self.on_region(False, None)
        if self.on_progress is not None:
            self.on_progress(0)
