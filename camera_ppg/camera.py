"""
OpenCV frame source.

Wraps ``cv2.VideoCapture`` (webcam index or video file) and yields BGR
frames, which is all :class:`~camera_ppg.frame_analyzer.FrameAnalyzer`
needs.
"""

from __future__ import annotations

import logging
from typing import Generator, Tuple, Union

import cv2
import numpy as np

logger = logging.getLogger(__name__)

MAX_FAILED_READS = 10


class Camera:
    """
    Parameters
    ----------
    source:
        OpenCV camera index or path to a video file.
    resolution:
        Requested (width, height).  Ignored for files.
    fps:
        Requested frame rate.  Actual rate may differ slightly.
    flip_horizontal:
        Mirror the image left-to-right.
    """

    def __init__(
        self,
        source: Union[int, str] = 0,
        resolution: Tuple[int, int] = (640, 480),
        fps: int = 30,
        flip_horizontal: bool = False,
    ) -> None:
        self.source = source
        self.resolution = resolution
        self.fps = fps
        self.flip_horizontal = flip_horizontal
        self._cap: "cv2.VideoCapture | None" = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def open(self) -> None:
        cap = cv2.VideoCapture(self.source)
        if not cap.isOpened():
            raise RuntimeError(f"Cannot open video source {self.source!r}")
        if isinstance(self.source, int):
            w, h = self.resolution
            cap.set(cv2.CAP_PROP_FRAME_WIDTH, w)
            cap.set(cv2.CAP_PROP_FRAME_HEIGHT, h)
            cap.set(cv2.CAP_PROP_FPS, self.fps)
        self._cap = cap
        logger.info("Camera opened – source=%r resolution=%s fps=%d",
                    self.source, self.resolution, self.fps)

    def close(self) -> None:
        if self._cap is None:
            return
        self._cap.release()
        self._cap = None
        logger.info("Camera closed.")

    def __enter__(self) -> "Camera":
        self.open()
        return self

    def __exit__(self, *_) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Frame acquisition
    # ------------------------------------------------------------------

    def read_frame(self) -> np.ndarray | None:
        """Capture one BGR frame, or *None* on failure."""
        if self._cap is None:
            raise RuntimeError("Camera is not open.  Call open() first.")
        ok, frame = self._cap.read()
        if not ok:
            logger.warning("VideoCapture.read() returned False.")
            return None
        if self.flip_horizontal:
            frame = cv2.flip(frame, 1)
        return frame

    def frames(self) -> Generator[np.ndarray, None, None]:
        """
        Yield frames until the camera is closed or reads keep failing.

        Usage::

            with Camera() as cam:
                for frame in cam.frames():
                    analyzer.analyze(frame)
        """
        null_streak = 0
        while self._cap is not None:
            frame = self.read_frame()
            if frame is None:
                null_streak += 1
                if null_streak >= MAX_FAILED_READS:
                    logger.error(
                        "Camera returned %d consecutive empty frames – stopping.",
                        MAX_FAILED_READS,
                    )
                    break
                continue
            null_streak = 0
            yield frame
