"""
Region-of-interest helpers.

The core only ever sees one float per frame.  This module turns a BGR frame
plus a region into that float, and ships a fingertip-on-lens heuristic that
can stand in for a face detector when the user covers the camera with a
finger.

When a finger covers the lens the frame becomes:
  - Dominated by reddish / pinkish tones (blood tissue).
  - Much darker than a normal scene.
  - Low in spatial variance (uniform colour, no edges).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np


@dataclass(frozen=True)
class Region:
    """Axis-aligned rectangle in pixel coordinates."""

    x: int
    y: int
    width: int
    height: int

    @property
    def is_valid(self) -> bool:
        return self.width > 0 and self.height > 0

    def clip(self, frame_shape: Sequence[int]) -> "Region":
        """Intersect with a frame of shape ``(H, W, ...)``."""
        h, w = int(frame_shape[0]), int(frame_shape[1])
        x0 = min(max(self.x, 0), w)
        y0 = min(max(self.y, 0), h)
        x1 = min(max(self.x + self.width, 0), w)
        y1 = min(max(self.y + self.height, 0), h)
        return Region(x0, y0, max(0, x1 - x0), max(0, y1 - y0))


def center_region(frame_shape: Sequence[int], fraction: float = 0.35) -> Region:
    """Square region in the middle of the frame, side = ``fraction × min(H, W)``."""
    h, w = int(frame_shape[0]), int(frame_shape[1])
    side = int(min(w, h) * fraction)
    return Region(w // 2 - side // 2, h // 2 - side // 2, side, side)


def mean_green(frame: np.ndarray, region: Region, step: int = 2) -> float:
    """
    Mean green intensity inside *region*.

    Parameters
    ----------
    frame:
        BGR image array (H × W × 3, uint8).
    region:
        Area to average; clipped to the frame.
    step:
        Sample every *step*-th pixel in both directions.
    """
    r = region.clip(frame.shape)
    if not r.is_valid:
        return 0.0
    patch = frame[r.y:r.y + r.height:step, r.x:r.x + r.width:step, 1]  # channel 1 = Green in BGR
    return float(patch.mean())


class FingertipDetector:
    """
    Heuristic region producer: is the camera lens covered by a fingertip?

    Parameters
    ----------
    brightness_threshold:
        Maximum allowed *mean* pixel brightness (0 – 255).  Default: 100.
    variance_threshold:
        Maximum allowed *spatial variance* of the green channel.  Default: 800.
    red_dominance:
        Minimum ratio ``mean_red / mean_green``.  Default: 1.05.
    fraction:
        Size of the central region that is checked and returned.
    """

    def __init__(
        self,
        brightness_threshold: float = 100.0,
        variance_threshold: float = 800.0,
        red_dominance: float = 1.05,
        fraction: float = 0.35,
    ) -> None:
        self.brightness_threshold = brightness_threshold
        self.variance_threshold = variance_threshold
        self.red_dominance = red_dominance
        self.fraction = fraction

    def __call__(self, frame: np.ndarray) -> Optional[Region]:
        """Return the central region when a fingertip covers it, else ``None``."""
        region = center_region(frame.shape, self.fraction)
        if not region.is_valid:
            return None
        patch = frame[region.y:region.y + region.height, region.x:region.x + region.width]
        return region if self.is_finger(patch) else None

    def is_finger(self, patch: np.ndarray) -> bool:
        b_ch = patch[:, :, 0].astype(np.float64)
        g_ch = patch[:, :, 1].astype(np.float64)
        r_ch = patch[:, :, 2].astype(np.float64)

        mean_r = float(r_ch.mean())
        mean_g = float(g_ch.mean())
        brightness = (mean_r + mean_g + float(b_ch.mean())) / 3.0

        dark_enough = brightness < self.brightness_threshold
        uniform_enough = float(g_ch.var()) < self.variance_threshold
        skin_tone = mean_r / (mean_g + 1e-6) >= self.red_dominance

        return dark_enough and uniform_enough and skin_tone
