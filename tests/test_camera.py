"""Tests for the OpenCV frame source that need no physical camera."""

from __future__ import annotations

import pytest

cv2 = pytest.importorskip("cv2")

from camera_ppg.camera import Camera  # noqa: E402


class TestCamera:

    def test_read_requires_open(self):
        with pytest.raises(RuntimeError):
            Camera().read_frame()

    def test_missing_file_fails_to_open(self, tmp_path):
        with pytest.raises(RuntimeError):
            Camera(source=str(tmp_path / "missing.mp4")).open()

    def test_close_is_idempotent(self):
        cam = Camera()
        cam.close()
        cam.close()
