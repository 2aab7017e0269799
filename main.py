#!/usr/bin/env python3
"""
Camera PPG – command-line entry point.

Usage
-----
    python main.py [OPTIONS]

Options
-------
    --input PATH         Replay samples from a text/CSV file (one value per
                         line) instead of opening a camera
    --camera-index INT   OpenCV camera index (default: 0)
    --resolution WxH     Camera resolution (default: 640x480)
    --fps INT            Sampling rate / capture frame rate (default: 30)
    --window INT         Analysis window in seconds (default: 10)
    --method NAME        Peak detector: bishop | elgendi (default: bishop)
    --analyze-every INT  Run the pipeline every N samples (default: 15)
    --headless           No preview window (camera mode)

Keyboard shortcuts (when a window is open)
------------------------------------------
    q / ESC  – quit
    r        – reset signal buffer
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

import numpy as np

from camera_ppg.frame_analyzer import FrameAnalyzer
from camera_ppg.peaks import PeakMethod
from camera_ppg.processor import PPGProcessor
from camera_ppg.results import PPGResult, ResultKind
from camera_ppg.roi import FingertipDetector

logger = logging.getLogger("camera_ppg")

WINDOW_TITLE = "Camera PPG"


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------

def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Heart rate and HRV from a camera PPG signal",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("--input", type=Path, default=None,
                        help="Replay samples from this file instead of a camera")
    parser.add_argument("--camera-index", type=int, default=0,
                        help="OpenCV VideoCapture index")
    parser.add_argument("--resolution", default="640x480",
                        help="Camera resolution, e.g. 640x480")
    parser.add_argument("--fps", type=int, default=30,
                        help="Sampling rate (camera frame rate)")
    parser.add_argument("--window", type=int, default=10,
                        help="Analysis window in seconds")
    parser.add_argument("--method", default=PeakMethod.BISHOP.value,
                        choices=[m.value for m in PeakMethod],
                        help="Peak-detection method")
    parser.add_argument("--analyze-every", type=int, default=15,
                        help="Run the pipeline every N samples")
    parser.add_argument("--headless", action="store_true",
                        help="No display window; log results only")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Debug logging")
    return parser.parse_args(argv)


def format_result(result: PPGResult) -> str:
    if result.kind is ResultKind.SUCCESS:
        return (f"BPM={result.bpm:.1f}  RMSSD={result.hrv.rmssd:.0f}ms  "
                f"SDNN={result.hrv.sdnn:.0f}ms  conf={result.confidence:.0f}  "
                f"peaks={result.peak_count}")
    if result.kind is ResultKind.INSUFFICIENT:
        return f"Collecting signal… {result.progress_percent}%"
    if result.kind is ResultKind.INVALID:
        return f"Invalid: {result.reason} (conf={result.confidence:.0f})"
    return f"Error: {result.message}"


# ---------------------------------------------------------------------------
# Modes
# ---------------------------------------------------------------------------

def replay(path: Path, processor: PPGProcessor, analyze_every: int) -> int:
    """Feed recorded samples through the processor, logging each run."""
    try:
        samples = np.loadtxt(path, delimiter=",", ndmin=1, dtype=np.float64)
    except (OSError, ValueError) as exc:
        logger.error("Cannot read samples from %s: %s", path, exc)
        return 1
    if samples.ndim > 1:
        logger.error("Expected a single column of samples in %s, got %d columns",
                     path, samples.shape[1])
        return 1
    logger.info("Replaying %d samples from %s", samples.size, path)

    for i, value in enumerate(samples, start=1):
        processor.add_sample(float(value))
        if i % analyze_every == 0 and processor.is_ready():
            logger.info("[%6.1fs] %s", i / processor.sampling_rate,
                        format_result(processor.process()))

    final = processor.process()
    logger.info("Final: %s", format_result(final))
    return 0 if final.kind is ResultKind.SUCCESS else 2


def live(args: argparse.Namespace, processor: PPGProcessor) -> int:
    # OpenCV is only needed for live capture; replay works without a display stack
    import cv2

    from camera_ppg.camera import Camera

    try:
        res_w, res_h = (int(v) for v in args.resolution.lower().split("x"))
    except ValueError:
        logger.error("Invalid --resolution format.  Use WxH, e.g. 640x480.")
        return 1

    analyzer = FrameAnalyzer(
        processor,
        FingertipDetector(),
        analyze_every=args.analyze_every,
        on_result=lambda r: logger.info(format_result(r)),
    )
    camera = Camera(source=args.camera_index, resolution=(res_w, res_h), fps=args.fps)

    logger.info("Cover the camera with a fingertip.  Press 'q' or ESC to quit.")
    if not args.headless:
        cv2.namedWindow(WINDOW_TITLE, cv2.WINDOW_NORMAL)

    try:
        with camera:
            for frame in camera.frames():
                analyzer.analyze(frame)

                if args.headless:
                    continue
                cv2.imshow(WINDOW_TITLE, frame)
                key = cv2.waitKey(1) & 0xFF
                if key in (ord("q"), 27):          # q or ESC
                    logger.info("Quit requested by user.")
                    break
                if key == ord("r"):
                    analyzer.reset()
                    logger.info("Signal buffer reset.")
    except RuntimeError as exc:
        logger.error("%s", exc)
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted.")
    finally:
        if not args.headless:
            cv2.destroyAllWindows()
    return 0


def run(args: argparse.Namespace) -> int:
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s – %(message)s",
        datefmt="%H:%M:%S",
    )
    try:
        processor = PPGProcessor(
            sampling_rate=args.fps,
            window_seconds=args.window,
            method=args.method,
        )
    except ValueError as exc:
        logger.error("%s", exc)
        return 1
    if args.input is not None:
        return replay(args.input, processor, max(1, args.analyze_every))
    return live(args, processor)


def main(argv: list[str] | None = None) -> int:
    return run(parse_args(argv))


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    sys.exit(main())
