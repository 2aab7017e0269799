"""Shared synthetic signals for the test suite."""

from __future__ import annotations

import numpy as np
import pytest


def synthetic_ppg(
    bpm: float = 72.0,
    fs: float = 30.0,
    seconds: float = 10.0,
    baseline: float = 100.0,
    amplitude: float = 5.0,
    pulse_width: float = 0.1,
    noise: float = 0.0,
    seed: int = 42,
) -> np.ndarray:
    """
    Gaussian pulse train resembling a camera PPG trace.

    Each beat is a Gaussian bump of width *pulse_width* seconds centred on a
    sample, riding on a constant *baseline* brightness.
    """
    n = int(round(fs * seconds))
    t = np.arange(n) / fs
    beat = 60.0 / bpm
    centre = round(beat / 2 * fs) / fs
    phase = np.mod(t, beat)
    signal = baseline + amplitude * np.exp(-0.5 * ((phase - centre) / pulse_width) ** 2)
    if noise > 0:
        rng = np.random.default_rng(seed)
        signal = signal + rng.normal(0.0, noise, n)
    return signal


@pytest.fixture
def ppg_wave():
    return synthetic_ppg
