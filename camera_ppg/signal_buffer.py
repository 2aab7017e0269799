"""
Fixed-capacity circular sample store.

The processor keeps exactly one analysis window of samples; once the buffer
is full every new sample overwrites the oldest one in O(1).
"""

from __future__ import annotations

import numpy as np


class SignalBuffer:
    """
    Circular buffer of float samples.

    Parameters
    ----------
    capacity:
        Maximum number of samples held (``sampling_rate × window_seconds``
        for the processor).
    """

    def __init__(self, capacity: int) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self._capacity = int(capacity)
        self._data = np.zeros(self._capacity, dtype=np.float64)
        self._head = 0
        self._count = 0

    def add(self, value: float) -> None:
        """Append *value*, overwriting the oldest sample once full."""
        self._data[self._head] = value
        self._head = (self._head + 1) % self._capacity
        if self._count < self._capacity:
            self._count += 1

    def to_array(self) -> np.ndarray:
        """Return the samples oldest → newest as a new array."""
        if self._count == 0:
            return np.array([], dtype=np.float64)
        if self._count < self._capacity:
            return self._data[:self._count].copy()
        # Full: the head points at the oldest slot
        return np.concatenate((self._data[self._head:], self._data[:self._head]))

    def clear(self) -> None:
        self._head = 0
        self._count = 0

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def size(self) -> int:
        """Number of samples currently held."""
        return self._count

    @property
    def is_full(self) -> bool:
        return self._count == self._capacity

    def __len__(self) -> int:
        return self._count
