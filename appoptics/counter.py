"""A thread-safe integer counter."""

from __future__ import annotations

import threading


class SynchronizedCounter:
    """An integer that can be added to concurrently and read-and-reset."""

    def __init__(self, value: int = 0) -> None:
        self._value = int(value)
        self._lock = threading.Lock()

    def incr(self) -> None:
        """Add 1 to the counter."""
        self.add(1)

    def add(self, delta: int) -> None:
        """Add delta to the counter."""
        with self._lock:
            self._value += int(delta)

    def reset(self) -> int:
        """Return the current value and set the counter to zero."""
        with self._lock:
            value = self._value
            self._value = 0
            return value

    def __int__(self) -> int:
        with self._lock:
            return self._value

    def __repr__(self) -> str:
        return f"SynchronizedCounter({int(self)})"