"""Thread-safe buffer for numbers produced in the background."""

from __future__ import annotations

import threading


class AsyncStore:
    """Collects numbers as they are produced and hands them out on read."""

    def __init__(self, requested_range: int) -> None:
        self._lock = threading.Lock()
        self._current = 0
        self._requested_range = requested_range
        self._numbers: list[int] = []

    def write(self, number: int, current: int) -> None:
        """Append ``number`` and record ``current`` as the latest position."""
        with self._lock:
            self._current = current
            self._numbers.append(number)

    def read(self) -> tuple[list[int], int, int]:
        """Drain the buffered numbers; return them with the position and range."""
        with self._lock:
            numbers, self._numbers = self._numbers, []
            return numbers, self._current, self._requested_range