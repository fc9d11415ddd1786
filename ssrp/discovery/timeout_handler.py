"""Deadline tracking for discovery exchanges."""

import time
from typing import Optional


class Deadline:
    """Wall-clock window that bounds an exchange.

    There is no retry: once the window closes the exchange returns
    whatever it has collected.
    """

    def __init__(self, timeout: float):
        """Initialize deadline.

        Args:
            timeout: Window length in seconds.
        """
        self.timeout = timeout
        self._start_time: Optional[float] = None

    @property
    def started(self) -> bool:
        return self._start_time is not None

    @property
    def elapsed(self) -> float:
        """Seconds elapsed since start."""
        if self._start_time is None:
            return 0.0
        return time.monotonic() - self._start_time

    @property
    def remaining(self) -> float:
        """Seconds remaining before the deadline."""
        return max(0.0, self.timeout - self.elapsed)

    @property
    def is_expired(self) -> bool:
        """Whether the deadline has passed."""
        return self.started and self.elapsed >= self.timeout

    def start(self) -> None:
        """Start the timer."""
        self._start_time = time.monotonic()
