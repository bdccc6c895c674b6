"""Shared constants, number formatting and a microsecond timer."""

import time

INF = 10_000_000
EPS = 10e-6


def format_thousands(number: int) -> str:
    """Format a non-negative integer with commas between groups of three digits."""
    if number < 0:
        raise ValueError(f"cannot format negative number {number}")
    return f"{number:,}"


class Timer:
    """Measures elapsed wall-clock time in microseconds."""

    def __init__(self) -> None:
        self._start = self._now()

    @staticmethod
    def _now() -> int:
        return time.monotonic_ns() // 1000

    def restart(self) -> None:
        """Start measuring again from now."""
        self._start = self._now()

    def elapsed(self) -> int:
        """Microseconds since construction or the last restart."""
        return self._now() - self._start