"""
Wall-clock sources for the market's tick rate limit.
"""

import time


def wall_clock_ms() -> float:
    """Current real time in milliseconds."""
    return time.time() * 1000


class SimulatedClock:
    """Manually advanced clock, used for batch runs and tests."""

    def __init__(self, start_ms: float = 0.0):
        self.now_ms = start_ms

    def advance(self, ms: float) -> float:
        self.now_ms += ms
        return self.now_ms

    def __call__(self) -> float:
        return self.now_ms
