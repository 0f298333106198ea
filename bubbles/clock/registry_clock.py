"""
Registry clock.

Provides the monotonic millisecond time source the registry uses for
display timestamps and cooldown comparisons. Cooldowns are evaluated
lazily on read, so the clock only needs to answer "what time is it".
"""

import logging
import time
from typing import Optional

logger = logging.getLogger(__name__)


class MonotonicClock:
    """
    Monotonic wall-independent time source in milliseconds.

    Backed by time.monotonic(), so cooldowns are immune to system clock
    adjustments.
    """

    def now_ms(self) -> float:
        return time.monotonic() * 1000.0


class ManualClock:
    """
    Manually advanced clock.

    Used by the frame-loop simulation (one advance per simulated frame)
    and by tests that need exact cooldown boundaries.
    """

    def __init__(self, start_ms: float = 0.0):
        self._now_ms = float(start_ms)

    def now_ms(self) -> float:
        return self._now_ms

    def advance(self, delta_ms: float) -> float:
        """
        Move time forward.

        Args:
            delta_ms: Milliseconds to advance (must be >= 0)

        Returns:
            The new current time in ms

        Raises:
            ValueError: If delta_ms is negative (time is monotonic)
        """
        if delta_ms < 0:
            raise ValueError(f"Clock cannot move backwards (delta_ms={delta_ms})")
        self._now_ms += delta_ms
        return self._now_ms

    def set(self, now_ms: float) -> None:
        if now_ms < self._now_ms:
            raise ValueError(f"Clock cannot move backwards ({now_ms} < {self._now_ms})")
        self._now_ms = float(now_ms)


def resolve_clock(clock: Optional[object] = None):
    """Return the given clock, or a MonotonicClock when none was injected."""
    if clock is None:
        return MonotonicClock()
    if not callable(getattr(clock, "now_ms", None)):
        raise TypeError(f"Clock must provide now_ms(), got {type(clock).__name__}")
    return clock
