from __future__ import annotations

import time


class MonotonicClock:
    """Utility class combining wall-clock and monotonic time helpers.

    - Wall-clock time is for wire timestamps and message ids.
    - Monotonic time is for measuring elapsed durations.
    """

    # ---- monotonic ----

    @staticmethod
    def now() -> float:
        """Return monotonic time in seconds."""
        return time.monotonic()

    @staticmethod
    def elapsed_ms_from(start: float) -> int:
        """Return elapsed milliseconds from a monotonic start time."""
        return int((time.monotonic() - start) * 1000)

    # ---- wall clock ----

    @staticmethod
    def epoch_ms() -> int:
        """Return wall-clock milliseconds since the Unix epoch."""
        return int(time.time() * 1000)


__all__ = ["MonotonicClock"]
