"""Clock abstraction — every time read in the OTP flow goes through here."""

from __future__ import annotations

import time
from typing import Protocol


class Clock(Protocol):
    def now_ms(self) -> int:
        """Current wall-clock time in epoch milliseconds."""
        ...


class SystemClock:
    """Reads the real wall clock."""

    def now_ms(self) -> int:
        return time.time_ns() // 1_000_000


system_clock = SystemClock()
