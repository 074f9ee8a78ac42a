# src/sol_fee_lookback/domain/time_window.py
import time
from dataclasses import dataclass
from typing import Optional

from ..errors import InputError

MS_PER_HOUR = 3_600_000
# 100 years; keeps the cutoff well inside what datetime can render
MAX_LOOKBACK_HOURS = 24 * 365 * 100


@dataclass(frozen=True)
class LookbackWindow:
    """[now - hours, now], both ends inclusive, in epoch milliseconds."""
    now_ms: int
    hours: int

    def __post_init__(self):
        if isinstance(self.hours, bool) or not isinstance(self.hours, int) or self.hours <= 0:
            raise InputError(f"hours must be a positive integer, got {self.hours!r}")
        if self.hours > MAX_LOOKBACK_HOURS:
            raise InputError(f"hours must be at most {MAX_LOOKBACK_HOURS}, got {self.hours}")

    @classmethod
    def ending_now(cls, hours: int, now_ms: Optional[int] = None) -> "LookbackWindow":
        return cls(now_ms if now_ms is not None else int(time.time() * 1000), hours)

    @property
    def cutoff_ms(self) -> int:
        return self.now_ms - self.hours * MS_PER_HOUR

    def contains(self, ts_ms: int) -> bool:
        return self.cutoff_ms <= ts_ms <= self.now_ms

    def is_before(self, ts_ms: int) -> bool:
        return ts_ms < self.cutoff_ms
