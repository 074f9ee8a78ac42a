# src/sol_fee_lookback/services/timeseries/hourly.py
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from ...domain.models import FeeEntry
from ...domain.time_window import LookbackWindow, MS_PER_HOUR


@dataclass(frozen=True)
class HourlyBucket:
    hour_ms: int                  # start of the UTC hour
    successful: int
    total: int
    fee_lamports: int

    @property
    def success_rate(self) -> Optional[Decimal]:
        if not self.total:
            return None
        return Decimal(self.successful * 100) / self.total


def _floor_hour(ts_ms: int) -> int:
    return ts_ms - ts_ms % MS_PER_HOUR


def hourly_buckets(entries: Iterable[FeeEntry], window: LookbackWindow) -> List[HourlyBucket]:
    """Per-hour counts from the first entry's hour through the hour after the window end's.

    Hours without transactions are kept (total=0) so the series is gap-free.
    """
    by_hour: Dict[int, List[FeeEntry]] = {}
    for e in entries:
        if e.ts_ms is None:
            continue
        by_hour.setdefault(_floor_hour(e.ts_ms), []).append(e)
    if not by_hour:
        return []

    out: List[HourlyBucket] = []
    hour = min(by_hour)
    last = max(_floor_hour(window.now_ms) + MS_PER_HOUR, max(by_hour))
    while hour <= last:
        rows = by_hour.get(hour, [])
        out.append(HourlyBucket(
            hour_ms=hour,
            successful=sum(1 for r in rows if r.success),
            total=len(rows),
            fee_lamports=sum(r.amount for r in rows),
        ))
        hour += MS_PER_HOUR
    return out
