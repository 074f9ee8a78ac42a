# src/sol_fee_lookback/services/aggregate/fee_aggregator.py
import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from ...domain.models import FeeEntry, FeeReport, TransactionRef
from ...domain.time_window import LookbackWindow

_DEC2 = Decimal("0.01")


def _q2(x: Decimal) -> Decimal:
    return x.quantize(_DEC2, rounding=ROUND_HALF_UP)


class FeeAggregator:
    """Running count/sum/min/max over fee entries; no entry is retained."""

    def __init__(self, window: LookbackWindow):
        self.window = window
        self.count = 0
        self.total = 0
        self.min: Optional[int] = None
        self.max: Optional[int] = None
        self.successful = 0
        self.failed = 0
        self.skipped = 0
        self.scanned = 0

    def note_scanned(self, n: int) -> None:
        self.scanned += n

    def add(self, entry: FeeEntry) -> None:
        self.count += 1
        self.total += entry.amount
        self.min = entry.amount if self.min is None else min(self.min, entry.amount)
        self.max = entry.amount if self.max is None else max(self.max, entry.amount)
        if entry.success:
            self.successful += 1
        else:
            self.failed += 1

    def skip(self, ref: TransactionRef, reason: str) -> None:
        self.skipped += 1
        logging.warning("skipped signature=%s reason=%s", ref.signature, reason)

    def report(self) -> FeeReport:
        average = _q2(Decimal(self.total) / self.count) if self.count else None
        return FeeReport(
            window=self.window,
            entries_count=self.count,
            total=self.total,
            average=average,
            min=self.min,
            max=self.max,
            successful_count=self.successful,
            failed_count=self.failed,
            skipped_count=self.skipped,
            scanned_count=self.scanned,
        )
