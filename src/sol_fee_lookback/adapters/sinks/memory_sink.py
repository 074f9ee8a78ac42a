# src/sol_fee_lookback/adapters/sinks/memory_sink.py
from typing import List
from ...ports.sink import FeeSink
from ...domain.models import FeeEntry


class MemorySink(FeeSink):
    def __init__(self):
        self.entries: List[FeeEntry] = []

    def add(self, entry: FeeEntry) -> None:
        self.entries.append(entry)

    def sorted_by_time(self) -> List[FeeEntry]:
        return sorted(self.entries, key=lambda e: (e.ts_ms or 0, e.tx_ref.signature))
