# src/sol_fee_lookback/ports/sink.py
from abc import ABC, abstractmethod
from ..domain.models import FeeEntry


class FeeSink(ABC):
    """Receiver for fee entries as they are produced."""
    @abstractmethod
    def add(self, entry: FeeEntry) -> None: ...
