# src/sol_fee_lookback/ports/transaction_source.py
from abc import ABC, abstractmethod
from typing import Optional
from ..domain.models import SignaturePage, TransactionRef, TransactionResult


class TransactionSource(ABC):
    """Read side of the chain: signature listing and single-transaction lookup.

    Implementations raise RateLimitedError / TransportError and never retry.
    """
    @abstractmethod
    def list_signatures(self, address: str, before: Optional[str] = None) -> SignaturePage: ...
    @abstractmethod
    def get_transaction(self, ref: TransactionRef) -> TransactionResult: ...
