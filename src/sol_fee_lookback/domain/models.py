from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Optional, Tuple, Union

from .time_window import LookbackWindow

LAMPORTS_PER_SOL = 1_000_000_000


@dataclass(frozen=True)
class TransactionRef:
    signature: str
    ts_ms: Optional[int]          # blockTime * 1000; None when the node has no block time


@dataclass(frozen=True)
class SignaturePage:
    refs: Tuple[TransactionRef, ...]
    next_cursor: Optional[str] = None


# getTransaction results, tagged at the adapter boundary
@dataclass(frozen=True)
class TxFound:
    ref: TransactionRef
    payload: Dict[str, Any]


@dataclass(frozen=True)
class TxNotFound:
    ref: TransactionRef


@dataclass(frozen=True)
class TxMalformed:
    ref: TransactionRef
    reason: str


TransactionResult = Union[TxFound, TxNotFound, TxMalformed]


@dataclass(frozen=True)
class FeeEntry:
    tx_ref: TransactionRef
    amount: int                   # lamports
    payer: str
    success: bool = True
    compute_units: Optional[int] = None
    ts_ms: Optional[int] = None

    def __post_init__(self):
        if self.amount < 0:
            raise ValueError(f"fee amount must be non-negative, got {self.amount}")


@dataclass(frozen=True)
class FeeReport:
    window: LookbackWindow
    entries_count: int
    total: int
    average: Optional[Decimal]    # None => no data
    min: Optional[int]
    max: Optional[int]
    successful_count: int = 0
    failed_count: int = 0
    skipped_count: int = 0
    scanned_count: int = 0

    @property
    def has_data(self) -> bool:
        return self.entries_count > 0

    @property
    def total_sol(self) -> Decimal:
        return Decimal(self.total) / LAMPORTS_PER_SOL

    @property
    def success_rate(self) -> Optional[Decimal]:
        if not self.entries_count:
            return None
        return Decimal(self.successful_count * 100) / self.entries_count
