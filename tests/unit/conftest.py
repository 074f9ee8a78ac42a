# tests/unit/conftest.py
from typing import Dict, List, Optional, Set

import pytest

from sol_fee_lookback.domain.models import SignaturePage, TransactionRef, TxFound, TxMalformed, TxNotFound
from sol_fee_lookback.errors import RateLimitedError, TransportError
from sol_fee_lookback.ports.transaction_source import TransactionSource
from sol_fee_lookback.services.ratelimit.rate_limiter import BackoffPolicy, RateLimiter

WALLET = "7C4jsPZqiKLRQ6JPQcg6V8XMj9os4jHx6iZqBDV7ZJcA"
OTHER = "So11111111111111111111111111111111111111112"
NOW_S = 1_700_000_000
NOW_MS = NOW_S * 1000


def tx(sig: str, ago_s: int, fee: int = 5000, payer: str = WALLET, err=None, cu: Optional[int] = None) -> Dict:
    return {"sig": sig, "ts": NOW_S - ago_s, "fee": fee, "payer": payer, "err": err, "cu": cu}


class FakeChain(TransactionSource):
    """In-memory address history, paged newest first like getSignaturesForAddress."""
    def __init__(self, txs: List[Dict], page_size: int = 100):
        self.txs = sorted(txs, key=lambda t: t["ts"], reverse=True)
        self.page_size = page_size
        self.list_calls: List[Optional[str]] = []
        self.get_calls: List[str] = []
        self.missing: Set[str] = set()
        self.malformed: Set[str] = set()
        self.bad_fee: Set[str] = set()
        self.failing_cursors: Set[Optional[str]] = set()
        self.throttled_sigs: Set[str] = set()

    def list_signatures(self, address: str, before: Optional[str] = None) -> SignaturePage:
        self.list_calls.append(before)
        if before in self.failing_cursors:
            raise TransportError(f"boom before={before}")
        start = 0
        if before is not None:
            start = next(i for i, t in enumerate(self.txs) if t["sig"] == before) + 1
        chunk = self.txs[start:start + self.page_size]
        refs = tuple(TransactionRef(t["sig"], t["ts"] * 1000 if t["ts"] is not None else None)
                     for t in chunk)
        nxt = refs[-1].signature if len(refs) >= self.page_size else None
        return SignaturePage(refs=refs, next_cursor=nxt)

    def get_transaction(self, ref: TransactionRef):
        self.get_calls.append(ref.signature)
        if ref.signature in self.throttled_sigs:
            raise RateLimitedError("429")
        if ref.signature in self.missing:
            return TxNotFound(ref)
        if ref.signature in self.malformed:
            return TxMalformed(ref, "missing meta")
        t = next(t for t in self.txs if t["sig"] == ref.signature)
        meta = {"fee": "n/a" if ref.signature in self.bad_fee else t["fee"], "err": t["err"]}
        if t["cu"] is not None:
            meta["computeUnitsConsumed"] = t["cu"]
        return TxFound(ref, {
            "blockTime": t["ts"],
            "slot": 1,
            "meta": meta,
            "transaction": {"message": {"accountKeys": [t["payer"], OTHER]}, "signatures": [t["sig"]]},
        })


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.t = start
        self.sleeps: List[float] = []

    def __call__(self) -> float:
        return self.t

    def sleep(self, d: float) -> None:
        self.sleeps.append(d)
        self.t += d


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def limiter(clock):
    return RateLimiter(BackoffPolicy(), clock=clock, sleeper=clock.sleep)
