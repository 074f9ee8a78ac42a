# src/sol_fee_lookback/services/extract/fee_extractor.py
from typing import Any, Dict, Optional

from ...domain.models import FeeEntry, TransactionRef, TxFound, TxMalformed, TxNotFound
from ...errors import FetchFailedError, RateLimitedError, RecordSkipped
from ...ports.transaction_source import TransactionSource
from ..ratelimit.rate_limiter import RateLimiter


def fee_payer_of(payload: Dict[str, Any]) -> str:
    """First account key of the message: the fee-payer slot on Solana.

    Accepts "json" encoding (plain base58 strings) and "jsonParsed"
    ({"pubkey": ..., "signer": ...} objects).
    """
    message = payload["transaction"]["message"]
    keys = message["accountKeys"]
    if not keys:
        raise ValueError("empty accountKeys")
    first = keys[0]
    if isinstance(first, dict):
        first = first["pubkey"]
    if not isinstance(first, str) or not first:
        raise ValueError(f"bad fee payer key {first!r}")
    return first


def parse_fee_entry(address: str, found: TxFound) -> Optional[FeeEntry]:
    payload = found.payload
    payer = fee_payer_of(payload)
    if payer != address:
        return None

    meta = payload["meta"]
    fee = meta["fee"]
    if isinstance(fee, bool) or not isinstance(fee, int):
        raise ValueError(f"fee is not an integer: {fee!r}")

    cu = meta.get("computeUnitsConsumed")
    block_time = payload.get("blockTime")
    ts_ms = int(block_time) * 1000 if block_time is not None else found.ref.ts_ms
    return FeeEntry(
        tx_ref=found.ref,
        amount=fee,
        payer=payer,
        success=meta.get("err") is None,
        compute_units=int(cu) if cu is not None else None,
        ts_ms=ts_ms,
    )


class FeeExtractor:
    def __init__(self, source: TransactionSource, limiter: RateLimiter):
        self.source = source
        self.limiter = limiter

    def extract(self, address: str, ref: TransactionRef) -> Optional[FeeEntry]:
        """FeeEntry when `address` paid the fee, None when someone else did.

        Raises RecordSkipped for anything that only costs this one record.
        Rate-limit exhaustion is not absorbed.
        """
        try:
            result = self.limiter.call(self.source.get_transaction, ref,
                                       what=f"getTransaction({ref.signature})")
        except FetchFailedError as e:
            # throttling that ran out of attempts or out of time ends the run
            if e.reason == "rate_limited" or isinstance(e.last_error, RateLimitedError):
                raise
            raise RecordSkipped(ref, f"fetch failed: {e}") from e

        if isinstance(result, TxNotFound):
            raise RecordSkipped(ref, "not found")
        if isinstance(result, TxMalformed):
            raise RecordSkipped(ref, f"malformed: {result.reason}")
        if isinstance(result, TxFound):
            try:
                return parse_fee_entry(address, result)
            except (KeyError, IndexError, TypeError, ValueError) as e:
                raise RecordSkipped(ref, f"parse failed: {type(e).__name__}: {e}") from e
        raise TypeError(f"unexpected transaction result {result!r}")
