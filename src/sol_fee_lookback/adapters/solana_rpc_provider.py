# src/sol_fee_lookback/adapters/solana_rpc_provider.py
import json
from typing import Any, Dict, List, Optional
import httpx

from ..domain.models import (
    SignaturePage, TransactionRef, TransactionResult, TxFound, TxMalformed, TxNotFound,
)
from ..errors import RateLimitedError, TransportError
from ..ports.transaction_source import TransactionSource
from .solana_client import SolanaRPCClient

DEFAULT_PAGE_LIMIT = 100
COMMITMENT = "confirmed"
RATE_LIMIT_STATUSES = {429}
# -32005: "node is behind" / request limit on several providers; some proxies echo 429
RATE_LIMIT_RPC_CODES = {-32005, 429}


class SolanaRPCProvider(TransactionSource):
    def __init__(self, client: SolanaRPCClient, page_limit: int = DEFAULT_PAGE_LIMIT,
                 timeout_sec: Optional[float] = None):
        self.client = client
        self.page_limit = page_limit
        self.timeout_sec = timeout_sec

    # ---------- raw call + error mapping ----------
    def _rpc(self, method: str, params: List[Any]) -> Any:
        try:
            r = self.client.call(method, params, timeout=self.timeout_sec)
        except httpx.HTTPError as e:
            raise TransportError(f"{method}: {type(e).__name__}: {e}") from e

        status = getattr(r, "status_code", None)
        data = r.text
        if status in RATE_LIMIT_STATUSES:
            raise RateLimitedError(f"{method}: http {status}")
        if status != 200:
            raise TransportError(f"{method}: HTTP {status}: {str(data)[:200]}")

        try:
            body = json.loads(data)
        except ValueError as e:
            raise TransportError(f"{method}: invalid JSON body: {str(data)[:200]}") from e
        if not isinstance(body, dict):
            raise TransportError(f"{method}: unexpected body type {type(body).__name__}")

        err = body.get("error")
        if err is not None:
            code = err.get("code") if isinstance(err, dict) else None
            msg = err.get("message", str(err)) if isinstance(err, dict) else str(err)
            if code in RATE_LIMIT_RPC_CODES:
                raise RateLimitedError(f"{method}: rpc {code}: {msg}")
            raise TransportError(f"{method}: rpc error {code}: {msg}")
        return body.get("result")

    # ---------- signatures ----------
    def list_signatures(self, address: str, before: Optional[str] = None) -> SignaturePage:
        opts: Dict[str, Any] = {"limit": self.page_limit, "commitment": COMMITMENT}
        if before is not None:
            opts["before"] = before
        result = self._rpc("getSignaturesForAddress", [address, opts])
        if result is None:
            return SignaturePage(refs=())
        if not isinstance(result, list):
            raise TransportError(f"getSignaturesForAddress: expected a list, got {type(result).__name__}")

        refs = tuple(self._parse_ref(raw) for raw in result)
        next_cursor = refs[-1].signature if len(refs) >= self.page_limit else None
        return SignaturePage(refs=refs, next_cursor=next_cursor)

    @staticmethod
    def _parse_ref(raw: Dict[str, Any]) -> TransactionRef:
        try:
            block_time = raw.get("blockTime")
            return TransactionRef(
                signature=str(raw["signature"]),
                ts_ms=int(block_time) * 1000 if block_time is not None else None,
            )
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            # a page we cannot walk is not a basis for a report
            raise TransportError(f"getSignaturesForAddress: bad entry {raw!r}"[:300]) from e

    # ---------- transactions ----------
    def get_transaction(self, ref: TransactionRef) -> TransactionResult:
        opts = {
            "encoding": "json",
            "maxSupportedTransactionVersion": 0,
            "commitment": COMMITMENT,
        }
        result = self._rpc("getTransaction", [ref.signature, opts])
        if result is None:
            return TxNotFound(ref)
        if not isinstance(result, dict):
            return TxMalformed(ref, f"unexpected result type {type(result).__name__}")
        if not isinstance(result.get("meta"), dict):
            return TxMalformed(ref, "missing meta")
        if not isinstance(result.get("transaction"), dict):
            return TxMalformed(ref, "missing transaction body")
        return TxFound(ref, result)
