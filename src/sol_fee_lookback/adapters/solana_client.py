# src/sol_fee_lookback/adapters/solana_client.py
import itertools
from typing import Any, List, Optional
import httpx


class SolanaRPCClient:
    """Minimal Solana JSON-RPC client (POST JSON to a single endpoint)."""
    def __init__(self, base_url: str, timeout: float = 15.0):
        self._base = base_url.rstrip("/")
        self._client = httpx.Client(timeout=timeout)
        self._ids = itertools.count(1)

    def call(self, method: str, params: List[Any], timeout: Optional[float] = None) -> httpx.Response:
        payload = {"jsonrpc": "2.0", "id": next(self._ids), "method": method, "params": params}
        if timeout is None:
            return self._client.post(self._base, json=payload)
        return self._client.post(self._base, json=payload, timeout=timeout)

    def close(self) -> None:
        self._client.close()

    def __enter__(self): return self
    def __exit__(self, exc_type, exc, tb): self.close()
