# tests/unit/test_solana_rpc_provider.py
import json

import httpx
import pytest

from sol_fee_lookback.adapters.solana_client import SolanaRPCClient
from sol_fee_lookback.adapters.solana_rpc_provider import SolanaRPCProvider
from sol_fee_lookback.domain.models import TransactionRef, TxFound, TxMalformed, TxNotFound
from sol_fee_lookback.errors import RateLimitedError, TransportError


class FakeResp:
    def __init__(self, status, payload=None, text=None):
        self.status_code = status
        self.text = text if text is not None else json.dumps(payload)


class FakeClient(SolanaRPCClient):
    def __init__(self, responses):
        # responses: list of FakeResp or exceptions, consumed in order
        self.responses = list(responses)
        self.sent = []

    def call(self, method, params, timeout=None):
        self.sent.append((method, params))
        r = self.responses.pop(0)
        if isinstance(r, Exception):
            raise r
        return r


def ok(result):
    return FakeResp(200, {"jsonrpc": "2.0", "id": 1, "result": result})


def sig(s, bt, err=None):
    return {"signature": s, "slot": 10, "blockTime": bt, "err": err, "confirmationStatus": "finalized"}


def test_full_page_carries_cursor_and_request_shape():
    client = FakeClient([ok([sig("a", 300), sig("b", 200, err={"InstructionError": []})])])
    page = SolanaRPCProvider(client, page_limit=2).list_signatures("W", before="z")
    assert [r.signature for r in page.refs] == ["a", "b"]
    assert page.refs[0].ts_ms == 300_000
    assert page.next_cursor == "b"
    method, params = client.sent[0]
    assert method == "getSignaturesForAddress"
    assert params == ["W", {"limit": 2, "commitment": "confirmed", "before": "z"}]


def test_short_page_has_no_cursor_and_null_block_time_is_kept():
    client = FakeClient([ok([sig("a", None)])])
    page = SolanaRPCProvider(client, page_limit=100).list_signatures("W")
    assert page.next_cursor is None
    assert page.refs[0].ts_ms is None
    assert "before" not in client.sent[0][1][1]


def test_empty_history():
    page = SolanaRPCProvider(FakeClient([ok([])])).list_signatures("W")
    assert page.refs == ()
    assert page.next_cursor is None


@pytest.mark.parametrize("resp,exc", [
    (FakeResp(429, text="Too many requests"), RateLimitedError),
    (FakeResp(200, {"error": {"code": -32005, "message": "slow down"}}), RateLimitedError),
    (FakeResp(503, text="unavailable"), TransportError),
    (FakeResp(200, text="<html>"), TransportError),
    (FakeResp(200, {"error": {"code": -32602, "message": "Invalid param"}}), TransportError),
    (httpx.ConnectTimeout("timed out"), TransportError),
])
def test_error_mapping(resp, exc):
    with pytest.raises(exc):
        SolanaRPCProvider(FakeClient([resp])).list_signatures("W")


def test_get_transaction_tags_results():
    ref = TransactionRef("s", 1000)
    good = {"blockTime": 1, "meta": {"fee": 5000, "err": None}, "transaction": {"message": {"accountKeys": ["W"]}}}
    client = FakeClient([ok(good), ok(None), ok({"blockTime": 1, "transaction": {}}), ok([1, 2])])
    p = SolanaRPCProvider(client)

    found = p.get_transaction(ref)
    assert isinstance(found, TxFound) and found.payload["meta"]["fee"] == 5000
    assert isinstance(p.get_transaction(ref), TxNotFound)
    assert isinstance(p.get_transaction(ref), TxMalformed)
    assert isinstance(p.get_transaction(ref), TxMalformed)

    method, params = client.sent[0]
    assert method == "getTransaction"
    assert params[0] == "s"
    assert params[1]["maxSupportedTransactionVersion"] == 0
