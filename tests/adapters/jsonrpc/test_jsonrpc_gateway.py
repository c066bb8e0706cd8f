from __future__ import annotations

import asyncio
import json
import time
from collections.abc import Callable

import httpx
import pytest
from aiolimiter import AsyncLimiter
from eth_abi import encode
from eth_utils import encode_hex

from pilkit.adapters.http_resilience import ResilientClient
from pilkit.adapters.jsonrpc import (
    JsonRpcLedgerGateway,
    LedgerRPCError,
    LedgerTransportError,
    TransactionRevertedError,
)
from pilkit.adapters.jsonrpc.abi import EVENTS, encode_call
from pilkit.config.http_resilience import NO_RETRY, RateLimit, ResilienceConfig
from pilkit.config.ledger import LedgerConfig
from pilkit.domain.contracts import ContractCall, Endpoint, LedgerEvent
from pilkit.domain.errors import LedgerError
from tests.support.ledger import ACCOUNT, CONTRACTS, IP_ID

RPC_URL = "http://node.test/rpc"
TX_HASH = "0x" + "ab" * 32

RpcHandler = Callable[[dict[str, object]], dict[str, object]]


def _make_gateway(
    handler: RpcHandler, *, ratelimit: RateLimit | None = None
) -> tuple[JsonRpcLedgerGateway, list[dict[str, object]], list[ResilienceConfig]]:
    """Return the gateway, every request body, and the config of the client that sent it."""
    requests: list[dict[str, object]] = []
    senders: list[ResilienceConfig] = []

    def factory(
        resilience: ResilienceConfig, *, limiter: AsyncLimiter | None = None
    ) -> ResilientClient:
        async def async_handler(request: httpx.Request) -> httpx.Response:
            body = json.loads(request.content)
            requests.append(body)
            senders.append(resilience)
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], **handler(body)})

        client = ResilientClient(resilience, limiter=limiter)
        client._client = httpx.AsyncClient(transport=httpx.MockTransport(async_handler))  # noqa: SLF001  # type: ignore[reportPrivateUsage]
        return client

    config = LedgerConfig(
        rpc_url=RPC_URL,
        account=ACCOUNT,
        contracts=CONTRACTS,
        resilience=ResilienceConfig(name="ledger", ratelimit=ratelimit),
        confirmation_poll_seconds=0.0,
    )
    return JsonRpcLedgerGateway(config=config, client_factory=factory), requests, senders


def _receipt_payload(*, status: str = "0x1", logs: list[object] | None = None) -> dict[str, object]:
    return {
        "transactionHash": TX_HASH,
        "status": status,
        "blockNumber": "0x10",
        "logs": logs or [],
        "gasUsed": "0x5208",
    }


IS_REGISTERED = ContractCall(CONTRACTS.ip_asset_registry, Endpoint.IS_REGISTERED, (IP_ID,))
CANCEL = ContractCall(CONTRACTS.dispute_module, Endpoint.CANCEL_DISPUTE, (1, b""))


def test_read_sends_eth_call_and_decodes_result() -> None:
    gateway, requests, _ = _make_gateway(
        lambda _body: {"result": encode_hex(encode(["bool"], [True]))}
    )

    assert asyncio.run(gateway.read(IS_REGISTERED)) is True
    (request,) = requests
    assert request["method"] == "eth_call"
    assert request["params"] == [
        {"to": CONTRACTS.ip_asset_registry, "data": encode_call(IS_REGISTERED)},
        "latest",
    ]


def test_write_sends_transaction_from_configured_account_without_retries() -> None:
    gateway, requests, senders = _make_gateway(lambda _body: {"result": TX_HASH})

    tx_hash = asyncio.run(gateway.write(CANCEL))

    assert tx_hash == TX_HASH
    (request,) = requests
    assert request["method"] == "eth_sendTransaction"
    assert request["params"] == [
        {"from": ACCOUNT, "to": CONTRACTS.dispute_module, "data": encode_call(CANCEL)}
    ]
    assert senders[0].retry == NO_RETRY


def test_read_keeps_default_retry_policy() -> None:
    gateway, _, senders = _make_gateway(
        lambda _body: {"result": encode_hex(encode(["bool"], [False]))}
    )

    asyncio.run(gateway.read(IS_REGISTERED))

    assert senders[0].retry != NO_RETRY


def test_request_ids_increase() -> None:
    gateway, requests, _ = _make_gateway(
        lambda _body: {"result": encode_hex(encode(["bool"], [True]))}
    )

    asyncio.run(gateway.read(IS_REGISTERED))
    asyncio.run(gateway.read(IS_REGISTERED))

    assert [request["id"] for request in requests] == [1, 2]


def test_encode_does_not_touch_network() -> None:
    gateway, requests, _ = _make_gateway(lambda _body: pytest.fail("unexpected request"))

    encoded = gateway.encode(CANCEL)

    assert encoded.to == CONTRACTS.dispute_module
    assert encoded.data == encode_call(CANCEL)
    assert requests == []


def test_rpc_error_is_raised_with_code(caplog: pytest.LogCaptureFixture) -> None:
    gateway, _, _ = _make_gateway(
        lambda _body: {"error": {"code": -32000, "message": "execution reverted"}}
    )

    with pytest.raises(LedgerRPCError) as exc:
        asyncio.run(gateway.read(IS_REGISTERED))

    assert exc.value.code == -32000
    assert str(exc.value) == "execution reverted"
    assert isinstance(exc.value, LedgerError)
    assert "Ledger RPC error -32000 on eth_call" in caplog.text


def test_http_failure_becomes_transport_error() -> None:
    async def failing(_request: httpx.Request) -> httpx.Response:
        return httpx.Response(502, text="bad gateway")

    def factory(
        resilience: ResilienceConfig, *, limiter: AsyncLimiter | None = None
    ) -> ResilientClient:
        client = ResilientClient(resilience, limiter=limiter)
        client._client = httpx.AsyncClient(transport=httpx.MockTransport(failing))  # noqa: SLF001  # type: ignore[reportPrivateUsage]
        return client

    config = LedgerConfig(
        rpc_url=RPC_URL,
        account=ACCOUNT,
        contracts=CONTRACTS,
        resilience=ResilienceConfig(name="ledger"),
    )
    gateway = JsonRpcLedgerGateway(config=config, client_factory=factory)

    with pytest.raises(LedgerTransportError, match="eth_sendTransaction request failed"):
        asyncio.run(gateway.write(CANCEL))


def test_unexpected_result_type_is_rejected() -> None:
    gateway, _, _ = _make_gateway(lambda _body: {"result": None})

    with pytest.raises(LedgerTransportError, match="Unexpected transaction hash"):
        asyncio.run(gateway.write(CANCEL))


def test_wait_for_confirmation_polls_until_receipt() -> None:
    responses: list[object] = [None, None, _receipt_payload()]

    def handler(body: dict[str, object]) -> dict[str, object]:
        assert body["method"] == "eth_getTransactionReceipt"
        assert body["params"] == [TX_HASH]
        return {"result": responses.pop(0)}

    gateway, requests, _ = _make_gateway(handler)

    receipt = asyncio.run(gateway.wait_for_confirmation(TX_HASH))

    assert len(requests) == 3
    assert receipt.tx_hash == TX_HASH
    assert receipt.block_number == 16
    assert receipt.succeeded


def test_wait_for_confirmation_raises_on_revert() -> None:
    gateway, _, _ = _make_gateway(lambda _body: {"result": _receipt_payload(status="0x0")})

    with pytest.raises(TransactionRevertedError) as exc:
        asyncio.run(gateway.wait_for_confirmation(TX_HASH))

    assert exc.value.receipt.status == 0
    assert str(exc.value) == f"Transaction {TX_HASH} reverted in block 16"


def test_wait_for_confirmation_rejects_malformed_receipt() -> None:
    gateway, _, _ = _make_gateway(lambda _body: {"result": {"status": "0x1"}})

    with pytest.raises(LedgerTransportError, match=f"Malformed receipt for {TX_HASH}"):
        asyncio.run(gateway.wait_for_confirmation(TX_HASH))


def test_confirmed_receipt_events_are_decoded() -> None:
    abi = EVENTS[LedgerEvent.DISPUTE_RAISED]
    tag = b"PLAGIARISM".ljust(32, b"\x00")
    data = encode(
        ["uint256", "address", "address", "address", "string", "bytes32", "bytes"],
        [9, IP_ID, ACCOUNT, CONTRACTS.dispute_module, "ipfs://evidence", tag, b""],
    )
    log = {
        "address": CONTRACTS.dispute_module,
        "topics": [abi.topic],
        "data": encode_hex(data),
        "logIndex": "0x0",
    }
    gateway, _, _ = _make_gateway(lambda _body: {"result": _receipt_payload(logs=[log])})

    receipt = asyncio.run(gateway.wait_for_confirmation(TX_HASH))
    events = gateway.decode_event(LedgerEvent.DISPUTE_RAISED, receipt)

    assert len(receipt.logs) == 1
    assert events[0]["disputeId"] == 9
    assert events[0]["targetIpId"] == IP_ID
    assert events[0]["targetTag"] == tag


def test_reads_share_one_rate_limit() -> None:
    gateway, requests, _ = _make_gateway(
        lambda _body: {"result": encode_hex(encode(["bool"], [True]))},
        ratelimit=RateLimit(max_calls=1, per_seconds=0.2),
    )

    async def read_three_times() -> float:
        started = time.monotonic()
        for _ in range(3):
            await gateway.read(IS_REGISTERED)
        return time.monotonic() - started

    elapsed = asyncio.run(read_three_times())

    assert len(requests) == 3
    assert elapsed >= 0.35


def test_writes_draw_from_the_read_budget() -> None:
    def handler(body: dict[str, object]) -> dict[str, object]:
        if body["method"] == "eth_sendTransaction":
            return {"result": TX_HASH}
        return {"result": encode_hex(encode(["bool"], [True]))}

    gateway, _, senders = _make_gateway(
        handler, ratelimit=RateLimit(max_calls=1, per_seconds=0.2)
    )

    async def read_then_write() -> float:
        started = time.monotonic()
        await gateway.read(IS_REGISTERED)
        await gateway.write(CANCEL)
        return time.monotonic() - started

    elapsed = asyncio.run(read_then_write())

    assert [sender.retry == NO_RETRY for sender in senders] == [False, True]
    assert elapsed >= 0.15


def test_gateway_closes_both_clients() -> None:
    clients: list[ResilientClient] = []

    def factory(
        resilience: ResilienceConfig, *, limiter: AsyncLimiter | None = None
    ) -> ResilientClient:
        client = ResilientClient(resilience, limiter=limiter)
        clients.append(client)
        return client

    config = LedgerConfig(
        rpc_url=RPC_URL,
        account=ACCOUNT,
        contracts=CONTRACTS,
        resilience=ResilienceConfig(name="ledger"),
    )

    async def open_and_close() -> None:
        async with JsonRpcLedgerGateway(config=config, client_factory=factory):
            pass

    asyncio.run(open_and_close())

    assert len(clients) == 2
    assert all(client._client.is_closed for client in clients)  # noqa: SLF001  # type: ignore[reportPrivateUsage]
