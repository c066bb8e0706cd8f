"""Ledger gateway speaking Ethereum JSON-RPC over HTTP."""

from __future__ import annotations

import asyncio
import itertools
from logging import getLogger
from typing import TYPE_CHECKING, Protocol

import httpx
from pydantic import ValidationError

from pilkit.adapters.http_resilience import ResilientClient, build_limiter
from pilkit.domain.errors import LedgerError
from pilkit.domain.ports.ledger import (
    EncodedTxData,
    LogRecord,
    TransactionReceipt,
)

from .abi import decode_logs, decode_result, encode_call
from .schema import ReceiptPayload, RpcResponse

if TYPE_CHECKING:
    from types import TracebackType

    from aiolimiter import AsyncLimiter

    from pilkit.config.http_resilience import ResilienceConfig
    from pilkit.config.ledger import LedgerConfig
    from pilkit.domain.contracts import ContractCall, LedgerEvent

log = getLogger(__name__)


class ClientFactory(Protocol):
    def __call__(
        self, config: ResilienceConfig, *, limiter: AsyncLimiter | None = None
    ) -> ResilientClient: ...


class LedgerRPCError(LedgerError):
    """Raised when the node answers a JSON-RPC request with an error object."""

    def __init__(self, message: str, *, code: int | None = None) -> None:
        super().__init__(message)
        self.code = code


class LedgerTransportError(LedgerError):
    """Raised when the node cannot be reached or returns a malformed response."""


class TransactionRevertedError(LedgerError):
    def __init__(self, receipt: TransactionReceipt) -> None:
        super().__init__(
            f"Transaction {receipt.tx_hash} reverted in block {receipt.block_number}"
        )
        self.receipt = receipt


class JsonRpcLedgerGateway:
    """Reads via ``eth_call``; writes via ``eth_sendTransaction`` from a node-managed account.

    Reads and receipt polls go through a retrying client, writes through one
    that never retries. Both clients draw from a single rate limiter, so the
    configured budget covers every request the gateway sends.
    """

    def __init__(
        self,
        *,
        config: LedgerConfig,
        client_factory: ClientFactory | None = None,
    ) -> None:
        factory: ClientFactory = client_factory or ResilientClient
        limiter = build_limiter(config.resilience)
        self._config = config
        self._reader = factory(config.resilience, limiter=limiter)
        self._writer = factory(config.resilience.without_retries(), limiter=limiter)
        self._request_ids = itertools.count(1)

    async def __aenter__(self) -> JsonRpcLedgerGateway:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._reader.aclose()
        await self._writer.aclose()

    async def read(self, call: ContractCall) -> object:
        result = await self._rpc(
            "eth_call",
            [{"to": call.address, "data": encode_call(call)}, "latest"],
        )
        if not isinstance(result, str):
            raise LedgerTransportError(f"Unexpected eth_call result for {call.endpoint}")
        return decode_result(call.endpoint, result)

    async def write(self, call: ContractCall) -> str:
        transaction = {"from": self._config.account, "to": call.address, "data": encode_call(call)}
        result = await self._rpc(
            "eth_sendTransaction",
            [transaction],
            client=self._writer,
        )
        if not isinstance(result, str):
            raise LedgerTransportError(f"Unexpected transaction hash for {call.endpoint}")
        return result

    def encode(self, call: ContractCall) -> EncodedTxData:
        return EncodedTxData(to=call.address, data=encode_call(call))

    async def wait_for_confirmation(self, tx_hash: str) -> TransactionReceipt:
        while True:
            payload = await self._rpc("eth_getTransactionReceipt", [tx_hash])
            if payload is not None:
                break
            await asyncio.sleep(self._config.confirmation_poll_seconds)

        try:
            receipt = _translate_receipt(ReceiptPayload.model_validate(payload))
        except ValidationError as exc:
            raise LedgerTransportError(f"Malformed receipt for {tx_hash}: {exc}") from exc
        if not receipt.succeeded:
            raise TransactionRevertedError(receipt)
        return receipt

    def decode_event(
        self, event: LedgerEvent, receipt: TransactionReceipt
    ) -> list[dict[str, object]]:
        return decode_logs(event, receipt)

    async def _rpc(
        self,
        method: str,
        params: list[object],
        *,
        client: ResilientClient | None = None,
    ) -> object:
        request = {
            "jsonrpc": "2.0",
            "id": next(self._request_ids),
            "method": method,
            "params": params,
        }
        try:
            body = await (client or self._reader).post_json(self._config.rpc_url, request)
            envelope = RpcResponse.model_validate(body)
        except (httpx.HTTPError, ValueError) as exc:
            raise LedgerTransportError(f"{method} request failed: {exc}") from exc

        if envelope.error is not None:
            error = envelope.error
            log.error("Ledger RPC error %s on %s: %s", error.code, method, error.message)
            raise LedgerRPCError(error.message, code=error.code)
        return envelope.result


def _translate_receipt(payload: ReceiptPayload) -> TransactionReceipt:
    return TransactionReceipt(
        tx_hash=payload.transaction_hash,
        status=payload.status,
        block_number=payload.block_number,
        logs=tuple(
            LogRecord(address=entry.address, topics=tuple(entry.topics), data=entry.data)
            for entry in payload.logs
        ),
    )
