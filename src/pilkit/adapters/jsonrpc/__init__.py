"""Public interface for the JSON-RPC ledger adapter."""

from __future__ import annotations

from .gateway import (
    JsonRpcLedgerGateway,
    LedgerRPCError,
    LedgerTransportError,
    TransactionRevertedError,
)

__all__ = [
    "JsonRpcLedgerGateway",
    "LedgerRPCError",
    "LedgerTransportError",
    "TransactionRevertedError",
]
