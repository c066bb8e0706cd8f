"""Domain port definitions for adapters."""

from __future__ import annotations

from .ledger import EncodedTxData, LedgerGateway, LogRecord, TransactionReceipt

__all__ = [
    "EncodedTxData",
    "LedgerGateway",
    "LogRecord",
    "TransactionReceipt",
]
