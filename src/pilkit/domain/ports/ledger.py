"""Port for the remote ledger the orchestrators read from and write to."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from pilkit.domain.contracts import ContractCall, LedgerEvent


@dataclass(frozen=True, slots=True)
class EncodedTxData:
    """Unsigned transaction payload a caller can sign and submit itself."""

    to: str
    data: str


@dataclass(frozen=True, slots=True)
class LogRecord:
    address: str
    topics: tuple[str, ...]
    data: str


@dataclass(frozen=True, slots=True)
class TransactionReceipt:
    tx_hash: str
    status: int
    block_number: int
    logs: tuple[LogRecord, ...] = field(default_factory=tuple)

    @property
    def succeeded(self) -> bool:
        return self.status == 1


@runtime_checkable
class LedgerGateway(Protocol):
    """Narrow capability interface over the chain client and contract bindings."""

    async def read(self, call: ContractCall) -> object:
        """Run a read-only call and return its decoded value."""
        ...

    async def write(self, call: ContractCall) -> str:
        """Submit a transaction and return its hash."""
        ...

    def encode(self, call: ContractCall) -> EncodedTxData:
        """Return the payload ``write`` would submit, without submitting it."""
        ...

    async def wait_for_confirmation(self, tx_hash: str) -> TransactionReceipt:
        ...

    def decode_event(
        self, event: LedgerEvent, receipt: TransactionReceipt
    ) -> list[dict[str, object]]:
        """Return every occurrence of ``event`` in ``receipt``, in log order."""
        ...

    async def aclose(self) -> None:
        """Release any connections the gateway holds."""
        ...


__all__ = ["EncodedTxData", "LedgerGateway", "LogRecord", "TransactionReceipt"]
