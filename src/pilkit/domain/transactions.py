"""Submission of contract writes and normalisation of their outcomes."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from .errors import EventDecodingError

if TYPE_CHECKING:
    from .contracts import ContractCall, LedgerEvent
    from .ports.ledger import EncodedTxData, LedgerGateway, TransactionReceipt

log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class TxOptions:
    """Per-call transaction handling.

    ``encoded_tx_data_only`` takes precedence: nothing is submitted and
    ``wait_for_transaction`` is ignored.
    """

    wait_for_transaction: bool = False
    encoded_tx_data_only: bool = False


@dataclass(frozen=True, slots=True)
class EncodedPayload:
    encoded_tx_data: EncodedTxData


@dataclass(frozen=True, slots=True)
class Submitted:
    tx_hash: str


@dataclass(frozen=True, slots=True)
class Confirmed:
    tx_hash: str
    receipt: TransactionReceipt


TxOutcome = EncodedPayload | Submitted | Confirmed


def outcome_tx_hash(outcome: TxOutcome | None) -> str | None:
    match outcome:
        case Submitted(tx_hash=tx_hash) | Confirmed(tx_hash=tx_hash):
            return tx_hash
        case _:
            return None


def outcome_encoded_tx_data(outcome: TxOutcome | None) -> EncodedTxData | None:
    if isinstance(outcome, EncodedPayload):
        return outcome.encoded_tx_data
    return None


async def submit_transaction(
    gateway: LedgerGateway,
    call: ContractCall,
    options: TxOptions,
) -> TxOutcome:
    if options.encoded_tx_data_only:
        return EncodedPayload(gateway.encode(call))

    tx_hash = await gateway.write(call)
    log.info("Submitted %s transaction %s", call.endpoint, tx_hash)
    if not options.wait_for_transaction:
        return Submitted(tx_hash)

    receipt = await gateway.wait_for_confirmation(tx_hash)
    log.info("Transaction %s confirmed in block %s", tx_hash, receipt.block_number)
    return Confirmed(tx_hash, receipt)


def as_int(value: object) -> int:
    """Coerce an integer returned by a read or event decoder (hex strings included)."""

    if isinstance(value, int):
        return value
    if isinstance(value, str):
        return int(value, 0)
    msg = f"Expected an integer value, got {value!r}"
    raise TypeError(msg)


def decode_first_event(
    gateway: LedgerGateway,
    event: LedgerEvent,
    receipt: TransactionReceipt,
) -> dict[str, object]:
    decoded = gateway.decode_event(event, receipt)
    if not decoded:
        msg = f"{event} event not found in transaction {receipt.tx_hash}"
        raise EventDecodingError(msg)
    return decoded[0]
