"""Raising and cancelling disputes against registered IP."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from .address import validate_address
from .contracts import ContractCall, Endpoint, LedgerEvent
from .errors import InvalidRequestError, Operation, operation_failures
from .transactions import (
    Confirmed,
    TxOptions,
    TxOutcome,
    as_int,
    decode_first_event,
    outcome_encoded_tx_data,
    outcome_tx_hash,
    submit_transaction,
)

if TYPE_CHECKING:
    from .contracts import ContractAddresses
    from .ports.ledger import EncodedTxData, LedgerGateway

log = getLogger(__name__)

TAG_SIZE = 32


@dataclass(frozen=True, slots=True)
class RaiseDisputeResult:
    outcome: TxOutcome
    dispute_id: int | None = None

    @property
    def tx_hash(self) -> str | None:
        return outcome_tx_hash(self.outcome)

    @property
    def encoded_tx_data(self) -> EncodedTxData | None:
        return outcome_encoded_tx_data(self.outcome)


@dataclass(frozen=True, slots=True)
class CancelDisputeResult:
    outcome: TxOutcome

    @property
    def tx_hash(self) -> str | None:
        return outcome_tx_hash(self.outcome)

    @property
    def encoded_tx_data(self) -> EncodedTxData | None:
        return outcome_encoded_tx_data(self.outcome)


def encode_dispute_tag(tag: str) -> bytes:
    """Encode a tag such as ``PLAGIARISM`` as a right-padded ``bytes32``."""

    raw = tag.encode("utf-8")
    if not raw:
        raise InvalidRequestError("Dispute tag must not be empty.")
    if len(raw) > TAG_SIZE:
        raise InvalidRequestError(f"Dispute tag {tag!r} exceeds {TAG_SIZE} bytes.")
    return raw.ljust(TAG_SIZE, b"\x00")


class DisputeClient:
    """Submits dispute transactions; the dispute module decides whether they are valid."""

    def __init__(self, gateway: LedgerGateway, contracts: ContractAddresses) -> None:
        self._gateway = gateway
        self._contracts = contracts

    async def raise_dispute(
        self,
        *,
        target_ip_id: str,
        arbitration_policy: str,
        link_to_dispute_evidence: str,
        target_tag: str,
        calldata: bytes = b"",
        tx_options: TxOptions | None = None,
    ) -> RaiseDisputeResult:
        with operation_failures(Operation.RAISE_DISPUTE):
            call = self._call(
                Endpoint.RAISE_DISPUTE,
                validate_address(target_ip_id, "target_ip_id"),
                validate_address(arbitration_policy, "arbitration_policy"),
                link_to_dispute_evidence,
                encode_dispute_tag(target_tag),
                calldata,
            )
            outcome = await submit_transaction(self._gateway, call, tx_options or TxOptions())
            if not isinstance(outcome, Confirmed):
                return RaiseDisputeResult(outcome=outcome)

            event = decode_first_event(self._gateway, LedgerEvent.DISPUTE_RAISED, outcome.receipt)
            dispute_id = as_int(event["disputeId"])
            log.info("Raised dispute %s against %s (%s)", dispute_id, target_ip_id, target_tag)
            return RaiseDisputeResult(outcome=outcome, dispute_id=dispute_id)

    async def cancel_dispute(
        self,
        *,
        dispute_id: int,
        calldata: bytes = b"",
        tx_options: TxOptions | None = None,
    ) -> CancelDisputeResult:
        with operation_failures(Operation.CANCEL_DISPUTE):
            dispute_id = int(dispute_id)
            if dispute_id < 0:
                raise InvalidRequestError(f"Dispute id must not be negative: {dispute_id}")
            call = self._call(Endpoint.CANCEL_DISPUTE, dispute_id, calldata)
            outcome = await submit_transaction(self._gateway, call, tx_options or TxOptions())
            return CancelDisputeResult(outcome=outcome)

    def _call(self, endpoint: Endpoint, *args: object) -> ContractCall:
        return ContractCall(self._contracts.address_of(endpoint.contract), endpoint, args)
