"""ABI fragments for the registry contracts and helpers to encode/decode them."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from eth_abi import decode, encode
from eth_utils import (
    decode_hex,
    encode_hex,
    event_signature_to_log_topic,
    function_signature_to_4byte_selector,
)

from pilkit.domain.contracts import Endpoint, LedgerEvent

if TYPE_CHECKING:
    from pilkit.domain.contracts import ContractCall
    from pilkit.domain.ports.ledger import LogRecord, TransactionReceipt

PIL_TERMS = (
    "(bool,address,uint256,uint256,bool,bool,address,bytes,"
    "uint32,uint256,bool,bool,bool,bool,uint256,address,string)"
)


@dataclass(frozen=True, slots=True)
class FunctionAbi:
    name: str
    inputs: tuple[str, ...]
    outputs: tuple[str, ...] = ()

    @property
    def signature(self) -> str:
        return f"{self.name}({','.join(self.inputs)})"

    @property
    def selector(self) -> bytes:
        return function_signature_to_4byte_selector(self.signature)


@dataclass(frozen=True, slots=True)
class EventParam:
    name: str
    type: str
    indexed: bool = False


@dataclass(frozen=True, slots=True)
class EventAbi:
    name: str
    params: tuple[EventParam, ...]

    @property
    def signature(self) -> str:
        return f"{self.name}({','.join(param.type for param in self.params)})"

    @property
    def topic(self) -> str:
        return encode_hex(event_signature_to_log_topic(self.signature))


FUNCTIONS: dict[Endpoint, FunctionAbi] = {
    Endpoint.IS_REGISTERED: FunctionAbi("isRegistered", ("address",), ("bool",)),
    Endpoint.HAS_IP_ATTACHED_LICENSE_TERMS: FunctionAbi(
        "hasIpAttachedLicenseTerms", ("address", "address", "uint256"), ("bool",)
    ),
    Endpoint.ATTACH_LICENSE_TERMS: FunctionAbi(
        "attachLicenseTerms", ("address", "address", "uint256")
    ),
    Endpoint.MINT_LICENSE_TOKENS: FunctionAbi(
        "mintLicenseTokens",
        ("address", "address", "uint256", "uint256", "address", "bytes"),
        ("uint256",),
    ),
    Endpoint.REGISTER_LICENSE_TERMS: FunctionAbi(
        "registerLicenseTerms", (PIL_TERMS,), ("uint256",)
    ),
    Endpoint.GET_LICENSE_TERMS_ID: FunctionAbi("getLicenseTermsId", (PIL_TERMS,), ("uint256",)),
    Endpoint.GET_LICENSE_TERMS: FunctionAbi("getLicenseTerms", ("uint256",), (PIL_TERMS,)),
    Endpoint.LICENSE_TERMS_EXISTS: FunctionAbi("exists", ("uint256",), ("bool",)),
    Endpoint.IS_WHITELISTED_ROYALTY_POLICY: FunctionAbi(
        "isWhitelistedRoyaltyPolicy", ("address",), ("bool",)
    ),
    Endpoint.IS_WHITELISTED_ROYALTY_TOKEN: FunctionAbi(
        "isWhitelistedRoyaltyToken", ("address",), ("bool",)
    ),
    Endpoint.RAISE_DISPUTE: FunctionAbi(
        "raiseDispute", ("address", "address", "string", "bytes32", "bytes"), ("uint256",)
    ),
    Endpoint.CANCEL_DISPUTE: FunctionAbi("cancelDispute", ("uint256", "bytes")),
}

EVENTS: dict[LedgerEvent, EventAbi] = {
    LedgerEvent.LICENSE_TERMS_REGISTERED: EventAbi(
        "LicenseTermsRegistered",
        (
            EventParam("licenseTermsId", "uint256", indexed=True),
            EventParam("licenseTemplate", "address", indexed=True),
            EventParam("licenseTerms", "bytes"),
        ),
    ),
    LedgerEvent.LICENSE_TOKENS_MINTED: EventAbi(
        "LicenseTokensMinted",
        (
            EventParam("caller", "address", indexed=True),
            EventParam("licensorIpId", "address", indexed=True),
            EventParam("licenseTemplate", "address"),
            EventParam("licenseTermsId", "uint256", indexed=True),
            EventParam("amount", "uint256"),
            EventParam("receiver", "address"),
            EventParam("startLicenseTokenId", "uint256"),
        ),
    ),
    LedgerEvent.DISPUTE_RAISED: EventAbi(
        "DisputeRaised",
        (
            EventParam("disputeId", "uint256"),
            EventParam("targetIpId", "address"),
            EventParam("disputeInitiator", "address"),
            EventParam("arbitrationPolicy", "address"),
            EventParam("linkToDisputeEvidence", "string"),
            EventParam("targetTag", "bytes32"),
            EventParam("data", "bytes"),
        ),
    ),
}


def encode_call(call: ContractCall) -> str:
    function = FUNCTIONS[call.endpoint]
    arguments = encode(list(function.inputs), list(call.args))
    return encode_hex(function.selector + arguments)


def decode_result(endpoint: Endpoint, result: str) -> object:
    """Decode ``eth_call`` output; single-value returns are unwrapped."""

    function = FUNCTIONS[endpoint]
    values = decode(list(function.outputs), decode_hex(result))
    if len(values) == 1:
        return values[0]
    return values


def decode_logs(event: LedgerEvent, receipt: TransactionReceipt) -> list[dict[str, object]]:
    abi = EVENTS[event]
    return [_decode_log(abi, log) for log in receipt.logs if _matches(abi, log)]


def _matches(abi: EventAbi, log: LogRecord) -> bool:
    return bool(log.topics) and log.topics[0].lower() == abi.topic.lower()


def _decode_log(abi: EventAbi, log: LogRecord) -> dict[str, object]:
    indexed = [param for param in abi.params if param.indexed]
    unindexed = [param for param in abi.params if not param.indexed]
    if len(log.topics) != len(indexed) + 1:
        msg = f"{abi.name} log has {len(log.topics)} topics, expected {len(indexed) + 1}"
        raise ValueError(msg)

    decoded: dict[str, object] = {}
    for param, topic in zip(indexed, log.topics[1:], strict=True):
        (decoded[param.name],) = decode([param.type], decode_hex(topic))
    values = decode([param.type for param in unindexed], decode_hex(log.data))
    for param, value in zip(unindexed, values, strict=True):
        decoded[param.name] = value
    return {param.name: decoded[param.name] for param in abi.params}
