"""Identifiers for the registry contracts, their endpoints and events."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class ContractName(StrEnum):
    IP_ASSET_REGISTRY = "ipAssetRegistry"
    LICENSE_REGISTRY = "licenseRegistry"
    LICENSING_MODULE = "licensingModule"
    PIL_TEMPLATE = "piLicenseTemplate"
    ROYALTY_MODULE = "royaltyModule"
    DISPUTE_MODULE = "disputeModule"


class Endpoint(StrEnum):
    """Remote procedures the orchestrators call, keyed as ``<contract>.<function>``."""

    IS_REGISTERED = "ipAssetRegistry.isRegistered"
    HAS_IP_ATTACHED_LICENSE_TERMS = "licenseRegistry.hasIpAttachedLicenseTerms"
    ATTACH_LICENSE_TERMS = "licensingModule.attachLicenseTerms"
    MINT_LICENSE_TOKENS = "licensingModule.mintLicenseTokens"
    REGISTER_LICENSE_TERMS = "piLicenseTemplate.registerLicenseTerms"
    GET_LICENSE_TERMS_ID = "piLicenseTemplate.getLicenseTermsId"
    GET_LICENSE_TERMS = "piLicenseTemplate.getLicenseTerms"
    LICENSE_TERMS_EXISTS = "piLicenseTemplate.exists"
    IS_WHITELISTED_ROYALTY_POLICY = "royaltyModule.isWhitelistedRoyaltyPolicy"
    IS_WHITELISTED_ROYALTY_TOKEN = "royaltyModule.isWhitelistedRoyaltyToken"
    RAISE_DISPUTE = "disputeModule.raiseDispute"
    CANCEL_DISPUTE = "disputeModule.cancelDispute"

    @property
    def contract(self) -> ContractName:
        return ContractName(self.value.split(".", 1)[0])

    @property
    def function(self) -> str:
        return self.value.split(".", 1)[1]


class LedgerEvent(StrEnum):
    LICENSE_TERMS_REGISTERED = "LicenseTermsRegistered"
    LICENSE_TOKENS_MINTED = "LicenseTokensMinted"
    DISPUTE_RAISED = "DisputeRaised"


@dataclass(frozen=True, slots=True)
class ContractAddresses:
    """Deployed addresses of the contracts the client talks to."""

    ip_asset_registry: str
    license_registry: str
    licensing_module: str
    pil_template: str
    royalty_module: str
    royalty_policy_lap: str
    dispute_module: str

    def address_of(self, contract: ContractName) -> str:
        match contract:
            case ContractName.IP_ASSET_REGISTRY:
                return self.ip_asset_registry
            case ContractName.LICENSE_REGISTRY:
                return self.license_registry
            case ContractName.LICENSING_MODULE:
                return self.licensing_module
            case ContractName.PIL_TEMPLATE:
                return self.pil_template
            case ContractName.ROYALTY_MODULE:
                return self.royalty_module
            case ContractName.DISPUTE_MODULE:
                return self.dispute_module


@dataclass(frozen=True, slots=True)
class ContractCall:
    """A single read or write against one contract endpoint."""

    address: str
    endpoint: Endpoint
    args: tuple[object, ...] = ()
