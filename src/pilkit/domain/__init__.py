"""Request validation and transaction orchestration for the IP registry."""

from __future__ import annotations

from .address import ZERO_ADDRESS, is_zero_address, validate_address
from .contracts import ContractAddresses, ContractCall, ContractName, Endpoint, LedgerEvent
from .dispute import CancelDisputeResult, DisputeClient, RaiseDisputeResult
from .errors import (
    CurrencyRequiredError,
    EventDecodingError,
    InvalidAddressError,
    InvalidRequestError,
    IpNotRegisteredError,
    LedgerError,
    LicenseTermsLookupError,
    LicenseTermsNotFoundError,
    LicenseTermsRuleError,
    Operation,
    OperationFailedError,
    PilkitError,
    PolicyNotWhitelistedError,
    PreconditionError,
    TermsNotAttachedError,
    TokenNotWhitelistedError,
)
from .license import AttachResult, LicenseClient, LicensingOptions, MintResult, RegisterTermsResult
from .terms import (
    LicenseTerms,
    commercial_remix_terms,
    commercial_use_terms,
    non_commercial_social_remixing_terms,
)
from .transactions import Confirmed, EncodedPayload, Submitted, TxOptions, TxOutcome
from .validation import RuleViolation, TermsAccepted, ViolationKind, validate_license_terms

__all__ = [
    "ZERO_ADDRESS",
    "AttachResult",
    "CancelDisputeResult",
    "Confirmed",
    "ContractAddresses",
    "ContractCall",
    "ContractName",
    "CurrencyRequiredError",
    "DisputeClient",
    "EncodedPayload",
    "Endpoint",
    "EventDecodingError",
    "InvalidAddressError",
    "InvalidRequestError",
    "IpNotRegisteredError",
    "LedgerError",
    "LedgerEvent",
    "LicenseClient",
    "LicenseTerms",
    "LicenseTermsLookupError",
    "LicenseTermsNotFoundError",
    "LicenseTermsRuleError",
    "LicensingOptions",
    "MintResult",
    "Operation",
    "OperationFailedError",
    "PilkitError",
    "PolicyNotWhitelistedError",
    "PreconditionError",
    "RaiseDisputeResult",
    "RegisterTermsResult",
    "RuleViolation",
    "Submitted",
    "TermsAccepted",
    "TermsNotAttachedError",
    "TokenNotWhitelistedError",
    "TxOptions",
    "TxOutcome",
    "ViolationKind",
    "commercial_remix_terms",
    "commercial_use_terms",
    "is_zero_address",
    "non_commercial_social_remixing_terms",
    "validate_address",
    "validate_license_terms",
]
