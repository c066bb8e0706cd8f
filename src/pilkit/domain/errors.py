"""Exception hierarchy raised by the license and dispute clients."""

from __future__ import annotations

from contextlib import contextmanager
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator

    from .validation import RuleViolation

INVALID_ADDRESS_HINT = (
    "Address must be a hex value of 20 bytes (40 hex characters) "
    "and match its checksum counterpart."
)


class PilkitError(Exception):
    """Base class for every error raised by pilkit."""


class InvalidAddressError(PilkitError, ValueError):
    """Raised when a caller-supplied address is malformed."""

    def __init__(self, field: str, value: object) -> None:
        super().__init__(f"request.{field} address is invalid: {value}, {INVALID_ADDRESS_HINT}")
        self.field = field
        self.value = value


class InvalidRequestError(PilkitError, ValueError):
    """Raised when a request parameter is out of range or cannot be encoded."""


class LicenseTermsRuleError(PilkitError, ValueError):
    """Raised when license terms fail local consistency rules."""

    def __init__(self, violation: RuleViolation) -> None:
        super().__init__(violation.message)
        self.violation = violation


class PreconditionError(PilkitError):
    """Raised when on-chain state does not allow the requested operation."""


class PolicyNotWhitelistedError(PreconditionError):
    pass


class TokenNotWhitelistedError(PreconditionError):
    pass


class CurrencyRequiredError(PreconditionError):
    pass


class IpNotRegisteredError(PreconditionError):
    def __init__(self, message: str, *, ip_id: str) -> None:
        super().__init__(message)
        self.ip_id = ip_id


class LicenseTermsNotFoundError(PreconditionError):
    def __init__(self, license_terms_id: int) -> None:
        super().__init__(f"License terms id {license_terms_id} do not exist.")
        self.license_terms_id = license_terms_id


class TermsNotAttachedError(PreconditionError):
    def __init__(self, license_terms_id: int, ip_id: str) -> None:
        super().__init__(
            f"License terms id {license_terms_id} is not attached to the IP with id {ip_id}."
        )
        self.license_terms_id = license_terms_id
        self.ip_id = ip_id


class LedgerError(PilkitError):
    """Raised by ledger gateways for network, RPC or on-chain failures."""


class EventDecodingError(PilkitError):
    """Raised when a confirmed receipt lacks the event an operation depends on."""


class Operation(StrEnum):
    """Public operations; the value is the phrase used in error prefixes."""

    REGISTER_LICENSE_TERMS = "register license terms"
    REGISTER_NON_COM_SOCIAL_REMIXING_PIL = "register non commercial social remixing PIL"
    REGISTER_COMMERCIAL_USE_PIL = "register commercial use PIL"
    REGISTER_COMMERCIAL_REMIX_PIL = "register commercial remix PIL"
    ATTACH_LICENSE_TERMS = "attach license terms"
    MINT_LICENSE_TOKENS = "mint license tokens"
    GET_LICENSE_TERMS = "get license terms"
    RAISE_DISPUTE = "raise dispute"
    CANCEL_DISPUTE = "cancel dispute"


class OperationFailedError(PilkitError):
    """Wraps any failure of a public operation behind a stable prefix.

    ``operation`` identifies the call and ``cause`` keeps the underlying
    exception, which is also chained as ``__cause__``.
    """

    def __init__(self, operation: Operation, cause: BaseException) -> None:
        super().__init__(f"Failed to {operation}: {cause}")
        self.operation = operation
        self.cause = cause


class LicenseTermsLookupError(OperationFailedError):
    """Raised when license terms cannot be read back from the template."""

    def __init__(self, cause: BaseException) -> None:
        super().__init__(Operation.GET_LICENSE_TERMS, cause)


@contextmanager
def operation_failures(operation: Operation) -> Iterator[None]:
    """Re-raise anything escaping the block as :class:`OperationFailedError`."""

    try:
        yield
    except Exception as exc:
        raise OperationFailedError(operation, exc) from exc
