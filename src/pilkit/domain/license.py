"""License terms registration, attachment and token minting."""

from __future__ import annotations

from dataclasses import dataclass, replace
from logging import getLogger
from typing import TYPE_CHECKING, cast

from .address import is_zero_address, validate_address
from .contracts import ContractCall, Endpoint, LedgerEvent
from .errors import (
    CurrencyRequiredError,
    InvalidRequestError,
    IpNotRegisteredError,
    LicenseTermsLookupError,
    LicenseTermsNotFoundError,
    LicenseTermsRuleError,
    Operation,
    PolicyNotWhitelistedError,
    TermsNotAttachedError,
    TokenNotWhitelistedError,
    operation_failures,
)
from .terms import (
    LicenseTerms,
    commercial_remix_terms,
    commercial_use_terms,
    non_commercial_social_remixing_terms,
)
from .transactions import (
    Confirmed,
    EncodedPayload,
    TxOptions,
    TxOutcome,
    as_int,
    decode_first_event,
    outcome_encoded_tx_data,
    outcome_tx_hash,
    submit_transaction,
)
from .validation import RuleViolation, validate_license_terms

if TYPE_CHECKING:
    from .contracts import ContractAddresses
    from .ports.ledger import EncodedTxData, LedgerGateway

log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class LicensingOptions:
    """Client-side policies that the ledger does not enforce for us."""

    reject_zero_amount_mint: bool = False


@dataclass(frozen=True, slots=True)
class RegisterTermsResult:
    """Outcome of a terms registration.

    ``outcome`` is ``None`` when identical terms were already registered; in
    that case ``license_terms_id`` is the existing id and nothing was written.
    """

    outcome: TxOutcome | None
    license_terms_id: int | None = None

    @property
    def tx_hash(self) -> str | None:
        return outcome_tx_hash(self.outcome)

    @property
    def encoded_tx_data(self) -> EncodedTxData | None:
        return outcome_encoded_tx_data(self.outcome)


@dataclass(frozen=True, slots=True)
class AttachResult:
    """``success`` is ``False`` only when the terms were already attached."""

    success: bool
    outcome: TxOutcome | None = None

    @property
    def tx_hash(self) -> str:
        return outcome_tx_hash(self.outcome) or ""

    @property
    def encoded_tx_data(self) -> EncodedTxData | None:
        return outcome_encoded_tx_data(self.outcome)


@dataclass(frozen=True, slots=True)
class MintResult:
    outcome: TxOutcome
    license_token_ids: list[int] | None = None

    @property
    def tx_hash(self) -> str | None:
        return outcome_tx_hash(self.outcome)

    @property
    def encoded_tx_data(self) -> EncodedTxData | None:
        return outcome_encoded_tx_data(self.outcome)


class LicenseClient:
    """Validates license requests against local rules and on-chain state before writing."""

    def __init__(
        self,
        gateway: LedgerGateway,
        contracts: ContractAddresses,
        *,
        account: str,
        options: LicensingOptions | None = None,
    ) -> None:
        self._gateway = gateway
        self._contracts = contracts
        self._account = account
        self._options = options or LicensingOptions()

    async def register_pil_terms(
        self,
        terms: LicenseTerms,
        tx_options: TxOptions | None = None,
    ) -> RegisterTermsResult:
        with operation_failures(Operation.REGISTER_LICENSE_TERMS):
            return await self._register_terms(terms, tx_options or TxOptions())

    async def register_non_com_social_remixing_pil(
        self,
        tx_options: TxOptions | None = None,
    ) -> RegisterTermsResult:
        with operation_failures(Operation.REGISTER_NON_COM_SOCIAL_REMIXING_PIL):
            terms = non_commercial_social_remixing_terms()
            return await self._register_terms(terms, tx_options or TxOptions())

    async def register_commercial_use_pil(
        self,
        *,
        default_minting_fee: int,
        currency: str,
        tx_options: TxOptions | None = None,
    ) -> RegisterTermsResult:
        with operation_failures(Operation.REGISTER_COMMERCIAL_USE_PIL):
            terms = commercial_use_terms(
                default_minting_fee=int(default_minting_fee),
                currency=currency,
                royalty_policy=self._contracts.royalty_policy_lap,
            )
            return await self._register_terms(terms, tx_options or TxOptions())

    async def register_commercial_remix_pil(
        self,
        *,
        default_minting_fee: int,
        commercial_rev_share: int,
        currency: str,
        tx_options: TxOptions | None = None,
    ) -> RegisterTermsResult:
        with operation_failures(Operation.REGISTER_COMMERCIAL_REMIX_PIL):
            terms = commercial_remix_terms(
                default_minting_fee=int(default_minting_fee),
                commercial_rev_share=commercial_rev_share,
                currency=currency,
                royalty_policy=self._contracts.royalty_policy_lap,
            )
            return await self._register_terms(terms, tx_options or TxOptions())

    async def attach_license_terms(
        self,
        *,
        ip_id: str,
        license_terms_id: int,
        license_template: str | None = None,
        tx_options: TxOptions | None = None,
    ) -> AttachResult:
        with operation_failures(Operation.ATTACH_LICENSE_TERMS):
            ip_id = validate_address(ip_id, "ip_id")
            license_terms_id = int(license_terms_id)
            if not await self._read(Endpoint.IS_REGISTERED, ip_id):
                raise IpNotRegisteredError(
                    f"The IP with id {ip_id} is not registered.", ip_id=ip_id
                )
            await self._require_terms_exist(license_terms_id)
            template = self._template_or_default(license_template)

            if await self._is_attached(ip_id, template, license_terms_id):
                log.info("License terms %s already attached to %s", license_terms_id, ip_id)
                return AttachResult(success=False)

            call = self._call(Endpoint.ATTACH_LICENSE_TERMS, ip_id, template, license_terms_id)
            outcome = await submit_transaction(self._gateway, call, tx_options or TxOptions())
            return AttachResult(success=True, outcome=outcome)

    async def mint_license_tokens(
        self,
        *,
        licensor_ip_id: str,
        license_terms_id: int,
        license_template: str | None = None,
        receiver: str | None = None,
        amount: int = 1,
        royalty_context: bytes = b"",
        tx_options: TxOptions | None = None,
    ) -> MintResult:
        with operation_failures(Operation.MINT_LICENSE_TOKENS):
            licensor_ip_id = validate_address(licensor_ip_id, "licensor_ip_id")
            license_terms_id = int(license_terms_id)
            if not await self._read(Endpoint.IS_REGISTERED, licensor_ip_id):
                raise IpNotRegisteredError(
                    f"The licensor IP with id {licensor_ip_id} is not registered.",
                    ip_id=licensor_ip_id,
                )
            template = self._template_or_default(license_template)
            receiver = (
                validate_address(receiver, "receiver") if receiver is not None else self._account
            )
            self._check_mint_amount(amount)
            await self._require_terms_exist(license_terms_id)
            if not await self._is_attached(licensor_ip_id, template, license_terms_id):
                raise TermsNotAttachedError(license_terms_id, licensor_ip_id)

            call = self._call(
                Endpoint.MINT_LICENSE_TOKENS,
                licensor_ip_id,
                template,
                license_terms_id,
                amount,
                receiver,
                royalty_context,
            )
            outcome = await submit_transaction(self._gateway, call, tx_options or TxOptions())
            if not isinstance(outcome, Confirmed):
                return MintResult(outcome=outcome)

            event = decode_first_event(
                self._gateway, LedgerEvent.LICENSE_TOKENS_MINTED, outcome.receipt
            )
            start = as_int(event["startLicenseTokenId"])
            minted = event.get("amount")
            if minted is not None and as_int(minted) != amount:
                log.warning(
                    "Mint event reports amount %s, requested %s; using requested amount",
                    minted,
                    amount,
                )
            return MintResult(outcome=outcome, license_token_ids=list(range(start, start + amount)))

    async def get_license_terms(self, license_terms_id: int) -> LicenseTerms:
        try:
            raw = await self._read(Endpoint.GET_LICENSE_TERMS, int(license_terms_id))
            if isinstance(raw, LicenseTerms):
                return raw
            if not isinstance(raw, tuple | list):
                msg = f"Unexpected license terms payload: {raw!r}"
                raise TypeError(msg)
            return LicenseTerms.from_abi_tuple(cast("tuple[object, ...]", tuple(raw)))
        except Exception as exc:
            raise LicenseTermsLookupError(exc) from exc

    async def _register_terms(self, terms: LicenseTerms, options: TxOptions) -> RegisterTermsResult:
        terms = _normalize_terms_addresses(terms)
        check = validate_license_terms(terms)
        if isinstance(check, RuleViolation):
            log.debug("License terms rejected: %s on %s", check.kind, check.field)
            raise LicenseTermsRuleError(check)

        terms_tuple = terms.as_abi_tuple()
        call = self._call(Endpoint.REGISTER_LICENSE_TERMS, terms_tuple)
        if options.encoded_tx_data_only:
            return RegisterTermsResult(outcome=EncodedPayload(self._gateway.encode(call)))

        has_policy = not is_zero_address(terms.royalty_policy)
        has_currency = not is_zero_address(terms.currency)
        if has_policy and not await self._read(
            Endpoint.IS_WHITELISTED_ROYALTY_POLICY, terms.royalty_policy
        ):
            raise PolicyNotWhitelistedError("The royalty policy is not whitelisted.")
        if has_currency and not await self._read(
            Endpoint.IS_WHITELISTED_ROYALTY_TOKEN, terms.currency
        ):
            raise TokenNotWhitelistedError("The currency token is not whitelisted.")
        if has_policy and not has_currency:
            raise CurrencyRequiredError("Royalty policy requires currency token.")

        existing_id = as_int(await self._read(Endpoint.GET_LICENSE_TERMS_ID, terms_tuple))
        if existing_id:
            log.info("License terms already registered as %s; skipping write", existing_id)
            return RegisterTermsResult(outcome=None, license_terms_id=existing_id)

        outcome = await submit_transaction(self._gateway, call, options)
        if not isinstance(outcome, Confirmed):
            return RegisterTermsResult(outcome=outcome)

        event = decode_first_event(
            self._gateway, LedgerEvent.LICENSE_TERMS_REGISTERED, outcome.receipt
        )
        license_terms_id = as_int(event["licenseTermsId"])
        return RegisterTermsResult(outcome=outcome, license_terms_id=license_terms_id)

    async def _require_terms_exist(self, license_terms_id: int) -> None:
        if not await self._read(Endpoint.LICENSE_TERMS_EXISTS, license_terms_id):
            raise LicenseTermsNotFoundError(license_terms_id)

    async def _is_attached(self, ip_id: str, template: str, license_terms_id: int) -> bool:
        return bool(
            await self._read(
                Endpoint.HAS_IP_ATTACHED_LICENSE_TERMS, ip_id, template, license_terms_id
            )
        )

    def _template_or_default(self, license_template: str | None) -> str:
        if license_template is None:
            return self._contracts.pil_template
        return validate_address(license_template, "license_template")

    def _check_mint_amount(self, amount: int) -> None:
        if amount < 0:
            raise InvalidRequestError("Amount must not be negative.")
        if amount == 0 and self._options.reject_zero_amount_mint:
            raise InvalidRequestError("Amount must be greater than 0.")

    async def _read(self, endpoint: Endpoint, *args: object) -> object:
        return await self._gateway.read(self._call(endpoint, *args))

    def _call(self, endpoint: Endpoint, *args: object) -> ContractCall:
        return ContractCall(self._contracts.address_of(endpoint.contract), endpoint, args)


def _normalize_terms_addresses(terms: LicenseTerms) -> LicenseTerms:
    return replace(
        terms,
        royalty_policy=validate_address(terms.royalty_policy, "royalty_policy"),
        currency=validate_address(terms.currency, "currency"),
        commercializer_checker=validate_address(
            terms.commercializer_checker, "commercializer_checker"
        ),
    )
