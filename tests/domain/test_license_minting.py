from __future__ import annotations

import asyncio

import pytest

from pilkit.domain.contracts import Endpoint, LedgerEvent
from pilkit.domain.errors import (
    EventDecodingError,
    InvalidAddressError,
    InvalidRequestError,
    IpNotRegisteredError,
    OperationFailedError,
    TermsNotAttachedError,
)
from pilkit.domain.license import LicenseClient
from pilkit.domain.terms import non_commercial_social_remixing_terms
from pilkit.domain.transactions import Confirmed, EncodedPayload, Submitted, TxOptions
from tests.support.ledger import (
    ACCOUNT,
    CONTRACTS,
    CUSTOM_TEMPLATE,
    IP_ID,
    OTHER_IP_ID,
    FakeLedgerGateway,
)

WAIT = TxOptions(wait_for_transaction=True)
RECEIVER = "0x8000000000000000000000000000000000000001"


@pytest.fixture
def terms_id(ledger: FakeLedgerGateway) -> int:
    license_terms_id = ledger.store_terms(non_commercial_social_remixing_terms().as_abi_tuple())
    ledger.attach(IP_ID, CONTRACTS.pil_template, license_terms_id)
    return license_terms_id


def test_mint_license_tokens_returns_contiguous_token_ids(
    license_client: LicenseClient, ledger: FakeLedgerGateway, terms_id: int
) -> None:
    ledger.next_token_id = 7

    result = asyncio.run(
        license_client.mint_license_tokens(
            licensor_ip_id=IP_ID, license_terms_id=terms_id, amount=3, tx_options=WAIT
        )
    )

    assert isinstance(result.outcome, Confirmed)
    assert result.license_token_ids == [7, 8, 9]
    assert result.tx_hash == f"0x{1:064x}"


def test_mint_license_tokens_defaults(
    license_client: LicenseClient, ledger: FakeLedgerGateway, terms_id: int
) -> None:
    result = asyncio.run(
        license_client.mint_license_tokens(licensor_ip_id=IP_ID, license_terms_id=terms_id)
    )

    assert isinstance(result.outcome, Submitted)
    assert result.license_token_ids is None
    call = ledger.writes[0]
    assert call.endpoint is Endpoint.MINT_LICENSE_TOKENS
    assert call.address == CONTRACTS.licensing_module
    assert call.args == (IP_ID, CONTRACTS.pil_template, terms_id, 1, ACCOUNT, b"")


def test_mint_license_tokens_explicit_receiver_and_template(
    license_client: LicenseClient, ledger: FakeLedgerGateway
) -> None:
    license_terms_id = ledger.store_terms(non_commercial_social_remixing_terms().as_abi_tuple())
    ledger.attach(IP_ID, CUSTOM_TEMPLATE, license_terms_id)

    asyncio.run(
        license_client.mint_license_tokens(
            licensor_ip_id=IP_ID,
            license_terms_id=license_terms_id,
            license_template=CUSTOM_TEMPLATE,
            receiver=RECEIVER,
            amount=2,
            royalty_context=b"\x01",
        )
    )

    assert ledger.writes[0].args == (
        IP_ID,
        CUSTOM_TEMPLATE,
        license_terms_id,
        2,
        RECEIVER,
        b"\x01",
    )


def test_mint_license_tokens_unregistered_licensor(
    license_client: LicenseClient, ledger: FakeLedgerGateway, terms_id: int
) -> None:
    with pytest.raises(OperationFailedError) as exc:
        asyncio.run(
            license_client.mint_license_tokens(
                licensor_ip_id=OTHER_IP_ID, license_terms_id=terms_id
            )
        )

    assert isinstance(exc.value.cause, IpNotRegisteredError)
    assert str(exc.value) == (
        f"Failed to mint license tokens: The licensor IP with id {OTHER_IP_ID} is not registered."
    )
    assert ledger.endpoints_read() == [Endpoint.IS_REGISTERED]


def test_mint_license_tokens_terms_not_attached(
    license_client: LicenseClient, ledger: FakeLedgerGateway
) -> None:
    license_terms_id = ledger.store_terms(non_commercial_social_remixing_terms().as_abi_tuple())

    with pytest.raises(OperationFailedError) as exc:
        asyncio.run(
            license_client.mint_license_tokens(
                licensor_ip_id=IP_ID, license_terms_id=license_terms_id
            )
        )

    assert isinstance(exc.value.cause, TermsNotAttachedError)
    assert str(exc.value) == (
        f"Failed to mint license tokens: License terms id {license_terms_id} "
        f"is not attached to the IP with id {IP_ID}."
    )
    assert ledger.writes == []


def test_mint_license_tokens_unknown_terms(
    license_client: LicenseClient, ledger: FakeLedgerGateway
) -> None:
    with pytest.raises(OperationFailedError, match="License terms id 5 do not exist."):
        asyncio.run(license_client.mint_license_tokens(licensor_ip_id=IP_ID, license_terms_id=5))

    assert ledger.writes == []


def test_mint_license_tokens_invalid_receiver(
    license_client: LicenseClient, ledger: FakeLedgerGateway, terms_id: int
) -> None:
    with pytest.raises(OperationFailedError) as exc:
        asyncio.run(
            license_client.mint_license_tokens(
                licensor_ip_id=IP_ID, license_terms_id=terms_id, receiver="0x123"
            )
        )

    cause = exc.value.cause
    assert isinstance(cause, InvalidAddressError)
    assert cause.field == "receiver"
    assert ledger.writes == []


def test_mint_license_tokens_rejects_negative_amount(
    license_client: LicenseClient, ledger: FakeLedgerGateway, terms_id: int
) -> None:
    with pytest.raises(OperationFailedError) as exc:
        asyncio.run(
            license_client.mint_license_tokens(
                licensor_ip_id=IP_ID, license_terms_id=terms_id, amount=-1
            )
        )

    assert isinstance(exc.value.cause, InvalidRequestError)
    assert str(exc.value) == "Failed to mint license tokens: Amount must not be negative."


def test_mint_zero_tokens_is_forwarded_by_default(
    license_client: LicenseClient, ledger: FakeLedgerGateway, terms_id: int
) -> None:
    result = asyncio.run(
        license_client.mint_license_tokens(
            licensor_ip_id=IP_ID, license_terms_id=terms_id, amount=0, tx_options=WAIT
        )
    )

    assert result.license_token_ids == []
    assert ledger.writes[0].args[3] == 0


def test_mint_zero_tokens_rejected_when_configured(
    strict_license_client: LicenseClient, ledger: FakeLedgerGateway, terms_id: int
) -> None:
    with pytest.raises(OperationFailedError) as exc:
        asyncio.run(
            strict_license_client.mint_license_tokens(
                licensor_ip_id=IP_ID, license_terms_id=terms_id, amount=0
            )
        )

    assert str(exc.value) == "Failed to mint license tokens: Amount must be greater than 0."
    assert ledger.writes == []


def test_mint_license_tokens_trusts_requested_amount_over_event(
    license_client: LicenseClient,
    ledger: FakeLedgerGateway,
    terms_id: int,
    caplog: pytest.LogCaptureFixture,
) -> None:
    ledger.event_overrides[LedgerEvent.LICENSE_TOKENS_MINTED] = [
        {"startLicenseTokenId": 20, "amount": 5}
    ]

    with caplog.at_level("WARNING"):
        result = asyncio.run(
            license_client.mint_license_tokens(
                licensor_ip_id=IP_ID, license_terms_id=terms_id, amount=2, tx_options=WAIT
            )
        )

    assert result.license_token_ids == [20, 21]
    assert "Mint event reports amount 5, requested 2" in caplog.text


def test_mint_license_tokens_missing_event(
    license_client: LicenseClient, ledger: FakeLedgerGateway, terms_id: int
) -> None:
    ledger.event_overrides[LedgerEvent.LICENSE_TOKENS_MINTED] = []

    with pytest.raises(OperationFailedError) as exc:
        asyncio.run(
            license_client.mint_license_tokens(
                licensor_ip_id=IP_ID, license_terms_id=terms_id, tx_options=WAIT
            )
        )

    assert isinstance(exc.value.cause, EventDecodingError)
    assert str(exc.value).startswith(
        "Failed to mint license tokens: LicenseTokensMinted event not found in transaction"
    )


def test_mint_license_tokens_encode_only(
    license_client: LicenseClient, ledger: FakeLedgerGateway, terms_id: int
) -> None:
    result = asyncio.run(
        license_client.mint_license_tokens(
            licensor_ip_id=IP_ID,
            license_terms_id=terms_id,
            tx_options=TxOptions(encoded_tx_data_only=True),
        )
    )

    assert isinstance(result.outcome, EncodedPayload)
    assert result.tx_hash is None
    assert result.encoded_tx_data is not None
    assert result.encoded_tx_data.data == "0xmintLicenseTokens"
    assert ledger.writes == []
