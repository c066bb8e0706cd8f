from __future__ import annotations

import pytest

from pilkit.domain.dispute import DisputeClient
from pilkit.domain.license import LicenseClient, LicensingOptions
from tests.support.ledger import ACCOUNT, CONTRACTS, IP_ID, FakeLedgerGateway


@pytest.fixture
def ledger() -> FakeLedgerGateway:
    return FakeLedgerGateway(registered_ips=[IP_ID])


@pytest.fixture
def license_client(ledger: FakeLedgerGateway) -> LicenseClient:
    return LicenseClient(ledger, CONTRACTS, account=ACCOUNT)


@pytest.fixture
def strict_license_client(ledger: FakeLedgerGateway) -> LicenseClient:
    return LicenseClient(
        ledger,
        CONTRACTS,
        account=ACCOUNT,
        options=LicensingOptions(reject_zero_amount_mint=True),
    )


@pytest.fixture
def dispute_client(ledger: FakeLedgerGateway) -> DisputeClient:
    return DisputeClient(ledger, CONTRACTS)
