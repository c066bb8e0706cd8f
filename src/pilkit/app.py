"""Application wiring: builds the license and dispute clients over one gateway."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from pilkit.adapters.jsonrpc import JsonRpcLedgerGateway
from pilkit.config.ledger import get_ledger_config, get_licensing_options
from pilkit.domain.dispute import DisputeClient
from pilkit.domain.license import LicenseClient

if TYPE_CHECKING:
    from types import TracebackType

    from pilkit.config.ledger import LedgerConfig
    from pilkit.domain.license import LicensingOptions
    from pilkit.domain.ports.ledger import LedgerGateway

log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class IpClient:
    """Entry point exposing ``license`` and ``dispute`` operations.

    Use it as an async context manager, or call :meth:`aclose`, to release the
    gateway's connections.
    """

    license: LicenseClient
    dispute: DisputeClient
    gateway: LedgerGateway

    async def __aenter__(self) -> IpClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.gateway.aclose()


def build_client(
    config: LedgerConfig | None = None,
    *,
    gateway: LedgerGateway | None = None,
    options: LicensingOptions | None = None,
) -> IpClient:
    """Wire clients from ``config`` (read from the environment when omitted)."""

    effective_config = config or get_ledger_config()
    effective_gateway = gateway or JsonRpcLedgerGateway(config=effective_config)
    effective_options = options or get_licensing_options()
    log.debug(
        "Building client: rpc_url=%s, account=%s",
        effective_config.rpc_url,
        effective_config.account,
    )
    return IpClient(
        license=LicenseClient(
            effective_gateway,
            effective_config.contracts,
            account=effective_config.account,
            options=effective_options,
        ),
        dispute=DisputeClient(effective_gateway, effective_config.contracts),
        gateway=effective_gateway,
    )
