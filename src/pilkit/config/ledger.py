"""Ledger connection and contract deployment configuration."""

from __future__ import annotations

from dataclasses import dataclass

from pilkit.domain.address import validate_address
from pilkit.domain.contracts import ContractAddresses
from pilkit.domain.errors import InvalidAddressError
from pilkit.domain.license import LicensingOptions

from .env import env_flag, env_float, require_env_vars
from .errors import ConfigurationError
from .http_resilience import RateLimit, ResilienceConfig

LEDGER_TIMEOUT_SECONDS = 30.0
DEFAULT_CONFIRMATION_POLL_SECONDS = 1.0

_CONTRACT_ENV_VARS: dict[str, str] = {
    "ip_asset_registry": "PILKIT_IP_ASSET_REGISTRY",
    "license_registry": "PILKIT_LICENSE_REGISTRY",
    "licensing_module": "PILKIT_LICENSING_MODULE",
    "pil_template": "PILKIT_PIL_TEMPLATE",
    "royalty_module": "PILKIT_ROYALTY_MODULE",
    "royalty_policy_lap": "PILKIT_ROYALTY_POLICY_LAP",
    "dispute_module": "PILKIT_DISPUTE_MODULE",
}


@dataclass(frozen=True, slots=True)
class LedgerConfig:
    """Holds the JSON-RPC endpoint, sending account and contract addresses."""

    rpc_url: str
    account: str
    contracts: ContractAddresses
    resilience: ResilienceConfig
    confirmation_poll_seconds: float = DEFAULT_CONFIRMATION_POLL_SECONDS


def get_ledger_config(*, resilience: ResilienceConfig | None = None) -> LedgerConfig:
    values = require_env_vars(("PILKIT_RPC_URL", "PILKIT_ACCOUNT", *_CONTRACT_ENV_VARS.values()))
    rpc_url = values["PILKIT_RPC_URL"]
    addresses = {
        field: _config_address(values[env_name], env_name)
        for field, env_name in _CONTRACT_ENV_VARS.items()
    }
    poll_seconds = env_float(
        "PILKIT_CONFIRMATION_POLL_SECONDS", default=DEFAULT_CONFIRMATION_POLL_SECONDS
    )
    if poll_seconds <= 0:
        raise ConfigurationError("PILKIT_CONFIRMATION_POLL_SECONDS must be positive")

    return LedgerConfig(
        rpc_url=rpc_url,
        account=_config_address(values["PILKIT_ACCOUNT"], "PILKIT_ACCOUNT"),
        contracts=ContractAddresses(**addresses),
        resilience=resilience
        or ResilienceConfig(
            name="ledger",
            timeout_seconds=LEDGER_TIMEOUT_SECONDS,
            ratelimit=RateLimit(max_calls=10, per_seconds=1.0),
        ),
        confirmation_poll_seconds=poll_seconds,
    )


def get_licensing_options() -> LicensingOptions:
    return LicensingOptions(
        reject_zero_amount_mint=env_flag("PILKIT_REJECT_ZERO_AMOUNT_MINT", default=False)
    )


def _config_address(value: str, env_name: str) -> str:
    try:
        return validate_address(value, env_name)
    except InvalidAddressError as exc:
        raise ConfigurationError(f"{env_name} is not a valid address: {value}") from exc
