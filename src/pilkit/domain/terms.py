"""Programmable IP License (PIL) terms and the canonical presets."""

from __future__ import annotations

from dataclasses import astuple, dataclass, fields

from .address import ZERO_ADDRESS


@dataclass(frozen=True, slots=True)
class LicenseTerms:
    """License policy template as stored by the PIL license template.

    Field order follows the on-chain ``PILTerms`` struct so the value can be
    passed to the contract as a tuple. ``commercial_rev_share`` is a percentage.
    """

    transferable: bool = False
    royalty_policy: str = ZERO_ADDRESS
    default_minting_fee: int = 0
    expiration: int = 0
    commercial_use: bool = False
    commercial_attribution: bool = False
    commercializer_checker: str = ZERO_ADDRESS
    commercializer_checker_data: bytes = b""
    commercial_rev_share: int = 0
    commercial_rev_ceiling: int = 0
    derivatives_allowed: bool = False
    derivatives_attribution: bool = False
    derivatives_approval: bool = False
    derivatives_reciprocal: bool = False
    derivative_rev_ceiling: int = 0
    currency: str = ZERO_ADDRESS
    uri: str = ""

    def as_abi_tuple(self) -> tuple[object, ...]:
        return astuple(self)

    @classmethod
    def from_abi_tuple(cls, values: tuple[object, ...] | list[object]) -> LicenseTerms:
        names = [f.name for f in fields(cls)]
        if len(values) != len(names):
            msg = f"Expected {len(names)} license term values, got {len(values)}"
            raise ValueError(msg)
        data = dict(zip(names, values, strict=True))
        return cls(
            transferable=bool(data["transferable"]),
            royalty_policy=str(data["royalty_policy"]),
            default_minting_fee=int(data["default_minting_fee"]),  # type: ignore[arg-type]
            expiration=int(data["expiration"]),  # type: ignore[arg-type]
            commercial_use=bool(data["commercial_use"]),
            commercial_attribution=bool(data["commercial_attribution"]),
            commercializer_checker=str(data["commercializer_checker"]),
            commercializer_checker_data=_as_bytes(data["commercializer_checker_data"]),
            commercial_rev_share=int(data["commercial_rev_share"]),  # type: ignore[arg-type]
            commercial_rev_ceiling=int(data["commercial_rev_ceiling"]),  # type: ignore[arg-type]
            derivatives_allowed=bool(data["derivatives_allowed"]),
            derivatives_attribution=bool(data["derivatives_attribution"]),
            derivatives_approval=bool(data["derivatives_approval"]),
            derivatives_reciprocal=bool(data["derivatives_reciprocal"]),
            derivative_rev_ceiling=int(data["derivative_rev_ceiling"]),  # type: ignore[arg-type]
            currency=str(data["currency"]),
            uri=str(data["uri"]),
        )


def _as_bytes(value: object) -> bytes:
    if isinstance(value, bytes | bytearray):
        return bytes(value)
    if isinstance(value, str):
        return bytes.fromhex(value.removeprefix("0x"))
    msg = f"Cannot interpret {value!r} as bytes"
    raise TypeError(msg)


def non_commercial_social_remixing_terms() -> LicenseTerms:
    return LicenseTerms(
        transferable=True,
        derivatives_allowed=True,
        derivatives_attribution=True,
        derivatives_reciprocal=True,
    )


def commercial_use_terms(
    *,
    default_minting_fee: int,
    currency: str,
    royalty_policy: str,
) -> LicenseTerms:
    return LicenseTerms(
        transferable=True,
        royalty_policy=royalty_policy,
        default_minting_fee=default_minting_fee,
        commercial_use=True,
        commercial_attribution=True,
        currency=currency,
    )


def commercial_remix_terms(
    *,
    default_minting_fee: int,
    commercial_rev_share: int,
    currency: str,
    royalty_policy: str,
) -> LicenseTerms:
    return LicenseTerms(
        transferable=True,
        royalty_policy=royalty_policy,
        default_minting_fee=default_minting_fee,
        commercial_use=True,
        commercial_attribution=True,
        commercial_rev_share=commercial_rev_share,
        derivatives_allowed=True,
        derivatives_attribution=True,
        derivatives_reciprocal=True,
        currency=currency,
    )
