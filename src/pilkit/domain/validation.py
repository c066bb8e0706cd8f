"""Consistency rules for license terms, evaluated before any network call.

The rules form a small dependency graph: commercial fields require
``commercial_use`` and derivative fields require ``derivatives_allowed``.
Evaluation is ordered and stops at the first violation, so the result is
either :class:`TermsAccepted` or a single :class:`RuleViolation`.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

from .address import is_zero_address

if TYPE_CHECKING:
    from collections.abc import Callable

    from .terms import LicenseTerms

MAX_COMMERCIAL_REV_SHARE = 100


class ViolationKind(StrEnum):
    REV_SHARE_OUT_OF_RANGE = "rev_share_out_of_range"
    COMMERCIAL_USE_DISABLED_CONFLICT = "commercial_use_disabled_conflict"
    ROYALTY_POLICY_REQUIRED = "royalty_policy_required"
    DERIVATIVES_DISABLED_CONFLICT = "derivatives_disabled_conflict"


@dataclass(frozen=True, slots=True)
class TermsAccepted:
    terms: LicenseTerms


@dataclass(frozen=True, slots=True)
class RuleViolation:
    kind: ViolationKind
    field: str
    message: str


TermsCheck = TermsAccepted | RuleViolation

_Predicate = tuple[str, "Callable[[LicenseTerms], bool]", str]

_COMMERCIAL_ONLY: tuple[_Predicate, ...] = (
    (
        "commercial_attribution",
        lambda t: t.commercial_attribution,
        "Cannot add commercial attribution when commercial use is disabled.",
    ),
    (
        "commercializer_checker",
        lambda t: not is_zero_address(t.commercializer_checker),
        "Cannot add commercializerChecker when commercial use is disabled.",
    ),
    (
        "commercial_rev_share",
        lambda t: t.commercial_rev_share > 0,
        "Cannot add commercial revenue share when commercial use is disabled.",
    ),
    (
        "commercial_rev_ceiling",
        lambda t: t.commercial_rev_ceiling > 0,
        "Cannot add commercial revenue ceiling when commercial use is disabled.",
    ),
    (
        "derivative_rev_ceiling",
        lambda t: t.derivative_rev_ceiling > 0,
        "Cannot add derivative revenue ceiling share when commercial use is disabled.",
    ),
    (
        "royalty_policy",
        lambda t: not is_zero_address(t.royalty_policy),
        "Cannot add commercial royalty policy when commercial use is disabled.",
    ),
)

_DERIVATIVES_ONLY: tuple[_Predicate, ...] = (
    (
        "derivatives_attribution",
        lambda t: t.derivatives_attribution,
        "Cannot add derivative attribution when derivative use is disabled.",
    ),
    (
        "derivatives_approval",
        lambda t: t.derivatives_approval,
        "Cannot add derivative approval when derivative use is disabled.",
    ),
    (
        "derivatives_reciprocal",
        lambda t: t.derivatives_reciprocal,
        "Cannot add derivative reciprocal when derivative use is disabled.",
    ),
    (
        "derivative_rev_ceiling",
        lambda t: t.derivative_rev_ceiling > 0,
        "Cannot add derivative revenue ceiling when derivative use is disabled.",
    ),
)


def validate_license_terms(terms: LicenseTerms) -> TermsCheck:
    """Evaluate the rule graph against ``terms``; no side effects."""

    if not 0 <= terms.commercial_rev_share <= MAX_COMMERCIAL_REV_SHARE:
        return RuleViolation(
            ViolationKind.REV_SHARE_OUT_OF_RANGE,
            "commercial_rev_share",
            "CommercialRevShare should be between 0 and 100.",
        )

    if not terms.commercial_use:
        violation = _first_violation(
            terms, _COMMERCIAL_ONLY, ViolationKind.COMMERCIAL_USE_DISABLED_CONFLICT
        )
        if violation is not None:
            return violation
    elif is_zero_address(terms.royalty_policy):
        return RuleViolation(
            ViolationKind.ROYALTY_POLICY_REQUIRED,
            "royalty_policy",
            "Royalty policy is required when commercial use is enabled.",
        )

    if not terms.derivatives_allowed:
        violation = _first_violation(
            terms, _DERIVATIVES_ONLY, ViolationKind.DERIVATIVES_DISABLED_CONFLICT
        )
        if violation is not None:
            return violation

    return TermsAccepted(terms)


def _first_violation(
    terms: LicenseTerms,
    predicates: tuple[_Predicate, ...],
    kind: ViolationKind,
) -> RuleViolation | None:
    for field, is_set, message in predicates:
        if is_set(terms):
            return RuleViolation(kind, field, message)
    return None
