"""Policy terms — cancellation and attrition penalties from a contract version."""

import logging
import math
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal

from rate_engine.data.currency import quantize_money, to_decimal
from rate_engine.errors import InvalidQuantity, NotApplicable
from rate_engine.schemas.contract import ContractVersion
from rate_engine.services.temporal_lookup import days_before, resolve_rule, validate_rule_set

logger = logging.getLogger(__name__)

HUNDRED = Decimal("100")


def _num(value: Decimal | None) -> float | None:
    return float(value) if value is not None else None


@dataclass(frozen=True)
class CancellationTerm:
    """Penalty owed for cancelling at a given point before service."""

    penalty_percent: Decimal | None
    penalty_amount: Decimal | None
    description: str
    days_before: int
    rule_days_before: int | None = None
    policy_type: str = "standard"
    penalty_total: Decimal | None = None  # only when a booking value was supplied

    @property
    def is_free(self) -> bool:
        return not self.penalty_percent and not self.penalty_amount

    def to_dict(self) -> dict:
        return {
            "penalty_percent": _num(self.penalty_percent),
            "penalty_amount": _num(self.penalty_amount),
            "description": self.description,
            "days_before": self.days_before,
            "rule_days_before": self.rule_days_before,
            "policy_type": self.policy_type,
            "penalty_total": _num(self.penalty_total),
            "is_free": self.is_free,
        }


@dataclass(frozen=True)
class AttritionTerm:
    """How far a block may shrink at a given point, and what excess reductions cost."""

    allowed_reduction_percent: Decimal
    penalty_per_unit: Decimal | None
    penalty_percent: Decimal | None
    description: str
    days_before: int
    rule_days_before: int
    basis_quantity: int
    allowed_reduction_units: int
    excess_units: int | None = None
    penalty_amount: Decimal | None = None

    def to_dict(self) -> dict:
        return {
            "allowed_reduction_percent": float(self.allowed_reduction_percent),
            "penalty_per_unit": _num(self.penalty_per_unit),
            "penalty_percent": _num(self.penalty_percent),
            "description": self.description,
            "days_before": self.days_before,
            "rule_days_before": self.rule_days_before,
            "basis_quantity": self.basis_quantity,
            "allowed_reduction_units": self.allowed_reduction_units,
            "excess_units": self.excess_units,
            "penalty_amount": _num(self.penalty_amount),
        }


def resolve_cancellation_term(
    version: ContractVersion,
    cancel_at: date | datetime,
    service_date: date | datetime,
    booking_value: Decimal | float | int | None = None,
    currency: str | None = None,
) -> CancellationTerm:
    """Resolve the cancellation penalty for cancelling at ``cancel_at``.

    Cancelling further out than every rule's threshold is free. With
    ``booking_value`` the penalty is also expressed as an amount: the
    percentage share of the booking plus any fixed amount, never more than
    the booking itself.
    """
    policy = version.cancellation_policy
    ref = days_before(cancel_at, service_date)
    rules = validate_rule_set(policy.rules)

    if not rules and policy.type == "non_refundable":
        percent, amount, description, rule_days = HUNDRED, None, "Non-refundable", None
    elif rules and ref > rules[0].days_before:
        # Earlier than the outermost tier
        percent, amount, description, rule_days = Decimal("0"), None, "Free cancellation", None
    else:
        rule = resolve_rule(policy.rules, ref)
        percent, amount = rule.penalty_percent, rule.penalty_amount
        description, rule_days = rule.description, rule.days_before

    total = None
    if booking_value is not None:
        value = to_decimal(booking_value)
        total = value * (percent or 0) / HUNDRED + (amount or 0)
        total = quantize_money(min(total, value), currency)

    logger.debug(f"Cancellation {ref} day(s) out under version {version.id}: {percent}% / {amount}")
    return CancellationTerm(
        penalty_percent=percent,
        penalty_amount=amount,
        description=description,
        days_before=ref,
        rule_days_before=rule_days,
        policy_type=policy.type,
        penalty_total=total,
    )


def resolve_attrition_term(
    version: ContractVersion,
    change_at: date | datetime,
    service_date: date | datetime,
    current_qty: int,
    original_qty: int,
    requested_qty: int | None = None,
) -> AttritionTerm:
    """Resolve the attrition allowance in force at ``change_at``.

    The allowance is a share of the original or current quantity (per the
    policy's calculation basis). Cumulative policies count reductions
    already taken against it, and no reduction may take the block below
    ``minimum_quantity``. With ``requested_qty`` the units cut beyond the
    allowance are reported with their per-unit penalty.
    """
    if current_qty < 0 or original_qty < 0 or (requested_qty is not None and requested_qty < 0):
        raise InvalidQuantity(
            "Quantities must be non-negative",
            current_qty=current_qty,
            original_qty=original_qty,
            requested_qty=requested_qty,
        )

    policy = version.attrition_policy
    if not policy.enabled:
        raise NotApplicable(f"Attrition is not enabled on contract version {version.id}")

    ref = days_before(change_at, service_date)
    rule = resolve_rule(policy.rules, ref)

    allowed_percent = rule.allowed_reduction_percent or Decimal("0")
    basis = original_qty if policy.calculation_basis == "original_quantity" else current_qty
    allowed_units = math.floor(basis * allowed_percent / HUNDRED)

    if policy.cumulative:
        allowed_units -= max(0, original_qty - current_qty)
    allowed_units = max(0, min(allowed_units, current_qty - policy.minimum_quantity))

    excess = penalty_amount = None
    if requested_qty is not None:
        reduction = max(0, current_qty - requested_qty)
        excess = max(0, reduction - allowed_units)
        if rule.penalty_per_unit is not None:
            penalty_amount = quantize_money(rule.penalty_per_unit * excess)

    return AttritionTerm(
        allowed_reduction_percent=allowed_percent,
        penalty_per_unit=rule.penalty_per_unit,
        penalty_percent=rule.penalty_percent,
        description=rule.description,
        days_before=ref,
        rule_days_before=rule.days_before,
        basis_quantity=basis,
        allowed_reduction_units=allowed_units,
        excess_units=excess,
        penalty_amount=penalty_amount,
    )
