"""Temporal lookup — picks the threshold rule in force a number of days before service.

Shared by cancellation and attrition: both policies are lists of rules keyed
by ``days_before``. The rule in force is the one with the largest threshold
that has been reached, i.e. walking the rules from the most lenient
(furthest out) tier down, the first whose ``days_before`` is <= the
reference.
"""

import logging
from collections.abc import Sequence
from datetime import date, datetime
from typing import TypeVar

from rate_engine.errors import InvalidRuleSet, NotApplicable

logger = logging.getLogger(__name__)

R = TypeVar("R")

# A rule is usable once at least one of these resolves to a value
PENALTY_FIELDS = (
    "penalty_percent",
    "penalty_amount",
    "allowed_reduction_percent",
    "penalty_per_unit",
)


def days_before(at: date | datetime, service_date: date | datetime) -> int:
    """Whole calendar days from ``at`` until ``service_date`` (negative once past)."""
    if isinstance(at, datetime):
        at = at.date()
    if isinstance(service_date, datetime):
        service_date = service_date.date()
    return (service_date - at).days


def validate_rule_set(rules: Sequence[R]) -> list[R]:
    """Check thresholds are distinct and every rule has a penalty expression.

    Returns the rules sorted by ``days_before`` descending.
    """
    seen: set[int] = set()
    for rule in rules:
        threshold = rule.days_before
        if threshold < 0:
            raise InvalidRuleSet(f"days_before must be >= 0 (got {threshold})", days_before=threshold)
        if threshold in seen:
            raise InvalidRuleSet(
                f"Duplicate rule threshold days_before={threshold}", days_before=threshold
            )
        seen.add(threshold)
        if all(getattr(rule, f, None) is None for f in PENALTY_FIELDS):
            raise InvalidRuleSet(
                f"Rule at days_before={threshold} has no penalty expression", days_before=threshold
            )
    return sorted(rules, key=lambda r: r.days_before, reverse=True)


def resolve_rule(rules: Sequence[R], reference_days_before: int) -> R:
    """Return the rule in force ``reference_days_before`` days ahead of service.

    Raises NotApplicable when the set is empty, when the change happens after
    the service date and there is no day-0 rule, or when the reference falls
    inside every configured threshold.
    """
    ordered = validate_rule_set(rules)
    if not ordered:
        raise NotApplicable("No rules configured")

    if reference_days_before < 0:
        # Post-service changes fall under the day-of-service tier, if any
        day_zero = next((r for r in ordered if r.days_before == 0), None)
        if day_zero is None:
            raise NotApplicable(
                f"Change is {-reference_days_before} day(s) after service and no day-0 rule exists",
                days_before=reference_days_before,
            )
        return day_zero

    for rule in ordered:
        if rule.days_before <= reference_days_before:
            logger.debug(f"Rule days_before={rule.days_before} applies at {reference_days_before} day(s) out")
            return rule

    raise NotApplicable(
        f"No rule covers {reference_days_before} day(s) before service "
        f"(closest tier starts at {ordered[-1].days_before})",
        days_before=reference_days_before,
    )
