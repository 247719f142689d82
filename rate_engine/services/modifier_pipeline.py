"""Modifier pipeline — compounds contract rate modifiers onto a base price.

Order (fixed):
  1. seasonal          stay dates intersect the modifier's dates
  2. length_based      nights vs threshold
  3. advance_purchase  days between booking and stay start >= days_advance
  4. day_of_week       per-night weekday adjustment
  5. volume_based      booked volume vs threshold

Each category contributes at most one factor (1 + adjustment_percent / 100),
multiplied onto the running total. Categories with no match are skipped.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from decimal import Decimal

from rate_engine.data.currency import quantize_money
from rate_engine.schemas.contract import WEEKDAYS, RateModifier, RateModifiers
from rate_engine.services.price_resolver import PriceBreakdown

logger = logging.getLogger(__name__)

ONE = Decimal("1")
ZERO = Decimal("0")
HUNDRED = Decimal("100")


# ---------- Data structures ----------


@dataclass(frozen=True)
class ModifierContext:
    """What the modifiers are matched against."""

    start: date
    stay_dates: tuple[date, ...]
    nights: int
    volume: int
    booking_date: date | None = None

    @classmethod
    def from_breakdown(
        cls,
        breakdown: PriceBreakdown,
        booking_date: date | datetime | None = None,
        volume: int | None = None,
    ) -> "ModifierContext":
        """Build a context from a price breakdown.

        ``volume`` defaults to units booked times persons per unit.
        """
        if isinstance(booking_date, datetime):
            booking_date = booking_date.date()
        dates = tuple(
            breakdown.start + timedelta(days=i) for i in range(breakdown.nights)
        ) or (breakdown.start,)
        return cls(
            start=breakdown.start,
            stay_dates=dates,
            nights=breakdown.nights,
            volume=volume if volume is not None else breakdown.quantity * breakdown.persons,
            booking_date=booking_date,
        )

    @property
    def days_in_advance(self) -> int | None:
        if self.booking_date is None:
            return None
        return (self.start - self.booking_date).days


@dataclass(frozen=True)
class AppliedModifier:
    category: str
    name: str
    adjustment_percent: Decimal
    factor: Decimal

    def to_dict(self) -> dict:
        return {
            "category": self.category,
            "name": self.name,
            "adjustment_percent": float(self.adjustment_percent),
            "factor": float(self.factor),
        }


@dataclass(frozen=True)
class ModifierResult:
    currency: str
    subtotal: Decimal
    adjusted_subtotal: Decimal
    extras_total: Decimal
    applied: list[AppliedModifier] = field(default_factory=list)

    @property
    def total(self) -> Decimal:
        return self.adjusted_subtotal + self.extras_total

    @property
    def combined_factor(self) -> Decimal:
        product = ONE
        for mod in self.applied:
            product *= mod.factor
        return product

    def to_dict(self) -> dict:
        return {
            "currency": self.currency,
            "subtotal": float(self.subtotal),
            "applied_modifiers": [m.to_dict() for m in self.applied],
            "combined_factor": float(self.combined_factor),
            "adjusted_subtotal": float(self.adjusted_subtotal),
            "extras_total": float(self.extras_total),
            "total": float(self.total),
        }


# ---------- Matching ----------


def _factor(adjustment_percent: Decimal) -> Decimal:
    # A discount beyond 100% floors the price at zero
    return max(ZERO, ONE + adjustment_percent / HUNDRED)


def _threshold_matches(mod: RateModifier, value: int) -> bool:
    if mod.threshold_type == "exact":
        return value == mod.threshold
    if mod.threshold_type == "maximum":
        return value <= mod.threshold
    return value >= mod.threshold


def _specificity(mod: RateModifier) -> tuple[int, int]:
    if mod.threshold_type == "exact":
        return (2, 0)
    if mod.threshold_type == "maximum":
        return (1, -mod.threshold)
    return (1, mod.threshold)


def _tightest(entries: Sequence[RateModifier], value: int) -> RateModifier | None:
    """Among matching threshold entries, the one closest to the value wins."""
    matches = [m for m in entries if _threshold_matches(m, value)]
    if not matches:
        return None
    return max(matches, key=_specificity)


def match_seasonal(entries: Sequence[RateModifier], ctx: ModifierContext) -> RateModifier | None:
    stay = set(ctx.stay_dates)
    return next((m for m in entries if stay.intersection(m.dates)), None)


def match_length(entries: Sequence[RateModifier], ctx: ModifierContext) -> RateModifier | None:
    return _tightest(entries, ctx.nights)


def match_advance_purchase(entries: Sequence[RateModifier], ctx: ModifierContext) -> RateModifier | None:
    lead = ctx.days_in_advance
    if lead is None:
        return None
    matches = [m for m in entries if m.days_advance <= lead]
    if not matches:
        return None
    return max(matches, key=lambda m: m.days_advance)


def match_volume(entries: Sequence[RateModifier], ctx: ModifierContext) -> RateModifier | None:
    return _tightest(entries, ctx.volume)


def _weekday(d: date) -> str:
    return WEEKDAYS[d.weekday()]


def _day_of_week_factor(
    adjustments: dict[str, Decimal],
    breakdown: PriceBreakdown,
    running_total: Decimal,
    running_factor: Decimal,
) -> tuple[Decimal, list[str]] | None:
    """Effective factor from per-night weekday adjustments, or None if no night matches."""
    dated = [line for line in breakdown.lines if line.service_date is not None]
    if not dated:
        # Unit-priced bookings take the weekday of the service start
        pct = adjustments.get(_weekday(breakdown.start))
        if pct is None:
            return None
        return _factor(pct), [_weekday(breakdown.start)]

    delta = ZERO
    days: list[str] = []
    for line in dated:
        day = _weekday(line.service_date)
        pct = adjustments.get(day)
        if pct is None:
            continue
        night_value = line.amount * running_factor
        delta += night_value * (_factor(pct) - ONE)
        if day not in days:
            days.append(day)

    if not days:
        return None
    if running_total == ZERO:
        return ONE, days
    return (running_total + delta) / running_total, days


# ---------- Entry point ----------


def apply_modifiers(
    breakdown: PriceBreakdown,
    modifiers: RateModifiers,
    context: ModifierContext | None = None,
) -> ModifierResult:
    """Compound the contract's rate modifiers onto a price breakdown's subtotal.

    Extras are not modified; they are carried into the final total as-is.
    """
    ctx = context or ModifierContext.from_breakdown(breakdown)
    subtotal = breakdown.subtotal
    running = subtotal
    running_factor = ONE
    applied: list[AppliedModifier] = []

    def _apply(category: str, name: str, pct: Decimal, factor: Decimal) -> None:
        nonlocal running, running_factor
        running *= factor
        running_factor *= factor
        applied.append(AppliedModifier(category=category, name=name, adjustment_percent=pct, factor=factor))

    staged = (
        ("seasonal", match_seasonal(modifiers.seasonal, ctx)),
        ("length_based", match_length(modifiers.length_based, ctx)),
        ("advance_purchase", match_advance_purchase(modifiers.advance_purchase, ctx)),
    )
    for category, mod in staged:
        if mod is not None:
            _apply(category, mod.label(category), mod.adjustment_percent, _factor(mod.adjustment_percent))

    dow = modifiers.day_of_week
    if dow.enabled and dow.adjustments:
        outcome = _day_of_week_factor(dow.adjustments, breakdown, running, running_factor)
        if outcome is not None:
            factor, days = outcome
            _apply("day_of_week", ", ".join(days), (factor - ONE) * HUNDRED, factor)

    volume = match_volume(modifiers.volume_based, ctx)
    if volume is not None:
        _apply("volume_based", volume.label("volume_based"), volume.adjustment_percent, _factor(volume.adjustment_percent))

    adjusted = quantize_money(running, breakdown.currency)
    logger.debug(f"Applied {len(applied)} modifier(s) to {breakdown.rate_id}: {subtotal} -> {adjusted}")
    return ModifierResult(
        currency=breakdown.currency,
        subtotal=subtotal,
        adjusted_subtotal=adjusted,
        extras_total=breakdown.extras_total,
        applied=applied,
    )
