"""Price resolver — base pricing for a selling rate over a date range and occupancy.

Calculation Flow:
1. Check the rate is active and valid for the requested dates
2. Find the occupancy multiplier (exact adults/children match only)
3. Expand nightly bases per date: daily override price, else base price
4. Per-person / per-unit / per-booking / per-vehicle bases price once
5. Requested extras are priced as separate lines
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

from rate_engine.data.currency import quantize_money
from rate_engine.errors import (
    ExtraNotAvailable,
    InvalidQuantity,
    NoMatchingOccupancyConfig,
    RateNotValidForDates,
    StayLengthOutOfBounds,
)
from rate_engine.schemas.rate import DateRange, Occupancy, OccupancyPricing, SellingRate

logger = logging.getLogger(__name__)

ONE = Decimal("1")


# ---------- Data structures ----------


@dataclass(frozen=True)
class PriceLine:
    """One night, unit or extra in a price breakdown."""

    label: str
    unit_price: Decimal
    multiplier: Decimal
    quantity: int
    amount: Decimal
    source: str  # base | daily_rate | daily_rate_occupancy | extra
    service_date: date | None = None

    def to_dict(self) -> dict:
        return {
            "label": self.label,
            "date": self.service_date.isoformat() if self.service_date else None,
            "unit_price": float(self.unit_price),
            "multiplier": float(self.multiplier),
            "quantity": self.quantity,
            "amount": float(self.amount),
            "source": self.source,
        }


@dataclass(frozen=True)
class PriceBreakdown:
    rate_id: str
    rate_basis: str
    currency: str
    start: date
    end: date
    adults: int
    children: int
    quantity: int
    multiplier: Decimal | None
    lines: list[PriceLine] = field(default_factory=list)
    extras: list[PriceLine] = field(default_factory=list)

    @property
    def nights(self) -> int:
        return (self.end - self.start).days

    @property
    def persons(self) -> int:
        return self.adults + self.children

    @property
    def subtotal(self) -> Decimal:
        return sum((line.amount for line in self.lines), Decimal("0"))

    @property
    def extras_total(self) -> Decimal:
        return sum((line.amount for line in self.extras), Decimal("0"))

    @property
    def total(self) -> Decimal:
        return self.subtotal + self.extras_total

    @property
    def priced_units(self) -> int:
        """Units the base price was charged for (cost basis scales with these)."""
        return sum(line.quantity for line in self.lines)

    def to_dict(self) -> dict:
        return {
            "rate_id": self.rate_id,
            "rate_basis": self.rate_basis,
            "currency": self.currency,
            "from": self.start.isoformat(),
            "to": self.end.isoformat(),
            "nights": self.nights,
            "adults": self.adults,
            "children": self.children,
            "quantity": self.quantity,
            "multiplier": float(self.multiplier) if self.multiplier is not None else None,
            "lines": [line.to_dict() for line in self.lines],
            "extras": [line.to_dict() for line in self.extras],
            "subtotal": float(self.subtotal),
            "extras_total": float(self.extras_total),
            "total": float(self.total),
        }


# ---------- Helpers ----------


def find_occupancy_multiplier(
    config: Sequence[OccupancyPricing], occupancy: Occupancy
) -> Decimal | None:
    """Exact (adults, children) match; None when no occupancy pricing is configured."""
    if not config:
        return None
    for entry in config:
        if entry.adults == occupancy.adults and entry.children == occupancy.children:
            return entry.multiplier
    offered = ", ".join(f"{e.adults}A+{e.children}C" for e in config)
    raise NoMatchingOccupancyConfig(
        f"No occupancy pricing for {occupancy.adults} adult(s) and {occupancy.children} child(ren) "
        f"(configured: {offered})",
        adults=occupancy.adults,
        children=occupancy.children,
    )


def _check_validity(rate: SellingRate, date_range: DateRange) -> None:
    if not rate.is_active:
        raise RateNotValidForDates(f"Rate {rate.id} is inactive", rate_id=rate.id)

    if rate.is_nightly:
        # Nights must fall inside the window; checkout may land on valid_to
        inside = rate.valid_from <= date_range.start and date_range.end <= rate.valid_to
    else:
        inside = rate.valid_from <= date_range.start < rate.valid_to and date_range.end <= rate.valid_to

    if not inside:
        raise RateNotValidForDates(
            f"Rate {rate.id} is valid {rate.valid_from.isoformat()} to {rate.valid_to.isoformat()}, "
            f"requested {date_range.start.isoformat()} to {date_range.end.isoformat()}",
            rate_id=rate.id,
            valid_from=rate.valid_from.isoformat(),
            valid_to=rate.valid_to.isoformat(),
        )


def _check_stay_length(rate: SellingRate, nights: int) -> None:
    details = rate.pricing_details
    lo, hi = details.minimum_nights, details.maximum_nights
    if nights < 1:
        raise StayLengthOutOfBounds("Stay must be at least one night", nights=nights)
    if lo is not None and nights < lo:
        raise StayLengthOutOfBounds(
            f"Stay of {nights} night(s) is below the minimum of {lo}", nights=nights, minimum_nights=lo
        )
    if hi is not None and nights > hi:
        raise StayLengthOutOfBounds(
            f"Stay of {nights} night(s) exceeds the maximum of {hi}", nights=nights, maximum_nights=hi
        )


def _line(label, unit_price, multiplier, quantity, source, currency, service_date=None) -> PriceLine:
    amount = quantize_money(unit_price * multiplier * quantity, currency)
    return PriceLine(
        label=label,
        unit_price=unit_price,
        multiplier=multiplier,
        quantity=quantity,
        amount=amount,
        source=source,
        service_date=service_date,
    )


def _nightly_lines(rate, date_range, occupancy, multiplier, quantity) -> list[PriceLine]:
    daily_rates = rate.pricing_details.daily_rates
    lines = []
    for night in date_range.dates():
        override = daily_rates.get(night)
        if override is not None and occupancy.persons in override.occupancy_pricing:
            unit, mult, source = override.occupancy_pricing[occupancy.persons], ONE, "daily_rate_occupancy"
        elif override is not None:
            unit, mult, source = override.price, multiplier or ONE, "daily_rate"
        else:
            unit, mult, source = rate.base_price, multiplier or ONE, "base"
        lines.append(_line(night.isoformat(), unit, mult, quantity, source, rate.currency, night))
    return lines


def _unit_lines(rate, occupancy, multiplier, quantity) -> list[PriceLine]:
    if rate.rate_basis == "per_person" and multiplier is None:
        label = f"{occupancy.persons} person(s)"
        return [_line(label, rate.base_price, ONE, occupancy.persons * quantity, "base", rate.currency)]
    label = rate.rate_basis.removeprefix("per_")
    return [_line(label, rate.base_price, multiplier or ONE, quantity, "base", rate.currency)]


def _extra_lines(rate: SellingRate, requested: Sequence[str]) -> list[PriceLine]:
    offered = {extra.name.lower(): extra for extra in rate.pricing_details.extras}
    lines = []
    for name in requested:
        extra = offered.get(name.lower())
        if extra is None or not extra.availability:
            raise ExtraNotAvailable(f"Extra {name!r} is not available on rate {rate.id}", extra=name)
        lines.append(_line(extra.name, extra.price, ONE, 1, "extra", rate.currency))
    return lines


# ---------- Entry point ----------


def resolve_price(
    rate: SellingRate,
    date_range: DateRange,
    occupancy: Occupancy,
    quantity: int = 1,
    extras: Sequence[str] = (),
) -> PriceBreakdown:
    """Compute the base price of ``rate`` for a stay or booking.

    ``quantity`` is the number of rooms/units booked under the same
    occupancy. Raises InvalidQuantity, RateNotValidForDates,
    StayLengthOutOfBounds, NoMatchingOccupancyConfig or ExtraNotAvailable.
    """
    if quantity < 1:
        raise InvalidQuantity("quantity must be at least 1", quantity=quantity)

    _check_validity(rate, date_range)
    multiplier = find_occupancy_multiplier(rate.pricing_details.occupancy_pricing, occupancy)

    if rate.is_nightly:
        _check_stay_length(rate, date_range.nights)
        lines = _nightly_lines(rate, date_range, occupancy, multiplier, quantity)
    else:
        lines = _unit_lines(rate, occupancy, multiplier, quantity)

    breakdown = PriceBreakdown(
        rate_id=rate.id,
        rate_basis=rate.rate_basis,
        currency=rate.currency,
        start=date_range.start,
        end=date_range.end,
        adults=occupancy.adults,
        children=occupancy.children,
        quantity=quantity,
        multiplier=multiplier,
        lines=lines,
        extras=_extra_lines(rate, extras),
    )
    logger.debug(
        f"Rate {rate.id} ({rate.rate_basis}) priced {len(lines)} line(s), "
        f"subtotal {breakdown.subtotal} {rate.currency}"
    )
    return breakdown
