"""Quote — prices a stay end to end: version, base price, modifiers, margin."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal

from rate_engine.data.currency import quantize_money
from rate_engine.schemas.contract import ContractVersion, RateModifiers
from rate_engine.schemas.rate import DateRange, Occupancy, SellingRate
from rate_engine.services.margin import MarginResult, apply_markup, compute_margin
from rate_engine.services.modifier_pipeline import ModifierContext, ModifierResult, apply_modifiers
from rate_engine.services.price_resolver import PriceBreakdown, resolve_price
from rate_engine.services.version_resolver import resolve_version

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Quote:
    breakdown: PriceBreakdown
    modifiers: ModifierResult
    margin: MarginResult
    version_id: str | None = None
    suggested_price: Decimal | None = None

    @property
    def total(self) -> Decimal:
        return self.modifiers.total

    def to_dict(self) -> dict:
        return {
            "version_id": self.version_id,
            "currency": self.breakdown.currency,
            "breakdown": self.breakdown.to_dict(),
            "modifiers": self.modifiers.to_dict(),
            "margin": self.margin.to_dict(),
            "suggested_price": float(self.suggested_price) if self.suggested_price is not None else None,
            "total": float(self.total),
        }


def quote_stay(
    rate: SellingRate,
    date_range: DateRange,
    occupancy: Occupancy,
    versions: Sequence[ContractVersion] = (),
    booking_date: date | datetime | None = None,
    quantity: int = 1,
    extras: Sequence[str] = (),
    volume: int | None = None,
) -> Quote:
    """Price a stay under a selling rate and, if given, its contract versions.

    The version in force on the first service date supplies the rate
    modifiers. Margin compares the modified subtotal with ``target_cost``
    scaled by the priced units; extras are left out of both sides.
    """
    breakdown = resolve_price(rate, date_range, occupancy, quantity=quantity, extras=extras)

    version = resolve_version(versions, date_range.start) if versions else None
    rate_modifiers = version.rate_modifiers if version else RateModifiers()
    context = ModifierContext.from_breakdown(breakdown, booking_date=booking_date, volume=volume)
    modified = apply_modifiers(breakdown, rate_modifiers, context)

    units = breakdown.priced_units
    cost = quantize_money(rate.target_cost * units, rate.currency) if rate.target_cost else None
    margin = compute_margin(modified.adjusted_subtotal, cost)

    suggested = None
    if rate.target_cost and rate.markup_type != "none":
        per_unit = apply_markup(rate.target_cost, rate.markup_type, rate.markup_amount)
        suggested = quantize_money(per_unit * units, rate.currency)

    logger.debug(
        f"Quote for rate {rate.id}: total {modified.total} {rate.currency} "
        f"(version {version.id if version else None})"
    )
    return Quote(
        breakdown=breakdown,
        modifiers=modified,
        margin=margin,
        version_id=version.id if version else None,
        suggested_price=suggested,
    )
