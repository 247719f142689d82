"""Margin calculator — margin on cost, and the markup <-> price conversions used by pricing assistants."""

from dataclasses import dataclass
from decimal import Decimal

from rate_engine.data.currency import to_decimal

ZERO = Decimal("0")
HUNDRED = Decimal("100")


@dataclass(frozen=True)
class MarginResult:
    cost: Decimal | None
    price: Decimal
    margin: Decimal
    margin_percentage: Decimal | None  # None when cost is zero or unknown

    def to_dict(self) -> dict:
        return {
            "cost": float(self.cost) if self.cost is not None else None,
            "price": float(self.price),
            "margin": float(self.margin),
            "margin_percentage": (
                round(float(self.margin_percentage), 2) if self.margin_percentage is not None else None
            ),
        }


def compute_margin(price, cost=None) -> MarginResult:
    """Margin of ``price`` over ``cost``, as an amount and as a percentage of cost."""
    price = to_decimal(price)
    cost = to_decimal(cost) if cost is not None else None
    margin = price - (cost or ZERO)
    percentage = margin / cost * HUNDRED if cost is not None and cost > ZERO else None
    return MarginResult(cost=cost, price=price, margin=margin, margin_percentage=percentage)


def price_from_markup(cost, markup_percent) -> Decimal:
    """Selling price for a cost marked up by ``markup_percent``."""
    return to_decimal(cost) * (1 + to_decimal(markup_percent) / HUNDRED)


def markup_from_price(cost, price) -> Decimal:
    """Markup percentage that turns ``cost`` into ``price`` (0 without a positive cost)."""
    cost = to_decimal(cost)
    if cost <= ZERO:
        return ZERO
    return (to_decimal(price) - cost) / cost * HUNDRED


def apply_markup(cost, markup_type: str, markup_amount=None) -> Decimal:
    """Selling price from a cost under a rate's markup settings."""
    cost = to_decimal(cost)
    if markup_type == "percentage":
        return price_from_markup(cost, markup_amount or 0)
    if markup_type == "fixed_amount":
        return cost + to_decimal(markup_amount or 0)
    return cost
