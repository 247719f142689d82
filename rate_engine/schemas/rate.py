"""Selling rate records and the request shapes used to price them."""

from datetime import date, timedelta
from decimal import Decimal
from typing import Any, Iterator, Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from rate_engine.config import settings

RateBasis = Literal["per_night", "per_person", "per_unit", "per_booking", "per_day", "per_vehicle"]

# Bases priced per calendar date of the stay
NIGHTLY_BASES = frozenset({"per_night", "per_day"})


class DailyRate(BaseModel):
    """Per-date override of a selling rate's base price."""

    price: Decimal = Field(ge=0)
    pricing_tier: Literal["off_peak", "standard", "peak", "super_peak"] = "standard"
    event_context: str | None = None
    day_of_week: str | None = None
    occupancy_pricing: dict[int, Decimal] = Field(default_factory=dict)  # head count -> price

    model_config = {"frozen": True}


class OccupancyPricing(BaseModel):
    adults: int = Field(ge=0)
    children: int = Field(default=0, ge=0)
    multiplier: Decimal = Field(ge=0)
    description: str | None = None

    model_config = {"frozen": True}


class Extra(BaseModel):
    name: str
    price: Decimal = Field(ge=0)
    availability: bool = True

    model_config = {"frozen": True}


class PricingDetails(BaseModel):
    daily_rates: dict[date, DailyRate] = Field(default_factory=dict)
    occupancy_pricing: list[OccupancyPricing] = Field(default_factory=list)
    extras: list[Extra] = Field(default_factory=list)
    minimum_nights: int | None = Field(default=None, ge=1)
    maximum_nights: int | None = Field(default=None, ge=1)
    cancellation_policy: str | None = None
    payment_terms: str | None = None
    inclusions: list[str] = Field(default_factory=list)

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _consistent(self):
        if (
            self.minimum_nights is not None
            and self.maximum_nights is not None
            and self.maximum_nights < self.minimum_nights
        ):
            raise ValueError("maximum_nights must be >= minimum_nights")
        seen: set[tuple[int, int]] = set()
        for entry in self.occupancy_pricing:
            key = (entry.adults, entry.children)
            if key in seen:
                raise ValueError(
                    f"Duplicate occupancy pricing for {entry.adults} adult(s), {entry.children} child(ren)"
                )
            seen.add(key)
        return self


class SellingRate(BaseModel):
    """Customer-facing price definition for a product option."""

    id: str
    product_id: str | None = None
    product_option_id: str | None = None
    rate_name: str | None = None
    valid_from: date
    valid_to: date
    rate_basis: RateBasis
    base_price: Decimal = Field(gt=0)
    currency: str = Field(default_factory=lambda: settings.default_currency)
    target_cost: Decimal | None = Field(default=None, gt=0)
    markup_type: Literal["none", "percentage", "fixed_amount"] = "none"
    markup_amount: Decimal | None = Field(default=None, ge=0)
    is_active: bool = True
    pricing_details: PricingDetails = Field(default_factory=PricingDetails)

    model_config = {"frozen": True}

    @field_validator("id", "product_id", "product_option_id", mode="before")
    @classmethod
    def _ids_as_text(cls, v: Any) -> Any:
        return str(v) if isinstance(v, int) else v

    @field_validator("currency")
    @classmethod
    def _currency_code(cls, v: str) -> str:
        code = v.strip().upper()
        if len(code) != 3 or not code.isalpha():
            raise ValueError("Currency must be a 3-letter code")
        return code

    @field_validator("markup_type", mode="before")
    @classmethod
    def _markup_type(cls, v: Any) -> Any:
        if v is None or v == "null":
            return "none"
        if v == "fixed":
            return "fixed_amount"
        return v

    @field_validator("pricing_details", mode="before")
    @classmethod
    def _pricing_details(cls, v: Any) -> Any:
        return {} if v is None else v

    @model_validator(mode="after")
    def _validity_window(self):
        if self.valid_from >= self.valid_to:
            raise ValueError("valid_from must be before valid_to")
        return self

    @property
    def is_nightly(self) -> bool:
        return self.rate_basis in NIGHTLY_BASES


class Occupancy(BaseModel):
    adults: int = Field(default=1, ge=0)
    children: int = Field(default=0, ge=0)

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _someone(self):
        if self.adults + self.children < 1:
            raise ValueError("Occupancy needs at least one person")
        return self

    @property
    def persons(self) -> int:
        return self.adults + self.children


class DateRange(BaseModel):
    """Half-open date interval [from, to)."""

    start: date = Field(alias="from")
    end: date = Field(alias="to")

    model_config = {"frozen": True, "populate_by_name": True}

    @model_validator(mode="after")
    def _ordered(self):
        if self.end < self.start:
            raise ValueError("Date range end must not be before its start")
        return self

    @property
    def nights(self) -> int:
        return (self.end - self.start).days

    def dates(self) -> Iterator[date]:
        for offset in range(self.nights):
            yield self.start + timedelta(days=offset)
