"""Contract version terms — cancellation, attrition, payment, operational and rate modifiers."""

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from rate_engine.config import settings
from rate_engine.data.durations import parse_duration

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")


def _check_distinct_thresholds(rules: list, label: str) -> None:
    seen: set[int] = set()
    for rule in rules:
        if rule.days_before in seen:
            raise ValueError(f"Duplicate {label} rule for days_before={rule.days_before}")
        seen.add(rule.days_before)


# ---------- Cancellation ----------


class CancellationRule(BaseModel):
    days_before: int = Field(ge=0)
    penalty_percent: Decimal | None = Field(default=None, ge=0, le=100)
    penalty_amount: Decimal | None = Field(default=None, ge=0)
    description: str = ""

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _require_penalty(self):
        if self.penalty_percent is None and self.penalty_amount is None:
            raise ValueError(
                f"Cancellation rule at {self.days_before} days needs penalty_percent or penalty_amount"
            )
        return self


class CancellationPolicy(BaseModel):
    type: Literal["standard", "non_refundable", "flexible"] = "standard"
    rules: list[CancellationRule] = Field(default_factory=list)
    exceptions: list[str] = Field(default_factory=list)
    notes: str | None = None

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _distinct_thresholds(self):
        _check_distinct_thresholds(self.rules, "cancellation")
        return self


# ---------- Attrition ----------


class AttritionRule(BaseModel):
    days_before: int = Field(ge=0)
    allowed_reduction_percent: Decimal | None = Field(default=None, ge=0, le=100)
    penalty_per_unit: Decimal | None = Field(default=None, ge=0)
    penalty_percent: Decimal | None = Field(default=None, ge=0, le=100)
    description: str = ""

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _require_term(self):
        if (
            self.allowed_reduction_percent is None
            and self.penalty_per_unit is None
            and self.penalty_percent is None
        ):
            raise ValueError(
                f"Attrition rule at {self.days_before} days needs an allowance or a penalty"
            )
        return self


class AttritionPolicy(BaseModel):
    enabled: bool = False
    rules: list[AttritionRule] = Field(default_factory=list)
    minimum_quantity: int = Field(default=0, ge=0)
    calculation_basis: Literal["original_quantity", "current_quantity"] = "original_quantity"
    cumulative: bool = False
    notes: str | None = None

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _distinct_thresholds(self):
        _check_distinct_thresholds(self.rules, "attrition")
        return self


# ---------- Payment ----------


class CustomerPaymentTerms(BaseModel):
    deposit_percent: Decimal = Field(default=Decimal("0"), ge=0, le=100)
    deposit_due: Literal["at_booking", "7_days", "14_days"] = "at_booking"
    balance_due: Literal["at_service", "30_days_before", "60_days_before"] = "at_service"
    accepted_methods: list[str] = Field(default_factory=list)

    model_config = {"frozen": True}


class SupplierPaymentTerms(BaseModel):
    payment_type: Literal["prepay", "net_30", "net_60", "post_service"] = "net_30"
    payment_day: int | None = Field(default=None, ge=1, le=31)
    method: str = "bank_transfer"
    currency: str = Field(default_factory=lambda: settings.default_currency)

    model_config = {"frozen": True}


class CommissionTerms(BaseModel):
    rate: Decimal = Field(default=Decimal("0"), ge=0)
    type: Literal["percentage", "fixed_amount"] = "percentage"
    applies_to: Literal["net", "gross"] = "net"
    notes: str | None = None

    model_config = {"frozen": True}


class PaymentTerms(BaseModel):
    customer: CustomerPaymentTerms = Field(default_factory=CustomerPaymentTerms)
    supplier: SupplierPaymentTerms = Field(default_factory=SupplierPaymentTerms)
    commission: CommissionTerms = Field(default_factory=CommissionTerms)

    model_config = {"frozen": True}


# ---------- Operational ----------


class OperationalTerms(BaseModel):
    minimum_lead_time: str | None = None
    maximum_advance_booking: str | None = None
    confirmation_time: str | None = None
    amendment_allowed: bool = True
    amendment_deadline: str | None = None
    minimum_service_length: int | None = Field(default=None, ge=0)
    maximum_service_length: int | None = Field(default=None, ge=0)

    model_config = {"frozen": True, "extra": "allow"}

    @field_validator(
        "minimum_lead_time", "maximum_advance_booking", "confirmation_time", "amendment_deadline"
    )
    @classmethod
    def _valid_duration(cls, v: str | None) -> str | None:
        if v is not None:
            parse_duration(v)
        return v

    @model_validator(mode="after")
    def _length_bounds(self):
        lo, hi = self.minimum_service_length, self.maximum_service_length
        if lo is not None and hi is not None and hi < lo:
            raise ValueError("maximum_service_length must be >= minimum_service_length")
        return self


# ---------- Rate modifiers ----------


class RateModifier(BaseModel):
    """One adjustment entry; which fields matter depends on its category."""

    name: str | None = None
    dates: list[date] = Field(default_factory=list)
    threshold: int | None = Field(default=None, ge=0)
    threshold_type: Literal["minimum", "maximum", "exact"] = "minimum"
    days_advance: int | None = Field(default=None, ge=0)
    adjustment_percent: Decimal

    model_config = {"frozen": True}

    def label(self, category: str) -> str:
        return self.name or category


class DayOfWeekModifier(BaseModel):
    enabled: bool = False
    adjustments: dict[str, Decimal] = Field(default_factory=dict)

    model_config = {"frozen": True}

    @field_validator("adjustments", mode="before")
    @classmethod
    def _normalise_weekdays(cls, v: Any) -> Any:
        if not isinstance(v, dict):
            return v
        normalised = {}
        for key, value in v.items():
            name = str(key).strip().lower()
            match = next((d for d in WEEKDAYS if d == name or d[:3] == name), None)
            if match is None:
                raise ValueError(f"Unknown weekday {key!r}")
            normalised[match] = value
        return normalised


class RateModifiers(BaseModel):
    seasonal: list[RateModifier] = Field(default_factory=list)
    length_based: list[RateModifier] = Field(default_factory=list)
    advance_purchase: list[RateModifier] = Field(default_factory=list)
    day_of_week: DayOfWeekModifier = Field(default_factory=DayOfWeekModifier)
    volume_based: list[RateModifier] = Field(default_factory=list)

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _category_fields(self):
        for mod in self.seasonal:
            if not mod.dates:
                raise ValueError(f"Seasonal modifier {mod.label('seasonal')!r} has no dates")
        for category in ("length_based", "volume_based"):
            for mod in getattr(self, category):
                if mod.threshold is None:
                    raise ValueError(f"{category} modifier {mod.label(category)!r} has no threshold")
        for mod in self.advance_purchase:
            if mod.days_advance is None:
                raise ValueError(
                    f"advance_purchase modifier {mod.label('advance_purchase')!r} has no days_advance"
                )
        return self


# ---------- Additional ----------


class AdditionalTerms(BaseModel):
    notes: str | None = None
    restrictions: list[str] = Field(default_factory=list)
    inclusions: list[str] = Field(default_factory=list)
    exclusions: list[str] = Field(default_factory=list)
    required_documentation: list[str] = Field(default_factory=list)
    special_conditions: dict[str, Any] = Field(default_factory=dict)

    model_config = {"frozen": True}


# ---------- Version ----------


class ContractVersion(BaseModel):
    """A dated snapshot of commercial terms with a supplier."""

    id: str
    contract_id: str | None = None
    version_number: int | None = None
    valid_from: date
    valid_to: date
    cancellation_policy: CancellationPolicy = Field(default_factory=CancellationPolicy)
    attrition_policy: AttritionPolicy = Field(default_factory=AttritionPolicy)
    payment_terms: PaymentTerms = Field(default_factory=PaymentTerms)
    operational_terms: OperationalTerms = Field(default_factory=OperationalTerms)
    rate_modifiers: RateModifiers = Field(default_factory=RateModifiers)
    additional_terms: AdditionalTerms = Field(default_factory=AdditionalTerms)
    supersedes_id: str | None = None
    created_at: datetime | None = None

    model_config = {"frozen": True}

    @field_validator("id", "contract_id", "supersedes_id", mode="before")
    @classmethod
    def _ids_as_text(cls, v: Any) -> Any:
        return str(v) if isinstance(v, int) else v

    @model_validator(mode="after")
    def _validity_window(self):
        if self.valid_from >= self.valid_to:
            raise ValueError("valid_from must be before valid_to")
        if self.supersedes_id is not None and self.supersedes_id == self.id:
            raise ValueError("A contract version cannot supersede itself")
        return self

    def covers(self, on_date: date) -> bool:
        return self.valid_from <= on_date < self.valid_to
