"""Rate & policy resolution engine for tour-operator contracts and selling rates."""

from rate_engine.errors import (
    AmbiguousVersionOverlap,
    ExtraNotAvailable,
    InvalidQuantity,
    InvalidRuleSet,
    NoActiveVersion,
    NoMatchingOccupancyConfig,
    NotApplicable,
    RateEngineError,
    RateNotValidForDates,
    StayLengthOutOfBounds,
)
from rate_engine.services.margin import (
    apply_markup,
    compute_margin,
    markup_from_price,
    price_from_markup,
)
from rate_engine.services.modifier_pipeline import ModifierContext, apply_modifiers
from rate_engine.services.operational_checks import BookingRequest, check_operational_terms
from rate_engine.services.payment_schedule import compute_commission, resolve_payment_schedule
from rate_engine.services.policy_terms import resolve_attrition_term, resolve_cancellation_term
from rate_engine.services.price_resolver import resolve_price
from rate_engine.services.quote import quote_stay
from rate_engine.services.temporal_lookup import days_before, resolve_rule
from rate_engine.services.version_resolver import resolve_version

__version__ = "0.1.0"

__all__ = [
    "AmbiguousVersionOverlap",
    "BookingRequest",
    "ExtraNotAvailable",
    "InvalidQuantity",
    "InvalidRuleSet",
    "ModifierContext",
    "NoActiveVersion",
    "NoMatchingOccupancyConfig",
    "NotApplicable",
    "RateEngineError",
    "RateNotValidForDates",
    "StayLengthOutOfBounds",
    "apply_markup",
    "apply_modifiers",
    "check_operational_terms",
    "compute_commission",
    "compute_margin",
    "days_before",
    "markup_from_price",
    "price_from_markup",
    "quote_stay",
    "resolve_attrition_term",
    "resolve_cancellation_term",
    "resolve_payment_schedule",
    "resolve_price",
    "resolve_rule",
    "resolve_version",
]
