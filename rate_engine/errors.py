"""Domain errors raised by the resolution engine.

Every error carries a stable ``code`` so a caller (or the HTTP layer) can
render a precise message per failure kind.
"""

from typing import Any


class RateEngineError(Exception):
    """Base class for all recoverable engine errors."""

    code = "rate_engine_error"

    def __init__(self, message: str, **details: Any):
        self.message = message
        self.details = details
        super().__init__(message)

    def to_dict(self) -> dict:
        return {"error": self.code, "detail": self.message, **self.details}


class InvalidRuleSet(RateEngineError):
    """Duplicate days_before thresholds, or a rule without a penalty expression."""

    code = "invalid_rule_set"


class NotApplicable(RateEngineError):
    """No rule covers the requested point in time."""

    code = "not_applicable"


class NoActiveVersion(RateEngineError):
    code = "no_active_version"


class AmbiguousVersionOverlap(RateEngineError):
    """Several un-superseded versions are valid on the same date."""

    code = "ambiguous_version_overlap"


class RateNotValidForDates(RateEngineError):
    code = "rate_not_valid_for_dates"


class StayLengthOutOfBounds(RateEngineError):
    code = "stay_length_out_of_bounds"


class NoMatchingOccupancyConfig(RateEngineError):
    code = "no_matching_occupancy_config"


class ExtraNotAvailable(RateEngineError):
    code = "extra_not_available"


class InvalidQuantity(RateEngineError):
    """A booked, current or original quantity outside its allowed range."""

    code = "invalid_quantity"
