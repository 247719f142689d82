"""Operational checks — evaluates a booking request against a version's operational terms."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta, timezone

from rate_engine.data.durations import parse_duration
from rate_engine.schemas.contract import ContractVersion, OperationalTerms

logger = logging.getLogger(__name__)


def _as_datetime(value: date | datetime) -> datetime:
    """Aware UTC instant; plain dates and naive datetimes are read as UTC."""
    if not isinstance(value, datetime):
        value = datetime.combine(value, time.min)
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _describe(delta: timedelta) -> str:
    if delta.days >= 2:
        return f"{delta.days} days"
    hours = delta.total_seconds() / 3600
    return f"{hours:.0f}h"


@dataclass(frozen=True)
class BookingRequest:
    booked_at: date | datetime
    service_start: date | datetime
    service_length: int | None = None
    amendment_at: date | datetime | None = None

    @property
    def lead_time(self) -> timedelta:
        return _as_datetime(self.service_start) - _as_datetime(self.booked_at)


@dataclass
class OperationalCheckResult:
    rule_type: str
    status: str  # pass | block | info
    details: str

    def to_dict(self) -> dict:
        return {"rule_type": self.rule_type, "status": self.status, "details": self.details}


@dataclass
class OperationalEvaluation:
    overall_status: str  # compliant | violation
    checks: list[OperationalCheckResult] = field(default_factory=list)
    blocks: list[OperationalCheckResult] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "overall_status": self.overall_status,
            "checks": [c.to_dict() for c in self.checks],
            "blocks": [c.to_dict() for c in self.blocks],
        }


class OperationalChecker(ABC):
    rule_type: str

    @abstractmethod
    def check(self, terms: OperationalTerms, request: BookingRequest) -> OperationalCheckResult | None:
        """Return a result, or None when the term is not configured."""


class LeadTimeChecker(OperationalChecker):
    rule_type = "minimum_lead_time"

    def check(self, terms, request):
        if terms.minimum_lead_time is None:
            return None
        minimum = parse_duration(terms.minimum_lead_time)
        lead = request.lead_time
        if lead >= minimum:
            return OperationalCheckResult(
                self.rule_type, "pass", f"Booked {_describe(lead)} ahead (min: {terms.minimum_lead_time})"
            )
        return OperationalCheckResult(
            self.rule_type,
            "block",
            f"Booked {_describe(max(lead, timedelta(0)))} ahead, below minimum lead time {terms.minimum_lead_time}",
        )


class AdvanceBookingChecker(OperationalChecker):
    rule_type = "maximum_advance_booking"

    def check(self, terms, request):
        if terms.maximum_advance_booking is None:
            return None
        maximum = parse_duration(terms.maximum_advance_booking)
        lead = request.lead_time
        if lead <= maximum:
            return OperationalCheckResult(
                self.rule_type, "pass", f"Booked {_describe(lead)} ahead (max: {terms.maximum_advance_booking})"
            )
        return OperationalCheckResult(
            self.rule_type,
            "block",
            f"Booked {_describe(lead)} ahead, beyond maximum advance booking {terms.maximum_advance_booking}",
        )


class ServiceLengthChecker(OperationalChecker):
    rule_type = "service_length"

    def check(self, terms, request):
        lo, hi = terms.minimum_service_length, terms.maximum_service_length
        if request.service_length is None or (lo is None and hi is None):
            return None
        length = request.service_length
        if lo is not None and length < lo:
            return OperationalCheckResult(self.rule_type, "block", f"Service length {length} is below minimum {lo}")
        if hi is not None and length > hi:
            return OperationalCheckResult(self.rule_type, "block", f"Service length {length} exceeds maximum {hi}")
        return OperationalCheckResult(self.rule_type, "pass", f"Service length {length} within limits")


class AmendmentChecker(OperationalChecker):
    rule_type = "amendment"

    def check(self, terms, request):
        if request.amendment_at is None:
            return None
        if not terms.amendment_allowed:
            return OperationalCheckResult(self.rule_type, "block", "Amendments are not allowed under this contract")
        if terms.amendment_deadline is None:
            return OperationalCheckResult(self.rule_type, "pass", "Amendments allowed without deadline")
        deadline = _as_datetime(request.service_start) - parse_duration(terms.amendment_deadline)
        if _as_datetime(request.amendment_at) <= deadline:
            return OperationalCheckResult(
                self.rule_type, "pass", f"Amendment before deadline ({terms.amendment_deadline} before service)"
            )
        return OperationalCheckResult(
            self.rule_type,
            "block",
            f"Amendment after deadline ({terms.amendment_deadline} before service)",
        )


CHECKERS: tuple[OperationalChecker, ...] = (
    LeadTimeChecker(),
    AdvanceBookingChecker(),
    ServiceLengthChecker(),
    AmendmentChecker(),
)


def check_operational_terms(version: ContractVersion, request: BookingRequest) -> OperationalEvaluation:
    """Run every configured operational term against a booking request."""
    evaluation = OperationalEvaluation(overall_status="compliant")
    for checker in CHECKERS:
        result = checker.check(version.operational_terms, request)
        if result is None:
            continue
        evaluation.checks.append(result)
        if result.status == "block":
            evaluation.blocks.append(result)

    if evaluation.blocks:
        evaluation.overall_status = "violation"
        logger.debug(f"Version {version.id}: {len(evaluation.blocks)} operational violation(s)")
    return evaluation
