"""Contract terms router — version, cancellation, attrition, payment and operational lookups."""

from datetime import date, datetime
from decimal import Decimal

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from rate_engine.errors import RateEngineError
from rate_engine.schemas.contract import ContractVersion
from rate_engine.services.operational_checks import BookingRequest, check_operational_terms
from rate_engine.services.payment_schedule import compute_commission, resolve_payment_schedule
from rate_engine.services.policy_terms import resolve_attrition_term, resolve_cancellation_term
from rate_engine.services.version_resolver import resolve_version

router = APIRouter()


class VersionResolveRequest(BaseModel):
    versions: list[ContractVersion]
    on_date: date


class CancellationRequest(BaseModel):
    versions: list[ContractVersion]
    cancel_at: date | datetime
    service_date: date
    booking_value: Decimal | None = Field(default=None, ge=0)
    currency: str | None = None


class AttritionRequest(BaseModel):
    versions: list[ContractVersion]
    change_at: date | datetime
    service_date: date
    current_qty: int = Field(ge=0)
    original_qty: int = Field(ge=0)
    requested_qty: int | None = Field(default=None, ge=0)


class PaymentScheduleRequest(BaseModel):
    versions: list[ContractVersion]
    booking_date: date
    service_date: date
    total: Decimal = Field(ge=0)
    currency: str | None = None
    net: Decimal | None = None
    gross: Decimal | None = None


class OperationalCheckRequest(BaseModel):
    versions: list[ContractVersion]
    booked_at: date | datetime
    service_start: date | datetime
    service_length: int | None = Field(default=None, ge=0)
    amendment_at: date | datetime | None = None


def _engine_error(exc: RateEngineError) -> HTTPException:
    return HTTPException(status_code=422, detail=exc.to_dict())


def _service_day(value: date | datetime) -> date:
    return value.date() if isinstance(value, datetime) else value


@router.post("/versions/resolve")
async def resolve_contract_version(req: VersionResolveRequest):
    """Return the contract version in force on a date."""
    try:
        version = resolve_version(req.versions, req.on_date)
    except RateEngineError as e:
        raise _engine_error(e)
    return {"version": version.model_dump(mode="json")}


@router.post("/cancellation")
async def cancellation_term(req: CancellationRequest):
    """Cancellation penalty under the version in force on the service date."""
    try:
        version = resolve_version(req.versions, req.service_date)
        term = resolve_cancellation_term(
            version, req.cancel_at, req.service_date, booking_value=req.booking_value, currency=req.currency
        )
    except RateEngineError as e:
        raise _engine_error(e)
    return {"version_id": version.id, **term.to_dict()}


@router.post("/attrition")
async def attrition_term(req: AttritionRequest):
    """Attrition allowance and penalty under the version in force on the service date."""
    try:
        version = resolve_version(req.versions, req.service_date)
        term = resolve_attrition_term(
            version,
            req.change_at,
            req.service_date,
            current_qty=req.current_qty,
            original_qty=req.original_qty,
            requested_qty=req.requested_qty,
        )
    except RateEngineError as e:
        raise _engine_error(e)
    return {"version_id": version.id, **term.to_dict()}


@router.post("/payment-schedule")
async def payment_schedule(req: PaymentScheduleRequest):
    """Deposit/balance schedule and, when amounts are given, the commission owed."""
    try:
        version = resolve_version(req.versions, req.service_date)
    except RateEngineError as e:
        raise _engine_error(e)

    schedule = resolve_payment_schedule(
        version, req.booking_date, req.service_date, req.total, currency=req.currency
    )
    result = {"version_id": version.id, **schedule.to_dict(), "commission": None}
    if req.net is not None or req.gross is not None:
        try:
            commission = compute_commission(
                version.payment_terms.commission,
                net=req.net if req.net is not None else req.total,
                gross=req.gross,
                currency=schedule.currency,
            )
        except ValueError as e:
            raise HTTPException(status_code=422, detail=str(e))
        result["commission"] = float(commission)
    return result


@router.post("/operational-check")
async def operational_check(req: OperationalCheckRequest):
    """Evaluate a booking request against the operational terms in force."""
    try:
        version = resolve_version(req.versions, _service_day(req.service_start))
    except RateEngineError as e:
        raise _engine_error(e)

    evaluation = check_operational_terms(
        version,
        BookingRequest(
            booked_at=req.booked_at,
            service_start=req.service_start,
            service_length=req.service_length,
            amendment_at=req.amendment_at,
        ),
    )
    return {"version_id": version.id, **evaluation.to_dict()}
