"""Pricing router — base price, full quote, margin and markup helpers."""

from datetime import date, datetime
from decimal import Decimal

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field, model_validator

from rate_engine.errors import RateEngineError
from rate_engine.schemas.contract import ContractVersion
from rate_engine.schemas.rate import DateRange, Occupancy, SellingRate
from rate_engine.services.margin import compute_margin, markup_from_price, price_from_markup
from rate_engine.services.price_resolver import resolve_price
from rate_engine.services.quote import quote_stay

router = APIRouter()


class PriceRequest(BaseModel):
    rate: SellingRate
    date_range: DateRange
    occupancy: Occupancy = Field(default_factory=Occupancy)
    quantity: int = Field(default=1, ge=1)
    extras: list[str] = []


class QuoteRequest(PriceRequest):
    versions: list[ContractVersion] = []
    booking_date: date | datetime | None = None
    volume: int | None = Field(default=None, ge=0)


class MarginRequest(BaseModel):
    price: Decimal
    cost: Decimal | None = None


class MarkupRequest(BaseModel):
    """Exactly one of markup_percent / price is the field the user edited."""

    cost: Decimal = Field(ge=0)
    markup_percent: Decimal | None = None
    price: Decimal | None = None

    @model_validator(mode="after")
    def _one_edited_field(self):
        if (self.markup_percent is None) == (self.price is None):
            raise ValueError("Provide exactly one of markup_percent or price")
        return self


@router.post("/resolve")
async def resolve_base_price(req: PriceRequest):
    """Base price breakdown for a selling rate."""
    try:
        breakdown = resolve_price(
            req.rate, req.date_range, req.occupancy, quantity=req.quantity, extras=req.extras
        )
    except RateEngineError as e:
        raise HTTPException(status_code=422, detail=e.to_dict())
    return breakdown.to_dict()


@router.post("/quote")
async def quote(req: QuoteRequest):
    """Base price, contract modifiers and margin in one call."""
    try:
        result = quote_stay(
            req.rate,
            req.date_range,
            req.occupancy,
            versions=req.versions,
            booking_date=req.booking_date,
            quantity=req.quantity,
            extras=req.extras,
            volume=req.volume,
        )
    except RateEngineError as e:
        raise HTTPException(status_code=422, detail=e.to_dict())
    return result.to_dict()


@router.post("/margin")
async def margin(req: MarginRequest):
    return compute_margin(req.price, req.cost).to_dict()


@router.post("/markup")
async def markup(req: MarkupRequest):
    """Keep markup and price consistent with whichever one was edited last."""
    if req.markup_percent is not None:
        markup_percent = req.markup_percent
        price = price_from_markup(req.cost, markup_percent)
    else:
        price = req.price
        markup_percent = markup_from_price(req.cost, price)
    return {
        "cost": float(req.cost),
        "price": round(float(price), 2),
        "markup_percent": round(float(markup_percent), 2),
    }
