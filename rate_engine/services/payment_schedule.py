"""Payment schedule — deposit/balance due dates, supplier payment date and commission."""

import calendar
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from decimal import Decimal

from rate_engine.data.currency import quantize_money, to_decimal
from rate_engine.schemas.contract import CommissionTerms, ContractVersion, SupplierPaymentTerms

logger = logging.getLogger(__name__)

HUNDRED = Decimal("100")

DEPOSIT_OFFSETS: dict[str, int] = {
    "at_booking": 0,
    "7_days": 7,
    "14_days": 14,
}

BALANCE_OFFSETS: dict[str, int] = {
    "at_service": 0,
    "30_days_before": 30,
    "60_days_before": 60,
}

SUPPLIER_OFFSETS: dict[str, int] = {
    "post_service": 0,
    "net_30": 30,
    "net_60": 60,
}


@dataclass(frozen=True)
class PaymentSchedule:
    currency: str
    total: Decimal
    deposit_amount: Decimal
    deposit_due: date | None
    balance_amount: Decimal
    balance_due: date | None
    supplier_payment_due: date | None = None
    accepted_methods: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "currency": self.currency,
            "total": float(self.total),
            "deposit_amount": float(self.deposit_amount),
            "deposit_due": self.deposit_due.isoformat() if self.deposit_due else None,
            "balance_amount": float(self.balance_amount),
            "balance_due": self.balance_due.isoformat() if self.balance_due else None,
            "supplier_payment_due": (
                self.supplier_payment_due.isoformat() if self.supplier_payment_due else None
            ),
            "accepted_methods": self.accepted_methods,
        }


def _as_date(value: date | datetime) -> date:
    return value.date() if isinstance(value, datetime) else value


def resolve_payment_schedule(
    version: ContractVersion,
    booking_date: date | datetime,
    service_date: date | datetime,
    total,
    currency: str | None = None,
) -> PaymentSchedule:
    """Split a booking total into deposit and balance per the customer payment terms.

    Due dates never precede the booking, and the deposit is never due after
    the service date. A balance falling due at or before the deposit is
    rolled into the deposit.
    """
    booking_date, service_date = _as_date(booking_date), _as_date(service_date)
    terms = version.payment_terms.customer
    currency = currency or version.payment_terms.supplier.currency
    total = quantize_money(total, currency)

    deposit = quantize_money(total * terms.deposit_percent / HUNDRED, currency)
    deposit_due = min(booking_date + timedelta(days=DEPOSIT_OFFSETS[terms.deposit_due]), service_date)
    balance_due = max(service_date - timedelta(days=BALANCE_OFFSETS[terms.balance_due]), booking_date)

    if deposit and balance_due <= deposit_due:
        deposit, deposit_due = total, balance_due
    balance = total - deposit

    return PaymentSchedule(
        currency=currency,
        total=total,
        deposit_amount=deposit,
        deposit_due=deposit_due if deposit else None,
        balance_amount=balance,
        balance_due=balance_due if balance else None,
        supplier_payment_due=supplier_payment_date(version.payment_terms.supplier, booking_date, service_date),
        accepted_methods=list(terms.accepted_methods),
    )


def _roll_to_payment_day(due: date, payment_day: int) -> date:
    """Next date on or after ``due`` falling on ``payment_day`` (clamped to month end)."""
    year, month = due.year, due.month
    while True:
        last = calendar.monthrange(year, month)[1]
        candidate = date(year, month, min(payment_day, last))
        if candidate >= due:
            return candidate
        year, month = (year + 1, 1) if month == 12 else (year, month + 1)


def supplier_payment_date(
    terms: SupplierPaymentTerms,
    booking_date: date | datetime,
    service_date: date | datetime,
) -> date:
    """When the supplier is owed payment under its payment type."""
    booking_date, service_date = _as_date(booking_date), _as_date(service_date)
    if terms.payment_type == "prepay":
        due = booking_date
    else:
        due = service_date + timedelta(days=SUPPLIER_OFFSETS[terms.payment_type])
    if terms.payment_day is not None:
        due = _roll_to_payment_day(due, terms.payment_day)
    return due


def compute_commission(terms: CommissionTerms, net, gross=None, currency: str | None = None) -> Decimal:
    """Commission owed under ``terms``.

    Percentage commissions apply to the net or gross amount per
    ``applies_to``; fixed commissions are the configured rate as-is.
    """
    if terms.type == "fixed_amount":
        return quantize_money(terms.rate, currency)
    if terms.applies_to == "gross":
        if gross is None:
            raise ValueError("Gross amount required for a commission applied to gross")
        base = to_decimal(gross)
    else:
        base = to_decimal(net)
    return quantize_money(base * terms.rate / HUNDRED, currency)
