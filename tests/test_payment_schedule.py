from datetime import date
from decimal import Decimal

import pytest

from rate_engine.schemas import CommissionTerms, PaymentTerms, SupplierPaymentTerms
from rate_engine.services.payment_schedule import (
    compute_commission,
    resolve_payment_schedule,
    supplier_payment_date,
)

SERVICE = date(2024, 7, 1)


@pytest.fixture
def deposit_version(make_version):
    terms = PaymentTerms(
        customer={
            "deposit_percent": "30",
            "deposit_due": "at_booking",
            "balance_due": "30_days_before",
            "accepted_methods": ["card", "bank_transfer"],
        },
        supplier={"payment_type": "net_30", "currency": "EUR"},
    )
    return make_version(payment_terms=terms)


class TestPaymentSchedule:

    def test_deposit_and_balance(self, deposit_version):
        schedule = resolve_payment_schedule(deposit_version, date(2024, 3, 1), SERVICE, 1000)
        assert schedule.currency == "EUR"
        assert schedule.deposit_amount == Decimal("300.00")
        assert schedule.deposit_due == date(2024, 3, 1)
        assert schedule.balance_amount == Decimal("700.00")
        assert schedule.balance_due == date(2024, 6, 1)
        assert schedule.supplier_payment_due == date(2024, 7, 31)
        assert schedule.accepted_methods == ["card", "bank_transfer"]

    def test_late_booking_pays_in_full(self, deposit_version):
        schedule = resolve_payment_schedule(deposit_version, date(2024, 6, 20), SERVICE, 1000)
        assert schedule.deposit_amount == Decimal("1000.00")
        assert schedule.deposit_due == date(2024, 6, 20)
        assert schedule.balance_amount == 0
        assert schedule.balance_due is None

    def test_no_deposit(self, version):
        schedule = resolve_payment_schedule(version, date(2024, 3, 1), SERVICE, "499.995", currency="GBP")
        assert schedule.total == Decimal("500.00")
        assert schedule.deposit_amount == 0
        assert schedule.deposit_due is None
        assert schedule.balance_due == SERVICE


class TestSupplierPaymentDate:

    def test_net_terms(self):
        terms = SupplierPaymentTerms(payment_type="net_60")
        assert supplier_payment_date(terms, date(2024, 3, 1), SERVICE) == date(2024, 8, 30)

    def test_prepay_due_at_booking(self):
        terms = SupplierPaymentTerms(payment_type="prepay")
        assert supplier_payment_date(terms, date(2024, 3, 1), SERVICE) == date(2024, 3, 1)

    def test_rolls_to_payment_day(self):
        terms = SupplierPaymentTerms(payment_type="net_30", payment_day=10)
        assert supplier_payment_date(terms, date(2024, 3, 1), SERVICE) == date(2024, 8, 10)

    def test_payment_day_clamped_to_month_end(self):
        terms = SupplierPaymentTerms(payment_type="post_service", payment_day=31)
        assert supplier_payment_date(terms, date(2024, 1, 1), date(2024, 2, 15)) == date(2024, 2, 29)


class TestCommission:

    def test_percentage_of_net(self):
        assert compute_commission(CommissionTerms(rate="15"), net=1000) == Decimal("150.00")

    def test_percentage_of_gross(self):
        terms = CommissionTerms(rate="15", applies_to="gross")
        assert compute_commission(terms, net=1000, gross=1200) == Decimal("180.00")

    def test_gross_required(self):
        with pytest.raises(ValueError):
            compute_commission(CommissionTerms(rate="15", applies_to="gross"), net=1000)

    def test_fixed_amount(self):
        terms = CommissionTerms(rate="25", type="fixed_amount")
        assert compute_commission(terms, net=1000) == Decimal("25.00")
