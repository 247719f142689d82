from datetime import date
from decimal import Decimal

import pytest
from pydantic import ValidationError

from rate_engine.schemas import DateRange, Occupancy, RateModifiers
from rate_engine.services.modifier_pipeline import ModifierContext, apply_modifiers
from rate_engine.services.price_resolver import resolve_price

SUMMER = {"name": "Summer", "dates": ["2024-07-02"], "adjustment_percent": "10"}
EARLY_BIRD = {"name": "Early bird", "days_advance": 30, "adjustment_percent": "-5"}


@pytest.fixture
def booking_breakdown(make_rate):
    rate = make_rate(rate_basis="per_booking", base_price="200")
    return resolve_price(rate, DateRange(start=date(2024, 7, 1), end=date(2024, 7, 3)), Occupancy())


def nightly(make_rate, start, end, **kwargs):
    return resolve_price(make_rate(**kwargs), DateRange(start=start, end=end), Occupancy())


class TestCompounding:

    def test_seasonal_then_advance_purchase(self, booking_breakdown):
        modifiers = RateModifiers(seasonal=[SUMMER], advance_purchase=[EARLY_BIRD])
        ctx = ModifierContext.from_breakdown(booking_breakdown, booking_date=date(2024, 5, 1))
        result = apply_modifiers(booking_breakdown, modifiers, ctx)
        assert result.total == Decimal("209.00")
        assert [m.category for m in result.applied] == ["seasonal", "advance_purchase"]
        assert [m.factor for m in result.applied] == [Decimal("1.1"), Decimal("0.95")]

    def test_advance_purchase_skipped_without_booking_date(self, booking_breakdown):
        modifiers = RateModifiers(seasonal=[SUMMER], advance_purchase=[EARLY_BIRD])
        result = apply_modifiers(booking_breakdown, modifiers)
        assert result.total == Decimal("220.00")

    def test_longest_reached_advance_wins(self, booking_breakdown):
        modifiers = RateModifiers(
            advance_purchase=[EARLY_BIRD, {"days_advance": 60, "adjustment_percent": "-10"}]
        )
        ctx = ModifierContext.from_breakdown(booking_breakdown, booking_date=date(2024, 5, 1))
        assert ctx.days_in_advance == 61
        assert apply_modifiers(booking_breakdown, modifiers, ctx).total == Decimal("180.00")

    def test_no_modifiers(self, booking_breakdown):
        result = apply_modifiers(booking_breakdown, RateModifiers())
        assert result.applied == []
        assert result.combined_factor == 1
        assert result.total == booking_breakdown.subtotal

    def test_discount_floors_at_zero(self, booking_breakdown):
        modifiers = RateModifiers(seasonal=[{**SUMMER, "adjustment_percent": "-150"}])
        assert apply_modifiers(booking_breakdown, modifiers).total == Decimal("0.00")

    def test_extras_not_modified(self, make_rate):
        breakdown = resolve_price(
            make_rate(pricing_details={"extras": [{"name": "Breakfast", "price": "15"}]}),
            DateRange(start=date(2024, 7, 1), end=date(2024, 7, 3)),
            Occupancy(),
            extras=["Breakfast"],
        )
        result = apply_modifiers(breakdown, RateModifiers(seasonal=[SUMMER]))
        assert result.adjusted_subtotal == Decimal("220.00")
        assert result.total == Decimal("235.00")


class TestThresholds:

    def test_tightest_minimum_wins(self, make_rate):
        breakdown = nightly(make_rate, date(2024, 7, 1), date(2024, 7, 8))
        modifiers = RateModifiers(
            length_based=[
                {"threshold": 3, "adjustment_percent": "-5"},
                {"threshold": 7, "adjustment_percent": "-10"},
            ]
        )
        assert apply_modifiers(breakdown, modifiers).total == Decimal("630.00")

    def test_tightest_maximum_wins(self, make_rate):
        breakdown = nightly(make_rate, date(2024, 7, 1), date(2024, 7, 3))
        modifiers = RateModifiers(
            length_based=[
                {"threshold": 5, "threshold_type": "maximum", "adjustment_percent": "5"},
                {"threshold": 2, "threshold_type": "maximum", "adjustment_percent": "10"},
            ]
        )
        assert apply_modifiers(breakdown, modifiers).total == Decimal("220.00")

    def test_exact_beats_range(self, make_rate):
        breakdown = nightly(make_rate, date(2024, 7, 1), date(2024, 7, 3))
        modifiers = RateModifiers(
            length_based=[
                {"threshold": 1, "adjustment_percent": "-5"},
                {"threshold": 2, "threshold_type": "exact", "adjustment_percent": "-20"},
            ]
        )
        assert apply_modifiers(breakdown, modifiers).total == Decimal("160.00")

    def test_volume_defaults_to_units_times_persons(self, make_rate):
        rate = make_rate(rate_basis="per_unit", base_price="50")
        breakdown = resolve_price(
            rate, DateRange(start=date(2024, 7, 1), end=date(2024, 7, 1)), Occupancy(), quantity=10
        )
        modifiers = RateModifiers(volume_based=[{"name": "Group", "threshold": 10, "adjustment_percent": "-10"}])
        result = apply_modifiers(breakdown, modifiers)
        assert result.total == Decimal("450.00")
        assert result.applied[0].name == "Group"

        ctx = ModifierContext.from_breakdown(breakdown, volume=5)
        assert apply_modifiers(breakdown, modifiers, ctx).total == Decimal("500.00")


class TestDayOfWeek:

    def test_adjusts_matching_nights_only(self, make_rate):
        # Fri, Sat and Sun nights
        breakdown = nightly(make_rate, date(2024, 7, 5), date(2024, 7, 8))
        modifiers = RateModifiers(day_of_week={"enabled": True, "adjustments": {"sat": "20"}})
        result = apply_modifiers(breakdown, modifiers)
        assert result.total == Decimal("320.00")
        assert result.applied[0].name == "saturday"

    def test_applies_after_seasonal(self, make_rate):
        breakdown = nightly(make_rate, date(2024, 7, 5), date(2024, 7, 8))
        modifiers = RateModifiers(
            seasonal=[{"dates": ["2024-07-06"], "adjustment_percent": "10"}],
            day_of_week={"enabled": True, "adjustments": {"Saturday": "20"}},
        )
        result = apply_modifiers(breakdown, modifiers)
        assert result.total == Decimal("352.00")

    def test_disabled(self, make_rate):
        breakdown = nightly(make_rate, date(2024, 7, 5), date(2024, 7, 8))
        modifiers = RateModifiers(day_of_week={"enabled": False, "adjustments": {"saturday": "20"}})
        assert apply_modifiers(breakdown, modifiers).applied == []

    def test_unit_booking_uses_start_weekday(self, make_rate):
        rate = make_rate(rate_basis="per_booking", base_price="100")
        breakdown = resolve_price(rate, DateRange(start=date(2024, 7, 6), end=date(2024, 7, 6)), Occupancy())
        modifiers = RateModifiers(day_of_week={"enabled": True, "adjustments": {"sat": "-10"}})
        assert apply_modifiers(breakdown, modifiers).total == Decimal("90.00")


class TestModifierValidation:

    def test_length_needs_threshold(self):
        with pytest.raises(ValidationError):
            RateModifiers(length_based=[{"adjustment_percent": "5"}])

    def test_seasonal_needs_dates(self):
        with pytest.raises(ValidationError):
            RateModifiers(seasonal=[{"name": "Empty", "adjustment_percent": "5"}])

    def test_advance_needs_days(self):
        with pytest.raises(ValidationError):
            RateModifiers(advance_purchase=[{"adjustment_percent": "-5"}])

    def test_unknown_weekday(self):
        with pytest.raises(ValidationError):
            RateModifiers(day_of_week={"enabled": True, "adjustments": {"funday": "5"}})
