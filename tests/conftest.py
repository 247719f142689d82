from datetime import date
from decimal import Decimal

import pytest

from rate_engine.schemas import (
    AttritionPolicy,
    AttritionRule,
    CancellationPolicy,
    CancellationRule,
    ContractVersion,
    SellingRate,
)


@pytest.fixture
def cancellation_rules():
    return [
        CancellationRule(days_before=30, penalty_percent=0, description="Free cancellation"),
        CancellationRule(days_before=7, penalty_percent=50, description="50% penalty"),
        CancellationRule(days_before=0, penalty_percent=100, description="Non-refundable"),
    ]


@pytest.fixture
def attrition_rules():
    return [
        AttritionRule(days_before=60, allowed_reduction_percent=20, description="20% reduction allowed"),
        AttritionRule(days_before=30, allowed_reduction_percent=10, description="10% reduction allowed"),
        AttritionRule(
            days_before=0, allowed_reduction_percent=0, penalty_per_unit=50, description="No reduction allowed"
        ),
    ]


@pytest.fixture
def make_version(cancellation_rules, attrition_rules):
    def _make(
        id="v1",
        valid_from=date(2024, 1, 1),
        valid_to=date(2025, 1, 1),
        **terms,
    ) -> ContractVersion:
        terms.setdefault("cancellation_policy", CancellationPolicy(rules=cancellation_rules))
        terms.setdefault(
            "attrition_policy",
            AttritionPolicy(enabled=True, rules=attrition_rules, minimum_quantity=10),
        )
        return ContractVersion(
            id=id, contract_id="c1", valid_from=valid_from, valid_to=valid_to, **terms
        )

    return _make


@pytest.fixture
def version(make_version):
    return make_version()


@pytest.fixture
def make_rate():
    def _make(**overrides) -> SellingRate:
        fields = {
            "id": "r1",
            "product_id": "p1",
            "valid_from": date(2024, 1, 1),
            "valid_to": date(2025, 1, 1),
            "rate_basis": "per_night",
            "base_price": Decimal("100"),
            "currency": "GBP",
        }
        fields.update(overrides)
        return SellingRate(**fields)

    return _make


@pytest.fixture
def nightly_rate(make_rate):
    return make_rate(
        target_cost=Decimal("80"),
        markup_type="percentage",
        markup_amount=Decimal("25"),
        pricing_details={"daily_rates": {"2024-07-04": {"price": "250", "pricing_tier": "peak"}}},
    )


@pytest.fixture
def occupancy_config():
    return [
        {"adults": 2, "children": 0, "multiplier": "1.0"},
        {"adults": 2, "children": 1, "multiplier": "1.3"},
    ]
