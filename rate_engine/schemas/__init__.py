from rate_engine.schemas.contract import (
    AdditionalTerms,
    AttritionPolicy,
    AttritionRule,
    CancellationPolicy,
    CancellationRule,
    CommissionTerms,
    ContractVersion,
    CustomerPaymentTerms,
    DayOfWeekModifier,
    OperationalTerms,
    PaymentTerms,
    RateModifier,
    RateModifiers,
    SupplierPaymentTerms,
)
from rate_engine.schemas.rate import (
    DailyRate,
    DateRange,
    Extra,
    Occupancy,
    OccupancyPricing,
    PricingDetails,
    SellingRate,
)

__all__ = [
    "AdditionalTerms",
    "AttritionPolicy",
    "AttritionRule",
    "CancellationPolicy",
    "CancellationRule",
    "CommissionTerms",
    "ContractVersion",
    "CustomerPaymentTerms",
    "DailyRate",
    "DateRange",
    "DayOfWeekModifier",
    "Extra",
    "Occupancy",
    "OccupancyPricing",
    "OperationalTerms",
    "PaymentTerms",
    "PricingDetails",
    "RateModifier",
    "RateModifiers",
    "SellingRate",
    "SupplierPaymentTerms",
]
