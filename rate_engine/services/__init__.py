"""Resolution engine — pure functions over already-loaded contract and rate records.

Modules:
    temporal_lookup     days_before threshold lookup shared by cancellation/attrition
    version_resolver    Picks the contract version in force on a date
    policy_terms        Cancellation and attrition terms from a version
    price_resolver      Base price of a selling rate over dates and occupancy
    modifier_pipeline   Compounds seasonal/length/advance/weekday/volume modifiers
    margin              Margin, markup and price conversions
    payment_schedule    Deposit, balance, supplier payment and commission
    operational_checks  Lead time, advance booking, service length, amendments
    quote               End-to-end composition of the above

Pipeline:
    resolve_version → resolve_price → apply_modifiers → compute_margin
"""
