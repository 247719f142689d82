"""Currency utilities — minor-unit rounding and display formatting."""

from decimal import ROUND_HALF_UP, Decimal

from rate_engine.config import settings

# Currencies whose minor unit differs from the configured default
CURRENCY_DECIMALS: dict[str, int] = {
    "JPY": 0,
    "KRW": 0,
    "ISK": 0,
    "BHD": 3,
    "KWD": 3,
    "OMR": 3,
}

CURRENCY_SYMBOLS: dict[str, str] = {
    "USD": "$", "CAD": "CA$", "GBP": "£", "EUR": "€",
    "JPY": "¥", "AUD": "A$", "SGD": "S$", "HKD": "HK$",
    "INR": "₹", "AED": "AED", "QAR": "QAR", "TRY": "TRY",
    "KRW": "₩", "CHF": "CHF", "NZD": "NZ$", "ZAR": "R",
}


def to_decimal(value) -> Decimal:
    """Coerce ints, floats and strings to Decimal without float artefacts."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def minor_unit_exponent(currency: str | None = None) -> Decimal:
    places = CURRENCY_DECIMALS.get((currency or "").upper(), settings.money_decimal_places)
    return Decimal(1).scaleb(-places)


def quantize_money(amount, currency: str | None = None) -> Decimal:
    """Round an amount half-up to the currency's minor unit."""
    return to_decimal(amount).quantize(minor_unit_exponent(currency), rounding=ROUND_HALF_UP)


def format_price(amount, currency: str | None = None) -> str:
    """Format a price with currency symbol for display."""
    currency = (currency or settings.default_currency).upper()
    symbol = CURRENCY_SYMBOLS.get(currency, currency + " ")
    value = quantize_money(amount, currency)
    return f"{symbol}{value:,}"
