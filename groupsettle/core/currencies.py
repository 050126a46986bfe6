from decimal import Decimal
from typing import Dict

from groupsettle.core.utils import qround

CURRENCY_SYMBOLS: Dict[str, str] = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "JPY": "¥",
    "AUD": "A$",
    "CAD": "C$",
    "CHF": "Fr",
    "CNY": "¥",
    "INR": "₹",
    "SGD": "S$",
    "HKD": "HK$",
    "NZD": "NZ$",
    "MYR": "RM",
    "THB": "฿",
}


def currency_symbol(code: str) -> str:
    return CURRENCY_SYMBOLS.get(code.upper(), code.upper())


def format_currency(amount: Decimal, code: str) -> str:
    """Render an amount with its symbol and two decimals, e.g. ``$1,234.50``."""
    rounded = qround(Decimal(amount))
    sign = "-" if rounded < 0 else ""
    return f"{sign}{currency_symbol(code)}{abs(rounded):,.2f}"
