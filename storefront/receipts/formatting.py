"""
Formatage des montants (unités mineures -> affichage), sans flottants.
"""
from typing import Any, Optional

CURRENCY_SYMBOLS = {"GBP": "£", "EUR": "€", "USD": "$", "AUD": "A$", "CAD": "C$"}


def to_minor(value: Any) -> int:
    """Montant Stripe (int attendu); None/invalide -> 0."""
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def format_money(amount: Any, currency: Optional[str] = "GBP") -> str:
    """
    4999, "gbp" -> "£49.99"; -500 -> "-£5.00"; devise sans symbole connu -> "49.99 CHF".
    """
    minor = to_minor(amount)
    code = (currency or "").upper()
    sign = "-" if minor < 0 else ""
    major, cents = divmod(abs(minor), 100)
    number = f"{major:,}.{cents:02d}"
    symbol = CURRENCY_SYMBOLS.get(code)
    if symbol:
        return f"{sign}{symbol}{number}"
    return f"{sign}{number} {code}".rstrip()
