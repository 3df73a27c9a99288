"""
Module 'receipts': reçu dérivé d'une session Stripe (page de succès + email).
"""

from .formatting import format_money, to_minor
from .service import build_receipt, retrieve_receipt, map_line_item, shipping_summary, shipping_address

__all__ = [
    "format_money",
    "to_minor",
    "build_receipt",
    "retrieve_receipt",
    "map_line_item",
    "shipping_summary",
    "shipping_address",
]
