"""
Module 'checkout' (feature-first): point d'entrée public.
Réunit logique panier, politique de livraison, référence de commande et création de session Stripe.
"""

from .cart import (
    validate_items,
    parse_quantity,
    display_name,
    resolve_base_url,
    resolve_image_url,
    to_line_items,
    compute_subtotal,
    make_metadata,
)
from .shipping import detect_country, select_shipping_rates
from .order_ref import generate_order_ref, resolve_order_ref, resolve_customer_email, first_non_empty
from .service import build_session_params, create_checkout_session

__all__ = [
    # cart
    "validate_items",
    "parse_quantity",
    "display_name",
    "resolve_base_url",
    "resolve_image_url",
    "to_line_items",
    "compute_subtotal",
    "make_metadata",
    # shipping
    "detect_country",
    "select_shipping_rates",
    # order ref
    "generate_order_ref",
    "resolve_order_ref",
    "resolve_customer_email",
    "first_non_empty",
    # services
    "build_session_params",
    "create_checkout_session",
]
