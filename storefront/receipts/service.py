"""
Reçu de commande: vue en lecture seule dérivée d'une session Checkout Stripe.
Utilisé par GET /retrieve-session (page de succès) et par le webhook (email).
"""
import logging
from typing import Any, Dict, List, Optional

from storefront.checkout.order_ref import resolve_customer_email, resolve_order_ref
from storefront.config import Settings
from storefront.errors import UpstreamError, ValidationError
from storefront.infra import stripe_client

from .formatting import to_minor

logger = logging.getLogger(__name__)

RETRIEVE_FAILED_MESSAGE = "Failed to retrieve session"


def _product(line_item: Dict[str, Any]) -> Dict[str, Any]:
    price = line_item.get("price") or {}
    product = price.get("product")
    # product n'est un objet que si la session a été récupérée avec expand
    return product if isinstance(product, dict) else {}


def map_line_item(line_item: Dict[str, Any], default_currency: str) -> Dict[str, Any]:
    """Ligne Stripe -> {description, quantity, unitAmount, amountTotal, currency, image?}."""
    price = line_item.get("price") or {}
    product = _product(line_item)
    item: Dict[str, Any] = {
        "description": line_item.get("description") or product.get("name") or "Item",
        "quantity": to_minor(line_item.get("quantity")) or 1,
        "unitAmount": to_minor(price.get("unit_amount")),
        "amountTotal": to_minor(line_item.get("amount_total")),
        "currency": (line_item.get("currency") or price.get("currency") or default_currency).upper(),
    }
    images = product.get("images") or []
    if images:
        item["image"] = images[0]
    return item


def shipping_summary(session: Dict[str, Any]) -> Dict[str, Any]:
    """{label, amount}: libellé du tarif -> id du tarif -> Shipping / Free Shipping."""
    cost = session.get("shipping_cost") or {}
    amount = to_minor(cost.get("amount_total"))
    rate = cost.get("shipping_rate")
    rate = rate if isinstance(rate, dict) else {"id": rate} if rate else {}
    label = rate.get("display_name") or rate.get("id") or ("Shipping" if amount > 0 else "Free Shipping")
    return {"label": label, "amount": amount}


def shipping_address(session: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """
    Adresse de livraison, selon la version d'API Stripe:
    collected_information.shipping_details -> shipping_details -> shipping.
    """
    collected = session.get("collected_information") or {}
    details = collected.get("shipping_details") or session.get("shipping_details") or session.get("shipping")
    if not details or not details.get("address"):
        return None
    address = details["address"]
    return {
        "name": details.get("name"),
        "line1": address.get("line1"),
        "line2": address.get("line2"),
        "city": address.get("city"),
        "state": address.get("state"),
        "postalCode": address.get("postal_code"),
        "country": address.get("country"),
    }


def build_receipt(session: Dict[str, Any], settings: Settings) -> Dict[str, Any]:
    """
    Compose le payload de reçu. Ne lève jamais sur un champ optionnel absent:
    montants -> 0, libellés/adresse/email -> None.
    """
    currency = (session.get("currency") or settings.currency).upper()
    totals = session.get("total_details") or {}
    customer = session.get("customer_details") or {}
    line_items = (session.get("line_items") or {}).get("data") or []
    items: List[Dict[str, Any]] = [map_line_item(li, currency) for li in line_items]

    return {
        "sessionId": session.get("id"),
        "orderRef": resolve_order_ref(session, settings.order_prefix),
        "status": session.get("status"),
        "paymentStatus": session.get("payment_status"),
        "currency": currency,
        "customerEmail": resolve_customer_email(session),
        "customerName": customer.get("name"),
        "shippingAddress": shipping_address(session),
        "items": items,
        "subtotal": to_minor(session.get("amount_subtotal")),
        "shipping": shipping_summary(session),
        "tax": to_minor(totals.get("amount_tax")),
        "discount": to_minor(totals.get("amount_discount")),
        "total": to_minor(session.get("amount_total")),
    }


def retrieve_receipt(settings: Settings, session_id: Optional[str]) -> Dict[str, Any]:
    """
    Récupère la session (avec expand) et retourne le reçu.
    - ValidationError si session_id absent
    - UpstreamError si Stripe échoue (pas de fallback ni de cache)
    """
    session_id = (session_id or "").strip()
    if not session_id:
        raise ValidationError("Missing session_id")
    try:
        session = stripe_client.get_session(settings, session_id)
    except Exception:
        logger.exception("receipts.retrieve échec session_id=%s", session_id)
        raise UpstreamError(RETRIEVE_FAILED_MESSAGE)
    return build_receipt(session, settings)
