"""
Cas d'usage 'checkout': orchestre panier, livraison, référence de commande et Stripe.
"""
import logging
from typing import Any, Dict, Mapping, Optional

from storefront.config import Settings
from storefront.errors import UpstreamError
from storefront.infra import stripe_client

from . import cart as cart_logic
from . import shipping
from .order_ref import generate_order_ref

logger = logging.getLogger(__name__)

CREATE_FAILED_MESSAGE = "Failed to create Stripe Checkout session."


def build_session_params(
    settings: Settings,
    body: Any,
    headers: Mapping[str, str],
    order_ref: str,
) -> Dict[str, Any]:
    """
    Prépare les paramètres de stripe.checkout.Session.create (sans appel réseau).
    - Soulève ValidationError / UnknownProductError sur panier invalide.
    """
    items = cart_logic.validate_items(body)
    base_url = cart_logic.resolve_base_url(settings.site_url, headers.get("origin"), body.get("basePath"))
    line_items = cart_logic.to_line_items(items, settings.catalog, currency=settings.currency, base_url=base_url)
    subtotal = cart_logic.compute_subtotal(line_items)

    country = shipping.detect_country(headers, body.get("hintCountry"))
    rate_ids = shipping.select_shipping_rates(country, subtotal, settings)
    logger.info(
        "checkout.prepare order_ref=%s lines=%s subtotal=%s country=%s rates=%s",
        order_ref, len(line_items), subtotal, country, len(rate_ids),
    )

    params: Dict[str, Any] = {
        "mode": "payment",
        "line_items": line_items,
        "client_reference_id": order_ref,
        "metadata": cart_logic.make_metadata(order_ref, line_items),
        "billing_address_collection": "required",
        "shipping_address_collection": {"allowed_countries": settings.allowed_shipping_countries},
        "automatic_tax": {"enabled": True},
        "success_url": settings.success_url(),
        "cancel_url": settings.cancel_url(),
    }
    if rate_ids:
        params["shipping_options"] = shipping.to_shipping_options(rate_ids)
    return params


def create_checkout_session(
    settings: Settings,
    body: Any,
    headers: Mapping[str, str],
    order_ref: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Crée la session Stripe et retourne {sessionId, url, orderRef}.
    Pas de retry ni de clé d'idempotence: deux appels créent deux sessions.
    """
    order_ref = order_ref or generate_order_ref(settings.order_prefix)
    params = build_session_params(settings, body, headers, order_ref)
    try:
        session = stripe_client.create_session(settings, **params)
    except Exception:
        logger.exception("checkout.create_session erreur Stripe order_ref=%s", order_ref)
        raise UpstreamError(CREATE_FAILED_MESSAGE)

    logger.info("checkout.session créée id=%s order_ref=%s", session.get("id"), order_ref)
    return {"sessionId": session.get("id"), "url": session.get("url"), "orderRef": order_ref}
