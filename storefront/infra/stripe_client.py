"""
Adaptateur Stripe: centralise les appels au SDK.
La clé API est passée à chaque appel (api_key=...) plutôt que posée
globalement sur le module stripe: aucun état partagé entre requêtes.
"""
import json
import logging
from typing import Any, Dict, List, Optional

import stripe

from storefront.config import Settings
from storefront.errors import SignatureError, UpstreamError

logger = logging.getLogger(__name__)

# module storefront.infra.stripe_client
SESSION_EXPAND: List[str] = [
    "line_items.data.price.product",
    "shipping_cost.shipping_rate",
    "total_details.breakdown",
    "payment_intent",
]
# Écart maximal (secondes) entre l'horodatage signé et maintenant (anti-rejeu)
WEBHOOK_TOLERANCE = 300


def _as_dict(obj: Any) -> Dict[str, Any]:
    # stripe retourne un StripeObject; on le convertit récursivement en dict
    if obj is None:
        return {}
    if hasattr(obj, "to_dict"):
        return obj.to_dict(recursive=True)
    return dict(obj)


def require_stripe(settings: Settings) -> str:
    """
    Retourne la clé secrète Stripe.
    - Soulève UpstreamError si STRIPE_SECRET_KEY n'est pas configurée.
    """
    if not settings.stripe_secret_key:
        raise UpstreamError("Stripe n'est pas configuré (STRIPE_SECRET_KEY manquant)")
    return settings.stripe_secret_key


def create_session(settings: Settings, **params: Any) -> Dict[str, Any]:
    """
    Crée une session Stripe Checkout.
    - params: arguments de stripe.checkout.Session.create (line_items, mode, urls, metadata...)
    Retour: dict session (ex: {"id": "cs_test_...", "url": "https://..."})
    """
    api_key = require_stripe(settings)
    session = stripe.checkout.Session.create(api_key=api_key, **params)
    return _as_dict(session)


def get_session(settings: Settings, session_id: str, expand: Optional[List[str]] = None) -> Dict[str, Any]:
    """
    Récupère une session Checkout par son identifiant.
    - expand: champs à développer (par défaut SESSION_EXPAND: line items, produit, livraison, taxes)
    """
    api_key = require_stripe(settings)
    session = stripe.checkout.Session.retrieve(
        session_id,
        api_key=api_key,
        expand=SESSION_EXPAND if expand is None else expand,
    )
    return _as_dict(session)


def construct_event(settings: Settings, payload: bytes, sig_header: Optional[str]) -> Dict[str, Any]:
    """
    Valide un événement signé (webhook) et le retourne en dict.
    - payload: corps BRUT (bytes) tel que reçu; un corps re-sérialisé casse la signature
    - Signature vérifiée (WebhookSignature.verify_header, tolérance 300 s) AVANT json.loads
    - Soulève SignatureError (fail closed) si secret/en-tête absent, signature invalide
      ou payload non décodable
    """
    secret = settings.stripe_webhook_secret
    if not secret:
        logger.error("stripe.webhook secret manquant: événement refusé")
        raise SignatureError("Webhook Error: signing secret not configured")
    if not sig_header:
        raise SignatureError("Webhook Error: missing stripe-signature header")
    try:
        body = payload.decode("utf-8")
        stripe.WebhookSignature.verify_header(body, sig_header, secret, WEBHOOK_TOLERANCE)
    except stripe.SignatureVerificationError as e:
        raise SignatureError(f"Webhook Error: {e}")
    except UnicodeDecodeError as e:
        raise SignatureError(f"Webhook Error: {e}")

    try:
        event = json.loads(body)
    except ValueError as e:
        raise SignatureError(f"Webhook Error: invalid payload ({e})")
    if not isinstance(event, dict):
        raise SignatureError("Webhook Error: invalid payload")
    return event
