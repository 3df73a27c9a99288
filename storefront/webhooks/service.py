"""
Cas d'usage 'webhook Stripe': vérification de signature puis traitement
de checkout.session.completed (reçu + email de confirmation).
"""
import logging
from typing import Any, Dict, Optional

from starlette.concurrency import run_in_threadpool

from storefront.config import Settings
from storefront.emails import service as emails_service
from storefront.infra import stripe_client
from storefront.receipts.service import build_receipt

logger = logging.getLogger(__name__)

COMPLETED_EVENT = "checkout.session.completed"


def verify_event(settings: Settings, payload: bytes, sig_header: Optional[str]) -> Dict[str, Any]:
    """
    Vérifie la signature sur le corps brut et retourne l'événement.
    Soulève SignatureError: aucun traitement d'un événement non vérifié.
    """
    return stripe_client.construct_event(settings, payload, sig_header)


def load_full_session(settings: Settings, slim_session: Dict[str, Any]) -> Dict[str, Any]:
    """
    L'objet de l'événement n'inclut pas les line items: on recharge la session.
    En cas d'échec Stripe, on retombe sur l'objet allégé (reçu sans lignes).
    """
    session_id = slim_session.get("id")
    if not session_id:
        return slim_session
    try:
        return stripe_client.get_session(settings, session_id)
    except Exception:
        logger.exception("webhook.get_session échec session_id=%s: reçu sans line items", session_id)
        return slim_session


async def handle_completed_session(settings: Settings, slim_session: Dict[str, Any]) -> bool:
    """
    Construit le reçu et envoie l'email de confirmation.
    Retourne True si l'email est parti. Ne lève jamais: toute erreur est journalisée,
    sinon Stripe relivrerait l'événement indéfiniment.
    """
    try:
        session = await run_in_threadpool(load_full_session, settings, slim_session)
        receipt = build_receipt(session, settings)
    except Exception:
        logger.exception("webhook.receipt échec session_id=%s", slim_session.get("id"))
        return False

    try:
        await emails_service.send_receipt_email(settings, receipt)
    except Exception:
        logger.exception("webhook.email échec order_ref=%s", receipt.get("orderRef"))
        return False
    return True


async def process_event(settings: Settings, payload: bytes, sig_header: Optional[str]) -> Dict[str, Any]:
    """
    Point d'entrée du webhook.
    - SignatureError propagée (400) si la vérification échoue
    - événements autres que checkout.session.completed: ignorés
    Retour: {"type", "handled", "email_sent"} (pour les logs et les tests)
    """
    event = verify_event(settings, payload, sig_header)
    event_type = event.get("type")
    if event_type != COMPLETED_EVENT:
        logger.info("webhook.ignored type=%s id=%s", event_type, event.get("id"))
        return {"type": event_type, "handled": False, "email_sent": False}

    data = event.get("data")
    slim_session = data.get("object") if isinstance(data, dict) else None
    if not isinstance(slim_session, dict):
        logger.warning("webhook.completed objet de session invalide event=%s", event.get("id"))
        slim_session = {}
    email_sent = await handle_completed_session(settings, slim_session)
    logger.info(
        "webhook.completed event=%s session_id=%s email_sent=%s",
        event.get("id"), slim_session.get("id"), email_sent,
    )
    return {"type": event_type, "handled": True, "email_sent": email_sent}
