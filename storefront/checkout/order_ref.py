"""
Référence de commande: génération à la création de session, puis résolution
depuis une session Stripe (retrieve-session et webhook utilisent la même chaîne).
"""
import secrets
import string
from datetime import datetime, timezone
from typing import Any, Dict, Optional

_ALPHABET = string.ascii_uppercase + string.digits
METADATA_KEY = "order_number"


def generate_order_ref(prefix: str, now: Optional[datetime] = None) -> str:
    """Ex: CLR-20261019-7KQ2XD (date UTC + 6 caractères aléatoires)."""
    now = now or datetime.now(timezone.utc)
    suffix = "".join(secrets.choice(_ALPHABET) for _ in range(6))
    return f"{prefix}-{now:%Y%m%d}-{suffix}"


def first_non_empty(*candidates: Any) -> Optional[str]:
    """Premier candidat non vide (après strip), sinon None."""
    for candidate in candidates:
        if candidate is None:
            continue
        value = str(candidate).strip()
        if value:
            return value
    return None


def fallback_order_ref(session_id: str, prefix: str) -> str:
    return f"{prefix}-{(session_id or '')[-8:].upper()}"


def resolve_order_ref(session: Dict[str, Any], prefix: str) -> str:
    """
    client_reference_id -> metadata.order_number -> <prefix>-<8 derniers caractères de l'id>.
    """
    metadata = session.get("metadata") or {}
    return first_non_empty(
        session.get("client_reference_id"),
        metadata.get(METADATA_KEY),
    ) or fallback_order_ref(session.get("id") or "", prefix)


def resolve_customer_email(session: Dict[str, Any]) -> Optional[str]:
    details = session.get("customer_details") or {}
    return first_non_empty(details.get("email"), session.get("customer_email"))
