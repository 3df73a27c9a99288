"""
Client HTTP vers l'API Resend (envoi d'emails transactionnels).
"""
import logging
from typing import Any, Dict, List, Optional

import httpx

from storefront.config import Settings
from storefront.errors import UpstreamError

logger = logging.getLogger(__name__)

EMAIL_TIMEOUT = httpx.Timeout(5.0, read=10.0)


async def send_email(
    settings: Settings,
    *,
    to: str,
    subject: str,
    html: str,
    text: str,
    bcc: Optional[List[str]] = None,
    reply_to: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Envoie un email via POST /emails (Bearer RESEND_API_KEY).
    Retour: JSON Resend (ex: {"id": "..."}).
    Soulève UpstreamError si la clé manque, si l'API répond 4xx/5xx ou en cas d'erreur réseau.
    """
    if not settings.resend_api_key:
        raise UpstreamError("RESEND_API_KEY manquant: email non envoyé")

    payload: Dict[str, Any] = {
        "from": settings.email_from,
        "to": [to],
        "subject": subject,
        "html": html,
        "text": text,
    }
    if bcc:
        payload["bcc"] = bcc
    if reply_to:
        payload["reply_to"] = reply_to

    headers = {
        "Authorization": f"Bearer {settings.resend_api_key}",
        "Content-Type": "application/json",
    }
    try:
        async with httpx.AsyncClient(timeout=EMAIL_TIMEOUT) as client:
            response = await client.post(settings.resend_api_url, json=payload, headers=headers)
            response.raise_for_status()
            return response.json() if response.content else {}
    except httpx.HTTPStatusError as e:
        logger.error("email.send rejeté status=%s body=%s", e.response.status_code, e.response.text[:500])
        raise UpstreamError(f"Email API error ({e.response.status_code})")
    except httpx.HTTPError as e:
        raise UpstreamError(f"Email API unreachable: {e}")
