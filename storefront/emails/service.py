"""
Email de confirmation de commande: rendu (Jinja2, texte + HTML) puis envoi via Resend.
"""
import logging
from typing import Any, Dict, Optional, Tuple

from jinja2 import Environment, PackageLoader, StrictUndefined, select_autoescape

from storefront.config import Settings
from storefront.errors import UpstreamError
from storefront.infra import email_client
from storefront.receipts.formatting import format_money

logger = logging.getLogger(__name__)

_env = Environment(
    loader=PackageLoader("storefront", "emails/templates"),
    autoescape=select_autoescape(enabled_extensions=("html",), default_for_string=False),
    undefined=StrictUndefined,
    trim_blocks=True,
    lstrip_blocks=True,
)
_env.filters["money"] = format_money


def address_lines(address: Optional[Dict[str, Any]]) -> list:
    """Bloc adresse en lignes non vides (nom, rues, ville + code postal, pays)."""
    if not address:
        return []
    city_line = " ".join(p for p in (address.get("city"), address.get("postalCode")) if p)
    parts = [
        address.get("name"),
        address.get("line1"),
        address.get("line2"),
        city_line,
        address.get("state"),
        address.get("country"),
    ]
    return [p for p in parts if p]


def email_subject(receipt: Dict[str, Any]) -> str:
    return f"Thanks for your order #{receipt['orderRef']}"


def render_receipt_email(receipt: Dict[str, Any]) -> Tuple[str, str, str]:
    """Retourne (subject, html, text) pour un reçu construit par receipts.build_receipt."""
    context = {
        "receipt": receipt,
        "currency": receipt.get("currency"),
        "address": address_lines(receipt.get("shippingAddress")),
    }
    html = _env.get_template("receipt.html").render(**context)
    text = _env.get_template("receipt.txt").render(**context)
    return email_subject(receipt), html, text


async def send_receipt_email(settings: Settings, receipt: Dict[str, Any]) -> Dict[str, Any]:
    """
    Envoie UN email au client (copie interne en BCC).
    Soulève UpstreamError si aucun email client n'est connu ou si l'API échoue;
    l'appelant (webhook) décide de ne pas propager.
    """
    to = receipt.get("customerEmail")
    if not to:
        raise UpstreamError(f"Pas d'email client pour la commande {receipt.get('orderRef')}")
    subject, html, text = render_receipt_email(receipt)
    result = await email_client.send_email(
        settings,
        to=to,
        subject=subject,
        html=html,
        text=text,
        bcc=[settings.email_bcc] if settings.email_bcc else None,
        reply_to=settings.email_reply_to or None,
    )
    logger.info("emails.receipt envoyé order_ref=%s id=%s", receipt.get("orderRef"), result.get("id"))
    return result
