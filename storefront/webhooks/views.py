from fastapi import APIRouter, Request, Depends
from fastapi.responses import PlainTextResponse

from storefront.config import Settings
from storefront.utils.dependencies import get_settings
from . import service as webhooks_service

router = APIRouter(tags=["Stripe webhook"])


# module storefront.webhooks.views
@router.post("/stripe-webhook", include_in_schema=False)
async def stripe_webhook(request: Request, settings: Settings = Depends(get_settings)):
    """
    Webhook Stripe: consomme checkout.session.completed pour envoyer l'email de confirmation.
    - Signature: vérifiée sur le corps BRUT (request.body()) avant tout parsing JSON
    - Réponses: 200 "ok" pour tout événement vérifié, même si l'email échoue
    - Erreurs: 400 (texte) si signature absente/invalide
    """
    payload = await request.body()
    sig_header = request.headers.get("stripe-signature")
    await webhooks_service.process_event(settings, payload, sig_header)
    return PlainTextResponse("ok")
