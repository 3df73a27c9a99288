import logging
import json

from fastapi import APIRouter, Request, Depends
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from storefront.config import Settings
from storefront.errors import ValidationError
from storefront.utils.dependencies import get_settings
from storefront.utils.rate_limit import optional_rate_limit
from . import service as checkout_service

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Checkout"])


# module storefront.checkout.views
@router.post("/create-checkout", dependencies=[Depends(optional_rate_limit(times=10, seconds=60))])
async def create_checkout(request: Request, settings: Settings = Depends(get_settings)):
    """
    Crée une session Checkout Stripe à partir du panier du storefront.
    - Entrée JSON: { "items": [ {"id", "quantity", "size"?, "color"?, "image"?} ], "basePath"?, "hintCountry"? }
    - Prix re-dérivés du catalogue, livraison choisie selon le pays détecté
    - Réponse: { "sessionId", "url", "orderRef" }
    - Erreurs: 400 panier absent/vide, 500 produit inconnu ou échec Stripe
    """
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise ValidationError("Invalid JSON body")

    # SDK Stripe synchrone: exécuté hors de la boucle d'événements
    result = await run_in_threadpool(checkout_service.create_checkout_session, settings, body, request.headers)
    return JSONResponse(result)
