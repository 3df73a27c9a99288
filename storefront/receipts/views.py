from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from storefront.config import Settings
from storefront.utils.dependencies import get_settings
from . import service as receipts_service

router = APIRouter(tags=["Receipts"])


# module storefront.receipts.views
@router.get("/retrieve-session")
def retrieve_session(session_id: Optional[str] = None, settings: Settings = Depends(get_settings)):
    """
    Vue allégée d'une session Checkout pour la page de succès.
    - Paramètre: ?session_id=cs_...
    - Réponse: orderRef, items, subtotal, shipping {label, amount}, tax, discount, total...
    - Erreurs: 400 si session_id manquant, 500 si Stripe échoue
    """
    return JSONResponse(receipts_service.retrieve_receipt(settings, session_id))
