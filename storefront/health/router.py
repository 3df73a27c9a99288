from fastapi import APIRouter, Depends, Request

from storefront.config import Settings
from storefront.utils.dependencies import get_settings
from storefront.utils.rate_limit import rate_limit_health_info

router = APIRouter(prefix="/health", tags=["Health"])


@router.get("")
def health_root():
    return {"ok": True}


@router.get("/config")
def health_config(settings: Settings = Depends(get_settings)):
    # Indique seulement si les secrets sont présents, jamais leur valeur
    return {
        "stripe": bool(settings.stripe_secret_key),
        "webhook": bool(settings.stripe_webhook_secret),
        "email": bool(settings.resend_api_key),
        "catalog_size": len(settings.catalog),
        "shipping_rates": sum(1 for v in settings.shipping_rates.model_dump().values() if v),
    }


@router.get("/rate-limit")
def health_rate_limit(request: Request):
    return rate_limit_health_info(request)
