"""
Gestionnaires d'exceptions.
- StorefrontError (ValidationError, UnknownProductError, SignatureError, UpstreamError)
  -> {"error": message} avec le code porté par l'exception, ou texte brut (signature).
- HTTPException (405, 429...) -> {"error": detail} pour garder un format unique côté front.
"""
import logging

from fastapi import FastAPI, Request
from starlette.exceptions import HTTPException
from fastapi.responses import JSONResponse, PlainTextResponse

from storefront.errors import StorefrontError, UnknownProductError

logger = logging.getLogger(__name__)


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(StorefrontError)
    async def storefront_error(request: Request, exc: StorefrontError):
        if isinstance(exc, UnknownProductError):
            # Remonté comme erreur serveur: le front ne devrait jamais envoyer un id hors catalogue
            logger.error("checkout produit inconnu id=%s path=%s", exc.product_id, request.url.path)
        elif exc.status_code >= 500:
            logger.error("%s path=%s: %s", type(exc).__name__, request.url.path, exc.message)
        else:
            logger.info("%s path=%s: %s", type(exc).__name__, request.url.path, exc.message)

        if exc.plain_text:
            return PlainTextResponse(exc.message, status_code=exc.status_code)
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(HTTPException)
    async def http_error(request: Request, exc: HTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
            headers=getattr(exc, "headers", None),
        )
