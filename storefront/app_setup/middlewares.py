"""
Middlewares transverses de l'application.
- register_cors_middleware: CORS restreint à une liste d'origines, préflight OPTIONS -> 204.
- register_security_headers_middleware: en-têtes de sécurité de base sur toutes les réponses.
Notes:
- Le préflight est traité avant le routage: OPTIONS répond 204 sur toutes les routes.
- Une origine hors liste reçoit la première origine autorisée (le navigateur bloquera).
"""
from typing import Dict, Optional, Sequence

from fastapi import FastAPI, Request
from fastapi.responses import Response

ALLOWED_METHODS = "GET, POST, OPTIONS"
DEFAULT_ALLOWED_HEADERS = "Content-Type"


def cors_headers(origin: Optional[str], allowed_origins: Sequence[str], request_headers: Optional[str] = None) -> Dict[str, str]:
    """
    En-têtes CORS pour une origine donnée.
    - Access-Control-Allow-Origin: l'origine si autorisée, sinon la première de la liste
    - Access-Control-Allow-Headers: reprend Access-Control-Request-Headers s'il est fourni
    """
    allow_origin = origin if origin and origin in allowed_origins else (allowed_origins[0] if allowed_origins else "")
    headers = {
        "Access-Control-Allow-Origin": allow_origin,
        "Access-Control-Allow-Methods": ALLOWED_METHODS,
        "Access-Control-Allow-Headers": request_headers or DEFAULT_ALLOWED_HEADERS,
        "Vary": "Origin",
    }
    return headers


def register_cors_middleware(app: FastAPI, allowed_origins: Sequence[str]) -> None:
    """
    Préflight: OPTIONS -> 204 avec les en-têtes CORS, sans passer par les routes.
    Autres méthodes: en-têtes CORS ajoutés à la réponse (y compris erreurs 4xx/5xx).
    """
    origins = tuple(allowed_origins)

    @app.middleware("http")
    async def cors(request: Request, call_next):
        origin = request.headers.get("origin")
        if request.method.upper() == "OPTIONS":
            headers = cors_headers(origin, origins, request.headers.get("access-control-request-headers"))
            return Response(status_code=204, headers=headers)

        response = await call_next(request)
        for key, value in cors_headers(origin, origins).items():
            if key == "Vary" and "Vary" in response.headers:
                continue
            response.headers[key] = value
        return response


def register_security_headers_middleware(app: FastAPI) -> None:
    """
    En-têtes: X-Content-Type-Options, Referrer-Policy, X-Frame-Options.
    Réponses JSON/texte uniquement: pas de CSP (aucune page HTML servie ici).
    """
    @app.middleware("http")
    async def security_headers(request: Request, call_next):
        response = await call_next(request)
        if "X-Content-Type-Options" not in response.headers:
            response.headers["X-Content-Type-Options"] = "nosniff"
        if "Referrer-Policy" not in response.headers:
            response.headers["Referrer-Policy"] = "no-referrer"
        if "X-Frame-Options" not in response.headers:
            response.headers["X-Frame-Options"] = "DENY"
        return response
