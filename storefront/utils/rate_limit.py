from typing import Dict, Any
from fastapi import Request, Response, HTTPException
from fastapi_limiter import FastAPILimiter
import os
import time
import logging

logger = logging.getLogger(__name__)


def _client_key(req: Request) -> str:
    # Pas de session côté storefront: clé = IP (X-Forwarded-For si derrière un proxy/CDN) + chemin
    forwarded = (req.headers.get("x-forwarded-for") or "").split(",")[0].strip()
    ip = forwarded or (req.client.host if req.client else "local")
    return f"ip:{ip}:{req.url.path}"


def optional_rate_limit(times: int, seconds: int):
    """
    Dépendance FastAPI de limitation de débit.
    - LOCAL_RATE_LIMIT_FALLBACK=1: fenêtre glissante en mémoire (dev)
    - sinon fastapi-limiter (Redis) si initialisé par le lifespan
    - limiter désactivé ou indisponible: aucune limite (jamais de 429 par erreur d'infra)
    """
    async def _dep(request: Request, response: Response):
        if os.getenv("LOCAL_RATE_LIMIT_FALLBACK") == "1":
            now = time.time()
            key = _client_key(request)
            store = getattr(request.app.state, "_rl_store", {})
            # Purge des clés dont la fenêtre est expirée
            for stale in [k for k, v in store.items() if not v or now - v[-1] >= seconds]:
                del store[stale]
            hits = [t for t in store.get(key, []) if now - t < seconds]
            if len(hits) >= times:
                raise HTTPException(status_code=429, detail="Too Many Requests")
            hits.append(now)
            store[key] = hits
            request.app.state._rl_store = store
            return

        if getattr(request.app.state, "rate_limit_enabled", None) is not True:
            return

        from fastapi_limiter.depends import RateLimiter

        async def _identifier(req: Request) -> str:
            return _client_key(req)
        limiter = RateLimiter(times=times, seconds=seconds, identifier=_identifier)
        try:
            return await limiter(request, response)
        except HTTPException:
            raise
        except Exception:
            # Redis indisponible en cours de route: on laisse passer
            logger.warning("rate_limit indisponible path=%s", request.url.path, exc_info=True)
            return
    return _dep


def rate_limit_health_info(request: Request) -> Dict[str, Any]:
    enabled = getattr(request.app.state, "rate_limit_enabled", None)
    limiter_ready = getattr(FastAPILimiter, "redis", None) is not None

    return {
        "enabled": (bool(enabled) if enabled is not None else None),
        "ready": limiter_ready,
        "backend": "redis" if limiter_ready else None,
        "local_fallback": os.getenv("LOCAL_RATE_LIMIT_FALLBACK") == "1",
    }
