"""
Factory d'application pour les entrypoints (storefront.app, storefront.asgi) et les tests.
Ordonne les étapes d'initialisation de manière lisible et testable.
"""
from typing import Optional

from fastapi import FastAPI

from storefront import __version__
from storefront.config import Settings, load_settings
from .lifespan import lifespan
from .middlewares import register_cors_middleware, register_security_headers_middleware
from .exceptions import register_exception_handlers
from .routers import register_routers


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Construit l'app FastAPI avec le lifespan et enregistre:
      - la configuration (app.state.settings), résolue une seule fois
      - middlewares en-têtes de sécurité puis CORS (ajouté en dernier: s'exécute en premier)
      - gestionnaires d'exceptions et routers
    Paramètre:
      settings: configuration explicite (tests); sinon lecture de l'environnement.
    """
    settings = settings or load_settings()
    app = FastAPI(title="Storefront Checkout API", version=__version__, lifespan=lifespan)
    app.state.settings = settings
    register_security_headers_middleware(app)
    register_cors_middleware(app, settings.cors_origins)
    register_exception_handlers(app)
    register_routers(app)
    return app
