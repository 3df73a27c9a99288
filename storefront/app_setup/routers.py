"""
Registre central des routers.
- Handlers storefront: create-checkout, retrieve-session, stripe-webhook
  montés à la racine et sous /.netlify/functions (chemins du front existant)
- Health: health_router
"""
from fastapi import FastAPI
from storefront.checkout import views as checkout_views
from storefront.receipts import views as receipts_views
from storefront.webhooks import views as webhooks_views
from storefront.health.router import router as health_router

NETLIFY_FUNCTIONS_PREFIX = "/.netlify/functions"


def register_routers(app: FastAPI) -> None:
    """
    Agrège tous les routers de l'application.
    - L'alias Netlify permet de servir le front statique sans modifier ses appels fetch().
    """
    for router in (checkout_views.router, receipts_views.router, webhooks_views.router):
        app.include_router(router)
        app.include_router(router, prefix=NETLIFY_FUNCTIONS_PREFIX, include_in_schema=False)
    # Health & monitoring
    app.include_router(health_router)
