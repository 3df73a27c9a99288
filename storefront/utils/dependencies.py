from fastapi import Request

from storefront.config import Settings, load_settings


def get_settings(request: Request) -> Settings:
    """
    Settings résolus au démarrage (app.state.settings, posé par create_app).
    Fallback: lecture de l'environnement si l'app a été construite sans.
    """
    settings = getattr(request.app.state, "settings", None)
    if settings is None:
        settings = load_settings()
        request.app.state.settings = settings
    return settings
