# storefront.config
from pathlib import Path
import json
import os
from typing import Dict, List, Mapping, Optional, Tuple

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field

from storefront.catalog import CatalogEntry, DEFAULT_CATALOG

# Calculer le chemin du projet puis charger .env de manière explicite
BASE_DIR = Path(__file__).resolve().parent.parent
ENV_PATH = BASE_DIR / ".env"
load_dotenv(dotenv_path=ENV_PATH, override=False)

"""
Configuration centrale de l'API storefront.

- Charge le fichier .env à la racine du projet (BASE_DIR/.env)
- Normalise les secrets (Stripe, Resend), l'URL du site, les tarifs de livraison
- Résout le tout une seule fois dans un objet Settings immuable,
  injecté dans les handlers via app.state (voir app_setup.factory)
"""

DEFAULT_CORS_ORIGINS = "http://localhost:63342,https://clarity-shop.netlify.app"

# Pays desservis par le tarif "régional" (UE/EEE + voisins proches)
REGIONAL_COUNTRIES: Tuple[str, ...] = (
    "IE", "FR", "DE", "NL", "BE", "LU", "ES", "PT", "IT", "AT", "DK", "SE",
    "FI", "PL", "CZ", "SK", "SI", "HR", "HU", "RO", "BG", "GR", "CY", "MT",
    "EE", "LV", "LT", "NO", "CH", "IS",
)

# Pays hors zone régionale acceptés à l'international
INTERNATIONAL_COUNTRIES: Tuple[str, ...] = ("US", "CA", "AU", "NZ", "JP", "SG", "AE")


def _clean_env(v: Optional[str]) -> str:
    """
    Nettoie une valeur d'environnement:
    - supprime les espaces et guillemets (simples, doubles) et backticks
    - retourne toujours une chaîne (jamais None)
    """
    return (v or "").strip().strip("'").strip('"').strip("`")


def _int_env(name: str, default: int) -> int:
    raw = _clean_env(os.getenv(name))
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} doit être un entier (reçu: {raw!r})")


def _list_env(name: str, default: str) -> List[str]:
    return [v.strip() for v in _clean_env(os.getenv(name) or default).split(",") if v.strip()]


class ShippingRates(BaseModel):
    """Identifiants Stripe des tarifs de livraison (shr_...). Vide = tarif non proposé."""
    model_config = ConfigDict(frozen=True)

    standard: str = ""
    express: str = ""
    free: str = ""
    regional: str = ""
    international: str = ""


class Settings(BaseModel):
    """
    Configuration validée, résolue au démarrage puis passée explicitement
    aux handlers. Les montants sont en unités mineures (pence).
    """
    model_config = ConfigDict(frozen=True)

    stripe_secret_key: str = ""
    stripe_webhook_secret: str = ""
    resend_api_key: str = ""
    resend_api_url: str = "https://api.resend.com/emails"

    email_from: str = "Clarity <sales@clarity-clothing.com>"
    email_bcc: str = "sales@clarity-clothing.com"
    email_reply_to: str = "sales@clarity-clothing.com"

    site_url: str = "http://localhost:8888"
    currency: str = "gbp"
    home_country: str = "GB"
    regional_countries: Tuple[str, ...] = REGIONAL_COUNTRIES
    international_countries: Tuple[str, ...] = INTERNATIONAL_COUNTRIES
    free_shipping_threshold: int = 7500
    shipping_rates: ShippingRates = ShippingRates()

    order_prefix: str = "CLR"
    checkout_success_path: str = "/success.html"
    checkout_cancel_path: str = "/cart.html"
    cors_origins: Tuple[str, ...] = tuple(DEFAULT_CORS_ORIGINS.split(","))

    # mappingproxy non copiable: pas de valeur par défaut directe
    catalog: Mapping[str, CatalogEntry] = Field(default_factory=lambda: DEFAULT_CATALOG)

    @property
    def allowed_shipping_countries(self) -> List[str]:
        """Liste passée à Stripe (shipping_address_collection), pays d'origine en tête."""
        countries = [self.home_country]
        for code in self.regional_countries + self.international_countries:
            if code not in countries:
                countries.append(code)
        return countries

    def success_url(self) -> str:
        sep = "&" if "?" in self.checkout_success_path else "?"
        return f"{self.site_url}{self.checkout_success_path}{sep}session_id={{CHECKOUT_SESSION_ID}}"

    def cancel_url(self) -> str:
        return f"{self.site_url}{self.checkout_cancel_path}"


def load_catalog(path: str) -> Dict[str, CatalogEntry]:
    """
    Charge un catalogue JSON: [{"id": "1", "name": "...", "unit_amount": 4999}, ...]
    Soulève ValueError si le fichier est invalide (mieux vaut échouer au démarrage).
    """
    with open(path, encoding="utf-8") as fh:
        rows = json.load(fh)
    if not isinstance(rows, list) or not rows:
        raise ValueError(f"Catalogue vide ou invalide: {path}")
    entries = [CatalogEntry.model_validate(r) for r in rows]
    return {e.id: e for e in entries}


def load_settings() -> Settings:
    """
    Lit l'environnement une seule fois et construit Settings.
    - SITE_URL retombe sur URL puis DEPLOY_PRIME_URL (variables Netlify)
    - les tarifs de livraison non renseignés restent vides (non proposés)
    """
    site_url = _clean_env(
        os.getenv("SITE_URL") or os.getenv("URL") or os.getenv("DEPLOY_PRIME_URL") or "http://localhost:8888"
    ).rstrip("/")

    catalog_path = _clean_env(os.getenv("CATALOG_PATH"))
    catalog = load_catalog(catalog_path) if catalog_path else DEFAULT_CATALOG

    return Settings(
        stripe_secret_key=_clean_env(os.getenv("STRIPE_SECRET_KEY")),
        stripe_webhook_secret=_clean_env(os.getenv("STRIPE_WEBHOOK_SECRET")),
        resend_api_key=_clean_env(os.getenv("RESEND_API_KEY")),
        email_from=_clean_env(os.getenv("EMAIL_FROM")) or Settings.model_fields["email_from"].default,
        email_bcc=_clean_env(os.getenv("EMAIL_BCC")) or Settings.model_fields["email_bcc"].default,
        email_reply_to=_clean_env(os.getenv("EMAIL_REPLY_TO")) or Settings.model_fields["email_reply_to"].default,
        site_url=site_url,
        currency=(_clean_env(os.getenv("CURRENCY")) or "gbp").lower(),
        home_country=(_clean_env(os.getenv("HOME_COUNTRY")) or "GB").upper(),
        free_shipping_threshold=_int_env("FREE_SHIPPING_THRESHOLD", 7500),
        shipping_rates=ShippingRates(
            standard=_clean_env(os.getenv("SHIPPING_RATE_STANDARD")),
            express=_clean_env(os.getenv("SHIPPING_RATE_EXPRESS")),
            free=_clean_env(os.getenv("SHIPPING_RATE_FREE")),
            regional=_clean_env(os.getenv("SHIPPING_RATE_REGIONAL")),
            international=_clean_env(os.getenv("SHIPPING_RATE_INTERNATIONAL")),
        ),
        order_prefix=_clean_env(os.getenv("ORDER_PREFIX")) or "CLR",
        checkout_success_path=os.getenv("CHECKOUT_SUCCESS_PATH", "/success.html"),
        checkout_cancel_path=os.getenv("CHECKOUT_CANCEL_PATH", "/cart.html"),
        cors_origins=tuple(_list_env("CORS_ORIGINS", DEFAULT_CORS_ORIGINS)),
        catalog=catalog,
    )
