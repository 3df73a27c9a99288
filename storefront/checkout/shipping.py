"""
Politique de livraison: détection du pays puis choix des tarifs Stripe.
Fonctions pures, testables sans requête HTTP.
"""
import re
from typing import Any, Dict, List, Mapping, Optional

from storefront.config import Settings

# En-tête géo Netlify, puis en-tête pays du CDN (Cloudflare)
GEO_HEADER = "x-country"
CDN_COUNTRY_HEADER = "cf-ipcountry"

_COUNTRY_RE = re.compile(r"^[A-Z]{2}$")
# Valeurs "pays inconnu" (XX) et Tor (T1) envoyées par les CDN
_UNKNOWN_COUNTRIES = {"XX", "T1"}


def normalize_country(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    code = value.strip().upper()
    if not _COUNTRY_RE.match(code) or code in _UNKNOWN_COUNTRIES:
        return None
    return code


def detect_country(headers: Mapping[str, str], hint: Any = None) -> Optional[str]:
    """
    Pays à 2 lettres, par ordre de priorité:
    1) en-tête géo (x-country) 2) en-tête CDN (cf-ipcountry) 3) indice client (hintCountry)
    Retourne None si aucun n'est exploitable.
    """
    for candidate in (headers.get(GEO_HEADER), headers.get(CDN_COUNTRY_HEADER), hint):
        code = normalize_country(candidate)
        if code:
            return code
    return None


def select_shipping_rates(country: Optional[str], subtotal: int, settings: Settings) -> List[str]:
    """
    Ids de tarifs Stripe à proposer.
    - pays d'origine: standard + express (+ gratuit si subtotal >= seuil)
    - pays régional: tarif régional
    - autre pays connu: international
    - pays inconnu: union de toutes les catégories (mode dev permissif)
    Les tarifs non configurés sont ignorés; chaque id n'apparaît qu'une fois.
    """
    rates = settings.shipping_rates
    free_eligible = subtotal >= settings.free_shipping_threshold

    if country == settings.home_country:
        candidates = [rates.standard, rates.express]
        if free_eligible:
            candidates.append(rates.free)
    elif country in settings.regional_countries:
        candidates = [rates.regional]
    elif country:
        candidates = [rates.international]
    else:
        candidates = [rates.standard, rates.express]
        if free_eligible:
            candidates.append(rates.free)
        candidates += [rates.regional, rates.international]

    selected: List[str] = []
    for rate_id in candidates:
        if rate_id and rate_id not in selected:
            selected.append(rate_id)
    return selected


def to_shipping_options(rate_ids: List[str]) -> List[Dict[str, str]]:
    return [{"shipping_rate": rate_id} for rate_id in rate_ids]
