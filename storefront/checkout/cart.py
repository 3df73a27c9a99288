"""
Logique panier pure (pas de Stripe, pas de HTTP).
"""
import json
import math
import re
from typing import Any, Dict, List, Mapping, Optional
from urllib.parse import urljoin, urlparse

from storefront.catalog import CatalogEntry, find_entry
from storefront.errors import UnknownProductError, ValidationError

LOCAL_DEV_HOSTS = {"localhost", "127.0.0.1"}
# Limite Stripe: 500 caractères par valeur de metadata
METADATA_VALUE_LIMIT = 500

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


# module storefront.checkout.cart
def validate_items(body: Any) -> List[Dict[str, Any]]:
    """
    Extrait body["items"].
    - Soulève ValidationError si le corps n'est pas un objet, ou si items est absent, pas une liste, ou vide.
    """
    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object")
    items = body.get("items")
    if not isinstance(items, list) or not items:
        raise ValidationError("No items provided")
    for it in items:
        if not isinstance(it, dict):
            raise ValidationError("Each item must be an object")
    return items


def parse_quantity(value: Any, default: int = 1) -> int:
    """
    Quantité entière >= 1.
    - Chaînes: entier de tête ("3", " 2abc" -> 2), sinon default
    - Flottants tronqués, booléens et autres types -> default
    """
    qty: Optional[int] = None
    if isinstance(value, bool):
        qty = None
    elif isinstance(value, int):
        qty = value
    elif isinstance(value, float):
        qty = int(value) if math.isfinite(value) else None
    elif isinstance(value, str):
        m = _LEADING_INT.match(value)
        qty = int(m.group(1)) if m else None
    if qty is None:
        qty = default
    return max(1, qty)


def display_name(name: str, size: Any = None, color: Any = None) -> str:
    """'Classic Black Hoodie' + taille/couleur non vides -> 'Classic Black Hoodie (M / Black)'."""
    variants = [str(v).strip() for v in (size, color) if v is not None and str(v).strip()]
    if not variants:
        return name
    return f"{name} ({' / '.join(variants)})"


def is_local_origin(origin: Optional[str]) -> bool:
    if not origin:
        return False
    parsed = urlparse(origin)
    return parsed.scheme in ("http", "https") and parsed.hostname in LOCAL_DEV_HOSTS


def resolve_base_url(site_url: str, origin: Optional[str] = None, base_path: Optional[str] = None) -> str:
    """
    Base des URLs d'images.
    - Origine de dev locale + basePath relatif (ex: "/clarity/") -> origin + basePath
    - Sinon SITE_URL
    """
    if is_local_origin(origin) and isinstance(base_path, str) and base_path.strip():
        path = base_path.strip()
        if not urlparse(path).scheme and not path.startswith("//"):
            if not path.startswith("/"):
                path = "/" + path
            if not path.endswith("/"):
                path += "/"
            return origin.rstrip("/") + path
    return site_url.rstrip("/") + "/"


def resolve_image_url(image: Any, base_url: str) -> Optional[str]:
    """URL absolue de l'image, ou None si absente. Les URLs http(s) absolues sont conservées."""
    if not isinstance(image, str) or not image.strip():
        return None
    image = image.strip()
    if urlparse(image).scheme in ("http", "https"):
        return image
    return urljoin(base_url, image.lstrip("/") if not image.startswith("//") else image)


def to_line_item(
    entry: CatalogEntry,
    line: Dict[str, Any],
    *,
    currency: str,
    base_url: str,
) -> Dict[str, Any]:
    """
    Construit un line_item Stripe (price_data) à partir d'une entrée catalogue.
    Le prix vient toujours du catalogue, jamais de la ligne client.
    """
    quantity = parse_quantity(line.get("quantity"))
    product_data: Dict[str, Any] = {
        "name": display_name(entry.name, line.get("size"), line.get("color")),
        "metadata": {"product_id": entry.id},
    }
    for key in ("size", "color"):
        value = line.get(key)
        if value is not None and str(value).strip():
            product_data["metadata"][key] = str(value).strip()
    image_url = resolve_image_url(line.get("image"), base_url)
    if image_url:
        product_data["images"] = [image_url]
    return {
        "quantity": quantity,
        "price_data": {
            "currency": currency,
            "unit_amount": entry.unit_amount,
            "product_data": product_data,
        },
    }


def to_line_items(
    items: List[Dict[str, Any]],
    catalog: Mapping[str, CatalogEntry],
    *,
    currency: str,
    base_url: str,
) -> List[Dict[str, Any]]:
    """
    Construit les line_items Stripe ligne par ligne.
    - Soulève UnknownProductError dès qu'un id est absent du catalogue.
    """
    line_items: List[Dict[str, Any]] = []
    for line in items:
        entry = find_entry(catalog, line.get("id"))
        if entry is None:
            raise UnknownProductError(str(line.get("id")))
        line_items.append(to_line_item(entry, line, currency=currency, base_url=base_url))
    return line_items


def compute_subtotal(line_items: List[Dict[str, Any]]) -> int:
    """Somme des unit_amount x quantity (entiers, unités mineures)."""
    return sum(li["price_data"]["unit_amount"] * li["quantity"] for li in line_items)


def make_metadata(order_ref: str, line_items: List[Dict[str, Any]]) -> Dict[str, str]:
    """
    Métadonnées Stripe associées à la session.
    - order_number: référence de commande (aussi dans client_reference_id)
    - cart: résumé JSON compact [{id, q, s?, c?}], limité à 500 caractères (limite Stripe)
      en retirant les dernières lignes
    """
    summary = []
    for li in line_items:
        meta = li["price_data"]["product_data"].get("metadata", {})
        row: Dict[str, Any] = {"id": meta.get("product_id"), "q": li["quantity"]}
        if meta.get("size"):
            row["s"] = meta["size"]
        if meta.get("color"):
            row["c"] = meta["color"]
        summary.append(row)
    cart = json.dumps(summary, separators=(",", ":"))
    # On retire des lignes entières: la valeur reste un JSON valide
    while len(cart) > METADATA_VALUE_LIMIT and summary:
        summary.pop()
        cart = json.dumps(summary, separators=(",", ":"))
    return {"order_number": order_ref, "cart": cart}
