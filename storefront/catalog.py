"""
Catalogue produit de référence (source de vérité des prix).
Les prix envoyés par le client ne sont jamais utilisés: seul unit_amount fait foi.
"""
from types import MappingProxyType
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict


class CatalogEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    unit_amount: int  # unités mineures (pence)


DEFAULT_CATALOG: Mapping[str, CatalogEntry] = MappingProxyType({
    e.id: e
    for e in (
        CatalogEntry(id="1", name="Classic Black Hoodie", unit_amount=4999),
        CatalogEntry(id="2", name="Essential White Tee", unit_amount=2499),
        CatalogEntry(id="3", name="Relaxed Cargo Trousers", unit_amount=5999),
        CatalogEntry(id="4", name="Heavyweight Crewneck", unit_amount=4499),
        CatalogEntry(id="5", name="Logo Beanie", unit_amount=1999),
        CatalogEntry(id="6", name="Canvas Tote Bag", unit_amount=1499),
    )
})


def find_entry(catalog: Mapping[str, CatalogEntry], product_id: str) -> Optional[CatalogEntry]:
    """Recherche par id (str normalisée). Retourne None si absent."""
    return catalog.get(str(product_id or "").strip())
