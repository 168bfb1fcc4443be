from __future__ import annotations

import json
import logging
from typing import Iterable, Iterator

import pandas as pd

from ..exceptions import DuplicateShopError
from .config import DEFAULT_CATALOG_CONFIG, CatalogConfig
from .models import CoffeeShop, Facet

logger = logging.getLogger(__name__)


class Catalog:
    """Immutable, ordered collection of coffee shops."""

    def __init__(self, shops: Iterable[CoffeeShop]) -> None:
        self._shops: tuple[CoffeeShop, ...] = tuple(shops)
        self._by_id: dict[str, CoffeeShop] = {}
        for shop in self._shops:
            if shop.id in self._by_id:
                raise DuplicateShopError(f"Duplicate shop id in catalog: {shop.id!r}")
            self._by_id[shop.id] = shop
        self._df: pd.DataFrame | None = None

    @property
    def shops(self) -> tuple[CoffeeShop, ...]:
        return self._shops

    def get(self, shop_id: str) -> CoffeeShop | None:
        return self._by_id.get(shop_id)

    def __len__(self) -> int:
        return len(self._shops)

    def __iter__(self) -> Iterator[CoffeeShop]:
        return iter(self._shops)

    def __contains__(self, shop_id: object) -> bool:
        return shop_id in self._by_id

    def cities(self) -> list[str]:
        return sorted({s.location.city for s in self._shops if s.location.city})

    def specialties(self) -> list[str]:
        return sorted({sp for s in self._shops for sp in s.specialties})

    @property
    def dataframe(self) -> pd.DataFrame:
        """Search frame, one row per shop in catalog order, built on first use."""
        if self._df is None:
            self._df = _build_frame(self._shops)
        return self._df


def _build_frame(shops: tuple[CoffeeShop, ...]) -> pd.DataFrame:
    rows = []
    for shop in shops:
        row = {
            "id": shop.id,
            # Lowercase searchable text for case-insensitive lookup
            "name_lower": shop.name.lower(),
            "description_lower": shop.description.lower(),
            "city_lower": shop.location.city.lower(),
            "specialties_lower": [s.lower() for s in shop.specialties],
        }
        for facet in Facet:
            row[facet.value] = shop.amenities.has(facet)
        rows.append(row)

    columns = ["id", "name_lower", "description_lower", "city_lower", "specialties_lower"]
    columns += [f.value for f in Facet]
    return pd.DataFrame(rows, columns=columns)


def load_catalog(config: CatalogConfig = DEFAULT_CATALOG_CONFIG) -> Catalog:
    """Read and validate the seed dataset into a Catalog."""
    with open(config.data_path, encoding="utf-8") as fh:
        records = json.load(fh)

    catalog = Catalog(CoffeeShop.model_validate(r) for r in records)
    logger.info("Loaded %d coffee shops from %s", len(catalog), config.data_path)
    return catalog


_catalog: Catalog | None = None


def get_catalog() -> Catalog:
    """Return the process-wide catalog, loading it on first call."""
    global _catalog
    if _catalog is None:
        _catalog = load_catalog()
    return _catalog


def reset_catalog() -> None:
    global _catalog
    _catalog = None
