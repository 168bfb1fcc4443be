from __future__ import annotations

import pandas as pd

from ..catalog.data_store import Catalog
from ..catalog.models import CoffeeShop
from .models import FilterState


def _text_mask(df: pd.DataFrame, term: str) -> pd.Series:
    """Literal substring match of an already-lowercased term."""
    mask = (
        df["name_lower"].str.contains(term, regex=False)
        | df["description_lower"].str.contains(term, regex=False)
        | df["city_lower"].str.contains(term, regex=False)
    )
    specialty_hit = df["specialties_lower"].apply(lambda specs: any(term in s for s in specs))
    return mask | specialty_hit.astype(bool)


def filter_shops(
    catalog: Catalog,
    search_term: str = "",
    filters: FilterState | None = None,
) -> list[CoffeeShop]:
    """
    Shops matching both the text term and every active facet.

    A blank term and an empty filter set each match everything. Surviving
    shops keep their catalog order; no match is an empty list.
    """
    df = catalog.dataframe
    if df.empty:
        return []

    mask = pd.Series(True, index=df.index)

    term = (search_term or "").strip().lower()
    if term:
        mask = mask & _text_mask(df, term)

    if filters is not None:
        for facet in filters.active_facets():
            mask = mask & df[facet.value]

    shops = catalog.shops
    return [shops[i] for i in df.index[mask.to_numpy(dtype=bool)]]
