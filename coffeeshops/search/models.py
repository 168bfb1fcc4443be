from __future__ import annotations

from typing import Iterable

from pydantic import BaseModel, Field

from ..catalog.models import FACET_FLAGS_CONFIG, CoffeeShop, Facet
from ..reviews.models import RatedShop


class FilterState(BaseModel):
    model_config = FACET_FLAGS_CONFIG

    wifi: bool = False
    seating: bool = False
    power_outlets: bool = False
    quiet_space: bool = False

    @classmethod
    def from_facets(cls, facets: Iterable[Facet | str]) -> FilterState:
        return cls(**{Facet(f).value: True for f in facets})

    def active_facets(self) -> list[Facet]:
        return [f for f in Facet if getattr(self, f.value)]

    def active_count(self) -> int:
        return len(self.active_facets())

    def toggled(self, facet: Facet | str) -> FilterState:
        key = Facet(facet).value
        return self.model_copy(update={key: not getattr(self, key)})


class SearchRequest(BaseModel):
    search_term: str = Field(default="", max_length=50)


class SessionState(BaseModel):
    search_term: str
    filters: FilterState
    active_filter_count: int


class ShopView(BaseModel):
    shop: CoffeeShop
    rating: RatedShop


class ShopListResponse(BaseModel):
    shops: list[ShopView]
    total: int
    state: SessionState
