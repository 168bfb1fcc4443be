from __future__ import annotations

from enum import Enum

from pydantic import AliasGenerator, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Facet(str, Enum):
    wifi = "wifi"
    seating = "seating"
    power_outlets = "power_outlets"
    quiet_space = "quiet_space"


# Facet flags accept both snake_case and camelCase keys and reject anything else.
FACET_FLAGS_CONFIG = ConfigDict(
    alias_generator=AliasGenerator(validation_alias=to_camel),
    populate_by_name=True,
    extra="forbid",
)


class Review(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    user: str
    rating: int
    comment: str
    date: str = Field(..., description="ISO-8601 timestamp")


class Coordinates(BaseModel):
    model_config = ConfigDict(frozen=True)

    lat: float
    lng: float


class Location(BaseModel):
    model_config = ConfigDict(frozen=True)

    address: str
    city: str
    state: str
    zip: str
    coordinates: Coordinates


class Hours(BaseModel):
    model_config = ConfigDict(frozen=True)

    open: str
    close: str


class Amenities(BaseModel):
    model_config = ConfigDict(frozen=True, **FACET_FLAGS_CONFIG)

    wifi: bool = False
    seating: bool = False
    power_outlets: bool = False
    quiet_space: bool = False

    def has(self, facet: Facet | str) -> bool:
        return bool(getattr(self, Facet(facet).value))


class CoffeeShop(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    name: str
    description: str
    long_description: str = ""
    image: str = ""
    rating: float = Field(..., ge=0.0, le=5.0, description="Seed average rating")
    location: Location
    hours: Hours
    amenities: Amenities
    specialties: tuple[str, ...] = ()
    reviews: tuple[Review, ...] = ()
