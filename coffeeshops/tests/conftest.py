from __future__ import annotations

import pytest

from coffeeshops.analytics.store import clear_events
from coffeeshops.catalog.data_store import Catalog
from coffeeshops.catalog.models import (
    Amenities,
    CoffeeShop,
    Coordinates,
    Hours,
    Location,
    Review,
)


def make_review(review_id: str, rating: int, user: str = "Guest", comment: str = "Lovely coffee here") -> Review:
    return Review(
        id=review_id,
        user=user,
        rating=rating,
        comment=comment,
        date="2023-10-01T10:00:00.000Z",
    )


def make_shop(
    shop_id: str,
    name: str,
    *,
    city: str = "Portland",
    description: str = "A coffee shop.",
    rating: float = 4.0,
    amenities: dict | None = None,
    specialties: tuple[str, ...] = (),
    reviews: tuple[Review, ...] = (),
) -> CoffeeShop:
    return CoffeeShop(
        id=shop_id,
        name=name,
        description=description,
        rating=rating,
        location=Location(
            address="1 Test Street",
            city=city,
            state="OR",
            zip="97201",
            coordinates=Coordinates(lat=45.5, lng=-122.6),
        ),
        hours=Hours(open="7:00 AM", close="7:00 PM"),
        amenities=Amenities(**(amenities or {})),
        specialties=specialties,
        reviews=reviews,
    )


@pytest.fixture
def small_catalog() -> Catalog:
    return Catalog([
        make_shop(
            "a",
            "Brew Haven",
            amenities={"wifi": True, "quiet_space": False},
            specialties=("Pour-over coffee",),
            reviews=(make_review("r1", 5), make_review("r2", 4)),
        ),
        make_shop(
            "b",
            "Urban Grind",
            city="Seattle",
            amenities={"wifi": True, "quiet_space": True},
            specialties=("Cold brew",),
        ),
        make_shop(
            "c",
            "Quiet Corner",
            city="Boston",
            rating=3.5,
            amenities={"quiet_space": True, "seating": True},
        ),
    ])


@pytest.fixture(autouse=True)
def _reset_activity_log():
    clear_events()
    yield
    clear_events()
