from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Sequence

import numpy as np

from ..catalog.models import CoffeeShop, Review
from .models import RatedShop

DEFAULT_AUTHOR = "You"


def merge_reviews(
    seed: Sequence[Review],
    overlay: Sequence[Review],
    author: str = DEFAULT_AUTHOR,
) -> list[Review]:
    """Session reviews first (overlay order), then seed reviews by other authors."""
    candidates = [r for r in overlay if r.user == author]
    candidates += [r for r in seed if r.user != author]

    merged: list[Review] = []
    seen: set[str] = set()
    for review in candidates:
        if review.id in seen:
            continue
        seen.add(review.id)
        merged.append(review)
    return merged


def aggregate_rating(reviews: Sequence[Review], base_rating: float) -> float:
    """Mean rating over ``reviews``; ``base_rating`` when there are none."""
    if not reviews:
        return float(base_rating)
    return float(np.mean([r.rating for r in reviews]))


def display_rating(value: float) -> float:
    """One decimal place, exact halves rounded up."""
    return float(Decimal(str(value)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def rate_shop(
    shop: CoffeeShop,
    overlay: Sequence[Review],
    author: str = DEFAULT_AUTHOR,
) -> RatedShop:
    merged = merge_reviews(shop.reviews, overlay, author)
    rating = aggregate_rating(merged, shop.rating)
    overlay_ids = {r.id for r in overlay if r.user == author}
    return RatedShop(
        shop_id=shop.id,
        reviews=merged,
        review_count=len(merged),
        rating=rating,
        display_rating=display_rating(rating),
        deletable_review_ids=[r.id for r in merged if r.id in overlay_ids],
    )
