from __future__ import annotations

from pydantic import BaseModel, Field

from ..catalog.models import Review


class ReviewSubmission(BaseModel):
    rating: int = Field(..., ge=1, le=5, description="Star rating, 1 to 5")
    comment: str = Field(..., min_length=5, max_length=500)


class RatedShop(BaseModel):
    shop_id: str
    reviews: list[Review]
    review_count: int
    rating: float
    display_rating: float
    deletable_review_ids: list[str] = Field(default_factory=list)


class ReviewRequest(BaseModel):
    """Raw review form input; bounds are enforced by the session layer."""

    rating: int
    comment: str
