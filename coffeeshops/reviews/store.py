from __future__ import annotations

import logging
from typing import Any, Mapping

from ..catalog.models import Review

logger = logging.getLogger(__name__)


class ReviewOverlayStore:
    """
    Per-shop reviews added during a session, newest first.

    Best-effort cache rather than a system of record: unknown shop or review
    ids never raise, they yield empty results or do nothing.
    """

    def __init__(self) -> None:
        self._reviews: dict[str, list[Review]] = {}

    def get_reviews(self, shop_id: str) -> list[Review]:
        return list(self._reviews.get(shop_id, []))

    def has_review(self, shop_id: str, review_id: str) -> bool:
        return any(r.id == review_id for r in self._reviews.get(shop_id, []))

    def add_review(self, shop_id: str, review: Review) -> None:
        existing = self._reviews.setdefault(shop_id, [])
        if any(r.id == review.id for r in existing):
            logger.debug("Review %s already stored for shop %s", review.id, shop_id)
            return
        existing.insert(0, review)
        logger.debug("Added review %s to shop %s", review.id, shop_id)

    def delete_review(self, shop_id: str, review_id: str) -> None:
        existing = self._reviews.get(shop_id)
        if not existing:
            return
        self._reviews[shop_id] = [r for r in existing if r.id != review_id]
        logger.debug("Deleted review %s from shop %s", review_id, shop_id)

    def import_snapshot(self, snapshot: Mapping[str, list[Review | Mapping[str, Any]]]) -> None:
        """Replace the whole store with ``snapshot``."""
        restored: dict[str, list[Review]] = {}
        for shop_id, items in snapshot.items():
            reviews: list[Review] = []
            seen: set[str] = set()
            for item in items:
                review = item if isinstance(item, Review) else Review.model_validate(item)
                if review.id in seen:
                    continue
                seen.add(review.id)
                reviews.append(review)
            restored[str(shop_id)] = reviews
        self._reviews = restored

    def export_snapshot(self) -> dict[str, list[dict[str, Any]]]:
        return {
            shop_id: [r.model_dump() for r in reviews]
            for shop_id, reviews in self._reviews.items()
        }

    def clear(self) -> None:
        self._reviews.clear()

    def __len__(self) -> int:
        return sum(len(v) for v in self._reviews.values())
