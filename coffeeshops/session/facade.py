from __future__ import annotations

import itertools
import logging
import time
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Mapping

from pydantic import ValidationError

from ..analytics.store import (
    REVIEW_DELETED,
    REVIEW_RESTORED,
    REVIEW_SUBMITTED,
    SEARCH,
    record_event,
)
from ..catalog.data_store import Catalog, get_catalog
from ..catalog.models import CoffeeShop, Facet, Review
from ..exceptions import ReviewValidationError, ShopNotFoundError
from ..reviews.aggregator import rate_shop
from ..reviews.models import RatedShop, ReviewSubmission
from ..reviews.store import ReviewOverlayStore
from ..search.engine import filter_shops
from ..search.models import FilterState, SearchRequest, SessionState
from .config import DEFAULT_SESSION_CONFIG, SessionConfig
from .scheduler import DeferredScheduler

logger = logging.getLogger(__name__)


class SessionEvent(str, Enum):
    search = "search"
    filters = "filters"
    reviews = "reviews"


Subscriber = Callable[[SessionEvent, "ShopSession"], None]


def _validation_reasons(exc: ValidationError) -> list[str]:
    reasons = []
    for err in exc.errors():
        field = ".".join(str(p) for p in err.get("loc", ())) or "review"
        reasons.append(f"{field}: {err['msg']}")
    return reasons


class ShopSession:
    """
    Single state holder the presentation layer talks to.

    Getters expose the current search term and filters; setters change them
    and notify subscribers, who are expected to call ``results()`` again.
    Review mutations go through here so the undo stack and the analytics log
    stay in step with the overlay store.
    """

    def __init__(
        self,
        catalog: Catalog | None = None,
        store: ReviewOverlayStore | None = None,
        config: SessionConfig = DEFAULT_SESSION_CONFIG,
        session_id: str | None = None,
        scheduler: DeferredScheduler | None = None,
    ) -> None:
        self.catalog = catalog if catalog is not None else get_catalog()
        self.store = store if store is not None else ReviewOverlayStore()
        self.config = config
        self.session_id = session_id
        self.scheduler = scheduler or DeferredScheduler()

        self._search_term = ""
        self._filters = FilterState()
        self._deleted: list[tuple[str, Review]] = []
        self._subscribers: list[Subscriber] = []
        self._submit_seq = itertools.count(1)

    # ── Subscriptions ───────────────────────────────────────────────────

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register ``callback``; the returned callable unregisters it."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _notify(self, event: SessionEvent) -> None:
        for callback in list(self._subscribers):
            try:
                callback(event, self)
            except Exception:
                logger.warning("Session subscriber failed on %s event", event.value, exc_info=True)

    # ── Search & filter state ───────────────────────────────────────────

    @property
    def search_term(self) -> str:
        return self._search_term

    @property
    def filters(self) -> FilterState:
        return self._filters

    def state(self) -> SessionState:
        return SessionState(
            search_term=self._search_term,
            filters=self._filters,
            active_filter_count=self._filters.active_count(),
        )

    def set_search_term(self, term: str) -> None:
        self._search_term = term
        self._notify(SessionEvent.search)

    def clear_search(self) -> None:
        self.set_search_term("")

    def set_filters(self, filters: FilterState) -> None:
        self._filters = filters.model_copy()
        self._notify(SessionEvent.filters)

    def toggle_filter(self, facet: Facet | str) -> FilterState:
        self.set_filters(self._filters.toggled(facet))
        return self._filters

    def clear_filters(self) -> None:
        self.set_filters(FilterState())

    # ── Queries ─────────────────────────────────────────────────────────

    def results(self) -> list[CoffeeShop]:
        start_time = time.time()
        shops = filter_shops(self.catalog, self._search_term, self._filters)
        elapsed_ms = round((time.time() - start_time) * 1000, 1)
        record_event(SEARCH, {
            "search_term": self._search_term,
            "facets": [f.value for f in self._filters.active_facets()],
            "results_returned": len(shops),
            "response_time_ms": elapsed_ms,
        }, session_id=self.session_id)
        return shops

    def shop(self, shop_id: str) -> CoffeeShop | None:
        return self.catalog.get(shop_id)

    def rated_shop(self, shop_id: str) -> RatedShop | None:
        shop = self.catalog.get(shop_id)
        if shop is None:
            return None
        return rate_shop(shop, self.store.get_reviews(shop_id), self.config.author_label)

    def rated_results(self) -> list[RatedShop]:
        author = self.config.author_label
        return [rate_shop(s, self.store.get_reviews(s.id), author) for s in self.results()]

    # ── Reviews ─────────────────────────────────────────────────────────

    def validate_review(self, shop_id: str, rating: Any, comment: Any) -> ReviewSubmission:
        try:
            submission = ReviewSubmission(rating=rating, comment=comment)
        except ValidationError as exc:
            raise ReviewValidationError(_validation_reasons(exc)) from exc
        if shop_id not in self.catalog:
            raise ShopNotFoundError(f"Coffee shop {shop_id!r} not found")
        return submission

    def _new_review_id(self, shop_id: str, now: datetime) -> str:
        base = f"review-{int(now.timestamp() * 1000)}"
        shop = self.catalog.get(shop_id)
        taken = {r.id for r in self.store.get_reviews(shop_id)}
        if shop is not None:
            taken.update(r.id for r in shop.reviews)
        # Ids waiting on the undo stack stay reserved
        taken.update(r.id for sid, r in self._deleted if sid == shop_id)

        review_id = base
        suffix = 2
        while review_id in taken:
            review_id = f"{base}-{suffix}"
            suffix += 1
        return review_id

    def _store_submission(
        self,
        shop_id: str,
        submission: ReviewSubmission,
        now: datetime | None = None,
    ) -> Review:
        now = now or datetime.now(timezone.utc)
        review = Review(
            id=self._new_review_id(shop_id, now),
            user=self.config.author_label,
            rating=submission.rating,
            comment=submission.comment,
            date=now.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
        )
        self.store.add_review(shop_id, review)
        record_event(REVIEW_SUBMITTED, {
            "shop_id": shop_id,
            "review_id": review.id,
            "rating": review.rating,
        }, session_id=self.session_id)
        self._notify(SessionEvent.reviews)
        return review

    def submit_review(
        self,
        shop_id: str,
        rating: Any,
        comment: Any,
        *,
        now: datetime | None = None,
    ) -> Review:
        """
        Validate and store a review authored by this session.

        Raises ``ReviewValidationError`` for a rating outside 1-5 or a comment
        outside 5-500 characters, and ``ShopNotFoundError`` for an unknown
        shop. Nothing reaches the overlay store unless validation passes.
        """
        submission = self.validate_review(shop_id, rating, comment)
        return self._store_submission(shop_id, submission, now)

    def delete_review(self, shop_id: str, review_id: str) -> Review | None:
        """Remove one of this session's reviews; seed or unknown ids are ignored."""
        author = self.config.author_label
        target = next(
            (r for r in self.store.get_reviews(shop_id) if r.id == review_id and r.user == author),
            None,
        )
        if target is None:
            return None

        self.store.delete_review(shop_id, review_id)
        self._deleted.append((shop_id, target))
        record_event(REVIEW_DELETED, {
            "shop_id": shop_id,
            "review_id": review_id,
        }, session_id=self.session_id)
        self._notify(SessionEvent.reviews)
        return target

    def restore_last_deleted(self) -> Review | None:
        """
        Re-add the most recently deleted review.

        Returns ``None`` when the undo stack is empty or the same review id is
        already back in the overlay.
        """
        if not self._deleted:
            return None

        shop_id, review = self._deleted.pop()
        if self.store.has_review(shop_id, review.id):
            logger.debug("Review %s already back in shop %s, nothing to restore", review.id, shop_id)
            return None
        self.store.add_review(shop_id, review)
        record_event(REVIEW_RESTORED, {
            "shop_id": shop_id,
            "review_id": review.id,
        }, session_id=self.session_id)
        self._notify(SessionEvent.reviews)
        return review

    @property
    def deleted_count(self) -> int:
        return len(self._deleted)

    # ── Deferred variants ───────────────────────────────────────────────

    async def search(self, term: str, delay: float | None = None) -> list[CoffeeShop] | None:
        """
        Apply ``term`` after a simulated delay.

        Overlapping searches are not cancelled; only the newest one applies,
        older ones resolve to ``None``.
        """
        request = SearchRequest(search_term=term)
        delay = self.config.search_delay if delay is None else delay

        def apply() -> list[CoffeeShop]:
            self.set_search_term(request.search_term)
            return self.results()

        return await self.scheduler.schedule("search", delay, apply)

    async def submit_review_later(
        self,
        shop_id: str,
        rating: Any,
        comment: Any,
        delay: float | None = None,
    ) -> Review:
        submission = self.validate_review(shop_id, rating, comment)
        delay = self.config.submit_delay if delay is None else delay
        key = f"submit:{next(self._submit_seq)}"
        return await self.scheduler.schedule(key, delay, self._store_submission, shop_id, submission)

    # ── Snapshot handoff ────────────────────────────────────────────────

    def import_snapshot(self, snapshot: Mapping[str, Any]) -> None:
        self.store.import_snapshot(snapshot)
        self._notify(SessionEvent.reviews)

    def export_snapshot(self) -> dict[str, list[dict[str, Any]]]:
        return self.store.export_snapshot()

    def close(self) -> dict[str, list[dict[str, Any]]]:
        """
        Export the overlay for a successor, then forget everything.

        Deferred work still waiting on its delay is cancelled so nothing lands
        in the cleared store afterwards.
        """
        self.scheduler.cancel_pending()
        snapshot = self.export_snapshot()
        self.store.clear()
        self._deleted.clear()
        self._subscribers.clear()
        logger.info("Closed session %s with %d stored review lists", self.session_id, len(snapshot))
        return snapshot
