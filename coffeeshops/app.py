from __future__ import annotations

from typing import Any

from fastapi import Depends, FastAPI, HTTPException, Request
from starlette.middleware.sessions import SessionMiddleware

from .analytics.aggregator import compute_analytics
from .analytics.store import get_events
from .catalog.data_store import get_catalog
from .catalog.models import Facet, Review
from .exceptions import ReviewValidationError, ShopNotFoundError
from .reviews.aggregator import rate_shop
from .reviews.models import ReviewRequest
from .search.models import (
    FilterState,
    SearchRequest,
    SessionState,
    ShopListResponse,
    ShopView,
)
from .session.config import DEFAULT_SESSION_CONFIG
from .session.facade import ShopSession
from .session.registry import (
    active_session_count,
    drop_session,
    get_or_create_session,
    new_session_id,
)

app = FastAPI(title="Coffee Shop Directory API", version="1.0.0")
app.add_middleware(SessionMiddleware, secret_key=DEFAULT_SESSION_CONFIG.session_secret)


def current_session(request: Request) -> ShopSession:
    """Resolve the directory session bound to this browser session cookie."""
    session_id = request.session.get("sid")
    if not session_id:
        session_id = new_session_id()
        request.session["sid"] = session_id
    return get_or_create_session(session_id)


def _shop_view(session: ShopSession, shop_id: str) -> ShopView:
    shop = session.shop(shop_id)
    rated = session.rated_shop(shop_id)
    if shop is None or rated is None:
        raise HTTPException(status_code=404, detail=f"Coffee shop {shop_id} not found")
    return ShopView(shop=shop, rating=rated)


# ── Public endpoints ─────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/metadata")
def metadata() -> dict:
    catalog = get_catalog()
    return {
        "total_shops": len(catalog),
        "cities": catalog.cities(),
        "specialties": catalog.specialties(),
        "facets": [f.value for f in Facet],
    }


# ── Search & filter state ────────────────────────────────────────────────


@app.get("/state", response_model=SessionState)
def get_state(session: ShopSession = Depends(current_session)) -> SessionState:
    return session.state()


@app.put("/state/search", response_model=SessionState)
def set_search(
    body: SearchRequest,
    session: ShopSession = Depends(current_session),
) -> SessionState:
    session.set_search_term(body.search_term)
    return session.state()


@app.delete("/state/search", response_model=SessionState)
def clear_search(session: ShopSession = Depends(current_session)) -> SessionState:
    session.clear_search()
    return session.state()


@app.put("/state/filters", response_model=SessionState)
def set_filters(
    body: FilterState,
    session: ShopSession = Depends(current_session),
) -> SessionState:
    session.set_filters(body)
    return session.state()


@app.post("/state/filters/{facet}/toggle", response_model=SessionState)
def toggle_filter(
    facet: Facet,
    session: ShopSession = Depends(current_session),
) -> SessionState:
    session.toggle_filter(facet)
    return session.state()


@app.delete("/state/filters", response_model=SessionState)
def clear_filters(session: ShopSession = Depends(current_session)) -> SessionState:
    session.clear_filters()
    return session.state()


# ── Shops & reviews ──────────────────────────────────────────────────────


@app.get("/shops", response_model=ShopListResponse)
def list_shops(session: ShopSession = Depends(current_session)) -> ShopListResponse:
    shops = session.results()
    author = session.config.author_label
    views = [
        ShopView(shop=s, rating=rate_shop(s, session.store.get_reviews(s.id), author))
        for s in shops
    ]
    return ShopListResponse(shops=views, total=len(views), state=session.state())


@app.get("/shops/{shop_id}", response_model=ShopView)
def shop_detail(shop_id: str, session: ShopSession = Depends(current_session)) -> ShopView:
    return _shop_view(session, shop_id)


@app.get("/shops/{shop_id}/reviews", response_model=list[Review])
def shop_reviews(shop_id: str, session: ShopSession = Depends(current_session)) -> list[Review]:
    return _shop_view(session, shop_id).rating.reviews


@app.post("/shops/{shop_id}/reviews", response_model=Review, status_code=201)
def submit_review(
    shop_id: str,
    body: ReviewRequest,
    session: ShopSession = Depends(current_session),
) -> Review:
    try:
        return session.submit_review(shop_id, body.rating, body.comment)
    except ShopNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except ReviewValidationError as exc:
        raise HTTPException(status_code=422, detail=exc.reasons)


@app.delete("/shops/{shop_id}/reviews/{review_id}")
def delete_review(
    shop_id: str,
    review_id: str,
    session: ShopSession = Depends(current_session),
) -> dict:
    removed = session.delete_review(shop_id, review_id)
    if removed is None:
        return {"status": "not_found", "review": None}
    return {"status": "deleted", "review": removed.model_dump()}


@app.post("/reviews/restore")
def restore_review(session: ShopSession = Depends(current_session)) -> dict:
    restored = session.restore_last_deleted()
    if restored is None:
        return {"status": "nothing_to_restore", "review": None}
    return {"status": "restored", "review": restored.model_dump()}


# ── Snapshot handoff ─────────────────────────────────────────────────────


@app.get("/snapshot")
def export_snapshot(session: ShopSession = Depends(current_session)) -> dict[str, list[dict[str, Any]]]:
    return session.export_snapshot()


@app.put("/snapshot")
def import_snapshot(
    body: dict[str, list[Review]],
    session: ShopSession = Depends(current_session),
) -> dict:
    session.import_snapshot(body)
    return {"status": "imported", "total_reviews": len(session.store)}


@app.post("/session/close")
def close_session(request: Request) -> dict:
    session_id = request.session.pop("sid", None)
    snapshot = drop_session(session_id) if session_id else {}
    return {"status": "closed", "snapshot": snapshot}


# ── Admin endpoints ──────────────────────────────────────────────────────


@app.get("/analytics")
def analytics() -> dict:
    result = compute_analytics(get_events())
    result["active_sessions"] = active_session_count()
    return result
