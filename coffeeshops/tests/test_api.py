from __future__ import annotations

from fastapi.testclient import TestClient

from coffeeshops.app import app
from coffeeshops.session import registry
from coffeeshops.session.config import SessionConfig


def _fresh_client() -> TestClient:
    c = TestClient(app)
    c.post("/session/close")
    return c


def test_health():
    client = _fresh_client()
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_metadata():
    client = _fresh_client()
    body = client.get("/metadata").json()
    assert body["total_shops"] == 6
    assert "Seattle" in body["cities"]
    assert body["facets"] == ["wifi", "seating", "power_outlets", "quiet_space"]


def test_list_shops_returns_whole_catalog_by_default():
    client = _fresh_client()
    body = client.get("/shops").json()
    assert body["total"] == 6
    assert [v["shop"]["id"] for v in body["shops"]] == ["1", "2", "3", "4", "5", "6"]
    assert body["state"]["search_term"] == ""


def test_search_state_is_shared_across_requests():
    client = _fresh_client()
    resp = client.put("/state/search", json={"search_term": "URBAN"})
    assert resp.status_code == 200
    assert client.get("/state").json()["search_term"] == "URBAN"

    body = client.get("/shops").json()
    assert [v["shop"]["name"] for v in body["shops"]] == ["Urban Grind"]

    client.delete("/state/search")
    assert client.get("/shops").json()["total"] == 6


def test_search_term_too_long_rejected():
    client = _fresh_client()
    resp = client.put("/state/search", json={"search_term": "x" * 51})
    assert resp.status_code == 422


def test_filters_use_and_semantics():
    client = _fresh_client()
    resp = client.put("/state/filters", json={"wifi": True, "quiet_space": True})
    assert resp.json()["active_filter_count"] == 2

    body = client.get("/shops").json()
    assert [v["shop"]["id"] for v in body["shops"]] == ["2", "3", "5"]


def test_filters_accept_camel_case_keys():
    client = _fresh_client()
    resp = client.put("/state/filters", json={"quietSpace": True, "powerOutlets": True})
    assert resp.status_code == 200
    assert resp.json()["filters"]["quiet_space"] is True
    assert resp.json()["filters"]["power_outlets"] is True
    assert resp.json()["active_filter_count"] == 2


def test_unknown_filter_key_rejected():
    client = _fresh_client()
    resp = client.put("/state/filters", json={"parking": True})
    assert resp.status_code == 422
    assert client.get("/state").json()["active_filter_count"] == 0


def test_toggle_and_clear_filters():
    client = _fresh_client()
    resp = client.post("/state/filters/power_outlets/toggle")
    assert resp.json()["filters"]["power_outlets"] is True

    body = client.get("/shops").json()
    assert all(v["shop"]["amenities"]["power_outlets"] for v in body["shops"])

    resp = client.delete("/state/filters")
    assert resp.json()["active_filter_count"] == 0


def test_toggle_unknown_facet_rejected():
    client = _fresh_client()
    resp = client.post("/state/filters/parking/toggle")
    assert resp.status_code == 422


def test_no_results_is_empty_list():
    client = _fresh_client()
    client.put("/state/search", json={"search_term": "nonexistent12345"})
    body = client.get("/shops").json()
    assert body["total"] == 0
    assert body["shops"] == []


def test_shop_detail_and_unknown_shop():
    client = _fresh_client()
    body = client.get("/shops/1").json()
    assert body["shop"]["name"] == "Brew Haven"
    assert body["rating"]["rating"] == 4.5
    assert body["rating"]["review_count"] == 2

    assert client.get("/shops/999").status_code == 404
    assert client.get("/shops/999/reviews").status_code == 404


def test_review_lifecycle():
    client = _fresh_client()
    resp = client.post("/shops/1/reviews", json={"rating": 3, "comment": "Pretty good latte"})
    assert resp.status_code == 201
    review = resp.json()
    assert review["user"] == "You"

    detail = client.get("/shops/1").json()
    assert detail["rating"]["rating"] == 4.0
    assert detail["rating"]["deletable_review_ids"] == [review["id"]]
    assert client.get("/shops/1/reviews").json()[0]["id"] == review["id"]

    resp = client.delete(f"/shops/1/reviews/{review['id']}")
    assert resp.json()["status"] == "deleted"
    assert client.get("/shops/1").json()["rating"]["rating"] == 4.5

    resp = client.post("/reviews/restore")
    assert resp.json()["status"] == "restored"
    assert client.get("/shops/1").json()["rating"]["rating"] == 4.0

    resp = client.post("/reviews/restore")
    assert resp.json()["status"] == "nothing_to_restore"


def test_restore_reports_nothing_when_review_already_back():
    client = _fresh_client()
    review = client.post("/shops/2/reviews", json={"rating": 4, "comment": "Nice and calm"}).json()
    client.delete(f"/shops/2/reviews/{review['id']}")
    client.put("/snapshot", json={"2": [review]})

    resp = client.post("/reviews/restore")

    assert resp.json() == {"status": "nothing_to_restore", "review": None}
    assert [r["id"] for r in client.get("/shops/2/reviews").json()][:1] == [review["id"]]


def test_seed_review_not_deletable():
    client = _fresh_client()
    resp = client.delete("/shops/1/reviews/r1")
    assert resp.json()["status"] == "not_found"
    assert client.get("/shops/1").json()["rating"]["review_count"] == 2


def test_review_validation_errors():
    client = _fresh_client()
    resp = client.post("/shops/1/reviews", json={"rating": 6, "comment": "Pretty good latte"})
    assert resp.status_code == 422
    assert any("rating" in reason for reason in resp.json()["detail"])

    resp = client.post("/shops/1/reviews", json={"rating": 4, "comment": "meh"})
    assert resp.status_code == 422

    assert client.get("/snapshot").json() == {}


def test_review_for_unknown_shop():
    client = _fresh_client()
    resp = client.post("/shops/999/reviews", json={"rating": 4, "comment": "Pretty good latte"})
    assert resp.status_code == 404


def test_sessions_are_isolated():
    alice = _fresh_client()
    bob = _fresh_client()
    alice.put("/state/search", json={"search_term": "urban"})
    alice.post("/shops/2/reviews", json={"rating": 5, "comment": "Fast wifi indeed"})

    assert bob.get("/state").json()["search_term"] == ""
    assert bob.get("/snapshot").json() == {}


def test_snapshot_survives_session_close():
    client = _fresh_client()
    client.post("/shops/3/reviews", json={"rating": 4, "comment": "Lovely garden seating"})

    closed = client.post("/session/close").json()
    snapshot = closed["snapshot"]
    assert list(snapshot) == ["3"]

    assert client.get("/snapshot").json() == {}
    resp = client.put("/snapshot", json=snapshot)
    assert resp.json() == {"status": "imported", "total_reviews": 1}
    assert client.get("/shops/3").json()["rating"]["review_count"] == 3


def test_cookieless_sessions_are_capped(monkeypatch):
    monkeypatch.setattr(registry, "DEFAULT_SESSION_CONFIG", SessionConfig(max_sessions=2))
    registry.clear_sessions()

    for _ in range(5):
        assert TestClient(app).get("/state").status_code == 200

    assert registry.active_session_count() == 2
    registry.clear_sessions()
