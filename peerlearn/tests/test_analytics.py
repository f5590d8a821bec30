from __future__ import annotations

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from peerlearn.analytics.aggregator import compute_analytics
from peerlearn.analytics.store import clear_events, get_events, record_event
from peerlearn.app import app
from peerlearn.storage import data_store

client = TestClient(app)


def _login_user(c):
    c.post("/auth/login", json={"username": "alice", "password": "alice123"})


def _login_admin(c):
    c.post("/auth/login", json={"username": "admin", "password": "admin123"})


@pytest.fixture(autouse=True)
def _fresh_state():
    clear_events()
    data_store.reset_store()
    yield
    clear_events()
    data_store.reset_store()


def test_analytics_returns_empty_initially():
    _login_admin(client)
    resp = client.get("/analytics")
    assert resp.status_code == 200
    body = resp.json()
    assert body["total_rankings"] == 0
    assert body["avg_response_time_ms"] == 0.0
    assert body["strategy_usage"] == {}


@patch("peerlearn.matching.engine.text_similarity", return_value=0.0)
def test_analytics_tracks_rankings_per_strategy(mock_similarity):
    _login_user(client)
    client.get("/matches")
    client.get("/groups/discovery/recommended")
    client.get("/groups/discovery/recommended")
    client.get("/groups/discovery/with-friends")

    _login_admin(client)
    body = client.get("/analytics").json()
    assert body["total_rankings"] == 4
    assert body["peer_match_requests"] == 1
    assert body["group_discovery_requests"] == 3
    assert body["strategy_usage"] == {"peer_match": 1, "recommended": 2, "with_friends": 1}
    assert body["avg_response_time_ms"] >= 0


def test_analytics_counts_empty_results():
    c = TestClient(app)
    _login_user(c)
    assert c.get("/groups/discovery/search", params={"q": "knitting"}).json() == []
    assert c.get("/groups/discovery/search", params={"q": "react"}).json() != []

    _login_admin(c)
    body = c.get("/analytics").json()
    assert body["strategy_usage"] == {"search": 2}
    assert body["empty_results"] == {"search": 1}


@patch("peerlearn.groups.membership.add_member", return_value=True)
def test_analytics_counts_joins(mock_add_member):
    _login_user(client)
    client.post("/groups/discovery/join", json={"groupId": "g-react"})
    assert len(get_events("group_join")) == 1

    _login_admin(client)
    assert client.get("/analytics").json()["group_joins"] == 1


def test_failed_join_is_not_recorded():
    _login_user(client)
    client.post("/groups/discovery/join", json={"groupId": "g-private"})
    assert get_events("group_join") == []


def test_compute_analytics_averages():
    record_event("group_discovery", {
        "strategy": "trending", "results_returned": 4, "response_time_ms": 10.0,
    })
    record_event("group_discovery", {
        "strategy": "trending", "results_returned": 0, "response_time_ms": 20.0,
    })
    record_event("group_join", {"group_id": "g", "user_id": "u"})

    summary = compute_analytics(get_events())
    assert summary["total_rankings"] == 2
    assert summary["avg_response_time_ms"] == 15.0
    assert summary["avg_results_returned"] == 2.0
    assert summary["empty_results"] == {"trending": 1}
    assert summary["group_joins"] == 1
