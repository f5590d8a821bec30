from __future__ import annotations

import os
import time
from typing import Callable

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.responses import JSONResponse
from starlette.middleware.sessions import SessionMiddleware

from .analytics.aggregator import compute_analytics
from .analytics.store import get_events, record_event
from .auth.dependencies import require_admin, require_profile, require_user
from .auth.models import LoginRequest
from .auth.users import authenticate
from .groups.errors import DiscoveryError
from .groups.membership import join_group
from .groups.models import JoinRequest, JoinResult, RankedGroup
from .groups.ranking import (
    rank_for_you,
    rank_recommended,
    rank_search,
    rank_trending,
    rank_with_friends,
)
from .matching.engine import find_matches
from .matching.models import MatchResult, OnboardingRequest, Profile, ProfileOut, ProfileUpdate
from .messaging.stream_client import get_active_channel_ids, upsert_user
from .social.friend_requests import (
    FriendRequest,
    FriendRequestCreate,
    FriendRequestError,
    accept_friend_request,
    get_pending_requests,
    reject_friend_request,
    remove_friend,
    send_friend_request,
)
from .storage import data_store

app = FastAPI(title="Peer Learning API", version="1.0.0")
app.add_middleware(
    SessionMiddleware,
    secret_key=os.environ.get("SESSION_SECRET", "peerlearn-secret-change-in-production"),
)


@app.exception_handler(DiscoveryError)
async def discovery_error_handler(request: Request, exc: DiscoveryError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"detail": str(exc)})


@app.exception_handler(FriendRequestError)
async def friend_request_error_handler(request: Request, exc: FriendRequestError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"detail": str(exc)})


def _timed_discovery(strategy: str, rank: Callable[[], list[RankedGroup]]) -> list[RankedGroup]:
    start_time = time.time()
    results = rank()
    record_event("group_discovery", {
        "strategy": strategy,
        "results_returned": len(results),
        "response_time_ms": round((time.time() - start_time) * 1000, 1),
    })
    return results


# ── Public endpoints ─────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


# ── Auth endpoints ───────────────────────────────────────────────────────


@app.post("/auth/login")
def login(body: LoginRequest, request: Request) -> dict:
    user = authenticate(body.username, body.password)
    if not user:
        raise HTTPException(status_code=401, detail="Invalid credentials")
    request.session["user"] = user
    return {"status": "ok", "user": user}


@app.post("/auth/logout")
def logout(request: Request) -> dict:
    request.session.clear()
    return {"status": "logged_out"}


@app.get("/auth/me")
def auth_me(user: dict = Depends(require_user)) -> dict:
    return user


# ── Profile ──────────────────────────────────────────────────────────────


@app.get("/users/me", response_model=Profile)
def get_my_profile(profile: Profile = Depends(require_profile)) -> Profile:
    return profile


@app.put("/users/me", response_model=Profile)
def update_my_profile(body: ProfileUpdate, profile: Profile = Depends(require_profile)) -> Profile:
    updated = data_store.update_profile(profile.id, body.changes())
    if updated is None:
        raise HTTPException(status_code=404, detail="User not found")
    return updated


@app.post("/users/me/onboarding", response_model=Profile)
def onboard(body: OnboardingRequest, profile: Profile = Depends(require_profile)) -> Profile:
    updated = data_store.update_profile(profile.id, {"is_onboarded": body.is_onboarded})
    if updated is None:
        raise HTTPException(status_code=404, detail="User not found")
    upsert_user(updated.id, updated.username, updated.avatar)
    return updated


# ── Peer matching ────────────────────────────────────────────────────────


@app.get("/matches", response_model=list[MatchResult])
def matches(profile: Profile = Depends(require_profile)) -> list[MatchResult]:
    start_time = time.time()

    pool = data_store.get_candidate_pool(profile.id)
    results = find_matches(profile, pool)

    record_event("peer_match", {
        "strategy": "peer_match",
        "candidates": len(pool),
        "results_returned": len(results),
        "response_time_ms": round((time.time() - start_time) * 1000, 1),
    })
    return results


# ── Group discovery ──────────────────────────────────────────────────────


@app.get(
    "/groups/discovery/recommended",
    response_model=list[RankedGroup],
    response_model_exclude_none=True,
)
def recommended_groups(profile: Profile = Depends(require_profile)) -> list[RankedGroup]:
    return _timed_discovery("recommended", lambda: rank_recommended(
        profile, data_store.get_groups(), data_store.get_profiles(),
    ))


@app.get(
    "/groups/discovery/trending",
    response_model=list[RankedGroup],
    response_model_exclude_none=True,
)
def trending_groups(profile: Profile = Depends(require_profile)) -> list[RankedGroup]:
    return _timed_discovery("trending", lambda: rank_trending(
        profile, data_store.get_groups(), get_active_channel_ids(), data_store.get_profiles(),
    ))


@app.get(
    "/groups/discovery/for-you",
    response_model=list[RankedGroup],
    response_model_exclude_none=True,
)
def for_you_groups(profile: Profile = Depends(require_profile)) -> list[RankedGroup]:
    return _timed_discovery("for_you", lambda: rank_for_you(
        profile, data_store.get_groups(), data_store.get_profiles(),
    ))


@app.get(
    "/groups/discovery/with-friends",
    response_model=list[RankedGroup],
    response_model_exclude_none=True,
)
def with_friends_groups(profile: Profile = Depends(require_profile)) -> list[RankedGroup]:
    if not profile.friends:
        return _timed_discovery("with_friends", list)
    return _timed_discovery("with_friends", lambda: rank_with_friends(
        profile, data_store.get_groups(), data_store.get_profiles(),
    ))


@app.get(
    "/groups/discovery/search",
    response_model=list[RankedGroup],
    response_model_exclude_none=True,
)
def search_groups(
    q: str | None = Query(default=None, description="Text to find in group name, description or topics"),
    user: dict = Depends(require_user),
) -> list[RankedGroup]:
    return _timed_discovery("search", lambda: rank_search(
        q, data_store.get_groups(), data_store.get_profiles(),
    ))


@app.post("/groups/discovery/join", response_model=JoinResult)
def join(body: JoinRequest, profile: Profile = Depends(require_profile)) -> JoinResult:
    result = join_group(body.group_id, profile.id)
    record_event("group_join", {"group_id": body.group_id, "user_id": profile.id})
    return result


# ── Friends ──────────────────────────────────────────────────────────────


@app.get("/friends", response_model=list[ProfileOut])
def friends(profile: Profile = Depends(require_profile)) -> list[ProfileOut]:
    found = (data_store.get_profile(fid) for fid in profile.friends)
    return [ProfileOut.from_profile(p) for p in found if p is not None]


@app.get("/friends/requests", response_model=list[FriendRequest])
def friend_requests(profile: Profile = Depends(require_profile)) -> list[FriendRequest]:
    return get_pending_requests(profile.id)


@app.post("/friends/requests", response_model=FriendRequest, status_code=201)
def create_friend_request(
    body: FriendRequestCreate,
    profile: Profile = Depends(require_profile),
) -> FriendRequest:
    return send_friend_request(profile.id, body.recipient_id)


@app.post("/friends/requests/{request_id}/accept", response_model=FriendRequest)
def accept_request(request_id: str, profile: Profile = Depends(require_profile)) -> FriendRequest:
    return accept_friend_request(request_id, profile.id)


@app.post("/friends/requests/{request_id}/reject", response_model=FriendRequest)
def reject_request(request_id: str, profile: Profile = Depends(require_profile)) -> FriendRequest:
    return reject_friend_request(request_id, profile.id)


@app.delete("/friends/{friend_id}")
def delete_friend(friend_id: str, profile: Profile = Depends(require_profile)) -> dict:
    remove_friend(profile.id, friend_id)
    return {"status": "removed"}


# ── Admin endpoints ──────────────────────────────────────────────────────


@app.get("/analytics")
def analytics(user: dict = Depends(require_admin)) -> dict:
    return compute_analytics(get_events())
