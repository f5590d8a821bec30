from __future__ import annotations

from fastapi import HTTPException, Request

from ..matching.models import Profile
from ..storage import data_store


def require_user(request: Request) -> dict:
    """Raise 401 if no user is logged in."""
    user = request.session.get("user")
    if not user:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return user


def require_admin(request: Request) -> dict:
    """Raise 401 if not logged in, 403 if not admin."""
    user = request.session.get("user")
    if not user:
        raise HTTPException(status_code=401, detail="Not authenticated")
    if user.get("role") != "admin":
        raise HTTPException(status_code=403, detail="Admin access required")
    return user


def require_profile(request: Request) -> Profile:
    """The logged-in user's stored profile; 404 if the account has none."""
    user = require_user(request)
    profile = data_store.get_profile(user.get("user_id") or "")
    if profile is None:
        raise HTTPException(status_code=404, detail="User not found")
    return profile
