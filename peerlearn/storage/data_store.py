from __future__ import annotations

import json
import os
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator

from ..groups.models import GroupCandidate
from ..matching.models import Profile

_DEFAULT_SEED = Path(__file__).resolve().parent.parent / "data" / "seed.json"

_profiles: dict[str, Profile] | None = None
_groups: dict[str, GroupCandidate] | None = None
_write_lock = threading.RLock()


def _seed_path() -> Path:
    return Path(os.getenv("PEERLEARN_SEED_PATH", str(_DEFAULT_SEED)))


def _load() -> tuple[dict[str, Profile], dict[str, GroupCandidate]]:
    with open(_seed_path(), encoding="utf-8") as fh:
        raw = json.load(fh)
    profiles = {p.id: p for p in (Profile.model_validate(item) for item in raw.get("users", []))}
    groups = {g.id: g for g in (GroupCandidate.model_validate(item) for item in raw.get("groups", []))}
    return profiles, groups


def _ensure_loaded() -> None:
    global _profiles, _groups
    if _profiles is None or _groups is None:
        with _write_lock:
            if _profiles is None or _groups is None:
                _profiles, _groups = _load()


@contextmanager
def write_lock() -> Iterator[None]:
    """Serialise read-modify-write sequences on the store."""
    with _write_lock:
        yield


def reset_store() -> None:
    """Drop in-memory state; the seed file is re-read on next access."""
    global _profiles, _groups
    with _write_lock:
        _profiles = None
        _groups = None


# ── Profiles ─────────────────────────────────────────────────────────────


def get_profiles() -> dict[str, Profile]:
    """Return all profiles keyed by id, loading the seed on first call."""
    _ensure_loaded()
    return _profiles


def get_profile(user_id: str) -> Profile | None:
    return get_profiles().get(user_id)


def get_candidate_pool(user_id: str) -> list[Profile]:
    """Every profile except ``user_id``, in store order."""
    return [p for pid, p in get_profiles().items() if pid != user_id]


def save_profile(profile: Profile) -> None:
    with _write_lock:
        get_profiles()[profile.id] = profile


def update_profile(user_id: str, changes: dict[str, Any]) -> Profile | None:
    """Apply field changes to a stored profile; ``None`` if the user is unknown."""
    with _write_lock:
        profile = get_profile(user_id)
        if profile is None:
            return None
        profile = profile.model_copy(update=changes)
        save_profile(profile)
        return profile


def add_group_to_user(user_id: str, group_id: str) -> None:
    with _write_lock:
        profile = get_profile(user_id)
        if profile is not None and group_id not in profile.groups:
            save_profile(profile.model_copy(update={"groups": [*profile.groups, group_id]}))


def add_friendship(user_id: str, friend_id: str) -> None:
    with _write_lock:
        for a, b in ((user_id, friend_id), (friend_id, user_id)):
            profile = get_profile(a)
            if profile is not None and b not in profile.friends:
                save_profile(profile.model_copy(update={"friends": [*profile.friends, b]}))


def remove_friendship(user_id: str, friend_id: str) -> None:
    with _write_lock:
        for a, b in ((user_id, friend_id), (friend_id, user_id)):
            profile = get_profile(a)
            if profile is not None and b in profile.friends:
                save_profile(
                    profile.model_copy(update={"friends": [f for f in profile.friends if f != b]})
                )


# ── Groups ───────────────────────────────────────────────────────────────


def get_groups() -> list[GroupCandidate]:
    _ensure_loaded()
    return list(_groups.values())


def get_group(group_id: str) -> GroupCandidate | None:
    _ensure_loaded()
    return _groups.get(group_id)


def save_group(group: GroupCandidate) -> None:
    _ensure_loaded()
    with _write_lock:
        _groups[group.id] = group
