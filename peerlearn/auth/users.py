from __future__ import annotations

from typing import Any

import bcrypt

_users: dict[str, dict[str, Any]] = {}


def _hash_password(plain: str) -> str:
    return bcrypt.hashpw(plain.encode(), bcrypt.gensalt()).decode()


def _verify_password(plain: str, hashed: str) -> bool:
    return bcrypt.checkpw(plain.encode(), hashed.encode())


def register_user(username: str, password: str, user_id: str | None, role: str = "user") -> None:
    _users[username] = {
        "password_hash": _hash_password(password),
        "role": role,
        "user_id": user_id,
    }


def _seed_users() -> None:
    """Pre-seed demo accounts for the profiles in the bundled seed data."""
    register_user("alice", "alice123", "u-alice")
    register_user("bob", "bob123", "u-bob")
    register_user("carol", "carol123", "u-carol")
    register_user("admin", "admin123", None, role="admin")


def authenticate(username: str, password: str) -> dict[str, Any] | None:
    """Verify credentials. Returns ``{username, role, user_id}`` or ``None``."""
    record = _users.get(username)
    if record and _verify_password(password, record["password_hash"]):
        return {"username": username, "role": record["role"], "user_id": record["user_id"]}
    return None


_seed_users()
