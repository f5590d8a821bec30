from __future__ import annotations

import logging
from datetime import datetime, timezone

from stream_chat import StreamChat

from .config import DEFAULT_STREAM_CONFIG, StreamConfig

logger = logging.getLogger(__name__)


def _client(config: StreamConfig) -> StreamChat | None:
    if not config.enabled or not config.api_key or not config.api_secret:
        return None
    return StreamChat(api_key=config.api_key, api_secret=config.api_secret, timeout=config.timeout)


def get_active_channel_ids(config: StreamConfig = DEFAULT_STREAM_CONFIG) -> set[str]:
    """
    Ids of the most recently active group channels.

    Returns an empty set when Stream is not configured or the query fails;
    trending then falls back to member counts alone.
    """
    client = _client(config)
    if client is None:
        return set()

    try:
        response = client.query_channels(
            {"type": config.channel_type},
            [{"field": "last_message_at", "direction": -1}],
            limit=config.recent_channel_limit,
            state=False,
            message_limit=0,
        )
    except Exception:
        logger.warning("Could not query active channels from Stream", exc_info=True)
        return set()

    active: set[str] = set()
    for entry in response.get("channels", []):
        channel_id = (entry.get("channel") or {}).get("id") or ""
        if config.group_channel_marker in channel_id:
            active.add(channel_id)
    return active


def add_member(
    channel_id: str,
    user_id: str,
    username: str,
    config: StreamConfig = DEFAULT_STREAM_CONFIG,
) -> bool:
    """
    Add ``user_id`` to a group channel and post a welcome message.

    Best effort: failures are logged and reported as ``False``, never raised.
    """
    client = _client(config)
    if client is None or not channel_id:
        return False

    try:
        channel = client.channel(config.channel_type, channel_id)
        channel.add_members(
            [user_id],
            {"text": f"{username} joined the group", "user_id": user_id},
        )
        channel.send_message(
            {
                "text": f"Welcome to the group, {username}!",
                "pinned": True,
                "pinned_at": datetime.now(timezone.utc).isoformat(),
            },
            config.system_user_id,
        )
        return True
    except Exception:
        logger.warning(
            "Failed to add user %s to Stream channel %s", user_id, channel_id, exc_info=True,
        )
        return False


def upsert_user(
    user_id: str,
    username: str,
    avatar: str | None = None,
    config: StreamConfig = DEFAULT_STREAM_CONFIG,
) -> bool:
    """Create or refresh the chat user for a profile. Best effort, like ``add_member``."""
    client = _client(config)
    if client is None:
        return False

    try:
        client.upsert_user({"id": user_id, "name": username, "image": avatar or ""})
        return True
    except Exception:
        logger.warning("Failed to upsert Stream user %s", user_id, exc_info=True)
        return False
