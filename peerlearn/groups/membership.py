from __future__ import annotations

import logging
from typing import Callable

from ..messaging.stream_client import add_member
from ..storage import data_store
from .errors import (
    CapacityExceeded,
    DuplicateMember,
    GroupNotFound,
    InvalidInput,
    PrivateGroupForbidden,
)
from .models import GroupCandidate, JoinResult

logger = logging.getLogger(__name__)

AddMemberFn = Callable[[str, str, str], bool]


def check_can_join(group: GroupCandidate, user_id: str) -> None:
    """Raise the first business rule ``user_id`` would break by joining ``group``."""
    if user_id in group.members:
        raise DuplicateMember("You are already a member of this group")
    if not group.is_public and user_id not in group.invites:
        raise PrivateGroupForbidden("This is a private group. You need an invitation to join.")
    if group.max_members is not None and len(group.members) >= group.max_members:
        raise CapacityExceeded("This group is already at maximum capacity.")


def join_group(
    group_id: str | None,
    user_id: str,
    chat_add_member: AddMemberFn | None = None,
) -> JoinResult:
    """
    Add ``user_id`` to a group.

    Validation failures propagate unchanged. The chat-channel update runs
    after the membership is stored and cannot fail the join.
    """
    if not group_id:
        raise InvalidInput("Group ID is required")
    if not user_id:
        raise InvalidInput("User ID is required")

    with data_store.write_lock():
        group = data_store.get_group(group_id)
        if group is None:
            raise GroupNotFound(f"Group {group_id} not found")

        check_can_join(group, user_id)

        group = group.model_copy(update={
            "members": [*group.members, user_id],
            "invites": [i for i in group.invites if i != user_id],
        })
        data_store.save_group(group)
        data_store.add_group_to_user(user_id, group.id)

    logger.info("User %s joined group %s", user_id, group.id)

    profile = data_store.get_profile(user_id)
    username = profile.username if profile is not None else user_id
    chat_add_member = chat_add_member or add_member
    try:
        if not chat_add_member(group.channel_id, user_id, username):
            logger.info("Chat channel %s was not updated for user %s", group.channel_id, user_id)
    except Exception:
        logger.warning(
            "Chat membership update failed for group %s, keeping the join", group.id, exc_info=True,
        )

    return JoinResult(
        success=True,
        message="Successfully joined the group",
        channel_id=group.channel_id,
    )
