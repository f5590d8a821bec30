from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..matching.models import SkillLevel


class GroupType(str, Enum):
    learning = "learning"
    project = "project"
    networking = "networking"
    general = "general"


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class GroupCandidate(_CamelModel):
    """Stored group record; read-only input to the ranking strategies."""

    id: str = Field(..., min_length=1)
    name: str
    description: str | None = None
    topics: list[str] = Field(default_factory=list)
    members: list[str] = Field(default_factory=list)
    invites: list[str] = Field(default_factory=list)
    admin: str | None = None
    is_public: bool = True
    skill_level: SkillLevel = SkillLevel.all
    group_type: GroupType = GroupType.general
    channel_id: str = ""
    avatar: str | None = None
    cover_image: str | None = None
    max_members: int | None = Field(default=None, ge=1)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class MemberPreview(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., alias="_id")
    username: str
    avatar: str | None = None


class RankedGroup(_CamelModel):
    id: str
    name: str
    description: str | None = None
    topics: list[str]
    avatar: str | None = None
    cover_image: str | None = None
    channel_id: str
    members: list[MemberPreview]
    member_count: int
    created_at: datetime
    is_popular: bool

    # recommended
    interest_score: int | None = None
    strength_score: int | None = None
    needs_score: int | None = None
    relevance_score: float | None = None
    # trending
    stream_activity_boost: int | None = None
    trend_score: int | None = None
    # for-you
    topic_match_count: int | None = None
    skill_level_fit: int | None = None
    learning_focus: int | None = None
    personal_score: int | None = None
    # search
    name_match: int | None = None
    desc_match: int | None = None
    topic_match: int | None = None
    match_score: int | None = None
    # with-friends
    friend_count: int | None = None


class JoinRequest(_CamelModel):
    group_id: str | None = None


class JoinResult(_CamelModel):
    success: bool
    message: str
    channel_id: str
