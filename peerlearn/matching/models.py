from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, StrictBool, field_validator
from pydantic.alias_generators import to_camel


class SkillLevel(str, Enum):
    beginner = "beginner"
    intermediate = "intermediate"
    advanced = "advanced"
    all = "all"


class Project(BaseModel):
    name: str = ""
    technologies: list[str] = Field(default_factory=list)


class Profile(BaseModel):
    """Snapshot of a user as stored; read-only input to the ranking engines."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = Field(..., min_length=1)
    username: str = ""
    avatar: str | None = None
    bio: str | None = None
    interests: list[str] = Field(default_factory=list)
    strengths: list[str] = Field(default_factory=list)
    needs_help_with: list[str] = Field(default_factory=list)
    friends: list[str] = Field(default_factory=list)
    skill_level: SkillLevel | None = None
    projects: list[Project] = Field(default_factory=list)
    groups: list[str] = Field(default_factory=list)
    is_onboarded: bool = False


class ProfileUpdate(BaseModel):
    """Editable profile fields; fields left out of the request stay unchanged."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    bio: str | None = Field(default=None, max_length=500)
    avatar: str | None = None
    interests: list[str] | None = None
    strengths: list[str] | None = None
    needs_help_with: list[str] | None = None
    skill_level: SkillLevel | None = None
    projects: list[Project] | None = None

    @field_validator("interests", "strengths", "needs_help_with")
    @classmethod
    def _drop_blank_entries(cls, v: list[str] | None) -> list[str] | None:
        if v is None:
            return v
        return [item.strip() for item in v if item and item.strip()]

    def changes(self) -> dict:
        """Fields the client sent with a non-null value, as model attributes."""
        return {
            name: getattr(self, name)
            for name in self.model_fields_set
            if getattr(self, name) is not None
        }


class OnboardingRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    is_onboarded: StrictBool


class ProfileOut(BaseModel):
    """Public-safe projection of a matched candidate."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = Field(..., alias="_id")
    username: str
    avatar: str | None = None
    bio: str | None = None
    interests: list[str]
    strengths: list[str]
    needs_help_with: list[str]
    friends: list[str]

    @classmethod
    def from_profile(cls, profile: Profile) -> ProfileOut:
        return cls(
            id=profile.id,
            username=profile.username,
            avatar=profile.avatar,
            bio=profile.bio,
            interests=list(profile.interests),
            strengths=list(profile.strengths),
            needs_help_with=list(profile.needs_help_with),
            friends=list(profile.friends),
        )


class MatchResult(BaseModel):
    candidate: ProfileOut
    score: float
