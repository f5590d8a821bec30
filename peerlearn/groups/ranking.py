from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping

from ..matching.models import Profile
from .config import DEFAULT_DISCOVERY_CONFIG, DiscoveryConfig
from .errors import InvalidInput
from .models import GroupCandidate, GroupType, MemberPreview, RankedGroup

logger = logging.getLogger(__name__)

# (composite score, group, component fields for the response)
Scored = tuple[float, GroupCandidate, dict[str, Any]]


def _member_previews(
    group: GroupCandidate,
    profiles: Mapping[str, Profile] | None,
    limit: int,
) -> list[MemberPreview]:
    """First ``limit`` members that resolve to a known profile."""
    previews: list[MemberPreview] = []
    for member_id in group.members:
        if len(previews) >= limit:
            break
        if profiles is None:
            previews.append(MemberPreview(id=member_id, username=""))
            continue
        profile = profiles.get(member_id)
        if profile is not None:
            previews.append(
                MemberPreview(id=profile.id, username=profile.username, avatar=profile.avatar)
            )
    return previews


def _project(
    group: GroupCandidate,
    components: dict[str, Any],
    profiles: Mapping[str, Profile] | None,
    config: DiscoveryConfig,
) -> RankedGroup:
    member_count = len(group.members)
    return RankedGroup(
        id=group.id,
        name=group.name,
        description=group.description,
        topics=list(group.topics),
        avatar=group.avatar,
        cover_image=group.cover_image,
        channel_id=group.channel_id,
        members=_member_previews(group, profiles, config.member_preview_limit),
        member_count=member_count,
        created_at=group.created_at,
        is_popular=member_count >= config.popular_threshold,
        **components,
    )


def _top_k(
    scored: list[Scored],
    limit: int,
    profiles: Mapping[str, Profile] | None,
    config: DiscoveryConfig,
) -> list[RankedGroup]:
    # sorted() is stable, so equal scores keep pool order
    ranked = sorted(scored, key=lambda item: item[0], reverse=True)[:limit]
    return [_project(group, components, profiles, config) for _, group, components in ranked]


def _is_member(group: GroupCandidate, user_id: str) -> bool:
    return user_id in group.members


# ── Strategies ───────────────────────────────────────────────────────────


def rank_recommended(
    requester: Profile,
    groups: Iterable[GroupCandidate],
    profiles: Mapping[str, Profile] | None = None,
    config: DiscoveryConfig = DEFAULT_DISCOVERY_CONFIG,
) -> list[RankedGroup]:
    """Public groups the requester is not in, scored by topic overlap with their profile."""
    interests = set(requester.interests)
    strengths = set(requester.strengths)
    needs = set(requester.needs_help_with)

    scored: list[Scored] = []
    for group in groups:
        if not group.is_public or _is_member(group, requester.id):
            continue
        topics = set(group.topics)
        interest_score = len(topics & interests)
        strength_score = len(topics & strengths)
        needs_score = len(topics & needs)
        relevance = (
            interest_score
            + config.strength_weight * strength_score
            + config.needs_weight * needs_score
        )
        scored.append((relevance, group, {
            "interest_score": interest_score,
            "strength_score": strength_score,
            "needs_score": needs_score,
            "relevance_score": relevance,
        }))

    return _top_k(scored, config.recommended_limit, profiles, config)


def rank_trending(
    requester: Profile,
    groups: Iterable[GroupCandidate],
    active_channel_ids: Iterable[str] = (),
    profiles: Mapping[str, Profile] | None = None,
    config: DiscoveryConfig = DEFAULT_DISCOVERY_CONFIG,
) -> list[RankedGroup]:
    """Public groups ranked by size, boosted when their chat channel is active."""
    active = set(active_channel_ids)

    scored: list[Scored] = []
    for group in groups:
        is_active = group.channel_id in active
        if not group.is_public:
            continue
        # members still see their own group while its channel is active
        if not is_active and _is_member(group, requester.id):
            continue
        boost = config.stream_activity_boost if is_active else 0
        trend_score = len(group.members) + boost
        scored.append((trend_score, group, {
            "stream_activity_boost": boost,
            "trend_score": trend_score,
        }))

    return _top_k(scored, config.trending_limit, profiles, config)


def rank_for_you(
    requester: Profile,
    groups: Iterable[GroupCandidate],
    profiles: Mapping[str, Profile] | None = None,
    config: DiscoveryConfig = DEFAULT_DISCOVERY_CONFIG,
) -> list[RankedGroup]:
    """
    Groups covering what the requester wants to learn or is building with.

    Relevant topics are ``needs_help_with`` plus the technologies of every
    listed project. Groups without a single relevant topic are excluded
    outright, whatever their skill level or type.
    """
    relevant = set(requester.needs_help_with)
    for project in requester.projects:
        relevant.update(project.technologies)

    scored: list[Scored] = []
    for group in groups:
        if not group.is_public or _is_member(group, requester.id):
            continue
        topic_match_count = len(set(group.topics) & relevant)
        if topic_match_count == 0:
            continue
        skill_fit = (
            config.skill_level_bonus
            if requester.skill_level is not None and group.skill_level == requester.skill_level
            else 0
        )
        learning_focus = config.learning_focus_bonus if group.group_type == GroupType.learning else 0
        personal_score = topic_match_count + skill_fit + learning_focus
        scored.append((personal_score, group, {
            "topic_match_count": topic_match_count,
            "skill_level_fit": skill_fit,
            "learning_focus": learning_focus,
            "personal_score": personal_score,
        }))

    return _top_k(scored, config.for_you_limit, profiles, config)


def _contains(text: str | None, needle: str) -> bool:
    return bool(text) and needle in text.casefold()


def rank_search(
    query: str | None,
    groups: Iterable[GroupCandidate],
    profiles: Mapping[str, Profile] | None = None,
    config: DiscoveryConfig = DEFAULT_DISCOVERY_CONFIG,
) -> list[RankedGroup]:
    """Case-insensitive literal search over group name, description and topics."""
    if not query or not query.strip():
        raise InvalidInput("Search query is required")
    needle = query.strip().casefold()

    scored: list[Scored] = []
    for group in groups:
        if not group.is_public:
            continue
        name_hit = _contains(group.name, needle)
        desc_hit = _contains(group.description, needle)
        topic_hits = sum(1 for topic in group.topics if _contains(topic, needle))
        if not (name_hit or desc_hit or topic_hits):
            continue
        name_match = config.name_match_weight if name_hit else 0
        desc_match = config.description_match_weight if desc_hit else 0
        match_score = name_match + desc_match + config.topic_match_weight * topic_hits
        scored.append((match_score, group, {
            "name_match": name_match,
            "desc_match": desc_match,
            "topic_match": topic_hits,
            "match_score": match_score,
        }))

    return _top_k(scored, config.search_limit, profiles, config)


def rank_with_friends(
    requester: Profile,
    groups: Iterable[GroupCandidate],
    profiles: Mapping[str, Profile] | None = None,
    config: DiscoveryConfig = DEFAULT_DISCOVERY_CONFIG,
) -> list[RankedGroup]:
    """Public groups the requester's friends belong to, most friends first."""
    friends = set(requester.friends)
    if not friends:
        return []

    scored: list[Scored] = []
    for group in groups:
        if not group.is_public or _is_member(group, requester.id):
            continue
        friend_count = len(set(group.members) & friends)
        if friend_count == 0:
            continue
        scored.append((friend_count, group, {"friend_count": friend_count}))

    return _top_k(scored, config.with_friends_limit, profiles, config)
