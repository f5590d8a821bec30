from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class DiscoveryConfig:
    # recommended
    strength_weight: float = 0.8
    needs_weight: float = 1.2
    recommended_limit: int = 20
    # trending
    stream_activity_boost: int = 10
    trending_limit: int = 12
    # for-you
    skill_level_bonus: int = 3
    learning_focus_bonus: int = 2
    for_you_limit: int = 12
    # search
    name_match_weight: int = 3
    description_match_weight: int = 1
    topic_match_weight: int = 2
    search_limit: int = 20
    # with-friends
    with_friends_limit: int = 12
    # projection
    member_preview_limit: int = 10
    popular_threshold: int = 10


DEFAULT_DISCOVERY_CONFIG = DiscoveryConfig()
