from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class MatchConfig:
    threshold: float = 0.3
    overlap_bonus: float = 0.5
    mutual_friend_bonus: float = 0.5


DEFAULT_MATCH_CONFIG = MatchConfig()
