from __future__ import annotations

import logging
from typing import Callable, Iterable

from ..embeddings.similarity import text_similarity
from .config import DEFAULT_MATCH_CONFIG, MatchConfig
from .models import MatchResult, Profile, ProfileOut

logger = logging.getLogger(__name__)

SimilarityFn = Callable[[str, str], float]


def _join(values: Iterable[str] | None) -> str:
    """Lower-cased, space-separated form of a profile string collection."""
    return " ".join(v for v in (values or []) if v).lower()


def _overlaps(a: str, b: str) -> bool:
    return bool(a and b) and (a in b or b in a)


def _score_candidate(
    requester: Profile,
    candidate: Profile,
    similarity: SimilarityFn,
    config: MatchConfig,
) -> float:
    """Additive score for a single candidate; signals are not normalised."""
    user_bio = (requester.bio or "").lower()
    match_bio = (candidate.bio or "").lower()

    user_interests = _join(requester.interests)
    match_interests = _join(candidate.interests)

    user_strengths = _join(requester.strengths)
    match_strengths = _join(candidate.strengths)

    user_needs = _join(requester.needs_help_with)
    match_needs = _join(candidate.needs_help_with)

    # --- Semantic similarity ---
    score = similarity(user_bio, match_bio)
    score += similarity(user_interests, match_interests)
    score += similarity(user_strengths, match_needs)
    score += similarity(match_strengths, user_needs)

    # --- Direct text overlap, one bonus per direction ---
    if _overlaps(user_strengths, match_needs):
        score += config.overlap_bonus
    if _overlaps(match_strengths, user_needs):
        score += config.overlap_bonus

    # --- Mutual friends ---
    if set(requester.friends) & set(candidate.friends):
        score += config.mutual_friend_bonus

    return score


def find_matches(
    requester: Profile,
    pool: Iterable[Profile],
    similarity: SimilarityFn | None = None,
    config: MatchConfig = DEFAULT_MATCH_CONFIG,
) -> list[MatchResult]:
    """
    Rank peer candidates for ``requester``, best first.

    ``pool`` must already exclude the requester. Candidates scoring below
    ``config.threshold`` are dropped; equal scores keep pool order.
    """
    similarity = similarity or text_similarity

    scored: list[tuple[float, Profile]] = []
    total = 0
    for candidate in pool:
        total += 1
        score = _score_candidate(requester, candidate, similarity, config)
        if score >= config.threshold:
            scored.append((score, candidate))

    # sorted() is stable, also with reverse=True
    scored = sorted(scored, key=lambda item: item[0], reverse=True)

    logger.info(
        "Peer matching for %s: %d of %d candidates above %.2f",
        requester.id, len(scored), total, config.threshold,
    )
    return [
        MatchResult(candidate=ProfileOut.from_profile(candidate), score=round(score, 2))
        for score, candidate in scored
    ]
