from __future__ import annotations

import logging
from typing import Sequence

import numpy as np
from sklearn.metrics.pairwise import cosine_similarity as _pairwise_cosine

from .config import DEFAULT_EMBEDDING_CONFIG, EmbeddingConfig
from .encoder import encode_batch

logger = logging.getLogger(__name__)


def embed(texts: Sequence[str], config: EmbeddingConfig = DEFAULT_EMBEDDING_CONFIG) -> np.ndarray:
    return encode_batch(texts, config)


def cosine_similarity(a: Sequence[float] | np.ndarray, b: Sequence[float] | np.ndarray) -> float:
    """Cosine of the angle between two vectors; 0.0 when either has zero norm."""
    vec_a = np.asarray(a, dtype=float).reshape(1, -1)
    vec_b = np.asarray(b, dtype=float).reshape(1, -1)
    if not np.linalg.norm(vec_a) or not np.linalg.norm(vec_b):
        return 0.0
    return float(_pairwise_cosine(vec_a, vec_b)[0, 0])


def text_similarity(
    text1: str | None,
    text2: str | None,
    config: EmbeddingConfig = DEFAULT_EMBEDDING_CONFIG,
) -> float:
    """
    Semantic similarity of two texts.

    Blank input short-circuits to 0.0 without touching the model. Any
    failure below (model load, encode, timeout) is logged and scored 0.0.
    """
    if not text1 or not text1.strip() or not text2 or not text2.strip():
        return 0.0

    try:
        vectors = embed([text1, text2], config)
        return cosine_similarity(vectors[0], vectors[1])
    except Exception:
        logger.warning("Similarity computation failed, scoring signal as 0", exc_info=True)
        return 0.0
