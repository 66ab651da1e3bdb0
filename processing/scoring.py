"""Cosine relevance scoring and top-K ranking of article records."""

from __future__ import annotations

from typing import Iterable, List, Sequence

import numpy as np

from models import ArticleRecord
from utils.exceptions import EmbeddingDimensionError


SCORE_DECIMALS = 2


def _as_vector(values: Sequence[float]) -> np.ndarray:
    return np.asarray(values, dtype=np.float64).reshape(-1)


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine similarity in [-1, 1]; 0.0 when either vector has zero magnitude.

    Raises:
        EmbeddingDimensionError: if the vectors differ in length.
    """
    vec_a = _as_vector(a)
    vec_b = _as_vector(b)
    if vec_a.shape != vec_b.shape:
        raise EmbeddingDimensionError(
            "Cannot compare embeddings of different dimension",
            left=int(vec_a.shape[0]),
            right=int(vec_b.shape[0]),
        )

    norm_a = float(np.linalg.norm(vec_a))
    norm_b = float(np.linalg.norm(vec_b))
    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0

    cosine = float(np.dot(vec_a, vec_b) / (norm_a * norm_b))
    # float error can push |cosine| slightly past 1
    return max(-1.0, min(1.0, cosine))


def relevance_score(a: Sequence[float], b: Sequence[float]) -> float:
    """Map cosine similarity onto a 0-100 percentage, rounded to two decimals.

    A zero-magnitude vector on either side scores 0 rather than the
    midpoint, so empty embeddings never outrank real matches.
    """
    vec_a = _as_vector(a)
    vec_b = _as_vector(b)
    cosine = cosine_similarity(vec_a, vec_b)
    if not np.any(vec_a) or not np.any(vec_b):
        return 0.0
    return round((cosine + 1.0) / 2.0 * 100.0, SCORE_DECIMALS)


def rank_articles(articles: Iterable[ArticleRecord], top_k: int) -> List[ArticleRecord]:
    """Sort scored articles by relevance (descending) and keep the first ``top_k``.

    Articles without a relevance score are excluded, never ranked as zero.
    The sort is stable, so ties keep their incoming order.
    """
    scored = [article for article in articles if article.relevance is not None]
    scored.sort(key=lambda article: article.relevance, reverse=True)
    return scored[: max(0, int(top_k))]
