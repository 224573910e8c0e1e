"""Relevance math for SectionHound - cosine similarity and result-set confidence metrics.

The metrics are relative to one query's result set:

- ``relevance_score``: ``round(similarity * 100)`` clamped to [0, 100]
- ``normalized_score``: min-max rescaled similarity, 0 for the weakest result and
  100 for the strongest (100 for every result when all are equal)
- ``standard_deviation``: population standard deviation of the result set
"""

import math
from collections.abc import Sequence
from typing import Iterable, List, Tuple, TypeVar

import numpy as np

from core.models import RelevanceMetrics, RelevanceRatedEntry

T = TypeVar("T")


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine similarity of two vectors.

    Returns 0.0 when either vector has zero magnitude.

    Raises:
        ValueError: If the vectors differ in length
    """
    a_array = np.asarray(a, dtype=np.float64)
    b_array = np.asarray(b, dtype=np.float64)
    if a_array.shape != b_array.shape:
        raise ValueError(f"Vector dimensions differ: {len(a)} != {len(b)}")

    magnitude = np.linalg.norm(a_array) * np.linalg.norm(b_array)
    if magnitude == 0.0:
        return 0.0

    # Clamp float drift
    return float(np.clip(np.dot(a_array, b_array) / magnitude, -1.0, 1.0))


def mean(values: Sequence[float]) -> float:
    if not values:
        return 0.0
    return math.fsum(values) / len(values)


def population_std(values: Sequence[float]) -> float:
    """Population standard deviation (divides by n), 0.0 for fewer than two values."""
    if len(values) < 2:
        return 0.0
    avg = mean(values)
    return math.sqrt(math.fsum((v - avg) ** 2 for v in values) / len(values))


def round_half_away_from_zero(value: float) -> int:
    """Round like ``MidpointRounding.AwayFromZero``: 0.5 -> 1, -0.5 -> -1."""
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def relevance_score(similarity: float) -> int:
    return max(0, min(100, round_half_away_from_zero(similarity * 100.0)))


def min_max_normalize(values: Sequence[float]) -> List[float]:
    """Rescale values to [0, 100]; all-equal input maps to 100 everywhere."""
    if not values:
        return []
    low = min(values)
    high = max(values)
    spread = high - low
    if spread == 0.0:
        return [100.0 for _ in values]
    return [(v - low) / spread * 100.0 for v in values]


def calculate_metrics(similarities: Sequence[float]) -> List[RelevanceMetrics]:
    """Compute relevance metrics for each similarity of one result set, in order."""
    normalized = min_max_normalize(similarities)
    spread = population_std(similarities)
    return [
        RelevanceMetrics(
            cosine_similarity=similarity,
            relevance_score=relevance_score(similarity),
            normalized_score=min(100.0, max(0.0, score)),
            standard_deviation=spread,
        )
        for similarity, score in zip(similarities, normalized)
    ]


def rate(items: Iterable[Tuple[T, float]]) -> List[RelevanceRatedEntry[T]]:
    """Attach relevance metrics to ``(item, similarity)`` pairs, keeping their order."""
    pairs = list(items)
    metrics = calculate_metrics([similarity for _, similarity in pairs])
    return [RelevanceRatedEntry(item=item, relevance=m) for (item, _), m in zip(pairs, metrics)]
