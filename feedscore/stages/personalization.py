"""
Personalization: blend content quality with the user's affinity weights.

weighted_score = min((mean_score + 1) * (1 + sum_k f_k * (1 - exp(-w_k))), max_weighted_score)

w_k is the sum of the user's weights over the item's keys in dimension k.
The saturating 1 - exp(-w_k) term gives diminishing returns as w_k grows.
"""

from typing import Dict

from ..models.config import DEFAULT_CONFIG, DIMENSIONS, ScoringConfig
from ..models.content import ContentItem
from ..models.scoring import UserAffinity
from ..utils.scores import saturate


def dimension_affinity(item: ContentItem, affinity: UserAffinity) -> Dict[str, float]:
    """w_k per dimension: the user's weights summed over the item's keys."""
    return {
        dimension: affinity.weight_sum(dimension, item.keys_for(dimension))
        for dimension in DIMENSIONS
    }


def personalized_score(
    mean_score: float,
    item: ContentItem,
    affinity: UserAffinity,
    config: ScoringConfig = DEFAULT_CONFIG,
) -> float:
    """Quality lifted by affinity, capped at max_weighted_score."""
    factors = config.dimension_factors
    lift = sum(
        factors[dimension] * saturate(w)
        for dimension, w in dimension_affinity(item, affinity).items()
    )
    return min((mean_score + 1.0) * (1.0 + lift), config.max_weighted_score)
