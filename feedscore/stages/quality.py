"""
Content quality: bounded mean score from raw engagement counters.
"""

from ..models.config import DEFAULT_CONFIG, ScoringConfig
from ..models.content import ContentItem


def mean_score(
    like_count: int,
    comment_count: int,
    dislike_count: int,
    mean_score_weight: float = 0.4,
) -> float:
    """
    Share of positive engagement scaled by mean_score_weight.

    0 when the item has no engagement at all.
    """
    total = like_count + dislike_count + comment_count
    if total == 0:
        return 0.0
    return mean_score_weight * (like_count + comment_count) / total


def content_mean_score(item: ContentItem, config: ScoringConfig = DEFAULT_CONFIG) -> float:
    return mean_score(
        item.like_count,
        item.comment_count,
        item.dislike_count,
        config.mean_score_weight,
    )
