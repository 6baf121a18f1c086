"""
Score-based badges for content (e.g. trending, fresh).

Used by the scoring result to surface at most two badges per item.
"""

from typing import List

from ..models.config import DEFAULT_CONFIG, ScoringConfig


def get_badges(
    mean_score: float,
    weighted_score: float,
    age_days: float,
    velocity_boost: float,
    config: ScoringConfig = DEFAULT_CONFIG,
) -> List[str]:
    """
    Score-based badges for one scored item (max 2).

    Priority order: trending, for_you, fresh, crowd_favorite.
    """
    badges = []
    if velocity_boost >= config.trending_badge_threshold:
        badges.append("trending")
    if weighted_score > mean_score + 1.0:
        badges.append("for_you")
    if age_days <= config.fresh_badge_max_age_days:
        badges.append("fresh")
    if mean_score >= config.crowd_favorite_min_mean_score:
        badges.append("crowd_favorite")
    return badges[:2]
