"""
Pipeline stages: interaction weighting, affinity, quality, velocity,
personalization, ranking, and the orchestrator that chains them.
"""

from .affinity import aggregate_dimension, compute_user_affinity, raw_key_scores, softmax
from .badges import get_badges
from .interaction_weighting import (
    assign_recency_index,
    interaction_score,
    split_future_events,
    weight_interactions,
)
from .orchestrator import compute_affinity_for_user, score_for_user
from .personalization import dimension_affinity, personalized_score
from .quality import content_mean_score, mean_score
from .ranking import content_age_days, final_score, rank_scores, score_content
from .velocity import engagement_windows, velocity_boost, velocity_by_content

__all__ = [
    "aggregate_dimension",
    "assign_recency_index",
    "compute_affinity_for_user",
    "compute_user_affinity",
    "content_age_days",
    "content_mean_score",
    "dimension_affinity",
    "engagement_windows",
    "final_score",
    "get_badges",
    "interaction_score",
    "mean_score",
    "personalized_score",
    "rank_scores",
    "raw_key_scores",
    "score_content",
    "score_for_user",
    "softmax",
    "split_future_events",
    "velocity_boost",
    "velocity_by_content",
    "weight_interactions",
]
