"""
FeedScore: personalized content scoring

Single entry point for the feedscore package:
- models/: ScoringConfig, InteractionEvent, ContentItem, ContentScore, ScoringResult
- stages/: weighting, affinity, quality, velocity, personalization, ranking, orchestrator
- services/: ContentDataSource implementations and the AffinityCache
- runner: ScoringRunner wiring runtime config to the pipeline
"""

from .errors import ConfigError, DataSourceError, FeedScoreError
from .models import (
    DEFAULT_CONFIG,
    AffinitySnapshot,
    AffinityWeight,
    ContentItem,
    ContentScore,
    InteractionEvent,
    ScoringConfig,
    ScoringResult,
    UserAffinity,
)
from .runner import ScoringRunner, create_data_source
from .services import AffinityCache, ContentDataSource, InMemoryDataSource, JsonDataSource
from .stages import compute_affinity_for_user, get_badges, rank_scores, score_for_user

__all__ = [
    "AffinityCache",
    "AffinitySnapshot",
    "AffinityWeight",
    "ConfigError",
    "ContentDataSource",
    "ContentItem",
    "ContentScore",
    "DEFAULT_CONFIG",
    "DataSourceError",
    "FeedScoreError",
    "InMemoryDataSource",
    "InteractionEvent",
    "JsonDataSource",
    "ScoringConfig",
    "ScoringResult",
    "ScoringRunner",
    "UserAffinity",
    "compute_affinity_for_user",
    "create_data_source",
    "get_badges",
    "rank_scores",
    "score_for_user",
]
