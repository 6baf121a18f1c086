"""Data models for the content-scoring pipeline."""

from .config import DEFAULT_CONFIG, DIMENSIONS, ScoringConfig, resolve_config
from .content import ContentItem, ensure_content
from .interaction import Action, InteractionEvent, as_utc, ensure_interactions
from .scoring import (
    AffinitySnapshot,
    AffinityWeight,
    ContentScore,
    ScoringResult,
    UserAffinity,
    WeightedInteraction,
)

__all__ = [
    "Action",
    "AffinitySnapshot",
    "AffinityWeight",
    "ContentItem",
    "ContentScore",
    "DEFAULT_CONFIG",
    "DIMENSIONS",
    "InteractionEvent",
    "ScoringConfig",
    "ScoringResult",
    "UserAffinity",
    "WeightedInteraction",
    "as_utc",
    "ensure_content",
    "ensure_interactions",
    "resolve_config",
]
