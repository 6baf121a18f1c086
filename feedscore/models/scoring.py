"""
Scoring models: intermediate and output records of one scoring run.

Contains:
- WeightedInteraction: one decayed interaction score joined with its content keys
- AffinityWeight / UserAffinity: per-user normalized preference per dimension key
- AffinitySnapshot: UserAffinity plus the rejected / missing ids found while building it
- ContentScore: the per-item scores produced for one (user, content) pair
- ScoringResult: the ranked output plus partial-failure reporting
"""

from datetime import datetime
from typing import Dict, FrozenSet, Iterable, List, Tuple

from pydantic import BaseModel, ConfigDict

from .interaction import InteractionEvent


class WeightedInteraction(BaseModel):
    """An interaction with its recency index, decayed score, and content keys."""

    model_config = ConfigDict(frozen=True)

    event: InteractionEvent
    recency_index: int
    age_days: float
    score: float
    categories: FrozenSet[str] = frozenset()
    genres: FrozenSet[str] = frozenset()
    tags: FrozenSet[str] = frozenset()

    def keys_for(self, dimension: str) -> FrozenSet[str]:
        return {
            "category": self.categories,
            "genre": self.genres,
            "tag": self.tags,
        }[dimension]


class AffinityWeight(BaseModel):
    """One user's softmax weight for a single key of a dimension."""

    model_config = ConfigDict(frozen=True)

    user_id: str
    dimension: str
    key: str
    weight: float


class UserAffinity(BaseModel):
    """
    All affinity weights of one user, indexed as dimension -> key -> weight.

    A dimension with no qualifying interactions is absent (or empty).
    """

    model_config = ConfigDict(frozen=True)

    user_id: str
    weights: Dict[str, Dict[str, float]] = {}

    @classmethod
    def from_weights(cls, user_id: str, records: Iterable[AffinityWeight]) -> "UserAffinity":
        weights: Dict[str, Dict[str, float]] = {}
        for rec in records:
            weights.setdefault(rec.dimension, {})[rec.key] = rec.weight
        return cls(user_id=user_id, weights=weights)

    def weight(self, dimension: str, key: str) -> float:
        return self.weights.get(dimension, {}).get(key, 0.0)

    def weight_sum(self, dimension: str, keys: Iterable[str]) -> float:
        """Sum of this user's weights over keys; 0 when nothing matches."""
        dim_weights = self.weights.get(dimension)
        if not dim_weights:
            return 0.0
        return sum(dim_weights.get(k, 0.0) for k in keys)

    def records(self) -> List[AffinityWeight]:
        """Flatten back to AffinityWeight records, ordered by dimension then key."""
        return [
            AffinityWeight(user_id=self.user_id, dimension=dim, key=key, weight=w)
            for dim in sorted(self.weights)
            for key, w in sorted(self.weights[dim].items())
        ]


class AffinitySnapshot(BaseModel):
    """
    Affinity of one user together with the data-quality findings of computing it.

    Cached as one unit so a cache hit reports the same rejected and missing ids
    as the run that filled the entry.
    """

    model_config = ConfigDict(frozen=True)

    affinity: UserAffinity
    rejected_event_ids: Tuple[str, ...] = ()
    missing_content_ids: Tuple[str, ...] = ()


class ContentScore(BaseModel):
    """A content item with all its scoring components for one user."""

    model_config = ConfigDict(frozen=True)

    content_id: str
    title: str = ""
    mean_score: float
    weighted_score: float
    age_days: float
    velocity_boost: float
    final_score: float
    badges: Tuple[str, ...] = ()

    def to_record(self) -> Dict[str, object]:
        """Downstream output record."""
        return {
            "content_id": self.content_id,
            "title": self.title,
            "mean_score": self.mean_score,
            "weighted_score": self.weighted_score,
            "age_days": self.age_days,
            "final_score": self.final_score,
        }


class ScoringResult(BaseModel):
    """
    Ranked output of one scoring run for a (user_id, now) pair.

    missing_content_ids: requested or interacted content ids with no metadata.
    rejected_event_ids: interactions excluded as malformed (occurred after now).
    cancelled / abandoned_count: set when the run was cancelled mid-way; ranked
    then holds only the items scored before cancellation.
    """

    user_id: str
    now: datetime
    ranked: List[ContentScore] = []
    missing_content_ids: List[str] = []
    rejected_event_ids: List[str] = []
    cancelled: bool = False
    abandoned_count: int = 0

    def records(self) -> List[Dict[str, object]]:
        return [score.to_record() for score in self.ranked]

    def to_json(self) -> str:
        return self.model_dump_json()
