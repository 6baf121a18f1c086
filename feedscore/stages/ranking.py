"""
Final scoring and ranking.

final_score = weighted_score * exp(-ln2 * age_days / 30) * (1 + velocity_strength * velocity_boost)

Builds a ContentScore per candidate, then sorts by final_score descending with
content_id ascending as the tie-breaker.
"""

import logging
from datetime import datetime
from typing import List, Optional, Tuple, Union

from ..models.config import DEFAULT_CONFIG, ScoringConfig
from ..models.content import ContentItem
from ..models.scoring import ContentScore, UserAffinity
from ..utils.scores import days_between, half_life_decay
from .badges import get_badges
from .personalization import personalized_score
from .quality import content_mean_score

logger = logging.getLogger(__name__)


def content_age_days(item: ContentItem, now: datetime) -> float:
    """Days since creation; content created after now counts as age 0."""
    age = days_between(item.created_at, now)
    if age < 0:
        logger.warning(
            "[data_quality] CONTENT_CREATED_IN_FUTURE content_id=%s created_at=%s now=%s",
            item.content_id, item.created_at.isoformat(), now.isoformat(),
        )
        return 0.0
    return age


def final_score(
    weighted_score: float,
    age_days: float,
    velocity_boost: float,
    config: ScoringConfig = DEFAULT_CONFIG,
) -> float:
    """Personalized score times freshness decay times velocity multiplier."""
    freshness = half_life_decay(age_days, config.content_half_life_days)
    return weighted_score * freshness * (1.0 + config.velocity_strength * velocity_boost)


def score_content(
    item: ContentItem,
    affinity: UserAffinity,
    velocity_boost: float,
    now: datetime,
    config: ScoringConfig = DEFAULT_CONFIG,
) -> ContentScore:
    """Run quality, personalization and final scoring for one (user, content) pair."""
    mean = content_mean_score(item, config)
    weighted = personalized_score(mean, item, affinity, config)
    age = content_age_days(item, now)
    return ContentScore(
        content_id=item.content_id,
        title=item.title,
        mean_score=mean,
        weighted_score=weighted,
        age_days=age,
        velocity_boost=velocity_boost,
        final_score=final_score(weighted, age, velocity_boost, config),
        badges=tuple(get_badges(mean, weighted, age, velocity_boost, config)),
    )


def content_id_sort_key(content_id: str) -> Tuple[int, Union[int, str]]:
    """Decimal ids compare numerically ("3" < "10"); others lexically, after numeric ids."""
    if content_id.isdecimal():
        return (0, int(content_id))
    return (1, content_id)


def rank_scores(
    scores: List[ContentScore],
    top_k: Optional[int] = None,
) -> List[ContentScore]:
    """Sort by final_score descending, ties by content_id ascending; optionally truncate."""
    ranked = sorted(
        scores,
        key=lambda s: (-s.final_score, content_id_sort_key(s.content_id)),
    )
    if top_k is not None:
        ranked = ranked[: max(0, top_k)]
    return ranked
