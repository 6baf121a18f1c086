"""
Interaction weighting: one user's raw interactions → decayed per-event scores.

score = action_weight * exp(-ln2 * i / 20) * exp(-ln2 * d / 45)

where i is the recency index (0 = most recent) and d is days since the event.
Each weighted event is joined with its content item's categories, genres and tags.
"""

import logging
from datetime import datetime
from typing import Dict, List, Tuple

from ..models.config import DEFAULT_CONFIG, ScoringConfig
from ..models.content import ContentItem
from ..models.interaction import InteractionEvent
from ..models.scoring import WeightedInteraction
from ..utils.scores import days_between, half_life_decay

logger = logging.getLogger(__name__)


def split_future_events(
    events: List[InteractionEvent],
    now: datetime,
) -> Tuple[List[InteractionEvent], List[InteractionEvent]]:
    """
    Separate events that occurred after now (malformed) from valid ones.

    Returns:
        valid: events with occurred_at <= now, in input order.
        rejected: events with occurred_at > now.
    """
    valid: List[InteractionEvent] = []
    rejected: List[InteractionEvent] = []
    for ev in events:
        if ev.occurred_at > now:
            logger.warning(
                "[data_quality] INTERACTION_IN_FUTURE event_id=%s user_id=%s occurred_at=%s now=%s",
                ev.event_id, ev.user_id, ev.occurred_at.isoformat(), now.isoformat(),
            )
            rejected.append(ev)
        else:
            valid.append(ev)
    return valid, rejected


def assign_recency_index(
    events: List[InteractionEvent],
) -> List[Tuple[InteractionEvent, int]]:
    """
    Sort newest first and enumerate: (event, recency_index) pairs.

    Ties on occurred_at are broken by event_id so the order is total and stable.
    """
    ordered = sorted(events, key=lambda e: (e.occurred_at, e.event_id), reverse=True)
    return [(ev, i) for i, ev in enumerate(ordered)]


def interaction_score(
    action: str,
    recency_index: int,
    age_days: float,
    config: ScoringConfig = DEFAULT_CONFIG,
) -> float:
    """Signed action weight decayed by recency index and by age in days."""
    return (
        config.action_weights[action]
        * half_life_decay(recency_index, config.recency_half_life)
        * half_life_decay(age_days, config.interaction_half_life_days)
    )


def weight_interactions(
    events: List[InteractionEvent],
    content_by_id: Dict[str, ContentItem],
    now: datetime,
    config: ScoringConfig = DEFAULT_CONFIG,
) -> Tuple[List[WeightedInteraction], List[str], List[str]]:
    """
    Weight one user's interactions and join them with content metadata.

    Future-dated events are rejected before recency indexes are assigned.
    Events whose content has no metadata keep their recency index slot but are
    left out of the output, and their content ids are reported.

    Returns:
        weighted: WeightedInteraction per joinable event, most recent first.
        rejected_event_ids: ids of events that occurred after now.
        missing_content_ids: sorted unique content ids without metadata.
    """
    if not events:
        return [], [], []

    # --- 1. Reject malformed events ---
    valid, rejected = split_future_events(events, now)

    # --- 2. Recency index over the remaining events ---
    indexed = assign_recency_index(valid)

    # --- 3. Score and join with content keys ---
    weighted: List[WeightedInteraction] = []
    missing = set()
    for ev, i in indexed:
        item = content_by_id.get(ev.content_id)
        if item is None:
            missing.add(ev.content_id)
            continue
        age = days_between(ev.occurred_at, now)
        weighted.append(
            WeightedInteraction(
                event=ev,
                recency_index=i,
                age_days=age,
                score=interaction_score(ev.action, i, age, config),
                categories=item.categories,
                genres=item.genres,
                tags=item.tags,
            )
        )

    if missing:
        logger.warning(
            "[data_quality] CONTENT_METADATA_MISSING source=interactions count=%s content_ids=%s",
            len(missing), sorted(missing),
        )

    return weighted, [ev.event_id for ev in rejected], sorted(missing)
