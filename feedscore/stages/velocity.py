"""
Velocity detection: recent vs. baseline engagement for a content item.

velocity_boost = tanh((s_recent - s_baseline / 4) / (|s_baseline| + 1))

s_recent and s_baseline are engagement sums across all users over the last 7
and last 30 days. The windows overlap: the recent window is part of the baseline.
"""

import logging
import math
from datetime import datetime
from typing import Dict, Iterable, List, Tuple

from ..models.config import DEFAULT_CONFIG, ScoringConfig
from ..models.interaction import InteractionEvent
from ..utils.scores import days_between, half_life_decay

logger = logging.getLogger(__name__)


def velocity_boost(s_recent: float, s_baseline: float) -> float:
    """
    Bounded trend signal in [-1, 1].

    The +1 in the denominator keeps a zero baseline from dividing by zero;
    velocity_boost(0, 0) == 0.
    """
    return math.tanh((s_recent - s_baseline / 4.0) / (abs(s_baseline) + 1.0))


def engagement_windows(
    events: Iterable[InteractionEvent],
    now: datetime,
    config: ScoringConfig = DEFAULT_CONFIG,
) -> Dict[str, Tuple[float, float]]:
    """
    Per content item: (s_recent, s_baseline).

    Each event counts action_weight * exp(-ln2 * d / interaction_half_life_days).
    Future-dated events are skipped. Window sums are floored at 0.
    """
    recent: Dict[str, float] = {}
    baseline: Dict[str, float] = {}
    skipped = 0
    for ev in events:
        d = days_between(ev.occurred_at, now)
        if d < 0:
            skipped += 1
            continue
        if d > config.velocity_baseline_days:
            continue
        value = config.action_weights[ev.action] * half_life_decay(
            d, config.interaction_half_life_days
        )
        baseline[ev.content_id] = baseline.get(ev.content_id, 0.0) + value
        if d <= config.velocity_recent_days:
            recent[ev.content_id] = recent.get(ev.content_id, 0.0) + value
        else:
            recent.setdefault(ev.content_id, 0.0)

    if skipped:
        logger.warning(
            "[data_quality] INTERACTION_IN_FUTURE source=velocity skipped=%s now=%s",
            skipped, now.isoformat(),
        )

    return {
        cid: (max(0.0, recent.get(cid, 0.0)), max(0.0, baseline[cid]))
        for cid in baseline
    }


def velocity_by_content(
    events: Iterable[InteractionEvent],
    content_ids: List[str],
    now: datetime,
    config: ScoringConfig = DEFAULT_CONFIG,
) -> Dict[str, float]:
    """velocity_boost for every requested content id (0 for items without recent engagement)."""
    windows = engagement_windows(events, now, config)
    return {
        cid: velocity_boost(*windows.get(cid, (0.0, 0.0)))
        for cid in content_ids
    }
