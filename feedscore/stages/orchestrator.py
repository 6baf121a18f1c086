"""
Pipeline orchestrator: runs every stage for one user against a candidate set
and returns the ranked ScoringResult.

The main entry point is score_for_user: interactions → weighting → affinity;
candidates → quality / personalization / velocity / freshness → sorted output.
Candidate scoring is split into batches that may run on a thread pool; the
merge-and-sort step is serial, so output does not depend on worker count.
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional, Tuple

from ..models.config import ScoringConfig, resolve_config
from ..models.content import ContentItem
from ..models.interaction import InteractionEvent, as_utc
from ..models.scoring import AffinitySnapshot, ContentScore, ScoringResult, UserAffinity
from ..services.affinity_cache import AffinityCache
from ..services.data_source import ContentDataSource
from .affinity import compute_user_affinity
from .interaction_weighting import weight_interactions
from .ranking import rank_scores, score_content
from .velocity import velocity_by_content

logger = logging.getLogger(__name__)


def _load_candidates(
    source: ContentDataSource,
    content_ids: Optional[List[str]],
) -> Tuple[List[ContentItem], List[str]]:
    """
    Fetch candidate items; requested ids without metadata are returned as missing.
    """
    candidates = source.fetch_content(content_ids)
    if content_ids is None:
        return candidates, []
    found = {item.content_id for item in candidates}
    missing = sorted({cid for cid in content_ids if cid not in found})
    if missing:
        logger.warning(
            "[data_quality] CONTENT_METADATA_MISSING source=candidates count=%s content_ids=%s",
            len(missing), missing,
        )
    return candidates, missing


def _content_lookup(
    source: ContentDataSource,
    candidates: List[ContentItem],
    interacted_ids: Iterable[str],
) -> Dict[str, ContentItem]:
    """Candidates plus any interacted items outside the candidate set."""
    lookup = {item.content_id: item for item in candidates}
    extra = sorted({cid for cid in interacted_ids if cid not in lookup})
    if extra:
        for item in source.fetch_content(extra):
            lookup[item.content_id] = item
    return lookup


def _score_batch(
    batch: List[ContentItem],
    affinity: UserAffinity,
    velocity: Dict[str, float],
    now: datetime,
    config: ScoringConfig,
    cancel_event: Optional[threading.Event],
) -> Tuple[List[ContentScore], int]:
    """Score one batch; stop at the first item seen after cancellation. Returns (scores, abandoned)."""
    scores: List[ContentScore] = []
    for idx, item in enumerate(batch):
        if cancel_event is not None and cancel_event.is_set():
            return scores, len(batch) - idx
        scores.append(
            score_content(item, affinity, velocity.get(item.content_id, 0.0), now, config)
        )
    return scores, 0


def _batches(items: List[ContentItem], batch_size: int) -> List[List[ContentItem]]:
    return [items[i:i + batch_size] for i in range(0, len(items), batch_size)]


def _fetch_user_events(
    source: ContentDataSource,
    user_id: str,
    now: datetime,
    limit: Optional[int],
) -> List[InteractionEvent]:
    """
    Most recent events for user_id, with limit counting only events at or before now.

    Future-dated events sort first, so each pass widens the fetch by the number
    of future events seen until no more are found.
    """
    events = source.fetch_interactions(user_id, limit)
    if limit is None:
        return events
    seen_future = 0
    while True:
        future = sum(1 for ev in events if ev.occurred_at > now)
        if future <= seen_future or len(events) < limit + seen_future:
            return events
        seen_future = future
        events = source.fetch_interactions(user_id, limit + future)


def compute_affinity_for_user(
    user_id: str,
    now: datetime,
    source: ContentDataSource,
    config: Optional[ScoringConfig] = None,
    content_by_id: Optional[Dict[str, ContentItem]] = None,
) -> Tuple[UserAffinity, List[str], List[str]]:
    """
    Weighting + aggregation for one user.

    Returns:
        affinity: UserAffinity across category, genre and tag.
        rejected_event_ids: interactions dated after now.
        missing_content_ids: interacted content ids without metadata.
    """
    config = resolve_config(config)
    now = as_utc(now)
    events = _fetch_user_events(source, user_id, now, config.interaction_limit)
    lookup = _content_lookup(
        source,
        list((content_by_id or {}).values()),
        (ev.content_id for ev in events),
    )
    weighted, rejected, missing = weight_interactions(events, lookup, now, config)
    return compute_user_affinity(user_id, weighted), rejected, missing


def score_for_user(
    user_id: str,
    now: datetime,
    source: ContentDataSource,
    config: Optional[ScoringConfig] = None,
    content_ids: Optional[List[str]] = None,
    top_k: Optional[int] = None,
    cache: Optional[AffinityCache] = None,
    snapshot_key: Optional[str] = None,
    max_workers: int = 1,
    batch_size: int = 256,
    cancel_event: Optional[threading.Event] = None,
) -> ScoringResult:
    """
    Score and rank content for one user at reference time now.

    content_ids limits the candidate set (None = whole catalog). When cache is
    given, affinity is read from / written to it under (user_id, snapshot_key),
    with snapshot_key defaulting to now's ISO timestamp. cancel_event abandons
    the remaining candidates; items scored before it was set are still ranked.

    Returns:
        ScoringResult with ranked scores, missing content ids, rejected event ids,
        and cancellation status.
    """
    if batch_size <= 0:
        raise ValueError(f"batch_size must be positive, got {batch_size}")
    config = resolve_config(config)
    now = as_utc(now)

    # --- 1. Candidates (per-item missing metadata is reported, not fatal) ---
    candidates, missing_candidates = _load_candidates(source, content_ids)

    # --- 2. Affinity: weighting + aggregation, optionally cached ---
    content_by_id = {item.content_id: item for item in candidates}

    def _compute() -> AffinitySnapshot:
        affinity, rejected, missing = compute_affinity_for_user(
            user_id, now, source, config, content_by_id
        )
        return AffinitySnapshot(
            affinity=affinity,
            rejected_event_ids=tuple(rejected),
            missing_content_ids=tuple(missing),
        )

    if cache is not None:
        key = snapshot_key if snapshot_key is not None else now.isoformat()
        snapshot = cache.get_or_compute(user_id, key, _compute)
    else:
        snapshot = _compute()
    affinity = snapshot.affinity

    # --- 3. Velocity across all users for the candidate set ---
    candidate_ids = [item.content_id for item in candidates]
    since = now - timedelta(days=config.velocity_baseline_days)
    velocity = velocity_by_content(
        source.fetch_content_interactions(candidate_ids, since),
        candidate_ids,
        now,
        config,
    )

    # --- 4. Score candidates in batches ---
    batches = _batches(candidates, batch_size)
    if max_workers > 1 and len(batches) > 1:
        with ThreadPoolExecutor(max_workers=min(max_workers, len(batches))) as executor:
            futures = [
                executor.submit(_score_batch, b, affinity, velocity, now, config, cancel_event)
                for b in batches
            ]
            outcomes = [f.result() for f in futures]
    else:
        outcomes = [
            _score_batch(b, affinity, velocity, now, config, cancel_event)
            for b in batches
        ]

    scores: List[ContentScore] = []
    abandoned = 0
    for batch_scores, batch_abandoned in outcomes:
        scores.extend(batch_scores)
        abandoned += batch_abandoned
    cancelled = abandoned > 0
    if cancelled:
        logger.info(
            "[scoring] RUN_CANCELLED user_id=%s scored=%s abandoned=%s",
            user_id, len(scores), abandoned,
        )

    # --- 5. Merge and sort ---
    ranked = rank_scores(scores, top_k)
    logger.debug(
        "[scoring] RUN_COMPLETE user_id=%s candidates=%s ranked=%s",
        user_id, len(candidates), len(ranked),
    )
    return ScoringResult(
        user_id=user_id,
        now=now,
        ranked=ranked,
        missing_content_ids=sorted(set(missing_candidates) | set(snapshot.missing_content_ids)),
        rejected_event_ids=sorted(snapshot.rejected_event_ids),
        cancelled=cancelled,
        abandoned_count=abandoned,
    )
