"""Shared fixtures: a fixed reference clock and small interaction/content builders."""

from datetime import datetime, timedelta, timezone
from typing import Dict, List

import pytest

from feedscore.models import ContentItem, InteractionEvent
from feedscore.services import InMemoryDataSource

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def make_event(
    event_id: str,
    content_id: str,
    action: str = "like",
    days_ago: float = 0.0,
    user_id: str = "u1",
) -> InteractionEvent:
    return InteractionEvent(
        event_id=event_id,
        user_id=user_id,
        content_id=content_id,
        action=action,
        occurred_at=NOW - timedelta(days=days_ago),
    )


def make_content(
    content_id: str,
    days_old: float = 0.0,
    likes: int = 0,
    comments: int = 0,
    dislikes: int = 0,
    categories=(),
    genres=(),
    tags=(),
    title: str = "",
) -> ContentItem:
    return ContentItem(
        content_id=content_id,
        title=title or f"Item {content_id}",
        created_at=NOW - timedelta(days=days_old),
        like_count=likes,
        comment_count=comments,
        dislike_count=dislikes,
        categories=frozenset(categories),
        genres=frozenset(genres),
        tags=frozenset(tags),
    )


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def catalog() -> List[ContentItem]:
    """Five items across two categories, mixed genres and tags."""
    return [
        make_content("1", days_old=1, likes=10, comments=2, dislikes=1,
                     categories={"news"}, genres={"politics"}, tags={"election"}),
        make_content("2", days_old=5, likes=3, comments=0, dislikes=3,
                     categories={"sports"}, genres={"football"}, tags={"derby"}),
        make_content("3", days_old=0, likes=0, comments=0, dislikes=0,
                     categories={"news"}, genres={"economy"}, tags={"election", "budget"}),
        make_content("4", days_old=40, likes=50, comments=20, dislikes=0,
                     categories={"sports"}, genres={"tennis"}),
        make_content("5", days_old=2, likes=1, comments=1, dislikes=0),
    ]


@pytest.fixture
def interactions() -> List[InteractionEvent]:
    """u1 mostly engages with news; u2 with sports."""
    return [
        make_event("e1", "1", "comment", days_ago=0.5),
        make_event("e2", "3", "like", days_ago=1),
        make_event("e3", "2", "dislike", days_ago=2),
        make_event("e4", "1", "like", days_ago=3),
        make_event("e5", "2", "like", days_ago=4, user_id="u2"),
        make_event("e6", "4", "comment", days_ago=10, user_id="u2"),
        make_event("e7", "2", "comment", days_ago=20, user_id="u2"),
    ]


@pytest.fixture
def source(interactions, catalog) -> InMemoryDataSource:
    return InMemoryDataSource(interactions, catalog)


def by_id(items) -> Dict[str, ContentItem]:
    return {item.content_id: item for item in items}
