"""
Interaction model: a user's like, comment, or dislike on a content item.

Used by interaction weighting (per user) and velocity (per content item).
Built from data-source dicts via InteractionEvent.model_validate(d) or ensure_interactions().
"""

from datetime import datetime, timezone
from typing import Dict, List, Literal, Union

from pydantic import BaseModel, ConfigDict, field_validator

Action = Literal["like", "comment", "dislike"]


def as_utc(value: datetime) -> datetime:
    """Naive timestamps are read as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class InteractionEvent(BaseModel):
    """
    A single immutable interaction event.

    event_id: required; names rejected events and is the stable secondary
    ordering key when two events share occurred_at.
    occurred_at: ISO string or datetime; naive values are treated as UTC.
    """

    model_config = ConfigDict(frozen=True)

    event_id: str
    user_id: str
    content_id: str
    action: Action
    occurred_at: datetime

    @field_validator("event_id", "user_id", "content_id", mode="before")
    @classmethod
    def _coerce_id(cls, v):
        return str(v) if isinstance(v, int) else v

    @field_validator("event_id")
    @classmethod
    def _non_empty_event_id(cls, v: str) -> str:
        if not v:
            raise ValueError("event_id must be non-empty")
        return v

    @field_validator("occurred_at")
    @classmethod
    def _utc(cls, v: datetime) -> datetime:
        return as_utc(v)


def ensure_interactions(
    items: List[Union[Dict, "InteractionEvent"]],
) -> List["InteractionEvent"]:
    """Convert list of dicts or InteractionEvents to InteractionEvent models for the pipeline."""
    return [
        InteractionEvent.model_validate(e) if isinstance(e, dict) else e
        for e in items
    ]
