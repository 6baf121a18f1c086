"""
Content model: typed representation of a catalog item for the scoring pipeline.

Engagement counters feed the quality stage; categories, genres and tags feed
affinity aggregation and personalization.
"""

from datetime import datetime
from typing import Any, Dict, FrozenSet, List, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .interaction import as_utc


class ContentItem(BaseModel):
    """Read-only content snapshot with engagement counters and categorical keys."""

    model_config = ConfigDict(frozen=True)

    content_id: str
    title: str = ""
    created_at: datetime
    like_count: int = Field(default=0, ge=0)
    comment_count: int = Field(default=0, ge=0)
    dislike_count: int = Field(default=0, ge=0)
    categories: FrozenSet[str] = frozenset()
    genres: FrozenSet[str] = frozenset()
    tags: FrozenSet[str] = frozenset()

    @field_validator("content_id", mode="before")
    @classmethod
    def _coerce_id(cls, v):
        return str(v) if isinstance(v, int) else v

    @field_validator("categories", "genres", "tags", mode="before")
    @classmethod
    def _none_as_empty(cls, v):
        return frozenset() if v is None else v

    @field_validator("created_at")
    @classmethod
    def _utc(cls, v: datetime) -> datetime:
        return as_utc(v)

    def keys_for(self, dimension: str) -> FrozenSet[str]:
        """Keys of one dimension: "category", "genre" or "tag"."""
        if dimension == "category":
            return self.categories
        if dimension == "genre":
            return self.genres
        if dimension == "tag":
            return self.tags
        raise ValueError(f"Unknown dimension: {dimension}")


def ensure_content(items: List[Union[Dict[str, Any], "ContentItem"]]) -> List["ContentItem"]:
    """Convert list of dicts or ContentItems to ContentItem models."""
    return [
        ContentItem.model_validate(c) if isinstance(c, dict) else c
        for c in items
    ]
