"""
Content data source abstraction.

Supplies interactions, content snapshots and tag mappings to the scoring
pipeline (read-only). Implementations: in-memory (tests, callers that already
hold rows) and JSON files. A database-backed source implements the same Protocol.
"""

import json
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Protocol, Set, Union

from ..errors import DataSourceError
from ..models.config import DIMENSIONS
from ..models.content import ContentItem, ensure_content
from ..models.interaction import InteractionEvent, ensure_interactions

_DIMENSION_FIELDS = {"category": "categories", "genre": "genres", "tag": "tags"}


class ContentDataSource(Protocol):
    """Protocol for read-only access to interaction and content records."""

    def fetch_interactions(
        self,
        user_id: str,
        limit: Optional[int] = None,
    ) -> List[InteractionEvent]:
        """One user's interactions, most recent first; at most limit when set."""
        ...

    def fetch_content(
        self,
        content_ids: Optional[Iterable[str]] = None,
    ) -> List[ContentItem]:
        """All content items, or the subset with the given ids (unknown ids are absent)."""
        ...

    def fetch_tag_mappings(self, dimension: str, content_id: str) -> Set[str]:
        """
        Keys of one dimension (category / genre / tag) for a content item.

        Lookup for hosting layers and diagnostics; the pipeline does not call it.
        Sources must pre-join the same keys onto the ContentItem returned by
        fetch_content (categories / genres / tags), which is what scoring reads.
        """
        ...

    def fetch_content_interactions(
        self,
        content_ids: Iterable[str],
        since: datetime,
    ) -> List[InteractionEvent]:
        """Interactions of all users on the given items with occurred_at >= since."""
        ...


class InMemoryDataSource:
    """
    Data source over rows already held in memory.

    tag_mappings (dimension -> content_id -> keys) are merged into the content
    items' own categories / genres / tags.
    """

    def __init__(
        self,
        interactions: List[Union[Dict[str, Any], InteractionEvent]],
        content: List[Union[Dict[str, Any], ContentItem]],
        tag_mappings: Optional[Mapping[str, Mapping[str, Iterable[str]]]] = None,
    ):
        self._interactions = ensure_interactions(interactions)
        items = ensure_content(content)
        if tag_mappings:
            items = [_merge_mappings(item, tag_mappings) for item in items]
        self._content = items
        self._content_by_id = {item.content_id: item for item in items}

    def fetch_interactions(
        self,
        user_id: str,
        limit: Optional[int] = None,
    ) -> List[InteractionEvent]:
        events = [ev for ev in self._interactions if ev.user_id == user_id]
        events.sort(key=lambda e: (e.occurred_at, e.event_id), reverse=True)
        if limit is not None:
            events = events[:limit]
        return events

    def fetch_content(
        self,
        content_ids: Optional[Iterable[str]] = None,
    ) -> List[ContentItem]:
        if content_ids is None:
            return list(self._content)
        return [
            self._content_by_id[cid]
            for cid in dict.fromkeys(content_ids)
            if cid in self._content_by_id
        ]

    def fetch_tag_mappings(self, dimension: str, content_id: str) -> Set[str]:
        item = self._content_by_id.get(content_id)
        if item is None:
            return set()
        return set(item.keys_for(dimension))

    def fetch_content_interactions(
        self,
        content_ids: Iterable[str],
        since: datetime,
    ) -> List[InteractionEvent]:
        id_set = set(content_ids)
        return [
            ev for ev in self._interactions
            if ev.content_id in id_set and ev.occurred_at >= since
        ]


class JsonDataSource(InMemoryDataSource):
    """
    Data source backed by JSON files (interactions.json, content.json, optional tag_mappings.json).
    Used when FEEDSCORE_DATA_SOURCE=json; paths come from runtime config.
    """

    def __init__(
        self,
        interactions_path: Union[Path, str],
        content_path: Union[Path, str],
        tag_mappings_path: Optional[Union[Path, str]] = None,
    ):
        interactions = _load_json(Path(interactions_path))
        content = _load_json(Path(content_path))
        tag_mappings = None
        if tag_mappings_path is not None:
            tag_mappings = _load_json(Path(tag_mappings_path))
        super().__init__(interactions, content, tag_mappings)


def _load_json(path: Path) -> Any:
    if not path.exists():
        raise DataSourceError(f"JSON file not found: {path}")
    try:
        with open(path) as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise DataSourceError(f"Invalid JSON in {path}: {e}") from e


def _merge_mappings(
    item: ContentItem,
    tag_mappings: Mapping[str, Mapping[str, Iterable[str]]],
) -> ContentItem:
    update = {}
    for dimension in DIMENSIONS:
        extra = tag_mappings.get(dimension, {}).get(item.content_id)
        if extra:
            update[_DIMENSION_FIELDS[dimension]] = item.keys_for(dimension) | frozenset(extra)
    return item.model_copy(update=update) if update else item
