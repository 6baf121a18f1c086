"""External collaborators: data sources and the affinity cache."""

from .affinity_cache import DEFAULT_MAX_ENTRIES, AffinityCache, bucket_now
from .data_source import ContentDataSource, InMemoryDataSource, JsonDataSource

__all__ = [
    "AffinityCache",
    "ContentDataSource",
    "DEFAULT_MAX_ENTRIES",
    "InMemoryDataSource",
    "JsonDataSource",
    "bucket_now",
]
