"""
Scoring runner: wires runtime config, data source, affinity cache and the
pipeline into one call for hosting layers (HTTP endpoint, batch job).

Usage:
    runner = ScoringRunner.from_config(get_config())
    result = runner.run("user-42", now=datetime.now(timezone.utc), top_k=20)
    for record in result.records():
        ...
"""

import logging
import threading
from datetime import datetime
from typing import List, Optional

from .config import RuntimeConfig, configure_logging
from .errors import ConfigError
from .models.config import ScoringConfig, resolve_config
from .models.interaction import as_utc
from .models.scoring import ScoringResult
from .services.affinity_cache import AffinityCache, bucket_now
from .services.data_source import ContentDataSource, JsonDataSource
from .stages.orchestrator import score_for_user

logger = logging.getLogger(__name__)


def create_data_source(runtime: RuntimeConfig) -> ContentDataSource:
    """Build the data source named by runtime.data_source (only "json" is file-backed)."""
    if runtime.data_source == "json":
        if runtime.interactions_path is None or runtime.content_path is None:
            raise ConfigError(
                "FEEDSCORE_INTERACTIONS_PATH and FEEDSCORE_CONTENT_PATH are required for the json data source"
            )
        return JsonDataSource(
            runtime.interactions_path,
            runtime.content_path,
            runtime.tag_mappings_path,
        )
    raise ConfigError(
        f"Data source {runtime.data_source!r} must be supplied by the caller"
    )


class ScoringRunner:
    """Runs scoring for one user at a time against a fixed data source."""

    def __init__(
        self,
        source: ContentDataSource,
        config: Optional[ScoringConfig] = None,
        runtime: Optional[RuntimeConfig] = None,
        cache: Optional[AffinityCache] = None,
    ):
        self.source = source
        self.config = resolve_config(config)
        self.runtime = runtime if runtime is not None else RuntimeConfig()
        if cache is None:
            cache = AffinityCache(max_entries=self.runtime.cache_max_entries)
        self.cache = cache

    @classmethod
    def from_config(
        cls,
        runtime: RuntimeConfig,
        source: Optional[ContentDataSource] = None,
        setup_logging: bool = False,
    ) -> "ScoringRunner":
        """
        Build a runner from runtime config; source overrides the configured data source.

        setup_logging applies runtime.log_level via configure_logging (for
        standalone jobs that own the process logging setup).
        """
        ok, errors = runtime.validate()
        if not ok:
            raise ConfigError("; ".join(errors))
        if setup_logging:
            configure_logging(runtime.log_level)
        if source is None:
            source = create_data_source(runtime)
        return cls(source, runtime.load_scoring_config(), runtime)

    def run(
        self,
        user_id: str,
        now: datetime,
        top_k: Optional[int] = None,
        content_ids: Optional[List[str]] = None,
        snapshot_version: Optional[str] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> ScoringResult:
        """
        Score content for user_id at now.

        The affinity cache key is snapshot_version when given, otherwise now
        bucketed by runtime.cache_bucket_seconds.
        """
        now = as_utc(now)
        snapshot_key = (
            snapshot_version
            if snapshot_version is not None
            else bucket_now(now, self.runtime.cache_bucket_seconds)
        )
        result = score_for_user(
            user_id,
            now,
            self.source,
            self.config,
            content_ids=content_ids,
            top_k=top_k if top_k is not None else self.runtime.default_top_k,
            cache=self.cache,
            snapshot_key=snapshot_key,
            max_workers=self.runtime.max_workers,
            batch_size=self.runtime.batch_size,
            cancel_event=cancel_event,
        )
        if result.missing_content_ids or result.rejected_event_ids:
            logger.info(
                "[scoring] PARTIAL_FAILURE user_id=%s missing_content=%s rejected_events=%s",
                user_id, len(result.missing_content_ids), len(result.rejected_event_ids),
            )
        return result
