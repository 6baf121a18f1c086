"""
Runtime Configuration

Loads runtime settings (data source, worker pool, defaults) from environment
variables. Supports loading from a .env file using python-dotenv.
Algorithm parameters live in models.config.ScoringConfig; this module only
locates the optional JSON file they are read from.
"""

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .errors import ConfigError
from .models.config import DEFAULT_CONFIG, ScoringConfig
from .services.affinity_cache import DEFAULT_MAX_ENTRIES

_BASE_DIR = Path(__file__).resolve().parent.parent

root_env = _BASE_DIR / ".env"
if root_env.exists():
    load_dotenv(root_env)


@dataclass
class RuntimeConfig:
    """Runtime configuration."""

    # Data source: "memory" (caller supplies rows) | "json"
    data_source: str = "memory"
    # When data_source=json: paths to interactions, content and tag mapping files
    interactions_path: Optional[Path] = None
    content_path: Optional[Path] = None
    tag_mappings_path: Optional[Path] = None

    # Optional JSON file for ScoringConfig.from_dict
    scoring_config_path: Optional[Path] = None

    # Candidate scoring pool
    max_workers: int = 1
    batch_size: int = 256

    # Output truncation when the caller passes no top_k. None = full list.
    default_top_k: Optional[int] = None

    # Affinity cache key granularity for `now`. 0 = exact timestamp.
    cache_bucket_seconds: int = 0
    # Upper bound on cached (user_id, snapshot_key) entries; oldest evicted first.
    cache_max_entries: int = DEFAULT_MAX_ENTRIES

    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "RuntimeConfig":
        """Load configuration from environment variables."""
        data_source = os.getenv("FEEDSCORE_DATA_SOURCE", "").strip().lower() or "memory"

        def _path_env(key: str) -> Optional[Path]:
            v = os.getenv(key)
            if not v:
                return None
            p = Path(v)
            return p if p.is_absolute() else (_BASE_DIR / p).resolve()

        def _int_env(key: str, default: Optional[int]) -> Optional[int]:
            v = os.getenv(key)
            if v is None or v.strip() == "":
                return default
            try:
                return int(v)
            except ValueError as e:
                raise ConfigError(f"{key} must be an integer, got {v!r}") from e

        return cls(
            data_source=data_source,
            interactions_path=_path_env("FEEDSCORE_INTERACTIONS_PATH"),
            content_path=_path_env("FEEDSCORE_CONTENT_PATH"),
            tag_mappings_path=_path_env("FEEDSCORE_TAG_MAPPINGS_PATH"),
            scoring_config_path=_path_env("FEEDSCORE_SCORING_CONFIG_PATH"),
            max_workers=_int_env("FEEDSCORE_MAX_WORKERS", 1),
            batch_size=_int_env("FEEDSCORE_BATCH_SIZE", 256),
            default_top_k=_int_env("FEEDSCORE_DEFAULT_TOP_K", None),
            cache_bucket_seconds=_int_env("FEEDSCORE_CACHE_BUCKET_SECONDS", 0),
            cache_max_entries=_int_env("FEEDSCORE_CACHE_MAX_ENTRIES", DEFAULT_MAX_ENTRIES),
            log_level=os.getenv("FEEDSCORE_LOG_LEVEL", "INFO").upper(),
        )

    def validate(self) -> tuple[bool, list[str]]:
        """
        Validate the configuration.

        Returns:
            (is_valid, list_of_errors)
        """
        errors = []

        if self.data_source not in ("memory", "json"):
            errors.append(f"Unknown data source: {self.data_source}")

        if self.data_source == "json":
            if self.interactions_path is None or not self.interactions_path.exists():
                errors.append(f"Interactions JSON not found: {self.interactions_path}")
            if self.content_path is None or not self.content_path.exists():
                errors.append(f"Content JSON not found: {self.content_path}")
            if self.tag_mappings_path is not None and not self.tag_mappings_path.exists():
                errors.append(f"Tag mappings JSON not found: {self.tag_mappings_path}")

        if self.scoring_config_path is not None and not self.scoring_config_path.exists():
            errors.append(f"Scoring config not found: {self.scoring_config_path}")

        if self.max_workers < 1:
            errors.append(f"max_workers must be >= 1, got {self.max_workers}")
        if self.batch_size < 1:
            errors.append(f"batch_size must be >= 1, got {self.batch_size}")
        if self.default_top_k is not None and self.default_top_k < 0:
            errors.append(f"default_top_k must be >= 0, got {self.default_top_k}")
        if self.cache_max_entries < 1:
            errors.append(f"cache_max_entries must be >= 1, got {self.cache_max_entries}")

        return len(errors) == 0, errors

    def load_scoring_config(self) -> ScoringConfig:
        """ScoringConfig from scoring_config_path, or defaults when unset."""
        if self.scoring_config_path is None:
            return DEFAULT_CONFIG
        try:
            with open(self.scoring_config_path) as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigError(f"Failed to read scoring config {self.scoring_config_path}: {e}") from e
        return ScoringConfig.from_dict(data)


def configure_logging(level: str = "INFO") -> None:
    """Opt-in root logging setup for hosting layers; the library never calls this itself."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# Global config instance
_config: Optional[RuntimeConfig] = None


def get_config() -> RuntimeConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = RuntimeConfig.from_env()
    return _config


def reload_config() -> RuntimeConfig:
    """Reload configuration from environment."""
    global _config
    _config = None
    return get_config()
