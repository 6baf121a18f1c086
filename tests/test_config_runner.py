"""
Configuration, Cache and Runner Tests

Tests ScoringConfig defaults/validation/from_dict, RuntimeConfig loading from
environment variables, the write-once AffinityCache, and ScoringRunner wiring.

Run:
----
    pytest tests/test_config_runner.py -v
"""

import json
import logging
import threading
from datetime import timedelta

import pytest
from pydantic import ValidationError

from feedscore.config import RuntimeConfig, configure_logging, reload_config
from feedscore.errors import ConfigError
from feedscore.models import DEFAULT_CONFIG, AffinitySnapshot, ScoringConfig, UserAffinity
from feedscore.runner import ScoringRunner, create_data_source
from feedscore.services import DEFAULT_MAX_ENTRIES, AffinityCache, InMemoryDataSource, bucket_now
from feedscore.stages.orchestrator import score_for_user

from conftest import NOW, make_event


class TestScoringConfig:
    def test_defaults(self):
        assert DEFAULT_CONFIG.action_weights == {"like": 2.0, "comment": 4.0, "dislike": -5.0}
        assert DEFAULT_CONFIG.dimension_factors == {"category": 0.5, "genre": 1.0, "tag": 0.8}
        assert DEFAULT_CONFIG.max_weighted_score == 6.0
        assert DEFAULT_CONFIG.velocity_strength == 0.5
        assert DEFAULT_CONFIG.content_half_life_days == 30.0

    def test_from_dict_nested_sections(self):
        config = ScoringConfig.from_dict({
            "action_weights": {"like": 1.5},
            "half_life_days": {"interaction": 60, "content": 14},
            "dimension_factors": {"tag": 0.3},
            "velocity": {"strength": 0.25, "recent_days": 3},
            "max_weighted_score": 5.0,
            "unknown_key": 1,
        })
        assert config.weight_like == 1.5
        assert config.weight_dislike == -5.0
        assert config.interaction_half_life_days == 60
        assert config.content_half_life_days == 14
        assert config.tag_factor == 0.3
        assert config.velocity_strength == 0.25
        assert config.velocity_recent_days == 3
        assert config.max_weighted_score == 5.0

    @pytest.mark.parametrize("overrides", [
        {"recency_half_life": 0},
        {"content_half_life_days": -1},
        {"max_weighted_score": 0},
        {"velocity_recent_days": 40},
        {"velocity_strength": 1.5},
        {"interaction_limit": -1},
    ])
    def test_invalid_values(self, overrides):
        with pytest.raises(ValidationError):
            ScoringConfig(**overrides)

    def test_frozen(self):
        with pytest.raises(ValidationError):
            DEFAULT_CONFIG.weight_like = 3.0


class TestRuntimeConfig:
    def test_from_env(self, monkeypatch, tmp_path):
        monkeypatch.setenv("FEEDSCORE_DATA_SOURCE", "JSON")
        monkeypatch.setenv("FEEDSCORE_INTERACTIONS_PATH", str(tmp_path / "i.json"))
        monkeypatch.setenv("FEEDSCORE_CONTENT_PATH", str(tmp_path / "c.json"))
        monkeypatch.setenv("FEEDSCORE_MAX_WORKERS", "4")
        monkeypatch.setenv("FEEDSCORE_DEFAULT_TOP_K", "20")
        monkeypatch.setenv("FEEDSCORE_LOG_LEVEL", "debug")
        monkeypatch.setenv("FEEDSCORE_CACHE_MAX_ENTRIES", "64")
        config = reload_config()
        assert config.data_source == "json"
        assert config.interactions_path == tmp_path / "i.json"
        assert config.max_workers == 4
        assert config.default_top_k == 20
        assert config.batch_size == 256
        assert config.log_level == "DEBUG"
        assert config.cache_max_entries == 64

    def test_cache_is_bounded_by_default(self):
        assert RuntimeConfig().cache_max_entries == DEFAULT_MAX_ENTRIES
        ok, errors = RuntimeConfig(cache_max_entries=0).validate()
        assert not ok
        assert errors == ["cache_max_entries must be >= 1, got 0"]

    def test_bad_integer(self, monkeypatch):
        monkeypatch.setenv("FEEDSCORE_BATCH_SIZE", "many")
        with pytest.raises(ConfigError):
            RuntimeConfig.from_env()

    def test_validate(self, tmp_path):
        ok, errors = RuntimeConfig().validate()
        assert ok and errors == []
        ok, errors = RuntimeConfig(data_source="json", max_workers=0).validate()
        assert not ok
        assert len(errors) == 3

    def test_load_scoring_config(self, tmp_path):
        path = tmp_path / "scoring.json"
        path.write_text(json.dumps({"velocity": {"strength": 0.1}}))
        config = RuntimeConfig(scoring_config_path=path).load_scoring_config()
        assert config.velocity_strength == 0.1
        assert RuntimeConfig().load_scoring_config() is DEFAULT_CONFIG

    def test_unreadable_scoring_config(self, tmp_path):
        path = tmp_path / "scoring.json"
        path.write_text("[")
        with pytest.raises(ConfigError):
            RuntimeConfig(scoring_config_path=path).load_scoring_config()

    def test_configure_logging_level(self, monkeypatch):
        calls = []
        monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.append(kwargs))
        configure_logging("debug")
        configure_logging("nonsense")
        assert [c["level"] for c in calls] == [logging.DEBUG, logging.INFO]


def _snapshot(weights=None) -> AffinitySnapshot:
    return AffinitySnapshot(affinity=UserAffinity(user_id="u1", weights=weights or {}))


class TestAffinityCache:
    def test_first_write_wins(self):
        cache = AffinityCache()
        first = _snapshot({"tag": {"a": 1.0}})
        second = _snapshot({"tag": {"b": 1.0}})
        assert cache.put("u1", "k", first) is first
        assert cache.put("u1", "k", second) is first
        assert cache.get("u1", "k") is first

    def test_get_or_compute_calls_once(self):
        cache = AffinityCache()
        calls = []

        def compute():
            calls.append(1)
            return _snapshot()

        cache.get_or_compute("u1", "k", compute)
        cache.get_or_compute("u1", "k", compute)
        assert len(calls) == 1

    def test_max_entries_evicts_oldest(self):
        cache = AffinityCache(max_entries=2)
        for key in ("a", "b", "c"):
            cache.put("u1", key, _snapshot())
        assert len(cache) == 2
        assert cache.get("u1", "a") is None

    def test_invalid_max_entries(self):
        with pytest.raises(ValueError):
            AffinityCache(max_entries=0)

    def test_concurrent_writers_agree(self):
        cache = AffinityCache()
        results = []

        def writer(i):
            results.append(cache.put("u1", "k", _snapshot({"tag": {str(i): 1.0}})))

        threads = [threading.Thread(target=writer, args=(i,)) for i in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert len({id(r) for r in results}) == 1

    def test_bucket_now(self):
        assert bucket_now(NOW, 3600) == bucket_now(NOW + timedelta(minutes=59), 3600)
        assert bucket_now(NOW, 3600) != bucket_now(NOW + timedelta(minutes=61), 3600)
        assert bucket_now(NOW, 0) == NOW.isoformat()


class TestScoringRunner:
    def test_run_matches_pipeline(self, source):
        runner = ScoringRunner(source)
        assert runner.run("u1", NOW).ranked == score_for_user("u1", NOW, source).ranked
        assert len(runner.cache) == 1

    def test_default_top_k(self, source):
        runner = ScoringRunner(source, runtime=RuntimeConfig(default_top_k=2))
        assert len(runner.run("u1", NOW).ranked) == 2
        assert len(runner.run("u1", NOW, top_k=4).ranked) == 4

    def test_snapshot_version_keys_cache(self, source):
        runner = ScoringRunner(source, runtime=RuntimeConfig(cache_bucket_seconds=3600))
        runner.run("u1", NOW)
        runner.run("u1", NOW + timedelta(minutes=5))
        assert len(runner.cache) == 1
        runner.run("u1", NOW, snapshot_version="v2")
        assert len(runner.cache) == 2

    def test_cache_stays_bounded_across_distinct_now(self, source):
        runner = ScoringRunner(source, runtime=RuntimeConfig(cache_max_entries=10))
        for s in range(50):
            runner.run("u1", NOW + timedelta(seconds=s))
        assert len(runner.cache) == 10

    def test_repeat_runs_report_same_partial_failures(self, catalog):
        events = [make_event("e1", "77", "like"), make_event("bad", "1", "like", days_ago=-1)]
        runner = ScoringRunner(InMemoryDataSource(events, catalog))
        first = runner.run("u1", NOW)
        second = runner.run("u1", NOW)
        assert second.missing_content_ids == ["77"]
        assert second.rejected_event_ids == ["bad"]
        assert first.to_json() == second.to_json()

    def test_from_config_with_json_source(self, tmp_path):
        interactions = tmp_path / "i.json"
        content = tmp_path / "c.json"
        interactions.write_text(json.dumps([
            {"event_id": "e1", "user_id": "u1", "content_id": "a", "action": "like",
             "occurred_at": "2026-03-01T00:00:00Z"},
        ]))
        content.write_text(json.dumps([
            {"content_id": "a", "created_at": "2026-02-28T12:00:00Z", "like_count": 1},
            {"content_id": "b", "created_at": "2026-02-01T12:00:00Z"},
        ]))
        runtime = RuntimeConfig(data_source="json", interactions_path=interactions, content_path=content)
        result = ScoringRunner.from_config(runtime).run("u1", NOW)
        assert [s.content_id for s in result.ranked] == ["a", "b"]

    def test_from_config_applies_log_level_on_request(self, monkeypatch, source):
        levels = []
        monkeypatch.setattr("feedscore.runner.configure_logging", levels.append)
        runtime = RuntimeConfig(log_level="DEBUG")
        ScoringRunner.from_config(runtime, source=source)
        assert levels == []
        ScoringRunner.from_config(runtime, source=source, setup_logging=True)
        assert levels == ["DEBUG"]

    def test_from_config_rejects_invalid(self):
        with pytest.raises(ConfigError):
            ScoringRunner.from_config(RuntimeConfig(batch_size=0))

    def test_memory_source_must_be_supplied(self):
        with pytest.raises(ConfigError):
            create_data_source(RuntimeConfig())
