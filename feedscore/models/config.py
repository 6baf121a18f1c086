"""
Scoring configuration: weights, half-lives, caps, and velocity parameters.

ScoringConfig defaults are defined here. A hosting layer may pass a dict
(e.g. loaded from a scoring_config.json); from_dict() merges it with these defaults.
"""

from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, model_validator

DIMENSIONS = ("category", "genre", "tag")


class ScoringConfig(BaseModel):
    """Configuration for the content-scoring pipeline."""

    model_config = ConfigDict(frozen=True)

    # -------------------------------------------------------------------------
    # Interaction weighting
    # score = action_weight * exp(-ln2 * i / recency_half_life) * exp(-ln2 * d / time_half_life)
    # -------------------------------------------------------------------------

    # Signed weight per action. Comment is the strongest positive signal.
    weight_like: float = 2.0
    weight_comment: float = 4.0
    weight_dislike: float = -5.0

    # Half-life in number of newer events (recency index i).
    recency_half_life: float = 20.0
    # Half-life in days since the interaction happened.
    interaction_half_life_days: float = 45.0

    # Max number of most recent interactions fetched per user. None = all.
    interaction_limit: Optional[int] = None

    # -------------------------------------------------------------------------
    # Content quality
    # mean_score = mean_score_weight * (likes + comments) / (likes + dislikes + comments)
    # -------------------------------------------------------------------------

    mean_score_weight: float = 0.4

    # -------------------------------------------------------------------------
    # Personalization
    # weighted = min((mean + 1) * (1 + sum_k f_k * (1 - exp(-w_k))), max_weighted_score)
    # -------------------------------------------------------------------------

    category_factor: float = 0.5
    genre_factor: float = 1.0
    tag_factor: float = 0.8
    max_weighted_score: float = 6.0

    # -------------------------------------------------------------------------
    # Freshness and velocity
    # final = weighted * exp(-ln2 * age / content_half_life) * (1 + strength * boost)
    # -------------------------------------------------------------------------

    content_half_life_days: float = 30.0
    velocity_recent_days: float = 7.0
    velocity_baseline_days: float = 30.0
    velocity_strength: float = 0.5

    # -------------------------------------------------------------------------
    # Badges (max 2 per item, do not affect ranking)
    # -------------------------------------------------------------------------

    trending_badge_threshold: float = 0.5
    fresh_badge_max_age_days: float = 2.0
    crowd_favorite_min_mean_score: float = 0.36

    @model_validator(mode="after")
    def check_ranges(self):
        for name in (
            "recency_half_life",
            "interaction_half_life_days",
            "content_half_life_days",
        ):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive, got {getattr(self, name)}")
        if self.max_weighted_score <= 0:
            raise ValueError(
                f"max_weighted_score must be positive, got {self.max_weighted_score}"
            )
        if self.velocity_recent_days > self.velocity_baseline_days:
            raise ValueError(
                "velocity_recent_days must not exceed velocity_baseline_days "
                f"({self.velocity_recent_days} > {self.velocity_baseline_days})"
            )
        if not 0.0 <= self.velocity_strength <= 1.0:
            raise ValueError(
                f"velocity_strength must be within [0, 1], got {self.velocity_strength}"
            )
        if self.interaction_limit is not None and self.interaction_limit < 0:
            raise ValueError(
                f"interaction_limit must be non-negative, got {self.interaction_limit}"
            )
        return self

    @property
    def action_weights(self) -> Dict[str, float]:
        return {
            "like": self.weight_like,
            "comment": self.weight_comment,
            "dislike": self.weight_dislike,
        }

    @property
    def dimension_factors(self) -> Dict[str, float]:
        return {
            "category": self.category_factor,
            "genre": self.genre_factor,
            "tag": self.tag_factor,
        }

    @classmethod
    def from_dict(cls, config_dict: Dict) -> "ScoringConfig":
        """Create config from dictionary (e.g., loaded from JSON)."""
        flat = {}
        if "action_weights" in config_dict:
            aw = config_dict["action_weights"]
            for action in ("like", "comment", "dislike"):
                if action in aw:
                    flat[f"weight_{action}"] = aw[action]
        if "half_life_days" in config_dict:
            hl = config_dict["half_life_days"]
            if "interaction" in hl:
                flat["interaction_half_life_days"] = hl["interaction"]
            if "content" in hl:
                flat["content_half_life_days"] = hl["content"]
        if "dimension_factors" in config_dict:
            df = config_dict["dimension_factors"]
            for dimension in DIMENSIONS:
                if dimension in df:
                    flat[f"{dimension}_factor"] = df[dimension]
        if "velocity" in config_dict:
            v = config_dict["velocity"]
            if "recent_days" in v:
                flat["velocity_recent_days"] = v["recent_days"]
            if "baseline_days" in v:
                flat["velocity_baseline_days"] = v["baseline_days"]
            if "strength" in v:
                flat["velocity_strength"] = v["strength"]
        for key, value in config_dict.items():
            if not isinstance(value, dict):
                flat[key] = value
        allowed = set(cls.model_fields)
        filtered = {k: v for k, v in flat.items() if k in allowed}
        return cls.model_validate(filtered)


DEFAULT_CONFIG = ScoringConfig()


def resolve_config(config: Optional["ScoringConfig"]) -> "ScoringConfig":
    """Return config or DEFAULT_CONFIG when none is provided."""
    return config if config is not None else DEFAULT_CONFIG
