"""Configuration models for Dev Badge."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError

from dev_badge.exceptions import ConfigError


class BadgeThresholdConfig(BaseModel):
    """Tier cut points on the deterministic point total."""
    diamond: int = 180
    gold: int = 150
    silver: int = 90


class AnalysisThresholdConfig(BaseModel):
    """Tier cut points on the 0-100 heuristic overall score."""
    diamond: int = 80
    gold: int = 60
    silver: int = 40


class AnalyzerConfig(BaseModel):
    """Heuristic analyzer parameters."""
    recent_window_days: int = 90
    max_repos: int = 100
    max_events: int = 100


class CacheTTLConfig(BaseModel):
    """Cache time-to-live settings in hours."""
    user_profile_hours: int = 24
    repositories_hours: int = 24
    events_hours: int = 1
    analysis_hours: int = 168  # 7 days

    def to_seconds(self) -> dict[str, int]:
        """Convert TTLs to seconds for the cache layer."""
        return {
            "user_profile": self.user_profile_hours * 3600,
            "repositories": self.repositories_hours * 3600,
            "events": self.events_hours * 3600,
            "analysis": self.analysis_hours * 3600,
        }


class FetchConfig(BaseModel):
    """GitHub API fetch parameters."""
    base_url: str = "https://api.github.com"
    timeout_seconds: float = 30.0


class DevBadgeConfig(BaseModel):
    """Top-level configuration composing all sub-configs."""
    badge_thresholds: BadgeThresholdConfig = Field(default_factory=BadgeThresholdConfig)
    analysis_thresholds: AnalysisThresholdConfig = Field(
        default_factory=AnalysisThresholdConfig
    )
    analyzer: AnalyzerConfig = Field(default_factory=AnalyzerConfig)
    cache_ttl: CacheTTLConfig = Field(default_factory=CacheTTLConfig)
    fetch: FetchConfig = Field(default_factory=FetchConfig)


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        with open(path) as f:
            yaml_data = yaml.safe_load(f)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc
    if yaml_data is None:
        return {}
    if not isinstance(yaml_data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")
    return yaml_data


def load_config(path: str | Path | None = None) -> DevBadgeConfig:
    """Load configuration from YAML file, environment variables, and defaults.

    Priority (highest to lowest):
    1. Environment variables (DEV_BADGE_*)
    2. YAML config file
    3. Defaults
    """
    config_data: dict[str, Any] = {}

    if path is not None:
        config_path = Path(path)
        if config_path.is_file():
            config_data = _read_yaml(config_path)
    else:
        for default_path in [".dev-badge.yml", ".dev-badge.yaml"]:
            p = Path(default_path)
            if p.is_file():
                config_data = _read_yaml(p)
                break

    env_mapping = {
        "DEV_BADGE_RECENT_WINDOW_DAYS": ("analyzer", "recent_window_days", int),
        "DEV_BADGE_MAX_REPOS": ("analyzer", "max_repos", int),
        "DEV_BADGE_MAX_EVENTS": ("analyzer", "max_events", int),
        "DEV_BADGE_TIMEOUT": ("fetch", "timeout_seconds", float),
        "DEV_BADGE_API_URL": ("fetch", "base_url", str),
    }

    for env_var, (section, key, type_fn) in env_mapping.items():
        value = os.environ.get(env_var)
        if value is not None:
            try:
                converted = type_fn(value)
            except ValueError as exc:
                raise ConfigError(f"Invalid value for {env_var}: {value!r}") from exc
            config_data.setdefault(section, {})[key] = converted

    try:
        return DevBadgeConfig(**config_data)
    except ValidationError as exc:
        raise ConfigError(str(exc)) from exc
