"""Data models for Dev Badge profile scoring."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum
from typing import Any, Literal

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    field_validator,
)


class Tier(StrEnum):
    """Ordinal profile classification shared by both scoring engines.

    Values are lowercase; ``label`` gives the capitalized display form.
    The two engines use different numeric scales, so tiers are compared
    only through ``rank``.
    """
    BRONZE = "bronze"
    SILVER = "silver"
    GOLD = "gold"
    DIAMOND = "diamond"

    @property
    def label(self) -> str:
        return self.value.capitalize()

    @property
    def rank(self) -> int:
        return _TIER_RANKS[self]

    @classmethod
    def parse(cls, value: str) -> Tier:
        """Parse a tier name in either capitalization."""
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            msg = f"Unknown tier: {value!r}"
            raise ValueError(msg) from None


_TIER_RANKS: dict[Tier, int] = {
    Tier.BRONZE: 1,
    Tier.SILVER: 2,
    Tier.GOLD: 3,
    Tier.DIAMOND: 4,
}


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


def _assume_utc(value: datetime) -> datetime:
    """Treat naive timestamps as UTC so age arithmetic never mixes kinds."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


# ---------------------------------------------------------------------------
# Deterministic calculator
# ---------------------------------------------------------------------------


class ProfileStats(_Frozen):
    """Raw profile statistics fed to the deterministic calculator."""
    repo_count: int = Field(default=0, ge=0)
    follower_count: int = Field(default=0, ge=0)
    account_created_at: datetime
    annual_active_days: int = Field(default=0, ge=0)

    @field_validator("account_created_at")
    @classmethod
    def _created_utc(cls, value: datetime) -> datetime:
        return _assume_utc(value)


class ScoreBreakdown(_Frozen):
    """Point breakdown produced by the deterministic calculator."""
    repo_score: int = 0
    follower_score: int = 0
    age_score: int = 0
    activity_score: int = 0
    tier: Tier = Tier.BRONZE

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_score(self) -> int:
        return (
            self.repo_score
            + self.follower_score
            + self.age_score
            + self.activity_score
        )


class BadgeInfo(_Frozen):
    """Display attributes for a badge tier."""
    emoji: str
    label: str
    color: str
    gradient: str


# ---------------------------------------------------------------------------
# Provider records
# ---------------------------------------------------------------------------


class GitHubUser(_Frozen):
    """GitHub user record as returned by ``GET /users/{login}``."""
    login: str
    name: str | None = None
    avatar_url: str | None = None
    created_at: datetime
    followers: int = 0
    following: int = 0
    public_repos: int = 0
    public_gists: int = 0

    @field_validator(
        "followers", "following", "public_repos", "public_gists", mode="before"
    )
    @classmethod
    def _missing_count_is_zero(cls, value: Any) -> Any:
        return value or 0

    @field_validator("created_at")
    @classmethod
    def _created_utc(cls, value: datetime) -> datetime:
        return _assume_utc(value)


class RawRepository(_Frozen):
    """Repository entry from ``GET /users/{login}/repos``."""
    name: str
    description: str | None = None
    language: str | None = None
    stargazers_count: int = 0
    forks_count: int = 0
    open_issues_count: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None
    topics: list[str] = []
    license_name: str | None = Field(
        default=None,
        validation_alias=AliasChoices("license_name", "license"),
    )
    has_wiki: bool = False
    fork: bool = False

    @field_validator("license_name", mode="before")
    @classmethod
    def _license_to_name(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return value.get("name")
        return value

    @field_validator("topics", mode="before")
    @classmethod
    def _missing_topics(cls, value: Any) -> Any:
        return value or []


class ActivityEvent(_Frozen):
    """A public event; only its timestamp matters for scoring."""
    id: str | None = None
    type: str | None = None
    created_at: datetime

    @field_validator("created_at")
    @classmethod
    def _created_utc(cls, value: datetime) -> datetime:
        return _assume_utc(value)


# ---------------------------------------------------------------------------
# Heuristic analyzer
# ---------------------------------------------------------------------------


class DerivedMetrics(_Frozen):
    """Aggregates over a user's own repositories and recent events."""
    followers: int = 0
    following: int = 0
    public_gists: int = 0
    total_repos: int = 0
    own_repos: int = 0
    total_stars: int = 0
    total_forks: int = 0
    language_count: int = 0
    recent_activity_count: int = 0
    repos_with_description: int = 0
    repos_with_topics: int = 0
    avg_stars_per_repo: float = 0.0
    avg_forks_per_repo: float = 0.0
    account_age_days: int = 0
    repos_per_year: float = 0.0


class DetailedAnalysis(_Frozen):
    """The four weighted sub-scores."""
    code_quality: int = Field(default=0, ge=0, le=100)
    activity_level: int = Field(default=0, ge=0, le=100)
    community_impact: int = Field(default=0, ge=0, le=100)
    project_diversity: int = Field(default=0, ge=0, le=100)


class AIScores(DetailedAnalysis):
    """Sub-scores plus the overall score and data-completeness confidence."""
    overall_score: int = Field(default=0, ge=0, le=100)
    confidence: int = Field(default=0, ge=0, le=100)

    def detailed(self) -> DetailedAnalysis:
        return DetailedAnalysis(
            code_quality=self.code_quality,
            activity_level=self.activity_level,
            community_impact=self.community_impact,
            project_diversity=self.project_diversity,
        )


class LanguageBreakdown(_Frozen):
    """Share of own repositories written in one primary language."""
    name: str
    percentage: int
    repo_count: int
    stars: int = 0


class ProjectQuality(_Frozen):
    """Documentation and popularity indicators over own repositories."""
    has_readme: int = 0
    has_description: int = 0
    has_topics: int = 0
    has_license: int = 0
    avg_stars: float = 0.0
    quality_score: int = 0


class DeveloperType(_Frozen):
    """Developer archetype inferred from the language mix."""
    name: str
    emoji: str


class AITierAnalysis(_Frozen):
    """Complete heuristic analysis result."""
    username: str
    tier: Tier = Tier.BRONZE
    overall_score: int = 0
    confidence: int = 0
    reasoning: str = ""
    strengths: list[str] = []
    improvements: list[str] = []
    detailed_analysis: DetailedAnalysis = Field(default_factory=DetailedAnalysis)
    languages: list[LanguageBreakdown] = []
    developer_type: str = "Aspiring Developer"
    developer_type_emoji: str = "\U0001f331"
    project_quality: ProjectQuality = Field(default_factory=ProjectQuality)
    expertise: list[str] = []
    analyzed_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


class EnhancedAnalysis(_Frozen):
    """Heuristic analysis merged with a previously computed badge tier."""
    analysis: AITierAnalysis
    existing_tier: Tier
    existing_score: int = 0
    recommended_tier: Tier
    tier_source: Literal["ai", "existing"]
