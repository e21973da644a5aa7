"""Metric derivation and weighted sub-scores for the heuristic analyzer."""

from __future__ import annotations

import math
from collections.abc import Sequence
from datetime import UTC, datetime, timedelta

from dev_badge.config import AnalysisThresholdConfig
from dev_badge.models import (
    ActivityEvent,
    AIScores,
    DerivedMetrics,
    GitHubUser,
    RawRepository,
    Tier,
)

SECONDS_PER_DAY = 24 * 3600

# Sub-score weights; each group sums to 1.0.
CODE_QUALITY_WEIGHTS = {"avg_stars": 0.30, "avg_forks": 0.20, "described": 0.25, "topics": 0.25}
ACTIVITY_WEIGHTS = {"recent_events": 0.40, "repos_per_year": 0.30, "own_repos": 0.30}
COMMUNITY_WEIGHTS = {"followers": 0.40, "stars": 0.35, "forks": 0.25}
DIVERSITY_WEIGHTS = {"languages": 0.50, "own_repos": 0.30, "gists": 0.20}
OVERALL_WEIGHTS = {
    "code_quality": 0.35,
    "activity_level": 0.30,
    "community_impact": 0.25,
    "project_diversity": 0.10,
}


def round_half_up(value: float) -> int:
    """Round to the nearest integer, with halves rounding up."""
    return math.floor(value + 0.5)


def clamp_score(value: int) -> int:
    return max(0, min(value, 100))


def own_repositories(repos: Sequence[RawRepository]) -> list[RawRepository]:
    """Repositories that are not forks of another repository."""
    return [repo for repo in repos if not repo.fork]


def _saturating(value: float, full_at: float) -> float:
    """Percentage of *full_at* reached by *value*, capped at 100."""
    return min(value / full_at * 100, 100)


def derive_metrics(
    user: GitHubUser,
    repos: Sequence[RawRepository],
    events: Sequence[ActivityEvent],
    window_days: int = 90,
    now: datetime | None = None,
) -> DerivedMetrics:
    """Aggregate a user's own repositories and recent events.

    Forks are excluded from every repository aggregate. An event counts
    as recent when it is strictly newer than ``now - window_days``.
    """
    if now is None:
        now = datetime.now(UTC)
    own = own_repositories(repos)
    repo_count = len(own)

    total_stars = sum(repo.stargazers_count for repo in own)
    total_forks = sum(repo.forks_count for repo in own)
    languages = {repo.language for repo in own if repo.language}

    cutoff = now - timedelta(days=window_days)
    recent = [event for event in events if event.created_at > cutoff]

    account_age_days = math.floor(
        (now - user.created_at).total_seconds() / SECONDS_PER_DAY
    )
    repos_per_year = (
        repo_count / account_age_days * 365 if account_age_days > 0 else 0.0
    )

    return DerivedMetrics(
        followers=user.followers,
        following=user.following,
        public_gists=user.public_gists,
        total_repos=repo_count,
        own_repos=repo_count,
        total_stars=total_stars,
        total_forks=total_forks,
        language_count=len(languages),
        recent_activity_count=len(recent),
        repos_with_description=sum(1 for repo in own if repo.description),
        repos_with_topics=sum(1 for repo in own if repo.topics),
        avg_stars_per_repo=total_stars / repo_count if repo_count else 0.0,
        avg_forks_per_repo=total_forks / repo_count if repo_count else 0.0,
        account_age_days=account_age_days,
        repos_per_year=repos_per_year,
    )


def compute_scores(metrics: DerivedMetrics) -> AIScores:
    """Compute the four weighted sub-scores, the overall score and confidence."""
    repo_base = max(metrics.total_repos, 1)

    code_quality = clamp_score(round_half_up(
        _saturating(metrics.avg_stars_per_repo, 50) * CODE_QUALITY_WEIGHTS["avg_stars"]
        + _saturating(metrics.avg_forks_per_repo, 10) * CODE_QUALITY_WEIGHTS["avg_forks"]
        + metrics.repos_with_description / repo_base * 100 * CODE_QUALITY_WEIGHTS["described"]
        + metrics.repos_with_topics / repo_base * 100 * CODE_QUALITY_WEIGHTS["topics"]
    ))

    activity_level = clamp_score(round_half_up(
        _saturating(metrics.recent_activity_count, 50) * ACTIVITY_WEIGHTS["recent_events"]
        + _saturating(metrics.repos_per_year, 5) * ACTIVITY_WEIGHTS["repos_per_year"]
        + _saturating(metrics.own_repos, 20) * ACTIVITY_WEIGHTS["own_repos"]
    ))

    community_impact = clamp_score(round_half_up(
        _saturating(metrics.followers, 500) * COMMUNITY_WEIGHTS["followers"]
        + _saturating(metrics.total_stars, 1000) * COMMUNITY_WEIGHTS["stars"]
        + _saturating(metrics.total_forks, 200) * COMMUNITY_WEIGHTS["forks"]
    ))

    project_diversity = clamp_score(round_half_up(
        _saturating(metrics.language_count, 5) * DIVERSITY_WEIGHTS["languages"]
        + _saturating(metrics.own_repos, 15) * DIVERSITY_WEIGHTS["own_repos"]
        + _saturating(metrics.public_gists, 10) * DIVERSITY_WEIGHTS["gists"]
    ))

    overall_score = clamp_score(round_half_up(
        code_quality * OVERALL_WEIGHTS["code_quality"]
        + activity_level * OVERALL_WEIGHTS["activity_level"]
        + community_impact * OVERALL_WEIGHTS["community_impact"]
        + project_diversity * OVERALL_WEIGHTS["project_diversity"]
    ))

    signals = [
        metrics.total_repos > 0,
        metrics.recent_activity_count > 0,
        metrics.followers > 0,
        metrics.account_age_days > 30,
    ]
    confidence = clamp_score(round_half_up(sum(signals) / len(signals) * 100))

    return AIScores(
        code_quality=code_quality,
        activity_level=activity_level,
        community_impact=community_impact,
        project_diversity=project_diversity,
        overall_score=overall_score,
        confidence=confidence,
    )


def determine_tier(
    overall_score: int, thresholds: AnalysisThresholdConfig | None = None
) -> Tier:
    """Map a 0-100 overall score to a tier."""
    if thresholds is None:
        thresholds = AnalysisThresholdConfig()
    if overall_score >= thresholds.diamond:
        return Tier.DIAMOND
    if overall_score >= thresholds.gold:
        return Tier.GOLD
    if overall_score >= thresholds.silver:
        return Tier.SILVER
    return Tier.BRONZE
