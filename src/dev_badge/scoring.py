"""Deterministic badge scoring from raw profile statistics."""

from __future__ import annotations

import os
from collections.abc import Iterable, Sequence
from datetime import UTC, datetime, timedelta

from dev_badge.cache import Cache
from dev_badge.config import BadgeThresholdConfig, DevBadgeConfig, load_config
from dev_badge.models import ActivityEvent, BadgeInfo, ProfileStats, ScoreBreakdown, Tier

# (minimum value, points) bands, highest first. The first satisfied band wins.
REPO_BANDS: tuple[tuple[float, int], ...] = ((90, 50), (60, 30), (30, 20), (10, 10))
FOLLOWER_BANDS: tuple[tuple[float, int], ...] = ((1000, 80), (200, 50), (100, 20))
AGE_BANDS: tuple[tuple[float, int], ...] = ((8, 60), (4, 40), (2, 20))
ACTIVITY_BANDS: tuple[tuple[float, int], ...] = ((250, 60), (200, 50), (50, 40))

ACTIVITY_FLOOR = 30
SECONDS_PER_YEAR = 365 * 24 * 3600

# Event history covers roughly a quarter of the year.
ACTIVE_DAY_MULTIPLIER = 4

_BADGES: dict[Tier, BadgeInfo] = {
    Tier.BRONZE: BadgeInfo(
        emoji="\U0001f949",
        label="Bronze",
        color="#cd7f32",
        gradient="linear-gradient(135deg, #cd7f32 0%, #8b4513 100%)",
    ),
    Tier.SILVER: BadgeInfo(
        emoji="\U0001f948",
        label="Silver",
        color="#c0c0c0",
        gradient="linear-gradient(135deg, #e8e8e8 0%, #a8a8a8 100%)",
    ),
    Tier.GOLD: BadgeInfo(
        emoji="\U0001f947",
        label="Gold",
        color="#000000",
        gradient="linear-gradient(135deg, #000000 0%, #1a1a1a 100%)",
    ),
    Tier.DIAMOND: BadgeInfo(
        emoji="\U0001f48e",
        label="Diamond",
        color="#b9f2ff",
        gradient="linear-gradient(135deg, #e0f7ff 0%, #87ceeb 50%, #b9f2ff 100%)",
    ),
}


def _band_points(
    value: float, bands: Sequence[tuple[float, int]], default: int = 0
) -> int:
    for minimum, points in bands:
        if value >= minimum:
            return points
    return default


def repo_score(repo_count: int) -> int:
    return _band_points(repo_count, REPO_BANDS)


def follower_score(follower_count: int) -> int:
    return _band_points(follower_count, FOLLOWER_BANDS)


def account_age_years(created_at: datetime, now: datetime | None = None) -> float:
    """Account age in 365-day years."""
    if now is None:
        now = datetime.now(UTC)
    return (now - created_at).total_seconds() / SECONDS_PER_YEAR


def age_score(created_at: datetime, now: datetime | None = None) -> int:
    return _band_points(account_age_years(created_at, now), AGE_BANDS)


def activity_score(annual_active_days: int) -> int:
    return _band_points(annual_active_days, ACTIVITY_BANDS, default=ACTIVITY_FLOOR)


def get_badge_tier(
    total_score: int, thresholds: BadgeThresholdConfig | None = None
) -> Tier:
    """Map a point total to a badge tier."""
    if thresholds is None:
        thresholds = BadgeThresholdConfig()
    if total_score >= thresholds.diamond:
        return Tier.DIAMOND
    if total_score >= thresholds.gold:
        return Tier.GOLD
    if total_score >= thresholds.silver:
        return Tier.SILVER
    return Tier.BRONZE


def calculate_github_score(
    stats: ProfileStats,
    thresholds: BadgeThresholdConfig | None = None,
    now: datetime | None = None,
) -> ScoreBreakdown:
    """Compute the full point breakdown and tier for *stats*."""
    repo = repo_score(stats.repo_count)
    followers = follower_score(stats.follower_count)
    age = age_score(stats.account_created_at, now)
    activity = activity_score(stats.annual_active_days)
    return ScoreBreakdown(
        repo_score=repo,
        follower_score=followers,
        age_score=age,
        activity_score=activity,
        tier=get_badge_tier(repo + followers + age + activity, thresholds),
    )


def get_badge_info(tier: Tier) -> BadgeInfo:
    """Return display attributes (emoji, label, colors) for *tier*."""
    return _BADGES[tier]


def estimate_active_days(
    events: Iterable[ActivityEvent], now: datetime | None = None
) -> int:
    """Approximate annual active days from public event history.

    Counts distinct UTC days with at least one event in the trailing
    year and scales by :data:`ACTIVE_DAY_MULTIPLIER`, capped at 365.
    """
    if now is None:
        now = datetime.now(UTC)
    one_year_ago = now - timedelta(days=365)
    active_days = {
        event.created_at.astimezone(UTC).date()
        for event in events
        if event.created_at > one_year_ago
    }
    return min(len(active_days) * ACTIVE_DAY_MULTIPLIER, 365)


async def score_github_user(
    login: str,
    config: DevBadgeConfig | None = None,
    token: str | None = None,
    cache: Cache | None = None,
    now: datetime | None = None,
) -> ScoreBreakdown:
    """Convenience function: fetch profile stats and compute the badge score."""
    from dev_badge.github_client import GitHubClient

    if config is None:
        config = load_config()

    if token is None:
        token = os.environ.get("GITHUB_TOKEN") or None

    async with GitHubClient(token=token, config=config, cache=cache) as client:
        stats = await client.fetch_profile_stats(login, now=now)

    return calculate_github_score(stats, config.badge_thresholds, now=now)
